from django.contrib import admin
from .models import PaymentEvent


@admin.register(PaymentEvent)
class PaymentEventAdmin(admin.ModelAdmin):
    """Read-only view of the callback log."""
    list_display = [
        'reference_id', 'kind', 'outcome', 'result', 'source', 'payment_id', 'processor_status', 'created_at'
    ]
    list_filter = ['kind', 'outcome', 'result', 'source']
    search_fields = ['reference_id', 'payment_id']
    date_hierarchy = 'created_at'
    readonly_fields = [
        'id', 'reference_id', 'kind', 'outcome', 'result', 'source',
        'payment_id', 'processor_status', 'payload', 'created_at'
    ]
    fieldsets = (
        ('Callback', {'fields': ('id', 'reference_id', 'kind', 'outcome', 'source', 'result')}),
        ('Mercado Pago', {'fields': ('payment_id', 'processor_status')}),
        ('Raw payload', {'fields': ('payload',), 'classes': ('collapse',)}),
        ('Audit', {'fields': ('created_at',), 'classes': ('collapse',)}),
    )

    def has_add_permission(self, request):
        return False

    def has_change_permission(self, request, obj=None):
        return False
