from django.contrib import admin
from .models import Reservation


@admin.register(Reservation)
class ReservationAdmin(admin.ModelAdmin):
    list_display = [
        'reference_id', 'customer_name', 'service_id', 'reservation_date', 'reservation_time',
        'quantity', 'total_price', 'status', 'payment_status', 'payment_id',
    ]
    list_filter = ['status', 'payment_status', 'reservation_date']
    search_fields = ['reference_id', 'customer_name', 'customer_email', 'customer_phone', 'payment_id']
    readonly_fields = [
        'id', 'reference_id', 'status', 'payment_status', 'payment_id', 'payment_type',
        'merchant_order_id', 'confirmed_at', 'created_at', 'updated_at', 'deleted_at',
    ]
    date_hierarchy = 'reservation_date'
    fieldsets = (
        ('Reservation', {'fields': ('id', 'reference_id', 'service_id', 'title')}),
        ('Schedule', {'fields': ('reservation_date', 'reservation_time', 'quantity')}),
        ('Customer', {'fields': ('customer_name', 'customer_email', 'customer_phone', 'notes')}),
        ('Payment', {'fields': (
            'unit_price', 'total_price', 'status', 'payment_status',
            'payment_id', 'payment_type', 'merchant_order_id', 'confirmed_at',
        )}),
        ('Audit', {'fields': ('created_at', 'updated_at', 'deleted_at'), 'classes': ('collapse',)}),
    )
