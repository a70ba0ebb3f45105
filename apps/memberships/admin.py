from django.contrib import admin
from .models import Membership, MembershipType


@admin.register(MembershipType)
class MembershipTypeAdmin(admin.ModelAdmin):
    list_display = ['code', 'name', 'price', 'duration_days', 'included_hours', 'included_classes', 'is_active']
    list_filter = ['is_active']
    search_fields = ['code', 'name']
    readonly_fields = ['id', 'created_at', 'updated_at']


@admin.register(Membership)
class MembershipAdmin(admin.ModelAdmin):
    list_display = [
        'reference_id', 'customer_name', 'membership_code', 'start_date', 'end_date',
        'monthly_price', 'status', 'payment_id',
    ]
    list_filter = ['status', 'membership_code']
    search_fields = ['reference_id', 'customer_name', 'customer_email', 'customer_phone', 'payment_id']
    readonly_fields = [
        'id', 'reference_id', 'membership_type', 'membership_code', 'start_date', 'end_date',
        'monthly_price', 'status', 'payment_id', 'payment_type', 'merchant_order_id',
        'activated_at', 'created_at', 'updated_at', 'deleted_at',
    ]
    fieldsets = (
        ('Membership', {'fields': ('id', 'reference_id', 'membership_type', 'membership_code')}),
        ('Term', {'fields': ('start_date', 'end_date', 'monthly_price', 'hours_remaining', 'classes_remaining')}),
        ('Customer', {'fields': ('customer_name', 'customer_email', 'customer_phone', 'notes')}),
        ('Payment', {'fields': ('status', 'payment_id', 'payment_type', 'merchant_order_id', 'activated_at')}),
        ('Audit', {'fields': ('created_at', 'updated_at', 'deleted_at'), 'classes': ('collapse',)}),
    )
