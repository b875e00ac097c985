from django.contrib import admin
from .models import Coupon


@admin.register(Coupon)
class CouponAdmin(admin.ModelAdmin):
    """Read-only view of the coupon ledger. Status changes go through the services."""

    list_display = [
        'coupon_code',
        'offer',
        'partner',
        'member',
        'status',
        'issued_at',
        'expiry_date',
        'redeemed_at',
    ]
    list_filter = ['status', 'issued_at']
    search_fields = ['coupon_code', 'member__email', 'partner__shop_name', 'offer__title']
    readonly_fields = [
        'offer',
        'partner',
        'member',
        'coupon_code',
        'status',
        'issued_at',
        'expiry_date',
        'redeemed_at',
        'coupon_color',
    ]
    exclude = ['redemption_token']
    date_hierarchy = 'issued_at'

    def has_add_permission(self, request):
        return False
