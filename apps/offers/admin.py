from django.contrib import admin
from .models import Offer


@admin.register(Offer)
class OfferAdmin(admin.ModelAdmin):
    list_display = [
        'title',
        'partner',
        'discount_percent',
        'expiry_date',
        'is_active',
        'views',
        'clicks',
        'redemptions',
    ]
    list_filter = ['is_active', 'category', 'expiry_date']
    search_fields = ['title', 'partner__shop_name']
    # Counters only move through the engagement service
    readonly_fields = ['views', 'clicks', 'redemptions', 'created_at', 'updated_at']
    date_hierarchy = 'created_at'
