"""
Serializers for analytics app.

This module contains:
1. Input serializers - Query parameter validation
2. Response serializers - API documentation and output formatting

Input Serializers:
    PeriodQuerySerializer - Validates period and date range parameters

Response Serializers:
    AnalyticsSummarySerializer - Partner or platform summary
    OfferBreakdownSerializer - Per-offer engagement for a partner
"""

from rest_framework import serializers
from datetime import datetime, timedelta


# =============================================================================
# Input Serializers (Query Parameter Validation)
# =============================================================================

class PeriodQuerySerializer(serializers.Serializer):
    """
    Validate period and date range query parameters.

    Used by: admin_analytics, partner_analytics

    Query Parameters:
        period (str): Month period in YYYY-MM format (e.g., '2025-01')
        start_date (date): Start of date range
        end_date (date): End of date range

    Note:
        If 'period' is provided, it takes precedence and is converted
        to start_date and end_date for the full month.
    """

    period = serializers.RegexField(
        regex=r'^\d{4}-(0[1-9]|1[0-2])$',
        required=False,
        allow_blank=True,
        help_text='Month period in YYYY-MM format'
    )
    start_date = serializers.DateField(required=False)
    end_date = serializers.DateField(required=False)

    def validate(self, attrs):
        """Parse period into date range if provided."""
        period = attrs.get('period')

        if period:
            try:
                year, month = (int(part) for part in period.split('-'))
                attrs['start_date'] = datetime(year, month, 1).date()
                if month == 12:
                    attrs['end_date'] = datetime(year + 1, 1, 1).date() - timedelta(days=1)
                else:
                    attrs['end_date'] = datetime(year, month + 1, 1).date() - timedelta(days=1)
            except ValueError:
                raise serializers.ValidationError({
                    'period': 'Invalid period format. Use YYYY-MM'
                })

        start = attrs.get('start_date')
        end = attrs.get('end_date')
        if start and end and start > end:
            raise serializers.ValidationError({
                'start_date': 'Start date must be before end date'
            })

        return attrs


# =============================================================================
# Response Serializers (API Documentation)
# =============================================================================

class OfferTotalsSerializer(serializers.Serializer):
    total = serializers.IntegerField()
    active = serializers.IntegerField()
    expired = serializers.IntegerField()
    views = serializers.IntegerField()
    clicks = serializers.IntegerField()
    redemptions = serializers.IntegerField()


class CouponTotalsSerializer(serializers.Serializer):
    total = serializers.IntegerField()
    active = serializers.IntegerField()
    redeemed = serializers.IntegerField()
    expired = serializers.IntegerField()
    redemption_rate = serializers.FloatField()


class PartnerTotalsSerializer(serializers.Serializer):
    total = serializers.IntegerField()
    pending = serializers.IntegerField()
    approved = serializers.IntegerField()
    rejected = serializers.IntegerField()


class UserTotalsSerializer(serializers.Serializer):
    total = serializers.IntegerField()
    members = serializers.IntegerField()
    partners = serializers.IntegerField()
    active = serializers.IntegerField()


class OfferBreakdownSerializer(serializers.Serializer):
    """Engagement for a single offer."""
    offer_id = serializers.UUIDField()
    title = serializers.CharField()
    is_active = serializers.BooleanField()
    is_expired = serializers.BooleanField()
    views = serializers.IntegerField()
    clicks = serializers.IntegerField()
    redemptions = serializers.IntegerField()
    coupons_issued = serializers.IntegerField()


class AnalyticsSummarySerializer(serializers.Serializer):
    """Response serializer for partner and platform summaries."""
    scope = serializers.CharField()
    period_start = serializers.DateField(allow_null=True)
    period_end = serializers.DateField(allow_null=True)
    offers = OfferTotalsSerializer()
    coupons = CouponTotalsSerializer()
    partners = PartnerTotalsSerializer(required=False)
    users = UserTotalsSerializer(required=False)
    offer_breakdown = OfferBreakdownSerializer(many=True, required=False)


class ErrorSerializer(serializers.Serializer):
    """Standard error response serializer."""
    error = serializers.CharField()
