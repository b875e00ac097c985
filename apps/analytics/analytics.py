"""
Analytics Module
=================

Read-only aggregation of offer engagement counters and the coupon ledger
for the partner dashboard and the platform admin dashboard.

Classes:
    AnalyticsQueries: Static methods for analytics queries.

Key Features:
    - Offer totals and summed view/click/redemption counters
    - Coupon totals by status with lazy expiry applied in the query
    - Partner approval and user counts for the platform dashboard
    - Per-offer engagement breakdown for a partner

Example:
    Partner dashboard for the last 30 days::

        from apps.analytics.analytics import AnalyticsQueries

        summary = AnalyticsQueries.summarize(
            scope='partner',
            partner_id=partner.id,
            start_date=date.today() - timedelta(days=30),
            end_date=date.today(),
        )
        print(f"{summary['coupons']['redeemed']} coupons redeemed")

Note:
    Nothing here writes. A coupon still persisted as ACTIVE whose expiry
    date has passed is counted as expired without being corrected; the
    correction happens on the next ledger read or scan.
"""

from django.db.models import Sum, Count, Q, IntegerField
from django.db.models.functions import Coalesce
from django.utils import timezone

from apps.accounts.models import User, UserRole
from apps.coupons.models import Coupon, CouponStatus
from apps.offers.models import Offer
from apps.partners.models import PartnerStatus, Partner

from .exceptions import InvalidScopeError, InvalidDateRangeError, MissingParameterError


class AnalyticsScope:
    PLATFORM = 'platform'
    PARTNER = 'partner'

    CHOICES = (PLATFORM, PARTNER)


class AnalyticsQueries:
    """
    Aggregation queries for analytics endpoints.

    Every method issues a fixed number of aggregate queries regardless of
    how many offers or coupons exist.

    Methods:
        summarize: Offer, coupon (and platform) totals for a scope and range.
        partner_offer_breakdown: Engagement counters per offer of a partner.

    Note:
        All methods return plain dictionaries or lists, not Django objects,
        making them suitable for JSON serialization in API responses.
    """

    @staticmethod
    def _offer_totals(offers, now):
        totals = offers.aggregate(
            total=Count('id'),
            active=Count('id', filter=Q(is_active=True, expiry_date__gt=now)),
            expired=Count('id', filter=Q(expiry_date__lte=now)),
            views=Coalesce(Sum('views'), 0, output_field=IntegerField()),
            clicks=Coalesce(Sum('clicks'), 0, output_field=IntegerField()),
            redemptions=Coalesce(Sum('redemptions'), 0, output_field=IntegerField()),
        )
        return {
            'total': totals['total'],
            'active': totals['active'],
            'expired': totals['expired'],
            'views': totals['views'],
            'clicks': totals['clicks'],
            'redemptions': totals['redemptions'],
        }

    @staticmethod
    def _coupon_totals(coupons, now):
        past_expiry = Q(status=CouponStatus.ACTIVE, expiry_date__lt=now)
        totals = coupons.aggregate(
            total=Count('id'),
            active=Count('id', filter=Q(status=CouponStatus.ACTIVE, expiry_date__gte=now)),
            redeemed=Count('id', filter=Q(status=CouponStatus.REDEEMED)),
            expired=Count('id', filter=Q(status=CouponStatus.EXPIRED) | past_expiry),
        )
        total = totals['total']
        totals['redemption_rate'] = (
            round(totals['redeemed'] * 100 / total, 2) if total else 0.0
        )
        return totals

    @staticmethod
    def summarize(scope, partner_id=None, start_date=None, end_date=None, now=None):
        """
        Summarize offers and coupons for the platform or a single partner.

        Args:
            scope (str): 'platform' or 'partner'.
            partner_id (UUID, optional): Required when scope is 'partner'.
            start_date (date, optional): Include offers created and coupons
                issued on or after this date.
            end_date (date, optional): Include offers created and coupons
                issued on or before this date.
            now (datetime, optional): Reference time for expiry, defaults
                to the current time.

        Returns:
            dict: A dictionary containing:
                - scope (str): The requested scope.
                - period_start / period_end (date | None): The range used.
                - offers (dict): total, active, expired, views, clicks,
                  redemptions.
                - coupons (dict): total, active, redeemed, expired,
                  redemption_rate (percent of issued coupons redeemed).
                - partners (dict, platform only): total, pending, approved,
                  rejected.
                - users (dict, platform only): total, members, partners,
                  active.

        Raises:
            InvalidScopeError: If scope is unknown.
            MissingParameterError: If scope is 'partner' without partner_id.
            InvalidDateRangeError: If start_date is after end_date.

        Example:
            Platform totals for January::

                AnalyticsQueries.summarize(
                    'platform',
                    start_date=date(2025, 1, 1),
                    end_date=date(2025, 1, 31),
                )
        """
        if scope not in AnalyticsScope.CHOICES:
            raise InvalidScopeError(
                f"Invalid scope: '{scope}'. Valid options: {', '.join(AnalyticsScope.CHOICES)}"
            )
        if scope == AnalyticsScope.PARTNER and not partner_id:
            raise MissingParameterError("partner_id is required for partner analytics")
        if start_date and end_date and start_date > end_date:
            raise InvalidDateRangeError("Start date must be before end date")

        now = now or timezone.now()

        offers = Offer.objects.all()
        coupons = Coupon.objects.all()
        if scope == AnalyticsScope.PARTNER:
            offers = offers.filter(partner_id=partner_id)
            coupons = coupons.filter(partner_id=partner_id)

        if start_date:
            offers = offers.filter(created_at__date__gte=start_date)
            coupons = coupons.filter(issued_at__date__gte=start_date)
        if end_date:
            offers = offers.filter(created_at__date__lte=end_date)
            coupons = coupons.filter(issued_at__date__lte=end_date)

        summary = {
            'scope': scope,
            'period_start': start_date,
            'period_end': end_date,
            'offers': AnalyticsQueries._offer_totals(offers, now),
            'coupons': AnalyticsQueries._coupon_totals(coupons, now),
        }

        if scope == AnalyticsScope.PLATFORM:
            summary['partners'] = Partner.objects.aggregate(
                total=Count('id'),
                pending=Count('id', filter=Q(status=PartnerStatus.PENDING)),
                approved=Count('id', filter=Q(status=PartnerStatus.APPROVED)),
                rejected=Count('id', filter=Q(status=PartnerStatus.REJECTED)),
            )
            summary['users'] = User.objects.aggregate(
                total=Count('id'),
                members=Count('id', filter=Q(role=UserRole.MEMBER)),
                partners=Count('id', filter=Q(role=UserRole.PARTNER)),
                active=Count('id', filter=Q(is_active=True)),
            )

        return summary

    @staticmethod
    def partner_offer_breakdown(partner_id, now=None):
        """
        Engagement counters and coupon counts for each offer of a partner.

        Args:
            partner_id (UUID): The partner's unique identifier.
            now (datetime, optional): Reference time for expiry.

        Returns:
            list[dict]: One entry per offer, newest first, each containing
            offer_id, title, is_active, is_expired, views, clicks,
            redemptions and coupons_issued.
        """
        now = now or timezone.now()
        offers = (
            Offer.objects
            .filter(partner_id=partner_id)
            .annotate(coupons_issued=Count('coupons'))
            .order_by('-created_at')
        )
        return [
            {
                'offer_id': offer.id,
                'title': offer.title,
                'is_active': offer.is_active,
                'is_expired': offer.is_expired(now),
                'views': offer.views,
                'clicks': offer.clicks,
                'redemptions': offer.redemptions,
                'coupons_issued': offer.coupons_issued,
            }
            for offer in offers
        ]
