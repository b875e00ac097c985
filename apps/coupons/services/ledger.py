"""
Coupon ledger service.

Owns coupon minting and every read path. Expiry is lazy: rows are only
moved from ACTIVE to EXPIRED when a read or a scan observes that their
expiry_date has passed, so every read normalizes before it returns.
"""

import logging
from datetime import date, datetime
from typing import Optional
from uuid import UUID

from django.db import IntegrityError, transaction
from django.db.models import Count, Q, QuerySet
from django.utils import timezone

from apps.accounts.models import User
from apps.coupons.models import Coupon, CouponStatus
from apps.offers.models import Offer
from apps.offers.services import OfferNotFoundError
from apps.partners.models import PartnerStatus

from .codes import generate_code
from .exceptions import (
    CouponNotFoundError,
    OfferNotEligibleError,
    CodeGenerationError,
)
from .expiry import resolve_expiry

logger = logging.getLogger(__name__)


def expire_stale(queryset: QuerySet[Coupon], now: datetime) -> int:
    """
    Persist EXPIRED on ACTIVE coupons of the queryset past their expiry.

    Returns:
        Number of rows corrected
    """
    return queryset.filter(
        status=CouponStatus.ACTIVE,
        expiry_date__lt=now
    ).update(status=CouponStatus.EXPIRED)


def _active_coupon(offer_id: UUID, member: User) -> Optional[Coupon]:
    return (
        Coupon.objects
        .select_related('offer', 'partner')
        .filter(offer_id=offer_id, member=member, status=CouponStatus.ACTIVE)
        .first()
    )


def mint_coupon(
    *,
    offer_id: UUID,
    member: User,
    now: Optional[datetime] = None,
    max_retries: int = 5
) -> Coupon:
    """
    Issue a coupon for an offer to a member.

    Idempotent per (offer, member): while the member holds an ACTIVE,
    unexpired coupon for the offer that coupon is returned unchanged.
    A new one can be minted once the previous coupon is redeemed or expired.

    Args:
        offer_id: UUID of the offer
        member: Member receiving the coupon
        now: Mint time, defaults to the current time
        max_retries: Insert attempts on code/token collisions

    Returns:
        The member's active Coupon for the offer

    Raises:
        OfferNotFoundError: If offer doesn't exist
        OfferNotEligibleError: If offer is inactive, expired, or its
            partner is not approved
        InvalidOfferStateError: If expiry resolution finds the offer expired
        CodeGenerationError: If no unique code could be stored
    """
    now = now or timezone.now()

    try:
        offer = Offer.objects.select_related('partner').get(id=offer_id)
    except Offer.DoesNotExist:
        raise OfferNotFoundError(f"Offer with ID {offer_id} not found")

    if not offer.is_active:
        raise OfferNotEligibleError("This offer is no longer active")
    if offer.is_expired(now):
        raise OfferNotEligibleError("This offer has expired")
    if offer.partner.status != PartnerStatus.APPROVED:
        raise OfferNotEligibleError("This offer's partner is not approved")

    expire_stale(Coupon.objects.filter(offer=offer, member=member), now)

    existing = _active_coupon(offer.id, member)
    if existing is not None:
        return existing

    expiry_date = resolve_expiry(offer, now)

    # Each attempt is its own transaction so a lost race can be re-read
    for attempt in range(max_retries):
        coupon_code, redemption_token = generate_code()

        try:
            with transaction.atomic():
                coupon = Coupon.objects.create(
                    offer=offer,
                    partner=offer.partner,
                    member=member,
                    coupon_code=coupon_code,
                    redemption_token=redemption_token,
                    status=CouponStatus.ACTIVE,
                    issued_at=now,
                    expiry_date=expiry_date,
                    coupon_color=offer.coupon_color,
                )
        except IntegrityError:
            # A concurrent mint for the same pair won
            existing = _active_coupon(offer.id, member)
            if existing is not None:
                return existing
            # Otherwise a code or token collision
            logger.warning(
                "Coupon code collision for offer %s (attempt %d/%d)",
                offer.id, attempt + 1, max_retries
            )
            continue

        logger.info(
            "Minted coupon %s for offer %s to member %s",
            coupon.id, offer.id, member.id
        )
        return coupon

    logger.error("Could not store a unique coupon for offer %s", offer.id)
    raise CodeGenerationError(
        f"Failed to store a unique coupon after {max_retries} attempts"
    )


def get_coupon(
    *,
    coupon_id: UUID,
    member: Optional[User] = None,
    now: Optional[datetime] = None
) -> Coupon:
    """
    Get a coupon by ID with lazy expiry applied.

    Args:
        coupon_id: UUID of the coupon
        member: When given, only this member's coupon is visible

    Raises:
        CouponNotFoundError: If coupon doesn't exist or isn't visible
    """
    now = now or timezone.now()
    queryset = Coupon.objects.select_related('offer', 'partner')
    if member is not None:
        queryset = queryset.filter(member=member)

    try:
        coupon = queryset.get(id=coupon_id)
    except Coupon.DoesNotExist:
        raise CouponNotFoundError(f"Coupon with ID {coupon_id} not found")

    if coupon.status == CouponStatus.ACTIVE and coupon.is_past_expiry(now):
        expire_stale(Coupon.objects.filter(id=coupon.id), now)
        coupon.refresh_from_db(fields=['status', 'redeemed_at'])
    return coupon


def list_member_coupons(
    *,
    member: User,
    status: Optional[str] = None,
    now: Optional[datetime] = None
) -> QuerySet[Coupon]:
    """Member's coupons, newest first, optionally filtered by status."""
    now = now or timezone.now()
    expire_stale(Coupon.objects.filter(member=member), now)

    queryset = Coupon.objects.filter(member=member).select_related('offer', 'partner')
    if status:
        queryset = queryset.filter(status=status)
    return queryset.order_by('-issued_at')


def list_partner_coupons(
    *,
    partner_id: UUID,
    status: Optional[str] = None,
    offer_id: Optional[UUID] = None,
    date_from: Optional[date] = None,
    date_to: Optional[date] = None,
    now: Optional[datetime] = None
) -> QuerySet[Coupon]:
    """
    Coupons issued against a partner's offers.

    Args:
        partner_id: UUID of the partner
        status: Optional CouponStatus filter
        offer_id: Restrict to one offer
        date_from: Issued on or after this date
        date_to: Issued on or before this date
    """
    now = now or timezone.now()
    expire_stale(Coupon.objects.filter(partner_id=partner_id), now)

    queryset = Coupon.objects.filter(partner_id=partner_id).select_related('offer', 'member')
    if status:
        queryset = queryset.filter(status=status)
    if offer_id:
        queryset = queryset.filter(offer_id=offer_id)
    if date_from:
        queryset = queryset.filter(issued_at__date__gte=date_from)
    if date_to:
        queryset = queryset.filter(issued_at__date__lte=date_to)
    return queryset.order_by('-issued_at')


def list_partner_redemptions(*, partner_id: UUID) -> QuerySet[Coupon]:
    """Redeemed coupons of a partner, most recent redemption first."""
    return (
        Coupon.objects
        .filter(partner_id=partner_id, status=CouponStatus.REDEEMED)
        .select_related('offer', 'member')
        .order_by('-redeemed_at')
    )


def get_member_coupon_stats(*, member: User, now: Optional[datetime] = None) -> dict:
    """
    Coupon counts for a member.

    Returns:
        Dict with total_generated, total_redeemed, active_coupons
    """
    now = now or timezone.now()
    expire_stale(Coupon.objects.filter(member=member), now)

    stats = Coupon.objects.filter(member=member).aggregate(
        total_generated=Count('id'),
        total_redeemed=Count('id', filter=Q(status=CouponStatus.REDEEMED)),
        active_coupons=Count('id', filter=Q(status=CouponStatus.ACTIVE)),
    )
    return stats
