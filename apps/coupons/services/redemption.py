"""
Redemption validator.

A scan is checked in a fixed order (token, partner, partner approval,
redeemed, expired) and then consumed by one conditional update:

    UPDATE coupons SET status='redeemed', redeemed_at=:now
    WHERE id=:id AND status='active' AND expiry_date >= :now

However many scans race, only one of them updates a row. Everyone else
re-reads the coupon and gets AlreadyRedeemedError carrying the winner's
redeemed_at.
"""

import logging
import uuid
from dataclasses import dataclass
from datetime import datetime
from typing import Optional
from uuid import UUID

from django.utils import timezone

from apps.coupons.models import Coupon, CouponStatus
from apps.offers.services import record_redemption
from apps.partners.models import PartnerStatus

from .codes import parse_qr_payload
from .exceptions import (
    InvalidTokenError,
    WrongPartnerError,
    OfferNotEligibleError,
    AlreadyRedeemedError,
    CouponExpiredError,
)
from .ledger import expire_stale

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class RedemptionResult:
    coupon: Coupon
    redeemed_at: datetime


def _find_coupon(redemption_token: str, coupon_id: Optional[str]) -> Coupon:
    if not redemption_token:
        raise InvalidTokenError("Invalid coupon")

    queryset = Coupon.objects.select_related('offer', 'partner', 'member').filter(
        redemption_token=redemption_token
    )
    if coupon_id is not None:
        try:
            queryset = queryset.filter(id=uuid.UUID(str(coupon_id)))
        except ValueError:
            raise InvalidTokenError("Invalid coupon")

    coupon = queryset.first()
    if coupon is None:
        raise InvalidTokenError("Invalid coupon")
    return coupon


def _raise_expired(coupon: Coupon, now: datetime) -> None:
    expire_stale(Coupon.objects.filter(id=coupon.id), now)
    raise CouponExpiredError(
        f"Coupon {coupon.coupon_code} expired",
        expiry_date=coupon.expiry_date
    )


def _check(coupon: Coupon, partner_id: UUID, now: datetime) -> None:
    if str(coupon.partner_id) != str(partner_id):
        logger.warning(
            "Coupon %s scanned by partner %s, issued by partner %s",
            coupon.id, partner_id, coupon.partner_id
        )
        raise WrongPartnerError("Invalid coupon")

    if coupon.partner.status != PartnerStatus.APPROVED:
        raise OfferNotEligibleError(
            f"Partner {coupon.partner.shop_name} is not approved for redemptions"
        )

    # A redeemed coupon reports AlreadyRedeemed even once past its expiry
    if coupon.status == CouponStatus.REDEEMED:
        raise AlreadyRedeemedError(
            f"Coupon {coupon.coupon_code} already redeemed",
            redeemed_at=coupon.redeemed_at
        )

    if coupon.status == CouponStatus.EXPIRED or coupon.is_past_expiry(now):
        _raise_expired(coupon, now)


def validate_token(
    *,
    redemption_token: str,
    partner_id: UUID,
    coupon_id: Optional[str] = None,
    now: Optional[datetime] = None
) -> Coupon:
    """
    Check that a coupon could be redeemed by this partner, without consuming it.

    Returns:
        The matching Coupon

    Raises:
        InvalidTokenError: If no coupon matches
        WrongPartnerError: If the coupon belongs to another partner
        OfferNotEligibleError: If the scanning partner is not approved
        AlreadyRedeemedError: If the coupon was already redeemed
        CouponExpiredError: If the coupon is past its expiry
    """
    now = now or timezone.now()
    coupon = _find_coupon(redemption_token, coupon_id)
    _check(coupon, partner_id, now)
    return coupon


def redeem(
    *,
    redemption_token: str,
    partner_id: UUID,
    coupon_id: Optional[str] = None,
    now: Optional[datetime] = None
) -> RedemptionResult:
    """
    Consume a coupon exactly once.

    Args:
        redemption_token: Token from the scanned QR code
        partner_id: UUID of the scanning partner
        coupon_id: Coupon id when the QR payload carried one
        now: Redemption time, defaults to the current time

    Returns:
        RedemptionResult with the redeemed coupon

    Raises:
        InvalidTokenError, WrongPartnerError, OfferNotEligibleError,
        AlreadyRedeemedError, CouponExpiredError (see validate_token)
    """
    now = now or timezone.now()
    coupon = validate_token(
        redemption_token=redemption_token,
        partner_id=partner_id,
        coupon_id=coupon_id,
        now=now,
    )

    updated = Coupon.objects.filter(
        id=coupon.id,
        status=CouponStatus.ACTIVE,
        expiry_date__gte=now,
    ).update(status=CouponStatus.REDEEMED, redeemed_at=now)

    if not updated:
        coupon.refresh_from_db(fields=['status', 'redeemed_at'])
        if coupon.status == CouponStatus.REDEEMED:
            raise AlreadyRedeemedError(
                f"Coupon {coupon.coupon_code} already redeemed",
                redeemed_at=coupon.redeemed_at
            )
        _raise_expired(coupon, now)

    coupon.status = CouponStatus.REDEEMED
    coupon.redeemed_at = now
    logger.info(
        "Coupon %s redeemed at partner %s", coupon.id, partner_id
    )

    record_redemption(coupon.offer_id)
    return RedemptionResult(coupon=coupon, redeemed_at=now)


def redeem_by_scan(
    *,
    qr_payload: str,
    partner_id: UUID,
    now: Optional[datetime] = None
) -> RedemptionResult:
    """Parse a scanned QR payload and redeem the coupon it names."""
    coupon_id, token = parse_qr_payload(qr_payload)
    return redeem(
        redemption_token=token,
        partner_id=partner_id,
        coupon_id=coupon_id,
        now=now,
    )


def validate_scan(
    *,
    qr_payload: str,
    partner_id: UUID,
    now: Optional[datetime] = None
) -> Coupon:
    """Parse a scanned QR payload and validate the coupon without redeeming."""
    coupon_id, token = parse_qr_payload(qr_payload)
    return validate_token(
        redemption_token=token,
        partner_id=partner_id,
        coupon_id=coupon_id,
        now=now,
    )
