"""
Offer management service.

Handles partner-side offer publishing and member-side browsing. Only
approved partners may publish; edits never touch engagement counters and
never alter coupons that were already minted.
"""

from datetime import datetime
from decimal import Decimal, ROUND_HALF_UP
from typing import Optional
from uuid import UUID

from django.db import transaction
from django.db.models import Q, QuerySet
from django.utils import timezone

from apps.offers.models import Offer
from apps.partners.models import Partner, PartnerStatus

from .exceptions import (
    OfferNotFoundError,
    PartnerNotApprovedError,
    NotOfferOwnerError,
    InvalidOfferDataError,
)

# Fields a partner may change through update_offer
EDITABLE_FIELDS = {
    'title',
    'description',
    'terms_and_conditions',
    'category',
    'original_price',
    'discounted_price',
    'discount_percent',
    'expiry_date',
    'is_active',
    'coupon_color',
    'coupon_expiry_days',
}


def _discount_percent(original_price: Decimal, discounted_price: Decimal) -> int:
    if not original_price:
        return 0
    ratio = (Decimal('1') - (discounted_price / original_price)) * 100
    return int(ratio.quantize(Decimal('1'), rounding=ROUND_HALF_UP))


def _validate_pricing(original_price, discounted_price) -> None:
    if original_price < 0 or discounted_price < 0:
        raise InvalidOfferDataError("Prices cannot be negative")
    if discounted_price > original_price:
        raise InvalidOfferDataError("Discounted price cannot exceed the original price")


def get_offer_by_id(*, offer_id: UUID) -> Offer:
    """
    Get an offer by ID.

    Raises:
        OfferNotFoundError: If offer doesn't exist
    """
    try:
        return Offer.objects.select_related('partner').get(id=offer_id)
    except Offer.DoesNotExist:
        raise OfferNotFoundError(f"Offer with ID {offer_id} not found")


def get_browsable_offers(
    *,
    category: Optional[str] = None,
    search: Optional[str] = None,
    city: Optional[str] = None,
) -> QuerySet[Offer]:
    """
    Offers a member can currently get a coupon for.

    Active, unexpired, and published by an approved partner.
    """
    queryset = Offer.objects.filter(
        is_active=True,
        expiry_date__gt=timezone.now(),
        partner__status=PartnerStatus.APPROVED,
    ).select_related('partner')

    if category:
        queryset = queryset.filter(category__iexact=category)
    if city:
        queryset = queryset.filter(partner__city__iexact=city)
    if search:
        queryset = queryset.filter(
            Q(title__icontains=search) |
            Q(description__icontains=search) |
            Q(partner__shop_name__icontains=search)
        )
    return queryset


def get_partner_offers(*, partner: Partner) -> QuerySet[Offer]:
    """All offers of a partner, including inactive and expired ones."""
    return Offer.objects.filter(partner=partner).order_by('-created_at')


@transaction.atomic
def create_offer(
    *,
    partner: Partner,
    title: str,
    original_price: Decimal,
    discounted_price: Decimal,
    expiry_date: datetime,
    description: str = '',
    terms_and_conditions: str = '',
    category: str = '',
    discount_percent: Optional[int] = None,
    coupon_color: Optional[str] = None,
    coupon_expiry_days: Optional[int] = None,
    is_active: bool = True,
) -> Offer:
    """
    Publish a new offer for an approved partner.

    Args:
        partner: Publishing partner (must be approved)
        title: Offer title
        original_price: Price before discount
        discounted_price: Price after discount (<= original_price)
        expiry_date: Hard end of the offer, must be in the future
        discount_percent: Derived from the prices when omitted
        coupon_color: Coupon background color, settings default when omitted
        coupon_expiry_days: Optional per-coupon lifetime in days

    Returns:
        Created Offer instance

    Raises:
        PartnerNotApprovedError: If partner is not approved
        InvalidOfferDataError: If prices or expiry are invalid
    """
    if partner.status != PartnerStatus.APPROVED:
        raise PartnerNotApprovedError(
            f"Partner {partner.shop_name} is {partner.status} and cannot publish offers"
        )

    _validate_pricing(original_price, discounted_price)
    if expiry_date <= timezone.now():
        raise InvalidOfferDataError("Offer expiry date must be in the future")

    if discount_percent is None:
        discount_percent = _discount_percent(original_price, discounted_price)

    fields = {
        'partner': partner,
        'title': title,
        'description': description,
        'terms_and_conditions': terms_and_conditions,
        'category': category,
        'original_price': original_price,
        'discounted_price': discounted_price,
        'discount_percent': discount_percent,
        'expiry_date': expiry_date,
        'coupon_expiry_days': coupon_expiry_days,
        'is_active': is_active,
    }
    if coupon_color:
        fields['coupon_color'] = coupon_color

    return Offer.objects.create(**fields)


@transaction.atomic
def update_offer(*, offer_id: UUID, partner: Partner, **changes) -> Offer:
    """
    Update an offer owned by the partner.

    Only fields in EDITABLE_FIELDS are applied; counters are never editable.
    Already-minted coupons keep their own expiry and color.

    Raises:
        OfferNotFoundError: If offer doesn't exist
        NotOfferOwnerError: If offer belongs to another partner
        PartnerNotApprovedError: If the partner is pending or rejected
        InvalidOfferDataError: If the resulting prices are invalid
    """
    try:
        offer = Offer.objects.select_for_update().get(id=offer_id)
    except Offer.DoesNotExist:
        raise OfferNotFoundError(f"Offer with ID {offer_id} not found")

    if offer.partner_id != partner.id:
        raise NotOfferOwnerError("You can only edit your own offers")

    if partner.status != PartnerStatus.APPROVED:
        raise PartnerNotApprovedError(
            f"Partner {partner.shop_name} is {partner.status} and cannot edit offers"
        )

    applied = {key: value for key, value in changes.items() if key in EDITABLE_FIELDS}
    for key, value in applied.items():
        setattr(offer, key, value)

    _validate_pricing(offer.original_price, offer.discounted_price)
    if ('original_price' in applied or 'discounted_price' in applied) and 'discount_percent' not in applied:
        offer.discount_percent = _discount_percent(offer.original_price, offer.discounted_price)
        applied['discount_percent'] = offer.discount_percent

    if applied:
        offer.save(update_fields=[*applied.keys(), 'updated_at'])
    return offer
