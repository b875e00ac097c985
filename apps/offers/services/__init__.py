"""
Offers app services layer.

Offer publishing/browsing and the engagement counter. Counters are only
ever changed through storage-level increments in engagement.py.
"""

from .exceptions import (
    OffersServiceError,
    OfferNotFoundError,
    PartnerNotApprovedError,
    NotOfferOwnerError,
    InvalidOfferDataError,
)

from .offer_management import (
    get_offer_by_id,
    get_browsable_offers,
    get_partner_offers,
    create_offer,
    update_offer,
)

from .engagement import (
    increment,
    record_view,
    record_click,
    record_redemption,
)


__all__ = [
    # Exceptions
    'OffersServiceError',
    'OfferNotFoundError',
    'PartnerNotApprovedError',
    'NotOfferOwnerError',
    'InvalidOfferDataError',

    # Offer management
    'get_offer_by_id',
    'get_browsable_offers',
    'get_partner_offers',
    'create_offer',
    'update_offer',

    # Engagement counter
    'increment',
    'record_view',
    'record_click',
    'record_redemption',
]
