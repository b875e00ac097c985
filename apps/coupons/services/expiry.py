import logging
from datetime import datetime, timedelta

from apps.offers.models import Offer

from .exceptions import InvalidOfferStateError

logger = logging.getLogger(__name__)


def resolve_expiry(offer: Offer, mint_time: datetime) -> datetime:
    """
    Compute a new coupon's expiry date.

    The offer's expiry_date is a hard ceiling. With coupon_expiry_days set,
    the coupon lives that many days from mint_time unless the offer ends
    first; zero days means the coupon expires at mint_time.

    Raises:
        InvalidOfferStateError: If the offer is already expired at mint_time
    """
    if offer.expiry_date <= mint_time:
        logger.error(
            "Expiry requested for offer %s which expired at %s (mint time %s)",
            offer.id, offer.expiry_date, mint_time
        )
        raise InvalidOfferStateError(f"Offer {offer.id} is already expired")

    if offer.coupon_expiry_days is None:
        return offer.expiry_date

    return min(mint_time + timedelta(days=offer.coupon_expiry_days), offer.expiry_date)
