"""
Engagement counter service.

Views, clicks and redemptions are counted with a single
``UPDATE offers SET <counter> = <counter> + 1`` per event, so concurrent
increments never lose updates and counters never decrease.

Delivery guarantees differ by kind:

* views and clicks are best effort; a failed increment is logged and dropped
* redemptions mirror an already committed business event and are retried
  on transient database errors before giving up with an error log

None of the ``record_*`` helpers raise.
"""

import logging
import time
from uuid import UUID

from django.conf import settings
from django.db import DatabaseError
from django.db.models import F

from apps.offers.models import Offer, EngagementKind, COUNTER_FIELDS

logger = logging.getLogger(__name__)


def increment(offer_id: UUID, kind: str) -> bool:
    """
    Atomically add one to an offer's engagement counter.

    Args:
        offer_id: UUID of the offer
        kind: One of EngagementKind values

    Returns:
        True if a row was updated, False if the offer does not exist

    Raises:
        ValueError: If kind is not a known engagement kind
        DatabaseError: If the storage layer rejects the update
    """
    try:
        field = COUNTER_FIELDS[EngagementKind(kind)]
    except ValueError:
        raise ValueError(f"Unknown engagement kind: {kind!r}")

    updated = Offer.objects.filter(id=offer_id).update(**{field: F(field) + 1})
    return updated > 0


def _record_best_effort(offer_id: UUID, kind: str) -> bool:
    try:
        return increment(offer_id, kind)
    except DatabaseError:
        logger.warning("Dropped %s increment for offer %s", kind, offer_id, exc_info=True)
        return False


def record_view(offer_id: UUID) -> bool:
    """Count a member opening an offer. Lossy under failure."""
    return _record_best_effort(offer_id, EngagementKind.VIEW)


def record_click(offer_id: UUID) -> bool:
    """Count a member clicking through an offer. Lossy under failure."""
    return _record_best_effort(offer_id, EngagementKind.CLICK)


def record_redemption(offer_id: UUID) -> bool:
    """
    Count a committed redemption, retrying transient failures.

    Called after the coupon status transition has committed. The
    redemption stands regardless of what happens here.

    Returns:
        True once the increment landed, False if every attempt failed
        or the offer no longer exists
    """
    attempts = max(1, settings.ENGAGEMENT_REDEMPTION_RETRIES)
    backoff = settings.ENGAGEMENT_RETRY_BACKOFF_SECONDS

    for attempt in range(1, attempts + 1):
        try:
            return increment(offer_id, EngagementKind.REDEMPTION)
        except DatabaseError:
            if attempt == attempts:
                logger.error(
                    "Redemption increment for offer %s failed after %d attempts",
                    offer_id, attempts, exc_info=True
                )
                return False
            logger.warning(
                "Redemption increment for offer %s failed (attempt %d/%d), retrying",
                offer_id, attempt, attempts
            )
            if backoff:
                time.sleep(backoff * attempt)
    return False
