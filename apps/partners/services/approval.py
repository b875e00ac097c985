"""
Partner approval service.

Approved and rejected are terminal states. Each review is a single
conditional update on ``status='pending'`` so two admins reviewing the
same application at once cannot both win.
"""

import logging
from uuid import UUID

from django.db.models import QuerySet
from django.utils import timezone

from apps.accounts.models import User
from apps.partners.models import Partner, PartnerStatus

from .exceptions import PartnerNotFoundError, InvalidStatusTransitionError

logger = logging.getLogger(__name__)


def get_partner_by_id(*, partner_id: UUID) -> Partner:
    """
    Get a partner profile by ID.

    Raises:
        PartnerNotFoundError: If partner doesn't exist
    """
    try:
        return Partner.objects.select_related('user').get(id=partner_id)
    except Partner.DoesNotExist:
        raise PartnerNotFoundError(f"Partner with ID {partner_id} not found")


def get_pending_partners() -> QuerySet[Partner]:
    """Pending applications, oldest first."""
    return (
        Partner.objects
        .filter(status=PartnerStatus.PENDING)
        .select_related('user')
        .order_by('created_at')
    )


def _review(*, partner_id: UUID, reviewer: User, new_status: str, reason: str = '') -> Partner:
    updated = Partner.objects.filter(
        id=partner_id,
        status=PartnerStatus.PENDING
    ).update(
        status=new_status,
        rejection_reason=reason,
        reviewed_at=timezone.now(),
        reviewed_by=reviewer,
        updated_at=timezone.now(),
    )

    partner = get_partner_by_id(partner_id=partner_id)
    if not updated:
        raise InvalidStatusTransitionError(
            f"Partner {partner.shop_name} is already {partner.status}"
        )

    logger.info(
        "Partner %s %s by %s", partner.id, new_status, reviewer.email
    )
    return partner


def approve_partner(*, partner_id: UUID, reviewer: User) -> Partner:
    """
    Approve a pending partner application.

    Args:
        partner_id: UUID of the partner
        reviewer: Admin performing the review

    Returns:
        Updated Partner instance

    Raises:
        PartnerNotFoundError: If partner doesn't exist
        InvalidStatusTransitionError: If partner is not pending
    """
    return _review(
        partner_id=partner_id,
        reviewer=reviewer,
        new_status=PartnerStatus.APPROVED,
    )


def reject_partner(*, partner_id: UUID, reviewer: User, reason: str = '') -> Partner:
    """
    Reject a pending partner application with an optional reason.

    Raises:
        PartnerNotFoundError: If partner doesn't exist
        InvalidStatusTransitionError: If partner is not pending
    """
    return _review(
        partner_id=partner_id,
        reviewer=reviewer,
        new_status=PartnerStatus.REJECTED,
        reason=reason,
    )
