"""
Partners app services layer.

The approval workflow owns Partner.status; the coupon ledger only reads it.
"""

from .exceptions import (
    PartnersServiceError,
    PartnerNotFoundError,
    InvalidStatusTransitionError,
    PartnerRegistrationError,
)

from .approval import (
    get_partner_by_id,
    get_pending_partners,
    approve_partner,
    reject_partner,
)

from .registration import register_partner


__all__ = [
    # Exceptions
    'PartnersServiceError',
    'PartnerNotFoundError',
    'InvalidStatusTransitionError',
    'PartnerRegistrationError',

    # Approval workflow
    'get_partner_by_id',
    'get_pending_partners',
    'approve_partner',
    'reject_partner',

    # Applications
    'register_partner',
]
