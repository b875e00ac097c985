"""Partner application service."""

import logging

from django.db import transaction

from apps.accounts.models import UserRole
from apps.accounts.services import register_user, UserRegistrationError
from apps.partners.models import Partner, PartnerStatus

from .exceptions import PartnerRegistrationError

logger = logging.getLogger(__name__)


@transaction.atomic
def register_partner(
    *,
    email: str,
    password: str,
    partner_name: str,
    shop_name: str,
    display_name: str = "",
    category: str = "",
    city: str = "",
    district: str = "",
    mobile_number: str = "",
) -> Partner:
    """
    Create a partner account together with a pending application.

    The partner cannot publish offers until an admin approves it.

    Returns:
        Created Partner instance (status pending)

    Raises:
        PartnerRegistrationError: If the account cannot be created
    """
    try:
        user = register_user(
            email=email,
            password=password,
            display_name=display_name or partner_name,
            role=UserRole.PARTNER,
        )
    except UserRegistrationError as e:
        raise PartnerRegistrationError(str(e))

    partner = Partner.objects.create(
        user=user,
        partner_name=partner_name,
        shop_name=shop_name,
        category=category,
        city=city,
        district=district,
        mobile_number=mobile_number,
        status=PartnerStatus.PENDING,
    )
    logger.info("Partner application %s submitted for %s", partner.id, shop_name)
    return partner
