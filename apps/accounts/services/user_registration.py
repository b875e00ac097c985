"""User registration service."""

import logging

from django.db import IntegrityError, transaction
from django.contrib.auth import get_user_model

from apps.accounts.models import UserRole

from .exceptions import UserRegistrationError

User = get_user_model()
logger = logging.getLogger(__name__)


@transaction.atomic
def register_user(
    *,
    email: str,
    password: str,
    display_name: str = "",
    role: str = UserRole.MEMBER
) -> User:
    """
    Register a new account.

    Members register directly; partner accounts are created through the
    partner application flow, which also creates the partner profile.

    Args:
        email: User's email address
        password: User's password (will be hashed)
        display_name: Optional display name
        role: Account role, member unless stated otherwise

    Returns:
        Created User instance

    Raises:
        UserRegistrationError: If the email is already registered
    """
    if role == UserRole.ADMIN:
        raise UserRegistrationError("Admin accounts cannot self-register")

    email = User.objects.normalize_email(email)
    if User.objects.filter(email__iexact=email).exists():
        raise UserRegistrationError("An account with this email already exists")

    try:
        with transaction.atomic():
            user = User.objects.create_user(
                email=email,
                password=password,
                display_name=display_name,
                role=role,
            )
    except IntegrityError:
        raise UserRegistrationError("An account with this email already exists")

    logger.info("Registered %s account %s", role, user.id)
    return user
