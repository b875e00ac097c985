import pytest
from rest_framework.test import APIClient
from rest_framework_simplejwt.tokens import RefreshToken
from apps.accounts.models import User, UserRole
from apps.partners.models import Partner, PartnerStatus


def authenticated_client(user):
    """Return a fresh API client authenticated as user."""
    client = APIClient()
    refresh = RefreshToken.for_user(user)
    client.credentials(HTTP_AUTHORIZATION=f'Bearer {refresh.access_token}')
    return client


@pytest.fixture
def api_client():
    """Return an unauthenticated API client."""
    return APIClient()


@pytest.fixture
def platform_admin(db):
    """Create a platform admin."""
    return User.objects.create_user(
        email='admin@example.com',
        password='TestPass123!',
        display_name='Admin',
        role=UserRole.ADMIN,
    )


@pytest.fixture
def member(db):
    """Create a member account."""
    return User.objects.create_user(
        email='member@example.com',
        password='TestPass123!',
        display_name='Member',
    )


@pytest.fixture
def pending_partner(db):
    """Create a pending partner application."""
    user = User.objects.create_user(
        email='applicant@example.com',
        password='TestPass123!',
        role=UserRole.PARTNER,
    )
    return Partner.objects.create(
        user=user,
        partner_name='Asha Rao',
        shop_name='Rao Sweets',
        category='sweets',
        city='Pune',
    )


@pytest.fixture
def approved_partner(db):
    """Create an approved partner."""
    user = User.objects.create_user(
        email='approved@example.com',
        password='TestPass123!',
        role=UserRole.PARTNER,
    )
    return Partner.objects.create(
        user=user,
        partner_name='Ben Ode',
        shop_name='Ode Books',
        status=PartnerStatus.APPROVED,
    )


@pytest.fixture
def admin_client(platform_admin):
    """Return API client authenticated as admin."""
    return authenticated_client(platform_admin)


@pytest.fixture
def member_client(member):
    """Return API client authenticated as member."""
    return authenticated_client(member)


@pytest.fixture
def pending_partner_client(pending_partner):
    """Return API client authenticated as the pending partner."""
    return authenticated_client(pending_partner.user)
