import pytest
from datetime import timedelta
from decimal import Decimal
from django.utils import timezone
from rest_framework.test import APIClient
from rest_framework_simplejwt.tokens import RefreshToken
from apps.accounts.models import User, UserRole
from apps.offers.models import Offer
from apps.partners.models import Partner, PartnerStatus


def authenticated_client(user):
    """Return a fresh API client authenticated as user."""
    client = APIClient()
    refresh = RefreshToken.for_user(user)
    client.credentials(HTTP_AUTHORIZATION=f'Bearer {refresh.access_token}')
    return client


def create_partner(email, shop_name, status=PartnerStatus.APPROVED, city='Pune'):
    user = User.objects.create_user(
        email=email,
        password='TestPass123!',
        display_name=shop_name,
        role=UserRole.PARTNER,
    )
    return Partner.objects.create(
        user=user,
        partner_name=f'{shop_name} Owner',
        shop_name=shop_name,
        city=city,
        status=status,
    )


def create_offer(partner, **overrides):
    fields = {
        'partner': partner,
        'title': 'Two for one coffee',
        'description': 'Buy one flat white, get one free',
        'category': 'cafe',
        'original_price': Decimal('300.00'),
        'discounted_price': Decimal('150.00'),
        'discount_percent': 50,
        'expiry_date': timezone.now() + timedelta(days=7),
    }
    fields.update(overrides)
    return Offer.objects.create(**fields)


@pytest.fixture
def api_client():
    """Return an unauthenticated API client."""
    return APIClient()


@pytest.fixture
def member(db):
    """Create a member account."""
    return User.objects.create_user(
        email='member@example.com',
        password='TestPass123!',
        display_name='Member',
    )


@pytest.fixture
def partner(db):
    """Create an approved partner."""
    return create_partner('cafe@example.com', 'Blue Cafe')


@pytest.fixture
def other_partner(db):
    """Create a second approved partner in another city."""
    return create_partner('deli@example.com', 'Main St Deli', city='Mumbai')


@pytest.fixture
def pending_partner(db):
    """Create a partner awaiting approval."""
    return create_partner('new@example.com', 'New Shop', status=PartnerStatus.PENDING)


@pytest.fixture
def offer(partner):
    """Active offer expiring in a week."""
    return create_offer(partner)


@pytest.fixture
def partner_client(partner):
    """Return API client authenticated as the partner's user."""
    return authenticated_client(partner.user)


@pytest.fixture
def other_partner_client(other_partner):
    """Return API client authenticated as the other partner's user."""
    return authenticated_client(other_partner.user)


@pytest.fixture
def pending_partner_client(pending_partner):
    """Return API client authenticated as the pending partner's user."""
    return authenticated_client(pending_partner.user)


@pytest.fixture
def member_client(member):
    """Return API client authenticated as member."""
    return authenticated_client(member)
