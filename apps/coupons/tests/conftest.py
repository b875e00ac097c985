import pytest
from datetime import timedelta
from decimal import Decimal
from django.utils import timezone
from rest_framework.test import APIClient
from rest_framework_simplejwt.tokens import RefreshToken
from apps.accounts.models import User, UserRole
from apps.offers.models import Offer
from apps.partners.models import Partner, PartnerStatus


def authenticate(client, user):
    """Attach a bearer token for user to client."""
    refresh = RefreshToken.for_user(user)
    client.credentials(HTTP_AUTHORIZATION=f'Bearer {refresh.access_token}')
    return client


def make_partner(email, shop_name, status=PartnerStatus.APPROVED):
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
        category='food',
        city='Pune',
        status=status,
    )


def make_offer(partner, **overrides):
    fields = {
        'partner': partner,
        'title': 'Half price pastries',
        'original_price': Decimal('200.00'),
        'discounted_price': Decimal('100.00'),
        'discount_percent': 50,
        'expiry_date': timezone.now() + timedelta(days=10),
        'coupon_color': '#112233',
    }
    fields.update(overrides)
    return Offer.objects.create(**fields)


@pytest.fixture
def api_client():
    """Return an unauthenticated API client."""
    return APIClient()


# =============================================================================
# Users
# =============================================================================

@pytest.fixture
def member(db):
    """Create a member account."""
    return User.objects.create_user(
        email='member@example.com',
        password='TestPass123!',
        display_name='Member',
    )


@pytest.fixture
def other_member(db):
    """Create a second member account."""
    return User.objects.create_user(
        email='other.member@example.com',
        password='TestPass123!',
        display_name='Other Member',
    )


@pytest.fixture
def partner(db):
    """Create an approved partner."""
    return make_partner('bakery@example.com', 'Corner Bakery')


@pytest.fixture
def other_partner(db):
    """Create a second approved partner."""
    return make_partner('cafe@example.com', 'Blue Cafe')


@pytest.fixture
def rejected_partner(db):
    """Create a rejected partner."""
    return make_partner('rejected@example.com', 'Closed Shop', status=PartnerStatus.REJECTED)


# =============================================================================
# Offers
# =============================================================================

@pytest.fixture
def offer(partner):
    """Active offer expiring in 10 days, coupons live until the offer ends."""
    return make_offer(partner)


@pytest.fixture
def short_coupon_offer(partner):
    """Offer expiring in 10 days whose coupons live 3 days."""
    return make_offer(partner, title='Three day coupon', coupon_expiry_days=3)


@pytest.fixture
def rejected_partner_offer(rejected_partner):
    """Active, unexpired offer whose partner was rejected."""
    return make_offer(rejected_partner, title='Orphaned offer')


# =============================================================================
# Clients
# =============================================================================

@pytest.fixture
def member_client(member):
    """Return API client authenticated as member."""
    return authenticate(APIClient(), member)


@pytest.fixture
def partner_client(partner):
    """Return API client authenticated as the partner's user."""
    return authenticate(APIClient(), partner.user)


@pytest.fixture
def other_partner_client(other_partner):
    """Return API client authenticated as the other partner's user."""
    return authenticate(APIClient(), other_partner.user)
