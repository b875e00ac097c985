import pytest
from datetime import timedelta
from decimal import Decimal
from django.utils import timezone
from rest_framework.test import APIClient
from rest_framework_simplejwt.tokens import RefreshToken
from apps.accounts.models import User, UserRole
from apps.coupons.models import Coupon, CouponStatus
from apps.offers.models import Offer
from apps.partners.models import Partner, PartnerStatus


def authenticated_client(user):
    """Return a fresh API client authenticated as user."""
    client = APIClient()
    refresh = RefreshToken.for_user(user)
    client.credentials(HTTP_AUTHORIZATION=f'Bearer {refresh.access_token}')
    return client


def create_partner(email, shop_name, status=PartnerStatus.APPROVED):
    user = User.objects.create_user(email=email, password='TestPass123!', role=UserRole.PARTNER)
    return Partner.objects.create(
        user=user,
        partner_name=shop_name,
        shop_name=shop_name,
        status=status,
    )


def create_offer(partner, title, **overrides):
    fields = {
        'partner': partner,
        'title': title,
        'original_price': Decimal('100.00'),
        'discounted_price': Decimal('60.00'),
        'discount_percent': 40,
        'expiry_date': timezone.now() + timedelta(days=30),
    }
    fields.update(overrides)
    return Offer.objects.create(**fields)


def create_coupon(offer, member, code, status=CouponStatus.ACTIVE, expiry_date=None, issued_at=None):
    now = timezone.now()
    return Coupon.objects.create(
        offer=offer,
        partner=offer.partner,
        member=member,
        coupon_code=code,
        redemption_token=f'token-{code}',
        status=status,
        issued_at=issued_at or now,
        expiry_date=expiry_date or offer.expiry_date,
        redeemed_at=now if status == CouponStatus.REDEEMED else None,
        coupon_color=offer.coupon_color,
    )


@pytest.fixture
def api_client():
    """Return an unauthenticated API client."""
    return APIClient()


@pytest.fixture
def platform_admin(db):
    return User.objects.create_user(
        email='admin@example.com',
        password='TestPass123!',
        role=UserRole.ADMIN,
    )


@pytest.fixture
def members(db):
    return [
        User.objects.create_user(email=f'member{i}@example.com', password='TestPass123!')
        for i in range(3)
    ]


@pytest.fixture
def partner(db):
    return create_partner('bakery@example.com', 'Corner Bakery')


@pytest.fixture
def other_partner(db):
    return create_partner('cafe@example.com', 'Blue Cafe')


@pytest.fixture
def marketplace(partner, other_partner, members):
    """
    A small marketplace.

    partner: two live offers and one expired offer,
             coupons: 1 active, 1 redeemed, 1 expired, 1 active past expiry
    other_partner: one live offer with one redeemed coupon
    one pending partner without offers
    """
    create_partner('pending@example.com', 'Pending Shop', status=PartnerStatus.PENDING)

    bread = create_offer(partner, 'Bread', views=10, clicks=4, redemptions=1)
    cake = create_offer(partner, 'Cake', views=5, clicks=1)
    create_offer(
        partner,
        'Old croissants',
        expiry_date=timezone.now() - timedelta(days=1),
        views=7,
    )
    coffee = create_offer(other_partner, 'Coffee', views=100, clicks=50, redemptions=1)

    create_coupon(bread, members[0], 'AAAA2222')
    create_coupon(bread, members[1], 'BBBB2222', status=CouponStatus.REDEEMED)
    create_coupon(cake, members[0], 'CCCC2222', status=CouponStatus.EXPIRED)
    create_coupon(
        cake, members[1], 'DDDD2222',
        expiry_date=timezone.now() - timedelta(hours=1),
    )
    create_coupon(coffee, members[2], 'EEEE2222', status=CouponStatus.REDEEMED)

    return {'bread': bread, 'cake': cake, 'coffee': coffee}


@pytest.fixture
def admin_client(platform_admin):
    return authenticated_client(platform_admin)


@pytest.fixture
def partner_client(partner):
    return authenticated_client(partner.user)
