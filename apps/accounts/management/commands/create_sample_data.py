"""
Management command to create sample data for trying out the API.

Usage:
    python manage.py create_sample_data

This creates:
- 1 platform admin and 3 members
- 3 partners (2 approved, 1 pending)
- Offers for the approved partners
- Coupons in every state, with views, clicks and redemptions
"""

from django.core.management.base import BaseCommand
from django.db import transaction
from django.utils import timezone
from decimal import Decimal
from datetime import timedelta

from apps.accounts.models import User, UserRole
from apps.coupons.models import Coupon
from apps.coupons.services import mint_coupon, redeem
from apps.offers.models import Offer
from apps.offers.services import create_offer, record_view, record_click
from apps.partners.models import Partner
from apps.partners.services import register_partner, approve_partner


SAMPLE_PASSWORD = 'password123!'

PARTNERS = [
    # (email, partner name, shop name, category, city, approve)
    ('bakery@example.com', 'Meera Iyer', 'Corner Bakery', 'food', 'Pune', True),
    ('salon@example.com', 'Tom Haddad', 'Fresh Cuts', 'beauty', 'Pune', True),
    ('books@example.com', 'Ines Duarte', 'Paper Trail', 'books', 'Mumbai', False),
]

OFFERS = {
    'bakery@example.com': [
        # (title, original, discounted, offer days, coupon days)
        ('Half price sourdough', '240.00', '120.00', 14, None),
        ('Free coffee with any cake', '180.00', '120.00', 30, 3),
    ],
    'salon@example.com': [
        ('Haircut and wash', '800.00', '560.00', 21, 7),
    ],
}


class Command(BaseCommand):
    help = 'Create sample data for trying out the API'

    def add_arguments(self, parser):
        parser.add_argument(
            '--clear',
            action='store_true',
            help='Clear existing data before creating new sample data',
        )

    @transaction.atomic
    def handle(self, *args, **options):
        if options['clear']:
            self.stdout.write('Clearing existing data...')
            self.clear_data()

        self.stdout.write('Creating sample data...')

        admin, members = self.create_users()
        partners = self.create_partners(admin)
        offers = self.create_offers(partners)
        self.create_activity(members, partners, offers)

        self.stdout.write(self.style.SUCCESS('Sample data created successfully!'))
        self.stdout.write('')
        self.stdout.write('Test accounts (password for all: %s):' % SAMPLE_PASSWORD)
        self.stdout.write(f'  {admin.email} (admin)')
        for member in members:
            self.stdout.write(f'  {member.email} (member)')
        for email, *_rest in PARTNERS:
            self.stdout.write(f'  {email} (partner)')

    def clear_data(self):
        """Clear all marketplace data from the database."""
        Coupon.objects.all().delete()
        Offer.objects.all().delete()
        Partner.objects.all().delete()
        User.objects.filter(is_superuser=False).delete()

    def create_users(self):
        """Create the admin and member accounts."""
        self.stdout.write('  Creating users...')

        admin, _ = User.objects.get_or_create(
            email='admin@example.com',
            defaults={
                'display_name': 'Platform Admin',
                'role': UserRole.ADMIN,
                'is_staff': True,
            }
        )
        admin.set_password(SAMPLE_PASSWORD)
        admin.save()

        members = []
        for name in ['alice', 'bob', 'charlie']:
            member, _ = User.objects.get_or_create(
                email=f'{name}@example.com',
                defaults={'display_name': name.title()}
            )
            member.set_password(SAMPLE_PASSWORD)
            member.save()
            members.append(member)

        return admin, members

    def create_partners(self, admin):
        """Create partner applications and approve some of them."""
        self.stdout.write('  Creating partners...')

        partners = {}
        for email, partner_name, shop_name, category, city, approve in PARTNERS:
            partner = Partner.objects.filter(user__email=email).first()
            if partner is None:
                partner = register_partner(
                    email=email,
                    password=SAMPLE_PASSWORD,
                    partner_name=partner_name,
                    shop_name=shop_name,
                    category=category,
                    city=city,
                )
                if approve:
                    partner = approve_partner(partner_id=partner.id, reviewer=admin)
            partners[email] = partner

        return partners

    def create_offers(self, partners):
        """Publish offers for approved partners."""
        self.stdout.write('  Creating offers...')

        now = timezone.now()
        offers = []
        for email, specs in OFFERS.items():
            partner = partners[email]
            for title, original, discounted, offer_days, coupon_days in specs:
                offer = Offer.objects.filter(partner=partner, title=title).first()
                if offer is None:
                    offer = create_offer(
                        partner=partner,
                        title=title,
                        category=partner.category,
                        original_price=Decimal(original),
                        discounted_price=Decimal(discounted),
                        expiry_date=now + timedelta(days=offer_days),
                        coupon_expiry_days=coupon_days,
                    )
                offers.append(offer)

        return offers

    def create_activity(self, members, partners, offers):
        """Views, clicks, minted coupons and a few redemptions."""
        self.stdout.write('  Creating coupons and engagement...')

        for offer in offers:
            for member in members:
                record_view(offer.id)
            record_click(offer.id)

        for i, member in enumerate(members):
            for offer in offers[:i + 1]:
                coupon = mint_coupon(offer_id=offer.id, member=member)
                # Every second coupon gets redeemed at the counter
                if (i + offers.index(offer)) % 2 == 0:
                    redeem(
                        redemption_token=coupon.redemption_token,
                        partner_id=coupon.partner_id,
                    )
