"""
Service layer unit tests for coupons app.

Tests cover:
- Code and token generation
- Expiry resolution
- Minting (eligibility, idempotency, collisions)
- Lazy expiry on reads
- Redemption ordering and exactly-once consumption
- Concurrency (concurrent redeems, concurrent mints)
"""

import json
import pytest
import threading
from datetime import timedelta
from unittest.mock import patch
from uuid import uuid4

from django.db import DatabaseError, connection
from django.test import TransactionTestCase, override_settings
from django.utils import timezone

from apps.accounts.models import User
from apps.coupons.models import Coupon, CouponStatus
from apps.coupons.services import (
    CODE_ALPHABET,
    generate_code,
    build_qr_payload,
    parse_qr_payload,
    resolve_expiry,
    mint_coupon,
    get_coupon,
    list_member_coupons,
    list_partner_coupons,
    list_partner_redemptions,
    get_member_coupon_stats,
    validate_token,
    redeem,
    redeem_by_scan,
)
from apps.coupons.services.exceptions import (
    CouponNotFoundError,
    OfferNotEligibleError,
    InvalidOfferStateError,
    InvalidTokenError,
    WrongPartnerError,
    CouponExpiredError,
    AlreadyRedeemedError,
    CodeGenerationError,
)
from apps.offers.models import Offer
from apps.offers.services import OfferNotFoundError
from apps.partners.models import PartnerStatus

from .conftest import make_offer, make_partner


# =============================================================================
# Code Generator
# =============================================================================

@pytest.mark.django_db
class TestCodeGeneration:
    """Tests for codes.py."""

    def test_code_uses_unambiguous_alphabet(self):
        for _ in range(50):
            code, _token = generate_code()
            assert len(code) == 8
            assert set(code) <= set(CODE_ALPHABET)
            assert not set(code) & set('0O1IL')

    @override_settings(COUPON_CODE_LENGTH=12)
    def test_code_length_is_configurable(self):
        code, _token = generate_code()
        assert len(code) == 12

    def test_token_is_long_and_distinct(self):
        tokens = {generate_code()[1] for _ in range(20)}
        assert len(tokens) == 20
        assert all(len(token) >= 40 for token in tokens)

    def test_collision_regenerates(self, member, offer):
        existing = mint_coupon(offer_id=offer.id, member=member)

        with patch(
            'apps.coupons.services.codes._random_code',
            side_effect=[existing.coupon_code, 'FRESHCQD'],
        ):
            code, _token = generate_code()

        assert code == 'FRESHCQD'

    @override_settings(COUPON_CODE_MAX_ATTEMPTS=3)
    def test_exhausted_attempts_raise(self, member, offer):
        existing = mint_coupon(offer_id=offer.id, member=member)

        with patch(
            'apps.coupons.services.codes._random_code',
            return_value=existing.coupon_code,
        ) as random_code:
            with pytest.raises(CodeGenerationError):
                generate_code()

        assert random_code.call_count == 3

    def test_redeemed_codes_still_collide(self, member, partner, offer):
        coupon = mint_coupon(offer_id=offer.id, member=member)
        redeem(redemption_token=coupon.redemption_token, partner_id=partner.id)

        with patch(
            'apps.coupons.services.codes._random_code',
            side_effect=[coupon.coupon_code, 'ABCDEFGH'],
        ):
            code, _token = generate_code()

        assert code == 'ABCDEFGH'


class TestQrPayload:
    """Tests for QR payload building and parsing."""

    def test_build_and_parse(self):
        coupon = Coupon(id=uuid4(), redemption_token='tok-123')
        payload = build_qr_payload(coupon)

        assert json.loads(payload) == {'cid': str(coupon.id), 'tok': 'tok-123'}
        assert parse_qr_payload(payload) == (str(coupon.id), 'tok-123')

    def test_bare_token_accepted(self):
        assert parse_qr_payload('  just-a-token ') == (None, 'just-a-token')

    @pytest.mark.parametrize('payload', [
        '',
        '   ',
        '{not json',
        '{"cid": "abc"}',
        '{"tok": ""}',
        '{"tok": 5}',
        '{"cid": 7, "tok": "x"}',
    ])
    def test_malformed_payload_rejected(self, payload):
        with pytest.raises(InvalidTokenError):
            parse_qr_payload(payload)


# =============================================================================
# Expiry Resolver
# =============================================================================

class TestResolveExpiry:
    """Tests for expiry.py. Offers are unsaved, no database needed."""

    def _offer(self, expiry_date, coupon_expiry_days=None):
        return Offer(expiry_date=expiry_date, coupon_expiry_days=coupon_expiry_days)

    def test_no_coupon_lifetime_uses_offer_expiry(self):
        now = timezone.now()
        offer = self._offer(now + timedelta(days=10))

        assert resolve_expiry(offer, now) == now + timedelta(days=10)

    def test_coupon_lifetime_shorter_than_offer(self):
        now = timezone.now()
        offer = self._offer(now + timedelta(days=10), coupon_expiry_days=3)

        assert resolve_expiry(offer, now) == now + timedelta(days=3)

    def test_offer_expiry_caps_long_lifetime(self):
        now = timezone.now()
        offer = self._offer(now + timedelta(days=10), coupon_expiry_days=365)

        assert resolve_expiry(offer, now) == now + timedelta(days=10)

    def test_zero_day_lifetime_expires_at_mint(self):
        now = timezone.now()
        offer = self._offer(now + timedelta(days=10), coupon_expiry_days=0)

        assert resolve_expiry(offer, now) == now

    @pytest.mark.parametrize('days', [None, 0, 1, 9, 10, 11, 10_000])
    def test_never_later_than_offer_expiry(self, days):
        now = timezone.now()
        offer = self._offer(now + timedelta(days=10), coupon_expiry_days=days)

        assert resolve_expiry(offer, now) <= offer.expiry_date

    def test_expired_offer_raises(self):
        now = timezone.now()
        offer = self._offer(now - timedelta(seconds=1))

        with pytest.raises(InvalidOfferStateError):
            resolve_expiry(offer, now)

    def test_offer_expiring_exactly_now_raises(self):
        now = timezone.now()
        offer = self._offer(now)

        with pytest.raises(InvalidOfferStateError):
            resolve_expiry(offer, now)


# =============================================================================
# Minting
# =============================================================================

@pytest.mark.django_db
class TestMintCoupon:
    """Tests for ledger.mint_coupon."""

    def test_mint_creates_active_coupon(self, member, partner, offer):
        now = timezone.now()
        coupon = mint_coupon(offer_id=offer.id, member=member, now=now)

        assert coupon.status == CouponStatus.ACTIVE
        assert coupon.partner_id == partner.id
        assert coupon.member_id == member.id
        assert coupon.issued_at == now
        assert coupon.redeemed_at is None
        assert coupon.coupon_color == '#112233'

    def test_expiry_defaults_to_offer_expiry(self, member, offer):
        coupon = mint_coupon(offer_id=offer.id, member=member)

        assert coupon.expiry_date == offer.expiry_date

    def test_expiry_uses_coupon_lifetime(self, member, short_coupon_offer):
        now = timezone.now()
        coupon = mint_coupon(offer_id=short_coupon_offer.id, member=member, now=now)

        assert coupon.expiry_date == now + timedelta(days=3)

    def test_mint_is_idempotent(self, member, offer):
        first = mint_coupon(offer_id=offer.id, member=member)
        second = mint_coupon(offer_id=offer.id, member=member)

        assert first.id == second.id
        assert first.coupon_code == second.coupon_code
        assert Coupon.objects.filter(offer=offer, member=member).count() == 1

    def test_different_members_get_different_coupons(self, member, other_member, offer):
        first = mint_coupon(offer_id=offer.id, member=member)
        second = mint_coupon(offer_id=offer.id, member=other_member)

        assert first.id != second.id
        assert first.coupon_code != second.coupon_code

    def test_new_coupon_after_redemption(self, member, partner, offer):
        first = mint_coupon(offer_id=offer.id, member=member)
        redeem(redemption_token=first.redemption_token, partner_id=partner.id)

        second = mint_coupon(offer_id=offer.id, member=member)

        assert second.id != first.id
        assert second.status == CouponStatus.ACTIVE

    def test_new_coupon_after_lazy_expiry(self, member, partner):
        offer = make_offer(partner, coupon_expiry_days=1)
        now = timezone.now()
        first = mint_coupon(offer_id=offer.id, member=member, now=now)

        later = now + timedelta(days=2)
        second = mint_coupon(offer_id=offer.id, member=member, now=later)

        first.refresh_from_db()
        assert first.status == CouponStatus.EXPIRED
        assert second.id != first.id

    def test_color_is_copied_not_linked(self, member, offer):
        coupon = mint_coupon(offer_id=offer.id, member=member)

        Offer.objects.filter(id=offer.id).update(coupon_color='#ffffff')
        coupon.refresh_from_db()

        assert coupon.coupon_color == '#112233'

    def test_unknown_offer(self, member):
        with pytest.raises(OfferNotFoundError):
            mint_coupon(offer_id=uuid4(), member=member)

    def test_inactive_offer_not_eligible(self, member, partner):
        offer = make_offer(partner, is_active=False)

        with pytest.raises(OfferNotEligibleError):
            mint_coupon(offer_id=offer.id, member=member)

    def test_expired_offer_not_eligible(self, member, partner):
        offer = make_offer(partner, expiry_date=timezone.now() - timedelta(hours=1))

        with pytest.raises(OfferNotEligibleError):
            mint_coupon(offer_id=offer.id, member=member)

    def test_rejected_partner_not_eligible(self, member, rejected_partner_offer):
        with pytest.raises(OfferNotEligibleError):
            mint_coupon(offer_id=rejected_partner_offer.id, member=member)

        assert not Coupon.objects.exists()

    def test_pending_partner_not_eligible(self, member):
        pending = make_partner('pending@example.com', 'Pending Shop', status=PartnerStatus.PENDING)
        offer = make_offer(pending)

        with pytest.raises(OfferNotEligibleError):
            mint_coupon(offer_id=offer.id, member=member)

    def test_deactivating_offer_keeps_minted_coupons(self, member, partner, offer):
        coupon = mint_coupon(offer_id=offer.id, member=member)
        Offer.objects.filter(id=offer.id).update(is_active=False)

        result = redeem(redemption_token=coupon.redemption_token, partner_id=partner.id)

        assert result.coupon.status == CouponStatus.REDEEMED

    def test_code_collision_on_insert_retries(self, member, other_member, offer):
        taken = mint_coupon(offer_id=offer.id, member=other_member)

        with patch(
            'apps.coupons.services.ledger.generate_code',
            side_effect=[
                (taken.coupon_code, 'fresh-token-1'),
                ('NEWCODE2', 'fresh-token-2'),
            ],
        ):
            coupon = mint_coupon(offer_id=offer.id, member=member)

        assert coupon.coupon_code == 'NEWCODE2'
        assert coupon.redemption_token == 'fresh-token-2'

    def test_persistent_insert_collisions_raise(self, member, other_member, offer):
        taken = mint_coupon(offer_id=offer.id, member=other_member)

        with patch(
            'apps.coupons.services.ledger.generate_code',
            return_value=(taken.coupon_code, 'another-token'),
        ):
            with pytest.raises(CodeGenerationError):
                mint_coupon(offer_id=offer.id, member=member, max_retries=3)


# =============================================================================
# Reads and lazy expiry
# =============================================================================

@pytest.mark.django_db
class TestLedgerReads:
    """Tests for ledger read paths."""

    def test_get_coupon(self, member, offer):
        coupon = mint_coupon(offer_id=offer.id, member=member)

        fetched = get_coupon(coupon_id=coupon.id)

        assert fetched.id == coupon.id

    def test_get_coupon_missing(self):
        with pytest.raises(CouponNotFoundError):
            get_coupon(coupon_id=uuid4())

    def test_get_coupon_hidden_from_other_member(self, member, other_member, offer):
        coupon = mint_coupon(offer_id=offer.id, member=member)

        with pytest.raises(CouponNotFoundError):
            get_coupon(coupon_id=coupon.id, member=other_member)

    def test_read_after_expiry_reports_expired_and_persists(self, member, offer):
        coupon = mint_coupon(offer_id=offer.id, member=member)
        later = coupon.expiry_date + timedelta(seconds=1)

        first_read = get_coupon(coupon_id=coupon.id, now=later)
        assert first_read.status == CouponStatus.EXPIRED

        # Persisted, so later reads agree even without a reference time
        assert Coupon.objects.get(id=coupon.id).status == CouponStatus.EXPIRED
        assert get_coupon(coupon_id=coupon.id).status == CouponStatus.EXPIRED

    def test_read_at_expiry_instant_is_still_active(self, member, offer):
        coupon = mint_coupon(offer_id=offer.id, member=member)

        fetched = get_coupon(coupon_id=coupon.id, now=coupon.expiry_date)

        assert fetched.status == CouponStatus.ACTIVE

    def test_list_member_coupons_normalizes_and_filters(self, member, partner, offer, short_coupon_offer):
        now = timezone.now()
        long_lived = mint_coupon(offer_id=offer.id, member=member, now=now)
        short_lived = mint_coupon(offer_id=short_coupon_offer.id, member=member, now=now)

        later = now + timedelta(days=5)
        active = list(list_member_coupons(member=member, status=CouponStatus.ACTIVE, now=later))
        expired = list(list_member_coupons(member=member, status=CouponStatus.EXPIRED, now=later))

        assert [c.id for c in active] == [long_lived.id]
        assert [c.id for c in expired] == [short_lived.id]

    def test_list_member_coupons_excludes_others(self, member, other_member, offer):
        mint_coupon(offer_id=offer.id, member=other_member)

        assert list(list_member_coupons(member=member)) == []

    def test_list_partner_coupons_filters(self, member, other_member, partner, other_partner, offer):
        other_offer = make_offer(other_partner)
        mine = mint_coupon(offer_id=offer.id, member=member)
        mint_coupon(offer_id=other_offer.id, member=other_member)

        coupons = list(list_partner_coupons(partner_id=partner.id))
        assert [c.id for c in coupons] == [mine.id]

        by_offer = list(list_partner_coupons(partner_id=partner.id, offer_id=other_offer.id))
        assert by_offer == []

        today = timezone.now().date()
        in_range = list_partner_coupons(partner_id=partner.id, date_from=today, date_to=today)
        assert in_range.count() == 1
        before = list_partner_coupons(partner_id=partner.id, date_to=today - timedelta(days=1))
        assert before.count() == 0

    def test_list_partner_redemptions(self, member, other_member, partner, offer):
        first = mint_coupon(offer_id=offer.id, member=member)
        mint_coupon(offer_id=offer.id, member=other_member)
        redeem(redemption_token=first.redemption_token, partner_id=partner.id)

        redeemed = list(list_partner_redemptions(partner_id=partner.id))

        assert [c.id for c in redeemed] == [first.id]

    def test_member_stats(self, member, partner, offer, short_coupon_offer):
        first = mint_coupon(offer_id=offer.id, member=member)
        mint_coupon(offer_id=short_coupon_offer.id, member=member)
        redeem(redemption_token=first.redemption_token, partner_id=partner.id)

        stats = get_member_coupon_stats(member=member)

        assert stats == {
            'total_generated': 2,
            'total_redeemed': 1,
            'active_coupons': 1,
        }

    def test_member_stats_counts_lazily_expired(self, member, short_coupon_offer):
        now = timezone.now()
        mint_coupon(offer_id=short_coupon_offer.id, member=member, now=now)

        stats = get_member_coupon_stats(member=member, now=now + timedelta(days=4))

        assert stats['active_coupons'] == 0
        assert stats['total_generated'] == 1


# =============================================================================
# Redemption
# =============================================================================

@pytest.mark.django_db
class TestRedeem:
    """Tests for redemption.py."""

    def test_redeem_success(self, member, partner, offer):
        coupon = mint_coupon(offer_id=offer.id, member=member)
        now = timezone.now()

        result = redeem(redemption_token=coupon.redemption_token, partner_id=partner.id, now=now)

        assert result.redeemed_at == now
        assert result.coupon.status == CouponStatus.REDEEMED
        coupon.refresh_from_db()
        assert coupon.status == CouponStatus.REDEEMED
        assert coupon.redeemed_at == now

    def test_redeem_increments_offer_counter(self, member, partner, offer):
        coupon = mint_coupon(offer_id=offer.id, member=member)

        redeem(redemption_token=coupon.redemption_token, partner_id=partner.id)

        offer.refresh_from_db()
        assert offer.redemptions == 1

    def test_redeem_twice_reports_original_time(self, member, partner, offer):
        coupon = mint_coupon(offer_id=offer.id, member=member)
        first = redeem(redemption_token=coupon.redemption_token, partner_id=partner.id)

        with pytest.raises(AlreadyRedeemedError) as exc_info:
            redeem(redemption_token=coupon.redemption_token, partner_id=partner.id)

        assert exc_info.value.redeemed_at == first.redeemed_at
        offer.refresh_from_db()
        assert offer.redemptions == 1

    def test_redeemed_coupon_rescanned_after_expiry(self, member, partner, offer):
        coupon = mint_coupon(offer_id=offer.id, member=member)
        first = redeem(redemption_token=coupon.redemption_token, partner_id=partner.id)
        later = coupon.expiry_date + timedelta(days=1)

        with pytest.raises(AlreadyRedeemedError) as exc_info:
            redeem(redemption_token=coupon.redemption_token, partner_id=partner.id, now=later)

        assert exc_info.value.redeemed_at == first.redeemed_at
        coupon.refresh_from_db()
        assert coupon.status == CouponStatus.REDEEMED

    def test_unknown_token(self, partner):
        with pytest.raises(InvalidTokenError):
            redeem(redemption_token='no-such-token', partner_id=partner.id)

    def test_coupon_id_must_match_token(self, member, other_member, partner, offer):
        coupon = mint_coupon(offer_id=offer.id, member=member)
        other = mint_coupon(offer_id=offer.id, member=other_member)

        with pytest.raises(InvalidTokenError):
            redeem(
                redemption_token=coupon.redemption_token,
                partner_id=partner.id,
                coupon_id=str(other.id),
            )

    def test_malformed_coupon_id(self, member, partner, offer):
        coupon = mint_coupon(offer_id=offer.id, member=member)

        with pytest.raises(InvalidTokenError):
            redeem(
                redemption_token=coupon.redemption_token,
                partner_id=partner.id,
                coupon_id='not-a-uuid',
            )

    def test_wrong_partner(self, member, other_partner, offer):
        coupon = mint_coupon(offer_id=offer.id, member=member)

        with pytest.raises(WrongPartnerError):
            redeem(redemption_token=coupon.redemption_token, partner_id=other_partner.id)

        coupon.refresh_from_db()
        assert coupon.status == CouponStatus.ACTIVE

    def test_wrong_partner_is_logged(self, member, other_partner, offer, caplog):
        coupon = mint_coupon(offer_id=offer.id, member=member)

        with caplog.at_level('WARNING', logger='apps.coupons.services.redemption'):
            with pytest.raises(WrongPartnerError):
                redeem(redemption_token=coupon.redemption_token, partner_id=other_partner.id)

        assert str(coupon.id) in caplog.text

    def test_wrong_partner_checked_before_redeemed(self, member, partner, other_partner, offer):
        coupon = mint_coupon(offer_id=offer.id, member=member)
        redeem(redemption_token=coupon.redemption_token, partner_id=partner.id)

        with pytest.raises(WrongPartnerError):
            redeem(redemption_token=coupon.redemption_token, partner_id=other_partner.id)

    def test_partner_rejected_after_mint(self, member, partner, offer):
        coupon = mint_coupon(offer_id=offer.id, member=member)
        partner.status = PartnerStatus.REJECTED
        partner.save(update_fields=['status'])

        with pytest.raises(OfferNotEligibleError):
            redeem(redemption_token=coupon.redemption_token, partner_id=partner.id)

        coupon.refresh_from_db()
        assert coupon.status == CouponStatus.ACTIVE

    def test_expired_coupon(self, member, partner, offer):
        coupon = mint_coupon(offer_id=offer.id, member=member)
        later = coupon.expiry_date + timedelta(minutes=1)

        with pytest.raises(CouponExpiredError) as exc_info:
            redeem(redemption_token=coupon.redemption_token, partner_id=partner.id, now=later)

        assert exc_info.value.expiry_date == coupon.expiry_date
        coupon.refresh_from_db()
        assert coupon.status == CouponStatus.EXPIRED
        assert coupon.redeemed_at is None
        offer.refresh_from_db()
        assert offer.redemptions == 0

    def test_expired_coupon_stays_expired(self, member, partner, offer):
        coupon = mint_coupon(offer_id=offer.id, member=member)
        later = coupon.expiry_date + timedelta(minutes=1)
        with pytest.raises(CouponExpiredError):
            redeem(redemption_token=coupon.redemption_token, partner_id=partner.id, now=later)

        # Even with an earlier clock the persisted status wins
        with pytest.raises(CouponExpiredError):
            redeem(redemption_token=coupon.redemption_token, partner_id=partner.id)

    def test_redeem_at_expiry_instant_succeeds(self, member, partner, offer):
        coupon = mint_coupon(offer_id=offer.id, member=member)

        result = redeem(
            redemption_token=coupon.redemption_token,
            partner_id=partner.id,
            now=coupon.expiry_date,
        )

        assert result.coupon.status == CouponStatus.REDEEMED

    def test_lost_race_reports_winner(self, member, partner, offer):
        """A scan that validated before another scan committed still loses cleanly."""
        coupon = mint_coupon(offer_id=offer.id, member=member)
        winner_time = timezone.now()
        Coupon.objects.filter(id=coupon.id).update(
            status=CouponStatus.REDEEMED, redeemed_at=winner_time
        )

        stale = Coupon.objects.select_related('offer', 'partner', 'member').get(id=coupon.id)
        stale.status = CouponStatus.ACTIVE
        stale.redeemed_at = None

        with patch('apps.coupons.services.redemption.validate_token', return_value=stale):
            with pytest.raises(AlreadyRedeemedError) as exc_info:
                redeem(redemption_token=coupon.redemption_token, partner_id=partner.id)

        assert exc_info.value.redeemed_at == winner_time

    def test_counter_failure_does_not_undo_redemption(self, member, partner, offer):
        coupon = mint_coupon(offer_id=offer.id, member=member)

        with patch(
            'apps.offers.services.engagement.increment',
            side_effect=DatabaseError('counter table locked'),
        ):
            result = redeem(redemption_token=coupon.redemption_token, partner_id=partner.id)

        assert result.coupon.status == CouponStatus.REDEEMED
        coupon.refresh_from_db()
        assert coupon.status == CouponStatus.REDEEMED

    def test_validate_token_does_not_consume(self, member, partner, offer):
        coupon = mint_coupon(offer_id=offer.id, member=member)

        validated = validate_token(redemption_token=coupon.redemption_token, partner_id=partner.id)

        assert validated.id == coupon.id
        coupon.refresh_from_db()
        assert coupon.status == CouponStatus.ACTIVE

    def test_redeem_by_scan_json_payload(self, member, partner, offer):
        coupon = mint_coupon(offer_id=offer.id, member=member)

        result = redeem_by_scan(qr_payload=build_qr_payload(coupon), partner_id=partner.id)

        assert result.coupon.id == coupon.id

    def test_redeem_by_scan_bare_token(self, member, partner, offer):
        coupon = mint_coupon(offer_id=offer.id, member=member)

        result = redeem_by_scan(qr_payload=coupon.redemption_token, partner_id=partner.id)

        assert result.coupon.id == coupon.id

    def test_coupon_code_is_not_a_token(self, member, partner, offer):
        coupon = mint_coupon(offer_id=offer.id, member=member)

        with pytest.raises(InvalidTokenError):
            redeem_by_scan(qr_payload=coupon.coupon_code, partner_id=partner.id)


# =============================================================================
# Concurrency Tests (Race Conditions)
# =============================================================================

class TestConcurrency(TransactionTestCase):
    """
    Tests for the conditional writes using TransactionTestCase.

    Note: TransactionTestCase is required for testing actual database
    transactions and concurrency. Regular TestCase wraps tests in
    a transaction, which doesn't allow testing real concurrency.
    """

    def setUp(self):
        """Create test fixtures."""
        self.member = User.objects.create_user(
            email='member@test.com',
            password='TestPass123!',
            display_name='Member',
        )
        self.partner = make_partner('shop@test.com', 'Test Shop')
        self.offer = make_offer(self.partner)

    def _run_threads(self, target, count):
        results = []
        errors = []

        def run():
            try:
                results.append(target())
            except Exception as e:
                errors.append(e)
            finally:
                connection.close()

        threads = [threading.Thread(target=run) for _ in range(count)]
        for thread in threads:
            thread.start()
        for thread in threads:
            thread.join()
        return results, errors

    def test_concurrent_redeems_single_winner(self):
        """N concurrent scans of one coupon: one success, N-1 AlreadyRedeemed."""
        coupon = mint_coupon(offer_id=self.offer.id, member=self.member)
        attempts = 8

        results, errors = self._run_threads(
            lambda: redeem(redemption_token=coupon.redemption_token, partner_id=self.partner.id),
            attempts,
        )

        assert len(results) == 1, f"Expected one winner, got {len(results)}: {errors}"
        assert len(errors) == attempts - 1
        assert all(isinstance(e, AlreadyRedeemedError) for e in errors), errors
        assert {e.redeemed_at for e in errors} == {results[0].redeemed_at}

        coupon.refresh_from_db()
        assert coupon.status == CouponStatus.REDEEMED
        self.offer.refresh_from_db()
        assert self.offer.redemptions == 1

    def test_concurrent_mints_single_row(self):
        """Two concurrent mints for the same pair persist exactly one coupon."""
        results, errors = self._run_threads(
            lambda: mint_coupon(offer_id=self.offer.id, member=self.member),
            2,
        )

        assert errors == []
        assert len(results) == 2
        assert results[0].id == results[1].id
        assert Coupon.objects.filter(offer=self.offer, member=self.member).count() == 1
