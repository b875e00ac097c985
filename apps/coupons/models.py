from django.db import models
from django.db.models import Q
import uuid


class CouponStatus(models.TextChoices):
    ACTIVE = 'active', 'Active'
    REDEEMED = 'redeemed', 'Redeemed'
    EXPIRED = 'expired', 'Expired'


class Coupon(models.Model):
    """
    Single-use redemption right minted from an Offer for one member.

    Status only moves away from ACTIVE once: to REDEEMED through the
    redemption compare-and-swap, or to EXPIRED when a read or scan
    observes that expiry_date has passed.
    """

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    offer = models.ForeignKey(
        'offers.Offer',
        on_delete=models.CASCADE,
        related_name='coupons'
    )
    # Copied from offer.partner at mint, redemption checks it without a join
    partner = models.ForeignKey(
        'partners.Partner',
        on_delete=models.CASCADE,
        related_name='coupons'
    )
    member = models.ForeignKey(
        'accounts.User',
        on_delete=models.CASCADE,
        related_name='coupons'
    )

    coupon_code = models.CharField(max_length=32, unique=True)
    redemption_token = models.CharField(max_length=64, unique=True)

    status = models.CharField(
        max_length=20,
        choices=CouponStatus.choices,
        default=CouponStatus.ACTIVE
    )
    issued_at = models.DateTimeField()
    expiry_date = models.DateTimeField()
    redeemed_at = models.DateTimeField(null=True, blank=True)
    coupon_color = models.CharField(max_length=7)

    class Meta:
        db_table = 'coupons'
        indexes = [
            models.Index(fields=['member', 'status'], name='coupons_member_status_idx'),
            models.Index(fields=['partner', 'status'], name='coupons_partner_status_idx'),
            models.Index(fields=['offer', 'issued_at'], name='coupons_offer_issued_idx'),
            models.Index(fields=['expiry_date'], name='coupons_expiry_idx'),
        ]
        constraints = [
            models.UniqueConstraint(
                fields=['offer', 'member'],
                condition=Q(status='active'),
                name='coupons_one_active_per_member_offer',
            ),
            models.CheckConstraint(
                condition=(
                    Q(status='redeemed', redeemed_at__isnull=False) |
                    (~Q(status='redeemed') & Q(redeemed_at__isnull=True))
                ),
                name='coupons_redeemed_at_matches_status',
            ),
        ]
        ordering = ['-issued_at']

    def __str__(self):
        return f"{self.coupon_code} ({self.status})"

    def is_past_expiry(self, now):
        return now > self.expiry_date
