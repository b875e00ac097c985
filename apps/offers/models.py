from django.conf import settings
from django.core.exceptions import ValidationError
from django.core.validators import MinValueValidator, MaxValueValidator
from django.db import models
from django.db.models import F, Q
from decimal import Decimal
import uuid


def default_coupon_color():
    return settings.DEFAULT_COUPON_COLOR


class EngagementKind(models.TextChoices):
    VIEW = 'view', 'View'
    CLICK = 'click', 'Click'
    REDEMPTION = 'redemption', 'Redemption'


# Offer column incremented for each engagement kind
COUNTER_FIELDS = {
    EngagementKind.VIEW: 'views',
    EngagementKind.CLICK: 'clicks',
    EngagementKind.REDEMPTION: 'redemptions',
}


class Offer(models.Model):
    """Time-bounded discount published by a partner."""

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    partner = models.ForeignKey(
        'partners.Partner',
        on_delete=models.CASCADE,
        related_name='offers'
    )

    # Content (opaque to the coupon ledger)
    title = models.CharField(max_length=200)
    description = models.TextField(blank=True)
    terms_and_conditions = models.TextField(blank=True)
    category = models.CharField(max_length=100, blank=True)

    # Pricing
    original_price = models.DecimalField(
        max_digits=10,
        decimal_places=2,
        validators=[MinValueValidator(Decimal('0.00'))]
    )
    discounted_price = models.DecimalField(
        max_digits=10,
        decimal_places=2,
        validators=[MinValueValidator(Decimal('0.00'))]
    )
    discount_percent = models.PositiveSmallIntegerField(
        default=0,
        validators=[MaxValueValidator(100)]
    )

    # Availability
    expiry_date = models.DateTimeField()
    is_active = models.BooleanField(default=True)

    # Coupon minting
    coupon_color = models.CharField(max_length=7, default=default_coupon_color)
    coupon_expiry_days = models.PositiveIntegerField(null=True, blank=True)

    # Engagement counters
    views = models.PositiveIntegerField(default=0)
    clicks = models.PositiveIntegerField(default=0)
    redemptions = models.PositiveIntegerField(default=0)

    # Timestamps
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        db_table = 'offers'
        indexes = [
            models.Index(fields=['partner', 'is_active'], name='offers_partner_active_idx'),
            models.Index(fields=['expiry_date'], name='offers_expiry_idx'),
            models.Index(fields=['category'], name='offers_category_idx'),
        ]
        constraints = [
            models.CheckConstraint(
                condition=Q(discounted_price__lte=F('original_price')),
                name='offers_discount_not_above_original',
            ),
        ]
        ordering = ['-created_at']

    def __str__(self):
        return f"{self.title} ({self.discount_percent}% off)"

    def clean(self):
        if (
            self.discounted_price is not None
            and self.original_price is not None
            and self.discounted_price > self.original_price
        ):
            raise ValidationError({
                'discounted_price': 'Discounted price cannot exceed the original price.'
            })

    def is_expired(self, now):
        return self.expiry_date <= now
