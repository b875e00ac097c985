from django.db import models
import uuid


class PartnerStatus(models.TextChoices):
    PENDING = 'pending', 'Pending'
    APPROVED = 'approved', 'Approved'
    REJECTED = 'rejected', 'Rejected'


class Partner(models.Model):
    """Business profile owned by a partner account, gated by admin approval."""

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    user = models.OneToOneField(
        'accounts.User',
        on_delete=models.CASCADE,
        related_name='partner_profile'
    )

    # Business details
    partner_name = models.CharField(max_length=200)
    shop_name = models.CharField(max_length=200)
    category = models.CharField(max_length=100, blank=True)
    city = models.CharField(max_length=100, blank=True)
    district = models.CharField(max_length=100, blank=True)
    mobile_number = models.CharField(max_length=32, blank=True)

    # Approval workflow
    status = models.CharField(
        max_length=20,
        choices=PartnerStatus.choices,
        default=PartnerStatus.PENDING
    )
    rejection_reason = models.TextField(blank=True)
    reviewed_at = models.DateTimeField(null=True, blank=True)
    reviewed_by = models.ForeignKey(
        'accounts.User',
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name='reviewed_partners'
    )

    # Timestamps
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        db_table = 'partners'
        indexes = [
            models.Index(fields=['status', 'created_at'], name='partners_status_created_idx'),
        ]
        ordering = ['-created_at']

    def __str__(self):
        return f"{self.shop_name} ({self.status})"

    @property
    def is_approved(self):
        return self.status == PartnerStatus.APPROVED
