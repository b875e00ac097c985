from rest_framework import serializers
from apps.accounts.serializers import RegistrationInputSerializer
from .models import Partner


class PartnerSerializer(serializers.ModelSerializer):
    """Partner profile with approval state."""

    email = serializers.EmailField(source='user.email', read_only=True)

    class Meta:
        model = Partner
        fields = [
            'id',
            'email',
            'partner_name',
            'shop_name',
            'category',
            'city',
            'district',
            'mobile_number',
            'status',
            'rejection_reason',
            'reviewed_at',
            'created_at',
        ]
        read_only_fields = fields


class RejectPartnerInputSerializer(serializers.Serializer):
    """
    Validate input for rejecting a partner.

    Fields:
        reason (str): Optional reason shown to the applicant
    """

    reason = serializers.CharField(max_length=1000, required=False, allow_blank=True)


class PartnerRegistrationInputSerializer(RegistrationInputSerializer):
    """Account credentials plus the business details reviewed by admins."""

    partner_name = serializers.CharField(max_length=200)
    shop_name = serializers.CharField(max_length=200)
    category = serializers.CharField(max_length=100, required=False, allow_blank=True)
    city = serializers.CharField(max_length=100, required=False, allow_blank=True)
    district = serializers.CharField(max_length=100, required=False, allow_blank=True)
    mobile_number = serializers.RegexField(
        regex=r'^\+?[0-9 ]{7,20}$',
        required=False,
        allow_blank=True
    )
