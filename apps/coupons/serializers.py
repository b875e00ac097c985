from rest_framework import serializers
from .models import Coupon, CouponStatus
from .services import build_qr_payload


# =============================================================================
# Input Serializers
# =============================================================================

class MintCouponInputSerializer(serializers.Serializer):
    offer_id = serializers.UUIDField()


class ScanInputSerializer(serializers.Serializer):
    """QR payload as scanned at the partner's counter, JSON or bare token."""

    qr_payload = serializers.CharField(max_length=512, trim_whitespace=True)


class MemberCouponFilterSerializer(serializers.Serializer):
    status = serializers.ChoiceField(choices=CouponStatus.choices, required=False)


class PartnerCouponFilterSerializer(serializers.Serializer):
    """
    Validate query parameters for a partner's coupon listing.

    Query Parameters:
        status (str): Coupon status
        offer (UUID): Restrict to one offer
        date_from (date): Issued on or after
        date_to (date): Issued on or before
    """

    status = serializers.ChoiceField(choices=CouponStatus.choices, required=False)
    offer = serializers.UUIDField(required=False)
    date_from = serializers.DateField(required=False)
    date_to = serializers.DateField(required=False)

    def validate(self, attrs):
        date_from = attrs.get('date_from')
        date_to = attrs.get('date_to')
        if date_from and date_to and date_from > date_to:
            raise serializers.ValidationError({
                'date_to': 'date_to must be on or after date_from'
            })
        return attrs


# =============================================================================
# Output Serializers
# =============================================================================

class CouponSerializer(serializers.ModelSerializer):
    """Coupon as its member sees it, including the QR payload."""

    offer_title = serializers.CharField(source='offer.title', read_only=True)
    shop_name = serializers.CharField(source='partner.shop_name', read_only=True)
    discount_percent = serializers.IntegerField(source='offer.discount_percent', read_only=True)
    qr_payload = serializers.SerializerMethodField()

    class Meta:
        model = Coupon
        fields = [
            'id',
            'offer',
            'offer_title',
            'partner',
            'shop_name',
            'discount_percent',
            'coupon_code',
            'qr_payload',
            'status',
            'issued_at',
            'expiry_date',
            'redeemed_at',
            'coupon_color',
        ]
        read_only_fields = fields

    def get_qr_payload(self, obj):
        return build_qr_payload(obj)


class PartnerCouponSerializer(serializers.ModelSerializer):
    """Coupon as the issuing partner sees it. The redemption token is never exposed."""

    offer_title = serializers.CharField(source='offer.title', read_only=True)
    member_name = serializers.CharField(source='member.get_display_name', read_only=True)

    class Meta:
        model = Coupon
        fields = [
            'id',
            'offer',
            'offer_title',
            'member_name',
            'coupon_code',
            'status',
            'issued_at',
            'expiry_date',
            'redeemed_at',
        ]
        read_only_fields = fields


class MemberCouponStatsSerializer(serializers.Serializer):
    total_generated = serializers.IntegerField()
    total_redeemed = serializers.IntegerField()
    active_coupons = serializers.IntegerField()
