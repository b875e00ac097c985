from rest_framework import serializers
from .models import Offer


# =============================================================================
# Input Serializers
# =============================================================================

class OfferFilterSerializer(serializers.Serializer):
    """
    Validate query parameters for browsing offers.

    Query Parameters:
        category (str): Filter by category
        city (str): Filter by partner city
        search (str): Free-text search over title, description and shop name
    """

    category = serializers.CharField(max_length=100, required=False, allow_blank=True)
    city = serializers.CharField(max_length=100, required=False, allow_blank=True)
    search = serializers.CharField(max_length=200, required=False, allow_blank=True)


class OfferWriteSerializer(serializers.Serializer):
    """
    Validate offer create/update payloads.

    Partial updates only validate the fields that are sent.
    """

    title = serializers.CharField(max_length=200)
    description = serializers.CharField(required=False, allow_blank=True)
    terms_and_conditions = serializers.CharField(required=False, allow_blank=True)
    category = serializers.CharField(max_length=100, required=False, allow_blank=True)
    original_price = serializers.DecimalField(max_digits=10, decimal_places=2, min_value=0)
    discounted_price = serializers.DecimalField(max_digits=10, decimal_places=2, min_value=0)
    discount_percent = serializers.IntegerField(min_value=0, max_value=100, required=False)
    expiry_date = serializers.DateTimeField()
    is_active = serializers.BooleanField(required=False)
    coupon_color = serializers.RegexField(regex=r'^#[0-9a-fA-F]{6}$', required=False)
    coupon_expiry_days = serializers.IntegerField(min_value=0, required=False, allow_null=True)

    def validate(self, attrs):
        """Validate price relationship when both prices are present."""
        original = attrs.get('original_price')
        discounted = attrs.get('discounted_price')
        if original is not None and discounted is not None and discounted > original:
            raise serializers.ValidationError({
                'discounted_price': 'Discounted price cannot exceed the original price'
            })
        return attrs


# =============================================================================
# Output Serializers
# =============================================================================

class OfferSerializer(serializers.ModelSerializer):
    """Offer with partner summary and engagement counters."""

    shop_name = serializers.CharField(source='partner.shop_name', read_only=True)
    analytics = serializers.SerializerMethodField()

    class Meta:
        model = Offer
        fields = [
            'id',
            'partner',
            'shop_name',
            'title',
            'description',
            'terms_and_conditions',
            'category',
            'original_price',
            'discounted_price',
            'discount_percent',
            'expiry_date',
            'is_active',
            'coupon_color',
            'coupon_expiry_days',
            'analytics',
            'created_at',
            'updated_at',
        ]
        read_only_fields = fields

    def get_analytics(self, obj):
        return {
            'views': obj.views,
            'clicks': obj.clicks,
            'redemptions': obj.redemptions,
        }
