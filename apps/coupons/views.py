import logging

from rest_framework import status
from rest_framework.decorators import api_view, permission_classes
from rest_framework.pagination import PageNumberPagination
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response
from drf_spectacular.utils import extend_schema

from apps.accounts.permissions import IsMember, IsPartnerUser
from apps.offers.services import OfferNotFoundError
from .serializers import (
    CouponSerializer,
    PartnerCouponSerializer,
    MemberCouponStatsSerializer,
    MintCouponInputSerializer,
    ScanInputSerializer,
    MemberCouponFilterSerializer,
    PartnerCouponFilterSerializer,
)
from .services import (
    mint_coupon,
    get_coupon,
    list_member_coupons,
    list_partner_coupons,
    list_partner_redemptions,
    get_member_coupon_stats,
    validate_scan,
    redeem_by_scan,
    CouponNotFoundError,
    OfferNotEligibleError,
    InvalidOfferStateError,
    InvalidTokenError,
    WrongPartnerError,
    CouponExpiredError,
    AlreadyRedeemedError,
    CodeGenerationError,
)

logger = logging.getLogger(__name__)

# Unknown token and another partner's coupon look the same to the scanner
NOT_VALID_HERE = 'This coupon is not valid at this location'


class CouponPagination(PageNumberPagination):
    """Custom pagination for coupons."""
    page_size = 20
    page_size_query_param = 'limit'
    max_page_size = 100


def _server_error(error):
    logger.error("Coupon operation failed: %s", error)
    return Response(
        {'error': 'Could not issue coupon, please try again later', 'code': 'server_error'},
        status=status.HTTP_500_INTERNAL_SERVER_ERROR
    )


def _scan_error_response(error):
    """Map a failed validation or redemption to an HTTP response."""
    if isinstance(error, (InvalidTokenError, WrongPartnerError)):
        return Response(
            {'error': NOT_VALID_HERE, 'code': 'not_valid_here'},
            status=status.HTTP_404_NOT_FOUND
        )
    if isinstance(error, OfferNotEligibleError):
        return Response(
            {'error': str(error), 'code': 'offer_not_eligible'},
            status=status.HTTP_403_FORBIDDEN
        )
    if isinstance(error, CouponExpiredError):
        return Response(
            {'error': str(error), 'code': 'expired', 'expiry_date': error.expiry_date},
            status=status.HTTP_410_GONE
        )
    return Response(
        {'error': str(error), 'code': 'already_redeemed', 'redeemed_at': error.redeemed_at},
        status=status.HTTP_409_CONFLICT
    )


SCAN_ERRORS = (
    InvalidTokenError,
    WrongPartnerError,
    OfferNotEligibleError,
    CouponExpiredError,
    AlreadyRedeemedError,
)


# =============================================================================
# Member endpoints
# =============================================================================

@extend_schema(
    request=MintCouponInputSerializer,
    responses={201: CouponSerializer},
    description="Get a coupon for an offer. Returns the existing active coupon if the member already holds one.",
    tags=['coupons'],
)
@api_view(['POST'])
@permission_classes([IsAuthenticated, IsMember])
def generate(request):
    """Mint a coupon - thin HTTP handler."""
    input_serializer = MintCouponInputSerializer(data=request.data)
    input_serializer.is_valid(raise_exception=True)

    try:
        coupon = mint_coupon(
            offer_id=input_serializer.validated_data['offer_id'],
            member=request.user,
        )
    except OfferNotFoundError as e:
        return Response({'error': str(e), 'code': 'not_found'}, status=status.HTTP_404_NOT_FOUND)
    except OfferNotEligibleError as e:
        return Response({'error': str(e), 'code': 'offer_not_eligible'}, status=status.HTTP_400_BAD_REQUEST)
    except (InvalidOfferStateError, CodeGenerationError) as e:
        return _server_error(e)

    return Response(CouponSerializer(coupon).data, status=status.HTTP_201_CREATED)


@extend_schema(
    parameters=[MemberCouponFilterSerializer],
    responses={200: CouponSerializer(many=True)},
    description="List the current member's coupons, optionally filtered by status.",
    tags=['coupons'],
)
@api_view(['GET'])
@permission_classes([IsAuthenticated, IsMember])
def my_coupons(request):
    """List member coupons - thin HTTP handler."""
    filter_serializer = MemberCouponFilterSerializer(data=request.query_params)
    filter_serializer.is_valid(raise_exception=True)

    queryset = list_member_coupons(
        member=request.user,
        status=filter_serializer.validated_data.get('status'),
    )
    paginator = CouponPagination()
    page = paginator.paginate_queryset(queryset, request)
    return paginator.get_paginated_response(CouponSerializer(page, many=True).data)


@extend_schema(
    responses={200: MemberCouponStatsSerializer},
    description="Coupon counts for the current member.",
    tags=['coupons'],
)
@api_view(['GET'])
@permission_classes([IsAuthenticated, IsMember])
def member_stats(request):
    """Member coupon statistics - thin HTTP handler."""
    stats = get_member_coupon_stats(member=request.user)
    return Response(MemberCouponStatsSerializer(stats).data)


@extend_schema(
    responses={200: CouponSerializer},
    description="Get one of the current member's coupons.",
    tags=['coupons'],
)
@api_view(['GET'])
@permission_classes([IsAuthenticated, IsMember])
def coupon_detail(request, coupon_id):
    """Coupon detail - thin HTTP handler."""
    try:
        coupon = get_coupon(coupon_id=coupon_id, member=request.user)
    except CouponNotFoundError as e:
        return Response({'error': str(e), 'code': 'not_found'}, status=status.HTTP_404_NOT_FOUND)
    return Response(CouponSerializer(coupon).data)


# =============================================================================
# Partner endpoints
# =============================================================================

@extend_schema(
    parameters=[PartnerCouponFilterSerializer],
    responses={200: PartnerCouponSerializer(many=True)},
    description="List coupons issued against the current partner's offers.",
    tags=['coupons'],
)
@api_view(['GET'])
@permission_classes([IsAuthenticated, IsPartnerUser])
def partner_coupons(request):
    """List partner coupons - thin HTTP handler."""
    filter_serializer = PartnerCouponFilterSerializer(data=request.query_params)
    filter_serializer.is_valid(raise_exception=True)
    params = filter_serializer.validated_data

    queryset = list_partner_coupons(
        partner_id=request.user.partner_profile.id,
        status=params.get('status'),
        offer_id=params.get('offer'),
        date_from=params.get('date_from'),
        date_to=params.get('date_to'),
    )
    paginator = CouponPagination()
    page = paginator.paginate_queryset(queryset, request)
    return paginator.get_paginated_response(PartnerCouponSerializer(page, many=True).data)


@extend_schema(
    responses={200: PartnerCouponSerializer(many=True)},
    description="Redemption history of the current partner, most recent first.",
    tags=['coupons'],
)
@api_view(['GET'])
@permission_classes([IsAuthenticated, IsPartnerUser])
def partner_redemptions(request):
    """Partner redemption history - thin HTTP handler."""
    queryset = list_partner_redemptions(partner_id=request.user.partner_profile.id)
    paginator = CouponPagination()
    page = paginator.paginate_queryset(queryset, request)
    return paginator.get_paginated_response(PartnerCouponSerializer(page, many=True).data)


@extend_schema(
    request=ScanInputSerializer,
    responses={200: PartnerCouponSerializer},
    description="Check a scanned coupon without redeeming it.",
    tags=['coupons'],
)
@api_view(['POST'])
@permission_classes([IsAuthenticated, IsPartnerUser])
def validate(request):
    """Validate a scan - thin HTTP handler."""
    input_serializer = ScanInputSerializer(data=request.data)
    input_serializer.is_valid(raise_exception=True)

    try:
        coupon = validate_scan(
            qr_payload=input_serializer.validated_data['qr_payload'],
            partner_id=request.user.partner_profile.id,
        )
    except SCAN_ERRORS as e:
        return _scan_error_response(e)

    return Response(PartnerCouponSerializer(coupon).data)


@extend_schema(
    request=ScanInputSerializer,
    responses={200: PartnerCouponSerializer},
    description="Redeem a scanned coupon. Succeeds exactly once per coupon.",
    tags=['coupons'],
)
@api_view(['POST'])
@permission_classes([IsAuthenticated, IsPartnerUser])
def redeem(request):
    """Redeem a scan - thin HTTP handler."""
    input_serializer = ScanInputSerializer(data=request.data)
    input_serializer.is_valid(raise_exception=True)

    try:
        result = redeem_by_scan(
            qr_payload=input_serializer.validated_data['qr_payload'],
            partner_id=request.user.partner_profile.id,
        )
    except SCAN_ERRORS as e:
        return _scan_error_response(e)

    return Response(PartnerCouponSerializer(result.coupon).data)
