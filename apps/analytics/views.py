from rest_framework.decorators import api_view, permission_classes
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response
from rest_framework import status
from drf_spectacular.utils import extend_schema

from apps.accounts.permissions import IsPlatformAdmin, IsPartnerUser
from .analytics import AnalyticsQueries, AnalyticsScope
from .serializers import (
    PeriodQuerySerializer,
    AnalyticsSummarySerializer,
    ErrorSerializer,
)
from .exceptions import AnalyticsServiceError


@extend_schema(
    parameters=[PeriodQuerySerializer],
    responses={
        200: AnalyticsSummarySerializer,
        400: ErrorSerializer,
    },
    description="Platform-wide offers, coupons, partners and users (admin only).",
    tags=['analytics'],
)
@api_view(['GET'])
@permission_classes([IsAuthenticated, IsPlatformAdmin])
def admin_analytics(request):
    """Platform analytics - thin HTTP handler."""
    query_serializer = PeriodQuerySerializer(data=request.query_params)
    query_serializer.is_valid(raise_exception=True)
    params = query_serializer.validated_data

    try:
        data = AnalyticsQueries.summarize(
            AnalyticsScope.PLATFORM,
            start_date=params.get('start_date'),
            end_date=params.get('end_date'),
        )
    except AnalyticsServiceError as e:
        return Response({'error': str(e)}, status=status.HTTP_400_BAD_REQUEST)

    return Response(AnalyticsSummarySerializer(data).data)


@extend_schema(
    parameters=[PeriodQuerySerializer],
    responses={
        200: AnalyticsSummarySerializer,
        400: ErrorSerializer,
    },
    description="Offers, coupons and per-offer engagement of the current partner.",
    tags=['analytics'],
)
@api_view(['GET'])
@permission_classes([IsAuthenticated, IsPartnerUser])
def partner_analytics(request):
    """Partner analytics - thin HTTP handler."""
    query_serializer = PeriodQuerySerializer(data=request.query_params)
    query_serializer.is_valid(raise_exception=True)
    params = query_serializer.validated_data
    partner_id = request.user.partner_profile.id

    try:
        data = AnalyticsQueries.summarize(
            AnalyticsScope.PARTNER,
            partner_id=partner_id,
            start_date=params.get('start_date'),
            end_date=params.get('end_date'),
        )
    except AnalyticsServiceError as e:
        return Response({'error': str(e)}, status=status.HTTP_400_BAD_REQUEST)

    data['offer_breakdown'] = AnalyticsQueries.partner_offer_breakdown(partner_id)
    return Response(AnalyticsSummarySerializer(data).data)
