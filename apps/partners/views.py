from rest_framework import status
from rest_framework.decorators import api_view, permission_classes
from rest_framework.pagination import PageNumberPagination
from rest_framework.permissions import AllowAny, IsAuthenticated
from rest_framework.response import Response
from drf_spectacular.utils import extend_schema

from apps.accounts.permissions import IsPlatformAdmin, IsPartnerUser
from .serializers import (
    PartnerSerializer,
    RejectPartnerInputSerializer,
    PartnerRegistrationInputSerializer,
)
from .services import (
    get_pending_partners,
    approve_partner,
    reject_partner,
    register_partner,
    PartnerNotFoundError,
    InvalidStatusTransitionError,
    PartnerRegistrationError,
)


class PartnerPagination(PageNumberPagination):
    """Custom pagination for partner applications."""
    page_size = 10
    page_size_query_param = 'limit'
    max_page_size = 100


def _review_error_response(error):
    if isinstance(error, PartnerNotFoundError):
        return Response({'error': str(error), 'code': 'not_found'}, status=status.HTTP_404_NOT_FOUND)
    return Response({'error': str(error), 'code': 'invalid_transition'}, status=status.HTTP_409_CONFLICT)


@extend_schema(
    responses={200: PartnerSerializer(many=True)},
    description="List pending partner applications (admin only).",
    tags=['partners'],
)
@api_view(['GET'])
@permission_classes([IsAuthenticated, IsPlatformAdmin])
def pending_partners(request):
    """List pending partner applications - thin HTTP handler."""
    paginator = PartnerPagination()
    page = paginator.paginate_queryset(get_pending_partners(), request)
    serializer = PartnerSerializer(page, many=True)
    return paginator.get_paginated_response(serializer.data)


@extend_schema(
    request=None,
    responses={200: PartnerSerializer},
    description="Approve a pending partner (admin only).",
    tags=['partners'],
)
@api_view(['PATCH'])
@permission_classes([IsAuthenticated, IsPlatformAdmin])
def approve(request, partner_id):
    """Approve a partner - thin HTTP handler."""
    try:
        partner = approve_partner(partner_id=partner_id, reviewer=request.user)
    except (PartnerNotFoundError, InvalidStatusTransitionError) as e:
        return _review_error_response(e)
    return Response(PartnerSerializer(partner).data)


@extend_schema(
    request=RejectPartnerInputSerializer,
    responses={200: PartnerSerializer},
    description="Reject a pending partner with an optional reason (admin only).",
    tags=['partners'],
)
@api_view(['PATCH'])
@permission_classes([IsAuthenticated, IsPlatformAdmin])
def reject(request, partner_id):
    """Reject a partner - thin HTTP handler."""
    input_serializer = RejectPartnerInputSerializer(data=request.data)
    input_serializer.is_valid(raise_exception=True)

    try:
        partner = reject_partner(
            partner_id=partner_id,
            reviewer=request.user,
            reason=input_serializer.validated_data.get('reason', '')
        )
    except (PartnerNotFoundError, InvalidStatusTransitionError) as e:
        return _review_error_response(e)
    return Response(PartnerSerializer(partner).data)


@extend_schema(
    responses={200: PartnerSerializer},
    description="Get the current partner's own profile and approval status.",
    tags=['partners'],
)
@api_view(['GET'])
@permission_classes([IsAuthenticated, IsPartnerUser])
def my_profile(request):
    """Current partner's profile."""
    return Response(PartnerSerializer(request.user.partner_profile).data)


@extend_schema(
    request=PartnerRegistrationInputSerializer,
    responses={201: PartnerSerializer},
    description="Apply as a partner. The application stays pending until an admin reviews it.",
    tags=['partners'],
)
@api_view(['POST'])
@permission_classes([AllowAny])
def register(request):
    """Submit a partner application - thin HTTP handler."""
    input_serializer = PartnerRegistrationInputSerializer(data=request.data)
    input_serializer.is_valid(raise_exception=True)

    data = input_serializer.validated_data.copy()
    data.pop('password_confirm', None)

    try:
        partner = register_partner(**data)
    except PartnerRegistrationError as e:
        return Response({'error': str(e)}, status=status.HTTP_400_BAD_REQUEST)

    return Response(PartnerSerializer(partner).data, status=status.HTTP_201_CREATED)
