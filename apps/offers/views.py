from rest_framework import viewsets, status
from rest_framework.decorators import action
from rest_framework.pagination import PageNumberPagination
from rest_framework.permissions import AllowAny, IsAuthenticated
from rest_framework.response import Response

from apps.accounts.permissions import IsPartnerUser
from .serializers import OfferSerializer, OfferWriteSerializer, OfferFilterSerializer
from .services import (
    get_offer_by_id,
    get_browsable_offers,
    get_partner_offers,
    create_offer,
    update_offer,
    record_view,
    record_click,
    OfferNotFoundError,
    PartnerNotApprovedError,
    NotOfferOwnerError,
    InvalidOfferDataError,
)


class OfferPagination(PageNumberPagination):
    """Custom pagination for offers."""
    page_size = 20
    page_size_query_param = 'limit'
    max_page_size = 100


class OfferViewSet(viewsets.GenericViewSet):
    """
    ViewSet for offers.

    All business logic is handled by services.
    Views are thin HTTP handlers only.

    list: Browse offers currently open for coupons
    retrieve: Get an offer (counts a view)
    create: Publish an offer (approved partners only)
    partial_update: Edit own offer (partners only)
    click: Count a click-through
    mine: List the current partner's offers
    """

    serializer_class = OfferSerializer
    pagination_class = OfferPagination
    lookup_value_regex = '[0-9a-f-]{36}'

    def get_permissions(self):
        """Set permissions based on action."""
        if self.action in ['create', 'partial_update', 'mine']:
            return [IsAuthenticated(), IsPartnerUser()]
        return [AllowAny()]

    def list(self, request):
        filter_serializer = OfferFilterSerializer(data=request.query_params)
        filter_serializer.is_valid(raise_exception=True)
        params = filter_serializer.validated_data

        queryset = get_browsable_offers(
            category=params.get('category') or None,
            search=params.get('search') or None,
            city=params.get('city') or None,
        )
        page = self.paginate_queryset(queryset)
        return self.get_paginated_response(OfferSerializer(page, many=True).data)

    def retrieve(self, request, pk=None):
        try:
            offer = get_offer_by_id(offer_id=pk)
        except OfferNotFoundError as e:
            return Response({'error': str(e), 'code': 'not_found'}, status=status.HTTP_404_NOT_FOUND)

        record_view(offer.id)
        offer.refresh_from_db(fields=['views'])
        return Response(OfferSerializer(offer).data)

    def create(self, request):
        serializer = OfferWriteSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        try:
            offer = create_offer(partner=request.user.partner_profile, **serializer.validated_data)
        except PartnerNotApprovedError as e:
            return Response({'error': str(e), 'code': 'partner_not_approved'}, status=status.HTTP_403_FORBIDDEN)
        except InvalidOfferDataError as e:
            return Response({'error': str(e), 'code': 'invalid_offer'}, status=status.HTTP_400_BAD_REQUEST)

        return Response(OfferSerializer(offer).data, status=status.HTTP_201_CREATED)

    def partial_update(self, request, pk=None):
        serializer = OfferWriteSerializer(data=request.data, partial=True)
        serializer.is_valid(raise_exception=True)

        try:
            offer = update_offer(
                offer_id=pk,
                partner=request.user.partner_profile,
                **serializer.validated_data
            )
        except OfferNotFoundError as e:
            return Response({'error': str(e), 'code': 'not_found'}, status=status.HTTP_404_NOT_FOUND)
        except NotOfferOwnerError as e:
            return Response({'error': str(e), 'code': 'not_owner'}, status=status.HTTP_403_FORBIDDEN)
        except PartnerNotApprovedError as e:
            return Response({'error': str(e), 'code': 'partner_not_approved'}, status=status.HTTP_403_FORBIDDEN)
        except InvalidOfferDataError as e:
            return Response({'error': str(e), 'code': 'invalid_offer'}, status=status.HTTP_400_BAD_REQUEST)

        return Response(OfferSerializer(offer).data)

    @action(detail=True, methods=['post'])
    def click(self, request, pk=None):
        """
        Count a click-through on an offer.

        POST /api/offers/{id}/click/
        """
        try:
            offer = get_offer_by_id(offer_id=pk)
        except OfferNotFoundError as e:
            return Response({'error': str(e), 'code': 'not_found'}, status=status.HTTP_404_NOT_FOUND)

        record_click(offer.id)
        return Response(status=status.HTTP_204_NO_CONTENT)

    @action(detail=False, methods=['get'])
    def mine(self, request):
        """
        List the current partner's offers with counters.

        GET /api/offers/mine/
        """
        queryset = get_partner_offers(partner=request.user.partner_profile)
        page = self.paginate_queryset(queryset)
        return self.get_paginated_response(OfferSerializer(page, many=True).data)
