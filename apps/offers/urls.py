from django.urls import path, include
from rest_framework.routers import DefaultRouter
from . import views

app_name = 'offers'

router = DefaultRouter()
router.register(r'', views.OfferViewSet, basename='offer')

urlpatterns = [
    # GET    /api/offers/              - Browse offers
    # POST   /api/offers/              - Publish offer (partner)
    # GET    /api/offers/mine/         - Partner's own offers
    # GET    /api/offers/{id}/         - Offer detail (counts a view)
    # PATCH  /api/offers/{id}/         - Edit offer (owner)
    # POST   /api/offers/{id}/click/   - Count a click
    path('', include(router.urls)),
]
