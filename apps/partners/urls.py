from django.urls import path
from . import views

app_name = 'partners'

urlpatterns = [
    # Partner self-service
    path('register/', views.register, name='register'),
    path('me/', views.my_profile, name='my-profile'),

    # Admin approval workflow
    path('pending/', views.pending_partners, name='pending'),
    path('<uuid:partner_id>/approve/', views.approve, name='approve'),
    path('<uuid:partner_id>/reject/', views.reject, name='reject'),
]
