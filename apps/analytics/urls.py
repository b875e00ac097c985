from django.urls import path
from . import views

app_name = 'analytics'

urlpatterns = [
    path('admin/', views.admin_analytics, name='admin'),
    path('partner/', views.partner_analytics, name='partner'),
]
