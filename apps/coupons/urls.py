from django.urls import path
from . import views

app_name = 'coupons'

urlpatterns = [
    # Member
    path('generate/', views.generate, name='generate'),
    path('my-coupons/', views.my_coupons, name='my-coupons'),
    path('member/stats/', views.member_stats, name='member-stats'),

    # Partner
    path('partner/', views.partner_coupons, name='partner-coupons'),
    path('partner/redeemed/', views.partner_redemptions, name='partner-redemptions'),
    path('validate/', views.validate, name='validate'),
    path('redeem/', views.redeem, name='redeem'),

    path('<uuid:coupon_id>/', views.coupon_detail, name='detail'),
]
