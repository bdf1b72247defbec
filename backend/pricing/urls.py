from django.urls import path
from . import views

urlpatterns = [
    path('pricing/options/', views.pricing_options, name='pricing-options'),

    # Stone setting rates
    path('stone-setting-rates/', views.stone_setting_rate_list_create, name='stone-setting-rate-list-create'),
    path('stone-setting-rates/<int:pk>/', views.stone_setting_rate_detail, name='stone-setting-rate-detail'),

    # Gemstone prices
    path('gemstone-prices/', views.gemstone_price_list_create, name='gemstone-price-list-create'),
    path('gemstone-prices/<int:pk>/', views.gemstone_price_detail, name='gemstone-price-detail'),

    # Rapaport prices
    path('rapaport-prices/', views.rapaport_price_list, name='rapaport-price-list'),
    path('rapaport-prices/upload/', views.rapaport_price_upload, name='rapaport-price-upload'),
    path('rapaport-prices/lookup/', views.rapaport_price_lookup, name='rapaport-price-lookup'),
    path('rapaport-prices/<int:pk>/', views.rapaport_price_detail, name='rapaport-price-detail'),

    # Rapaport discount rates
    path('rapaport-discount-rates/', views.rapaport_discount_rate_list_create, name='rapaport-discount-rate-list-create'),
    path('rapaport-discount-rates/<int:pk>/', views.rapaport_discount_rate_detail, name='rapaport-discount-rate-detail'),

    # Labor, polishing, polish and polish fire prices
    path('labor-prices/', views.labor_price_list_create, name='labor-price-list-create'),
    path('labor-prices/<int:pk>/', views.labor_price_detail, name='labor-price-detail'),
    path('polishing-prices/', views.polishing_price_list_create, name='polishing-price-list-create'),
    path('polishing-prices/<int:pk>/', views.polishing_price_detail, name='polishing-price-detail'),
    path('polish-prices/', views.polish_price_list_create, name='polish-price-list-create'),
    path('polish-prices/<int:pk>/', views.polish_price_detail, name='polish-price-detail'),
    path('polish-fire-prices/', views.polish_fire_price_list_create, name='polish-fire-price-list-create'),
    path('polish-fire-prices/<int:pk>/', views.polish_fire_price_detail, name='polish-fire-price-detail'),
]
