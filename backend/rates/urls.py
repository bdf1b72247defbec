from django.urls import path
from . import views

urlpatterns = [
    path('exchange-rates/', views.exchange_rate_list_create, name='exchange-rate-list-create'),
    path('exchange-rates/latest/', views.exchange_rate_latest, name='exchange-rate-latest'),
    path('exchange-rates/fetch/', views.exchange_rate_fetch, name='exchange-rate-fetch'),
]
