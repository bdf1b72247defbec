"""
URL configuration for the jewelry cost analysis backend.

Every app exposes its endpoints under /api/v1/.
"""
from django.contrib import admin
from django.urls import path, include, re_path
from django.conf import settings
from django.views.static import serve

admin.site.site_header = "Jewelry Cost Analysis Admin Panel"
admin.site.site_title = "Jewelry Cost Analysis Admin Portal"
admin.site.index_title = "Manufacturing cost analysis"

urlpatterns = [
    path('admin/', admin.site.urls),
    path('api/v1/', include('backend.core.urls')),
    path('api/v1/', include('backend.manufacturers.urls')),
    path('api/v1/', include('backend.pricing.urls')),
    path('api/v1/', include('backend.rates.urls')),
    path('api/v1/', include('backend.analysis.urls')),
    path('api/v1/', include('backend.reports.urls')),
    re_path(r'^static/(?P<path>.*)$', serve, {'document_root': settings.STATIC_ROOT}),
]
