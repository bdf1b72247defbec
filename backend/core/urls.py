from django.urls import path
from .views import (
    CustomTokenObtainPairView, CustomTokenRefreshView, register, logout, user_me,
    user_profile, user_password, user_email_api_key,
    user_list_create, user_detail,
    admin_settings,
    audit_log_list, audit_log_detail,
)

urlpatterns = [
    # Auth endpoints
    path('auth/register/', register, name='register'),
    path('auth/login/', CustomTokenObtainPairView.as_view(), name='token_obtain_pair'),
    path('auth/refresh/', CustomTokenRefreshView.as_view(), name='token_refresh'),
    path('auth/logout/', logout, name='logout'),
    path('auth/me/', user_me, name='user-me'),
    path('auth/profile/', user_profile, name='user-profile'),
    path('auth/password/', user_password, name='user-password'),
    path('auth/email-api-key/', user_email_api_key, name='user-email-api-key'),

    # User endpoints
    path('users/', user_list_create, name='user-list-create'),
    path('users/<int:pk>/', user_detail, name='user-detail'),

    # Admin settings
    path('admin/settings/', admin_settings, name='admin-settings'),

    # AuditLog endpoints
    path('audit-logs/', audit_log_list, name='audit-log-list'),
    path('audit-logs/<int:pk>/', audit_log_detail, name='audit-log-detail'),
]
