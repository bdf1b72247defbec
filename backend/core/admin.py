from django.contrib import admin
from django.contrib.auth.admin import UserAdmin as BaseUserAdmin
from .models import User, AdminSettings, AuditLog


@admin.register(User)
class UserAdmin(BaseUserAdmin):
    list_display = ['username', 'company_name', 'full_name', 'email', 'is_active', 'is_staff', 'date_joined']
    list_filter = ['is_active', 'is_staff', 'is_superuser', 'gender', 'date_joined']
    search_fields = ['username', 'email', 'company_name', 'full_name']
    ordering = ['username']
    fieldsets = BaseUserAdmin.fieldsets + (
        ('Company', {'fields': ('company_name', 'full_name', 'gender')}),
        ('E-mail sending', {'fields': ('email_from_address', 'email_api_key')}),
    )
    add_fieldsets = BaseUserAdmin.add_fieldsets + (
        ('Company', {'fields': ('company_name', 'full_name', 'gender')}),
    )


@admin.register(AdminSettings)
class AdminSettingsAdmin(admin.ModelAdmin):
    list_display = ['owner_email', 'updated_at']
    readonly_fields = ['updated_at']

    def has_add_permission(self, request):
        return not AdminSettings.objects.exists()


@admin.register(AuditLog)
class AuditLogAdmin(admin.ModelAdmin):
    list_display = ['user', 'action', 'model_name', 'object_id', 'object_name', 'ip_address', 'created_at']
    list_filter = ['action', 'model_name', 'created_at']
    search_fields = ['user__username', 'model_name', 'object_id', 'object_name', 'object_reference']
    ordering = ['-created_at']
    readonly_fields = ['user', 'action', 'model_name', 'object_id', 'object_name', 'object_reference', 'changes', 'ip_address', 'created_at']
