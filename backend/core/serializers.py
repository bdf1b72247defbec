from rest_framework import serializers
from django.contrib.auth.password_validation import validate_password
from .models import User, AdminSettings, AuditLog

MIN_PASSWORD_LENGTH = 6


class UserSerializer(serializers.ModelSerializer):
    is_admin = serializers.BooleanField(source='is_staff', read_only=True)
    has_email_api_key = serializers.SerializerMethodField()

    class Meta:
        model = User
        fields = [
            'id', 'username', 'company_name', 'full_name', 'email', 'gender',
            'email_from_address', 'has_email_api_key', 'is_active', 'is_staff', 'is_admin',
            'created_at', 'updated_at'
        ]
        read_only_fields = ['created_at', 'updated_at']

    def get_has_email_api_key(self, obj):
        return bool(obj.email_api_key)


class UserCreateSerializer(serializers.ModelSerializer):
    password = serializers.CharField(write_only=True, validators=[validate_password])
    password_confirm = serializers.CharField(write_only=True)
    company_name = serializers.CharField(max_length=200)

    class Meta:
        model = User
        fields = ['username', 'password', 'password_confirm', 'company_name', 'full_name', 'email', 'gender']

    def validate(self, attrs):
        if attrs['password'] != attrs['password_confirm']:
            raise serializers.ValidationError({"password": "Passwords don't match"})
        return attrs

    def create(self, validated_data):
        validated_data.pop('password_confirm')
        password = validated_data.pop('password')
        user = User(**validated_data, is_active=True)
        user.set_password(password)
        user.save()
        return user


class ProfileSerializer(serializers.ModelSerializer):
    class Meta:
        model = User
        fields = ['company_name', 'full_name', 'email', 'gender']


class PasswordChangeSerializer(serializers.Serializer):
    current_password = serializers.CharField(write_only=True)
    new_password = serializers.CharField(write_only=True, min_length=MIN_PASSWORD_LENGTH)
    confirm_password = serializers.CharField(write_only=True)

    def validate_current_password(self, value):
        user = self.context['request'].user
        if not user.check_password(value):
            raise serializers.ValidationError("Current password is incorrect")
        return value

    def validate(self, attrs):
        if attrs['new_password'] != attrs['confirm_password']:
            raise serializers.ValidationError({"confirm_password": "Passwords don't match"})
        return attrs


class EmailApiKeySerializer(serializers.ModelSerializer):
    email_api_key = serializers.CharField(write_only=True, allow_blank=True, required=False)

    class Meta:
        model = User
        fields = ['email_api_key', 'email_from_address']


class AdminSettingsSerializer(serializers.ModelSerializer):
    cc_emails = serializers.ListField(child=serializers.EmailField(), required=False)
    global_email_api_key = serializers.CharField(write_only=True, allow_blank=True, required=False)
    has_global_email_api_key = serializers.SerializerMethodField()

    class Meta:
        model = AdminSettings
        fields = ['id', 'owner_email', 'cc_emails', 'global_email_api_key', 'has_global_email_api_key', 'updated_at']
        read_only_fields = ['updated_at']

    def get_has_global_email_api_key(self, obj):
        return bool(obj.global_email_api_key)

    def validate_cc_emails(self, value):
        # Drop duplicates, keep first occurrence
        seen = set()
        unique = []
        for email in value:
            key = email.lower()
            if key not in seen:
                seen.add(key)
                unique.append(email)
        return unique


class AuditLogSerializer(serializers.ModelSerializer):
    username = serializers.CharField(source='user.username', read_only=True, default=None)

    class Meta:
        model = AuditLog
        fields = ['id', 'user', 'username', 'action', 'model_name', 'object_id', 'object_name',
                  'object_reference', 'changes', 'ip_address', 'created_at']
