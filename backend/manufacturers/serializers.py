from rest_framework import serializers
from .models import Manufacturer


class ManufacturerSerializer(serializers.ModelSerializer):
    name = serializers.CharField(max_length=200, allow_blank=False, trim_whitespace=True)
    record_count = serializers.IntegerField(read_only=True, required=False)

    class Meta:
        model = Manufacturer
        fields = [
            'id', 'name', 'contact', 'email', 'phone', 'contact_person', 'address', 'notes',
            'record_count', 'created_at', 'updated_at'
        ]
        read_only_fields = ['created_at', 'updated_at']
