from rest_framework import serializers
from .models import (
    StoneSettingRate, GemstonePrice, RapaportPrice, RapaportDiscountRate,
    LaborPrice, PolishingPrice, PolishPrice, PolishFirePrice
)


def validate_carat_range(serializer, attrs, low_field='min_carat', high_field='max_carat'):
    """Check low <= high, falling back to the instance values on partial updates"""
    instance = serializer.instance
    low = attrs.get(low_field, getattr(instance, low_field, None))
    high = attrs.get(high_field, getattr(instance, high_field, None))
    if low is not None and high is not None and low > high:
        raise serializers.ValidationError({high_field: f"{high_field} must be greater than or equal to {low_field}"})
    return attrs


class StoneSettingRateSerializer(serializers.ModelSerializer):
    stone_category_display = serializers.CharField(source='get_stone_category_display', read_only=True)
    pricing_type_display = serializers.CharField(source='get_pricing_type_display', read_only=True)

    class Meta:
        model = StoneSettingRate
        fields = [
            'id', 'stone_category', 'stone_category_display', 'min_carat', 'max_carat',
            'price_per_stone', 'pricing_type', 'pricing_type_display', 'created_at', 'updated_at'
        ]
        read_only_fields = ['created_at', 'updated_at']

    def validate(self, attrs):
        return validate_carat_range(self, attrs)


class GemstonePriceSerializer(serializers.ModelSerializer):
    stone_type = serializers.CharField(max_length=100, trim_whitespace=True)

    class Meta:
        model = GemstonePrice
        fields = ['id', 'stone_type', 'quality', 'min_carat', 'max_carat', 'price_per_carat', 'created_at', 'updated_at']
        read_only_fields = ['created_at', 'updated_at']

    def validate(self, attrs):
        return validate_carat_range(self, attrs)


class RapaportPriceSerializer(serializers.ModelSerializer):
    shape = serializers.CharField(max_length=30, trim_whitespace=True)
    color = serializers.CharField(max_length=5, trim_whitespace=True)
    clarity = serializers.CharField(max_length=10, trim_whitespace=True)

    class Meta:
        model = RapaportPrice
        fields = ['id', 'shape', 'low_carat', 'high_carat', 'color', 'clarity', 'price_per_carat', 'uploaded_at']
        read_only_fields = ['uploaded_at']

    def validate(self, attrs):
        return validate_carat_range(self, attrs, 'low_carat', 'high_carat')


class RapaportDiscountRateSerializer(serializers.ModelSerializer):
    class Meta:
        model = RapaportDiscountRate
        fields = ['id', 'min_carat', 'max_carat', 'discount_percent', 'created_at', 'updated_at']
        read_only_fields = ['created_at', 'updated_at']

    def validate(self, attrs):
        return validate_carat_range(self, attrs)


class LaborPriceSerializer(serializers.ModelSerializer):
    product_type_display = serializers.CharField(source='get_product_type_display', read_only=True)

    class Meta:
        model = LaborPrice
        fields = ['id', 'product_type', 'product_type_display', 'price_per_gram', 'created_at', 'updated_at']
        read_only_fields = ['created_at', 'updated_at']


class PolishingPriceSerializer(serializers.ModelSerializer):
    product_type_display = serializers.CharField(source='get_product_type_display', read_only=True)

    class Meta:
        model = PolishingPrice
        fields = ['id', 'product_type', 'product_type_display', 'price_per_gram', 'created_at', 'updated_at']
        read_only_fields = ['created_at', 'updated_at']


class PolishPriceSerializer(serializers.ModelSerializer):
    product_type_display = serializers.CharField(source='get_product_type_display', read_only=True)

    class Meta:
        model = PolishPrice
        fields = ['id', 'product_type', 'product_type_display', 'price_usd', 'created_at', 'updated_at']
        read_only_fields = ['created_at', 'updated_at']


class PolishFirePriceSerializer(serializers.ModelSerializer):
    product_type_display = serializers.CharField(source='get_product_type_display', read_only=True)

    class Meta:
        model = PolishFirePrice
        fields = ['id', 'product_type', 'product_type_display', 'fire_rate_usd', 'created_at', 'updated_at']
        read_only_fields = ['created_at', 'updated_at']
