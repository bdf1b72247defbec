from django.contrib import admin
from .models import (
    StoneSettingRate, GemstonePrice, RapaportPrice, RapaportDiscountRate,
    LaborPrice, PolishingPrice, PolishPrice, PolishFirePrice
)


@admin.register(StoneSettingRate)
class StoneSettingRateAdmin(admin.ModelAdmin):
    list_display = ['stone_category', 'min_carat', 'max_carat', 'price_per_stone', 'pricing_type', 'updated_at']
    list_filter = ['stone_category', 'pricing_type']
    ordering = ['stone_category', 'min_carat']
    readonly_fields = ['created_at', 'updated_at']


@admin.register(GemstonePrice)
class GemstonePriceAdmin(admin.ModelAdmin):
    list_display = ['stone_type', 'quality', 'min_carat', 'max_carat', 'price_per_carat', 'updated_at']
    list_filter = ['stone_type', 'quality']
    search_fields = ['stone_type', 'quality']
    ordering = ['stone_type', 'quality']
    readonly_fields = ['created_at', 'updated_at']


@admin.register(RapaportPrice)
class RapaportPriceAdmin(admin.ModelAdmin):
    list_display = ['shape', 'low_carat', 'high_carat', 'color', 'clarity', 'price_per_carat', 'uploaded_at']
    list_filter = ['shape', 'color', 'clarity']
    search_fields = ['shape', 'color', 'clarity']
    ordering = ['shape', 'low_carat', 'color', 'clarity']
    readonly_fields = ['uploaded_at']


@admin.register(RapaportDiscountRate)
class RapaportDiscountRateAdmin(admin.ModelAdmin):
    list_display = ['min_carat', 'max_carat', 'discount_percent', 'updated_at']
    ordering = ['min_carat']
    readonly_fields = ['created_at', 'updated_at']


@admin.register(LaborPrice)
class LaborPriceAdmin(admin.ModelAdmin):
    list_display = ['product_type', 'price_per_gram', 'updated_at']
    list_filter = ['product_type']
    ordering = ['product_type']
    readonly_fields = ['created_at', 'updated_at']


@admin.register(PolishingPrice)
class PolishingPriceAdmin(admin.ModelAdmin):
    list_display = ['product_type', 'price_per_gram', 'updated_at']
    list_filter = ['product_type']
    ordering = ['product_type']
    readonly_fields = ['created_at', 'updated_at']


@admin.register(PolishPrice)
class PolishPriceAdmin(admin.ModelAdmin):
    list_display = ['product_type', 'price_usd', 'updated_at']
    list_filter = ['product_type']
    ordering = ['product_type']
    readonly_fields = ['created_at', 'updated_at']


@admin.register(PolishFirePrice)
class PolishFirePriceAdmin(admin.ModelAdmin):
    list_display = ['product_type', 'fire_rate_usd', 'updated_at']
    list_filter = ['product_type']
    ordering = ['product_type']
    readonly_fields = ['created_at', 'updated_at']
