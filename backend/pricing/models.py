from django.core.validators import MinValueValidator, MaxValueValidator
from django.db import models
from decimal import Decimal
from .constants import PRODUCT_TYPE_CHOICES, STONE_CATEGORY_CHOICES, PRICING_TYPE_CHOICES

NON_NEGATIVE = [MinValueValidator(Decimal('0'))]
PERCENT = [MinValueValidator(Decimal('0')), MaxValueValidator(Decimal('100'))]


class StoneSettingRate(models.Model):
    """Setting (mıhlama) price for a carat range, in USD"""
    stone_category = models.CharField(max_length=20, choices=STONE_CATEGORY_CHOICES, default='diamond')
    min_carat = models.DecimalField(max_digits=6, decimal_places=4, validators=NON_NEGATIVE)
    max_carat = models.DecimalField(max_digits=6, decimal_places=4, validators=NON_NEGATIVE)
    price_per_stone = models.DecimalField(max_digits=10, decimal_places=2, validators=NON_NEGATIVE)
    pricing_type = models.CharField(max_length=20, choices=PRICING_TYPE_CHOICES, default='per_stone')
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    def __str__(self):
        return f"{self.get_stone_category_display()} {self.min_carat}-{self.max_carat} ct"

    class Meta:
        db_table = 'stone_setting_rates'
        ordering = ['stone_category', 'min_carat', 'id']


class GemstonePrice(models.Model):
    """Per-carat USD price of a colored stone type, optionally by quality and carat range"""
    stone_type = models.CharField(max_length=100)
    quality = models.CharField(max_length=20, blank=True)
    min_carat = models.DecimalField(max_digits=6, decimal_places=4, null=True, blank=True, validators=NON_NEGATIVE)
    max_carat = models.DecimalField(max_digits=6, decimal_places=4, null=True, blank=True, validators=NON_NEGATIVE)
    price_per_carat = models.DecimalField(max_digits=10, decimal_places=2, validators=NON_NEGATIVE)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    def __str__(self):
        return f"{self.stone_type} {self.quality}".strip()

    class Meta:
        db_table = 'gemstone_price_lists'
        ordering = ['stone_type', 'quality', 'min_carat', 'id']


class RapaportPrice(models.Model):
    """Rapaport list price per carat for a shape/color/clarity bucket and carat range"""
    shape = models.CharField(max_length=30)
    low_carat = models.DecimalField(max_digits=6, decimal_places=2, validators=NON_NEGATIVE)
    high_carat = models.DecimalField(max_digits=6, decimal_places=2, validators=NON_NEGATIVE)
    color = models.CharField(max_length=5)
    clarity = models.CharField(max_length=10)
    price_per_carat = models.DecimalField(max_digits=10, decimal_places=2, validators=NON_NEGATIVE)
    uploaded_at = models.DateTimeField(auto_now_add=True)

    def __str__(self):
        return f"{self.shape} {self.low_carat}-{self.high_carat} {self.color}/{self.clarity}"

    class Meta:
        db_table = 'rapaport_prices'
        ordering = ['shape', 'low_carat', 'color', 'clarity']
        indexes = [
            models.Index(fields=['shape', 'color', 'clarity'], name='rapaport_bucket_idx'),
        ]


class RapaportDiscountRate(models.Model):
    """Default discount off the Rapaport price for a carat range"""
    min_carat = models.DecimalField(max_digits=6, decimal_places=4, validators=NON_NEGATIVE)
    max_carat = models.DecimalField(max_digits=6, decimal_places=4, validators=NON_NEGATIVE)
    discount_percent = models.DecimalField(max_digits=5, decimal_places=2, validators=PERCENT)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    def __str__(self):
        return f"{self.min_carat}-{self.max_carat} ct: {self.discount_percent}%"

    class Meta:
        db_table = 'rapaport_discount_rates'
        ordering = ['min_carat', 'id']


class LaborPrice(models.Model):
    """Labor price per gram by product type"""
    product_type = models.CharField(max_length=20, choices=PRODUCT_TYPE_CHOICES)
    price_per_gram = models.DecimalField(max_digits=10, decimal_places=2, validators=NON_NEGATIVE)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    def __str__(self):
        return f"{self.get_product_type_display()}: {self.price_per_gram}"

    class Meta:
        db_table = 'labor_prices'
        ordering = ['product_type', 'id']


class PolishingPrice(models.Model):
    """Polishing price per gram by product type"""
    product_type = models.CharField(max_length=20, choices=PRODUCT_TYPE_CHOICES)
    price_per_gram = models.DecimalField(max_digits=10, decimal_places=2, validators=NON_NEGATIVE)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    def __str__(self):
        return f"{self.get_product_type_display()}: {self.price_per_gram}/g"

    class Meta:
        db_table = 'polishing_prices'
        ordering = ['product_type', 'id']


class PolishPrice(models.Model):
    """Polish price in USD by product type"""
    product_type = models.CharField(max_length=20, choices=PRODUCT_TYPE_CHOICES)
    price_usd = models.DecimalField(max_digits=10, decimal_places=2, validators=NON_NEGATIVE)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    def __str__(self):
        return f"{self.get_product_type_display()}: ${self.price_usd}"

    class Meta:
        db_table = 'polish_prices'
        ordering = ['product_type', 'id']


class PolishFirePrice(models.Model):
    """Polish fire (metal loss) rate in USD by product type"""
    product_type = models.CharField(max_length=20, choices=PRODUCT_TYPE_CHOICES)
    fire_rate_usd = models.DecimalField(max_digits=10, decimal_places=2, validators=NON_NEGATIVE)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    def __str__(self):
        return f"{self.get_product_type_display()}: ${self.fire_rate_usd}"

    class Meta:
        db_table = 'polish_fire_prices'
        ordering = ['product_type', 'id']
