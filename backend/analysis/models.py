from django.contrib.auth import get_user_model
from django.core.validators import MinValueValidator, MaxValueValidator
from django.db import models
from django.db.models import Max
from decimal import Decimal
from backend.manufacturers.models import Manufacturer
from backend.pricing.constants import PRODUCT_TYPE_CHOICES
from backend.pricing.models import NON_NEGATIVE, PERCENT

User = get_user_model()


class Batch(models.Model):
    """Group of analysed pieces delivered by one manufacturer"""
    manufacturer = models.ForeignKey(Manufacturer, on_delete=models.PROTECT, related_name='batches')
    user = models.ForeignKey(User, on_delete=models.CASCADE, related_name='batches')
    batch_number = models.PositiveIntegerField()
    created_at = models.DateTimeField(auto_now_add=True)

    def __str__(self):
        return f"{self.manufacturer.name} #{self.batch_number}"

    @classmethod
    def next_number(cls, user, manufacturer):
        """Next sequential batch number for this user and manufacturer, starting at 1"""
        current = cls.objects.filter(user=user, manufacturer=manufacturer).aggregate(n=Max('batch_number'))['n']
        return (current or 0) + 1

    class Meta:
        db_table = 'batches'
        ordering = ['-created_at', '-id']
        constraints = [
            models.UniqueConstraint(fields=['user', 'manufacturer', 'batch_number'], name='unique_batch_number'),
        ]


class AnalysisRecord(models.Model):
    """Cost analysis of one piece of jewelry"""
    GOLD_PURITY_CHOICES = [
        (24, '24K'),
        (22, '22K'),
        (18, '18K'),
        (14, '14K'),
        (10, '10K'),
        (8, '8K'),
    ]
    GOLD_LABOR_TYPE_CHOICES = [
        ('dollar', 'Dollar'),
        ('gold', 'Gold (grams)'),
    ]

    user = models.ForeignKey(User, on_delete=models.CASCADE, related_name='analysis_records')
    manufacturer = models.ForeignKey(Manufacturer, on_delete=models.SET_NULL, null=True, blank=True, related_name='analysis_records')
    batch = models.ForeignKey(Batch, on_delete=models.SET_NULL, null=True, blank=True, related_name='records')
    product_code = models.CharField(max_length=100)
    product_type = models.CharField(max_length=20, choices=PRODUCT_TYPE_CHOICES, default='ring')

    total_grams = models.DecimalField(max_digits=10, decimal_places=3, validators=[MinValueValidator(Decimal('0.001'))])
    gold_purity = models.PositiveSmallIntegerField(choices=GOLD_PURITY_CHOICES, default=24)
    gold_labor_cost = models.DecimalField(max_digits=10, decimal_places=3, default=0, validators=NON_NEGATIVE)
    gold_labor_type = models.CharField(max_length=10, choices=GOLD_LABOR_TYPE_CHOICES, default='dollar')
    fire_percentage = models.DecimalField(
        max_digits=5, decimal_places=2, default=0,
        validators=[MinValueValidator(Decimal('0')), MaxValueValidator(Decimal('20'))]
    )
    polish_amount = models.DecimalField(max_digits=10, decimal_places=2, default=0, validators=NON_NEGATIVE)
    certificate_amount = models.DecimalField(max_digits=10, decimal_places=2, default=0, validators=NON_NEGATIVE)
    manufacturer_price = models.DecimalField(max_digits=12, decimal_places=2, default=0, validators=NON_NEGATIVE)

    # Computed in TRY
    raw_material_cost = models.DecimalField(max_digits=14, decimal_places=2, default=0)
    labor_cost = models.DecimalField(max_digits=14, decimal_places=2, default=0)
    total_setting_cost = models.DecimalField(max_digits=14, decimal_places=2, default=0)
    total_stone_cost = models.DecimalField(max_digits=14, decimal_places=2, default=0)
    total_cost = models.DecimalField(max_digits=14, decimal_places=2, default=0)
    manufacturer_price_try = models.DecimalField(max_digits=14, decimal_places=2, default=0)
    profit_loss = models.DecimalField(max_digits=14, decimal_places=2, default=0)
    # Rate snapshot
    gold_price_used = models.DecimalField(max_digits=12, decimal_places=2, default=0)
    usd_try_used = models.DecimalField(max_digits=10, decimal_places=4, default=0)

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    def __str__(self):
        return self.product_code

    class Meta:
        db_table = 'analysis_records'
        ordering = ['-created_at', '-id']
        indexes = [
            models.Index(fields=['user', '-created_at'], name='analysis_user_created_idx'),
            models.Index(fields=['product_code'], name='analysis_product_code_idx'),
        ]


class AnalysisStone(models.Model):
    """Stone set in an analysed piece; prices are USD"""
    record = models.ForeignKey(AnalysisRecord, on_delete=models.CASCADE, related_name='stones')
    stone_type = models.CharField(max_length=100)
    carat_size = models.DecimalField(max_digits=6, decimal_places=4, validators=[MinValueValidator(Decimal('0.0001'))])
    quantity = models.PositiveIntegerField(default=1, validators=[MinValueValidator(1)])
    shape = models.CharField(max_length=30, blank=True)
    color = models.CharField(max_length=5, blank=True)
    clarity = models.CharField(max_length=10, blank=True)
    quality = models.CharField(max_length=20, blank=True)
    discount_percent = models.DecimalField(max_digits=5, decimal_places=2, null=True, blank=True, validators=PERCENT)
    price_per_carat = models.DecimalField(max_digits=10, decimal_places=2, null=True, blank=True, validators=NON_NEGATIVE)
    rapaport_price = models.DecimalField(max_digits=10, decimal_places=2, null=True, blank=True)
    setting_cost = models.DecimalField(max_digits=12, decimal_places=2, default=0)
    total_stone_cost = models.DecimalField(max_digits=12, decimal_places=2, default=0)

    def __str__(self):
        return f"{self.quantity} x {self.stone_type} {self.carat_size} ct"

    class Meta:
        db_table = 'analysis_stones'
        ordering = ['id']
