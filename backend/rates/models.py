from django.core.validators import MinValueValidator
from django.db import models
from decimal import Decimal


class ExchangeRate(models.Model):
    """USD/TRY rate and 24K gold price per gram, fetched or entered manually"""
    CURRENCY_CHOICES = [
        ('TRY', 'Turkish Lira'),
        ('USD', 'US Dollar'),
    ]

    usd_try = models.DecimalField(max_digits=10, decimal_places=4, validators=[MinValueValidator(Decimal('0.0001'))])
    gold_24k_per_gram = models.DecimalField(max_digits=12, decimal_places=2, validators=[MinValueValidator(Decimal('0.01'))])
    gold_24k_currency = models.CharField(max_length=3, choices=CURRENCY_CHOICES, default='TRY')
    is_manual = models.BooleanField(default=False)
    updated_at = models.DateTimeField(auto_now=True)

    def __str__(self):
        return f"USD/TRY {self.usd_try} - 24K {self.gold_24k_per_gram} {self.gold_24k_currency}"

    @classmethod
    def latest(cls):
        return cls.objects.order_by('-updated_at', '-id').first()

    @property
    def gold_price_per_gram_try(self):
        """24K gold price per gram in TRY"""
        if self.gold_24k_currency == 'USD':
            return self.gold_24k_per_gram * self.usd_try
        return self.gold_24k_per_gram

    class Meta:
        db_table = 'exchange_rates'
        ordering = ['-updated_at', '-id']
