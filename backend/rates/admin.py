from django.contrib import admin
from .models import ExchangeRate


@admin.register(ExchangeRate)
class ExchangeRateAdmin(admin.ModelAdmin):
    list_display = ['usd_try', 'gold_24k_per_gram', 'gold_24k_currency', 'is_manual', 'updated_at']
    list_filter = ['is_manual', 'gold_24k_currency']
    ordering = ['-updated_at']
    readonly_fields = ['updated_at']
