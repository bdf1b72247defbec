from rest_framework import serializers
from .models import ExchangeRate


class ExchangeRateSerializer(serializers.ModelSerializer):
    gold_price_per_gram_try = serializers.DecimalField(max_digits=16, decimal_places=2, read_only=True)
    source = serializers.SerializerMethodField()

    class Meta:
        model = ExchangeRate
        fields = [
            'id', 'usd_try', 'gold_24k_per_gram', 'gold_24k_currency', 'gold_price_per_gram_try',
            'is_manual', 'source', 'updated_at'
        ]
        read_only_fields = ['is_manual', 'updated_at']

    def get_source(self, obj):
        return 'manual' if obj.is_manual else 'goldapi'
