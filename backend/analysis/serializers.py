from django.db import transaction
from django.db.models import Count, Sum
from rest_framework import serializers
from .costing import analyze, compute_totals, resolve_rates
from .models import Batch, AnalysisRecord, AnalysisStone


class AnalysisStoneSerializer(serializers.ModelSerializer):
    stone_type = serializers.CharField(max_length=100, trim_whitespace=True)

    class Meta:
        model = AnalysisStone
        fields = [
            'id', 'stone_type', 'carat_size', 'quantity', 'shape', 'color', 'clarity', 'quality',
            'discount_percent', 'price_per_carat', 'rapaport_price', 'setting_cost', 'total_stone_cost'
        ]
        read_only_fields = ['rapaport_price', 'setting_cost', 'total_stone_cost']


class AnalysisRecordSerializer(serializers.ModelSerializer):
    """
    Analysis record with its stones.

    Stones are written through context['stones_data'] (validated stone
    dicts, or None to keep the current stones). Rate overrides come from
    context['rates'] ({'gold_price', 'usd_try'}); updates reuse the stored
    rate snapshot unless context['refresh_rates'] is set.
    """
    stones = AnalysisStoneSerializer(many=True, read_only=True)
    manufacturer_name = serializers.CharField(source='manufacturer.name', read_only=True, default=None)
    batch_number = serializers.IntegerField(source='batch.batch_number', read_only=True, default=None)
    product_type_display = serializers.CharField(source='get_product_type_display', read_only=True)

    class Meta:
        model = AnalysisRecord
        fields = [
            'id', 'manufacturer', 'manufacturer_name', 'batch', 'batch_number',
            'product_code', 'product_type', 'product_type_display',
            'total_grams', 'gold_purity', 'gold_labor_cost', 'gold_labor_type', 'fire_percentage',
            'polish_amount', 'certificate_amount', 'manufacturer_price',
            'raw_material_cost', 'labor_cost', 'total_setting_cost', 'total_stone_cost', 'total_cost',
            'manufacturer_price_try', 'profit_loss', 'gold_price_used', 'usd_try_used',
            'stones', 'created_at', 'updated_at'
        ]
        read_only_fields = [
            'raw_material_cost', 'labor_cost', 'total_setting_cost', 'total_stone_cost', 'total_cost',
            'manufacturer_price_try', 'profit_loss', 'gold_price_used', 'usd_try_used',
            'created_at', 'updated_at'
        ]

    def validate_product_code(self, value):
        value = value.strip()
        if not value:
            raise serializers.ValidationError('Product code is required')
        return value

    def validate(self, attrs):
        request = self.context.get('request')
        instance = self.instance
        batch = attrs.get('batch', getattr(instance, 'batch', None))
        manufacturer = attrs.get('manufacturer', getattr(instance, 'manufacturer', None))

        if batch is not None:
            if request is not None and batch.user_id != request.user.id:
                raise serializers.ValidationError({'batch': 'Batch not found'})
            if manufacturer is None:
                attrs['manufacturer'] = batch.manufacturer
            elif manufacturer.id != batch.manufacturer_id:
                raise serializers.ValidationError({'batch': 'Batch belongs to a different manufacturer'})
        return attrs

    def _rates(self):
        rates = self.context.get('rates') or {}
        return rates.get('gold_price'), rates.get('usd_try')

    @transaction.atomic
    def create(self, validated_data):
        stones_data = self.context.get('stones_data') or []
        gold_price, usd_try = self._rates()
        totals, priced_stones = analyze(validated_data, stones_data, gold_price, usd_try)

        record = AnalysisRecord.objects.create(**validated_data, **totals)
        AnalysisStone.objects.bulk_create([AnalysisStone(record=record, **stone) for stone in priced_stones])
        return record

    @transaction.atomic
    def update(self, instance, validated_data):
        for attr, value in validated_data.items():
            setattr(instance, attr, value)

        gold_price, usd_try = self._rates()
        if not self.context.get('refresh_rates'):
            if gold_price is None:
                gold_price = instance.gold_price_used
            if usd_try is None:
                usd_try = instance.usd_try_used
        gold, fx = resolve_rates(gold_price, usd_try)

        record_fields = {field: getattr(instance, field) for field in (
            'total_grams', 'gold_purity', 'gold_labor_cost', 'gold_labor_type', 'fire_percentage',
            'polish_amount', 'certificate_amount', 'manufacturer_price'
        )}

        stones_data = self.context.get('stones_data')
        if stones_data is None:
            totals = compute_totals(record_fields, list(instance.stones.all()), gold, fx)
        else:
            totals, priced_stones = analyze(record_fields, stones_data, gold, fx)
            instance.stones.all().delete()
            AnalysisStone.objects.bulk_create([AnalysisStone(record=instance, **stone) for stone in priced_stones])

        for attr, value in totals.items():
            setattr(instance, attr, value)
        instance.save()
        return instance


class CostBreakdownSerializer(serializers.Serializer):
    """Result of a dry-run calculation"""
    raw_material_cost = serializers.DecimalField(max_digits=14, decimal_places=2)
    labor_cost = serializers.DecimalField(max_digits=14, decimal_places=2)
    total_setting_cost = serializers.DecimalField(max_digits=14, decimal_places=2)
    total_stone_cost = serializers.DecimalField(max_digits=14, decimal_places=2)
    total_cost = serializers.DecimalField(max_digits=14, decimal_places=2)
    manufacturer_price_try = serializers.DecimalField(max_digits=14, decimal_places=2)
    profit_loss = serializers.DecimalField(max_digits=14, decimal_places=2)
    gold_price_used = serializers.DecimalField(max_digits=12, decimal_places=2)
    usd_try_used = serializers.DecimalField(max_digits=10, decimal_places=4)
    stones = AnalysisStoneSerializer(many=True)


class BatchSerializer(serializers.ModelSerializer):
    manufacturer_name = serializers.CharField(source='manufacturer.name', read_only=True)
    product_count = serializers.SerializerMethodField()
    total_analysis = serializers.SerializerMethodField()
    total_manufacturer = serializers.SerializerMethodField()
    difference_percent = serializers.SerializerMethodField()

    class Meta:
        model = Batch
        fields = [
            'id', 'manufacturer', 'manufacturer_name', 'batch_number', 'created_at',
            'product_count', 'total_analysis', 'total_manufacturer', 'difference_percent'
        ]
        read_only_fields = ['batch_number', 'created_at']

    def _stats(self, obj):
        # Annotated by the list view; aggregate otherwise
        if not hasattr(obj, '_batch_stats'):
            if hasattr(obj, 'product_count'):
                obj._batch_stats = batch_stats(obj.product_count, obj.total_analysis, obj.total_manufacturer)
            else:
                obj._batch_stats = batch_stats_for(obj)
        return obj._batch_stats

    def get_product_count(self, obj):
        return self._stats(obj)['product_count']

    def get_total_analysis(self, obj):
        return self._stats(obj)['total_analysis']

    def get_total_manufacturer(self, obj):
        return self._stats(obj)['total_manufacturer']

    def get_difference_percent(self, obj):
        return self._stats(obj)['difference_percent']


def difference_percent(analysis, manufacturer):
    """(manufacturer - analysis) / analysis * 100, or 0 when there is no analysis total"""
    if not analysis:
        return 0.0
    return round(float((manufacturer - analysis) / analysis * 100), 2)


def batch_stats(count, total_analysis, total_manufacturer):
    total_analysis = total_analysis or 0
    total_manufacturer = total_manufacturer or 0
    return {
        'product_count': count or 0,
        'total_analysis': float(total_analysis),
        'total_manufacturer': float(total_manufacturer),
        'difference_percent': difference_percent(total_analysis, total_manufacturer),
    }


def batch_stats_for(batch):
    totals = batch.records.aggregate(
        count=Count('id'),
        analysis=Sum('total_cost'),
        manufacturer=Sum('manufacturer_price_try'),
    )
    return batch_stats(totals['count'], totals['analysis'], totals['manufacturer'])
