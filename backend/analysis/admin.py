from django.contrib import admin
from .models import Batch, AnalysisRecord, AnalysisStone


class AnalysisStoneInline(admin.TabularInline):
    model = AnalysisStone
    extra = 0
    readonly_fields = ['rapaport_price', 'setting_cost', 'total_stone_cost']


@admin.register(Batch)
class BatchAdmin(admin.ModelAdmin):
    list_display = ['batch_number', 'manufacturer', 'user', 'created_at']
    list_filter = ['manufacturer']
    search_fields = ['manufacturer__name', 'user__username']


@admin.register(AnalysisRecord)
class AnalysisRecordAdmin(admin.ModelAdmin):
    list_display = ['product_code', 'product_type', 'manufacturer', 'batch', 'user', 'total_cost', 'profit_loss', 'created_at']
    list_filter = ['product_type', 'gold_purity', 'manufacturer', 'created_at']
    search_fields = ['product_code', 'manufacturer__name']
    readonly_fields = [
        'raw_material_cost', 'labor_cost', 'total_setting_cost', 'total_stone_cost', 'total_cost',
        'manufacturer_price_try', 'profit_loss', 'gold_price_used', 'usd_try_used', 'created_at', 'updated_at'
    ]
    inlines = [AnalysisStoneInline]
