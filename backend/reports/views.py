import logging
from rest_framework import status
from rest_framework.decorators import api_view, permission_classes
from rest_framework.response import Response
from rest_framework.permissions import IsAuthenticated
from django.db.models import Sum, Count, Avg, DecimalField
from decimal import Decimal

from backend.analysis.models import AnalysisRecord
from backend.analysis.serializers import difference_percent
from backend.core.cache_utils import DASHBOARD_CACHE_TTL, cached_query, get_dashboard_version
from backend.core.utils import parse_date
from backend.manufacturers.models import Manufacturer
from backend.pricing.models import StoneSettingRate, GemstonePrice, RapaportPrice
from backend.rates.models import ExchangeRate
from backend.rates.serializers import ExchangeRateSerializer

logger = logging.getLogger('backend.reports')

RECENT_RECORDS = 5


@cached_query(cache_ttl=DASHBOARD_CACHE_TTL, key_prefix='dashboard')
def build_dashboard(user_id, version):
    """
    Dashboard numbers for one user.

    `version` is the dashboard cache version; bumping it on data changes
    makes every cached summary stale.
    """
    records = AnalysisRecord.objects.filter(user_id=user_id)
    totals = records.aggregate(
        count=Count('id'),
        cost_sum=Sum('total_cost', output_field=DecimalField()),
        cost_avg=Avg('total_cost', output_field=DecimalField()),
        profit_sum=Sum('profit_loss', output_field=DecimalField()),
    )

    latest_rate = ExchangeRate.latest()
    recent = records.select_related('manufacturer').order_by('-created_at', '-id')[:RECENT_RECORDS]

    return {
        'counts': {
            'manufacturers': Manufacturer.objects.count(),
            'stone_setting_rates': StoneSettingRate.objects.count(),
            'gemstone_prices': GemstonePrice.objects.count(),
            'rapaport_prices': RapaportPrice.objects.count(),
            'analysis_records': totals['count'],
        },
        'total_cost_sum': float(totals['cost_sum'] or Decimal('0.00')),
        'average_cost': round(float(totals['cost_avg'] or Decimal('0.00')), 2),
        'total_profit_loss': float(totals['profit_sum'] or Decimal('0.00')),
        'latest_rate': dict(ExchangeRateSerializer(latest_rate).data) if latest_rate else None,
        'recent_records': [
            {
                'id': record.id,
                'product_code': record.product_code,
                'product_type': record.product_type,
                'manufacturer_name': record.manufacturer.name if record.manufacturer else None,
                'total_cost': float(record.total_cost),
                'manufacturer_price_try': float(record.manufacturer_price_try),
                'profit_loss': float(record.profit_loss),
                'created_at': record.created_at.isoformat(),
            }
            for record in recent
        ],
    }


@api_view(['GET'])
@permission_classes([IsAuthenticated])
def dashboard(request):
    """Counts, cost totals, latest exchange rate and recent records for the user"""
    data = build_dashboard(request.user.id, get_dashboard_version())
    return Response(data)


@api_view(['GET'])
@permission_classes([IsAuthenticated])
def batch_summary(request):
    """Per-manufacturer totals over the user's analysis records"""
    try:
        date_from = parse_date(request.query_params.get('date_from'))
        date_to = parse_date(request.query_params.get('date_to'))
    except ValueError:
        return Response({'error': 'Dates must be in YYYY-MM-DD format'}, status=status.HTTP_400_BAD_REQUEST)

    records = AnalysisRecord.objects.filter(user=request.user)
    if date_from:
        records = records.filter(created_at__date__gte=date_from)
    if date_to:
        records = records.filter(created_at__date__lte=date_to)

    rows = records.values('manufacturer_id', 'manufacturer__name').annotate(
        record_count=Count('id'),
        total_analysis=Sum('total_cost', output_field=DecimalField()),
        total_manufacturer=Sum('manufacturer_price_try', output_field=DecimalField()),
        batch_count=Count('batch', distinct=True),
    ).order_by('manufacturer__name')

    manufacturers = []
    for row in rows:
        total_analysis = row['total_analysis'] or Decimal('0.00')
        total_manufacturer = row['total_manufacturer'] or Decimal('0.00')
        manufacturers.append({
            'manufacturer_id': row['manufacturer_id'],
            'manufacturer_name': row['manufacturer__name'] or 'Unassigned',
            'record_count': row['record_count'],
            'batch_count': row['batch_count'],
            'total_analysis': float(total_analysis),
            'total_manufacturer': float(total_manufacturer),
            'difference_percent': difference_percent(total_analysis, total_manufacturer),
        })

    overall_analysis = sum((m['total_analysis'] for m in manufacturers), 0.0)
    overall_manufacturer = sum((m['total_manufacturer'] for m in manufacturers), 0.0)

    return Response({
        'period': {
            'from': date_from.isoformat() if date_from else None,
            'to': date_to.isoformat() if date_to else None,
        },
        'manufacturers': manufacturers,
        'totals': {
            'record_count': sum(m['record_count'] for m in manufacturers),
            'total_analysis': round(overall_analysis, 2),
            'total_manufacturer': round(overall_manufacturer, 2),
            'difference_percent': difference_percent(overall_analysis, overall_manufacturer),
        },
    })
