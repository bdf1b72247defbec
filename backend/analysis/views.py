import csv
import logging
from django.db.models import Count, Sum
from django.http import HttpResponse
from django.shortcuts import get_object_or_404
from rest_framework import status
from rest_framework.decorators import api_view, permission_classes
from rest_framework.response import Response
from rest_framework.permissions import IsAuthenticated
from backend.core.utils import create_audit_log, paginated_response, parse_bool
from backend.manufacturers.models import Manufacturer
from backend.manufacturers.serializers import ManufacturerSerializer
from .costing import analyze
from .filters import AnalysisRecordFilter
from .models import Batch, AnalysisRecord, AnalysisStone
from .serializers import (
    AnalysisRecordSerializer, AnalysisStoneSerializer, BatchSerializer,
    CostBreakdownSerializer, difference_percent
)

logger = logging.getLogger('backend.analysis')


def _record_queryset(user):
    return AnalysisRecord.objects.filter(user=user).select_related('manufacturer', 'batch').prefetch_related('stones')


def _validate_stones(data):
    """
    Validate the `stones` list of a request.

    Returns (stones_data, errors); stones_data is None when the request has
    no `stones` key.
    """
    if 'stones' not in data:
        return None, None
    stones = data.get('stones')
    if stones is None:
        stones = []
    if not isinstance(stones, list):
        return None, {'stones': ['Expected a list of stones']}
    serializer = AnalysisStoneSerializer(data=stones, many=True)
    if not serializer.is_valid():
        return None, {'stones': serializer.errors}
    return serializer.validated_data, None


def _rate_overrides(request):
    return {
        'gold_price': request.data.get('gold_price'),
        'usd_try': request.data.get('usd_try'),
    }


def _audit_changes(record):
    return {
        'total_cost': str(record.total_cost),
        'manufacturer_price_try': str(record.manufacturer_price_try),
        'stones': record.stones.count(),
    }


@api_view(['GET', 'POST'])
@permission_classes([IsAuthenticated])
def analysis_record_list_create(request):
    """List the user's analysis records or create a new record"""
    if request.method == 'GET':
        queryset = AnalysisRecordFilter(request.query_params, queryset=_record_queryset(request.user)).qs
        queryset = queryset.order_by('-created_at', '-id')
        if 'page' in request.query_params:
            return paginated_response(request, queryset, AnalysisRecordSerializer, default_limit=20)
        return Response(AnalysisRecordSerializer(queryset, many=True).data)

    stones_data, stone_errors = _validate_stones(request.data)
    serializer = AnalysisRecordSerializer(
        data=request.data,
        context={'request': request, 'stones_data': stones_data or [], 'rates': _rate_overrides(request)}
    )
    valid = serializer.is_valid()
    if not valid or stone_errors:
        errors = dict(serializer.errors) if not valid else {}
        errors.update(stone_errors or {})
        return Response(errors, status=status.HTTP_400_BAD_REQUEST)

    record = serializer.save(user=request.user)
    logger.info(f"User {request.user.username} created analysis record {record.product_code} (total {record.total_cost})")
    create_audit_log(
        request=request,
        action='create',
        model_name='AnalysisRecord',
        object_id=record.id,
        object_name=record.product_code,
        object_reference=f"Batch #{record.batch.batch_number}" if record.batch else None,
        changes=_audit_changes(record),
    )
    return Response(AnalysisRecordSerializer(_record_queryset(request.user).get(pk=record.pk)).data,
                    status=status.HTTP_201_CREATED)


@api_view(['GET', 'PUT', 'PATCH', 'DELETE'])
@permission_classes([IsAuthenticated])
def analysis_record_detail(request, pk):
    """Retrieve, update or delete one of the user's analysis records"""
    record = get_object_or_404(_record_queryset(request.user), pk=pk)

    if request.method == 'GET':
        return Response(AnalysisRecordSerializer(record).data)
    elif request.method in ('PUT', 'PATCH'):
        stones_data, stone_errors = _validate_stones(request.data)
        serializer = AnalysisRecordSerializer(
            record,
            data=request.data,
            partial=request.method == 'PATCH',
            context={
                'request': request,
                'stones_data': stones_data,
                'rates': _rate_overrides(request),
                'refresh_rates': parse_bool(request.data.get('refresh_rates', request.query_params.get('refresh_rates'))),
            }
        )
        valid = serializer.is_valid()
        if not valid or stone_errors:
            errors = dict(serializer.errors) if not valid else {}
            errors.update(stone_errors or {})
            return Response(errors, status=status.HTTP_400_BAD_REQUEST)

        record = serializer.save()
        create_audit_log(
            request=request,
            action='update',
            model_name='AnalysisRecord',
            object_id=record.id,
            object_name=record.product_code,
            changes={'fields': sorted(serializer.validated_data.keys()), **_audit_changes(record)},
        )
        return Response(AnalysisRecordSerializer(_record_queryset(request.user).get(pk=record.pk)).data)
    else:  # DELETE
        record_id = record.id
        product_code = record.product_code
        record.delete()
        logger.info(f"User {request.user.username} deleted analysis record {product_code}")
        create_audit_log(
            request=request,
            action='delete',
            model_name='AnalysisRecord',
            object_id=record_id,
            object_name=product_code,
        )
        return Response(status=status.HTTP_204_NO_CONTENT)


@api_view(['POST'])
@permission_classes([IsAuthenticated])
def analysis_record_calculate(request):
    """Compute the cost breakdown for the posted record and stones without saving"""
    stones_data, stone_errors = _validate_stones(request.data)
    serializer = AnalysisRecordSerializer(data=request.data, partial=True, context={'request': request})
    valid = serializer.is_valid()
    if not valid or stone_errors:
        errors = dict(serializer.errors) if not valid else {}
        errors.update(stone_errors or {})
        return Response(errors, status=status.HTTP_400_BAD_REQUEST)

    overrides = _rate_overrides(request)
    totals, priced_stones = analyze(
        serializer.validated_data, stones_data or [], overrides['gold_price'], overrides['usd_try']
    )
    breakdown = {**totals, 'stones': [AnalysisStone(**stone) for stone in priced_stones]}
    return Response(CostBreakdownSerializer(breakdown).data)


# Batch views
@api_view(['GET', 'POST'])
@permission_classes([IsAuthenticated])
def batch_list_create(request):
    """List the user's batches with totals or open the next batch for a manufacturer"""
    if request.method == 'GET':
        queryset = Batch.objects.filter(user=request.user).select_related('manufacturer').annotate(
            product_count=Count('records'),
            total_analysis=Sum('records__total_cost'),
            total_manufacturer=Sum('records__manufacturer_price_try'),
        )
        manufacturer = request.query_params.get('manufacturer')
        if manufacturer:
            queryset = queryset.filter(manufacturer_id=manufacturer)
        return Response(BatchSerializer(queryset.order_by('-created_at', '-id'), many=True).data)

    manufacturer_id = request.data.get('manufacturer')
    if not manufacturer_id:
        return Response({'manufacturer': ['This field is required.']}, status=status.HTTP_400_BAD_REQUEST)
    try:
        manufacturer = Manufacturer.objects.get(pk=manufacturer_id)
    except (Manufacturer.DoesNotExist, ValueError, TypeError):
        return Response({'manufacturer': ['Manufacturer not found']}, status=status.HTTP_400_BAD_REQUEST)

    batch = Batch.objects.create(
        user=request.user,
        manufacturer=manufacturer,
        batch_number=Batch.next_number(request.user, manufacturer),
    )
    logger.info(f"User {request.user.username} opened batch #{batch.batch_number} for {manufacturer.name}")
    return Response(BatchSerializer(batch).data, status=status.HTTP_201_CREATED)


@api_view(['DELETE'])
@permission_classes([IsAuthenticated])
def batch_delete(request, pk):
    """Delete an empty batch"""
    batch = get_object_or_404(Batch, pk=pk, user=request.user)
    if batch.records.exists():
        return Response(
            {'error': 'Batch contains analysis records and cannot be deleted'},
            status=status.HTTP_400_BAD_REQUEST
        )
    batch.delete()
    return Response(status=status.HTTP_204_NO_CONTENT)


TOTAL_FIELDS = {
    'raw_material': 'raw_material_cost',
    'labor': 'labor_cost',
    'stone': 'total_stone_cost',
    'setting': 'total_setting_cost',
    'polish': 'polish_amount',
    'certificate': 'certificate_amount',
    'analysis': 'total_cost',
    'manufacturer': 'manufacturer_price_try',
}


def _batch_totals(records):
    totals = records.aggregate(**{key: Sum(field) for key, field in TOTAL_FIELDS.items()})
    totals = {key: float(value or 0) for key, value in totals.items()}
    totals['difference'] = round(totals['manufacturer'] - totals['analysis'], 2)
    totals['difference_percent'] = difference_percent(totals['analysis'], totals['manufacturer'])
    return totals


@api_view(['GET'])
@permission_classes([IsAuthenticated])
def batch_details(request, pk):
    """Batch with its manufacturer, records (with stones) and totals"""
    batch = get_object_or_404(Batch.objects.select_related('manufacturer'), pk=pk, user=request.user)
    records = _record_queryset(request.user).filter(batch=batch).order_by('created_at', 'id')

    return Response({
        'batch': BatchSerializer(batch).data,
        'manufacturer': ManufacturerSerializer(batch.manufacturer).data,
        'records': AnalysisRecordSerializer(records, many=True).data,
        'totals': _batch_totals(records),
    })


@api_view(['GET'])
@permission_classes([IsAuthenticated])
def batch_export(request, pk):
    """CSV export of a batch's records and totals"""
    batch = get_object_or_404(Batch.objects.select_related('manufacturer'), pk=pk, user=request.user)
    records = _record_queryset(request.user).filter(batch=batch).order_by('created_at', 'id')

    response = HttpResponse(content_type='text/csv; charset=utf-8')
    filename = f"batch-{batch.manufacturer.name}-{batch.batch_number}.csv".replace(' ', '_')
    response['Content-Disposition'] = f'attachment; filename="{filename}"'

    writer = csv.writer(response)
    writer.writerow([
        'Product Code', 'Product Type', 'Grams', 'Purity', 'Raw Material', 'Labor',
        'Setting', 'Stones', 'Analysis Total', 'Manufacturer Price', 'Difference'
    ])
    for record in records:
        writer.writerow([
            record.product_code,
            record.get_product_type_display(),
            record.total_grams,
            record.gold_purity,
            record.raw_material_cost,
            record.labor_cost,
            record.total_setting_cost,
            record.total_stone_cost,
            record.total_cost,
            record.manufacturer_price_try,
            record.profit_loss,
        ])

    totals = _batch_totals(records)
    writer.writerow([
        'TOTAL', '', '', '',
        f"{totals['raw_material']:.2f}",
        f"{totals['labor']:.2f}",
        f"{totals['setting']:.2f}",
        f"{totals['stone']:.2f}",
        f"{totals['analysis']:.2f}",
        f"{totals['manufacturer']:.2f}",
        f"{totals['difference']:.2f}",
    ])
    return response
