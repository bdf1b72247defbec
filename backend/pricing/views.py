import logging
from rest_framework import status
from rest_framework.decorators import api_view, permission_classes, parser_classes
from rest_framework.parsers import JSONParser, MultiPartParser, FormParser
from rest_framework.response import Response
from rest_framework.permissions import IsAuthenticated
from django.shortcuts import get_object_or_404
from backend.core.utils import create_audit_log, paginated_response, parse_bool, to_decimal
from .constants import (
    PRODUCT_TYPE_CHOICES, DIAMOND_SHAPES, DIAMOND_COLORS, DIAMOND_CLARITIES,
    GEMSTONE_TYPES, GEMSTONE_QUALITIES, STONE_CATEGORY_CHOICES, PRICING_TYPE_CHOICES
)
from .filters import StoneSettingRateFilter, GemstonePriceFilter, RapaportPriceFilter
from .models import (
    StoneSettingRate, GemstonePrice, RapaportPrice, RapaportDiscountRate,
    LaborPrice, PolishingPrice, PolishPrice, PolishFirePrice
)
from .rapaport import (
    RapaportImportError, parse_rapaport_csv, clean_price_entries,
    import_price_rows, clear_prices
)
from .serializers import (
    StoneSettingRateSerializer, GemstonePriceSerializer, RapaportPriceSerializer,
    RapaportDiscountRateSerializer, LaborPriceSerializer, PolishingPriceSerializer, PolishPriceSerializer,
    PolishFirePriceSerializer
)
from .utils import find_rapaport_price

logger = logging.getLogger('backend.pricing')


def _list_create(request, queryset, serializer_class):
    if request.method == 'GET':
        serializer = serializer_class(queryset, many=True)
        return Response(serializer.data)
    serializer = serializer_class(data=request.data)
    if serializer.is_valid():
        obj = serializer.save()
        logger.info(f"User {request.user.username} created {obj.__class__.__name__} {obj.pk}")
        return Response(serializer.data, status=status.HTTP_201_CREATED)
    return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)


def _detail(request, obj, serializer_class):
    if request.method == 'GET':
        serializer = serializer_class(obj)
        return Response(serializer.data)
    elif request.method in ('PUT', 'PATCH'):
        serializer = serializer_class(obj, data=request.data, partial=request.method == 'PATCH')
        if serializer.is_valid():
            serializer.save()
            return Response(serializer.data)
        return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)
    else:  # DELETE
        logger.info(f"User {request.user.username} deleted {obj.__class__.__name__} {obj.pk}")
        obj.delete()
        return Response(status=status.HTTP_204_NO_CONTENT)


@api_view(['GET'])
@permission_classes([IsAuthenticated])
def pricing_options(request):
    """Static choice lists used by the price and analysis forms"""
    return Response({
        'product_types': [{'value': v, 'label': l} for v, l in PRODUCT_TYPE_CHOICES],
        'diamond_shapes': DIAMOND_SHAPES,
        'diamond_colors': DIAMOND_COLORS,
        'diamond_clarities': DIAMOND_CLARITIES,
        'gemstone_types': GEMSTONE_TYPES,
        'gemstone_qualities': GEMSTONE_QUALITIES,
        'stone_categories': [{'value': v, 'label': l} for v, l in STONE_CATEGORY_CHOICES],
        'pricing_types': [{'value': v, 'label': l} for v, l in PRICING_TYPE_CHOICES],
    })


# StoneSettingRate views
@api_view(['GET', 'POST'])
@permission_classes([IsAuthenticated])
def stone_setting_rate_list_create(request):
    """List all stone setting rates or create a new rate"""
    queryset = StoneSettingRateFilter(request.query_params, queryset=StoneSettingRate.objects.all()).qs
    return _list_create(request, queryset, StoneSettingRateSerializer)


@api_view(['GET', 'PUT', 'PATCH', 'DELETE'])
@permission_classes([IsAuthenticated])
def stone_setting_rate_detail(request, pk):
    """Retrieve, update or delete a stone setting rate"""
    return _detail(request, get_object_or_404(StoneSettingRate, pk=pk), StoneSettingRateSerializer)


# GemstonePrice views
@api_view(['GET', 'POST'])
@permission_classes([IsAuthenticated])
def gemstone_price_list_create(request):
    """List all gemstone prices or create a new price"""
    queryset = GemstonePriceFilter(request.query_params, queryset=GemstonePrice.objects.all()).qs
    return _list_create(request, queryset, GemstonePriceSerializer)


@api_view(['GET', 'PUT', 'PATCH', 'DELETE'])
@permission_classes([IsAuthenticated])
def gemstone_price_detail(request, pk):
    """Retrieve, update or delete a gemstone price"""
    return _detail(request, get_object_or_404(GemstonePrice, pk=pk), GemstonePriceSerializer)


# RapaportDiscountRate views
@api_view(['GET', 'POST'])
@permission_classes([IsAuthenticated])
def rapaport_discount_rate_list_create(request):
    """List all Rapaport discount rates or create a new rate"""
    return _list_create(request, RapaportDiscountRate.objects.all(), RapaportDiscountRateSerializer)


@api_view(['GET', 'PUT', 'PATCH', 'DELETE'])
@permission_classes([IsAuthenticated])
def rapaport_discount_rate_detail(request, pk):
    """Retrieve, update or delete a Rapaport discount rate"""
    return _detail(request, get_object_or_404(RapaportDiscountRate, pk=pk), RapaportDiscountRateSerializer)


# LaborPrice views
@api_view(['GET', 'POST'])
@permission_classes([IsAuthenticated])
def labor_price_list_create(request):
    """List all labor prices or create a new price"""
    queryset = LaborPrice.objects.all()
    product_type = request.query_params.get('product_type')
    if product_type:
        queryset = queryset.filter(product_type=product_type)
    return _list_create(request, queryset, LaborPriceSerializer)


@api_view(['GET', 'PUT', 'PATCH', 'DELETE'])
@permission_classes([IsAuthenticated])
def labor_price_detail(request, pk):
    """Retrieve, update or delete a labor price"""
    return _detail(request, get_object_or_404(LaborPrice, pk=pk), LaborPriceSerializer)


# PolishingPrice views
@api_view(['GET', 'POST'])
@permission_classes([IsAuthenticated])
def polishing_price_list_create(request):
    """List all polishing prices or create a new price"""
    queryset = PolishingPrice.objects.all()
    product_type = request.query_params.get('product_type')
    if product_type:
        queryset = queryset.filter(product_type=product_type)
    return _list_create(request, queryset, PolishingPriceSerializer)


@api_view(['GET', 'PUT', 'PATCH', 'DELETE'])
@permission_classes([IsAuthenticated])
def polishing_price_detail(request, pk):
    """Retrieve, update or delete a polishing price"""
    return _detail(request, get_object_or_404(PolishingPrice, pk=pk), PolishingPriceSerializer)


# PolishPrice views
@api_view(['GET', 'POST'])
@permission_classes([IsAuthenticated])
def polish_price_list_create(request):
    """List all polish prices or create a new price"""
    queryset = PolishPrice.objects.all()
    product_type = request.query_params.get('product_type')
    if product_type:
        queryset = queryset.filter(product_type=product_type)
    return _list_create(request, queryset, PolishPriceSerializer)


@api_view(['GET', 'PUT', 'PATCH', 'DELETE'])
@permission_classes([IsAuthenticated])
def polish_price_detail(request, pk):
    """Retrieve, update or delete a polish price"""
    return _detail(request, get_object_or_404(PolishPrice, pk=pk), PolishPriceSerializer)


# PolishFirePrice views
@api_view(['GET', 'POST'])
@permission_classes([IsAuthenticated])
def polish_fire_price_list_create(request):
    """List all polish fire prices or create a new price"""
    queryset = PolishFirePrice.objects.all()
    product_type = request.query_params.get('product_type')
    if product_type:
        queryset = queryset.filter(product_type=product_type)
    return _list_create(request, queryset, PolishFirePriceSerializer)


@api_view(['GET', 'PUT', 'PATCH', 'DELETE'])
@permission_classes([IsAuthenticated])
def polish_fire_price_detail(request, pk):
    """Retrieve, update or delete a polish fire price"""
    return _detail(request, get_object_or_404(PolishFirePrice, pk=pk), PolishFirePriceSerializer)


# RapaportPrice views
@api_view(['GET', 'POST', 'DELETE'])
@permission_classes([IsAuthenticated])
def rapaport_price_list(request):
    """List, add a single entry to, or clear the Rapaport price list"""
    if request.method == 'GET':
        queryset = RapaportPriceFilter(request.query_params, queryset=RapaportPrice.objects.all()).qs
        if 'page' in request.query_params:
            return paginated_response(request, queryset, RapaportPriceSerializer, default_limit=100)
        return Response(RapaportPriceSerializer(queryset, many=True).data)
    elif request.method == 'POST':
        serializer = RapaportPriceSerializer(data=request.data)
        if serializer.is_valid():
            serializer.save()
            return Response(serializer.data, status=status.HTTP_201_CREATED)
        return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)
    else:  # DELETE
        deleted = clear_prices()
        create_audit_log(
            request=request,
            action='rapaport_clear',
            model_name='RapaportPrice',
            object_id='all',
            changes={'deleted': deleted},
        )
        return Response({'deleted': deleted})


@api_view(['GET', 'PUT', 'PATCH', 'DELETE'])
@permission_classes([IsAuthenticated])
def rapaport_price_detail(request, pk):
    """Retrieve, update or delete a single Rapaport entry"""
    return _detail(request, get_object_or_404(RapaportPrice, pk=pk), RapaportPriceSerializer)


def _clear_existing_param(data):
    value = data.get('clear_existing')
    return data.get('clearExisting') if value is None else value


@api_view(['POST'])
@permission_classes([IsAuthenticated])
@parser_classes([JSONParser, MultiPartParser, FormParser])
def rapaport_price_upload(request):
    """
    Bulk upload Rapaport prices.

    Accepts a CSV file (multipart field `file`, replaces the list unless
    clear_existing=false) or JSON {"prices": [...], "clear_existing": bool}.
    The camelCase clearExisting key is accepted as well.
    """
    upload = request.FILES.get('file')
    skipped = 0

    if upload is not None:
        if not upload.name.lower().endswith('.csv'):
            return Response({'error': 'Only CSV files are supported'}, status=status.HTTP_400_BAD_REQUEST)
        try:
            text = upload.read().decode('utf-8-sig')
        except UnicodeDecodeError:
            return Response({'error': 'CSV file must be UTF-8 encoded'}, status=status.HTTP_400_BAD_REQUEST)
        rows, errors, skipped = parse_rapaport_csv(text)
        clear_existing = parse_bool(_clear_existing_param(request.data), default=True)
        source = upload.name
    else:
        entries = request.data.get('prices')
        if not isinstance(entries, list):
            return Response({'error': 'prices must be a list'}, status=status.HTTP_400_BAD_REQUEST)
        rows, errors = clean_price_entries(entries)
        clear_existing = parse_bool(_clear_existing_param(request.data), default=False)
        source = 'json'

    try:
        created, cleared = import_price_rows(rows, clear_existing=clear_existing)
    except RapaportImportError as e:
        return Response({'error': str(e), 'errors': errors, 'skipped': skipped}, status=status.HTTP_400_BAD_REQUEST)

    create_audit_log(
        request=request,
        action='rapaport_upload',
        model_name='RapaportPrice',
        object_id='bulk',
        object_name=source,
        changes={'created': created, 'cleared': cleared, 'rejected': len(errors)},
    )
    return Response({
        'created': created,
        'skipped': skipped,
        'errors': errors,
        'cleared': cleared,
    }, status=status.HTTP_201_CREATED)


@api_view(['GET'])
@permission_classes([IsAuthenticated])
def rapaport_price_lookup(request):
    """Find the Rapaport price for shape, carat, color and clarity"""
    shape = request.query_params.get('shape', '').strip()
    carat_param = request.query_params.get('carat', '').strip()
    color = request.query_params.get('color', '').strip()
    clarity = request.query_params.get('clarity', '').strip()

    if not (shape and carat_param and color and clarity):
        return Response(
            {'error': 'shape, carat, color and clarity are required'},
            status=status.HTTP_400_BAD_REQUEST
        )

    carat = to_decimal(carat_param, default=None)
    if carat is None or carat <= 0:
        return Response({'error': 'carat must be a positive number'}, status=status.HTTP_400_BAD_REQUEST)

    price = find_rapaport_price(shape, carat, color, clarity)
    if price is None:
        return Response(None)
    return Response(RapaportPriceSerializer(price).data)
