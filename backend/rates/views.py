import logging
from rest_framework import status
from rest_framework.decorators import api_view, permission_classes
from rest_framework.response import Response
from rest_framework.permissions import IsAuthenticated
from backend.core.utils import create_audit_log
from .goldapi import GoldAPIError, GoldAPINotConfigured, fetch_and_store_rates
from .models import ExchangeRate
from .serializers import ExchangeRateSerializer

logger = logging.getLogger('backend.rates')

DEFAULT_HISTORY_LIMIT = 30


@api_view(['GET'])
@permission_classes([IsAuthenticated])
def exchange_rate_latest(request):
    """Most recent exchange rate, or null when none is stored"""
    rate = ExchangeRate.latest()
    if rate is None:
        return Response(None)
    return Response(ExchangeRateSerializer(rate).data)


@api_view(['GET', 'POST'])
@permission_classes([IsAuthenticated])
def exchange_rate_list_create(request):
    """Rate history (newest first) or save a manual rate"""
    if request.method == 'GET':
        try:
            limit = min(max(int(request.query_params.get('limit', DEFAULT_HISTORY_LIMIT)), 1), 365)
        except (TypeError, ValueError):
            limit = DEFAULT_HISTORY_LIMIT
        queryset = ExchangeRate.objects.order_by('-updated_at', '-id')[:limit]
        return Response(ExchangeRateSerializer(queryset, many=True).data)

    serializer = ExchangeRateSerializer(data=request.data)
    if serializer.is_valid():
        rate = serializer.save(is_manual=True)
        create_audit_log(
            request=request,
            action='rate_manual',
            model_name='ExchangeRate',
            object_id=rate.id,
            changes={
                'usd_try': str(rate.usd_try),
                'gold_24k_per_gram': str(rate.gold_24k_per_gram),
                'gold_24k_currency': rate.gold_24k_currency,
            },
        )
        logger.info(f"User {request.user.username} saved manual rate {rate.id}")
        return Response(ExchangeRateSerializer(rate).data, status=status.HTTP_201_CREATED)
    return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)


@api_view(['POST'])
@permission_classes([IsAuthenticated])
def exchange_rate_fetch(request):
    """Fetch current rates from GoldAPI and store them"""
    try:
        rate = fetch_and_store_rates()
    except GoldAPINotConfigured as e:
        return Response({'error': str(e)}, status=status.HTTP_400_BAD_REQUEST)
    except GoldAPIError as e:
        logger.error(f"Exchange rate fetch failed: {e}", exc_info=True)
        return Response({'error': str(e)}, status=status.HTTP_502_BAD_GATEWAY)

    create_audit_log(
        request=request,
        action='rate_fetch',
        model_name='ExchangeRate',
        object_id=rate.id,
        changes={'usd_try': str(rate.usd_try), 'gold_24k_per_gram': str(rate.gold_24k_per_gram)},
    )
    return Response(ExchangeRateSerializer(rate).data, status=status.HTTP_201_CREATED)
