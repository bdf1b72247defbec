"""
GoldAPI client (https://www.goldapi.io).

Fetches the XAU/USD and XAU/TRY spot prices and derives the USD/TRY rate
and the 24K gold price per gram in TRY.
"""
import logging
import os
from decimal import Decimal, ROUND_HALF_UP

import requests
from django.conf import settings

from backend.core.utils import to_decimal
from .models import ExchangeRate

logger = logging.getLogger('backend.rates')

TROY_OUNCE_GRAMS = Decimal('31.1035')


class GoldAPIError(Exception):
    """Upstream request failed or returned an unusable payload"""


class GoldAPINotConfigured(GoldAPIError):
    """No API key configured"""


def get_api_key():
    return getattr(settings, 'GOLDAPI_KEY', os.getenv('GOLDAPI_KEY', '')) or ''


def _base_url():
    return getattr(settings, 'GOLDAPI_BASE_URL', os.getenv('GOLDAPI_BASE_URL', 'https://www.goldapi.io/api')).rstrip('/')


def _timeout():
    return int(getattr(settings, 'GOLDAPI_TIMEOUT', os.getenv('GOLDAPI_TIMEOUT', 10)))


def fetch_spot_price(symbol, currency, api_key):
    """Spot price of one troy ounce of `symbol` in `currency`"""
    url = f"{_base_url()}/{symbol}/{currency}"
    try:
        response = requests.get(
            url,
            headers={'x-access-token': api_key, 'Content-Type': 'application/json'},
            timeout=_timeout(),
        )
        response.raise_for_status()
        data = response.json()
    except requests.exceptions.RequestException as e:
        raise GoldAPIError(f"GoldAPI request for {symbol}/{currency} failed: {e}") from e
    except ValueError as e:
        raise GoldAPIError(f"GoldAPI returned invalid JSON for {symbol}/{currency}") from e

    price = to_decimal(data.get('price') if isinstance(data, dict) else None, default=None)
    if price is None or price <= 0:
        raise GoldAPIError(f"GoldAPI returned no price for {symbol}/{currency}")
    return price


def fetch_gold_rates(api_key=None):
    """
    Query GoldAPI and return the derived rates.

    Returns {'usd_try', 'gold_24k_per_gram', 'gold_24k_currency'}. Raises
    GoldAPINotConfigured without a key and GoldAPIError on upstream errors.
    """
    api_key = api_key or get_api_key()
    if not api_key:
        raise GoldAPINotConfigured('GOLDAPI_KEY is not configured')

    xau_usd = fetch_spot_price('XAU', 'USD', api_key)
    xau_try = fetch_spot_price('XAU', 'TRY', api_key)

    return {
        'usd_try': (xau_try / xau_usd).quantize(Decimal('0.0001'), rounding=ROUND_HALF_UP),
        'gold_24k_per_gram': (xau_try / TROY_OUNCE_GRAMS).quantize(Decimal('0.01'), rounding=ROUND_HALF_UP),
        'gold_24k_currency': 'TRY',
    }


def fetch_and_store_rates(api_key=None):
    """Fetch current rates and save them as a new ExchangeRate"""
    rates = fetch_gold_rates(api_key)
    rate = ExchangeRate.objects.create(is_manual=False, **rates)
    logger.info(f"Stored GoldAPI rates: USD/TRY {rate.usd_try}, 24K {rate.gold_24k_per_gram} TRY/g")
    return rate
