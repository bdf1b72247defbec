"""
Test suite for the rates module
Tests: manual rates, history, GoldAPI fetch (mocked) and the fetch command
"""
from decimal import Decimal
from io import StringIO
from unittest.mock import patch, MagicMock

import requests
from django.core.management import call_command
from django.core.management.base import CommandError
from django.test import TestCase, override_settings
from rest_framework import status

from backend.core.models import AuditLog
from backend.core.test_utils import TestDataFactory, AuthenticatedAPIClient
from backend.rates.goldapi import GoldAPIError, fetch_gold_rates
from backend.rates.models import ExchangeRate


def goldapi_response(price, status_code=200):
    response = MagicMock()
    response.status_code = status_code
    response.json.return_value = {'price': price}
    if status_code >= 400:
        response.raise_for_status.side_effect = requests.exceptions.HTTPError(f'{status_code} Error')
    else:
        response.raise_for_status.return_value = None
    return response


def goldapi_side_effect(usd_price=2000, try_price=64000):
    def fake_get(url, headers=None, timeout=None):
        if url.endswith('/XAU/USD'):
            return goldapi_response(usd_price)
        return goldapi_response(try_price)
    return fake_get


class ExchangeRateModelTests(TestCase):
    """Test ExchangeRate helpers"""

    def test_gold_price_in_try(self):
        rate = TestDataFactory.create_exchange_rate(usd_try='30.0000', gold='2000.00', currency='TRY')
        self.assertEqual(rate.gold_price_per_gram_try, Decimal('2000.00'))

    def test_gold_price_in_usd_is_converted(self):
        rate = TestDataFactory.create_exchange_rate(usd_try='30.0000', gold='65.00', currency='USD')
        self.assertEqual(rate.gold_price_per_gram_try, Decimal('1950.00'))

    def test_latest(self):
        self.assertIsNone(ExchangeRate.latest())
        TestDataFactory.create_exchange_rate(usd_try='29.0000')
        newest = TestDataFactory.create_exchange_rate(usd_try='31.0000')
        self.assertEqual(ExchangeRate.latest().id, newest.id)


class ExchangeRateAPITests(TestCase):
    """Test exchange rate endpoints"""

    def setUp(self):
        self.user = TestDataFactory.create_user()
        self.client = AuthenticatedAPIClient()
        self.client.authenticate_user(self.user)

    def test_latest_without_rates(self):
        response = self.client.get('/api/v1/exchange-rates/latest/')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertIsNone(response.data)

    def test_manual_rate(self):
        response = self.client.post('/api/v1/exchange-rates/', {
            'usd_try': '32.5000',
            'gold_24k_per_gram': '2450.00',
        }, format='json')
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertTrue(response.data['is_manual'])
        self.assertEqual(response.data['source'], 'manual')
        self.assertEqual(response.data['gold_24k_currency'], 'TRY')
        self.assertTrue(AuditLog.objects.filter(action='rate_manual').exists())

        response = self.client.get('/api/v1/exchange-rates/latest/')
        self.assertEqual(response.data['usd_try'], '32.5000')

    def test_manual_rate_must_be_positive(self):
        response = self.client.post('/api/v1/exchange-rates/', {
            'usd_try': '0',
            'gold_24k_per_gram': '2450.00',
        }, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertIn('usd_try', response.data)

    def test_history_limit(self):
        for value in ('30.0000', '31.0000', '32.0000'):
            TestDataFactory.create_exchange_rate(usd_try=value)
        response = self.client.get('/api/v1/exchange-rates/?limit=2')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual([r['usd_try'] for r in response.data], ['32.0000', '31.0000'])

    @override_settings(GOLDAPI_KEY='')
    def test_fetch_without_key(self):
        response = self.client.post('/api/v1/exchange-rates/fetch/')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertFalse(ExchangeRate.objects.exists())

    @override_settings(GOLDAPI_KEY='test-key')
    @patch('backend.rates.goldapi.requests.get')
    def test_fetch_stores_rate(self, mock_get):
        mock_get.side_effect = goldapi_side_effect(usd_price=2000, try_price=64000)
        response = self.client.post('/api/v1/exchange-rates/fetch/')
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertEqual(response.data['usd_try'], '32.0000')
        self.assertEqual(response.data['gold_24k_per_gram'], '2057.65')
        self.assertFalse(response.data['is_manual'])
        self.assertTrue(AuditLog.objects.filter(action='rate_fetch').exists())

        headers = mock_get.call_args.kwargs['headers']
        self.assertEqual(headers['x-access-token'], 'test-key')

    @override_settings(GOLDAPI_KEY='test-key')
    @patch('backend.rates.goldapi.requests.get')
    def test_fetch_upstream_error(self, mock_get):
        mock_get.return_value = goldapi_response(None, status_code=500)
        response = self.client.post('/api/v1/exchange-rates/fetch/')
        self.assertEqual(response.status_code, status.HTTP_502_BAD_GATEWAY)
        self.assertFalse(ExchangeRate.objects.exists())

    @override_settings(GOLDAPI_KEY='test-key')
    @patch('backend.rates.goldapi.requests.get')
    def test_fetch_connection_error(self, mock_get):
        mock_get.side_effect = requests.exceptions.ConnectionError('unreachable')
        response = self.client.post('/api/v1/exchange-rates/fetch/')
        self.assertEqual(response.status_code, status.HTTP_502_BAD_GATEWAY)


class GoldAPIClientTests(TestCase):
    """Test the GoldAPI client"""

    @patch('backend.rates.goldapi.requests.get')
    def test_rates_are_rounded(self, mock_get):
        mock_get.side_effect = goldapi_side_effect(usd_price=2345.67, try_price=80123.45)
        rates = fetch_gold_rates(api_key='key')
        self.assertEqual(rates['usd_try'], Decimal('34.1580'))
        self.assertEqual(rates['gold_24k_per_gram'], Decimal('2576.03'))
        self.assertEqual(rates['gold_24k_currency'], 'TRY')

    @patch('backend.rates.goldapi.requests.get')
    def test_missing_price(self, mock_get):
        mock_get.return_value = goldapi_response(None)
        with self.assertRaises(GoldAPIError):
            fetch_gold_rates(api_key='key')

    @override_settings(GOLDAPI_KEY='test-key')
    @patch('backend.rates.goldapi.requests.get')
    def test_fetch_command(self, mock_get):
        mock_get.side_effect = goldapi_side_effect()
        out = StringIO()
        call_command('fetch_exchange_rates', stdout=out)
        self.assertEqual(ExchangeRate.objects.count(), 1)
        self.assertIn('USD/TRY: 32.0000', out.getvalue())

    @override_settings(GOLDAPI_KEY='')
    def test_fetch_command_without_key(self):
        with self.assertRaises(CommandError):
            call_command('fetch_exchange_rates', stdout=StringIO())
