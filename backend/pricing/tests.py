"""
Test suite for the pricing module
Tests: price table CRUD and validation, Rapaport CSV ingestion, lookups and the import command
"""
import os
import tempfile
from decimal import Decimal
from io import StringIO

from django.core.files.uploadedfile import SimpleUploadedFile
from django.core.management import call_command
from django.core.management.base import CommandError
from django.test import TestCase
from rest_framework import status

from backend.core.models import AuditLog
from backend.core.test_utils import TestDataFactory, AuthenticatedAPIClient
from backend.pricing.models import RapaportPrice, StoneSettingRate, LaborPrice, PolishingPrice
from backend.pricing.rapaport import RapaportImportError, parse_rapaport_csv, import_price_rows
from backend.pricing.utils import (
    is_diamond, find_rapaport_price, find_setting_rate, find_gemstone_price, find_rapaport_discount_rate
)

RAPAPORT_CSV = (
    "shape,low_carat,high_carat,color,clarity,price_per_carat\n"
    "Round,0.30,0.39,D,IF,5200\n"
    "\n"
    "round,0.40,0.49,g,vs1,3800\n"
    "Round,0.50,0.69\n"
    "Round,abc,0.69,G,VS1,4000\n"
    "Round,0.90,0.70,G,VS1,4000\n"
)


class PriceTableTests(TestCase):
    """Test the reference price table endpoints"""

    def setUp(self):
        self.user = TestDataFactory.create_user()
        self.client = AuthenticatedAPIClient()
        self.client.authenticate_user(self.user)

    def test_create_setting_rate(self):
        response = self.client.post('/api/v1/stone-setting-rates/', {
            'min_carat': '0.0100',
            'max_carat': '0.0500',
            'price_per_stone': '1.50',
        }, format='json')
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertEqual(response.data['stone_category'], 'diamond')
        self.assertEqual(response.data['pricing_type'], 'per_stone')

    def test_setting_rate_inverted_range(self):
        response = self.client.post('/api/v1/stone-setting-rates/', {
            'min_carat': '0.5000',
            'max_carat': '0.1000',
            'price_per_stone': '1.50',
        }, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertIn('max_carat', response.data)

    def test_setting_rate_negative_price(self):
        response = self.client.post('/api/v1/stone-setting-rates/', {
            'min_carat': '0.0100',
            'max_carat': '0.0500',
            'price_per_stone': '-1.00',
        }, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_partial_update_checks_stored_bound(self):
        rate = TestDataFactory.create_setting_rate(min_carat='0.1000', max_carat='0.2000')
        response = self.client.patch(
            f'/api/v1/stone-setting-rates/{rate.id}/', {'max_carat': '0.0500'}, format='json'
        )
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_filter_setting_rates_by_category(self):
        TestDataFactory.create_setting_rate(stone_category='diamond')
        TestDataFactory.create_setting_rate(stone_category='colored')
        response = self.client.get('/api/v1/stone-setting-rates/?stone_category=colored')
        self.assertEqual(len(response.data), 1)
        self.assertEqual(response.data[0]['stone_category'], 'colored')

    def test_delete_setting_rate(self):
        rate = TestDataFactory.create_setting_rate()
        response = self.client.delete(f'/api/v1/stone-setting-rates/{rate.id}/')
        self.assertEqual(response.status_code, status.HTTP_204_NO_CONTENT)
        self.assertFalse(StoneSettingRate.objects.exists())

    def test_missing_setting_rate(self):
        response = self.client.get('/api/v1/stone-setting-rates/9999/')
        self.assertEqual(response.status_code, status.HTTP_404_NOT_FOUND)

    def test_gemstone_price_open_ended_range(self):
        response = self.client.post('/api/v1/gemstone-prices/', {
            'stone_type': 'Safir',
            'min_carat': '1.0000',
            'price_per_carat': '250.00',
        }, format='json')
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertIsNone(response.data['max_carat'])

    def test_gemstone_price_search(self):
        TestDataFactory.create_gemstone_price(stone_type='Safir')
        TestDataFactory.create_gemstone_price(stone_type='Zümrüt', quality='AAA')
        response = self.client.get('/api/v1/gemstone-prices/?search=aaa')
        self.assertEqual([g['stone_type'] for g in response.data], ['Zümrüt'])
        response = self.client.get('/api/v1/gemstone-prices/?stone_type=safir')
        self.assertEqual([g['stone_type'] for g in response.data], ['Safir'])

    def test_discount_rate_above_hundred(self):
        response = self.client.post('/api/v1/rapaport-discount-rates/', {
            'min_carat': '0.0000',
            'max_carat': '1.0000',
            'discount_percent': '120.00',
        }, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_labor_price_product_type(self):
        response = self.client.post(
            '/api/v1/labor-prices/', {'product_type': 'ring', 'price_per_gram': '3.50'}, format='json'
        )
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertEqual(response.data['product_type_display'], 'Ring')

        response = self.client.post(
            '/api/v1/labor-prices/', {'product_type': 'crown', 'price_per_gram': '3.50'}, format='json'
        )
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(LaborPrice.objects.count(), 1)

    def test_polish_and_fire_prices(self):
        response = self.client.post(
            '/api/v1/polish-prices/', {'product_type': 'necklace', 'price_usd': '12.00'}, format='json'
        )
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        response = self.client.post(
            '/api/v1/polish-fire-prices/', {'product_type': 'necklace', 'fire_rate_usd': '4.00'}, format='json'
        )
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        response = self.client.get('/api/v1/polish-fire-prices/?product_type=ring')
        self.assertEqual(response.data, [])

    def test_polishing_price_crud(self):
        response = self.client.post(
            '/api/v1/polishing-prices/', {'product_type': 'bracelet', 'price_per_gram': '1.25'}, format='json'
        )
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertEqual(response.data['product_type_display'], 'Bracelet')
        price_id = response.data['id']
        PolishingPrice.objects.create(product_type='ring', price_per_gram=Decimal('0.80'))

        response = self.client.get('/api/v1/polishing-prices/?product_type=bracelet')
        self.assertEqual([p['id'] for p in response.data], [price_id])

        response = self.client.patch(
            f'/api/v1/polishing-prices/{price_id}/', {'price_per_gram': '1.50'}, format='json'
        )
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['price_per_gram'], '1.50')

        response = self.client.post(
            '/api/v1/polishing-prices/', {'product_type': 'ring', 'price_per_gram': '-1'}, format='json'
        )
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

        response = self.client.delete(f'/api/v1/polishing-prices/{price_id}/')
        self.assertEqual(response.status_code, status.HTTP_204_NO_CONTENT)
        self.assertEqual(PolishingPrice.objects.count(), 1)

    def test_pricing_options(self):
        response = self.client.get('/api/v1/pricing/options/')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertIn('Round', response.data['diamond_shapes'])
        self.assertIn('VVS1', response.data['diamond_clarities'])
        self.assertIn({'value': 'ring', 'label': 'Ring'}, response.data['product_types'])


class RapaportParserTests(TestCase):
    """Test CSV parsing and import"""

    def test_parse_csv(self):
        rows, errors, skipped = parse_rapaport_csv(RAPAPORT_CSV)
        self.assertEqual(len(rows), 2)
        self.assertEqual(skipped, 1)
        self.assertEqual([e['line'] for e in errors], [6, 7])
        self.assertEqual(rows[1]['shape'], 'Round')
        self.assertEqual(rows[1]['color'], 'G')
        self.assertEqual(rows[1]['clarity'], 'VS1')
        self.assertEqual(rows[1]['price_per_carat'], Decimal('3800.00'))

    def test_header_only(self):
        rows, errors, skipped = parse_rapaport_csv("shape,low,high,color,clarity,price\n\n")
        self.assertEqual((rows, errors, skipped), ([], [], 0))

    def test_quoted_cells(self):
        rows, errors, _ = parse_rapaport_csv('h\n"Pear", 0.30 ,0.39,E,VS2,"4100"\n')
        self.assertEqual(errors, [])
        self.assertEqual(rows[0]['low_carat'], Decimal('0.30'))

    def test_import_without_rows_keeps_existing(self):
        TestDataFactory.create_rapaport_price()
        with self.assertRaises(RapaportImportError):
            import_price_rows([], clear_existing=True)
        self.assertEqual(RapaportPrice.objects.count(), 1)

    def test_import_with_clear(self):
        TestDataFactory.create_rapaport_price()
        rows, _, _ = parse_rapaport_csv(RAPAPORT_CSV)
        created, cleared = import_price_rows(rows, clear_existing=True)
        self.assertEqual((created, cleared), (2, 1))
        self.assertEqual(RapaportPrice.objects.count(), 2)


class RapaportAPITests(TestCase):
    """Test Rapaport upload, list and lookup endpoints"""

    def setUp(self):
        self.user = TestDataFactory.create_user()
        self.client = AuthenticatedAPIClient()
        self.client.authenticate_user(self.user)

    def _csv(self, content=RAPAPORT_CSV, name='rapaport.csv'):
        return SimpleUploadedFile(name, content.encode('utf-8'), content_type='text/csv')

    def test_upload_csv_replaces_list(self):
        TestDataFactory.create_rapaport_price(shape='Oval')
        response = self.client.post('/api/v1/rapaport-prices/upload/', {'file': self._csv()}, format='multipart')
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertEqual(response.data['created'], 2)
        self.assertEqual(response.data['skipped'], 1)
        self.assertEqual(response.data['cleared'], 1)
        self.assertEqual(len(response.data['errors']), 2)
        self.assertFalse(RapaportPrice.objects.filter(shape='Oval').exists())
        self.assertTrue(AuditLog.objects.filter(action='rapaport_upload').exists())

    def test_upload_csv_append(self):
        TestDataFactory.create_rapaport_price(shape='Oval')
        response = self.client.post(
            '/api/v1/rapaport-prices/upload/',
            {'file': self._csv(), 'clear_existing': 'false'},
            format='multipart'
        )
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertEqual(RapaportPrice.objects.count(), 3)

    def test_upload_without_valid_rows(self):
        TestDataFactory.create_rapaport_price()
        content = "shape,low,high,color,clarity,price\nRound,x,y,G,VS1,z\n"
        response = self.client.post(
            '/api/v1/rapaport-prices/upload/', {'file': self._csv(content)}, format='multipart'
        )
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(RapaportPrice.objects.count(), 1)

    def test_upload_rejects_non_csv(self):
        response = self.client.post(
            '/api/v1/rapaport-prices/upload/', {'file': self._csv(name='prices.xlsx')}, format='multipart'
        )
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_upload_json(self):
        response = self.client.post('/api/v1/rapaport-prices/upload/', {
            'prices': [
                {'shape': 'Round', 'lowCarat': '1.00', 'highCarat': '1.49', 'color': 'F',
                 'clarity': 'VS2', 'pricePerCarat': '9800'},
                {'shape': 'Round', 'low_carat': 'bad'},
            ],
        }, format='json')
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertEqual(response.data['created'], 1)
        self.assertEqual(response.data['cleared'], 0)
        self.assertEqual(response.data['errors'][0]['line'], 2)

    def test_upload_json_camel_case_clear_flag(self):
        TestDataFactory.create_rapaport_price(shape='Oval')
        response = self.client.post('/api/v1/rapaport-prices/upload/', {
            'prices': [
                {'shape': 'Round', 'lowCarat': '1.00', 'highCarat': '1.49', 'color': 'F',
                 'clarity': 'VS2', 'pricePerCarat': '9800'},
            ],
            'clearExisting': True,
        }, format='json')
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertEqual(response.data['cleared'], 1)
        self.assertFalse(RapaportPrice.objects.filter(shape='Oval').exists())
        self.assertEqual(RapaportPrice.objects.count(), 1)

    def test_clear_list(self):
        TestDataFactory.create_rapaport_price()
        TestDataFactory.create_rapaport_price(color='H')
        response = self.client.delete('/api/v1/rapaport-prices/')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['deleted'], 2)
        self.assertFalse(RapaportPrice.objects.exists())
        self.assertTrue(AuditLog.objects.filter(action='rapaport_clear').exists())

    def test_list_filter_and_pagination(self):
        TestDataFactory.create_rapaport_price(color='G')
        TestDataFactory.create_rapaport_price(color='H')
        response = self.client.get('/api/v1/rapaport-prices/?color=g')
        self.assertEqual(len(response.data), 1)

        response = self.client.get('/api/v1/rapaport-prices/?page=1&limit=1')
        self.assertEqual(response.data['count'], 2)
        self.assertEqual(len(response.data['results']), 1)
        self.assertEqual(response.data['next'], 2)

    def test_lookup(self):
        TestDataFactory.create_rapaport_price(low_carat='0.30', high_carat='0.39', price='3000.00')
        response = self.client.get(
            '/api/v1/rapaport-prices/lookup/?shape=round&carat=0.39&color=g&clarity=vs1'
        )
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['price_per_carat'], '3000.00')

    def test_lookup_no_match(self):
        TestDataFactory.create_rapaport_price(low_carat='0.30', high_carat='0.39')
        response = self.client.get(
            '/api/v1/rapaport-prices/lookup/?shape=Round&carat=0.40&color=G&clarity=VS1'
        )
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertIsNone(response.data)

    def test_lookup_bad_parameters(self):
        response = self.client.get('/api/v1/rapaport-prices/lookup/?shape=Round&carat=0.3&color=G')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        response = self.client.get(
            '/api/v1/rapaport-prices/lookup/?shape=Round&carat=abc&color=G&clarity=VS1'
        )
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)


class LookupTests(TestCase):
    """Test the price table lookups used by the cost engine"""

    def test_is_diamond(self):
        self.assertTrue(is_diamond('Elmas'))
        self.assertTrue(is_diamond('PIRLANTA'))
        self.assertTrue(is_diamond('Pırlanta'))
        self.assertTrue(is_diamond('Lab Diamond'))
        self.assertFalse(is_diamond('Safir'))
        self.assertFalse(is_diamond(''))

    def test_overlapping_rapaport_ranges_prefer_narrowest(self):
        TestDataFactory.create_rapaport_price(low_carat='0.30', high_carat='0.49', price='3000.00')
        narrow = TestDataFactory.create_rapaport_price(low_carat='0.35', high_carat='0.39', price='3100.00')
        found = find_rapaport_price('Round', Decimal('0.36'), 'G', 'VS1')
        self.assertEqual(found.id, narrow.id)

    def test_equal_ranges_prefer_latest(self):
        TestDataFactory.create_rapaport_price(price='3000.00')
        latest = TestDataFactory.create_rapaport_price(price='3200.00')
        found = find_rapaport_price('Round', Decimal('0.30'), 'G', 'VS1')
        self.assertEqual(found.id, latest.id)

    def test_setting_rate_falls_back_to_any_category(self):
        colored = TestDataFactory.create_setting_rate(stone_category='colored', price='3.00')
        self.assertEqual(find_setting_rate(Decimal('0.5'), 'diamond').id, colored.id)
        diamond = TestDataFactory.create_setting_rate(stone_category='diamond', price='2.00')
        self.assertEqual(find_setting_rate(Decimal('0.5'), 'diamond').id, diamond.id)
        self.assertIsNone(find_setting_rate(Decimal('2.0'), 'diamond'))

    def test_gemstone_price_prefers_range_then_quality(self):
        TestDataFactory.create_gemstone_price(stone_type='Safir', price='80.00')
        quality = TestDataFactory.create_gemstone_price(stone_type='Safir', quality='AAA', price='150.00')
        ranged = TestDataFactory.create_gemstone_price(
            stone_type='Safir', quality='AAA', price='200.00', min_carat='1.0000', max_carat='2.0000'
        )
        self.assertEqual(find_gemstone_price('safir', Decimal('1.5'), 'AAA').id, ranged.id)
        self.assertEqual(find_gemstone_price('Safir', Decimal('0.5'), 'aaa').id, quality.id)
        self.assertIsNone(find_gemstone_price('Yakut', Decimal('0.5')))

    def test_discount_rate_lookup(self):
        rate = TestDataFactory.create_discount_rate(min_carat='0.0000', max_carat='0.9900', discount='25.00')
        self.assertEqual(find_rapaport_discount_rate(Decimal('0.50')).id, rate.id)
        self.assertIsNone(find_rapaport_discount_rate(Decimal('1.50')))


class ImportCommandTests(TestCase):
    """Test the import_rapaport_prices management command"""

    def setUp(self):
        handle, self.path = tempfile.mkstemp(suffix='.csv')
        with os.fdopen(handle, 'w', encoding='utf-8') as f:
            f.write(RAPAPORT_CSV)

    def tearDown(self):
        os.remove(self.path)

    def test_import_command(self):
        TestDataFactory.create_rapaport_price(shape='Oval')
        out = StringIO()
        call_command('import_rapaport_prices', self.path, '--clear', stdout=out)
        self.assertEqual(RapaportPrice.objects.count(), 2)
        self.assertIn('Prices Created: 2', out.getvalue())

    def test_missing_file(self):
        with self.assertRaises(CommandError):
            call_command('import_rapaport_prices', self.path + '.missing', stdout=StringIO())
