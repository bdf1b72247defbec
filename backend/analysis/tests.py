"""
Test suite for the analysis module
Tests: cost engine, analysis record CRUD, dry-run calculation, batches and CSV export

Reference piece used throughout (rate: 30 TRY/USD, 24K gold 2000 TRY/g):
  10 g 18K, 5% fire, 2 USD labor, 10 USD polish, 5 USD certificate, 1000 USD manufacturer price
  2 x 0.35 ct Round G VS1 diamond, Rapaport 3000/ct, 20% discount, setting 2 USD per stone
  1 x 0.50 ct sapphire, 100 USD/ct, setting 4 USD per carat
"""
from decimal import Decimal

from django.test import TestCase
from rest_framework import status

from backend.analysis.costing import resolve_rates, price_stone, compute_totals, analyze
from backend.analysis.models import Batch, AnalysisRecord, AnalysisStone
from backend.core.models import AuditLog
from backend.core.test_utils import TestDataFactory, AuthenticatedAPIClient

DIAMOND = {
    'stone_type': 'Pırlanta', 'carat_size': '0.35', 'quantity': 2,
    'shape': 'Round', 'color': 'G', 'clarity': 'VS1',
}
SAPPHIRE = {'stone_type': 'Safir', 'carat_size': '0.50', 'quantity': 1}


def record_payload(**overrides):
    data = {
        'product_code': 'YZK-001',
        'product_type': 'ring',
        'total_grams': '10.000',
        'gold_purity': 18,
        'fire_percentage': '5',
        'gold_labor_cost': '2',
        'gold_labor_type': 'dollar',
        'polish_amount': '10',
        'certificate_amount': '5',
        'manufacturer_price': '1000',
        'stones': [DIAMOND, SAPPHIRE],
    }
    data.update(overrides)
    return data


class PriceTablesMixin:
    """Reference rate and price tables"""

    def create_price_tables(self):
        TestDataFactory.create_exchange_rate(usd_try='30.0000', gold='2000.00')
        TestDataFactory.create_rapaport_price(low_carat='0.30', high_carat='0.39', price='3000.00')
        TestDataFactory.create_discount_rate(min_carat='0.0000', max_carat='1.0000', discount='20.00')
        TestDataFactory.create_setting_rate(stone_category='diamond', price='2.00')
        TestDataFactory.create_setting_rate(stone_category='colored', price='4.00', pricing_type='per_carat')
        TestDataFactory.create_gemstone_price(stone_type='Safir', price='100.00')


class CostEngineTests(PriceTablesMixin, TestCase):
    """Test the cost engine directly"""

    def test_rates_default_without_stored_rate(self):
        self.assertEqual(resolve_rates(), (Decimal('0.00'), Decimal('1.0000')))

    def test_rates_from_latest_rate(self):
        TestDataFactory.create_exchange_rate(usd_try='30.0000', gold='2000.00')
        self.assertEqual(resolve_rates(), (Decimal('2000.00'), Decimal('30.0000')))

    def test_usd_gold_price_is_converted(self):
        TestDataFactory.create_exchange_rate(usd_try='30.0000', gold='65.00', currency='USD')
        self.assertEqual(resolve_rates(), (Decimal('1950.00'), Decimal('30.0000')))

    def test_explicit_rates_win(self):
        TestDataFactory.create_exchange_rate(usd_try='30.0000', gold='2000.00')
        self.assertEqual(resolve_rates('2500', '35'), (Decimal('2500.00'), Decimal('35.0000')))
        self.assertEqual(resolve_rates('nan', '-1'), (Decimal('2000.00'), Decimal('30.0000')))

    def test_diamond_priced_from_rapaport(self):
        self.create_price_tables()
        priced = price_stone(DIAMOND)
        self.assertEqual(priced['rapaport_price'], Decimal('3000.00'))
        self.assertEqual(priced['discount_percent'], Decimal('20.00'))
        self.assertEqual(priced['price_per_carat'], Decimal('2400.00'))
        self.assertEqual(priced['setting_cost'], Decimal('4.00'))
        self.assertEqual(priced['total_stone_cost'], Decimal('1680.00'))

    def test_stone_discount_overrides_table(self):
        self.create_price_tables()
        priced = price_stone({**DIAMOND, 'discount_percent': Decimal('10')})
        self.assertEqual(priced['total_stone_cost'], Decimal('1890.00'))

    def test_diamond_without_rapaport_hit_uses_own_price(self):
        self.create_price_tables()
        priced = price_stone({**DIAMOND, 'carat_size': '1.20', 'quantity': 1, 'price_per_carat': '500'})
        self.assertIsNone(priced['rapaport_price'])
        self.assertEqual(priced['total_stone_cost'], Decimal('600.00'))
        # No setting rate covers 1.20 ct
        self.assertEqual(priced['setting_cost'], Decimal('0.00'))

    def test_gemstone_priced_from_table(self):
        self.create_price_tables()
        priced = price_stone(SAPPHIRE)
        self.assertEqual(priced['price_per_carat'], Decimal('100.00'))
        self.assertEqual(priced['setting_cost'], Decimal('2.00'))
        self.assertEqual(priced['total_stone_cost'], Decimal('50.00'))

    def test_unknown_stone_costs_nothing(self):
        priced = price_stone({'stone_type': 'Opal', 'carat_size': '0.2', 'quantity': 3})
        self.assertEqual(priced['total_stone_cost'], Decimal('0.00'))
        self.assertEqual(priced['setting_cost'], Decimal('0.00'))

    def test_totals(self):
        self.create_price_tables()
        payload = record_payload()
        totals, stones = analyze(payload, payload['stones'])
        self.assertEqual(len(stones), 2)
        self.assertEqual(totals['raw_material_cost'], Decimal('21000.00'))
        self.assertEqual(totals['labor_cost'], Decimal('510.00'))
        self.assertEqual(totals['total_setting_cost'], Decimal('180.00'))
        self.assertEqual(totals['total_stone_cost'], Decimal('51900.00'))
        self.assertEqual(totals['total_cost'], Decimal('73590.00'))
        self.assertEqual(totals['manufacturer_price_try'], Decimal('30000.00'))
        self.assertEqual(totals['profit_loss'], Decimal('-43590.00'))

    def test_gold_labor(self):
        record = {
            'total_grams': '1', 'gold_purity': 24, 'gold_labor_cost': '1.5', 'gold_labor_type': 'gold',
        }
        totals = compute_totals(record, [], Decimal('2000.00'), Decimal('30.0000'))
        self.assertEqual(totals['raw_material_cost'], Decimal('2000.00'))
        self.assertEqual(totals['labor_cost'], Decimal('3000.00'))
        self.assertEqual(totals['total_cost'], Decimal('5000.00'))

    def test_purity_does_not_scale_raw_material(self):
        for purity in (24, 18, 14):
            record = {'total_grams': '10', 'gold_purity': purity, 'fire_percentage': '0'}
            totals = compute_totals(record, [], Decimal('3000.00'), Decimal('30.0000'))
            self.assertEqual(totals['raw_material_cost'], Decimal('30000.00'))

    def test_missing_inputs_count_as_zero(self):
        totals = compute_totals({'total_grams': 'abc', 'fire_percentage': float('nan')}, [], Decimal('2000'), Decimal('30'))
        self.assertEqual(totals['total_cost'], Decimal('0.00'))


class AnalysisRecordAPITests(PriceTablesMixin, TestCase):
    """Test analysis record endpoints"""

    def setUp(self):
        self.user = TestDataFactory.create_user()
        self.client = AuthenticatedAPIClient()
        self.client.authenticate_user(self.user)
        self.create_price_tables()
        self.manufacturer = TestDataFactory.create_manufacturer(name='Alpha Atelier')

    def test_create_record(self):
        response = self.client.post(
            '/api/v1/analysis-records/', record_payload(manufacturer=self.manufacturer.id), format='json'
        )
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertEqual(response.data['total_cost'], '73590.00')
        self.assertEqual(response.data['profit_loss'], '-43590.00')
        self.assertEqual(response.data['usd_try_used'], '30.0000')
        self.assertEqual(response.data['gold_price_used'], '2000.00')
        self.assertEqual(response.data['manufacturer_name'], 'Alpha Atelier')
        self.assertEqual(len(response.data['stones']), 2)
        self.assertEqual(response.data['stones'][0]['total_stone_cost'], '1680.00')

        record = AnalysisRecord.objects.get(pk=response.data['id'])
        self.assertEqual(record.user, self.user)
        self.assertEqual(record.stones.count(), 2)
        self.assertTrue(AuditLog.objects.filter(action='create', model_name='AnalysisRecord').exists())

    def test_computed_fields_are_read_only(self):
        response = self.client.post(
            '/api/v1/analysis-records/', record_payload(total_cost='1.00', stones=[]), format='json'
        )
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertEqual(response.data['total_cost'], '21510.00')

    def test_rate_overrides(self):
        response = self.client.post(
            '/api/v1/analysis-records/',
            record_payload(stones=[], gold_price='2500', usd_try='35'),
            format='json'
        )
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertEqual(response.data['gold_price_used'], '2500.00')
        self.assertEqual(response.data['usd_try_used'], '35.0000')

    def test_validation_errors(self):
        response = self.client.post(
            '/api/v1/analysis-records/', record_payload(product_code='', total_grams='0'), format='json'
        )
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertIn('product_code', response.data)
        self.assertIn('total_grams', response.data)

    def test_invalid_stone(self):
        response = self.client.post(
            '/api/v1/analysis-records/',
            record_payload(stones=[{'stone_type': 'Safir', 'carat_size': '0'}]),
            format='json'
        )
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertIn('stones', response.data)
        self.assertFalse(AnalysisRecord.objects.exists())

    def test_fire_percentage_limit(self):
        response = self.client.post(
            '/api/v1/analysis-records/', record_payload(fire_percentage='25'), format='json'
        )
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_records_are_scoped_to_user(self):
        other = TestDataFactory.create_user()
        foreign = TestDataFactory.create_record(other)
        TestDataFactory.create_record(self.user)

        response = self.client.get('/api/v1/analysis-records/')
        self.assertEqual(len(response.data), 1)
        response = self.client.get(f'/api/v1/analysis-records/{foreign.id}/')
        self.assertEqual(response.status_code, status.HTTP_404_NOT_FOUND)
        response = self.client.delete(f'/api/v1/analysis-records/{foreign.id}/')
        self.assertEqual(response.status_code, status.HTTP_404_NOT_FOUND)

    def test_list_filters_and_pagination(self):
        other_manufacturer = TestDataFactory.create_manufacturer(name='Beta Works')
        TestDataFactory.create_record(self.user, manufacturer=self.manufacturer, product_code='YZK-100')
        TestDataFactory.create_record(self.user, manufacturer=other_manufacturer, product_code='KLY-200')

        response = self.client.get('/api/v1/analysis-records/?search=yzk')
        self.assertEqual([r['product_code'] for r in response.data], ['YZK-100'])
        response = self.client.get('/api/v1/analysis-records/?search=beta')
        self.assertEqual([r['product_code'] for r in response.data], ['KLY-200'])
        response = self.client.get(f'/api/v1/analysis-records/?manufacturer={self.manufacturer.id}')
        self.assertEqual([r['product_code'] for r in response.data], ['YZK-100'])
        response = self.client.get('/api/v1/analysis-records/?date_from=2999-01-01')
        self.assertEqual(response.data, [])

        response = self.client.get('/api/v1/analysis-records/?page=1&limit=1')
        self.assertEqual(response.data['count'], 2)
        self.assertEqual(response.data['total_pages'], 2)

    def test_update_uses_rate_snapshot(self):
        created = self.client.post('/api/v1/analysis-records/', record_payload(), format='json')
        TestDataFactory.create_exchange_rate(usd_try='40.0000', gold='2500.00')

        response = self.client.patch(
            f"/api/v1/analysis-records/{created.data['id']}/", {'manufacturer_price': '2000'}, format='json'
        )
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['usd_try_used'], '30.0000')
        self.assertEqual(response.data['manufacturer_price_try'], '60000.00')
        self.assertEqual(response.data['total_cost'], '73590.00')
        self.assertEqual(len(response.data['stones']), 2)

    def test_update_with_refreshed_rates(self):
        created = self.client.post('/api/v1/analysis-records/', record_payload(stones=[]), format='json')
        TestDataFactory.create_exchange_rate(usd_try='40.0000', gold='2500.00')

        response = self.client.patch(
            f"/api/v1/analysis-records/{created.data['id']}/", {'refresh_rates': True}, format='json'
        )
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['usd_try_used'], '40.0000')
        self.assertEqual(response.data['gold_price_used'], '2500.00')
        # 10 g * 1.05 * 2500
        self.assertEqual(response.data['raw_material_cost'], '26250.00')

    def test_update_replaces_stones(self):
        created = self.client.post('/api/v1/analysis-records/', record_payload(), format='json')
        record_id = created.data['id']

        response = self.client.patch(
            f'/api/v1/analysis-records/{record_id}/', {'stones': [SAPPHIRE]}, format='json'
        )
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(AnalysisStone.objects.filter(record_id=record_id).count(), 1)
        # 50 USD stone + 2 USD setting at 30 TRY/USD
        self.assertEqual(response.data['total_stone_cost'], '1500.00')
        self.assertEqual(response.data['total_setting_cost'], '60.00')

    def test_delete_cascades_to_stones(self):
        created = self.client.post('/api/v1/analysis-records/', record_payload(), format='json')
        response = self.client.delete(f"/api/v1/analysis-records/{created.data['id']}/")
        self.assertEqual(response.status_code, status.HTTP_204_NO_CONTENT)
        self.assertFalse(AnalysisStone.objects.exists())

    def test_calculate_does_not_save(self):
        response = self.client.post('/api/v1/analysis-records/calculate/', record_payload(), format='json')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['total_cost'], '73590.00')
        self.assertEqual(response.data['stones'][1]['price_per_carat'], '100.00')
        self.assertFalse(AnalysisRecord.objects.exists())

    def test_calculate_without_product_code(self):
        payload = record_payload(stones=[])
        del payload['product_code']
        response = self.client.post('/api/v1/analysis-records/calculate/', payload, format='json')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['raw_material_cost'], '21000.00')

    def test_low_purity_record_keeps_full_gold_cost(self):
        response = self.client.post(
            '/api/v1/analysis-records/',
            record_payload(
                stones=[], gold_purity=14, fire_percentage='0', gold_labor_cost='0',
                polish_amount='0', certificate_amount='0', gold_price='3000', usd_try='30'
            ),
            format='json'
        )
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertEqual(response.data['gold_purity'], 14)
        self.assertEqual(response.data['raw_material_cost'], '30000.00')
        self.assertEqual(AnalysisRecord.objects.get(pk=response.data['id']).gold_purity, 14)

    def test_record_in_batch(self):
        batch = TestDataFactory.create_batch(self.user, self.manufacturer)
        response = self.client.post(
            '/api/v1/analysis-records/', record_payload(batch=batch.id, stones=[]), format='json'
        )
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertEqual(response.data['batch_number'], 1)
        self.assertEqual(response.data['manufacturer'], self.manufacturer.id)

    def test_batch_of_other_manufacturer_rejected(self):
        batch = TestDataFactory.create_batch(self.user, self.manufacturer)
        other = TestDataFactory.create_manufacturer()
        response = self.client.post(
            '/api/v1/analysis-records/',
            record_payload(batch=batch.id, manufacturer=other.id, stones=[]),
            format='json'
        )
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertIn('batch', response.data)

    def test_batch_of_other_user_rejected(self):
        batch = TestDataFactory.create_batch(TestDataFactory.create_user(), self.manufacturer)
        response = self.client.post(
            '/api/v1/analysis-records/', record_payload(batch=batch.id, stones=[]), format='json'
        )
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)


class BatchAPITests(TestCase):
    """Test batch endpoints"""

    def setUp(self):
        self.user = TestDataFactory.create_user()
        self.client = AuthenticatedAPIClient()
        self.client.authenticate_user(self.user)
        self.manufacturer = TestDataFactory.create_manufacturer(name='Alpha Atelier')

    def test_batch_numbers_are_sequential_per_manufacturer(self):
        first = self.client.post('/api/v1/batches/', {'manufacturer': self.manufacturer.id}, format='json')
        second = self.client.post('/api/v1/batches/', {'manufacturer': self.manufacturer.id}, format='json')
        other = TestDataFactory.create_manufacturer()
        third = self.client.post('/api/v1/batches/', {'manufacturer': other.id}, format='json')

        self.assertEqual(first.status_code, status.HTTP_201_CREATED)
        self.assertEqual(first.data['batch_number'], 1)
        self.assertEqual(second.data['batch_number'], 2)
        self.assertEqual(third.data['batch_number'], 1)

    def test_batch_numbers_are_per_user(self):
        TestDataFactory.create_batch(TestDataFactory.create_user(), self.manufacturer)
        response = self.client.post('/api/v1/batches/', {'manufacturer': self.manufacturer.id}, format='json')
        self.assertEqual(response.data['batch_number'], 1)

    def test_create_requires_existing_manufacturer(self):
        response = self.client.post('/api/v1/batches/', {}, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        response = self.client.post('/api/v1/batches/', {'manufacturer': 9999}, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_list_with_stats(self):
        batch = TestDataFactory.create_batch(self.user, self.manufacturer)
        TestDataFactory.create_batch(self.user, self.manufacturer)
        TestDataFactory.create_record(self.user, batch=batch, total_cost='1000.00', manufacturer_price_try='1200.00')
        TestDataFactory.create_record(self.user, batch=batch, total_cost='500.00', manufacturer_price_try='600.00')

        response = self.client.get('/api/v1/batches/')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        stats = {b['id']: b for b in response.data}
        self.assertEqual(stats[batch.id]['product_count'], 2)
        self.assertEqual(stats[batch.id]['total_analysis'], 1500.0)
        self.assertEqual(stats[batch.id]['total_manufacturer'], 1800.0)
        self.assertEqual(stats[batch.id]['difference_percent'], 20.0)
        empty = [b for b in response.data if b['id'] != batch.id][0]
        self.assertEqual(empty['product_count'], 0)
        self.assertEqual(empty['difference_percent'], 0.0)

    def test_details(self):
        batch = TestDataFactory.create_batch(self.user, self.manufacturer)
        TestDataFactory.create_record(
            self.user, batch=batch, total_cost='1000.00', manufacturer_price_try='900.00', stones=2,
            raw_material_cost=Decimal('700.00'), labor_cost=Decimal('300.00')
        )

        response = self.client.get(f'/api/v1/batches/{batch.id}/details/')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['manufacturer']['name'], 'Alpha Atelier')
        self.assertEqual(len(response.data['records']), 1)
        self.assertEqual(len(response.data['records'][0]['stones']), 2)
        totals = response.data['totals']
        self.assertEqual(totals['raw_material'], 700.0)
        self.assertEqual(totals['labor'], 300.0)
        self.assertEqual(totals['analysis'], 1000.0)
        self.assertEqual(totals['difference'], -100.0)
        self.assertEqual(totals['difference_percent'], -10.0)

    def test_other_users_batch_not_found(self):
        batch = TestDataFactory.create_batch(TestDataFactory.create_user(), self.manufacturer)
        response = self.client.get(f'/api/v1/batches/{batch.id}/details/')
        self.assertEqual(response.status_code, status.HTTP_404_NOT_FOUND)

    def test_delete_only_empty_batch(self):
        batch = TestDataFactory.create_batch(self.user, self.manufacturer)
        TestDataFactory.create_record(self.user, batch=batch)
        response = self.client.delete(f'/api/v1/batches/{batch.id}/')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

        empty = TestDataFactory.create_batch(self.user, self.manufacturer)
        response = self.client.delete(f'/api/v1/batches/{empty.id}/')
        self.assertEqual(response.status_code, status.HTTP_204_NO_CONTENT)
        self.assertFalse(Batch.objects.filter(pk=empty.id).exists())

    def test_export_csv(self):
        batch = TestDataFactory.create_batch(self.user, self.manufacturer)
        TestDataFactory.create_record(self.user, batch=batch, product_code='YZK-001', gold_purity=18)

        response = self.client.get(f'/api/v1/batches/{batch.id}/export/')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertTrue(response['Content-Type'].startswith('text/csv'))
        self.assertIn('attachment', response['Content-Disposition'])
        lines = response.content.decode('utf-8').strip().splitlines()
        self.assertEqual(len(lines), 3)
        self.assertTrue(lines[1].startswith('YZK-001,Ring,5.000,18,'))
        self.assertTrue(lines[2].startswith('TOTAL'))
