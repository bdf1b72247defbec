"""
Test suite for the reports module
Tests: Dashboard summary and caching, per-manufacturer batch totals
"""
from django.core.cache import cache
from django.test import TestCase
from rest_framework import status
from backend.core.cache_signals import suspend_cache_signals
from backend.core.cache_utils import get_dashboard_version
from backend.core.test_utils import TestDataFactory, AuthenticatedAPIClient
from backend.reports.views import build_dashboard


class DashboardTests(TestCase):
    """Test the dashboard endpoint"""

    def setUp(self):
        cache.clear()
        self.user = TestDataFactory.create_user()
        self.client = AuthenticatedAPIClient()
        self.client.authenticate_user(self.user)

    def test_empty_dashboard(self):
        response = self.client.get('/api/v1/reports/dashboard/')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['counts']['analysis_records'], 0)
        self.assertEqual(response.data['total_cost_sum'], 0.0)
        self.assertIsNone(response.data['latest_rate'])
        self.assertEqual(response.data['recent_records'], [])

    def test_dashboard_totals(self):
        TestDataFactory.create_exchange_rate(usd_try='30.0000')
        TestDataFactory.create_rapaport_price()
        TestDataFactory.create_record(self.user, total_cost='1000.00', manufacturer_price_try='1200.00')
        TestDataFactory.create_record(self.user, total_cost='3000.00', manufacturer_price_try='2500.00')
        TestDataFactory.create_record(TestDataFactory.create_user(), total_cost='9999.00')

        response = self.client.get('/api/v1/reports/dashboard/')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['counts']['analysis_records'], 2)
        self.assertEqual(response.data['counts']['rapaport_prices'], 1)
        self.assertEqual(response.data['total_cost_sum'], 4000.0)
        self.assertEqual(response.data['average_cost'], 2000.0)
        self.assertEqual(response.data['total_profit_loss'], -300.0)
        self.assertEqual(response.data['latest_rate']['usd_try'], '30.0000')
        self.assertEqual(len(response.data['recent_records']), 2)

    def test_recent_records_limited_to_five(self):
        for _ in range(7):
            TestDataFactory.create_record(self.user)
        response = self.client.get('/api/v1/reports/dashboard/')
        self.assertEqual(len(response.data['recent_records']), 5)

    def test_dashboard_is_cached_until_data_changes(self):
        version = get_dashboard_version()
        first = build_dashboard(self.user.id, version)

        with suspend_cache_signals():
            TestDataFactory.create_record(self.user)
        self.assertEqual(build_dashboard(self.user.id, version)['counts']['analysis_records'],
                         first['counts']['analysis_records'])

        TestDataFactory.create_record(self.user)
        response = self.client.get('/api/v1/reports/dashboard/')
        self.assertEqual(response.data['counts']['analysis_records'], 2)


class BatchSummaryTests(TestCase):
    """Test the per-manufacturer summary"""

    def setUp(self):
        self.user = TestDataFactory.create_user()
        self.client = AuthenticatedAPIClient()
        self.client.authenticate_user(self.user)

    def test_summary_per_manufacturer(self):
        alpha = TestDataFactory.create_manufacturer(name='Alpha')
        beta = TestDataFactory.create_manufacturer(name='Beta')
        batch = TestDataFactory.create_batch(self.user, alpha)
        TestDataFactory.create_record(self.user, batch=batch, total_cost='1000.00', manufacturer_price_try='1100.00')
        TestDataFactory.create_record(self.user, manufacturer=alpha, total_cost='1000.00', manufacturer_price_try='1100.00')
        TestDataFactory.create_record(self.user, manufacturer=beta, total_cost='500.00', manufacturer_price_try='400.00')

        response = self.client.get('/api/v1/reports/batches/')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        rows = response.data['manufacturers']
        self.assertEqual([r['manufacturer_name'] for r in rows], ['Alpha', 'Beta'])
        self.assertEqual(rows[0]['record_count'], 2)
        self.assertEqual(rows[0]['batch_count'], 1)
        self.assertEqual(rows[0]['total_analysis'], 2000.0)
        self.assertEqual(rows[0]['difference_percent'], 10.0)
        self.assertEqual(rows[1]['difference_percent'], -20.0)
        self.assertEqual(response.data['totals']['record_count'], 3)
        self.assertEqual(response.data['totals']['total_analysis'], 2500.0)

    def test_date_range(self):
        TestDataFactory.create_record(self.user)
        response = self.client.get('/api/v1/reports/batches/?date_from=2999-01-01')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['manufacturers'], [])
        self.assertEqual(response.data['totals']['difference_percent'], 0.0)

    def test_invalid_date(self):
        response = self.client.get('/api/v1/reports/batches/?date_from=01-01-2024')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
