"""
Test suite for the core module
Tests: registration, JWT login/logout, profile and password changes, admin settings, audit logs, cache versioning
"""
from django.test import TestCase
from rest_framework import status
from backend.core.cache_signals import suspend_cache_signals
from backend.core.cache_utils import get_dashboard_version, invalidate_dashboard_cache
from backend.core.models import AdminSettings, AuditLog, User
from backend.core.test_utils import TestDataFactory, AuthenticatedAPIClient
from backend.core.utils import to_decimal, parse_bool, parse_date, create_audit_log
from datetime import date, timedelta
from decimal import Decimal
from django.utils import timezone


class RegistrationTests(TestCase):
    """Test user registration"""

    def setUp(self):
        self.client = AuthenticatedAPIClient()

    def _payload(self, **overrides):
        data = {
            'username': 'atelier',
            'password': 'secret123',
            'password_confirm': 'secret123',
            'company_name': 'Atelier Gold',
        }
        data.update(overrides)
        return data

    def test_first_user_becomes_admin(self):
        response = self.client.post('/api/v1/auth/register/', self._payload(), format='json')
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertTrue(response.data['user']['is_admin'])
        self.assertIn('access', response.data)
        self.assertIn('refresh', response.data)

    def test_second_user_is_not_admin(self):
        TestDataFactory.create_user()
        response = self.client.post('/api/v1/auth/register/', self._payload(), format='json')
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertFalse(response.data['user']['is_admin'])

    def test_duplicate_username(self):
        TestDataFactory.create_user(username='atelier')
        response = self.client.post('/api/v1/auth/register/', self._payload(), format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertIn('username', response.data)

    def test_password_mismatch(self):
        response = self.client.post(
            '/api/v1/auth/register/', self._payload(password_confirm='other123'), format='json'
        )
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_short_password(self):
        response = self.client.post(
            '/api/v1/auth/register/', self._payload(password='abc', password_confirm='abc'), format='json'
        )
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertFalse(User.objects.filter(username='atelier').exists())

    def test_company_name_required(self):
        data = self._payload()
        del data['company_name']
        response = self.client.post('/api/v1/auth/register/', data, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)


class AuthTests(TestCase):
    """Test login, logout and the current user endpoints"""

    def setUp(self):
        self.user = TestDataFactory.create_user(username='goldsmith', password='secret123')
        self.client = AuthenticatedAPIClient()

    def test_login_returns_tokens_and_user(self):
        response = self.client.post(
            '/api/v1/auth/login/', {'username': 'goldsmith', 'password': 'secret123'}, format='json'
        )
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertIn('access', response.data)
        self.assertEqual(response.data['user']['username'], 'goldsmith')

    def test_login_wrong_password(self):
        response = self.client.post(
            '/api/v1/auth/login/', {'username': 'goldsmith', 'password': 'wrong123'}, format='json'
        )
        self.assertEqual(response.status_code, status.HTTP_401_UNAUTHORIZED)

    def test_me_requires_authentication(self):
        response = self.client.get('/api/v1/auth/me/')
        self.assertEqual(response.status_code, status.HTTP_401_UNAUTHORIZED)

    def test_me(self):
        self.client.authenticate_user(self.user)
        response = self.client.get('/api/v1/auth/me/')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['username'], 'goldsmith')
        self.assertFalse(response.data['has_email_api_key'])

    def test_logout_blacklists_refresh_token(self):
        login = self.client.post(
            '/api/v1/auth/login/', {'username': 'goldsmith', 'password': 'secret123'}, format='json'
        )
        refresh = login.data['refresh']
        self.client.authenticate_user(self.user)

        response = self.client.post('/api/v1/auth/logout/', {'refresh': refresh}, format='json')
        self.assertEqual(response.status_code, status.HTTP_205_RESET_CONTENT)

        response = self.client.post('/api/v1/auth/refresh/', {'refresh': refresh}, format='json')
        self.assertEqual(response.status_code, status.HTTP_401_UNAUTHORIZED)

    def test_logout_invalid_token(self):
        self.client.authenticate_user(self.user)
        response = self.client.post('/api/v1/auth/logout/', {'refresh': 'not-a-token'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_logout_without_token(self):
        self.client.authenticate_user(self.user)
        response = self.client.post('/api/v1/auth/logout/', {}, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)


class ProfileTests(TestCase):
    """Test profile, password and e-mail key updates"""

    def setUp(self):
        self.user = TestDataFactory.create_user(password='secret123')
        self.client = AuthenticatedAPIClient()
        self.client.authenticate_user(self.user)

    def test_update_profile(self):
        response = self.client.patch(
            '/api/v1/auth/profile/', {'company_name': 'New Co', 'gender': 'female'}, format='json'
        )
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.user.refresh_from_db()
        self.assertEqual(self.user.company_name, 'New Co')
        self.assertEqual(self.user.gender, 'female')

    def test_change_password(self):
        response = self.client.patch('/api/v1/auth/password/', {
            'current_password': 'secret123',
            'new_password': 'newsecret1',
            'confirm_password': 'newsecret1',
        }, format='json')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.user.refresh_from_db()
        self.assertTrue(self.user.check_password('newsecret1'))
        self.assertTrue(AuditLog.objects.filter(action='password_change', user=self.user).exists())

    def test_change_password_wrong_current(self):
        response = self.client.patch('/api/v1/auth/password/', {
            'current_password': 'wrong123',
            'new_password': 'newsecret1',
            'confirm_password': 'newsecret1',
        }, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertIn('current_password', response.data)

    def test_change_password_mismatch(self):
        response = self.client.patch('/api/v1/auth/password/', {
            'current_password': 'secret123',
            'new_password': 'newsecret1',
            'confirm_password': 'newsecret2',
        }, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_change_password_too_short(self):
        response = self.client.patch('/api/v1/auth/password/', {
            'current_password': 'secret123',
            'new_password': 'abc',
            'confirm_password': 'abc',
        }, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_email_api_key_is_write_only(self):
        response = self.client.patch('/api/v1/auth/email-api-key/', {
            'email_api_key': 're_123456',
            'email_from_address': 'offers@atelier.test',
        }, format='json')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertNotIn('email_api_key', response.data)

        me = self.client.get('/api/v1/auth/me/')
        self.assertTrue(me.data['has_email_api_key'])
        self.assertEqual(me.data['email_from_address'], 'offers@atelier.test')


class UserAdminTests(TestCase):
    """Test admin-only user management"""

    def setUp(self):
        self.admin = TestDataFactory.create_user(is_staff=True)
        self.user = TestDataFactory.create_user()
        self.client = AuthenticatedAPIClient()

    def test_list_users_requires_admin(self):
        self.client.authenticate_user(self.user)
        response = self.client.get('/api/v1/users/')
        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)

    def test_list_users(self):
        self.client.authenticate_user(self.admin)
        response = self.client.get('/api/v1/users/')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(len(response.data), 2)

    def test_admin_cannot_delete_self(self):
        self.client.authenticate_user(self.admin)
        response = self.client.delete(f'/api/v1/users/{self.admin.id}/')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_admin_deletes_user(self):
        self.client.authenticate_user(self.admin)
        response = self.client.delete(f'/api/v1/users/{self.user.id}/')
        self.assertEqual(response.status_code, status.HTTP_204_NO_CONTENT)
        self.assertFalse(User.objects.filter(pk=self.user.id).exists())


class AdminSettingsTests(TestCase):
    """Test the admin settings singleton"""

    def setUp(self):
        self.admin = TestDataFactory.create_user(is_staff=True)
        self.client = AuthenticatedAPIClient()
        self.client.authenticate_user(self.admin)

    def test_get_creates_singleton(self):
        response = self.client.get('/api/v1/admin/settings/')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(AdminSettings.objects.count(), 1)
        self.assertEqual(response.data['cc_emails'], [])

    def test_update_deduplicates_cc_emails(self):
        response = self.client.patch('/api/v1/admin/settings/', {
            'owner_email': 'owner@atelier.test',
            'cc_emails': ['a@atelier.test', 'b@atelier.test', 'A@atelier.test'],
            'global_email_api_key': 'key-1',
        }, format='json')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['cc_emails'], ['a@atelier.test', 'b@atelier.test'])
        self.assertTrue(response.data['has_global_email_api_key'])
        self.assertNotIn('global_email_api_key', response.data)
        self.assertEqual(AdminSettings.objects.count(), 1)

        log = AuditLog.objects.get(action='settings_change')
        self.assertNotIn('global_email_api_key', log.changes['fields'])

    def test_invalid_cc_email(self):
        response = self.client.patch(
            '/api/v1/admin/settings/', {'cc_emails': ['not-an-email']}, format='json'
        )
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_settings_require_admin(self):
        user = TestDataFactory.create_user()
        self.client.authenticate_user(user)
        response = self.client.get('/api/v1/admin/settings/')
        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)


class AuditLogTests(TestCase):
    """Test audit log visibility"""

    def setUp(self):
        self.admin = TestDataFactory.create_user(is_staff=True)
        self.user = TestDataFactory.create_user()
        self.other = TestDataFactory.create_user()
        self.own_log = create_audit_log(action='create', model_name='Manufacturer', object_id=1, user=self.user)
        self.other_log = create_audit_log(action='delete', model_name='Manufacturer', object_id=2, user=self.other)
        self.client = AuthenticatedAPIClient()

    def test_user_sees_only_own_logs(self):
        self.client.authenticate_user(self.user)
        response = self.client.get('/api/v1/audit-logs/')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual([log['id'] for log in response.data], [self.own_log.id])

    def test_admin_sees_all_logs(self):
        self.client.authenticate_user(self.admin)
        response = self.client.get('/api/v1/audit-logs/?action=delete')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual([log['id'] for log in response.data], [self.other_log.id])

    def test_date_range_filter(self):
        self.client.authenticate_user(self.user)
        today = timezone.localdate()
        response = self.client.get(f'/api/v1/audit-logs/?date_from={today.isoformat()}&date_to={today.isoformat()}')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual([log['id'] for log in response.data], [self.own_log.id])

        tomorrow = today + timedelta(days=1)
        response = self.client.get(f'/api/v1/audit-logs/?date_from={tomorrow.isoformat()}')
        self.assertEqual(response.data, [])

    def test_malformed_date_rejected(self):
        self.client.authenticate_user(self.user)
        response = self.client.get('/api/v1/audit-logs/?date_from=notadate')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        response = self.client.get('/api/v1/audit-logs/?date_to=2024-13-40')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_detail_of_other_users_log_forbidden(self):
        self.client.authenticate_user(self.user)
        response = self.client.get(f'/api/v1/audit-logs/{self.other_log.id}/')
        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)

    def test_missing_fields_skip_log(self):
        self.assertIsNone(create_audit_log(action=None, model_name='Manufacturer', object_id=1))


class UtilsTests(TestCase):
    """Test decimal and boolean parsing helpers"""

    def test_parse_date(self):
        self.assertEqual(parse_date('2024-03-09'), date(2024, 3, 9))
        self.assertIsNone(parse_date(''))
        self.assertIsNone(parse_date(None))
        with self.assertRaises(ValueError):
            parse_date('09.03.2024')

    def test_to_decimal(self):
        self.assertEqual(to_decimal('12,5'), Decimal('12.5'))
        self.assertEqual(to_decimal(' 3.25 '), Decimal('3.25'))
        self.assertEqual(to_decimal(2), Decimal('2'))

    def test_to_decimal_invalid_values_use_default(self):
        self.assertEqual(to_decimal('abc'), Decimal('0'))
        self.assertEqual(to_decimal(float('nan')), Decimal('0'))
        self.assertEqual(to_decimal(float('inf')), Decimal('0'))
        self.assertEqual(to_decimal('NaN'), Decimal('0'))
        self.assertIsNone(to_decimal('', default=None))

    def test_parse_bool(self):
        self.assertTrue(parse_bool('true'))
        self.assertTrue(parse_bool('1'))
        self.assertFalse(parse_bool('false'))
        self.assertTrue(parse_bool(None, default=True))


class CacheVersionTests(TestCase):
    """Test dashboard cache invalidation"""

    def test_invalidate_bumps_version(self):
        before = get_dashboard_version()
        invalidate_dashboard_cache()
        self.assertEqual(get_dashboard_version(), before + 1)

    def test_model_save_bumps_version(self):
        before = get_dashboard_version()
        TestDataFactory.create_manufacturer()
        self.assertGreater(get_dashboard_version(), before)

    def test_suspended_signals_do_not_bump_version(self):
        before = get_dashboard_version()
        with suspend_cache_signals():
            TestDataFactory.create_manufacturer()
        self.assertEqual(get_dashboard_version(), before)
