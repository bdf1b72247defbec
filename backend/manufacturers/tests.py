"""
Test suite for the manufacturers module
Tests: CRUD, search, protected deletes and audit entries
"""
from django.test import TestCase
from rest_framework import status
from backend.core.models import AuditLog
from backend.core.test_utils import TestDataFactory, AuthenticatedAPIClient
from backend.manufacturers.models import Manufacturer


class ManufacturerAPITests(TestCase):
    """Test manufacturer endpoints"""

    def setUp(self):
        self.user = TestDataFactory.create_user()
        self.client = AuthenticatedAPIClient()
        self.client.authenticate_user(self.user)

    def test_requires_authentication(self):
        self.client.logout()
        response = self.client.get('/api/v1/manufacturers/')
        self.assertEqual(response.status_code, status.HTTP_401_UNAUTHORIZED)

    def test_create_manufacturer(self):
        response = self.client.post('/api/v1/manufacturers/', {
            'name': 'Kuyumcukent Atölye',
            'contact_person': 'Ayşe',
            'email': 'info@atolye.test',
        }, format='json')
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertEqual(response.data['name'], 'Kuyumcukent Atölye')
        self.assertTrue(AuditLog.objects.filter(action='create', model_name='Manufacturer').exists())

    def test_create_requires_name(self):
        response = self.client.post('/api/v1/manufacturers/', {'name': '  '}, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertIn('name', response.data)

    def test_list_with_record_count(self):
        manufacturer = TestDataFactory.create_manufacturer(name='Alpha')
        TestDataFactory.create_manufacturer(name='Beta')
        TestDataFactory.create_record(self.user, manufacturer=manufacturer)
        TestDataFactory.create_record(self.user, manufacturer=manufacturer)

        response = self.client.get('/api/v1/manufacturers/')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual([m['name'] for m in response.data], ['Alpha', 'Beta'])
        self.assertEqual(response.data[0]['record_count'], 2)
        self.assertEqual(response.data[1]['record_count'], 0)

    def test_search_by_name_or_contact_person(self):
        TestDataFactory.create_manufacturer(name='Alpha Gold', contact_person='Mehmet')
        TestDataFactory.create_manufacturer(name='Beta Silver', contact_person='Zeynep')

        response = self.client.get('/api/v1/manufacturers/?search=gold')
        self.assertEqual([m['name'] for m in response.data], ['Alpha Gold'])

        response = self.client.get('/api/v1/manufacturers/?search=zeyn')
        self.assertEqual([m['name'] for m in response.data], ['Beta Silver'])

    def test_search_by_email_or_phone(self):
        Manufacturer.objects.create(name='Gamma', email='sales@gamma.test', phone='02124445566')
        TestDataFactory.create_manufacturer(name='Delta')

        response = self.client.get('/api/v1/manufacturers/?search=gamma.test')
        self.assertEqual([m['name'] for m in response.data], ['Gamma'])

        response = self.client.get('/api/v1/manufacturers/?search=444556')
        self.assertEqual([m['name'] for m in response.data], ['Gamma'])

    def test_retrieve_missing(self):
        response = self.client.get('/api/v1/manufacturers/9999/')
        self.assertEqual(response.status_code, status.HTTP_404_NOT_FOUND)

    def test_partial_update(self):
        manufacturer = TestDataFactory.create_manufacturer()
        response = self.client.patch(
            f'/api/v1/manufacturers/{manufacturer.id}/', {'phone': '02120000000'}, format='json'
        )
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        manufacturer.refresh_from_db()
        self.assertEqual(manufacturer.phone, '02120000000')

    def test_delete_keeps_records(self):
        manufacturer = TestDataFactory.create_manufacturer()
        record = TestDataFactory.create_record(self.user, manufacturer=manufacturer)

        response = self.client.delete(f'/api/v1/manufacturers/{manufacturer.id}/')
        self.assertEqual(response.status_code, status.HTTP_204_NO_CONTENT)
        record.refresh_from_db()
        self.assertIsNone(record.manufacturer)

    def test_delete_with_batches_is_protected(self):
        manufacturer = TestDataFactory.create_manufacturer()
        TestDataFactory.create_batch(self.user, manufacturer)

        response = self.client.delete(f'/api/v1/manufacturers/{manufacturer.id}/')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertTrue(Manufacturer.objects.filter(pk=manufacturer.id).exists())
