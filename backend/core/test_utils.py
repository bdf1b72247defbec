"""
Test utilities and factories for creating test data
"""
from django.contrib.auth import get_user_model
from rest_framework.test import APIClient
from rest_framework_simplejwt.tokens import RefreshToken
from backend.manufacturers.models import Manufacturer
from backend.pricing.models import (
    StoneSettingRate, GemstonePrice, RapaportPrice, RapaportDiscountRate
)
from backend.rates.models import ExchangeRate
from backend.analysis.models import Batch, AnalysisRecord, AnalysisStone
from decimal import Decimal
import random
import string

User = get_user_model()


class TestDataFactory:
    """Factory class for creating test data"""

    @staticmethod
    def random_string(length=10):
        """Generate a random string"""
        return ''.join(random.choices(string.ascii_letters + string.digits, k=length))

    @staticmethod
    def create_user(username=None, email=None, password='testpass123', is_staff=False,
                    is_superuser=False, company_name='Test Jewelry'):
        """Create a test user"""
        if not username:
            username = f'testuser_{TestDataFactory.random_string(6)}'
        if not email:
            email = f'{username}@test.com'
        return User.objects.create_user(
            username=username,
            email=email,
            password=password,
            is_staff=is_staff,
            is_superuser=is_superuser,
            company_name=company_name,
        )

    @staticmethod
    def create_manufacturer(name=None, contact_person=None):
        """Create a test manufacturer"""
        if not name:
            name = f'Atelier_{TestDataFactory.random_string(6)}'
        return Manufacturer.objects.create(
            name=name,
            contact_person=contact_person or 'Test Contact',
            phone='5551234567',
        )

    @staticmethod
    def create_setting_rate(min_carat='0.0000', max_carat='1.0000', price='2.00',
                            stone_category='diamond', pricing_type='per_stone'):
        """Create a stone setting rate"""
        return StoneSettingRate.objects.create(
            stone_category=stone_category,
            min_carat=Decimal(min_carat),
            max_carat=Decimal(max_carat),
            price_per_stone=Decimal(price),
            pricing_type=pricing_type,
        )

    @staticmethod
    def create_gemstone_price(stone_type='Safir', price='100.00', quality='', min_carat=None, max_carat=None):
        """Create a gemstone price entry"""
        return GemstonePrice.objects.create(
            stone_type=stone_type,
            quality=quality,
            min_carat=Decimal(min_carat) if min_carat is not None else None,
            max_carat=Decimal(max_carat) if max_carat is not None else None,
            price_per_carat=Decimal(price),
        )

    @staticmethod
    def create_rapaport_price(shape='Round', low_carat='0.30', high_carat='0.39',
                              color='G', clarity='VS1', price='3000.00'):
        """Create a Rapaport price entry"""
        return RapaportPrice.objects.create(
            shape=shape,
            low_carat=Decimal(low_carat),
            high_carat=Decimal(high_carat),
            color=color,
            clarity=clarity,
            price_per_carat=Decimal(price),
        )

    @staticmethod
    def create_discount_rate(min_carat='0.0000', max_carat='1.0000', discount='20.00'):
        """Create a Rapaport discount rate"""
        return RapaportDiscountRate.objects.create(
            min_carat=Decimal(min_carat),
            max_carat=Decimal(max_carat),
            discount_percent=Decimal(discount),
        )

    @staticmethod
    def create_exchange_rate(usd_try='30.0000', gold='2000.00', currency='TRY', is_manual=True):
        """Create an exchange rate"""
        return ExchangeRate.objects.create(
            usd_try=Decimal(usd_try),
            gold_24k_per_gram=Decimal(gold),
            gold_24k_currency=currency,
            is_manual=is_manual,
        )

    @staticmethod
    def create_batch(user, manufacturer=None):
        """Create the next batch for a manufacturer"""
        if not manufacturer:
            manufacturer = TestDataFactory.create_manufacturer()
        return Batch.objects.create(
            user=user,
            manufacturer=manufacturer,
            batch_number=Batch.next_number(user, manufacturer),
        )

    @staticmethod
    def create_record(user, manufacturer=None, batch=None, product_code=None,
                      total_cost='1000.00', manufacturer_price_try='1200.00', stones=0, **fields):
        """
        Create an analysis record with stored totals (no cost engine).

        `stones` adds that many plain stones to the record.
        """
        if not product_code:
            product_code = f'PRD-{TestDataFactory.random_string(6).upper()}'
        if batch is not None and manufacturer is None:
            manufacturer = batch.manufacturer
        total_cost = Decimal(total_cost)
        manufacturer_price_try = Decimal(manufacturer_price_try)
        fields.setdefault('total_grams', Decimal('5.000'))
        record = AnalysisRecord.objects.create(
            user=user,
            manufacturer=manufacturer,
            batch=batch,
            product_code=product_code,
            total_cost=total_cost,
            manufacturer_price_try=manufacturer_price_try,
            profit_loss=manufacturer_price_try - total_cost,
            **fields
        )
        for _ in range(stones):
            AnalysisStone.objects.create(record=record, stone_type='Safir', carat_size=Decimal('0.1000'))
        return record


class AuthenticatedAPIClient(APIClient):
    """APIClient with authentication helper"""

    def authenticate_user(self, user):
        """Authenticate the client with a user"""
        refresh = RefreshToken.for_user(user)
        self.credentials(HTTP_AUTHORIZATION=f'Bearer {refresh.access_token}')
        return self

    def logout(self):
        """Remove authentication"""
        self.credentials()
