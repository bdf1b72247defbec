# Generated manually
import django.core.validators
from decimal import Decimal
from django.db import migrations, models

NON_NEGATIVE = [django.core.validators.MinValueValidator(Decimal('0'))]
PERCENT = [django.core.validators.MinValueValidator(Decimal('0')), django.core.validators.MaxValueValidator(Decimal('100'))]
PRODUCT_TYPE_CHOICES = [('ring', 'Ring'), ('necklace', 'Necklace'), ('pendant', 'Pendant'), ('bracelet', 'Bracelet'), ('earring', 'Earring'), ('brooch', 'Brooch'), ('bangle', 'Bangle'), ('chain', 'Chain'), ('solitaire', 'Solitaire'), ('fivestone', 'Five-stone'), ('set', 'Set'), ('other', 'Other')]


class Migration(migrations.Migration):

    initial = True

    dependencies = [
    ]

    operations = [
        migrations.CreateModel(
            name='StoneSettingRate',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('stone_category', models.CharField(choices=[('diamond', 'Diamond'), ('colored', 'Colored stone')], default='diamond', max_length=20)),
                ('min_carat', models.DecimalField(decimal_places=4, max_digits=6, validators=NON_NEGATIVE)),
                ('max_carat', models.DecimalField(decimal_places=4, max_digits=6, validators=NON_NEGATIVE)),
                ('price_per_stone', models.DecimalField(decimal_places=2, max_digits=10, validators=NON_NEGATIVE)),
                ('pricing_type', models.CharField(choices=[('per_stone', 'Per stone'), ('per_carat', 'Per carat')], default='per_stone', max_length=20)),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('updated_at', models.DateTimeField(auto_now=True)),
            ],
            options={
                'db_table': 'stone_setting_rates',
                'ordering': ['stone_category', 'min_carat', 'id'],
            },
        ),
        migrations.CreateModel(
            name='GemstonePrice',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('stone_type', models.CharField(max_length=100)),
                ('quality', models.CharField(blank=True, max_length=20)),
                ('min_carat', models.DecimalField(blank=True, decimal_places=4, max_digits=6, null=True, validators=NON_NEGATIVE)),
                ('max_carat', models.DecimalField(blank=True, decimal_places=4, max_digits=6, null=True, validators=NON_NEGATIVE)),
                ('price_per_carat', models.DecimalField(decimal_places=2, max_digits=10, validators=NON_NEGATIVE)),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('updated_at', models.DateTimeField(auto_now=True)),
            ],
            options={
                'db_table': 'gemstone_price_lists',
                'ordering': ['stone_type', 'quality', 'min_carat', 'id'],
            },
        ),
        migrations.CreateModel(
            name='RapaportPrice',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('shape', models.CharField(max_length=30)),
                ('low_carat', models.DecimalField(decimal_places=2, max_digits=6, validators=NON_NEGATIVE)),
                ('high_carat', models.DecimalField(decimal_places=2, max_digits=6, validators=NON_NEGATIVE)),
                ('color', models.CharField(max_length=5)),
                ('clarity', models.CharField(max_length=10)),
                ('price_per_carat', models.DecimalField(decimal_places=2, max_digits=10, validators=NON_NEGATIVE)),
                ('uploaded_at', models.DateTimeField(auto_now_add=True)),
            ],
            options={
                'db_table': 'rapaport_prices',
                'ordering': ['shape', 'low_carat', 'color', 'clarity'],
                'indexes': [models.Index(fields=['shape', 'color', 'clarity'], name='rapaport_bucket_idx')],
            },
        ),
        migrations.CreateModel(
            name='RapaportDiscountRate',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('min_carat', models.DecimalField(decimal_places=4, max_digits=6, validators=NON_NEGATIVE)),
                ('max_carat', models.DecimalField(decimal_places=4, max_digits=6, validators=NON_NEGATIVE)),
                ('discount_percent', models.DecimalField(decimal_places=2, max_digits=5, validators=PERCENT)),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('updated_at', models.DateTimeField(auto_now=True)),
            ],
            options={
                'db_table': 'rapaport_discount_rates',
                'ordering': ['min_carat', 'id'],
            },
        ),
        migrations.CreateModel(
            name='LaborPrice',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('product_type', models.CharField(choices=PRODUCT_TYPE_CHOICES, max_length=20)),
                ('price_per_gram', models.DecimalField(decimal_places=2, max_digits=10, validators=NON_NEGATIVE)),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('updated_at', models.DateTimeField(auto_now=True)),
            ],
            options={
                'db_table': 'labor_prices',
                'ordering': ['product_type', 'id'],
            },
        ),
        migrations.CreateModel(
            name='PolishPrice',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('product_type', models.CharField(choices=PRODUCT_TYPE_CHOICES, max_length=20)),
                ('price_usd', models.DecimalField(decimal_places=2, max_digits=10, validators=NON_NEGATIVE)),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('updated_at', models.DateTimeField(auto_now=True)),
            ],
            options={
                'db_table': 'polish_prices',
                'ordering': ['product_type', 'id'],
            },
        ),
        migrations.CreateModel(
            name='PolishFirePrice',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('product_type', models.CharField(choices=PRODUCT_TYPE_CHOICES, max_length=20)),
                ('fire_rate_usd', models.DecimalField(decimal_places=2, max_digits=10, validators=NON_NEGATIVE)),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('updated_at', models.DateTimeField(auto_now=True)),
            ],
            options={
                'db_table': 'polish_fire_prices',
                'ordering': ['product_type', 'id'],
            },
        ),
    ]
