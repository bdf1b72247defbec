# Generated manually
import django.core.validators
import django.db.models.deletion
from decimal import Decimal
from django.conf import settings
from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        migrations.swappable_dependency(settings.AUTH_USER_MODEL),
        ('manufacturers', '0001_initial'),
    ]

    operations = [
        migrations.CreateModel(
            name='Batch',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('batch_number', models.PositiveIntegerField()),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('manufacturer', models.ForeignKey(on_delete=django.db.models.deletion.PROTECT, related_name='batches', to='manufacturers.manufacturer')),
                ('user', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='batches', to=settings.AUTH_USER_MODEL)),
            ],
            options={
                'db_table': 'batches',
                'ordering': ['-created_at', '-id'],
                'constraints': [models.UniqueConstraint(fields=('user', 'manufacturer', 'batch_number'), name='unique_batch_number')],
            },
        ),
        migrations.CreateModel(
            name='AnalysisRecord',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('product_code', models.CharField(max_length=100)),
                ('product_type', models.CharField(choices=[('ring', 'Ring'), ('necklace', 'Necklace'), ('pendant', 'Pendant'), ('bracelet', 'Bracelet'), ('earring', 'Earring'), ('brooch', 'Brooch'), ('bangle', 'Bangle'), ('chain', 'Chain'), ('solitaire', 'Solitaire'), ('fivestone', 'Five-stone'), ('set', 'Set'), ('other', 'Other')], default='ring', max_length=20)),
                ('total_grams', models.DecimalField(decimal_places=3, max_digits=10, validators=[django.core.validators.MinValueValidator(Decimal('0.001'))])),
                ('gold_purity', models.PositiveSmallIntegerField(choices=[(24, '24K'), (22, '22K'), (18, '18K'), (14, '14K'), (10, '10K'), (8, '8K')], default=24)),
                ('gold_labor_cost', models.DecimalField(decimal_places=3, default=0, max_digits=10, validators=[django.core.validators.MinValueValidator(Decimal('0'))])),
                ('gold_labor_type', models.CharField(choices=[('dollar', 'Dollar'), ('gold', 'Gold (grams)')], default='dollar', max_length=10)),
                ('fire_percentage', models.DecimalField(decimal_places=2, default=0, max_digits=5, validators=[django.core.validators.MinValueValidator(Decimal('0')), django.core.validators.MaxValueValidator(Decimal('20'))])),
                ('polish_amount', models.DecimalField(decimal_places=2, default=0, max_digits=10, validators=[django.core.validators.MinValueValidator(Decimal('0'))])),
                ('certificate_amount', models.DecimalField(decimal_places=2, default=0, max_digits=10, validators=[django.core.validators.MinValueValidator(Decimal('0'))])),
                ('manufacturer_price', models.DecimalField(decimal_places=2, default=0, max_digits=12, validators=[django.core.validators.MinValueValidator(Decimal('0'))])),
                ('raw_material_cost', models.DecimalField(decimal_places=2, default=0, max_digits=14)),
                ('labor_cost', models.DecimalField(decimal_places=2, default=0, max_digits=14)),
                ('total_setting_cost', models.DecimalField(decimal_places=2, default=0, max_digits=14)),
                ('total_stone_cost', models.DecimalField(decimal_places=2, default=0, max_digits=14)),
                ('total_cost', models.DecimalField(decimal_places=2, default=0, max_digits=14)),
                ('manufacturer_price_try', models.DecimalField(decimal_places=2, default=0, max_digits=14)),
                ('profit_loss', models.DecimalField(decimal_places=2, default=0, max_digits=14)),
                ('gold_price_used', models.DecimalField(decimal_places=2, default=0, max_digits=12)),
                ('usd_try_used', models.DecimalField(decimal_places=4, default=0, max_digits=10)),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('updated_at', models.DateTimeField(auto_now=True)),
                ('batch', models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name='records', to='analysis.batch')),
                ('manufacturer', models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name='analysis_records', to='manufacturers.manufacturer')),
                ('user', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='analysis_records', to=settings.AUTH_USER_MODEL)),
            ],
            options={
                'db_table': 'analysis_records',
                'ordering': ['-created_at', '-id'],
                'indexes': [
                    models.Index(fields=['user', '-created_at'], name='analysis_user_created_idx'),
                    models.Index(fields=['product_code'], name='analysis_product_code_idx'),
                ],
            },
        ),
        migrations.CreateModel(
            name='AnalysisStone',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('stone_type', models.CharField(max_length=100)),
                ('carat_size', models.DecimalField(decimal_places=4, max_digits=6, validators=[django.core.validators.MinValueValidator(Decimal('0.0001'))])),
                ('quantity', models.PositiveIntegerField(default=1, validators=[django.core.validators.MinValueValidator(1)])),
                ('shape', models.CharField(blank=True, max_length=30)),
                ('color', models.CharField(blank=True, max_length=5)),
                ('clarity', models.CharField(blank=True, max_length=10)),
                ('quality', models.CharField(blank=True, max_length=20)),
                ('discount_percent', models.DecimalField(blank=True, decimal_places=2, max_digits=5, null=True, validators=[django.core.validators.MinValueValidator(Decimal('0')), django.core.validators.MaxValueValidator(Decimal('100'))])),
                ('price_per_carat', models.DecimalField(blank=True, decimal_places=2, max_digits=10, null=True, validators=[django.core.validators.MinValueValidator(Decimal('0'))])),
                ('rapaport_price', models.DecimalField(blank=True, decimal_places=2, max_digits=10, null=True)),
                ('setting_cost', models.DecimalField(decimal_places=2, default=0, max_digits=12)),
                ('total_stone_cost', models.DecimalField(decimal_places=2, default=0, max_digits=12)),
                ('record', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='stones', to='analysis.analysisrecord')),
            ],
            options={
                'db_table': 'analysis_stones',
                'ordering': ['id'],
            },
        ),
    ]
