# Generated manually
import django.core.validators
from decimal import Decimal
from django.db import migrations, models

PRODUCT_TYPE_CHOICES = [('ring', 'Ring'), ('necklace', 'Necklace'), ('pendant', 'Pendant'), ('bracelet', 'Bracelet'), ('earring', 'Earring'), ('brooch', 'Brooch'), ('bangle', 'Bangle'), ('chain', 'Chain'), ('solitaire', 'Solitaire'), ('fivestone', 'Five-stone'), ('set', 'Set'), ('other', 'Other')]


class Migration(migrations.Migration):

    dependencies = [
        ('pricing', '0001_initial'),
    ]

    operations = [
        migrations.CreateModel(
            name='PolishingPrice',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('product_type', models.CharField(choices=PRODUCT_TYPE_CHOICES, max_length=20)),
                ('price_per_gram', models.DecimalField(decimal_places=2, max_digits=10, validators=[django.core.validators.MinValueValidator(Decimal('0'))])),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('updated_at', models.DateTimeField(auto_now=True)),
            ],
            options={
                'db_table': 'polishing_prices',
                'ordering': ['product_type', 'id'],
            },
        ),
    ]
