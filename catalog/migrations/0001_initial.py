from decimal import Decimal

import django.core.validators
import django.db.models.deletion
from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = []

    operations = [
        migrations.CreateModel(
            name='Product',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('created_at', models.DateTimeField(auto_now_add=True, db_index=True, verbose_name='created at')),
                ('updated_at', models.DateTimeField(auto_now=True, verbose_name='updated at')),
                ('name', models.CharField(db_index=True, max_length=200, verbose_name='name')),
                ('category', models.CharField(blank=True, max_length=100, verbose_name='category')),
                ('brand', models.CharField(blank=True, max_length=100, verbose_name='brand')),
            ],
            options={
                'verbose_name': 'product',
                'verbose_name_plural': 'products',
                'ordering': ['name'],
            },
        ),
        migrations.CreateModel(
            name='Supplier',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('created_at', models.DateTimeField(auto_now_add=True, db_index=True, verbose_name='created at')),
                ('updated_at', models.DateTimeField(auto_now=True, verbose_name='updated at')),
                ('name', models.CharField(max_length=200, unique=True, verbose_name='name')),
                ('contact_info', models.CharField(blank=True, max_length=255, verbose_name='contact info')),
            ],
            options={
                'verbose_name': 'supplier',
                'verbose_name_plural': 'suppliers',
                'ordering': ['name'],
            },
        ),
        migrations.CreateModel(
            name='ProductVariant',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('created_at', models.DateTimeField(auto_now_add=True, db_index=True, verbose_name='created at')),
                ('updated_at', models.DateTimeField(auto_now=True, verbose_name='updated at')),
                ('color', models.CharField(blank=True, max_length=50, verbose_name='color')),
                ('size', models.CharField(blank=True, max_length=20, verbose_name='size')),
                ('sku', models.CharField(max_length=64, unique=True, verbose_name='SKU')),
                ('price', models.DecimalField(
                    decimal_places=2, default=Decimal('0'), max_digits=12,
                    validators=[django.core.validators.MinValueValidator(Decimal('0'))],
                    verbose_name='price',
                )),
                ('product', models.ForeignKey(
                    on_delete=django.db.models.deletion.CASCADE, related_name='variants',
                    to='catalog.product', verbose_name='product',
                )),
            ],
            options={
                'verbose_name': 'product variant',
                'verbose_name_plural': 'product variants',
                'ordering': ['product__name', 'color', 'size'],
                'constraints': [
                    models.UniqueConstraint(fields=('product', 'color', 'size'), name='catalog_variant_unique_combo'),
                ],
            },
        ),
    ]
