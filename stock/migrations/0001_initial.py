import uuid
from decimal import Decimal

import django.core.validators
import django.utils.timezone
from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = []

    operations = [
        migrations.CreateModel(
            name='Stock',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('variant_id', models.BigIntegerField(
                    help_text='Catalog product variant; FK resolved in application layer',
                    unique=True, verbose_name='variant ID',
                )),
                ('available_quantity', models.PositiveIntegerField(default=0, verbose_name='available quantity')),
                ('reserved_quantity', models.PositiveIntegerField(default=0, verbose_name='reserved quantity')),
                ('last_updated', models.DateTimeField(default=django.utils.timezone.now, verbose_name='last updated')),
                ('last_updated_by', models.CharField(blank=True, max_length=150, verbose_name='last updated by')),
            ],
            options={
                'verbose_name': 'stock level',
                'verbose_name_plural': 'stock levels',
                'ordering': ['variant_id'],
                'indexes': [models.Index(fields=['available_quantity'], name='stock_available_idx')],
            },
        ),
        migrations.CreateModel(
            name='StockTransaction',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('variant_id', models.BigIntegerField(db_index=True, verbose_name='variant ID')),
                ('transaction_type', models.CharField(
                    choices=[
                        ('STOCK_IN', 'Stock in'), ('STOCK_OUT', 'Stock out'), ('RESERVE', 'Reserve'),
                        ('RELEASE', 'Release'), ('ADJUSTMENT', 'Adjustment'),
                    ],
                    db_index=True, max_length=16, verbose_name='type',
                )),
                ('quantity_change', models.IntegerField(verbose_name='quantity change')),
                ('available_before', models.PositiveIntegerField(verbose_name='available before')),
                ('available_after', models.PositiveIntegerField(verbose_name='available after')),
                ('reserved_before', models.PositiveIntegerField(verbose_name='reserved before')),
                ('reserved_after', models.PositiveIntegerField(verbose_name='reserved after')),
                ('timestamp', models.DateTimeField(
                    db_index=True, default=django.utils.timezone.now, verbose_name='timestamp',
                )),
                ('reason', models.CharField(blank=True, max_length=255, verbose_name='reason')),
                ('notes', models.TextField(blank=True, verbose_name='notes')),
                ('created_by', models.CharField(blank=True, max_length=150, verbose_name='created by')),
                ('reference_type', models.CharField(
                    blank=True, help_text='StockReceipt, StockAudit, ...', max_length=50,
                    verbose_name='reference type',
                )),
                ('reference_id', models.UUIDField(blank=True, null=True, verbose_name='reference ID')),
            ],
            options={
                'verbose_name': 'stock transaction',
                'verbose_name_plural': 'stock transactions',
                'ordering': ['timestamp', 'id'],
                'indexes': [
                    models.Index(fields=['variant_id', 'timestamp'], name='stocktx_variant_ts_idx'),
                    models.Index(fields=['transaction_type', 'timestamp'], name='stocktx_type_ts_idx'),
                    models.Index(fields=['reference_type', 'reference_id'], name='stocktx_reference_idx'),
                ],
            },
        ),
        migrations.CreateModel(
            name='StockReceipt',
            fields=[
                ('created_at', models.DateTimeField(auto_now_add=True, db_index=True, verbose_name='created at')),
                ('updated_at', models.DateTimeField(auto_now=True, verbose_name='updated at')),
                ('id', models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                ('variant_id', models.BigIntegerField(db_index=True, verbose_name='variant ID')),
                ('supplier_id', models.BigIntegerField(
                    help_text='Catalog supplier; FK resolved in application layer', verbose_name='supplier ID',
                )),
                ('quantity_received', models.PositiveIntegerField(verbose_name='quantity received')),
                ('unit_cost', models.DecimalField(
                    decimal_places=2, default=Decimal('0'), max_digits=12,
                    validators=[django.core.validators.MinValueValidator(Decimal('0'))],
                    verbose_name='unit cost',
                )),
                ('batch_number', models.CharField(blank=True, max_length=100, verbose_name='batch number')),
                ('notes', models.TextField(blank=True, verbose_name='notes')),
                ('entry_date', models.DateTimeField(default=django.utils.timezone.now, verbose_name='entry date')),
                ('received_by', models.CharField(blank=True, max_length=150, verbose_name='received by')),
                ('is_processed', models.BooleanField(default=False, verbose_name='processed')),
                ('processed_at', models.DateTimeField(blank=True, null=True, verbose_name='processed at')),
                ('processed_by', models.CharField(blank=True, max_length=150, verbose_name='processed by')),
            ],
            options={
                'verbose_name': 'stock receipt',
                'verbose_name_plural': 'stock receipts',
                'ordering': ['-entry_date'],
                'indexes': [
                    models.Index(fields=['is_processed', 'entry_date'], name='receipt_processed_idx'),
                    models.Index(fields=['supplier_id', 'entry_date'], name='receipt_supplier_idx'),
                ],
            },
        ),
    ]
