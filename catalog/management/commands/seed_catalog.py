"""
Catalog — Management Command: seed_catalog

Loads suppliers, products and variants for local development and demos,
either from a JSON file or from a small built-in sample.

Usage::

    python manage.py seed_catalog
    python manage.py seed_catalog --file catalog.json

Idempotent: safe to re-run (uses get_or_create / update_or_create).

@file catalog/management/commands/seed_catalog.py
"""

import json
import logging
from collections import Counter
from decimal import Decimal

from django.core.management.base import BaseCommand
from django.db import transaction

from catalog.models import Product, ProductVariant, Supplier

logger = logging.getLogger('stockledger')

SAMPLE_DATA = {
    'suppliers': [
        {'name': 'Saigon Footwear Co.', 'contact_info': 'sales@saigonfootwear.example'},
        {'name': 'Hanoi Leather Works', 'contact_info': '+84 24 0000 0000'},
    ],
    'products': [
        {
            'name': 'Court Classic',
            'category': 'Sneakers',
            'brand': 'Stride',
            'variants': [
                {'sku': 'CC-WHT-40', 'color': 'White', 'size': '40', 'price': '1290000'},
                {'sku': 'CC-WHT-41', 'color': 'White', 'size': '41', 'price': '1290000'},
                {'sku': 'CC-BLK-42', 'color': 'Black', 'size': '42', 'price': '1350000'},
            ],
        },
        {
            'name': 'Trail Runner',
            'category': 'Running',
            'brand': 'Ridge',
            'variants': [
                {'sku': 'TR-GRY-41', 'color': 'Grey', 'size': '41', 'price': '1890000'},
                {'sku': 'TR-BLU-43', 'color': 'Blue', 'size': '43', 'price': '1890000'},
            ],
        },
    ],
}


class Command(BaseCommand):
    help = 'Seed catalog reference data (suppliers, products, variants).'

    def add_arguments(self, parser):
        parser.add_argument(
            '--file',
            type=str,
            help='Path to a local JSON file (overrides the built-in sample).',
        )

    def handle(self, *args, **options):
        if options.get('file'):
            self.stdout.write(f'Loading catalog from {options["file"]}')
            with open(options['file'], 'r', encoding='utf-8') as f:
                data = json.load(f)
        else:
            self.stdout.write('Loading built-in sample catalog…')
            data = SAMPLE_DATA

        counter = Counter()

        with transaction.atomic():
            self._process_data(data, counter)

        logger.info('seed_catalog: %s', dict(counter))
        self.stdout.write(self.style.SUCCESS(
            f'Done. Suppliers: {counter["supplier"]}, Products: {counter["product"]}, '
            f'Variants: {counter["variant"]}'
        ))

    def _process_data(self, data, counter):
        """
        Expected JSON shape:

        {
          "suppliers": [{"name": "...", "contact_info": "..."}],
          "products": [
            {"name": "...", "category": "...", "brand": "...",
             "variants": [{"sku": "...", "color": "...", "size": "...", "price": "..."}]}
          ]
        }
        """
        if not isinstance(data, dict):
            self.stderr.write('Unexpected JSON structure.')
            return

        for supplier_data in data.get('suppliers', []):
            name = (supplier_data.get('name') or '').strip()
            if not name:
                continue
            Supplier.objects.get_or_create(
                name=name,
                defaults={'contact_info': supplier_data.get('contact_info', '')},
            )
            counter['supplier'] += 1

        for product_data in data.get('products', []):
            name = (product_data.get('name') or '').strip()
            if not name:
                continue
            product, _ = Product.objects.get_or_create(
                name=name,
                defaults={
                    'category': product_data.get('category', ''),
                    'brand': product_data.get('brand', ''),
                },
            )
            counter['product'] += 1
            self.stdout.write(f'  Product: {name}')

            for variant_data in product_data.get('variants', []):
                sku = (variant_data.get('sku') or '').strip()
                if not sku:
                    continue
                ProductVariant.objects.update_or_create(
                    sku=sku,
                    defaults={
                        'product': product,
                        'color': variant_data.get('color', ''),
                        'size': str(variant_data.get('size', '')),
                        'price': Decimal(str(variant_data.get('price', '0'))),
                    },
                )
                counter['variant'] += 1
