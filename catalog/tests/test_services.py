"""
Tests — CatalogService lookups and the seed_catalog command.

@file catalog/tests/test_services.py
"""

import json
from decimal import Decimal

import pytest
from django.core.management import call_command

from catalog.models import Product, ProductVariant, Supplier
from catalog.services import CatalogService
from tests.factories import ProductFactory, ProductVariantFactory, SupplierFactory


pytestmark = pytest.mark.django_db


class TestCatalogService:

    def test_variant_exists(self):
        variant = ProductVariantFactory()
        assert CatalogService.variant_exists(variant.pk)
        assert not CatalogService.variant_exists(variant.pk + 1000)

    def test_variants_by_id(self):
        variant = ProductVariantFactory()
        found = CatalogService.variants_by_id([variant.pk, 999999])
        assert list(found) == [variant.pk]
        assert found[variant.pk].product == variant.product

    def test_unit_prices(self):
        a = ProductVariantFactory(price=Decimal('12.00'))
        b = ProductVariantFactory(price=Decimal('3.50'))
        assert CatalogService.unit_prices([a.pk, b.pk, 999999]) == {a.pk: Decimal('12.00'), b.pk: Decimal('3.50')}

    def test_search_variant_ids(self):
        product = ProductFactory(name='Trail Runner', brand='Ridge')
        grey = ProductVariantFactory(product=product, color='Grey', size='41')
        blue = ProductVariantFactory(product=product, color='Blue', size='43')
        other = ProductVariantFactory()
        assert set(CatalogService.search_variant_ids('ridge')) == {grey.pk, blue.pk}
        assert CatalogService.search_variant_ids('grey') == [grey.pk]
        assert set(CatalogService.search_variant_ids('')) == {grey.pk, blue.pk, other.pk}

    def test_variant_ids_for_product(self):
        variant = ProductVariantFactory()
        ProductVariantFactory()
        assert CatalogService.variant_ids_for_product(variant.product_id) == [variant.pk]

    def test_supplier_lookups(self):
        supplier = SupplierFactory(name='Hanoi Leather Works')
        SupplierFactory(name='Saigon Footwear Co.')
        assert CatalogService.supplier_names([supplier.pk]) == {supplier.pk: 'Hanoi Leather Works'}
        assert CatalogService.search_supplier_ids('leather') == [supplier.pk]
        assert CatalogService.search_supplier_ids('') == []
        assert [row['name'] for row in CatalogService.supplier_choices()] == [
            'Hanoi Leather Works', 'Saigon Footwear Co.',
        ]

    def test_variant_choices(self):
        variant = ProductVariantFactory(product__name='Court Classic', color='White', size='40')
        rows = CatalogService.variant_choices()
        assert rows[0]['id'] == variant.pk
        assert rows[0]['display_name'] == 'Court Classic - White - 40'


class TestSeedCatalog:

    def test_builtin_sample_is_idempotent(self):
        call_command('seed_catalog')
        counts = (Supplier.objects.count(), Product.objects.count(), ProductVariant.objects.count())
        call_command('seed_catalog')
        assert (Supplier.objects.count(), Product.objects.count(), ProductVariant.objects.count()) == counts
        assert counts == (2, 2, 5)

    def test_from_file(self, tmp_path):
        path = tmp_path / 'catalog.json'
        path.write_text(json.dumps({
            'suppliers': [{'name': 'Acme'}],
            'products': [{'name': 'Boot', 'variants': [{'sku': 'BT-1', 'size': 42, 'price': '9.90'}]}],
        }), encoding='utf-8')
        call_command('seed_catalog', file=str(path))
        variant = ProductVariant.objects.get(sku='BT-1')
        assert variant.size == '42'
        assert variant.price == Decimal('9.90')
        assert Supplier.objects.filter(name='Acme').exists()
