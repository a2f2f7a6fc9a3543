"""
Tests — InventoryQueryService: classification, search, valuation, movement stats.

@file stock/tests/test_queries.py
"""

from datetime import timedelta
from decimal import Decimal

import pytest
from django.utils import timezone

from core.constants import STATUS_IN_STOCK, STATUS_LOW_STOCK, STATUS_OUT_OF_STOCK
from stock.queries import InventoryQueryService
from stock.services import LedgerService
from tests.factories import (
    ProductFactory,
    ProductVariantFactory,
    StockFactory,
    StockReceiptFactory,
    SupplierFactory,
)


pytestmark = pytest.mark.django_db


@pytest.fixture
def queries():
    return InventoryQueryService(low_stock_threshold=10)


class TestClassify:

    @pytest.mark.parametrize('available, expected', [
        (0, STATUS_OUT_OF_STOCK),
        (1, STATUS_LOW_STOCK),
        (10, STATUS_LOW_STOCK),
        (11, STATUS_IN_STOCK),
    ])
    def test_boundaries(self, queries, available, expected):
        assert queries.classify(available) == expected

    def test_threshold_from_settings(self, settings):
        settings.STOCK_LOW_STOCK_THRESHOLD = 3
        queries = InventoryQueryService()
        assert queries.classify(4) == STATUS_IN_STOCK
        assert queries.classify(3) == STATUS_LOW_STOCK


class TestListings:

    @pytest.fixture(autouse=True)
    def inventory(self):
        StockFactory(variant_id=1, available_quantity=0)
        StockFactory(variant_id=2, available_quantity=4)
        StockFactory(variant_id=3, available_quantity=10)
        StockFactory(variant_id=4, available_quantity=50)

    def test_by_status(self, queries):
        assert [s.variant_id for s in queries.inventory_by_status(STATUS_OUT_OF_STOCK)] == [1]
        assert [s.variant_id for s in queries.inventory_by_status(STATUS_LOW_STOCK)] == [2, 3]
        assert [s.variant_id for s in queries.inventory_by_status(STATUS_IN_STOCK)] == [4]

    def test_unknown_status_returns_all(self, queries):
        assert queries.inventory_by_status('discontinued').count() == 4

    def test_stats(self, queries):
        assert queries.inventory_stats() == {
            'total': 4,
            STATUS_IN_STOCK: 1,
            STATUS_LOW_STOCK: 2,
            STATUS_OUT_OF_STOCK: 1,
        }

    def test_total_quantity(self, queries):
        assert queries.total_stock_quantity() == 64

    def test_all_inventory_ordered(self, queries):
        assert [s.variant_id for s in queries.all_inventory()] == [1, 2, 3, 4]


class TestSearch:

    def test_search_by_catalog_text(self, queries):
        runner = ProductVariantFactory(product__name='Trail Runner', color='Grey')
        court = ProductVariantFactory(product__name='Court Classic', color='White')
        StockFactory(variant_id=runner.pk)
        StockFactory(variant_id=court.pk)
        assert [s.variant_id for s in queries.search_inventory('trail')] == [runner.pk]
        assert [s.variant_id for s in queries.search_inventory('grey')] == [runner.pk]

    def test_numeric_term_matches_variant_id(self, queries):
        StockFactory(variant_id=987654)
        assert [s.variant_id for s in queries.search_inventory('987654')] == [987654]

    def test_blank_term_returns_all(self, queries):
        StockFactory.create_batch(3)
        assert queries.search_inventory('  ').count() == 3

    def test_by_product(self, queries):
        product = ProductFactory()
        a = ProductVariantFactory(product=product, size='40')
        b = ProductVariantFactory(product=product, size='41')
        other = ProductVariantFactory()
        for variant in (a, b, other):
            StockFactory(variant_id=variant.pk)
        assert {s.variant_id for s in queries.inventory_by_product(product.pk)} == {a.pk, b.pk}


class TestValuation:

    def test_total_stock_value_uses_catalog_price(self, queries):
        a = ProductVariantFactory(price=Decimal('10.00'))
        b = ProductVariantFactory(price=Decimal('2.50'))
        StockFactory(variant_id=a.pk, available_quantity=3)
        StockFactory(variant_id=b.pk, available_quantity=4, reserved_quantity=100)
        StockFactory(variant_id=999999, available_quantity=7)
        assert queries.total_stock_value() == Decimal('40.00')

    def test_value_by_supplier(self, queries):
        big = SupplierFactory(name='Big Supplier')
        small = SupplierFactory(name='Small Supplier')
        StockReceiptFactory(supplier_id=big.pk, quantity_received=10, unit_cost=Decimal('5'), is_processed=True)
        StockReceiptFactory(supplier_id=big.pk, quantity_received=2, unit_cost=Decimal('5'), is_processed=True)
        StockReceiptFactory(supplier_id=small.pk, quantity_received=1, unit_cost=Decimal('3'), is_processed=True)
        StockReceiptFactory(supplier_id=small.pk, quantity_received=100, unit_cost=Decimal('3'))
        StockReceiptFactory(supplier_id=424242, quantity_received=1, unit_cost=Decimal('1'), is_processed=True)

        result = queries.stock_value_by_supplier()
        assert result == {
            'Big Supplier': Decimal('60'),
            'Small Supplier': Decimal('3'),
            'Supplier #424242': Decimal('1'),
        }
        assert list(result) == ['Big Supplier', 'Small Supplier', 'Supplier #424242']

    def test_inventory_value_bundle(self, queries):
        value = queries.inventory_value()
        assert value == {'total_quantity': 0, 'total_value': Decimal('0'), 'by_supplier': {}}


class TestMovements:

    def test_top_moving(self, queries):
        ledger = LedgerService()
        ledger.add_stock(1, 100, 1, 'clerk')
        ledger.remove_stock(1, 30, 'sold')
        ledger.add_stock(2, 10, 1, 'clerk')
        ledger.add_stock(3, 5, 1, 'clerk')
        ledger.adjust_stock(3, 5, 'confirmed', 'clerk')

        top = queries.top_moving_stocks(count=2, days=30)
        assert [(s.variant_id, s.moved_quantity) for s in top] == [(1, 130), (2, 10)]

    def test_top_moving_excludes_old_entries(self, queries):
        ledger = LedgerService()
        ledger.add_stock(1, 10, 1, 'clerk')
        assert queries.top_moving_stocks(days=0) == []

    def test_movements_by_type(self, queries):
        ledger = LedgerService()
        ledger.add_stock(1, 10, 1, 'clerk')
        ledger.reserve_stock(1, 2)
        ledger.reserve_stock(1, 2)
        counts = queries.movements_by_type()
        assert counts['STOCK_IN'] == 1
        assert counts['RESERVE'] == 2
        assert counts['ADJUSTMENT'] == 0

    def test_movements_by_type_range(self, queries):
        LedgerService().add_stock(1, 10, 1, 'clerk')
        past = timezone.now() - timedelta(days=60)
        counts = queries.movements_by_type(start=past - timedelta(days=1), end=past)
        assert sum(counts.values()) == 0

    def test_dashboard(self, queries):
        LedgerService().add_stock(1, 10, 1, 'clerk')
        StockReceiptFactory()
        dashboard = queries.dashboard()
        assert dashboard['stats']['total'] == 1
        assert dashboard['total_quantity'] == 10
        assert dashboard['pending_receipts'] == 1
        assert dashboard['movements']['STOCK_IN'] == 1
