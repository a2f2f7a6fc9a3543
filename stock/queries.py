"""
Stock — Inventory Queries

Read-side reporting over Stock, StockTransaction and StockReceipt:
status classification, search, valuation and movement statistics.
Nothing here writes.

@file stock/queries.py
"""

from datetime import timedelta
from decimal import Decimal

from django.conf import settings
from django.db.models import Count, Q, QuerySet, Sum
from django.db.models.functions import Abs
from django.utils import timezone

from catalog.services import CatalogService
from core.constants import STATUS_IN_STOCK, STATUS_LOW_STOCK, STATUS_OUT_OF_STOCK

from .models import Stock, StockReceipt, StockTransaction


class InventoryQueryService:

    def __init__(self, catalog=None, low_stock_threshold: int | None = None):
        self.catalog = catalog or CatalogService
        self._low_stock_threshold = low_stock_threshold

    @property
    def low_stock_threshold(self) -> int:
        if self._low_stock_threshold is None:
            return settings.STOCK_LOW_STOCK_THRESHOLD
        return self._low_stock_threshold

    def classify(self, available_quantity: int) -> str:
        """out-of-stock at zero, low-stock up to the threshold, in-stock above."""
        if available_quantity <= 0:
            return STATUS_OUT_OF_STOCK
        if available_quantity <= self.low_stock_threshold:
            return STATUS_LOW_STOCK
        return STATUS_IN_STOCK

    def _status_filter(self, status: str) -> Q | None:
        threshold = self.low_stock_threshold
        if status == STATUS_OUT_OF_STOCK:
            return Q(available_quantity=0)
        if status == STATUS_LOW_STOCK:
            return Q(available_quantity__gt=0, available_quantity__lte=threshold)
        if status == STATUS_IN_STOCK:
            return Q(available_quantity__gt=threshold)
        return None

    # -- listings ----------------------------------------------------------

    def all_inventory(self) -> QuerySet:
        return Stock.objects.order_by('variant_id')

    def search_inventory(self, term: str) -> QuerySet:
        """Catalog text match; a numeric term also matches the variant id."""
        term = (term or '').strip()
        if not term:
            return self.all_inventory()
        condition = Q(variant_id__in=self.catalog.search_variant_ids(term))
        if term.isdigit():
            condition |= Q(variant_id=int(term))
        return self.all_inventory().filter(condition)

    def inventory_by_status(self, status: str) -> QuerySet:
        """Unknown status values return the full inventory."""
        condition = self._status_filter(status)
        qs = Stock.objects.all()
        if condition is not None:
            qs = qs.filter(condition)
        return qs.order_by('available_quantity', 'variant_id')

    def inventory_by_product(self, product_id: int) -> QuerySet:
        return self.all_inventory().filter(variant_id__in=self.catalog.variant_ids_for_product(product_id))

    def low_stock(self) -> QuerySet:
        return self.inventory_by_status(STATUS_LOW_STOCK)

    def out_of_stock(self) -> QuerySet:
        return self.inventory_by_status(STATUS_OUT_OF_STOCK)

    # -- statistics --------------------------------------------------------

    def inventory_stats(self) -> dict:
        threshold = self.low_stock_threshold
        counts = Stock.objects.aggregate(
            total=Count('id'),
            in_stock=Count('id', filter=Q(available_quantity__gt=threshold)),
            low_stock=Count('id', filter=Q(available_quantity__gt=0, available_quantity__lte=threshold)),
            out_of_stock=Count('id', filter=Q(available_quantity=0)),
        )
        return {
            'total': counts['total'],
            STATUS_IN_STOCK: counts['in_stock'],
            STATUS_LOW_STOCK: counts['low_stock'],
            STATUS_OUT_OF_STOCK: counts['out_of_stock'],
        }

    def total_stock_quantity(self) -> int:
        result = Stock.objects.aggregate(total=Sum('available_quantity'))
        return result['total'] or 0

    def total_stock_value(self) -> Decimal:
        """Sum of available quantity x current catalog price. Unknown variants count as zero."""
        rows = list(Stock.objects.filter(available_quantity__gt=0).values_list('variant_id', 'available_quantity'))
        prices = self.catalog.unit_prices(variant_id for variant_id, _ in rows)
        total = Decimal('0')
        for variant_id, quantity in rows:
            total += prices.get(variant_id, Decimal('0')) * quantity
        return total

    def stock_value_by_supplier(self) -> dict[str, Decimal]:
        """Received value (quantity x unit cost) of processed receipts, keyed by supplier name."""
        rows = StockReceipt.objects.filter(is_processed=True).values_list(
            'supplier_id', 'quantity_received', 'unit_cost',
        )
        by_id: dict[int, Decimal] = {}
        for supplier_id, quantity, unit_cost in rows:
            by_id[supplier_id] = by_id.get(supplier_id, Decimal('0')) + unit_cost * quantity

        names = self.catalog.supplier_names(by_id.keys())
        result = {}
        for supplier_id, value in sorted(by_id.items(), key=lambda item: item[1], reverse=True):
            result[names.get(supplier_id, f'Supplier #{supplier_id}')] = value
        return result

    def inventory_value(self) -> dict:
        return {
            'total_quantity': self.total_stock_quantity(),
            'total_value': self.total_stock_value(),
            'by_supplier': self.stock_value_by_supplier(),
        }

    def top_moving_stocks(self, count: int = 10, days: int | None = None) -> list[Stock]:
        """
        Variants with the largest absolute quantity movement in the window.
        Each returned Stock carries a moved_quantity attribute.
        """
        if days is None:
            days = settings.STOCK_TOP_MOVING_DAYS
        since = timezone.now() - timedelta(days=days)
        movement = list(
            StockTransaction.objects.filter(timestamp__gte=since)
            .values('variant_id')
            .annotate(moved=Sum(Abs('quantity_change')))
            .filter(moved__gt=0)
            .order_by('-moved', 'variant_id')[:count]
        )
        stocks = Stock.objects.in_bulk([row['variant_id'] for row in movement], field_name='variant_id')
        result = []
        for row in movement:
            stock = stocks.get(row['variant_id'])
            if stock is None:
                continue
            stock.moved_quantity = row['moved']
            result.append(stock)
        return result

    def movements_by_type(self, start=None, end=None) -> dict[str, int]:
        """Entry counts per transaction type; defaults to the last 30 days."""
        end = end or timezone.now()
        start = start or end - timedelta(days=30)
        rows = (
            StockTransaction.objects.filter(timestamp__gte=start, timestamp__lte=end)
            .values('transaction_type')
            .annotate(count=Count('id'))
            .order_by()
        )
        counts = {value: 0 for value in StockTransaction.TransactionType.values}
        for row in rows:
            counts[row['transaction_type']] = row['count']
        return counts

    def dashboard(self) -> dict:
        return {
            'stats': self.inventory_stats(),
            'total_quantity': self.total_stock_quantity(),
            'total_value': self.total_stock_value(),
            'pending_receipts': StockReceipt.objects.filter(is_processed=False).count(),
            'movements': self.movements_by_type(),
        }


inventory = InventoryQueryService()
