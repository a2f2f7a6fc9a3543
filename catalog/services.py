"""
Catalog — Service Layer

Narrow read interface the stock ledger uses to talk to the catalog:
variant existence checks, price and name lookups, and text search
resolved to variant / supplier ids.

@file catalog/services.py
"""

from collections.abc import Iterable
from decimal import Decimal

from django.db.models import Q

from .models import ProductVariant, Supplier


class CatalogService:
    """Read-only catalog lookups keyed by id."""

    @staticmethod
    def variant_exists(variant_id: int) -> bool:
        return ProductVariant.objects.filter(pk=variant_id).exists()

    @staticmethod
    def variants_by_id(variant_ids: Iterable[int]) -> dict[int, ProductVariant]:
        return ProductVariant.objects.select_related('product').in_bulk(list(variant_ids))

    @staticmethod
    def unit_prices(variant_ids: Iterable[int]) -> dict[int, Decimal]:
        rows = ProductVariant.objects.filter(pk__in=list(variant_ids)).values_list('pk', 'price')
        return dict(rows)

    @staticmethod
    def search_variant_ids(term: str) -> list[int]:
        """Variants whose product name, color, size, category, brand or SKU contain term."""
        term = (term or '').strip()
        qs = ProductVariant.objects.all()
        if term:
            qs = qs.filter(
                Q(product__name__icontains=term)
                | Q(color__icontains=term)
                | Q(size__icontains=term)
                | Q(product__category__icontains=term)
                | Q(product__brand__icontains=term)
                | Q(sku__icontains=term)
            )
        return list(qs.values_list('pk', flat=True))

    @staticmethod
    def variant_ids_for_product(product_id: int) -> list[int]:
        return list(
            ProductVariant.objects.filter(product_id=product_id).values_list('pk', flat=True)
        )

    @staticmethod
    def supplier_names(supplier_ids: Iterable[int]) -> dict[int, str]:
        return dict(
            Supplier.objects.filter(pk__in=list(supplier_ids)).values_list('pk', 'name')
        )

    @staticmethod
    def search_supplier_ids(term: str) -> list[int]:
        term = (term or '').strip()
        if not term:
            return []
        return list(Supplier.objects.filter(name__icontains=term).values_list('pk', flat=True))

    @staticmethod
    def supplier_choices() -> list[dict]:
        """Dropdown rows for receiving forms."""
        return [
            {'id': s.pk, 'name': s.name, 'contact_info': s.contact_info}
            for s in Supplier.objects.order_by('name')
        ]

    @staticmethod
    def variant_choices() -> list[dict]:
        """Dropdown rows for receiving and audit forms."""
        return [
            {
                'id': v.pk,
                'display_name': v.display_name,
                'product_name': v.product.name,
                'color': v.color,
                'size': v.size,
                'price': v.price,
            }
            for v in ProductVariant.objects.select_related('product')
        ]
