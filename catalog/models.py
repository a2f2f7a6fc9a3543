"""
Catalog — Models

Reference data owned by the catalog: suppliers, products and their
sellable variants. The stock ledger refers to variants and suppliers by
id only; nothing here is mutated by the ledger.

@file catalog/models.py
"""

from decimal import Decimal

from django.core.validators import MinValueValidator
from django.db import models
from django.utils.translation import gettext_lazy as _

from core.models import TimestampMixin


class Supplier(TimestampMixin):
    name = models.CharField(_('name'), max_length=200, unique=True)
    contact_info = models.CharField(_('contact info'), max_length=255, blank=True)

    class Meta:
        verbose_name = _('supplier')
        verbose_name_plural = _('suppliers')
        ordering = ['name']

    def __str__(self):
        return self.name


class Product(TimestampMixin):
    name = models.CharField(_('name'), max_length=200, db_index=True)
    category = models.CharField(_('category'), max_length=100, blank=True)
    brand = models.CharField(_('brand'), max_length=100, blank=True)

    class Meta:
        verbose_name = _('product')
        verbose_name_plural = _('products')
        ordering = ['name']

    def __str__(self):
        return self.name


class ProductVariant(TimestampMixin):
    """A sellable unit: one color/size combination of a product."""

    product = models.ForeignKey(
        Product,
        on_delete=models.CASCADE,
        related_name='variants',
        verbose_name=_('product'),
    )
    color = models.CharField(_('color'), max_length=50, blank=True)
    size = models.CharField(_('size'), max_length=20, blank=True)
    sku = models.CharField(_('SKU'), max_length=64, unique=True)
    price = models.DecimalField(
        _('price'), max_digits=12, decimal_places=2,
        default=Decimal('0'), validators=[MinValueValidator(Decimal('0'))],
    )

    class Meta:
        verbose_name = _('product variant')
        verbose_name_plural = _('product variants')
        ordering = ['product__name', 'color', 'size']
        constraints = [
            models.UniqueConstraint(
                fields=['product', 'color', 'size'], name='catalog_variant_unique_combo',
            ),
        ]

    def __str__(self):
        return self.display_name

    @property
    def display_name(self) -> str:
        parts = [self.product.name, self.color, self.size]
        return ' - '.join(p for p in parts if p)
