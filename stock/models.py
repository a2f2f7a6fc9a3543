"""
Stock — Models

Per-variant quantity records, the append-only transaction log of every
quantity change, and goods-received documents (receipts).

Stock rows are mutated exclusively by stock.services.LedgerService.
StockTransaction rows are INSERT ONLY; never update or delete.
Variants and suppliers are referenced by catalog id; no FK constraint.

@file stock/models.py
"""

from decimal import Decimal

from django.conf import settings
from django.core.validators import MinValueValidator
from django.db import models
from django.utils import timezone
from django.utils.translation import gettext_lazy as _

from core.exceptions import AlreadyProcessedError
from core.models import BaseModel


class Stock(models.Model):
    """
    Current quantity state of one variant. Exactly one row per variant
    once any stock event has occurred; a missing row means "never stocked".

    Rows are never deleted: zero quantity is a valid state.
    """

    variant_id = models.BigIntegerField(
        _('variant ID'), unique=True,
        help_text=_('Catalog product variant; FK resolved in application layer'),
    )
    available_quantity = models.PositiveIntegerField(_('available quantity'), default=0)
    reserved_quantity = models.PositiveIntegerField(_('reserved quantity'), default=0)
    last_updated = models.DateTimeField(_('last updated'), default=timezone.now)
    last_updated_by = models.CharField(_('last updated by'), max_length=150, blank=True)

    class Meta:
        verbose_name = _('stock level')
        verbose_name_plural = _('stock levels')
        ordering = ['variant_id']
        indexes = [
            models.Index(fields=['available_quantity'], name='stock_available_idx'),
        ]

    def __str__(self):
        return f'variant={self.variant_id} available={self.available_quantity} reserved={self.reserved_quantity}'

    @property
    def total_quantity(self) -> int:
        return self.available_quantity + self.reserved_quantity

    @property
    def is_in_stock(self) -> bool:
        return self.available_quantity > 0

    @property
    def is_out_of_stock(self) -> bool:
        return self.available_quantity <= 0

    def is_low_stock(self, threshold: int | None = None) -> bool:
        if threshold is None:
            threshold = settings.STOCK_LOW_STOCK_THRESHOLD
        return 0 < self.available_quantity <= threshold

    def delete(self, *args, **kwargs):
        raise NotImplementedError('Stock records are never deleted; adjust quantity to zero instead.')


class StockTransaction(models.Model):
    """
    One immutable quantity-changing event with before/after state.

    quantity_change is signed and always equals the available-side delta:
    available_after - available_before. The integer PK preserves insertion
    order for entries sharing a timestamp.
    """

    class TransactionType(models.TextChoices):
        STOCK_IN = 'STOCK_IN', _('Stock in')
        STOCK_OUT = 'STOCK_OUT', _('Stock out')
        RESERVE = 'RESERVE', _('Reserve')
        RELEASE = 'RELEASE', _('Release')
        ADJUSTMENT = 'ADJUSTMENT', _('Adjustment')

    variant_id = models.BigIntegerField(_('variant ID'), db_index=True)
    transaction_type = models.CharField(
        _('type'), max_length=16,
        choices=TransactionType.choices, db_index=True,
    )
    quantity_change = models.IntegerField(_('quantity change'))
    available_before = models.PositiveIntegerField(_('available before'))
    available_after = models.PositiveIntegerField(_('available after'))
    reserved_before = models.PositiveIntegerField(_('reserved before'))
    reserved_after = models.PositiveIntegerField(_('reserved after'))
    timestamp = models.DateTimeField(_('timestamp'), default=timezone.now, db_index=True)
    reason = models.CharField(_('reason'), max_length=255, blank=True)
    notes = models.TextField(_('notes'), blank=True)
    created_by = models.CharField(_('created by'), max_length=150, blank=True)
    reference_type = models.CharField(
        _('reference type'), max_length=50, blank=True,
        help_text=_('StockReceipt, StockAudit, ...'),
    )
    reference_id = models.UUIDField(_('reference ID'), null=True, blank=True)
    # No updated_at: immutable record.

    class Meta:
        verbose_name = _('stock transaction')
        verbose_name_plural = _('stock transactions')
        ordering = ['timestamp', 'id']
        indexes = [
            models.Index(fields=['variant_id', 'timestamp'], name='stocktx_variant_ts_idx'),
            models.Index(fields=['transaction_type', 'timestamp'], name='stocktx_type_ts_idx'),
            models.Index(fields=['reference_type', 'reference_id'], name='stocktx_reference_idx'),
        ]

    def __str__(self):
        return (
            f'{self.transaction_type} {self.quantity_change:+d} variant={self.variant_id} '
            f'({self.available_before}->{self.available_after})'
        )

    @property
    def total_before(self) -> int:
        return self.available_before + self.reserved_before

    @property
    def total_after(self) -> int:
        return self.available_after + self.reserved_after

    def save(self, *args, **kwargs):
        if not self._state.adding:
            raise NotImplementedError('StockTransaction is insert-only; updates are not allowed.')
        super().save(*args, **kwargs)

    def delete(self, *args, **kwargs):
        raise NotImplementedError('StockTransaction records cannot be deleted.')


class StockReceipt(BaseModel):
    """
    Goods-received document. A draft records intent only; processing is
    the single point at which it changes stock, and happens once.
    """

    variant_id = models.BigIntegerField(_('variant ID'), db_index=True)
    supplier_id = models.BigIntegerField(
        _('supplier ID'),
        help_text=_('Catalog supplier; FK resolved in application layer'),
    )
    quantity_received = models.PositiveIntegerField(_('quantity received'))
    unit_cost = models.DecimalField(
        _('unit cost'), max_digits=12, decimal_places=2,
        default=Decimal('0'), validators=[MinValueValidator(Decimal('0'))],
    )
    batch_number = models.CharField(_('batch number'), max_length=100, blank=True)
    notes = models.TextField(_('notes'), blank=True)
    entry_date = models.DateTimeField(_('entry date'), default=timezone.now)
    received_by = models.CharField(_('received by'), max_length=150, blank=True)

    is_processed = models.BooleanField(_('processed'), default=False)
    processed_at = models.DateTimeField(_('processed at'), null=True, blank=True)
    processed_by = models.CharField(_('processed by'), max_length=150, blank=True)

    class Meta:
        verbose_name = _('stock receipt')
        verbose_name_plural = _('stock receipts')
        ordering = ['-entry_date']
        indexes = [
            models.Index(fields=['is_processed', 'entry_date'], name='receipt_processed_idx'),
            models.Index(fields=['supplier_id', 'entry_date'], name='receipt_supplier_idx'),
        ]

    def __str__(self):
        state = 'processed' if self.is_processed else 'draft'
        return f'Receipt {self.reference_code} variant={self.variant_id} qty={self.quantity_received} ({state})'

    @property
    def total_cost(self) -> Decimal:
        return self.unit_cost * self.quantity_received

    @property
    def reference_code(self) -> str:
        return f'GR-{str(self.pk)[:8].upper()}'

    def delete(self, *args, **kwargs):
        if self.is_processed:
            raise AlreadyProcessedError(detail='Processed receipts cannot be deleted.')
        return super().delete(*args, **kwargs)
