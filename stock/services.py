"""
Stock — Service Layer

LedgerService is the only write path to Stock rows. Every mutation is a
single atomic unit: lock the variant, check the invariant, write the new
quantities, append one StockTransaction. A storage failure rolls the whole
unit back and surfaces as TransientStorageError.

ReceiptService drives the two-phase stock-in: a draft StockReceipt has no
effect on stock until process_receipt(), which runs exactly once.

@file stock/services.py
"""

import functools
import hashlib
import logging
from dataclasses import dataclass
from datetime import datetime
from decimal import Decimal, InvalidOperation
from uuid import UUID

from django.conf import settings
from django.db import DatabaseError, connection, transaction
from django.db.models import Q, QuerySet
from django.utils import timezone

from catalog.services import CatalogService
from core.constants import (
    AUDIT_ACTION_CREATE,
    AUDIT_ACTION_DELETE,
    AUDIT_ACTION_STATUS_CHANGE,
    AUDIT_ACTION_UPDATE,
    REASON_RECEIPT_PROCESSED,
    REASON_STOCK_RECEIVED,
    REFERENCE_STOCK_RECEIPT,
    SYSTEM_ACTOR,
)
from core.exceptions import (
    AlreadyProcessedError,
    BusinessRuleViolation,
    InsufficientReservedStockError,
    InsufficientStockError,
    InvalidQuantityError,
    ResourceNotFoundError,
    TransientStorageError,
)
from core.services import AuditService

from .models import Stock, StockReceipt, StockTransaction

logger = logging.getLogger('stockledger')


@dataclass(frozen=True)
class StockSnapshot:
    """Read-only view of a variant's quantities; zero/zero when never stocked."""

    variant_id: int
    available_quantity: int = 0
    reserved_quantity: int = 0
    last_updated: datetime | None = None
    last_updated_by: str = ''
    exists: bool = False

    @property
    def total_quantity(self) -> int:
        return self.available_quantity + self.reserved_quantity

    @classmethod
    def from_stock(cls, stock: Stock) -> 'StockSnapshot':
        return cls(
            variant_id=stock.variant_id,
            available_quantity=stock.available_quantity,
            reserved_quantity=stock.reserved_quantity,
            last_updated=stock.last_updated,
            last_updated_by=stock.last_updated_by,
            exists=True,
        )


def _advisory_lock_key(variant_id: int) -> int:
    """Stable bigint key for PostgreSQL advisory lock (same variant = same key)."""
    raw = f'stock:{variant_id}'.encode()
    h = hashlib.sha256(raw).digest()[:8]
    return int.from_bytes(h, 'big') % (2**63)


def _require_quantity(value, *, field: str = 'quantity', allow_zero: bool = False) -> int:
    if isinstance(value, bool) or not isinstance(value, int):
        raise InvalidQuantityError(detail=f'{field} must be an integer, got {value!r}.')
    if value < 0 or (value == 0 and not allow_zero):
        bound = 'zero or more' if allow_zero else 'greater than zero'
        raise InvalidQuantityError(detail=f'{field} must be {bound}, got {value}.')
    return value


def _require_unit_cost(value) -> Decimal:
    try:
        cost = Decimal(str(value))
    except (InvalidOperation, ValueError):
        raise BusinessRuleViolation(detail=f'unit_cost must be a number, got {value!r}.')
    if not cost.is_finite():
        raise BusinessRuleViolation(detail=f'unit_cost must be a finite number, got {value!r}.')
    if cost < 0:
        raise BusinessRuleViolation(detail='unit_cost must not be negative.')
    return cost


def atomic_operation(func):
    """
    Run a service method as one atomic unit. DatabaseError rolls the unit
    back and is re-raised as TransientStorageError; business-rule
    exceptions pass through unchanged.
    """

    @functools.wraps(func)
    def wrapper(self, *args, **kwargs):
        try:
            with transaction.atomic():
                return func(self, *args, **kwargs)
        except DatabaseError as exc:
            getattr(self, 'logger', logger).exception(
                'Storage failure in %s; unit of work rolled back.', func.__name__,
            )
            raise TransientStorageError() from exc

    return wrapper


class LedgerService:
    """
    Sole mutation path for Stock and StockTransaction.

    logger: where operations are reported (defaults to the project logger).
    catalog: collaborator answering variant_exists(); consulted only when
    variant validation is enabled (STOCK_VALIDATE_VARIANTS).
    """

    def __init__(self, logger: logging.Logger | None = None, catalog=None, validate_variants: bool | None = None):
        self.logger = logger or logging.getLogger('stockledger')
        self.catalog = catalog or CatalogService
        self._validate_variants = validate_variants

    @property
    def validate_variants(self) -> bool:
        if self._validate_variants is None:
            return settings.STOCK_VALIDATE_VARIANTS
        return self._validate_variants

    # -- internals ---------------------------------------------------------

    def _check_variant(self, variant_id: int) -> None:
        if self.validate_variants and not self.catalog.variant_exists(variant_id):
            raise ResourceNotFoundError(detail=f'Variant {variant_id} not found in catalog.')

    def _lock_stock(self, variant_id: int, *, create: bool = False) -> Stock | None:
        """
        Serialize writers on this variant for the rest of the transaction.
        With create=True an unsaved zero record is returned for an unstocked
        variant; _record() persists it.
        """
        if connection.vendor == 'postgresql':
            with connection.cursor() as cursor:
                cursor.execute('SELECT pg_advisory_xact_lock(%s)', [_advisory_lock_key(variant_id)])
        stock = Stock.objects.select_for_update().filter(variant_id=variant_id).first()
        if stock is None and create:
            stock = Stock(variant_id=variant_id, available_quantity=0, reserved_quantity=0)
        return stock

    def _record(
        self,
        stock: Stock,
        *,
        transaction_type: str,
        available_after: int,
        reserved_after: int,
        reason: str,
        actor: str,
        notes: str = '',
        reference_type: str = '',
        reference_id: UUID | None = None,
    ) -> StockTransaction:
        available_before = stock.available_quantity
        reserved_before = stock.reserved_quantity
        now = timezone.now()

        stock.available_quantity = available_after
        stock.reserved_quantity = reserved_after
        stock.last_updated = now
        stock.last_updated_by = actor or ''
        stock.save()

        entry = StockTransaction.objects.create(
            variant_id=stock.variant_id,
            transaction_type=transaction_type,
            quantity_change=available_after - available_before,
            available_before=available_before,
            available_after=available_after,
            reserved_before=reserved_before,
            reserved_after=reserved_after,
            timestamp=now,
            reason=reason or '',
            notes=notes or '',
            created_by=actor or '',
            reference_type=reference_type or '',
            reference_id=reference_id,
        )
        self.logger.info(
            '%s variant=%s change=%+d available %s->%s reserved %s->%s by %s',
            transaction_type, stock.variant_id, entry.quantity_change,
            available_before, available_after, reserved_before, reserved_after, actor,
        )
        return entry

    # -- mutations ---------------------------------------------------------

    @atomic_operation
    def add_stock(
        self,
        variant_id: int,
        quantity: int,
        supplier_id: int,
        actor: str,
        *,
        unit_cost=Decimal('0'),
        batch_number: str = '',
        notes: str = '',
    ) -> StockTransaction:
        """
        Direct stock-in. A processed StockReceipt is written as provenance
        and referenced by the STOCK_IN entry.
        """
        _require_quantity(quantity)
        cost = _require_unit_cost(unit_cost)
        self._check_variant(variant_id)

        now = timezone.now()
        receipt = StockReceipt.objects.create(
            variant_id=variant_id,
            supplier_id=supplier_id,
            quantity_received=quantity,
            unit_cost=cost,
            batch_number=batch_number,
            notes=notes,
            entry_date=now,
            received_by=actor or '',
            is_processed=True,
            processed_at=now,
            processed_by=actor or '',
        )
        return self._post_receipt(receipt, actor, reason=REASON_STOCK_RECEIVED)

    def _post_receipt(self, receipt: StockReceipt, actor: str, *, reason: str) -> StockTransaction:
        """
        Post a processed receipt's quantity into available stock, once.
        Runs inside the caller's atomic unit.
        """
        if not receipt.is_processed:
            raise BusinessRuleViolation(detail=f'Receipt {receipt.reference_code} is a draft; process it first.')
        if StockTransaction.objects.filter(
            reference_type=REFERENCE_STOCK_RECEIPT, reference_id=receipt.pk,
        ).exists():
            raise AlreadyProcessedError(detail=f'Receipt {receipt.reference_code} has already been posted to stock.')
        self._check_variant(receipt.variant_id)
        stock = self._lock_stock(receipt.variant_id, create=True)
        return self._record(
            stock,
            transaction_type=StockTransaction.TransactionType.STOCK_IN,
            available_after=stock.available_quantity + receipt.quantity_received,
            reserved_after=stock.reserved_quantity,
            reason=reason,
            actor=actor,
            notes=receipt.notes,
            reference_type=REFERENCE_STOCK_RECEIPT,
            reference_id=receipt.pk,
        )

    @atomic_operation
    def reserve_stock(self, variant_id: int, quantity: int, reason: str = '', actor: str = SYSTEM_ACTOR) -> StockTransaction:
        """
        Move quantity from available to reserved. Used by order placement
        before payment; InsufficientStockError means "cannot fulfill".
        """
        _require_quantity(quantity)
        self._check_variant(variant_id)
        stock = self._lock_stock(variant_id)
        available = stock.available_quantity if stock else 0
        if stock is None or available < quantity:
            self.logger.warning(
                'Reserve rejected: variant=%s requested=%s available=%s', variant_id, quantity, available,
            )
            raise InsufficientStockError(
                detail=f'Insufficient stock: available={available}, requested={quantity}.',
            )
        return self._record(
            stock,
            transaction_type=StockTransaction.TransactionType.RESERVE,
            available_after=stock.available_quantity - quantity,
            reserved_after=stock.reserved_quantity + quantity,
            reason=reason,
            actor=actor,
        )

    @atomic_operation
    def release_stock(self, variant_id: int, quantity: int, reason: str = '', actor: str = SYSTEM_ACTOR) -> StockTransaction:
        """Inverse of reserve_stock; used when an order is cancelled before fulfillment."""
        _require_quantity(quantity)
        self._check_variant(variant_id)
        stock = self._lock_stock(variant_id)
        reserved = stock.reserved_quantity if stock else 0
        if stock is None or reserved < quantity:
            self.logger.warning(
                'Release rejected: variant=%s requested=%s reserved=%s', variant_id, quantity, reserved,
            )
            raise InsufficientReservedStockError(
                detail=f'Insufficient reserved stock: reserved={reserved}, requested={quantity}.',
            )
        return self._record(
            stock,
            transaction_type=StockTransaction.TransactionType.RELEASE,
            available_after=stock.available_quantity + quantity,
            reserved_after=stock.reserved_quantity - quantity,
            reason=reason,
            actor=actor,
        )

    @atomic_operation
    def remove_stock(self, variant_id: int, quantity: int, reason: str = '', actor: str = SYSTEM_ACTOR) -> StockTransaction:
        """Write available stock off directly (damage, loss)."""
        _require_quantity(quantity)
        self._check_variant(variant_id)
        stock = self._lock_stock(variant_id)
        available = stock.available_quantity if stock else 0
        if stock is None or available < quantity:
            self.logger.warning(
                'Remove rejected: variant=%s requested=%s available=%s', variant_id, quantity, available,
            )
            raise InsufficientStockError(
                detail=f'Insufficient stock: available={available}, requested={quantity}.',
            )
        return self._record(
            stock,
            transaction_type=StockTransaction.TransactionType.STOCK_OUT,
            available_after=stock.available_quantity - quantity,
            reserved_after=stock.reserved_quantity,
            reason=reason,
            actor=actor,
        )

    @atomic_operation
    def adjust_stock(
        self,
        variant_id: int,
        new_available_quantity: int,
        reason: str = '',
        actor: str = SYSTEM_ACTOR,
        *,
        notes: str = '',
        reference_type: str = '',
        reference_id: UUID | None = None,
    ) -> StockTransaction:
        """
        Set available to an absolute value. Always writes an ADJUSTMENT
        entry, including zero-change confirmations.
        """
        _require_quantity(new_available_quantity, field='new_available_quantity', allow_zero=True)
        self._check_variant(variant_id)
        stock = self._lock_stock(variant_id, create=True)
        return self._record(
            stock,
            transaction_type=StockTransaction.TransactionType.ADJUSTMENT,
            available_after=new_available_quantity,
            reserved_after=stock.reserved_quantity,
            reason=reason,
            actor=actor,
            notes=notes,
            reference_type=reference_type,
            reference_id=reference_id,
        )

    # -- reads -------------------------------------------------------------

    def get_current_stock(self, variant_id: int) -> StockSnapshot:
        stock = Stock.objects.filter(variant_id=variant_id).first()
        if stock is None:
            return StockSnapshot(variant_id=variant_id)
        return StockSnapshot.from_stock(stock)

    def get_stock_history(self, variant_id: int) -> QuerySet:
        """Transaction log for one variant, oldest first. Re-iterable."""
        return StockTransaction.objects.filter(variant_id=variant_id).order_by('timestamp', 'id')


class ReceiptService:
    """Goods-receipt lifecycle: Draft -> Processed (terminal)."""

    def __init__(self, ledger: LedgerService | None = None, catalog=None):
        self.ledger = ledger or LedgerService()
        self.logger = self.ledger.logger
        self.catalog = catalog or CatalogService

    def _lock_draft(self, receipt_id) -> StockReceipt:
        try:
            receipt = StockReceipt.objects.select_for_update().get(pk=receipt_id)
        except StockReceipt.DoesNotExist:
            raise ResourceNotFoundError(detail=f'Receipt {receipt_id} not found.')
        if receipt.is_processed:
            self.logger.warning('Receipt %s already processed; request rejected.', receipt_id)
            raise AlreadyProcessedError(detail=f'Receipt {receipt.reference_code} has already been processed.')
        return receipt

    @atomic_operation
    def create_receipt(
        self,
        *,
        variant_id: int,
        supplier_id: int,
        quantity: int,
        unit_cost=Decimal('0'),
        batch_number: str = '',
        notes: str = '',
        received_by: str = '',
    ) -> StockReceipt:
        """Record intent to receive goods. No effect on stock."""
        _require_quantity(quantity, field='quantity_received')
        cost = _require_unit_cost(unit_cost)
        self.ledger._check_variant(variant_id)

        receipt = StockReceipt.objects.create(
            variant_id=variant_id,
            supplier_id=supplier_id,
            quantity_received=quantity,
            unit_cost=cost,
            batch_number=batch_number or '',
            notes=notes or '',
            received_by=received_by or '',
        )
        AuditService.log(
            actor=received_by,
            action=AUDIT_ACTION_CREATE,
            model_name='StockReceipt',
            object_id=str(receipt.pk),
            new_values=AuditService.snapshot(receipt),
        )
        self.logger.info(
            'Receipt %s drafted: variant=%s supplier=%s qty=%s by %s',
            receipt.pk, variant_id, supplier_id, quantity, received_by,
        )
        return receipt

    @atomic_operation
    def process_receipt(self, receipt_id, actor: str) -> StockReceipt:
        """
        Post a draft into stock exactly once. A second call raises
        AlreadyProcessedError and changes nothing.
        """
        receipt = self._lock_draft(receipt_id)
        receipt.is_processed = True
        receipt.processed_at = timezone.now()
        receipt.processed_by = actor or ''
        receipt.save(update_fields=['is_processed', 'processed_at', 'processed_by', 'updated_at'])
        self.ledger._post_receipt(receipt, actor, reason=REASON_RECEIPT_PROCESSED)

        AuditService.log(
            actor=actor,
            action=AUDIT_ACTION_STATUS_CHANGE,
            model_name='StockReceipt',
            object_id=str(receipt.pk),
            old_values={'is_processed': False},
            new_values={'is_processed': True, 'processed_by': receipt.processed_by},
        )
        return receipt

    @atomic_operation
    def update_receipt(
        self,
        receipt_id,
        *,
        actor: str = '',
        quantity: int | None = None,
        unit_cost=None,
        batch_number: str | None = None,
        notes: str | None = None,
    ) -> StockReceipt:
        receipt = self._lock_draft(receipt_id)
        old = AuditService.snapshot(receipt)

        if quantity is not None:
            receipt.quantity_received = _require_quantity(quantity, field='quantity_received')
        if unit_cost is not None:
            receipt.unit_cost = _require_unit_cost(unit_cost)
        if batch_number is not None:
            receipt.batch_number = batch_number
        if notes is not None:
            receipt.notes = notes
        receipt.save()

        AuditService.log(
            actor=actor,
            action=AUDIT_ACTION_UPDATE,
            model_name='StockReceipt',
            object_id=str(receipt.pk),
            old_values=old,
            new_values=AuditService.snapshot(receipt),
        )
        return receipt

    @atomic_operation
    def delete_receipt(self, receipt_id, *, actor: str = '') -> None:
        receipt = self._lock_draft(receipt_id)
        old = AuditService.snapshot(receipt)
        object_id = str(receipt.pk)
        receipt.delete()
        AuditService.log(
            actor=actor,
            action=AUDIT_ACTION_DELETE,
            model_name='StockReceipt',
            object_id=object_id,
            old_values=old,
        )
        self.logger.info('Draft receipt %s deleted by %s', object_id, actor)

    # -- reads -------------------------------------------------------------

    def get_receipt(self, receipt_id) -> StockReceipt:
        try:
            return StockReceipt.objects.get(pk=receipt_id)
        except StockReceipt.DoesNotExist:
            raise ResourceNotFoundError(detail=f'Receipt {receipt_id} not found.')

    def list_receipts(self) -> QuerySet:
        return StockReceipt.objects.order_by('-entry_date')

    def receipts_by_date_range(self, start: datetime, end: datetime) -> QuerySet:
        return self.list_receipts().filter(entry_date__gte=start, entry_date__lte=end)

    def receipts_by_supplier(self, supplier_id: int) -> QuerySet:
        return self.list_receipts().filter(supplier_id=supplier_id)

    def unprocessed_receipts(self) -> QuerySet:
        """Drafts awaiting processing, oldest first."""
        return StockReceipt.objects.filter(is_processed=False).order_by('entry_date')

    def search_receipts(self, term: str) -> QuerySet:
        """Match batch number, notes, supplier name or product/variant text."""
        term = (term or '').strip()
        qs = self.list_receipts()
        if not term:
            return qs
        return qs.filter(
            Q(batch_number__icontains=term)
            | Q(notes__icontains=term)
            | Q(supplier_id__in=self.catalog.search_supplier_ids(term))
            | Q(variant_id__in=self.catalog.search_variant_ids(term))
        )


ledger = LedgerService()
receipts = ReceiptService(ledger=ledger)
