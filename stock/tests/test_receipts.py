"""
Tests — ReceiptService: draft creation, one-shot processing, draft-only edits,
listing and search, audit trail.

@file stock/tests/test_receipts.py
"""

import uuid
from datetime import timedelta
from decimal import Decimal

import pytest
from django.utils import timezone

from core.exceptions import (
    AlreadyProcessedError,
    BusinessRuleViolation,
    InvalidQuantityError,
    ResourceNotFoundError,
)
from core.models import AuditLog
from stock.models import Stock, StockReceipt, StockTransaction
from stock.services import LedgerService, ReceiptService
from tests.factories import ProductVariantFactory, StockReceiptFactory, SupplierFactory


pytestmark = pytest.mark.django_db


@pytest.fixture
def service():
    return ReceiptService(ledger=LedgerService())


def _draft(service, **overrides):
    values = dict(variant_id=77, supplier_id=SupplierFactory().pk, quantity=15, received_by='clerk')
    values.update(overrides)
    return service.create_receipt(**values)


class TestCreateReceipt:

    def test_draft_has_no_stock_effect(self, service):
        receipt = _draft(service, unit_cost=Decimal('4.20'), batch_number='B-9')
        assert receipt.is_processed is False
        assert receipt.unit_cost == Decimal('4.20')
        assert receipt.received_by == 'clerk'
        assert not Stock.objects.exists()
        assert not StockTransaction.objects.exists()

    def test_create_is_audited(self, service):
        receipt = _draft(service)
        log = AuditLog.objects.get(object_id=str(receipt.pk))
        assert log.action == AuditLog.ActionChoices.CREATE
        assert log.actor == 'clerk'
        assert log.new_values['quantity_received'] == 15

    def test_zero_quantity_rejected(self, service):
        with pytest.raises(InvalidQuantityError):
            _draft(service, quantity=0)
        assert not StockReceipt.objects.exists()

    def test_negative_cost_rejected(self, service):
        with pytest.raises(BusinessRuleViolation):
            _draft(service, unit_cost=Decimal('-0.01'))

    @pytest.mark.parametrize('unit_cost', ['NaN', 'Infinity', '-Infinity', 'abc'])
    def test_malformed_cost_rejected(self, service, unit_cost):
        with pytest.raises(BusinessRuleViolation):
            _draft(service, unit_cost=unit_cost)
        assert not StockReceipt.objects.exists()


class TestProcessReceipt:

    def test_process_once(self, service):
        receipt = _draft(service)
        processed = service.process_receipt(receipt.pk, 'manager')

        assert processed.is_processed
        assert processed.processed_by == 'manager'
        assert processed.processed_at is not None
        stock = Stock.objects.get(variant_id=77)
        assert stock.available_quantity == 15

        entry = StockTransaction.objects.get(variant_id=77)
        assert entry.transaction_type == StockTransaction.TransactionType.STOCK_IN
        assert entry.reference_type == 'StockReceipt'
        assert entry.reference_id == receipt.pk
        assert entry.created_by == 'manager'

    def test_second_process_fails_without_change(self, service):
        receipt = _draft(service)
        service.process_receipt(receipt.pk, 'manager')
        with pytest.raises(AlreadyProcessedError):
            service.process_receipt(receipt.pk, 'manager')
        assert Stock.objects.get(variant_id=77).available_quantity == 15
        assert StockTransaction.objects.filter(variant_id=77).count() == 1

    def test_draft_cannot_reach_stock_through_ledger(self, service):
        receipt = _draft(service)
        with pytest.raises(BusinessRuleViolation):
            service.ledger._post_receipt(receipt, 'clerk', reason='bypass')
        assert not Stock.objects.exists()
        assert not StockTransaction.objects.exists()

        processed = service.process_receipt(receipt.pk, 'manager')
        with pytest.raises(AlreadyProcessedError):
            service.ledger._post_receipt(processed, 'clerk', reason='bypass')
        assert Stock.objects.get(variant_id=77).available_quantity == 15
        assert StockTransaction.objects.filter(variant_id=77).count() == 1

    def test_failed_posting_leaves_receipt_draft(self, service):
        receipt = _draft(service, variant_id=999999)
        strict = ReceiptService(ledger=LedgerService(validate_variants=True))
        with pytest.raises(ResourceNotFoundError):
            strict.process_receipt(receipt.pk, 'manager')
        receipt.refresh_from_db()
        assert receipt.is_processed is False
        assert receipt.processed_at is None
        assert not Stock.objects.exists()

    def test_adds_to_existing_stock(self, service):
        service.ledger.add_stock(77, 5, 1, 'clerk')
        receipt = _draft(service)
        service.process_receipt(receipt.pk, 'manager')
        assert Stock.objects.get(variant_id=77).available_quantity == 20

    def test_status_change_is_audited(self, service):
        receipt = _draft(service)
        service.process_receipt(receipt.pk, 'manager')
        log = AuditLog.objects.get(object_id=str(receipt.pk), action=AuditLog.ActionChoices.STATUS_CHANGE)
        assert log.old_values == {'is_processed': False}
        assert log.new_values['is_processed'] is True

    def test_missing_receipt(self, service):
        with pytest.raises(ResourceNotFoundError):
            service.process_receipt(uuid.uuid4(), 'manager')

    def test_validated_variant_checked_at_processing(self):
        ledger = LedgerService(validate_variants=True)
        service = ReceiptService(ledger=ledger)
        variant = ProductVariantFactory()
        receipt = service.create_receipt(variant_id=variant.pk, supplier_id=1, quantity=2)
        service.process_receipt(receipt.pk, 'manager')
        assert Stock.objects.get(variant_id=variant.pk).available_quantity == 2


class TestDraftOnlyEdits:

    def test_update_draft(self, service):
        receipt = _draft(service)
        updated = service.update_receipt(receipt.pk, actor='clerk', quantity=20, notes='recounted')
        assert updated.quantity_received == 20
        assert updated.notes == 'recounted'
        log = AuditLog.objects.get(object_id=str(receipt.pk), action=AuditLog.ActionChoices.UPDATE)
        assert log.old_values['quantity_received'] == 15
        assert log.new_values['quantity_received'] == 20

    def test_update_processed_fails(self, service):
        receipt = _draft(service)
        service.process_receipt(receipt.pk, 'manager')
        with pytest.raises(AlreadyProcessedError):
            service.update_receipt(receipt.pk, quantity=99)
        receipt.refresh_from_db()
        assert receipt.quantity_received == 15

    def test_update_rejects_bad_quantity(self, service):
        receipt = _draft(service)
        with pytest.raises(InvalidQuantityError):
            service.update_receipt(receipt.pk, quantity=-5)

    def test_delete_draft(self, service):
        receipt = _draft(service)
        service.delete_receipt(receipt.pk, actor='clerk')
        assert not StockReceipt.objects.filter(pk=receipt.pk).exists()
        assert AuditLog.objects.filter(
            object_id=str(receipt.pk), action=AuditLog.ActionChoices.DELETE,
        ).exists()

    def test_delete_processed_fails(self, service):
        receipt = _draft(service)
        service.process_receipt(receipt.pk, 'manager')
        with pytest.raises(AlreadyProcessedError):
            service.delete_receipt(receipt.pk)
        assert StockReceipt.objects.filter(pk=receipt.pk).exists()

    def test_delete_missing(self, service):
        with pytest.raises(ResourceNotFoundError):
            service.delete_receipt(uuid.uuid4())


class TestListings:

    def test_unprocessed_oldest_first(self, service):
        now = timezone.now()
        newer = StockReceiptFactory(entry_date=now)
        older = StockReceiptFactory(entry_date=now - timedelta(days=2))
        StockReceiptFactory(is_processed=True)
        assert list(service.unprocessed_receipts()) == [older, newer]

    def test_list_newest_first(self, service):
        now = timezone.now()
        older = StockReceiptFactory(entry_date=now - timedelta(days=1))
        newer = StockReceiptFactory(entry_date=now)
        assert list(service.list_receipts()) == [newer, older]

    def test_by_date_range(self, service):
        now = timezone.now()
        inside = StockReceiptFactory(entry_date=now - timedelta(days=1))
        StockReceiptFactory(entry_date=now - timedelta(days=10))
        result = service.receipts_by_date_range(now - timedelta(days=2), now)
        assert list(result) == [inside]

    def test_by_supplier(self, service):
        supplier = SupplierFactory()
        mine = StockReceiptFactory(supplier_id=supplier.pk)
        StockReceiptFactory()
        assert list(service.receipts_by_supplier(supplier.pk)) == [mine]

    def test_search_batch_notes_supplier_and_product(self, service):
        supplier = SupplierFactory(name='Hanoi Leather Works')
        variant = ProductVariantFactory(product__name='Trail Runner')
        by_batch = StockReceiptFactory(batch_number='LOT-ABC')
        by_notes = StockReceiptFactory(notes='damaged box, ABC courier')
        by_supplier = StockReceiptFactory(supplier_id=supplier.pk)
        by_product = StockReceiptFactory(variant_id=variant.pk)
        StockReceiptFactory(batch_number='OTHER')

        assert set(service.search_receipts('abc')) == {by_batch, by_notes}
        assert list(service.search_receipts('hanoi')) == [by_supplier]
        assert list(service.search_receipts('trail')) == [by_product]
        assert service.search_receipts('').count() == 5

    def test_get_receipt_missing(self, service):
        with pytest.raises(ResourceNotFoundError):
            service.get_receipt(uuid.uuid4())
