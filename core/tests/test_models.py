"""
Core — Model Tests

Tests for AuditLog, the audit service and the exception envelope.

@file core/tests/test_models.py
"""

from decimal import Decimal

import pytest
from rest_framework import status

from core.exceptions import (
    AlreadyProcessedError,
    InsufficientReservedStockError,
    InsufficientStockError,
    InvalidQuantityError,
    ResourceNotFoundError,
    TransientStorageError,
    standard_exception_handler,
)
from core.models import AuditLog
from core.services import AuditService
from tests.factories import AuditLogFactory, StockReceiptFactory


@pytest.mark.django_db
class TestAuditLog:
    def test_create_audit_log(self):
        log = AuditService.log(
            actor='alice',
            action=AuditLog.ActionChoices.CREATE,
            model_name='StockReceipt',
            object_id='test-123',
            new_values={'key': 'value'},
        )
        assert log.pk is not None
        assert log.action == 'CREATE'
        assert log.actor == 'alice'
        assert log.new_values == {'key': 'value'}

    def test_audit_log_cannot_be_updated(self):
        log = AuditLogFactory()
        log.model_name = 'Changed'
        with pytest.raises(NotImplementedError):
            log.save()

    def test_audit_log_cannot_be_deleted(self):
        log = AuditLogFactory()
        with pytest.raises(NotImplementedError):
            log.delete()
        assert AuditLog.objects.filter(pk=log.pk).exists()

    def test_snapshot_serialises_decimal_and_datetime(self):
        receipt = StockReceiptFactory(unit_cost=Decimal('9.99'))
        snapshot = AuditService.snapshot(receipt)
        assert snapshot['unit_cost'] == '9.99'
        assert isinstance(snapshot['entry_date'], str)
        assert snapshot['quantity_received'] == 10

    def test_snapshot_field_subset(self):
        receipt = StockReceiptFactory()
        snapshot = AuditService.snapshot(receipt, fields=['batch_number'])
        assert list(snapshot) == ['batch_number']


class TestExceptionHandler:

    @pytest.mark.parametrize('exc_class, status_code, code', [
        (InvalidQuantityError, status.HTTP_400_BAD_REQUEST, 'INVALID_QUANTITY'),
        (InsufficientStockError, status.HTTP_409_CONFLICT, 'INSUFFICIENT_STOCK'),
        (InsufficientReservedStockError, status.HTTP_409_CONFLICT, 'INSUFFICIENT_RESERVED_STOCK'),
        (AlreadyProcessedError, status.HTTP_409_CONFLICT, 'ALREADY_PROCESSED'),
        (ResourceNotFoundError, status.HTTP_404_NOT_FOUND, 'RESOURCE_NOT_FOUND'),
        (TransientStorageError, status.HTTP_503_SERVICE_UNAVAILABLE, 'STORAGE_UNAVAILABLE'),
    ])
    def test_domain_errors_render_envelope(self, exc_class, status_code, code):
        response = standard_exception_handler(exc_class(), {})
        assert response.status_code == status_code
        assert response.data['success'] is False
        assert response.data['code'] == code
        assert 'detail' in response.data['errors']

    def test_unhandled_exception_is_500(self):
        response = standard_exception_handler(RuntimeError('boom'), {})
        assert response.status_code == status.HTTP_500_INTERNAL_SERVER_ERROR
        assert response.data['code'] == 'INTERNAL_ERROR'
