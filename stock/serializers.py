"""
Stock — Serializers

Read serializers for stock levels, log entries and receipts; plain input
serializers for the ledger operations. Explicit field lists; no __all__.

@file stock/serializers.py
"""

from rest_framework import serializers

from .models import StockReceipt, StockTransaction
from .queries import inventory


class StockLevelSerializer(serializers.Serializer):
    """Renders both Stock rows and StockSnapshot values."""

    variant_id = serializers.IntegerField(read_only=True)
    available_quantity = serializers.IntegerField(read_only=True)
    reserved_quantity = serializers.IntegerField(read_only=True)
    total_quantity = serializers.IntegerField(read_only=True)
    status = serializers.SerializerMethodField()
    last_updated = serializers.DateTimeField(read_only=True, allow_null=True)
    last_updated_by = serializers.CharField(read_only=True)

    def get_status(self, obj):
        return inventory.classify(obj.available_quantity)


class StockAuditDueSerializer(StockLevelSerializer):
    last_audited = serializers.DateTimeField(read_only=True, allow_null=True)


class TopMovingStockSerializer(StockLevelSerializer):
    moved_quantity = serializers.IntegerField(read_only=True)


class StockTransactionSerializer(serializers.ModelSerializer):
    transaction_type_display = serializers.CharField(source='get_transaction_type_display', read_only=True)

    class Meta:
        model = StockTransaction
        fields = [
            'id', 'variant_id', 'transaction_type', 'transaction_type_display',
            'quantity_change', 'available_before', 'available_after',
            'reserved_before', 'reserved_after', 'timestamp',
            'reason', 'notes', 'created_by', 'reference_type', 'reference_id',
        ]
        read_only_fields = fields


class StockReceiptReadSerializer(serializers.ModelSerializer):
    reference_code = serializers.CharField(read_only=True)
    total_cost = serializers.DecimalField(max_digits=14, decimal_places=2, read_only=True)

    class Meta:
        model = StockReceipt
        fields = [
            'id', 'reference_code', 'variant_id', 'supplier_id',
            'quantity_received', 'unit_cost', 'total_cost', 'batch_number', 'notes',
            'entry_date', 'received_by', 'is_processed', 'processed_at', 'processed_by',
            'created_at', 'updated_at',
        ]
        read_only_fields = fields


class StockReceiptWriteSerializer(serializers.Serializer):
    variant_id = serializers.IntegerField(min_value=1)
    supplier_id = serializers.IntegerField(min_value=1)
    quantity_received = serializers.IntegerField(min_value=1)
    unit_cost = serializers.DecimalField(max_digits=12, decimal_places=2, min_value=0, default=0)
    batch_number = serializers.CharField(max_length=100, required=False, allow_blank=True, default='')
    notes = serializers.CharField(required=False, allow_blank=True, default='')


class StockReceiptUpdateSerializer(serializers.Serializer):
    """For PATCH/PUT on draft receipts. Variant and supplier are fixed at creation."""
    quantity_received = serializers.IntegerField(min_value=1, required=False)
    unit_cost = serializers.DecimalField(max_digits=12, decimal_places=2, min_value=0, required=False)
    batch_number = serializers.CharField(max_length=100, required=False, allow_blank=True)
    notes = serializers.CharField(required=False, allow_blank=True)


# Quantity validation (>0, integer) belongs to the ledger so every caller
# gets the same INVALID_QUANTITY error; these only check shape.

class AddStockSerializer(serializers.Serializer):
    quantity = serializers.IntegerField()
    supplier_id = serializers.IntegerField(min_value=1)
    unit_cost = serializers.DecimalField(max_digits=12, decimal_places=2, default=0)
    batch_number = serializers.CharField(max_length=100, required=False, allow_blank=True, default='')
    notes = serializers.CharField(required=False, allow_blank=True, default='')


class QuantityChangeSerializer(serializers.Serializer):
    quantity = serializers.IntegerField()
    reason = serializers.CharField(max_length=255, required=False, allow_blank=True, default='')


class AdjustStockSerializer(serializers.Serializer):
    new_available_quantity = serializers.IntegerField()
    reason = serializers.CharField(max_length=255, required=False, allow_blank=True, default='')
    notes = serializers.CharField(required=False, allow_blank=True, default='')


class PerformAuditSerializer(serializers.Serializer):
    actual_quantity = serializers.IntegerField()
    notes = serializers.CharField(required=False, allow_blank=True, default='')


class AuditResultSerializer(serializers.Serializer):
    variant_id = serializers.IntegerField()
    expected_quantity = serializers.IntegerField()
    actual_quantity = serializers.IntegerField()
    difference = serializers.IntegerField()
    is_match = serializers.BooleanField()
    transaction = StockTransactionSerializer()


class AuditSummarySerializer(serializers.Serializer):
    total_audited = serializers.IntegerField()
    correct_count = serializers.IntegerField()
    incorrect_count = serializers.IntegerField()
    over_count = serializers.IntegerField()
    under_count = serializers.IntegerField()
    accuracy_rate = serializers.FloatField()
    total_difference = serializers.IntegerField()
    positive_difference = serializers.IntegerField()
    negative_difference = serializers.IntegerField()
    period_start = serializers.DateTimeField(allow_null=True)
    period_end = serializers.DateTimeField(allow_null=True)


class DateRangeSerializer(serializers.Serializer):
    start = serializers.DateTimeField(required=False)
    end = serializers.DateTimeField(required=False)

    def validate(self, attrs):
        start, end = attrs.get('start'), attrs.get('end')
        if start and end and start > end:
            raise serializers.ValidationError({'end': 'End must not be before start.'})
        return attrs

