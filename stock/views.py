"""
Stock — Views

DRF viewsets for stock levels (ledger operations as actions), goods
receipts (draft CRUD + process), physical count audits and inventory
reports. Views only parse input and render output; every rule lives in
the service layer.

@file stock/views.py
"""

from rest_framework import status, viewsets
from rest_framework.decorators import action
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response

from core.constants import STOCK_STATUSES
from core.pagination import HistoryPagination

from .audit import audits
from .models import Stock
from .permissions import IsStockAuditor, IsWarehouseStaff
from .queries import inventory
from .serializers import (
    AddStockSerializer,
    AdjustStockSerializer,
    AuditResultSerializer,
    AuditSummarySerializer,
    DateRangeSerializer,
    PerformAuditSerializer,
    QuantityChangeSerializer,
    StockAuditDueSerializer,
    StockLevelSerializer,
    StockReceiptReadSerializer,
    StockReceiptUpdateSerializer,
    StockReceiptWriteSerializer,
    StockTransactionSerializer,
    TopMovingStockSerializer,
)
from .services import ledger, receipts


def _actor(request) -> str:
    return request.user.get_username()


class StockLevelViewSet(viewsets.ReadOnlyModelViewSet):
    """
    Stock levels keyed by catalog variant id.
    Actions: add, reserve, release, remove, adjust, audit, history.

    Retrieving a variant that was never stocked returns zero quantities.
    """

    permission_classes = [IsAuthenticated, IsWarehouseStaff]
    serializer_class = StockLevelSerializer
    lookup_field = 'variant_id'
    lookup_value_regex = r'\d+'
    filterset_fields = ['variant_id']
    ordering_fields = ['variant_id', 'available_quantity', 'reserved_quantity', 'last_updated']
    ordering = ['variant_id']

    def get_queryset(self):
        params = self.request.query_params
        if params.get('search'):
            return inventory.search_inventory(params['search'])
        if params.get('status') in STOCK_STATUSES:
            return inventory.inventory_by_status(params['status'])
        if params.get('product', '').isdigit():
            return inventory.inventory_by_product(int(params['product']))
        return inventory.all_inventory()

    def retrieve(self, request, *args, **kwargs):
        snapshot = ledger.get_current_stock(int(kwargs['variant_id']))
        return Response(self.get_serializer(snapshot).data)

    def _level(self, variant_id):
        return self.get_serializer(ledger.get_current_stock(variant_id)).data

    def _mutation_response(self, entry, code=status.HTTP_200_OK):
        return Response(
            {
                'stock': self._level(entry.variant_id),
                'transaction': StockTransactionSerializer(entry).data,
            },
            status=code,
        )

    @action(detail=True, methods=['post'], url_path='add')
    def add(self, request, variant_id=None):
        ser = AddStockSerializer(data=request.data)
        ser.is_valid(raise_exception=True)
        entry = ledger.add_stock(
            int(variant_id),
            ser.validated_data['quantity'],
            ser.validated_data['supplier_id'],
            _actor(request),
            unit_cost=ser.validated_data['unit_cost'],
            batch_number=ser.validated_data['batch_number'],
            notes=ser.validated_data['notes'],
        )
        return self._mutation_response(entry, status.HTTP_201_CREATED)

    @action(detail=True, methods=['post'], url_path='reserve')
    def reserve(self, request, variant_id=None):
        ser = QuantityChangeSerializer(data=request.data)
        ser.is_valid(raise_exception=True)
        entry = ledger.reserve_stock(
            int(variant_id), ser.validated_data['quantity'], ser.validated_data['reason'], _actor(request),
        )
        return self._mutation_response(entry)

    @action(detail=True, methods=['post'], url_path='release')
    def release(self, request, variant_id=None):
        ser = QuantityChangeSerializer(data=request.data)
        ser.is_valid(raise_exception=True)
        entry = ledger.release_stock(
            int(variant_id), ser.validated_data['quantity'], ser.validated_data['reason'], _actor(request),
        )
        return self._mutation_response(entry)

    @action(detail=True, methods=['post'], url_path='remove')
    def remove(self, request, variant_id=None):
        ser = QuantityChangeSerializer(data=request.data)
        ser.is_valid(raise_exception=True)
        entry = ledger.remove_stock(
            int(variant_id), ser.validated_data['quantity'], ser.validated_data['reason'], _actor(request),
        )
        return self._mutation_response(entry)

    @action(detail=True, methods=['post'], url_path='adjust')
    def adjust(self, request, variant_id=None):
        ser = AdjustStockSerializer(data=request.data)
        ser.is_valid(raise_exception=True)
        entry = ledger.adjust_stock(
            int(variant_id),
            ser.validated_data['new_available_quantity'],
            ser.validated_data['reason'],
            _actor(request),
            notes=ser.validated_data['notes'],
        )
        return self._mutation_response(entry)

    @action(
        detail=True,
        methods=['post'],
        url_path='audit',
        permission_classes=[IsAuthenticated, IsStockAuditor],
    )
    def audit(self, request, variant_id=None):
        ser = PerformAuditSerializer(data=request.data)
        ser.is_valid(raise_exception=True)
        result = audits.perform_audit(
            int(variant_id), ser.validated_data['actual_quantity'], _actor(request), ser.validated_data['notes'],
        )
        return Response(AuditResultSerializer(result).data, status=status.HTTP_201_CREATED)

    @action(detail=True, methods=['get'], url_path='history', pagination_class=HistoryPagination)
    def history(self, request, variant_id=None):
        entries = ledger.get_stock_history(int(variant_id))
        page = self.paginate_queryset(entries)
        if page is not None:
            return self.get_paginated_response(StockTransactionSerializer(page, many=True).data)
        return Response(StockTransactionSerializer(entries, many=True).data)


class StockReceiptViewSet(viewsets.ModelViewSet):
    """
    Goods receipts: list, create (draft), retrieve, update/destroy (draft only).
    Workflow: process.
    """

    permission_classes = [IsAuthenticated, IsWarehouseStaff]
    filterset_fields = ['is_processed', 'supplier_id', 'variant_id']
    ordering_fields = ['entry_date', 'quantity_received', 'unit_cost']
    lookup_value_regex = r'[0-9a-fA-F-]{32,36}'
    ordering = ['-entry_date']

    def get_queryset(self):
        params = self.request.query_params
        qs = receipts.search_receipts(params.get('search', ''))
        date_range = DateRangeSerializer(data={k: v for k, v in params.items() if k in ('start', 'end')})
        date_range.is_valid(raise_exception=True)
        if 'start' in date_range.validated_data:
            qs = qs.filter(entry_date__gte=date_range.validated_data['start'])
        if 'end' in date_range.validated_data:
            qs = qs.filter(entry_date__lte=date_range.validated_data['end'])
        return qs

    def get_serializer_class(self):
        if self.action in ('update', 'partial_update'):
            return StockReceiptUpdateSerializer
        if self.action == 'create':
            return StockReceiptWriteSerializer
        return StockReceiptReadSerializer

    def get_object(self):
        return receipts.get_receipt(self.kwargs['pk'])

    def create(self, request, *args, **kwargs):
        ser = self.get_serializer(data=request.data)
        ser.is_valid(raise_exception=True)
        data = ser.validated_data
        receipt = receipts.create_receipt(
            variant_id=data['variant_id'],
            supplier_id=data['supplier_id'],
            quantity=data['quantity_received'],
            unit_cost=data['unit_cost'],
            batch_number=data['batch_number'],
            notes=data['notes'],
            received_by=_actor(request),
        )
        return Response(StockReceiptReadSerializer(receipt).data, status=status.HTTP_201_CREATED)

    def update(self, request, *args, **kwargs):
        ser = self.get_serializer(data=request.data, partial=kwargs.get('partial', False))
        ser.is_valid(raise_exception=True)
        data = ser.validated_data
        receipt = receipts.update_receipt(
            kwargs['pk'],
            actor=_actor(request),
            quantity=data.get('quantity_received'),
            unit_cost=data.get('unit_cost'),
            batch_number=data.get('batch_number'),
            notes=data.get('notes'),
        )
        return Response(StockReceiptReadSerializer(receipt).data)

    def destroy(self, request, *args, **kwargs):
        receipts.delete_receipt(kwargs['pk'], actor=_actor(request))
        return Response(status=status.HTTP_204_NO_CONTENT)

    @action(detail=True, methods=['post'], url_path='process')
    def process(self, request, pk=None):
        receipt = receipts.process_receipt(pk, _actor(request))
        return Response(StockReceiptReadSerializer(receipt).data, status=status.HTTP_200_OK)

    @action(detail=False, methods=['get'], url_path='pending')
    def pending(self, request):
        qs = receipts.unprocessed_receipts()
        page = self.paginate_queryset(qs)
        if page is not None:
            return self.get_paginated_response(StockReceiptReadSerializer(page, many=True).data)
        return Response(StockReceiptReadSerializer(qs, many=True).data)


class StockAuditViewSet(viewsets.GenericViewSet):
    """Audit log (newest first), accuracy summary and the audit-due list."""

    permission_classes = [IsAuthenticated, IsStockAuditor]
    serializer_class = StockTransactionSerializer

    def _date_range(self, request):
        ser = DateRangeSerializer(data=request.query_params)
        ser.is_valid(raise_exception=True)
        return ser.validated_data.get('start'), ser.validated_data.get('end')

    def list(self, request):
        start, end = self._date_range(request)
        qs = audits.get_audit_history(start, end)
        variant_id = request.query_params.get('variant_id')
        if variant_id and variant_id.isdigit():
            qs = qs.filter(variant_id=int(variant_id))
        page = self.paginate_queryset(qs)
        if page is not None:
            return self.get_paginated_response(self.get_serializer(page, many=True).data)
        return Response(self.get_serializer(qs, many=True).data)

    @action(detail=False, methods=['get'], url_path='summary')
    def summary(self, request):
        start, end = self._date_range(request)
        return Response(AuditSummarySerializer(audits.get_audit_summary(start, end)).data)

    @action(detail=False, methods=['get'], url_path='due')
    def due(self, request):
        qs = audits.get_stocks_for_audit()
        page = self.paginate_queryset(qs)
        if page is not None:
            return self.get_paginated_response(StockAuditDueSerializer(page, many=True).data)
        return Response(StockAuditDueSerializer(qs, many=True).data)


class InventoryReportViewSet(viewsets.GenericViewSet):
    """Read-only inventory statistics and valuation."""

    permission_classes = [IsAuthenticated]
    pagination_class = None
    queryset = Stock.objects.none()

    def list(self, request):
        return Response(inventory.dashboard())

    @action(detail=False, methods=['get'], url_path='dashboard')
    def dashboard(self, request):
        return Response(inventory.dashboard())

    @action(detail=False, methods=['get'], url_path='stats')
    def stats(self, request):
        return Response(inventory.inventory_stats())

    @action(detail=False, methods=['get'], url_path='value')
    def value(self, request):
        return Response(inventory.inventory_value())

    @action(detail=False, methods=['get'], url_path='top-moving')
    def top_moving(self, request):
        count = request.query_params.get('count', '10')
        days = request.query_params.get('days')
        stocks = inventory.top_moving_stocks(
            count=int(count) if count.isdigit() else 10,
            days=int(days) if days and days.isdigit() else None,
        )
        return Response(TopMovingStockSerializer(stocks, many=True).data)

    @action(detail=False, methods=['get'], url_path='movements')
    def movements(self, request):
        ser = DateRangeSerializer(data=request.query_params)
        ser.is_valid(raise_exception=True)
        return Response(inventory.movements_by_type(ser.validated_data.get('start'), ser.validated_data.get('end')))

