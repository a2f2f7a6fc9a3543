"""
Stock — Django Admin Configuration

Stock levels and the transaction log are read-only here; all quantity
changes go through LedgerService. Receipts are editable while in draft
and can be processed in bulk.

@file stock/admin.py
"""

from django.contrib import admin, messages
from django.utils.translation import gettext_lazy as _

from core.exceptions import AlreadyProcessedError

from .models import Stock, StockReceipt, StockTransaction
from .services import receipts


@admin.register(Stock)
class StockAdmin(admin.ModelAdmin):
    list_display = (
        'variant_id', 'available_quantity', 'reserved_quantity',
        'last_updated', 'last_updated_by',
    )
    search_fields = ('variant_id',)
    readonly_fields = list_display
    ordering = ('variant_id',)
    list_per_page = 50

    def has_add_permission(self, request):
        return False

    def has_change_permission(self, request, obj=None):
        return False

    def has_delete_permission(self, request, obj=None):
        return False


@admin.register(StockTransaction)
class StockTransactionAdmin(admin.ModelAdmin):
    list_display = (
        'id', 'timestamp', 'variant_id', 'transaction_type', 'quantity_change',
        'available_before', 'available_after', 'reserved_before', 'reserved_after',
        'created_by',
    )
    list_filter = ('transaction_type', 'reference_type', 'timestamp')
    search_fields = ('variant_id', 'reason', 'created_by')
    readonly_fields = (
        'id', 'variant_id', 'transaction_type', 'quantity_change',
        'available_before', 'available_after', 'reserved_before', 'reserved_after',
        'timestamp', 'reason', 'notes', 'created_by', 'reference_type', 'reference_id',
    )
    show_full_result_count = False
    list_per_page = 50
    date_hierarchy = 'timestamp'
    ordering = ('-timestamp', '-id')

    fieldsets = (
        (_('Change'), {
            'fields': ('id', 'variant_id', 'transaction_type', 'quantity_change', 'timestamp'),
        }),
        (_('State'), {
            'fields': ('available_before', 'available_after', 'reserved_before', 'reserved_after'),
        }),
        (_('Context'), {
            'fields': ('reason', 'notes', 'created_by', 'reference_type', 'reference_id'),
        }),
    )

    def has_add_permission(self, request):
        return False

    def has_change_permission(self, request, obj=None):
        return False  # insert-only

    def has_delete_permission(self, request, obj=None):
        return False


@admin.register(StockReceipt)
class StockReceiptAdmin(admin.ModelAdmin):
    list_display = (
        'reference_code', 'entry_date', 'variant_id', 'supplier_id',
        'quantity_received', 'unit_cost', 'is_processed', 'processed_by',
    )
    list_filter = ('is_processed', 'entry_date')
    search_fields = ('batch_number', 'notes', 'received_by')
    fields = (
        'variant_id', 'supplier_id', 'quantity_received', 'unit_cost',
        'batch_number', 'notes',
    )
    date_hierarchy = 'entry_date'
    ordering = ('-entry_date',)
    actions = ['process_selected']

    def get_readonly_fields(self, request, obj=None):
        if obj is not None and obj.is_processed:
            return self.fields
        if obj is not None:
            return ('variant_id', 'supplier_id')
        return ()

    def has_delete_permission(self, request, obj=None):
        if obj is not None and obj.is_processed:
            return False
        return super().has_delete_permission(request, obj)

    def get_actions(self, request):
        # Queryset delete would bypass the draft-only rule.
        actions = super().get_actions(request)
        actions.pop('delete_selected', None)
        return actions

    def save_model(self, request, obj, form, change):
        actor = request.user.get_username()
        if change:
            saved = receipts.update_receipt(
                obj.pk,
                actor=actor,
                quantity=obj.quantity_received,
                unit_cost=obj.unit_cost,
                batch_number=obj.batch_number,
                notes=obj.notes,
            )
        else:
            saved = receipts.create_receipt(
                variant_id=obj.variant_id,
                supplier_id=obj.supplier_id,
                quantity=obj.quantity_received,
                unit_cost=obj.unit_cost,
                batch_number=obj.batch_number,
                notes=obj.notes,
                received_by=actor,
            )
        obj.pk = saved.pk
        obj._state.adding = False

    def delete_model(self, request, obj):
        receipts.delete_receipt(obj.pk, actor=request.user.get_username())

    @admin.action(description=_('Process selected receipts'))
    def process_selected(self, request, queryset):
        processed = skipped = 0
        for receipt in queryset:
            try:
                receipts.process_receipt(receipt.pk, request.user.get_username())
            except AlreadyProcessedError:
                skipped += 1
            else:
                processed += 1
        self.message_user(request, _('%(n)d receipt(s) processed.') % {'n': processed}, messages.SUCCESS)
        if skipped:
            self.message_user(request, _('%(n)d already processed; skipped.') % {'n': skipped}, messages.WARNING)
