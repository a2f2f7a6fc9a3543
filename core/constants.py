"""
Core — Constants

Shared constants: audit actions, pagination caps, ledger reference types
and the standard reasons written to the stock transaction log.

@file core/constants.py
"""

# ---------------------------------------------------------------------------
# Audit log actions
# ---------------------------------------------------------------------------

AUDIT_ACTION_CREATE = 'CREATE'
AUDIT_ACTION_UPDATE = 'UPDATE'
AUDIT_ACTION_DELETE = 'DELETE'
AUDIT_ACTION_STATUS_CHANGE = 'STATUS_CHANGE'


# ---------------------------------------------------------------------------
# Pagination
# ---------------------------------------------------------------------------

DEFAULT_PAGE_SIZE = 25
MAX_PAGE_SIZE = 200


# ---------------------------------------------------------------------------
# Stock ledger
# ---------------------------------------------------------------------------

SYSTEM_ACTOR = 'System'

REFERENCE_STOCK_RECEIPT = 'StockReceipt'
REFERENCE_STOCK_AUDIT = 'StockAudit'

REASON_STOCK_RECEIVED = 'Stock received from supplier'
REASON_RECEIPT_PROCESSED = 'Goods receipt processed'
REASON_PHYSICAL_COUNT = 'physical count reconciliation'

STATUS_IN_STOCK = 'in-stock'
STATUS_LOW_STOCK = 'low-stock'
STATUS_OUT_OF_STOCK = 'out-of-stock'
STOCK_STATUSES = (STATUS_IN_STOCK, STATUS_LOW_STOCK, STATUS_OUT_OF_STOCK)
