"""
Stock — Physical Count Audits

An audit reconciles the recorded available quantity with a physical count.
It is an ADJUSTMENT entry in the transaction log tagged with reference
type StockAudit; there is no separate audit table. Accuracy statistics are
derived from those entries.

@file stock/audit.py
"""

import logging
from collections.abc import Iterable
from dataclasses import dataclass, field
from datetime import datetime

from django.db.models import F, OuterRef, QuerySet, Subquery

from core.constants import REASON_PHYSICAL_COUNT, REFERENCE_STOCK_AUDIT

from .models import Stock, StockTransaction
from .services import LedgerService, StockSnapshot, ledger

logger = logging.getLogger('stockledger')


@dataclass
class AuditStats:
    total_audited: int = 0
    correct_count: int = 0
    incorrect_count: int = 0
    over_count: int = 0
    under_count: int = 0
    accuracy_rate: float = 0.0


@dataclass
class AuditSummary(AuditStats):
    total_difference: int = 0
    positive_difference: int = 0
    negative_difference: int = 0
    period_start: datetime | None = None
    period_end: datetime | None = None


@dataclass
class AuditResult:
    variant_id: int
    expected_quantity: int
    actual_quantity: int
    difference: int
    transaction: StockTransaction = field(repr=False)

    @property
    def is_match(self) -> bool:
        return self.difference == 0


def calculate_audit_stats(entries: Iterable) -> AuditStats:
    """
    Accuracy over a set of log entries. Only ADJUSTMENT entries count;
    an entry is "correct" when its quantity_change is zero, "over" when
    the count exceeded the record and "under" when it fell short.

    Accuracy is 0 when there are no audits: no measurement is not a
    perfect score.
    """
    total = correct = over = under = 0
    for entry in entries:
        if entry.transaction_type != StockTransaction.TransactionType.ADJUSTMENT:
            continue
        total += 1
        if entry.quantity_change == 0:
            correct += 1
        elif entry.quantity_change > 0:
            over += 1
        else:
            under += 1

    rate = round(correct / total * 100, 2) if total else 0.0
    return AuditStats(
        total_audited=total,
        correct_count=correct,
        incorrect_count=over + under,
        over_count=over,
        under_count=under,
        accuracy_rate=rate,
    )


class StockAuditService:
    """Physical count reconciliation on top of the ledger."""

    def __init__(self, ledger: LedgerService | None = None):
        self.ledger = ledger or LedgerService()
        self.logger = self.ledger.logger

    def perform_audit(self, variant_id: int, actual_quantity: int, actor: str, notes: str = '') -> AuditResult:
        """
        Set available to the counted quantity. A matching count still writes
        a zero-change entry, which is what makes it count as "correct".
        """
        entry = self.ledger.adjust_stock(
            variant_id,
            actual_quantity,
            reason=REASON_PHYSICAL_COUNT,
            actor=actor,
            notes=notes,
            reference_type=REFERENCE_STOCK_AUDIT,
        )
        result = AuditResult(
            variant_id=variant_id,
            expected_quantity=entry.available_before,
            actual_quantity=entry.available_after,
            difference=entry.quantity_change,
            transaction=entry,
        )
        if result.difference:
            self.logger.warning(
                'Audit mismatch variant=%s expected=%s counted=%s diff=%+d by %s',
                variant_id, result.expected_quantity, actual_quantity, result.difference, actor,
            )
        else:
            self.logger.info('Audit match variant=%s qty=%s by %s', variant_id, actual_quantity, actor)
        return result

    def audit_entries(self) -> QuerySet:
        return StockTransaction.objects.filter(
            transaction_type=StockTransaction.TransactionType.ADJUSTMENT,
            reference_type=REFERENCE_STOCK_AUDIT,
        )

    def get_audit_history(self, start: datetime | None = None, end: datetime | None = None) -> QuerySet:
        """Audit entries, newest first, optionally bounded by timestamp."""
        qs = self.audit_entries()
        if start is not None:
            qs = qs.filter(timestamp__gte=start)
        if end is not None:
            qs = qs.filter(timestamp__lte=end)
        return qs.order_by('-timestamp', '-id')

    def get_variant_audit_history(self, variant_id: int) -> QuerySet:
        return self.audit_entries().filter(variant_id=variant_id).order_by('-timestamp', '-id')

    def get_audit_summary(self, start: datetime | None = None, end: datetime | None = None) -> AuditSummary:
        entries = list(self.get_audit_history(start, end))
        stats = calculate_audit_stats(entries)
        positive = sum(e.quantity_change for e in entries if e.quantity_change > 0)
        negative = sum(-e.quantity_change for e in entries if e.quantity_change < 0)
        return AuditSummary(
            total_audited=stats.total_audited,
            correct_count=stats.correct_count,
            incorrect_count=stats.incorrect_count,
            over_count=stats.over_count,
            under_count=stats.under_count,
            accuracy_rate=stats.accuracy_rate,
            total_difference=positive + negative,
            positive_difference=positive,
            negative_difference=negative,
            period_start=start,
            period_end=end,
        )

    def get_stocks_for_audit(self) -> QuerySet:
        """
        Every stocked variant, least recently audited first. Never-audited
        variants lead; each row carries a last_audited annotation.
        """
        latest = (
            self.audit_entries()
            .filter(variant_id=OuterRef('variant_id'))
            .order_by('-timestamp')
            .values('timestamp')[:1]
        )
        return (
            Stock.objects.annotate(last_audited=Subquery(latest))
            .order_by(F('last_audited').asc(nulls_first=True), 'variant_id')
        )

    def expected_quantity(self, variant_id: int) -> StockSnapshot:
        """Recorded quantities shown to the counter before an audit."""
        return self.ledger.get_current_stock(variant_id)


audits = StockAuditService(ledger=ledger)
