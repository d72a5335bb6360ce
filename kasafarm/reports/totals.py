"""
Record Totals

DESIGN DECISION: Totals are recomputed from the full record list on every
read. There is no running total to drift out of sync with the cache, and
the functions never depend on the order records arrive in.

Business rule: net profit = sales + profits - expenses. Capital is an
investment, not an operating result, so it never enters net profit.
"""

from decimal import Decimal
from typing import Iterable

from pydantic import BaseModel, Field

from kasafarm.models.record import FarmRecord, RecordCategory

ZERO = Decimal("0")


class RecordSummary(BaseModel):
    """The figures shown on the dashboard."""

    total_expenses: Decimal = ZERO
    total_capital: Decimal = ZERO
    total_sales: Decimal = ZERO
    total_profits: Decimal = ZERO
    net_profit: Decimal = ZERO
    record_count: int = Field(default=0, ge=0)

    @property
    def is_loss(self) -> bool:
        return self.net_profit < 0


def category_totals(records: Iterable[FarmRecord]) -> dict[RecordCategory, Decimal]:
    """
    Sum total_amount per category.

    Every category is present in the result; categories with no records
    total zero.
    """
    totals = {category: ZERO for category in RecordCategory}
    for record in records:
        totals[record.category] += record.total_amount
    return totals


def _net_from_totals(totals: dict[RecordCategory, Decimal]) -> Decimal:
    return (
        totals[RecordCategory.SALE]
        + totals[RecordCategory.PROFIT]
        - totals[RecordCategory.EXPENSE]
    )


def net_profit(records: Iterable[FarmRecord]) -> Decimal:
    """Sales plus profits minus expenses (capital excluded)."""
    return _net_from_totals(category_totals(records))


def summarize(records: Iterable[FarmRecord]) -> RecordSummary:
    """Build the dashboard summary."""
    records = list(records)
    totals = category_totals(records)
    return RecordSummary(
        total_expenses=totals[RecordCategory.EXPENSE],
        total_capital=totals[RecordCategory.CAPITAL],
        total_sales=totals[RecordCategory.SALE],
        total_profits=totals[RecordCategory.PROFIT],
        net_profit=_net_from_totals(totals),
        record_count=len(records),
    )
