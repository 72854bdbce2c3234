"""
Aggregation Engine - per-category totals and date-range averages.

Amounts are summed as Decimal; conversion to JSON numbers happens only
when results are serialized.
"""
from datetime import date
from decimal import Decimal
from typing import Dict, Iterable, List, Optional, Tuple

from ..errors import InvalidRangeError
from ..models import CategorySummary, DailyAverage, Expense
from ..validators.expense_validator import parse_iso_date


def summary_by_category(records: Iterable[Expense]) -> List[CategorySummary]:
    """
    Group by category, summing amounts and counting records.

    Sorted by total descending; equal totals keep the order in which their
    categories were first encountered.
    """
    totals: Dict[str, Decimal] = {}
    counts: Dict[str, int] = {}
    for expense in records:
        totals[expense.category] = totals.get(expense.category, Decimal("0")) + expense.amount
        counts[expense.category] = counts.get(expense.category, 0) + 1

    summaries = [
        CategorySummary(category=name, total_amount=total, count=counts[name])
        for name, total in totals.items()
    ]
    # sorted() is stable
    return sorted(summaries, key=lambda s: s.total_amount, reverse=True)


def parse_date_range(start: Optional[str], end: Optional[str]) -> Tuple[date, date]:
    """Parse an inclusive [start, end] range; both bounds required, start <= end"""
    if not start or not end:
        raise InvalidRangeError("startDate and endDate are required")
    try:
        start_date = parse_iso_date(start)
        end_date = parse_iso_date(end)
    except ValueError:
        raise InvalidRangeError("startDate and endDate must be valid ISO-8601 dates")
    if start_date > end_date:
        raise InvalidRangeError("startDate must not be after endDate")
    return start_date, end_date


def average_daily(records: Iterable[Expense], start_date: date, end_date: date) -> DailyAverage:
    """Total and per-day average over [start_date, end_date], both inclusive"""
    if start_date > end_date:
        raise InvalidRangeError("startDate must not be after endDate")

    total = Decimal("0")
    matched = 0
    for expense in records:
        if start_date <= expense.date <= end_date:
            total += expense.amount
            matched += 1

    days_count = (end_date - start_date).days + 1
    return DailyAverage(
        start_date=start_date,
        end_date=end_date,
        total_amount=total,
        average_daily=total / Decimal(days_count),
        days_count=days_count,
        matched=matched,
    )
