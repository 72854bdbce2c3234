"""
Filter Engine - optional AND-ed predicates over an expense snapshot.
"""
from dataclasses import dataclass
import datetime
from decimal import Decimal
from typing import Iterable, List, Optional

from ..models import Expense


@dataclass(frozen=True)
class ExpenseFilter:
    """Search criteria. A None field does not constrain the result."""
    category: Optional[str] = None
    min_amount: Optional[Decimal] = None
    max_amount: Optional[Decimal] = None
    date: Optional[datetime.date] = None

    @property
    def is_empty(self) -> bool:
        return all(v is None for v in (self.category, self.min_amount, self.max_amount, self.date))

    def matches(self, expense: Expense) -> bool:
        if self.category is not None and expense.category != self.category:
            return False
        if self.min_amount is not None and expense.amount < self.min_amount:
            return False
        if self.max_amount is not None and expense.amount > self.max_amount:
            return False
        if self.date is not None and expense.date != self.date:
            return False
        return True


def filter_expenses(records: Iterable[Expense], criteria: ExpenseFilter) -> List[Expense]:
    """Matching records in their input order"""
    return [expense for expense in records if criteria.matches(expense)]
