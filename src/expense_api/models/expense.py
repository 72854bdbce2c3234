"""
Expense and Category entities.
"""
from dataclasses import dataclass, replace
from datetime import date
from decimal import Decimal
from typing import Any, Dict, Union

ExpenseId = Union[int, str]
CategoryId = Union[int, str]

NO_DESCRIPTION = "no description"

# Mutable fields, in the order validation reports them
EXPENSE_FIELDS = ("title", "amount", "category", "date", "description")


@dataclass(frozen=True)
class Category:
    """Named grouping for expenses"""
    id: CategoryId
    name: str

    def to_dict(self) -> Dict[str, Any]:
        return {"id": self.id, "name": self.name}


@dataclass(frozen=True)
class Expense:
    """Single spend record. `category` holds the category name."""
    id: ExpenseId
    title: str
    amount: Decimal
    category: str
    date: date
    description: str = NO_DESCRIPTION

    def with_changes(self, **changes: Any) -> "Expense":
        return replace(self, **changes)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "title": self.title,
            "amount": decimal_to_number(self.amount),
            "category": self.category,
            "date": self.date.isoformat(),
            "description": self.description,
        }


@dataclass(frozen=True)
class CategorySummary:
    """Grouped total for one category"""
    category: str
    total_amount: Decimal = Decimal("0")
    count: int = 0

    def to_dict(self) -> Dict[str, Any]:
        return {
            "category": self.category,
            "totalAmount": decimal_to_number(self.total_amount),
            "count": self.count,
        }


@dataclass(frozen=True)
class DailyAverage:
    """Total and per-day average spend over an inclusive date range"""
    start_date: date
    end_date: date
    total_amount: Decimal
    average_daily: Decimal
    days_count: int
    matched: int = 0

    def to_dict(self) -> Dict[str, Any]:
        return {
            "startDate": self.start_date.isoformat(),
            "endDate": self.end_date.isoformat(),
            "totalAmount": decimal_to_number(self.total_amount),
            "averageDaily": decimal_to_number(self.average_daily),
            "daysCount": self.days_count,
            "count": self.matched,
        }


def decimal_to_number(value: Decimal) -> Union[int, float]:
    """JSON-friendly number: integral values stay ints"""
    if not value.is_finite():
        raise ValueError(f"Amount is not a finite number: {value}")
    if value == value.to_integral_value():
        return int(value)
    return float(value)
