"""
API Models module.

Domain entities shared by the stores, the query engines and the routers.
"""

from .expense import (
    Category,
    CategoryId,
    CategorySummary,
    DailyAverage,
    Expense,
    ExpenseId,
    EXPENSE_FIELDS,
    NO_DESCRIPTION,
    decimal_to_number,
)

__all__ = [
    "Category",
    "CategoryId",
    "CategorySummary",
    "DailyAverage",
    "Expense",
    "ExpenseId",
    "EXPENSE_FIELDS",
    "NO_DESCRIPTION",
    "decimal_to_number",
]
