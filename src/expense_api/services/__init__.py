"""
Services module - expense business logic, queries and aggregations.
"""

from .aggregation import average_daily, parse_date_range, summary_by_category
from .category_resolver import CategoryResolver
from .expense_service import ExpenseService, get_expense_service
from .filtering import ExpenseFilter, filter_expenses

__all__ = [
    "average_daily",
    "parse_date_range",
    "summary_by_category",
    "CategoryResolver",
    "ExpenseService",
    "get_expense_service",
    "ExpenseFilter",
    "filter_expenses",
]
