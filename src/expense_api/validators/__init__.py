"""
Validators module for the expense records API.
"""

from .expense_validator import (
    ExpenseValidator,
    clean_category,
    get_expense_validator,
    parse_iso_date,
)

__all__ = [
    "ExpenseValidator",
    "clean_category",
    "get_expense_validator",
    "parse_iso_date",
]
