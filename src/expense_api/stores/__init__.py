"""
Record stores for expenses and categories.
"""

from .base import CategoryStore, ExpenseStore, Stores
from .factory import build_stores
from .file_store import JsonFileCategoryStore, JsonFileExpenseStore
from .sql_store import SqlCategoryStore, SqlDatabase, SqlExpenseStore

__all__ = [
    "CategoryStore",
    "ExpenseStore",
    "Stores",
    "build_stores",
    "JsonFileCategoryStore",
    "JsonFileExpenseStore",
    "SqlCategoryStore",
    "SqlDatabase",
    "SqlExpenseStore",
]
