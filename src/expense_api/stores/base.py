"""
Abstract record store interfaces.

Two implementations share these contracts: a JSON file on disk and a
SQLAlchemy-backed database. Field dicts passed to mutations are already
validated; their "category" entry is a resolved Category.
"""
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Any, Dict, List, Optional

from ..models import Category, Expense


class ExpenseStore(ABC):
    """Owns the authoritative expense collection"""

    async def open(self) -> None:
        """Prepare the backing store (create file or tables)."""

    async def close(self) -> None:
        """Release connections and handles."""

    @abstractmethod
    async def list(self) -> List[Expense]:
        """All expenses in stored order."""

    @abstractmethod
    async def get(self, expense_id: str) -> Optional[Expense]:
        """Expense by ID, or None."""

    @abstractmethod
    async def create(self, fields: Dict[str, Any]) -> Expense:
        """Insert with a newly assigned ID."""

    @abstractmethod
    async def replace(self, expense_id: str, fields: Dict[str, Any]) -> Optional[Expense]:
        """Overwrite every mutable field. None if the ID is unknown."""

    @abstractmethod
    async def merge_patch(self, expense_id: str, fields: Dict[str, Any]) -> Optional[Expense]:
        """Overwrite only the supplied fields. None if the ID is unknown."""

    @abstractmethod
    async def delete(self, expense_id: str) -> Optional[Expense]:
        """Remove and return the expense. None if the ID is unknown."""


class CategoryStore(ABC):
    """Owns the category collection"""

    async def open(self) -> None:
        """Prepare the backing store."""

    async def close(self) -> None:
        """Release connections and handles."""

    @abstractmethod
    async def list(self) -> List[Category]:
        """All categories in stored order."""

    @abstractmethod
    async def get_by_name(self, name: str) -> Optional[Category]:
        """Exact, case-sensitive lookup by name."""

    @abstractmethod
    async def create(self, name: str) -> Category:
        """Insert a category. Raises ConflictError on a duplicate name."""


@dataclass
class Stores:
    """Store pair selected at startup"""
    expenses: ExpenseStore
    categories: CategoryStore

    async def open(self) -> None:
        await self.categories.open()
        await self.expenses.open()

    async def close(self) -> None:
        await self.expenses.close()
        await self.categories.close()
