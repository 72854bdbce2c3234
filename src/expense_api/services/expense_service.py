"""
Expense Service - business logic for expense operations.

Separates validation, category resolution and query logic from the HTTP
layer. Reads take one snapshot from the store per call; the filter and
aggregation engines never mutate it.
"""
from typing import Any, Dict, List, Mapping, Optional

import structlog

from ..errors import expense_not_found
from ..models import CategorySummary, DailyAverage, Expense
from ..stores.base import ExpenseStore, Stores
from ..validators import ExpenseValidator, get_expense_validator
from .aggregation import average_daily, parse_date_range, summary_by_category
from .category_resolver import CategoryResolver
from .filtering import ExpenseFilter, filter_expenses

logger = structlog.get_logger()


class ExpenseService:
    """
    Service for expense operations.

    Works against any ExpenseStore; the category policy (resolve by name,
    create on first use) is the same for every backend.
    """

    def __init__(
        self,
        store: ExpenseStore,
        categories: CategoryResolver,
        validator: Optional[ExpenseValidator] = None,
    ):
        self.store = store
        self.categories = categories
        self.validator = validator or get_expense_validator()

    async def list_expenses(self) -> List[Expense]:
        return await self.store.list()

    async def get_expense(self, expense_id: str) -> Expense:
        expense = await self.store.get(expense_id)
        if expense is None:
            raise expense_not_found(expense_id)
        return expense

    async def create_expense(self, payload: Mapping[str, Any]) -> Expense:
        fields = await self._resolve(self.validator.validate_full(payload))
        expense = await self.store.create(fields)
        logger.info("Expense created", expense_id=expense.id, category=expense.category)
        return expense

    async def replace_expense(self, expense_id: str, payload: Mapping[str, Any]) -> Expense:
        """Full replace; every required field must be supplied"""
        fields = self.validator.validate_full(payload)
        await self.get_expense(expense_id)
        fields = await self._resolve(fields)
        expense = await self.store.replace(expense_id, fields)
        if expense is None:
            raise expense_not_found(expense_id)
        logger.info("Expense replaced", expense_id=expense.id)
        return expense

    async def patch_expense(self, expense_id: str, payload: Mapping[str, Any]) -> Expense:
        """Shallow merge; fields not supplied keep their values"""
        fields = self.validator.validate_partial(payload)
        if not fields:
            return await self.get_expense(expense_id)

        await self.get_expense(expense_id)
        fields = await self._resolve(fields)
        expense = await self.store.merge_patch(expense_id, fields)
        if expense is None:
            raise expense_not_found(expense_id)
        logger.info("Expense patched", expense_id=expense.id, fields=sorted(fields))
        return expense

    async def delete_expense(self, expense_id: str) -> Expense:
        expense = await self.store.delete(expense_id)
        if expense is None:
            raise expense_not_found(expense_id)
        logger.info("Expense deleted", expense_id=expense.id)
        return expense

    async def search(self, criteria: ExpenseFilter) -> List[Expense]:
        if criteria.category is not None:
            category = await self.categories.resolve_by_name(criteria.category)
            if category is None:
                logger.info("Search on unknown category", category=criteria.category)
                return []

        records = await self.store.list()
        if criteria.is_empty:
            return records
        return filter_expenses(records, criteria)

    async def summary_by_category(self) -> List[CategorySummary]:
        return summary_by_category(await self.store.list())

    async def average_daily(self, start: Optional[str], end: Optional[str]) -> DailyAverage:
        start_date, end_date = parse_date_range(start, end)
        return average_daily(await self.store.list(), start_date, end_date)

    async def _resolve(self, fields: Dict[str, Any]) -> Dict[str, Any]:
        # may create the category; callers look the expense up first
        if "category" in fields:
            fields = dict(fields)
            fields["category"] = await self.categories.ensure(fields["category"])
        return fields


def get_expense_service(stores: Stores) -> ExpenseService:
    """Build an expense service over the active store pair."""
    return ExpenseService(stores.expenses, CategoryResolver(stores.categories))
