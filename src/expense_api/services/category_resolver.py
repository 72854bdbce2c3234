"""
Category Resolver - maps category names to stored categories.

Both backends follow one policy: an expense names its category, and a name
that does not exist yet is created on first use.
"""
from typing import List, Optional

import structlog

from ..errors import ConflictError, FieldError, ValidationError
from ..models import Category
from ..stores.base import CategoryStore
from ..validators.expense_validator import CATEGORY_MIN_LENGTH, clean_category, InvalidValue

logger = structlog.get_logger()


class CategoryResolver:
    """Name lookups and implicit creation on top of a CategoryStore"""

    def __init__(self, store: CategoryStore):
        self.store = store

    async def resolve_by_name(self, name: str) -> Optional[Category]:
        return await self.store.get_by_name(name)

    async def ensure(self, name: str) -> Category:
        """Get or create the category called `name`"""
        category = await self.store.get_by_name(name)
        if category is not None:
            return category
        try:
            category = await self.store.create(name)
        except ConflictError:
            # created concurrently between lookup and insert
            category = await self.store.get_by_name(name)
            if category is None:
                raise
            return category
        logger.info("Category created implicitly", category_id=category.id, name=name)
        return category

    async def list_categories(self) -> List[Category]:
        return await self.store.list()

    async def create_category(self, name: object) -> Category:
        """Explicit creation. Duplicate names raise ConflictError."""
        try:
            cleaned = clean_category(name)
        except InvalidValue:
            raise ValidationError([FieldError(
                "name", f"name is required and must have at least {CATEGORY_MIN_LENGTH} characters"
            )])
        category = await self.store.create(cleaned)
        logger.info("Category created", category_id=category.id, name=cleaned)
        return category
