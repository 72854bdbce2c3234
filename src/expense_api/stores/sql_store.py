"""
Database-backed stores (SQLAlchemy asyncio).

Expense IDs are UUID strings issued at insert time. Each mutation runs in
its own session and transaction, so atomicity is delegated to the database.
"""
import uuid
from contextlib import asynccontextmanager
from datetime import datetime, timezone
from typing import Any, AsyncIterator, Dict, List, Optional

from sqlalchemy import Column, Date, DateTime, ForeignKey, Numeric, String, Text, select
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession
from sqlalchemy.orm import relationship
import structlog

from ..database import Base, close_database, create_session_factory, init_database
from ..errors import ConflictError, StoreCorruptError, StoreUnavailableError
from ..models import Category, Expense, NO_DESCRIPTION
from .base import CategoryStore, ExpenseStore

logger = structlog.get_logger()


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class CategoryRow(Base):
    """Category table"""
    __tablename__ = "categories"

    id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    name = Column(String(255), nullable=False, unique=True, index=True)
    created_at = Column(DateTime(timezone=True), default=_utcnow, nullable=False)


class ExpenseRow(Base):
    """Expense table"""
    __tablename__ = "expenses"

    id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    title = Column(String(255), nullable=False)
    amount = Column(Numeric(precision=15, scale=2, asdecimal=True), nullable=False)
    category_id = Column(String(36), ForeignKey("categories.id"), nullable=False, index=True)
    date = Column(Date, nullable=False, index=True)
    description = Column(Text, nullable=False, default=NO_DESCRIPTION)
    created_at = Column(DateTime(timezone=True), default=_utcnow, nullable=False)

    category = relationship(CategoryRow, lazy="joined")


def _to_expense(row: ExpenseRow, category_name: str) -> Expense:
    if row.amount is None or not row.amount.is_finite():
        raise StoreCorruptError("Malformed expense row", detail=f"expense {row.id}: amount {row.amount}")
    return Expense(
        id=row.id,
        title=row.title,
        amount=row.amount,
        category=category_name,
        date=row.date,
        description=row.description,
    )


def _apply(row: ExpenseRow, fields: Dict[str, Any]) -> None:
    for name, value in fields.items():
        if name == "category":
            row.category_id = value.id
        else:
            setattr(row, name, value)


class _SessionBound:
    """Shared session handling; driver errors surface as StoreUnavailableError"""

    def __init__(self, database: "SqlDatabase"):
        self.database = database

    async def open(self) -> None:
        await self.database.open()

    async def close(self) -> None:
        await self.database.close()

    @asynccontextmanager
    async def session(self) -> AsyncIterator[AsyncSession]:
        try:
            async with self.database.session_factory() as session:
                yield session
        except IntegrityError:
            raise
        except SQLAlchemyError as e:
            logger.error("Database operation failed", error=str(e), exc_info=True)
            raise StoreUnavailableError("Database unavailable", detail=str(e)) from e


class SqlExpenseStore(_SessionBound, ExpenseStore):
    """Expenses in the `expenses` table"""

    async def list(self) -> List[Expense]:
        async with self.session() as session:
            result = await session.execute(
                select(ExpenseRow).order_by(ExpenseRow.created_at, ExpenseRow.id)
            )
            return [_to_expense(row, row.category.name) for row in result.scalars().unique()]

    async def get(self, expense_id: str) -> Optional[Expense]:
        async with self.session() as session:
            row = await session.get(ExpenseRow, str(expense_id))
            if row is None:
                return None
            return _to_expense(row, row.category.name)

    async def create(self, fields: Dict[str, Any]) -> Expense:
        async with self.session() as session:
            row = ExpenseRow(id=str(uuid.uuid4()))
            _apply(row, fields)
            session.add(row)
            await session.commit()
            logger.info("Expense stored", expense_id=row.id, backend="database")
            return _to_expense(row, fields["category"].name)

    async def replace(self, expense_id: str, fields: Dict[str, Any]) -> Optional[Expense]:
        return await self._update(expense_id, fields)

    async def merge_patch(self, expense_id: str, fields: Dict[str, Any]) -> Optional[Expense]:
        return await self._update(expense_id, fields)

    async def _update(self, expense_id: str, fields: Dict[str, Any]) -> Optional[Expense]:
        # replace receives every field, merge only the supplied ones
        async with self.session() as session:
            row = await session.get(ExpenseRow, str(expense_id))
            if row is None:
                return None
            category_name = fields["category"].name if "category" in fields else row.category.name
            _apply(row, fields)
            await session.commit()
            return _to_expense(row, category_name)

    async def delete(self, expense_id: str) -> Optional[Expense]:
        async with self.session() as session:
            row = await session.get(ExpenseRow, str(expense_id))
            if row is None:
                return None
            expense = _to_expense(row, row.category.name)
            await session.delete(row)
            await session.commit()
            return expense


class SqlCategoryStore(_SessionBound, CategoryStore):
    """Categories in the `categories` table"""

    async def list(self) -> List[Category]:
        async with self.session() as session:
            result = await session.execute(
                select(CategoryRow).order_by(CategoryRow.created_at, CategoryRow.id)
            )
            return [Category(id=row.id, name=row.name) for row in result.scalars()]

    async def get_by_name(self, name: str) -> Optional[Category]:
        async with self.session() as session:
            result = await session.execute(select(CategoryRow).where(CategoryRow.name == name))
            row = result.scalar_one_or_none()
            return Category(id=row.id, name=row.name) if row else None

    async def create(self, name: str) -> Category:
        try:
            async with self.session() as session:
                row = CategoryRow(id=str(uuid.uuid4()), name=name)
                session.add(row)
                await session.commit()
        except IntegrityError as e:
            raise ConflictError(f"Category '{name}' already exists") from e
        logger.info("Category stored", category_id=row.id, name=name, backend="database")
        return Category(id=row.id, name=row.name)


class SqlDatabase:
    """Owns the engine shared by both SQL stores"""

    def __init__(self, engine: AsyncEngine):
        self.engine = engine
        self.session_factory = create_session_factory(engine)
        self._opened = False

    async def open(self) -> None:
        if self._opened:
            return
        try:
            await init_database(self.engine)
        except (SQLAlchemyError, OSError) as e:
            logger.error("Database initialization failed", error=str(e))
            raise StoreUnavailableError("Database unavailable", detail=str(e)) from e
        self._opened = True

    async def close(self) -> None:
        if not self._opened:
            return
        self._opened = False
        await close_database(self.engine)
