"""
File-backed stores - a pretty-printed JSON array per collection.

Every mutation rewrites the whole file. The read-modify-write cycle runs
under a per-file asyncio lock and the new content is swapped in with an
atomic rename, so concurrent requests in one process never lose updates.
"""
import asyncio
import json
import os
from datetime import date
from decimal import Decimal
from typing import Any, Dict, List, Optional

import aiofiles
import aiofiles.os
import structlog

from ..errors import ConflictError, StoreCorruptError, StoreUnavailableError
from ..models import Category, Expense, NO_DESCRIPTION, decimal_to_number
from .base import CategoryStore, ExpenseStore

logger = structlog.get_logger()


class JsonArrayFile:
    """JSON array on disk with serialized writers"""

    def __init__(self, path: str):
        self.path = path
        self.lock = asyncio.Lock()

    async def ensure_exists(self) -> None:
        directory = os.path.dirname(self.path)
        try:
            if directory:
                await aiofiles.os.makedirs(directory, exist_ok=True)
            if not await aiofiles.os.path.exists(self.path):
                await self.write([])
                logger.info("Created data file", path=self.path)
        except OSError as e:
            logger.error("Cannot prepare data file", path=self.path, error=str(e))
            raise StoreUnavailableError("Could not prepare data file", detail=str(e)) from e

    async def read(self) -> List[Dict[str, Any]]:
        try:
            async with aiofiles.open(self.path, "r", encoding="utf-8") as f:
                content = await f.read()
        except FileNotFoundError:
            return []
        except OSError as e:
            logger.error("Error reading data file", path=self.path, error=str(e))
            raise StoreUnavailableError("Could not load data", detail=str(e)) from e

        if not content.strip():
            return []
        try:
            data = json.loads(content)
        except json.JSONDecodeError as e:
            logger.error("Error parsing data file", path=self.path, error=str(e))
            raise StoreCorruptError("Could not parse data", detail=str(e)) from e
        if not isinstance(data, list):
            logger.error("Data file is not a JSON array", path=self.path)
            raise StoreCorruptError("Could not parse data", detail="top-level value is not an array")
        return data

    async def write(self, items: List[Dict[str, Any]]) -> None:
        tmp_path = f"{self.path}.tmp"
        try:
            async with aiofiles.open(tmp_path, "w", encoding="utf-8") as f:
                await f.write(json.dumps(items, indent=2, ensure_ascii=False))
            await aiofiles.os.replace(tmp_path, self.path)
        except OSError as e:
            logger.error("Error writing data file", path=self.path, error=str(e))
            raise StoreUnavailableError("Could not save data", detail=str(e)) from e


def next_id(items: List[Dict[str, Any]]) -> int:
    """max(existing ids) + 1, or 1 for an empty collection. Gaps are never filled."""
    ids = [item["id"] for item in items if isinstance(item.get("id"), int)]
    return max(ids) + 1 if ids else 1


def _parse_int_id(value: Any) -> Optional[int]:
    try:
        return int(value)
    except (TypeError, ValueError):
        return None


def _find_index(items: List[Dict[str, Any]], item_id: int) -> int:
    for index, item in enumerate(items):
        if item.get("id") == item_id:
            return index
    return -1


def expense_from_record(record: Dict[str, Any]) -> Expense:
    try:
        amount = Decimal(str(record["amount"]))
        if not amount.is_finite():
            raise ValueError(f"non-finite amount {amount}")
        return Expense(
            id=record["id"],
            title=record["title"],
            amount=amount,
            category=record["category"],
            date=date.fromisoformat(str(record["date"])[:10]),
            description=record.get("description") or NO_DESCRIPTION,
        )
    except (KeyError, TypeError, ValueError, ArithmeticError) as e:
        raise StoreCorruptError("Malformed expense record", detail=f"{record!r}: {e}") from e


def expense_to_record(expense: Expense) -> Dict[str, Any]:
    return {
        "id": expense.id,
        "title": expense.title,
        "amount": decimal_to_number(expense.amount),
        "category": expense.category,
        "date": expense.date.isoformat(),
        "description": expense.description,
    }


def _values(fields: Dict[str, Any]) -> Dict[str, Any]:
    """Field dict as Expense keyword arguments; categories stored by name"""
    values = dict(fields)
    if isinstance(values.get("category"), Category):
        values["category"] = values["category"].name
    return values


class JsonFileExpenseStore(ExpenseStore):
    """Expenses as a JSON array. IDs are integers assigned max + 1."""

    def __init__(self, path: str):
        self.file = JsonArrayFile(path)

    async def open(self) -> None:
        await self.file.ensure_exists()

    async def _load(self) -> List[Expense]:
        return [expense_from_record(r) for r in await self.file.read()]

    async def list(self) -> List[Expense]:
        return await self._load()

    async def get(self, expense_id: str) -> Optional[Expense]:
        wanted = _parse_int_id(expense_id)
        if wanted is None:
            return None
        for expense in await self._load():
            if expense.id == wanted:
                return expense
        return None

    async def create(self, fields: Dict[str, Any]) -> Expense:
        async with self.file.lock:
            records = await self.file.read()
            expense = Expense(id=next_id(records), **_values(fields))
            records.append(expense_to_record(expense))
            await self.file.write(records)
        logger.info("Expense stored", expense_id=expense.id, backend="file")
        return expense

    async def replace(self, expense_id: str, fields: Dict[str, Any]) -> Optional[Expense]:
        return await self._update(expense_id, fields, merge=False)

    async def merge_patch(self, expense_id: str, fields: Dict[str, Any]) -> Optional[Expense]:
        return await self._update(expense_id, fields, merge=True)

    async def _update(self, expense_id: str, fields: Dict[str, Any], merge: bool) -> Optional[Expense]:
        wanted = _parse_int_id(expense_id)
        if wanted is None:
            return None
        async with self.file.lock:
            records = await self.file.read()
            index = _find_index(records, wanted)
            if index == -1:
                return None
            if merge:
                expense = expense_from_record(records[index]).with_changes(**_values(fields))
            else:
                expense = Expense(id=wanted, **_values(fields))
            records[index] = expense_to_record(expense)
            await self.file.write(records)
        return expense

    async def delete(self, expense_id: str) -> Optional[Expense]:
        wanted = _parse_int_id(expense_id)
        if wanted is None:
            return None
        async with self.file.lock:
            records = await self.file.read()
            index = _find_index(records, wanted)
            if index == -1:
                return None
            removed = records.pop(index)
            await self.file.write(records)
        return expense_from_record(removed)


class JsonFileCategoryStore(CategoryStore):
    """Categories as a JSON array of {id, name}"""

    def __init__(self, path: str):
        self.file = JsonArrayFile(path)

    async def open(self) -> None:
        await self.file.ensure_exists()

    @staticmethod
    def _from_record(record: Dict[str, Any]) -> Category:
        try:
            return Category(id=record["id"], name=record["name"])
        except (KeyError, TypeError) as e:
            raise StoreCorruptError("Malformed category record", detail=f"{record!r}: {e}") from e

    async def list(self) -> List[Category]:
        return [self._from_record(r) for r in await self.file.read()]

    async def get_by_name(self, name: str) -> Optional[Category]:
        for category in await self.list():
            if category.name == name:
                return category
        return None

    async def create(self, name: str) -> Category:
        async with self.file.lock:
            records = await self.file.read()
            if any(r.get("name") == name for r in records):
                raise ConflictError(f"Category '{name}' already exists")
            category = Category(id=next_id(records), name=name)
            records.append(category.to_dict())
            await self.file.write(records)
        logger.info("Category stored", category_id=category.id, name=name, backend="file")
        return category
