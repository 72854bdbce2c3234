"""
Unit Tests - Record stores (file and database backends)
"""
import asyncio
import json
from datetime import date
from decimal import Decimal
from pathlib import Path

import pytest
from sqlalchemy import text

from src.expense_api.errors import ConflictError, StoreCorruptError
from src.expense_api.models import Category
from src.expense_api.stores import JsonFileExpenseStore


async def _fields(stores, title="Groceries", amount="150", category="Food", day="2024-11-24"):
    category_obj = await stores.categories.get_by_name(category)
    if category_obj is None:
        category_obj = await stores.categories.create(category)
    return {
        "title": title,
        "amount": Decimal(amount),
        "category": category_obj,
        "date": date.fromisoformat(day),
        "description": "no description",
    }


class TestExpenseStoreContract:
    """Behaviour shared by every backend"""

    @pytest.mark.unit
    @pytest.mark.asyncio
    async def test_create_assigns_unique_ids(self, stores):
        created = [await stores.expenses.create(await _fields(stores, title=f"Item {i}")) for i in range(3)]

        assert len({e.id for e in created}) == 3
        assert sorted(e.title for e in await stores.expenses.list()) == ["Item 0", "Item 1", "Item 2"]

    @pytest.mark.unit
    @pytest.mark.asyncio
    async def test_get_returns_created_fields(self, stores):
        expense = await stores.expenses.create(await _fields(stores))

        fetched = await stores.expenses.get(str(expense.id))

        assert fetched == expense
        assert fetched.category == "Food"
        assert fetched.amount == Decimal("150")

    @pytest.mark.unit
    @pytest.mark.asyncio
    async def test_get_unknown_id(self, stores):
        assert await stores.expenses.get("999") is None
        assert await stores.expenses.get("not-an-id") is None

    @pytest.mark.unit
    @pytest.mark.asyncio
    async def test_replace_then_get(self, stores):
        expense = await stores.expenses.create(await _fields(stores))
        new_fields = await _fields(stores, title="Bus pass", amount="49.99", category="Transport", day="2024-12-01")

        replaced = await stores.expenses.replace(str(expense.id), new_fields)
        fetched = await stores.expenses.get(str(expense.id))

        assert replaced == fetched
        assert fetched.id == expense.id
        assert (fetched.title, fetched.amount, fetched.category, fetched.date) == (
            "Bus pass", Decimal("49.99"), "Transport", date(2024, 12, 1)
        )

    @pytest.mark.unit
    @pytest.mark.asyncio
    async def test_merge_patch_keeps_unsupplied_fields(self, stores):
        expense = await stores.expenses.create(await _fields(stores))

        patched = await stores.expenses.merge_patch(str(expense.id), {"amount": Decimal("200")})

        assert patched.amount == Decimal("200")
        assert patched.title == expense.title
        assert patched.category == expense.category
        assert await stores.expenses.get(str(expense.id)) == patched

    @pytest.mark.unit
    @pytest.mark.asyncio
    async def test_merge_patch_category(self, stores):
        expense = await stores.expenses.create(await _fields(stores))
        transport = await stores.categories.create("Transport")

        patched = await stores.expenses.merge_patch(str(expense.id), {"category": transport})

        assert patched.category == "Transport"
        assert (await stores.expenses.get(str(expense.id))).category == "Transport"

    @pytest.mark.unit
    @pytest.mark.asyncio
    async def test_mutations_on_unknown_id(self, stores):
        fields = await _fields(stores)
        assert await stores.expenses.replace("999", fields) is None
        assert await stores.expenses.merge_patch("999", {"title": "Nothing"}) is None
        assert await stores.expenses.delete("999") is None

    @pytest.mark.unit
    @pytest.mark.asyncio
    async def test_delete_then_get(self, stores):
        expense = await stores.expenses.create(await _fields(stores))

        deleted = await stores.expenses.delete(str(expense.id))

        assert deleted == expense
        assert await stores.expenses.get(str(expense.id)) is None
        assert await stores.expenses.list() == []


class TestCategoryStoreContract:

    @pytest.mark.unit
    @pytest.mark.asyncio
    async def test_create_and_lookup(self, stores):
        created = await stores.categories.create("Food")

        assert await stores.categories.get_by_name("Food") == created
        assert await stores.categories.get_by_name("food") is None
        assert await stores.categories.list() == [created]

    @pytest.mark.unit
    @pytest.mark.asyncio
    async def test_duplicate_name_conflicts(self, stores):
        await stores.categories.create("Food")

        with pytest.raises(ConflictError):
            await stores.categories.create("Food")


class TestJsonFileStore:
    """File backend specifics"""

    @pytest.mark.unit
    @pytest.mark.asyncio
    async def test_ids_follow_current_maximum(self, file_stores):
        first = await file_stores.expenses.create(await _fields(file_stores, title="First"))
        second = await file_stores.expenses.create(await _fields(file_stores, title="Second"))
        await file_stores.expenses.delete(str(second.id))

        third = await file_stores.expenses.create(await _fields(file_stores, title="Third"))
        await file_stores.expenses.delete(str(first.id))
        await file_stores.expenses.delete(str(third.id))
        fourth = await file_stores.expenses.create(await _fields(file_stores, title="Fourth"))

        assert (first.id, second.id, third.id) == (1, 2, 2)
        assert fourth.id == 1
        assert [e.title for e in await file_stores.expenses.list()] == ["Fourth"]

    @pytest.mark.unit
    @pytest.mark.asyncio
    async def test_id_follows_maximum_not_last_record(self, tmp_path):
        path = tmp_path / "expenses.json"
        path.write_text(json.dumps([
            {"id": 7, "title": "Late", "amount": 5, "category": "Food", "date": "2024-01-02"},
            {"id": 3, "title": "Early", "amount": 5, "category": "Food", "date": "2024-01-01"},
        ]))
        store = JsonFileExpenseStore(str(path))

        created = await store.create({
            "title": "New", "amount": Decimal("1"), "category": Category(1, "Food"),
            "date": date(2024, 1, 3), "description": "no description",
        })

        assert created.id == 8

    @pytest.mark.unit
    @pytest.mark.asyncio
    async def test_file_is_pretty_printed_json_array(self, file_stores):
        await file_stores.expenses.create(await _fields(file_stores, amount="12.5"))

        content = Path(file_stores.expenses.file.path).read_text(encoding="utf-8")

        assert content.startswith("[\n  {")
        assert json.loads(content) == [{
            "id": 1,
            "title": "Groceries",
            "amount": 12.5,
            "category": "Food",
            "date": "2024-11-24",
            "description": "no description",
        }]

    @pytest.mark.unit
    @pytest.mark.asyncio
    async def test_legacy_record_without_description(self, tmp_path):
        path = tmp_path / "expenses.json"
        path.write_text(json.dumps([
            {"id": 1, "title": "Old", "amount": 10, "category": "Food", "date": "2024-01-01"},
        ]))

        expense = await JsonFileExpenseStore(str(path)).get("1")

        assert expense.description == "no description"

    @pytest.mark.unit
    @pytest.mark.asyncio
    async def test_corrupt_file_is_reported(self, tmp_path):
        path = tmp_path / "expenses.json"
        path.write_text("{not json")

        with pytest.raises(StoreCorruptError):
            await JsonFileExpenseStore(str(path)).list()

    @pytest.mark.unit
    @pytest.mark.asyncio
    async def test_non_finite_amount_is_reported(self, tmp_path):
        path = tmp_path / "expenses.json"
        path.write_text(
            '[{"id": 1, "title": "Huge", "amount": Infinity, "category": "Food", "date": "2024-01-01"}]'
        )

        with pytest.raises(StoreCorruptError):
            await JsonFileExpenseStore(str(path)).list()

    @pytest.mark.unit
    @pytest.mark.asyncio
    async def test_non_array_file_is_reported(self, tmp_path):
        path = tmp_path / "expenses.json"
        path.write_text('{"id": 1}')

        with pytest.raises(StoreCorruptError):
            await JsonFileExpenseStore(str(path)).list()

    @pytest.mark.unit
    @pytest.mark.asyncio
    async def test_concurrent_creates_keep_every_record(self, file_stores):
        fields = await _fields(file_stores)
        created = await asyncio.gather(*[file_stores.expenses.create(fields) for _ in range(10)])

        assert sorted(e.id for e in created) == list(range(1, 11))
        assert len(await file_stores.expenses.list()) == 10


class TestSqlStore:
    """Database backend specifics"""

    @pytest.mark.unit
    @pytest.mark.asyncio
    async def test_ids_are_uuid_strings(self, sql_stores):
        expense = await sql_stores.expenses.create(await _fields(sql_stores))

        assert isinstance(expense.id, str)
        assert len(expense.id) == 36

    @pytest.mark.unit
    @pytest.mark.asyncio
    async def test_cents_survive_storage(self, sql_stores):
        expense = await sql_stores.expenses.create(await _fields(sql_stores, amount="1234567890123.45"))

        fetched = await sql_stores.expenses.get(expense.id)

        assert fetched.amount == Decimal("1234567890123.45")

    @pytest.mark.unit
    @pytest.mark.asyncio
    async def test_non_finite_amount_is_reported(self, sql_stores):
        await sql_stores.expenses.create(await _fields(sql_stores))
        async with sql_stores.expenses.session() as session:
            await session.execute(text("UPDATE expenses SET amount = 9e999"))
            await session.commit()

        with pytest.raises(StoreCorruptError):
            await sql_stores.expenses.list()
