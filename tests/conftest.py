"""
Pytest Fixtures for Expense API Tests
"""
import os
from datetime import date
from decimal import Decimal
from typing import AsyncGenerator

import pytest
import pytest_asyncio
from httpx import AsyncClient, ASGITransport

# Set test environment
os.environ["ENVIRONMENT"] = "testing"
os.environ["ADMIN_TOKEN"] = "test-admin-token"
os.environ["LOWERCASE_INPUT"] = "false"

from src.expense_api.main import app
from src.expense_api.database import create_engine_for
from src.expense_api.dependencies import get_stores
from src.expense_api.models import Expense
from src.expense_api.stores import (
    JsonFileCategoryStore,
    JsonFileExpenseStore,
    SqlCategoryStore,
    SqlDatabase,
    SqlExpenseStore,
    Stores,
)

TEST_DATABASE_URL = "sqlite+aiosqlite:///:memory:"


# =============================================================================
# Store Fixtures
# =============================================================================

@pytest_asyncio.fixture
async def file_stores(tmp_path) -> AsyncGenerator[Stores, None]:
    """File-backed stores in a temporary directory"""
    stores = Stores(
        expenses=JsonFileExpenseStore(str(tmp_path / "expenses-data.json")),
        categories=JsonFileCategoryStore(str(tmp_path / "categories-data.json")),
    )
    await stores.open()
    yield stores
    await stores.close()


@pytest_asyncio.fixture
async def sql_stores() -> AsyncGenerator[Stores, None]:
    """Database-backed stores on in-memory SQLite"""
    database = SqlDatabase(create_engine_for(TEST_DATABASE_URL))
    stores = Stores(
        expenses=SqlExpenseStore(database),
        categories=SqlCategoryStore(database),
    )
    await stores.open()
    yield stores
    await stores.close()


@pytest_asyncio.fixture(params=["file", "database"])
async def stores(request, tmp_path) -> AsyncGenerator[Stores, None]:
    """Each backend in turn"""
    if request.param == "file":
        pair = Stores(
            expenses=JsonFileExpenseStore(str(tmp_path / "expenses-data.json")),
            categories=JsonFileCategoryStore(str(tmp_path / "categories-data.json")),
        )
    else:
        database = SqlDatabase(create_engine_for(TEST_DATABASE_URL))
        pair = Stores(expenses=SqlExpenseStore(database), categories=SqlCategoryStore(database))
    await pair.open()
    yield pair
    await pair.close()


@pytest_asyncio.fixture
async def client(stores: Stores) -> AsyncGenerator[AsyncClient, None]:
    """Async HTTP client bound to the given store pair"""
    app.dependency_overrides[get_stores] = lambda: stores

    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac

    app.dependency_overrides.clear()


# =============================================================================
# Sample Data Fixtures
# =============================================================================

@pytest.fixture
def sample_expense_data():
    """Sample expense request body"""
    return {
        "title": "Groceries",
        "amount": 150,
        "category": "Food",
        "date": "2024-11-24",
        "description": "Weekly shopping",
    }


def make_expense(expense_id, amount, category="Food", day="2024-01-01", title="Expense"):
    """Build an Expense entity for engine tests"""
    return Expense(
        id=expense_id,
        title=title,
        amount=Decimal(str(amount)),
        category=category,
        date=date.fromisoformat(day),
    )


@pytest.fixture
def expense_factory():
    return make_expense
