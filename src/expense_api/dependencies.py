"""
FastAPI dependencies shared by the routers.
"""
from typing import Any, Dict

from fastapi import Depends, Request

from .config import settings
from .services import CategoryResolver, ExpenseService, get_expense_service
from .stores import Stores


def get_stores(request: Request) -> Stores:
    """Store pair built in the application lifespan"""
    return request.app.state.stores


def get_service(stores: Stores = Depends(get_stores)) -> ExpenseService:
    return get_expense_service(stores)


def get_category_resolver(stores: Stores = Depends(get_stores)) -> CategoryResolver:
    return CategoryResolver(stores.categories)


def normalize_payload(payload: Dict[str, Any]) -> Dict[str, Any]:
    """Lowercase string values when LOWERCASE_INPUT is enabled"""
    if not settings.LOWERCASE_INPUT:
        return payload
    return {
        key: value.lower() if isinstance(value, str) else value
        for key, value in payload.items()
    }
