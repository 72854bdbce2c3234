"""
Categories Router
"""
from typing import Any

from fastapi import APIRouter, Depends, status
from pydantic import BaseModel

from ..dependencies import get_category_resolver, normalize_payload
from ..responses import envelope
from ..services import CategoryResolver

router = APIRouter()


class CategoryCreate(BaseModel):
    """Create category request"""
    name: Any = None


@router.get("")
async def list_categories(resolver: CategoryResolver = Depends(get_category_resolver)):
    """List all categories"""
    return envelope(await resolver.list_categories())


@router.post("", status_code=status.HTTP_201_CREATED)
async def create_category(
    category: CategoryCreate,
    resolver: CategoryResolver = Depends(get_category_resolver)
):
    """Create a category; names are unique"""
    payload = normalize_payload(category.model_dump())
    return envelope(await resolver.create_category(payload["name"]))
