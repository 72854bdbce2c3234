"""
Expenses Router - CRUD, search and aggregation endpoints

Static paths (/search, /summary-by-category, /average-daily) are declared
before /{expense_id}.
"""
from datetime import date
from decimal import Decimal
from typing import Any, Dict, Optional

from fastapi import APIRouter, Body, Depends, Query, status
import structlog

from ..dependencies import get_service, normalize_payload
from ..responses import envelope
from ..services import ExpenseFilter, ExpenseService

logger = structlog.get_logger()
router = APIRouter()


@router.get("")
async def list_expenses(service: ExpenseService = Depends(get_service)):
    """List all expenses in stored order"""
    return envelope(await service.list_expenses())


@router.get("/search")
async def search_expenses(
    category: Optional[str] = Query(default=None, description="Category name"),
    min_amount: Optional[Decimal] = Query(default=None, alias="minAmount", description="Inclusive lower bound"),
    max_amount: Optional[Decimal] = Query(default=None, alias="maxAmount", description="Inclusive upper bound"),
    expense_date: Optional[date] = Query(default=None, alias="date", description="Exact expense date"),
    service: ExpenseService = Depends(get_service)
):
    """Search expenses; all given filters must match"""
    criteria = ExpenseFilter(
        category=category or None,
        min_amount=min_amount,
        max_amount=max_amount,
        date=expense_date,
    )
    results = await service.search(criteria)
    logger.info("Expense search", matched=len(results))
    return envelope(results)


@router.get("/summary-by-category")
async def summary_by_category(service: ExpenseService = Depends(get_service)):
    """Totals and counts per category, largest total first"""
    return envelope(await service.summary_by_category())


@router.get("/average-daily")
async def average_daily(
    start_date: Optional[str] = Query(default=None, alias="startDate"),
    end_date: Optional[str] = Query(default=None, alias="endDate"),
    service: ExpenseService = Depends(get_service)
):
    """Total and average spend per day over an inclusive date range"""
    return envelope(await service.average_daily(start_date, end_date))


@router.get("/{expense_id}")
async def get_expense(expense_id: str, service: ExpenseService = Depends(get_service)):
    """Get expense details"""
    return envelope(await service.get_expense(expense_id))


@router.post("", status_code=status.HTTP_201_CREATED)
async def create_expense(
    payload: Dict[str, Any] = Body(...),
    service: ExpenseService = Depends(get_service)
):
    """Create a new expense"""
    return envelope(await service.create_expense(normalize_payload(payload)))


@router.put("/{expense_id}")
async def replace_expense(
    expense_id: str,
    payload: Dict[str, Any] = Body(...),
    service: ExpenseService = Depends(get_service)
):
    """Replace every field of an expense"""
    return envelope(await service.replace_expense(expense_id, normalize_payload(payload)))


@router.patch("/{expense_id}")
async def patch_expense(
    expense_id: str,
    payload: Dict[str, Any] = Body(...),
    service: ExpenseService = Depends(get_service)
):
    """Update only the supplied fields"""
    return envelope(await service.patch_expense(expense_id, normalize_payload(payload)))


@router.delete("/{expense_id}")
async def delete_expense(expense_id: str, service: ExpenseService = Depends(get_service)):
    """Delete an expense and return it"""
    return envelope(await service.delete_expense(expense_id))
