"""
Admin Router - shared-secret protected section
"""
from fastapi import APIRouter, Depends

from ..auth import require_admin
from ..responses import envelope

router = APIRouter()


@router.get("", dependencies=[Depends(require_admin)])
async def admin_home():
    """Admin landing endpoint"""
    return envelope({"message": "Welcome to the admin section"})
