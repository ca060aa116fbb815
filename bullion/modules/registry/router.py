"""
Registry Router - read-only ledger view.
"""

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from bullion.core.db.engine import get_db_util
from bullion.core.pagination import build_paginated_response
from .service import RegistryService
from .schemas import FilterRegistryDto, PaginatedRegistryResponse

router = APIRouter(prefix="/registry", tags=["registry"])


@router.get("", response_model=PaginatedRegistryResponse)
async def get_registry(
    filters: FilterRegistryDto = Depends(),
    db: AsyncSession = Depends(get_db_util),
):
    """
    Ledger entries, newest first.

    Query parameters:
    - party_id: one party's ledger
    - draft_id: entries owned by a draft
    - stock_id, type: narrow by stock or ledger bucket
    - is_draft: true for provisional entries only, false for confirmed only
    - page, page_size: pagination
    """
    items, total = await RegistryService.find_all(db, filters)
    return build_paginated_response(items, total, filters.page, filters.page_size)
