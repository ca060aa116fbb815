"""
InventoryLog Router - read-only movement history.
"""

from typing import List
from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from bullion.core.db.engine import get_db_util
from .service import InventoryLogService
from .schemas import FilterInventoryLogsDto, InventoryLogResponse

router = APIRouter(prefix="/inventory-logs", tags=["Inventory Logs"])


@router.get("", response_model=List[InventoryLogResponse])
async def get_logs(
    filters: FilterInventoryLogsDto = Depends(),
    db: AsyncSession = Depends(get_db_util),
):
    """
    Get inventory logs, newest first.

    Query parameters:
    - stock_id: logs of one stock
    - draft_id: logs written by one draft
    - is_draft: provisional (true) or confirmed (false) only
    """
    return await InventoryLogService.get_logs(db, filters)
