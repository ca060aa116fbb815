"""
Inventory Router - aggregate holdings per stock.
"""

from typing import List
from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from bullion.core.db.engine import get_db_util
from .service import InventoryService
from .schemas import InventoryResponse

router = APIRouter(prefix="/inventory", tags=["inventory"])


@router.get("", response_model=List[InventoryResponse])
async def get_inventory(db: AsyncSession = Depends(get_db_util)):
    return await InventoryService.find_all(db)


@router.get("/{stock_id}", response_model=InventoryResponse)
async def get_inventory_for_stock(stock_id: int, db: AsyncSession = Depends(get_db_util)):
    """Aggregate holding of one stock"""
    return await InventoryService.find_by_stock(db, stock_id)
