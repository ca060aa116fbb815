"""
Stocks Router - metal stock and karat master data.
"""

from typing import List, Optional
from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from bullion.core.auth import TokenData, get_current_user
from bullion.core.db.engine import get_db_util
from .service import StocksService
from .schemas import CreateKaratDto, CreateStockDto, KaratResponse, StockResponse

router = APIRouter(prefix="/stocks", tags=["stocks"])
karats_router = APIRouter(prefix="/karats", tags=["karats"])


@router.post("", response_model=StockResponse, status_code=201)
async def create_stock(
    create_dto: CreateStockDto,
    db: AsyncSession = Depends(get_db_util),
    current_user: TokenData = Depends(get_current_user),
):
    """Create a metal stock item"""
    return await StocksService.create(db, create_dto, current_user.user_id)


@router.get("", response_model=List[StockResponse])
async def get_all_stocks(
    search: Optional[str] = Query(None, description="Search by code or description"),
    db: AsyncSession = Depends(get_db_util),
):
    return await StocksService.find_all(db, search)


@router.get("/{stock_id}", response_model=StockResponse)
async def get_stock_by_id(stock_id: int, db: AsyncSession = Depends(get_db_util)):
    return await StocksService.find_one(db, stock_id)


@karats_router.post("", response_model=KaratResponse, status_code=201)
async def create_karat(
    create_dto: CreateKaratDto,
    db: AsyncSession = Depends(get_db_util),
    current_user: TokenData = Depends(get_current_user),
):
    return await StocksService.create_karat(db, create_dto)


@karats_router.get("", response_model=List[KaratResponse])
async def get_all_karats(db: AsyncSession = Depends(get_db_util)):
    return await StocksService.find_all_karats(db)


@karats_router.get("/{karat_id}", response_model=KaratResponse)
async def get_karat_by_id(karat_id: int, db: AsyncSession = Depends(get_db_util)):
    return await StocksService.find_karat(db, karat_id)
