"""
Fund Transfers Router - party-to-party transfers and opening balances.
"""

from typing import List
from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from bullion.core.auth import TokenData, get_current_user
from bullion.core.db.engine import get_db_util
from .service import FundTransferService
from .schemas import (
    AccountTransferDto,
    FilterFundTransfersDto,
    FundTransferResponse,
    OpeningBalanceDto,
)

router = APIRouter(prefix="/fund-transfers", tags=["fund-transfers"])


@router.post("/account-to-account", response_model=FundTransferResponse, status_code=201)
async def account_to_account_transfer(
    dto: AccountTransferDto,
    db: AsyncSession = Depends(get_db_util),
    current_user: TokenData = Depends(get_current_user),
):
    """
    Transfer cash (default currency slot) or gold grams between two parties.
    A negative value transfers from receiver to sender.
    """
    return await FundTransferService.account_to_account_transfer(db, dto, current_user.user_id)


@router.post("/opening-balance", response_model=FundTransferResponse, status_code=201)
async def opening_balance_transfer(
    dto: OpeningBalanceDto,
    db: AsyncSession = Depends(get_db_util),
    current_user: TokenData = Depends(get_current_user),
):
    """Set or replace a party's opening cash or gold balance"""
    return await FundTransferService.opening_balance_transfer(db, dto, current_user.user_id)


@router.get("", response_model=List[FundTransferResponse])
async def get_all_transfers(
    filters: FilterFundTransfersDto = Depends(),
    db: AsyncSession = Depends(get_db_util),
    current_user: TokenData = Depends(get_current_user),
):
    """
    Get transfer records, newest first.

    Query parameters:
    - asset_type: CASH or GOLD
    - type: FUND-TRANSFER or OPENING-BALANCE
    - party_id: transfers where the party sends or receives
    """
    return await FundTransferService.find_all(db, filters)
