"""
Parties Router - party master data and balances.
"""

from typing import List
from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from bullion.core.auth import TokenData, get_current_user
from bullion.core.db.engine import get_db_util
from bullion.core.response_interceptor import CustomAPIRoute, skip_interceptor
from .service import PartiesService
from .schemas import CreatePartyDto, FilterPartiesDto, PartyResponse

router = APIRouter(prefix="/parties", tags=["parties"], route_class=CustomAPIRoute)


@router.post("", response_model=PartyResponse, status_code=201)
async def create_party(
    create_dto: CreatePartyDto,
    db: AsyncSession = Depends(get_db_util),
    current_user: TokenData = Depends(get_current_user),
):
    """Create a new party with optional cash slots"""
    return await PartiesService.create(db, create_dto, current_user.user_id)


@router.get("", response_model=List[PartyResponse])
async def get_all_parties(
    filters: FilterPartiesDto = Depends(),
    db: AsyncSession = Depends(get_db_util),
):
    """
    Get all active parties.

    Query parameters:
    - search: Search by name or account code
    """
    return await PartiesService.find_all(db=db, filters=filters)


@router.get("/{party_id}", response_model=PartyResponse)
async def get_party_by_id(
    party_id: int,
    db: AsyncSession = Depends(get_db_util),
):
    """Get party with its gold and cash balances"""
    return await PartiesService.find_one(db, party_id)


@router.delete("/{party_id}")
@skip_interceptor
async def delete_party(
    party_id: int,
    db: AsyncSession = Depends(get_db_util),
    current_user: TokenData = Depends(get_current_user),
):
    """Soft delete party (returns custom response format)"""
    await PartiesService.remove(db, party_id)
    return {"message": "Party deleted successfully"}
