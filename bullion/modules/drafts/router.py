"""
Drafts Router - API endpoints for the draft lifecycle
"""

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from bullion.core.auth import TokenData, get_current_user
from bullion.core.db.engine import get_db_util
from bullion.core.pagination import build_paginated_response
from bullion.core.response_interceptor import CustomAPIRoute, skip_interceptor
from .service import DraftsService
from .schemas import (
    CreateDraftDto,
    DraftResponse,
    FilterDraftsDto,
    PaginatedDraftsResponse,
    UpdateDraftDto,
)

router = APIRouter(prefix="/drafts", tags=["drafts"], route_class=CustomAPIRoute)


@router.post("", response_model=DraftResponse, status_code=201)
async def create_draft(
    dto: CreateDraftDto,
    db: AsyncSession = Depends(get_db_util),
    current_user: TokenData = Depends(get_current_user),
):
    """
    Create a draft.
    In `draft` status with a party, a stock and a positive pure weight the
    draft reserves its pure weight on the party's draft balance.
    """
    return await DraftsService.create(db, dto, current_user.user_id)


@router.get("", response_model=PaginatedDraftsResponse)
async def get_all_drafts(
    filters: FilterDraftsDto = Depends(),
    db: AsyncSession = Depends(get_db_util),
    current_user: TokenData = Depends(get_current_user),
):
    """
    Get drafts, newest first.

    Query parameters:
    - page, page_size: pagination
    - search: draft number, party name, stock code, certificate number, item code or voucher code
    - status, party_id: narrow the list

    Examples:
    - GET /drafts?search=DRF00 - drafts whose number contains DRF00
    - GET /drafts?status=draft&party_id=3 - pending drafts of party 3
    """
    drafts, total = await DraftsService.find_all(db, filters)
    return build_paginated_response(drafts, total, filters.page, filters.page_size)


@router.get("/{draft_id}", response_model=DraftResponse)
async def get_draft(
    draft_id: int,
    db: AsyncSession = Depends(get_db_util),
    current_user: TokenData = Depends(get_current_user),
):
    return await DraftsService.find_one(db, draft_id)


@router.patch("/{draft_id}", response_model=DraftResponse)
async def update_draft(
    draft_id: int,
    dto: UpdateDraftDto,
    db: AsyncSession = Depends(get_db_util),
    current_user: TokenData = Depends(get_current_user),
):
    """
    Update a draft. Sending `status` runs the transition:
    draft -> confirmed, draft -> rejected, confirmed -> draft.
    Other status changes are ignored.
    """
    return await DraftsService.update(db, draft_id, dto, current_user.user_id)


@router.delete("/{draft_id}")
@skip_interceptor
async def delete_draft(
    draft_id: int,
    db: AsyncSession = Depends(get_db_util),
    current_user: TokenData = Depends(get_current_user),
):
    """Delete a draft after undoing its balance, ledger and inventory effects"""
    await DraftsService.remove(db, draft_id, current_user.user_id)
    return {"success": True, "message": "Draft deleted successfully"}
