"""
Drafts DTOs (Data Transfer Objects)
"""

from pydantic import BaseModel, Field
from typing import List, Optional
from datetime import datetime
from decimal import Decimal

from .models import DraftStatus

DRAFT_NUMBER_PATTERN = r"^[A-Z]{3}\d+$"


class CreateDraftDto(BaseModel):
    """
    DTO for creating a draft.

    purity / gold_au_percent accept a fraction (0.75) or a percentage (75);
    the stored value is always the fraction. purity wins when both are given.
    """

    draft_number: Optional[str] = Field(
        None, pattern=DRAFT_NUMBER_PATTERN, description="Generated when omitted"
    )
    status: DraftStatus = DraftStatus.draft
    party_id: Optional[int] = None
    stock_id: Optional[int] = None
    gross_weight: Decimal = Field(default=Decimal("0"), ge=0)
    purity: Optional[Decimal] = Field(None, ge=0, le=100)
    karat: Optional[Decimal] = Field(None, ge=0)

    laboratory_name: Optional[str] = Field(None, max_length=255)
    certificate_number: Optional[str] = Field(None, max_length=100)
    item_code: Optional[str] = Field(None, max_length=100)
    gold_au_percent: Optional[Decimal] = Field(None, ge=0, le=100)
    result_karat: Optional[Decimal] = Field(None, ge=0)

    voucher_code: Optional[str] = Field(None, max_length=100)
    voucher_type: Optional[str] = Field(None, max_length=100)
    voucher_date: Optional[datetime] = None

    remarks: Optional[str] = None
    rejection_reason: Optional[str] = None

    class Config:
        from_attributes = True


class UpdateDraftDto(BaseModel):
    """
    DTO for updating a draft. Only fields present in the request are applied;
    a status change runs the matching lifecycle transition.
    """

    status: Optional[DraftStatus] = None
    party_id: Optional[int] = None
    stock_id: Optional[int] = None
    gross_weight: Optional[Decimal] = Field(None, ge=0)
    purity: Optional[Decimal] = Field(None, ge=0, le=100)
    karat: Optional[Decimal] = Field(None, ge=0)

    laboratory_name: Optional[str] = Field(None, max_length=255)
    certificate_number: Optional[str] = Field(None, max_length=100)
    item_code: Optional[str] = Field(None, max_length=100)
    gold_au_percent: Optional[Decimal] = Field(None, ge=0, le=100)
    result_karat: Optional[Decimal] = Field(None, ge=0)

    voucher_code: Optional[str] = Field(None, max_length=100)
    voucher_type: Optional[str] = Field(None, max_length=100)
    voucher_date: Optional[datetime] = None

    remarks: Optional[str] = None
    rejection_reason: Optional[str] = None

    class Config:
        from_attributes = True


class FilterDraftsDto(BaseModel):
    """Query parameters of the draft list"""

    page: int = Field(1, ge=1)
    page_size: int = Field(25, ge=1, le=200)
    search: Optional[str] = Field(
        None,
        description="Matches draft number, party name, stock code, certificate number, item code or voucher code",
    )
    status: Optional[DraftStatus] = None
    party_id: Optional[int] = None


class DraftResponse(BaseModel):
    """Response model for draft"""

    id: int
    draft_number: str
    status: DraftStatus
    party_id: Optional[int] = None
    party_name: Optional[str] = None
    stock_id: Optional[int] = None
    stock_code: Optional[str] = None
    gross_weight: Decimal
    purity: Optional[Decimal] = None
    karat: Optional[Decimal] = None
    pure_weight: Decimal
    laboratory_name: Optional[str] = None
    certificate_number: Optional[str] = None
    item_code: Optional[str] = None
    gold_au_percent: Optional[Decimal] = None
    result_karat: Optional[Decimal] = None
    voucher_code: Optional[str] = None
    voucher_type: Optional[str] = None
    voucher_date: Optional[datetime] = None
    remarks: Optional[str] = None
    rejection_reason: Optional[str] = None
    created_by: Optional[int] = None
    updated_by: Optional[int] = None
    created_at: datetime
    updated_at: datetime

    class Config:
        from_attributes = True


class PaginatedDraftsResponse(BaseModel):
    items: List[DraftResponse]
    total: int
    page: int
    page_size: int
    total_pages: int
    has_more: bool
