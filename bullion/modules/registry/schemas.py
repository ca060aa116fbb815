"""
Ledger DTOs
"""

from pydantic import BaseModel, Field
from typing import List, Optional
from datetime import datetime
from decimal import Decimal

from .models import RegistryType


class FilterRegistryDto(BaseModel):
    """Query filters for the ledger view"""

    party_id: Optional[int] = None
    draft_id: Optional[int] = None
    stock_id: Optional[int] = None
    type: Optional[RegistryType] = None
    is_draft: Optional[bool] = None
    page: int = Field(1, ge=1)
    page_size: int = Field(25, ge=1, le=200)


class RegistryEntryResponse(BaseModel):
    id: int
    transaction_id: str
    transaction_type: str
    type: RegistryType
    description: Optional[str] = None
    party_id: Optional[int] = None
    stock_id: Optional[int] = None
    draft_id: Optional[int] = None
    fund_transfer_id: Optional[int] = None
    asset_type: str
    value: Decimal
    credit: Decimal
    debit: Decimal
    previous_balance: Optional[Decimal] = None
    running_balance: Optional[Decimal] = None
    gross_weight: Optional[Decimal] = None
    pure_weight: Optional[Decimal] = None
    purity: Optional[Decimal] = None
    cost_center: Optional[str] = None
    reference: Optional[str] = None
    transaction_date: datetime
    is_draft: bool
    status: str
    created_at: datetime

    model_config = {"from_attributes": True}


class PaginatedRegistryResponse(BaseModel):
    items: List[RegistryEntryResponse]
    total: int
    page: int
    page_size: int
    total_pages: int
    has_more: bool
