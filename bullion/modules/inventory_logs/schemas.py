"""
InventoryLog DTOs - Pydantic schemas for response validation.
"""

from pydantic import BaseModel, Field
from typing import Optional
from datetime import datetime
from decimal import Decimal


class FilterInventoryLogsDto(BaseModel):
    stock_id: Optional[int] = Field(None, description="Logs of one stock")
    draft_id: Optional[int] = Field(None, description="Logs written by one draft")
    is_draft: Optional[bool] = Field(None, description="Provisional (true) or confirmed (false) only")


class InventoryLogResponse(BaseModel):
    """Response schema for inventory log."""

    id: int
    code: str
    transaction_type: str
    party_id: Optional[int] = None
    stock_id: int
    draft_id: Optional[int] = None
    pcs: bool
    voucher_code: Optional[str] = None
    voucher_type: Optional[str] = None
    voucher_date: Optional[datetime] = None
    gross_weight: Decimal
    action: str
    note: Optional[str] = None
    is_draft: bool
    timestamp: datetime

    model_config = {"from_attributes": True}
