"""
Party DTOs
"""

from pydantic import BaseModel, Field
from typing import Optional, List
from datetime import datetime
from decimal import Decimal


class FilterPartiesDto(BaseModel):
    """DTO for filtering parties"""

    search: Optional[str] = Field(None, description="Search by name or account code")


class CreatePartyDto(BaseModel):
    """
    DTO for creating a new party.
    The first currency becomes the default cash slot unless default_currency names another.
    """

    name: str = Field(..., min_length=1, max_length=255)
    account_code: str = Field(..., min_length=1, max_length=50)
    currencies: List[str] = Field(default_factory=list)
    default_currency: Optional[str] = Field(None, max_length=10)


class CashBalanceResponse(BaseModel):
    """One currency slot"""

    currency_code: str
    amount: Decimal
    is_default: bool
    last_updated: Optional[datetime] = None

    class Config:
        from_attributes = True


class PartyResponse(BaseModel):
    """Response model for Party entity"""

    id: int
    name: str
    account_code: str
    gold_total_grams: Decimal
    gold_draft_balance: Decimal
    gold_last_updated: Optional[datetime] = None
    cash_balances: List[CashBalanceResponse] = []
    created_at: datetime
    updated_at: datetime

    class Config:
        from_attributes = True
