"""
Fund transfer DTOs
"""

from pydantic import BaseModel, Field
from typing import List, Optional
from datetime import datetime
from decimal import Decimal

from .models import AssetType, TransferType


class AccountTransferDto(BaseModel):
    """
    Move value between two parties.
    A negative value moves it from receiver to sender instead.
    """

    sender_id: int
    receiver_id: int
    value: Decimal
    asset_type: AssetType
    voucher_number: Optional[str] = Field(None, max_length=100)
    voucher_type: Optional[str] = Field(None, max_length=100)
    voucher_date: Optional[datetime] = None


class OpeningBalanceDto(BaseModel):
    """
    Set a party's opening balance for one asset.
    Positive credits the party, negative debits it; repeating the call replaces the previous opening.
    """

    party_id: int
    value: Decimal
    asset_type: AssetType
    voucher_number: Optional[str] = Field(None, max_length=100)
    voucher_type: Optional[str] = Field(None, max_length=100)
    voucher_date: Optional[datetime] = None


class FilterFundTransfersDto(BaseModel):
    asset_type: Optional[AssetType] = None
    party_id: Optional[int] = Field(None, description="Transfers where the party sends or receives")
    type: Optional[TransferType] = None


class FundTransferResponse(BaseModel):
    id: int
    transaction_id: str
    type: TransferType
    asset_type: AssetType
    description: Optional[str] = None
    value: Decimal
    is_reversed: bool
    receiving_party_id: Optional[int] = None
    receiving_credit: Decimal
    sending_party_id: Optional[int] = None
    sending_debit: Decimal
    voucher_number: Optional[str] = None
    voucher_type: Optional[str] = None
    voucher_date: Optional[datetime] = None
    transaction_date: datetime
    created_at: datetime

    class Config:
        from_attributes = True
