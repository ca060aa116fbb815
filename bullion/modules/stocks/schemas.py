"""
Stock and karat DTOs
"""

from pydantic import BaseModel, Field
from typing import Optional
from datetime import datetime
from decimal import Decimal


class CreateKaratDto(BaseModel):
    karat_code: str = Field(..., min_length=1, max_length=20)
    description: Optional[str] = Field(None, max_length=255)
    standard_purity: Optional[Decimal] = Field(None, ge=0, le=100)


class KaratResponse(BaseModel):
    id: int
    karat_code: str
    description: Optional[str] = None
    standard_purity: Optional[Decimal] = None

    model_config = {"from_attributes": True}


class CreateStockDto(BaseModel):
    """DTO for creating a metal stock item"""

    code: str = Field(..., min_length=1, max_length=50)
    description: Optional[str] = Field(None, max_length=255)
    karat_id: Optional[int] = None
    standard_purity: Optional[Decimal] = Field(None, ge=0, le=100)
    pcs: bool = False
    pcs_count: int = Field(default=0, ge=0)
    total_value: Decimal = Field(default=Decimal("0"), ge=0)
    cost_center: Optional[str] = Field(None, max_length=50)


class StockResponse(BaseModel):
    """Response model for MetalStock entity"""

    id: int
    code: str
    description: Optional[str] = None
    karat_id: Optional[int] = None
    karat: Optional[KaratResponse] = None
    standard_purity: Optional[Decimal] = None
    pcs: bool
    pcs_count: int
    total_value: Decimal
    cost_center: Optional[str] = None
    created_at: datetime
    updated_at: datetime

    model_config = {"from_attributes": True}
