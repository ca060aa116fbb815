from pydantic import BaseModel
from typing import Optional
from datetime import datetime
from decimal import Decimal


class InventoryResponse(BaseModel):
    """Aggregate holding of one stock"""

    id: int
    stock_id: int
    gross_weight: Decimal
    pure_weight: Decimal
    purity: Optional[Decimal] = None
    pcs: bool
    pcs_count: int
    status: str
    updated_at: datetime

    model_config = {"from_attributes": True}
