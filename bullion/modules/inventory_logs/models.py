from datetime import datetime
from decimal import Decimal
from sqlalchemy import Boolean, String, Text, ForeignKey, DateTime, Numeric, Index, func
from sqlalchemy.orm import Mapped, mapped_column
from typing import Optional

from bullion.core.db.base import AuditMixin, BaseModel


class InventoryLog(BaseModel, AuditMixin):
    """
    One stock movement.
    Rows written by a draft carry its draft_id and stay is_draft=True until the
    draft is confirmed; rejecting or deleting the draft removes them.
    """

    __tablename__ = "inventory_logs"

    __table_args__ = (Index("idx_inventory_logs_draft", "draft_id", "is_draft"),)

    code: Mapped[str] = mapped_column(String(50), nullable=False)

    transaction_type: Mapped[str] = mapped_column(String(50), nullable=False)

    party_id: Mapped[Optional[int]] = mapped_column(
        ForeignKey("parties.id", name="fk_inventory_logs_party_id"), nullable=True
    )

    stock_id: Mapped[int] = mapped_column(
        ForeignKey("metal_stocks.id", name="fk_inventory_logs_stock_id"),
        nullable=False,
        index=True,
    )

    draft_id: Mapped[Optional[int]] = mapped_column(
        ForeignKey("drafts.id", name="fk_inventory_logs_draft_id", ondelete="SET NULL"),
        nullable=True,
    )

    pcs: Mapped[bool] = mapped_column(
        Boolean, nullable=False, default=False, server_default="0"
    )

    voucher_code: Mapped[Optional[str]] = mapped_column(String(100), nullable=True)

    voucher_type: Mapped[Optional[str]] = mapped_column(String(100), nullable=True)

    voucher_date: Mapped[Optional[datetime]] = mapped_column(
        DateTime(timezone=False), nullable=True
    )

    gross_weight: Mapped[Decimal] = mapped_column(
        Numeric(precision=18, scale=4), nullable=False, default=Decimal("0")
    )

    action: Mapped[str] = mapped_column(String(20), nullable=False)

    note: Mapped[Optional[str]] = mapped_column(Text, nullable=True, default=None)

    is_draft: Mapped[bool] = mapped_column(
        Boolean, nullable=False, default=False, server_default="0"
    )

    timestamp: Mapped[datetime] = mapped_column(
        DateTime(timezone=False), server_default=func.now(), nullable=False
    )

    def __repr__(self) -> str:
        return f"<InventoryLog(id={self.id}, stock_id={self.stock_id}, action='{self.action}', gross_weight={self.gross_weight}, is_draft={self.is_draft})>"
