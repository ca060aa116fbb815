from decimal import Decimal
from sqlalchemy import Boolean, ForeignKey, Integer, Numeric, String
from sqlalchemy.orm import Mapped, mapped_column
from typing import Optional

from bullion.core.db.base import AuditMixin, BaseModel


class Inventory(BaseModel, AuditMixin):
    """
    Confirmed holding per stock.
    Only draft confirm / revert / reverse move it; purity is set once from the
    first confirmed movement and never overwritten.
    """

    __tablename__ = "inventory"

    stock_id: Mapped[int] = mapped_column(
        ForeignKey("metal_stocks.id"), nullable=False, unique=True
    )

    gross_weight: Mapped[Decimal] = mapped_column(
        Numeric(precision=18, scale=4),
        nullable=False,
        default=Decimal("0"),
        server_default="0",
    )

    pure_weight: Mapped[Decimal] = mapped_column(
        Numeric(precision=18, scale=4),
        nullable=False,
        default=Decimal("0"),
        server_default="0",
    )

    purity: Mapped[Optional[Decimal]] = mapped_column(
        Numeric(precision=10, scale=6), nullable=True
    )

    pcs: Mapped[bool] = mapped_column(
        Boolean, nullable=False, default=False, server_default="0"
    )

    pcs_count: Mapped[int] = mapped_column(
        Integer, nullable=False, default=0, server_default="0"
    )

    status: Mapped[str] = mapped_column(
        String(20), nullable=False, default="active", server_default="active"
    )

    def __repr__(self) -> str:
        return f"<Inventory(stock_id={self.stock_id}, gross_weight={self.gross_weight}, pure_weight={self.pure_weight})>"
