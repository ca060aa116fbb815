from decimal import Decimal
from sqlalchemy import Boolean, ForeignKey, Integer, Numeric, String
from sqlalchemy.orm import Mapped, mapped_column, relationship
from typing import Optional

from bullion.core.db.base import AuditMixin, BaseModel


class Karat(BaseModel):
    """Karat master: code (e.g. "22K") and its standard purity fraction"""

    __tablename__ = "karats"

    karat_code: Mapped[str] = mapped_column(String(20), nullable=False, unique=True)

    description: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)

    standard_purity: Mapped[Optional[Decimal]] = mapped_column(
        Numeric(precision=10, scale=6), nullable=True
    )

    def __repr__(self) -> str:
        return f"<Karat(id={self.id}, karat_code='{self.karat_code}')>"


class MetalStock(BaseModel, AuditMixin):
    """
    Metal stock item a draft can reference.
    cost_center is stamped on confirmed ledger entries; pcs marks piece-counted stock.
    """

    __tablename__ = "metal_stocks"

    code: Mapped[str] = mapped_column(String(50), nullable=False, unique=True)

    description: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)

    karat_id: Mapped[Optional[int]] = mapped_column(
        ForeignKey("karats.id"), nullable=True, index=True
    )

    standard_purity: Mapped[Optional[Decimal]] = mapped_column(
        Numeric(precision=10, scale=6), nullable=True
    )

    pcs: Mapped[bool] = mapped_column(
        Boolean, nullable=False, default=False, server_default="0"
    )

    pcs_count: Mapped[int] = mapped_column(
        Integer, nullable=False, default=0, server_default="0"
    )

    total_value: Mapped[Decimal] = mapped_column(
        Numeric(precision=18, scale=2),
        nullable=False,
        default=Decimal("0"),
        server_default="0",
    )

    cost_center: Mapped[Optional[str]] = mapped_column(String(50), nullable=True)

    karat: Mapped[Optional["Karat"]] = relationship(lazy="joined")

    def __repr__(self) -> str:
        return f"<MetalStock(id={self.id}, code='{self.code}', cost_center='{self.cost_center}')>"
