import enum
from datetime import datetime
from decimal import Decimal
from sqlalchemy import (
    Boolean,
    CheckConstraint,
    DateTime,
    Enum as SQLEnum,
    ForeignKey,
    Index,
    Numeric,
    String,
    UniqueConstraint,
    func,
)
from sqlalchemy.orm import Mapped, mapped_column
from typing import Optional

from bullion.core.db.base import AuditMixin, BaseModel


class RegistryType(str, enum.Enum):
    """Ledger bucket an entry belongs to"""

    OPENING_CASH_BALANCE = "OPENING_CASH_BALANCE"
    OPENING_GOLD_BALANCE = "OPENING_GOLD_BALANCE"
    PARTY_CASH_BALANCE = "PARTY_CASH_BALANCE"
    PARTY_GOLD_BALANCE = "PARTY_GOLD_BALANCE"
    GOLD_STOCK = "GOLD_STOCK"


class RegistryEntry(BaseModel, AuditMixin):
    """
    Append-only ledger line.

    previous_balance / running_balance are snapshots taken when the entry was
    posted and are never recomputed. Entries with is_draft=True are provisional:
    they belong to a draft (draft_id) and are flipped or deleted with it.
    """

    __tablename__ = "registry"

    __table_args__ = (
        UniqueConstraint("transaction_id", name="uq_registry_transaction_id"),
        CheckConstraint(
            "NOT (credit > 0 AND debit > 0)", name="ck_registry_single_side"
        ),
        Index("idx_registry_draft", "draft_id", "is_draft"),
        Index("idx_registry_party_type", "party_id", "type"),
    )

    transaction_id: Mapped[str] = mapped_column(String(30), nullable=False)

    transaction_type: Mapped[str] = mapped_column(String(50), nullable=False)

    type: Mapped[RegistryType] = mapped_column(
        SQLEnum(RegistryType, name="registry_type_enum", native_enum=False),
        nullable=False,
    )

    description: Mapped[Optional[str]] = mapped_column(String(500), nullable=True)

    party_id: Mapped[Optional[int]] = mapped_column(
        ForeignKey("parties.id"), nullable=True
    )

    stock_id: Mapped[Optional[int]] = mapped_column(
        ForeignKey("metal_stocks.id"), nullable=True
    )

    draft_id: Mapped[Optional[int]] = mapped_column(
        ForeignKey("drafts.id", ondelete="SET NULL"), nullable=True
    )

    fund_transfer_id: Mapped[Optional[int]] = mapped_column(
        ForeignKey("fund_transfers.id"), nullable=True, index=True
    )

    # GOLD or a currency code
    asset_type: Mapped[str] = mapped_column(String(10), nullable=False)

    value: Mapped[Decimal] = mapped_column(
        Numeric(precision=18, scale=4), nullable=False, default=Decimal("0")
    )

    credit: Mapped[Decimal] = mapped_column(
        Numeric(precision=18, scale=4), nullable=False, default=Decimal("0")
    )

    debit: Mapped[Decimal] = mapped_column(
        Numeric(precision=18, scale=4), nullable=False, default=Decimal("0")
    )

    previous_balance: Mapped[Optional[Decimal]] = mapped_column(
        Numeric(precision=18, scale=4), nullable=True
    )

    running_balance: Mapped[Optional[Decimal]] = mapped_column(
        Numeric(precision=18, scale=4), nullable=True
    )

    gross_weight: Mapped[Optional[Decimal]] = mapped_column(
        Numeric(precision=18, scale=4), nullable=True
    )

    pure_weight: Mapped[Optional[Decimal]] = mapped_column(
        Numeric(precision=18, scale=4), nullable=True
    )

    purity: Mapped[Optional[Decimal]] = mapped_column(
        Numeric(precision=10, scale=6), nullable=True
    )

    cost_center: Mapped[Optional[str]] = mapped_column(String(50), nullable=True)

    reference: Mapped[Optional[str]] = mapped_column(String(100), nullable=True)

    transaction_date: Mapped[datetime] = mapped_column(
        DateTime(timezone=False), server_default=func.now(), nullable=False
    )

    is_draft: Mapped[bool] = mapped_column(
        Boolean, nullable=False, default=False, server_default="0"
    )

    status: Mapped[str] = mapped_column(
        String(20), nullable=False, default="completed", server_default="completed"
    )

    def __repr__(self) -> str:
        return (
            f"<RegistryEntry(transaction_id='{self.transaction_id}', type={self.type.value}, "
            f"credit={self.credit}, debit={self.debit}, is_draft={self.is_draft})>"
        )
