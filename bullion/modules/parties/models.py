from datetime import datetime
from decimal import Decimal
from typing import List, Optional

from sqlalchemy import (
    Boolean,
    DateTime,
    ForeignKey,
    Numeric,
    String,
    UniqueConstraint,
)
from sqlalchemy.orm import Mapped, mapped_column, relationship

from bullion.core.db.base import AuditMixin, BaseModel


class Party(BaseModel, AuditMixin):
    """
    Trading party (customer, supplier, refiner...).
    Extends BaseModel which provides: id, created_at, updated_at, deleted_at

    Gold is tracked in grams of pure metal:
    - gold_total_grams: confirmed holding
    - gold_draft_balance: pure weight reserved by drafts still in `draft` status
    """

    __tablename__ = "parties"

    name: Mapped[str] = mapped_column(String(255), nullable=False, index=True)

    account_code: Mapped[str] = mapped_column(
        String(50), nullable=False, unique=True
    )

    gold_total_grams: Mapped[Decimal] = mapped_column(
        Numeric(precision=18, scale=4),
        nullable=False,
        default=Decimal("0"),
        server_default="0",
    )

    gold_draft_balance: Mapped[Decimal] = mapped_column(
        Numeric(precision=18, scale=4),
        nullable=False,
        default=Decimal("0"),
        server_default="0",
    )

    gold_last_updated: Mapped[Optional[datetime]] = mapped_column(
        DateTime(timezone=False), nullable=True, default=None
    )

    cash_balances: Mapped[List["CashBalance"]] = relationship(
        back_populates="party",
        lazy="selectin",
        cascade="all, delete-orphan",
        order_by="CashBalance.id",
    )

    def __repr__(self) -> str:
        return (
            f"<Party(id={self.id}, account_code='{self.account_code}', "
            f"gold_total_grams={self.gold_total_grams}, "
            f"gold_draft_balance={self.gold_draft_balance})>"
        )


class CashBalance(BaseModel):
    """One currency slot of a party's cash balance"""

    __tablename__ = "party_cash_balances"

    __table_args__ = (
        UniqueConstraint(
            "party_id", "currency_code", name="uq_party_cash_balances_currency"
        ),
    )

    party_id: Mapped[int] = mapped_column(
        ForeignKey("parties.id", ondelete="CASCADE"), nullable=False, index=True
    )

    currency_code: Mapped[str] = mapped_column(String(10), nullable=False)

    amount: Mapped[Decimal] = mapped_column(
        Numeric(precision=18, scale=2),
        nullable=False,
        default=Decimal("0"),
        server_default="0",
    )

    is_default: Mapped[bool] = mapped_column(
        Boolean, nullable=False, default=False, server_default="0"
    )

    last_updated: Mapped[Optional[datetime]] = mapped_column(
        DateTime(timezone=False), nullable=True, default=None
    )

    party: Mapped["Party"] = relationship(back_populates="cash_balances")

    def __repr__(self) -> str:
        return f"<CashBalance(party_id={self.party_id}, currency_code='{self.currency_code}', amount={self.amount})>"
