"""
Draft Models - provisional metal entries awaiting confirmation
"""

import enum
from datetime import datetime
from decimal import Decimal
from sqlalchemy import (
    DateTime,
    Enum as SQLEnum,
    ForeignKey,
    Numeric,
    String,
    Text,
    UniqueConstraint,
)
from sqlalchemy.orm import Mapped, mapped_column
from typing import Optional

from bullion.core.db.base import AuditMixin, BaseModel


class DraftStatus(str, enum.Enum):
    """Lifecycle status of a draft"""

    draft = "draft"
    confirmed = "confirmed"
    rejected = "rejected"


class Draft(BaseModel, AuditMixin):
    """
    Draft model.

    While in `draft` status with a party, a stock and a positive pure weight,
    the draft owns one provisional ledger entry and one provisional inventory
    log and reserves its pure weight in the party's draft balance.
    purity is always a fraction (0..1); pure_weight = gross_weight × purity.
    """

    __tablename__ = "drafts"

    __table_args__ = (
        UniqueConstraint("draft_number", name="uq_drafts_draft_number"),
    )

    draft_number: Mapped[str] = mapped_column(String(30), nullable=False)

    status: Mapped[DraftStatus] = mapped_column(
        SQLEnum(DraftStatus, name="draft_status_enum", native_enum=False),
        nullable=False,
        default=DraftStatus.draft,
        server_default=DraftStatus.draft.value,
        index=True,
    )

    party_id: Mapped[Optional[int]] = mapped_column(
        ForeignKey("parties.id"), nullable=True, index=True
    )
    party_name: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)

    stock_id: Mapped[Optional[int]] = mapped_column(
        ForeignKey("metal_stocks.id"), nullable=True, index=True
    )
    stock_code: Mapped[Optional[str]] = mapped_column(String(50), nullable=True)

    gross_weight: Mapped[Decimal] = mapped_column(
        Numeric(precision=18, scale=4),
        nullable=False,
        default=Decimal("0"),
        server_default="0",
    )

    purity: Mapped[Optional[Decimal]] = mapped_column(
        Numeric(precision=10, scale=6), nullable=True
    )

    karat: Mapped[Optional[Decimal]] = mapped_column(
        Numeric(precision=6, scale=2), nullable=True
    )

    pure_weight: Mapped[Decimal] = mapped_column(
        Numeric(precision=18, scale=4),
        nullable=False,
        default=Decimal("0"),
        server_default="0",
    )

    # Certificate
    laboratory_name: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)
    certificate_number: Mapped[Optional[str]] = mapped_column(
        String(100), nullable=True, index=True
    )
    item_code: Mapped[Optional[str]] = mapped_column(String(100), nullable=True)
    gold_au_percent: Mapped[Optional[Decimal]] = mapped_column(
        Numeric(precision=10, scale=6), nullable=True
    )
    result_karat: Mapped[Optional[Decimal]] = mapped_column(
        Numeric(precision=6, scale=2), nullable=True
    )

    # Voucher
    voucher_code: Mapped[Optional[str]] = mapped_column(String(100), nullable=True)
    voucher_type: Mapped[Optional[str]] = mapped_column(String(100), nullable=True)
    voucher_date: Mapped[Optional[datetime]] = mapped_column(
        DateTime(timezone=False), nullable=True
    )

    remarks: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    rejection_reason: Mapped[Optional[str]] = mapped_column(Text, nullable=True)

    def __repr__(self) -> str:
        return (
            f"<Draft(id={self.id}, draft_number='{self.draft_number}', "
            f"status={self.status.value}, pure_weight={self.pure_weight})>"
        )
