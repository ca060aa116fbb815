import enum
from datetime import datetime
from decimal import Decimal
from sqlalchemy import (
    Boolean,
    DateTime,
    Enum as SQLEnum,
    ForeignKey,
    Numeric,
    String,
    UniqueConstraint,
    func,
)
from sqlalchemy.orm import Mapped, mapped_column
from typing import Optional

from bullion.core.db.base import AuditMixin, BaseModel


class AssetType(str, enum.Enum):
    CASH = "CASH"
    GOLD = "GOLD"


class TransferType(str, enum.Enum):
    FUND_TRANSFER = "FUND-TRANSFER"
    OPENING_BALANCE = "OPENING-BALANCE"


class FundTransfer(BaseModel, AuditMixin):
    """
    Reporting record of a balance transfer or an opening balance.
    The balances themselves move on the party rows and in the registry.
    """

    __tablename__ = "fund_transfers"

    __table_args__ = (
        UniqueConstraint("transaction_id", name="uq_fund_transfers_transaction_id"),
    )

    transaction_id: Mapped[str] = mapped_column(String(30), nullable=False)

    type: Mapped[TransferType] = mapped_column(
        SQLEnum(
            TransferType,
            name="fund_transfer_type_enum",
            native_enum=False,
            values_callable=lambda members: [member.value for member in members],
        ),
        nullable=False,
        default=TransferType.FUND_TRANSFER,
    )

    asset_type: Mapped[AssetType] = mapped_column(
        SQLEnum(AssetType, name="asset_type_enum", native_enum=False),
        nullable=False,
    )

    description: Mapped[Optional[str]] = mapped_column(String(500), nullable=True)

    value: Mapped[Decimal] = mapped_column(
        Numeric(precision=18, scale=4), nullable=False
    )

    is_reversed: Mapped[bool] = mapped_column(
        Boolean, nullable=False, default=False, server_default="0"
    )

    receiving_party_id: Mapped[Optional[int]] = mapped_column(
        ForeignKey("parties.id"), nullable=True, index=True
    )

    receiving_credit: Mapped[Decimal] = mapped_column(
        Numeric(precision=18, scale=4), nullable=False, default=Decimal("0")
    )

    sending_party_id: Mapped[Optional[int]] = mapped_column(
        ForeignKey("parties.id"), nullable=True, index=True
    )

    sending_debit: Mapped[Decimal] = mapped_column(
        Numeric(precision=18, scale=4), nullable=False, default=Decimal("0")
    )

    voucher_number: Mapped[Optional[str]] = mapped_column(String(100), nullable=True)

    voucher_type: Mapped[Optional[str]] = mapped_column(String(100), nullable=True)

    voucher_date: Mapped[Optional[datetime]] = mapped_column(
        DateTime(timezone=False), nullable=True
    )

    transaction_date: Mapped[datetime] = mapped_column(
        DateTime(timezone=False), server_default=func.now(), nullable=False
    )

    def __repr__(self) -> str:
        return f"<FundTransfer(transaction_id='{self.transaction_id}', asset_type={self.asset_type.value}, value={self.value})>"
