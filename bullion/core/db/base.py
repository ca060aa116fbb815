from datetime import datetime
from sqlalchemy import DateTime, Integer, func
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column
from typing import Optional


class Base(DeclarativeBase):
    """Declarative base shared by every table and by Alembic autogenerate"""

    pass


class BaseModel(Base):
    """
    Abstract base model with the surrogate key and bookkeeping timestamps.
    deleted_at is only used by master data (parties, stocks) which soft delete;
    ledger-side tables are hard deleted by the draft lifecycle.
    """

    __abstract__ = True

    # Fetch server-side defaults (timestamps) right after INSERT/UPDATE so
    # async code never lazy-loads them
    __mapper_args__ = {"eager_defaults": True}

    id: Mapped[int] = mapped_column(primary_key=True, autoincrement=True)

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=False), server_default=func.now(), nullable=False
    )

    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=False),
        nullable=False,
        server_default=func.now(),
        onupdate=func.now(),
    )

    deleted_at: Mapped[Optional[datetime]] = mapped_column(
        DateTime(timezone=False), nullable=True, default=None
    )


class AuditMixin:
    """Actor columns filled from the authenticated user (TokenData.user_id)"""

    created_by: Mapped[Optional[int]] = mapped_column(
        Integer, nullable=True, default=None
    )

    updated_by: Mapped[Optional[int]] = mapped_column(
        Integer, nullable=True, default=None
    )
