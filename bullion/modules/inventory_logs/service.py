"""
InventoryLogService - draft-aware stock movement records.
"""

from typing import Any, List, Optional
from sqlalchemy import delete, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from .models import InventoryLog
from .schemas import FilterInventoryLogsDto


class InventoryLogService:

    @staticmethod
    async def create_log(db: AsyncSession, **fields: Any) -> InventoryLog:
        """
        Create a single inventory log inside the caller's unit of work.

        Returns:
            Created inventory log (flushed, id assigned)
        """
        log = InventoryLog(**fields)
        db.add(log)
        await db.flush()
        return log

    @staticmethod
    async def confirm_draft_logs(
        db: AsyncSession, draft_id: int, user_id: Optional[int] = None
    ) -> int:
        """Flip a draft's provisional logs; returns how many were flipped."""
        result = await db.execute(
            update(InventoryLog)
            .where(InventoryLog.draft_id == draft_id, InventoryLog.is_draft.is_(True))
            .values(is_draft=False, updated_by=user_id)
            .execution_options(synchronize_session="fetch")
        )
        return result.rowcount

    @staticmethod
    async def mark_draft_logs_provisional(
        db: AsyncSession, draft_id: int, user_id: Optional[int] = None
    ) -> int:
        result = await db.execute(
            update(InventoryLog)
            .where(InventoryLog.draft_id == draft_id, InventoryLog.is_draft.is_(False))
            .values(is_draft=True, updated_by=user_id)
            .execution_options(synchronize_session="fetch")
        )
        return result.rowcount

    @staticmethod
    async def delete_draft_logs(
        db: AsyncSession, draft_id: int, provisional_only: bool = True
    ) -> int:
        statement = delete(InventoryLog).where(InventoryLog.draft_id == draft_id)
        if provisional_only:
            statement = statement.where(InventoryLog.is_draft.is_(True))

        result = await db.execute(
            statement.execution_options(synchronize_session="fetch")
        )
        return result.rowcount

    @staticmethod
    async def get_logs(
        db: AsyncSession, filters: Optional[FilterInventoryLogsDto] = None
    ) -> List[InventoryLog]:
        """
        Inventory logs, newest first.

        Args:
            filters: optional stock / draft / provisional filters
        """
        query = select(InventoryLog).where(InventoryLog.deleted_at.is_(None))

        if filters:
            if filters.stock_id is not None:
                query = query.where(InventoryLog.stock_id == filters.stock_id)
            if filters.draft_id is not None:
                query = query.where(InventoryLog.draft_id == filters.draft_id)
            if filters.is_draft is not None:
                query = query.where(InventoryLog.is_draft.is_(filters.is_draft))

        query = query.order_by(InventoryLog.created_at.desc(), InventoryLog.id.desc())

        result = await db.execute(query)
        return list(result.scalars().all())
