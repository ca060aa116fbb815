"""
RegistryService - posts and maintains ledger entries.

Balances themselves live on the party rows (BalanceStore); the registry only
records each movement with the balance snapshot at posting time.
"""

import logging
from datetime import datetime
from typing import Any, List, Optional, Tuple

from sqlalchemy import delete, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from bullion.core.config import config
from bullion.core.pagination import paginate_query
from bullion.core.sequence import SequenceGenerator
from .models import RegistryEntry, RegistryType
from .schemas import FilterRegistryDto

logger = logging.getLogger(__name__)

ledger_ids = SequenceGenerator(RegistryEntry.transaction_id, config.ledger_id_prefix)


class RegistryService:

    @staticmethod
    async def post(db: AsyncSession, **fields: Any) -> RegistryEntry:
        """
        Write one ledger entry with a fresh TXN identifier.

        Args:
            db: session inside the caller's unit of work
            **fields: RegistryEntry columns except transaction_id

        Returns:
            The flushed entry
        """
        entry = await ledger_ids.insert_with_retry(
            db, lambda transaction_id: RegistryEntry(transaction_id=transaction_id, **fields)
        )
        logger.debug(
            "Posted %s %s party=%s credit=%s debit=%s draft=%s",
            entry.transaction_id,
            entry.type.value,
            entry.party_id,
            entry.credit,
            entry.debit,
            entry.is_draft,
        )
        return entry

    @staticmethod
    async def confirm_draft_entries(
        db: AsyncSession,
        draft_id: int,
        cost_center: str,
        transaction_date: datetime,
        user_id: Optional[int] = None,
    ) -> int:
        """
        Flip a draft's provisional entries to confirmed.

        Returns:
            Number of entries flipped
        """
        result = await db.execute(
            update(RegistryEntry)
            .where(RegistryEntry.draft_id == draft_id, RegistryEntry.is_draft.is_(True))
            .values(
                is_draft=False,
                cost_center=cost_center,
                transaction_date=transaction_date,
                status="completed",
                updated_by=user_id,
            )
            .execution_options(synchronize_session="fetch")
        )
        return result.rowcount

    @staticmethod
    async def mark_draft_entries_provisional(
        db: AsyncSession, draft_id: int, user_id: Optional[int] = None
    ) -> int:
        """
        Flip a draft's confirmed entries back to provisional.

        Returns:
            Number of entries flipped
        """
        result = await db.execute(
            update(RegistryEntry)
            .where(RegistryEntry.draft_id == draft_id, RegistryEntry.is_draft.is_(False))
            .values(
                is_draft=True,
                cost_center=config.draft_cost_center,
                status="pending",
                updated_by=user_id,
            )
            .execution_options(synchronize_session="fetch")
        )
        return result.rowcount

    @staticmethod
    async def delete_draft_entries(
        db: AsyncSession, draft_id: int, provisional_only: bool = True
    ) -> int:
        """
        Delete the entries a draft owns.

        Args:
            provisional_only: keep confirmed entries (reject) or delete all (reverse)

        Returns:
            Number of entries deleted
        """
        statement = delete(RegistryEntry).where(RegistryEntry.draft_id == draft_id)
        if provisional_only:
            statement = statement.where(RegistryEntry.is_draft.is_(True))

        result = await db.execute(
            statement.execution_options(synchronize_session="fetch")
        )
        return result.rowcount

    @staticmethod
    async def find_opening_entry(
        db: AsyncSession, party_id: int, registry_type: RegistryType
    ) -> Optional[RegistryEntry]:
        """The party's opening entry for one asset, if any"""
        result = await db.execute(
            select(RegistryEntry)
            .where(
                RegistryEntry.party_id == party_id,
                RegistryEntry.type == registry_type,
            )
            .order_by(RegistryEntry.id)
            .limit(1)
            .with_for_update()
        )
        return result.scalar_one_or_none()

    @staticmethod
    async def find_for_draft(db: AsyncSession, draft_id: int) -> List[RegistryEntry]:
        result = await db.execute(
            select(RegistryEntry)
            .where(RegistryEntry.draft_id == draft_id)
            .order_by(RegistryEntry.id)
        )
        return list(result.scalars().all())

    @staticmethod
    async def find_all(
        db: AsyncSession, filters: FilterRegistryDto
    ) -> Tuple[List[RegistryEntry], int]:
        """Ledger view, newest first"""
        query = select(RegistryEntry)

        if filters.party_id is not None:
            query = query.where(RegistryEntry.party_id == filters.party_id)
        if filters.draft_id is not None:
            query = query.where(RegistryEntry.draft_id == filters.draft_id)
        if filters.stock_id is not None:
            query = query.where(RegistryEntry.stock_id == filters.stock_id)
        if filters.type is not None:
            query = query.where(RegistryEntry.type == filters.type)
        if filters.is_draft is not None:
            query = query.where(RegistryEntry.is_draft.is_(filters.is_draft))

        query = query.order_by(
            RegistryEntry.transaction_date.desc(), RegistryEntry.id.desc()
        )
        return await paginate_query(db, query, filters.page, filters.page_size)
