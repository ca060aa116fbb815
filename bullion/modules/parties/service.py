"""
PartiesService - party master data.
Balances are never written here; see balances.BalanceStore.
"""

from datetime import datetime
from typing import List, Optional
from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from bullion.core.exceptions import ConflictError, NotFoundError
from .models import CashBalance, Party
from .schemas import CreatePartyDto, FilterPartiesDto


class PartiesService:

    @staticmethod
    async def create(
        db: AsyncSession, create_dto: CreatePartyDto, user_id: Optional[int] = None
    ) -> Party:
        """
        Create a party with its initial cash slots.

        Raises:
            ConflictError: account_code already used
        """
        codes = []
        for code in create_dto.currencies:
            code = code.upper()
            if code not in codes:
                codes.append(code)

        default_code = (create_dto.default_currency or "").upper() or (
            codes[0] if codes else None
        )
        if default_code and default_code not in codes:
            codes.append(default_code)

        party = Party(
            name=create_dto.name,
            account_code=create_dto.account_code,
            created_by=user_id,
            cash_balances=[
                CashBalance(currency_code=code, is_default=code == default_code)
                for code in codes
            ],
        )

        try:
            async with db.begin_nested():
                db.add(party)
                await db.flush()
        except IntegrityError:
            raise ConflictError(
                f"Account code {create_dto.account_code} is already in use"
            )

        await db.refresh(party)
        return party

    @staticmethod
    async def find_all(
        db: AsyncSession,
        filters: Optional[FilterPartiesDto] = None,
    ) -> List[Party]:
        query = select(Party).where(Party.deleted_at.is_(None)).order_by(Party.name)

        if filters and filters.search:
            query = query.where(
                Party.name.ilike(f"%{filters.search}%")
                | Party.account_code.ilike(f"%{filters.search}%")
            )

        result = await db.execute(query)
        return list(result.scalars().all())

    @staticmethod
    async def find_one(db: AsyncSession, party_id: int) -> Party:
        """
        Find a single party by id where deleted_at is null.

        Raises:
            NotFoundError: If party not found or is soft-deleted
        """
        result = await db.execute(
            select(Party).where(Party.id == party_id, Party.deleted_at.is_(None))
        )
        party = result.scalar_one_or_none()

        if not party:
            raise NotFoundError("Party", party_id)

        return party

    @staticmethod
    async def remove(db: AsyncSession, party_id: int) -> None:
        """Soft delete; ledger rows keep pointing at the party."""
        party = await PartiesService.find_one(db, party_id)
        party.deleted_at = datetime.utcnow()
        await db.flush()
