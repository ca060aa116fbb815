"""
Balance Store - the only place that mutates party gold and cash balances.

Every mutator returns (previous, running) so callers can snapshot both on the
ledger entry they post. Rows must be loaded with get_party_for_update() inside
the caller's unit of work.
"""

import logging
from datetime import datetime
from decimal import Decimal
from typing import Tuple

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from bullion.core.config import config
from bullion.core.exceptions import NotFoundError
from bullion.core.utils import ZERO, clamped_subtract, to_decimal
from .models import CashBalance, Party

logger = logging.getLogger(__name__)

BalanceChange = Tuple[Decimal, Decimal]

CASH = "CASH"
GOLD = "GOLD"


class BalanceStore:

    @staticmethod
    async def get_party_for_update(db: AsyncSession, party_id: int) -> Party:
        """
        Load a party row locked for the rest of the unit of work.

        Raises:
            NotFoundError: If party not found or is soft-deleted
        """
        # populate_existing would overwrite unflushed balance changes
        await db.flush()

        result = await db.execute(
            select(Party)
            .where(Party.id == party_id, Party.deleted_at.is_(None))
            .with_for_update()
            .execution_options(populate_existing=True)
        )
        party = result.scalar_one_or_none()

        if not party:
            raise NotFoundError("Party", party_id)

        return party

    @staticmethod
    def reserve_draft(party: Party, pure_weight: Decimal) -> BalanceChange:
        previous = to_decimal(party.gold_draft_balance) or ZERO
        party.gold_draft_balance = previous + pure_weight
        party.gold_last_updated = datetime.utcnow()
        return previous, party.gold_draft_balance

    @staticmethod
    def release_draft(party: Party, pure_weight: Decimal) -> BalanceChange:
        previous = to_decimal(party.gold_draft_balance) or ZERO
        party.gold_draft_balance = clamped_subtract(
            previous, pure_weight, label=f"draft balance of party {party.id}"
        )
        party.gold_last_updated = datetime.utcnow()
        return previous, party.gold_draft_balance

    @staticmethod
    def add_gold(party: Party, pure_weight: Decimal) -> BalanceChange:
        previous = to_decimal(party.gold_total_grams) or ZERO
        party.gold_total_grams = previous + pure_weight
        party.gold_last_updated = datetime.utcnow()
        return previous, party.gold_total_grams

    @staticmethod
    def remove_gold(party: Party, pure_weight: Decimal) -> BalanceChange:
        previous = to_decimal(party.gold_total_grams) or ZERO
        party.gold_total_grams = clamped_subtract(
            previous, pure_weight, label=f"gold total of party {party.id}"
        )
        party.gold_last_updated = datetime.utcnow()
        return previous, party.gold_total_grams

    @staticmethod
    def default_cash_slot(party: Party) -> CashBalance:
        """
        The party's default cash slot, created on first use.
        An existing slot becomes the default when none is flagged.
        """
        for slot in party.cash_balances:
            if slot.is_default:
                return slot

        for slot in party.cash_balances:
            if slot.currency_code == config.default_currency_code:
                slot.is_default = True
                return slot

        slot = CashBalance(
            currency_code=config.default_currency_code,
            amount=ZERO,
            is_default=True,
        )
        party.cash_balances.append(slot)
        logger.info(
            "Created default %s cash slot for party %s",
            config.default_currency_code,
            party.id,
        )
        return slot

    @staticmethod
    def apply(party: Party, asset_type: str, delta: Decimal) -> BalanceChange:
        """
        Unclamped signed change used by transfers; balances may go negative.

        Args:
            asset_type: CASH (default cash slot) or GOLD (gold_total_grams)
        """
        if asset_type == CASH:
            slot = BalanceStore.default_cash_slot(party)
            previous = to_decimal(slot.amount) or ZERO
            slot.amount = previous + delta
            slot.last_updated = datetime.utcnow()
            return previous, slot.amount

        previous = to_decimal(party.gold_total_grams) or ZERO
        party.gold_total_grams = previous + delta
        party.gold_last_updated = datetime.utcnow()
        return previous, party.gold_total_grams

    @staticmethod
    def asset_code(party: Party, asset_type: str) -> str:
        """Ledger asset label: currency code of the default slot, or GOLD"""
        if asset_type == CASH:
            return BalanceStore.default_cash_slot(party).currency_code
        return GOLD
