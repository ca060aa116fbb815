"""
Draft lifecycle - the side effects behind every draft status change.

Each handler runs inside the caller's unit of work, reads the draft's stored
values and undoes exactly what the opposite handler did:

    draft     -> confirmed : confirm
    draft     -> rejected  : reject
    confirmed -> draft     : revert
    delete (confirmed)     : reverse

Any other status pair is ignored. Handlers are gated on the ledger rows the
draft actually owns, so running one twice never moves a balance twice.
"""

import logging
from datetime import datetime
from decimal import Decimal
from typing import Awaitable, Callable, Dict, Optional, Tuple

from sqlalchemy.ext.asyncio import AsyncSession

from bullion.core.config import config
from bullion.core.exceptions import ValidationError
from bullion.core.utils import HUNDRED, ONE, ZERO, compute_pure_weight, to_decimal
from bullion.modules.inventory.service import InventoryService
from bullion.modules.inventory_logs.service import InventoryLogService
from bullion.modules.parties.balances import GOLD, BalanceStore
from bullion.modules.parties.models import Party
from bullion.modules.registry.models import RegistryType
from bullion.modules.registry.service import RegistryService
from bullion.modules.stocks.models import MetalStock
from bullion.modules.stocks.service import StocksService
from .models import Draft, DraftStatus

logger = logging.getLogger(__name__)

DRAFT_TRANSACTION_TYPE = "DRAFT"

Handler = Callable[[AsyncSession, Draft, Optional[int]], Awaitable[None]]


def stored_pure_weight(draft: Draft) -> Decimal:
    """
    The draft's pure weight as last written.
    Recomputed from stored gross and purity only when missing or not positive.
    """
    pure = to_decimal(draft.pure_weight)
    if pure is not None and pure > ZERO:
        return pure

    purity = to_decimal(draft.purity)
    if purity is None:
        return ZERO
    if purity > ONE:
        purity = purity / HUNDRED
    return compute_pure_weight(draft.gross_weight, purity)


def stored_purity_fraction(draft: Draft) -> Optional[Decimal]:
    purity = to_decimal(draft.purity)
    if purity is not None and purity > ZERO:
        return purity / HUNDRED if purity > ONE else purity

    gross = to_decimal(draft.gross_weight) or ZERO
    if gross > ZERO:
        return stored_pure_weight(draft) / gross
    return None


def _ledger_fields(draft: Draft, party: Party, stock: MetalStock, pure: Decimal) -> dict:
    return {
        "transaction_type": DRAFT_TRANSACTION_TYPE,
        "type": RegistryType.GOLD_STOCK,
        "party_id": party.id,
        "stock_id": stock.id,
        "draft_id": draft.id,
        "asset_type": GOLD,
        "value": pure,
        "gross_weight": draft.gross_weight,
        "pure_weight": pure,
        "purity": stored_purity_fraction(draft),
        "reference": draft.voucher_code or draft.draft_number,
    }


def _log_fields(draft: Draft, stock: MetalStock) -> dict:
    return {
        "code": stock.code,
        "party_id": draft.party_id,
        "stock_id": stock.id,
        "draft_id": draft.id,
        "pcs": stock.pcs,
        "voucher_code": draft.voucher_code or draft.draft_number,
        "voucher_date": draft.voucher_date or datetime.utcnow(),
        "gross_weight": draft.gross_weight,
        "action": "add",
    }


class DraftLifecycle:

    @staticmethod
    async def post_provisional(
        db: AsyncSession, draft: Draft, user_id: Optional[int] = None
    ) -> bool:
        """
        Reserve a `draft`-status draft's pure weight.

        Needs a party, a stock and a positive pure weight; otherwise nothing
        is written.

        Effects:
            party.gold_draft_balance += pure_weight
            one provisional GOLD_STOCK ledger entry (debit, DRAFT cost center)
            one provisional inventory log (action "add")

        Returns:
            True when the reservation was posted
        """
        pure = to_decimal(draft.pure_weight) or ZERO
        if not draft.party_id or not draft.stock_id or pure <= ZERO:
            return False

        stock = await StocksService.find_one(db, draft.stock_id)
        party = await BalanceStore.get_party_for_update(db, draft.party_id)

        previous, running = BalanceStore.reserve_draft(party, pure)

        await RegistryService.post(
            db,
            **_ledger_fields(draft, party, stock, pure),
            description=f"Draft {draft.draft_number} - {party.name} - {stock.code}",
            credit=ZERO,
            debit=pure,
            previous_balance=previous,
            running_balance=running,
            cost_center=config.draft_cost_center,
            transaction_date=draft.voucher_date or datetime.utcnow(),
            is_draft=True,
            status="pending",
            created_by=user_id,
        )

        await InventoryLogService.create_log(
            db,
            **_log_fields(draft, stock),
            transaction_type="draft",
            voucher_type=draft.voucher_type or "Draft",
            note=f"Draft entry - {draft.draft_number}",
            is_draft=True,
            created_by=user_id,
        )

        logger.info(
            "Reserved %s g for draft %s (party %s)", pure, draft.draft_number, party.id
        )
        return True

    @staticmethod
    async def confirm(db: AsyncSession, draft: Draft, user_id: Optional[int] = None) -> None:
        """
        draft -> confirmed.

        Raises:
            ValidationError: missing party or stock, or no positive weight
        """
        # STEP 1: Preconditions, nothing written yet
        if not draft.party_id:
            raise ValidationError(f"Draft {draft.draft_number} has no party and cannot be confirmed")
        if not draft.stock_id:
            raise ValidationError(f"Draft {draft.draft_number} has no stock and cannot be confirmed")

        gross = to_decimal(draft.gross_weight) or ZERO
        if gross <= ZERO:
            raise ValidationError("Gross weight must be greater than 0 to confirm a draft")

        pure = stored_pure_weight(draft)
        if pure <= ZERO:
            raise ValidationError("Pure weight must be greater than 0 to confirm a draft")
        if pure != to_decimal(draft.pure_weight):
            draft.pure_weight = pure

        stock = await StocksService.find_one(db, draft.stock_id)
        party = await BalanceStore.get_party_for_update(db, draft.party_id)
        cost_center = stock.cost_center or config.default_stock_cost_center
        transaction_date = draft.voucher_date or datetime.utcnow()

        # STEP 2: Ledger
        flipped = await RegistryService.confirm_draft_entries(
            db, draft.id, cost_center, transaction_date, user_id
        )

        BalanceStore.release_draft(party, pure)
        previous, running = BalanceStore.add_gold(party, pure)

        if not flipped:
            logger.warning(
                "Integrity: draft %s had no provisional ledger entry at confirm, posting a confirmed one",
                draft.draft_number,
            )
            await RegistryService.post(
                db,
                **_ledger_fields(draft, party, stock, pure),
                description=f"Confirmed draft {draft.draft_number} - {party.name} - {stock.code}",
                credit=pure,
                debit=ZERO,
                previous_balance=previous,
                running_balance=running,
                cost_center=cost_center,
                transaction_date=transaction_date,
                is_draft=False,
                created_by=user_id,
            )

        # STEP 3: Inventory logs
        flipped_logs = await InventoryLogService.confirm_draft_logs(db, draft.id, user_id)
        if not flipped_logs:
            logger.warning(
                "Integrity: draft %s had no provisional inventory log at confirm, creating one",
                draft.draft_number,
            )
            await InventoryLogService.create_log(
                db,
                **_log_fields(draft, stock),
                transaction_type="confirmed",
                voucher_type=draft.voucher_type or "Confirmed Draft",
                note=f"Confirmed draft entry - {draft.draft_number}",
                is_draft=False,
                created_by=user_id,
            )

        # STEP 4: Aggregate
        await InventoryService.add_confirmed(
            db, stock, gross, pure, stored_purity_fraction(draft), user_id
        )

        logger.info(
            "Confirmed draft %s: %s g moved to party %s total", draft.draft_number, pure, party.id
        )

    @staticmethod
    async def reject(db: AsyncSession, draft: Draft, user_id: Optional[int] = None) -> None:
        """
        draft -> rejected, and the cleanup for deleting a draft that never
        got confirmed. Releases the reservation only if provisional rows existed.
        """
        removed = await RegistryService.delete_draft_entries(db, draft.id, provisional_only=True)
        await InventoryLogService.delete_draft_logs(db, draft.id, provisional_only=True)

        if not removed:
            logger.info("Draft %s holds no reservation, nothing to release", draft.draft_number)
            return

        if draft.party_id:
            pure = stored_pure_weight(draft)
            party = await BalanceStore.get_party_for_update(db, draft.party_id)
            BalanceStore.release_draft(party, pure)
            logger.info(
                "Released %s g reserved by draft %s (party %s)", pure, draft.draft_number, party.id
            )

    @staticmethod
    async def revert(db: AsyncSession, draft: Draft, user_id: Optional[int] = None) -> None:
        """
        confirmed -> draft. Confirmed rows turn provisional again and the pure
        weight moves from the party's total back to its draft balance.
        """
        flipped = await RegistryService.mark_draft_entries_provisional(db, draft.id, user_id)
        await InventoryLogService.mark_draft_logs_provisional(db, draft.id, user_id)

        if not flipped:
            # Confirmed without ever touching balances: start a fresh reservation
            logger.warning(
                "Draft %s has no confirmed ledger entry to revert, reserving it as a new draft",
                draft.draft_number,
            )
            await DraftLifecycle.post_provisional(db, draft, user_id)
            return

        pure = stored_pure_weight(draft)
        gross = to_decimal(draft.gross_weight) or ZERO

        if draft.party_id:
            party = await BalanceStore.get_party_for_update(db, draft.party_id)
            BalanceStore.remove_gold(party, pure)
            BalanceStore.reserve_draft(party, pure)

        if draft.stock_id:
            await InventoryService.remove_confirmed(db, draft.stock_id, gross, pure, user_id)

        logger.info("Reverted draft %s to draft status", draft.draft_number)

    @staticmethod
    async def reverse(db: AsyncSession, draft: Draft, user_id: Optional[int] = None) -> None:
        """
        Cleanup for deleting a confirmed draft: every row it owns goes and its
        pure weight leaves the party total and the stock aggregate.
        """
        removed = await RegistryService.delete_draft_entries(db, draft.id, provisional_only=False)
        await InventoryLogService.delete_draft_logs(db, draft.id, provisional_only=False)

        if not removed:
            logger.info("Draft %s has no ledger entries, nothing to reverse", draft.draft_number)
            return

        pure = stored_pure_weight(draft)
        gross = to_decimal(draft.gross_weight) or ZERO

        if draft.party_id:
            party = await BalanceStore.get_party_for_update(db, draft.party_id)
            BalanceStore.remove_gold(party, pure)

        if draft.stock_id:
            await InventoryService.remove_confirmed(db, draft.stock_id, gross, pure, user_id)

        logger.info("Reversed confirmed draft %s", draft.draft_number)


TRANSITIONS: Dict[Tuple[DraftStatus, DraftStatus], Handler] = {
    (DraftStatus.draft, DraftStatus.confirmed): DraftLifecycle.confirm,
    (DraftStatus.draft, DraftStatus.rejected): DraftLifecycle.reject,
    (DraftStatus.confirmed, DraftStatus.draft): DraftLifecycle.revert,
}

DELETE_CLEANUP: Dict[DraftStatus, Handler] = {
    DraftStatus.draft: DraftLifecycle.reject,
    DraftStatus.rejected: DraftLifecycle.reject,
    DraftStatus.confirmed: DraftLifecycle.reverse,
}


async def apply_transition(
    db: AsyncSession,
    draft: Draft,
    new_status: DraftStatus,
    user_id: Optional[int] = None,
) -> bool:
    """
    Run the handler for (current status, new_status) and set the new status.

    Returns:
        False when the status is unchanged or the pair is not a transition
    """
    old_status = draft.status
    if new_status == old_status:
        return False

    handler = TRANSITIONS.get((old_status, new_status))
    if handler is None:
        logger.warning(
            "Ignoring status change %s -> %s for draft %s",
            old_status.value,
            new_status.value,
            draft.draft_number,
        )
        return False

    await handler(db, draft, user_id)
    draft.status = new_status
    return True
