"""Draft create / confirm / reject / revert / delete against balances, ledger and inventory"""

import logging
from decimal import Decimal

import pytest
from sqlalchemy import delete

from bullion.core.exceptions import NotFoundError, ValidationError
from bullion.modules.drafts.lifecycle import DraftLifecycle
from bullion.modules.drafts.models import Draft, DraftStatus
from bullion.modules.drafts.schemas import CreateDraftDto, FilterDraftsDto, UpdateDraftDto
from bullion.modules.drafts.service import DraftsService
from bullion.modules.inventory.models import Inventory
from bullion.modules.inventory_logs.models import InventoryLog
from bullion.modules.registry.models import RegistryEntry, RegistryType
from bullion.modules.stocks.schemas import CreateKaratDto, CreateStockDto
from bullion.modules.stocks.service import StocksService

USER_ID = 7


async def create_draft(session, party, stock, gross="10", purity="75", **extra):
    return await DraftsService.create(
        session,
        CreateDraftDto(
            party_id=party.id,
            stock_id=stock.id,
            gross_weight=Decimal(gross),
            purity=Decimal(purity),
            **extra,
        ),
        user_id=USER_ID,
    )


async def set_status(session, draft, status, **fields):
    return await DraftsService.update(
        session, draft.id, UpdateDraftDto(status=status, **fields), user_id=USER_ID
    )


async def snapshot(session, rows, party, stock):
    """Everything a draft can touch, in comparable form"""
    await session.refresh(party)
    inventory = await rows(Inventory, Inventory.stock_id == stock.id)
    return {
        "draft_balance": party.gold_draft_balance,
        "total_grams": party.gold_total_grams,
        "inventory": [(i.gross_weight, i.pure_weight) for i in inventory],
        "ledger": [e.transaction_id for e in await rows(RegistryEntry)],
        "logs": [log.id for log in await rows(InventoryLog)],
    }


class TestDraftCreate:

    @pytest.mark.asyncio
    async def test_percentage_purity_reserves_pure_weight(self, session, rows, party, stock):
        draft = await create_draft(session, party, stock, gross="10", purity="75")

        assert draft.status == DraftStatus.draft
        assert draft.purity == Decimal("0.75")
        assert draft.pure_weight == Decimal("7.5")
        assert draft.party_name == "Al Noor Jewellers"
        assert draft.stock_code == "GB-1KG"
        assert draft.created_by == USER_ID

        await session.refresh(party)
        assert party.gold_draft_balance == Decimal("7.5")
        assert party.gold_total_grams == Decimal("0")

        [entry] = await rows(RegistryEntry, RegistryEntry.draft_id == draft.id)
        assert entry.is_draft is True
        assert entry.type == RegistryType.GOLD_STOCK
        assert entry.debit == Decimal("7.5")
        assert entry.credit == Decimal("0")
        assert entry.previous_balance == Decimal("0")
        assert entry.running_balance == Decimal("7.5")
        assert entry.cost_center == "DRAFT"
        assert entry.transaction_id.startswith("TXN")

        [log] = await rows(InventoryLog, InventoryLog.draft_id == draft.id)
        assert log.is_draft is True
        assert log.action == "add"
        assert log.gross_weight == Decimal("10")

    @pytest.mark.asyncio
    async def test_fraction_and_percentage_inputs_store_the_same(self, session, party, stock):
        as_percent = await create_draft(session, party, stock, gross="8", purity="50")
        as_fraction = await create_draft(session, party, stock, gross="8", purity="0.5")

        assert as_percent.purity == as_fraction.purity == Decimal("0.5")
        assert as_percent.pure_weight == as_fraction.pure_weight == Decimal("4")

    @pytest.mark.asyncio
    async def test_certificate_fields_are_fallbacks(self, session, party, stock):
        draft = await DraftsService.create(
            session,
            CreateDraftDto(
                party_id=party.id,
                stock_id=stock.id,
                gross_weight=Decimal("10"),
                gold_au_percent=Decimal("91.6"),
                result_karat=Decimal("22"),
                certificate_number="CERT-5581",
            ),
            user_id=USER_ID,
        )

        assert draft.purity == Decimal("0.916")
        assert draft.pure_weight == Decimal("9.16")
        assert draft.karat == Decimal("22")
        assert draft.certificate_number == "CERT-5581"

    @pytest.mark.asyncio
    async def test_karat_defaults_to_stock_karat(self, session, party, stock):
        draft = await create_draft(session, party, stock)

        assert draft.karat == Decimal("22")

    @pytest.mark.asyncio
    async def test_incomplete_draft_has_no_side_effects(self, session, rows, party):
        draft = await DraftsService.create(
            session,
            CreateDraftDto(party_id=party.id, gross_weight=Decimal("10"), purity=Decimal("75")),
            user_id=USER_ID,
        )

        await session.refresh(party)
        assert draft.pure_weight == Decimal("7.5")
        assert party.gold_draft_balance == Decimal("0")
        assert await rows(RegistryEntry) == []
        assert await rows(InventoryLog) == []

    @pytest.mark.asyncio
    async def test_created_as_confirmed_has_no_reservation(self, session, rows, party, stock):
        await create_draft(session, party, stock, status=DraftStatus.confirmed)

        await session.refresh(party)
        assert party.gold_draft_balance == Decimal("0")
        assert await rows(RegistryEntry) == []

    @pytest.mark.asyncio
    async def test_unknown_stock_writes_nothing(self, session, rows, party):
        with pytest.raises(NotFoundError):
            await DraftsService.create(
                session,
                CreateDraftDto(party_id=party.id, stock_id=999, gross_weight=Decimal("10")),
                user_id=USER_ID,
            )

        await session.refresh(party)
        assert party.gold_draft_balance == Decimal("0")
        assert await rows(Draft) == []


class TestDraftConfirm:

    @pytest.mark.asyncio
    async def test_confirm_moves_reservation_to_total(self, session, rows, party, stock):
        draft = await create_draft(session, party, stock)

        confirmed = await set_status(session, draft, DraftStatus.confirmed)

        assert confirmed.status == DraftStatus.confirmed
        await session.refresh(party)
        assert party.gold_draft_balance == Decimal("0")
        assert party.gold_total_grams == Decimal("7.5")

        [inventory] = await rows(Inventory, Inventory.stock_id == stock.id)
        assert inventory.pure_weight == Decimal("7.5")
        assert inventory.gross_weight == Decimal("10")
        assert inventory.purity == Decimal("0.75")

        [entry] = await rows(RegistryEntry, RegistryEntry.draft_id == draft.id)
        assert entry.is_draft is False
        assert entry.cost_center == "BULLION"
        [log] = await rows(InventoryLog, InventoryLog.draft_id == draft.id)
        assert log.is_draft is False

    @pytest.mark.asyncio
    async def test_aggregate_purity_is_set_once(self, session, rows, party, stock):
        first = await create_draft(session, party, stock, gross="10", purity="75")
        second = await create_draft(session, party, stock, gross="10", purity="99.9")

        await set_status(session, first, DraftStatus.confirmed)
        await set_status(session, second, DraftStatus.confirmed)

        [inventory] = await rows(Inventory, Inventory.stock_id == stock.id)
        assert inventory.purity == Decimal("0.75")
        assert inventory.gross_weight == Decimal("20")
        assert inventory.pure_weight == Decimal("17.49")

    @pytest.mark.asyncio
    async def test_confirm_without_party_is_rejected(self, session, rows, stock):
        draft = await DraftsService.create(
            session,
            CreateDraftDto(stock_id=stock.id, gross_weight=Decimal("10"), purity=Decimal("75")),
            user_id=USER_ID,
        )
        draft_id = draft.id

        with pytest.raises(ValidationError):
            await set_status(session, draft, DraftStatus.confirmed)

        [reloaded] = await rows(Draft, Draft.id == draft_id)
        assert reloaded.status == DraftStatus.draft

    @pytest.mark.asyncio
    async def test_confirm_without_weight_is_rejected(self, session, party, stock):
        draft = await create_draft(session, party, stock, gross="0")

        with pytest.raises(ValidationError):
            await set_status(session, draft, DraftStatus.confirmed)

    @pytest.mark.asyncio
    async def test_missing_provisional_rows_are_recreated_and_logged(
        self, session, rows, party, stock, caplog
    ):
        caplog.set_level(logging.WARNING)
        draft = await create_draft(session, party, stock)
        await session.execute(delete(RegistryEntry).where(RegistryEntry.draft_id == draft.id))
        await session.execute(delete(InventoryLog).where(InventoryLog.draft_id == draft.id))
        await session.commit()

        await set_status(session, draft, DraftStatus.confirmed)

        [entry] = await rows(RegistryEntry, RegistryEntry.draft_id == draft.id)
        assert entry.is_draft is False
        assert entry.credit == Decimal("7.5")
        assert entry.running_balance == Decimal("7.5")
        [log] = await rows(InventoryLog, InventoryLog.draft_id == draft.id)
        assert log.is_draft is False
        assert "Integrity" in caplog.text


class TestDraftReject:

    @pytest.mark.asyncio
    async def test_create_then_reject_leaves_no_trace(self, session, rows, party, stock):
        before = await snapshot(session, rows, party, stock)

        draft = await create_draft(session, party, stock)
        rejected = await set_status(
            session, draft, DraftStatus.rejected, rejection_reason="Assay mismatch"
        )

        assert rejected.status == DraftStatus.rejected
        assert rejected.rejection_reason == "Assay mismatch"
        assert await snapshot(session, rows, party, stock) == before

    @pytest.mark.asyncio
    async def test_rejecting_twice_releases_once(self, session, party, stock):
        draft = await create_draft(session, party, stock, gross="10", purity="75")
        await create_draft(session, party, stock, gross="10", purity="50")

        await DraftLifecycle.reject(session, draft, USER_ID)
        await DraftLifecycle.reject(session, draft, USER_ID)
        await session.commit()

        await session.refresh(party)
        assert party.gold_draft_balance == Decimal("5")

    @pytest.mark.asyncio
    async def test_undefined_transition_is_ignored(self, session, party, stock, caplog):
        caplog.set_level(logging.WARNING)
        draft = await create_draft(session, party, stock)
        await set_status(session, draft, DraftStatus.rejected)

        result = await set_status(session, draft, DraftStatus.confirmed)

        assert result.status == DraftStatus.rejected
        await session.refresh(party)
        assert party.gold_total_grams == Decimal("0")
        assert party.gold_draft_balance == Decimal("0")
        assert "Ignoring status change rejected -> confirmed" in caplog.text


class TestDraftRevert:

    @pytest.mark.asyncio
    async def test_revert_with_rounded_pure_weight(self, session, party, stock):
        # 12.345 x 0.9167 = 11.3166615, stored as 11.3167
        draft = await create_draft(session, party, stock, gross="12.345", purity="91.67")
        assert draft.pure_weight == Decimal("11.3167")
        await set_status(session, draft, DraftStatus.confirmed)

        reverted = await set_status(session, draft, DraftStatus.draft)

        assert reverted.status == DraftStatus.draft
        await session.refresh(party)
        assert party.gold_total_grams == Decimal("0")
        assert party.gold_draft_balance == Decimal("11.3167")

    @pytest.mark.asyncio
    async def test_revert_moves_total_back_to_reservation(self, session, rows, party, stock):
        draft = await create_draft(session, party, stock)
        await set_status(session, draft, DraftStatus.confirmed)

        reverted = await set_status(session, draft, DraftStatus.draft)

        assert reverted.status == DraftStatus.draft
        await session.refresh(party)
        assert party.gold_total_grams == Decimal("0")
        assert party.gold_draft_balance == Decimal("7.5")

        [inventory] = await rows(Inventory, Inventory.stock_id == stock.id)
        assert inventory.pure_weight == Decimal("0")
        assert inventory.gross_weight == Decimal("0")

        [entry] = await rows(RegistryEntry, RegistryEntry.draft_id == draft.id)
        assert entry.is_draft is True
        assert entry.cost_center == "DRAFT"

    @pytest.mark.asyncio
    async def test_revert_then_reject_clears_everything(self, session, rows, party, stock):
        draft = await create_draft(session, party, stock)
        await set_status(session, draft, DraftStatus.confirmed)
        await set_status(session, draft, DraftStatus.draft)

        await set_status(session, draft, DraftStatus.rejected)

        await session.refresh(party)
        assert party.gold_total_grams == Decimal("0")
        assert party.gold_draft_balance == Decimal("0")
        assert await rows(RegistryEntry, RegistryEntry.draft_id == draft.id) == []


class TestDraftDelete:

    @pytest.mark.asyncio
    async def test_deleting_confirmed_draft_reverses_it(self, session, rows, party, stock):
        draft = await create_draft(session, party, stock)
        await set_status(session, draft, DraftStatus.confirmed)

        await DraftsService.remove(session, draft.id, USER_ID)

        await session.refresh(party)
        assert party.gold_total_grams == Decimal("0")
        [inventory] = await rows(Inventory, Inventory.stock_id == stock.id)
        assert inventory.pure_weight == Decimal("0")
        assert await rows(RegistryEntry, RegistryEntry.draft_id == draft.id) == []
        assert await rows(InventoryLog, InventoryLog.draft_id == draft.id) == []
        assert await rows(Draft) == []

    @pytest.mark.asyncio
    async def test_confirm_then_delete_restores_prior_state(self, session, rows, party, stock):
        existing = await create_draft(session, party, stock, gross="4", purity="0.5")
        await set_status(session, existing, DraftStatus.confirmed)
        before = await snapshot(session, rows, party, stock)

        draft = await create_draft(session, party, stock)
        await set_status(session, draft, DraftStatus.confirmed)
        await DraftsService.remove(session, draft.id, USER_ID)

        assert await snapshot(session, rows, party, stock) == before

    @pytest.mark.asyncio
    async def test_deleting_pending_draft_releases_reservation(self, session, rows, party, stock):
        draft = await create_draft(session, party, stock)

        await DraftsService.remove(session, draft.id, USER_ID)

        await session.refresh(party)
        assert party.gold_draft_balance == Decimal("0")
        assert await rows(RegistryEntry) == []

    @pytest.mark.asyncio
    async def test_deleting_unknown_draft(self, session):
        with pytest.raises(NotFoundError):
            await DraftsService.remove(session, 404, USER_ID)


class TestDraftUpdate:

    @pytest.mark.asyncio
    async def test_remarks_on_confirmed_draft(self, session, party, stock):
        draft = await create_draft(session, party, stock, gross="12.345", purity="91.67")
        await set_status(session, draft, DraftStatus.confirmed)

        updated = await DraftsService.update(
            session, draft.id, UpdateDraftDto(remarks="checked"), user_id=USER_ID
        )

        assert updated.remarks == "checked"
        assert updated.status == DraftStatus.confirmed
        assert updated.pure_weight == Decimal("11.3167")

    @pytest.mark.asyncio
    async def test_metadata_update_keeps_pending_entry(self, session, rows, party, stock):
        draft = await create_draft(session, party, stock, gross="12.345", purity="91.67")
        [entry] = await rows(RegistryEntry, RegistryEntry.draft_id == draft.id)
        before = (entry.transaction_id, entry.debit, entry.previous_balance, entry.running_balance)
        [log] = await rows(InventoryLog, InventoryLog.draft_id == draft.id)
        log_id = log.id

        await DraftsService.update(
            session, draft.id, UpdateDraftDto(laboratory_name="Emirates Assay"), user_id=USER_ID
        )

        [entry] = await rows(RegistryEntry, RegistryEntry.draft_id == draft.id)
        assert (
            entry.transaction_id, entry.debit, entry.previous_balance, entry.running_balance
        ) == before
        [log] = await rows(InventoryLog, InventoryLog.draft_id == draft.id)
        assert log.id == log_id

    @pytest.mark.asyncio
    async def test_confirm_flips_the_original_entry(self, session, rows, party, stock):
        draft = await create_draft(session, party, stock, gross="12.345", purity="91.67")
        [entry] = await rows(RegistryEntry, RegistryEntry.draft_id == draft.id)
        transaction_id = entry.transaction_id

        await set_status(session, draft, DraftStatus.confirmed)

        [entry] = await rows(RegistryEntry, RegistryEntry.draft_id == draft.id)
        assert entry.transaction_id == transaction_id
        assert entry.is_draft is False
        await session.refresh(party)
        assert party.gold_total_grams == Decimal("11.3167")

    @pytest.mark.asyncio
    async def test_stock_change_keeps_explicit_karat(self, session, party, stock):
        karat = await StocksService.create_karat(
            session, CreateKaratDto(karat_code="18K", standard_purity=Decimal("75"))
        )
        ring_stock = await StocksService.create(
            session, CreateStockDto(code="RING-18", karat_id=karat.id, cost_center="JEWELLERY")
        )
        await session.commit()
        draft = await create_draft(session, party, stock, karat=Decimal("24"))

        updated = await DraftsService.update(
            session, draft.id, UpdateDraftDto(stock_id=ring_stock.id), user_id=USER_ID
        )

        assert updated.stock_code == "RING-18"
        assert updated.karat == Decimal("24")

    @pytest.mark.asyncio
    async def test_stock_change_fills_missing_karat(self, session, party):
        karat = await StocksService.create_karat(
            session, CreateKaratDto(karat_code="18K", standard_purity=Decimal("75"))
        )
        ring_stock = await StocksService.create(
            session, CreateStockDto(code="RING-18", karat_id=karat.id, cost_center="JEWELLERY")
        )
        await session.commit()
        draft = await DraftsService.create(
            session,
            CreateDraftDto(party_id=party.id, gross_weight=Decimal("3"), purity=Decimal("75")),
            user_id=USER_ID,
        )
        assert draft.karat is None

        updated = await DraftsService.update(
            session, draft.id, UpdateDraftDto(stock_id=ring_stock.id), user_id=USER_ID
        )

        assert updated.karat == Decimal("18")

    @pytest.mark.asyncio
    async def test_weight_change_replaces_reservation(self, session, rows, party, stock):
        draft = await create_draft(session, party, stock, gross="10", purity="75")

        updated = await DraftsService.update(
            session, draft.id, UpdateDraftDto(gross_weight=Decimal("20")), user_id=USER_ID
        )

        assert updated.purity == Decimal("0.75")
        assert updated.pure_weight == Decimal("15")
        await session.refresh(party)
        assert party.gold_draft_balance == Decimal("15")
        [entry] = await rows(RegistryEntry, RegistryEntry.draft_id == draft.id)
        assert entry.debit == Decimal("15")
        assert len(await rows(InventoryLog, InventoryLog.draft_id == draft.id)) == 1

    @pytest.mark.asyncio
    async def test_party_change_moves_reservation(self, session, party, other_party, stock):
        draft = await create_draft(session, party, stock)

        updated = await DraftsService.update(
            session, draft.id, UpdateDraftDto(party_id=other_party.id), user_id=USER_ID
        )

        assert updated.party_name == "Golden Refinery"
        await session.refresh(party)
        await session.refresh(other_party)
        assert party.gold_draft_balance == Decimal("0")
        assert other_party.gold_draft_balance == Decimal("7.5")

    @pytest.mark.asyncio
    async def test_metadata_update_keeps_reservation(self, session, rows, party, stock):
        draft = await create_draft(session, party, stock)
        [entry_before] = await rows(RegistryEntry, RegistryEntry.draft_id == draft.id)

        updated = await DraftsService.update(
            session, draft.id, UpdateDraftDto(remarks="Checked by assay desk"), user_id=USER_ID
        )

        assert updated.remarks == "Checked by assay desk"
        assert updated.updated_by == USER_ID
        [entry_after] = await rows(RegistryEntry, RegistryEntry.draft_id == draft.id)
        assert entry_after.transaction_id == entry_before.transaction_id

    @pytest.mark.asyncio
    async def test_fields_apply_before_confirm(self, session, party, stock):
        draft = await create_draft(session, party, stock, gross="10", purity="75")

        await set_status(session, draft, DraftStatus.confirmed, gross_weight=Decimal("20"))

        await session.refresh(party)
        assert party.gold_total_grams == Decimal("15")
        assert party.gold_draft_balance == Decimal("0")

    @pytest.mark.asyncio
    async def test_confirmed_weights_are_locked(self, session, party, stock):
        draft = await create_draft(session, party, stock)
        await set_status(session, draft, DraftStatus.confirmed)

        with pytest.raises(ValidationError):
            await DraftsService.update(
                session, draft.id, UpdateDraftDto(gross_weight=Decimal("11")), user_id=USER_ID
            )

    @pytest.mark.asyncio
    async def test_draft_balance_matches_pending_drafts(self, session, rows, party, stock):
        kept = await create_draft(session, party, stock, gross="10", purity="75")
        confirmed = await create_draft(session, party, stock, gross="5", purity="100")
        rejected = await create_draft(session, party, stock, gross="3", purity="50")
        changed = await create_draft(session, party, stock, gross="2", purity="0.5")

        await set_status(session, confirmed, DraftStatus.confirmed)
        await set_status(session, rejected, DraftStatus.rejected)
        await DraftsService.update(
            session, changed.id, UpdateDraftDto(purity=Decimal("100")), user_id=USER_ID
        )

        pending = await rows(Draft, Draft.status == DraftStatus.draft, Draft.party_id == party.id)
        await session.refresh(party)
        assert {d.id for d in pending} == {kept.id, changed.id}
        assert party.gold_draft_balance == sum(d.pure_weight for d in pending) == Decimal("9.5")
        assert party.gold_total_grams == Decimal("5")


class TestDraftListing:

    @pytest.mark.asyncio
    async def test_search_and_pagination(self, session, party, other_party, stock):
        for _ in range(3):
            await create_draft(session, party, stock)
        await create_draft(session, other_party, stock, item_code="RING-22")

        items, total = await DraftsService.find_all(
            session, FilterDraftsDto(search="Noor", page=1, page_size=2)
        )
        assert total == 3
        assert len(items) == 2

        items, total = await DraftsService.find_all(session, FilterDraftsDto(search="ring-22"))
        assert total == 1
        assert items[0].party_name == "Golden Refinery"

    @pytest.mark.asyncio
    async def test_newest_first(self, session, party, stock):
        first = await create_draft(session, party, stock)
        second = await create_draft(session, party, stock)

        items, _ = await DraftsService.find_all(session, FilterDraftsDto())

        assert [d.id for d in items] == [second.id, first.id]
