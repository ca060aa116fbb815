"""Party-to-party transfers and opening balances"""

from decimal import Decimal

import pytest

from bullion.core.exceptions import NotFoundError, ValidationError
from bullion.modules.fund_transfers.models import AssetType, FundTransfer, TransferType
from bullion.modules.fund_transfers.schemas import (
    AccountTransferDto,
    FilterFundTransfersDto,
    OpeningBalanceDto,
)
from bullion.modules.fund_transfers.service import FundTransferService
from bullion.modules.parties.models import CashBalance
from bullion.modules.registry.models import RegistryEntry, RegistryType

USER_ID = 3


async def transfer(session, sender, receiver, value, asset=AssetType.GOLD):
    return await FundTransferService.account_to_account_transfer(
        session,
        AccountTransferDto(
            sender_id=sender.id, receiver_id=receiver.id, value=Decimal(value), asset_type=asset
        ),
        user_id=USER_ID,
    )


async def opening(session, party, value, asset=AssetType.GOLD):
    return await FundTransferService.opening_balance_transfer(
        session,
        OpeningBalanceDto(party_id=party.id, value=Decimal(value), asset_type=asset),
        user_id=USER_ID,
    )


class TestAccountTransfer:

    @pytest.mark.asyncio
    async def test_gold_transfer_posts_both_sides(self, session, rows, party, other_party):
        record = await transfer(session, party, other_party, "100")

        assert record.transaction_id.startswith("FTR")
        assert record.type == TransferType.FUND_TRANSFER
        assert record.is_reversed is False
        assert record.sending_party_id == party.id
        assert record.receiving_party_id == other_party.id
        assert record.value == Decimal("100")

        await session.refresh(party)
        await session.refresh(other_party)
        assert party.gold_total_grams == Decimal("-100")
        assert other_party.gold_total_grams == Decimal("100")

        entries = await rows(RegistryEntry, RegistryEntry.fund_transfer_id == record.id)
        by_party = {e.party_id: e for e in entries}
        assert len(entries) == 2

        source = by_party[party.id]
        assert source.type == RegistryType.PARTY_GOLD_BALANCE
        assert source.asset_type == "GOLD"
        assert source.debit == Decimal("100")
        assert source.previous_balance == Decimal("0")
        assert source.running_balance == Decimal("-100")

        target = by_party[other_party.id]
        assert target.credit == Decimal("100")
        assert target.previous_balance == Decimal("0")
        assert target.running_balance == Decimal("100")

    @pytest.mark.asyncio
    async def test_negative_value_reverses_direction(self, session, party, other_party):
        record = await transfer(session, party, other_party, "-40")

        assert record.is_reversed is True
        assert record.value == Decimal("40")
        assert record.sending_party_id == other_party.id
        assert record.receiving_party_id == party.id

        await session.refresh(party)
        await session.refresh(other_party)
        assert party.gold_total_grams == Decimal("40")
        assert other_party.gold_total_grams == Decimal("-40")

    @pytest.mark.asyncio
    async def test_cash_uses_default_slot(self, session, rows, party, other_party):
        record = await transfer(session, other_party, party, "250", asset=AssetType.CASH)

        [created] = await rows(CashBalance, CashBalance.party_id == party.id)
        assert created.currency_code == "AED"
        assert created.is_default is True
        assert created.amount == Decimal("250")

        slots = {s.currency_code: s for s in await rows(CashBalance, CashBalance.party_id == other_party.id)}
        assert slots["AED"].amount == Decimal("-250")
        assert slots["USD"].amount == Decimal("0")

        entries = await rows(RegistryEntry, RegistryEntry.fund_transfer_id == record.id)
        assert {e.type for e in entries} == {RegistryType.PARTY_CASH_BALANCE}
        assert {e.asset_type for e in entries} == {"AED"}

    @pytest.mark.asyncio
    async def test_running_balances_chain(self, session, rows, party, other_party):
        await transfer(session, party, other_party, "10")
        second = await transfer(session, party, other_party, "5")

        [source] = await rows(
            RegistryEntry,
            RegistryEntry.fund_transfer_id == second.id,
            RegistryEntry.party_id == party.id,
        )
        assert source.previous_balance == Decimal("-10")
        assert source.running_balance == Decimal("-15")

    @pytest.mark.asyncio
    async def test_same_party_rejected(self, session, party):
        with pytest.raises(ValidationError):
            await transfer(session, party, party, "10")

    @pytest.mark.asyncio
    async def test_zero_value_rejected(self, session, party, other_party):
        with pytest.raises(ValidationError):
            await transfer(session, party, other_party, "0")

    @pytest.mark.asyncio
    async def test_unknown_party(self, session, rows, party):
        with pytest.raises(NotFoundError):
            await FundTransferService.account_to_account_transfer(
                session,
                AccountTransferDto(
                    sender_id=party.id, receiver_id=999, value=Decimal("1"), asset_type=AssetType.GOLD
                ),
            )

        assert await rows(FundTransfer) == []


class TestOpeningBalance:

    @pytest.mark.asyncio
    async def test_first_opening_credits_party(self, session, rows, party):
        record = await opening(session, party, "500")

        assert record.type == TransferType.OPENING_BALANCE
        assert record.receiving_party_id == party.id
        assert record.receiving_credit == Decimal("500")

        await session.refresh(party)
        assert party.gold_total_grams == Decimal("500")

        [entry] = await rows(RegistryEntry, RegistryEntry.party_id == party.id)
        assert entry.type == RegistryType.OPENING_GOLD_BALANCE
        assert entry.transaction_type == "OPENING"
        assert entry.credit == Decimal("500")
        assert entry.running_balance == Decimal("500")

    @pytest.mark.asyncio
    async def test_repeat_replaces_previous_opening(self, session, rows, party, other_party):
        await transfer(session, other_party, party, "30")
        first = await opening(session, party, "500")

        second = await opening(session, party, "200")

        assert second.id == first.id
        assert second.value == Decimal("200")
        await session.refresh(party)
        assert party.gold_total_grams == Decimal("230")

        [entry] = await rows(
            RegistryEntry,
            RegistryEntry.party_id == party.id,
            RegistryEntry.type == RegistryType.OPENING_GOLD_BALANCE,
        )
        assert entry.credit == Decimal("200")
        assert entry.running_balance == Decimal("230")
        assert entry.previous_balance == Decimal("30")
        assert len(await rows(FundTransfer, FundTransfer.type == TransferType.OPENING_BALANCE)) == 1

    @pytest.mark.asyncio
    async def test_negative_opening_debits(self, session, rows, party):
        await opening(session, party, "100")
        record = await opening(session, party, "-60")

        assert record.sending_debit == Decimal("60")
        assert record.receiving_credit == Decimal("0")
        await session.refresh(party)
        assert party.gold_total_grams == Decimal("-60")

        [entry] = await rows(RegistryEntry, RegistryEntry.party_id == party.id)
        assert entry.debit == Decimal("60")
        assert entry.credit == Decimal("0")

    @pytest.mark.asyncio
    async def test_openings_are_per_party_and_asset(self, session, party, other_party):
        await opening(session, party, "100")
        await opening(session, party, "900", asset=AssetType.CASH)
        await opening(session, other_party, "50")

        transfers = await FundTransferService.find_all(
            session, FilterFundTransfersDto(type=TransferType.OPENING_BALANCE)
        )
        assert len(transfers) == 3

        await session.refresh(party)
        await session.refresh(other_party)
        assert party.gold_total_grams == Decimal("100")
        assert other_party.gold_total_grams == Decimal("50")

        mine = await FundTransferService.find_all(
            session, FilterFundTransfersDto(party_id=party.id, asset_type=AssetType.CASH)
        )
        assert [t.value for t in mine] == [Decimal("900")]

    @pytest.mark.asyncio
    async def test_zero_opening_rejected(self, session, party):
        with pytest.raises(ValidationError):
            await opening(session, party, "0")
