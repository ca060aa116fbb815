"""
FundTransferService - party-to-party transfers and opening balances.

Unlike the draft flow, transfers are not clamped: a party may end up with a
negative cash or gold balance.
"""

import logging
from datetime import datetime
from decimal import Decimal
from typing import List, Optional

from sqlalchemy import or_, select
from sqlalchemy.ext.asyncio import AsyncSession

from bullion.core.config import config
from bullion.core.db.engine import atomic
from bullion.core.exceptions import NotFoundError, ValidationError
from bullion.core.sequence import SequenceGenerator
from bullion.core.utils import ZERO, to_decimal
from bullion.modules.parties.balances import BalanceStore
from bullion.modules.registry.models import RegistryType
from bullion.modules.registry.service import RegistryService
from .models import AssetType, FundTransfer, TransferType
from .schemas import AccountTransferDto, FilterFundTransfersDto, OpeningBalanceDto

logger = logging.getLogger(__name__)

transfer_ids = SequenceGenerator(FundTransfer.transaction_id, config.transfer_id_prefix)

BALANCE_TYPES = {
    AssetType.CASH: RegistryType.PARTY_CASH_BALANCE,
    AssetType.GOLD: RegistryType.PARTY_GOLD_BALANCE,
}

OPENING_TYPES = {
    AssetType.CASH: RegistryType.OPENING_CASH_BALANCE,
    AssetType.GOLD: RegistryType.OPENING_GOLD_BALANCE,
}


class FundTransferService:

    @staticmethod
    async def account_to_account_transfer(
        db: AsyncSession, dto: AccountTransferDto, user_id: Optional[int] = None
    ) -> FundTransfer:
        """
        Move |value| of an asset from one party to another.

        Args:
            dto: sender, receiver, signed value and asset type; a negative
                value swaps the direction

        Returns:
            The transfer record

        Raises:
            ValidationError: zero value or same party on both sides
            NotFoundError: a party does not exist
        """
        value = to_decimal(dto.value) or ZERO
        if value == ZERO:
            raise ValidationError("Transfer value must be non-zero")
        if dto.sender_id == dto.receiver_id:
            raise ValidationError("Sender and receiver must be different parties")

        amount = abs(value)
        is_reversed = value < ZERO
        asset = dto.asset_type.value

        async with atomic(db):
            # STEP 1: Lock both parties, in id order
            first_id, second_id = sorted((dto.sender_id, dto.receiver_id))
            locked = {
                first_id: await BalanceStore.get_party_for_update(db, first_id),
                second_id: await BalanceStore.get_party_for_update(db, second_id),
            }
            source, target = locked[dto.sender_id], locked[dto.receiver_id]
            if is_reversed:
                source, target = target, source

            # STEP 2: Balances
            source_previous, source_running = BalanceStore.apply(source, asset, -amount)
            target_previous, target_running = BalanceStore.apply(target, asset, amount)

            # STEP 3: Transfer record
            description = f"{asset} TRANSFER FROM {source.name} TO {target.name}"
            transaction_date = dto.voucher_date or datetime.utcnow()
            transfer = await transfer_ids.insert_with_retry(
                db,
                lambda transaction_id: FundTransfer(
                    transaction_id=transaction_id,
                    type=TransferType.FUND_TRANSFER,
                    asset_type=dto.asset_type,
                    description=description,
                    value=amount,
                    is_reversed=is_reversed,
                    receiving_party_id=target.id,
                    receiving_credit=amount,
                    sending_party_id=source.id,
                    sending_debit=amount,
                    voucher_number=dto.voucher_number,
                    voucher_type=dto.voucher_type,
                    voucher_date=dto.voucher_date,
                    transaction_date=transaction_date,
                    created_by=user_id,
                ),
            )

            # STEP 4: Ledger, one line per side
            common = {
                "transaction_type": "TRANSFER",
                "type": BALANCE_TYPES[dto.asset_type],
                "description": description,
                "fund_transfer_id": transfer.id,
                "value": amount,
                "reference": dto.voucher_number or transfer.transaction_id,
                "transaction_date": transaction_date,
                "created_by": user_id,
            }
            await RegistryService.post(
                db,
                **common,
                party_id=source.id,
                asset_type=BalanceStore.asset_code(source, asset),
                debit=amount,
                credit=ZERO,
                previous_balance=source_previous,
                running_balance=source_running,
            )
            await RegistryService.post(
                db,
                **common,
                party_id=target.id,
                asset_type=BalanceStore.asset_code(target, asset),
                credit=amount,
                debit=ZERO,
                previous_balance=target_previous,
                running_balance=target_running,
            )

            await db.flush()
            await db.refresh(transfer)

        logger.info(
            "%s: %s %s from party %s to party %s",
            transfer.transaction_id,
            amount,
            asset,
            source.id,
            target.id,
        )
        return transfer

    @staticmethod
    async def opening_balance_transfer(
        db: AsyncSession, dto: OpeningBalanceDto, user_id: Optional[int] = None
    ) -> FundTransfer:
        """
        Set a party's opening balance for one asset.

        The first call posts an opening entry; later calls revert that entry's
        effect, apply the new value and rewrite the entry and its transfer
        record in place.

        Raises:
            ValidationError: zero value
            NotFoundError: party does not exist
        """
        value = to_decimal(dto.value) or ZERO
        if value == ZERO:
            raise ValidationError("Opening balance value must be non-zero")

        amount = abs(value)
        is_credit = value > ZERO
        credit = amount if is_credit else ZERO
        debit = ZERO if is_credit else amount
        asset = dto.asset_type.value
        registry_type = OPENING_TYPES[dto.asset_type]

        async with atomic(db):
            party = await BalanceStore.get_party_for_update(db, dto.party_id)
            existing = await RegistryService.find_opening_entry(db, party.id, registry_type)

            if existing is not None:
                # STEP 1a: Replace the previous opening
                old_value = (to_decimal(existing.credit) or ZERO) - (
                    to_decimal(existing.debit) or ZERO
                )
                _, running = BalanceStore.apply(party, asset, value - old_value)

                existing.value = amount
                existing.credit = credit
                existing.debit = debit
                existing.running_balance = running
                existing.previous_balance = running - value
                existing.updated_by = user_id

                transfer = await FundTransferService._find_linked(db, existing.fund_transfer_id)
                transfer.value = amount
                transfer.receiving_credit = credit
                transfer.sending_debit = debit
                if dto.voucher_number is not None:
                    transfer.voucher_number = dto.voucher_number
                if dto.voucher_type is not None:
                    transfer.voucher_type = dto.voucher_type
                if dto.voucher_date is not None:
                    transfer.voucher_date = dto.voucher_date
                transfer.updated_by = user_id

                logger.info(
                    "Replaced %s opening of party %s: %s -> %s", asset, party.id, old_value, value
                )
            else:
                # STEP 1b: First opening
                previous, running = BalanceStore.apply(party, asset, value)
                description = f"OPENING {asset} BALANCE FOR {party.name}"
                transaction_date = dto.voucher_date or datetime.utcnow()

                transfer = await transfer_ids.insert_with_retry(
                    db,
                    lambda transaction_id: FundTransfer(
                        transaction_id=transaction_id,
                        type=TransferType.OPENING_BALANCE,
                        asset_type=dto.asset_type,
                        description=description,
                        value=amount,
                        receiving_party_id=party.id,
                        receiving_credit=credit,
                        sending_debit=debit,
                        voucher_number=dto.voucher_number,
                        voucher_type=dto.voucher_type,
                        voucher_date=dto.voucher_date,
                        transaction_date=transaction_date,
                        created_by=user_id,
                    ),
                )

                await RegistryService.post(
                    db,
                    transaction_type="OPENING",
                    type=registry_type,
                    description=description,
                    party_id=party.id,
                    fund_transfer_id=transfer.id,
                    asset_type=BalanceStore.asset_code(party, asset),
                    value=amount,
                    credit=credit,
                    debit=debit,
                    previous_balance=previous,
                    running_balance=running,
                    reference=dto.voucher_number or transfer.transaction_id,
                    transaction_date=transaction_date,
                    created_by=user_id,
                )
                logger.info("Posted %s opening of %s for party %s", asset, value, party.id)

            await db.flush()
            await db.refresh(transfer)

        return transfer

    @staticmethod
    async def _find_linked(db: AsyncSession, transfer_id: Optional[int]) -> FundTransfer:
        result = await db.execute(
            select(FundTransfer).where(FundTransfer.id == transfer_id).with_for_update()
        )
        transfer = result.scalar_one_or_none()
        if transfer is None:
            raise NotFoundError("Fund transfer", transfer_id)
        return transfer

    @staticmethod
    async def find_all(
        db: AsyncSession, filters: Optional[FilterFundTransfersDto] = None
    ) -> List[FundTransfer]:
        """Transfer records, newest first"""
        query = select(FundTransfer).where(FundTransfer.deleted_at.is_(None))

        if filters:
            if filters.asset_type is not None:
                query = query.where(FundTransfer.asset_type == filters.asset_type)
            if filters.type is not None:
                query = query.where(FundTransfer.type == filters.type)
            if filters.party_id is not None:
                query = query.where(
                    or_(
                        FundTransfer.sending_party_id == filters.party_id,
                        FundTransfer.receiving_party_id == filters.party_id,
                    )
                )

        query = query.order_by(FundTransfer.transaction_date.desc(), FundTransfer.id.desc())
        result = await db.execute(query)
        return list(result.scalars().all())
