"""
DraftsService - create, list, update and delete drafts.
Every write runs as one unit of work; the ledger side effects live in lifecycle.py.
"""

import logging
from decimal import Decimal
from typing import List, Optional, Tuple

from sqlalchemy import or_, select
from sqlalchemy.ext.asyncio import AsyncSession

from bullion.core.config import config
from bullion.core.db.engine import atomic
from bullion.core.exceptions import ConflictError, NotFoundError, ValidationError
from bullion.core.pagination import paginate_query
from bullion.core.sequence import SequenceGenerator
from bullion.core.utils import compute_pure_weight, is_positive, normalize_purity, to_decimal
from bullion.modules.parties.service import PartiesService
from bullion.modules.stocks.models import MetalStock
from bullion.modules.stocks.service import StocksService
from .lifecycle import DELETE_CLEANUP, DraftLifecycle, apply_transition
from .models import Draft, DraftStatus
from .schemas import CreateDraftDto, FilterDraftsDto, UpdateDraftDto

logger = logging.getLogger(__name__)

draft_numbers = SequenceGenerator(Draft.draft_number, config.draft_number_prefix)

# Fields whose change alters what a draft contributes to balances
LEDGER_FIELDS = ("party_id", "stock_id", "gross_weight", "purity", "pure_weight")

WEIGHT_INPUTS = {"gross_weight", "purity", "gold_au_percent"}

SEARCH_COLUMNS = (
    Draft.draft_number,
    Draft.party_name,
    Draft.stock_code,
    Draft.certificate_number,
    Draft.item_code,
    Draft.voucher_code,
)


class DraftsService:

    @staticmethod
    def _purity(value, field: str) -> Optional[Decimal]:
        try:
            return normalize_purity(value)
        except ValueError as exc:
            raise ValidationError(f"{field}: {exc}")

    @staticmethod
    def _input_purity(purity, gold_au_percent) -> Optional[Decimal]:
        """purity first, certificate gold_au_percent as fallback, as a fraction"""
        if is_positive(purity):
            return DraftsService._purity(purity, "purity")
        if is_positive(gold_au_percent):
            return DraftsService._purity(gold_au_percent, "gold_au_percent")
        if purity is not None:
            return DraftsService._purity(purity, "purity")
        return None

    @staticmethod
    def _resolve_karat(karat, result_karat, stock: Optional[MetalStock]) -> Optional[Decimal]:
        """explicit karat -> certificate result_karat -> stock's karat code"""
        if is_positive(karat):
            return to_decimal(karat)
        if is_positive(result_karat):
            return to_decimal(result_karat)
        return StocksService.karat_number(stock)

    @staticmethod
    async def create(
        db: AsyncSession, create_dto: CreateDraftDto, user_id: Optional[int] = None
    ) -> Draft:
        """
        Create a draft and, when it is in `draft` status with a party, a stock
        and a positive pure weight, reserve it.

        Args:
            create_dto: draft fields; draft_number is generated when omitted
            user_id: actor stored in created_by

        Returns:
            Created draft

        Raises:
            NotFoundError: party or stock does not exist
            ValidationError: purity out of range
            ConflictError: draft number taken, or generation kept colliding
        """
        async with atomic(db):
            # STEP 1: References and computed values
            party = (
                await PartiesService.find_one(db, create_dto.party_id)
                if create_dto.party_id is not None
                else None
            )
            stock = (
                await StocksService.find_one(db, create_dto.stock_id)
                if create_dto.stock_id is not None
                else None
            )

            purity = DraftsService._input_purity(create_dto.purity, create_dto.gold_au_percent)
            karat = DraftsService._resolve_karat(
                create_dto.karat, create_dto.result_karat, stock
            )
            pure_weight = compute_pure_weight(create_dto.gross_weight, purity)

            if create_dto.draft_number:
                existing = await db.execute(
                    select(Draft.id).where(Draft.draft_number == create_dto.draft_number)
                )
                if existing.scalar_one_or_none() is not None:
                    raise ConflictError(f"Draft number {create_dto.draft_number} already exists")

            fields = create_dto.model_dump(
                exclude={"draft_number", "status", "gross_weight", "purity", "karat"}
            )

            # STEP 2: Insert with a unique draft number
            draft = await draft_numbers.insert_with_retry(
                db,
                lambda number: Draft(
                    draft_number=number,
                    status=create_dto.status,
                    gross_weight=create_dto.gross_weight,
                    purity=purity,
                    karat=karat,
                    pure_weight=pure_weight,
                    party_name=party.name if party else None,
                    stock_code=stock.code if stock else None,
                    created_by=user_id,
                    updated_by=user_id,
                    **fields,
                ),
                preset=create_dto.draft_number,
            )

            # STEP 3: Reservation
            if draft.status == DraftStatus.draft:
                await DraftLifecycle.post_provisional(db, draft, user_id)

            await db.flush()
            await db.refresh(draft)

        logger.info(
            "Created draft %s (%s), pure weight %s", draft.draft_number, draft.status.value, pure_weight
        )
        return draft

    @staticmethod
    async def find_all(db: AsyncSession, filters: FilterDraftsDto) -> Tuple[List[Draft], int]:
        """
        Drafts newest first, with optional search and filters.

        Returns:
            (page of drafts, total matching)
        """
        query = select(Draft)

        if filters.status is not None:
            query = query.where(Draft.status == filters.status)
        if filters.party_id is not None:
            query = query.where(Draft.party_id == filters.party_id)
        if filters.search and filters.search.strip():
            term = f"%{filters.search.strip()}%"
            query = query.where(or_(*[column.ilike(term) for column in SEARCH_COLUMNS]))

        query = query.order_by(Draft.created_at.desc(), Draft.id.desc())
        return await paginate_query(db, query, filters.page, filters.page_size)

    @staticmethod
    async def find_one(db: AsyncSession, draft_id: int) -> Draft:
        """
        Raises:
            NotFoundError: If draft not found
        """
        result = await db.execute(select(Draft).where(Draft.id == draft_id))
        draft = result.scalar_one_or_none()

        if not draft:
            raise NotFoundError("Draft", draft_id)

        return draft

    @staticmethod
    async def _get_for_update(db: AsyncSession, draft_id: int) -> Draft:
        result = await db.execute(
            select(Draft)
            .where(Draft.id == draft_id)
            .with_for_update()
            .execution_options(populate_existing=True)
        )
        draft = result.scalar_one_or_none()

        if not draft:
            raise NotFoundError("Draft", draft_id)

        return draft

    @staticmethod
    async def _resolve_update(db: AsyncSession, draft: Draft, data: dict) -> dict:
        """
        Compute the new reference and weight columns from the submitted fields.
        Anything not submitted falls back to the stored value; consumed keys are
        popped from data. pure_weight is only recomputed when gross weight or
        purity was submitted.
        """
        resolved = {}
        stock = None

        if "party_id" in data:
            party_id = data.pop("party_id")
            party = await PartiesService.find_one(db, party_id) if party_id is not None else None
            resolved["party_id"] = party_id
            resolved["party_name"] = party.name if party else None

        if "stock_id" in data:
            stock_id = data.pop("stock_id")
            stock = await StocksService.find_one(db, stock_id) if stock_id is not None else None
            resolved["stock_id"] = stock_id
            resolved["stock_code"] = stock.code if stock else None

        # The new stock's karat only fills a draft that has none
        karat = DraftsService._resolve_karat(
            data.pop("karat", None),
            data.get("result_karat"),
            stock if draft.karat is None else None,
        )
        if karat is not None:
            resolved["karat"] = karat

        if not WEIGHT_INPUTS & data.keys():
            return resolved

        gross = data.pop("gross_weight", None)
        if gross is None:
            gross = to_decimal(draft.gross_weight)

        purity = DraftsService._input_purity(data.pop("purity", None), data.get("gold_au_percent"))
        if purity is None:
            purity = to_decimal(draft.purity)

        resolved["gross_weight"] = gross
        resolved["purity"] = purity
        resolved["pure_weight"] = compute_pure_weight(gross, purity)
        return resolved

    @staticmethod
    async def update(
        db: AsyncSession, draft_id: int, update_dto: UpdateDraftDto, user_id: Optional[int] = None
    ) -> Draft:
        """
        Apply field updates, then run the status transition, in one unit of work.

        A draft that stays in `draft` status and changes weight, purity, party
        or stock has its reservation replaced. Those fields are locked while
        the draft is confirmed.

        Raises:
            NotFoundError: draft, party or stock does not exist
            ValidationError: locked fields changed, or confirm preconditions fail
        """
        async with atomic(db):
            draft = await DraftsService._get_for_update(db, draft_id)
            data = update_dto.model_dump(exclude_unset=True)
            requested_status = data.pop("status", None)

            # STEP 1: Work out what changes
            resolved = await DraftsService._resolve_update(db, draft, data)
            ledger_changed = any(
                resolved[key] != getattr(draft, key) for key in LEDGER_FIELDS if key in resolved
            )

            if ledger_changed and draft.status == DraftStatus.confirmed:
                raise ValidationError(
                    "Weight, purity, party and stock of a confirmed draft cannot change; "
                    "revert it to draft first"
                )
            resync = ledger_changed and draft.status == DraftStatus.draft

            # STEP 2: Field updates, re-reserving when the contribution moved
            if resync:
                await DraftLifecycle.reject(db, draft, user_id)

            for key, value in {**data, **resolved}.items():
                setattr(draft, key, value)
            draft.updated_by = user_id
            await db.flush()

            if resync:
                await DraftLifecycle.post_provisional(db, draft, user_id)

            # STEP 3: Status transition on the persisted values
            if requested_status is not None:
                await apply_transition(db, draft, requested_status, user_id)

            await db.flush()
            await db.refresh(draft)

        logger.info("Updated draft %s (%s)", draft.draft_number, draft.status.value)
        return draft

    @staticmethod
    async def remove(db: AsyncSession, draft_id: int, user_id: Optional[int] = None) -> None:
        """
        Hard delete a draft after undoing its effects: a reservation is
        released, a confirmed draft is fully reversed.

        Raises:
            NotFoundError: If draft not found
        """
        async with atomic(db):
            draft = await DraftsService._get_for_update(db, draft_id)
            draft_number = draft.draft_number

            await DELETE_CLEANUP[draft.status](db, draft, user_id)

            await db.delete(draft)
            await db.flush()

        logger.info("Deleted draft %s", draft_number)
