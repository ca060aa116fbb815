"""Draft numbers and ledger ids stay unique under contention"""

import asyncio
import logging
from decimal import Decimal
from unittest.mock import AsyncMock

import pytest
from sqlalchemy import func, select

from bullion.core.db.all_models import Base
from bullion.core.db.engine import create_engine_for, create_session_factory
from bullion.core.exceptions import ConflictError
from bullion.modules.drafts.models import Draft
from bullion.modules.drafts.schemas import CreateDraftDto
from bullion.modules.drafts.service import DraftsService, draft_numbers


@pytest.fixture
def stale_scan(monkeypatch):
    """Every caller sees an empty table, as if all raced on the same snapshot"""
    monkeypatch.setattr(draft_numbers, "_scan_max", AsyncMock(return_value=0))
    monkeypatch.setattr(draft_numbers, "_exists", AsyncMock(return_value=False))


class TestDraftNumbers:

    @pytest.mark.asyncio
    async def test_numbers_are_sequential_and_padded(self, session):
        first = await DraftsService.create(session, CreateDraftDto(), user_id=1)
        second = await DraftsService.create(session, CreateDraftDto(), user_id=1)

        assert first.draft_number == "DRF001"
        assert second.draft_number == "DRF002"

    @pytest.mark.asyncio
    async def test_numbering_continues_past_999(self, session):
        await DraftsService.create(session, CreateDraftDto(draft_number="DRF999"), user_id=1)

        after = await DraftsService.create(session, CreateDraftDto(), user_id=1)
        next_after = await DraftsService.create(session, CreateDraftDto(), user_id=1)

        assert after.draft_number == "DRF1000"
        assert next_after.draft_number == "DRF1001"

    @pytest.mark.asyncio
    async def test_taken_explicit_number_is_a_conflict(self, session):
        await DraftsService.create(session, CreateDraftDto(draft_number="DRF010"), user_id=1)

        with pytest.raises(ConflictError):
            await DraftsService.create(session, CreateDraftDto(draft_number="DRF010"), user_id=1)


class TestCollisionRetry:
    """The unique constraint, not the scan, guarantees distinct numbers"""

    @pytest.mark.asyncio
    async def test_stale_scan_still_yields_distinct_numbers(self, session, stale_scan, caplog):
        caplog.set_level(logging.WARNING)

        drafts = [
            await DraftsService.create(session, CreateDraftDto(), user_id=1) for _ in range(5)
        ]

        numbers = [draft.draft_number for draft in drafts]
        assert len(set(numbers)) == 5
        assert sorted(numbers) == ["DRF001", "DRF002", "DRF003", "DRF004", "DRF005"]
        assert "collided on write" in caplog.text

    @pytest.mark.asyncio
    async def test_exhausted_retries_abort_the_whole_create(
        self, session, stale_scan, monkeypatch
    ):
        monkeypatch.setattr(draft_numbers, "max_retries", 2)

        await DraftsService.create(session, CreateDraftDto(), user_id=1)
        await DraftsService.create(session, CreateDraftDto(), user_id=1)

        with pytest.raises(ConflictError):
            await DraftsService.create(session, CreateDraftDto(), user_id=1)

        count = (await session.execute(select(func.count()).select_from(Draft))).scalar()
        assert count == 2


class TestConcurrentCallers:

    @pytest.mark.asyncio
    async def test_parallel_creates_get_distinct_numbers(self, tmp_path):
        engine = create_engine_for(f"sqlite+aiosqlite:///{tmp_path / 'sequence.db'}")
        async with engine.begin() as conn:
            await conn.run_sync(Base.metadata.create_all)
        factory = create_session_factory(engine)

        async def create_one() -> str:
            async with factory() as session:
                draft = await DraftsService.create(
                    session, CreateDraftDto(gross_weight=Decimal("1")), user_id=1
                )
                return draft.draft_number

        try:
            numbers = await asyncio.gather(*[create_one() for _ in range(8)])
        finally:
            await engine.dispose()

        assert len(set(numbers)) == 8
