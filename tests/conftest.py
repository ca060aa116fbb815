"""
Shared fixtures: an in-memory SQLite database built with the production
engine factory, a session on it and a few master-data rows.
"""

from decimal import Decimal

import pytest
import pytest_asyncio
from sqlalchemy import select

from bullion.core.db.all_models import Base
from bullion.core.db.engine import create_engine_for, create_session_factory
from bullion.modules.parties.schemas import CreatePartyDto
from bullion.modules.parties.service import PartiesService
from bullion.modules.stocks.schemas import CreateKaratDto, CreateStockDto
from bullion.modules.stocks.service import StocksService

MEMORY_URL = "sqlite+aiosqlite:///:memory:"


@pytest_asyncio.fixture
async def engine():
    """Fresh in-memory database per test"""
    engine = create_engine_for(MEMORY_URL)
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    await engine.dispose()


@pytest_asyncio.fixture
async def session(engine):
    factory = create_session_factory(engine)
    async with factory() as session:
        yield session


@pytest_asyncio.fixture
async def party(session):
    party = await PartiesService.create(
        session, CreatePartyDto(name="Al Noor Jewellers", account_code="PTY001")
    )
    await session.commit()
    return party


@pytest_asyncio.fixture
async def other_party(session):
    party = await PartiesService.create(
        session,
        CreatePartyDto(name="Golden Refinery", account_code="PTY002", currencies=["AED", "USD"]),
    )
    await session.commit()
    return party


@pytest_asyncio.fixture
async def stock(session):
    karat = await StocksService.create_karat(
        session, CreateKaratDto(karat_code="22K", standard_purity=Decimal("91.6"))
    )
    stock = await StocksService.create(
        session,
        CreateStockDto(
            code="GB-1KG",
            description="Gold bar 1kg",
            karat_id=karat.id,
            cost_center="BULLION",
        ),
    )
    await session.commit()
    return stock


@pytest.fixture
def rows(session):
    """Fetch rows bypassing the identity map's cached attribute values"""

    async def _rows(model, *criteria):
        result = await session.execute(
            select(model)
            .where(*criteria)
            .order_by(model.id)
            .execution_options(populate_existing=True)
        )
        return list(result.scalars().all())

    return _rows
