"""Shared fixtures: an in-memory rate snapshot, a throwaway SQLite file and an API client"""
from decimal import Decimal

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine

from app import models  # noqa: F401
from app.core.deps import get_rate_catalog
from app.database import Base, get_db
from app.main import app
from app.services.conversion_engine import ConversionEngine, PairDirection
from app.services.rate_catalog import InMemoryRateCatalog, RateInvariant, RateRecord, SqlRateCatalog

PAIRS = {
    ("BRL", "BOB"): PairDirection.FORWARD,
    ("BOB", "BRL"): PairDirection.REVERSE,
}


def make_records() -> list[RateRecord]:
    return [
        RateRecord(
            code="USDT",
            rate_type="base",
            buy_rate=Decimal("1"),
            sell_rate=Decimal("1"),
            platform_fee=Decimal("0.01"),
        ),
        RateRecord(
            code="BRL",
            rate_type="fiat",
            buy_rate=Decimal("5.00"),
            sell_rate=Decimal("4.80"),
            bank_fee=Decimal("0.01"),
            spread=Decimal("0.02"),
        ),
        RateRecord(
            code="BOB",
            rate_type="fiat",
            buy_rate=Decimal("0.70"),
            sell_rate=Decimal("0.68"),
            bank_fee=Decimal("0.005"),
            spread=Decimal("0.05"),
        ),
    ]


@pytest.fixture
def catalog() -> InMemoryRateCatalog:
    return InMemoryRateCatalog(make_records(), bridge_currency="USDT")


@pytest.fixture
def engine(catalog) -> ConversionEngine:
    return ConversionEngine(catalog, supported_pairs=PAIRS, invariant=RateInvariant.BUY_ABOVE_SELL)


@pytest_asyncio.fixture
async def session_maker(tmp_path):
    # File-backed so concurrent catalog lookups get their own connections
    db_engine = create_async_engine(f"sqlite+aiosqlite:///{tmp_path / 'cambio_test.db'}")
    async with db_engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield async_sessionmaker(db_engine, class_=AsyncSession, expire_on_commit=False)
    await db_engine.dispose()


@pytest_asyncio.fixture
async def db(session_maker):
    async with session_maker() as session:
        yield session


@pytest_asyncio.fixture
async def client(session_maker):
    async def _get_db():
        async with session_maker() as session:
            yield session

    app.dependency_overrides[get_db] = _get_db
    app.dependency_overrides[get_rate_catalog] = lambda: SqlRateCatalog(session_maker, bridge_currency="USDT")
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as ac:
        yield ac
    app.dependency_overrides.clear()
