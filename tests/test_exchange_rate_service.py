"""Catalog management and the SQL-backed rate catalog"""
from decimal import Decimal

import pytest

from app.core.errors import (
    BaseCurrencyProtected,
    CurrencyAlreadyExists,
    CurrencyNotFound,
    InvalidRateConfiguration,
    InvalidRateUpdate,
)
from app.schemas.exchange_rate import ExchangeRateCreate, ExchangeRateUpdate
from app.services import exchange_rate_service
from app.services.conversion_engine import ConversionEngine
from app.services.rate_catalog import RateInvariant, SqlRateCatalog

from tests.conftest import PAIRS


def usdt() -> ExchangeRateCreate:
    return ExchangeRateCreate(
        currency_code="USDT",
        currency_name="Tether",
        rate_type="base",
        buy_rate=Decimal("3"),
        sell_rate=Decimal("2"),
        platform_fee=Decimal("0.01"),
    )


def brl(**overrides) -> ExchangeRateCreate:
    data = dict(
        currency_code="brl",
        currency_name="Real brasileiro",
        buy_rate=Decimal("5.00"),
        sell_rate=Decimal("4.80"),
        bank_fee=Decimal("0.01"),
        spread=Decimal("0.02"),
    )
    data.update(overrides)
    return ExchangeRateCreate(**data)


def bob() -> ExchangeRateCreate:
    return ExchangeRateCreate(
        currency_code="BOB",
        currency_name="Boliviano",
        buy_rate=Decimal("0.70"),
        sell_rate=Decimal("0.68"),
        bank_fee=Decimal("0.005"),
        spread=Decimal("0.05"),
    )


async def seed(db) -> None:
    for currency in (usdt(), brl(), bob()):
        await exchange_rate_service.add_currency(db, currency)


@pytest.mark.asyncio
async def test_add_currency_normalizes_code(db) -> None:
    rate = await exchange_rate_service.add_currency(db, brl())
    assert rate.currency_code == "BRL"
    assert rate.rate_type == "fiat"
    assert rate.deleted_at is None
    assert rate.last_updated is not None


@pytest.mark.asyncio
async def test_base_currency_is_pinned_to_parity(db) -> None:
    rate = await exchange_rate_service.add_currency(db, usdt())
    assert rate.buy_rate == Decimal("1")
    assert rate.sell_rate == Decimal("1")
    assert rate.base_rate == Decimal("1")
    assert rate.adjustment_formula == "base"

    base = await exchange_rate_service.get_base_currency(db)
    assert base is not None
    assert base.currency_code == "USDT"


@pytest.mark.asyncio
async def test_only_one_base_currency(db) -> None:
    await exchange_rate_service.add_currency(db, usdt())
    second = usdt().model_copy(update={"currency_code": "USDC", "currency_name": "USD Coin"})
    with pytest.raises(InvalidRateUpdate):
        await exchange_rate_service.add_currency(db, second)


@pytest.mark.asyncio
async def test_duplicate_code_is_rejected(db) -> None:
    await exchange_rate_service.add_currency(db, brl())
    with pytest.raises(CurrencyAlreadyExists):
        await exchange_rate_service.add_currency(db, brl())


@pytest.mark.asyncio
async def test_add_currency_checks_invariant(db) -> None:
    with pytest.raises(InvalidRateConfiguration):
        await exchange_rate_service.add_currency(db, brl(buy_rate=Decimal("4.00")))

    rate = await exchange_rate_service.add_currency(
        db, brl(buy_rate=Decimal("4.00")), invariant=RateInvariant.SELL_ABOVE_BUY
    )
    assert rate.buy_rate == Decimal("4.00")


def test_code_format_is_validated() -> None:
    with pytest.raises(ValueError):
        brl(currency_code="REAL1")
    with pytest.raises(ValueError):
        brl(currency_code="BR")


@pytest.mark.asyncio
async def test_get_rates_ordered_by_code(db) -> None:
    await seed(db)
    rates = await exchange_rate_service.get_rates(db)
    assert [r.currency_code for r in rates] == ["BOB", "BRL", "USDT"]


@pytest.mark.asyncio
async def test_get_rate_unknown_code(db) -> None:
    with pytest.raises(CurrencyNotFound):
        await exchange_rate_service.get_rate(db, "EUR")


@pytest.mark.asyncio
async def test_update_rate(db) -> None:
    await seed(db)
    before = await exchange_rate_service.get_rate(db, "BRL")
    stamp = before.last_updated

    rate = await exchange_rate_service.update_rate(
        db, "brl", ExchangeRateUpdate(buy_rate=Decimal("5.10"), sell_rate=Decimal("4.90"), spread=Decimal("0.03"))
    )
    assert rate.buy_rate == Decimal("5.10")
    assert rate.sell_rate == Decimal("4.90")
    assert rate.spread == Decimal("0.03")
    # fees not sent stay as they were
    assert rate.bank_fee == Decimal("0.01")
    assert rate.last_updated >= stamp


@pytest.mark.asyncio
async def test_update_rate_enforces_spread_cap(db) -> None:
    await seed(db)
    with pytest.raises(InvalidRateUpdate) as exc_info:
        await exchange_rate_service.update_rate(
            db, "BRL", ExchangeRateUpdate(buy_rate=Decimal("6.00"), sell_rate=Decimal("4.80"))
        )
    assert exc_info.value.context["spread_percent"] == Decimal("25.00")

    rate = await exchange_rate_service.update_rate(
        db,
        "BRL",
        ExchangeRateUpdate(buy_rate=Decimal("6.00"), sell_rate=Decimal("4.80")),
        max_spread_percent=30,
    )
    assert rate.buy_rate == Decimal("6.00")


@pytest.mark.asyncio
async def test_update_rate_enforces_invariant(db) -> None:
    await seed(db)
    with pytest.raises(InvalidRateConfiguration):
        await exchange_rate_service.update_rate(
            db, "BRL", ExchangeRateUpdate(buy_rate=Decimal("4.80"), sell_rate=Decimal("5.00"))
        )


@pytest.mark.asyncio
async def test_base_currency_cannot_be_repriced_or_removed(db) -> None:
    await seed(db)
    with pytest.raises(BaseCurrencyProtected):
        await exchange_rate_service.update_rate(
            db, "USDT", ExchangeRateUpdate(buy_rate=Decimal("1.01"), sell_rate=Decimal("1.00"))
        )
    with pytest.raises(BaseCurrencyProtected):
        await exchange_rate_service.remove_currency(db, "USDT")


@pytest.mark.asyncio
async def test_remove_currency_is_soft(db) -> None:
    await seed(db)
    result = await exchange_rate_service.remove_currency(db, "bob")
    assert result == {"success": True, "message": "Currency BOB deleted successfully"}

    with pytest.raises(CurrencyNotFound):
        await exchange_rate_service.get_rate(db, "BOB")
    assert [r.currency_code for r in await exchange_rate_service.get_rates(db)] == ["BRL", "USDT"]

    with pytest.raises(CurrencyNotFound):
        await exchange_rate_service.remove_currency(db, "BOB")


@pytest.mark.asyncio
async def test_removed_currency_can_be_added_again(db) -> None:
    await seed(db)
    await exchange_rate_service.remove_currency(db, "BOB")
    rate = await exchange_rate_service.add_currency(db, bob())
    assert rate.deleted_at is None
    assert (await exchange_rate_service.get_rate(db, "BOB")).id == rate.id


def test_derived_fields() -> None:
    assert exchange_rate_service.mid_rate(Decimal("5.00"), Decimal("4.80")) == Decimal("4.90")
    assert exchange_rate_service.spread_percent(Decimal("5.00"), Decimal("4.80")) == Decimal("4.17")
    assert exchange_rate_service.spread_percent(Decimal("4.80"), Decimal("5.00")) == Decimal("4.17")
    assert exchange_rate_service.spread_percent(Decimal("1"), Decimal("1")) == Decimal("0.00")


@pytest.mark.asyncio
async def test_to_response(db) -> None:
    await seed(db)
    response = exchange_rate_service.to_response(await exchange_rate_service.get_rate(db, "BRL"))
    assert response.mid_rate == Decimal("4.90")
    assert response.spread_percent == Decimal("4.17")
    assert response.currency_name == "Real brasileiro"


@pytest.mark.asyncio
async def test_sql_catalog_reads_live_rows(db, session_maker) -> None:
    await seed(db)
    catalog = SqlRateCatalog(session_maker, bridge_currency="usdt")

    record = await catalog.get_rate("brl")
    assert record is not None
    assert record.code == "BRL"
    assert record.buy_rate == Decimal("5.00")
    assert record.bank_fee == Decimal("0.01")
    assert record.name == "Real brasileiro"

    bridge = await catalog.get_bridge_rate()
    assert bridge.is_base
    assert bridge.platform_fee == Decimal("0.01")

    await exchange_rate_service.remove_currency(db, "BRL")
    assert await catalog.get_rate("BRL") is None


@pytest.mark.asyncio
async def test_sql_catalog_without_bridge(session_maker) -> None:
    catalog = SqlRateCatalog(session_maker)
    with pytest.raises(CurrencyNotFound):
        await catalog.get_bridge_rate()


@pytest.mark.asyncio
async def test_engine_over_sql_catalog_matches_snapshot(db, session_maker) -> None:
    await seed(db)
    engine = ConversionEngine(SqlRateCatalog(session_maker), supported_pairs=PAIRS)

    result = await engine.convert("BRL", "BOB", 1000)
    assert result.steps.bank_fee == Decimal("10.00")
    assert result.final_amount == Decimal("273.85")
