"""Exchange rate service - catalog management over the exchange_rates table"""
import logging
from datetime import datetime, timezone
from decimal import ROUND_HALF_UP, Decimal

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from app.config import settings
from app.core.errors import (
    BaseCurrencyProtected,
    CurrencyAlreadyExists,
    CurrencyNotFound,
    InvalidRateUpdate,
)
from app.models.exchange_rate import ExchangeRate
from app.schemas.exchange_rate import ExchangeRateCreate, ExchangeRateResponse, ExchangeRateUpdate
from app.services.rate_catalog import RateInvariant

logger = logging.getLogger(__name__)

PARITY = Decimal("1")


def _invariant(invariant: RateInvariant | None) -> RateInvariant:
    return invariant or RateInvariant(settings.RATE_INVARIANT)


def mid_rate(buy_rate: Decimal, sell_rate: Decimal) -> Decimal:
    """Average of both sides, 2 dp"""
    mid = (Decimal(buy_rate) + Decimal(sell_rate)) / 2
    return mid.quantize(Decimal("0.01"), rounding=ROUND_HALF_UP)


def spread_percent(buy_rate: Decimal, sell_rate: Decimal) -> Decimal:
    """Gap between both sides as a percentage of the lower side, 2 dp"""
    buy_rate, sell_rate = Decimal(buy_rate), Decimal(sell_rate)
    low = min(buy_rate, sell_rate)
    if low <= 0:
        return Decimal("0.00")
    pct = abs(sell_rate - buy_rate) / low * 100
    return pct.quantize(Decimal("0.01"), rounding=ROUND_HALF_UP)


def to_response(rate: ExchangeRate) -> ExchangeRateResponse:
    """Build the API view of a stored rate with its derived fields"""
    return ExchangeRateResponse(
        id=rate.id,
        currency_code=rate.currency_code,
        currency_name=rate.currency_name,
        rate_type=rate.rate_type,
        base_rate=rate.base_rate,
        buy_rate=rate.buy_rate,
        sell_rate=rate.sell_rate,
        bank_fee=rate.bank_fee,
        platform_fee=rate.platform_fee,
        spread=rate.spread,
        adjustment_formula=rate.adjustment_formula,
        mid_rate=mid_rate(rate.buy_rate, rate.sell_rate),
        spread_percent=spread_percent(rate.buy_rate, rate.sell_rate),
        last_updated=rate.last_updated,
    )


async def _find(db: AsyncSession, currency_code: str, include_deleted: bool = False) -> ExchangeRate | None:
    query = select(ExchangeRate).where(ExchangeRate.currency_code == currency_code.upper())
    if not include_deleted:
        query = query.where(ExchangeRate.deleted_at.is_(None))
    result = await db.execute(query)
    return result.scalar_one_or_none()


async def get_rates(db: AsyncSession) -> list[ExchangeRate]:
    """Get all live rates ordered by code"""
    result = await db.execute(
        select(ExchangeRate)
        .where(ExchangeRate.deleted_at.is_(None))
        .order_by(ExchangeRate.currency_code)
    )
    return list(result.scalars().all())


async def get_rate(db: AsyncSession, currency_code: str) -> ExchangeRate:
    """Get one live rate, raising CurrencyNotFound when absent"""
    rate = await _find(db, currency_code)
    if rate is None:
        raise CurrencyNotFound(currency_code.upper())
    return rate


async def get_base_currency(db: AsyncSession) -> ExchangeRate | None:
    """Get the base-type currency, if one is configured"""
    result = await db.execute(
        select(ExchangeRate).where(
            ExchangeRate.rate_type == "base",
            ExchangeRate.deleted_at.is_(None),
        )
    )
    return result.scalar_one_or_none()


async def add_currency(
    db: AsyncSession,
    currency_data: ExchangeRateCreate,
    invariant: RateInvariant | None = None,
) -> ExchangeRate:
    """
    Add a currency to the catalog.

    A base-type currency is pinned to 1:1 parity and only one may exist.
    A soft-deleted row with the same code is revived with the new data.

    Raises:
        CurrencyAlreadyExists: If a live row already holds the code
        InvalidRateUpdate: If a second base currency is requested
        InvalidRateConfiguration: If buy/sell break the configured invariant
    """
    code = currency_data.currency_code
    existing = await _find(db, code, include_deleted=True)
    if existing is not None and existing.deleted_at is None:
        raise CurrencyAlreadyExists(code)

    values = currency_data.model_dump()
    if currency_data.rate_type == "base":
        if await get_base_currency(db) is not None:
            raise InvalidRateUpdate("Only one base currency is allowed", currency=code)
        values.update(
            base_rate=PARITY,
            buy_rate=PARITY,
            sell_rate=PARITY,
            adjustment_formula="base",
        )
    else:
        _invariant(invariant).check(code, currency_data.rate_type, currency_data.buy_rate, currency_data.sell_rate)

    if existing is not None:
        rate = existing
        for field, value in values.items():
            setattr(rate, field, value)
        rate.deleted_at = None
        rate.last_updated = datetime.now(timezone.utc)
    else:
        rate = ExchangeRate(**values)
        db.add(rate)

    await db.commit()
    await db.refresh(rate)
    logger.info("added currency %s (%s)", rate.currency_code, rate.rate_type)
    return rate


async def update_rate(
    db: AsyncSession,
    currency_code: str,
    rate_data: ExchangeRateUpdate,
    invariant: RateInvariant | None = None,
    max_spread_percent: float | None = None,
) -> ExchangeRate:
    """
    Re-price a currency.

    Raises:
        CurrencyNotFound: If the code is unknown or deleted
        BaseCurrencyProtected: If the code is the base currency
        InvalidRateConfiguration: If buy/sell break the configured invariant
        InvalidRateUpdate: If the buy/sell gap exceeds the spread cap
    """
    rate = await get_rate(db, currency_code)
    if rate.rate_type == "base":
        raise BaseCurrencyProtected(rate.currency_code, "re-price")

    _invariant(invariant).check(rate.currency_code, rate.rate_type, rate_data.buy_rate, rate_data.sell_rate)

    cap = Decimal(str(settings.MAX_SPREAD_PERCENT if max_spread_percent is None else max_spread_percent))
    pct = spread_percent(rate_data.buy_rate, rate_data.sell_rate)
    if pct > cap:
        raise InvalidRateUpdate(
            f"Spread exceeds maximum allowed ({cap}%)",
            currency=rate.currency_code,
            spread_percent=pct,
        )

    update_data = rate_data.model_dump(exclude_none=True)
    for field, value in update_data.items():
        setattr(rate, field, value)
    rate.last_updated = datetime.now(timezone.utc)

    await db.commit()
    await db.refresh(rate)
    logger.info("updated %s buy=%s sell=%s", rate.currency_code, rate.buy_rate, rate.sell_rate)
    return rate


async def remove_currency(db: AsyncSession, currency_code: str) -> dict:
    """Soft delete a currency; the base currency cannot be removed"""
    rate = await get_rate(db, currency_code)
    if rate.rate_type == "base":
        raise BaseCurrencyProtected(rate.currency_code, "delete")

    rate.deleted_at = datetime.now(timezone.utc)
    await db.commit()
    logger.info("removed currency %s", rate.currency_code)
    return {
        "success": True,
        "message": f"Currency {rate.currency_code} deleted successfully",
    }
