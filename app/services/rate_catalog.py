"""Rate catalog - read-only lookup of stored currency rates.

The conversion engine only needs two operations from the store:

    get_rate(code)      -> RateRecord | None
    get_bridge_rate()   -> RateRecord (raises CurrencyNotFound when missing)

``SqlRateCatalog`` backs them with the ``exchange_rates`` table and
``InMemoryRateCatalog`` with a plain dict, which is what tests and scripts use.
"""
from dataclasses import dataclass
from datetime import datetime
from decimal import Decimal
from enum import Enum
from typing import Iterable, Protocol

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from app.core.errors import CurrencyNotFound, InvalidRateConfiguration
from app.models.exchange_rate import ExchangeRate

RATE_TYPES = ("base", "fiat", "crypto")


@dataclass(frozen=True)
class RateRecord:
    code: str
    rate_type: str
    buy_rate: Decimal
    sell_rate: Decimal
    bank_fee: Decimal = Decimal("0")
    platform_fee: Decimal = Decimal("0")
    spread: Decimal = Decimal("0")
    name: str = ""
    last_updated: datetime | None = None

    @property
    def is_base(self) -> bool:
        return self.rate_type == "base"

    @classmethod
    def from_model(cls, rate: ExchangeRate) -> "RateRecord":
        return cls(
            code=rate.currency_code,
            rate_type=rate.rate_type,
            buy_rate=Decimal(str(rate.buy_rate)),
            sell_rate=Decimal(str(rate.sell_rate)),
            bank_fee=Decimal(str(rate.bank_fee or 0)),
            platform_fee=Decimal(str(rate.platform_fee or 0)),
            spread=Decimal(str(rate.spread or 0)),
            name=rate.currency_name,
            last_updated=rate.last_updated,
        )


class RateInvariant(str, Enum):
    """Which side of a quote must be strictly greater.

    A deployment picks one; base records sit at 1:1 parity and are exempt.
    """

    BUY_ABOVE_SELL = "buy_above_sell"
    SELL_ABOVE_BUY = "sell_above_buy"

    def holds(self, buy_rate: Decimal, sell_rate: Decimal) -> bool:
        if self is RateInvariant.BUY_ABOVE_SELL:
            return buy_rate > sell_rate
        return sell_rate > buy_rate

    @property
    def rule(self) -> str:
        if self is RateInvariant.BUY_ABOVE_SELL:
            return "buy_rate must be greater than sell_rate"
        return "sell_rate must be greater than buy_rate"

    def check(self, code: str, rate_type: str, buy_rate: Decimal, sell_rate: Decimal) -> None:
        """Raise InvalidRateConfiguration unless the quote is usable."""
        if buy_rate <= 0 or sell_rate <= 0:
            raise InvalidRateConfiguration(code, buy_rate, sell_rate, "rates must be positive")
        if rate_type == "base":
            return
        if not self.holds(buy_rate, sell_rate):
            raise InvalidRateConfiguration(code, buy_rate, sell_rate, self.rule)

    def check_record(self, record: RateRecord) -> None:
        self.check(record.code, record.rate_type, record.buy_rate, record.sell_rate)


class RateCatalog(Protocol):
    bridge_currency: str

    async def get_rate(self, code: str) -> RateRecord | None: ...

    async def get_bridge_rate(self) -> RateRecord: ...


class InMemoryRateCatalog:
    """Dict-backed catalog snapshot"""

    def __init__(self, records: Iterable[RateRecord] = (), bridge_currency: str = "USDT") -> None:
        self.bridge_currency = bridge_currency.upper()
        self._records = {r.code.upper(): r for r in records}

    def put(self, record: RateRecord) -> None:
        self._records[record.code.upper()] = record

    async def get_rate(self, code: str) -> RateRecord | None:
        return self._records.get(code.upper())

    async def get_bridge_rate(self) -> RateRecord:
        record = await self.get_rate(self.bridge_currency)
        if record is None:
            raise CurrencyNotFound(self.bridge_currency)
        return record


class SqlRateCatalog:
    """Catalog reading live (not soft-deleted) rows of ``exchange_rates``.

    Each lookup opens its own session so several lookups can be awaited
    concurrently.
    """

    def __init__(self, session_maker: async_sessionmaker[AsyncSession], bridge_currency: str = "USDT") -> None:
        self._session_maker = session_maker
        self.bridge_currency = bridge_currency.upper()

    async def get_rate(self, code: str) -> RateRecord | None:
        async with self._session_maker() as db:
            result = await db.execute(
                select(ExchangeRate).where(
                    ExchangeRate.currency_code == code.upper(),
                    ExchangeRate.deleted_at.is_(None),
                )
            )
            rate = result.scalar_one_or_none()
        if rate is None:
            return None
        return RateRecord.from_model(rate)

    async def get_bridge_rate(self) -> RateRecord:
        record = await self.get_rate(self.bridge_currency)
        if record is None:
            raise CurrencyNotFound(self.bridge_currency)
        return record
