"""Conversion engine - multi-hop conversion through the bridge currency.

Every conversion is routed FROM -> bridge -> TO and itemized:

    bank_fee         = amount * bank_fee_rate
    net_after_bank   = amount - bank_fee
    bridge_acquired  = net_after_bank / exchange_rate         (forward pairs)
                       net_after_bank * exchange_rate         (reverse pairs)
    platform_fee     = bridge_acquired * platform_fee_rate
    net_bridge       = bridge_acquired - platform_fee
    spread_amount    = net_bridge * spread_rate
    final_bridge     = net_bridge - spread_amount
    final_amount     = final_bridge / target_exchange_rate    (forward pairs)
                       final_bridge * target_exchange_rate    (reverse pairs)

Each currency is quoted in one unit against the bridge. The forward side of
a pair (BRL in BRL:BOB) is quoted as its own units per bridge unit, the
reverse side (BOB) as bridge units per its own unit. A forward pair therefore
divides on both hops and a reverse pair multiplies on both hops.

Arithmetic runs at full Decimal precision; rounding happens once, when the
result is built.
"""
import asyncio
import logging
from decimal import ROUND_HALF_UP, Decimal, InvalidOperation, Overflow, localcontext
from enum import Enum
from typing import Any, Mapping

from app.core.errors import (
    CurrencyNotFound,
    InvalidAmount,
    InvalidRateConfiguration,
    UnsupportedPair,
)
from app.schemas.conversion import (
    ConversionOverrides,
    ConversionResult,
    ConversionSteps,
    ExchangeRateUsed,
)
from app.services.rate_catalog import RateCatalog, RateInvariant, RateRecord

logger = logging.getLogger(__name__)

AMOUNT_QUANTUM = Decimal("0.01")
RATE_QUANTUM = Decimal("0.0001")
PRECISION = 28


class PairDirection(str, Enum):
    FORWARD = "forward"
    REVERSE = "reverse"


Pair = tuple[str, str]


def parse_supported_pairs(pairs: Mapping[str, str]) -> dict[Pair, PairDirection]:
    """Turn ``{"BRL:BOB": "forward"}`` into ``{("BRL", "BOB"): PairDirection.FORWARD}``."""
    parsed: dict[Pair, PairDirection] = {}
    for key, direction in pairs.items():
        from_code, sep, to_code = key.partition(":")
        if not sep or not from_code.strip() or not to_code.strip():
            raise ValueError(f"Invalid pair '{key}', expected 'FROM:TO'")
        parsed[(from_code.strip().upper(), to_code.strip().upper())] = PairDirection(direction)
    return parsed


def round_amount(value: Decimal) -> Decimal:
    return value.quantize(AMOUNT_QUANTUM, rounding=ROUND_HALF_UP)


def round_rate(value: Decimal) -> Decimal:
    return value.quantize(RATE_QUANTUM, rounding=ROUND_HALF_UP)


def _to_decimal(amount: Any) -> Decimal:
    if isinstance(amount, bool):
        raise InvalidAmount(amount)
    if isinstance(amount, Decimal):
        return amount
    try:
        return Decimal(str(amount))
    except (InvalidOperation, ValueError, TypeError):
        raise InvalidAmount(amount)


class ConversionEngine:
    """Validates a request and runs the fee/spread pipeline.

    Stateless apart from its injected collaborators; safe to share between
    concurrent calls.
    """

    def __init__(
        self,
        catalog: RateCatalog,
        supported_pairs: Mapping[Pair, PairDirection],
        invariant: RateInvariant = RateInvariant.BUY_ABOVE_SELL,
    ) -> None:
        self.catalog = catalog
        self.supported_pairs = {
            (f.upper(), t.upper()): PairDirection(d) for (f, t), d in supported_pairs.items()
        }
        self.invariant = RateInvariant(invariant)

    def list_supported_pairs(self) -> set[Pair]:
        return set(self.supported_pairs)

    def direction_for(self, from_currency: str, to_currency: str) -> PairDirection:
        direction = self.supported_pairs.get((from_currency, to_currency))
        if direction is None:
            raise UnsupportedPair(from_currency, to_currency)
        return direction

    async def convert(
        self,
        from_currency: str,
        to_currency: str,
        amount: Any,
        overrides: ConversionOverrides | None = None,
    ) -> ConversionResult:
        from_currency = from_currency.strip().upper()
        to_currency = to_currency.strip().upper()
        overrides = overrides or ConversionOverrides()

        direction = self.direction_for(from_currency, to_currency)

        value = _to_decimal(amount)
        if not value.is_finite() or value <= 0:
            raise InvalidAmount(amount)

        rate_from, rate_to, rate_bridge = await self._resolve_rates(from_currency, to_currency)

        for record in (rate_from, rate_to, rate_bridge):
            self._validate_record(record)

        try:
            with localcontext() as ctx:
                ctx.prec = PRECISION
                ctx.traps[Overflow] = True
                ctx.traps[InvalidOperation] = True
                result = self._run_pipeline(
                    value, direction, rate_from, rate_to, rate_bridge, overrides
                )
        except (Overflow, InvalidOperation):
            # amount too large to carry through the pipeline at 2 dp
            raise InvalidAmount(amount)

        steps = result.steps
        logger.info(
            "converted %s %s -> %s %s via %s (custom=%s)",
            result.original_amount,
            from_currency,
            result.final_amount,
            to_currency,
            steps.bridge_currency,
            steps.is_custom,
            extra={
                "from_currency": from_currency,
                "to_currency": to_currency,
                "direction": steps.direction,
                "is_custom": steps.is_custom,
            },
        )
        return result

    def _run_pipeline(
        self,
        value: Decimal,
        direction: PairDirection,
        rate_from: RateRecord,
        rate_to: RateRecord,
        rate_bridge: RateRecord,
        overrides: ConversionOverrides,
    ) -> ConversionResult:
        bank_fee_rate = _pick(overrides.bank_fee_rate, rate_from.bank_fee)
        platform_fee_rate = _pick(overrides.platform_fee_rate, rate_bridge.platform_fee)
        spread_rate = _pick(overrides.spread_rate, rate_to.spread)
        exchange_rate = _pick(overrides.exchange_rate, rate_from.buy_rate)
        target_rate = _pick(overrides.target_exchange_rate, rate_to.sell_rate)

        bank_fee = value * bank_fee_rate
        net_after_bank = value - bank_fee
        if direction is PairDirection.FORWARD:
            bridge_acquired = net_after_bank / exchange_rate
        else:
            bridge_acquired = net_after_bank * exchange_rate
        platform_fee = bridge_acquired * platform_fee_rate
        net_bridge = bridge_acquired - platform_fee
        spread_amount = net_bridge * spread_rate
        final_bridge = net_bridge - spread_amount
        if direction is PairDirection.FORWARD:
            final_amount = final_bridge / target_rate
        else:
            final_amount = final_bridge * target_rate

        return ConversionResult(
            original_amount=round_amount(value),
            from_currency=rate_from.code,
            to_currency=rate_to.code,
            final_amount=round_amount(final_amount),
            steps=ConversionSteps(
                bank_fee=round_amount(bank_fee),
                net_after_bank=round_amount(net_after_bank),
                bridge_acquired=round_amount(bridge_acquired),
                platform_fee=round_amount(platform_fee),
                net_bridge=round_amount(net_bridge),
                spread_amount=round_amount(spread_amount),
                final_bridge=round_amount(final_bridge),
                bridge_currency=rate_bridge.code,
                direction=direction.value,
                exchange_rate_used=ExchangeRateUsed(
                    from_rate=round_rate(exchange_rate),
                    to_rate=round_rate(target_rate),
                    platform_fee_rate=round_rate(platform_fee_rate),
                    bank_fee_rate=round_rate(bank_fee_rate),
                    spread_rate=round_rate(spread_rate),
                ),
                is_custom=not overrides.is_empty(),
            ),
        )

    async def _resolve_rates(self, from_currency: str, to_currency: str) -> tuple[RateRecord, RateRecord, RateRecord]:
        rate_from, rate_to, rate_bridge = await asyncio.gather(
            self.catalog.get_rate(from_currency),
            self.catalog.get_rate(to_currency),
            self.catalog.get_bridge_rate(),
        )
        missing = [code for code, rate in ((from_currency, rate_from), (to_currency, rate_to)) if rate is None]
        if missing:
            raise CurrencyNotFound(*missing)
        return rate_from, rate_to, rate_bridge

    def _validate_record(self, record: RateRecord) -> None:
        self.invariant.check_record(record)
        for field in ("bank_fee", "platform_fee", "spread"):
            fee = getattr(record, field)
            if not (0 <= fee < 1):
                raise InvalidRateConfiguration(
                    record.code, record.buy_rate, record.sell_rate, f"{field}={fee} must be in [0, 1)"
                )


def _pick(override: Decimal | None, stored: Decimal) -> Decimal:
    return stored if override is None else override
