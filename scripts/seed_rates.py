#!/usr/bin/env python3
"""Seed the rate catalog. Run with: python scripts/seed_rates.py [--replace]"""
import argparse
import asyncio
import sys
from decimal import Decimal
from pathlib import Path

# Add project root to path
sys.path.insert(0, str(Path(__file__).resolve().parent.parent))

from app.core.errors import CambioError
from app.database import async_session_maker, init_db
from app.schemas.exchange_rate import ExchangeRateCreate
from app.services import exchange_rate_service

# BRL is quoted in BRL per USDT, BOB in USDT per BOB
DEFAULT_RATES = [
    ExchangeRateCreate(
        currency_code="USDT",
        currency_name="Tether",
        rate_type="base",
        buy_rate=Decimal("1"),
        sell_rate=Decimal("1"),
        platform_fee=Decimal("0.01"),
    ),
    ExchangeRateCreate(
        currency_code="BRL",
        currency_name="Real brasileiro",
        buy_rate=Decimal("5.00"),
        sell_rate=Decimal("4.80"),
        bank_fee=Decimal("0.01"),
        spread=Decimal("0.02"),
    ),
    ExchangeRateCreate(
        currency_code="BOB",
        currency_name="Boliviano",
        buy_rate=Decimal("0.1450"),
        sell_rate=Decimal("0.1440"),
        bank_fee=Decimal("0.005"),
        spread=Decimal("0.05"),
    ),
]


async def main():
    parser = argparse.ArgumentParser(description="Seed default exchange rates")
    parser.add_argument("--replace", action="store_true", help="Remove existing non-base rows first")
    args = parser.parse_args()

    await init_db()
    async with async_session_maker() as db:
        if args.replace:
            for rate in await exchange_rate_service.get_rates(db):
                if rate.rate_type != "base":
                    await exchange_rate_service.remove_currency(db, rate.currency_code)

        for currency in DEFAULT_RATES:
            try:
                rate = await exchange_rate_service.add_currency(db, currency)
                print(f"Added {rate.currency_code}: buy={rate.buy_rate} sell={rate.sell_rate}")
            except CambioError as e:
                print(f"Skipped {currency.currency_code}: {e.message}", file=sys.stderr)


if __name__ == "__main__":
    asyncio.run(main())
