"""Exchange rates API endpoints"""
from typing import Annotated
from fastapi import APIRouter, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession

from app.database import get_db
from app.core.errors import CurrencyNotFound
from app.schemas.exchange_rate import (
    ExchangeRateCreate,
    ExchangeRateResponse,
    ExchangeRateUpdate,
)
from app.services import exchange_rate_service


router = APIRouter(prefix="/exchange", tags=["exchange"])


@router.get("/rates", response_model=list[ExchangeRateResponse])
async def get_rates(db: Annotated[AsyncSession, Depends(get_db)]):
    """Get all exchange rates"""
    rates = await exchange_rate_service.get_rates(db)
    return [exchange_rate_service.to_response(rate) for rate in rates]


@router.post("/rates", response_model=ExchangeRateResponse, status_code=status.HTTP_201_CREATED)
async def add_currency(
    currency_data: ExchangeRateCreate,
    db: Annotated[AsyncSession, Depends(get_db)]
):
    """Add a new currency"""
    rate = await exchange_rate_service.add_currency(db, currency_data)
    return exchange_rate_service.to_response(rate)


@router.get("/rates/{currency_code}", response_model=ExchangeRateResponse)
async def get_rate(currency_code: str, db: Annotated[AsyncSession, Depends(get_db)]):
    """Get exchange rate by currency code"""
    rate = await exchange_rate_service.get_rate(db, currency_code)
    return exchange_rate_service.to_response(rate)


@router.put("/rates/{currency_code}", response_model=ExchangeRateResponse)
async def update_rate(
    currency_code: str,
    rate_data: ExchangeRateUpdate,
    db: Annotated[AsyncSession, Depends(get_db)]
):
    """Update buy/sell rates of a currency"""
    rate = await exchange_rate_service.update_rate(db, currency_code, rate_data)
    return exchange_rate_service.to_response(rate)


@router.delete("/rates/{currency_code}")
async def remove_currency(currency_code: str, db: Annotated[AsyncSession, Depends(get_db)]):
    """Remove a currency (soft delete)"""
    return await exchange_rate_service.remove_currency(db, currency_code)


@router.get("/base", response_model=ExchangeRateResponse)
async def get_base_currency(db: Annotated[AsyncSession, Depends(get_db)]):
    """Get the base currency"""
    rate = await exchange_rate_service.get_base_currency(db)
    if rate is None:
        raise CurrencyNotFound("base")
    return exchange_rate_service.to_response(rate)
