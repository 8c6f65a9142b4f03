"""Pydantic schemas for request/response validation"""
from app.schemas.exchange_rate import (
    ExchangeRateCreate,
    ExchangeRateUpdate,
    ExchangeRateResponse,
    SupportedPairResponse,
)
from app.schemas.conversion import (
    ConversionOverrides,
    ConversionRequest,
    ConversionResult,
    ConversionSteps,
    ExchangeRateUsed,
)


__all__ = [
    "ExchangeRateCreate",
    "ExchangeRateUpdate",
    "ExchangeRateResponse",
    "SupportedPairResponse",
    "ConversionOverrides",
    "ConversionRequest",
    "ConversionResult",
    "ConversionSteps",
    "ExchangeRateUsed",
]
