"""Service layer for business logic"""
from app.services import (
    rate_catalog,
    conversion_engine,
    exchange_rate_service,
)

__all__ = [
    "rate_catalog",
    "conversion_engine",
    "exchange_rate_service",
]
