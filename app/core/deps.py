"""Dependencies for route handlers"""
from typing import Annotated
from fastapi import Depends

from app.config import settings
from app.database import async_session_maker
from app.services.conversion_engine import ConversionEngine, parse_supported_pairs
from app.services.rate_catalog import RateCatalog, RateInvariant, SqlRateCatalog


def get_rate_catalog() -> RateCatalog:
    """Catalog over the configured database; tests override this dependency."""
    return SqlRateCatalog(async_session_maker, bridge_currency=settings.BRIDGE_CURRENCY)


def get_conversion_engine(
    catalog: Annotated[RateCatalog, Depends(get_rate_catalog)]
) -> ConversionEngine:
    """
    Build a conversion engine for the current request.

    Args:
        catalog: Rate catalog to read from

    Returns:
        ConversionEngine: Engine configured with the supported pairs and
        rate invariant from settings
    """
    return ConversionEngine(
        catalog,
        supported_pairs=parse_supported_pairs(settings.SUPPORTED_PAIRS),
        invariant=RateInvariant(settings.RATE_INVARIANT),
    )
