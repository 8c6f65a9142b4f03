"""Conversion API endpoints"""
from typing import Annotated
from fastapi import APIRouter, Depends

from app.core.deps import get_conversion_engine
from app.schemas.conversion import ConversionRequest, ConversionResult
from app.schemas.exchange_rate import SupportedPairResponse
from app.services.conversion_engine import ConversionEngine


router = APIRouter(prefix="/exchange", tags=["conversion"])


@router.post("/convert", response_model=ConversionResult)
async def convert(
    request: ConversionRequest,
    engine: Annotated[ConversionEngine, Depends(get_conversion_engine)]
):
    """Convert an amount through the bridge currency, returning every step"""
    return await engine.convert(
        request.from_currency,
        request.to_currency,
        request.amount,
        request.overrides,
    )


@router.get("/pairs", response_model=list[SupportedPairResponse])
async def get_supported_pairs(
    engine: Annotated[ConversionEngine, Depends(get_conversion_engine)]
):
    """Get the configured directed pairs"""
    return [
        SupportedPairResponse(from_currency=from_code, to_currency=to_code, direction=direction.value)
        for (from_code, to_code), direction in sorted(engine.supported_pairs.items())
    ]
