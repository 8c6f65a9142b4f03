"""API v1 routes"""
from fastapi import APIRouter
from app.api.v1 import (
    exchange_rates,
    conversions,
)

api_router = APIRouter()

# Include route modules
api_router.include_router(exchange_rates.router)
api_router.include_router(conversions.router)
