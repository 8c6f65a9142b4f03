"""Database models"""
from app.models.exchange_rate import ExchangeRate

__all__ = [
    "ExchangeRate",
]
