"""Exchange rate schemas"""
from datetime import datetime
from decimal import Decimal
from pydantic import BaseModel, Field, field_validator


class ExchangeRateBase(BaseModel):
    """Base exchange rate schema"""
    currency_code: str = Field(..., pattern="^[A-Z]{3,4}$")
    currency_name: str = Field(..., min_length=1, max_length=50)
    rate_type: str = Field("fiat", pattern="^(base|fiat|crypto)$")
    buy_rate: Decimal = Field(..., gt=0)
    sell_rate: Decimal = Field(..., gt=0)
    bank_fee: Decimal = Field(Decimal("0"), ge=0, lt=1)
    platform_fee: Decimal = Field(Decimal("0"), ge=0, lt=1)
    spread: Decimal = Field(Decimal("0"), ge=0, lt=1)


class ExchangeRateCreate(ExchangeRateBase):
    """Schema for adding a currency"""
    base_rate: Decimal | None = Field(None, ge=0)
    adjustment_formula: str | None = Field(None, max_length=255)

    @field_validator("currency_code", mode="before")
    @classmethod
    def upper_code(cls, v):
        return v.strip().upper() if isinstance(v, str) else v


class ExchangeRateUpdate(BaseModel):
    """Schema for re-pricing a currency"""
    buy_rate: Decimal = Field(..., gt=0)
    sell_rate: Decimal = Field(..., gt=0)
    bank_fee: Decimal | None = Field(None, ge=0, lt=1)
    platform_fee: Decimal | None = Field(None, ge=0, lt=1)
    spread: Decimal | None = Field(None, ge=0, lt=1)


class ExchangeRateResponse(ExchangeRateBase):
    """Schema for exchange rate response"""
    id: int
    base_rate: Decimal | None = None
    adjustment_formula: str | None = None
    mid_rate: Decimal
    spread_percent: Decimal
    last_updated: datetime

    model_config = {"from_attributes": True}


class SupportedPairResponse(BaseModel):
    """Configured directed pair"""
    from_currency: str
    to_currency: str
    direction: str
