"""Conversion schemas"""
from decimal import Decimal
from pydantic import AliasChoices, BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel


class ConversionOverrides(BaseModel):
    """Caller-supplied replacements for stored parameters, any subset"""
    bank_fee_rate: Decimal | None = Field(None, ge=0, lt=1)
    platform_fee_rate: Decimal | None = Field(None, ge=0, lt=1)
    spread_rate: Decimal | None = Field(None, ge=0, lt=1)
    exchange_rate: Decimal | None = Field(None, gt=0)
    target_exchange_rate: Decimal | None = Field(None, gt=0)

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, extra="forbid")

    def is_empty(self) -> bool:
        return not self.model_dump(exclude_none=True)


class ConversionRequest(BaseModel):
    """Schema for a conversion request"""
    from_currency: str = Field(
        ...,
        min_length=3,
        max_length=4,
        validation_alias=AliasChoices("from", "fromCurrency", "from_currency"),
    )
    to_currency: str = Field(
        ...,
        min_length=3,
        max_length=4,
        validation_alias=AliasChoices("to", "toCurrency", "to_currency"),
    )
    amount: Decimal
    overrides: ConversionOverrides | None = None

    @field_validator("from_currency", "to_currency")
    @classmethod
    def normalize_code(cls, v: str) -> str:
        return v.strip().upper()


class ExchangeRateUsed(BaseModel):
    """Effective rates the pipeline ran with"""
    from_rate: Decimal = Field(..., alias="from")
    to_rate: Decimal = Field(..., alias="to")
    platform_fee_rate: Decimal
    bank_fee_rate: Decimal
    spread_rate: Decimal

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class ConversionSteps(BaseModel):
    """Audit trail of every intermediate value"""
    bank_fee: Decimal
    net_after_bank: Decimal
    bridge_acquired: Decimal
    platform_fee: Decimal
    net_bridge: Decimal
    spread_amount: Decimal
    final_bridge: Decimal
    bridge_currency: str
    direction: str
    exchange_rate_used: ExchangeRateUsed
    is_custom: bool

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class ConversionResult(BaseModel):
    """Schema for conversion response"""
    original_amount: Decimal
    from_currency: str
    to_currency: str
    final_amount: Decimal
    steps: ConversionSteps

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)
