"""Exchange rate model"""
from datetime import datetime, timezone
from decimal import Decimal
from sqlalchemy import String, DateTime, Numeric, Index
from sqlalchemy.orm import Mapped, mapped_column

from app.database import Base


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class ExchangeRate(Base):
    """Exchange rate model - tradable state of one currency against the bridge currency"""

    __tablename__ = "exchange_rates"

    id: Mapped[int] = mapped_column(primary_key=True, index=True)
    currency_code: Mapped[str] = mapped_column(String(4), nullable=False, unique=True)
    currency_name: Mapped[str] = mapped_column(String(50), nullable=False)
    rate_type: Mapped[str] = mapped_column(String(10), nullable=False, default="fiat")  # base | fiat | crypto

    base_rate: Mapped[Decimal | None] = mapped_column(Numeric(20, 10), nullable=True)
    buy_rate: Mapped[Decimal] = mapped_column(Numeric(20, 10), nullable=False)
    sell_rate: Mapped[Decimal] = mapped_column(Numeric(20, 10), nullable=False)

    # Fractional deductions in [0, 1)
    bank_fee: Mapped[Decimal] = mapped_column(Numeric(10, 6), nullable=False, default=Decimal("0"))
    platform_fee: Mapped[Decimal] = mapped_column(Numeric(10, 6), nullable=False, default=Decimal("0"))
    spread: Mapped[Decimal] = mapped_column(Numeric(10, 6), nullable=False, default=Decimal("0"))

    adjustment_formula: Mapped[str | None] = mapped_column(String(255), nullable=True)
    last_updated: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=_utcnow,
        onupdate=_utcnow,
        nullable=False
    )
    # Soft delete
    deleted_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)

    __table_args__ = (
        Index("idx_rate_type", "rate_type"),
        Index("idx_rate_updates", "last_updated"),
    )

    def __repr__(self) -> str:
        return f"<ExchangeRate(code={self.currency_code}, buy={self.buy_rate}, sell={self.sell_rate})>"
