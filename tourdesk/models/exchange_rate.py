"""
ExchangeRate model - tenant rate history per currency pair.

`rate` is expressed as units of from_currency per one unit of to_currency:
TRY -> EUR at 35.5 means 1 EUR costs 35.5 TRY.
"""

from datetime import date
from decimal import Decimal

from sqlalchemy import CheckConstraint, DECIMAL, Date, Index, String
from sqlalchemy.orm import Mapped, mapped_column

from tourdesk.models.base import TenantBase


class ExchangeRate(TenantBase):
    """A dated exchange rate. Several rows may exist per pair; pricing picks by date."""

    __tablename__ = "exchange_rates"
    __table_args__ = (
        Index("ix_exchange_rates_pair_date", "tenant_id", "from_currency", "to_currency", "rate_date"),
        CheckConstraint("rate > 0", name="ck_exchange_rates_positive"),
    )

    from_currency: Mapped[str] = mapped_column(String(3), nullable=False, default="TRY")
    to_currency: Mapped[str] = mapped_column(String(3), nullable=False, default="EUR")
    rate: Mapped[Decimal] = mapped_column(DECIMAL(12, 6), nullable=False)
    rate_date: Mapped[date] = mapped_column(Date, nullable=False)
    source: Mapped[str] = mapped_column(String(50), default="manual")  # manual, tcmb, ecb

    def __repr__(self) -> str:
        return f"<ExchangeRate(id={self.id}, {self.from_currency}/{self.to_currency}={self.rate} @ {self.rate_date})>"
