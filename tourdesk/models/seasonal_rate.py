"""
SeasonalRate model - the supplier cost of an offering over an inclusive season window.

One table for every category: `category` is the discriminant and `payload`
holds the category-specific pricing fields (validated by
tourdesk.services.rate_payloads).
"""

from datetime import date
from typing import Optional, TYPE_CHECKING

from sqlalchemy import BigInteger, Boolean, CheckConstraint, Date, ForeignKey, Index, Text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from tourdesk.models.base import JSONType, TenantBase
from tourdesk.models.service_offering import ServiceCategoryType

if TYPE_CHECKING:
    from tourdesk.models.service_offering import ServiceOffering


class SeasonalRate(TenantBase):
    """
    A cost record valid from season_from to season_to (both inclusive).
    Inactive rows are soft-deleted and never used for pricing.
    """

    __tablename__ = "seasonal_rates"
    __table_args__ = (
        Index("ix_seasonal_rates_offering_season", "service_offering_id", "season_from", "season_to"),
        CheckConstraint("season_to >= season_from", name="ck_seasonal_rates_window"),
    )

    service_offering_id: Mapped[int] = mapped_column(
        BigInteger,
        ForeignKey("service_offerings.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    category: Mapped[str] = mapped_column(ServiceCategoryType, nullable=False)

    # Season window (inclusive)
    season_from: Mapped[date] = mapped_column(Date, nullable=False)
    season_to: Mapped[date] = mapped_column(Date, nullable=False)

    # Category-specific pricing fields
    payload: Mapped[dict] = mapped_column(JSONType, nullable=False)

    notes: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    is_active: Mapped[bool] = mapped_column(Boolean, default=True, nullable=False)

    # Relationships
    service_offering: Mapped["ServiceOffering"] = relationship(
        "ServiceOffering", back_populates="rates", lazy="raise"
    )

    @property
    def season_length_days(self) -> int:
        return (self.season_to - self.season_from).days

    def covers(self, on_date: date) -> bool:
        return self.season_from <= on_date <= self.season_to

    def __repr__(self) -> str:
        return (
            f"<SeasonalRate(id={self.id}, category='{self.category}', "
            f"{self.season_from}..{self.season_to}, active={self.is_active})>"
        )
