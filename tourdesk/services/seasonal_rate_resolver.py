"""
Seasonal rate resolution.

A rate applies when its inclusive season window contains the service date and
it is active. Overlapping windows (legacy data) are settled by the narrowest
window, then by the newest row. There is no fallback to a neighbouring season.
"""

import logging
import uuid
from datetime import date
from typing import Optional, Sequence

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from tourdesk.models.seasonal_rate import SeasonalRate
from tourdesk.models.service_offering import ServiceCategory, ServiceOffering
from tourdesk.services.errors import CategoryMismatch, NoApplicableRate, ServiceOfferingNotFound

logger = logging.getLogger(__name__)


def pick_seasonal_rate(
    rates: Sequence[SeasonalRate],
    on_date: date,
    offering_id: Optional[int] = None,
) -> SeasonalRate:
    """
    Pick the rate in force on `on_date` from an offering's rates.

    Raises NoApplicableRate when no active window contains the date.
    """
    candidates = [r for r in rates if r.is_active and r.covers(on_date)]
    if not candidates:
        if offering_id is None and rates:
            offering_id = rates[0].service_offering_id
        raise NoApplicableRate(
            offering_id,
            on_date,
            {"service_offering_id": offering_id, "service_date": on_date.isoformat()},
        )

    if len(candidates) > 1:
        logger.debug(
            f"{len(candidates)} overlapping rates cover {on_date} for offering {offering_id}: "
            f"{[r.id for r in candidates]}"
        )

    # Narrowest window first, then highest id
    return min(candidates, key=lambda r: (r.season_length_days, -(r.id or 0)))


async def load_offering(
    db: AsyncSession,
    tenant_id: uuid.UUID,
    offering_id: int,
    category: Optional[ServiceCategory] = None,
) -> ServiceOffering:
    """
    Load an active offering of the tenant with its detail record.

    Raises ServiceOfferingNotFound when missing, foreign or inactive, and
    CategoryMismatch when `category` is given and differs.
    """
    result = await db.execute(
        select(ServiceOffering)
        .where(ServiceOffering.id == offering_id, ServiceOffering.tenant_id == tenant_id)
        .options(
            selectinload(ServiceOffering.hotel_room),
            selectinload(ServiceOffering.transfer),
            selectinload(ServiceOffering.vehicle),
            selectinload(ServiceOffering.guide),
            selectinload(ServiceOffering.activity),
        )
        .execution_options(populate_existing=True)
    )
    offering = result.scalar_one_or_none()
    if offering is None or not offering.is_active:
        raise ServiceOfferingNotFound(offering_id, {"service_offering_id": offering_id})

    if category is not None and offering.service_category != ServiceCategory(category):
        raise CategoryMismatch(
            ServiceCategory(category).value,
            offering.category,
            {"service_offering_id": offering_id},
        )
    return offering


async def load_active_rates(
    db: AsyncSession,
    tenant_id: uuid.UUID,
    offering_id: int,
    on_date: Optional[date] = None,
) -> list[SeasonalRate]:
    """Active rates of an offering, optionally only those covering `on_date`."""
    query = select(SeasonalRate).where(
        SeasonalRate.tenant_id == tenant_id,
        SeasonalRate.service_offering_id == offering_id,
        SeasonalRate.is_active.is_(True),
    )
    if on_date is not None:
        query = query.where(SeasonalRate.season_from <= on_date, SeasonalRate.season_to >= on_date)

    result = await db.execute(query.order_by(SeasonalRate.season_from, SeasonalRate.id))
    return list(result.scalars().all())


def check_rate_category(rate: SeasonalRate, offering: ServiceOffering) -> None:
    """A rate row must belong to its offering's category."""
    payload_category = (rate.payload or {}).get("category", rate.category)
    if rate.category != offering.category or payload_category != offering.category:
        logger.error(
            f"Seasonal rate {rate.id} ({rate.category}/{payload_category}) attached to "
            f"{offering.category} offering {offering.id}"
        )
        raise CategoryMismatch(
            offering.category,
            payload_category if payload_category != offering.category else rate.category,
            {"service_offering_id": offering.id, "rate_id": rate.id},
        )


async def resolve_seasonal_rate(
    db: AsyncSession,
    tenant_id: uuid.UUID,
    offering: ServiceOffering,
    on_date: date,
) -> SeasonalRate:
    """Select the single active rate of `offering` in force on `on_date`."""
    if offering is None or offering.tenant_id != tenant_id or not offering.is_active:
        offering_id = getattr(offering, "id", None)
        raise ServiceOfferingNotFound(offering_id, {"service_offering_id": offering_id})

    rates = await load_active_rates(db, tenant_id, offering.id, on_date)
    rate = pick_seasonal_rate(rates, on_date, offering.id)
    check_rate_category(rate, offering)
    return rate
