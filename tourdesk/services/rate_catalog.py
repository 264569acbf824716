"""
Seasonal rate catalog - create, list and soft-delete supplier rates.

A rate can only be attached to an offering that already has its category
detail record, and a new active rate may not overlap the season of another
active rate of the same offering.
"""

import logging
import uuid
from datetime import date
from typing import Any, Dict, Optional, Union

from pydantic import ValidationError
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from tourdesk.models.seasonal_rate import SeasonalRate
from tourdesk.services.errors import (
    CategoryMismatch,
    InvalidInputError,
    MissingOfferingDetail,
    NotFoundError,
    RateSeasonOverlap,
)
from tourdesk.services.rate_payloads import RatePayload, dump_rate_payload, parse_rate_payload
from tourdesk.services.seasonal_rate_resolver import load_active_rates, load_offering

logger = logging.getLogger(__name__)


def find_overlap(rates, season_from: date, season_to: date, exclude_id: Optional[int] = None):
    """First active rate whose inclusive window intersects [season_from, season_to]."""
    for rate in rates:
        if exclude_id is not None and rate.id == exclude_id:
            continue
        if rate.is_active and rate.season_from <= season_to and rate.season_to >= season_from:
            return rate
    return None


def _coerce_payload(payload: Union[RatePayload, Dict[str, Any]]) -> RatePayload:
    if isinstance(payload, dict):
        try:
            return parse_rate_payload(payload)
        except ValidationError as e:
            raise InvalidInputError(f"Invalid rate payload: {e}", {"errors": e.errors(include_url=False)}) from e
    return payload


async def create_seasonal_rate(
    db: AsyncSession,
    tenant_id: uuid.UUID,
    service_offering_id: int,
    season_from: date,
    season_to: date,
    payload: Union[RatePayload, Dict[str, Any]],
    notes: Optional[str] = None,
    is_active: bool = True,
) -> SeasonalRate:
    if season_to < season_from:
        raise InvalidInputError(
            "season_to must be on or after season_from",
            {"season_from": season_from.isoformat(), "season_to": season_to.isoformat()},
        )

    offering = await load_offering(db, tenant_id, service_offering_id)
    if offering.detail is None:
        raise MissingOfferingDetail(offering.id, offering.category)

    payload = _coerce_payload(payload)
    if payload.category != offering.category:
        raise CategoryMismatch(
            offering.category,
            payload.category,
            {"service_offering_id": offering.id},
        )

    if is_active:
        existing = await load_active_rates(db, tenant_id, offering.id)
        overlap = find_overlap(existing, season_from, season_to)
        if overlap is not None:
            logger.warning(
                f"Rejected rate {season_from}..{season_to} for offering {offering.id}: "
                f"overlaps rate {overlap.id}"
            )
            raise RateSeasonOverlap(overlap.id, overlap.season_from, overlap.season_to)

    rate = SeasonalRate(
        tenant_id=tenant_id,
        service_offering_id=offering.id,
        category=offering.category,
        season_from=season_from,
        season_to=season_to,
        payload=dump_rate_payload(payload),
        notes=notes,
        is_active=is_active,
    )
    db.add(rate)
    await db.flush()

    logger.info(f"Created {rate.category} rate {rate.id} for offering {offering.id} ({season_from}..{season_to})")
    return rate


async def list_seasonal_rates(
    db: AsyncSession,
    tenant_id: uuid.UUID,
    service_offering_id: Optional[int] = None,
    include_inactive: bool = False,
) -> list[SeasonalRate]:
    query = select(SeasonalRate).where(SeasonalRate.tenant_id == tenant_id)
    if service_offering_id is not None:
        query = query.where(SeasonalRate.service_offering_id == service_offering_id)
    if not include_inactive:
        query = query.where(SeasonalRate.is_active.is_(True))

    result = await db.execute(query.order_by(SeasonalRate.service_offering_id, SeasonalRate.season_from))
    return list(result.scalars().all())


async def deactivate_seasonal_rate(db: AsyncSession, tenant_id: uuid.UUID, rate_id: int) -> SeasonalRate:
    """Soft delete: the row stays for traceability of past snapshots."""
    result = await db.execute(
        select(SeasonalRate).where(SeasonalRate.id == rate_id, SeasonalRate.tenant_id == tenant_id)
    )
    rate = result.scalar_one_or_none()
    if rate is None:
        raise NotFoundError(f"Seasonal rate {rate_id} not found", {"rate_id": rate_id})

    rate.is_active = False
    await db.flush()
    logger.info(f"Deactivated seasonal rate {rate.id}")
    return rate
