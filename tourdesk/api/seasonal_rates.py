"""
Seasonal rate management endpoints.
"""

import logging
from datetime import date, datetime
from typing import List, Optional

from fastapi import APIRouter, Query, status
from pydantic import BaseModel, ConfigDict

from tourdesk.api.deps import DbSession, TenantId
from tourdesk.services.rate_catalog import (
    create_seasonal_rate,
    deactivate_seasonal_rate,
    list_seasonal_rates,
)
from tourdesk.services.rate_payloads import RatePayload

logger = logging.getLogger(__name__)
router = APIRouter()


# ============================================================================
# Schemas
# ============================================================================

class SeasonalRateCreate(BaseModel):
    service_offering_id: int
    season_from: date
    season_to: date
    payload: RatePayload
    notes: Optional[str] = None
    is_active: bool = True


class SeasonalRateResponse(BaseModel):
    id: int
    service_offering_id: int
    category: str
    season_from: date
    season_to: date
    payload: dict
    notes: Optional[str] = None
    is_active: bool
    created_at: Optional[datetime] = None

    model_config = ConfigDict(from_attributes=True)


# ============================================================================
# Endpoints
# ============================================================================

@router.post("", response_model=SeasonalRateResponse, status_code=status.HTTP_201_CREATED)
async def create_rate(
    data: SeasonalRateCreate,
    db: DbSession,
    tenant_id: TenantId,
):
    """
    Attach a rate to an offering.
    The offering needs its category detail record, and the season may not
    overlap another active rate of the same offering.
    """
    rate = await create_seasonal_rate(
        db,
        tenant_id,
        service_offering_id=data.service_offering_id,
        season_from=data.season_from,
        season_to=data.season_to,
        payload=data.payload,
        notes=data.notes,
        is_active=data.is_active,
    )
    await db.commit()
    await db.refresh(rate)
    return rate


@router.get("", response_model=List[SeasonalRateResponse])
async def list_rates(
    db: DbSession,
    tenant_id: TenantId,
    service_offering_id: Optional[int] = Query(None),
    include_inactive: bool = Query(False),
):
    """List rates, optionally for one offering."""
    return await list_seasonal_rates(db, tenant_id, service_offering_id, include_inactive)


@router.delete("/{rate_id}", response_model=SeasonalRateResponse)
async def delete_rate(
    rate_id: int,
    db: DbSession,
    tenant_id: TenantId,
):
    """Soft delete: the rate is deactivated and no longer used for pricing."""
    rate = await deactivate_seasonal_rate(db, tenant_id, rate_id)
    await db.commit()
    await db.refresh(rate)
    return rate
