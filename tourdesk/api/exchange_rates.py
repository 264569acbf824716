"""
Exchange rate endpoints.
Rates are dated; pricing uses the most recent rate on or before the service date.
"""

import logging
from datetime import date
from decimal import Decimal
from typing import List, Optional

from fastapi import APIRouter, Query, status
from pydantic import BaseModel, ConfigDict, Field

from tourdesk.api.deps import DbSession, TenantId
from tourdesk.services.exchange_rate_catalog import create_exchange_rate, list_exchange_rates
from tourdesk.services.exchange_rate_resolver import resolve_exchange_rate

logger = logging.getLogger(__name__)
router = APIRouter()


# Schemas
class ExchangeRateCreate(BaseModel):
    """A dated rate: `rate` units of from_currency buy one to_currency."""
    from_currency: str = Field(default="TRY", min_length=3, max_length=3)
    to_currency: str = Field(default="EUR", min_length=3, max_length=3)
    rate: Decimal = Field(..., gt=0, max_digits=12, decimal_places=6)
    rate_date: date
    source: str = Field(default="manual", max_length=50)


class ExchangeRateResponse(BaseModel):
    id: int
    from_currency: str
    to_currency: str
    rate: Decimal
    rate_date: date
    source: str

    model_config = ConfigDict(from_attributes=True)


# Endpoints
@router.post("", response_model=ExchangeRateResponse, status_code=status.HTTP_201_CREATED)
async def create_rate(
    data: ExchangeRateCreate,
    db: DbSession,
    tenant_id: TenantId,
):
    """Record a rate. One rate per pair and date."""
    rate = await create_exchange_rate(
        db,
        tenant_id,
        rate=data.rate,
        rate_date=data.rate_date,
        from_currency=data.from_currency,
        to_currency=data.to_currency,
        source=data.source,
    )
    await db.commit()
    return rate


@router.get("", response_model=List[ExchangeRateResponse])
async def list_rates(
    db: DbSession,
    tenant_id: TenantId,
    from_currency: Optional[str] = Query(None),
    to_currency: Optional[str] = Query(None),
    start_date: Optional[date] = Query(None),
    end_date: Optional[date] = Query(None),
):
    """Rate history, newest first."""
    return await list_exchange_rates(db, tenant_id, from_currency, to_currency, start_date, end_date)


@router.get("/latest", response_model=ExchangeRateResponse)
async def get_latest_rate(
    db: DbSession,
    tenant_id: TenantId,
    from_currency: str = Query("TRY"),
    to_currency: str = Query("EUR"),
    on_date: Optional[date] = Query(None, description="Defaults to today"),
):
    """The rate effective on `on_date`: latest rate dated on or before it."""
    return await resolve_exchange_rate(db, tenant_id, from_currency, to_currency, on_date or date.today())
