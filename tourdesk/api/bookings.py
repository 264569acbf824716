"""
Booking endpoints - bookings, line items and the payment balance.
"""

import logging
from datetime import date, datetime
from decimal import Decimal
from typing import List, Optional

from fastapi import APIRouter, status
from pydantic import BaseModel, ConfigDict, Field

from tourdesk.api.deps import DbSession, TenantId
from tourdesk.api.payments import PaymentCreate, PaymentResponse
from tourdesk.services.booking_service import (
    create_booking,
    create_booking_item_from_quote,
    create_manual_booking_item,
    get_booking,
    requote_booking_item,
)
from tourdesk.services.payment_ledger import get_balance, record_payment
from tourdesk.services.quote_calculator import QuoteRequest

logger = logging.getLogger(__name__)
router = APIRouter()


# ============================================================================
# Schemas
# ============================================================================

class BookingCreate(BaseModel):
    booking_code: str = Field(..., min_length=1, max_length=50)
    start_date: date
    end_date: date
    client_name: Optional[str] = None
    notes: Optional[str] = None
    # Locked at creation; defaults to today's cost->sell rate
    locked_exchange_rate: Optional[Decimal] = Field(default=None, gt=0)


class BookingItemResponse(BaseModel):
    id: int
    booking_id: int
    service_offering_id: Optional[int] = None
    item_type: str
    description: Optional[str] = None
    qty: int
    unit_cost_try: Decimal
    unit_price_eur: Decimal
    pricing_snapshot_json: Optional[dict] = None

    model_config = ConfigDict(from_attributes=True)


class BookingResponse(BaseModel):
    id: int
    booking_code: str
    client_name: Optional[str] = None
    start_date: date
    end_date: date
    status: str
    locked_exchange_rate: Decimal
    total_cost_try: Decimal
    total_sell_eur: Decimal
    notes: Optional[str] = None
    created_at: Optional[datetime] = None

    model_config = ConfigDict(from_attributes=True)


class BookingDetail(BookingResponse):
    items: List[BookingItemResponse] = Field(default_factory=list)
    payments: List[PaymentResponse] = Field(default_factory=list)


class ManualItemCreate(BaseModel):
    item_type: str = Field(..., min_length=1, max_length=30)
    description: Optional[str] = None
    qty: int = Field(default=1, ge=1)
    unit_cost_try: Decimal = Field(..., ge=0)
    unit_price_eur: Decimal = Field(..., ge=0)
    service_offering_id: Optional[int] = None


class QuotedItemCreate(QuoteRequest):
    description: Optional[str] = None


class BalanceResponse(BaseModel):
    booking_id: int
    total_sell_eur: Decimal
    committed_eur: Decimal
    paid_eur: Decimal
    remaining_eur: Decimal


# ============================================================================
# Bookings
# ============================================================================

@router.post("", response_model=BookingResponse, status_code=status.HTTP_201_CREATED)
async def create(
    data: BookingCreate,
    db: DbSession,
    tenant_id: TenantId,
):
    booking = await create_booking(
        db,
        tenant_id,
        booking_code=data.booking_code,
        start_date=data.start_date,
        end_date=data.end_date,
        client_name=data.client_name,
        notes=data.notes,
        locked_exchange_rate=data.locked_exchange_rate,
    )
    await db.commit()
    await db.refresh(booking)
    return booking


@router.get("/{booking_id}", response_model=BookingDetail)
async def get_one(
    booking_id: int,
    db: DbSession,
    tenant_id: TenantId,
):
    """Booking with its items (and their frozen pricing) and payments."""
    return await get_booking(db, tenant_id, booking_id)


@router.get("/{booking_id}/balance", response_model=BalanceResponse)
async def get_booking_balance(
    booking_id: int,
    db: DbSession,
    tenant_id: TenantId,
):
    balance = await get_balance(db, tenant_id, booking_id)
    return BalanceResponse(
        booking_id=booking_id,
        total_sell_eur=balance.total_sell_eur,
        committed_eur=balance.committed_eur,
        paid_eur=balance.paid_eur,
        remaining_eur=balance.remaining_eur,
    )


# ============================================================================
# Items
# ============================================================================

@router.post("/{booking_id}/items/quote", response_model=BookingItemResponse, status_code=status.HTTP_201_CREATED)
async def add_quoted_item(
    booking_id: int,
    data: QuotedItemCreate,
    db: DbSession,
    tenant_id: TenantId,
):
    """Quote an offering and freeze the quote on a new item."""
    request = QuoteRequest.model_validate(data.model_dump(exclude={"description"}))
    item = await create_booking_item_from_quote(db, tenant_id, booking_id, request, description=data.description)
    await db.commit()
    return item


@router.post("/{booking_id}/items/manual", response_model=BookingItemResponse, status_code=status.HTTP_201_CREATED)
async def add_manual_item(
    booking_id: int,
    data: ManualItemCreate,
    db: DbSession,
    tenant_id: TenantId,
):
    item = await create_manual_booking_item(
        db,
        tenant_id,
        booking_id,
        item_type=data.item_type,
        unit_cost_try=data.unit_cost_try,
        unit_price_eur=data.unit_price_eur,
        qty=data.qty,
        description=data.description,
        service_offering_id=data.service_offering_id,
    )
    await db.commit()
    return item


@router.post("/{booking_id}/items/{item_id}/requote", response_model=BookingItemResponse)
async def requote_item(
    booking_id: int,
    item_id: int,
    db: DbSession,
    tenant_id: TenantId,
    data: Optional[QuoteRequest] = None,
):
    """
    Explicitly re-price an item against today's rates.
    Without a body, the request stored with the item's quote is replayed.
    """
    item = await requote_booking_item(db, tenant_id, booking_id, item_id, request=data)
    await db.commit()
    return item


# ============================================================================
# Payments
# ============================================================================

@router.post("/{booking_id}/payments", response_model=PaymentResponse, status_code=status.HTTP_201_CREATED)
async def add_payment(
    booking_id: int,
    data: PaymentCreate,
    db: DbSession,
    tenant_id: TenantId,
):
    """
    Record a client payment.
    Refused (409) when it would take committed payments above the booking total.
    """
    payment = await record_payment(
        db,
        tenant_id,
        booking_id,
        amount=data.amount_eur,
        method=data.method,
        status=data.status,
        paid_at=data.paid_at,
        txn_ref=data.txn_ref,
        notes=data.notes,
    )
    await db.commit()
    return payment
