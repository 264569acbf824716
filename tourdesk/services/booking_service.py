"""
Booking service - bookings, their line items and totals.

A booking locks its exchange rate at creation. Items are either frozen from a
quote (with a pricing snapshot) or entered manually; the booking's totals are
recomputed from its items whenever an item is added or re-quoted.
"""

import logging
import uuid
from datetime import date
from decimal import Decimal
from typing import Optional

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from tourdesk.config import Settings, get_settings
from tourdesk.models.booking import Booking, BookingItem
from tourdesk.models.service_offering import ServiceCategory
from tourdesk.services.errors import (
    BookingItemNotFound,
    BookingNotFound,
    DuplicateBookingCode,
    InvalidInputError,
    NonPositiveAmount,
    PaymentExceedsBalance,
)
from tourdesk.services.exchange_rate_resolver import resolve_exchange_rate
from tourdesk.services.money import ZERO, quantize_money
from tourdesk.services.payment_ledger import lock_booking, sum_payments
from tourdesk.services.pricing_snapshot import PricingSnapshot
from tourdesk.services.quote_calculator import QuoteRequest, get_quote

logger = logging.getLogger(__name__)

ITEM_TYPES = {
    ServiceCategory.HOTEL_ROOM: "HOTEL",
    ServiceCategory.TRANSFER: "TRANSFER",
    ServiceCategory.VEHICLE_HIRE: "VEHICLE",
    ServiceCategory.GUIDE_SERVICE: "GUIDE",
    ServiceCategory.ACTIVITY: "ACTIVITY",
}


# ============================================================================
# Bookings
# ============================================================================

async def create_booking(
    db: AsyncSession,
    tenant_id: uuid.UUID,
    booking_code: str,
    start_date: date,
    end_date: date,
    client_name: Optional[str] = None,
    notes: Optional[str] = None,
    locked_exchange_rate: Optional[Decimal] = None,
    settings: Optional[Settings] = None,
) -> Booking:
    """
    Create a booking. Without an explicit rate, the cost->sell rate effective
    today is locked.
    """
    settings = settings or get_settings()

    if end_date < start_date:
        raise InvalidInputError(
            "end_date must be on or after start_date",
            {"start_date": start_date.isoformat(), "end_date": end_date.isoformat()},
        )

    result = await db.execute(
        select(Booking.id).where(Booking.tenant_id == tenant_id, Booking.booking_code == booking_code)
    )
    if result.first() is not None:
        raise DuplicateBookingCode(booking_code)

    if locked_exchange_rate is None:
        fx = await resolve_exchange_rate(
            db, tenant_id, settings.cost_currency, settings.sell_currency, date.today()
        )
        locked_exchange_rate = fx.rate
    elif locked_exchange_rate <= 0:
        raise InvalidInputError(
            "locked_exchange_rate must be positive",
            {"locked_exchange_rate": str(locked_exchange_rate)},
        )

    booking = Booking(
        tenant_id=tenant_id,
        booking_code=booking_code,
        client_name=client_name,
        start_date=start_date,
        end_date=end_date,
        locked_exchange_rate=locked_exchange_rate,
        total_cost_try=ZERO,
        total_sell_eur=ZERO,
        notes=notes,
    )
    db.add(booking)
    await db.flush()

    logger.info(f"Created booking {booking.booking_code} (id={booking.id}) locked at {locked_exchange_rate}")
    return booking


async def get_booking(db: AsyncSession, tenant_id: uuid.UUID, booking_id: int) -> Booking:
    """Booking with its items and payments loaded."""
    result = await db.execute(
        select(Booking)
        .where(Booking.id == booking_id, Booking.tenant_id == tenant_id)
        .options(selectinload(Booking.items), selectinload(Booking.payments))
        .execution_options(populate_existing=True)
    )
    booking = result.scalar_one_or_none()
    if booking is None:
        raise BookingNotFound(booking_id)
    return booking


async def item_totals(db: AsyncSession, booking_id: int) -> tuple[Decimal, Decimal]:
    result = await db.execute(
        select(
            func.coalesce(func.sum(BookingItem.unit_cost_try * BookingItem.qty), 0),
            func.coalesce(func.sum(BookingItem.unit_price_eur * BookingItem.qty), 0),
        ).where(BookingItem.booking_id == booking_id)
    )
    total_cost, total_sell = result.one()
    return quantize_money(total_cost), quantize_money(total_sell)


async def recompute_totals(db: AsyncSession, booking: Booking) -> Booking:
    """Set the booking totals to the sum of its item lines."""
    await db.flush()
    booking.total_cost_try, booking.total_sell_eur = await item_totals(db, booking.id)
    await db.flush()
    return booking


# ============================================================================
# Booking items
# ============================================================================

async def create_booking_item_from_quote(
    db: AsyncSession,
    tenant_id: uuid.UUID,
    booking_id: int,
    request: QuoteRequest,
    description: Optional[str] = None,
    settings: Optional[Settings] = None,
) -> BookingItem:
    """
    Quote an offering and freeze the result on a new booking item.
    Nothing is written unless the whole quote succeeds.
    """
    booking = await lock_booking(db, tenant_id, booking_id)
    quote = await get_quote(db, tenant_id, request, settings)
    snapshot = PricingSnapshot.capture(quote, request=request)

    item = BookingItem(
        tenant_id=tenant_id,
        booking_id=booking.id,
        service_offering_id=quote.service_offering_id,
        item_type=ITEM_TYPES[quote.category],
        description=description or f"{quote.category.value} on {quote.service_date.isoformat()}",
        qty=1,
        unit_cost_try=quote.cost.amount,
        unit_price_eur=quote.sell_price.amount,
        pricing_snapshot_json=snapshot.to_json(),
    )
    db.add(item)
    await recompute_totals(db, booking)

    logger.info(
        f"Added {item.item_type} item {item.id} to booking {booking.booking_code}: "
        f"{item.unit_cost_try} TRY / {item.unit_price_eur} EUR (rate {quote.rate_id})"
    )
    return item


async def create_manual_booking_item(
    db: AsyncSession,
    tenant_id: uuid.UUID,
    booking_id: int,
    item_type: str,
    unit_cost_try: Decimal,
    unit_price_eur: Decimal,
    qty: int = 1,
    description: Optional[str] = None,
    service_offering_id: Optional[int] = None,
) -> BookingItem:
    """A line entered by hand: caller-supplied prices, no snapshot."""
    if qty is None or qty <= 0:
        raise NonPositiveAmount(Decimal(qty or 0), {"qty": qty})
    if unit_cost_try < 0 or unit_price_eur < 0:
        raise InvalidInputError(
            "Unit cost and price cannot be negative",
            {"unit_cost_try": str(unit_cost_try), "unit_price_eur": str(unit_price_eur)},
        )

    booking = await lock_booking(db, tenant_id, booking_id)
    item = BookingItem(
        tenant_id=tenant_id,
        booking_id=booking.id,
        service_offering_id=service_offering_id,
        item_type=item_type.upper(),
        description=description,
        qty=qty,
        unit_cost_try=quantize_money(unit_cost_try),
        unit_price_eur=quantize_money(unit_price_eur),
        pricing_snapshot_json=None,
    )
    db.add(item)
    await recompute_totals(db, booking)

    logger.info(f"Added manual {item.item_type} item {item.id} to booking {booking.booking_code}")
    return item


async def requote_booking_item(
    db: AsyncSession,
    tenant_id: uuid.UUID,
    booking_id: int,
    item_id: int,
    request: Optional[QuoteRequest] = None,
    settings: Optional[Settings] = None,
) -> BookingItem:
    """
    Replace an item's snapshot and prices with a fresh quote.

    Without `request`, the request stored in the current snapshot is reused.
    Refused when committed payments would exceed the new booking total.
    """
    booking = await lock_booking(db, tenant_id, booking_id)

    result = await db.execute(
        select(BookingItem).where(
            BookingItem.id == item_id,
            BookingItem.booking_id == booking.id,
            BookingItem.tenant_id == tenant_id,
        )
    )
    item = result.scalar_one_or_none()
    if item is None:
        raise BookingItemNotFound(item_id)
    if item.pricing_snapshot_json is None:
        raise InvalidInputError(
            f"Booking item {item_id} was entered manually and cannot be re-quoted",
            {"booking_item_id": item_id},
        )

    previous = PricingSnapshot.from_json(item.pricing_snapshot_json)
    request = request or previous.request
    if request is None:
        raise InvalidInputError(
            f"Booking item {item_id} has no stored quote request; provide one",
            {"booking_item_id": item_id},
        )

    quote = await get_quote(db, tenant_id, request, settings)

    new_total = quantize_money(booking.total_sell_eur - item.line_price_eur + quote.sell_price.amount * item.qty)
    committed = await sum_payments(db, booking.id)
    if committed > new_total:
        logger.warning(
            f"Re-quote of item {item.id} refused: booking {booking.booking_code} total would drop "
            f"to {new_total} EUR below {committed} EUR committed"
        )
        raise PaymentExceedsBalance(
            committed,
            new_total,
            {"booking_item_id": item.id, "committed_eur": str(committed), "new_total_sell_eur": str(new_total)},
            message=f"Committed payments of {committed} EUR exceed the re-quoted total of {new_total} EUR",
        )

    snapshot = PricingSnapshot.capture(
        quote,
        request=request,
        previous={
            "quoted_at": previous.quoted_at.isoformat(),
            "unit_cost_try": str(item.unit_cost_try),
            "unit_price_eur": str(item.unit_price_eur),
            "rate_id": previous.quote.rate_id,
        },
    )
    item.service_offering_id = quote.service_offering_id
    item.unit_cost_try = quote.cost.amount
    item.unit_price_eur = quote.sell_price.amount
    item.pricing_snapshot_json = snapshot.to_json()
    await recompute_totals(db, booking)

    logger.info(
        f"Re-quoted item {item.id} on booking {booking.booking_code}: "
        f"{snapshot.previous['unit_price_eur']} -> {item.unit_price_eur} EUR"
    )
    return item
