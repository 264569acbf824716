"""Bookings, frozen quoted items, manual items and re-quotes."""

from datetime import date
from decimal import Decimal

import pytest

from tourdesk.services.booking_service import (
    create_booking,
    create_booking_item_from_quote,
    create_manual_booking_item,
    get_booking,
    requote_booking_item,
)
from tourdesk.services.errors import (
    DuplicateBookingCode,
    InvalidInputError,
    NoApplicableRate,
    NonPositiveAmount,
    PaymentExceedsBalance,
)
from tourdesk.services.payment_ledger import record_payment
from tourdesk.services.pricing_snapshot import PricingSnapshot
from tourdesk.services.quote_calculator import QuoteRequest

SERVICE_DATE = date(2026, 7, 10)


@pytest.fixture
async def hotel(make_offering, add_rate, add_fx, hotel_payload):
    offering = await make_offering()
    await add_rate(offering, date(2026, 6, 1), date(2026, 8, 31), hotel_payload)
    await add_fx("35.5", date(2026, 7, 1))
    return offering


@pytest.fixture
async def booking(db, tenant, settings):
    return await create_booking(
        db,
        tenant.id,
        "TR-2026-0001",
        date(2026, 7, 9),
        date(2026, 7, 14),
        client_name="Dupont family",
        locked_exchange_rate=Decimal("35.5"),
        settings=settings,
    )


def hotel_request(offering):
    return QuoteRequest(service_offering_id=offering.id, service_date=SERVICE_DATE, nights=3, adults=2)


class TestCreateBooking:
    async def test_locks_todays_exchange_rate(self, db, tenant, add_fx, settings):
        await add_fx("33.0", date(2020, 1, 1))

        booking = await create_booking(db, tenant.id, "TR-1", date(2026, 7, 9), date(2026, 7, 14), settings=settings)

        assert booking.locked_exchange_rate == Decimal("33.0")
        assert booking.total_sell_eur == Decimal("0.00")
        assert booking.status == "PENDING"

    async def test_duplicate_code(self, db, tenant, booking, settings):
        with pytest.raises(DuplicateBookingCode):
            await create_booking(
                db, tenant.id, "TR-2026-0001", date(2026, 8, 1), date(2026, 8, 2),
                locked_exchange_rate=Decimal("35.5"), settings=settings,
            )

    async def test_end_before_start(self, db, tenant, settings):
        with pytest.raises(InvalidInputError):
            await create_booking(
                db, tenant.id, "TR-2", date(2026, 7, 14), date(2026, 7, 9),
                locked_exchange_rate=Decimal("35.5"), settings=settings,
            )


class TestQuotedItems:
    async def test_item_freezes_quote(self, db, tenant, hotel, booking, settings):
        item = await create_booking_item_from_quote(db, tenant.id, booking.id, hotel_request(hotel), settings=settings)

        assert item.item_type == "HOTEL"
        assert item.unit_cost_try == Decimal("9000.00")
        assert item.unit_price_eur == Decimal("316.90")

        snapshot = PricingSnapshot.from_json(item.pricing_snapshot_json)
        assert snapshot.quote.sell_price.amount == Decimal("316.90")
        assert snapshot.request.nights == 3

        assert booking.total_cost_try == Decimal("9000.00")
        assert booking.total_sell_eur == Decimal("316.90")

    async def test_later_rate_changes_do_not_touch_item(self, db, tenant, hotel, booking, add_fx, settings):
        await create_booking_item_from_quote(db, tenant.id, booking.id, hotel_request(hotel), settings=settings)
        await add_fx("30.0", date(2026, 7, 5))

        reloaded = await get_booking(db, tenant.id, booking.id)

        assert reloaded.items[0].unit_price_eur == Decimal("316.90")
        assert reloaded.total_sell_eur == Decimal("316.90")

    async def test_failed_quote_adds_nothing(self, db, tenant, hotel, booking, settings):
        request = QuoteRequest(service_offering_id=hotel.id, service_date=date(2026, 12, 24), nights=1)

        with pytest.raises(NoApplicableRate):
            await create_booking_item_from_quote(db, tenant.id, booking.id, request, settings=settings)

        reloaded = await get_booking(db, tenant.id, booking.id)
        assert reloaded.items == []


class TestRequote:
    async def test_requote_replays_stored_request(self, db, tenant, hotel, booking, add_fx, settings):
        item = await create_booking_item_from_quote(db, tenant.id, booking.id, hotel_request(hotel), settings=settings)
        await add_fx("30.0", date(2026, 7, 5))

        item = await requote_booking_item(db, tenant.id, booking.id, item.id, settings=settings)

        assert item.unit_price_eur == Decimal("375.00")
        assert booking.total_sell_eur == Decimal("375.00")
        snapshot = PricingSnapshot.from_json(item.pricing_snapshot_json)
        assert snapshot.previous["unit_price_eur"] == "316.90"
        assert snapshot.quote.exchange_rate_used == Decimal("30.0")

    async def test_requote_below_paid_amount_is_refused(self, db, tenant, hotel, booking, add_fx, settings):
        item = await create_booking_item_from_quote(db, tenant.id, booking.id, hotel_request(hotel), settings=settings)
        await record_payment(db, tenant.id, booking.id, Decimal("316.90"), status="COMPLETED")
        await add_fx("40.0", date(2026, 7, 5))

        with pytest.raises(PaymentExceedsBalance) as exc_info:
            await requote_booking_item(db, tenant.id, booking.id, item.id, settings=settings)

        assert exc_info.value.context["new_total_sell_eur"] == "281.25"
        assert item.unit_price_eur == Decimal("316.90")
        assert booking.total_sell_eur == Decimal("316.90")

    async def test_manual_item_cannot_be_requoted(self, db, tenant, booking, settings):
        item = await create_manual_booking_item(
            db, tenant.id, booking.id, "OTHER", Decimal("1000"), Decimal("40"),
        )

        with pytest.raises(InvalidInputError):
            await requote_booking_item(db, tenant.id, booking.id, item.id, settings=settings)


class TestManualItems:
    async def test_quantity_must_be_positive(self, db, tenant, booking):
        with pytest.raises(NonPositiveAmount):
            await create_manual_booking_item(db, tenant.id, booking.id, "OTHER", Decimal("1000"), Decimal("40"), qty=0)

    async def test_totals_include_quantity(self, db, tenant, hotel, booking, settings):
        await create_booking_item_from_quote(db, tenant.id, booking.id, hotel_request(hotel), settings=settings)

        item = await create_manual_booking_item(
            db, tenant.id, booking.id, "other", Decimal("1000"), Decimal("40"), qty=2, description="Museum pass",
        )

        assert item.item_type == "OTHER"
        assert item.pricing_snapshot_json is None
        assert booking.total_cost_try == Decimal("11000.00")
        assert booking.total_sell_eur == Decimal("396.90")
