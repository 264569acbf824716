"""Shared fixtures: in-memory database, catalog factories and an API client."""

import uuid
from datetime import date
from decimal import Decimal

import pytest
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

from tourdesk.config import Settings
from tourdesk.database import get_db
from tourdesk.main import app
from tourdesk.models import (
    Activity,
    Base,
    Booking,
    ExchangeRate,
    Guide,
    HotelRoom,
    SeasonalRate,
    ServiceCategory,
    ServiceOffering,
    Supplier,
    Tenant,
    Transfer,
    Vehicle,
)

DETAIL_FACTORIES = {
    ServiceCategory.HOTEL_ROOM: lambda: HotelRoom(hotel_name="Cave Suites", room_type="Deluxe", max_occupancy=3),
    ServiceCategory.TRANSFER: lambda: Transfer(origin_zone="IST", dest_zone="Sultanahmet"),
    ServiceCategory.VEHICLE_HIRE: lambda: Vehicle(make="Fiat", model="Egea", with_driver=False),
    ServiceCategory.GUIDE_SERVICE: lambda: Guide(guide_name="Ayse", languages=["en"]),
    ServiceCategory.ACTIVITY: lambda: Activity(operator_name="Goreme Balloons", duration_minutes=60),
}


@pytest.fixture
def hotel_payload():
    return {
        "category": "HOTEL_ROOM",
        "price_per_person_double": "1500",
        "single_supplement": "800",
        "child_price_0_2": "0",
        "child_price_3_5": "400",
        "child_price_6_11": "750",
        "min_stay": 1,
    }


@pytest.fixture
def settings():
    return Settings(
        database_url="sqlite+aiosqlite://",
        cost_currency="TRY",
        sell_currency="EUR",
        default_markup_pct=Decimal("25"),
    )


@pytest.fixture
async def engine():
    engine = create_async_engine(
        "sqlite+aiosqlite://",
        poolclass=StaticPool,
        connect_args={"check_same_thread": False},
    )
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    await engine.dispose()


@pytest.fixture
def session_maker(engine):
    return async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)


@pytest.fixture
async def db(session_maker):
    async with session_maker() as session:
        yield session


@pytest.fixture
async def tenant(db):
    tenant = Tenant(name="Anatolia Tours", slug=f"anatolia-{uuid.uuid4().hex[:8]}")
    db.add(tenant)
    await db.flush()
    return tenant


@pytest.fixture
async def other_tenant(db):
    tenant = Tenant(name="Other Operator", slug=f"other-{uuid.uuid4().hex[:8]}")
    db.add(tenant)
    await db.flush()
    return tenant


@pytest.fixture
async def supplier(db, tenant):
    supplier = Supplier(tenant_id=tenant.id, name="Cappadocia Cave Suites")
    db.add(supplier)
    await db.flush()
    return supplier


@pytest.fixture
def make_offering(db, tenant, supplier):
    """Create an offering (with its detail record unless with_detail=False)."""

    async def _make(category=ServiceCategory.HOTEL_ROOM, with_detail=True, markup_pct=None, is_active=True):
        category = ServiceCategory(category)
        offering = ServiceOffering(
            tenant_id=tenant.id,
            supplier_id=supplier.id,
            category=category.value,
            title=f"{category.value.title()} offering",
            markup_pct=markup_pct,
            is_active=is_active,
        )
        db.add(offering)
        await db.flush()
        if with_detail:
            detail = DETAIL_FACTORIES[category]()
            detail.tenant_id = tenant.id
            detail.service_offering_id = offering.id
            db.add(detail)
            await db.flush()
        return offering

    return _make


@pytest.fixture
def add_rate(db, tenant):
    """Insert a seasonal rate row directly (no overlap checks)."""

    async def _add(offering, season_from, season_to, payload, is_active=True):
        rate = SeasonalRate(
            tenant_id=tenant.id,
            service_offering_id=offering.id,
            category=offering.category,
            season_from=season_from,
            season_to=season_to,
            payload=payload,
            is_active=is_active,
        )
        db.add(rate)
        await db.flush()
        return rate

    return _add


@pytest.fixture
def add_fx(db, tenant):
    async def _add(rate, rate_date, from_currency="TRY", to_currency="EUR", tenant_id=None):
        fx = ExchangeRate(
            tenant_id=tenant_id or tenant.id,
            from_currency=from_currency,
            to_currency=to_currency,
            rate=Decimal(str(rate)),
            rate_date=rate_date,
        )
        db.add(fx)
        await db.flush()
        return fx

    return _add


@pytest.fixture
def make_booking(db, tenant):
    async def _make(total_sell_eur=Decimal("0.00"), code=None):
        booking = Booking(
            tenant_id=tenant.id,
            booking_code=code or f"BK-{uuid.uuid4().hex[:6]}",
            start_date=date(2026, 7, 10),
            end_date=date(2026, 7, 15),
            locked_exchange_rate=Decimal("35.5"),
            total_cost_try=Decimal("0.00"),
            total_sell_eur=Decimal(str(total_sell_eur)),
        )
        db.add(booking)
        await db.flush()
        return booking

    return _make


@pytest.fixture
async def client(session_maker, db):
    """API client sharing the test database; `db` is committed before each request."""

    async def override_get_db():
        async with session_maker() as session:
            try:
                yield session
            except Exception:
                await session.rollback()
                raise

    app.dependency_overrides[get_db] = override_get_db
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac
    app.dependency_overrides.clear()
