"""
Seed script - Creates demo data for development.

Run with: python -m scripts.seed_demo
"""

import asyncio
from datetime import date
from decimal import Decimal

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from tourdesk.database import async_session_maker
from tourdesk.models.tenant import Tenant
from tourdesk.models.supplier import Supplier
from tourdesk.models.service_offering import (
    Activity,
    Guide,
    HotelRoom,
    ServiceCategory,
    ServiceOffering,
    Transfer,
    Vehicle,
)
from tourdesk.services.exchange_rate_catalog import create_exchange_rate
from tourdesk.services.rate_catalog import create_seasonal_rate
from tourdesk.services.rate_payloads import (
    ActivityRatePayload,
    GuideRatePayload,
    HotelRatePayload,
    TransferRatePayload,
    VehicleRatePayload,
)

YEAR = date.today().year


async def create_tenant(db: AsyncSession) -> Tenant:
    """Create demo tenant."""
    tenant = Tenant(
        name="Anatolia Tours Demo",
        slug="anatolia-demo",
        default_markup_pct=Decimal("25"),
    )
    db.add(tenant)
    await db.flush()
    print(f"✅ Created tenant: {tenant.name} (ID: {tenant.id})")
    return tenant


async def create_suppliers(db: AsyncSession, tenant: Tenant) -> dict:
    """Create demo suppliers."""
    suppliers = {}
    for key, name in [
        ("hotel", "Cappadocia Cave Suites"),
        ("transport", "Istanbul VIP Transfers"),
        ("rental", "Aegean Car Rental"),
        ("guides", "Licensed Guides Cooperative"),
        ("balloons", "Goreme Balloons"),
    ]:
        supplier = Supplier(tenant_id=tenant.id, name=name)
        db.add(supplier)
        suppliers[key] = supplier
    await db.flush()
    print(f"✅ Created {len(suppliers)} suppliers")
    return suppliers


async def create_offerings(db: AsyncSession, tenant: Tenant, suppliers: dict) -> dict:
    """Create one offering per category, each with its detail record."""
    catalog = [
        ("hotel", ServiceCategory.HOTEL_ROOM, "Deluxe Cave Room",
         lambda: HotelRoom(hotel_name="Cappadocia Cave Suites", room_type="Deluxe Cave", max_occupancy=3)),
        ("transport", ServiceCategory.TRANSFER, "IST Airport -> Sultanahmet",
         lambda: Transfer(origin_zone="IST Airport", dest_zone="Sultanahmet", vehicle_class="Vito")),
        ("rental", ServiceCategory.VEHICLE_HIRE, "Fiat Egea",
         lambda: Vehicle(make="Fiat", model="Egea", vehicle_class="Economy")),
        ("guides", ServiceCategory.GUIDE_SERVICE, "Ephesus guide",
         lambda: Guide(guide_name="Ayse Demir", languages=["en", "fr", "tr"])),
        ("balloons", ServiceCategory.ACTIVITY, "Sunrise balloon flight",
         lambda: Activity(operator_name="Goreme Balloons", activity_type="Balloon", duration_minutes=60)),
    ]

    offerings = {}
    for key, category, title, make_detail in catalog:
        offering = ServiceOffering(
            tenant_id=tenant.id,
            supplier_id=suppliers[key].id,
            category=category.value,
            title=title,
        )
        db.add(offering)
        await db.flush()

        detail = make_detail()
        detail.tenant_id = tenant.id
        detail.service_offering_id = offering.id
        db.add(detail)
        offerings[category] = offering

    await db.flush()
    print(f"✅ Created {len(offerings)} service offerings")
    return offerings


async def create_rates(db: AsyncSession, tenant: Tenant, offerings: dict) -> None:
    """Create low/high season rates and an exchange rate history."""
    low = (date(YEAR, 1, 1), date(YEAR, 5, 31))
    high = (date(YEAR, 6, 1), date(YEAR, 9, 30))

    payloads = {
        ServiceCategory.HOTEL_ROOM: [
            (low, HotelRatePayload(price_per_person_double=Decimal("1500"), single_supplement=Decimal("800"),
                                   child_price_0_2=Decimal("0"), child_price_3_5=Decimal("400"),
                                   child_price_6_11=Decimal("750"), min_stay=1)),
            (high, HotelRatePayload(price_per_person_double=Decimal("2100"), price_per_person_triple=Decimal("1800"),
                                    single_supplement=Decimal("1100"), child_price_0_2=Decimal("0"),
                                    child_price_3_5=Decimal("500"), child_price_6_11=Decimal("900"), min_stay=2)),
        ],
        ServiceCategory.TRANSFER: [
            (high, TransferRatePayload(base_cost_try=Decimal("2500"), included_km=Decimal("50"),
                                       extra_km_try=Decimal("30"), night_surcharge_pct=Decimal("25"),
                                       holiday_surcharge_pct=Decimal("35"))),
        ],
        ServiceCategory.VEHICLE_HIRE: [
            (high, VehicleRatePayload(daily_rate_try=Decimal("1800"), daily_km_included=Decimal("250"),
                                      extra_km_try=Decimal("6"), driver_daily_try=Decimal("2000"),
                                      one_way_fee_try=Decimal("3500"), deposit_try=Decimal("10000"),
                                      min_rental_days=2)),
        ],
        ServiceCategory.GUIDE_SERVICE: [
            (high, GuideRatePayload(day_cost_try=Decimal("4500"), half_day_cost_try=Decimal("2800"),
                                    hour_cost_try=Decimal("600"), overtime_hour_try=Decimal("900"),
                                    holiday_surcharge_pct=Decimal("50"))),
        ],
        ServiceCategory.ACTIVITY: [
            (high, ActivityRatePayload(
                pricing_model="PER_GROUP",
                min_pax=10,
                max_pax=30,
                tiered_pricing={"10-15": 100, "16-25": 130, "26-30": 150},
            )),
        ],
    }

    count = 0
    for category, seasons in payloads.items():
        for (season_from, season_to), payload in seasons:
            await create_seasonal_rate(db, tenant.id, offerings[category].id, season_from, season_to, payload)
            count += 1
    print(f"✅ Created {count} seasonal rates")

    for rate_date, rate in [
        (date(YEAR, 1, 1), Decimal("34.80")),
        (date(YEAR, 4, 1), Decimal("35.50")),
        (date(YEAR, 7, 1), Decimal("36.20")),
    ]:
        await create_exchange_rate(db, tenant.id, rate=rate, rate_date=rate_date, source="tcmb")
    print("✅ Created TRY/EUR exchange rate history")


async def seed_demo_data():
    """Main seed function."""
    print("🌱 Starting demo data seed...")

    async with async_session_maker() as db:
        # Check if data already exists
        result = await db.execute(select(Tenant).limit(1))
        if result.scalar_one_or_none():
            print("⚠️  Data already exists. Skipping seed.")
            return

        tenant = await create_tenant(db)
        suppliers = await create_suppliers(db, tenant)
        offerings = await create_offerings(db, tenant, suppliers)
        await create_rates(db, tenant, offerings)

        await db.commit()
        print("✅ Demo data seed completed!")
        print(f"\n📝 Use header X-Tenant-ID: {tenant.id}")


if __name__ == "__main__":
    asyncio.run(seed_demo_data())
