"""
Quote Calculator - turns an offering, a date and trip parameters into a Quote.

Flow: offering -> seasonal rate -> cost formula (TRY) -> exchange rate on the
service date -> markup -> sell price (EUR) and margin.

Quoting is read-only and all-or-nothing: any failure raises a PricingError
carrying the request parameters (and the rate id once resolved).
"""

import logging
import uuid
from datetime import date
from decimal import Decimal
from typing import Any, Dict, List, Optional, Sequence

from pydantic import BaseModel, ConfigDict, Field, ValidationError
from sqlalchemy.ext.asyncio import AsyncSession

from tourdesk.config import Settings, get_settings
from tourdesk.models.exchange_rate import ExchangeRate
from tourdesk.models.seasonal_rate import SeasonalRate
from tourdesk.models.service_offering import ServiceCategory, ServiceOffering
from tourdesk.models.tenant import Tenant
from tourdesk.services.cost_formulas import (
    FormulaResult,
    activity_cost,
    guide_cost,
    hotel_cost,
    transfer_cost,
    vehicle_cost,
)
from tourdesk.services.errors import CategoryMismatch, InvalidRate, PricingError
from tourdesk.services.exchange_rate_resolver import load_rate_history, pick_exchange_rate
from tourdesk.services.money import calculate_margin, price_from_cost, quantize_money
from tourdesk.services.rate_payloads import parse_rate_payload
from tourdesk.services.seasonal_rate_resolver import (
    check_rate_category,
    load_active_rates,
    load_offering,
    pick_seasonal_rate,
)

logger = logging.getLogger(__name__)


# ============================================================================
# Value objects
# ============================================================================

class Money(BaseModel):
    model_config = ConfigDict(frozen=True)

    amount: Decimal
    currency: str


class QuoteRequest(BaseModel):
    """Trip parameters for one offering on one date. Unused fields are ignored per category."""

    model_config = ConfigDict(frozen=True)

    service_offering_id: int
    service_date: date
    category: Optional[ServiceCategory] = None

    # Hotel
    nights: Optional[int] = Field(default=None, ge=1)
    adults: Optional[int] = Field(default=None, ge=0)
    child_ages: Optional[List[int]] = None
    occupancy: Optional[str] = Field(default=None, pattern="^(SINGLE|DOUBLE|TRIPLE)$")

    # Hotel / activity
    pax: Optional[int] = Field(default=None, ge=1)
    children: int = Field(default=0, ge=0)

    # Transfer / vehicle / guide
    distance_km: Optional[Decimal] = Field(default=None, ge=0)
    hours: Optional[Decimal] = Field(default=None, ge=0)
    days: Optional[int] = Field(default=None, ge=1)
    half_day: bool = False
    is_night: bool = False
    is_holiday: bool = False
    with_driver: Optional[bool] = None
    one_way: bool = False

    def trace_context(self) -> Dict[str, Any]:
        return self.model_dump(mode="json", exclude_none=True, exclude_defaults=True) | {
            "service_offering_id": self.service_offering_id,
            "service_date": self.service_date.isoformat(),
        }


class Quote(BaseModel):
    model_config = ConfigDict(frozen=True)

    service_offering_id: int
    category: ServiceCategory
    service_date: date
    rate_id: int
    exchange_rate_id: Optional[int] = None

    cost: Money
    sell_price: Money
    exchange_rate_used: Decimal
    markup_pct: Decimal
    margin_pct: Decimal
    refundable_deposit: Optional[Money] = None
    breakdown: Dict[str, Any] = Field(default_factory=dict)


# ============================================================================
# Calculator
# ============================================================================

class QuoteCalculator:
    """
    Pure quoting core: works on already-loaded rows, no database access.
    """

    def __init__(
        self,
        cost_currency: str = "TRY",
        sell_currency: str = "EUR",
        guide_full_day_hours: int = 8,
        vehicle_default_min_hours: int = 4,
    ):
        self.cost_currency = cost_currency
        self.sell_currency = sell_currency
        self.guide_full_day_hours = guide_full_day_hours
        self.vehicle_default_min_hours = vehicle_default_min_hours

    @classmethod
    def from_settings(cls, settings: Settings) -> "QuoteCalculator":
        return cls(
            cost_currency=settings.cost_currency,
            sell_currency=settings.sell_currency,
            guide_full_day_hours=settings.guide_full_day_hours,
            vehicle_default_min_hours=settings.vehicle_default_min_hours,
        )

    def quote(
        self,
        offering: ServiceOffering,
        rates: Sequence[SeasonalRate],
        exchange_rates: Sequence[ExchangeRate],
        request: QuoteRequest,
        markup_pct: Decimal,
    ) -> Quote:
        context = request.trace_context()
        try:
            if request.category is not None and ServiceCategory(request.category) != offering.service_category:
                raise CategoryMismatch(ServiceCategory(request.category).value, offering.category)

            rate = pick_seasonal_rate(rates, request.service_date, offering.id)
            context["rate_id"] = rate.id
            check_rate_category(rate, offering)

            result = self._compute_cost(offering, rate, request)

            context.update(from_currency=self.cost_currency, to_currency=self.sell_currency)
            fx = pick_exchange_rate(exchange_rates, request.service_date)
            context["exchange_rate_id"] = fx.id

            if markup_pct < 0:
                logger.error(f"Negative markup {markup_pct} configured for service offering {offering.id}")
                raise InvalidRate("Markup percentage cannot be negative", {"markup_pct": str(markup_pct)})

            sell_price = price_from_cost(result.cost, markup_pct, fx.rate)
            margin_pct = calculate_margin(sell_price, result.cost, fx.rate)
        except PricingError as e:
            e.with_context(**context)
            raise

        deposit = None
        if result.refundable_deposit is not None:
            deposit = Money(amount=result.refundable_deposit, currency=self.cost_currency)

        return Quote(
            service_offering_id=offering.id,
            category=offering.service_category,
            service_date=request.service_date,
            rate_id=rate.id,
            exchange_rate_id=fx.id,
            cost=Money(amount=result.cost, currency=self.cost_currency),
            sell_price=Money(amount=sell_price, currency=self.sell_currency),
            exchange_rate_used=fx.rate,
            markup_pct=quantize_money(markup_pct),
            margin_pct=margin_pct,
            refundable_deposit=deposit,
            breakdown=result.breakdown,
        )

    def _compute_cost(self, offering: ServiceOffering, rate: SeasonalRate, request: QuoteRequest) -> FormulaResult:
        try:
            payload = parse_rate_payload(rate.payload)
        except ValidationError as e:
            logger.error(f"Seasonal rate {rate.id} has an invalid payload: {e}")
            raise InvalidRate(f"Seasonal rate {rate.id} has an invalid payload", {"rate_id": rate.id}) from e

        category = offering.service_category

        if category == ServiceCategory.HOTEL_ROOM:
            child_count = max(request.children, len(request.child_ages or []))
            if request.adults is not None:
                adults = request.adults
            else:
                adults = max((request.pax or 2) - child_count, 0)
            return hotel_cost(
                payload,
                nights=request.nights or 1,
                adults=adults,
                child_ages=request.child_ages,
                children=child_count,
                occupancy=request.occupancy,
            )

        if category == ServiceCategory.TRANSFER:
            return transfer_cost(
                payload,
                distance_km=request.distance_km,
                hours=request.hours,
                is_night=request.is_night,
                is_holiday=request.is_holiday,
            )

        if category == ServiceCategory.VEHICLE_HIRE:
            with_driver = request.with_driver
            if with_driver is None:
                with_driver = bool(offering.vehicle and offering.vehicle.with_driver)
            return vehicle_cost(
                payload,
                days=request.days,
                hours=request.hours,
                distance_km=request.distance_km,
                with_driver=with_driver,
                one_way=request.one_way,
                default_min_hours=self.vehicle_default_min_hours,
            )

        if category == ServiceCategory.GUIDE_SERVICE:
            return guide_cost(
                payload,
                days=request.days,
                hours=request.hours,
                half_day=request.half_day,
                is_holiday=request.is_holiday,
                full_day_hours=self.guide_full_day_hours,
            )

        return activity_cost(payload, pax=request.pax or 1, children=request.children)


# ============================================================================
# Database-backed entry point
# ============================================================================

async def resolve_markup_pct(
    db: AsyncSession,
    tenant_id: uuid.UUID,
    offering: ServiceOffering,
    settings: Optional[Settings] = None,
) -> Decimal:
    """Offering markup, else tenant default, else the configured default."""
    if offering.markup_pct is not None:
        return offering.markup_pct

    tenant = await db.get(Tenant, tenant_id)
    if tenant is not None and tenant.default_markup_pct is not None:
        return tenant.default_markup_pct

    return (settings or get_settings()).default_markup_pct


async def get_quote(
    db: AsyncSession,
    tenant_id: uuid.UUID,
    request: QuoteRequest,
    settings: Optional[Settings] = None,
) -> Quote:
    """Load everything the quote needs and run the calculator."""
    settings = settings or get_settings()
    calculator = QuoteCalculator.from_settings(settings)

    try:
        offering = await load_offering(db, tenant_id, request.service_offering_id, request.category)
    except PricingError as e:
        e.with_context(**request.trace_context())
        raise

    rates = await load_active_rates(db, tenant_id, offering.id, request.service_date)
    exchange_rates = await load_rate_history(db, tenant_id, settings.cost_currency, settings.sell_currency)
    markup_pct = await resolve_markup_pct(db, tenant_id, offering, settings)

    quote = calculator.quote(offering, rates, exchange_rates, request, markup_pct)
    logger.info(
        f"Quoted offering {offering.id} ({offering.category}) for {request.service_date}: "
        f"{quote.cost.amount} {quote.cost.currency} -> {quote.sell_price.amount} {quote.sell_price.currency} "
        f"(rate {quote.rate_id}, fx {quote.exchange_rate_used}, markup {quote.markup_pct}%)"
    )
    return quote
