"""
Cost formulas - one per service category.

Each formula takes a resolved rate payload plus trip parameters and returns the
supplier cost in the cost currency (TRY) with a breakdown. Intermediate values
stay unrounded; the total is rounded once at the end.
"""

import logging
from dataclasses import dataclass, field
from decimal import Decimal
from typing import Any, Callable, Dict, List, Optional

from tourdesk.models.service_offering import ServiceCategory
from tourdesk.services.errors import (
    AbovePaxCapacity,
    BelowMinPax,
    BelowMinStay,
    InvalidQuoteInput,
    InvalidRate,
    PaxOutOfTierRange,
)
from tourdesk.services.money import HUNDRED, apply_surcharge, quantize_money, to_decimal
from tourdesk.services.rate_payloads import (
    ActivityRatePayload,
    GuideRatePayload,
    HotelRatePayload,
    TransferRatePayload,
    VehicleRatePayload,
)

logger = logging.getLogger(__name__)

MAX_CHILD_AGE = 12  # children are 0-11; from 12 a guest is priced as an adult
FULL_DAY_HOURS = 8
DEFAULT_VEHICLE_MIN_HOURS = 4


@dataclass(frozen=True)
class FormulaResult:
    cost: Decimal
    breakdown: Dict[str, Any] = field(default_factory=dict)
    refundable_deposit: Optional[Decimal] = None


def _require_rate(value: Optional[Decimal], field_name: str, allow_zero: bool = False) -> Decimal:
    """A rate field the formula depends on must be set and positive."""
    if value is None or value < 0 or (value == 0 and not allow_zero):
        logger.error(f"Rate field {field_name} is missing or not positive ({value})")
        raise InvalidRate(
            f"Rate field '{field_name}' is missing or not positive",
            {"field": field_name, "value": None if value is None else str(value)},
        )
    return value


def _non_negative(value, name: str):
    if value is not None and value < 0:
        raise InvalidQuoteInput(f"{name} cannot be negative", {name: str(value)})
    return value


# ============================================================================
# Hotel
# ============================================================================

def _default_occupancy(adults: int) -> str:
    if adults == 1:
        return "SINGLE"
    if adults == 3:
        return "TRIPLE"
    return "DOUBLE"


def _child_band(age: Optional[int]) -> str:
    # No age given: middle band
    if age is None:
        return "3_5"
    if age < 0 or age >= MAX_CHILD_AGE:
        raise InvalidQuoteInput(
            f"Child age must be between 0 and {MAX_CHILD_AGE - 1}, got {age}",
            {"child_age": age},
        )
    if age <= 2:
        return "0_2"
    if age <= 5:
        return "3_5"
    return "6_11"


def hotel_cost(
    rate: HotelRatePayload,
    nights: int = 1,
    adults: int = 2,
    child_ages: Optional[List[int]] = None,
    children: int = 0,
    occupancy: Optional[str] = None,
) -> FormulaResult:
    """
    Per night: adults x per-person rate (+ single supplement per adult in
    SINGLE occupancy) + one age-band price per child. Total = per night x nights.
    """
    if nights is None or nights < 1:
        raise InvalidQuoteInput("nights must be at least 1", {"nights": nights})
    _non_negative(adults, "adults")
    _non_negative(children, "children")

    ages: List[Optional[int]] = list(child_ages or [])
    if children and children > len(ages):
        ages.extend([None] * (children - len(ages)))

    if adults == 0 and not ages:
        raise InvalidQuoteInput("At least one guest is required", {"adults": adults})

    occupancy = (occupancy or _default_occupancy(adults)).upper()
    if occupancy not in ("SINGLE", "DOUBLE", "TRIPLE"):
        raise InvalidQuoteInput(f"Unknown occupancy '{occupancy}'", {"occupancy": occupancy})

    if nights < rate.min_stay:
        raise BelowMinStay(nights, rate.min_stay, {"nights": nights, "min_stay": rate.min_stay})

    if occupancy == "TRIPLE":
        adult_rate = _require_rate(rate.price_per_person_triple, "price_per_person_triple")
    else:
        adult_rate = _require_rate(rate.price_per_person_double, "price_per_person_double")

    adults_per_night = adult_rate * adults

    supplement_per_night = Decimal("0")
    if occupancy == "SINGLE" and rate.single_supplement is not None:
        supplement_per_night = rate.single_supplement * adults

    child_lines = []
    children_per_night = Decimal("0")
    for age in ages:
        band = _child_band(age)
        price = _require_rate(getattr(rate, f"child_price_{band}"), f"child_price_{band}", allow_zero=True)
        children_per_night += price
        child_lines.append({"age": age, "band": band.replace("_", "-"), "price": str(price)})

    per_night = adults_per_night + supplement_per_night + children_per_night
    total = quantize_money(per_night * nights)

    breakdown = {
        "board_type": rate.board_type,
        "occupancy": occupancy,
        "nights": nights,
        "adults": adults,
        "children": len(ages),
        "adult_rate": str(adult_rate),
        "adult_cost_per_night": str(adults_per_night),
        "single_supplement_per_night": str(supplement_per_night),
        "child_costs_per_night": child_lines,
        "cost_per_night": str(quantize_money(per_night)),
        "allotment": rate.allotment,
        "release_days": rate.release_days,
    }
    return FormulaResult(cost=total, breakdown=breakdown)


# ============================================================================
# Transfer
# ============================================================================

def transfer_cost(
    rate: TransferRatePayload,
    distance_km: Optional[Decimal] = None,
    hours: Optional[Decimal] = None,
    is_night: bool = False,
    is_holiday: bool = False,
) -> FormulaResult:
    """Base + km/hour overage, then night and holiday surcharges (multiplicative)."""
    _non_negative(distance_km, "distance_km")
    _non_negative(hours, "hours")
    base = _require_rate(rate.base_cost_try, "base_cost_try")

    breakdown: Dict[str, Any] = {"pricing_model": rate.pricing_model, "base_cost": str(base)}
    subtotal = base

    if distance_km is not None and rate.included_km is not None:
        extra_km = max(Decimal("0"), to_decimal(distance_km) - rate.included_km)
        if extra_km > 0:
            extra_km_rate = _require_rate(rate.extra_km_try, "extra_km_try", allow_zero=True)
            extra_km_cost = extra_km * extra_km_rate
            breakdown["extra_km"] = {"km": str(extra_km), "cost": str(extra_km_cost)}
            subtotal += extra_km_cost

    if hours is not None and rate.included_hours is not None:
        extra_hours = max(Decimal("0"), to_decimal(hours) - rate.included_hours)
        if extra_hours > 0:
            extra_hour_rate = _require_rate(rate.extra_hour_try, "extra_hour_try", allow_zero=True)
            extra_hours_cost = extra_hours * extra_hour_rate
            breakdown["extra_hours"] = {"hours": str(extra_hours), "cost": str(extra_hours_cost)}
            subtotal += extra_hours_cost

    total = subtotal
    if is_night and rate.night_surcharge_pct:
        total = apply_surcharge(total, rate.night_surcharge_pct)
        breakdown["night_surcharge_pct"] = str(rate.night_surcharge_pct)
    if is_holiday and rate.holiday_surcharge_pct:
        total = apply_surcharge(total, rate.holiday_surcharge_pct)
        breakdown["holiday_surcharge_pct"] = str(rate.holiday_surcharge_pct)

    breakdown["waiting_time_free_minutes"] = rate.waiting_time_free
    return FormulaResult(cost=quantize_money(total), breakdown=breakdown)


# ============================================================================
# Vehicle hire
# ============================================================================

def vehicle_cost(
    rate: VehicleRatePayload,
    days: Optional[int] = None,
    hours: Optional[Decimal] = None,
    distance_km: Optional[Decimal] = None,
    with_driver: bool = False,
    one_way: bool = False,
    default_min_hours: int = DEFAULT_VEHICLE_MIN_HOURS,
) -> FormulaResult:
    """
    Daily mode when `days` is given, hourly mode otherwise; never both.
    The deposit is refundable and reported apart from the cost.
    """
    _non_negative(days, "days")
    _non_negative(hours, "hours")
    _non_negative(distance_km, "distance_km")

    breakdown: Dict[str, Any] = {}

    if days:
        daily_rate = _require_rate(rate.daily_rate_try, "daily_rate_try")
        billed_days = max(days, rate.min_rental_days)
        subtotal = daily_rate * billed_days
        breakdown["pricing_model"] = "DAILY"
        breakdown["daily"] = {"days": billed_days, "unit_cost": str(daily_rate), "cost": str(subtotal)}
        if billed_days > days:
            breakdown["note"] = f"Minimum rental of {rate.min_rental_days} days applies"

        if distance_km is not None and rate.daily_km_included is not None:
            included_km = rate.daily_km_included * billed_days
            extra_km = max(Decimal("0"), to_decimal(distance_km) - included_km)
            if extra_km > 0:
                extra_km_rate = _require_rate(rate.extra_km_try, "extra_km_try", allow_zero=True)
                extra_km_cost = extra_km * extra_km_rate
                breakdown["extra_km"] = {"km": str(extra_km), "cost": str(extra_km_cost)}
                subtotal += extra_km_cost
        driver_days = billed_days
    else:
        hourly_rate = _require_rate(rate.hourly_rate_try, "hourly_rate_try")
        min_hours = rate.min_hours or default_min_hours
        requested = to_decimal(hours) if hours else Decimal(min_hours)
        billable_hours = max(requested, Decimal(min_hours))
        subtotal = hourly_rate * billable_hours
        breakdown["pricing_model"] = "HOURLY"
        breakdown["hourly"] = {
            "hours": str(billable_hours),
            "unit_cost": str(hourly_rate),
            "cost": str(subtotal),
        }
        if requested < billable_hours:
            breakdown["note"] = f"Minimum {min_hours} hours applies"
        # Hourly hire counts as one driver day
        driver_days = 1

    if with_driver:
        driver_daily = _require_rate(rate.driver_daily_try, "driver_daily_try")
        driver_cost = driver_daily * driver_days
        breakdown["driver"] = {"days": driver_days, "cost": str(driver_cost)}
        subtotal += driver_cost

    if one_way:
        one_way_fee = _require_rate(rate.one_way_fee_try, "one_way_fee_try")
        breakdown["one_way_fee"] = str(one_way_fee)
        subtotal += one_way_fee

    deposit = None
    if rate.deposit_try:
        deposit = quantize_money(rate.deposit_try)
        breakdown["refundable_deposit"] = str(deposit)

    return FormulaResult(cost=quantize_money(subtotal), breakdown=breakdown, refundable_deposit=deposit)


# ============================================================================
# Guide
# ============================================================================

def guide_cost(
    rate: GuideRatePayload,
    days: Optional[int] = None,
    hours: Optional[Decimal] = None,
    half_day: bool = False,
    is_holiday: bool = False,
    full_day_hours: int = FULL_DAY_HOURS,
) -> FormulaResult:
    """
    Days mode: days x day cost (half-day cost when `half_day`).
    Hours mode: hours beyond a full day are billed at the overtime rate.
    """
    _non_negative(days, "days")
    _non_negative(hours, "hours")

    if not days and not hours and not half_day:
        # Nothing requested: the rate's pricing model decides
        if rate.pricing_model == "PER_DAY":
            days = 1
        else:
            hours = Decimal(rate.min_hours or full_day_hours)

    breakdown: Dict[str, Any] = {"pricing_model": rate.pricing_model}

    if days or half_day:
        quantity = days or 1
        if half_day:
            unit_cost = _require_rate(rate.half_day_cost_try, "half_day_cost_try")
            breakdown["half_days"] = {"quantity": quantity, "unit_cost": str(unit_cost)}
        else:
            unit_cost = _require_rate(rate.day_cost_try, "day_cost_try")
            breakdown["days"] = {"quantity": quantity, "unit_cost": str(unit_cost)}
        subtotal = unit_cost * quantity
    else:
        hour_cost = _require_rate(rate.hour_cost_try, "hour_cost_try")
        overtime_rate = hour_cost
        if rate.overtime_hour_try is not None:
            overtime_rate = _require_rate(rate.overtime_hour_try, "overtime_hour_try")

        requested = to_decimal(hours)
        billable = max(requested, Decimal(rate.min_hours or 0))
        regular_hours = min(billable, Decimal(full_day_hours))
        overtime_hours = billable - regular_hours

        subtotal = regular_hours * hour_cost + overtime_hours * overtime_rate
        breakdown["hours"] = {"quantity": str(regular_hours), "unit_cost": str(hour_cost)}
        if overtime_hours > 0:
            breakdown["overtime"] = {"quantity": str(overtime_hours), "unit_cost": str(overtime_rate)}
        if billable > requested:
            breakdown["note"] = f"Minimum {rate.min_hours} hours applies"

    total = subtotal
    if is_holiday and rate.holiday_surcharge_pct:
        total = apply_surcharge(total, rate.holiday_surcharge_pct)
        breakdown["holiday_surcharge_pct"] = str(rate.holiday_surcharge_pct)

    return FormulaResult(cost=quantize_money(total), breakdown=breakdown)


# ============================================================================
# Activity
# ============================================================================

def activity_cost(
    rate: ActivityRatePayload,
    pax: int = 1,
    children: int = 0,
) -> FormulaResult:
    """PER_PERSON with child discount, or PER_GROUP by inclusive pax bracket."""
    if pax is None or pax < 1:
        raise InvalidQuoteInput("pax must be at least 1", {"pax": pax})
    _non_negative(children, "children")
    if children > pax:
        raise InvalidQuoteInput("children cannot exceed pax", {"pax": pax, "children": children})

    context = {"pax": pax, "children": children}
    if rate.min_pax is not None and pax < rate.min_pax:
        raise BelowMinPax(pax, rate.min_pax, context)
    if rate.max_pax is not None and pax > rate.max_pax:
        raise AbovePaxCapacity(pax, rate.max_pax, context)

    breakdown: Dict[str, Any] = {"pricing_model": rate.pricing_model, "pax": pax, "children": children}

    if rate.pricing_model == "PER_GROUP":
        tier = rate.find_tier(pax)
        if tier is None:
            raise PaxOutOfTierRange(pax, context)
        unit_price = _require_rate(tier.price, "tiered_pricing.price")
        subtotal = unit_price * pax
        breakdown["tier"] = {"min_pax": tier.min_pax, "max_pax": tier.max_pax, "price_per_person": str(unit_price)}
    else:
        base = _require_rate(rate.base_cost_try, "base_cost_try")
        adults = pax - children
        child_unit = base * (Decimal("1") - rate.child_discount_pct / HUNDRED)
        subtotal = adults * base + children * child_unit
        breakdown["base_cost_per_person"] = str(base)
        if children:
            breakdown["child"] = {
                "quantity": children,
                "unit_cost": str(quantize_money(child_unit)),
                "discount_pct": str(rate.child_discount_pct),
            }

    return FormulaResult(cost=quantize_money(subtotal), breakdown=breakdown)


FORMULAS: Dict[ServiceCategory, Callable[..., FormulaResult]] = {
    ServiceCategory.HOTEL_ROOM: hotel_cost,
    ServiceCategory.TRANSFER: transfer_cost,
    ServiceCategory.VEHICLE_HIRE: vehicle_cost,
    ServiceCategory.GUIDE_SERVICE: guide_cost,
    ServiceCategory.ACTIVITY: activity_cost,
}
