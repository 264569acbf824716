"""Category cost formulas (amounts in TRY)."""

from decimal import Decimal

import pytest
from pydantic import ValidationError

from tourdesk.services.cost_formulas import (
    activity_cost,
    guide_cost,
    hotel_cost,
    transfer_cost,
    vehicle_cost,
)
from tourdesk.services.errors import (
    AbovePaxCapacity,
    BelowMinPax,
    BelowMinStay,
    InvalidQuoteInput,
    InvalidRate,
    PaxOutOfTierRange,
)
from tourdesk.services.rate_payloads import (
    ActivityRatePayload,
    GuideRatePayload,
    HotelRatePayload,
    TransferRatePayload,
    VehicleRatePayload,
)


# ============================================================================
# Hotel
# ============================================================================

HOTEL = HotelRatePayload(
    price_per_person_double="1500",
    single_supplement="800",
    child_price_0_2="0",
    child_price_3_5="400",
    child_price_6_11="750",
)


class TestHotelCost:
    def test_two_adults_three_nights(self):
        result = hotel_cost(HOTEL, nights=3, adults=2)
        assert result.cost == Decimal("9000.00")
        assert result.breakdown["occupancy"] == "DOUBLE"
        assert result.breakdown["cost_per_night"] == "3000.00"

    def test_single_occupancy_adds_supplement(self):
        assert hotel_cost(HOTEL, nights=2, adults=1).cost == Decimal("4600.00")

    def test_children_priced_by_age_band(self):
        """Ages 1, 4 and 8 fall in the 0-2, 3-5 and 6-11 bands."""
        result = hotel_cost(HOTEL, nights=2, adults=2, child_ages=[1, 4, 8])
        assert result.cost == Decimal("8300.00")
        assert [c["band"] for c in result.breakdown["child_costs_per_night"]] == ["0-2", "3-5", "6-11"]

    def test_child_without_age_uses_middle_band(self):
        assert hotel_cost(HOTEL, nights=1, adults=2, children=1).cost == Decimal("3400.00")

    @pytest.mark.parametrize("age", [12, -1])
    def test_child_age_out_of_range(self, age):
        with pytest.raises(InvalidQuoteInput):
            hotel_cost(HOTEL, nights=1, adults=2, child_ages=[age])

    def test_below_min_stay(self):
        rate = HOTEL.model_copy(update={"min_stay": 3})
        with pytest.raises(BelowMinStay) as exc_info:
            hotel_cost(rate, nights=2, adults=2)
        assert exc_info.value.context == {"nights": 2, "min_stay": 3}

    def test_triple_occupancy_uses_triple_rate(self):
        rate = HOTEL.model_copy(update={"price_per_person_triple": Decimal("1200")})
        result = hotel_cost(rate, nights=1, adults=3)
        assert result.breakdown["occupancy"] == "TRIPLE"
        assert result.cost == Decimal("3600.00")

    def test_triple_without_triple_rate_is_invalid(self):
        with pytest.raises(InvalidRate):
            hotel_cost(HOTEL, nights=1, adults=3)

    def test_missing_child_band_price_is_invalid(self):
        rate = HotelRatePayload(price_per_person_double="1500")
        with pytest.raises(InvalidRate) as exc_info:
            hotel_cost(rate, nights=1, adults=2, child_ages=[8])
        assert exc_info.value.context["field"] == "child_price_6_11"

    def test_needs_a_guest(self):
        with pytest.raises(InvalidQuoteInput):
            hotel_cost(HOTEL, nights=1, adults=0)


# ============================================================================
# Transfer
# ============================================================================

TRANSFER = TransferRatePayload(
    base_cost_try="2500",
    included_km="50",
    extra_km_try="30",
    night_surcharge_pct="25",
    holiday_surcharge_pct="35",
)


class TestTransferCost:
    def test_base_cost(self):
        assert transfer_cost(TRANSFER).cost == Decimal("2500.00")

    def test_night_and_holiday_surcharges_compound(self):
        """2500 x 1.25 x 1.35"""
        assert transfer_cost(TRANSFER, is_night=True, is_holiday=True).cost == Decimal("4218.75")

    def test_extra_km_beyond_included(self):
        result = transfer_cost(TRANSFER, distance_km=Decimal("80"))
        assert result.cost == Decimal("3400.00")
        assert result.breakdown["extra_km"] == {"km": "30", "cost": "900"}

    def test_no_overage_without_included_km(self):
        rate = TransferRatePayload(base_cost_try="2500", extra_km_try="30")
        assert transfer_cost(rate, distance_km=Decimal("500")).cost == Decimal("2500.00")

    def test_overage_without_extra_km_rate_is_invalid(self):
        rate = TransferRatePayload(base_cost_try="2500", included_km="50")
        with pytest.raises(InvalidRate):
            transfer_cost(rate, distance_km=Decimal("80"))

    def test_negative_distance(self):
        with pytest.raises(InvalidQuoteInput):
            transfer_cost(TRANSFER, distance_km=Decimal("-1"))


# ============================================================================
# Vehicle hire
# ============================================================================

VEHICLE = VehicleRatePayload(
    daily_rate_try="1800",
    daily_km_included="250",
    extra_km_try="6",
    driver_daily_try="2000",
    one_way_fee_try="3500",
)


class TestVehicleCost:
    def test_daily_with_extra_km(self):
        """2 days x 1800 + (600 - 500 km) x 6"""
        assert vehicle_cost(VEHICLE, days=2, distance_km=Decimal("600")).cost == Decimal("4200.00")

    def test_driver_is_billed_per_day(self):
        result = vehicle_cost(VEHICLE, days=2, distance_km=Decimal("600"), with_driver=True)
        assert result.cost == Decimal("8200.00")

    def test_one_way_fee(self):
        result = vehicle_cost(VEHICLE, days=2, distance_km=Decimal("600"), with_driver=True, one_way=True)
        assert result.cost == Decimal("11700.00")

    def test_deposit_is_reported_apart_from_cost(self):
        rate = VEHICLE.model_copy(update={"deposit_try": Decimal("10000")})
        result = vehicle_cost(rate, days=2)
        assert result.cost == Decimal("3600.00")
        assert result.refundable_deposit == Decimal("10000.00")

    def test_min_rental_days(self):
        rate = VEHICLE.model_copy(update={"min_rental_days": 3})
        result = vehicle_cost(rate, days=1)
        assert result.cost == Decimal("5400.00")
        assert result.breakdown["daily"]["days"] == 3

    def test_hourly_defaults_to_minimum_hours(self):
        rate = VehicleRatePayload(hourly_rate_try="500")
        assert vehicle_cost(rate).cost == Decimal("2000.00")
        assert vehicle_cost(rate, hours=Decimal("2")).cost == Decimal("2000.00")

    def test_hourly_beyond_minimum(self):
        rate = VehicleRatePayload(hourly_rate_try="500")
        assert vehicle_cost(rate, hours=Decimal("6")).cost == Decimal("3000.00")

    def test_daily_mode_without_daily_rate_is_invalid(self):
        rate = VehicleRatePayload(hourly_rate_try="500")
        with pytest.raises(InvalidRate):
            vehicle_cost(rate, days=2)

    def test_driver_without_driver_rate_is_invalid(self):
        rate = VehicleRatePayload(daily_rate_try="1800")
        with pytest.raises(InvalidRate):
            vehicle_cost(rate, days=1, with_driver=True)


# ============================================================================
# Guide
# ============================================================================

GUIDE = GuideRatePayload(
    day_cost_try="4500",
    half_day_cost_try="2800",
    hour_cost_try="600",
    overtime_hour_try="900",
    holiday_surcharge_pct="50",
)


class TestGuideCost:
    def test_days(self):
        assert guide_cost(GUIDE, days=2).cost == Decimal("9000.00")

    def test_half_day(self):
        assert guide_cost(GUIDE, half_day=True).cost == Decimal("2800.00")

    def test_overtime_beyond_full_day(self):
        """8 h x 600 + 2 h x 900"""
        result = guide_cost(GUIDE, hours=Decimal("10"))
        assert result.cost == Decimal("6600.00")
        assert result.breakdown["overtime"]["quantity"] == "2"

    def test_overtime_falls_back_to_hour_cost(self):
        rate = GUIDE.model_copy(update={"overtime_hour_try": None})
        assert guide_cost(rate, hours=Decimal("10")).cost == Decimal("6000.00")

    def test_holiday_surcharge(self):
        assert guide_cost(GUIDE, days=1, is_holiday=True).cost == Decimal("6750.00")

    def test_defaults_follow_pricing_model(self):
        assert guide_cost(GUIDE).cost == Decimal("4500.00")
        per_hour = GUIDE.model_copy(update={"pricing_model": "PER_HOUR"})
        assert guide_cost(per_hour).cost == Decimal("4800.00")

    def test_missing_day_cost_is_invalid(self):
        rate = GuideRatePayload(hour_cost_try="600")
        with pytest.raises(InvalidRate):
            guide_cost(rate, days=1)


# ============================================================================
# Activity
# ============================================================================

GROUP_ACTIVITY = ActivityRatePayload(
    pricing_model="PER_GROUP",
    min_pax=10,
    max_pax=30,
    tiered_pricing={"10-15": 100, "16-25": 130, "26-30": 150},
)


class TestActivityCost:
    def test_per_person_with_child_discount(self):
        rate = ActivityRatePayload(base_cost_try="1000", child_discount_pct="50")
        assert activity_cost(rate, pax=4, children=2).cost == Decimal("3000.00")

    def test_group_tier_price_is_per_person(self):
        result = activity_cost(GROUP_ACTIVITY, pax=12)
        assert result.cost == Decimal("1200.00")
        assert result.breakdown["tier"]["min_pax"] == 10

    def test_tier_bounds_are_inclusive(self):
        assert activity_cost(GROUP_ACTIVITY, pax=16).cost == Decimal("2080.00")
        assert activity_cost(GROUP_ACTIVITY, pax=30).cost == Decimal("4500.00")

    def test_below_min_pax(self):
        with pytest.raises(BelowMinPax):
            activity_cost(GROUP_ACTIVITY, pax=9)

    def test_above_capacity(self):
        with pytest.raises(AbovePaxCapacity):
            activity_cost(GROUP_ACTIVITY, pax=31)

    def test_gap_between_tiers(self):
        rate = ActivityRatePayload(pricing_model="PER_GROUP", tiered_pricing={"10-15": 100, "20-30": 130})
        with pytest.raises(PaxOutOfTierRange):
            activity_cost(rate, pax=17)

    @pytest.mark.parametrize("tiers", [{"10-15": 100, "12-20": 90}, {"10-15": 100, "15-20": 90}])
    def test_overlapping_tiers_are_rejected(self, tiers):
        with pytest.raises(ValidationError, match="overlap"):
            ActivityRatePayload(pricing_model="PER_GROUP", tiered_pricing=tiers)

    def test_children_cannot_exceed_pax(self):
        rate = ActivityRatePayload(base_cost_try="1000")
        with pytest.raises(InvalidQuoteInput):
            activity_cost(rate, pax=2, children=3)
