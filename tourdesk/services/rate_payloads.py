"""
Category-specific pricing fields of a seasonal rate.

A SeasonalRate row stores one of these payloads as JSON; the `category` field
is the discriminant and must match the row's (and the offering's) category.
"""

from decimal import Decimal
from typing import Annotated, Any, Dict, List, Literal, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, TypeAdapter, field_validator, model_validator

Amount = Annotated[Decimal, Field(ge=0, max_digits=14, decimal_places=2)]
Percent = Annotated[Decimal, Field(ge=0, le=1000, max_digits=7, decimal_places=2)]


class _RatePayload(BaseModel):
    model_config = ConfigDict(frozen=True, extra="forbid")


class HotelRatePayload(_RatePayload):
    category: Literal["HOTEL_ROOM"] = "HOTEL_ROOM"
    board_type: Literal["RO", "BB", "HB", "FB", "AI"] = "BB"
    price_per_person_double: Amount
    price_per_person_triple: Optional[Amount] = None
    single_supplement: Optional[Amount] = None
    child_price_0_2: Optional[Amount] = None
    child_price_3_5: Optional[Amount] = None
    child_price_6_11: Optional[Amount] = None
    min_stay: int = Field(default=1, ge=1)
    allotment: Optional[int] = Field(default=None, ge=0)
    release_days: Optional[int] = Field(default=None, ge=0)


class TransferRatePayload(_RatePayload):
    category: Literal["TRANSFER"] = "TRANSFER"
    pricing_model: Literal["PER_TRANSFER", "PER_KM", "PER_HOUR"] = "PER_TRANSFER"
    base_cost_try: Amount
    included_km: Optional[Decimal] = Field(default=None, ge=0)
    included_hours: Optional[Decimal] = Field(default=None, ge=0)
    extra_km_try: Optional[Amount] = None
    extra_hour_try: Optional[Amount] = None
    night_surcharge_pct: Percent = Decimal("0")
    holiday_surcharge_pct: Percent = Decimal("0")
    waiting_time_free: int = Field(default=0, ge=0)  # minutes


class VehicleRatePayload(_RatePayload):
    category: Literal["VEHICLE_HIRE"] = "VEHICLE_HIRE"
    daily_rate_try: Optional[Amount] = None
    daily_km_included: Optional[Decimal] = Field(default=None, ge=0)
    hourly_rate_try: Optional[Amount] = None
    min_hours: Optional[int] = Field(default=None, ge=1)
    extra_km_try: Optional[Amount] = None
    driver_daily_try: Optional[Amount] = None
    one_way_fee_try: Optional[Amount] = None
    deposit_try: Optional[Amount] = None
    min_rental_days: int = Field(default=1, ge=1)

    @model_validator(mode="after")
    def check_has_a_rate(self) -> "VehicleRatePayload":
        if self.daily_rate_try is None and self.hourly_rate_try is None:
            raise ValueError("Either daily_rate_try or hourly_rate_try is required")
        return self


class GuideRatePayload(_RatePayload):
    category: Literal["GUIDE_SERVICE"] = "GUIDE_SERVICE"
    pricing_model: Literal["PER_DAY", "PER_HOUR"] = "PER_DAY"
    day_cost_try: Optional[Amount] = None
    half_day_cost_try: Optional[Amount] = None
    hour_cost_try: Optional[Amount] = None
    overtime_hour_try: Optional[Amount] = None
    holiday_surcharge_pct: Percent = Decimal("0")
    min_hours: Optional[int] = Field(default=None, ge=1)


class PriceTier(BaseModel):
    """Inclusive pax bracket; `price` is per person."""

    model_config = ConfigDict(frozen=True)

    min_pax: int = Field(ge=1)
    max_pax: int = Field(ge=1)
    price: Amount

    @model_validator(mode="after")
    def check_bounds(self) -> "PriceTier":
        if self.max_pax < self.min_pax:
            raise ValueError(f"Tier max_pax ({self.max_pax}) is below min_pax ({self.min_pax})")
        return self

    def contains(self, pax: int) -> bool:
        return self.min_pax <= pax <= self.max_pax


def _tiers_from_mapping(raw: Dict[str, Any]) -> List[Dict[str, Any]]:
    """{"10-15": 100, "16-20": 90} -> list of bracket dicts."""
    tiers = []
    for key, price in raw.items():
        low, sep, high = str(key).partition("-")
        if not sep:
            raise ValueError(f"Invalid tier range '{key}', expected 'min-max'")
        try:
            tiers.append({"min_pax": int(low), "max_pax": int(high), "price": price})
        except ValueError:
            raise ValueError(f"Invalid tier range '{key}', expected 'min-max'") from None
    return tiers


class ActivityRatePayload(_RatePayload):
    category: Literal["ACTIVITY"] = "ACTIVITY"
    pricing_model: Literal["PER_PERSON", "PER_GROUP"] = "PER_PERSON"
    base_cost_try: Optional[Amount] = None
    min_pax: Optional[int] = Field(default=None, ge=1)
    max_pax: Optional[int] = Field(default=None, ge=1)
    tiered_pricing: Optional[List[PriceTier]] = None
    child_discount_pct: Percent = Decimal("0")

    @field_validator("tiered_pricing", mode="before")
    @classmethod
    def normalize_tiers(cls, v):
        if isinstance(v, dict):
            return _tiers_from_mapping(v)
        return v

    @model_validator(mode="after")
    def check_model_fields(self) -> "ActivityRatePayload":
        if self.child_discount_pct > 100:
            raise ValueError("child_discount_pct cannot exceed 100")
        if self.pricing_model == "PER_PERSON" and self.base_cost_try is None:
            raise ValueError("base_cost_try is required for PER_PERSON pricing")
        if self.pricing_model == "PER_GROUP" and not self.tiered_pricing:
            raise ValueError("tiered_pricing is required for PER_GROUP pricing")
        if self.min_pax is not None and self.max_pax is not None and self.max_pax < self.min_pax:
            raise ValueError("max_pax cannot be below min_pax")
        if self.tiered_pricing:
            tiers = sorted(self.tiered_pricing, key=lambda t: t.min_pax)
            for previous, tier in zip(tiers, tiers[1:]):
                if tier.min_pax <= previous.max_pax:
                    raise ValueError(
                        f"tiered_pricing brackets {previous.min_pax}-{previous.max_pax} "
                        f"and {tier.min_pax}-{tier.max_pax} overlap"
                    )
        return self

    def find_tier(self, pax: int) -> Optional[PriceTier]:
        for tier in self.tiered_pricing or []:
            if tier.contains(pax):
                return tier
        return None


RatePayload = Annotated[
    Union[
        HotelRatePayload,
        TransferRatePayload,
        VehicleRatePayload,
        GuideRatePayload,
        ActivityRatePayload,
    ],
    Field(discriminator="category"),
]

_payload_adapter = TypeAdapter(RatePayload)


def parse_rate_payload(data: Dict[str, Any]) -> RatePayload:
    """Validate a stored/incoming payload dict into its typed model."""
    return _payload_adapter.validate_python(data)


def dump_rate_payload(payload: RatePayload) -> Dict[str, Any]:
    """JSON-safe dict for the seasonal_rates.payload column."""
    return payload.model_dump(mode="json", exclude_none=True)
