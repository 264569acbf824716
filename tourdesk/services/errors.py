"""
Domain errors raised by the pricing core.

Every error carries a `kind` (mapped to an HTTP status by tourdesk.main) and a
`context` dict with the request parameters / resolved ids that produced it.
"""

from datetime import date
from decimal import Decimal
from typing import Any, Dict, Optional


class PricingError(Exception):
    """Base class for all recoverable pricing / ledger errors."""

    kind = "PricingError"

    def __init__(self, message: str, context: Optional[Dict[str, Any]] = None):
        self.message = message
        self.context = context or {}
        super().__init__(self.message)

    def with_context(self, **extra: Any) -> "PricingError":
        """Attach more traceability fields without overwriting existing ones."""
        for key, value in extra.items():
            self.context.setdefault(key, value)
        return self


# ============================================================================
# NotFound
# ============================================================================

class NotFoundError(PricingError):
    kind = "NotFound"


class ServiceOfferingNotFound(NotFoundError):
    def __init__(self, offering_id: int, context: Optional[Dict[str, Any]] = None):
        self.offering_id = offering_id
        super().__init__(f"Service offering {offering_id} not found", context)


class BookingNotFound(NotFoundError):
    def __init__(self, booking_id: int):
        self.booking_id = booking_id
        super().__init__(f"Booking {booking_id} not found", {"booking_id": booking_id})


class BookingItemNotFound(NotFoundError):
    def __init__(self, item_id: int):
        self.item_id = item_id
        super().__init__(f"Booking item {item_id} not found", {"booking_item_id": item_id})


class PaymentNotFound(NotFoundError):
    def __init__(self, payment_id: int):
        self.payment_id = payment_id
        super().__init__(f"Payment {payment_id} not found", {"payment_id": payment_id})


class ExchangeRateNotFound(NotFoundError):
    pass


class NoRatesAvailable(ExchangeRateNotFound):
    def __init__(self, context: Optional[Dict[str, Any]] = None):
        super().__init__("No exchange rates available", context)


class NoRateOnOrBeforeDate(ExchangeRateNotFound):
    def __init__(self, on_date: date, context: Optional[Dict[str, Any]] = None):
        self.on_date = on_date
        super().__init__(f"No exchange rate found on or before {on_date.isoformat()}", context)


# ============================================================================
# InvalidInput
# ============================================================================

class InvalidInputError(PricingError):
    kind = "InvalidInput"


class InvalidQuoteInput(InvalidInputError):
    pass


class CategoryMismatch(InvalidInputError):
    def __init__(self, expected: str, actual: str, context: Optional[Dict[str, Any]] = None):
        self.expected = expected
        self.actual = actual
        super().__init__(f"Category mismatch: expected {expected}, got {actual}", context)


class MissingOfferingDetail(InvalidInputError):
    def __init__(self, offering_id: int, category: str):
        super().__init__(
            f"Service offering {offering_id} has no {category} detail record; create it before adding rates",
            {"service_offering_id": offering_id, "category": category},
        )


class BelowMinStay(InvalidInputError):
    def __init__(self, nights: int, min_stay: int, context: Optional[Dict[str, Any]] = None):
        self.nights = nights
        self.min_stay = min_stay
        super().__init__(f"Minimum stay is {min_stay} nights, requested {nights}", context)


class BelowMinPax(InvalidInputError):
    def __init__(self, pax: int, min_pax: int, context: Optional[Dict[str, Any]] = None):
        self.pax = pax
        self.min_pax = min_pax
        super().__init__(f"Minimum {min_pax} pax required, requested {pax}", context)


class AbovePaxCapacity(InvalidInputError):
    def __init__(self, pax: int, max_pax: int, context: Optional[Dict[str, Any]] = None):
        self.pax = pax
        self.max_pax = max_pax
        super().__init__(f"Capacity is {max_pax} pax, requested {pax}", context)


class PaxOutOfTierRange(InvalidInputError):
    def __init__(self, pax: int, context: Optional[Dict[str, Any]] = None):
        self.pax = pax
        super().__init__(f"No group pricing tier covers {pax} pax", context)


class NonPositiveAmount(InvalidInputError):
    def __init__(self, amount: Decimal, context: Optional[Dict[str, Any]] = None):
        self.amount = amount
        super().__init__(f"Amount must be positive, got {amount}", context)


# ============================================================================
# Business-data gaps and integrity faults
# ============================================================================

class NoApplicableRate(PricingError):
    """No active seasonal rate covers the requested date."""

    kind = "NoApplicableRate"

    def __init__(self, offering_id: int, on_date: date, context: Optional[Dict[str, Any]] = None):
        self.offering_id = offering_id
        self.on_date = on_date
        super().__init__(
            f"No active rate covers {on_date.isoformat()} for service offering {offering_id}; "
            f"add a rate for this period",
            context,
        )


class InvalidRate(PricingError):
    """A resolved rate, exchange rate or markup holds an unusable value."""

    kind = "InvalidRate"


class PaymentExceedsBalance(PricingError):
    kind = "PaymentExceedsBalance"

    def __init__(
        self,
        amount: Decimal,
        remaining: Decimal,
        context: Optional[Dict[str, Any]] = None,
        message: Optional[str] = None,
    ):
        self.amount = amount
        self.remaining = remaining
        super().__init__(
            message or f"Payment of {amount} EUR exceeds remaining balance of {remaining} EUR",
            context,
        )


# ============================================================================
# Conflicts (catalog maintenance)
# ============================================================================

class ConflictError(PricingError):
    kind = "Conflict"


class RateSeasonOverlap(ConflictError):
    def __init__(self, existing_id: int, season_from: date, season_to: date):
        self.existing_id = existing_id
        super().__init__(
            f"Rate season overlaps with existing rate (ID: {existing_id}, "
            f"{season_from.isoformat()} - {season_to.isoformat()})",
            {"existing_rate_id": existing_id},
        )


class DuplicateExchangeRate(ConflictError):
    def __init__(self, from_currency: str, to_currency: str, rate_date: date):
        super().__init__(
            f"Exchange rate for {from_currency}/{to_currency} on {rate_date.isoformat()} already exists",
            {"from_currency": from_currency, "to_currency": to_currency, "rate_date": rate_date.isoformat()},
        )


class DuplicateBookingCode(ConflictError):
    def __init__(self, booking_code: str):
        super().__init__(
            f"Booking with code {booking_code} already exists",
            {"booking_code": booking_code},
        )
