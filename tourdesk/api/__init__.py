"""
API routes package.
"""

from tourdesk.api import (
    pricing,
    seasonal_rates,
    exchange_rates,
    bookings,
    payments,
)

__all__ = [
    "pricing",
    "seasonal_rates",
    "exchange_rates",
    "bookings",
    "payments",
]
