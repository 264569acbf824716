"""
SQLAlchemy models for TourDesk.
All tenant data inherits from TenantBase for multi-tenant isolation.
"""

from tourdesk.models.base import Base, TenantBase, TimestampMixin
from tourdesk.models.tenant import Tenant
from tourdesk.models.supplier import Supplier
from tourdesk.models.service_offering import (
    ServiceCategory,
    ServiceOffering,
    HotelRoom,
    Transfer,
    Vehicle,
    Guide,
    Activity,
)
from tourdesk.models.seasonal_rate import SeasonalRate
from tourdesk.models.exchange_rate import ExchangeRate
from tourdesk.models.booking import (
    Booking,
    BookingItem,
    BookingStatus,
    PaymentClient,
    PaymentStatus,
)

__all__ = [
    "Base",
    "TenantBase",
    "TimestampMixin",
    "Tenant",
    "Supplier",
    # Catalog
    "ServiceCategory",
    "ServiceOffering",
    "HotelRoom",
    "Transfer",
    "Vehicle",
    "Guide",
    "Activity",
    "SeasonalRate",
    "ExchangeRate",
    # Bookings & payments
    "Booking",
    "BookingItem",
    "BookingStatus",
    "PaymentClient",
    "PaymentStatus",
]
