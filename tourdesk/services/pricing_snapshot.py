"""
Pricing snapshot - the frozen copy of a Quote stored on a booking item.

Once written, a snapshot is never recalculated: later changes to seasonal or
exchange rates do not affect stored items. Only an explicit re-quote replaces it.
"""

from datetime import date, datetime, timezone
from typing import Any, Dict, Optional

from pydantic import BaseModel, ConfigDict, Field

from tourdesk.services.quote_calculator import Quote, QuoteRequest

SNAPSHOT_VERSION = 1


class PricingSnapshot(BaseModel):
    model_config = ConfigDict(frozen=True)

    version: int = SNAPSHOT_VERSION
    quoted_at: datetime
    service_date: date
    quote: Quote
    request: Optional[QuoteRequest] = None
    # Set on a re-quote: the snapshot this one replaced
    previous: Optional[Dict[str, Any]] = Field(default=None)

    @classmethod
    def capture(
        cls,
        quote: Quote,
        request: Optional[QuoteRequest] = None,
        quoted_at: Optional[datetime] = None,
        previous: Optional[Dict[str, Any]] = None,
    ) -> "PricingSnapshot":
        return cls(
            quoted_at=quoted_at or datetime.now(timezone.utc),
            service_date=quote.service_date,
            quote=quote,
            request=request,
            previous=previous,
        )

    def to_json(self) -> Dict[str, Any]:
        """JSON-safe dict for booking_items.pricing_snapshot_json (Decimals as strings)."""
        return self.model_dump(mode="json", exclude_none=True)

    @classmethod
    def from_json(cls, data: Dict[str, Any]) -> "PricingSnapshot":
        return cls.model_validate(data)
