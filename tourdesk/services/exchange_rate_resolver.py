"""
Exchange rate resolution - pick the rate effective on a reference date.

The effective rate is the most recent one dated on or before the date;
ties on the same date go to the most recently inserted row.
"""

import logging
import uuid
from datetime import date, datetime
from decimal import Decimal
from typing import Sequence

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from tourdesk.models.exchange_rate import ExchangeRate
from tourdesk.services.errors import InvalidRate, NoRateOnOrBeforeDate, NoRatesAvailable

logger = logging.getLogger(__name__)


def _as_date(value) -> date:
    if isinstance(value, datetime):
        return value.date()
    return value


def pick_exchange_rate(rates: Sequence[ExchangeRate], on_date: date) -> ExchangeRate:
    """
    Select the exchange rate row effective on `on_date`.

    Raises:
        NoRatesAvailable: the history is empty
        NoRateOnOrBeforeDate: every rate is dated after `on_date`
        InvalidRate: the selected rate is not positive
    """
    on_date = _as_date(on_date)
    context = {"on_date": on_date.isoformat()}

    if not rates:
        raise NoRatesAvailable(context)

    eligible = [r for r in rates if _as_date(r.rate_date) <= on_date]
    if not eligible:
        raise NoRateOnOrBeforeDate(on_date, context)

    selected = max(eligible, key=lambda r: (_as_date(r.rate_date), r.id or 0))

    if selected.rate is None or selected.rate <= 0:
        logger.error(f"Exchange rate {selected.id} has non-positive value {selected.rate}")
        raise InvalidRate(
            f"Exchange rate {selected.id} has a non-positive value",
            {**context, "exchange_rate_id": selected.id},
        )
    return selected


def select_rate_by_date(rates: Sequence[ExchangeRate], on_date: date) -> Decimal:
    """Rate value effective on `on_date` (see pick_exchange_rate)."""
    return pick_exchange_rate(rates, on_date).rate


async def load_rate_history(
    db: AsyncSession,
    tenant_id: uuid.UUID,
    from_currency: str,
    to_currency: str,
) -> list[ExchangeRate]:
    result = await db.execute(
        select(ExchangeRate)
        .where(
            ExchangeRate.tenant_id == tenant_id,
            ExchangeRate.from_currency == from_currency.upper(),
            ExchangeRate.to_currency == to_currency.upper(),
        )
        .order_by(ExchangeRate.rate_date.desc(), ExchangeRate.id.desc())
    )
    return list(result.scalars().all())


async def resolve_exchange_rate(
    db: AsyncSession,
    tenant_id: uuid.UUID,
    from_currency: str,
    to_currency: str,
    on_date: date,
) -> ExchangeRate:
    """Load the tenant's history for the pair and select the effective rate."""
    rates = await load_rate_history(db, tenant_id, from_currency, to_currency)
    try:
        return pick_exchange_rate(rates, on_date)
    except (NoRatesAvailable, NoRateOnOrBeforeDate, InvalidRate) as e:
        e.with_context(from_currency=from_currency.upper(), to_currency=to_currency.upper())
        raise
