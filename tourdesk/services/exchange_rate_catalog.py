"""
Exchange rate catalog - record and list a tenant's dated rates.
"""

import logging
import uuid
from datetime import date
from decimal import Decimal
from typing import Optional

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from tourdesk.models.exchange_rate import ExchangeRate
from tourdesk.services.errors import DuplicateExchangeRate, InvalidInputError

logger = logging.getLogger(__name__)


async def create_exchange_rate(
    db: AsyncSession,
    tenant_id: uuid.UUID,
    rate: Decimal,
    rate_date: date,
    from_currency: str = "TRY",
    to_currency: str = "EUR",
    source: str = "manual",
) -> ExchangeRate:
    from_currency = from_currency.upper()
    to_currency = to_currency.upper()

    if rate is None or rate <= 0:
        raise InvalidInputError("Exchange rate must be positive", {"rate": str(rate)})
    if from_currency == to_currency:
        raise InvalidInputError(
            "from_currency and to_currency must differ",
            {"from_currency": from_currency, "to_currency": to_currency},
        )

    result = await db.execute(
        select(ExchangeRate.id).where(
            ExchangeRate.tenant_id == tenant_id,
            ExchangeRate.from_currency == from_currency,
            ExchangeRate.to_currency == to_currency,
            ExchangeRate.rate_date == rate_date,
        )
    )
    if result.first() is not None:
        raise DuplicateExchangeRate(from_currency, to_currency, rate_date)

    exchange_rate = ExchangeRate(
        tenant_id=tenant_id,
        from_currency=from_currency,
        to_currency=to_currency,
        rate=rate,
        rate_date=rate_date,
        source=source,
    )
    db.add(exchange_rate)
    await db.flush()

    logger.info(f"Recorded {from_currency}/{to_currency} = {rate} on {rate_date} (source: {source})")
    return exchange_rate


async def list_exchange_rates(
    db: AsyncSession,
    tenant_id: uuid.UUID,
    from_currency: Optional[str] = None,
    to_currency: Optional[str] = None,
    start_date: Optional[date] = None,
    end_date: Optional[date] = None,
) -> list[ExchangeRate]:
    query = select(ExchangeRate).where(ExchangeRate.tenant_id == tenant_id)
    if from_currency:
        query = query.where(ExchangeRate.from_currency == from_currency.upper())
    if to_currency:
        query = query.where(ExchangeRate.to_currency == to_currency.upper())
    if start_date:
        query = query.where(ExchangeRate.rate_date >= start_date)
    if end_date:
        query = query.where(ExchangeRate.rate_date <= end_date)

    result = await db.execute(query.order_by(ExchangeRate.rate_date.desc(), ExchangeRate.id.desc()))
    return list(result.scalars().all())
