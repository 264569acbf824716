"""
Pricing endpoints - quote a single service offering.
"""

import logging

from fastapi import APIRouter

from tourdesk.api.deps import DbSession, TenantId
from tourdesk.services.quote_calculator import Quote, QuoteRequest, get_quote

logger = logging.getLogger(__name__)
router = APIRouter()


@router.post("/quote", response_model=Quote)
async def quote_service(
    data: QuoteRequest,
    db: DbSession,
    tenant_id: TenantId,
):
    """
    Price one offering for one date.

    Read-only: resolves the seasonal rate and the exchange rate in force on
    `service_date`, applies the cost formula of the offering's category and
    the markup. Nothing is persisted.
    """
    return await get_quote(db, tenant_id, data)
