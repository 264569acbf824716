"""
Payment endpoints.
Payments are created under /bookings/{id}/payments; this router handles status changes.
"""

import logging
from datetime import datetime
from decimal import Decimal
from typing import Literal, Optional

from fastapi import APIRouter
from pydantic import BaseModel, ConfigDict, Field

from tourdesk.api.deps import DbSession, TenantId
from tourdesk.services.payment_ledger import update_payment_status

logger = logging.getLogger(__name__)
router = APIRouter()

PaymentStatusValue = Literal["PENDING", "COMPLETED", "FAILED", "REFUNDED"]


# Schemas
class PaymentCreate(BaseModel):
    amount_eur: Decimal = Field(..., gt=0, max_digits=12, decimal_places=2)
    method: Literal["CASH", "CREDIT_CARD", "BANK_TRANSFER", "ONLINE", "OTHER"] = "BANK_TRANSFER"
    status: Literal["PENDING", "COMPLETED"] = "PENDING"
    paid_at: Optional[datetime] = None
    txn_ref: Optional[str] = Field(default=None, max_length=255)
    notes: Optional[str] = None


class PaymentStatusUpdate(BaseModel):
    status: PaymentStatusValue


class PaymentResponse(BaseModel):
    id: int
    booking_id: int
    amount_eur: Decimal
    method: str
    status: str
    paid_at: Optional[datetime] = None
    txn_ref: Optional[str] = None
    notes: Optional[str] = None

    model_config = ConfigDict(from_attributes=True)


# Endpoints
@router.patch("/{payment_id}/status", response_model=PaymentResponse)
async def change_status(
    payment_id: int,
    data: PaymentStatusUpdate,
    db: DbSession,
    tenant_id: TenantId,
):
    """
    Move a payment between statuses.
    Reviving a FAILED or REFUNDED payment is checked against the booking balance.
    """
    payment = await update_payment_status(db, tenant_id, payment_id, data.status)
    await db.commit()
    return payment
