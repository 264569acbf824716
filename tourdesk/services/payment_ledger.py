"""
Payment ledger - client payments never exceed a booking's sell total.

PENDING and COMPLETED payments count against the booking; FAILED and REFUNDED
do not. The booking row is locked with SELECT ... FOR UPDATE before summing, so
the check and the insert happen in one transaction and concurrent payments on
the same booking are serialized.
"""

import logging
import uuid
from dataclasses import dataclass
from datetime import datetime, timezone
from decimal import Decimal
from typing import Optional

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from tourdesk.models.booking import COMMITTED_PAYMENT_STATUSES, Booking, PaymentClient, PaymentStatus
from tourdesk.services.errors import (
    BookingNotFound,
    InvalidInputError,
    NonPositiveAmount,
    PaymentExceedsBalance,
    PaymentNotFound,
)
from tourdesk.services.money import ZERO, quantize_money, to_decimal

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class LedgerBalance:
    total_sell_eur: Decimal
    committed_eur: Decimal  # PENDING + COMPLETED
    paid_eur: Decimal  # COMPLETED only
    remaining_eur: Decimal


class PaymentLedgerGuard:
    """Pure balance check: committed + amount must not exceed the total."""

    @staticmethod
    def check(total_sell_eur: Decimal, committed_sum: Decimal, amount: Decimal) -> Decimal:
        """
        Validate a new payment against the booking total.

        Returns the remaining balance after the payment.

        Raises:
            NonPositiveAmount: amount <= 0
            PaymentExceedsBalance: committed_sum + amount > total_sell_eur
        """
        amount = to_decimal(amount)
        if amount <= 0:
            raise NonPositiveAmount(amount, {"amount_eur": str(amount)})

        remaining = quantize_money(to_decimal(total_sell_eur) - to_decimal(committed_sum))
        if amount > remaining:
            raise PaymentExceedsBalance(
                quantize_money(amount),
                remaining,
                {
                    "amount_eur": str(amount),
                    "total_sell_eur": str(total_sell_eur),
                    "committed_eur": str(committed_sum),
                    "remaining_eur": str(remaining),
                },
            )
        return quantize_money(remaining - amount)


# ============================================================================
# Queries
# ============================================================================

async def lock_booking(db: AsyncSession, tenant_id: uuid.UUID, booking_id: int) -> Booking:
    """Lock the booking row until the end of the current transaction."""
    result = await db.execute(
        select(Booking)
        .where(Booking.id == booking_id, Booking.tenant_id == tenant_id)
        .with_for_update()
        .execution_options(populate_existing=True)
    )
    booking = result.scalar_one_or_none()
    if booking is None:
        raise BookingNotFound(booking_id)
    return booking


async def sum_payments(
    db: AsyncSession,
    booking_id: int,
    statuses=COMMITTED_PAYMENT_STATUSES,
    exclude_payment_id: Optional[int] = None,
) -> Decimal:
    query = select(func.coalesce(func.sum(PaymentClient.amount_eur), 0)).where(
        PaymentClient.booking_id == booking_id,
        PaymentClient.status.in_(statuses),
    )
    if exclude_payment_id is not None:
        query = query.where(PaymentClient.id != exclude_payment_id)
    result = await db.execute(query)
    return quantize_money(result.scalar_one())


# ============================================================================
# Operations
# ============================================================================

async def validate(db: AsyncSession, tenant_id: uuid.UUID, booking_id: int, amount: Decimal) -> Decimal:
    """
    Check a payment against the booking without inserting it.
    The booking stays locked until the caller's transaction ends.
    """
    booking = await lock_booking(db, tenant_id, booking_id)
    committed = await sum_payments(db, booking.id)
    return PaymentLedgerGuard.check(booking.total_sell_eur, committed, amount)


async def record_payment(
    db: AsyncSession,
    tenant_id: uuid.UUID,
    booking_id: int,
    amount: Decimal,
    method: str = "BANK_TRANSFER",
    status: str = PaymentStatus.PENDING.value,
    paid_at: Optional[datetime] = None,
    txn_ref: Optional[str] = None,
    notes: Optional[str] = None,
) -> PaymentClient:
    """Check and insert a payment under the booking lock. The caller commits."""
    if status not in COMMITTED_PAYMENT_STATUSES:
        raise InvalidInputError(
            f"A new payment must be PENDING or COMPLETED, got {status}",
            {"status": status},
        )

    booking = await lock_booking(db, tenant_id, booking_id)
    committed = await sum_payments(db, booking.id)
    try:
        remaining = PaymentLedgerGuard.check(booking.total_sell_eur, committed, amount)
    except PaymentExceedsBalance:
        logger.warning(
            f"Payment of {amount} EUR refused on booking {booking.booking_code}: "
            f"committed {committed} of {booking.total_sell_eur} EUR"
        )
        raise

    if status == PaymentStatus.COMPLETED.value and paid_at is None:
        paid_at = datetime.now(timezone.utc)

    payment = PaymentClient(
        tenant_id=tenant_id,
        booking_id=booking.id,
        amount_eur=quantize_money(amount),
        method=method,
        status=status,
        paid_at=paid_at,
        txn_ref=txn_ref,
        notes=notes,
    )
    db.add(payment)
    await db.flush()

    logger.info(
        f"Recorded payment {payment.id} of {payment.amount_eur} EUR ({status}) on booking "
        f"{booking.booking_code}, remaining {remaining} EUR"
    )
    return payment


async def update_payment_status(
    db: AsyncSession,
    tenant_id: uuid.UUID,
    payment_id: int,
    new_status: str,
) -> PaymentClient:
    """
    Change a payment's status. Reviving a FAILED/REFUNDED payment re-runs the
    balance check under the booking lock.
    """
    new_status = PaymentStatus(new_status).value

    result = await db.execute(
        select(PaymentClient).where(PaymentClient.id == payment_id, PaymentClient.tenant_id == tenant_id)
    )
    payment = result.scalar_one_or_none()
    if payment is None:
        raise PaymentNotFound(payment_id)

    reviving = payment.status not in COMMITTED_PAYMENT_STATUSES and new_status in COMMITTED_PAYMENT_STATUSES
    if reviving:
        booking = await lock_booking(db, tenant_id, payment.booking_id)
        committed = await sum_payments(db, booking.id, exclude_payment_id=payment.id)
        try:
            PaymentLedgerGuard.check(booking.total_sell_eur, committed, payment.amount_eur)
        except PaymentExceedsBalance:
            logger.warning(f"Payment {payment.id} cannot return to {new_status}: booking balance exceeded")
            raise

    old_status = payment.status
    payment.status = new_status
    if new_status == PaymentStatus.COMPLETED.value and payment.paid_at is None:
        payment.paid_at = datetime.now(timezone.utc)
    await db.flush()

    logger.info(f"Payment {payment.id} status {old_status} -> {new_status}")
    return payment


async def get_balance(db: AsyncSession, tenant_id: uuid.UUID, booking_id: int) -> LedgerBalance:
    result = await db.execute(
        select(Booking).where(Booking.id == booking_id, Booking.tenant_id == tenant_id)
    )
    booking = result.scalar_one_or_none()
    if booking is None:
        raise BookingNotFound(booking_id)

    committed = await sum_payments(db, booking.id)
    paid = await sum_payments(db, booking.id, statuses=(PaymentStatus.COMPLETED.value,))
    total = quantize_money(booking.total_sell_eur or ZERO)
    return LedgerBalance(
        total_sell_eur=total,
        committed_eur=committed,
        paid_eur=paid,
        remaining_eur=quantize_money(total - committed),
    )
