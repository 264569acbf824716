"""
Booking, BookingItem and PaymentClient models.

A booking locks its exchange rate at creation. Its items carry the
authoritative unit cost/price (frozen from a quote or entered manually) and
client payments are checked against the booking's total_sell_eur.
"""

import enum
from datetime import date, datetime
from decimal import Decimal
from typing import Optional, List, TYPE_CHECKING

from sqlalchemy import BigInteger, CheckConstraint, DECIMAL, Date, DateTime, Enum as SQLEnum, ForeignKey, Integer, String, Text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from tourdesk.models.base import JSONType, TenantBase

if TYPE_CHECKING:
    from tourdesk.models.service_offering import ServiceOffering


class BookingStatus(str, enum.Enum):
    PENDING = "PENDING"
    CONFIRMED = "CONFIRMED"
    CANCELLED = "CANCELLED"
    COMPLETED = "COMPLETED"


class PaymentStatus(str, enum.Enum):
    PENDING = "PENDING"
    COMPLETED = "COMPLETED"
    FAILED = "FAILED"
    REFUNDED = "REFUNDED"


# Payments counted against the booking total
COMMITTED_PAYMENT_STATUSES = (PaymentStatus.PENDING.value, PaymentStatus.COMPLETED.value)


class Booking(TenantBase):
    """
    A client booking.
    locked_exchange_rate is fixed at creation and never updated afterwards.
    """

    __tablename__ = "bookings"

    booking_code: Mapped[str] = mapped_column(String(50), nullable=False, index=True)
    client_name: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)
    start_date: Mapped[date] = mapped_column(Date, nullable=False)
    end_date: Mapped[date] = mapped_column(Date, nullable=False)

    status: Mapped[str] = mapped_column(
        SQLEnum(*[s.value for s in BookingStatus], name="booking_status_enum"),
        default=BookingStatus.PENDING.value,
    )

    # Financials
    locked_exchange_rate: Mapped[Decimal] = mapped_column(DECIMAL(12, 6), nullable=False)
    total_cost_try: Mapped[Decimal] = mapped_column(DECIMAL(14, 2), default=Decimal("0.00"))
    total_sell_eur: Mapped[Decimal] = mapped_column(DECIMAL(12, 2), default=Decimal("0.00"))

    notes: Mapped[Optional[str]] = mapped_column(Text, nullable=True)

    # Relationships
    items: Mapped[List["BookingItem"]] = relationship("BookingItem", back_populates="booking", lazy="raise")
    payments: Mapped[List["PaymentClient"]] = relationship(
        "PaymentClient", back_populates="booking", lazy="raise"
    )

    def __repr__(self) -> str:
        return f"<Booking(id={self.id}, code='{self.booking_code}', total_sell_eur={self.total_sell_eur})>"


class BookingItem(TenantBase):
    """
    A booking line item.
    Catalog items carry a pricing snapshot and qty=1; manual items have no snapshot.
    """

    __tablename__ = "booking_items"

    booking_id: Mapped[int] = mapped_column(
        BigInteger,
        ForeignKey("bookings.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    service_offering_id: Mapped[Optional[int]] = mapped_column(
        BigInteger,
        ForeignKey("service_offerings.id", ondelete="SET NULL"),
        nullable=True,
    )

    item_type: Mapped[str] = mapped_column(String(30), nullable=False)  # HOTEL, TRANSFER, GUIDE, ACTIVITY, FEE, ...
    description: Mapped[Optional[str]] = mapped_column(String(500), nullable=True)

    qty: Mapped[int] = mapped_column(Integer, nullable=False, default=1)
    unit_cost_try: Mapped[Decimal] = mapped_column(DECIMAL(14, 2), nullable=False)
    unit_price_eur: Mapped[Decimal] = mapped_column(DECIMAL(12, 2), nullable=False)

    # Frozen quote; never recalculated
    pricing_snapshot_json: Mapped[Optional[dict]] = mapped_column(JSONType, nullable=True)

    # Relationships
    booking: Mapped["Booking"] = relationship("Booking", back_populates="items", lazy="raise")
    service_offering: Mapped[Optional["ServiceOffering"]] = relationship("ServiceOffering", lazy="raise")

    @property
    def line_cost_try(self) -> Decimal:
        return self.unit_cost_try * self.qty

    @property
    def line_price_eur(self) -> Decimal:
        return self.unit_price_eur * self.qty

    def __repr__(self) -> str:
        return f"<BookingItem(id={self.id}, booking_id={self.booking_id}, qty={self.qty}, unit_price_eur={self.unit_price_eur})>"


class PaymentClient(TenantBase):
    """
    A payment received (or expected) from the client for a booking.
    """

    __tablename__ = "payment_clients"
    __table_args__ = (
        CheckConstraint("amount_eur > 0", name="ck_payment_clients_positive"),
    )

    booking_id: Mapped[int] = mapped_column(
        BigInteger,
        ForeignKey("bookings.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )

    amount_eur: Mapped[Decimal] = mapped_column(DECIMAL(12, 2), nullable=False)
    method: Mapped[str] = mapped_column(String(30), default="BANK_TRANSFER")  # CASH, CREDIT_CARD, BANK_TRANSFER, ONLINE, OTHER
    status: Mapped[str] = mapped_column(
        SQLEnum(*[s.value for s in PaymentStatus], name="payment_status_enum"),
        default=PaymentStatus.PENDING.value,
        nullable=False,
    )

    paid_at: Mapped[Optional[datetime]] = mapped_column(DateTime(timezone=True), nullable=True)
    txn_ref: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)
    notes: Mapped[Optional[str]] = mapped_column(Text, nullable=True)

    # Relationships
    booking: Mapped["Booking"] = relationship("Booking", back_populates="payments", lazy="raise")

    def __repr__(self) -> str:
        return f"<PaymentClient(id={self.id}, booking_id={self.booking_id}, amount_eur={self.amount_eur}, status='{self.status}')>"
