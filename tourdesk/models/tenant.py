"""
Tenant model - represents a tour operator using the back office.
Each tenant has isolated data and its own default markup.
"""

import uuid
from decimal import Decimal
from typing import Optional, List, TYPE_CHECKING

from sqlalchemy import Boolean, CheckConstraint, DECIMAL, String, Text, Uuid
from sqlalchemy.orm import Mapped, mapped_column, relationship

from tourdesk.models.base import Base, TimestampMixin

if TYPE_CHECKING:
    from tourdesk.models.supplier import Supplier


class Tenant(Base, TimestampMixin):
    """
    A tour operator tenant.
    All data is isolated per tenant.
    """

    __tablename__ = "tenants"
    __table_args__ = (
        CheckConstraint("default_markup_pct >= 0", name="ck_tenants_default_markup"),
    )

    id: Mapped[uuid.UUID] = mapped_column(
        Uuid(as_uuid=True),
        primary_key=True,
        default=uuid.uuid4,
    )

    # Identity
    name: Mapped[str] = mapped_column(Text, nullable=False)
    slug: Mapped[str] = mapped_column(String(100), unique=True, nullable=False)

    # Pricing defaults (offering.markup_pct wins when set)
    default_markup_pct: Mapped[Optional[Decimal]] = mapped_column(DECIMAL(5, 2), nullable=True)

    # Status
    is_active: Mapped[bool] = mapped_column(Boolean, default=True, nullable=False)

    # Relationships - use lazy="raise" to prevent accidental lazy loading in async context
    suppliers: Mapped[List["Supplier"]] = relationship("Supplier", back_populates="tenant", lazy="raise")

    def __repr__(self) -> str:
        return f"<Tenant(id={self.id}, name='{self.name}', slug='{self.slug}')>"
