"""
Supplier model - hotels, transfer companies, rental agencies, guides, activity operators.
"""

from typing import Optional, List, TYPE_CHECKING

from sqlalchemy import String, Boolean
from sqlalchemy.orm import Mapped, mapped_column, relationship

from tourdesk.models.base import TenantBase

if TYPE_CHECKING:
    from tourdesk.models.tenant import Tenant
    from tourdesk.models.service_offering import ServiceOffering


class Supplier(TenantBase):
    """
    A supplier providing one or more service offerings.
    """

    __tablename__ = "suppliers"

    name: Mapped[str] = mapped_column(String(255), nullable=False, index=True)
    contact_email: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)
    contact_phone: Mapped[Optional[str]] = mapped_column(String(100), nullable=True)
    is_active: Mapped[bool] = mapped_column(Boolean, default=True, nullable=False)

    # Relationships
    tenant: Mapped["Tenant"] = relationship("Tenant", back_populates="suppliers", lazy="raise")
    offerings: Mapped[List["ServiceOffering"]] = relationship(
        "ServiceOffering", back_populates="supplier", lazy="raise"
    )

    def __repr__(self) -> str:
        return f"<Supplier(id={self.id}, name='{self.name}')>"
