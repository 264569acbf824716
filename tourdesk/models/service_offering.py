"""
ServiceOffering model - a sellable catalog unit - and its category detail records.

Each offering belongs to one supplier and carries at most one detail record
matching its category (HotelRoom, Transfer, Vehicle, Guide, Activity).
Rates can only be attached once the detail record exists.
"""

import enum
from decimal import Decimal
from typing import Optional, List, TYPE_CHECKING

from sqlalchemy import BigInteger, Boolean, CheckConstraint, DECIMAL, Enum as SQLEnum, ForeignKey, Integer, String
from sqlalchemy.orm import Mapped, mapped_column, relationship

from tourdesk.models.base import JSONType, TenantBase

if TYPE_CHECKING:
    from tourdesk.models.supplier import Supplier
    from tourdesk.models.seasonal_rate import SeasonalRate


class ServiceCategory(str, enum.Enum):
    """Service categories; each one has its own rate payload and cost formula."""
    HOTEL_ROOM = "HOTEL_ROOM"
    TRANSFER = "TRANSFER"
    VEHICLE_HIRE = "VEHICLE_HIRE"
    GUIDE_SERVICE = "GUIDE_SERVICE"
    ACTIVITY = "ACTIVITY"


# Shared by service_offerings.category and seasonal_rates.category
ServiceCategoryType = SQLEnum(*[c.value for c in ServiceCategory], name="service_category_enum")


class ServiceOffering(TenantBase):
    """
    A sellable unit of the catalog.
    """

    __tablename__ = "service_offerings"
    __table_args__ = (
        CheckConstraint("markup_pct >= 0", name="ck_service_offerings_markup"),
    )

    supplier_id: Mapped[int] = mapped_column(
        BigInteger,
        ForeignKey("suppliers.id", ondelete="RESTRICT"),
        nullable=False,
        index=True,
    )

    category: Mapped[str] = mapped_column(ServiceCategoryType, nullable=False, index=True)
    title: Mapped[str] = mapped_column(String(255), nullable=False)

    # Markup override; falls back to tenant default, then settings
    markup_pct: Mapped[Optional[Decimal]] = mapped_column(DECIMAL(5, 2), nullable=True)

    is_active: Mapped[bool] = mapped_column(Boolean, default=True, nullable=False)

    # Relationships
    supplier: Mapped["Supplier"] = relationship("Supplier", back_populates="offerings", lazy="raise")
    rates: Mapped[List["SeasonalRate"]] = relationship(
        "SeasonalRate", back_populates="service_offering", lazy="raise"
    )

    # Detail records (one of them, depending on category)
    hotel_room: Mapped[Optional["HotelRoom"]] = relationship(back_populates="service_offering", lazy="raise")
    transfer: Mapped[Optional["Transfer"]] = relationship(back_populates="service_offering", lazy="raise")
    vehicle: Mapped[Optional["Vehicle"]] = relationship(back_populates="service_offering", lazy="raise")
    guide: Mapped[Optional["Guide"]] = relationship(back_populates="service_offering", lazy="raise")
    activity: Mapped[Optional["Activity"]] = relationship(back_populates="service_offering", lazy="raise")

    @property
    def service_category(self) -> ServiceCategory:
        return ServiceCategory(self.category)

    @property
    def detail(self):
        """The category detail record. Requires the relationship to be eager-loaded."""
        return getattr(self, DETAIL_ATTRIBUTES[self.service_category])

    def __repr__(self) -> str:
        return f"<ServiceOffering(id={self.id}, category='{self.category}', title='{self.title}')>"


class _OfferingDetail(TenantBase):
    __abstract__ = True

    service_offering_id: Mapped[int] = mapped_column(
        BigInteger,
        ForeignKey("service_offerings.id", ondelete="CASCADE"),
        nullable=False,
        unique=True,
    )


class HotelRoom(_OfferingDetail):
    __tablename__ = "hotel_rooms"

    hotel_name: Mapped[str] = mapped_column(String(255), nullable=False)
    room_type: Mapped[str] = mapped_column(String(100), nullable=False)
    max_occupancy: Mapped[int] = mapped_column(Integer, default=3)

    service_offering: Mapped["ServiceOffering"] = relationship(back_populates="hotel_room", lazy="raise")


class Transfer(_OfferingDetail):
    __tablename__ = "transfers"

    origin_zone: Mapped[str] = mapped_column(String(255), nullable=False)
    dest_zone: Mapped[str] = mapped_column(String(255), nullable=False)
    transfer_type: Mapped[str] = mapped_column(String(50), default="PRIVATE")  # PRIVATE, SHARED
    vehicle_class: Mapped[Optional[str]] = mapped_column(String(50), nullable=True)

    service_offering: Mapped["ServiceOffering"] = relationship(back_populates="transfer", lazy="raise")


class Vehicle(_OfferingDetail):
    __tablename__ = "vehicles"

    make: Mapped[str] = mapped_column(String(100), nullable=False)
    model: Mapped[str] = mapped_column(String(100), nullable=False)
    vehicle_class: Mapped[Optional[str]] = mapped_column(String(50), nullable=True)
    with_driver: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)

    service_offering: Mapped["ServiceOffering"] = relationship(back_populates="vehicle", lazy="raise")


class Guide(_OfferingDetail):
    __tablename__ = "guides"

    guide_name: Mapped[str] = mapped_column(String(255), nullable=False)
    languages: Mapped[Optional[list]] = mapped_column(JSONType, nullable=True)

    service_offering: Mapped["ServiceOffering"] = relationship(back_populates="guide", lazy="raise")


class Activity(_OfferingDetail):
    __tablename__ = "activities"

    operator_name: Mapped[str] = mapped_column(String(255), nullable=False)
    activity_type: Mapped[Optional[str]] = mapped_column(String(100), nullable=True)
    duration_minutes: Mapped[Optional[int]] = mapped_column(Integer, nullable=True)

    service_offering: Mapped["ServiceOffering"] = relationship(back_populates="activity", lazy="raise")


DETAIL_ATTRIBUTES = {
    ServiceCategory.HOTEL_ROOM: "hotel_room",
    ServiceCategory.TRANSFER: "transfer",
    ServiceCategory.VEHICLE_HIRE: "vehicle",
    ServiceCategory.GUIDE_SERVICE: "guide",
    ServiceCategory.ACTIVITY: "activity",
}

DETAIL_MODELS = {
    ServiceCategory.HOTEL_ROOM: HotelRoom,
    ServiceCategory.TRANSFER: Transfer,
    ServiceCategory.VEHICLE_HIRE: Vehicle,
    ServiceCategory.GUIDE_SERVICE: Guide,
    ServiceCategory.ACTIVITY: Activity,
}
