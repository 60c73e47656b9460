"""SQLAlchemy ORM models for sales clients, versions, history and fulfillment."""

import uuid
from datetime import date, datetime, time
from typing import Any

from sqlalchemy import (
    JSON,
    Boolean,
    Date,
    DateTime,
    ForeignKey,
    Index,
    Integer,
    Numeric,
    Text,
    Time,
    UniqueConstraint,
    Uuid,
)
from sqlalchemy.dialects.postgresql import JSONB
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column, relationship
from sqlalchemy.sql import func

JSONType = JSON().with_variant(JSONB(), "postgresql")


class Base(DeclarativeBase):
    """Base class for all SQLAlchemy models."""

    pass


class SalesClient(Base):
    """Sales client table - one package being sold."""

    __tablename__ = "sales_client"
    __table_args__ = (
        UniqueConstraint(
            "sales_person_id",
            "country_code",
            "whatsapp",
            "travel_date",
            name="uq_sales_client_natural_key",
        ),
        Index("idx_sales_client_follow_up", "sales_person_id", "next_follow_up_date"),
    )

    client_id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    sales_person_id: Mapped[uuid.UUID] = mapped_column(Uuid, nullable=False)
    name: Mapped[str] = mapped_column(Text, nullable=False)
    country_code: Mapped[str] = mapped_column(Text, nullable=False)
    whatsapp: Mapped[str] = mapped_column(Text, nullable=False)
    email: Mapped[str | None] = mapped_column(Text, nullable=True)
    travel_date: Mapped[date] = mapped_column(Date, nullable=False)
    number_of_days: Mapped[int] = mapped_column(Integer, nullable=False)
    number_of_adults: Mapped[int] = mapped_column(Integer, nullable=False)
    number_of_children: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    transportation_mode: Mapped[str] = mapped_column(Text, nullable=False)
    total_cost: Mapped[float] = mapped_column(Numeric(12, 2), nullable=False, default=0)
    current_status: Mapped[str] = mapped_column(Text, nullable=False)
    next_follow_up_date: Mapped[date | None] = mapped_column(Date, nullable=True)
    next_follow_up_time: Mapped[time | None] = mapped_column(Time, nullable=True)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now(), nullable=False
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now(), nullable=False
    )

    # Relationships
    versions: Mapped[list["ItineraryVersion"]] = relationship(
        "ItineraryVersion", back_populates="client"
    )
    history: Mapped[list["FollowUpHistory"]] = relationship(
        "FollowUpHistory", back_populates="client"
    )


class ItineraryVersion(Base):
    """Itinerary version table - immutable snapshots, numbered per client."""

    __tablename__ = "itinerary_version"
    __table_args__ = (
        UniqueConstraint("client_id", "version_number", name="uq_itinerary_version_number"),
    )

    version_id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    client_id: Mapped[uuid.UUID] = mapped_column(
        Uuid, ForeignKey("sales_client.client_id"), nullable=False
    )
    version_number: Mapped[int] = mapped_column(Integer, nullable=False)
    itinerary_data: Mapped[dict[str, Any]] = mapped_column(JSONType, nullable=False)
    total_cost: Mapped[float] = mapped_column(Numeric(12, 2), nullable=False)
    change_description: Mapped[str] = mapped_column(Text, nullable=False)
    follow_up_status: Mapped[str] = mapped_column(Text, nullable=False)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now(), nullable=False
    )
    created_by: Mapped[uuid.UUID] = mapped_column(Uuid, nullable=False)

    # Relationships
    client: Mapped["SalesClient"] = relationship("SalesClient", back_populates="versions")


class FollowUpHistory(Base):
    """Follow-up history table - append-only funnel transitions."""

    __tablename__ = "follow_up_history"
    __table_args__ = (
        UniqueConstraint("client_id", "sequence", name="uq_follow_up_history_sequence"),
    )

    entry_id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    client_id: Mapped[uuid.UUID] = mapped_column(
        Uuid, ForeignKey("sales_client.client_id"), nullable=False
    )
    sales_person_id: Mapped[uuid.UUID] = mapped_column(Uuid, nullable=False)
    sequence: Mapped[int] = mapped_column(Integer, nullable=False)
    status: Mapped[str] = mapped_column(Text, nullable=False)
    remarks: Mapped[str] = mapped_column(Text, nullable=False)
    next_follow_up_date: Mapped[date | None] = mapped_column(Date, nullable=True)
    next_follow_up_time: Mapped[time | None] = mapped_column(Time, nullable=True)
    itinerary_version_number: Mapped[int | None] = mapped_column(Integer, nullable=True)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now(), nullable=False
    )
    created_by: Mapped[uuid.UUID] = mapped_column(Uuid, nullable=False)

    # Relationships
    client: Mapped["SalesClient"] = relationship("SalesClient", back_populates="history")


class OperationsPerson(Base):
    """Operations staff table."""

    __tablename__ = "operations_person"

    person_id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    name: Mapped[str] = mapped_column(Text, nullable=False)
    is_active: Mapped[bool] = mapped_column(Boolean, default=True, nullable=False)


class PackageAssignment(Base):
    """Package assignment table - at most one per client."""

    __tablename__ = "package_assignment"
    __table_args__ = (UniqueConstraint("client_id", name="uq_package_assignment_client"),)

    assignment_id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    client_id: Mapped[uuid.UUID] = mapped_column(
        Uuid, ForeignKey("sales_client.client_id"), nullable=False
    )
    sales_person_id: Mapped[uuid.UUID] = mapped_column(Uuid, nullable=False)
    operations_person_id: Mapped[uuid.UUID] = mapped_column(
        Uuid, ForeignKey("operations_person.person_id"), nullable=False
    )
    version_number: Mapped[int] = mapped_column(Integer, nullable=False)
    status: Mapped[str] = mapped_column(Text, nullable=False, default="pending")
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now(), nullable=False
    )
    created_by: Mapped[uuid.UUID] = mapped_column(Uuid, nullable=False)

    # Relationships
    items: Mapped[list["BookingChecklistItem"]] = relationship(
        "BookingChecklistItem", back_populates="assignment", cascade="all, delete-orphan"
    )


class BookingChecklistItem(Base):
    """Booking checklist table - one row per bookable unit."""

    __tablename__ = "booking_checklist_item"
    __table_args__ = (Index("idx_checklist_client_day", "client_id", "day_number"),)

    item_id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    client_id: Mapped[uuid.UUID] = mapped_column(
        Uuid, ForeignKey("sales_client.client_id"), nullable=False
    )
    assignment_id: Mapped[uuid.UUID] = mapped_column(
        Uuid, ForeignKey("package_assignment.assignment_id", ondelete="CASCADE"), nullable=False
    )
    item_type: Mapped[str] = mapped_column(Text, nullable=False)
    item_ref: Mapped[str] = mapped_column(Text, nullable=False)
    item_name: Mapped[str] = mapped_column(Text, nullable=False)
    day_number: Mapped[int | None] = mapped_column(Integer, nullable=True)
    is_booked: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)
    booked_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
    booked_by: Mapped[uuid.UUID | None] = mapped_column(Uuid, nullable=True)
    booking_notes: Mapped[str | None] = mapped_column(Text, nullable=True)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now(), nullable=False
    )

    # Relationships
    assignment: Mapped["PackageAssignment"] = relationship(
        "PackageAssignment", back_populates="items"
    )
