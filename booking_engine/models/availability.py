# booking_engine/models/availability.py
"""
Availability Models
A schedule per staff member per effective period, with date-keyed
exceptions and overrides stored as child rows.
"""
from datetime import datetime, timezone
from sqlalchemy import Column, String, Date, DateTime, JSON, ForeignKey, Uuid, Enum as SQLAEnum
from sqlalchemy.orm import relationship
import uuid
import enum
from booking_engine.models.base import Base


def _utcnow():
    return datetime.now(timezone.utc)


class ExceptionKind(str, enum.Enum):
    """What an exception does to its date"""
    UNAVAILABLE = "unavailable"
    CUSTOM_HOURS = "custom_hours"


class AvailabilitySchedule(Base):
    """Weekly template for one staff member over an effective period"""
    __tablename__ = "availability_schedules"

    id = Column(Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4)
    staff_id = Column(Uuid(as_uuid=True), nullable=False, index=True)

    # [{"day_of_week": 0-6 (0=Sunday), "time_slots": [{"start": "09:00", "end": "17:00"}]}]
    weekly_schedule = Column(JSON, nullable=False, default=list)

    effective_from = Column(Date, nullable=False)
    effective_to = Column(Date, nullable=True)  # None = indefinite

    exceptions = relationship(
        "AvailabilityException",
        back_populates="schedule",
        cascade="all, delete-orphan",
        order_by="AvailabilityException.created_at",
    )
    overrides = relationship(
        "AvailabilityOverride",
        back_populates="schedule",
        cascade="all, delete-orphan",
        order_by="AvailabilityOverride.created_at",
    )

    created_at = Column(DateTime(timezone=True), default=_utcnow, nullable=False)
    updated_at = Column(DateTime(timezone=True), default=_utcnow, onupdate=_utcnow)

    def __repr__(self):
        return f"<AvailabilitySchedule(id={self.id}, staff_id={self.staff_id})>"


class AvailabilityException(Base):
    """Time off or special hours on a single date"""
    __tablename__ = "availability_exceptions"

    id = Column(Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4)
    schedule_id = Column(
        Uuid(as_uuid=True),
        ForeignKey("availability_schedules.id", ondelete="CASCADE"),
        nullable=False,
        index=True
    )

    date = Column(Date, nullable=False)
    kind = Column(
        SQLAEnum(
            ExceptionKind,
            name="exception_kind",
            values_callable=lambda obj: [e.value for e in obj]
        ),
        nullable=False
    )
    time_slots = Column(JSON, nullable=False, default=list)  # only used by custom_hours
    reason = Column(String, nullable=True)  # "Holiday", "Vacation", etc.

    schedule = relationship("AvailabilitySchedule", back_populates="exceptions")

    created_at = Column(DateTime(timezone=True), default=_utcnow, nullable=False)


class AvailabilityOverride(Base):
    """One-off extra availability on a single date"""
    __tablename__ = "availability_overrides"

    id = Column(Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4)
    schedule_id = Column(
        Uuid(as_uuid=True),
        ForeignKey("availability_schedules.id", ondelete="CASCADE"),
        nullable=False,
        index=True
    )

    date = Column(Date, nullable=False)
    time_slots = Column(JSON, nullable=False, default=list)

    schedule = relationship("AvailabilitySchedule", back_populates="overrides")

    created_at = Column(DateTime(timezone=True), default=_utcnow, nullable=False)
