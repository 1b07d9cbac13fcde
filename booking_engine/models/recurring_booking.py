# booking_engine/models/recurring_booking.py
"""
Recurring Booking Model
A standing appointment series and the booking ids generated from it.
"""
from datetime import datetime, timezone
from sqlalchemy import Column, String, Integer, DateTime, JSON, Uuid, Enum as SQLAEnum
import uuid
import enum
from booking_engine.models.base import Base


def _utcnow():
    return datetime.now(timezone.utc)


class RecurrenceFrequency(str, enum.Enum):
    WEEKLY = "weekly"
    BIWEEKLY = "biweekly"
    MONTHLY = "monthly"


class RecurringStatus(str, enum.Enum):
    ACTIVE = "active"
    PAUSED = "paused"
    CANCELLED = "cancelled"
    COMPLETED = "completed"


class PaymentPlan(str, enum.Enum):
    PER_SESSION = "per_session"
    MONTHLY_SUBSCRIPTION = "monthly_subscription"


class RecurringBooking(Base):
    __tablename__ = "recurring_bookings"

    id = Column(Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4)

    # References
    client_id = Column(Uuid(as_uuid=True), nullable=False, index=True)
    staff_id = Column(Uuid(as_uuid=True), nullable=False, index=True)
    service_id = Column(Uuid(as_uuid=True), nullable=False)

    # Recurrence pattern
    frequency = Column(
        SQLAEnum(
            RecurrenceFrequency,
            name="recurrence_frequency",
            values_callable=lambda obj: [e.value for e in obj]
        ),
        nullable=False
    )
    interval = Column(Integer, nullable=False, default=1)  # every N weeks/months
    day_of_week = Column(Integer, nullable=True)  # 0=Sunday, 6=Saturday
    day_of_month = Column(Integer, nullable=True)  # 1-31

    # Time of day
    start_time = Column(String(5), nullable=False)  # "14:00"
    duration_minutes = Column(Integer, nullable=False)
    time_zone = Column(String(64), nullable=False)  # label only

    # Date range
    start_date = Column(DateTime, nullable=False)
    end_date = Column(DateTime, nullable=True)
    occurrence_limit = Column(Integer, nullable=True)  # alternative to end_date

    generated_booking_ids = Column(JSON, nullable=False, default=list)

    status = Column(
        SQLAEnum(
            RecurringStatus,
            name="recurring_status",
            values_callable=lambda obj: [e.value for e in obj]
        ),
        nullable=False,
        default=RecurringStatus.ACTIVE,
        index=True
    )
    payment_plan = Column(
        SQLAEnum(
            PaymentPlan,
            name="payment_plan",
            values_callable=lambda obj: [e.value for e in obj]
        ),
        nullable=False,
        default=PaymentPlan.PER_SESSION
    )

    # Optimistic lock: every UPDATE is guarded by the version read
    version = Column(Integer, nullable=False, default=1)

    created_at = Column(DateTime(timezone=True), default=_utcnow, nullable=False)
    updated_at = Column(DateTime(timezone=True), default=_utcnow, onupdate=_utcnow)

    __mapper_args__ = {"version_id_col": version}

    def __repr__(self):
        return f"<RecurringBooking(id={self.id}, frequency={self.frequency}, status={self.status})>"
