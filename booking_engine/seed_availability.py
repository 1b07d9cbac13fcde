# ===== seed_availability.py =====
import uuid
from datetime import date

from booking_engine.config.database import get_db
from booking_engine.models.availability import ExceptionKind
from booking_engine.schemas.availability import (
    AvailabilityScheduleCreate,
    DaySchedule,
    ScheduleException,
    ScheduleOverride,
    TimeSlot,
)
from booking_engine.services.availability.schedule_service import ScheduleService

# Replace with a real staff ID from your DB
STAFF_ID = uuid.UUID("4267ca4e-1b71-4b5c-882b-c52475f8c613")


def seed_availability():
    db = next(get_db())

    try:
        # 1. Mon–Fri 9–5 (day_of_week 1=Monday ... 5=Friday)
        weekly = [
            DaySchedule(day_of_week=day, time_slots=[TimeSlot(start="09:00", end="17:00")])
            for day in range(1, 6)
        ]

        # 2. Example exception: day off on Dec 24
        day_off = ScheduleException(
            date=date(2025, 12, 24),
            kind=ExceptionKind.UNAVAILABLE,
            reason="Holiday"
        )

        # 3. Example override: Saturday morning clinic
        saturday_clinic = ScheduleOverride(
            date=date(2025, 12, 20),
            time_slots=[TimeSlot(start="10:00", end="14:00")]
        )

        schedule = ScheduleService.create_schedule(db, AvailabilityScheduleCreate(
            staff_id=STAFF_ID,
            weekly_schedule=weekly,
            exceptions=[day_off],
            overrides=[saturday_clinic],
            effective_from=date.today(),
        ))
        print(f"✅ Availability schedule {schedule.id} seeded successfully!")

    except Exception as e:
        db.rollback()
        print("❌ Error seeding availability:", e)
    finally:
        db.close()


if __name__ == "__main__":
    seed_availability()
