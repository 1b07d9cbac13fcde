# ===== booking_engine/tasks/recurring_tasks.py =====
from datetime import datetime
import logging

from booking_engine.config.celery_config import celery_app
from booking_engine.config.database import get_db
from booking_engine.services.recurrence.recurring_booking_service import RecurringBookingService

logger = logging.getLogger(__name__)


@celery_app.task(bind=True, max_retries=3)
def complete_exhausted_patterns(self, as_of: str = None):
    """Mark active recurring bookings whose series has ended as completed"""
    db = next(get_db())
    try:
        now = datetime.fromisoformat(as_of) if as_of else datetime.now()
        completed = RecurringBookingService.complete_exhausted(db, now=now)

        logger.info(f"Completed {completed} exhausted recurring bookings")
        return {"status": "success", "completed": completed}

    except Exception as exc:
        logger.error(f"Completion sweep failed: {exc}")
        db.rollback()
        raise self.retry(exc=exc, countdown=60 * (self.request.retries + 1))

    finally:
        db.close()
