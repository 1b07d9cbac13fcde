"""Celery application factory"""
from celery import Celery

from booking_engine.config.settings import get_settings

settings = get_settings()


def create_celery_app() -> Celery:
    """Create and configure the Celery app"""
    app = Celery(
        "booking_engine",
        broker=settings.CELERY_BROKER_URL,
        backend=settings.CELERY_RESULT_BACKEND,
        include=["booking_engine.tasks.recurring_tasks"],
    )

    app.conf.update(
        task_serializer=settings.CELERY_TASK_SERIALIZER,
        result_serializer="json",
        accept_content=["json"],
        timezone=settings.DEFAULT_TIMEZONE,
        enable_utc=True,
        task_acks_late=True,
        worker_prefetch_multiplier=1,
        beat_schedule={
            "complete-exhausted-patterns": {
                "task": "booking_engine.tasks.recurring_tasks.complete_exhausted_patterns",
                "schedule": 60 * 60,  # hourly
            },
        },
    )
    return app


celery_app = create_celery_app()
