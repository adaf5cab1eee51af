"""Celery application factory and beat schedule"""
from celery import Celery

from salon_booking.config.settings import get_settings

settings = get_settings()


def create_celery_app() -> Celery:
    """Create and configure the Celery app used by the worker and the API"""
    app = Celery(
        "salon_booking",
        broker=settings.CELERY_BROKER_URL,
        backend=settings.CELERY_RESULT_BACKEND,
        include=[
            "salon_booking.tasks.notification_tasks",
            "salon_booking.tasks.booking_tasks",
        ],
    )

    app.conf.update(
        task_serializer=settings.CELERY_TASK_SERIALIZER,
        result_serializer="json",
        accept_content=["json"],
        timezone="UTC",
        enable_utc=True,
        task_always_eager=settings.CELERY_TASK_ALWAYS_EAGER,
        task_acks_late=True,
        worker_prefetch_multiplier=1,
        beat_schedule={
            "complete-elapsed-bookings": {
                "task": "salon_booking.tasks.booking_tasks.complete_elapsed_bookings",
                "schedule": float(settings.AUTO_COMPLETE_INTERVAL_SECONDS),
            },
        },
    )

    return app


celery_app = create_celery_app()
