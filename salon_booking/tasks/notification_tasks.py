# ===== salon_booking/tasks/notification_tasks.py =====
from salon_booking.config.celery_config import celery_app
from salon_booking.config.database import SessionLocal
from salon_booking.schemas.task_payloads import BookingNotificationPayload
from salon_booking.services.notification.notification_service import deliver_notification
import logging

logger = logging.getLogger(__name__)


@celery_app.task(bind=True, max_retries=3)
def send_booking_notification(self, event: dict):
    """Write a booking event into the recipient's inbox"""
    payload = BookingNotificationPayload(**event)
    db = SessionLocal()
    try:
        notification = deliver_notification(db, payload.model_dump(mode="json"))
        return {"status": "success", "notification_id": notification.id}

    except Exception as exc:
        logger.error(f"Notification delivery failed for booking {payload.booking_id}: {exc}")
        raise self.retry(exc=exc, countdown=30 * (self.request.retries + 1))

    finally:
        db.close()
