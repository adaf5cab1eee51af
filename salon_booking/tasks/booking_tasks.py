# ===== salon_booking/tasks/booking_tasks.py =====
from salon_booking.config.celery_config import celery_app
from salon_booking.config.database import SessionLocal
from salon_booking.core.clock import SystemClock
from salon_booking.services.booking.booking_service import BookingService
import logging

logger = logging.getLogger(__name__)


@celery_app.task
def complete_elapsed_bookings():
    """Periodic sweep: SCHEDULED bookings whose end has passed become COMPLETED"""
    db = SessionLocal()
    try:
        completed = BookingService.complete_elapsed_bookings(db, SystemClock())
        return {"status": "success", "completed": completed}

    except Exception as e:
        logger.error(f"Auto-complete sweep failed: {e}", exc_info=True)
        raise

    finally:
        db.close()
