# salon_booking/services/notification/notification_service.py
"""
Booking notifications.

Services call the notifier after their transaction commits. The default
notifier hands each event to a Celery task, which writes the inbox row; a
broker outage is logged and never fails the booking operation.
"""
import logging
from dataclasses import asdict, dataclass
from typing import Any, Callable, Dict, Iterable, List, Optional

from sqlalchemy.orm import Session

from salon_booking.models import (
    Booking,
    Employee,
    NotificationInbox,
    NotificationStatus,
    NotificationType,
)

logger = logging.getLogger(__name__)


@dataclass
class BookingEvent:
    type_code: str
    user_id: int
    salon_id: int
    booking_id: int
    employee_id: Optional[int] = None
    message: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


def _enqueue(event: BookingEvent) -> None:
    from salon_booking.tasks.notification_tasks import send_booking_notification

    send_booking_notification.delay(event.to_dict())


class BookingNotifier:
    """Builds one event per recipient and dispatches it"""

    def __init__(self, dispatch: Optional[Callable[[BookingEvent], None]] = None):
        self._dispatch = dispatch or _enqueue

    def booking_created(self, booking: Booking, stylists: Iterable[Employee]) -> List[BookingEvent]:
        when = booking.scheduled_start.isoformat()
        return self._emit(
            NotificationType.BOOKING_CREATED,
            booking,
            stylists,
            customer_message=f"Your appointment is booked for {when}",
            stylist_message=f"New appointment booked for {when}",
        )

    def booking_rescheduled(self, old: Booking, new: Booking, stylists: Iterable[Employee]) -> List[BookingEvent]:
        message = (
            f"Appointment moved from {old.scheduled_start.isoformat()} "
            f"to {new.scheduled_start.isoformat()}"
        )
        return self._emit(
            NotificationType.BOOKING_RESCHEDULED,
            new,
            stylists,
            customer_message=message,
            stylist_message=message,
        )

    def booking_canceled(self, booking: Booking, stylists: Iterable[Employee]) -> List[BookingEvent]:
        when = booking.scheduled_start.isoformat()
        return self._emit(
            NotificationType.BOOKING_CANCELED,
            booking,
            stylists,
            customer_message=f"Your appointment on {when} was canceled",
            stylist_message=f"Appointment on {when} was canceled",
        )

    def _emit(
            self,
            type_code: NotificationType,
            booking: Booking,
            stylists: Iterable[Employee],
            customer_message: str,
            stylist_message: str
    ) -> List[BookingEvent]:
        stylists = list(stylists)
        primary_employee_id = stylists[0].id if stylists else None
        events = [
            BookingEvent(
                type_code=type_code.value,
                user_id=booking.customer_user_id,
                salon_id=booking.salon_id,
                booking_id=booking.id,
                employee_id=primary_employee_id,
                message=customer_message,
            )
        ]
        for stylist in stylists:
            events.append(BookingEvent(
                type_code=type_code.value,
                user_id=stylist.user_id,
                salon_id=booking.salon_id,
                booking_id=booking.id,
                employee_id=stylist.id,
                message=stylist_message,
            ))

        for event in events:
            try:
                self._dispatch(event)
            except Exception as e:
                logger.error(f"Failed to dispatch {event.type_code} for booking {event.booking_id}: {e}", exc_info=True)
        return events


def get_notifier() -> BookingNotifier:
    """Notifier dependency for FastAPI"""
    return BookingNotifier()


def deliver_notification(db: Session, event: Dict[str, Any]) -> NotificationInbox:
    """Write one inbox row for a dispatched event"""
    notification = NotificationInbox(
        user_id=event["user_id"],
        salon_id=event.get("salon_id"),
        employee_id=event.get("employee_id"),
        booking_id=event.get("booking_id"),
        type_code=event["type_code"],
        status=NotificationStatus.UNREAD,
        message=event.get("message"),
    )
    db.add(notification)
    db.commit()
    db.refresh(notification)
    logger.info(f"Delivered {notification.type_code} to user {notification.user_id}")
    return notification
