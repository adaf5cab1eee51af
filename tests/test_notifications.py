from datetime import datetime, timezone

from salon_booking.models import Booking, BookingStatus, NotificationInbox, NotificationStatus
from salon_booking.services.notification.notification_service import BookingNotifier, deliver_notification
from salon_booking.tasks import booking_tasks, notification_tasks


def test_deliver_notification_writes_unread_row(db_session):
    event = {
        "type_code": "BOOKING_CREATED",
        "user_id": 300,
        "salon_id": 1,
        "booking_id": 7,
        "employee_id": 2,
        "message": "Your appointment is booked",
    }
    with db_session() as db:
        notification = deliver_notification(db, event)
        stored = db.get(NotificationInbox, notification.id)
        assert stored.status == NotificationStatus.UNREAD
        assert stored.type_code == "BOOKING_CREATED"
        assert stored.booking_id == 7


def test_dispatch_failure_does_not_break_the_caller():
    def broken(event):
        raise ConnectionError("broker down")

    notifier = BookingNotifier(dispatch=broken)
    booking = Booking(
        id=5,
        salon_id=1,
        customer_user_id=300,
        scheduled_start=datetime(2025, 11, 11, 15, 0, tzinfo=timezone.utc),
    )
    events = notifier.booking_canceled(booking, [])
    assert [event.user_id for event in events] == [300]


def test_notification_task_delivers_event(monkeypatch, session_factory, db_session):
    monkeypatch.setattr(notification_tasks, "SessionLocal", session_factory)

    result = notification_tasks.send_booking_notification.apply(args=({
        "type_code": "BOOKING_CANCELED",
        "user_id": 200,
        "salon_id": 1,
        "booking_id": 9,
    },)).get()

    assert result["status"] == "success"
    with db_session() as db:
        rows = db.query(NotificationInbox).filter_by(user_id=200).all()
        assert [row.type_code for row in rows] == ["BOOKING_CANCELED"]


def test_sweep_task_completes_elapsed_bookings(monkeypatch, session_factory, db_session, book):
    booking_id = book("2025-11-11T10:00:00-05:00").json()["booking_id"]
    monkeypatch.setattr(booking_tasks, "SessionLocal", session_factory)

    # The task runs on the system clock, which is long past November 2025
    assert booking_tasks.complete_elapsed_bookings.apply().get() == {"status": "success", "completed": 1}
    assert booking_tasks.complete_elapsed_bookings.apply().get() == {"status": "success", "completed": 0}

    with db_session() as db:
        assert db.get(Booking, booking_id).status == BookingStatus.COMPLETED
