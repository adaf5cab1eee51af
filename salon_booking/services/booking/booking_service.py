# ============================================================================
# salon_booking/services/booking/booking_service.py
# ============================================================================
"""Booking lifecycle: create, reschedule, cancel and auto-complete"""
import logging
from dataclasses import dataclass, field
from datetime import datetime, timedelta
from typing import Any, Dict, List, Optional, Tuple

from sqlalchemy.orm import Session
from zoneinfo import ZoneInfo

from salon_booking.config.database import unit_of_work
from salon_booking.config.settings import get_settings
from salon_booking.core.clock import Clock
from salon_booking.core.errors import (
    InvalidStateError,
    NotFoundError,
    PastTimeError,
    SameDayChangeError,
    ValidationError,
)
from salon_booking.models import (
    Booking,
    BookingService as BookingLine,
    BookingStatus,
    Employee,
    Payment,
    Salon,
)
from salon_booking.services.availability.schedule_rules import (
    ensure_within_operating_hours,
    get_active_employee,
    get_bookable_salon,
    load_offered_services,
)
from salon_booking.services.booking.conflict_guard import (
    ConflictGuard,
    storage_conflicts_as_slot_conflicts,
)
from salon_booking.services.notification.notification_service import BookingNotifier
from salon_booking.services.payment.payment_service import PaymentService
from salon_booking.utils.timezones import local_date_of, resolve_zone, utc_to_local

logger = logging.getLogger(__name__)


@dataclass
class CancelResult:
    booking: Booking
    previous_status: BookingStatus
    refunded_payments: List[Payment] = field(default_factory=list)


def booking_to_dict(booking: Booking, zone: ZoneInfo) -> Dict[str, Any]:
    """Convert to dictionary for API responses"""
    return {
        "id": booking.id,
        "salon_id": booking.salon_id,
        "customer_user_id": booking.customer_user_id,
        "status": booking.status.value,
        "scheduled_start": booking.scheduled_start.isoformat(),
        "scheduled_end": booking.scheduled_end.isoformat(),
        "display_start_time": utc_to_local(booking.scheduled_start, zone).isoformat(),
        "display_end_time": utc_to_local(booking.scheduled_end, zone).isoformat(),
        "duration_minutes": booking.duration_minutes,
        "notes": booking.notes,
        "services": [
            {
                "service_id": line.service_id,
                "employee_id": line.employee_id,
                "price": str(line.price),
                "duration_minutes": line.duration_minutes,
            }
            for line in booking.lines
        ],
        "total_price": str(booking.total_price),
        "canceled_at": booking.canceled_at.isoformat() if booking.canceled_at else None,
        "created_at": booking.created_at.isoformat() if booking.created_at else None,
    }


class BookingService:
    """Handles booking state changes; every write runs under one unit of work"""

    @staticmethod
    def _transition(booking: Booking, target: BookingStatus, now: datetime) -> None:
        if not booking.status.can_transition_to(target):
            raise InvalidStateError(
                f"Booking cannot move from {booking.status.value} to {target.value}"
            )
        booking.status = target
        if target == BookingStatus.CANCELED:
            booking.canceled_at = now

    @staticmethod
    def _enforce_same_day_policy(booking: Booking, zone: ZoneInfo, now: datetime, action: str) -> None:
        if not get_settings().ENFORCE_SAME_DAY_POLICY:
            return
        if local_date_of(booking.scheduled_start, zone) == local_date_of(now, zone):
            raise SameDayChangeError(f"Cannot {action} on the day of the appointment")

    @staticmethod
    def _stylists_of(db: Session, booking: Booking) -> List[Employee]:
        ids = booking.employee_ids
        if not ids:
            return []
        return db.query(Employee).filter(Employee.id.in_(ids)).order_by(Employee.id).all()

    @staticmethod
    def _get_customer_booking(db: Session, booking_id: int, customer_user_id: int) -> Booking:
        booking = db.query(Booking).filter(
            Booking.id == booking_id,
            Booking.customer_user_id == customer_user_id
        ).with_for_update().populate_existing().first()
        if not booking:
            raise NotFoundError("Booking not found")
        return booking

    @staticmethod
    def create_booking(
            db: Session,
            salon_id: int,
            employee_id: int,
            customer_user_id: int,
            scheduled_start: datetime,
            service_ids: List[int],
            clock: Clock,
            notifier: BookingNotifier,
            notes: Optional[str] = None
    ) -> Booking:
        """Reserve a stylist for the summed duration of the chosen services"""
        now = clock.now()
        if scheduled_start <= now:
            raise PastTimeError("Cannot book appointments in the past")

        with storage_conflicts_as_slot_conflicts(), unit_of_work(db):
            salon = get_bookable_salon(db, salon_id)
            employee = get_active_employee(db, salon_id, employee_id)
            services = load_offered_services(db, employee, service_ids)
            zone = resolve_zone(salon.timezone)

            total_minutes = sum(service.duration_minutes for service in services)
            scheduled_end = scheduled_start + timedelta(minutes=total_minutes)
            ensure_within_operating_hours(db, salon, [employee], scheduled_start, scheduled_end, zone)

            ConflictGuard.reserve(db, [employee.id], scheduled_start, scheduled_end, zone)

            booking = Booking(
                salon_id=salon.id,
                customer_user_id=customer_user_id,
                scheduled_start=scheduled_start,
                scheduled_end=scheduled_end,
                status=BookingStatus.SCHEDULED,
                notes=notes or "",
            )
            booking.lines = [
                BookingLine(
                    employee_id=employee.id,
                    service_id=service.id,
                    price=service.price,
                    duration_minutes=service.duration_minutes,
                )
                for service in services
            ]
            db.add(booking)
            db.flush()

        db.refresh(booking)
        logger.info(
            f"Booking {booking.id} created for customer {customer_user_id} with employee {employee_id} "
            f"at {scheduled_start.isoformat()}"
        )
        notifier.booking_created(booking, [employee])
        return booking

    @staticmethod
    def reschedule_booking(
            db: Session,
            booking_id: int,
            customer_user_id: int,
            new_start: datetime,
            clock: Clock,
            notifier: BookingNotifier
    ) -> Tuple[Booking, Booking]:
        """
        Move a scheduled booking by canceling it and inserting a replacement
        with the same service lines. Returns (old, new).
        """
        now = clock.now()
        if new_start <= now:
            raise PastTimeError("Cannot reschedule to a past time")

        with storage_conflicts_as_slot_conflicts(), unit_of_work(db):
            old = BookingService._get_customer_booking(db, booking_id, customer_user_id)
            if old.status != BookingStatus.SCHEDULED:
                raise InvalidStateError("Booking not found or not reschedulable (must be SCHEDULED)")

            salon = db.query(Salon).filter(Salon.id == old.salon_id).first()
            zone = resolve_zone(salon.timezone)
            BookingService._enforce_same_day_policy(old, zone, now, "reschedule")

            lines = list(old.lines)
            if not lines:
                raise ValidationError("Booking has no services to reschedule")

            stylists = BookingService._stylists_of(db, old)
            inactive = [stylist.id for stylist in stylists if not stylist.is_active]
            if inactive or len(stylists) != len(old.employee_ids):
                raise NotFoundError("Stylist not found or not available")

            new_end = new_start + timedelta(minutes=sum(line.duration_minutes for line in lines))
            ensure_within_operating_hours(db, salon, stylists, new_start, new_end, zone)

            ConflictGuard.reserve(
                db, [stylist.id for stylist in stylists], new_start, new_end, zone,
                exclude_booking_id=old.id
            )

            BookingService._transition(old, BookingStatus.CANCELED, now)

            new = Booking(
                salon_id=old.salon_id,
                customer_user_id=old.customer_user_id,
                scheduled_start=new_start,
                scheduled_end=new_end,
                status=BookingStatus.SCHEDULED,
                notes=old.notes,
            )
            new.lines = [
                BookingLine(
                    employee_id=line.employee_id,
                    service_id=line.service_id,
                    price=line.price,
                    duration_minutes=line.duration_minutes,
                )
                for line in lines
            ]
            db.add(new)
            db.flush()

            PaymentService.move_payments(db, old.id, new.id)

        db.refresh(old)
        db.refresh(new)
        logger.info(f"Booking {old.id} rescheduled to {new.id} at {new_start.isoformat()}")
        notifier.booking_rescheduled(old, new, stylists)
        return old, new

    @staticmethod
    def cancel_booking(
            db: Session,
            booking_id: int,
            customer_user_id: int,
            clock: Clock,
            notifier: BookingNotifier
    ) -> CancelResult:
        """Customer cancellation; refunds captured payments in the same transaction"""
        now = clock.now()

        with unit_of_work(db):
            booking = BookingService._get_customer_booking(db, booking_id, customer_user_id)
            if booking.status != BookingStatus.SCHEDULED:
                raise InvalidStateError("Booking not found or not cancelable (must be SCHEDULED)")

            salon = db.query(Salon).filter(Salon.id == booking.salon_id).first()
            BookingService._enforce_same_day_policy(booking, resolve_zone(salon.timezone), now, "cancel")

            previous_status = booking.status
            BookingService._transition(booking, BookingStatus.CANCELED, now)
            refunded = PaymentService.refund_succeeded_payments(db, booking.id)
            stylists = BookingService._stylists_of(db, booking)

        db.refresh(booking)
        logger.info(f"Booking {booking.id} canceled by customer {customer_user_id}")
        notifier.booking_canceled(booking, stylists)
        return CancelResult(booking=booking, previous_status=previous_status, refunded_payments=refunded)

    @staticmethod
    def cancel_booking_as_stylist(
            db: Session,
            booking_id: int,
            stylist_user_id: int,
            clock: Clock,
            notifier: BookingNotifier
    ) -> CancelResult:
        """Stylist cancellation; not subject to the same-day rule"""
        now = clock.now()

        with unit_of_work(db):
            employee = db.query(Employee).filter(Employee.user_id == stylist_user_id).first()
            if not employee:
                raise NotFoundError("Employee profile not found")

            booking = db.query(Booking).join(BookingLine, BookingLine.booking_id == Booking.id).filter(
                Booking.id == booking_id,
                BookingLine.employee_id == employee.id
            ).with_for_update().populate_existing().first()
            if not booking:
                raise NotFoundError("Booking not found")
            if booking.status != BookingStatus.SCHEDULED:
                raise InvalidStateError("Booking not found or not cancelable (must be SCHEDULED)")

            previous_status = booking.status
            BookingService._transition(booking, BookingStatus.CANCELED, now)
            refunded = PaymentService.refund_succeeded_payments(db, booking.id)
            stylists = BookingService._stylists_of(db, booking)

        db.refresh(booking)
        logger.info(f"Booking {booking.id} canceled by stylist {employee.id}")
        notifier.booking_canceled(booking, stylists)
        return CancelResult(booking=booking, previous_status=previous_status, refunded_payments=refunded)

    @staticmethod
    def delete_pending_booking(db: Session, booking_id: int, customer_user_id: int) -> None:
        """Drop an abandoned checkout; only PENDING bookings may be deleted"""
        with unit_of_work(db):
            booking = db.query(Booking).filter(
                Booking.id == booking_id,
                Booking.customer_user_id == customer_user_id,
                Booking.status == BookingStatus.PENDING
            ).first()
            if not booking:
                raise NotFoundError("Pending booking not found")
            db.delete(booking)

        logger.info(f"Pending booking {booking_id} deleted by customer {customer_user_id}")

    @staticmethod
    def list_customer_bookings(
            db: Session,
            customer_user_id: int,
            status: Optional[BookingStatus] = None
    ) -> List[Booking]:
        query = db.query(Booking).filter(Booking.customer_user_id == customer_user_id)
        if status is not None:
            query = query.filter(Booking.status == status)
        return query.order_by(Booking.scheduled_start.desc()).all()

    @staticmethod
    def complete_elapsed_bookings(db: Session, clock: Clock) -> int:
        """Mark SCHEDULED bookings whose end has passed as COMPLETED. Safe to rerun."""
        now = clock.now()
        with unit_of_work(db):
            bookings = db.query(Booking).filter(
                Booking.status == BookingStatus.SCHEDULED,
                Booking.scheduled_end <= now
            ).with_for_update().all()
            for booking in bookings:
                BookingService._transition(booking, BookingStatus.COMPLETED, now)

        if bookings:
            logger.info(f"Auto-completed {len(bookings)} booking(s)")
        return len(bookings)
