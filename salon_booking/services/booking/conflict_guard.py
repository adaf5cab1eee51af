# salon_booking/services/booking/conflict_guard.py
"""
Conflict guard: makes "reserve this stylist interval" atomic.

Every reserving transaction first bumps ``employees.reservation_version`` for
the stylists involved (in id order). That UPDATE holds the row lock on
PostgreSQL, and the database write lock on SQLite where transactions start
with BEGIN IMMEDIATE, until commit or rollback. The overlap checks that follow
therefore see every reservation committed before them, and no other
reservation for the same stylist can commit in between.
"""
import logging
from contextlib import contextmanager
from datetime import datetime
from typing import Any, Dict, Iterable, List, Optional

from sqlalchemy import update
from sqlalchemy.exc import IntegrityError, OperationalError
from sqlalchemy.orm import Session
from zoneinfo import ZoneInfo

from salon_booking.core.errors import NotFoundError, SlotConflictError
from salon_booking.models import (
    Booking,
    BookingService,
    Employee,
    EmployeeUnavailability,
    SLOT_HOLDING_STATUSES,
)
from salon_booking.services.availability.schedule_rules import block_interval, civil_dates_spanned
from salon_booking.utils.timezones import db_weekday

logger = logging.getLogger(__name__)

GENERIC_CONFLICT_MESSAGE = "Time slot is no longer available. Please select a different time."
BLOCKED_MESSAGE = "Stylist is unavailable during this time slot"

_LOCK_ERROR_MARKERS = (
    "deadlock detected",
    "database is locked",
    "could not obtain lock",
    "lock timeout",
    "could not serialize access",
)


def _is_lock_error(exc: OperationalError) -> bool:
    message = str(getattr(exc, "orig", exc)).lower()
    return any(marker in message for marker in _LOCK_ERROR_MARKERS)


@contextmanager
def storage_conflicts_as_slot_conflicts():
    """
    Translate storage-level losses of a reservation race into SlotConflictError
    so callers get a 409 instead of a generic failure.
    """
    try:
        yield
    except IntegrityError as exc:
        logger.warning(f"Integrity violation while reserving: {exc.orig}")
        raise SlotConflictError(GENERIC_CONFLICT_MESSAGE) from exc
    except OperationalError as exc:
        if _is_lock_error(exc):
            logger.warning(f"Lock contention while reserving: {exc.orig}")
            raise SlotConflictError(GENERIC_CONFLICT_MESSAGE) from exc
        raise


def booking_conflict_dict(booking: Booking) -> Dict[str, Any]:
    return {
        "booking_id": booking.id,
        "scheduled_start": booking.scheduled_start.isoformat(),
        "scheduled_end": booking.scheduled_end.isoformat(),
    }


class ConflictGuard:
    """Per-stylist serialization plus in-transaction overlap re-checks"""

    @staticmethod
    def lock_employees(db: Session, employee_ids: Iterable[int]) -> None:
        for employee_id in sorted(set(employee_ids)):
            result = db.execute(
                update(Employee)
                .where(Employee.id == employee_id)
                .values(reservation_version=Employee.reservation_version + 1)
                .execution_options(synchronize_session=False)
            )
            if result.rowcount == 0:
                raise NotFoundError("Stylist not found or not available")

    @staticmethod
    def find_overlapping_bookings(
            db: Session,
            employee_id: int,
            start: datetime,
            end: datetime,
            exclude_booking_id: Optional[int] = None
    ) -> List[Booking]:
        query = db.query(Booking).join(BookingService, BookingService.booking_id == Booking.id).filter(
            BookingService.employee_id == employee_id,
            Booking.status.in_(SLOT_HOLDING_STATUSES),
            Booking.scheduled_start < end,
            Booking.scheduled_end > start
        )
        if exclude_booking_id is not None:
            query = query.filter(Booking.id != exclude_booking_id)
        return query.distinct().order_by(Booking.scheduled_start).all()

    @staticmethod
    def find_overlapping_blocks(
            db: Session,
            employee_id: int,
            start: datetime,
            end: datetime,
            zone: ZoneInfo
    ) -> List[EmployeeUnavailability]:
        hits = []
        for civil_date in civil_dates_spanned(start, end, zone):
            blocks = db.query(EmployeeUnavailability).filter_by(
                employee_id=employee_id,
                weekday=db_weekday(civil_date)
            ).all()
            for block in blocks:
                block_start, block_end = block_interval(block, civil_date, zone)
                if start < block_end and block_start < end:
                    hits.append(block)
        return hits

    @staticmethod
    def reserve(
            db: Session,
            employee_ids: Iterable[int],
            start: datetime,
            end: datetime,
            zone: ZoneInfo,
            exclude_booking_id: Optional[int] = None
    ) -> None:
        """
        Lock the stylists and verify [start, end) is still free for each of
        them. Must run inside the transaction that writes the booking.
        """
        employee_ids = sorted(set(employee_ids))
        ConflictGuard.lock_employees(db, employee_ids)

        for employee_id in employee_ids:
            blocks = ConflictGuard.find_overlapping_blocks(db, employee_id, start, end, zone)
            if blocks:
                logger.info(f"Reservation for employee {employee_id} at {start.isoformat()} hits a recurring block")
                raise SlotConflictError(
                    BLOCKED_MESSAGE,
                    conflicts=[{"unavailability_id": block.id, **block.to_dict()} for block in blocks]
                )

            bookings = ConflictGuard.find_overlapping_bookings(
                db, employee_id, start, end, exclude_booking_id=exclude_booking_id
            )
            if bookings:
                logger.info(
                    f"Reservation for employee {employee_id} at {start.isoformat()} "
                    f"conflicts with booking(s) {[b.id for b in bookings]}"
                )
                raise SlotConflictError(
                    GENERIC_CONFLICT_MESSAGE,
                    conflicts=[booking_conflict_dict(b) for b in bookings]
                )
