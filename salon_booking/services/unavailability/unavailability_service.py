# salon_booking/services/unavailability/unavailability_service.py
"""Recurring weekly unavailability blocks owned by a stylist"""
import logging
from datetime import datetime, time
from typing import List, Optional

from sqlalchemy.orm import Session

from salon_booking.config.database import unit_of_work
from salon_booking.config.settings import get_settings
from salon_booking.core.clock import Clock
from salon_booking.core.errors import NotFoundError, SlotConflictError, ValidationError
from salon_booking.models import (
    Booking,
    BookingService,
    BookingStatus,
    Employee,
    EmployeeAvailability,
    EmployeeUnavailability,
    Salon,
)
from salon_booking.services.availability.schedule_rules import window_interval
from salon_booking.services.booking.conflict_guard import (
    ConflictGuard,
    booking_conflict_dict,
    storage_conflicts_as_slot_conflicts,
)
from salon_booking.utils.timezones import (
    db_weekday,
    format_local_time,
    local_date_of,
    parse_local_time,
    resolve_zone,
    validate_weekday,
)

logger = logging.getLogger(__name__)


class UnavailabilityService:
    """Create, list and delete recurring blocks"""

    @staticmethod
    def get_employee_for_user(db: Session, user_id: int) -> Employee:
        employee = db.query(Employee).filter(Employee.user_id == user_id).first()
        if not employee:
            raise NotFoundError("Employee profile not found")
        return employee

    @staticmethod
    def _parse_window(start_time, end_time) -> tuple:
        start = parse_local_time(start_time, "start_time")
        end = parse_local_time(end_time, "end_time")
        if end <= start:
            raise ValidationError("end_time must be after start_time")
        return start, end

    @staticmethod
    def find_conflicting_bookings(
            db: Session,
            employee: Employee,
            weekday: int,
            start: time,
            end: time,
            now: datetime
    ) -> List[Booking]:
        """Upcoming scheduled bookings whose interval meets the block on a matching local date"""
        salon = db.query(Salon).filter(Salon.id == employee.salon_id).first()
        zone = resolve_zone(salon.timezone if salon else None)

        bookings = db.query(Booking).join(BookingService, BookingService.booking_id == Booking.id).filter(
            BookingService.employee_id == employee.id,
            Booking.status == BookingStatus.SCHEDULED,
            Booking.scheduled_end > now
        ).distinct().order_by(Booking.scheduled_start).all()

        conflicts = []
        for booking in bookings:
            civil_date = local_date_of(booking.scheduled_start, zone)
            if db_weekday(civil_date) != weekday:
                continue
            block_start, block_end = window_interval(start, end, civil_date, zone)
            if booking.scheduled_start < block_end and block_start < booking.scheduled_end:
                conflicts.append(booking)
        return conflicts

    @staticmethod
    def create_block(
            db: Session,
            stylist_user_id: int,
            weekday,
            start_time,
            end_time,
            clock: Clock,
            slot_interval_minutes: Optional[int] = None
    ) -> EmployeeUnavailability:
        weekday = validate_weekday(weekday)
        start, end = UnavailabilityService._parse_window(start_time, end_time)
        interval = get_settings().DEFAULT_SLOT_INTERVAL_MINUTES if slot_interval_minutes is None else slot_interval_minutes
        if interval <= 0:
            raise ValidationError("slot_interval_minutes must be a positive integer")

        with storage_conflicts_as_slot_conflicts(), unit_of_work(db):
            employee = UnavailabilityService.get_employee_for_user(db, stylist_user_id)

            availability = db.query(EmployeeAvailability).filter_by(
                employee_id=employee.id, weekday=weekday
            ).first()
            if not availability:
                raise ValidationError("Stylist is not available on this day")
            if start < availability.start_time or end > availability.end_time:
                raise ValidationError(
                    "Unavailability must be within employee availability hours "
                    f"({format_local_time(availability.start_time)} - "
                    f"{format_local_time(availability.end_time)})"
                )

            # Same lock as bookings so a block and a booking cannot both land
            ConflictGuard.lock_employees(db, [employee.id])

            overlapping = db.query(EmployeeUnavailability).filter(
                EmployeeUnavailability.employee_id == employee.id,
                EmployeeUnavailability.weekday == weekday,
                EmployeeUnavailability.start_time < end,
                EmployeeUnavailability.end_time > start
            ).all()
            if overlapping:
                raise SlotConflictError(
                    "Unavailability overlaps with existing block",
                    conflicts=[block.to_dict() for block in overlapping]
                )

            bookings = UnavailabilityService.find_conflicting_bookings(db, employee, weekday, start, end, clock.now())
            if bookings:
                raise SlotConflictError(
                    "Unavailability overlaps with scheduled bookings",
                    conflicts=[booking_conflict_dict(booking) for booking in bookings]
                )

            block = EmployeeUnavailability(
                employee_id=employee.id,
                weekday=weekday,
                start_time=start,
                end_time=end,
                slot_interval_minutes=interval,
            )
            db.add(block)
            db.flush()

        db.refresh(block)
        logger.info(
            f"Employee {block.employee_id} blocked weekday {weekday} "
            f"{format_local_time(start)}-{format_local_time(end)}"
        )
        return block

    @staticmethod
    def list_blocks(db: Session, stylist_user_id: int, weekday=None) -> List[EmployeeUnavailability]:
        employee = UnavailabilityService.get_employee_for_user(db, stylist_user_id)
        query = db.query(EmployeeUnavailability).filter(EmployeeUnavailability.employee_id == employee.id)
        if weekday is not None:
            query = query.filter(EmployeeUnavailability.weekday == validate_weekday(weekday))
        return query.order_by(EmployeeUnavailability.weekday, EmployeeUnavailability.start_time).all()

    @staticmethod
    def delete_block(db: Session, stylist_user_id: int, weekday, start_time, end_time) -> None:
        """Delete the block matching weekday and window exactly"""
        weekday = validate_weekday(weekday)
        start, end = UnavailabilityService._parse_window(start_time, end_time)

        with unit_of_work(db):
            employee = UnavailabilityService.get_employee_for_user(db, stylist_user_id)
            deleted = db.query(EmployeeUnavailability).filter(
                EmployeeUnavailability.employee_id == employee.id,
                EmployeeUnavailability.weekday == weekday,
                EmployeeUnavailability.start_time == start,
                EmployeeUnavailability.end_time == end
            ).delete(synchronize_session=False)
            if deleted == 0:
                raise NotFoundError("Unavailability not found")

        logger.info(f"Employee {employee.id} removed block on weekday {weekday}")

    @staticmethod
    def delete_block_by_id(db: Session, stylist_user_id: int, block_id: int) -> None:
        with unit_of_work(db):
            employee = UnavailabilityService.get_employee_for_user(db, stylist_user_id)
            block = db.query(EmployeeUnavailability).filter(
                EmployeeUnavailability.id == block_id,
                EmployeeUnavailability.employee_id == employee.id
            ).first()
            if not block:
                raise NotFoundError("Unavailability not found")
            db.delete(block)

        logger.info(f"Employee {employee.id} removed block {block_id}")
