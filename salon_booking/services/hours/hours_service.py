# salon_booking/services/hours/hours_service.py
"""Weekly salon hours and stylist working hours, managed by the salon owner"""
import logging
from datetime import datetime
from typing import Any, Dict, List, Mapping, Optional

from sqlalchemy.orm import Session
from zoneinfo import ZoneInfo

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
    Salon,
    SalonAvailability,
)
from salon_booking.services.booking.conflict_guard import ConflictGuard, booking_conflict_dict
from salon_booking.utils.timezones import (
    WEEKDAY_NAMES,
    db_weekday,
    format_local_time,
    local_date_of,
    parse_local_time,
    resolve_zone,
)

logger = logging.getLogger(__name__)

_DAY_KEYS = {name.upper(): index for index, name in enumerate(WEEKDAY_NAMES)}


def parse_day_key(key: str) -> int:
    """Weekday number from "MONDAY"/"monday" or "0".."6" """
    text = str(key).strip()
    if text.upper() in _DAY_KEYS:
        return _DAY_KEYS[text.upper()]
    if text.isdigit() and 0 <= int(text) <= 6:
        return int(text)
    raise ValidationError(f"Unknown weekday: {key}")


def _future_bookings_on_weekday(
        bookings: List[Booking],
        weekday: int,
        zone: ZoneInfo,
        now: datetime
) -> List[Booking]:
    return [
        booking for booking in bookings
        if booking.scheduled_end > now and db_weekday(local_date_of(booking.scheduled_start, zone)) == weekday
    ]


class HoursService:

    @staticmethod
    def get_owned_salon(db: Session, salon_id: int, owner_user_id: int) -> Salon:
        salon = db.query(Salon).filter(
            Salon.id == salon_id,
            Salon.owner_user_id == owner_user_id
        ).first()
        if not salon:
            raise NotFoundError("Salon not found")
        return salon

    @staticmethod
    def get_salon_employee(db: Session, salon: Salon, employee_id: int) -> Employee:
        employee = db.query(Employee).filter(
            Employee.id == employee_id,
            Employee.salon_id == salon.id
        ).first()
        if not employee:
            raise NotFoundError("Stylist not found")
        return employee

    @staticmethod
    def _parse_window(values: Mapping[str, Any], day: str) -> tuple:
        start = parse_local_time(values.get("start_time"), f"{day} start_time")
        end = parse_local_time(values.get("end_time"), f"{day} end_time")
        if end <= start:
            raise ValidationError(f"{day}: end_time must be after start_time")
        return start, end

    @staticmethod
    def salon_hours_to_dict(salon: Salon, rows: List[SalonAvailability]) -> Dict[str, Any]:
        by_weekday = {row.weekday: row for row in rows}
        weekly = {}
        for weekday, name in enumerate(WEEKDAY_NAMES):
            row = by_weekday.get(weekday)
            weekly[name.upper()] = {
                "weekday": weekday,
                "is_open": row is not None,
                "start_time": format_local_time(row.start_time) if row else None,
                "end_time": format_local_time(row.end_time) if row else None,
            }
        return {
            "salon_id": salon.id,
            "timezone": resolve_zone(salon.timezone).key,
            "weekly_hours": weekly,
        }

    @staticmethod
    def employee_availability_to_dict(employee: Employee, rows: List[EmployeeAvailability]) -> Dict[str, Any]:
        by_weekday = {row.weekday: row for row in rows}
        weekly = {}
        for weekday, name in enumerate(WEEKDAY_NAMES):
            row = by_weekday.get(weekday)
            weekly[name.upper()] = {
                "weekday": weekday,
                "is_available": row is not None,
                "start_time": format_local_time(row.start_time) if row else None,
                "end_time": format_local_time(row.end_time) if row else None,
                "slot_interval_minutes": row.slot_interval_minutes if row else None,
            }
        return {"employee_id": employee.id, "weekly_availability": weekly}

    @staticmethod
    def get_salon_hours(db: Session, salon_id: int, owner_user_id: int) -> Dict[str, Any]:
        salon = HoursService.get_owned_salon(db, salon_id, owner_user_id)
        rows = db.query(SalonAvailability).filter_by(salon_id=salon.id).all()
        return HoursService.salon_hours_to_dict(salon, rows)

    @staticmethod
    def set_salon_hours(
            db: Session,
            salon_id: int,
            owner_user_id: int,
            weekly_hours: Mapping[str, Optional[Mapping[str, Any]]],
            clock: Clock
    ) -> Dict[str, Any]:
        """
        Upsert the listed weekdays; a null entry or ``is_open: false`` closes
        the day. Weekdays not listed are left alone. All or nothing.
        """
        now = clock.now()
        with unit_of_work(db):
            salon = HoursService.get_owned_salon(db, salon_id, owner_user_id)
            zone = resolve_zone(salon.timezone)
            existing = {row.weekday: row for row in db.query(SalonAvailability).filter_by(salon_id=salon.id).all()}
            live = db.query(Booking).filter(
                Booking.salon_id == salon.id,
                Booking.status == BookingStatus.SCHEDULED
            ).all()

            for key, values in weekly_hours.items():
                weekday = parse_day_key(key)
                day = WEEKDAY_NAMES[weekday]
                row = existing.get(weekday)

                if values is None or values.get("is_open") is False:
                    if row is None:
                        continue
                    blocking = _future_bookings_on_weekday(live, weekday, zone, now)
                    if blocking:
                        raise SlotConflictError(
                            f"Cannot close {day}: there are scheduled bookings on this day",
                            conflicts=[booking_conflict_dict(b) for b in blocking]
                        )
                    db.delete(row)
                    continue

                start, end = HoursService._parse_window(values, day)
                if row is None:
                    db.add(SalonAvailability(salon_id=salon.id, weekday=weekday, start_time=start, end_time=end))
                else:
                    row.start_time = start
                    row.end_time = end

            db.flush()
            rows = db.query(SalonAvailability).filter_by(salon_id=salon.id).all()
            result = HoursService.salon_hours_to_dict(salon, rows)

        logger.info(f"Salon {salon_id} hours updated by owner {owner_user_id}")
        return result

    @staticmethod
    def get_employee_availability(
            db: Session,
            salon_id: int,
            employee_id: int,
            owner_user_id: int
    ) -> Dict[str, Any]:
        salon = HoursService.get_owned_salon(db, salon_id, owner_user_id)
        employee = HoursService.get_salon_employee(db, salon, employee_id)
        rows = db.query(EmployeeAvailability).filter_by(employee_id=employee.id).all()
        return HoursService.employee_availability_to_dict(employee, rows)

    @staticmethod
    def set_employee_availability(
            db: Session,
            salon_id: int,
            employee_id: int,
            owner_user_id: int,
            weekly_availability: Mapping[str, Optional[Mapping[str, Any]]],
            clock: Clock
    ) -> Dict[str, Any]:
        """Upsert a stylist's working hours; every day must sit inside the salon's hours"""
        now = clock.now()
        with unit_of_work(db):
            salon = HoursService.get_owned_salon(db, salon_id, owner_user_id)
            employee = HoursService.get_salon_employee(db, salon, employee_id)
            zone = resolve_zone(salon.timezone)

            ConflictGuard.lock_employees(db, [employee.id])

            salon_hours = {row.weekday: row for row in db.query(SalonAvailability).filter_by(salon_id=salon.id).all()}
            existing = {
                row.weekday: row
                for row in db.query(EmployeeAvailability).filter_by(employee_id=employee.id).all()
            }
            live = db.query(Booking).join(BookingService, BookingService.booking_id == Booking.id).filter(
                BookingService.employee_id == employee.id,
                Booking.status == BookingStatus.SCHEDULED
            ).distinct().all()

            for key, values in weekly_availability.items():
                weekday = parse_day_key(key)
                day = WEEKDAY_NAMES[weekday]
                row = existing.get(weekday)

                if values is None or values.get("is_available") is False:
                    if row is None:
                        continue
                    blocking = _future_bookings_on_weekday(live, weekday, zone, now)
                    if blocking:
                        raise SlotConflictError(
                            f"Cannot remove {day}: there are scheduled bookings on this day",
                            conflicts=[booking_conflict_dict(b) for b in blocking]
                        )
                    db.delete(row)
                    continue

                start, end = HoursService._parse_window(values, day)
                interval = values.get("slot_interval_minutes")
                if interval is None:
                    interval = get_settings().DEFAULT_SLOT_INTERVAL_MINUTES
                if not isinstance(interval, int) or interval <= 0:
                    raise ValidationError(f"{day}: slot_interval_minutes must be a positive integer")

                opening = salon_hours.get(weekday)
                if opening is None:
                    raise ValidationError(f"Salon is closed on {day}")
                if start < opening.start_time or end > opening.end_time:
                    raise ValidationError(
                        f"{day}: availability must be within salon hours "
                        f"({format_local_time(opening.start_time)} - {format_local_time(opening.end_time)})"
                    )

                if row is None:
                    db.add(EmployeeAvailability(
                        employee_id=employee.id,
                        weekday=weekday,
                        start_time=start,
                        end_time=end,
                        slot_interval_minutes=interval,
                    ))
                else:
                    row.start_time = start
                    row.end_time = end
                    row.slot_interval_minutes = interval

            db.flush()
            rows = db.query(EmployeeAvailability).filter_by(employee_id=employee.id).all()
            result = HoursService.employee_availability_to_dict(employee, rows)

        logger.info(f"Employee {employee_id} availability updated by owner {owner_user_id}")
        return result
