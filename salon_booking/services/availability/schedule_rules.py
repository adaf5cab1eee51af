# salon_booking/services/availability/schedule_rules.py
"""
Rules shared by the slot resolver, the booking state machine and the block
manager, so that "offered" and "bookable" always mean the same thing.
"""
import logging
from dataclasses import dataclass
from datetime import date, datetime, time, timedelta
from typing import Iterable, List, Optional, Sequence, Tuple
from zoneinfo import ZoneInfo

from sqlalchemy.orm import Session

from salon_booking.config.settings import get_settings
from salon_booking.core.errors import NotFoundError, OutOfHoursError, ValidationError
from salon_booking.models import (
    Employee,
    EmployeeAvailability,
    EmployeeUnavailability,
    Salon,
    SalonAvailability,
    SalonStatus,
    Service,
)
from salon_booking.utils.timezones import (
    db_weekday,
    format_local_time,
    local_date_of,
    local_to_utc,
)

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class OperatingWindow:
    """Salon hours intersected with a stylist's hours on one civil date, as UTC instants"""
    civil_date: date
    start: datetime
    end: datetime
    slot_interval_minutes: int
    local_start: str
    local_end: str

    def contains(self, start: datetime, end: datetime) -> bool:
        return self.start <= start and end <= self.end


def operating_window(
        salon_hours: Optional[SalonAvailability],
        employee_hours: Optional[EmployeeAvailability],
        civil_date: date,
        zone: ZoneInfo
) -> Optional[OperatingWindow]:
    """None when either side is closed that weekday or the windows do not intersect"""
    if salon_hours is None or employee_hours is None:
        return None

    local_start = max(salon_hours.start_time, employee_hours.start_time)
    local_end = min(salon_hours.end_time, employee_hours.end_time)
    if local_end <= local_start:
        return None

    start = local_to_utc(local_start, civil_date, zone)
    end = local_to_utc(local_end, civil_date, zone)
    if end <= start:
        return None

    interval = employee_hours.slot_interval_minutes or get_settings().DEFAULT_SLOT_INTERVAL_MINUTES
    return OperatingWindow(
        civil_date=civil_date,
        start=start,
        end=end,
        slot_interval_minutes=interval,
        local_start=format_local_time(local_start),
        local_end=format_local_time(local_end),
    )


def load_operating_window(
        db: Session,
        salon: Salon,
        employee: Employee,
        civil_date: date,
        zone: ZoneInfo
) -> Optional[OperatingWindow]:
    weekday = db_weekday(civil_date)
    salon_hours = db.query(SalonAvailability).filter_by(salon_id=salon.id, weekday=weekday).first()
    employee_hours = db.query(EmployeeAvailability).filter_by(employee_id=employee.id, weekday=weekday).first()
    return operating_window(salon_hours, employee_hours, civil_date, zone)


def ensure_within_operating_hours(
        db: Session,
        salon: Salon,
        employees: Sequence[Employee],
        start: datetime,
        end: datetime,
        zone: ZoneInfo
) -> None:
    """Raise OutOfHoursError unless [start, end) fits every stylist's window that day"""
    civil_date = local_date_of(start, zone)
    for employee in employees:
        window = load_operating_window(db, salon, employee, civil_date, zone)
        if window is None:
            raise OutOfHoursError("Stylist is not available on this day")
        if not window.contains(start, end):
            raise OutOfHoursError(
                f"Booking time must be within operating hours ({window.local_start} - {window.local_end})"
            )


def window_interval(start_time: time, end_time: time, civil_date: date, zone: ZoneInfo) -> Tuple[datetime, datetime]:
    """UTC interval a local wall-clock window covers on a given civil date"""
    return local_to_utc(start_time, civil_date, zone), local_to_utc(end_time, civil_date, zone)


def block_interval(block: EmployeeUnavailability, civil_date: date, zone: ZoneInfo) -> Tuple[datetime, datetime]:
    return window_interval(block.start_time, block.end_time, civil_date, zone)


def civil_dates_spanned(start: datetime, end: datetime, zone: ZoneInfo) -> List[date]:
    """Every local calendar date touched by [start, end)"""
    first = local_date_of(start, zone)
    last = local_date_of(end - timedelta(microseconds=1), zone)
    days = []
    current = first
    while current <= last:
        days.append(current)
        current += timedelta(days=1)
    return days


def get_bookable_salon(db: Session, salon_id: int) -> Salon:
    salon = db.query(Salon).filter(Salon.id == salon_id).first()
    if not salon or salon.status != SalonStatus.APPROVED:
        raise NotFoundError("Salon not found")
    return salon


def get_active_employee(db: Session, salon_id: int, employee_id: int) -> Employee:
    employee = db.query(Employee).filter(
        Employee.id == employee_id,
        Employee.salon_id == salon_id,
        Employee.is_active.is_(True)
    ).first()
    if not employee:
        raise NotFoundError("Stylist not found or not available")
    return employee


def load_offered_services(db: Session, employee: Employee, service_ids: Iterable[int]) -> List[Service]:
    """Active services of the stylist's salon that the stylist offers, in request order"""
    requested = list(service_ids)
    if not requested:
        raise ValidationError("At least one service is required")
    if len(set(requested)) != len(requested):
        raise ValidationError("Each service may only be requested once")

    services = db.query(Service).filter(
        Service.id.in_(requested),
        Service.salon_id == employee.salon_id,
        Service.is_active.is_(True)
    ).all()
    if len(services) != len(requested):
        raise ValidationError("One or more services not found")

    offered = {service.id for service in employee.services}
    missing = [service.name for service in services if service.id not in offered]
    if missing:
        raise ValidationError(
            f"This employee does not offer the following service(s): {', '.join(missing)}"
        )

    by_id = {service.id: service for service in services}
    return [by_id[service_id] for service_id in requested]
