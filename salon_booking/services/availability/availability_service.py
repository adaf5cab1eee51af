# salon_booking/services/availability/availability_service.py
"""
Availability resolver: turns weekly hours, recurring blocks and live bookings
into the bookable start times of a stylist over a range of civil dates.
"""
import logging
from dataclasses import dataclass
from datetime import date, datetime, timedelta
from typing import Any, Dict, Iterator, List, Optional, Sequence, Tuple

from sqlalchemy.orm import Session
from zoneinfo import ZoneInfo

from salon_booking.config.settings import get_settings
from salon_booking.core.clock import Clock
from salon_booking.core.errors import ValidationError
from salon_booking.models import (
    Booking,
    BookingService,
    Employee,
    EmployeeAvailability,
    EmployeeUnavailability,
    Salon,
    SalonAvailability,
    SLOT_HOLDING_STATUSES,
)
from salon_booking.services.availability.schedule_rules import (
    OperatingWindow,
    block_interval,
    get_active_employee,
    get_bookable_salon,
    load_offered_services,
    operating_window,
)
from salon_booking.utils.timezones import (
    WEEKDAY_NAMES,
    db_weekday,
    local_date_of,
    local_to_utc,
    resolve_zone,
    utc_to_local,
)

logger = logging.getLogger(__name__)

Interval = Tuple[datetime, datetime]


@dataclass(frozen=True)
class Slot:
    start: datetime
    end: datetime
    zone: ZoneInfo

    def to_dict(self) -> Dict[str, str]:
        return {
            "start_time": self.start.isoformat(),
            "end_time": self.end.isoformat(),
            "display_start_time": utc_to_local(self.start, self.zone).isoformat(),
            "display_end_time": utc_to_local(self.end, self.zone).isoformat(),
        }


class DaySlots:
    """
    Bookable slots of one civil date.

    Nothing is computed until iterated and every iteration starts over, so
    the same object can be walked more than once.
    """

    def __init__(
            self,
            civil_date: date,
            window: Optional[OperatingWindow],
            duration: Optional[timedelta],
            busy: Sequence[Interval],
            now: datetime,
            zone: ZoneInfo
    ):
        self.civil_date = civil_date
        self.window = window
        self.duration = duration
        self.busy = busy
        self.now = now
        self.zone = zone

    def __iter__(self) -> Iterator[Slot]:
        if self.window is None:
            return
        step = timedelta(minutes=self.window.slot_interval_minutes)
        duration = self.duration or step
        # Stepping in UTC keeps DST days at their real length
        cursor = self.window.start
        while cursor + duration <= self.window.end:
            end = cursor + duration
            if cursor > self.now and not self._overlaps_busy(cursor, end):
                yield Slot(start=cursor, end=end, zone=self.zone)
            cursor += step

    def _overlaps_busy(self, start: datetime, end: datetime) -> bool:
        return any(start < busy_end and busy_start < end for busy_start, busy_end in self.busy)

    def to_list(self) -> List[Dict[str, str]]:
        return [slot.to_dict() for slot in self]


class AvailabilityService:
    """Read-only slot queries; never takes the reservation lock"""

    @staticmethod
    def resolve_range(
            start_date: Optional[date],
            end_date: Optional[date],
            zone: ZoneInfo,
            now: datetime
    ) -> Tuple[date, date]:
        settings = get_settings()
        if start_date is None:
            start_date = local_date_of(now, zone)
        if end_date is None:
            end_date = start_date + timedelta(days=settings.DEFAULT_SLOT_RANGE_DAYS - 1)
        if end_date < start_date:
            raise ValidationError("end_date must be on or after start_date")
        span = (end_date - start_date).days + 1
        if span > settings.MAX_SLOT_RANGE_DAYS:
            raise ValidationError(f"Date range cannot exceed {settings.MAX_SLOT_RANGE_DAYS} days")
        return start_date, end_date

    @staticmethod
    def resolve(
            db: Session,
            salon: Salon,
            employee: Employee,
            start_date: date,
            end_date: date,
            now: datetime,
            duration: Optional[timedelta] = None
    ) -> Dict[date, DaySlots]:
        """One lazy DaySlots per civil date in [start_date, end_date]"""
        zone = resolve_zone(salon.timezone)

        salon_hours = {
            row.weekday: row
            for row in db.query(SalonAvailability).filter_by(salon_id=salon.id).all()
        }
        employee_hours = {
            row.weekday: row
            for row in db.query(EmployeeAvailability).filter_by(employee_id=employee.id).all()
        }
        blocks_by_weekday: Dict[int, List[EmployeeUnavailability]] = {}
        for block in db.query(EmployeeUnavailability).filter_by(employee_id=employee.id).all():
            blocks_by_weekday.setdefault(block.weekday, []).append(block)

        range_start = local_to_utc("00:00", start_date, zone)
        range_end = local_to_utc("00:00", end_date + timedelta(days=1), zone)
        bookings = db.query(Booking).join(BookingService, BookingService.booking_id == Booking.id).filter(
            BookingService.employee_id == employee.id,
            Booking.status.in_(SLOT_HOLDING_STATUSES),
            Booking.scheduled_start < range_end + timedelta(days=1),
            Booking.scheduled_end > range_start - timedelta(days=1)
        ).distinct().all()
        booked = [(booking.scheduled_start, booking.scheduled_end) for booking in bookings]

        days: Dict[date, DaySlots] = {}
        current = start_date
        while current <= end_date:
            weekday = db_weekday(current)
            window = operating_window(salon_hours.get(weekday), employee_hours.get(weekday), current, zone)
            busy = booked + [
                block_interval(block, current, zone)
                for block in blocks_by_weekday.get(weekday, [])
            ]
            days[current] = DaySlots(current, window, duration, busy, now, zone)
            current += timedelta(days=1)
        return days

    @staticmethod
    def get_time_slots(
            db: Session,
            salon_id: int,
            employee_id: int,
            clock: Clock,
            start_date: Optional[date] = None,
            end_date: Optional[date] = None,
            service_duration: Optional[int] = None,
            service_ids: Optional[List[int]] = None
    ) -> Dict[str, Any]:
        salon = get_bookable_salon(db, salon_id)
        employee = get_active_employee(db, salon_id, employee_id)
        zone = resolve_zone(salon.timezone)
        now = clock.now()

        start_date, end_date = AvailabilityService.resolve_range(start_date, end_date, zone, now)

        duration = None
        if service_ids:
            services = load_offered_services(db, employee, service_ids)
            duration = timedelta(minutes=sum(service.duration_minutes for service in services))
        elif service_duration is not None:
            if service_duration <= 0:
                raise ValidationError("service_duration must be a positive number of minutes")
            duration = timedelta(minutes=service_duration)

        days = AvailabilityService.resolve(db, salon, employee, start_date, end_date, now, duration)

        daily_slots = {}
        for civil_date, slots in days.items():
            daily_slots[civil_date.isoformat()] = slots.to_list()

        logger.info(
            f"Resolved slots for employee {employee.id} from {start_date} to {end_date}: "
            f"{sum(len(v) for v in daily_slots.values())} slots"
        )

        return {
            "stylist": {
                "id": employee.id,
                "user_id": employee.user_id,
                "title": employee.title,
            },
            "salon": {
                "id": salon.id,
                "name": salon.name,
                "timezone": zone.key,
            },
            "date_range": {
                "start_date": start_date.isoformat(),
                "end_date": end_date.isoformat(),
                "days": len(daily_slots),
            },
            "service_duration_minutes": int(duration.total_seconds() // 60) if duration else None,
            "weekdays": {day: WEEKDAY_NAMES[db_weekday(date.fromisoformat(day))] for day in daily_slots},
            "daily_slots": daily_slots,
        }
