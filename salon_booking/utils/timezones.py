"""
Conversions between salon-local civil time and UTC instants.

Weekday numbers follow the stored availability rows: 0 = Sunday ... 6 = Saturday.

Wall-clock times are resolved with ``fold=0``: the UTC offset in force before
a DST transition wins. An ambiguous fall-back time therefore maps to its
first occurrence, and a time inside a spring-forward gap maps to the instant
the shifted clock shows one hour later (02:30 -> 03:30 in America/New_York).
Neither case raises.
"""
import logging
import re
from datetime import date, datetime, time, timezone
from functools import lru_cache
from typing import Optional, Union
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from salon_booking.config.settings import get_settings
from salon_booking.core.errors import ValidationError

logger = logging.getLogger(__name__)

TIME_RX = re.compile(r"^([01]\d|2[0-3]):([0-5]\d)(?::([0-5]\d))?$")
OFFSET_RX = re.compile(r"([zZ]|[+-]\d{2}:?\d{2})$")

WEEKDAY_NAMES = ["Sunday", "Monday", "Tuesday", "Wednesday", "Thursday", "Friday", "Saturday"]


@lru_cache(maxsize=128)
def _zone(name: str) -> ZoneInfo:
    return ZoneInfo(name)


def resolve_zone(name: Optional[str]) -> ZoneInfo:
    """IANA zone for a salon, falling back to the configured default"""
    default = get_settings().DEFAULT_TIMEZONE
    if not name:
        return _zone(default)
    try:
        return _zone(name)
    except (ZoneInfoNotFoundError, ValueError):
        logger.warning(f"Unknown timezone {name!r}, falling back to {default}")
        return _zone(default)


def parse_local_time(value: Union[str, time], field: str = "time") -> time:
    """Parse HH:MM or HH:MM:SS (24h) into a ``time``"""
    if isinstance(value, time):
        return value.replace(microsecond=0, tzinfo=None)
    match = TIME_RX.match(value or "")
    if not match:
        raise ValidationError(f"{field} must be HH:MM or HH:MM:SS (24h) format")
    hours, minutes, seconds = match.groups()
    return time(int(hours), int(minutes), int(seconds or 0))


def format_local_time(value: time) -> str:
    return value.strftime("%H:%M:%S")


def parse_instant(value: str, field: str = "scheduled_start") -> datetime:
    """Parse an ISO-8601 instant that carries an explicit offset or ``Z``"""
    if not isinstance(value, str) or not OFFSET_RX.search(value.strip()):
        raise ValidationError(
            f"{field} must include a timezone offset "
            "(e.g., 2025-11-12T09:00:00-05:00 or 2025-11-12T14:00:00Z)"
        )
    text = value.strip()
    if text[-1] in "zZ":
        text = text[:-1] + "+00:00"
    try:
        parsed = datetime.fromisoformat(text)
    except ValueError:
        raise ValidationError(f"Invalid {field}: provide a valid ISO 8601 datetime with timezone")
    if parsed.tzinfo is None:
        raise ValidationError(f"{field} must include a timezone offset")
    return parsed.astimezone(timezone.utc)


def local_to_utc(local_time: Union[str, time], civil_date: date, zone: Union[str, ZoneInfo]) -> datetime:
    """Resolve a wall-clock time on a civil date in ``zone`` to a UTC instant"""
    tz = zone if isinstance(zone, ZoneInfo) else resolve_zone(zone)
    wall = parse_local_time(local_time)
    return datetime.combine(civil_date, wall, tzinfo=tz).astimezone(timezone.utc)


def utc_to_local(instant: datetime, zone: Union[str, ZoneInfo]) -> datetime:
    """Express a UTC instant in ``zone``"""
    tz = zone if isinstance(zone, ZoneInfo) else resolve_zone(zone)
    if instant.tzinfo is None:
        instant = instant.replace(tzinfo=timezone.utc)
    return instant.astimezone(tz)


def utc_to_local_time(instant: datetime, zone: Union[str, ZoneInfo]) -> time:
    """Wall-clock time shown in ``zone`` at ``instant``"""
    return utc_to_local(instant, zone).time().replace(tzinfo=None)


def local_date_of(instant: datetime, zone: Union[str, ZoneInfo]) -> date:
    """Civil date in ``zone`` at ``instant``"""
    return utc_to_local(instant, zone).date()


def db_weekday(civil_date: date) -> int:
    """Stored weekday number (0 = Sunday) of a civil date"""
    return (civil_date.weekday() + 1) % 7


def validate_weekday(value) -> int:
    """Accept 0..6 given as an int or a numeric string"""
    if isinstance(value, bool):
        raise ValidationError("Weekday must be an integer between 0-6")
    try:
        weekday = int(value)
    except (TypeError, ValueError):
        raise ValidationError("Weekday must be an integer between 0-6")
    if not 0 <= weekday <= 6:
        raise ValidationError("Weekday must be an integer between 0-6")
    return weekday
