from datetime import date, datetime, time, timedelta, timezone

import pytest

from salon_booking.core.errors import ValidationError
from salon_booking.utils.timezones import (
    db_weekday,
    local_date_of,
    local_to_utc,
    parse_instant,
    parse_local_time,
    resolve_zone,
    utc_to_local_time,
    validate_weekday,
)

NY = resolve_zone("America/New_York")


def test_local_to_utc_uses_standard_and_daylight_offsets():
    assert local_to_utc("09:00", date(2025, 1, 15), NY) == datetime(2025, 1, 15, 14, 0, tzinfo=timezone.utc)
    assert local_to_utc("09:00", date(2025, 7, 15), NY) == datetime(2025, 7, 15, 13, 0, tzinfo=timezone.utc)


def test_round_trip_on_ordinary_day():
    instant = local_to_utc(time(10, 30), date(2025, 11, 12), NY)
    assert utc_to_local_time(instant, NY) == time(10, 30)
    assert local_to_utc(utc_to_local_time(instant, NY), local_date_of(instant, NY), NY) == instant


def test_gap_time_resolves_forward_without_raising():
    # 02:30 does not exist on 2025-03-09 in New York
    instant = local_to_utc("02:30", date(2025, 3, 9), NY)
    assert instant == datetime(2025, 3, 9, 7, 30, tzinfo=timezone.utc)
    assert utc_to_local_time(instant, NY) == time(3, 30)


def test_ambiguous_time_takes_first_occurrence():
    # 01:30 happens twice on 2025-11-02; the daylight-time one comes first
    instant = local_to_utc("01:30", date(2025, 11, 2), NY)
    assert instant == datetime(2025, 11, 2, 5, 30, tzinfo=timezone.utc)


def test_local_date_crosses_midnight_utc():
    # 03:00Z on the 12th is still the evening of the 11th in New York
    assert local_date_of(datetime(2025, 11, 12, 3, 0, tzinfo=timezone.utc), NY) == date(2025, 11, 11)


def test_db_weekday_counts_from_sunday():
    assert db_weekday(date(2025, 11, 9)) == 0   # Sunday
    assert db_weekday(date(2025, 11, 10)) == 1  # Monday
    assert db_weekday(date(2025, 11, 15)) == 6  # Saturday


@pytest.mark.parametrize("value", ["2025-11-12T09:00:00", "2025-11-12", "tomorrow", ""])
def test_parse_instant_requires_offset(value):
    with pytest.raises(ValidationError):
        parse_instant(value)


def test_parse_instant_normalizes_to_utc():
    assert parse_instant("2025-11-12T09:00:00-05:00") == datetime(2025, 11, 12, 14, 0, tzinfo=timezone.utc)
    assert parse_instant("2025-11-12T14:00:00Z") == datetime(2025, 11, 12, 14, 0, tzinfo=timezone.utc)


def test_parse_local_time_formats():
    assert parse_local_time("09:05") == time(9, 5)
    assert parse_local_time("23:59:30") == time(23, 59, 30)
    for bad in ["24:00", "9:00", "12:60", "noon"]:
        with pytest.raises(ValidationError):
            parse_local_time(bad)


def test_validate_weekday():
    assert validate_weekday(0) == 0
    assert validate_weekday("6") == 6
    for bad in [7, -1, "x", None, True]:
        with pytest.raises(ValidationError):
            validate_weekday(bad)


def test_unknown_zone_falls_back_to_default():
    assert resolve_zone("Mars/Olympus_Mons").key == "America/New_York"
    assert resolve_zone(None).key == "America/New_York"


def test_fall_back_day_has_25_hours():
    start = local_to_utc("00:00", date(2025, 11, 2), NY)
    end = local_to_utc("00:00", date(2025, 11, 3), NY)
    assert end - start == timedelta(hours=25)
