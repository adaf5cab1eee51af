from datetime import date, datetime, time, timedelta, timezone

from salon_booking.core.clock import FixedClock
from salon_booking.models import Employee, EmployeeAvailability, Salon, SalonAvailability, SalonStatus
from salon_booking.services.availability.availability_service import AvailabilityService
from salon_booking.utils.timezones import resolve_zone, utc_to_local


FULL_DAY = [f"{h:02d}:{m:02d}" for h in range(9, 17) for m in (0, 30)]


def test_weekday_offers_every_interval_inside_hours(timeslots):
    assert timeslots("2025-11-11") == FULL_DAY


def test_slot_payload_carries_utc_and_local_times(client, salon_setup):
    response = client.get(
        f"/api/v1/salons/{salon_setup.salon_id}/stylists/{salon_setup.employee_id}/timeslots",
        params={"start_date": "2025-11-11", "end_date": "2025-11-11"},
    )
    body = response.json()
    first = body["daily_slots"]["2025-11-11"][0]

    assert body["stylist"]["id"] == salon_setup.employee_id
    assert body["date_range"] == {"start_date": "2025-11-11", "end_date": "2025-11-11", "days": 1}
    assert first["start_time"] == "2025-11-11T14:00:00+00:00"
    assert first["end_time"] == "2025-11-11T14:30:00+00:00"
    assert first["display_start_time"] == "2025-11-11T09:00:00-05:00"


def test_closed_days_are_empty(timeslots):
    # Stylist does not work Saturday, salon is closed Sunday
    assert timeslots("2025-11-15") == []
    assert timeslots("2025-11-16") == []


def test_past_dates_and_times_are_never_offered(client, clock, timeslots):
    assert timeslots("2025-11-07") == []

    clock.advance(timedelta(hours=3, minutes=15))  # 10:15 local on Monday
    today = timeslots("2025-11-10")
    assert today[0] == "10:30"
    assert "10:00" not in today


def test_slot_must_fit_full_service_duration(timeslots):
    slots = timeslots("2025-11-11", service_duration=90)
    assert slots[-1] == "15:30"
    assert "16:00" not in slots


def test_service_ids_set_the_duration(timeslots, salon_setup):
    slots = timeslots("2025-11-11", service_ids=[salon_setup.cut_id, salon_setup.color_id])
    assert slots[-1] == "14:30"


def test_booked_interval_is_removed(book, timeslots):
    assert book("2025-11-11T10:00:00-05:00").status_code == 201

    slots = timeslots("2025-11-11")
    assert "10:00" not in slots
    assert "10:30" not in slots
    assert "09:30" in slots
    assert "11:00" in slots

    assert "09:30" not in timeslots("2025-11-11", service_duration=60)


def test_default_range_is_a_week_from_today(client, salon_setup):
    response = client.get(f"/api/v1/salons/{salon_setup.salon_id}/stylists/{salon_setup.employee_id}/timeslots")
    body = response.json()
    assert response.status_code == 200
    assert body["date_range"]["start_date"] == "2025-11-10"
    assert body["date_range"]["end_date"] == "2025-11-16"
    assert len(body["daily_slots"]) == 7


def test_range_validation(client, salon_setup):
    url = f"/api/v1/salons/{salon_setup.salon_id}/stylists/{salon_setup.employee_id}/timeslots"

    backwards = client.get(url, params={"start_date": "2025-11-12", "end_date": "2025-11-11"})
    assert backwards.status_code == 400
    assert backwards.json()["code"] == "VALIDATION_ERROR"

    too_long = client.get(url, params={"start_date": "2025-11-10", "end_date": "2025-12-31"})
    assert too_long.status_code == 400

    malformed = client.get(url, params={"start_date": "11/12/2025"})
    assert malformed.status_code == 400

    month = client.get(url, params={"start_date": "2025-11-10", "end_date": "2025-12-10"})
    assert month.status_code == 200
    assert len(month.json()["daily_slots"]) == 31


def test_unknown_stylist_or_unapproved_salon_is_404(client, salon_setup, db_session):
    response = client.get(f"/api/v1/salons/{salon_setup.salon_id}/stylists/9999/timeslots")
    assert response.status_code == 404

    with db_session() as db:
        db.query(Salon).filter_by(id=salon_setup.salon_id).update({"status": SalonStatus.PENDING})
        db.commit()

    response = client.get(
        f"/api/v1/salons/{salon_setup.salon_id}/stylists/{salon_setup.employee_id}/timeslots"
    )
    assert response.status_code == 404
    assert response.json()["code"] == "NOT_FOUND"


def test_day_slots_can_be_iterated_more_than_once(db_session, salon_setup, clock):
    with db_session() as db:
        salon = db.get(Salon, salon_setup.salon_id)
        employee = db.get(Employee, salon_setup.employee_id)
        days = AvailabilityService.resolve(
            db, salon, employee, date(2025, 11, 11), date(2025, 11, 11), clock.now()
        )

    tuesday = days[date(2025, 11, 11)]
    assert list(tuesday) == list(tuesday)
    assert len(list(tuesday)) == 16


def _dst_salon(db):
    """Salon and stylist both open Sunday 01:00-04:00 in New York"""
    salon = Salon(owner_user_id=900, name="Night Owl", timezone="America/New_York", status=SalonStatus.APPROVED)
    db.add(salon)
    db.flush()
    db.add(SalonAvailability(salon_id=salon.id, weekday=0, start_time=time(1), end_time=time(4)))
    employee = Employee(salon_id=salon.id, user_id=901)
    db.add(employee)
    db.flush()
    db.add(EmployeeAvailability(
        employee_id=employee.id, weekday=0, start_time=time(1), end_time=time(4), slot_interval_minutes=30
    ))
    db.commit()
    return salon.id, employee.id


def test_spring_forward_day_skips_missing_hour(db_session):
    clock = FixedClock(datetime(2025, 3, 1, 12, 0, tzinfo=timezone.utc))
    with db_session() as db:
        salon_id, employee_id = _dst_salon(db)
        result = AvailabilityService.get_time_slots(
            db, salon_id, employee_id, clock, start_date=date(2025, 3, 9), end_date=date(2025, 3, 16)
        )

    spring = result["daily_slots"]["2025-03-09"]
    ordinary = result["daily_slots"]["2025-03-16"]
    local_starts = [slot["display_start_time"][11:16] for slot in spring]

    assert len(ordinary) == 6
    assert local_starts == ["01:00", "01:30", "03:00", "03:30"]
    assert not any(start.startswith("02:") for start in local_starts)


def test_fall_back_day_offers_repeated_hour_once_per_instant(db_session):
    clock = FixedClock(datetime(2025, 10, 25, 12, 0, tzinfo=timezone.utc))
    zone = resolve_zone("America/New_York")
    with db_session() as db:
        salon_id, employee_id = _dst_salon(db)
        result = AvailabilityService.get_time_slots(
            db, salon_id, employee_id, clock, start_date=date(2025, 11, 2), end_date=date(2025, 11, 2)
        )

    slots = result["daily_slots"]["2025-11-02"]
    instants = [slot["start_time"] for slot in slots]

    assert len(slots) == 8
    assert len(set(instants)) == 8
    assert instants == sorted(instants)
    first = datetime.fromisoformat(instants[0])
    assert utc_to_local(first, zone).strftime("%H:%M %Z") == "01:00 EDT"
