from datetime import datetime, timezone
from decimal import Decimal

import pytest

from salon_booking.config.settings import get_settings
from salon_booking.models import Booking, BookingService as BookingLine, BookingStatus

from conftest import CUSTOMER_ID, OTHER_STYLIST_USER_ID, STYLIST_USER_ID, auth_headers

STYLIST = auth_headers(STYLIST_USER_ID, role="EMPLOYEE")


@pytest.fixture
def block(client, salon_setup):
    def _block(weekday=2, start="12:00", end="13:00", headers=STYLIST, **extra):
        return client.post(
            "/api/v1/unavailability",
            json={"weekday": weekday, "start_time": start, "end_time": end, **extra},
            headers=headers,
        )

    return _block


def test_block_removes_slots_and_rejects_bookings(block, book, timeslots):
    response = block()
    assert response.status_code == 201
    body = response.json()
    assert body["weekday"] == 2
    assert body["start_time"] == "12:00:00"
    assert body["end_time"] == "13:00:00"
    assert body["slot_interval_minutes"] == 30

    # Tuesday 2025-11-11
    slots = timeslots("2025-11-11")
    assert "12:00" not in slots
    assert "12:30" not in slots
    assert "11:30" in slots
    assert "13:00" in slots

    inside = book("2025-11-11T12:30:00-05:00")
    assert inside.status_code == 409
    assert inside.json()["code"] == "SLOT_CONFLICT"

    # 60 minute haircut at 11:30 would run into the block
    assert book("2025-11-11T11:30:00-05:00").status_code == 409
    assert book("2025-11-11T11:00:00-05:00").status_code == 201

    # The next Tuesday is blocked too
    assert "12:00" not in timeslots("2025-11-18")


def test_block_input_validation(block):
    assert block(weekday=7).status_code == 400
    assert block(weekday="monday").status_code == 400
    assert block(start="25:00").status_code == 400
    assert block(start="13:00", end="12:00").status_code == 400
    assert block(start="12:00", end="12:00").status_code == 400
    assert block(slot_interval_minutes=0).status_code == 400


def test_block_must_sit_inside_working_hours(block):
    outside = block(start="08:00", end="10:00")
    assert outside.status_code == 400
    assert "availability" in outside.json()["message"]

    # Stylist does not work Saturdays
    assert block(weekday=6).status_code == 400


def test_overlapping_blocks_conflict(block):
    assert block().status_code == 201
    assert block(start="12:30", end="14:00").status_code == 409
    assert block(start="13:00", end="14:00").status_code == 201


def test_block_over_scheduled_booking_conflicts(block, book):
    booking = book("2025-11-11T12:00:00-05:00")
    assert booking.status_code == 201

    response = block(start="12:30", end="14:00")
    assert response.status_code == 409
    assert response.json()["conflicts"][0]["booking_id"] == booking.json()["booking_id"]

    # Other weekdays are unaffected
    assert block(weekday=3, start="12:30", end="14:00").status_code == 201


def test_list_blocks_sorted(block, client):
    block(weekday=3, start="15:00", end="16:00")
    block(weekday=2, start="14:00", end="15:00")
    block(weekday=2, start="10:00", end="11:00")

    response = client.get("/api/v1/unavailability", headers=STYLIST)
    assert response.status_code == 200
    assert [(b["weekday"], b["start_time"]) for b in response.json()] == [
        (2, "10:00:00"),
        (2, "14:00:00"),
        (3, "15:00:00"),
    ]

    tuesday = client.get("/api/v1/unavailability", params={"weekday": 2}, headers=STYLIST)
    assert len(tuesday.json()) == 2


def test_delete_block_by_exact_match(block, client, timeslots):
    block()
    payload = {"weekday": 2, "start_time": "12:00", "end_time": "13:00"}

    deleted = client.request("DELETE", "/api/v1/unavailability", json=payload, headers=STYLIST)
    assert deleted.status_code == 200
    assert "12:00" in timeslots("2025-11-11")

    again = client.request("DELETE", "/api/v1/unavailability", json=payload, headers=STYLIST)
    assert again.status_code == 404

    partial = client.request(
        "DELETE",
        "/api/v1/unavailability",
        json={"weekday": 2, "start_time": "12:00", "end_time": "12:30"},
        headers=STYLIST,
    )
    assert partial.status_code == 404


def test_delete_block_by_id_is_owner_only(block, client):
    block_id = block().json()["id"]

    stranger = client.delete(
        f"/api/v1/unavailability/{block_id}", headers=auth_headers(OTHER_STYLIST_USER_ID, role="EMPLOYEE")
    )
    assert stranger.status_code == 404

    owner = client.delete(f"/api/v1/unavailability/{block_id}", headers=STYLIST)
    assert owner.status_code == 200
    assert client.get("/api/v1/unavailability", headers=STYLIST).json() == []


def test_caller_without_employee_profile(block, salon_setup):
    response = block(headers=auth_headers(OTHER_STYLIST_USER_ID, role="EMPLOYEE"))
    assert response.status_code == 404


def test_block_interval_defaults_to_configured_value(block, monkeypatch):
    monkeypatch.setattr(get_settings(), "DEFAULT_SLOT_INTERVAL_MINUTES", 15)

    response = block()

    assert response.status_code == 201
    assert response.json()["slot_interval_minutes"] == 15


def test_elapsed_unswept_booking_does_not_block(block, salon_setup, db_session):
    # Monday 2025-11-03 10:00-11:00 local, already over but never marked COMPLETED
    with db_session() as db:
        elapsed = Booking(
            salon_id=salon_setup.salon_id,
            customer_user_id=CUSTOMER_ID,
            scheduled_start=datetime(2025, 11, 3, 15, 0, tzinfo=timezone.utc),
            scheduled_end=datetime(2025, 11, 3, 16, 0, tzinfo=timezone.utc),
            status=BookingStatus.SCHEDULED,
        )
        elapsed.lines = [
            BookingLine(
                employee_id=salon_setup.employee_id,
                service_id=salon_setup.cut_id,
                price=Decimal("50.00"),
                duration_minutes=60,
            )
        ]
        db.add(elapsed)
        db.commit()

    response = block(weekday=1, start="10:00", end="11:00")

    assert response.status_code == 201
