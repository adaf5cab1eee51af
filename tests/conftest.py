"""Shared fixtures: a fresh SQLite database per test, a pinned clock and a recording notifier"""
import os

os.environ["DATABASE_URL"] = "sqlite:///:memory:"
os.environ["CELERY_TASK_ALWAYS_EAGER"] = "true"
os.environ["JWT_SECRET_KEY"] = "test-secret-key"
os.environ["DEFAULT_TIMEZONE"] = "America/New_York"
os.environ["ENFORCE_SAME_DAY_POLICY"] = "true"

from contextlib import contextmanager
from datetime import datetime, time, timezone
from decimal import Decimal
from types import SimpleNamespace

import pytest
from fastapi.testclient import TestClient
from sqlalchemy.orm import sessionmaker

from salon_booking.api.dependencies import create_access_token
from salon_booking.config.database import build_engine, create_tables, get_db
from salon_booking.core.clock import FixedClock, get_clock
from salon_booking.main import create_app
from salon_booking.models import (
    Employee,
    EmployeeAvailability,
    Salon,
    SalonAvailability,
    SalonStatus,
    Service,
)
from salon_booking.services.notification.notification_service import BookingNotifier, get_notifier

OWNER_ID = 100
STYLIST_USER_ID = 200
OTHER_STYLIST_USER_ID = 201
CUSTOMER_ID = 300
OTHER_CUSTOMER_ID = 301

# Monday 2025-11-10, 07:00 in New York
NOW = datetime(2025, 11, 10, 12, 0, tzinfo=timezone.utc)


@pytest.fixture
def engine(tmp_path):
    engine = build_engine(f"sqlite:///{tmp_path / 'salon.db'}")
    create_tables(bind=engine)
    yield engine
    engine.dispose()


@pytest.fixture
def session_factory(engine):
    return sessionmaker(bind=engine, autocommit=False, autoflush=False)


@pytest.fixture
def db_session(session_factory):
    """Context manager yielding a short-lived session; always closed so it never holds the write lock"""

    @contextmanager
    def _session():
        session = session_factory()
        try:
            yield session
        finally:
            session.close()

    return _session


@pytest.fixture
def clock():
    return FixedClock(NOW)


class RecordingNotifier(BookingNotifier):
    def __init__(self):
        self.events = []
        super().__init__(dispatch=self.events.append)


@pytest.fixture
def notifier():
    return RecordingNotifier()


@pytest.fixture
def app(session_factory, clock, notifier):
    app = create_app()

    def _get_db():
        db = session_factory()
        try:
            yield db
        finally:
            db.close()

    app.dependency_overrides[get_db] = _get_db
    app.dependency_overrides[get_clock] = lambda: clock
    app.dependency_overrides[get_notifier] = lambda: notifier
    return app


@pytest.fixture
def client(app):
    return TestClient(app)


def auth_headers(user_id: int, role: str = "CUSTOMER") -> dict:
    token = create_access_token({"sub": user_id, "role": role})
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture
def salon_setup(db_session):
    """
    Approved New York salon open Monday-Saturday 09:00-17:00 with one stylist
    working Monday-Friday 09:00-17:00 in 30 minute steps.
    """
    with db_session() as db:
        salon = Salon(
            owner_user_id=OWNER_ID,
            name="Fade & Co",
            timezone="America/New_York",
            status=SalonStatus.APPROVED,
        )
        db.add(salon)
        db.flush()

        for weekday in range(1, 7):
            db.add(SalonAvailability(salon_id=salon.id, weekday=weekday, start_time=time(9), end_time=time(17)))

        cut = Service(salon_id=salon.id, name="Haircut", duration_minutes=60, price=Decimal("50.00"))
        color = Service(salon_id=salon.id, name="Color", duration_minutes=90, price=Decimal("120.00"))
        beard = Service(salon_id=salon.id, name="Beard Trim", duration_minutes=30, price=Decimal("20.00"))
        retired = Service(
            salon_id=salon.id, name="Perm", duration_minutes=120, price=Decimal("90.00"), is_active=False
        )
        db.add_all([cut, color, beard, retired])
        db.flush()

        stylist = Employee(salon_id=salon.id, user_id=STYLIST_USER_ID, title="Senior Stylist")
        stylist.services = [cut, color, retired]
        db.add(stylist)
        db.flush()

        for weekday in range(1, 6):
            db.add(EmployeeAvailability(
                employee_id=stylist.id,
                weekday=weekday,
                start_time=time(9),
                end_time=time(17),
                slot_interval_minutes=30,
            ))
        db.commit()

        return SimpleNamespace(
            salon_id=salon.id,
            employee_id=stylist.id,
            cut_id=cut.id,
            color_id=color.id,
            beard_id=beard.id,
            retired_id=retired.id,
        )


@pytest.fixture
def book(client, salon_setup):
    """POST a booking as a customer and return the response"""

    def _book(scheduled_start: str, service_ids=None, customer_id: int = CUSTOMER_ID, employee_id=None):
        return client.post(
            f"/api/v1/salons/{salon_setup.salon_id}/stylists/{employee_id or salon_setup.employee_id}/book",
            json={
                "scheduled_start": scheduled_start,
                "services": [{"service_id": sid} for sid in (service_ids or [salon_setup.cut_id])],
            },
            headers=auth_headers(customer_id),
        )

    return _book


@pytest.fixture
def timeslots(client, salon_setup):
    """Local start times ("HH:MM") offered on one date"""

    def _timeslots(day: str, **params):
        response = client.get(
            f"/api/v1/salons/{salon_setup.salon_id}/stylists/{salon_setup.employee_id}/timeslots",
            params={"start_date": day, "end_date": day, **params},
        )
        assert response.status_code == 200, response.text
        return [slot["display_start_time"][11:16] for slot in response.json()["daily_slots"][day]]

    return _timeslots
