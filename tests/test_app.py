from salon_booking.models import Booking

from conftest import CUSTOMER_ID, OWNER_ID, STYLIST_USER_ID, auth_headers


def test_health_check(client):
    response = client.get("/health/")

    assert response.status_code == 200
    assert response.json()["status"] == "healthy"


def test_correlation_id_is_echoed_or_generated(client):
    echoed = client.get("/health/", headers={"X-Correlation-ID": "trace-123"})
    generated = client.get("/health/")

    assert echoed.headers["X-Correlation-ID"] == "trace-123"
    assert generated.headers["X-Correlation-ID"]


def test_missing_token_is_unauthorized(client):
    response = client.get("/api/v1/bookings/mine")

    assert response.status_code == 401


def test_garbage_token_is_unauthorized(client):
    response = client.get("/api/v1/bookings/mine", headers={"Authorization": "Bearer not-a-jwt"})

    assert response.status_code == 401


def test_malformed_body_is_a_400_validation_error(client):
    response = client.post("/api/v1/bookings/cancel", json={}, headers=auth_headers(CUSTOMER_ID))

    assert response.status_code == 400
    body = response.json()
    assert body["code"] == "VALIDATION_ERROR"
    assert "booking_id" in body["message"]


def test_unknown_booking_is_not_found(client, salon_setup):
    response = client.post("/api/v1/bookings/cancel", json={"booking_id": 999}, headers=auth_headers(CUSTOMER_ID))

    assert response.status_code == 404
    assert response.json()["code"] == "NOT_FOUND"


def test_unexpected_errors_become_generic_500(app):
    from fastapi.testclient import TestClient

    @app.get("/boom")
    def boom():
        raise RuntimeError("database exploded")

    with TestClient(app, raise_server_exceptions=False) as client:
        response = client.get("/boom")

    assert response.status_code == 500
    assert response.json() == {"code": "INTERNAL_ERROR", "message": "Internal server error"}


def test_only_customers_book(client, salon_setup, db_session):
    response = client.post(
        f"/api/v1/salons/{salon_setup.salon_id}/stylists/{salon_setup.employee_id}/book",
        json={"scheduled_start": "2025-11-11T10:00:00-05:00", "services": [{"service_id": salon_setup.cut_id}]},
        headers=auth_headers(OWNER_ID, role="OWNER"),
    )

    assert response.status_code == 403
    with db_session() as db:
        assert db.query(Booking).count() == 0


def test_routes_reject_the_wrong_role(client, salon_setup):
    customer = auth_headers(CUSTOMER_ID)
    stylist = auth_headers(STYLIST_USER_ID, role="EMPLOYEE")

    assert client.post("/api/v1/bookings/cancel", json={"booking_id": 1}, headers=stylist).status_code == 403
    assert client.post("/api/v1/bookings/reschedule", json={"booking_id": 1, "scheduled_start": "2025-11-11T10:00:00Z"}, headers=stylist).status_code == 403
    assert client.get("/api/v1/bookings/mine", headers=stylist).status_code == 403
    assert client.delete("/api/v1/bookings/pending/1", headers=stylist).status_code == 403
    assert client.post("/api/v1/stylist/bookings/cancel", json={"booking_id": 1}, headers=customer).status_code == 403
    assert client.get("/api/v1/unavailability", headers=customer).status_code == 403
    assert client.get(
        f"/api/v1/salons/{salon_setup.salon_id}/stylists/{salon_setup.employee_id}/availability",
        headers=stylist,
    ).status_code == 403
