"""Test the booking REST API end to end (in-memory store, fixed clock)."""
from datetime import datetime

import pytest
from fastapi.testclient import TestClient

from clinic_booking.api.dependencies import get_booking_service


@pytest.fixture
def client(service):
    """FastAPI test client wired to the test service."""
    from clinic_booking.api_server import app

    app.dependency_overrides[get_booking_service] = lambda: service
    yield TestClient(app)
    app.dependency_overrides.clear()


def book(client, account_id="A1", practitioner_id="1", specialty_id="1", instant="2024-01-01T09:00:00"):
    headers = {"X-Account-ID": account_id} if account_id is not None else {}
    return client.post(
        "/api/v1/appointments",
        json={
            "practitioner_id": practitioner_id,
            "specialty_id": specialty_id,
            "instant": instant
        },
        headers=headers
    )


def test_health(client):
    response = client.get("/health")

    assert response.status_code == 200
    assert response.json()["status"] == "healthy"
    assert response.headers["X-Request-ID"].startswith("req-")


def test_list_specialties_and_practitioners(client):
    specialties = client.get("/api/v1/specialties").json()
    assert len(specialties) == 6
    assert specialties[0] == {"id": "1", "name": "Cardiología"}

    cardiologists = client.get("/api/v1/practitioners", params={"specialty_id": "1"}).json()
    assert [p["id"] for p in cardiologists] == ["1", "2"]

    assert len(client.get("/api/v1/practitioners").json()) == 7
    assert client.get("/api/v1/practitioners", params={"specialty_id": "999"}).json() == []


def test_slots_for_day(client):
    response = client.get("/api/v1/practitioners/1/slots", params={"day": "2024-01-01"})

    assert response.status_code == 200
    data = response.json()
    assert data["total"] == 20
    assert data["slots"][0]["instant"] == "2024-01-01T08:00:00"
    assert data["slots"][-1]["time_label"] == "17:30"
    assert list(data["by_time"].keys())[:3] == ["08:00", "08:30", "09:00"]


def test_slots_default_day(client, clock):
    """Late in the day the slots endpoint defaults to tomorrow."""
    clock.set(datetime(2024, 1, 1, 17, 15))

    data = client.get("/api/v1/practitioners/1/slots").json()

    assert data["day"] == "2024-01-02"
    assert data["total"] == 20


def test_slots_closed_day_is_empty(client):
    data = client.get("/api/v1/practitioners/1/slots", params={"day": "2024-01-07"}).json()

    assert data["total"] == 0
    assert data["by_time"] == {}


def test_slots_default_day_skips_sunday(client, clock):
    clock.set(datetime(2024, 1, 6, 17, 30))

    data = client.get("/api/v1/practitioners/1/slots").json()

    assert data["day"] == "2024-01-08"
    assert data["total"] == 20


def test_book_on_sunday_returns_422(client):
    response = book(client, instant="2024-01-07T09:00:00")

    assert response.status_code == 422
    assert response.json()["code"] == "VALIDATION_ERROR"


def test_slots_unknown_practitioner(client):
    response = client.get("/api/v1/practitioners/999/slots", params={"day": "2024-01-01"})

    assert response.status_code == 404
    assert response.json()["code"] == "NOT_FOUND"


def test_book_then_slot_disappears(client):
    response = book(client)

    assert response.status_code == 201
    appointment = response.json()
    assert appointment["status"] == "scheduled"
    assert appointment["account_id"] == "A1"
    assert appointment["instant"] == "2024-01-01T09:00:00"

    slots = client.get("/api/v1/practitioners/1/slots", params={"day": "2024-01-01"}).json()
    assert slots["total"] == 19
    assert "09:00" not in slots["by_time"]


def test_book_taken_slot_returns_409(client):
    book(client)

    response = book(client, account_id="A2")

    assert response.status_code == 409
    data = response.json()
    assert data["code"] == "SLOT_TAKEN"
    assert data["retryable"] is True


def test_book_without_account_returns_401(client):
    response = book(client, account_id=None)

    assert response.status_code == 401
    assert response.json()["code"] == "AUTH_REQUIRED"


def test_book_past_instant_returns_422(client):
    response = book(client, instant="2023-12-30T09:00:00")

    assert response.status_code == 422
    assert response.json()["code"] == "VALIDATION_ERROR"


def test_book_malformed_body_returns_422(client):
    response = client.post(
        "/api/v1/appointments",
        json={"practitioner_id": "1"},
        headers={"X-Account-ID": "A1"}
    )

    assert response.status_code == 422
    assert response.json()["code"] == "VALIDATION_ERROR"


def test_book_specialty_mismatch_returns_422(client):
    response = book(client, practitioner_id="3", specialty_id="1")

    assert response.status_code == 422


def test_cancel_flow(client):
    appointment_id = book(client).json()["id"]

    forbidden = client.post(
        f"/api/v1/appointments/{appointment_id}/cancel",
        headers={"X-Account-ID": "A2"}
    )
    assert forbidden.status_code == 403
    assert forbidden.json()["code"] == "NOT_OWNER"

    response = client.post(
        f"/api/v1/appointments/{appointment_id}/cancel",
        headers={"X-Account-ID": "A1"}
    )
    assert response.status_code == 200
    assert response.json()["status"] == "cancelled"

    again = client.post(
        f"/api/v1/appointments/{appointment_id}/cancel",
        headers={"X-Account-ID": "A1"}
    )
    assert again.status_code == 409
    assert again.json()["code"] == "INVALID_STATE"


def test_cancel_unknown_returns_404(client):
    response = client.post(
        "/api/v1/appointments/app_missing/cancel",
        headers={"X-Account-ID": "A1"}
    )

    assert response.status_code == 404


def test_upcoming_and_past(client, clock):
    first = book(client, instant="2024-01-01T09:00:00").json()
    second = book(client, instant="2024-01-01T11:00:00").json()
    book(client, instant="2024-01-01T12:00:00")
    book(client, instant="2024-01-01T10:00:00", account_id="A2")

    headers = {"X-Account-ID": "A1"}
    upcoming = client.get("/api/v1/appointments/upcoming", headers=headers).json()
    assert upcoming["total"] == 3
    assert upcoming["appointments"][0]["id"] == first["id"]

    preview = client.get("/api/v1/appointments/upcoming", params={"limit": 2}, headers=headers).json()
    assert [a["id"] for a in preview["appointments"]] == [first["id"], second["id"]]

    clock.set(datetime(2024, 1, 1, 11, 30))

    past = client.get("/api/v1/appointments/past", headers=headers).json()
    assert [a["id"] for a in past["appointments"]] == [second["id"], first["id"]]
    assert client.get("/api/v1/appointments/upcoming", headers=headers).json()["total"] == 1


def test_appointment_lists_require_account(client):
    assert client.get("/api/v1/appointments/upcoming").status_code == 401
    assert client.get("/api/v1/appointments/past").status_code == 401
