"""
HTTP integration tests for the booking API using the Flask test client.

No calendar tokens are stored, so calendar sync is attempted and fails
softly; bookings must succeed regardless.
"""

from datetime import timedelta

import pytest

from tests.fixtures.database_fixtures import create_user, upcoming_monday

WEEKDAYS_NINE_TO_FIVE = {
    "timezone": "UTC",
    "availability": [
        {
            "dayOfWeek": day,
            "isAvailable": 1 <= day <= 5,
            "timeSlots": [{"start": "09:00", "end": "17:00"}] if 1 <= day <= 5 else [],
        }
        for day in range(7)
    ],
}


@pytest.fixture
def seller_user(db_session):
    return create_user(db_session, "seller@example.com", name="Sam Seller", role="seller")


@pytest.fixture
def buyer(db_session):
    return create_user(db_session, "buyer@example.com", name="Bea Buyer")


@pytest.fixture
def published_seller(client, seller_user, auth_headers):
    response = client.post(
        "/api/me/seller/availability",
        json=WEEKDAYS_NINE_TO_FIVE,
        headers=auth_headers(seller_user.id),
    )
    assert response.status_code == 200
    return response.get_json()["data"]


def book(client, headers, seller_id, day, time_slot="10:00"):
    return client.post(
        "/api/appointments",
        json={"sellerId": seller_id, "date": day.isoformat(), "timeSlot": time_slot},
        headers=headers,
    )


@pytest.mark.integration
@pytest.mark.api
class TestHealth:
    def test_health(self, client):
        response = client.get("/health")
        assert response.status_code == 200
        body = response.get_json()
        assert body["message"] == "healthy"
        assert body["data"] == {"database": "ok"}


@pytest.mark.integration
@pytest.mark.api
@pytest.mark.controllers
class TestSellerAvailabilityApi:
    def test_publish_and_read_back(self, client, seller_user, published_seller, auth_headers):
        assert published_seller["timezone"] == "UTC"
        assert published_seller["availability"][1]["isAvailable"] is True
        assert published_seller["availability"][0]["isAvailable"] is False

        response = client.get(
            "/api/me/seller/availability", headers=auth_headers(seller_user.id)
        )
        assert response.status_code == 200
        assert response.get_json()["data"]["id"] == published_seller["id"]

    def test_list_and_get_sellers(self, client, published_seller):
        listed = client.get("/api/sellers").get_json()
        assert [s["id"] for s in listed["data"]] == [published_seller["id"]]
        assert listed["data"][0]["name"] == "Sam Seller"

        one = client.get(f"/api/sellers/{published_seller['id']}")
        assert one.status_code == 200

    def test_buyer_cannot_publish(self, client, buyer, auth_headers):
        response = client.post(
            "/api/me/seller/availability",
            json=WEEKDAYS_NINE_TO_FIVE,
            headers=auth_headers(buyer.id),
        )
        assert response.status_code == 403
        assert response.get_json()["error"] == "forbidden"

    def test_malformed_block_rejected(self, client, seller_user, auth_headers):
        body = {
            "availability": [
                {"dayOfWeek": 1, "isAvailable": True, "timeSlots": [{"start": "9am", "end": "17:00"}]}
            ]
        }
        response = client.post(
            "/api/me/seller/availability", json=body, headers=auth_headers(seller_user.id)
        )
        assert response.status_code == 400
        assert response.get_json()["success"] is False

    def test_unaligned_block_start_rejected(self, client, seller_user, auth_headers):
        body = {
            "availability": [
                {"dayOfWeek": 1, "isAvailable": True, "timeSlots": [{"start": "09:03", "end": "17:00"}]}
            ]
        }
        response = client.post(
            "/api/me/seller/availability", json=body, headers=auth_headers(seller_user.id)
        )
        assert response.status_code == 400
        assert response.get_json()["error"] == "validation_error"

    def test_no_profile_yet(self, client, seller_user, auth_headers):
        response = client.get(
            "/api/me/seller/availability", headers=auth_headers(seller_user.id)
        )
        assert response.status_code == 404

    def test_slots_for_open_day(self, client, published_seller):
        day = upcoming_monday()
        response = client.get(
            f"/api/sellers/{published_seller['id']}/availability",
            query_string={"date": day.isoformat()},
        )

        data = response.get_json()["data"]
        assert response.status_code == 200
        assert data["date"] == day.isoformat()
        assert data["timezone"] == "UTC"
        assert len(data["slots"]) == 15
        assert data["slots"][0] == {"start": "09:00", "end": "10:00"}

    def test_closed_day_has_no_slots(self, client, published_seller):
        sunday = upcoming_monday() - timedelta(days=1)
        response = client.get(
            f"/api/sellers/{published_seller['id']}/availability",
            query_string={"date": sunday.isoformat()},
        )
        assert response.get_json()["data"]["slots"] == []

    def test_date_required(self, client, published_seller):
        response = client.get(f"/api/sellers/{published_seller['id']}/availability")
        assert response.status_code == 400
        assert response.get_json()["error"] == "validation_error"

    def test_malformed_date(self, client, published_seller):
        response = client.get(
            f"/api/sellers/{published_seller['id']}/availability",
            query_string={"date": "15/01/2024"},
        )
        assert response.status_code == 400

    def test_unknown_seller(self, client, db_session):
        response = client.get(
            "/api/sellers/999/availability", query_string={"date": "2030-01-07"}
        )
        assert response.status_code == 404
        assert response.get_json()["error"] == "not_found"


@pytest.mark.integration
@pytest.mark.api
@pytest.mark.controllers
class TestAppointmentsApi:
    def test_booking_lifecycle(
        self, client, published_seller, seller_user, buyer, auth_headers
    ):
        day = upcoming_monday()
        seller_id = published_seller["id"]

        created = book(client, auth_headers(buyer.id), seller_id, day)
        assert created.status_code == 201
        body = created.get_json()["data"]
        appointment_id = body["appointment"]["id"]
        assert body["appointment"]["status"] == "confirmed"
        assert body["appointment"]["startTime"].startswith(f"{day.isoformat()}T10:00")
        assert body["calendar"]["eventCreated"] is False

        slots = client.get(
            f"/api/sellers/{seller_id}/availability",
            query_string={"date": day.isoformat()},
        ).get_json()["data"]["slots"]
        assert "10:00" not in [s["start"] for s in slots]
        assert len(slots) == 12

        again = book(client, auth_headers(buyer.id), seller_id, day)
        assert again.status_code == 409
        assert again.get_json()["error"] == "slot_unavailable"

        mine = client.get("/api/appointments", headers=auth_headers(buyer.id)).get_json()
        assert [(a["id"], a["role"]) for a in mine["data"]] == [(appointment_id, "buyer")]
        theirs = client.get(
            "/api/appointments", headers=auth_headers(seller_user.id)
        ).get_json()
        assert [a["role"] for a in theirs["data"]] == ["seller"]

        cancelled = client.post(
            f"/api/appointments/{appointment_id}/cancel", headers=auth_headers(buyer.id)
        )
        assert cancelled.status_code == 200
        data = cancelled.get_json()["data"]
        assert data["appointment"]["status"] == "cancelled"
        assert data["calendarCancelled"] is False

        twice = client.post(
            f"/api/appointments/{appointment_id}/cancel", headers=auth_headers(buyer.id)
        )
        assert twice.status_code == 409
        assert twice.get_json()["error"] == "already_cancelled"

        rebooked = book(client, auth_headers(buyer.id), seller_id, day)
        assert rebooked.status_code == 201

    def test_stranger_cannot_cancel(
        self, client, published_seller, buyer, db_session, auth_headers
    ):
        stranger = create_user(db_session, "stranger@example.com")
        created = book(client, auth_headers(buyer.id), published_seller["id"], upcoming_monday())
        appointment_id = created.get_json()["data"]["appointment"]["id"]

        response = client.post(
            f"/api/appointments/{appointment_id}/cancel", headers=auth_headers(stranger.id)
        )

        assert response.status_code == 403

    def test_seller_can_cancel(
        self, client, published_seller, seller_user, buyer, auth_headers
    ):
        created = book(client, auth_headers(buyer.id), published_seller["id"], upcoming_monday())
        appointment_id = created.get_json()["data"]["appointment"]["id"]

        response = client.post(
            f"/api/appointments/{appointment_id}/cancel",
            headers=auth_headers(seller_user.id),
        )

        assert response.status_code == 200

    def test_off_grid_slot(self, client, published_seller, buyer, auth_headers):
        response = book(
            client, auth_headers(buyer.id), published_seller["id"], upcoming_monday(), "10:10"
        )
        assert response.status_code == 409

    def test_missing_fields(self, client, buyer, auth_headers):
        response = client.post(
            "/api/appointments", json={"sellerId": 1}, headers=auth_headers(buyer.id)
        )
        assert response.status_code == 400
        assert response.get_json()["error"] == "validation_error"

    def test_non_string_notes(self, client, published_seller, buyer, auth_headers):
        response = client.post(
            "/api/appointments",
            json={
                "sellerId": published_seller["id"],
                "date": upcoming_monday().isoformat(),
                "timeSlot": "10:00",
                "notes": 5,
            },
            headers=auth_headers(buyer.id),
        )
        assert response.status_code == 400
        assert response.get_json()["error"] == "validation_error"

    def test_unknown_seller(self, client, buyer, auth_headers):
        response = book(client, auth_headers(buyer.id), 999, upcoming_monday())
        assert response.status_code == 404

    def test_cancel_unknown_appointment(self, client, buyer, auth_headers):
        response = client.post("/api/appointments/999/cancel", headers=auth_headers(buyer.id))
        assert response.status_code == 404

    def test_requires_token(self, client, db_session):
        response = client.post("/api/appointments", json={})
        assert response.status_code == 401
        assert response.get_json()["error"] == "unauthorized"

    def test_rejects_bad_token(self, client, db_session):
        response = client.get(
            "/api/appointments", headers={"Authorization": "Bearer not-a-jwt"}
        )
        assert response.status_code == 401

    def test_unknown_route_uses_error_envelope(self, client):
        response = client.get("/api/nothing-here")
        assert response.status_code == 404
        assert response.get_json() == {
            "success": False,
            "error": "not_found",
            "message": "Resource not found",
        }
