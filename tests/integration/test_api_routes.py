"""Integration tests for the HTTP layer over in-memory repositories."""

import uuid
from collections.abc import Generator

import pytest
from fastapi.testclient import TestClient

from tripbuilder.app.api.dependencies import (
    get_client_repository,
    get_follow_up_repository,
    get_fulfillment_repository,
    get_version_store,
)
from tripbuilder.app.config import Settings
from tripbuilder.app.db.inmemory import (
    InMemoryDatabase,
    InMemoryFollowUpRepository,
    InMemoryFulfillmentRepository,
    InMemoryItineraryVersionStore,
    InMemorySalesClientRepository,
)
from tripbuilder.app.main import app

USER_ID = uuid.uuid4()
AUTH = {"Authorization": f"Bearer {USER_ID}"}

CLIENT_BODY = {
    "name": "Asha Rao",
    "country_code": "+91",
    "whatsapp": "9876543210",
    "travel_date": "2026-12-25",
    "number_of_days": 3,
    "number_of_adults": 7,
    "number_of_children": 2,
    "transportation_mode": "cab",
}

HOTEL = {"hotel_id": "hotel-seaview", "room_type_id": "deluxe"}
DAY_PLANS = [
    {"day": 1, "hotel": HOTEL, "sightseeing": ["fort-aguada"]},
    {"day": 2, "hotel": HOTEL, "activities": [{"activity_id": "scuba", "option_id": "boat-4"}]},
    {"day": 3, "hotel": HOTEL},
]


@pytest.fixture
def memory() -> InMemoryDatabase:
    return InMemoryDatabase()


@pytest.fixture
def client(memory: InMemoryDatabase) -> Generator[TestClient, None, None]:
    """Test client with repositories overridden to share one in-memory database."""
    app.dependency_overrides[get_client_repository] = lambda: InMemorySalesClientRepository(
        memory
    )
    app.dependency_overrides[get_version_store] = lambda: InMemoryItineraryVersionStore(memory)
    app.dependency_overrides[get_follow_up_repository] = lambda: InMemoryFollowUpRepository(
        memory
    )
    app.dependency_overrides[get_fulfillment_repository] = lambda: InMemoryFulfillmentRepository(
        memory
    )
    yield TestClient(app)
    app.dependency_overrides.clear()


@pytest.fixture
def client_id(client: TestClient) -> str:
    response = client.post("/clients", json=CLIENT_BODY, headers=AUTH)
    assert response.status_code == 201
    return response.json()["client_id"]


def _save_version(client: TestClient, client_id: str, description: str = "First draft") -> int:
    response = client.post(
        f"/clients/{client_id}/versions",
        json={"day_plans": DAY_PLANS, "total_cost": 440, "change_description": description},
        headers=AUTH,
    )
    assert response.status_code == 201
    return response.json()["version_number"]


class TestPricing:
    """POST /pricing/quote."""

    def test_quote_returns_breakdown(self, client: TestClient) -> None:
        response = client.post(
            "/pricing/quote",
            json={
                "client": {
                    "name": "Asha",
                    "travel_start_date": "2026-12-25",
                    "number_of_days": 3,
                    "pax": {"adults": 9},
                    "transportation_mode": "cab",
                },
                "day_plans": DAY_PLANS,
                "profit_margin": 60,
            },
            headers=AUTH,
        )

        assert response.status_code == 200
        data = response.json()
        assert data["categories"]["accommodation"] == 300
        assert data["categories"]["sightseeing"] == 80
        assert data["categories"]["activities"] == 90
        assert data["total_base_cost"] == 470
        assert data["final_price"] == 530
        assert data["final_price_secondary"] == 530 * 83
        assert len(data["days"]) == 3

    def test_quote_rejects_missing_day(self, client: TestClient) -> None:
        response = client.post(
            "/pricing/quote",
            json={
                "client": {
                    "name": "Asha",
                    "travel_start_date": "2026-12-25",
                    "number_of_days": 3,
                    "pax": {"adults": 2},
                    "transportation_mode": "cab",
                },
                "day_plans": DAY_PLANS[:2],
            },
            headers=AUTH,
        )

        assert response.status_code == 422


class TestClients:
    """Client registration and queries."""

    def test_requires_identity(self, client: TestClient) -> None:
        assert client.post("/clients", json=CLIENT_BODY).status_code == 401

    def test_duplicate_returns_existing(self, client: TestClient, client_id: str) -> None:
        response = client.post("/clients", json=CLIENT_BODY, headers=AUTH)

        assert response.status_code == 200
        assert response.json()["client_id"] == client_id

    def test_get_client(self, client: TestClient, client_id: str) -> None:
        response = client.get(f"/clients/{client_id}", headers=AUTH)

        assert response.status_code == 200
        data = response.json()
        assert data["current_status"] == "itinerary-created"
        assert data["next_follow_up_time"] == "10:00:00"
        assert data["sales_person_id"] == str(USER_ID)

    def test_unknown_client_404(self, client: TestClient) -> None:
        response = client.get(f"/clients/{uuid.uuid4()}", headers=AUTH)

        assert response.status_code == 404

    def test_due_follow_ups(self, client: TestClient, client_id: str) -> None:
        detail = client.get(f"/clients/{client_id}", headers=AUTH).json()

        response = client.get(
            "/clients/due", params={"on": detail["next_follow_up_date"]}, headers=AUTH
        )

        assert response.status_code == 200
        assert [c["client_id"] for c in response.json()] == [client_id]


class TestVersions:
    """Version endpoints."""

    def test_create_and_read_versions(self, client: TestClient, client_id: str) -> None:
        assert _save_version(client, client_id) == 1
        assert _save_version(client, client_id, "Swapped dive") == 2

        listed = client.get(f"/clients/{client_id}/versions", headers=AUTH).json()
        latest = client.get(f"/clients/{client_id}/versions/latest", headers=AUTH).json()
        first = client.get(f"/clients/{client_id}/versions/1", headers=AUTH).json()

        assert [v["version_number"] for v in listed] == [2, 1]
        assert latest["change_description"] == "Swapped dive"
        assert first["follow_up_status"] == "itinerary-created"
        assert len(first["payload"]["day_plans"]) == 3

    def test_missing_change_description_names_field(
        self, client: TestClient, client_id: str
    ) -> None:
        response = client.post(
            f"/clients/{client_id}/versions",
            json={"day_plans": DAY_PLANS, "total_cost": 440},
            headers=AUTH,
        )

        assert response.status_code == 422
        assert response.json()["field"] == "change_description"
        listed = client.get(f"/clients/{client_id}/versions", headers=AUTH).json()
        assert listed == []

    def test_latest_without_versions_404(self, client: TestClient, client_id: str) -> None:
        response = client.get(f"/clients/{client_id}/versions/latest", headers=AUTH)

        assert response.status_code == 404


class TestFollowUps:
    """Funnel transitions and confirmation."""

    def test_next_status(self, client: TestClient, client_id: str) -> None:
        response = client.get(f"/clients/{client_id}/follow-ups/next", headers=AUTH)

        assert response.status_code == 200
        data = response.json()
        assert data["current"] == "itinerary-created"
        assert data["suggested"] == "itinerary-sent"
        assert "dead" in data["allowed"]

    def test_transition_and_history(self, client: TestClient, client_id: str) -> None:
        response = client.post(
            f"/clients/{client_id}/follow-ups",
            json={
                "status": "itinerary-sent",
                "remarks": "Sent on WhatsApp",
                "next_follow_up_date": "2026-10-20",
                "next_follow_up_time": "11:00",
            },
            headers=AUTH,
        )

        assert response.status_code == 200
        assert response.json()["client"]["current_status"] == "itinerary-sent"
        history = client.get(f"/clients/{client_id}/follow-ups", headers=AUTH).json()
        assert [h["status"] for h in history] == ["itinerary-sent", "itinerary-created"]

    def test_missing_schedule_is_422(self, client: TestClient, client_id: str) -> None:
        response = client.post(
            f"/clients/{client_id}/follow-ups",
            json={"status": "itinerary-sent", "remarks": "Sent"},
            headers=AUTH,
        )

        assert response.status_code == 422
        assert response.json()["field"] == "next_follow_up_date"

    def test_invalid_transition_is_409(self, client: TestClient, client_id: str) -> None:
        response = client.post(
            f"/clients/{client_id}/follow-ups",
            json={
                "status": "4th-follow-up",
                "remarks": "Skip",
                "next_follow_up_date": "2026-10-20",
                "next_follow_up_time": "11:00",
            },
            headers=AUTH,
        )

        assert response.status_code == 409

    def test_confirm_without_operations_staff_is_retryable_409(
        self, client: TestClient, client_id: str
    ) -> None:
        version = _save_version(client, client_id)

        response = client.post(
            f"/clients/{client_id}/follow-ups",
            json={"status": "advance-paid-confirmed", "remarks": "Paid", "version_number": version},
            headers=AUTH,
        )

        assert response.status_code == 409
        assert "try again" in response.json()["detail"]
        detail = client.get(f"/clients/{client_id}", headers=AUTH).json()
        assert detail["current_status"] == "itinerary-created"

    def test_confirm_checklist_flow(
        self, client: TestClient, client_id: str, memory: InMemoryDatabase
    ) -> None:
        InMemoryFulfillmentRepository(memory).add_operations_person("Ravi")
        version = _save_version(client, client_id)
        body = {"status": "advance-paid-confirmed", "remarks": "Paid", "version_number": version}

        first = client.post(f"/clients/{client_id}/follow-ups", json=body, headers=AUTH)
        second = client.post(f"/clients/{client_id}/follow-ups", json=body, headers=AUTH)

        assert first.status_code == 200
        assert first.json()["confirmation"] == "created"
        assert len(first.json()["checklist"]) == 5
        assert second.json()["confirmation"] == "already_exists"

        items = client.get(f"/clients/{client_id}/checklist", headers=AUTH).json()
        patched = client.patch(
            f"/checklist/{items[0]['item_id']}",
            json={"is_booked": True, "booking_notes": "Confirmed by phone"},
            headers=AUTH,
        )
        progress = client.get(f"/clients/{client_id}/checklist/progress", headers=AUTH).json()

        assert patched.status_code == 200
        assert patched.json()["booked_by"] == str(USER_ID)
        assert progress == {"total": 5, "completed": 1, "percentage": 20}

        confirmed = client.get("/clients/confirmed", headers=AUTH).json()
        assert [c["client_id"] for c in confirmed] == [client_id]

        reset = client.delete(f"/clients/{client_id}/fulfillment", headers=AUTH)
        assert reset.status_code == 204
        assert client.get(f"/clients/{client_id}/checklist", headers=AUTH).json() == []


class TestHealthMetrics:
    """GET /health and /metrics."""

    def test_health(self, client: TestClient) -> None:
        assert client.get("/health").json() == {"status": "ok"}

    def test_healthz_checks_database(self, client: TestClient) -> None:
        response = client.get("/healthz")

        assert response.status_code == 200
        assert response.json() == {"status": "ok", "components": {"db": "ok"}}

    def test_healthz_degraded_without_database(
        self, client: TestClient, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        monkeypatch.setattr(
            "tripbuilder.app.api.routes.health.get_settings",
            lambda: Settings(database_url=None),
        )

        response = client.get("/healthz")

        assert response.status_code == 503
        assert response.json()["status"] == "degraded"
        assert response.json()["components"]["db"] == "error: ValueError"

    def test_metrics_exposes_counters(self, client: TestClient) -> None:
        response = client.get("/metrics")

        assert response.status_code == 200
        assert "itinerary_versions_total" in response.text
        assert "funnel_transitions_total" in response.text
