"""Integration tests for plan and activity routes.

The repository and the LLM client are swapped through dependency overrides.
"""

import uuid
from collections.abc import Generator
from typing import Any
from unittest.mock import AsyncMock

import pytest
from fastapi.testclient import TestClient

from backend.app.api.deps import get_completion_client, get_repository
from backend.app.db.inmemory import InMemoryPlanRepository
from backend.app.errors import ExternalServiceError
from backend.app.main import app
from backend.app.models.ai import AIGenerationResponse
from backend.app.models.plan import Plan

PLAN_BODY = {
    "name": "Weekend in Kraków",
    "destination": "Kraków, Poland",
    "start_date": "2025-06-01T09:00:00Z",
    "end_date": "2025-06-02T18:00:00Z",
    "notes": "Old town and food",
}


@pytest.fixture
def client(
    repository: InMemoryPlanRepository, llm_client: AsyncMock
) -> Generator[TestClient, None, None]:
    """Test client bound to a fresh in-memory repository and a mocked provider."""
    app.dependency_overrides[get_repository] = lambda: repository
    app.dependency_overrides[get_completion_client] = lambda: llm_client
    yield TestClient(app)
    app.dependency_overrides.clear()


@pytest.fixture
def auth(user_id: uuid.UUID) -> dict[str, str]:
    return {"Authorization": f"Bearer {user_id}"}


def _create_plan(client: TestClient, auth: dict[str, str]) -> dict[str, Any]:
    response = client.post("/plans", json=PLAN_BODY, headers=auth)
    assert response.status_code == 201
    return response.json()


class TestPlanLifecycle:
    def test_create_plan(self, client: TestClient, auth: dict[str, str]) -> None:
        plan = _create_plan(client, auth)

        assert plan["status"] == "draft"
        assert plan["itinerary"] is None
        assert plan["content_error"] is False

    def test_create_plan_rejects_inverted_dates(self, client: TestClient, auth: dict[str, str]) -> None:
        body = {**PLAN_BODY, "end_date": "2025-05-01T00:00:00Z"}

        response = client.post("/plans", json=body, headers=auth)

        assert response.status_code == 400
        assert response.json()["error"] == "Invalid request"

    def test_get_missing_plan(self, client: TestClient, auth: dict[str, str]) -> None:
        response = client.get(f"/plans/{uuid.uuid4()}", headers=auth)

        assert response.status_code == 404
        assert response.json() == {"error": "Plan not found."}

    def test_get_foreign_plan(self, client: TestClient, auth: dict[str, str]) -> None:
        plan = _create_plan(client, auth)

        response = client.get(f"/plans/{plan['id']}", headers={"Authorization": f"Bearer {uuid.uuid4()}"})

        assert response.status_code == 403

    def test_fixed_points(self, client: TestClient, auth: dict[str, str]) -> None:
        plan = _create_plan(client, auth)
        for event_at, location in [("2025-06-02T10:00:00Z", "Castle"), ("2025-06-01T15:00:00Z", "Mine")]:
            response = client.post(
                f"/plans/{plan['id']}/fixed-points",
                json={"location": location, "event_at": event_at, "event_duration": 90},
                headers=auth,
            )
            assert response.status_code == 201

        response = client.get(f"/plans/{plan['id']}/fixed-points", headers=auth)

        assert response.status_code == 200
        assert [fp["location"] for fp in response.json()] == ["Mine", "Castle"]

    def test_archive_draft_conflict(self, client: TestClient, auth: dict[str, str]) -> None:
        plan = _create_plan(client, auth)

        response = client.post(f"/plans/{plan['id']}/archive", headers=auth)

        assert response.status_code == 409

    def test_delete_plan(self, client: TestClient, auth: dict[str, str]) -> None:
        plan = _create_plan(client, auth)

        response = client.delete(f"/plans/{plan['id']}", headers=auth)

        assert response.status_code == 204
        assert client.get(f"/plans/{plan['id']}", headers=auth).status_code == 404


class TestGenerate:
    def test_generate_then_read(
        self, client: TestClient, auth: dict[str, str], repository: InMemoryPlanRepository, user_id: uuid.UUID
    ) -> None:
        plan = _create_plan(client, auth)

        response = client.post(f"/plans/{plan['id']}/generate", headers=auth)

        assert response.status_code == 200
        body = response.json()
        assert body["status"] == "generated"
        assert body["itinerary"]["days"][0]["items"][0]["title"] == "Wawel Castle"
        assert repository.get_profile(user_id).generations_remaining == 4  # type: ignore[union-attr]

        details = client.get(f"/plans/{plan['id']}", headers=auth).json()
        assert details["status"] == "generated"
        assert details["itinerary"] == body["itinerary"]

        archived = client.post(f"/plans/{plan['id']}/archive", headers=auth)
        assert archived.status_code == 200
        assert archived.json()["status"] == "archived"

    def test_generate_with_language(
        self, client: TestClient, auth: dict[str, str], llm_client: AsyncMock
    ) -> None:
        plan = _create_plan(client, auth)

        response = client.post(f"/plans/{plan['id']}/generate", json={"language": "English"}, headers=auth)

        assert response.status_code == 200
        assert "must be in English" in llm_client.complete_structured.call_args.kwargs["system_prompt"]

    def test_generate_without_quota(
        self,
        client: TestClient,
        auth: dict[str, str],
        repository: InMemoryPlanRepository,
        user_id: uuid.UUID,
        llm_client: AsyncMock,
    ) -> None:
        repository.ensure_profile(user_id, 0)
        plan = _create_plan(client, auth)

        response = client.post(f"/plans/{plan['id']}/generate", headers=auth)

        assert response.status_code == 403
        assert response.json() == {"error": "You have no plan generations remaining."}
        llm_client.complete_structured.assert_not_awaited()

    def test_generate_rejected_by_model(
        self, client: TestClient, auth: dict[str, str], llm_client: AsyncMock
    ) -> None:
        llm_client.complete_structured.return_value = AIGenerationResponse(
            status="error",
            summary=None,
            currency=None,
            itinerary=None,
            error_type="invalid_location",
            error_message="Atlantis is not a real place.",
        )
        plan = _create_plan(client, auth)

        response = client.post(f"/plans/{plan['id']}/generate", headers=auth)

        assert response.status_code == 400
        assert response.json() == {
            "error": "Atlantis is not a real place.",
            "details": {"error_type": "invalid_location"},
        }

    def test_generate_provider_failure(
        self, client: TestClient, auth: dict[str, str], llm_client: AsyncMock
    ) -> None:
        llm_client.complete_structured.side_effect = ExternalServiceError(
            "The AI service did not respond in time. Please try again later."
        )
        plan = _create_plan(client, auth)

        response = client.post(f"/plans/{plan['id']}/generate", headers=auth)

        assert response.status_code == 502
        assert "did not respond in time" in response.json()["error"]
        assert client.get(f"/plans/{plan['id']}", headers=auth).json()["status"] == "draft"

    def test_generate_without_provider_key(self, client: TestClient, auth: dict[str, str]) -> None:
        def missing_key() -> None:
            raise ExternalServiceError("AI provider API key is not configured.")

        app.dependency_overrides[get_completion_client] = missing_key
        plan = _create_plan(client, auth)

        response = client.post(f"/plans/{plan['id']}/generate", headers=auth)

        assert response.status_code == 502
        assert response.json() == {"error": "AI provider API key is not configured."}


class TestActivities:
    @pytest.fixture
    def plan_id(self, generated_plan: Plan) -> str:
        return str(generated_plan.id)

    def test_add_update_delete(self, client: TestClient, auth: dict[str, str], plan_id: str) -> None:
        base = f"/plans/{plan_id}/days/2025-06-01/items"

        added = client.post(base, json={"title": "Lunch", "category": "food", "duration": 60}, headers=auth)
        assert added.status_code == 201
        item = added.json()["item"]
        assert item["type"] == "meal"
        assert item["estimated_duration"] == "60 min"
        assert len(added.json()["itinerary"]["days"][0]["items"]) == 2

        patched = client.patch(f"{base}/a1", json={"title": "National Museum"}, headers=auth)
        assert patched.status_code == 200
        assert patched.json()["days"][0]["items"][0]["title"] == "National Museum"

        deleted = client.delete(f"{base}/a1", headers=auth)
        assert deleted.status_code == 200
        assert [i["id"] for i in deleted.json()["days"][0]["items"]] == [item["id"]]

    def test_empty_patch_rejected(self, client: TestClient, auth: dict[str, str], plan_id: str) -> None:
        response = client.patch(f"/plans/{plan_id}/days/2025-06-01/items/a1", json={}, headers=auth)

        assert response.status_code == 400

    def test_null_title_patch_rejected_without_rewrite(
        self,
        client: TestClient,
        auth: dict[str, str],
        plan_id: str,
        repository: InMemoryPlanRepository,
    ) -> None:
        before = repository.get_plan(uuid.UUID(plan_id))

        response = client.patch(
            f"/plans/{plan_id}/days/2025-06-01/items/a1", json={"title": None}, headers=auth
        )

        assert response.status_code == 400
        after = repository.get_plan(uuid.UUID(plan_id))
        assert after is not None and before is not None
        assert after.updated_at == before.updated_at
        assert after.generated_content == before.generated_content

    def test_unknown_day(self, client: TestClient, auth: dict[str, str], plan_id: str) -> None:
        response = client.delete(f"/plans/{plan_id}/days/2025-07-01/items/a1", headers=auth)

        assert response.status_code == 404

    def test_draft_plan_conflict(self, client: TestClient, auth: dict[str, str]) -> None:
        plan = _create_plan(client, auth)

        response = client.post(
            f"/plans/{plan['id']}/days/2025-06-01/items",
            json={"title": "Lunch", "category": "food"},
            headers=auth,
        )

        assert response.status_code == 409


class TestPlanEdits:
    def test_list_plans(self, client: TestClient, auth: dict[str, str]) -> None:
        for name in ["Bergen", "Athens"]:
            client.post("/plans", json={**PLAN_BODY, "name": name}, headers=auth)

        response = client.get("/plans", params={"sort_by": "name", "order": "asc", "limit": 1}, headers=auth)

        assert response.status_code == 200
        body = response.json()
        assert [plan["name"] for plan in body["data"]] == ["Athens"]
        assert body["pagination"] == {"total": 2, "limit": 1, "offset": 0}

    def test_list_plans_by_status(self, client: TestClient, auth: dict[str, str]) -> None:
        _create_plan(client, auth)

        response = client.get("/plans", params={"status": "generated"}, headers=auth)

        assert response.status_code == 200
        assert response.json()["data"] == []

    def test_list_plans_rejects_large_limit(self, client: TestClient, auth: dict[str, str]) -> None:
        response = client.get("/plans", params={"limit": 101}, headers=auth)

        assert response.status_code == 400

    def test_update_plan(self, client: TestClient, auth: dict[str, str]) -> None:
        plan = _create_plan(client, auth)

        response = client.patch(
            f"/plans/{plan['id']}", json={"name": "Long weekend", "notes": None}, headers=auth
        )

        assert response.status_code == 200
        assert response.json()["name"] == "Long weekend"
        assert response.json()["notes"] is None

    def test_update_plan_rejects_inverted_dates(self, client: TestClient, auth: dict[str, str]) -> None:
        plan = _create_plan(client, auth)

        response = client.patch(
            f"/plans/{plan['id']}", json={"end_date": "2025-05-01T00:00:00Z"}, headers=auth
        )

        assert response.status_code == 400

    def test_update_and_delete_fixed_point(self, client: TestClient, auth: dict[str, str]) -> None:
        plan = _create_plan(client, auth)
        base = f"/plans/{plan['id']}/fixed-points"
        point = client.post(
            base, json={"location": "Castle", "event_at": "2025-06-01T10:00:00Z"}, headers=auth
        ).json()

        patched = client.patch(f"{base}/{point['id']}", json={"event_duration": 45}, headers=auth)
        assert patched.status_code == 200
        assert patched.json()["event_duration"] == 45

        assert client.delete(f"{base}/{point['id']}", headers=auth).status_code == 204
        assert client.get(base, headers=auth).json() == []
        assert client.delete(f"{base}/{point['id']}", headers=auth).status_code == 404


class TestProfile:
    def test_read_and_update(self, client: TestClient, auth: dict[str, str]) -> None:
        profile = client.get("/profiles", headers=auth).json()
        assert profile["generations_remaining"] == 5

        response = client.patch(
            "/profiles", json={"preferences": ["food", "museums"], "travel_pace": "slow"}, headers=auth
        )

        assert response.status_code == 200
        assert response.json()["preferences"] == ["food", "museums"]
        assert response.json()["travel_pace"] == "slow"
        assert client.get("/profiles", headers=auth).json()["travel_pace"] == "slow"

    def test_single_preference_rejected(self, client: TestClient, auth: dict[str, str]) -> None:
        response = client.patch("/profiles", json={"preferences": ["food"]}, headers=auth)

        assert response.status_code == 400

    def test_malformed_token_rejected(self, client: TestClient) -> None:
        response = client.get("/profiles", headers={"Authorization": "Bearer not-a-uuid"})

        assert response.status_code == 401


class TestFeedback:
    @pytest.fixture
    def plan_id(self, generated_plan: Plan) -> str:
        return str(generated_plan.id)

    def test_submit_replace_and_read(self, client: TestClient, auth: dict[str, str], plan_id: str) -> None:
        url = f"/plans/{plan_id}/feedback"
        assert client.get(url, headers=auth).status_code == 404

        created = client.post(url, json={"rating": "thumbs_down", "comment": "Too rushed"}, headers=auth)
        assert created.status_code == 201

        replaced = client.post(url, json={"rating": "thumbs_up"}, headers=auth)
        assert replaced.status_code == 200

        stored = client.get(url, headers=auth).json()
        assert stored["rating"] == "thumbs_up"
        assert stored["comment"] is None

    def test_unknown_rating_rejected(self, client: TestClient, auth: dict[str, str], plan_id: str) -> None:
        response = client.post(f"/plans/{plan_id}/feedback", json={"rating": "meh"}, headers=auth)

        assert response.status_code == 400

    def test_draft_plan_conflict(self, client: TestClient, auth: dict[str, str]) -> None:
        plan = _create_plan(client, auth)

        response = client.post(f"/plans/{plan['id']}/feedback", json={"rating": "thumbs_up"}, headers=auth)

        assert response.status_code == 409
