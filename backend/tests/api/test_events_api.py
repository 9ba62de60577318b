"""Integration tests for the event lifecycle endpoints."""

import uuid
from datetime import UTC, datetime, timedelta

import pytest

pytestmark = pytest.mark.integration

CREATOR = "creator-1"
ADMIN = "admin-1"


def _create(api_client, auth_headers, start_in: timedelta = timedelta(days=1), duration: timedelta = timedelta(hours=2)):
    start = datetime.now(UTC) + start_in
    response = api_client.post(
        "/api/events",
        json={
            "title": "Saturday basketball",
            "start_time": start.isoformat(),
            "end_time": (start + duration).isoformat(),
            "max_participants": 10,
        },
        headers=auth_headers(CREATOR),
    )
    assert response.status_code == 201, response.text
    return response.json()


def _transition(api_client, auth_headers, event_id: str, status: str, user_id: str, role: str = "user"):
    return api_client.patch(
        f"/api/events/{event_id}/status",
        json={"status": status},
        headers=auth_headers(user_id, role),
    )


class TestCreateAndFetch:
    def test_create_returns_pending_event(self, api_client, auth_headers):
        event = _create(api_client, auth_headers)

        assert event["status"] == "pending"
        assert event["creator_id"] == CREATOR
        assert event["approved_at"] is None
        assert event["rejected_at"] is None

        fetched = api_client.get(f"/api/events/{event['id']}", headers=auth_headers("someone"))
        assert fetched.status_code == 200
        assert fetched.json()["id"] == event["id"]

    def test_create_requires_auth(self, api_client):
        response = api_client.post("/api/events", json={})
        assert response.status_code == 401

    def test_create_rejects_inverted_schedule(self, api_client, auth_headers):
        start = datetime.now(UTC) + timedelta(days=1)
        response = api_client.post(
            "/api/events",
            json={
                "title": "Backwards",
                "start_time": start.isoformat(),
                "end_time": (start - timedelta(hours=1)).isoformat(),
                "max_participants": 4,
            },
            headers=auth_headers(CREATOR),
        )

        assert response.status_code == 422
        assert response.json()["error"] == "InvalidEventError"

    def test_create_rejects_naive_times(self, api_client, auth_headers):
        response = api_client.post(
            "/api/events",
            json={
                "title": "No zone",
                "start_time": "2030-01-01T10:00:00",
                "end_time": "2030-01-01T12:00:00",
                "max_participants": 4,
            },
            headers=auth_headers(CREATOR),
        )

        assert response.status_code == 422

    def test_unknown_event_is_404(self, api_client, auth_headers):
        response = api_client.get(f"/api/events/{uuid.uuid4()}", headers=auth_headers(CREATOR))

        assert response.status_code == 404
        assert "debug_id" in response.json()


class TestTransitions:
    def test_admin_approves(self, api_client, auth_headers):
        event = _create(api_client, auth_headers)

        response = _transition(api_client, auth_headers, event["id"], "active", ADMIN, "admin")

        assert response.status_code == 200
        body = response.json()
        assert body["status"] == "active"
        assert body["approved_at"] is not None

    def test_creator_cannot_approve_own_event(self, api_client, auth_headers):
        event = _create(api_client, auth_headers)

        response = _transition(api_client, auth_headers, event["id"], "active", CREATOR)

        assert response.status_code == 403
        assert response.json()["error"] == "PermissionDeniedError"
        assert "moderation" in response.json()["reason"]

    def test_stranger_cannot_cancel(self, api_client, auth_headers):
        event = _create(api_client, auth_headers)
        _transition(api_client, auth_headers, event["id"], "active", ADMIN, "admin")

        response = _transition(api_client, auth_headers, event["id"], "cancelled", "someone-else")

        assert response.status_code == 403

    def test_invalid_edge_reports_statuses(self, api_client, auth_headers):
        event = _create(api_client, auth_headers)

        response = _transition(api_client, auth_headers, event["id"], "completed", ADMIN, "admin")

        assert response.status_code == 400
        body = response.json()
        assert body["error"] == "InvalidTransitionError"
        assert body["current_status"] == "pending"
        assert body["target_status"] == "completed"
        assert body["reason"]

    def test_rejected_event_is_final(self, api_client, auth_headers):
        event = _create(api_client, auth_headers)
        assert _transition(api_client, auth_headers, event["id"], "rejected", ADMIN, "admin").status_code == 200

        response = _transition(api_client, auth_headers, event["id"], "active", ADMIN, "admin")

        assert response.status_code == 400
        assert "terminal" in response.json()["reason"]

    def test_cancel_and_reactivate_keeps_approval(self, api_client, auth_headers):
        event = _create(api_client, auth_headers)
        approved = _transition(api_client, auth_headers, event["id"], "active", ADMIN, "admin").json()

        cancelled = _transition(api_client, auth_headers, event["id"], "cancelled", CREATOR)
        reactivated = _transition(api_client, auth_headers, event["id"], "active", CREATOR)

        assert cancelled.json()["status"] == "cancelled"
        assert reactivated.status_code == 200
        assert reactivated.json()["approved_at"] == approved["approved_at"]

    def test_complete_before_start_rejected(self, api_client, auth_headers):
        event = _create(api_client, auth_headers)
        _transition(api_client, auth_headers, event["id"], "active", ADMIN, "admin")

        response = _transition(api_client, auth_headers, event["id"], "completed", CREATOR)

        assert response.status_code == 400
        assert "before it starts" in response.json()["reason"]

    def test_creator_completes_started_event(self, api_client, auth_headers):
        event = _create(api_client, auth_headers, start_in=-timedelta(hours=1))
        _transition(api_client, auth_headers, event["id"], "active", ADMIN, "admin")

        response = _transition(api_client, auth_headers, event["id"], "completed", CREATOR)

        assert response.status_code == 200
        assert response.json()["status"] == "completed"

    def test_unknown_status_value_is_422(self, api_client, auth_headers):
        event = _create(api_client, auth_headers)

        response = _transition(api_client, auth_headers, event["id"], "archived", ADMIN, "admin")

        assert response.status_code == 422

    def test_transition_on_missing_event(self, api_client, auth_headers):
        response = _transition(api_client, auth_headers, str(uuid.uuid4()), "active", ADMIN, "admin")

        assert response.status_code == 404


class TestDelete:
    def test_creator_deletes(self, api_client, auth_headers):
        event = _create(api_client, auth_headers)

        response = api_client.delete(f"/api/events/{event['id']}", headers=auth_headers(CREATOR))

        assert response.status_code == 204
        assert api_client.get(f"/api/events/{event['id']}", headers=auth_headers(CREATOR)).status_code == 404

    def test_stranger_cannot_delete(self, api_client, auth_headers):
        event = _create(api_client, auth_headers)

        response = api_client.delete(f"/api/events/{event['id']}", headers=auth_headers("someone-else"))

        assert response.status_code == 403


class TestAdminSweeps:
    def test_requires_admin(self, api_client, auth_headers):
        response = api_client.post("/api/admin/sweeps/completion", headers=auth_headers(CREATOR))

        assert response.status_code == 403

    def test_completion_sweep_completes_ended_events(self, api_client, auth_headers):
        event = _create(api_client, auth_headers, start_in=-timedelta(hours=3), duration=timedelta(hours=1))
        _transition(api_client, auth_headers, event["id"], "active", ADMIN, "admin")

        response = api_client.post("/api/admin/sweeps/completion", headers=auth_headers(ADMIN, "admin"))

        assert response.status_code == 200
        assert response.json() == {
            "sweep": "completion",
            "ran": True,
            "selected": 1,
            "transitioned": 1,
            "skipped": 0,
            "failed": 0,
        }
        fetched = api_client.get(f"/api/events/{event['id']}", headers=auth_headers(CREATOR)).json()
        assert fetched["status"] == "completed"

    def test_auto_reject_sweep(self, api_client, auth_headers):
        event = _create(api_client, auth_headers, start_in=timedelta(minutes=10))

        response = api_client.post("/api/admin/sweeps/auto_reject", headers=auth_headers(ADMIN, "admin"))

        assert response.json()["transitioned"] == 1
        fetched = api_client.get(f"/api/events/{event['id']}", headers=auth_headers(CREATOR)).json()
        assert fetched["status"] == "rejected"

    def test_unknown_sweep_kind(self, api_client, auth_headers):
        response = api_client.post("/api/admin/sweeps/archive", headers=auth_headers(ADMIN, "admin"))

        assert response.status_code == 422
