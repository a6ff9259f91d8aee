"""Tests for the HTTP API."""

from fastapi.testclient import TestClient

from lead_lifecycle.api.main import create_app
from lead_lifecycle.config import Settings
from lead_lifecycle.services.registry import ANALYTICS, build_container
from lead_lifecycle.tracking.events import LEAD_CREATED


class TestLeadLifecycleAPI:
    """Tests for the API routes."""

    def setup_method(self):
        self.container = build_container(Settings.from_overrides(storage="memory"))
        self.app = create_app(container=self.container)

    def test_health(self):
        with TestClient(self.app) as client:
            response = client.get("/health")

        assert response.status_code == 200
        assert response.json()["status"] == "healthy"

    def test_ready_reports_services(self):
        with TestClient(self.app) as client:
            response = client.get("/ready")

        data = response.json()
        assert data["status"] == "ready"
        assert data["services"]["leads"] == "healthy"

    def test_create_and_get_lead(self):
        with TestClient(self.app) as client:
            response = client.post("/v1/leads", json={
                "email": "jane@example.com",
                "name": "Jane",
                "source": "webinar",
            })
            assert response.status_code == 201
            lead = response.json()
            assert lead["id"].startswith("lead_")
            assert lead["status"] == "visitor"
            assert lead["score"] == 0

            fetched = client.get(f"/v1/leads/{lead['id']}")
            assert fetched.status_code == 200
            assert fetched.json() == lead

            events = self.container.resolve(ANALYTICS).get_events(LEAD_CREATED)
            assert events[0].properties["source"] == "webinar"

    def test_get_unknown_lead(self):
        with TestClient(self.app) as client:
            response = client.get("/v1/leads/lead_missing")

        assert response.status_code == 404
        assert response.json()["detail"]["error"] == "not_found"

    def test_update_score(self):
        with TestClient(self.app) as client:
            lead = client.post("/v1/leads", json={"email": "jane@example.com"}).json()

            response = client.post(f"/v1/leads/{lead['id']}/score", json={"points": 75})

        assert response.status_code == 200
        profile = response.json()
        assert profile["engagement_score"] == 75
        assert profile["status"] == "cold_lead"

    def test_update_score_unknown_lead(self):
        with TestClient(self.app) as client:
            response = client.post("/v1/leads/lead_missing/score", json={"points": 10})

        assert response.status_code == 404
        assert "lead_missing" in response.json()["detail"]["detail"]

    def test_update_score_validation(self):
        with TestClient(self.app) as client:
            response = client.post("/v1/leads/lead_1/score", json={})

        assert response.status_code == 422

    def test_track_engagement_with_header(self):
        with TestClient(self.app) as client:
            response = client.post(
                "/v1/engagement",
                json={"action": "tool_usage", "page_url": "https://example.com/?c=post_1"},
                headers={"X-Session-ID": "session_header"},
            )

        assert response.status_code == 200
        assert response.headers["X-Session-ID"] == "session_header"
        data = response.json()
        assert data["tracked"]
        assert data["profile"]["engagement_score"] == 150
        assert data["profile"]["behavioral_score"] == 25
        assert data["profile"]["attribution_data"]["content_id"] == "post_1"

    def test_track_engagement_issues_session(self):
        with TestClient(self.app) as client:
            response = client.post("/v1/engagement", json={"action": "page_view"})
            session_id = response.headers["X-Session-ID"]

            profile = client.get(f"/v1/profiles/{session_id}").json()

        assert session_id.startswith("session_")
        assert response.json()["session_id"] == session_id
        assert profile["behavioral_score"] == 1

    def test_track_unknown_action(self):
        with TestClient(self.app) as client:
            response = client.post(
                "/v1/engagement",
                json={"action": "teleported", "session_id": "session_body"},
            )

        data = response.json()
        assert response.status_code == 200
        assert not data["tracked"]
        assert data["profile"] is None

    def test_profile_created_on_first_sight(self):
        with TestClient(self.app) as client:
            response = client.get("/v1/profiles/session_new")

        profile = response.json()
        assert profile["id"] == "session_new"
        assert profile["status"] == "visitor"
        assert profile["predictions"]["next_best_action"] == "Take an assessment tool"

    def test_list_actions(self):
        with TestClient(self.app) as client:
            actions = client.get("/v1/actions").json()

        by_name = {a["action"]: a for a in actions}
        assert len(by_name) == 13
        assert by_name["office_visit_booked"] == {
            "action": "office_visit_booked",
            "points": 150,
            "category": "engagement",
            "weight": 5.0,
        }
