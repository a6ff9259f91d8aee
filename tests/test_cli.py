"""Tests for the leadctl CLI."""

import json
import tempfile
from pathlib import Path

from click.testing import CliRunner

from lead_lifecycle.cli.main import cli


class TestCLI:
    """Tests for CLI commands against a JSON data directory."""

    def setup_method(self):
        self.runner = CliRunner()
        self.data_dir = Path(tempfile.mkdtemp())

    def invoke(self, *args):
        return self.runner.invoke(cli, ["--data-dir", str(self.data_dir), *args])

    def read_json(self, key):
        return json.loads((self.data_dir / f"{key}.json").read_text())

    def test_actions(self):
        result = self.invoke("actions")

        assert result.exit_code == 0
        assert "tool_usage" in result.output
        assert "office_visit_booked" in result.output

    def test_track_and_profile(self):
        result = self.invoke("track", "tool_usage", "-s", "session_cli")
        assert result.exit_code == 0
        assert "Tracked tool_usage" in result.output

        result = self.invoke("profile", "session_cli")
        assert result.exit_code == 0
        assert "cold_lead" in result.output

        profiles = self.read_json("lead_profiles")
        assert profiles["session_cli"]["engagement_score"] == 150

    def test_track_with_multiplier_and_metadata(self):
        result = self.invoke(
            "track", "page_view", "-s", "session_cli", "-x", "3",
            "--meta", "section=pricing", "--meta", "depth=2",
        )
        assert result.exit_code == 0

        activity = self.read_json("lead_profiles")["session_cli"]["activities"][0]
        assert activity["points"] == 3
        assert activity["metadata"] == {"section": "pricing", "depth": 2, "multiplier": 3.0}

    def test_track_bad_metadata(self):
        result = self.invoke("track", "page_view", "--meta", "oops")
        assert result.exit_code == 2

    def test_track_unknown_action(self):
        result = self.invoke("track", "teleported", "-s", "session_cli")

        assert result.exit_code == 0
        assert "Unknown engagement action" in result.output
        assert not (self.data_dir / "lead_profiles.json").exists()

    def test_default_session_is_stable(self):
        self.invoke("track", "page_view")
        self.invoke("track", "page_view")

        session_id = self.read_json("session_id")
        profiles = self.read_json("lead_profiles")
        assert list(profiles) == [session_id]
        assert len(profiles[session_id]["activities"]) == 2

    def test_create_and_score(self):
        result = self.invoke("create", "jane@example.com", "--source", "webinar")
        assert result.exit_code == 0
        assert "Lead created" in result.output

        lead_id = next(iter(self.read_json("leads")))
        result = self.invoke("score", lead_id, "60")
        assert result.exit_code == 0
        assert "Added 60 points" in result.output
        assert self.read_json("lead_profiles")[lead_id]["status"] == "cold_lead"

    def test_score_unknown_lead(self):
        result = self.invoke("score", "lead_missing", "10")

        assert result.exit_code == 1
        assert "not found" in result.output

    def test_login_attributes_new_leads(self):
        assert self.invoke("login", "jane@example.com").exit_code == 0
        self.invoke("create", "jane@example.com")

        lead = next(iter(self.read_json("leads").values()))
        assert lead["user_id"] == self.read_json("auth_session")["user_id"]

        assert self.invoke("logout").exit_code == 0
        assert self.read_json("auth_session") is None

    def test_preview(self):
        result = self.invoke("preview", "200")
        assert "candidate" in result.output

    def test_leads_listing(self):
        self.invoke("track", "referral_made", "-s", "session_hot")
        self.invoke("track", "page_view", "-s", "session_cold")

        result = self.invoke("leads", "--status", "hot_lead")
        assert result.exit_code == 0
        assert "session_hot" in result.output
        assert "session_cold" not in result.output

    def test_leads_empty(self):
        result = self.invoke("leads")
        assert "No profiles found" in result.output

    def test_health(self):
        result = self.invoke("health")

        assert result.exit_code == 0
        assert "leads" in result.output
        assert "unhealthy" not in result.output

    def test_leads_min_status(self):
        self.invoke("track", "referral_made", "-s", "session_hot")
        self.invoke("track", "tool_usage", "-s", "session_warm")
        self.invoke("track", "page_view", "-s", "session_cold")

        result = self.invoke("leads", "--min-status", "cold_lead")
        assert result.exit_code == 0
        assert "session_hot" in result.output
        assert "session_warm" in result.output
        assert "session_cold" not in result.output

    def test_events_flushed_on_exit(self):
        self.invoke("track", "tool_usage", "-s", "session_cli")

        events = self.read_json("analytics_events")
        assert [e["name"] for e in events] == ["lead_status_changed", "engagement_tracked"]
        assert events[1]["properties"]["sessionId"] == "session_cli"
