"""Tests for prediction functions."""

import pytest
from datetime import datetime, timedelta

from lead_lifecycle.core.predictions import (
    DEFAULT_NEXT_ACTION,
    IDEAL_CONVERSION_PATH,
    churn_risk,
    conversion_path,
    conversion_readiness,
    diversity_factor,
    generate_predictions,
    initial_predictions,
    recency_factor,
    time_investment_factor,
)
from lead_lifecycle.storage.models import EngagementActivity, LeadProfile

NOW = datetime(2026, 3, 1, 12, 0, 0)


def make_profile(actions=(), engagement=0, demographic=0, last_activity=NOW):
    activities = [
        EngagementActivity(timestamp=last_activity, action=action, points=1)
        for action in actions
    ]
    return LeadProfile(
        id="session_test",
        predictions=initial_predictions(),
        engagement_score=engagement,
        demographic_score=demographic,
        last_activity=last_activity,
        activities=activities,
    )


class TestFactors:
    """Tests for the readiness factors."""

    def test_recency_boundaries(self):
        assert recency_factor(NOW, NOW) == 1
        assert recency_factor(NOW - timedelta(hours=12), NOW) == 0.5
        assert recency_factor(NOW - timedelta(hours=24), NOW) == 0
        assert recency_factor(NOW - timedelta(days=5), NOW) == 0

    def test_recency_future_timestamp_capped(self):
        assert recency_factor(NOW + timedelta(hours=3), NOW) == 1

    def test_diversity(self):
        assert diversity_factor([]) == 0
        profile = make_profile(["page_view", "page_view", "tool_usage"])
        assert diversity_factor(profile.activities) == pytest.approx(0.2)

    def test_diversity_caps_at_one(self):
        profile = make_profile([
            "page_view", "time_on_site", "scroll_depth", "email_captured",
            "phone_captured", "name_captured", "tool_usage", "assessment_completed",
            "content_engagement", "webinar_registered", "office_visit_booked",
        ])
        assert diversity_factor(profile.activities) == 1

    def test_diversity_ignores_score_adjustments(self):
        profile = make_profile(["score_adjustment", "page_view"])
        assert diversity_factor(profile.activities) == pytest.approx(0.1)

    def test_time_investment(self):
        assert time_investment_factor(make_profile(["time_on_site"] * 150).activities) == 0.5
        assert time_investment_factor(make_profile(["time_on_site"] * 400).activities) == 1


class TestReadiness:
    """Tests for conversion readiness."""

    def test_fresh_profile_only_recency(self):
        profile = make_profile()
        assert conversion_readiness(profile, NOW) == pytest.approx(0.2)

    def test_score_term_caps(self):
        profile = make_profile(engagement=900, demographic=600,
                               last_activity=NOW - timedelta(days=2))
        assert conversion_readiness(profile, NOW) == pytest.approx(0.4)

    def test_score_term_ratio(self):
        profile = make_profile(engagement=150, demographic=100,
                               last_activity=NOW - timedelta(days=2))
        assert conversion_readiness(profile, NOW) == pytest.approx(0.1)

    def test_readiness_capped_at_one(self):
        actions = list(IDEAL_CONVERSION_PATH) + [
            "page_view", "scroll_depth", "phone_captured", "name_captured",
        ] + ["time_on_site"] * 300
        profile = make_profile(actions, engagement=2000, demographic=500)
        assert conversion_readiness(profile, NOW) == 1


class TestPredictions:
    """Tests for generated predictions."""

    def test_initial_predictions(self):
        predictions = initial_predictions()
        assert predictions.conversion_probability == 0.1
        assert predictions.time_to_conversion == 30
        assert predictions.best_conversion_path == ["tool_usage", "email_captured", "webinar_registered"]
        assert predictions.next_best_action == "Take an assessment tool"
        assert predictions.risk_of_churn == 0.8

    def test_path_excludes_completed_actions(self):
        profile = make_profile(["email_captured", "page_view", "tool_usage"])
        assert conversion_path(profile) == [
            "assessment_completed", "webinar_registered", "office_visit_booked",
        ]

    def test_next_best_action_follows_path(self):
        profile = make_profile(["tool_usage"])
        profile.conversion_readiness = 0.5
        predictions = generate_predictions(profile, NOW)
        assert predictions.next_best_action == "Sign up for our newsletter"

    def test_next_best_action_default_when_path_done(self):
        profile = make_profile(IDEAL_CONVERSION_PATH)
        predictions = generate_predictions(profile, NOW)
        assert predictions.best_conversion_path == []
        assert predictions.next_best_action == DEFAULT_NEXT_ACTION

    def test_probability_and_time(self):
        profile = make_profile()
        profile.conversion_readiness = 0.5
        predictions = generate_predictions(profile, NOW)
        assert predictions.conversion_probability == pytest.approx(0.6)
        assert predictions.time_to_conversion == pytest.approx(17.5)

    def test_probability_and_time_bounds(self):
        profile = make_profile()
        profile.conversion_readiness = 1.0
        predictions = generate_predictions(profile, NOW)
        assert predictions.conversion_probability == 0.95
        assert predictions.time_to_conversion == 7

    def test_churn_risk(self):
        assert churn_risk(make_profile(), NOW) == pytest.approx(0.5)
        assert churn_risk(make_profile(engagement=100), NOW) == pytest.approx(0.0)
        stale = make_profile(last_activity=NOW - timedelta(days=3))
        assert churn_risk(stale, NOW) == pytest.approx(1.0)
        assert churn_risk(make_profile(engagement=50, last_activity=NOW - timedelta(hours=12)), NOW) == pytest.approx(0.5)

    def test_deterministic(self):
        profile = make_profile(["tool_usage", "page_view"], engagement=150)
        profile.conversion_readiness = conversion_readiness(profile, NOW)
        assert generate_predictions(profile, NOW) == generate_predictions(profile, NOW)
