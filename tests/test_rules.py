"""Tests for the scoring rules."""

import pytest
from lead_lifecycle.core.rules import (
    ENGAGEMENT_ACTIONS,
    ScoreCategory,
    action_rule,
    classify,
    get_actions_by_category,
)
from lead_lifecycle.storage.models import LeadStatus


class TestActionRules:
    """Tests for the action table."""

    def test_vocabulary(self):
        """All public action names should be scored."""
        assert set(ENGAGEMENT_ACTIONS) == {
            "page_view", "time_on_site", "scroll_depth",
            "email_captured", "phone_captured", "name_captured",
            "tool_usage", "assessment_completed", "content_engagement",
            "webinar_registered", "office_visit_booked", "referral_made",
            "high_engagement",
        }

    def test_tool_usage_rule(self):
        rule = action_rule("tool_usage")
        assert rule.points == 50
        assert rule.category == ScoreCategory.ENGAGEMENT
        assert rule.weight == 3.0

    def test_unknown_action_returns_none(self):
        """Unknown actions should not raise."""
        assert action_rule("not_a_real_action") is None
        assert action_rule("") is None

    def test_categories(self):
        behavioral = {r.action for r in get_actions_by_category(ScoreCategory.BEHAVIORAL)}
        demographic = {r.action for r in get_actions_by_category(ScoreCategory.DEMOGRAPHIC)}
        assert behavioral == {"page_view", "time_on_site", "scroll_depth"}
        assert demographic == {"email_captured", "phone_captured", "name_captured"}


class TestClassify:
    """Tests for stage thresholds."""

    @pytest.mark.parametrize("total,expected", [
        (0, LeadStatus.VISITOR),
        (49, LeadStatus.VISITOR),
        (50, LeadStatus.COLD_LEAD),
        (199, LeadStatus.COLD_LEAD),
        (200, LeadStatus.CANDIDATE),
        (499, LeadStatus.CANDIDATE),
        (500, LeadStatus.HOT_LEAD),
        (10000, LeadStatus.HOT_LEAD),
    ])
    def test_threshold_boundaries(self, total, expected):
        assert classify(total) == expected

    def test_monotonic(self):
        """Stage should never go down as the score goes up."""
        ranks = [classify(score).rank for score in range(0, 700)]
        assert ranks == sorted(ranks)

    def test_status_ordering(self):
        assert LeadStatus.VISITOR < LeadStatus.COLD_LEAD < LeadStatus.CANDIDATE < LeadStatus.HOT_LEAD

    def test_status_full_ordering(self):
        assert LeadStatus.CANDIDATE >= LeadStatus.COLD_LEAD
        assert LeadStatus.CANDIDATE >= LeadStatus.CANDIDATE
        assert LeadStatus.VISITOR <= LeadStatus.HOT_LEAD
        assert LeadStatus.HOT_LEAD > LeadStatus.CANDIDATE
        assert max(LeadStatus) == LeadStatus.HOT_LEAD
