"""Engagement scoring rules and lifecycle stage thresholds."""

from dataclasses import dataclass
from enum import Enum
from typing import Dict, List, Optional

from ..storage.models import LeadStatus


class ScoreCategory(Enum):
    """Which profile score an engagement action feeds."""

    BEHAVIORAL = "behavioral"
    DEMOGRAPHIC = "demographic"
    ENGAGEMENT = "engagement"


@dataclass(frozen=True)
class EngagementRule:
    """Points awarded for a single engagement action."""

    action: str
    points: int
    category: ScoreCategory
    weight: float


# Engagement actions recognised by the scoring engine
ENGAGEMENT_ACTIONS: Dict[str, EngagementRule] = {
    rule.action: rule
    for rule in [
        # === BEHAVIORAL ===
        EngagementRule("page_view", 1, ScoreCategory.BEHAVIORAL, 1.0),
        EngagementRule("time_on_site", 1, ScoreCategory.BEHAVIORAL, 1.2),
        EngagementRule("scroll_depth", 2, ScoreCategory.BEHAVIORAL, 1.1),

        # === DEMOGRAPHIC ===
        EngagementRule("email_captured", 25, ScoreCategory.DEMOGRAPHIC, 2.0),
        EngagementRule("phone_captured", 40, ScoreCategory.DEMOGRAPHIC, 2.5),
        EngagementRule("name_captured", 15, ScoreCategory.DEMOGRAPHIC, 1.5),

        # === ENGAGEMENT ===
        EngagementRule("tool_usage", 50, ScoreCategory.ENGAGEMENT, 3.0),
        EngagementRule("assessment_completed", 100, ScoreCategory.ENGAGEMENT, 4.0),
        EngagementRule("content_engagement", 10, ScoreCategory.ENGAGEMENT, 1.8),
        EngagementRule("webinar_registered", 75, ScoreCategory.ENGAGEMENT, 3.5),
        EngagementRule("office_visit_booked", 150, ScoreCategory.ENGAGEMENT, 5.0),
        EngagementRule("referral_made", 200, ScoreCategory.ENGAGEMENT, 6.0),
        EngagementRule("high_engagement", 30, ScoreCategory.ENGAGEMENT, 2.2),
    ]
}

# Engagement actions also count half their raw points as behavioral
ENGAGEMENT_BEHAVIORAL_SHARE = 0.5

# Minimum total score for each stage, checked highest first
STATUS_THRESHOLDS: List[tuple] = [
    (LeadStatus.HOT_LEAD, 500),
    (LeadStatus.CANDIDATE, 200),
    (LeadStatus.COLD_LEAD, 50),
]


def action_rule(action: str) -> Optional[EngagementRule]:
    """Look up the scoring rule for an action, None if it is unknown."""
    return ENGAGEMENT_ACTIONS.get(action)


def classify(total_score: int) -> LeadStatus:
    """Map a total score to its lifecycle stage."""
    for status, threshold in STATUS_THRESHOLDS:
        if total_score >= threshold:
            return status
    return LeadStatus.VISITOR


def get_actions_by_category(category: ScoreCategory) -> List[EngagementRule]:
    """Get all rules for a specific category."""
    return [r for r in ENGAGEMENT_ACTIONS.values() if r.category == category]
