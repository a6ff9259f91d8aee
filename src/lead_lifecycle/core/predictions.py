"""Conversion and churn predictions derived from a lead profile.

Everything here is a pure function of the profile snapshot and ``now``; the
lifecycle service calls these after every score change and stores the result.
"""

from datetime import datetime
from typing import Iterable, List, Optional

from ..storage.models import EngagementActivity, LeadPredictions, LeadProfile
from .rules import ENGAGEMENT_ACTIONS

# Ideal order in which a lead moves toward conversion
IDEAL_CONVERSION_PATH = [
    'tool_usage',
    'email_captured',
    'assessment_completed',
    'webinar_registered',
    'office_visit_booked',
]

NEXT_ACTION_LABELS = {
    'tool_usage': 'Take a psychological assessment tool',
    'email_captured': 'Sign up for our newsletter',
    'assessment_completed': 'Complete your assessment',
    'webinar_registered': 'Register for our transformation webinar',
    'office_visit_booked': 'Book a strategy session',
}
UNMAPPED_ACTION_LABEL = 'Explore our content library'
DEFAULT_NEXT_ACTION = 'Schedule a consultation'

RECENCY_WINDOW_HOURS = 24
DIVERSITY_TARGET = 10
TIME_ON_SITE_TARGET = 300  # time_on_site pings


def _clamp01(value: float) -> float:
    return max(0.0, min(value, 1.0))


def recency_factor(last_activity: datetime, now: Optional[datetime] = None) -> float:
    """Linear decay from 1 to 0 over the 24 hours after the last activity."""
    now = now or datetime.now()
    hours_since = (now - last_activity).total_seconds() / 3600
    return _clamp01(1 - hours_since / RECENCY_WINDOW_HOURS)


def diversity_factor(activities: Iterable[EngagementActivity]) -> float:
    """Share of distinct scoring actions tried, saturating at ten."""
    distinct = {a.action for a in activities if a.action in ENGAGEMENT_ACTIONS}
    return min(len(distinct) / DIVERSITY_TARGET, 1.0)


def time_investment_factor(activities: Iterable[EngagementActivity]) -> float:
    """Saturates at 300 time_on_site pings."""
    pings = sum(1 for a in activities if a.action == 'time_on_site')
    return min(pings / TIME_ON_SITE_TARGET, 1.0)


def conversion_readiness(profile: LeadProfile, now: Optional[datetime] = None) -> float:
    """Weighted 0-1 estimate of how close a profile is to converting."""
    score_ratio = min((profile.engagement_score + profile.demographic_score) / 1000, 1.0)
    factors = [
        score_ratio * 0.4,
        recency_factor(profile.last_activity, now) * 0.2,
        diversity_factor(profile.activities) * 0.2,
        time_investment_factor(profile.activities) * 0.2,
    ]
    return min(sum(factors), 1.0)


def conversion_path(profile: LeadProfile) -> List[str]:
    """Ideal path steps the profile has not completed yet, in order."""
    completed = profile.completed_actions
    return [action for action in IDEAL_CONVERSION_PATH if action not in completed]


def next_best_action(path: List[str]) -> str:
    if not path:
        return DEFAULT_NEXT_ACTION
    return NEXT_ACTION_LABELS.get(path[0], UNMAPPED_ACTION_LABEL)


def churn_risk(profile: LeadProfile, now: Optional[datetime] = None) -> float:
    """Higher engagement and recent activity mean lower churn risk."""
    recency = recency_factor(profile.last_activity, now)
    engagement_level = min(profile.engagement_score / 100, 1.0)
    return _clamp01(1 - (recency * 0.5 + engagement_level * 0.5))


def generate_predictions(profile: LeadProfile, now: Optional[datetime] = None) -> LeadPredictions:
    """Compute a fresh prediction set.

    Uses ``profile.conversion_readiness`` as stored, so callers refresh
    readiness first.
    """
    readiness = profile.conversion_readiness
    path = conversion_path(profile)
    return LeadPredictions(
        conversion_probability=min(readiness * 1.2, 0.95),
        time_to_conversion=max(30 - readiness * 25, 7),
        best_conversion_path=path,
        next_best_action=next_best_action(path),
        risk_of_churn=churn_risk(profile, now),
    )


def initial_predictions() -> LeadPredictions:
    """Seed predictions for a brand-new profile."""
    return LeadPredictions(
        conversion_probability=0.1,
        time_to_conversion=30,
        best_conversion_path=['tool_usage', 'email_captured', 'webinar_registered'],
        next_best_action='Take an assessment tool',
        risk_of_churn=0.8,
    )
