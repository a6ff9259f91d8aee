"""Core scoring rules and prediction functions."""

from .rules import (
    EngagementRule,
    ScoreCategory,
    ENGAGEMENT_ACTIONS,
    STATUS_THRESHOLDS,
    action_rule,
    classify,
)
from .predictions import (
    IDEAL_CONVERSION_PATH,
    conversion_readiness,
    generate_predictions,
    initial_predictions,
    recency_factor,
)

__all__ = [
    "EngagementRule",
    "ScoreCategory",
    "ENGAGEMENT_ACTIONS",
    "STATUS_THRESHOLDS",
    "action_rule",
    "classify",
    "IDEAL_CONVERSION_PATH",
    "conversion_readiness",
    "generate_predictions",
    "initial_predictions",
    "recency_factor",
]
