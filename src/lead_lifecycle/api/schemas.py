"""Pydantic models for the lead lifecycle API."""

from typing import Optional, Dict, Any, List
from pydantic import BaseModel, Field


class PageContext(BaseModel):
    page_url: Optional[str] = None
    referrer: Optional[str] = None


class CreateLeadRequest(PageContext):
    email: str
    name: Optional[str] = None
    phone: Optional[str] = None
    source: Optional[str] = None


class LeadResponse(BaseModel):
    id: str
    email: str
    source: str
    status: str
    score: int
    created_at: str
    name: Optional[str] = None
    phone: Optional[str] = None
    user_id: Optional[str] = None


class ScoreUpdateRequest(BaseModel):
    points: int = Field(..., description="Points added to the engagement score")


class EngagementRequest(PageContext):
    action: str = Field(
        ...,
        description="Engagement action name, e.g. page_view, tool_usage, email_captured",
    )
    session_id: Optional[str] = None
    metadata: Optional[Dict[str, Any]] = None


class AttributionResponse(BaseModel):
    content_id: Optional[str] = None
    member_id: Optional[str] = None
    platform: Optional[str] = None
    referrer: Optional[str] = None


class ActivityResponse(BaseModel):
    timestamp: str
    action: str
    points: float
    page_url: str = ""
    metadata: Optional[Dict[str, Any]] = None


class PredictionsResponse(BaseModel):
    conversion_probability: float
    time_to_conversion: float
    best_conversion_path: List[str]
    next_best_action: str
    risk_of_churn: float


class ProfileResponse(BaseModel):
    id: str
    status: str
    engagement_score: int
    demographic_score: int
    behavioral_score: int
    conversion_readiness: float
    last_activity: str
    source: str
    attribution_data: Optional[AttributionResponse] = None
    activities: List[ActivityResponse] = []
    predictions: PredictionsResponse


class EngagementResponse(BaseModel):
    success: bool
    session_id: str
    tracked: bool
    message: str
    profile: Optional[ProfileResponse] = None


class ActionRuleResponse(BaseModel):
    action: str
    points: int
    category: str
    weight: float


class ErrorResponse(BaseModel):
    success: bool = False
    error: str
    detail: str
