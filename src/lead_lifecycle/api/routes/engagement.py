"""Engagement tracking routes."""

import logging
from typing import List, Optional
from fastapi import APIRouter, Depends, Header, Response

from ...core.rules import ENGAGEMENT_ACTIONS
from ...services.lead_service import LeadService
from ...tracking.attribution import RequestContext
from ...tracking.session import new_session_id
from ..dependencies import get_lead_service
from ..schemas import ActionRuleResponse, EngagementRequest, EngagementResponse, ProfileResponse

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/v1", tags=["engagement"])

SESSION_HEADER = "X-Session-ID"


@router.post("/engagement", response_model=EngagementResponse)
def track_engagement(
    body: EngagementRequest,
    response: Response,
    x_session_id: Optional[str] = Header(None),
    service: LeadService = Depends(get_lead_service),
):
    """Score an engagement action for the caller's session.

    The session id comes from the body, then the X-Session-ID header; a new
    one is issued when neither is present and echoed back in the header.
    """
    session_id = body.session_id or x_session_id or new_session_id()
    response.headers[SESSION_HEADER] = session_id

    profile = service.track_engagement(
        session_id,
        body.action,
        metadata=body.metadata,
        context=RequestContext(url=body.page_url or "", referrer=body.referrer or ""),
    )

    if profile is None:
        return EngagementResponse(
            success=True,
            session_id=session_id,
            tracked=False,
            message=f"Unknown engagement action: {body.action}",
        )

    return EngagementResponse(
        success=True,
        session_id=session_id,
        tracked=True,
        message=f"Tracked {body.action}",
        profile=ProfileResponse(**profile.to_dict()),
    )


@router.get("/actions", response_model=List[ActionRuleResponse])
def list_actions():
    """The engagement action vocabulary and its scoring."""
    return [
        ActionRuleResponse(
            action=rule.action,
            points=rule.points,
            category=rule.category.value,
            weight=rule.weight,
        )
        for rule in ENGAGEMENT_ACTIONS.values()
    ]
