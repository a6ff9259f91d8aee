"""Lead creation, lookup and scoring routes."""

import logging
from fastapi import APIRouter, Depends, HTTPException

from ...services.lead_service import LeadNotFoundError, LeadService
from ...tracking.attribution import RequestContext
from ..dependencies import get_lead_service
from ..schemas import (
    CreateLeadRequest,
    ErrorResponse,
    LeadResponse,
    ProfileResponse,
    ScoreUpdateRequest,
)

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/v1", tags=["leads"])


def _not_found(detail: str) -> HTTPException:
    return HTTPException(
        status_code=404,
        detail={"success": False, "error": "not_found", "detail": detail},
    )


@router.post("/leads", response_model=LeadResponse, status_code=201)
def create_lead(body: CreateLeadRequest, service: LeadService = Depends(get_lead_service)):
    """Create a lead and its scoring profile."""
    lead = service.create_lead(
        email=body.email,
        name=body.name,
        phone=body.phone,
        source=body.source,
        context=RequestContext(url=body.page_url or "", referrer=body.referrer or ""),
    )
    return LeadResponse(**lead.to_dict())


@router.get(
    "/leads/{lead_id}",
    response_model=LeadResponse,
    responses={404: {"model": ErrorResponse}},
)
def get_lead(lead_id: str, service: LeadService = Depends(get_lead_service)):
    lead = service.get_lead(lead_id)
    if lead is None:
        raise _not_found(f"Lead not found: {lead_id}")
    return LeadResponse(**lead.to_dict())


@router.post(
    "/leads/{lead_id}/score",
    response_model=ProfileResponse,
    responses={404: {"model": ErrorResponse}},
)
def update_lead_score(
    lead_id: str,
    body: ScoreUpdateRequest,
    service: LeadService = Depends(get_lead_service),
):
    """Add points to a lead's engagement score."""
    try:
        profile = service.update_lead_score(lead_id, body.points)
    except LeadNotFoundError as e:
        raise _not_found(str(e))
    return ProfileResponse(**profile.to_dict())


@router.get("/profiles/{session_id}", response_model=ProfileResponse)
def get_profile(session_id: str, service: LeadService = Depends(get_lead_service)):
    """Get a session's profile, creating a default one on first sight."""
    profile = service.get_lead_profile(session_id)
    return ProfileResponse(**profile.to_dict())
