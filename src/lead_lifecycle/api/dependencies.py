"""Request-scoped access to the wired services."""

from fastapi import Request

from ..services.container import ServiceContainer
from ..services.lead_service import LeadService
from ..services.registry import LEADS


def get_container(request: Request) -> ServiceContainer:
    return request.app.state.container


def get_lead_service(request: Request) -> LeadService:
    return get_container(request).resolve(LEADS)
