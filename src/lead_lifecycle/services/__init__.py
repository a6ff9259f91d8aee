"""Lead lifecycle service, service container and wiring."""

from .lead_service import LeadService, LeadNotFoundError, SCORE_ADJUSTMENT_ACTION
from .container import ServiceContainer, ServiceNotFoundError
from .registry import build_container, initialize_services

__all__ = [
    "LeadService",
    "LeadNotFoundError",
    "SCORE_ADJUSTMENT_ACTION",
    "ServiceContainer",
    "ServiceNotFoundError",
    "build_container",
    "initialize_services",
]
