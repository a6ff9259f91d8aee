"""Health check routes."""

from fastapi import APIRouter, Depends

from ... import __version__
from ...services.container import UNHEALTHY, ServiceContainer
from ..dependencies import get_container

router = APIRouter(tags=["health"])


@router.get("/health")
def health():
    return {"status": "healthy", "service": "lead-lifecycle-api", "version": __version__}


@router.get("/ready")
def ready(container: ServiceContainer = Depends(get_container)):
    """Readiness check - reports the health of every built service."""
    services = container.health_status()
    status = "not_ready" if UNHEALTHY in services.values() else "ready"
    return {"status": status, "services": services}
