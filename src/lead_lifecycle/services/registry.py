"""Composition root: wires the engine's services from settings."""

import logging
from typing import Optional

from ..auth.identity import IdentityContext
from ..config import Settings, settings as default_settings
from ..storage.persistence import create_store
from ..tracking.events import EventTracker
from .container import ServiceContainer
from .lead_service import LeadService

logger = logging.getLogger(__name__)

PERSISTENCE = "persistence"
ANALYTICS = "analytics"
IDENTITY = "identity"
LEADS = "leads"


def build_container(config: Optional[Settings] = None) -> ServiceContainer:
    """Register every engine service against one container."""
    config = config or default_settings
    container = ServiceContainer(environment=config.environment)

    container.register(
        PERSISTENCE,
        lambda: create_store(config.storage, config.data_dir),
    )
    container.register(
        ANALYTICS,
        lambda store: EventTracker(store),
        dependencies=[PERSISTENCE],
    )
    container.register(
        IDENTITY,
        lambda store: IdentityContext(store, ttl_days=config.session_ttl_days),
        dependencies=[PERSISTENCE],
    )
    container.register(
        LEADS,
        lambda store, analytics, identity: LeadService(
            store,
            analytics=analytics,
            identity=identity,
            max_activities=config.max_activities,
        ),
        dependencies=[PERSISTENCE, ANALYTICS, IDENTITY],
    )
    return container


def initialize_services(container: ServiceContainer) -> LeadService:
    """Build the singletons up front so startup fails fast."""
    leads = container.resolve(LEADS)
    logger.info(f"Services initialized: {', '.join(container.registered_services())}")
    return leads
