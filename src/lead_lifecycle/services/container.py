"""Named service lookup with lazy singletons and health aggregation."""

import logging
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, List, Optional, Sequence

logger = logging.getLogger(__name__)

HEALTHY = "healthy"
UNHEALTHY = "unhealthy"
UNKNOWN = "unknown"


class ServiceNotFoundError(KeyError):
    """Requested service name was never registered."""


@dataclass
class ServiceDefinition:
    """How to build a service and whether to cache it."""

    factory: Callable[..., Any]
    singleton: bool = True
    dependencies: List[str] = field(default_factory=list)
    instance: Optional[Any] = None


class ServiceContainer:
    """Register factories by name and resolve them with their dependencies.

    Instances are built on first ``resolve``; singletons are cached until
    ``dispose``. One container is built per process by the composition root
    and passed to whoever needs it.
    """

    def __init__(self, environment: str = "production"):
        self.environment = environment
        self.services: Dict[str, ServiceDefinition] = {}

    def register(
        self,
        name: str,
        factory: Callable[..., Any],
        singleton: bool = True,
        dependencies: Sequence[str] = (),
    ):
        """Register a factory; dependencies are resolved and passed positionally."""
        if name in self.services:
            logger.warning(f"Service '{name}' is already registered. Overwriting...")

        self.services[name] = ServiceDefinition(
            factory=factory,
            singleton=singleton,
            dependencies=list(dependencies),
        )
        logger.debug(f"Registered service: {name}")

    def resolve(self, name: str, _resolving: tuple = ()) -> Any:
        """Return the service instance, building it and its dependencies if needed."""
        service = self.services.get(name)
        if service is None:
            available = ", ".join(self.services.keys())
            raise ServiceNotFoundError(
                f"Service '{name}' not found. Available services: {available}"
            )

        if service.singleton and service.instance is not None:
            return service.instance

        if name in _resolving:
            chain = " -> ".join(_resolving + (name,))
            raise RuntimeError(f"Circular service dependency: {chain}")

        dependencies = [
            self.resolve(dep, _resolving + (name,)) for dep in service.dependencies
        ]

        try:
            instance = service.factory(*dependencies)
        except Exception as e:
            logger.error(f"Failed to resolve service '{name}': {e}")
            raise

        if service.singleton:
            service.instance = instance

        logger.debug(f"Resolved service: {name}")
        return instance

    def has(self, name: str) -> bool:
        return name in self.services

    def registered_services(self) -> List[str]:
        return list(self.services.keys())

    def clear(self):
        """Forget every registration without disposing instances."""
        self.services.clear()
        logger.debug("Cleared all services")

    def dispose(self):
        """Dispose built singletons; they are rebuilt on the next resolve."""
        for name, service in self.services.items():
            dispose = getattr(service.instance, "dispose", None)
            if callable(dispose):
                try:
                    dispose()
                    logger.debug(f"Disposed service: {name}")
                except Exception as e:
                    logger.error(f"Failed to dispose service '{name}': {e}")
            service.instance = None

    def health_status(self) -> Dict[str, str]:
        """Health of each registered service; unbuilt services are 'unknown'."""
        status: Dict[str, str] = {}
        for name, service in self.services.items():
            if service.instance is None:
                status[name] = UNKNOWN
                continue

            get_health = getattr(service.instance, "get_health", None)
            if not callable(get_health):
                status[name] = HEALTHY
                continue

            try:
                status[name] = HEALTHY if get_health() else UNHEALTHY
            except Exception as e:
                logger.error(f"Health check failed for '{name}': {e}")
                status[name] = UNHEALTHY
        return status
