"""Analytics event emission for lead lifecycle changes."""

from dataclasses import dataclass, field
from typing import Any, Callable, Dict, List, Optional
from datetime import datetime
import logging
import threading
import uuid

from ..storage.persistence import PersistenceStore

logger = logging.getLogger(__name__)

EVENTS_KEY = "analytics_events"
MAX_RETAINED_EVENTS = 5000
DEFAULT_FLUSH_EVERY = 25

LEAD_CREATED = "lead_created"
LEAD_STATUS_CHANGED = "lead_status_changed"
ENGAGEMENT_TRACKED = "engagement_tracked"


class AnalyticsEmitter:
    """Fire-and-forget analytics sink."""

    def emit(self, event_name: str, properties: Dict[str, Any]):
        raise NotImplementedError


class NullEmitter(AnalyticsEmitter):
    """Emitter that drops every event."""

    def emit(self, event_name: str, properties: Dict[str, Any]):
        pass


@dataclass
class TrackingEvent:
    """An emitted analytics event."""
    id: str
    name: str
    properties: Dict[str, Any] = field(default_factory=dict)
    timestamp: datetime = field(default_factory=datetime.now)

    def to_dict(self) -> Dict[str, Any]:
        return {
            'id': self.id,
            'name': self.name,
            'properties': self.properties,
            'timestamp': self.timestamp.isoformat(),
        }


class EventTracker(AnalyticsEmitter):
    """Record analytics events and dispatch them to registered handlers."""

    def __init__(
        self,
        store: Optional[PersistenceStore] = None,
        flush_every: int = DEFAULT_FLUSH_EVERY,
    ):
        self.store = store
        self.flush_every = max(flush_every, 1)
        self.pending = 0
        self._lock = threading.Lock()
        self.events: List[TrackingEvent] = []
        self.event_handlers: Dict[str, List[Callable[[TrackingEvent], None]]] = {}

        self._load_events()

    def _load_events(self):
        """Load retained events from storage."""
        if self.store is None:
            return

        try:
            data = self.store.read(EVENTS_KEY) or []
            for event_data in data[-MAX_RETAINED_EVENTS:]:
                self.events.append(TrackingEvent(
                    id=event_data['id'],
                    name=event_data['name'],
                    properties=event_data.get('properties', {}),
                    timestamp=datetime.fromisoformat(event_data['timestamp']),
                ))
        except Exception as e:
            logger.error(f"Failed to load analytics events: {e}")
            self.events = []

    def flush(self):
        """Write the retained log if events were emitted since the last write."""
        if self.store is None:
            return

        with self._lock:
            if not self.pending:
                return
            try:
                self.store.write(
                    EVENTS_KEY,
                    [e.to_dict() for e in self.events[-MAX_RETAINED_EVENTS:]],
                )
                self.pending = 0
            except Exception as e:
                logger.error(f"Failed to save analytics events: {e}")

    def on_event(self, event_name: str, handler: Callable[[TrackingEvent], None]):
        """Register a handler for one event name, or '*' for every event."""
        self.event_handlers.setdefault(event_name, []).append(handler)

    def _trigger_handlers(self, event: TrackingEvent):
        handlers = self.event_handlers.get(event.name, []) + self.event_handlers.get('*', [])
        for handler in handlers:
            try:
                handler(event)
            except Exception:
                logger.exception(f"Analytics handler failed for {event.name}")

    def emit(self, event_name: str, properties: Dict[str, Any]):
        """Record an event; never raises."""
        event = TrackingEvent(
            id=str(uuid.uuid4())[:12],
            name=event_name,
            properties=dict(properties),
        )
        with self._lock:
            self.events.append(event)
            if len(self.events) > MAX_RETAINED_EVENTS:
                del self.events[:-MAX_RETAINED_EVENTS]
            self.pending += 1
            due = self.pending >= self.flush_every

        logger.debug(f"Analytics event {event_name}: {properties}")
        if due:
            self.flush()
        self._trigger_handlers(event)
        return event

    def get_events(self, event_name: Optional[str] = None) -> List[TrackingEvent]:
        """Get recorded events, optionally filtered by name."""
        if event_name is None:
            return list(self.events)
        return [e for e in self.events if e.name == event_name]

    def count_by_name(self) -> Dict[str, int]:
        counts: Dict[str, int] = {}
        for event in self.events:
            counts[event.name] = counts.get(event.name, 0) + 1
        return counts

    def get_health(self) -> bool:
        return self.store is None or self.store.get_health()

    def dispose(self):
        self.flush()
        self.event_handlers.clear()
