"""Attribution, analytics events and visitor session ids."""

from .attribution import RequestContext, extract_attribution, source_from_context
from .events import AnalyticsEmitter, NullEmitter, EventTracker, TrackingEvent
from .session import SessionIdProvider, new_session_id

__all__ = [
    'RequestContext',
    'extract_attribution',
    'source_from_context',
    'AnalyticsEmitter',
    'NullEmitter',
    'EventTracker',
    'TrackingEvent',
    'SessionIdProvider',
    'new_session_id',
]
