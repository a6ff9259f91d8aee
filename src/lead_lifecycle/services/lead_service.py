"""Lead scoring and lifecycle management.

Every tracked action updates the category scores, re-derives the lifecycle
stage, recomputes readiness and predictions, appends to the activity log and
persists the full profile map. Only ``update_lead_score`` on an unknown id
raises; everything else degrades to a logged warning.
"""

import logging
import math
import threading
import uuid
from contextlib import contextmanager
from datetime import datetime
from typing import Any, Callable, Dict, List, Optional

from ..auth.identity import IdentityContext
from ..core.predictions import conversion_readiness, generate_predictions
from ..core.rules import ENGAGEMENT_BEHAVIORAL_SHARE, ScoreCategory, action_rule, classify
from ..storage.models import EngagementActivity, Lead, LeadProfile, LeadStatus
from ..storage.persistence import PersistenceStore
from ..storage.profiles import LeadProfileStore, LeadRecordStore
from ..tracking.attribution import (
    RequestContext,
    extract_attribution,
    page_url,
    source_from_context,
)
from ..tracking.events import (
    ENGAGEMENT_TRACKED,
    LEAD_CREATED,
    LEAD_STATUS_CHANGED,
    AnalyticsEmitter,
    NullEmitter,
)

logger = logging.getLogger(__name__)

# Activity recorded for direct score adjustments; not part of the scoring vocabulary
SCORE_ADJUSTMENT_ACTION = "score_adjustment"

ConversionTrigger = Callable[[LeadProfile, str, Optional[Dict[str, Any]]], None]


class LeadNotFoundError(LookupError):
    """No lead profile exists for the requested id."""

    def __init__(self, lead_id: str):
        super().__init__(f"Lead profile not found: {lead_id}")
        self.lead_id = lead_id


def new_lead_id() -> str:
    return f"lead_{uuid.uuid4().hex[:12]}"


class LeadService:
    """Creates leads and keeps their scoring profiles current."""

    def __init__(
        self,
        store: PersistenceStore,
        analytics: Optional[AnalyticsEmitter] = None,
        identity: Optional[IdentityContext] = None,
        max_activities: Optional[int] = None,
        clock: Callable[[], datetime] = datetime.now,
    ):
        self.analytics = analytics or NullEmitter()
        self.identity = identity
        self.clock = clock
        self.profiles = LeadProfileStore(store, max_activities=max_activities, clock=clock)
        self.leads = LeadRecordStore(store)

        self._conversion_triggers: List[ConversionTrigger] = []
        self._profile_locks: Dict[str, threading.Lock] = {}
        self._locks_guard = threading.Lock()

    @contextmanager
    def _profile_lock(self, profile_id: str):
        """Serialize read-modify-write cycles on one profile."""
        with self._locks_guard:
            lock = self._profile_locks.setdefault(profile_id, threading.Lock())
        with lock:
            yield

    def _emit(self, event_name: str, properties: Dict[str, Any]):
        try:
            self.analytics.emit(event_name, properties)
        except Exception:
            logger.exception(f"Analytics emit failed for {event_name}")

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    def create_lead(
        self,
        email: str,
        name: Optional[str] = None,
        phone: Optional[str] = None,
        source: Optional[str] = None,
        context: Optional[RequestContext] = None,
    ) -> Lead:
        """Create a lead record and its scoring profile.

        The email is stored as given. The returned Lead is a creation-time
        snapshot; later scoring only changes the profile.
        """
        lead_id = new_lead_id()
        source = source or 'direct'

        session = self.identity.get_current_session() if self.identity else None

        lead = Lead(
            id=lead_id,
            email=email,
            source=source,
            status=LeadStatus.VISITOR,
            score=0,
            created_at=self.clock(),
            name=name,
            phone=phone,
            user_id=session.user_id if session else None,
        )
        profile = self.profiles.new_profile(
            lead_id,
            source=source,
            attribution=extract_attribution(context) if context else None,
        )

        self.profiles.save(profile)
        self.leads.save(lead)
        logger.info(f"Created lead {lead_id} from {source}")

        self._emit(LEAD_CREATED, {
            'leadId': lead_id,
            'source': lead.source,
            'email': lead.email,
        })
        return lead

    def get_lead(self, lead_id: str) -> Optional[Lead]:
        return self.leads.get(lead_id)

    def get_lead_profile(
        self,
        session_id: str,
        context: Optional[RequestContext] = None,
    ) -> LeadProfile:
        """Return the profile for a session, creating a default one on first sight."""
        return self.profiles.get_or_create(
            session_id,
            source=source_from_context(context),
            attribution=extract_attribution(context) if context else None,
        )

    def update_lead_score(self, lead_id: str, points: int) -> LeadProfile:
        """Add points to a profile's engagement score.

        Raises LeadNotFoundError if no profile exists for lead_id.
        """
        with self._profile_lock(lead_id):
            profile = self.profiles.get(lead_id)
            if profile is None:
                raise LeadNotFoundError(lead_id)

            if points < 0:
                logger.warning(f"Ignoring negative score adjustment {points} for {lead_id}")
                points = 0
            points = math.floor(points)

            now = self.clock()
            profile.engagement_score += points
            self._record_activity(profile, EngagementActivity(
                timestamp=now,
                action=SCORE_ADJUSTMENT_ACTION,
                points=points,
            ))

            previous_status = profile.status
            self._refresh_derived(profile, now)
            self.profiles.save(profile)

        if profile.status != previous_status:
            self._emit_status_change(profile, previous_status)
        return profile

    def track_engagement(
        self,
        session_id: str,
        action: str,
        metadata: Optional[Dict[str, Any]] = None,
        context: Optional[RequestContext] = None,
    ) -> Optional[LeadProfile]:
        """Score an engagement action for a session.

        Unknown actions are logged and ignored, returning None. Otherwise
        returns the updated profile.
        """
        rule = action_rule(action)
        if rule is None:
            logger.warning(f"Unknown engagement action: {action}")
            return None

        with self._profile_lock(session_id):
            profile = self.get_lead_profile(session_id, context)

            points = rule.points * self._multiplier(action, metadata)
            if rule.category == ScoreCategory.BEHAVIORAL:
                profile.behavioral_score += math.floor(points)
            elif rule.category == ScoreCategory.DEMOGRAPHIC:
                profile.demographic_score += math.floor(points)
            else:
                profile.engagement_score += math.floor(points * rule.weight)
                profile.behavioral_score += math.floor(points * ENGAGEMENT_BEHAVIORAL_SHARE)

            now = self.clock()
            self._record_activity(profile, EngagementActivity(
                timestamp=now,
                action=action,
                points=points,
                page_url=page_url(context),
                metadata=metadata,
            ))

            previous_status = profile.status
            self._refresh_derived(profile, now)
            self._run_conversion_triggers(profile, action, metadata)
            self.profiles.save(profile)

        if profile.status != previous_status:
            self._emit_status_change(profile, previous_status)

        self._emit(ENGAGEMENT_TRACKED, {
            'sessionId': session_id,
            'action': action,
            'points': points,
            'totalScore': profile.engagement_score,
            'status': profile.status.value,
        })
        return profile

    def calculate_lead_status(self, profile: LeadProfile) -> LeadStatus:
        """Stage the profile's current scores map to, without changing it."""
        return classify(profile.total_score)

    def add_conversion_trigger(self, trigger: ConversionTrigger):
        """Register a callback run after every scored action, before persisting."""
        self._conversion_triggers.append(trigger)

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------

    @staticmethod
    def _multiplier(action: str, metadata: Optional[Dict[str, Any]]) -> float:
        if not metadata or metadata.get('multiplier') is None:
            return 1
        value = metadata['multiplier']
        if isinstance(value, bool) or not isinstance(value, (int, float)) or value <= 0:
            logger.warning(f"Ignoring invalid multiplier {value!r} for {action}")
            return 1
        return value

    @staticmethod
    def _record_activity(profile: LeadProfile, activity: EngagementActivity):
        profile.activities.append(activity)
        profile.last_activity = activity.timestamp

    def _refresh_derived(self, profile: LeadProfile, now: datetime):
        profile.status = self.calculate_lead_status(profile)
        profile.conversion_readiness = conversion_readiness(profile, now)
        profile.predictions = generate_predictions(profile, now)

    def _run_conversion_triggers(
        self,
        profile: LeadProfile,
        action: str,
        metadata: Optional[Dict[str, Any]],
    ):
        for trigger in self._conversion_triggers:
            try:
                trigger(profile, action, metadata)
            except Exception:
                logger.exception(f"Conversion trigger failed for {profile.id} on {action}")

    def _emit_status_change(self, profile: LeadProfile, previous_status: LeadStatus):
        logger.info(
            f"Lead {profile.id} moved from {previous_status.value} to {profile.status.value}"
        )
        self._emit(LEAD_STATUS_CHANGED, {
            'leadId': profile.id,
            'previousStatus': previous_status.value,
            'newStatus': profile.status.value,
            'score': profile.engagement_score,
        })

    def get_health(self) -> bool:
        return self.profiles.get_health() and self.leads.get_health()

    def dispose(self):
        self.profiles.dispose()
        self.leads.dispose()
        self._conversion_triggers.clear()
