"""In-memory lead profile and lead record maps with snapshot persistence."""

import logging
import threading
from datetime import datetime
from typing import Callable, Dict, Generic, List, Optional, TypeVar

from ..core.predictions import initial_predictions
from .models import AttributionData, Lead, LeadProfile, LeadStatus
from .persistence import PersistenceStore

logger = logging.getLogger(__name__)

PROFILES_KEY = "lead_profiles"
LEADS_KEY = "leads"

T = TypeVar("T")


class SnapshotStore(Generic[T]):
    """Dict of records persisted as one full JSON snapshot per write.

    Persistence is best-effort: read and write failures are logged and
    counted on ``failure_count``/``last_error`` but never raised, and the
    in-memory map stays authoritative.
    """

    storage_key: str = ""
    record_name: str = "record"

    def __init__(self, store: PersistenceStore):
        self.store = store
        self.records: Dict[str, T] = {}
        self.failure_count = 0
        self.last_error: Optional[str] = None
        self.healthy = True
        self._lock = threading.RLock()
        # held across snapshot and write so snapshots land in the order they were taken
        self._write_lock = threading.Lock()

        self.load_all()

    def _decode(self, data: dict) -> T:
        raise NotImplementedError

    def _encode(self, record: T) -> dict:
        raise NotImplementedError

    def _record_failure(self, message: str):
        self.failure_count += 1
        self.last_error = message
        self.healthy = False
        logger.error(message)

    def load_all(self):
        """Replace the in-memory map with the stored snapshot."""
        try:
            data = self.store.read(self.storage_key)
        except Exception as e:
            self._record_failure(f"Failed to load {self.storage_key}: {e}")
            return

        if data is None:
            return
        if not isinstance(data, dict):
            self._record_failure(f"Ignoring malformed {self.storage_key} snapshot")
            return

        records: Dict[str, T] = {}
        for record_id, record_data in data.items():
            if not isinstance(record_data, dict):
                logger.error(f"Skipping malformed {self.record_name} {record_id}: not an object")
                continue
            try:
                records[record_id] = self._decode(record_data)
            except (AttributeError, KeyError, TypeError, ValueError) as e:
                logger.error(f"Skipping malformed {self.record_name} {record_id}: {e}")
        with self._lock:
            self.records = records
        logger.debug(f"Loaded {len(records)} {self.record_name}s from {self.storage_key}")

    def persist_all(self) -> bool:
        """Write the full map; returns False if the write failed."""
        with self._write_lock:
            with self._lock:
                snapshot = {record_id: self._encode(r) for record_id, r in self.records.items()}
            try:
                self.store.write(self.storage_key, snapshot)
                self.healthy = True
                return True
            except Exception as e:
                self._record_failure(f"Failed to save {self.storage_key}: {e}")
                return False

    def get(self, record_id: str) -> Optional[T]:
        return self.records.get(record_id)

    def all(self) -> List[T]:
        with self._lock:
            return list(self.records.values())

    def __len__(self) -> int:
        return len(self.records)

    def __contains__(self, record_id: str) -> bool:
        return record_id in self.records

    def get_health(self) -> bool:
        return self.healthy

    def dispose(self):
        with self._lock:
            self.records.clear()


class LeadProfileStore(SnapshotStore[LeadProfile]):
    """Profile-id to LeadProfile map."""

    storage_key = PROFILES_KEY
    record_name = "lead profile"

    def __init__(
        self,
        store: PersistenceStore,
        max_activities: Optional[int] = None,
        clock: Callable[[], datetime] = datetime.now,
    ):
        self.max_activities = max_activities
        self.clock = clock
        super().__init__(store)

    def _decode(self, data: dict) -> LeadProfile:
        return LeadProfile.from_dict(data)

    def _encode(self, record: LeadProfile) -> dict:
        return record.to_dict()

    def new_profile(
        self,
        profile_id: str,
        source: Optional[str] = None,
        attribution: Optional[AttributionData] = None,
    ) -> LeadProfile:
        """Build the default profile for a session or lead that has none."""
        return LeadProfile(
            id=profile_id,
            status=LeadStatus.VISITOR,
            last_activity=self.clock(),
            source=source or 'direct',
            attribution_data=attribution,
            activities=[],
            predictions=initial_predictions(),
        )

    def get_or_create(
        self,
        profile_id: str,
        source: Optional[str] = None,
        attribution: Optional[AttributionData] = None,
    ) -> LeadProfile:
        """Return the stored profile, creating and persisting a default one on miss."""
        with self._lock:
            profile = self.records.get(profile_id)
            if profile is not None:
                return profile

            profile = self.new_profile(profile_id, source, attribution)
            self.records[profile_id] = profile
            logger.info(f"Created lead profile {profile_id} (source={profile.source})")

        self.persist_all()
        return profile

    def save(self, profile: LeadProfile) -> bool:
        """Upsert a profile and write the full snapshot."""
        with self._lock:
            if self.max_activities and len(profile.activities) > self.max_activities:
                profile.activities = profile.activities[-self.max_activities:]
            self.records[profile.id] = profile
        return self.persist_all()

    def all_profiles(self) -> List[LeadProfile]:
        return self.all()


class LeadRecordStore(SnapshotStore[Lead]):
    """Lead-id to Lead map."""

    storage_key = LEADS_KEY
    record_name = "lead"

    def _decode(self, data: dict) -> Lead:
        return Lead.from_dict(data)

    def _encode(self, record: Lead) -> dict:
        return record.to_dict()

    def save(self, lead: Lead) -> bool:
        with self._lock:
            self.records[lead.id] = lead
        return self.persist_all()
