"""Caller-owned session identifier for anonymous visitors."""

import logging
import uuid
from typing import Optional

from ..storage.persistence import PersistenceStore

logger = logging.getLogger(__name__)

SESSION_ID_KEY = "session_id"


def new_session_id() -> str:
    return f"session_{uuid.uuid4().hex[:12]}"


class SessionIdProvider:
    """Hands out a stable session id, generating and storing it on first use.

    Entry points (API, CLI) use this to source the id they pass into
    ``LeadService.track_engagement``; the lifecycle service itself never
    looks it up.
    """

    def __init__(self, store: PersistenceStore):
        self.store = store
        self._session_id: Optional[str] = None

    def get_or_create(self) -> str:
        if self._session_id:
            return self._session_id

        try:
            stored = self.store.read(SESSION_ID_KEY)
        except Exception as e:
            logger.error(f"Failed to read session id: {e}")
            stored = None

        if isinstance(stored, str) and stored:
            self._session_id = stored
            return stored

        self._session_id = new_session_id()
        try:
            self.store.write(SESSION_ID_KEY, self._session_id)
        except Exception as e:
            logger.error(f"Failed to store session id: {e}")
        return self._session_id

    def reset(self) -> str:
        """Start a fresh session id, replacing the stored one."""
        self._session_id = None
        try:
            self.store.write(SESSION_ID_KEY, "")
        except Exception as e:
            logger.error(f"Failed to clear session id: {e}")
        return self.get_or_create()
