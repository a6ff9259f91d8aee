"""Session identity consulted when attributing leads to signed-in users."""

import logging
import uuid
from dataclasses import dataclass, replace
from datetime import datetime, timedelta
from typing import Any, Callable, Dict, Optional

from ..storage.persistence import PersistenceStore

logger = logging.getLogger(__name__)

SESSION_KEY = "auth_session"
DEFAULT_SESSION_TTL_DAYS = 30


@dataclass(frozen=True)
class SessionData:
    """Authenticated session for a portal user."""

    user_id: str
    email: str
    role: str
    status: str
    expires_at: datetime

    def is_expired(self, now: datetime) -> bool:
        return now > self.expires_at

    def to_dict(self) -> Dict[str, Any]:
        return {
            'user_id': self.user_id,
            'email': self.email,
            'role': self.role,
            'status': self.status,
            'expires_at': self.expires_at.isoformat(),
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "SessionData":
        return cls(
            user_id=data['user_id'],
            email=data['email'],
            role=data.get('role', 'soft_member'),
            status=data.get('status', 'active'),
            expires_at=datetime.fromisoformat(data['expires_at']),
        )


@dataclass(frozen=True)
class CurrentUser:
    """Minimal user view derived from the active session."""

    id: str
    email: str
    name: str
    role: str


def display_name_from_email(email: str) -> str:
    local_part = email.split('@')[0]
    return local_part[:1].upper() + local_part[1:]


class IdentityContext:
    """Holds at most one active session and enforces its expiry.

    The lifecycle service only calls ``get_current_session`` and
    ``is_authenticated``; an expired session reads exactly like no session.
    """

    def __init__(
        self,
        store: Optional[PersistenceStore] = None,
        ttl_days: int = DEFAULT_SESSION_TTL_DAYS,
        clock: Callable[[], datetime] = datetime.now,
    ):
        self.store = store
        self.ttl = timedelta(days=ttl_days)
        self.clock = clock
        self._current: Optional[SessionData] = None

        self._load_session()

    def _load_session(self):
        """Restore a stored session, discarding it if expired."""
        if self.store is None:
            return

        try:
            data = self.store.read(SESSION_KEY)
            if not data:
                return
            session = SessionData.from_dict(data)
        except Exception as e:
            logger.error(f"Failed to load session: {e}")
            self._clear_stored_session()
            return

        if session.is_expired(self.clock()):
            logger.info(f"Discarding expired session for {session.email}")
            self._clear_stored_session()
            return

        self._current = session

    def _store_session(self, session: Optional[SessionData]):
        if self.store is None:
            return
        try:
            self.store.write(SESSION_KEY, session.to_dict() if session else None)
        except Exception as e:
            logger.error(f"Failed to store session: {e}")

    def _clear_stored_session(self):
        self._store_session(None)

    def start_session(
        self,
        email: str,
        role: str = "soft_member",
        user_id: Optional[str] = None,
    ) -> SessionData:
        """Open a session for a user who has already been authenticated."""
        session = SessionData(
            user_id=user_id or f"user_{uuid.uuid4().hex[:12]}",
            email=email,
            role=role,
            status="active",
            expires_at=self.clock() + self.ttl,
        )
        self._current = session
        self._store_session(session)
        logger.info(f"Started session for {email} ({role})")
        return session

    def get_current_session(self) -> Optional[SessionData]:
        """Return the active session, or None if absent or expired."""
        if self._current is None:
            return None
        if self._current.is_expired(self.clock()):
            logger.info(f"Session for {self._current.email} expired")
            self.sign_out()
            return None
        return self._current

    def is_authenticated(self) -> bool:
        return self.get_current_session() is not None

    def refresh_session(self) -> bool:
        """Extend the active session by a full TTL."""
        session = self.get_current_session()
        if session is None:
            return False

        refreshed = replace(session, expires_at=self.clock() + self.ttl)
        self._current = refreshed
        self._store_session(refreshed)
        return True

    def get_current_user(self) -> Optional[CurrentUser]:
        session = self.get_current_session()
        if session is None:
            return None
        return CurrentUser(
            id=session.user_id,
            email=session.email,
            name=display_name_from_email(session.email),
            role=session.role,
        )

    def sign_out(self):
        self._current = None
        self._clear_stored_session()

    def get_health(self) -> bool:
        return self.store is None or self.store.get_health()

    def dispose(self):
        self._current = None
