"""In-memory registry of open wizard sessions.

Sessions belong to the user who opened them; looking one up with any
other owner id behaves as if it did not exist.  Sessions idle for longer
than the TTL are evicted on the next access.
"""

import logging
from datetime import datetime, timedelta

from firecert.middleware.exceptions import ResourceNotFoundError
from firecert.wizard.session import WizardSession

logger = logging.getLogger(__name__)


class SessionRegistry:
    def __init__(self, ttl_minutes: int = 60):
        self.ttl = timedelta(minutes=ttl_minutes)
        self._sessions: dict[str, WizardSession] = {}

    def __len__(self) -> int:
        return len(self._sessions)

    def open(self, session: WizardSession) -> WizardSession:
        self.evict_expired()
        self._sessions[session.id] = session
        logger.info(
            f"Opened {session.flow.name} session {session.id}",
            extra={"owner_id": session.owner_id, "draft_id": session.draft_id},
        )
        return session

    def get(self, session_id: str, owner_id: str) -> WizardSession:
        self.evict_expired()
        session = self._sessions.get(session_id)
        if session is None or session.owner_id != owner_id:
            raise ResourceNotFoundError("Wizard session", session_id)
        return session

    def close(self, session_id: str, owner_id: str) -> None:
        """Discard a session.  Raises SessionBusy while it is submitting."""
        session = self.get(session_id, owner_id)
        error = session.discard()
        if error is not None:
            raise error
        del self._sessions[session_id]

    def forget(self, session_id: str) -> None:
        self._sessions.pop(session_id, None)

    def evict_expired(self, now: datetime | None = None) -> int:
        cutoff = (now or datetime.utcnow()) - self.ttl
        expired = [
            sid for sid, s in self._sessions.items()
            if s.touched_at < cutoff and not s.submitting
        ]
        for sid in expired:
            self._sessions.pop(sid).discard()
        if expired:
            logger.info(f"Evicted {len(expired)} idle wizard session(s)")
        return len(expired)
