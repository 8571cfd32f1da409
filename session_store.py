"""
In-memory store for multi-turn chat sessions.

Sessions live for the lifetime of the process. Expiry is lazy: the chat
endpoint sweeps idle sessions before every lookup, so no background timer
is needed.
"""

import threading
import time
import uuid
from typing import Any, Callable, Dict, Optional, Tuple

from models import Session
from logger import get_logger

logger = get_logger(__name__)

DEFAULT_TTL_SECONDS = 60 * 60
DEFAULT_MAX_SESSIONS = 1000

HandleFactory = Callable[[Optional[str]], Any]


class SessionStore:
    """Maps session ids to conversation handles and enforces idle expiry.

    ``handle_factory`` is called with the optional system instruction whenever
    a new conversation is needed. All map mutations happen under one lock
    because sync FastAPI endpoints run on a thread pool.
    """

    def __init__(
        self,
        handle_factory: HandleFactory,
        ttl_seconds: float = DEFAULT_TTL_SECONDS,
        max_sessions: int = DEFAULT_MAX_SESSIONS,
        clock: Callable[[], float] = time.time
    ):
        self._handle_factory = handle_factory
        self.ttl_seconds = ttl_seconds
        self.max_sessions = max_sessions
        self._clock = clock
        self._sessions: Dict[str, Session] = {}
        self._lock = threading.Lock()

    def __len__(self) -> int:
        return len(self._sessions)

    def __contains__(self, session_id: object) -> bool:
        return session_id in self._sessions

    def resolve(
        self,
        session_id: Optional[str] = None,
        system_instruction: Optional[str] = None
    ) -> Tuple[Any, str, bool]:
        """
        Return the conversation for ``session_id``, creating one if needed.

        Args:
            session_id: Id from a previous reply; unknown or expired ids are not reused
            system_instruction: Applied only when a new conversation is created

        Returns:
            (handle, session_id, is_new)
        """
        with self._lock:
            now = self._clock()

            if session_id:
                session = self._sessions.get(session_id)
                if session is not None:
                    session.touch(now)
                    logger.session_event("reused", session.id)
                    return session.handle, session.id, False

            handle = self._handle_factory(system_instruction)
            self._evict_overflow()
            new_id = self._new_id()
            self._sessions[new_id] = Session(id=new_id, handle=handle, created_at=now, last_used=now)
            logger.session_event(
                "created",
                new_id,
                has_instruction=bool(system_instruction),
                live_sessions=len(self._sessions)
            )
            return handle, new_id, True

    def sweep(self, now: Optional[float] = None) -> int:
        """
        Remove every session idle for longer than the TTL.

        Returns:
            Number of sessions removed
        """
        with self._lock:
            now = self._clock() if now is None else now
            expired = [
                sid for sid, session in self._sessions.items()
                if session.is_expired(self.ttl_seconds, now)
            ]
            for sid in expired:
                del self._sessions[sid]
                logger.session_event("expired", sid)
            return len(expired)

    def end(self, session_id: Optional[str]) -> bool:
        """Remove a session if it exists. Unknown or missing ids are a no-op."""
        if not session_id:
            return False
        with self._lock:
            removed = self._sessions.pop(session_id, None) is not None
        if removed:
            logger.session_event("ended", session_id)
        return removed

    def clear(self) -> None:
        with self._lock:
            self._sessions.clear()

    def stats(self) -> Dict[str, Any]:
        with self._lock:
            return {
                "active_sessions": len(self._sessions),
                "ttl_seconds": self.ttl_seconds,
                "max_sessions": self.max_sessions,
            }

    def _new_id(self) -> str:
        new_id = str(uuid.uuid4())
        while new_id in self._sessions:
            new_id = str(uuid.uuid4())
        return new_id

    def _evict_overflow(self) -> None:
        """Make room for one more session by dropping the least recently used ones."""
        while self._sessions and len(self._sessions) >= self.max_sessions:
            oldest = min(self._sessions.values(), key=lambda s: s.last_used)
            del self._sessions[oldest.id]
            logger.session_event("evicted", oldest.id, reason="capacity")
