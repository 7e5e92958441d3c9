import logging
import threading
import uuid
from datetime import datetime, timedelta
from typing import Callable, Dict, List, Optional, Tuple

from .config import settings
from .engine import QuizEngine

logger = logging.getLogger(__name__)


class SessionStore:
    """In-memory games keyed by the session cookie, dropped after a timeout."""

    def __init__(
        self,
        engine_factory: Callable[[str], QuizEngine],
        timeout_minutes: int = settings.SESSION_TIMEOUT_MINUTES,
        clock: Callable[[], datetime] = datetime.now,
    ):
        self.engine_factory = engine_factory
        self.timeout = timedelta(minutes=timeout_minutes)
        self.clock = clock
        self._sessions: Dict[str, Tuple[QuizEngine, datetime]] = {}
        self._lock = threading.Lock()

    def create(self) -> Tuple[str, QuizEngine]:
        session_id = str(uuid.uuid4())
        engine = self.engine_factory(session_id)
        with self._lock:
            expired = self._pop_expired()
            self._sessions[session_id] = (engine, self.clock())
        for old_id, old_engine in expired:
            old_engine.close()
            logger.info(f"Session expired: {old_id}")
        logger.info(f"New session: {session_id}")
        return session_id, engine

    def _pop_expired(self) -> List[Tuple[str, QuizEngine]]:
        """Removes every timed-out entry; the caller holds the lock."""
        now = self.clock()
        expired = [
            (session_id, engine)
            for session_id, (engine, created_at) in self._sessions.items()
            if now - created_at > self.timeout
        ]
        for session_id, _ in expired:
            del self._sessions[session_id]
        return expired

    def get(self, session_id: Optional[str]) -> Optional[QuizEngine]:
        if not session_id:
            return None
        with self._lock:
            entry = self._sessions.get(session_id)
            if entry is None:
                return None
            engine, created_at = entry
            if self.clock() - created_at > self.timeout:
                del self._sessions[session_id]
                expired = True
            else:
                expired = False
        if expired:
            engine.close()
            logger.info(f"Session expired: {session_id}")
            return None
        return engine

    def drop(self, session_id: Optional[str]) -> None:
        with self._lock:
            entry = self._sessions.pop(session_id, None) if session_id else None
        if entry is not None:
            entry[0].close()
            logger.info(f"Session dropped: {session_id}")

    def __len__(self) -> int:
        return len(self._sessions)
