"""
Session store for the streamable HTTP transport.

Sessions are created when a client opens an SSE stream without a session id,
refreshed on every request presenting a valid id, and deleted only by the
reaper once idle for longer than the session timeout.
"""
import asyncio
import logging
import secrets
import threading
import time
from contextlib import contextmanager
from dataclasses import dataclass
from typing import Callable, Dict, Iterator, List, Optional

logger = logging.getLogger("mcp_server.sessions")

DEFAULT_SESSION_TIMEOUT = 300.0
DEFAULT_REAP_INTERVAL = 60.0


def new_session_id() -> str:
    """128 bits of entropy, hex encoded."""
    return secrets.token_hex(16)


@dataclass
class Session:
    id: str
    created_at: float
    last_seen_at: float
    active: bool = True


class ReadWriteLock:
    """Many concurrent readers or a single writer."""

    def __init__(self):
        self._cond = threading.Condition(threading.Lock())
        self._readers = 0
        self._writer = False

    @contextmanager
    def read_locked(self) -> Iterator[None]:
        with self._cond:
            while self._writer:
                self._cond.wait()
            self._readers += 1
        try:
            yield
        finally:
            with self._cond:
                self._readers -= 1
                if not self._readers:
                    self._cond.notify_all()

    @contextmanager
    def write_locked(self) -> Iterator[None]:
        with self._cond:
            while self._writer or self._readers:
                self._cond.wait()
            self._writer = True
        try:
            yield
        finally:
            with self._cond:
                self._writer = False
                self._cond.notify_all()


class SessionStore:
    """
    Owns every session of one transport.

    Validation takes the shared side of the lock; create, touch and delete
    take the exclusive side. ``clock`` returns seconds and is injectable for
    tests.
    """

    def __init__(
        self,
        timeout: float = DEFAULT_SESSION_TIMEOUT,
        clock: Callable[[], float] = time.monotonic,
    ):
        if timeout <= 0:
            raise ValueError("Session timeout must be positive")
        self.timeout = timeout
        self._clock = clock
        self._sessions: Dict[str, Session] = {}
        self._lock = ReadWriteLock()

    def create(self) -> str:
        now = self._clock()
        session_id = new_session_id()
        with self._lock.write_locked():
            self._sessions[session_id] = Session(id=session_id, created_at=now, last_seen_at=now)
        logger.info(f"Created new session: {session_id}")
        return session_id

    def is_valid(self, session_id: str) -> bool:
        now = self._clock()
        with self._lock.read_locked():
            session = self._sessions.get(session_id)
            if session is None or not session.active:
                return False
            return not self._expired(session, now)

    def touch(self, session_id: str) -> None:
        now = self._clock()
        with self._lock.write_locked():
            session = self._sessions.get(session_id)
            if session is not None:
                session.last_seen_at = now

    def validate(self, session_id: str) -> bool:
        """Check a session and refresh its last-seen time when it is valid."""
        if not self.is_valid(session_id):
            return False
        self.touch(session_id)
        return True

    def get(self, session_id: str) -> Optional[Session]:
        """Return a snapshot of the session, never the stored object."""
        with self._lock.read_locked():
            session = self._sessions.get(session_id)
            if session is None:
                return None
            return Session(session.id, session.created_at, session.last_seen_at, session.active)

    def delete(self, session_id: str) -> bool:
        with self._lock.write_locked():
            return self._sessions.pop(session_id, None) is not None

    def reap_expired(self) -> List[str]:
        """Remove every session idle for at least the timeout."""
        now = self._clock()
        with self._lock.write_locked():
            expired = [sid for sid, session in self._sessions.items() if self._expired(session, now)]
            for session_id in expired:
                del self._sessions[session_id]
        for session_id in expired:
            logger.info(f"Cleaned up expired session: {session_id}")
        return expired

    def _expired(self, session: Session, now: float) -> bool:
        return now - session.last_seen_at >= self.timeout

    def __len__(self) -> int:
        with self._lock.read_locked():
            return len(self._sessions)

    def __contains__(self, session_id: object) -> bool:
        with self._lock.read_locked():
            return session_id in self._sessions


class SessionReaper:
    """Supervised background task that periodically reaps expired sessions."""

    def __init__(self, store: SessionStore, interval: float = DEFAULT_REAP_INTERVAL):
        self.store = store
        self.interval = interval
        self._task: Optional[asyncio.Task] = None

    @property
    def running(self) -> bool:
        return self._task is not None and not self._task.done()

    async def start(self):
        """Start the reaper."""
        if self.running:
            return
        self._task = asyncio.create_task(self._run())
        logger.info("Session reaper started")

    async def stop(self):
        """Stop the reaper and wait for it to exit."""
        if self._task:
            self._task.cancel()
            try:
                await self._task
            except asyncio.CancelledError:
                pass
            self._task = None
        logger.info("Session reaper stopped")

    async def _run(self):
        while True:
            try:
                await asyncio.sleep(self.interval)
                self.store.reap_expired()
            except asyncio.CancelledError:
                break
            except Exception as e:
                logger.error(f"Error in session reaper: {e}")
