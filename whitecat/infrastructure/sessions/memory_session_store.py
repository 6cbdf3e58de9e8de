from __future__ import annotations

from dataclasses import replace
from datetime import datetime, timedelta, timezone
import logging
import secrets
from threading import Event, Lock, Thread
from typing import Callable

from whitecat.application.ports.session_store_port import SessionStorePort
from whitecat.domain.entities.session import SESSION_MUTABLE_FIELDS, Session


logger = logging.getLogger(__name__)

TOKEN_BYTES = 32


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


class InMemorySessionStore(SessionStorePort):
    """Process-local session map. A restart drops every session."""

    def __init__(
        self,
        *,
        max_age_seconds: float,
        clock: Callable[[], datetime] = utcnow,
    ):
        self._max_age = timedelta(seconds=max_age_seconds)
        self._clock = clock
        self._lock = Lock()
        self._sessions: dict[str, Session] = {}

    def create(self, **fields: str | None) -> str:
        _check_fields(fields)
        token = secrets.token_hex(TOKEN_BYTES)
        session = Session(id=token, created_at=self._clock(), **fields)
        with self._lock:
            self._sessions[token] = session
        return token

    def get(self, token: str) -> Session | None:
        with self._lock:
            session = self._sessions.get(token)
            if session is None:
                return None
            if self._is_expired(session, self._clock()):
                del self._sessions[token]
                return None
        return session

    def update(self, token: str, **fields: str | None) -> bool:
        _check_fields(fields)
        with self._lock:
            session = self._sessions.get(token)
            if session is None:
                return False
            self._sessions[token] = replace(session, **fields)
        return True

    def delete(self, token: str) -> bool:
        with self._lock:
            return self._sessions.pop(token, None) is not None

    def sweep(self, now: datetime | None = None) -> int:
        now = now or self._clock()
        with self._lock:
            expired = [token for token, session in self._sessions.items() if self._is_expired(session, now)]
            for token in expired:
                del self._sessions[token]
        if expired:
            logger.info("session_store: swept expired=%s remaining=%s", len(expired), len(self))
        return len(expired)

    def clear(self) -> None:
        with self._lock:
            self._sessions.clear()

    def __len__(self) -> int:
        with self._lock:
            return len(self._sessions)

    def _is_expired(self, session: Session, now: datetime) -> bool:
        return now - session.created_at > self._max_age


def _check_fields(fields: dict) -> None:
    unknown = set(fields) - SESSION_MUTABLE_FIELDS
    if unknown:
        raise ValueError(f"Unknown or read-only session fields: {sorted(unknown)}")


class SessionSweeper:
    """Runs ``store.sweep()`` every ``interval_seconds`` on a daemon thread."""

    def __init__(self, store: InMemorySessionStore, *, interval_seconds: float):
        self._store = store
        self._interval_seconds = interval_seconds
        self._stop = Event()
        self._thread: Thread | None = None

    def start(self) -> None:
        if self._thread is not None:
            return
        self._stop.clear()
        self._thread = Thread(target=self._run, name="session-sweeper", daemon=True)
        self._thread.start()
        logger.info("session_sweeper: started interval_seconds=%s", self._interval_seconds)

    def stop(self, timeout: float | None = 5.0) -> None:
        if self._thread is None:
            return
        self._stop.set()
        self._thread.join(timeout)
        self._thread = None
        logger.info("session_sweeper: stopped")

    @property
    def running(self) -> bool:
        return self._thread is not None and self._thread.is_alive()

    def _run(self) -> None:
        while not self._stop.wait(self._interval_seconds):
            try:
                self._store.sweep()
            except Exception:  # pragma: no cover
                logger.exception("session_sweeper: sweep_failed")
