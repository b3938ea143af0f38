"""Session storage backends.

A backend persists session data between requests, keyed by session id.
The cookie only ever carries the (signed) id.
"""

import copy
import threading
import time
from collections.abc import Callable
from typing import Any, Protocol


class SessionBackend(Protocol):
    """Storage for session records."""

    def load(self, session_id: str) -> dict[str, Any] | None:
        """Return the stored data for *session_id*, or ``None`` if unknown or expired."""
        ...

    def save(self, session_id: str, data: dict[str, Any]) -> None: ...

    def delete(self, session_id: str) -> None: ...


class MemorySessionBackend:
    """In-process session storage with an idle timeout.

    A record expires *ttl* seconds after it was last saved. Records are
    kept in save order, so expired ones are swept from the front of the
    dict on every save. Values are deep-copied in and out.
    """

    __slots__ = ("_clock", "_lock", "_records", "ttl")

    def __init__(self, ttl: float = 7200, *, clock: Callable[[], float] = time.monotonic) -> None:
        self.ttl = ttl
        self._clock = clock
        self._records: dict[str, tuple[float, dict[str, Any]]] = {}
        self._lock = threading.Lock()

    def load(self, session_id: str) -> dict[str, Any] | None:
        with self._lock:
            record = self._records.get(session_id)
            if record is None:
                return None
            saved_at, data = record
            if self._clock() - saved_at > self.ttl:
                del self._records[session_id]
                return None
            return copy.deepcopy(data)

    def save(self, session_id: str, data: dict[str, Any]) -> None:
        now = self._clock()
        with self._lock:
            self._records.pop(session_id, None)
            self._records[session_id] = (now, copy.deepcopy(data))
            self._purge(now)

    def delete(self, session_id: str) -> None:
        with self._lock:
            self._records.pop(session_id, None)

    def _purge(self, now: float) -> None:
        expired = []
        for session_id, (saved_at, _) in self._records.items():
            if now - saved_at <= self.ttl:
                break
            expired.append(session_id)
        for session_id in expired:
            del self._records[session_id]

    def __contains__(self, session_id: object) -> bool:
        with self._lock:
            return session_id in self._records

    def __len__(self) -> int:
        with self._lock:
            return len(self._records)
