"""Per-session fixed-window request admission.

Counters live in process memory only; a restart resets every session.
"""

from __future__ import annotations

import logging
import threading
import time
from dataclasses import dataclass
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from collections.abc import Callable

logger = logging.getLogger(__name__)

ANONYMOUS_SESSION = "anonymous"


@dataclass
class RateLimitEntry:
    count: int
    reset_at: float


class RateLimiter:
    """Admit at most ``max_requests`` per session per ``window_seconds``.

    The first request of a session opens a window. Requests inside the
    window are counted; once the count reaches the limit further requests
    are rejected until the window expires, after which the next request
    opens a fresh window. A missing session id shares one anonymous bucket.
    """

    def __init__(
        self,
        max_requests: int = 10,
        window_seconds: float = 60.0,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self.max_requests = max_requests
        self.window_seconds = window_seconds
        self._clock = clock
        self._entries: dict[str, RateLimitEntry] = {}
        self._lock = threading.Lock()

    def admit(self, session_id: str | None) -> bool:
        """Count one request for ``session_id``. False if it must be rejected."""
        key = session_id or ANONYMOUS_SESSION
        now = self._clock()

        with self._lock:
            entry = self._entries.get(key)
            if entry is None or entry.reset_at < now:
                self._entries[key] = RateLimitEntry(count=1, reset_at=now + self.window_seconds)
                return True

            if entry.count >= self.max_requests:
                logger.warning("Rate limit exceeded for session %s", key)
                return False

            entry.count += 1
            return True

    def prune(self) -> int:
        """Drop expired entries. Returns how many were removed."""
        now = self._clock()
        with self._lock:
            expired = [key for key, entry in self._entries.items() if entry.reset_at < now]
            for key in expired:
                del self._entries[key]
        return len(expired)

    def reset(self) -> None:
        """Forget every session."""
        with self._lock:
            self._entries.clear()

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)
