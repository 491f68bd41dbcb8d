"""Fixed-window rate limiter keyed by client address."""

from __future__ import annotations

import math
import threading
import time
from collections.abc import Callable
from dataclasses import dataclass

from cachetools import TTLCache


@dataclass
class _Window:
    """Requests counted in the current window of one client."""

    count: int
    reset_at: float


class RateLimiter:
    """Thread-safe fixed-window rate limiter.

    The first request of a client opens a window of `window_seconds`; up to
    `max_requests` are allowed inside it. Windows are held in a TTLCache with
    the same TTL, so a window disappears once it has elapsed: lazily when the
    client is looked up again, or for every client on `expire()`.

    The cache entry is mutated in place and never re-inserted while its
    window is open, which keeps the TTL anchored at the window start.
    """

    DEFAULT_MAX_REQUESTS = 10
    DEFAULT_WINDOW_SECONDS = 60
    # Max clients tracked at once
    MAX_CLIENTS = 10000

    def __init__(
        self,
        max_requests: int = DEFAULT_MAX_REQUESTS,
        window_seconds: float = DEFAULT_WINDOW_SECONDS,
        timer: Callable[[], float] = time.monotonic,
        maxsize: int = MAX_CLIENTS,
    ):
        """Initialize the limiter.

        Args:
            max_requests: Requests allowed per client per window
            window_seconds: Window length in seconds
            timer: Clock returning seconds; injectable for tests
            maxsize: Maximum number of clients tracked at once
        """
        if max_requests < 1:
            raise ValueError(f"max_requests must be >= 1, got {max_requests}")
        if window_seconds <= 0:
            raise ValueError(f"window_seconds must be > 0, got {window_seconds}")

        self.max_requests = max_requests
        self.window_seconds = window_seconds
        self._timer = timer
        self._windows: TTLCache[str, _Window] = TTLCache(
            maxsize=maxsize, ttl=window_seconds, timer=timer
        )
        self._lock = threading.Lock()

    def check(self, client_key: str) -> bool:
        """Count a request for the client; False if its window is exhausted."""
        with self._lock:
            window = self._windows.get(client_key)
            if window is None:
                self._windows[client_key] = _Window(
                    count=1, reset_at=self._timer() + self.window_seconds
                )
                return True

            if window.count >= self.max_requests:
                return False

            window.count += 1
            return True

    def retry_after(self, client_key: str) -> int:
        """Whole seconds until the client's window resets (0 if none is open)."""
        with self._lock:
            window = self._windows.get(client_key)
            if window is None:
                return 0
            return max(0, math.ceil(window.reset_at - self._timer()))

    def expire(self) -> None:
        """Evict every elapsed window."""
        with self._lock:
            self._windows.expire()

    def __len__(self) -> int:
        with self._lock:
            return len(self._windows)

    def clear(self) -> None:
        """Forget all windows (for testing)."""
        with self._lock:
            self._windows.clear()
