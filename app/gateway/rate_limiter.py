"""Per-client rate limiter with fixed window admission control.

Each client identity gets a window of ``window_seconds``. The first request
(or the first one after the window has elapsed) opens a fresh window with
count=1; later requests in the same window are admitted while
count < max_requests.

Clients without an identity share the ``unknown`` bucket.

The check is synchronous and never suspends the event loop, so no lock
is needed.
"""

from __future__ import annotations

import logging
import time
from collections.abc import Callable
from dataclasses import dataclass

from app.gateway.types import UNKNOWN_CLIENT

logger = logging.getLogger(__name__)


@dataclass
class _RateWindow:
    """Request count for a single client window."""

    count: int
    window_start: float  # clock() value when the window opened


class ClientRateLimiter:
    """Fixed-window limiter keyed by client identity.

    Usage:
        limiter = ClientRateLimiter(window_seconds=60, max_requests=10)

        if not limiter.allow(client_ip):
            # reject with 429
            ...
    """

    def __init__(
        self,
        window_seconds: float = 60.0,
        max_requests: int = 10,
        clock: Callable[[], float] = time.monotonic,
    ):
        self.window_seconds = window_seconds
        self.max_requests = max_requests
        self._clock = clock
        self._windows: dict[str, _RateWindow] = {}

    def allow(self, client_id: str | None) -> bool:
        """Admit or reject a request. Never raises."""
        key = client_id or UNKNOWN_CLIENT
        now = self._clock()
        window = self._windows.get(key)

        if window is None or (now - window.window_start) > self.window_seconds:
            self._windows[key] = _RateWindow(count=1, window_start=now)
            return True

        if window.count >= self.max_requests:
            logger.info("Rate limit hit for client %s (%d/%d)", key, window.count, self.max_requests, extra={"client_id": key})
            return False

        window.count += 1
        return True

    def get_stats(self, client_id: str | None) -> dict:
        """Current window state for a client."""
        key = client_id or UNKNOWN_CLIENT
        window = self._windows.get(key)
        now = self._clock()
        if window is None or (now - window.window_start) > self.window_seconds:
            return {"client_id": key, "count": 0, "limit": self.max_requests, "resets_in": 0.0}
        return {
            "client_id": key,
            "count": window.count,
            "limit": self.max_requests,
            "resets_in": round(self.window_seconds - (now - window.window_start), 3),
        }

    def get_all_stats(self) -> dict:
        return {
            "tracked_clients": len(self._windows),
            "window_seconds": self.window_seconds,
            "max_requests": self.max_requests,
        }

    def reset(self, client_id: str | None = None) -> None:
        """Forget one client's window, or all of them."""
        if client_id is None:
            self._windows.clear()
        else:
            self._windows.pop(client_id or UNKNOWN_CLIENT, None)
