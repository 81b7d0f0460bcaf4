"""Concurrency-bounded queue for provider calls.

Caps how many provider calls run at once across all clients. Admission
goes through an ``asyncio.Semaphore``, whose waiters resume in FIFO order,
so no caller can be starved by a stream of later arrivals.

Every admitted call holds an in-flight slot until it finishes, whether it
succeeds or raises.
"""

from __future__ import annotations

import asyncio
import logging
import time
from collections.abc import Awaitable, Callable
from typing import TypeVar

logger = logging.getLogger(__name__)

T = TypeVar("T")


class ConcurrencyQueue:
    """System-wide cap on in-flight operations.

    Usage:
        queue = ConcurrencyQueue(max_concurrent=3)
        text = await queue.enqueue(f"{client_ip}-{now_ms}", lambda: adapter.invoke(prompt))
    """

    def __init__(self, max_concurrent: int = 3):
        if max_concurrent < 1:
            raise ValueError("max_concurrent must be at least 1")
        self.max_concurrent = max_concurrent
        self._semaphore = asyncio.Semaphore(max_concurrent)
        self._in_flight: dict[str, float] = {}  # slot key → admitted at (monotonic)
        self._sequence = 0
        self._waiting = 0
        self._peak = 0
        self._completed = 0
        self._failed = 0

    @property
    def in_flight(self) -> int:
        return len(self._in_flight)

    def _slot_key(self, key: str) -> str:
        # Keys are advisory; two callers may present the same one
        if key not in self._in_flight:
            return key
        self._sequence += 1
        return f"{key}#{self._sequence}"

    async def enqueue(self, key: str, operation: Callable[[], Awaitable[T]]) -> T:
        """Run ``operation`` once a slot is free and return its result.

        Exceptions from the operation propagate unchanged.
        """
        self._waiting += 1
        try:
            await self._semaphore.acquire()
        finally:
            self._waiting -= 1

        slot = self._slot_key(key)
        self._in_flight[slot] = time.monotonic()
        self._peak = max(self._peak, len(self._in_flight))
        logger.debug("Slot %s admitted (%d/%d in flight)", slot, len(self._in_flight), self.max_concurrent)

        try:
            result = await operation()
        except Exception:
            self._failed += 1
            raise
        else:
            self._completed += 1
            return result
        finally:
            self._in_flight.pop(slot, None)
            self._semaphore.release()

    def get_stats(self) -> dict:
        return {
            "in_flight": len(self._in_flight),
            "waiting": self._waiting,
            "max_concurrent": self.max_concurrent,
            "peak_in_flight": self._peak,
            "completed": self._completed,
            "failed": self._failed,
        }
