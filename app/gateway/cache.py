"""Content-addressable response cache.

Maps a request fingerprint to a previously generated response and counts
how often it has been served. Entries never expire.

Two stores:
  - InMemoryResponseCache: process-local, used in tests and no-DB mode
  - SqlResponseCache: the ``ai_responses`` table via async SQLAlchemy

Neither store enforces uniqueness on the fingerprint. Two concurrent
misses may both insert; lookups then serve the oldest row.
"""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod

from sqlalchemy import func, select, update
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from app.gateway.types import CachedResponse
from app.models.ai_response import AiResponse

logger = logging.getLogger(__name__)


class BaseResponseCache(ABC):
    """Interface shared by all cache stores."""

    @abstractmethod
    async def lookup(self, fingerprint: str) -> CachedResponse | None:
        """Return the cached response for a fingerprint, or None."""
        ...

    @abstractmethod
    async def store(
        self,
        fingerprint: str,
        prompt: str,
        content_type: str,
        provider: str,
        response: str,
    ) -> CachedResponse:
        """Insert a new entry with usage_count=1."""
        ...

    @abstractmethod
    async def record_hit(self, fingerprint: str) -> int:
        """Increment usage_count for a fingerprint. Returns the new count (0 if absent)."""
        ...

    @abstractmethod
    async def count(self, fingerprint: str | None = None) -> int:
        """Number of stored rows, optionally for one fingerprint."""
        ...


class InMemoryResponseCache(BaseResponseCache):
    """List-backed store. Keeps insertion order so the oldest row wins."""

    def __init__(self):
        self._rows: list[CachedResponse] = []

    def _first(self, fingerprint: str) -> CachedResponse | None:
        for row in self._rows:
            if row.fingerprint == fingerprint:
                return row
        return None

    async def lookup(self, fingerprint: str) -> CachedResponse | None:
        return self._first(fingerprint)

    async def store(
        self,
        fingerprint: str,
        prompt: str,
        content_type: str,
        provider: str,
        response: str,
    ) -> CachedResponse:
        row = CachedResponse(
            fingerprint=fingerprint,
            prompt_text=prompt,
            content_type=content_type,
            provider=provider,
            response_text=response,
            usage_count=1,
        )
        self._rows.append(row)
        return row

    async def record_hit(self, fingerprint: str) -> int:
        row = self._first(fingerprint)
        if row is None:
            return 0
        row.usage_count += 1
        return row.usage_count

    async def count(self, fingerprint: str | None = None) -> int:
        if fingerprint is None:
            return len(self._rows)
        return sum(1 for r in self._rows if r.fingerprint == fingerprint)


class SqlResponseCache(BaseResponseCache):
    """Store backed by the ``ai_responses`` table.

    Each operation opens its own short-lived session so the cache can be
    shared by concurrent requests.
    """

    def __init__(self, session_factory: async_sessionmaker[AsyncSession]):
        self._session_factory = session_factory

    @staticmethod
    def _to_cached(row: AiResponse) -> CachedResponse:
        return CachedResponse(
            fingerprint=row.prompt_hash,
            prompt_text=row.prompt,
            content_type=row.content_type,
            provider=row.provider,
            response_text=row.response,
            usage_count=row.usage_count or 0,
            created_at=row.created_at,
        )

    @staticmethod
    def _oldest(fingerprint: str):
        return (
            select(AiResponse)
            .where(AiResponse.prompt_hash == fingerprint)
            .order_by(AiResponse.created_at, AiResponse.id)
            .limit(1)
        )

    async def lookup(self, fingerprint: str) -> CachedResponse | None:
        async with self._session_factory() as session:
            result = await session.execute(self._oldest(fingerprint))
            row = result.scalar_one_or_none()
            return self._to_cached(row) if row else None

    async def store(
        self,
        fingerprint: str,
        prompt: str,
        content_type: str,
        provider: str,
        response: str,
    ) -> CachedResponse:
        row = AiResponse(
            prompt_hash=fingerprint,
            prompt=prompt,
            content_type=content_type,
            provider=provider,
            response=response,
            usage_count=1,
        )
        async with self._session_factory() as session:
            session.add(row)
            await session.commit()
            await session.refresh(row)
            logger.debug("Cached response %s (%s/%s)", fingerprint[:12], content_type, provider)
            return self._to_cached(row)

    async def record_hit(self, fingerprint: str) -> int:
        async with self._session_factory() as session:
            result = await session.execute(self._oldest(fingerprint))
            row = result.scalar_one_or_none()
            if row is None:
                return 0
            await session.execute(
                update(AiResponse).where(AiResponse.id == row.id).values(usage_count=AiResponse.usage_count + 1)
            )
            await session.commit()
            await session.refresh(row)
            return row.usage_count

    async def count(self, fingerprint: str | None = None) -> int:
        stmt = select(func.count()).select_from(AiResponse)
        if fingerprint is not None:
            stmt = stmt.where(AiResponse.prompt_hash == fingerprint)
        async with self._session_factory() as session:
            result = await session.execute(stmt)
            return int(result.scalar_one())
