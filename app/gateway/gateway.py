"""Content gateway orchestrator, integrating all gateway components.

Main entry point for generating marketing copy:
  1. Admits the request through the per-client Rate Limiter
  2. Fingerprints (prompt, content type, provider)
  3. Consults the Response Cache; a hit is served and counted
  4. On a miss, formats the prompt and runs the provider call through the
     Concurrency Queue
  5. Persists the new response and returns it

The fingerprint is taken over the user's prompt, not the formatted one, so
template changes do not invalidate cached entries.

Usage:
    gateway = ContentGateway(cache=SqlResponseCache(async_session_factory))
    result = await gateway.generate(
        GenerationRequest("Write about Bali", ContentType.BLOG, AiProvider.ANTHROPIC),
        client_id="203.0.113.7",
    )
"""

from __future__ import annotations

import logging
import time

from app.core.metrics import CACHE_LOOKUPS, PROVIDER_CALLS, PROVIDER_LATENCY, RATE_LIMIT_REJECTIONS
from app.gateway.cache import BaseResponseCache, InMemoryResponseCache
from app.gateway.errors import EmptyResponseError, InvalidProviderError, RateLimitExceededError
from app.gateway.fingerprint import compute_fingerprint
from app.gateway.prompts import PromptBuilder
from app.gateway.queue_manager import ConcurrencyQueue
from app.gateway.rate_limiter import ClientRateLimiter
from app.gateway.types import (
    PRIMARY_PROVIDERS,
    UNKNOWN_CLIENT,
    AiProvider,
    GatewayLimits,
    GenerationRequest,
    GenerationResult,
)
from app.gateway.vendor_adapters import BaseProviderAdapter, build_adapters

logger = logging.getLogger(__name__)


class ContentGateway:
    """Main gateway orchestrator.

    Integrates:
      - ClientRateLimiter: per-client admission
      - BaseResponseCache: fingerprint → response store
      - ConcurrencyQueue: global cap on in-flight provider calls
      - Provider adapters: one per backend
      - PromptBuilder: content-type aware template

    All state lives on the instance; create one per application.
    """

    def __init__(
        self,
        cache: BaseResponseCache | None = None,
        limits: GatewayLimits | None = None,
        adapters: dict[AiProvider, BaseProviderAdapter] | None = None,
        prompt_builder: PromptBuilder | None = None,
        rate_limiter: ClientRateLimiter | None = None,
        queue: ConcurrencyQueue | None = None,
    ):
        self.limits = limits or GatewayLimits()
        self.cache = cache or InMemoryResponseCache()
        self.rate_limiter = rate_limiter or ClientRateLimiter(
            window_seconds=self.limits.rate_limit_window_seconds,
            max_requests=self.limits.rate_limit_max_requests,
        )
        self.queue = queue or ConcurrencyQueue(max_concurrent=self.limits.max_concurrent_requests)
        self.prompt_builder = prompt_builder or PromptBuilder()
        self._adapters = adapters if adapters is not None else build_adapters()

    def get_adapter(self, provider: AiProvider) -> BaseProviderAdapter:
        adapter = self._adapters.get(provider)
        if adapter is None:
            raise InvalidProviderError(provider)
        return adapter

    def admit(self, client_id: str | None) -> None:
        """Rate-limit gate. Raises RateLimitExceededError when the client is over budget."""
        client_id = client_id or UNKNOWN_CLIENT
        if not self.rate_limiter.allow(client_id):
            RATE_LIMIT_REJECTIONS.inc()
            raise RateLimitExceededError(
                client_id,
                limit=self.rate_limiter.max_requests,
                window_seconds=self.rate_limiter.window_seconds,
            )

    async def generate(
        self,
        request: GenerationRequest,
        client_id: str | None = None,
        admitted: bool = False,
    ) -> GenerationResult:
        """Run one request through the full pipeline.

        Pass ``admitted=True`` when the caller already went through ``admit``
        for this request.

        Raises:
            RateLimitExceededError: the client is over its window budget.
            InvalidProviderError: no adapter for the requested provider.
            EmptyResponseError: the provider returned no text.
            httpx.HTTPError: provider transport/API failure, unchanged.
        """
        client_id = client_id or UNKNOWN_CLIENT
        provider = request.provider

        if not admitted:
            self.admit(client_id)
        log_extra = {"client_id": client_id}

        fingerprint = compute_fingerprint(request.prompt_text, request.content_type, provider)

        cached = await self.cache.lookup(fingerprint)
        if cached is not None:
            usage_count = await self.cache.record_hit(fingerprint)
            CACHE_LOOKUPS.labels(provider=provider.value, result="hit").inc()
            logger.info("Cache hit %s (%s, used %d times)", fingerprint[:12], provider.value, usage_count, extra=log_extra)
            return GenerationResult(
                content=cached.response_text,
                fingerprint=fingerprint,
                provider=provider,
                cached=True,
                usage_count=usage_count,
            )

        CACHE_LOOKUPS.labels(provider=provider.value, result="miss").inc()
        adapter = self.get_adapter(provider)
        formatted = self.prompt_builder.format(request.prompt_text, request.content_type)
        slot_key = f"{client_id}-{int(time.time() * 1000)}"

        start = time.monotonic()
        try:
            content = await self.queue.enqueue(slot_key, lambda: adapter.invoke(formatted))
        except Exception as e:
            PROVIDER_CALLS.labels(provider=provider.value, status="error").inc()
            logger.warning("Provider %s failed for %s: %s", provider.value, fingerprint[:12], e, extra=log_extra)
            raise
        finally:
            PROVIDER_LATENCY.labels(provider=provider.value).observe(time.monotonic() - start)

        if not content:
            PROVIDER_CALLS.labels(provider=provider.value, status="empty").inc()
            raise EmptyResponseError(provider.value)

        PROVIDER_CALLS.labels(provider=provider.value, status="success").inc()
        stored = await self.cache.store(
            fingerprint,
            request.prompt_text,
            request.content_type.value,
            provider.value,
            content,
        )
        logger.info(
            "Generated %s content via %s (%d chars)",
            request.content_type.value,
            provider.value,
            len(content),
            extra=log_extra,
        )

        return GenerationResult(
            content=content,
            fingerprint=fingerprint,
            provider=provider,
            cached=False,
            usage_count=stored.usage_count,
        )

    def get_status(self) -> dict:
        """Get comprehensive gateway status."""
        return {
            "rate_limits": self.rate_limiter.get_all_stats(),
            "queue": self.queue.get_stats(),
            "providers": [p.value for p in self._adapters],
            "primary_providers": {ct.value: p.value for ct, p in PRIMARY_PROVIDERS.items()},
        }
