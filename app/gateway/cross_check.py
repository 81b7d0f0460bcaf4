"""Cross-check orchestrator: second opinions from the non-primary providers.

For a prompt and content type, every provider except the primary one writes
its own draft through the full gateway (so cache, rate limit and queue all
apply) and the draft is analyzed.

Providers are processed one after another in PROVIDER_ORDER, so total
latency is the sum of the individual calls. A failure for one provider is
logged and that provider is left out; the others still run.
"""

from __future__ import annotations

import logging

from app.gateway.analyzer import BaseContentAnalyzer
from app.gateway.gateway import ContentGateway
from app.gateway.types import (
    PROVIDER_ORDER,
    AiProvider,
    ContentType,
    CrossCheckResult,
    GenerationRequest,
    best_provider,
)

logger = logging.getLogger(__name__)


class CrossChecker:
    """Fans a prompt out to the non-primary providers."""

    def __init__(self, gateway: ContentGateway, analyzer: BaseContentAnalyzer):
        self.gateway = gateway
        self.analyzer = analyzer

    @staticmethod
    def providers_for(content_type: ContentType) -> list[AiProvider]:
        """Providers consulted for a content type, in fan-out order."""
        primary = best_provider(content_type)
        return [p for p in PROVIDER_ORDER if p != primary]

    async def cross_check(
        self,
        prompt: str,
        content_type: ContentType,
        primary_content: str = "",
        client_id: str | None = None,
    ) -> list[CrossCheckResult]:
        """Collect drafts and analyses from the non-primary providers.

        ``primary_content`` is the draft being cross-checked; the alternative
        drafts are generated from ``prompt`` alone. Never raises for a
        single provider's failure.
        """
        results: list[CrossCheckResult] = []
        providers = self.providers_for(content_type)
        logger.info(
            "Cross-checking %s content against %s (primary draft %d chars)",
            content_type.value,
            ", ".join(p.value for p in providers),
            len(primary_content),
        )

        for provider in providers:
            try:
                generated = await self.gateway.generate(
                    GenerationRequest(prompt_text=prompt, content_type=content_type, provider=provider),
                    client_id=client_id,
                )
                analysis = await self.analyzer.analyze(generated.content, provider)
                if analysis is None:
                    logger.info("No analysis returned for %s, skipping", provider.value)
                    continue
                results.append(CrossCheckResult(provider=provider, content=generated.content, analysis=analysis))
            except Exception as e:
                logger.error("Error cross-checking with %s: %s", provider.value, e)

        return results
