"""Core types and DTOs for the content-generation gateway."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum

from pydantic import BaseModel, ConfigDict, Field


# ---------------------------------------------------------------------------
# Enums
# ---------------------------------------------------------------------------


class ContentType(str, Enum):
    """Kinds of marketing copy the gateway can produce."""

    BLOG = "blog"
    SOCIAL = "social"
    EMAIL = "email"
    DESCRIPTION = "description"


class AiProvider(str, Enum):
    """Supported generative backends."""

    MISTRAL = "mistral"
    GEMINI = "gemini"
    ANTHROPIC = "anthropic"
    COHERE = "cohere"


# Fan-out order for cross-checks
PROVIDER_ORDER: tuple[AiProvider, ...] = (
    AiProvider.MISTRAL,
    AiProvider.GEMINI,
    AiProvider.ANTHROPIC,
    AiProvider.COHERE,
)

# Content type → provider that writes the primary draft
PRIMARY_PROVIDERS: dict[ContentType, AiProvider] = {
    ContentType.BLOG: AiProvider.ANTHROPIC,
    ContentType.SOCIAL: AiProvider.GEMINI,
    ContentType.EMAIL: AiProvider.COHERE,
    ContentType.DESCRIPTION: AiProvider.MISTRAL,
}

# Client identity used when no forwarded-for header is present
UNKNOWN_CLIENT = "unknown"


def best_provider(content_type: ContentType) -> AiProvider:
    """Primary provider for a content type (anthropic if unmapped)."""
    return PRIMARY_PROVIDERS.get(content_type, AiProvider.ANTHROPIC)


# ---------------------------------------------------------------------------
# Generation request / result
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class GenerationRequest:
    """A single generation request as issued by a client."""

    prompt_text: str
    content_type: ContentType
    provider: AiProvider


@dataclass
class GenerationResult:
    """What the gateway hands back for a successful request."""

    content: str
    fingerprint: str
    provider: AiProvider
    cached: bool = False
    usage_count: int = 1


@dataclass
class CachedResponse:
    """A previously generated response keyed by its fingerprint."""

    fingerprint: str
    prompt_text: str
    content_type: str
    provider: str
    response_text: str
    usage_count: int = 1
    created_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))


# ---------------------------------------------------------------------------
# Cross-check
# ---------------------------------------------------------------------------


class CrossCheckAnalysis(BaseModel):
    """Structured analysis of one provider's draft.

    Accepts both camelCase (as produced by the analysis function) and
    snake_case keys; serializes with camelCase aliases.
    """

    model_config = ConfigDict(populate_by_name=True)

    tone: str
    perspective: str
    unique_insights: list[str] = Field(default_factory=list, alias="uniqueInsights")
    strengths: list[str] = Field(default_factory=list)
    recommended_sections: list[str] = Field(default_factory=list, alias="recommendedSections")


@dataclass
class CrossCheckResult:
    """Draft + analysis from one non-primary provider."""

    provider: AiProvider
    content: str
    analysis: CrossCheckAnalysis

    def to_dict(self) -> dict:
        return {
            "provider": self.provider.value,
            "content": self.content,
            "analysis": self.analysis.model_dump(by_alias=True),
        }


# ---------------------------------------------------------------------------
# Gateway limits
# ---------------------------------------------------------------------------


@dataclass
class GatewayLimits:
    """Admission and concurrency limits for one gateway instance."""

    rate_limit_window_seconds: float = 60.0
    rate_limit_max_requests: int = 10
    max_concurrent_requests: int = 3
