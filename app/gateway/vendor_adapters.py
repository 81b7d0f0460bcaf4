"""Provider adapters: protocol-level handling for each generative backend.

Each adapter turns a fully formatted prompt into the provider's HTTP request,
sends it and extracts the generated text.

Provider-specific behaviors:
  - Mistral: chat completions, text in choices[0].message.content
  - Gemini: generateContent (generate-once), text in candidates[0].content.parts
  - Anthropic: Messages API, text in content[0].text
  - Cohere: generate endpoint (generate-once), text in generations[0].text

Credentials are read from the environment on every call. A missing key is
sent as an empty string and the provider's auth error surfaces to the caller.
Transport and HTTP errors propagate unchanged; there is no retry here.
"""

from __future__ import annotations

import logging
import os
import time
from abc import ABC, abstractmethod

import httpx

from app.gateway.errors import InvalidContentTypeError, InvalidProviderError
from app.gateway.types import AiProvider, ContentType

logger = logging.getLogger(__name__)

DEFAULT_TIMEOUT = 60.0


def parse_provider(value: AiProvider | str | None) -> AiProvider:
    """Convert a raw identifier into an AiProvider."""
    if isinstance(value, AiProvider):
        return value
    try:
        return AiProvider(value)
    except ValueError:
        raise InvalidProviderError(value) from None


def parse_content_type(value: ContentType | str | None) -> ContentType:
    """Convert a raw identifier into a ContentType."""
    if isinstance(value, ContentType):
        return value
    try:
        return ContentType(value)
    except ValueError:
        raise InvalidContentTypeError(value) from None


class BaseProviderAdapter(ABC):
    """Base class for all provider adapters."""

    provider: AiProvider
    env_var: str
    default_model: str

    def __init__(self, api_key: str | None = None, model: str | None = None, timeout: float = DEFAULT_TIMEOUT):
        self._api_key = api_key
        self.model = model or self.default_model
        self.timeout = timeout

    @property
    def api_key(self) -> str:
        """Injected key, else the environment value at call time, else ''."""
        if self._api_key is not None:
            return self._api_key
        return os.environ.get(self.env_var, "")

    @abstractmethod
    async def invoke(self, prompt: str) -> str:
        """Send the prompt and return the generated text."""
        ...

    async def _post(self, url: str, payload: dict, headers: dict, params: dict | None = None) -> dict:
        start = time.monotonic()
        async with httpx.AsyncClient(timeout=self.timeout) as client:
            resp = await client.post(url, json=payload, headers=headers, params=params)
        resp.raise_for_status()
        logger.debug(
            "%s responded in %dms",
            self.provider.value,
            int((time.monotonic() - start) * 1000),
        )
        return resp.json()


# ---------------------------------------------------------------------------
# Mistral (chat completions)
# ---------------------------------------------------------------------------


class MistralAdapter(BaseProviderAdapter):
    """Mistral chat completions adapter."""

    provider = AiProvider.MISTRAL
    env_var = "MISTRAL_API_KEY"
    default_model = "mistral-medium"
    api_url = "https://api.mistral.ai/v1/chat/completions"

    async def invoke(self, prompt: str) -> str:
        data = await self._post(
            self.api_url,
            payload={
                "model": self.model,
                "messages": [{"role": "user", "content": prompt}],
            },
            headers={
                "Authorization": f"Bearer {self.api_key}",
                "Content-Type": "application/json",
            },
        )
        return data["choices"][0]["message"]["content"] or ""


# ---------------------------------------------------------------------------
# Gemini (generate once)
# ---------------------------------------------------------------------------


class GeminiAdapter(BaseProviderAdapter):
    """Google Gemini generateContent adapter."""

    provider = AiProvider.GEMINI
    env_var = "GEMINI_API_KEY"
    default_model = "gemini-pro"
    api_url_template = "https://generativelanguage.googleapis.com/v1beta/models/{model}:generateContent"

    async def invoke(self, prompt: str) -> str:
        data = await self._post(
            self.api_url_template.format(model=self.model),
            payload={"contents": [{"role": "user", "parts": [{"text": prompt}]}]},
            headers={"Content-Type": "application/json"},
            params={"key": self.api_key},
        )
        candidates = data.get("candidates") or []
        if not candidates:
            return ""
        parts = candidates[0].get("content", {}).get("parts", [])
        return "".join(p.get("text", "") for p in parts if "text" in p)


# ---------------------------------------------------------------------------
# Anthropic (messages)
# ---------------------------------------------------------------------------


class AnthropicAdapter(BaseProviderAdapter):
    """Anthropic Messages API adapter."""

    provider = AiProvider.ANTHROPIC
    env_var = "ANTHROPIC_API_KEY"
    default_model = "claude-3-opus-20240229"
    api_url = "https://api.anthropic.com/v1/messages"
    api_version = "2023-06-01"
    max_tokens = 1000

    async def invoke(self, prompt: str) -> str:
        data = await self._post(
            self.api_url,
            payload={
                "model": self.model,
                "max_tokens": self.max_tokens,
                "messages": [{"role": "user", "content": prompt}],
            },
            headers={
                "x-api-key": self.api_key,
                "anthropic-version": self.api_version,
                "Content-Type": "application/json",
            },
        )
        blocks = data.get("content") or []
        if not blocks:
            return ""
        return blocks[0].get("text", "")


# ---------------------------------------------------------------------------
# Cohere (generate once)
# ---------------------------------------------------------------------------


class CohereAdapter(BaseProviderAdapter):
    """Cohere generate adapter."""

    provider = AiProvider.COHERE
    env_var = "COHERE_API_KEY"
    default_model = "command"
    api_url = "https://api.cohere.ai/v1/generate"
    max_tokens = 1000

    async def invoke(self, prompt: str) -> str:
        data = await self._post(
            self.api_url,
            payload={
                "model": self.model,
                "prompt": prompt,
                "max_tokens": self.max_tokens,
            },
            headers={
                "Authorization": f"Bearer {self.api_key}",
                "Content-Type": "application/json",
            },
        )
        generations = data.get("generations") or []
        if not generations:
            return ""
        return generations[0].get("text", "")


# ---------------------------------------------------------------------------
# Adapter registry
# ---------------------------------------------------------------------------

ADAPTER_REGISTRY: dict[AiProvider, type[BaseProviderAdapter]] = {
    AiProvider.MISTRAL: MistralAdapter,
    AiProvider.GEMINI: GeminiAdapter,
    AiProvider.ANTHROPIC: AnthropicAdapter,
    AiProvider.COHERE: CohereAdapter,
}


def get_adapter(provider: AiProvider | str, **kwargs) -> BaseProviderAdapter:
    """Factory: build the adapter for a provider identifier."""
    cls = ADAPTER_REGISTRY.get(parse_provider(provider))
    if cls is None:
        raise InvalidProviderError(provider)
    return cls(**kwargs)


def build_adapters(timeout: float = DEFAULT_TIMEOUT) -> dict[AiProvider, BaseProviderAdapter]:
    """One adapter per registered provider."""
    return {provider: cls(timeout=timeout) for provider, cls in ADAPTER_REGISTRY.items()}
