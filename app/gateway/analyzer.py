"""Content analysis for cross-checks.

Turns one provider's draft into a structured CrossCheckAnalysis (tone,
perspective, insights, strengths, recommended sections).

Two analyzers:
  - RemoteContentAnalyzer: calls an external analysis function over HTTP
  - LlmContentAnalyzer: asks a provider adapter to judge the draft as JSON

Payloads are validated with pydantic. A structural mismatch is logged and
raised as AnalysisValidationError.
"""

from __future__ import annotations

import json
import logging
import re
from abc import ABC, abstractmethod

import httpx
from pydantic import ValidationError

from app.gateway.errors import AnalysisValidationError
from app.gateway.types import AiProvider, CrossCheckAnalysis
from app.gateway.vendor_adapters import BaseProviderAdapter

logger = logging.getLogger(__name__)

_FENCED_JSON = re.compile(r"```(?:json)?\s*(\{[\s\S]*?\})\s*```", re.IGNORECASE)


def validate_analysis(payload: object, provider: AiProvider | str) -> CrossCheckAnalysis:
    """Validate a raw analysis payload."""
    name = provider.value if isinstance(provider, AiProvider) else str(provider)
    try:
        return CrossCheckAnalysis.model_validate(payload)
    except ValidationError as e:
        logger.error("Invalid analysis payload from %s: %s", name, e)
        raise AnalysisValidationError(name, e.errors()) from e


class BaseContentAnalyzer(ABC):
    """Base class for analysis capabilities."""

    @abstractmethod
    async def analyze(self, content: str, provider: AiProvider) -> CrossCheckAnalysis | None:
        """Analyze a draft. None means no analysis was produced."""
        ...


class RemoteContentAnalyzer(BaseContentAnalyzer):
    """Calls an external analysis function with ``{content, provider}``."""

    def __init__(self, url: str, api_key: str = "", timeout: float = 60.0):
        self.url = url
        self.api_key = api_key
        self.timeout = timeout

    async def analyze(self, content: str, provider: AiProvider) -> CrossCheckAnalysis | None:
        headers = {"Content-Type": "application/json"}
        if self.api_key:
            headers["Authorization"] = f"Bearer {self.api_key}"

        async with httpx.AsyncClient(timeout=self.timeout) as client:
            resp = await client.post(
                self.url,
                json={"content": content, "provider": provider.value},
                headers=headers,
            )
        resp.raise_for_status()

        if not resp.content:
            return None
        data = resp.json()
        if not data:
            return None
        return validate_analysis(data, provider)


_ANALYSIS_PROMPT = """Analyze the following marketing draft written by {provider}.
Respond with a single JSON object and nothing else, using exactly these keys:
  "tone": short description of the tone,
  "perspective": whose point of view the draft takes,
  "uniqueInsights": list of ideas not commonly found in similar copy,
  "strengths": list of what the draft does well,
  "recommendedSections": list of sections worth reusing in a combined piece

Draft:
{content}"""


class LlmContentAnalyzer(BaseContentAnalyzer):
    """Uses a provider adapter as the judge."""

    def __init__(self, adapter: BaseProviderAdapter):
        self.adapter = adapter

    async def analyze(self, content: str, provider: AiProvider) -> CrossCheckAnalysis | None:
        raw = await self.adapter.invoke(_ANALYSIS_PROMPT.format(provider=provider.value, content=content))
        if not raw or not raw.strip():
            return None
        return validate_analysis(self._parse_json(raw, provider), provider)

    @staticmethod
    def _parse_json(text: str, provider: AiProvider) -> object:
        text = text.strip()
        candidates = [text]
        fenced = _FENCED_JSON.search(text)
        if fenced:
            candidates.append(fenced.group(1))
        start, end = text.find("{"), text.rfind("}")
        if start != -1 and end > start:
            candidates.append(text[start : end + 1])

        for candidate in candidates:
            try:
                return json.loads(candidate)
            except json.JSONDecodeError:
                continue

        logger.error("Analysis from judge for %s is not valid JSON", provider.value)
        raise AnalysisValidationError(provider.value, [{"type": "json_invalid", "msg": "Model output is not valid JSON"}])
