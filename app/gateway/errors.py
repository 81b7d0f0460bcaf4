"""Error taxonomy for the content-generation gateway.

Provider transport and HTTP errors are not wrapped: the raw ``httpx``
exception reaches the caller unchanged.
"""

from __future__ import annotations


class GatewayError(Exception):
    """Base class for errors raised by the gateway itself."""


class RateLimitExceededError(GatewayError):
    """The client used up its request window."""

    def __init__(self, client_id: str, limit: int, window_seconds: float):
        self.client_id = client_id
        self.limit = limit
        self.window_seconds = window_seconds
        super().__init__("Rate limit exceeded. Please try again later.")


class InvalidProviderError(GatewayError, ValueError):
    """Unknown provider identifier."""

    def __init__(self, provider: object = None):
        self.provider = provider
        super().__init__("Invalid AI provider selected")


class InvalidContentTypeError(GatewayError, ValueError):
    """Unknown content type."""

    def __init__(self, content_type: object = None):
        self.content_type = content_type
        super().__init__(f"Invalid content type: {content_type!r}")


class EmptyResponseError(GatewayError):
    """The provider answered without any text."""

    def __init__(self, provider: str):
        self.provider = provider
        super().__init__(f"No content received from the AI provider ({provider})")


class AnalysisValidationError(GatewayError):
    """An analysis payload did not match the expected structure."""

    def __init__(self, provider: str, errors: list | None = None):
        self.provider = provider
        self.errors = errors or []
        super().__init__(f"Invalid analysis payload for {provider}: {len(self.errors)} error(s)")
