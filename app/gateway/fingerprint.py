"""Request fingerprinting for the response cache."""

from __future__ import annotations

import hashlib

from app.gateway.types import AiProvider, ContentType


def compute_fingerprint(prompt: str, content_type: ContentType | str, provider: AiProvider | str) -> str:
    """SHA-256 hex digest identifying a (prompt, content type, provider) triple.

    Content types and providers never contain ``-``, so the joined string
    splits unambiguously from the right. The format matches rows already
    stored in ``ai_responses``.
    """
    ct = content_type.value if isinstance(content_type, ContentType) else str(content_type)
    pv = provider.value if isinstance(provider, AiProvider) else str(provider)
    data = f"{prompt}-{ct}-{pv}"
    return hashlib.sha256(data.encode("utf-8")).hexdigest()
