"""System prompt templates per content type."""

from __future__ import annotations

from dataclasses import dataclass

from app.gateway.types import ContentType


@dataclass
class PromptBuilder:
    """Prepends the agency brief to a user's free-text request."""

    brand_name: str = "QueerLuxe Travel"
    brand_location: str = "San Diego"

    def system_prompt(self, content_type: ContentType) -> str:
        article = "a " if content_type == ContentType.BLOG else ""
        return (
            f"Create {article}{content_type.value} content for a luxury LGBTQ+ travel agency "
            f"called {self.brand_name} based in {self.brand_location}. The content should be "
            "inclusive, welcoming, and focused on luxury travel experiences."
        )

    def format(self, prompt: str, content_type: ContentType) -> str:
        return f"{self.system_prompt(content_type)}\n\nSpecific request: {prompt}"
