from app.models.ai_response import AiResponse

__all__ = [
    "AiResponse",
]
