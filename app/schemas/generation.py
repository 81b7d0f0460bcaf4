"""Request/response models for the generation, cross-check and provider endpoints."""

from pydantic import BaseModel, ConfigDict, Field

from app.gateway.types import CrossCheckAnalysis


class GenerateContentRequest(BaseModel):
    """Body of POST /generate-content. Provider and content type are checked by the gateway."""

    model_config = ConfigDict(populate_by_name=True)

    prompt: str
    content_type: str = Field(alias="contentType")
    provider: str


class GenerateContentResponse(BaseModel):
    content: str


class ErrorResponse(BaseModel):
    error: str


class CrossCheckRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    prompt: str = Field(min_length=1, max_length=10_000)
    content_type: str = Field(alias="contentType")
    primary_content: str = Field("", alias="primaryContent")


class CrossCheckResultOut(BaseModel):
    provider: str
    content: str
    analysis: CrossCheckAnalysis


class CrossCheckResponse(BaseModel):
    results: list[CrossCheckResultOut]


class BestProviderResponse(BaseModel):
    content_type: str = Field(serialization_alias="contentType")
    provider: str


class ProvidersResponse(BaseModel):
    providers: list[str]
    primary: dict[str, str]
