"""API endpoints for AI content generation.

Provides:
  - POST /generate-content: generate (or serve cached) copy for one provider
  - OPTIONS /generate-content: pre-flight handshake
  - POST /cross-check: drafts + analyses from the non-primary providers
"""

from __future__ import annotations

import logging

from fastapi import APIRouter, Depends, Request
from fastapi.responses import JSONResponse, PlainTextResponse

from app.core.dependencies import get_client_id, get_cross_checker, get_gateway
from app.gateway.cross_check import CrossChecker
from app.gateway.errors import RateLimitExceededError
from app.gateway.gateway import ContentGateway
from app.gateway.types import GenerationRequest
from app.gateway.vendor_adapters import parse_content_type, parse_provider
from app.schemas.generation import (
    CrossCheckRequest,
    CrossCheckResponse,
    ErrorResponse,
    GenerateContentRequest,
    GenerateContentResponse,
)

logger = logging.getLogger(__name__)

router = APIRouter(tags=["generation"])

CORS_HEADERS = {
    "Access-Control-Allow-Origin": "*",
    "Access-Control-Allow-Headers": "authorization, x-client-info, apikey, content-type",
}


def _error(status_code: int, message: str) -> JSONResponse:
    return JSONResponse(status_code=status_code, content={"error": message}, headers=CORS_HEADERS)


@router.options("/generate-content")
async def generate_content_preflight():
    return PlainTextResponse("ok", headers=CORS_HEADERS)


@router.post(
    "/generate-content",
    response_model=GenerateContentResponse,
    responses={429: {"model": ErrorResponse}, 500: {"model": ErrorResponse}},
    openapi_extra={
        "requestBody": {
            "required": True,
            "content": {"application/json": {"schema": GenerateContentRequest.model_json_schema(by_alias=True)}},
        }
    },
)
async def generate_content(
    request: Request,
    gateway: ContentGateway = Depends(get_gateway),
    client_id: str = Depends(get_client_id),
):
    """Generate marketing copy with the selected provider.

    The client's rate limit is checked before the body is read, so malformed
    requests use up the window too. Identical (prompt, contentType, provider)
    triples are served from the response cache.
    """
    try:
        gateway.admit(client_id)
        body = GenerateContentRequest.model_validate(await request.json())
        generation = GenerationRequest(
            prompt_text=body.prompt,
            content_type=parse_content_type(body.content_type),
            provider=parse_provider(body.provider),
        )
        result = await gateway.generate(generation, client_id=client_id, admitted=True)
    except RateLimitExceededError as e:
        return _error(429, str(e))
    except Exception as e:
        logger.error("Content generation failed for %s: %s", client_id, e, extra={"client_id": client_id})
        return _error(500, str(e))

    return JSONResponse(content={"content": result.content}, headers=CORS_HEADERS)


@router.post("/cross-check", response_model=CrossCheckResponse, responses={500: {"model": ErrorResponse}})
async def cross_check(
    body: CrossCheckRequest,
    checker: CrossChecker = Depends(get_cross_checker),
    client_id: str = Depends(get_client_id),
):
    """Drafts and analyses from every provider except the content type's primary one.

    Providers that fail are left out of the result list.
    """
    try:
        content_type = parse_content_type(body.content_type)
    except ValueError as e:
        return _error(500, str(e))

    results = await checker.cross_check(
        body.prompt,
        content_type,
        primary_content=body.primary_content,
        client_id=client_id,
    )
    return {"results": [r.to_dict() for r in results]}
