"""Provider reference endpoints.

Provides:
  - GET /providers: all providers in fan-out order and the primary mapping
  - GET /providers/best?contentType=: primary provider for one content type
  - GET /gateway/status: rate-limiter and queue statistics
"""

from fastapi import APIRouter, Depends, Query

from app.core.dependencies import get_gateway
from app.gateway.gateway import ContentGateway
from app.gateway.types import PRIMARY_PROVIDERS, PROVIDER_ORDER, best_provider
from app.gateway.vendor_adapters import parse_content_type
from app.schemas.generation import BestProviderResponse, ProvidersResponse

router = APIRouter(tags=["providers"])


@router.get("/providers", response_model=ProvidersResponse)
async def list_providers():
    return {
        "providers": [p.value for p in PROVIDER_ORDER],
        "primary": {ct.value: p.value for ct, p in PRIMARY_PROVIDERS.items()},
    }


@router.get("/providers/best", response_model=BestProviderResponse)
async def get_best_provider(content_type: str = Query(..., alias="contentType")):
    ct = parse_content_type(content_type)
    return {"content_type": ct.value, "provider": best_provider(ct).value}


@router.get("/gateway/status")
async def gateway_status(gateway: ContentGateway = Depends(get_gateway)):
    return gateway.get_status()
