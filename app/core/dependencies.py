"""Application wiring: builds the gateway from settings and exposes it to request handlers."""

from fastapi import Header, Request

from app.core.config import settings
from app.gateway.analyzer import BaseContentAnalyzer, LlmContentAnalyzer, RemoteContentAnalyzer
from app.gateway.cache import BaseResponseCache, InMemoryResponseCache, SqlResponseCache
from app.gateway.cross_check import CrossChecker
from app.gateway.gateway import ContentGateway
from app.gateway.prompts import PromptBuilder
from app.gateway.types import UNKNOWN_CLIENT, GatewayLimits
from app.gateway.vendor_adapters import build_adapters, get_adapter


def build_cache() -> BaseResponseCache:
    if settings.cache_backend == "memory":
        return InMemoryResponseCache()
    from app.db.postgres import async_session_factory

    return SqlResponseCache(async_session_factory)


def build_analyzer() -> BaseContentAnalyzer:
    if settings.analysis_function_url:
        return RemoteContentAnalyzer(
            settings.analysis_function_url,
            api_key=settings.analysis_function_key,
            timeout=settings.provider_timeout_seconds,
        )
    return LlmContentAnalyzer(get_adapter(settings.analysis_provider, timeout=settings.provider_timeout_seconds))


def build_gateway(cache: BaseResponseCache | None = None) -> ContentGateway:
    """Gateway wired from settings. One per application."""
    return ContentGateway(
        cache=cache or build_cache(),
        limits=GatewayLimits(
            rate_limit_window_seconds=settings.rate_limit_window_seconds,
            rate_limit_max_requests=settings.rate_limit_max_requests,
            max_concurrent_requests=settings.max_concurrent_requests,
        ),
        adapters=build_adapters(timeout=settings.provider_timeout_seconds),
        prompt_builder=PromptBuilder(brand_name=settings.brand_name, brand_location=settings.brand_location),
    )


def get_gateway(request: Request) -> ContentGateway:
    return request.app.state.gateway


def get_cross_checker(request: Request) -> CrossChecker:
    return request.app.state.cross_checker


def get_client_id(x_forwarded_for: str | None = Header(None)) -> str:
    """First address of X-Forwarded-For, else the shared 'unknown' identity."""
    if not x_forwarded_for:
        return UNKNOWN_CLIENT
    return x_forwarded_for.split(",")[0].strip() or UNKNOWN_CLIENT
