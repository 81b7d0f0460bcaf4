import logging
import traceback
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from app.api.v1.router import api_v1_router
from app.core.config import settings, validate_settings_for_production
from app.core.dependencies import build_analyzer, build_gateway
from app.core.logging import setup_logging
from app.core.metrics import PrometheusMiddleware, metrics_response
from app.core.sentry import init_sentry
from app.gateway.cross_check import CrossChecker
from app.gateway.errors import InvalidContentTypeError, InvalidProviderError

# Configure logging before anything else
setup_logging()

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    # Startup
    validate_settings_for_production()
    init_sentry()
    logger.info("Starting content gateway (cache=%s)...", settings.cache_backend)

    if settings.cache_backend == "sql" and settings.db_create_tables:
        from app.db.postgres import create_tables

        await create_tables()
        logger.info("Database tables ready")

    gateway = build_gateway()
    app.state.gateway = gateway
    app.state.cross_checker = CrossChecker(gateway, build_analyzer())

    yield

    # Shutdown
    if settings.cache_backend == "sql":
        from app.db.postgres import engine

        await engine.dispose()
    logger.info("Content gateway shut down")


app = FastAPI(
    title="Content Gateway",
    description="AI content generation gateway for travel marketing",
    version="1.0.0",
    lifespan=lifespan,
    docs_url="/api/docs" if settings.app_debug else None,
    redoc_url="/api/redoc" if settings.app_debug else None,
)


# Log unhandled exceptions with traceback
@app.exception_handler(Exception)
async def _unhandled_exception_handler(request: Request, exc: Exception):
    tb = traceback.format_exception(type(exc), exc, exc.__traceback__)
    logger.error("Unhandled %s on %s %s:\n%s", type(exc).__name__, request.method, request.url.path, "".join(tb))
    return JSONResponse(status_code=500, content={"error": f"{type(exc).__name__}: {exc}"})


@app.exception_handler(InvalidProviderError)
@app.exception_handler(InvalidContentTypeError)
async def _invalid_identifier_handler(request: Request, exc: ValueError):
    return JSONResponse(status_code=400, content={"error": str(exc)})


# Request metrics
app.add_middleware(PrometheusMiddleware)

# CORS: parse allowed_origins from settings (comma-separated)
_origins = [o.strip() for o in settings.allowed_origins.split(",") if o.strip()]
app.add_middleware(
    CORSMiddleware,
    allow_origins=_origins,
    allow_credentials=False,
    allow_methods=["*"],
    allow_headers=["*"],
)

# API routes
app.include_router(api_v1_router)


@app.get("/api/v1/health")
async def health(request: Request):
    gateway = getattr(request.app.state, "gateway", None)
    return {
        "status": "ok",
        "cache_backend": settings.cache_backend,
        "gateway": gateway is not None,
    }


@app.get("/metrics", include_in_schema=False)
async def metrics():
    return metrics_response()
