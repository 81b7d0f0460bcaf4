"""Version 1 API router: mounts the generation and provider routers under /api/v1."""

from fastapi import APIRouter

from app.api.v1.generation import router as generation_router
from app.api.v1.providers import router as providers_router

api_v1_router = APIRouter(prefix="/api/v1")
api_v1_router.include_router(generation_router)
api_v1_router.include_router(providers_router)
