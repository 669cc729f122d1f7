"""Master API router: mounts all endpoint routers."""

from __future__ import annotations

from fastapi import APIRouter

from unisvg.api import generate, health, validate

api_router = APIRouter(prefix="/api")

api_router.include_router(health.router)
api_router.include_router(generate.router)
api_router.include_router(validate.router)
