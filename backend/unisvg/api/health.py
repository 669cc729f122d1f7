"""Health check + meta endpoints."""

from __future__ import annotations

from fastapi import APIRouter, Depends

from unisvg import __version__
from unisvg.dependencies import get_orchestrator
from unisvg.generation.orchestrator import TIERS, GenerationOrchestrator
from unisvg.layout.constants import SCHEMA_VERSION
from unisvg.models.responses import HealthResponse

router = APIRouter()


@router.get("/health", response_model=HealthResponse)
async def health() -> HealthResponse:
    return HealthResponse(
        status="ok",
        version=__version__,
        schema_version=SCHEMA_VERSION,
        tiers=list(TIERS),
    )


@router.get("/errors")
async def error_stats(orchestrator: GenerationOrchestrator = Depends(get_orchestrator)) -> dict:
    return orchestrator.get_error_stats()
