"""POST /api/generate: tiered document generation from a text prompt."""

from __future__ import annotations

from fastapi import APIRouter, Depends

from unisvg.dependencies import get_orchestrator
from unisvg.generation.orchestrator import GenerationOrchestrator
from unisvg.models.requests import GenerationRequest
from unisvg.models.responses import GenerationResponse

router = APIRouter()


@router.post("/generate", response_model=GenerationResponse, response_model_by_alias=True)
async def generate(
    req: GenerationRequest,
    orchestrator: GenerationOrchestrator = Depends(get_orchestrator),
) -> GenerationResponse:
    return await orchestrator.handle_generation_with_fallbacks(req)
