"""POST /api/validate: structural/layout validation with optional auto-fix."""

from __future__ import annotations

from fastapi import APIRouter, Depends

from unisvg.dependencies import get_validator
from unisvg.models.requests import ValidateRequest
from unisvg.validation.validator import DocumentValidator

router = APIRouter()


@router.post("/validate")
async def validate(
    req: ValidateRequest,
    validator: DocumentValidator = Depends(get_validator),
) -> dict:
    report = validator.validate(req.document, auto_fix=req.auto_fix)
    body = report.model_dump(mode="json", by_alias=True, exclude={"fixed_document"})
    if report.fixed_document is not None:
        body["fixedDocument"] = report.fixed_document.to_wire()
    body["feedback"] = validator.generate_model_feedback(report)
    return body
