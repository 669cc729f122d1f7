"""Tiered generation with fallbacks.

Tiers run strictly in order, each wrapped in execute_with_retry:

  unified-layered -> layered-only -> rule-based -> basic-shapes

The first tier that yields a document passing validation wins. Validation
feedback from a rejected document is handed to the next upstream call.
handle_generation_with_fallbacks never raises: if even the basic-shapes
tier breaks, a "Generation Failed" placeholder is returned.
"""

from __future__ import annotations

import dataclasses
import logging
from collections import Counter, deque
from typing import Any, Awaitable, Callable

from pydantic import ValidationError

from unisvg.cache import CacheService, make_key
from unisvg.generation.basic_shapes import basic_shapes_response, failure_response
from unisvg.generation.errors import ClassifiedError, TierFailure
from unisvg.generation.retry import RetryPolicy, Sleep, execute_with_retry
from unisvg.generation.rule_based import RuleBasedGenerator
from unisvg.layers.analyzer import LayerAnalyzer
from unisvg.layout import canvas
from unisvg.layout.canvas import CanvasConfig
from unisvg.models.document import UnifiedLayeredDocument
from unisvg.models.requests import GenerationRequest
from unisvg.models.responses import GenerationMeta, GenerationResponse, LayerBounds, LayerInfo
from unisvg.models.validation import ValidationReport
from unisvg.svg.converter import normalize_palette
from unisvg.svg.renderer import render_document
from unisvg.validation.validator import DocumentValidator

logger = logging.getLogger(__name__)

UNIFIED_LAYERED = "unified-layered"
LAYERED_ONLY = "layered-only"
RULE_BASED = "rule-based"
BASIC_SHAPES = "basic-shapes"

TIERS = (UNIFIED_LAYERED, LAYERED_ONLY, RULE_BASED, BASIC_SHAPES)

TIER_LABELS = {
    UNIFIED_LAYERED: "Unified layered generation",
    LAYERED_ONLY: "Layered-only generation",
    RULE_BASED: "Rule-based generation",
}

LAYERED_ONLY_HINT = "Do not use layout specifications; place every path with absolute canvas coordinates."

Upstream = Callable[[GenerationRequest, "list[str] | None"], Awaitable[Any]]


@dataclasses.dataclass
class _TierOutput:
    document: UnifiedLayeredDocument
    report: ValidationReport
    description: str
    palette: list[str]
    seed: int | None


class GenerationOrchestrator:
    def __init__(
        self,
        upstream: Upstream | None = None,
        rule_based: RuleBasedGenerator | None = None,
        validator: DocumentValidator | None = None,
        analyzer: LayerAnalyzer | None = None,
        cache: CacheService | None = None,
        policy: RetryPolicy | None = None,
        fallback_enabled: bool = True,
        include_error_details: bool = True,
        error_log_size: int = 100,
        sleep: Sleep | None = None,
    ):
        self.upstream = upstream
        self.rule_based = rule_based or RuleBasedGenerator()
        self.validator = validator or DocumentValidator()
        self.layered_validator = DocumentValidator(
            dataclasses.replace(self.validator.get_options(), validate_layout_language=False)
        )
        self.analyzer = analyzer or LayerAnalyzer()
        self.cache = cache
        self.policy = policy or RetryPolicy()
        self.fallback_enabled = fallback_enabled
        self.include_error_details = include_error_details
        self.sleep = sleep
        self._error_log: deque[ClassifiedError] = deque(maxlen=error_log_size)

    # ------------------------------------------------------------------
    # Entry point
    # ------------------------------------------------------------------

    async def handle_generation_with_fallbacks(self, request: GenerationRequest) -> GenerationResponse:
        config = canvas.get_config(canvas.DEFAULT_RATIO)
        try:
            config = canvas.get_config(request.resolved_aspect_ratio())
            return await self._generate(request, config)
        except Exception as exc:
            logger.exception("Generation pipeline broke for prompt %r", request.prompt)
            return failure_response(
                request.prompt, config, str(exc) or type(exc).__name__,
                seed=request.seed, recent_errors=self._recent_summaries(),
            )

    async def _generate(self, request: GenerationRequest, config: CanvasConfig) -> GenerationResponse:
        cache_key = make_key("generation", request.model_dump(by_alias=True))
        if self.cache is not None:
            cached = self.cache.get(cache_key)
            if cached is not None:
                logger.debug("Generation cache hit for %s", cache_key)
                return cached.model_copy(deep=True)

        policy = self._policy_for(request)
        fallback = self.fallback_enabled if request.fallback_enabled is None else request.fallback_enabled
        feedback: list[str] = []
        warnings: list[str] = []

        tiers: list[tuple[str, Callable[[], Awaitable[_TierOutput]]]] = [
            (UNIFIED_LAYERED, lambda: self._attempt_unified(request, feedback)),
        ]
        if fallback:
            tiers += [
                (LAYERED_ONLY, lambda: self._attempt_layered_only(request, feedback)),
                (RULE_BASED, lambda: self._attempt_rule_based(request)),
            ]

        for tier, attempt_fn in tiers:
            logger.info("Trying %s tier", tier)
            result = await execute_with_retry(
                attempt_fn, policy, tier=tier, sleep=self.sleep, on_failure=self._error_log.append,
            )
            if result.ok:
                response = self._build_response(request, config, tier, result.value, warnings)
                if self.cache is not None:
                    self.cache.set(cache_key, response.model_copy(deep=True))
                logger.info("Generated with %s tier after %d attempt(s)", tier, result.attempts)
                return response
            warnings.append(f"{TIER_LABELS[tier]} failed: {result.failure.message}")

        if not fallback:
            return failure_response(
                request.prompt, config, "Fallback generation disabled",
                seed=request.seed, recent_errors=self._recent_summaries(),
            )

        logger.warning("All advanced tiers failed for prompt %r, using basic shapes", request.prompt)
        try:
            return basic_shapes_response(request.prompt, config, request.palette, request.seed, warnings)
        except Exception as exc:
            logger.exception("Basic shapes fallback failed")
            return failure_response(
                request.prompt, config, str(exc) or type(exc).__name__,
                seed=request.seed, recent_errors=self._recent_summaries(),
            )

    def _policy_for(self, request: GenerationRequest) -> RetryPolicy:
        changes: dict[str, Any] = {}
        if request.max_retries is not None:
            changes["max_retries"] = request.max_retries
        if request.timeout_ms is not None:
            changes["timeout_ms"] = request.timeout_ms
        return dataclasses.replace(self.policy, **changes)

    # ------------------------------------------------------------------
    # Tier attempts
    # ------------------------------------------------------------------

    async def _call_upstream(self, request: GenerationRequest, feedback: list[str] | None) -> UnifiedLayeredDocument:
        if self.upstream is None:
            raise TierFailure("Upstream API generator not configured")
        raw = await self.upstream(request, feedback or None)
        if isinstance(raw, UnifiedLayeredDocument):
            return raw
        try:
            return UnifiedLayeredDocument.model_validate(raw)
        except ValidationError as exc:
            raise TierFailure(f"Schema validation failed: {exc.error_count()} error(s) in upstream document") from exc

    def _checked(
        self, document: UnifiedLayeredDocument, validator: DocumentValidator, tier: str, feedback: list[str] | None
    ) -> tuple[UnifiedLayeredDocument, ValidationReport]:
        """Validate with auto-fix, then re-validate whatever auto-fix produced."""
        report = validator.validate(document, auto_fix=True)
        if report.fixed_document is not None:
            logger.debug("%s: auto-fix applied, re-validating", tier)
            document = report.fixed_document
            report = validator.validate(document, auto_fix=False).model_copy(update={"auto_fix_applied": True})
        if not report.success:
            if feedback is not None:
                feedback[:] = validator.generate_model_feedback(report)
            raise TierFailure("Validation failed: " + "; ".join(report.error_messages()[:3]), tier)
        return document, report

    async def _attempt_unified(self, request: GenerationRequest, feedback: list[str]) -> _TierOutput:
        document = await self._call_upstream(request, list(feedback))
        document, report = self._checked(document, self.validator, UNIFIED_LAYERED, feedback)
        return _TierOutput(
            document=document,
            report=report,
            description=f'Unified layered generation for: "{request.prompt}"',
            palette=normalize_palette(request.palette, document_palette(document)),
            seed=request.seed,
        )

    async def _attempt_layered_only(self, request: GenerationRequest, feedback: list[str]) -> _TierOutput:
        document = await self._call_upstream(request, [*feedback, LAYERED_ONLY_HINT])
        document = strip_layout(document)
        document, report = self._checked(document, self.layered_validator, LAYERED_ONLY, feedback)
        return _TierOutput(
            document=document,
            report=report,
            description=f'Layered generation for: "{request.prompt}"',
            palette=normalize_palette(request.palette, document_palette(document)),
            seed=request.seed,
        )

    async def _attempt_rule_based(self, request: GenerationRequest) -> _TierOutput:
        output = self.rule_based.generate(request)
        document, report = self._checked(output.document, self.validator, RULE_BASED, None)
        return _TierOutput(
            document=document,
            report=report,
            description=f'Rule-based {output.template} for: "{request.prompt}"',
            palette=output.colors,
            seed=output.seed,
        )

    # ------------------------------------------------------------------
    # Response
    # ------------------------------------------------------------------

    def _build_response(
        self,
        request: GenerationRequest,
        config: CanvasConfig,
        tier: str,
        output: _TierOutput,
        warnings: list[str],
    ) -> GenerationResponse:
        width = request.size.width if request.size else config.width
        height = request.size.height if request.size else config.height
        svg = render_document(output.document, display_width=width, display_height=height)

        layers = []
        for entry in self.analyzer.generate_layer_metadata(output.document):
            bounds = entry["bounds"]
            layers.append(LayerInfo(
                id=entry["id"],
                label=entry["label"],
                bounds=LayerBounds(**bounds.to_dict()) if bounds is not None else None,
            ))

        notes = list(warnings)
        if output.report.auto_fix_applied:
            notes.append("Auto-fix applied to generated document")
        notes += output.report.warning_messages()

        return GenerationResponse(
            svg=svg,
            meta=GenerationMeta(
                width=width,
                height=height,
                view_box=config.view_box,
                palette=output.palette,
                description=output.description,
                seed=output.seed,
            ),
            layers=layers,
            warnings=notes,
            errors=[],
            method=tier,
            document=output.document.to_wire(),
        )

    # ------------------------------------------------------------------
    # Error log
    # ------------------------------------------------------------------

    def _recent_summaries(self, limit: int = 5) -> list[str]:
        if not self.include_error_details:
            return []
        return [entry.summary() for entry in list(self._error_log)[-limit:]]

    def get_error_stats(self) -> dict[str, Any]:
        entries = list(self._error_log)
        by_type = Counter(entry.error_class.value for entry in entries)
        return {
            "total_errors": len(entries),
            "errors_by_type": dict(by_type),
            "recent_errors": [entry.to_dict() for entry in entries[-10:]],
            "average_attempts": sum(e.attempt for e in entries) / len(entries) if entries else 0.0,
        }

    def clear_error_log(self) -> None:
        self._error_log.clear()


def strip_layout(document: UnifiedLayeredDocument) -> UnifiedLayeredDocument:
    """Copy of the document with every layout specification removed."""
    stripped = document.model_copy(deep=True)
    stripped.layout = None
    for layer in stripped.layers:
        layer.layout = None
        for path in layer.paths:
            path.layout = None
    return stripped


def document_palette(document: UnifiedLayeredDocument, limit: int = 8) -> list[str]:
    """Distinct paint colors in document order."""
    colors: list[str] = []
    for _, path in document.iter_paths():
        for paint in (path.style.fill, path.style.stroke):
            if paint and paint != "none" and paint not in colors:
                colors.append(paint)
    return colors[:limit]
