"""FastAPI dependency injection."""

from __future__ import annotations

from functools import lru_cache

from unisvg.cache import CacheService
from unisvg.config import settings
from unisvg.generation.orchestrator import GenerationOrchestrator
from unisvg.generation.retry import RetryPolicy
from unisvg.validation.validator import DocumentValidator


def get_settings():
    return settings


@lru_cache
def get_cache() -> CacheService:
    return CacheService(default_ttl=settings.cache_ttl_seconds)


def get_validator() -> DocumentValidator:
    return DocumentValidator()


@lru_cache
def get_orchestrator() -> GenerationOrchestrator:
    from unisvg.llm.client import generate_document

    return GenerationOrchestrator(
        upstream=generate_document,
        cache=get_cache(),
        policy=RetryPolicy(
            max_retries=settings.max_retries,
            base_delay_ms=settings.base_delay_ms,
            max_delay_ms=settings.max_delay_ms,
            timeout_ms=settings.timeout_ms,
        ),
        fallback_enabled=settings.fallback_enabled,
        include_error_details=settings.include_error_details,
        error_log_size=settings.error_log_size,
    )
