"""FastAPI app factory."""

from __future__ import annotations

import logging

from dotenv import load_dotenv
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from unisvg import __version__
from unisvg.config import settings
from unisvg.layout.constants import SCHEMA_VERSION

load_dotenv()

logging.basicConfig(
    level=getattr(logging, settings.unisvg_log_level.upper(), logging.DEBUG),
    format="%(asctime)s %(name)s %(levelname)s %(message)s",
)

logger = logging.getLogger(__name__)


def create_app() -> FastAPI:
    app = FastAPI(
        title="unisvg",
        description="Unified-layered SVG layout, validation and resilient generation engine",
        version=__version__,
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    from unisvg.api.router import api_router

    app.include_router(api_router)

    logger.info(
        "unisvg %s (%s): upstream %s, fallback %s, %d attempt(s) per tier, timeout %dms",
        __version__,
        SCHEMA_VERSION,
        "configured" if settings.anthropic_api_key else "not configured",
        "enabled" if settings.fallback_enabled else "disabled",
        max(1, settings.max_retries),
        settings.timeout_ms,
    )
    return app


app = create_app()
