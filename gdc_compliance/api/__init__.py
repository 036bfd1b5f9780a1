"""
FastAPI application factory and API package.

Run with:
    uvicorn gdc_compliance.api:app --reload --port 8000

Or via main.py:
    python -m gdc_compliance --serve
"""

from __future__ import annotations

import asyncio
import logging

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from gdc_compliance.api.routes import analysis_router, catalog_router, health_router
from gdc_compliance.api.websocket import AnalysisProgress
from gdc_compliance.catalog.loader import get_catalog
from gdc_compliance.config import get_settings

logger = logging.getLogger(__name__)


def create_app() -> FastAPI:
    """Application factory — create and configure the FastAPI instance."""
    settings = get_settings()

    application = FastAPI(
        title="GDC Compliance Analyzer API",
        description="Scores programme documents against the GDC education standards",
        version="0.1.0",
        docs_url="/docs",
        redoc_url="/redoc",
    )

    # CORS: allow the frontend (adjust origins in production)
    application.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # Register route groups (includes WebSocket at /api/analysis/ws/{run_id})
    application.include_router(health_router, tags=["Health"])
    application.include_router(catalog_router, prefix="/api/requirements", tags=["Catalog"])
    application.include_router(analysis_router, prefix="/api/analysis", tags=["Analysis"])

    @application.on_event("startup")
    async def startup():
        # Give the AnalysisProgress singleton the server's event loop
        # so background run threads can push WebSocket messages.
        AnalysisProgress.get().set_loop(asyncio.get_running_loop())
        # A broken catalog must stop the server from starting
        catalog = get_catalog()
        logger.info(f"Starting {settings.app_name} API ({len(catalog)} requirements)")

    return application


# Module-level instance for `uvicorn gdc_compliance.api:app`
app = create_app()
