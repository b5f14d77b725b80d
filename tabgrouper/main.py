"""tabgrouper FastAPI application factory + lifespan lifecycle.

This module implements:
  - create_app() — testable application factory
  - lifespan — @asynccontextmanager startup/shutdown sequence
  - /health router — delegated to tabgrouper/health.py
  - command router — delegated to tabgrouper/commands/api.py
  - app = create_app() — module-level instance for uvicorn

Startup sequence:
  1. load_config()                → app.state.config
  2. YamlSettingsStore            → configuration source/sink
  3. InMemoryGroupBackend         → app.state.backend (assigner + resource source)
  4. GroupingOrchestrator         → app.state.orchestrator; load_settings()
  5. ResourceEventHandler         → app.state.events
  6. app.state.ready = True

The engine is one explicitly constructed object owned by the app state; there
is no module-level engine singleton.
"""

from __future__ import annotations

import os
from contextlib import asynccontextmanager
from typing import AsyncGenerator

from fastapi import FastAPI, HTTPException, Request
from fastapi.responses import JSONResponse
from fastapi.routing import APIRouter

from tabgrouper import __version__
from tabgrouper.commands.api import router as command_router
from tabgrouper.config import Config, load_config
from tabgrouper.engine.orchestrator import GroupingOrchestrator
from tabgrouper.events import ResourceEventHandler
from tabgrouper.groups.memory import InMemoryGroupBackend
from tabgrouper.health import router as health_router
from tabgrouper.settings.store import YamlSettingsStore
from tabgrouper.utils.logger import configure_logging, get_logger

# ─── Logging Setup ────────────────────────────────────────────────────────────
DEBUG = os.getenv("DEBUG", "false").lower() == "true"
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO" if not DEBUG else "DEBUG")
JSON_LOGS = os.getenv("JSON_LOGS", "true").lower() == "true"

configure_logging(log_level=LOG_LEVEL, json_output=JSON_LOGS)
logger = get_logger(__name__)

root_router = APIRouter(tags=["root"])


@root_router.get("/")
async def root() -> dict[str, str]:
    """Root endpoint — service identity / discovery."""
    return {
        "service": "tabgrouper",
        "version": __version__,
        "health": "/health",
    }


def build_engine(config: Config) -> tuple[GroupingOrchestrator, InMemoryGroupBackend]:
    """Construct the orchestrator and its collaborators from ``config``.

    Settings are loaded before returning, so the engine is ready to classify.
    """
    backend = InMemoryGroupBackend(default_color=config.engine.default_color)
    orchestrator = GroupingOrchestrator(
        assigner=backend,
        resources=backend,
        settings_store=YamlSettingsStore(config.settings.path),
        excluded_schemes=config.engine.excluded_schemes,
    )
    orchestrator.load_settings()
    return orchestrator, backend


# ─── Lifespan ─────────────────────────────────────────────────────────────────


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Application lifespan — startup and shutdown sequence."""
    logger.info("tabgrouper starting up...")

    # load_config() raises SystemExit on an invalid config file.
    config: Config = load_config()
    app.state.config = config

    orchestrator, backend = build_engine(config)
    app.state.orchestrator = orchestrator
    app.state.backend = backend
    app.state.events = ResourceEventHandler(orchestrator, backend)

    app.state.ready = True
    logger.info(
        "tabgrouper ready",
        settings_path=config.settings.path,
        templates=orchestrator.auto_pattern_templates(),
    )

    yield

    logger.info("tabgrouper shutting down...")
    app.state.ready = False
    logger.info("tabgrouper shutdown complete")


# ─── Application Factory ──────────────────────────────────────────────────────


def create_app() -> FastAPI:
    """Create and configure the tabgrouper FastAPI application.

    Call this function directly in tests to get an isolated app instance:
        app = create_app()

    Returns:
        Configured FastAPI application with lifespan and routers.
    """
    _debug = os.getenv("DEBUG", "false").lower() == "true"

    application = FastAPI(
        title="tabgrouper",
        description="Classify URLs into named groups from patterns and auto-pattern templates",
        version=__version__,
        lifespan=lifespan,
        docs_url="/docs" if _debug else None,
        redoc_url="/redoc" if _debug else None,
        openapi_url="/openapi.json" if _debug else None,
    )

    # /health returns 503 for any request that arrives before startup completes.
    application.state.ready = False

    application.include_router(root_router)
    application.include_router(health_router)
    application.include_router(command_router)

    @application.exception_handler(HTTPException)
    async def http_exception_handler(
        request: Request, exc: HTTPException
    ) -> JSONResponse:
        logger.warning(
            "HTTP exception",
            status_code=exc.status_code,
            detail=exc.detail,
            path=str(request.url.path),
        )
        return JSONResponse(
            status_code=exc.status_code,
            content={"success": False, "error": exc.detail},
        )

    @application.exception_handler(Exception)
    async def unhandled_exception_handler(
        request: Request, exc: Exception
    ) -> JSONResponse:
        logger.error(
            "Unhandled exception",
            error=str(exc),
            error_type=type(exc).__name__,
            path=str(request.url.path),
        )
        return JSONResponse(
            status_code=500, content={"success": False, "error": "Internal server error"}
        )

    return application


# ─── Module-Level App (for uvicorn) ───────────────────────────────────────────

app = create_app()
