"""Health endpoint for tabgrouper.

GET /health — 503 until the lifespan has finished startup, 200 afterwards.
"""

from __future__ import annotations

from typing import Any

from fastapi import APIRouter, HTTPException, Request

router = APIRouter(tags=["health"])


@router.get("/health")
async def health(request: Request) -> dict[str, Any]:
    """Report readiness plus a small summary of the loaded configuration."""
    if not getattr(request.app.state, "ready", False):
        raise HTTPException(status_code=503, detail={"status": "starting"})

    orchestrator = request.app.state.orchestrator
    return {
        "status": "ok",
        "manual_patterns": len(orchestrator.manual_patterns()),
        "auto_patterns": len(orchestrator.auto_pattern_templates()),
        "auto_patterns_enabled": orchestrator.auto_patterns_enabled,
        "cache_generation": orchestrator.cache.generation,
    }
