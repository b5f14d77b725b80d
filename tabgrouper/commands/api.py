"""Command API endpoints for tabgrouper.

All endpoints are unauthenticated (localhost binding is the security boundary).
Uses app.state.orchestrator, app.state.events and app.state.backend.

Routes:
    GET    /patterns               — list manual patterns
    POST   /patterns               — add manual pattern
    DELETE /patterns               — remove manual pattern (pattern + group_name)
    GET    /auto-patterns          — list auto-pattern templates
    POST   /auto-patterns          — add auto-pattern template
    DELETE /auto-patterns          — remove auto-pattern template
    GET    /auto-patterns/enabled  — auto-patterns enabled flag
    PUT    /auto-patterns/enabled  — set auto-patterns enabled flag
    POST   /group-existing         — bulk group every ungrouped resource
    POST   /refresh                — reload settings from storage
    GET    /classify               — preview classification of a URL (no assignment)
    GET    /groups                 — groups known to the in-memory backend
    GET    /logs                   — recent log lines (newest first)
    DELETE /logs                   — clear recent log lines
    POST   /events/created         — resource created
    POST   /events/updated         — resource URL changed
    POST   /events/activated       — resource became active

Mutations respond first; when engine.regroup_on_change is set, bulk grouping
then runs as a background task so a slow host never delays the response.
"""

from __future__ import annotations

from typing import Any, Optional

from fastapi import APIRouter, BackgroundTasks, HTTPException, Request
from fastapi.responses import JSONResponse
from pydantic import BaseModel, Field

from tabgrouper.engine.errors import InvalidRegex, InvalidTemplate, InvalidUrl
from tabgrouper.engine.orchestrator import GroupingOrchestrator
from tabgrouper.models.classification import Matched
from tabgrouper.models.patterns import GroupColor
from tabgrouper.models.resource import Resource
from tabgrouper.utils.logger import clear_recent_logs, get_logger, get_recent_logs

logger = get_logger(__name__)

router = APIRouter(tags=["commands"])


# ─── Request Models ───────────────────────────────────────────────────────────


class ManualPatternRequest(BaseModel):
    """Body for POST /patterns."""

    pattern: str = Field(min_length=1)
    group_name: str = Field(min_length=1)
    color: Optional[GroupColor] = None


class RemoveManualPatternRequest(BaseModel):
    """Body for DELETE /patterns. Both fields must equal the stored entry."""

    pattern: str
    group_name: str


class TemplateRequest(BaseModel):
    """Body for POST and DELETE /auto-patterns."""

    template: str


class EnabledRequest(BaseModel):
    """Body for PUT /auto-patterns/enabled."""

    enabled: bool


class ResourceModel(BaseModel):
    """A resource as reported by the host."""

    id: int
    url: Optional[str] = None
    current_group: Optional[str] = None
    scope: Optional[int] = None
    active: bool = False

    def to_resource(self) -> Resource:
        return Resource(
            id=self.id,
            url=self.url,
            current_group=self.current_group,
            scope=self.scope,
            active=self.active,
        )


class ResourceUpdatedRequest(ResourceModel):
    """Body for POST /events/updated."""

    url_changed: bool = True


class ResourceActivatedRequest(BaseModel):
    """Body for POST /events/activated."""

    resource_id: int


# ─── Helpers ──────────────────────────────────────────────────────────────────


def _require_ready(request: Request) -> None:
    """Raise HTTP 503 if the engine is not ready."""
    if not getattr(request.app.state, "ready", False):
        raise HTTPException(
            status_code=503,
            detail={"status": "starting", "message": "tabgrouper is starting up"},
        )


def _orchestrator(request: Request) -> GroupingOrchestrator:
    _require_ready(request)
    return request.app.state.orchestrator


def _rejected(exc: Exception) -> JSONResponse:
    return JSONResponse(status_code=422, content={"success": False, "error": str(exc)})


def _schedule_regroup(request: Request, background: BackgroundTasks) -> None:
    config = getattr(request.app.state, "config", None)
    if config is not None and not config.engine.regroup_on_change:
        return
    background.add_task(request.app.state.orchestrator.group_existing)


def _track(request: Request, resource: Resource) -> None:
    backend = getattr(request.app.state, "backend", None)
    if backend is not None and hasattr(backend, "track"):
        backend.track(resource)


# ─── Manual patterns ──────────────────────────────────────────────────────────


@router.get("/patterns")
async def list_patterns(request: Request) -> dict[str, Any]:
    orchestrator = _orchestrator(request)
    return {
        "success": True,
        "patterns": [
            {
                "pattern": p.pattern,
                "group_name": p.group_name,
                "color": p.color.value if p.color else None,
            }
            for p in orchestrator.manual_patterns()
        ],
    }


@router.post("/patterns", response_model=None)
async def add_pattern(
    body: ManualPatternRequest,
    request: Request,
    background: BackgroundTasks,
) -> dict[str, Any] | JSONResponse:
    orchestrator = _orchestrator(request)
    try:
        orchestrator.add_manual_pattern(body.pattern, body.group_name, body.color)
    except (InvalidRegex, ValueError) as exc:
        logger.warning("Rejected manual pattern", pattern=body.pattern, error=str(exc))
        return _rejected(exc)
    _schedule_regroup(request, background)
    return {"success": True}


@router.delete("/patterns")
async def remove_pattern(body: RemoveManualPatternRequest, request: Request) -> dict[str, Any]:
    orchestrator = _orchestrator(request)
    removed = orchestrator.remove_manual_pattern(body.pattern, body.group_name)
    return {"success": removed}


# ─── Auto-pattern templates ───────────────────────────────────────────────────


@router.get("/auto-patterns")
async def list_templates(request: Request) -> dict[str, Any]:
    orchestrator = _orchestrator(request)
    return {"success": True, "templates": orchestrator.auto_pattern_templates()}


@router.post("/auto-patterns", response_model=None)
async def add_template(
    body: TemplateRequest,
    request: Request,
    background: BackgroundTasks,
) -> dict[str, Any] | JSONResponse:
    orchestrator = _orchestrator(request)
    try:
        added = orchestrator.add_auto_pattern(body.template)
    except InvalidTemplate as exc:
        logger.warning("Rejected auto-pattern template", template=body.template, error=str(exc))
        return _rejected(exc)
    if not added:
        return {"success": False, "error": "Template already exists"}
    if orchestrator.auto_patterns_enabled:
        _schedule_regroup(request, background)
    return {"success": True}


@router.delete("/auto-patterns")
async def remove_template(
    body: TemplateRequest,
    request: Request,
    background: BackgroundTasks,
) -> dict[str, Any]:
    orchestrator = _orchestrator(request)
    removed = orchestrator.remove_auto_pattern(body.template)
    if removed and orchestrator.auto_patterns_enabled:
        _schedule_regroup(request, background)
    return {"success": removed}


@router.get("/auto-patterns/enabled")
async def get_enabled(request: Request) -> dict[str, Any]:
    orchestrator = _orchestrator(request)
    return {"success": True, "enabled": orchestrator.auto_patterns_enabled}


@router.put("/auto-patterns/enabled")
async def set_enabled(
    body: EnabledRequest,
    request: Request,
    background: BackgroundTasks,
) -> dict[str, Any]:
    orchestrator = _orchestrator(request)
    orchestrator.set_auto_patterns_enabled(body.enabled)
    if body.enabled:
        _schedule_regroup(request, background)
    return {"success": True, "enabled": body.enabled}


# ─── Bulk grouping / refresh / preview ────────────────────────────────────────


@router.post("/group-existing")
async def group_existing(request: Request) -> dict[str, Any]:
    orchestrator = _orchestrator(request)
    try:
        grouped = await orchestrator.group_existing()
    except Exception as exc:  # noqa: BLE001
        logger.error("Bulk grouping failed", error=str(exc), error_type=type(exc).__name__)
        return {"success": False, "error": str(exc)}
    return {"success": True, "grouped_count": grouped}


@router.post("/refresh")
async def refresh(request: Request) -> dict[str, Any]:
    orchestrator = _orchestrator(request)
    return {"success": orchestrator.refresh()}


@router.get("/classify")
async def classify(url: str, request: Request) -> dict[str, Any]:
    orchestrator = _orchestrator(request)
    if orchestrator.is_excluded(url):
        return {"success": True, "matched": False, "excluded": True}
    try:
        result = orchestrator.classify_url(url)
    except InvalidUrl as exc:
        return {"success": False, "error": str(exc)}
    if isinstance(result, Matched):
        return {
            "success": True,
            "matched": True,
            "group_name": result.group_name,
            "color": result.color.value if result.color else None,
            "source": result.source.value,
        }
    return {"success": True, "matched": False}


@router.get("/groups")
async def list_groups(request: Request) -> dict[str, Any]:
    _require_ready(request)
    backend = getattr(request.app.state, "backend", None)
    if backend is None or not hasattr(backend, "list_groups"):
        return {"success": False, "error": "Group listing not supported by this host"}
    return {
        "success": True,
        "groups": [
            {
                "id": g.id,
                "title": g.title,
                "color": g.color.value,
                "scope": g.scope,
                "members": backend.members(g.id),
            }
            for g in backend.list_groups()
        ],
    }


# ─── Logs ─────────────────────────────────────────────────────────────────────


@router.get("/logs")
async def get_logs() -> dict[str, Any]:
    return {"success": True, "logs": get_recent_logs()}


@router.delete("/logs")
async def clear_logs() -> dict[str, Any]:
    clear_recent_logs()
    logger.info("Logs cleared by request")
    return {"success": True}


# ─── Resource events ──────────────────────────────────────────────────────────


@router.post("/events/created")
async def resource_created(body: ResourceModel, request: Request) -> dict[str, Any]:
    _require_ready(request)
    resource = body.to_resource()
    _track(request, resource)
    grouped = await request.app.state.events.on_created(resource)
    return {"success": True, "grouped": grouped}


@router.post("/events/updated")
async def resource_updated(body: ResourceUpdatedRequest, request: Request) -> dict[str, Any]:
    _require_ready(request)
    resource = body.to_resource()
    _track(request, resource)
    grouped = await request.app.state.events.on_updated(resource, url_changed=body.url_changed)
    return {"success": True, "grouped": grouped}


@router.post("/events/activated")
async def resource_activated(body: ResourceActivatedRequest, request: Request) -> dict[str, Any]:
    _require_ready(request)
    grouped = await request.app.state.events.on_activated(body.resource_id)
    return {"success": True, "grouped": grouped}
