"""Resource lifecycle handlers.

Translate host events into orchestrator calls:

  - created:   classify the new resource if it is ungrouped.
  - updated:   only when the URL changed on the active, ungrouped resource;
               URL changes on background resources are logged and ignored.
  - activated: fetch the resource from the ResourceSource and classify it if
               ungrouped.

Handlers never raise; errors are logged so one bad event cannot stop the
host's event loop.
"""

from __future__ import annotations

from typing import Optional

from tabgrouper.engine.orchestrator import GroupingOrchestrator
from tabgrouper.groups.protocol import ResourceSource
from tabgrouper.models.resource import Resource
from tabgrouper.utils.logger import get_logger

logger = get_logger(__name__)


class ResourceEventHandler:
    """Routes resource events to a GroupingOrchestrator."""

    def __init__(
        self,
        orchestrator: GroupingOrchestrator,
        resources: Optional[ResourceSource] = None,
    ) -> None:
        self._orchestrator = orchestrator
        self._resources = resources

    async def on_created(self, resource: Resource) -> bool:
        if resource.is_grouped:
            return False
        return await self._dispatch(resource, "created")

    async def on_updated(self, resource: Resource, url_changed: bool = True) -> bool:
        if not url_changed or resource.is_grouped:
            return False
        if not resource.active:
            logger.debug(
                "URL changed on background resource — not processing",
                resource_id=resource.id,
            )
            return False
        logger.debug("URL changed on active resource", resource_id=resource.id, url=resource.url)
        return await self._dispatch(resource, "updated")

    async def on_activated(self, resource_id: int) -> bool:
        if self._resources is None:
            logger.warning("No resource source — cannot handle activation", resource_id=resource_id)
            return False
        try:
            resource = await self._resources.get_resource(resource_id)
        except Exception as exc:  # noqa: BLE001
            logger.error(
                "Error looking up activated resource",
                resource_id=resource_id,
                error=str(exc),
            )
            return False
        if resource is None:
            logger.debug("Activated resource not found", resource_id=resource_id)
            return False
        if resource.is_grouped:
            return False
        return await self._dispatch(resource, "activated")

    async def _dispatch(self, resource: Resource, event: str) -> bool:
        try:
            return await self._orchestrator.classify_and_assign(resource)
        except Exception as exc:  # noqa: BLE001
            logger.error(
                "Error handling resource event",
                event=event,
                resource_id=resource.id,
                error=str(exc),
                error_type=type(exc).__name__,
            )
            return False
