"""Boundary protocols for the host environment.

The engine never creates groups or enumerates resources itself; it talks to
whatever implements these protocols (a browser bridge in production, the
in-memory backend in tests and in the bundled server).
"""

from __future__ import annotations

from typing import Optional, Protocol, runtime_checkable

from tabgrouper.models.patterns import GroupColor
from tabgrouper.models.resource import GroupAssignment, Resource


@runtime_checkable
class GroupAssigner(Protocol):
    """Group-assignment sink.

    ``assign()`` must be idempotent per scope: assigning to a group name that
    already exists in the resource's scope reuses that group instead of
    creating a second one. It may raise; the orchestrator catches and logs.
    """

    async def assign(
        self,
        resource_id: int,
        group_name: str,
        color: Optional[GroupColor] = None,
    ) -> GroupAssignment:
        """Put ``resource_id`` into the group titled ``group_name``, creating it if needed."""
        ...


@runtime_checkable
class ResourceSource(Protocol):
    """Resource enumeration collaborator."""

    async def list_resources(self) -> list[Resource]:
        """Snapshot of every current resource."""
        ...

    async def get_resource(self, resource_id: int) -> Optional[Resource]:
        """Current state of one resource, or None if it no longer exists."""
        ...
