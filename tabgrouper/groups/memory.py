"""In-memory group backend.

Implements both GroupAssigner and ResourceSource. Groups live in a scope (the
window a resource belongs to) and are looked up by exact title within that
scope, so repeated assignments to the same name reuse one group.
"""

from __future__ import annotations

import dataclasses
from dataclasses import dataclass
from typing import Optional, Union

from tabgrouper.constants import DEFAULT_GROUP_COLOR
from tabgrouper.models.patterns import GroupColor
from tabgrouper.models.resource import GroupAssignment, Resource
from tabgrouper.utils.logger import get_logger
from tabgrouper.utils.ulid import generate_ulid

logger = get_logger(__name__)


@dataclass
class Group:
    id: str
    title: str
    color: GroupColor
    scope: int


class InMemoryGroupBackend:
    """Reference host: resources and groups held in dictionaries.

    Resources reported without a scope belong to ``current_scope``.
    """

    def __init__(
        self,
        default_color: Union[GroupColor, str] = DEFAULT_GROUP_COLOR,
        current_scope: int = 0,
    ) -> None:
        self.default_color = GroupColor(default_color)
        self.current_scope = current_scope
        self._resources: dict[int, Resource] = {}
        self._groups: dict[str, Group] = {}

    # ── Resources ─────────────────────────────────────────────────────────────

    def track(self, resource: Resource) -> Resource:
        """Insert or update a resource; returns the stored copy."""
        if resource.id is None:
            raise ValueError("resource id is required")
        stored = dataclasses.replace(resource)
        if stored.scope is None:
            stored.scope = self.current_scope
        self._resources[stored.id] = stored
        return dataclasses.replace(stored)

    def forget(self, resource_id: int) -> bool:
        return self._resources.pop(resource_id, None) is not None

    async def list_resources(self) -> list[Resource]:
        return [dataclasses.replace(r) for r in self._resources.values()]

    async def get_resource(self, resource_id: int) -> Optional[Resource]:
        resource = self._resources.get(resource_id)
        return dataclasses.replace(resource) if resource is not None else None

    # ── Groups ────────────────────────────────────────────────────────────────

    def list_groups(self) -> list[Group]:
        return list(self._groups.values())

    def find_group(self, title: str, scope: int) -> Optional[Group]:
        for group in self._groups.values():
            if group.title == title and group.scope == scope:
                return group
        return None

    def members(self, group_id: str) -> list[int]:
        return [r.id for r in self._resources.values() if r.current_group == group_id]

    async def assign(
        self,
        resource_id: int,
        group_name: str,
        color: Optional[GroupColor] = None,
    ) -> GroupAssignment:
        """Assign a tracked resource to ``group_name`` in its scope.

        Raises:
            LookupError: the resource is not tracked.
        """
        resource = self._resources.get(resource_id)
        if resource is None:
            raise LookupError(f"unknown resource {resource_id!r}")

        scope = resource.scope if resource.scope is not None else self.current_scope
        group = self.find_group(group_name, scope)
        created = group is None
        if group is None:
            group = Group(
                id=generate_ulid(),
                title=group_name,
                color=color or self.default_color,
                scope=scope,
            )
            self._groups[group.id] = group
            logger.info(
                "Group created",
                group_id=group.id,
                group_name=group_name,
                color=group.color.value,
                scope=scope,
            )

        resource.current_group = group.id
        return GroupAssignment(group_id=group.id, group_name=group_name, created=created)
