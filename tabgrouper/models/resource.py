"""Resource snapshots and group assignment outcomes."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional


@dataclass
class Resource:
    """A groupable resource (a browser tab) as seen by the engine.

    Fields:
        id:            Resource identifier assigned by the host.
        url:           Current URL; None when the host has not reported one yet.
        current_group: Group identifier, or None when ungrouped.
        scope:         Scope the resource lives in (window id); groups are per scope.
        active:        True when this is the focused resource in its scope.
    """

    id: Optional[int]
    url: Optional[str] = None
    current_group: Optional[str] = None
    scope: Optional[int] = None
    active: bool = False

    @property
    def is_grouped(self) -> bool:
        return self.current_group is not None


@dataclass(frozen=True)
class GroupAssignment:
    """Outcome of one group-assignment request."""

    group_id: str
    group_name: str
    created: bool
