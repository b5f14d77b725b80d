"""tabgrouper group collaborators.

Re-exports the public API:

    from tabgrouper.groups import GroupAssigner, ResourceSource, InMemoryGroupBackend

Layout:
    protocol.py — GroupAssigner + ResourceSource Protocols
    memory.py   — InMemoryGroupBackend (reference host: groups per scope, ULID ids)
"""

from tabgrouper.groups.memory import Group, InMemoryGroupBackend
from tabgrouper.groups.protocol import GroupAssigner, ResourceSource

__all__ = [
    "Group",
    "GroupAssigner",
    "InMemoryGroupBackend",
    "ResourceSource",
]
