"""Classification results.

A classification either names a group (``Matched``) or explicitly says that
nothing matched (``NO_MATCH``). ``NO_MATCH`` is a real value so the cache can
store negative results; ``None`` is reserved for "not cached".
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Optional, Union

from tabgrouper.models.patterns import GroupColor


class MatchSource(str, Enum):
    """Which pattern list produced a match."""

    MANUAL = "manual"
    AUTO = "auto"


@dataclass(frozen=True)
class Matched:
    """A domain classified into ``group_name``.

    Fields:
        group_name: Name of the group to assign into.
        color:      Colour for a newly created group (None for auto-pattern matches).
        source:     MANUAL or AUTO; only AUTO results populate the domain cache.
    """

    group_name: str
    color: Optional[GroupColor] = None
    source: MatchSource = MatchSource.MANUAL

    @property
    def matched(self) -> bool:
        return True


@dataclass(frozen=True)
class NoMatch:
    """No manual pattern or template matched."""

    @property
    def matched(self) -> bool:
        return False


NO_MATCH = NoMatch()

ClassificationResult = Union[Matched, NoMatch]
