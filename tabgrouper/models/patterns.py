"""Pattern and settings dataclasses.

ManualPattern and AutoPatternTemplate hold both the human-authored source
string and the compiled google-re2 matcher. Equality ignores the
compiled matcher: two manual patterns are equal when source and group name
agree, two templates are equal when their original template strings agree.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Optional

from tabgrouper.constants import NAME_CAPTURE_POSITION


class GroupColor(str, Enum):
    """Colours a group may be created with."""

    GREY = "grey"
    BLUE = "blue"
    RED = "red"
    YELLOW = "yellow"
    GREEN = "green"
    PINK = "pink"
    PURPLE = "purple"
    CYAN = "cyan"
    ORANGE = "orange"

    @classmethod
    def parse(cls, value: Optional[str]) -> Optional["GroupColor"]:
        """Return the colour named by ``value`` or None when absent.

        Raises:
            ValueError: ``value`` is set but is not a known colour.
        """
        if value is None or value == "":
            return None
        if isinstance(value, cls):
            return value
        return cls(str(value).lower())


@dataclass
class ManualPattern:
    """User-supplied regular expression mapped to an explicit group.

    Duplicates are allowed; the first one registered wins at classification time.
    """

    pattern: str
    group_name: str
    color: Optional[GroupColor] = None
    regex: Any = field(default=None, compare=False, repr=False)


@dataclass
class AutoPatternTemplate:
    """Compiled auto-pattern template.

    INVARIANT: ``template`` contains exactly one ``:name`` placeholder, and
    ``regex`` holds exactly one capturing group at ``name_position``.
    """

    template: str
    regex: Any = field(default=None, compare=False, repr=False)
    name_position: int = field(default=NAME_CAPTURE_POSITION, compare=False)


@dataclass
class Settings:
    """Durable pattern configuration, loaded at startup and on refresh."""

    auto_patterns_enabled: bool = True
    manual_patterns: list[ManualPattern] = field(default_factory=list)
    auto_patterns: list[AutoPatternTemplate] = field(default_factory=list)
