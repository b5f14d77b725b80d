"""tabgrouper models package.

Defines the shared data contracts used by the classification engine, the
settings layer and the group-assignment collaborators:

  - patterns.py       — GroupColor, ManualPattern, AutoPatternTemplate, Settings
  - classification.py — Matched, NoMatch / NO_MATCH, ClassificationResult, MatchSource
  - resource.py       — Resource snapshot and GroupAssignment outcome

These models carry no behaviour beyond construction and equality; compiling
and matching live in tabgrouper.engine.
"""

from tabgrouper.models.classification import (
    NO_MATCH,
    ClassificationResult,
    Matched,
    MatchSource,
    NoMatch,
)
from tabgrouper.models.patterns import (
    AutoPatternTemplate,
    GroupColor,
    ManualPattern,
    Settings,
)
from tabgrouper.models.resource import GroupAssignment, Resource

__all__ = [
    "AutoPatternTemplate",
    "ClassificationResult",
    "GroupAssignment",
    "GroupColor",
    "ManualPattern",
    "MatchSource",
    "Matched",
    "NO_MATCH",
    "NoMatch",
    "Resource",
    "Settings",
]
