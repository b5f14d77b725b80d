"""Classifier: map a domain to a group name.

Precedence (user-observable, must not change):
  1. Manual patterns, in store order. The first whose expression is found in
     the domain wins and auto-patterns are never consulted.
  2. Auto-pattern templates, in store order, only when auto-patterns are
     enabled. The first template that fully matches wins; the captured label
     is normalised by upper-casing its first character only.
  3. Otherwise NO_MATCH.

The classifier reads the PatternStore on every call and holds no state of its
own. URL parsing and scheme filtering happen in the orchestrator; only bare
domains reach this module.
"""

from __future__ import annotations

from typing import Optional

from tabgrouper.engine.store import PatternStore
from tabgrouper.models.classification import (
    NO_MATCH,
    ClassificationResult,
    Matched,
    MatchSource,
)
from tabgrouper.models.patterns import ManualPattern
from tabgrouper.utils.logger import get_logger

logger = get_logger(__name__)


def capitalize_name(name: str) -> str:
    """Upper-case the first character of ``name``; leave the rest unchanged.

    ``"dev"`` → ``"Dev"``, ``"gitLab"`` → ``"GitLab"`` (not ``"Gitlab"``).
    """
    return name[:1].upper() + name[1:]


class Classifier:
    """Stateless classification over a borrowed PatternStore."""

    def __init__(self, store: PatternStore) -> None:
        self._store = store

    def match_manual(self, domain: str) -> Optional[ManualPattern]:
        """Return the first manual pattern found in ``domain``, or None."""
        for entry in self._store.manual_patterns:
            if entry.regex.search(domain):
                return entry
        return None

    def match_auto(self, domain: str) -> Optional[str]:
        """Return the normalised group name from the first matching template, or None.

        Does not check whether auto-patterns are enabled; ``classify()`` does.
        """
        for entry in self._store.auto_patterns:
            m = entry.regex.search(domain)
            if m is None:
                continue
            name = m.group(entry.name_position)
            if name:
                return capitalize_name(name)
        return None

    def classify(self, domain: str) -> ClassificationResult:
        """Classify ``domain``.

        Returns:
            ``Matched(group_name, color, MatchSource.MANUAL)`` for a manual match,
            ``Matched(name, None, MatchSource.AUTO)`` for a template match,
            ``NO_MATCH`` otherwise.
        """
        try:
            manual = self.match_manual(domain)
            if manual is not None:
                logger.debug(
                    "Domain matched manual pattern",
                    domain=domain,
                    pattern=manual.pattern,
                    group_name=manual.group_name,
                )
                return Matched(
                    group_name=manual.group_name,
                    color=manual.color,
                    source=MatchSource.MANUAL,
                )

            if self._store.auto_patterns_enabled:
                name = self.match_auto(domain)
                if name is not None:
                    logger.debug("Domain matched auto-pattern", domain=domain, group_name=name)
                    return Matched(group_name=name, color=None, source=MatchSource.AUTO)

        except Exception as exc:  # noqa: BLE001
            # Degrade to "nothing matched" rather than break the caller's event loop.
            logger.error(
                "Unexpected error in classify(), treating as no match",
                domain=domain,
                error=str(exc),
                error_type=type(exc).__name__,
            )
            return NO_MATCH

        logger.debug("No pattern matched", domain=domain)
        return NO_MATCH
