"""PatternStore: the ordered manual patterns and auto-pattern templates.

Insertion order is precedence: the first manual pattern added is the first
tested, likewise for templates. The store owns no cache; instead it notifies
subscribers synchronously after every mutation, and the orchestrator
subscribes its cache invalidation so no stale result survives a change.
"""

from __future__ import annotations

from typing import Callable, Optional

from tabgrouper.models.patterns import AutoPatternTemplate, ManualPattern, Settings
from tabgrouper.utils.logger import get_logger

logger = get_logger(__name__)

ChangeListener = Callable[[], None]


class PatternStore:
    """Holds the engine's pattern configuration.

    Readers get tuple snapshots; only the mutators below change state, and each
    mutator that changes something calls every subscribed listener before it
    returns.
    """

    def __init__(self, settings: Optional[Settings] = None) -> None:
        settings = settings or Settings()
        self._manual: list[ManualPattern] = list(settings.manual_patterns)
        self._auto: list[AutoPatternTemplate] = list(settings.auto_patterns)
        self._auto_enabled: bool = settings.auto_patterns_enabled
        self._listeners: list[ChangeListener] = []

    # ── Change notification ───────────────────────────────────────────────────

    def subscribe(self, listener: ChangeListener) -> None:
        """Register a callable run synchronously after every mutation."""
        self._listeners.append(listener)

    def _changed(self, reason: str) -> None:
        logger.debug("Pattern store changed", reason=reason)
        for listener in self._listeners:
            listener()

    # ── Read API ──────────────────────────────────────────────────────────────

    @property
    def manual_patterns(self) -> tuple[ManualPattern, ...]:
        return tuple(self._manual)

    @property
    def auto_patterns(self) -> tuple[AutoPatternTemplate, ...]:
        return tuple(self._auto)

    @property
    def auto_patterns_enabled(self) -> bool:
        return self._auto_enabled

    def templates(self) -> list[str]:
        """Original template strings, in precedence order."""
        return [p.template for p in self._auto]

    def snapshot(self) -> Settings:
        """Current configuration as a Settings object (lists are copies)."""
        return Settings(
            auto_patterns_enabled=self._auto_enabled,
            manual_patterns=list(self._manual),
            auto_patterns=list(self._auto),
        )

    # ── Manual patterns ───────────────────────────────────────────────────────

    def add_manual(self, pattern: ManualPattern) -> None:
        """Append a manual pattern. Duplicates are kept; the first one wins."""
        self._manual.append(pattern)
        self._changed("manual pattern added")

    def remove_manual(self, pattern: str, group_name: str) -> bool:
        """Remove every manual pattern equal to ``pattern`` + ``group_name``.

        Returns True if at least one entry was removed.
        """
        kept = [
            p for p in self._manual
            if not (p.pattern == pattern and p.group_name == group_name)
        ]
        if len(kept) == len(self._manual):
            return False
        self._manual = kept
        self._changed("manual pattern removed")
        return True

    # ── Auto-pattern templates ────────────────────────────────────────────────

    def add_auto(self, template: AutoPatternTemplate) -> bool:
        """Append a compiled template.

        Returns False, without changing anything, when a template with the same
        original string is already registered.
        """
        if template in self._auto:
            return False
        self._auto.append(template)
        self._changed("auto-pattern added")
        return True

    def remove_auto(self, template: str) -> bool:
        """Remove the template whose original string equals ``template``."""
        kept = [p for p in self._auto if p.template != template]
        if len(kept) == len(self._auto):
            return False
        self._auto = kept
        self._changed("auto-pattern removed")
        return True

    def set_auto_enabled(self, enabled: bool) -> None:
        self._auto_enabled = bool(enabled)
        self._changed("auto-patterns toggled")

    # ── Bulk replace ──────────────────────────────────────────────────────────

    def replace(self, settings: Settings) -> None:
        """Swap in a freshly loaded configuration (startup and refresh)."""
        self._manual = list(settings.manual_patterns)
        self._auto = list(settings.auto_patterns)
        self._auto_enabled = settings.auto_patterns_enabled
        self._changed("settings replaced")
