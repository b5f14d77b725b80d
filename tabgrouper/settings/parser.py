"""Settings parsing and serialisation.

Raw layout (YAML or any mapping source)::

    auto_patterns_enabled: true
    manual_patterns:
      - pattern: 'github\\.com'
        group_name: GitHub
        color: purple
    auto_patterns:
      - template: ':name.*'

Parsing never raises. Missing keys take defaults, invalid manual patterns and
colours are skipped with a WARNING, and if any stored template fails to
recompile the template list falls back to the single default template.
Serialisation writes source strings only, never compiled expressions, so a
reload recompiles identically.
"""

from __future__ import annotations

from typing import Any

from tabgrouper.constants import DEFAULT_AUTO_TEMPLATE
from tabgrouper.engine.compiler import compile_manual_pattern, compile_template
from tabgrouper.engine.errors import InvalidRegex, InvalidTemplate
from tabgrouper.models.patterns import AutoPatternTemplate, GroupColor, ManualPattern, Settings
from tabgrouper.utils.logger import get_logger

logger = get_logger(__name__)


def default_auto_patterns() -> list[AutoPatternTemplate]:
    return [compile_template(DEFAULT_AUTO_TEMPLATE)]


def parse_settings(raw: Any) -> Settings:
    """Build a Settings object from a raw mapping (None means "nothing stored")."""
    if raw is None:
        return Settings(auto_patterns=default_auto_patterns())

    if not isinstance(raw, dict):
        logger.warning(
            "Settings root is not a mapping — using defaults",
            actual_type=type(raw).__name__,
        )
        return Settings(auto_patterns=default_auto_patterns())

    enabled = raw.get("auto_patterns_enabled", True)
    if not isinstance(enabled, bool):
        logger.warning(
            "auto_patterns_enabled is not a boolean — using default",
            value=enabled,
        )
        enabled = True

    return Settings(
        auto_patterns_enabled=enabled,
        manual_patterns=_parse_manual_patterns(raw.get("manual_patterns")),
        auto_patterns=_parse_auto_patterns(raw.get("auto_patterns")),
    )


def _parse_manual_patterns(raw_list: Any) -> list[ManualPattern]:
    if raw_list is None:
        return []
    if not isinstance(raw_list, list):
        logger.warning(
            "manual_patterns is not a list — ignoring",
            actual_type=type(raw_list).__name__,
        )
        return []

    patterns: list[ManualPattern] = []
    for i, item in enumerate(raw_list):
        if not isinstance(item, dict):
            logger.warning(
                "Manual pattern is not a mapping — skipping",
                index=i,
                actual_type=type(item).__name__,
            )
            continue

        color = item.get("color")
        try:
            color = GroupColor.parse(color)
        except ValueError:
            logger.warning("Unknown group colour — ignoring colour", index=i, color=color)
            color = None

        try:
            patterns.append(
                compile_manual_pattern(item.get("pattern"), item.get("group_name"), color)
            )
        except (InvalidRegex, ValueError) as exc:
            logger.warning(
                "Manual pattern is invalid — skipping",
                index=i,
                pattern=item.get("pattern"),
                error=str(exc),
            )
    return patterns


def _parse_auto_patterns(raw_list: Any) -> list[AutoPatternTemplate]:
    if raw_list is None:
        return default_auto_patterns()
    if not isinstance(raw_list, list):
        logger.warning(
            "auto_patterns is not a list — using default template",
            actual_type=type(raw_list).__name__,
        )
        return default_auto_patterns()

    templates: list[AutoPatternTemplate] = []
    for i, item in enumerate(raw_list):
        template = item.get("template") if isinstance(item, dict) else item
        try:
            compiled = compile_template(template)
        except InvalidTemplate as exc:
            logger.error(
                "Stored auto-pattern failed to compile — falling back to default template",
                index=i,
                template=template,
                error=str(exc),
            )
            return default_auto_patterns()
        if compiled in templates:
            logger.warning("Duplicate stored auto-pattern — skipping", template=template)
            continue
        templates.append(compiled)
    return templates


def serialize_settings(settings: Settings) -> dict[str, Any]:
    """Inverse of parse_settings: plain, YAML-safe values only."""
    manual: list[dict[str, Any]] = []
    for p in settings.manual_patterns:
        entry: dict[str, Any] = {"pattern": p.pattern, "group_name": p.group_name}
        if p.color is not None:
            entry["color"] = p.color.value
        manual.append(entry)

    return {
        "auto_patterns_enabled": settings.auto_patterns_enabled,
        "manual_patterns": manual,
        "auto_patterns": [{"template": t.template} for t in settings.auto_patterns],
    }
