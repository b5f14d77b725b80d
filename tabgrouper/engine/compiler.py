"""Template and manual-pattern compilation.

Provides:
  - ``compile_template()``: turn an auto-pattern template such as
    ``":name.*.example.com"`` into an anchored google-re2 matcher.
  - ``compile_manual_pattern()``: validate and compile a user regular expression.

Template grammar — the template is a literal domain skeleton with two tokens:
  ``*``      one domain label (one or more non-dot characters), not captured
  ``:name``  one domain label, captured; its value becomes the group name

Every other character is literal. The compiled expression is anchored at both
ends so it must match the whole domain, never a substring.

IMPORT RULES:
  - ``import re2`` ONLY — patterns come from users and must run in linear time.
"""

from __future__ import annotations

from typing import Optional

import re2

from tabgrouper.constants import (
    LABEL_FRAGMENT,
    NAME_CAPTURE_POSITION,
    NAME_PLACEHOLDER,
    WILDCARD_TOKEN,
)
from tabgrouper.engine.errors import InvalidRegex, InvalidTemplate
from tabgrouper.models.patterns import AutoPatternTemplate, GroupColor, ManualPattern
from tabgrouper.utils.logger import get_logger

logger = get_logger(__name__)


def _tokenize(template: str) -> list[str]:
    """Split ``template`` into literal runs and placeholder / wildcard tokens."""
    tokens: list[str] = []
    literal: list[str] = []
    i = 0
    while i < len(template):
        if template.startswith(NAME_PLACEHOLDER, i):
            token = NAME_PLACEHOLDER
        elif template.startswith(WILDCARD_TOKEN, i):
            token = WILDCARD_TOKEN
        else:
            literal.append(template[i])
            i += 1
            continue
        if literal:
            tokens.append("".join(literal))
            literal = []
        tokens.append(token)
        i += len(token)
    if literal:
        tokens.append("".join(literal))
    return tokens


def compile_template(template: str) -> AutoPatternTemplate:
    """Compile an auto-pattern template.

    Args:
        template: Human-authored template, e.g. ``":name.*.example.com"``.

    Returns:
        AutoPatternTemplate whose ``regex`` fully matches a domain and captures
        the name label in group ``NAME_CAPTURE_POSITION``.

    Raises:
        InvalidTemplate: template is empty, not a string, or does not contain
            exactly one ``:name`` placeholder.
    """
    if not isinstance(template, str) or not template.strip():
        raise InvalidTemplate(template, "template must be a non-empty string")

    tokens = _tokenize(template)
    placeholders = tokens.count(NAME_PLACEHOLDER)
    if placeholders == 0:
        raise InvalidTemplate(template, f"template must contain a {NAME_PLACEHOLDER} placeholder")
    if placeholders > 1:
        raise InvalidTemplate(
            template, f"template must contain exactly one {NAME_PLACEHOLDER} placeholder"
        )

    parts: list[str] = []
    for token in tokens:
        if token == NAME_PLACEHOLDER:
            parts.append(f"({LABEL_FRAGMENT})")
        elif token == WILDCARD_TOKEN:
            parts.append(LABEL_FRAGMENT)
        else:
            parts.append(re2.escape(token))
    source = "^" + "".join(parts) + "$"

    try:
        regex = re2.compile(source)
    except re2.error as exc:
        raise InvalidTemplate(template, str(exc)) from exc

    logger.debug("Compiled auto-pattern template", template=template, regex=source)
    return AutoPatternTemplate(
        template=template,
        regex=regex,
        name_position=NAME_CAPTURE_POSITION,
    )


def compile_manual_pattern(
    pattern: str,
    group_name: str,
    color: Optional[GroupColor] = None,
) -> ManualPattern:
    """Compile a user-supplied regular expression into a ManualPattern.

    The expression is used unanchored (``search``), so ``github\\.com`` also
    matches ``gist.github.com``.

    Raises:
        InvalidRegex: pattern is empty, not a string, or not valid google-re2 syntax.
        ValueError: group_name is empty.
    """
    if not isinstance(pattern, str) or pattern == "":
        raise InvalidRegex(pattern, "pattern must be a non-empty string")
    if not isinstance(group_name, str) or not group_name.strip():
        raise ValueError("group_name must be a non-empty string")

    try:
        regex = re2.compile(pattern)
    except re2.error as exc:
        raise InvalidRegex(pattern, str(exc)) from exc

    return ManualPattern(pattern=pattern, group_name=group_name, color=color, regex=regex)
