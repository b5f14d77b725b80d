"""Shared constants for tabgrouper.

Tokens, defaults and limits used across the engine, settings and command
surface are defined here. Import from here rather than repeating literals.
"""

# ─── Auto-pattern template tokens ─────────────────────────────────────────────

# Placeholder whose matched domain label becomes the group name.
NAME_PLACEHOLDER: str = ":name"

# Wildcard matching exactly one domain label (no dots).
WILDCARD_TOKEN: str = "*"

# Regex fragment for "one domain label": one or more non-dot characters.
LABEL_FRAGMENT: str = "[^.]+"

# Capture group index of the name in every compiled template. Templates hold
# exactly one capturing group, so this never varies.
NAME_CAPTURE_POSITION: int = 1

# Template used when no templates are stored, or when a stored template
# fails to recompile on load: the name placeholder plus one trailing label.
DEFAULT_AUTO_TEMPLATE: str = NAME_PLACEHOLDER + "." + WILDCARD_TOKEN

# ─── Resource filtering ───────────────────────────────────────────────────────

# URLs starting with any of these prefixes are host-internal pages and are
# never classified.
DEFAULT_EXCLUDED_SCHEMES: tuple[str, ...] = ("chrome://", "brave://")

# ─── Groups ───────────────────────────────────────────────────────────────────

# Colour given to a newly created group when the match carries none.
DEFAULT_GROUP_COLOR: str = "grey"

# ─── Logging ──────────────────────────────────────────────────────────────────

# Number of rendered log lines kept in the recent-log buffer (newest first).
RECENT_LOG_LIMIT: int = 100

# Bulk grouping runs slower than this (ms) are logged at WARNING.
SLOW_OPERATION_MS: float = 250.0
