"""Error kinds raised by the classification engine.

None of these are fatal to the process:
  - InvalidTemplate / InvalidRegex reject a single add operation; state is unchanged.
  - InvalidUrl skips a single resource.
  - ExternalAssignmentFailure skips a single assignment; a batch carries on.
  - SettingsError keeps the previously loaded settings in place.
"""

from __future__ import annotations

from typing import Optional


class GroupingError(Exception):
    """Base class for tabgrouper engine errors."""


class InvalidTemplate(GroupingError):
    """Auto-pattern template cannot be compiled."""

    def __init__(self, template: object, reason: str) -> None:
        self.template = template
        self.reason = reason
        super().__init__(f"Invalid template {template!r}: {reason}")


class InvalidRegex(GroupingError):
    """Manual pattern is not a valid google-re2 expression."""

    def __init__(self, pattern: object, reason: str) -> None:
        self.pattern = pattern
        self.reason = reason
        super().__init__(f"Invalid pattern {pattern!r}: {reason}")


class InvalidUrl(GroupingError):
    """A resource URL has no parseable host name."""

    def __init__(self, url: object, reason: str = "no host name") -> None:
        self.url = url
        self.reason = reason
        super().__init__(f"Invalid URL {url!r}: {reason}")


class ExternalAssignmentFailure(GroupingError):
    """The group-assignment collaborator raised while assigning a resource."""

    def __init__(
        self,
        resource_id: object,
        group_name: str,
        cause: Optional[BaseException] = None,
    ) -> None:
        self.resource_id = resource_id
        self.group_name = group_name
        self.cause = cause
        detail = f": {cause}" if cause is not None else ""
        super().__init__(
            f"Could not assign resource {resource_id!r} to group {group_name!r}{detail}"
        )


class SettingsError(GroupingError):
    """Persisted settings exist but cannot be read or parsed."""

    def __init__(self, location: object, reason: str) -> None:
        self.location = location
        self.reason = reason
        super().__init__(f"Could not load settings from {location}: {reason}")
