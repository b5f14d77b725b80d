"""Settings sources and sinks.

A SettingsStore only moves raw mappings in and out of storage; parsing and
defaults live in parser.py so every store behaves the same way.
"""

from __future__ import annotations

import copy
import os
import tempfile
from typing import Any, Optional, Protocol, runtime_checkable

import yaml

from tabgrouper.engine.errors import SettingsError
from tabgrouper.utils.logger import get_logger

logger = get_logger(__name__)


@runtime_checkable
class SettingsStore(Protocol):
    """Configuration source (read at startup and on refresh) and sink (written on every mutation)."""

    def load_raw(self) -> Optional[dict[str, Any]]:
        """Return the stored mapping, or None when nothing has been stored yet.

        Raises:
            SettingsError: storage exists but cannot be read or parsed.
        """
        ...

    def save_raw(self, raw: dict[str, Any]) -> None:
        """Persist ``raw``, replacing whatever was stored."""
        ...


class YamlSettingsStore:
    """Settings kept in a single YAML file.

    Writes go to a temporary file in the same directory which then replaces the
    target, so a crash mid-write never leaves a truncated settings file.
    """

    def __init__(self, path: str) -> None:
        self.path = os.path.expanduser(path)

    def load_raw(self) -> Optional[dict[str, Any]]:
        try:
            with open(self.path) as fh:
                raw = yaml.safe_load(fh)
        except FileNotFoundError:
            logger.debug("Settings file not found — using defaults", path=self.path)
            return None
        except yaml.YAMLError as exc:
            raise SettingsError(self.path, f"YAML parse error: {exc}") from exc
        except OSError as exc:
            raise SettingsError(self.path, str(exc)) from exc

        if raw is None:
            return None
        if not isinstance(raw, dict):
            raise SettingsError(self.path, "settings file is not a YAML mapping")
        return raw

    def save_raw(self, raw: dict[str, Any]) -> None:
        directory = os.path.dirname(self.path) or "."
        os.makedirs(directory, exist_ok=True)
        fd, tmp_path = tempfile.mkstemp(prefix=".settings-", suffix=".yaml", dir=directory)
        try:
            with os.fdopen(fd, "w") as fh:
                yaml.safe_dump(raw, fh, sort_keys=False, default_flow_style=False)
            os.replace(tmp_path, self.path)
        except BaseException:
            if os.path.exists(tmp_path):
                os.unlink(tmp_path)
            raise
        logger.debug("Settings saved", path=self.path)


class MemorySettingsStore:
    """Settings kept in memory; ``saves`` counts writes for inspection."""

    def __init__(self, raw: Optional[dict[str, Any]] = None) -> None:
        self._raw = copy.deepcopy(raw)
        self.saves = 0

    def load_raw(self) -> Optional[dict[str, Any]]:
        return copy.deepcopy(self._raw)

    def save_raw(self, raw: dict[str, Any]) -> None:
        self._raw = copy.deepcopy(raw)
        self.saves += 1
