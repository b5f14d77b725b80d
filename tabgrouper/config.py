"""Config loading for tabgrouper.

Reads `.tabgrouper/config.yaml` (or `~/.tabgrouper/config.yaml`).
Raises SystemExit on parse errors or a missing/unsupported `version` field.
If no config file is found, returns default values (safe to run without config).

This is the process configuration (where to listen, where settings live,
engine options). The user's patterns and templates are NOT stored here; they
live in the settings file managed by tabgrouper.settings.

Config search order:
  1. `config_path` argument (if provided — for testing or explicit override)
  2. TABGROUPER_CONFIG environment variable (if set)
  3. `.tabgrouper/config.yaml` (working directory — for development)
  4. `~/.tabgrouper/config.yaml` (home directory)

Environment variable overrides:
  TABGROUPER_PORT     — overrides server.port
  TABGROUPER_SETTINGS — overrides settings.path
  TABGROUPER_CONFIG   — sets an explicit config file path to try first
"""

from __future__ import annotations

import os
import sys
from dataclasses import dataclass, field
from typing import Optional

import yaml

from tabgrouper.constants import DEFAULT_EXCLUDED_SCHEMES, DEFAULT_GROUP_COLOR
from tabgrouper.models.patterns import GroupColor
from tabgrouper.utils.logger import get_logger

logger = get_logger(__name__)

# ─── Version constants ────────────────────────────────────────────────────────

SUPPORTED_CONFIG_VERSION = 1

SUPPORTED_VERSIONS: frozenset[int] = frozenset({1})

DEFAULT_CONFIG_PATHS = [
    ".tabgrouper/config.yaml",
    os.path.expanduser("~/.tabgrouper/config.yaml"),
]

DEFAULT_SETTINGS_PATH = "~/.tabgrouper/settings.yaml"


# ─── Dataclasses ─────────────────────────────────────────────────────────────


@dataclass
class ServerConfig:
    """Command-surface binding."""

    host: str = "127.0.0.1"
    port: int = 4343


@dataclass
class SettingsConfig:
    """Where the user's patterns and templates are persisted."""

    path: str = DEFAULT_SETTINGS_PATH


@dataclass
class EngineConfig:
    """Classification engine options.

    excluded_schemes:  URL prefixes never classified (host-internal pages).
    default_color:     colour for new groups whose match carries none.
    regroup_on_change: re-run bulk grouping after a successful pattern change.
    """

    excluded_schemes: list[str] = field(default_factory=lambda: list(DEFAULT_EXCLUDED_SCHEMES))
    default_color: str = DEFAULT_GROUP_COLOR
    regroup_on_change: bool = True


@dataclass
class Config:
    """Root configuration object populated from .tabgrouper/config.yaml.

    All fields have safe defaults — tabgrouper can start without any config file.
    """

    version: int = SUPPORTED_CONFIG_VERSION
    server: ServerConfig = field(default_factory=ServerConfig)
    settings: SettingsConfig = field(default_factory=SettingsConfig)
    engine: EngineConfig = field(default_factory=EngineConfig)
    path: Optional[str] = None  # Path to the loaded config file

    @classmethod
    def defaults(cls) -> "Config":
        """Return a fully-default Config (no file required)."""
        return cls()

    @classmethod
    def from_dict(cls, raw: dict, path: Optional[str] = None) -> "Config":
        """Construct Config from a parsed YAML dict.

        Merges user-supplied values onto defaults; unknown keys are silently ignored.

        Raises:
            SystemExit(1): On an unknown engine.default_color, a non-list
                           engine.excluded_schemes or a non-bool
                           engine.regroup_on_change.
        """
        # ── Engine ────────────────────────────────────────────────────────────
        engine_raw = raw.get("engine") or {}
        default_color = engine_raw.get("default_color", DEFAULT_GROUP_COLOR)
        try:
            GroupColor(default_color)
        except ValueError:
            msg = (
                f"CONFIG ERROR: Invalid engine.default_color: '{default_color}'. "
                f"Supported values: {[c.value for c in GroupColor]}."
            )
            print(msg, file=sys.stderr)
            raise SystemExit(1)

        excluded = engine_raw.get("excluded_schemes", list(DEFAULT_EXCLUDED_SCHEMES))
        if not isinstance(excluded, list) or not all(isinstance(s, str) for s in excluded):
            msg = "CONFIG ERROR: engine.excluded_schemes must be a list of strings."
            print(msg, file=sys.stderr)
            raise SystemExit(1)

        regroup_on_change = engine_raw.get("regroup_on_change", True)
        if not isinstance(regroup_on_change, bool):
            msg = (
                f"CONFIG ERROR: engine.regroup_on_change must be true or false, "
                f"got: {regroup_on_change!r}."
            )
            print(msg, file=sys.stderr)
            raise SystemExit(1)

        engine = EngineConfig(
            excluded_schemes=excluded,
            default_color=default_color,
            regroup_on_change=regroup_on_change,
        )

        # ── Server ────────────────────────────────────────────────────────────
        server_raw = raw.get("server") or {}
        server = ServerConfig(
            host=server_raw.get("host", "127.0.0.1"),
            port=server_raw.get("port", 4343),
        )

        # ── Settings ──────────────────────────────────────────────────────────
        settings_raw = raw.get("settings") or {}
        settings = SettingsConfig(
            path=settings_raw.get("path", DEFAULT_SETTINGS_PATH),
        )

        return cls(
            version=raw.get("version", SUPPORTED_CONFIG_VERSION),
            server=server,
            settings=settings,
            engine=engine,
            path=path,
        )


# ─── Config loading ───────────────────────────────────────────────────────────


def load_config(config_path: Optional[str] = None) -> Config:
    """Load and validate tabgrouper configuration.

    Search order:
      1. ``config_path`` argument (if provided)
      2. ``TABGROUPER_CONFIG`` environment variable (if set)
      3. ``.tabgrouper/config.yaml`` (current working directory)
      4. ``~/.tabgrouper/config.yaml`` (home directory)

    If no file is found at any of these paths, returns default Config (not an error).
    If a file is found but invalid, writes error to stderr and raises SystemExit(1).

    Environment overrides are applied last, whether or not a file was found.

    Raises:
        SystemExit(1): On YAML parse error, missing ``version`` field, unsupported
                       version, invalid engine options, or invalid ``TABGROUPER_PORT``.
    """
    search_paths: list[str] = []
    if config_path:
        search_paths.append(config_path)
    env_config = os.environ.get("TABGROUPER_CONFIG")
    if env_config:
        search_paths.append(env_config)
    search_paths.extend(DEFAULT_CONFIG_PATHS)

    found_path: Optional[str] = None
    for candidate in search_paths:
        expanded = os.path.expanduser(candidate)
        if os.path.isfile(expanded):
            found_path = expanded
            break

    # ── No config file found ─────────────────────────────────────────────────
    if found_path is None:
        logger.info("No config file found — using defaults", searched=search_paths)
        config = Config.defaults()
        _apply_env_overrides(config)
        return config

    # ── Parse config file ─────────────────────────────────────────────────────
    logger.info("Loading config", path=found_path)

    try:
        with open(found_path) as fh:
            raw = yaml.safe_load(fh)
    except yaml.YAMLError as exc:
        msg = (
            f"CONFIG ERROR: Failed to parse {found_path}: {exc}\n"
            "tabgrouper refuses to start with an invalid config. "
            "Check the YAML syntax and try again."
        )
        print(msg, file=sys.stderr)
        raise SystemExit(1)
    except OSError as exc:
        msg = f"CONFIG ERROR: Could not read {found_path}: {exc}"
        print(msg, file=sys.stderr)
        raise SystemExit(1)

    if not isinstance(raw, dict):
        if raw is None:
            msg = (
                f"CONFIG ERROR: {found_path} is missing the required 'version' field.\n"
                "Add 'version: 1' to the top of your config file."
            )
        else:
            msg = (
                f"CONFIG ERROR: {found_path} is not a valid YAML mapping.\n"
                "The config file must be a YAML dictionary at the top level."
            )
        print(msg, file=sys.stderr)
        raise SystemExit(1)

    # ── Version validation ────────────────────────────────────────────────────
    version = raw.get("version")
    if version is None:
        msg = (
            f"CONFIG ERROR: {found_path} is missing the required 'version' field.\n"
            "Add 'version: 1' to the top of your config file."
        )
        print(msg, file=sys.stderr)
        raise SystemExit(1)

    if version not in SUPPORTED_VERSIONS:
        msg = (
            f"CONFIG ERROR: Unsupported config version: {version}. "
            f"Supported versions: {sorted(SUPPORTED_VERSIONS)}."
        )
        print(msg, file=sys.stderr)
        raise SystemExit(1)

    config = Config.from_dict(raw, path=found_path)
    _apply_env_overrides(config)

    if config.server.host == "0.0.0.0":
        logger.warning(
            "tabgrouper is configured to bind on 0.0.0.0 (all interfaces). "
            "The command surface is unauthenticated; prefer server.host: '127.0.0.1'."
        )

    logger.info(
        "Config loaded",
        path=found_path,
        version=config.version,
        settings_path=config.settings.path,
    )
    return config


def _apply_env_overrides(config: Config) -> None:
    """Apply environment variable overrides to a Config object in-place.

    Handles:
      TABGROUPER_PORT     — overrides config.server.port (integer; SystemExit(1) if invalid)
      TABGROUPER_SETTINGS — overrides config.settings.path
    """
    env_port = os.environ.get("TABGROUPER_PORT")
    if env_port is not None:
        try:
            config.server.port = int(env_port)
        except ValueError:
            msg = (
                f"CONFIG ERROR: TABGROUPER_PORT environment variable is not a valid "
                f"integer: '{env_port}'"
            )
            print(msg, file=sys.stderr)
            raise SystemExit(1)

    env_settings = os.environ.get("TABGROUPER_SETTINGS")
    if env_settings:
        config.settings.path = env_settings
