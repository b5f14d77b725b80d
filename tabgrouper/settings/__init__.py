"""tabgrouper settings persistence.

Public API:
    SettingsStore       — configuration source/sink protocol (raw mappings)
    YamlSettingsStore   — settings kept in a YAML file
    MemorySettingsStore — settings kept in a dict (tests, ephemeral hosts)
    parse_settings      — raw mapping → Settings (compiles patterns, applies defaults)
    serialize_settings  — Settings → raw mapping (source strings only)
"""
from tabgrouper.settings.parser import default_auto_patterns, parse_settings, serialize_settings
from tabgrouper.settings.store import MemorySettingsStore, SettingsStore, YamlSettingsStore

__all__ = [
    "MemorySettingsStore",
    "SettingsStore",
    "YamlSettingsStore",
    "default_auto_patterns",
    "parse_settings",
    "serialize_settings",
]
