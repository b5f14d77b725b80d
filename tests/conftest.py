"""Root test configuration for tabgrouper.

Points TABGROUPER_CONFIG and TABGROUPER_SETTINGS at per-test temporary paths
so no test ever reads or writes the developer's real ~/.tabgrouper files, and
empties the recent-log buffer between tests.
"""

from __future__ import annotations

import pytest

from tabgrouper.engine.orchestrator import GroupingOrchestrator
from tabgrouper.groups.memory import InMemoryGroupBackend
from tabgrouper.settings.store import MemorySettingsStore
from tabgrouper.utils.logger import clear_recent_logs


@pytest.fixture(autouse=True)
def isolate_config_paths(tmp_path, monkeypatch: pytest.MonkeyPatch) -> None:
    """Keep config and settings lookups inside tmp_path."""
    monkeypatch.setenv("TABGROUPER_CONFIG", str(tmp_path / "missing-config.yaml"))
    monkeypatch.setenv("TABGROUPER_SETTINGS", str(tmp_path / "settings.yaml"))
    monkeypatch.delenv("TABGROUPER_PORT", raising=False)
    monkeypatch.chdir(tmp_path)


@pytest.fixture(autouse=True)
def reset_recent_logs() -> None:
    clear_recent_logs()


@pytest.fixture
def backend() -> InMemoryGroupBackend:
    return InMemoryGroupBackend()


@pytest.fixture
def settings_store() -> MemorySettingsStore:
    """Settings store holding no manual patterns and only the default template."""
    return MemorySettingsStore(
        {
            "auto_patterns_enabled": True,
            "manual_patterns": [],
            "auto_patterns": [{"template": ":name.*"}],
        }
    )


@pytest.fixture
def orchestrator(backend, settings_store) -> GroupingOrchestrator:
    engine = GroupingOrchestrator(
        assigner=backend,
        resources=backend,
        settings_store=settings_store,
    )
    engine.load_settings()
    return engine
