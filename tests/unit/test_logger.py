"""Tests for the structured logging helpers (tabgrouper/utils/logger.py)."""

from __future__ import annotations

import pytest

from tabgrouper.constants import RECENT_LOG_LIMIT
from tabgrouper.utils.logger import (
    PerformanceLogger,
    add_operation_id,
    clear_operation_id,
    clear_recent_logs,
    configure_logging,
    get_logger,
    get_recent_logs,
    record_recent,
    set_operation_id,
)


@pytest.fixture(autouse=True)
def _info_logging():
    configure_logging(log_level="INFO", json_output=True)
    yield
    clear_operation_id()


class TestRecentLogs:
    def test_newest_first(self):
        record_recent(None, "info", {"event": "first", "level": "info", "timestamp": 0})
        record_recent(None, "warning", {"event": "second", "level": "warning", "timestamp": 0})
        logs = get_recent_logs()
        assert logs[0].endswith("WARNING second")
        assert logs[1].endswith("INFO first")

    def test_line_format(self):
        record_recent(None, "error", {"event": "boom", "level": "error", "timestamp": 0})
        assert get_recent_logs() == ["[1970-01-01T00:00:00+00:00] ERROR boom"]

    def test_bounded(self):
        for i in range(RECENT_LOG_LIMIT + 25):
            record_recent(None, "info", {"event": f"e{i}", "level": "info", "timestamp": 0})
        logs = get_recent_logs()
        assert len(logs) == RECENT_LOG_LIMIT
        assert logs[0].endswith(f"e{RECENT_LOG_LIMIT + 24}")
        assert logs[-1].endswith("e25")

    def test_clear(self):
        record_recent(None, "info", {"event": "x", "level": "info", "timestamp": 0})
        clear_recent_logs()
        assert get_recent_logs() == []

    def test_logger_calls_recorded(self):
        get_logger("test").info("Something happened", detail=1)
        assert any(line.endswith("INFO Something happened") for line in get_recent_logs())

    def test_filtered_levels_not_recorded(self):
        get_logger("test").debug("Too quiet")
        assert get_recent_logs() == []

    def test_returns_a_copy(self):
        record_recent(None, "info", {"event": "x", "level": "info", "timestamp": 0})
        get_recent_logs().clear()
        assert len(get_recent_logs()) == 1


class TestOperationId:
    def test_added_when_set(self):
        set_operation_id("01TEST")
        assert add_operation_id(None, "info", {})["operation_id"] == "01TEST"

    def test_absent_when_cleared(self):
        clear_operation_id()
        assert "operation_id" not in add_operation_id(None, "info", {})


class TestPerformanceLogger:
    def test_measures_duration(self):
        with PerformanceLogger("op", get_logger("test")) as perf:
            pass
        assert perf.duration_ms >= 0

    def test_slow_operation_warns(self):
        with PerformanceLogger("slow op", get_logger("test"), slow_ms=-1.0):
            pass
        assert any("WARNING slow op completed" in line for line in get_recent_logs())

    def test_failure_logged_and_propagated(self):
        with pytest.raises(RuntimeError):
            with PerformanceLogger("failing op", get_logger("test")):
                raise RuntimeError("nope")
        assert any("ERROR failing op failed" in line for line in get_recent_logs())
