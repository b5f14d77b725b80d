"""Unit tests for config loading and validation (tabgrouper/config.py).

Covers:
  - Missing config file → Config.defaults(), no exception
  - Missing / unsupported 'version' → SystemExit(1) with a readable message
  - Invalid YAML → SystemExit(1)
  - engine.default_color and engine.excluded_schemes validation
  - TABGROUPER_CONFIG, TABGROUPER_PORT, TABGROUPER_SETTINGS overrides
  - server.host "0.0.0.0" warning
"""

from __future__ import annotations

import textwrap

import pytest

from tabgrouper.config import (
    DEFAULT_SETTINGS_PATH,
    SUPPORTED_VERSIONS,
    Config,
    EngineConfig,
    load_config,
)


def _write(tmp_path, content: str) -> str:
    path = tmp_path / "config.yaml"
    path.write_text(textwrap.dedent(content))
    return str(path)


# ─── Missing config file ──────────────────────────────────────────────────────


class TestMissingConfigFile:
    def test_nonexistent_path_returns_defaults(self, monkeypatch, tmp_path) -> None:
        monkeypatch.delenv("TABGROUPER_SETTINGS", raising=False)
        config = load_config(str(tmp_path / "nope.yaml"))
        assert config.path is None
        assert config.server.host == "127.0.0.1"
        assert config.server.port == 4343
        assert config.settings.path == DEFAULT_SETTINGS_PATH
        assert config.engine.excluded_schemes == ["chrome://", "brave://"]
        assert config.engine.default_color == "grey"
        assert config.engine.regroup_on_change is True

    def test_defaults_classmethod(self) -> None:
        assert Config.defaults() == Config()

    def test_engine_defaults_not_shared(self) -> None:
        a, b = EngineConfig(), EngineConfig()
        a.excluded_schemes.append("about:")
        assert b.excluded_schemes == ["chrome://", "brave://"]


# ─── Version validation ───────────────────────────────────────────────────────


class TestVersion:
    def test_supported_versions(self) -> None:
        assert 1 in SUPPORTED_VERSIONS

    def test_missing_version_exits(self, tmp_path, capsys) -> None:
        path = _write(tmp_path, "server:\n  port: 5000\n")
        with pytest.raises(SystemExit) as exc_info:
            load_config(path)
        assert exc_info.value.code == 1
        assert "version" in capsys.readouterr().err

    def test_empty_file_exits(self, tmp_path) -> None:
        path = _write(tmp_path, "")
        with pytest.raises(SystemExit):
            load_config(path)

    def test_unsupported_version_exits(self, tmp_path, capsys) -> None:
        path = _write(tmp_path, "version: 2\n")
        with pytest.raises(SystemExit) as exc_info:
            load_config(path)
        assert exc_info.value.code == 1
        assert "Unsupported config version" in capsys.readouterr().err

    def test_non_mapping_exits(self, tmp_path) -> None:
        path = _write(tmp_path, "- version\n- 1\n")
        with pytest.raises(SystemExit):
            load_config(path)

    def test_invalid_yaml_exits(self, tmp_path, capsys) -> None:
        path = _write(tmp_path, "version: 1\nserver: [unclosed\n")
        with pytest.raises(SystemExit) as exc_info:
            load_config(path)
        assert exc_info.value.code == 1
        assert "Failed to parse" in capsys.readouterr().err


# ─── Full file ────────────────────────────────────────────────────────────────


class TestFullConfig:
    def test_all_sections(self, tmp_path, monkeypatch) -> None:
        monkeypatch.delenv("TABGROUPER_SETTINGS", raising=False)
        path = _write(
            tmp_path,
            """
            version: 1
            server:
              host: 127.0.0.1
              port: 5151
            settings:
              path: /var/lib/tabgrouper/settings.yaml
            engine:
              excluded_schemes: ["chrome://", "about:"]
              default_color: blue
              regroup_on_change: false
            """,
        )
        config = load_config(path)
        assert config.path == path
        assert config.server.port == 5151
        assert config.settings.path == "/var/lib/tabgrouper/settings.yaml"
        assert config.engine.excluded_schemes == ["chrome://", "about:"]
        assert config.engine.default_color == "blue"
        assert config.engine.regroup_on_change is False

    def test_version_only_gives_defaults(self, tmp_path) -> None:
        config = load_config(_write(tmp_path, "version: 1\n"))
        assert config.server.port == 4343
        assert config.engine.default_color == "grey"

    def test_invalid_default_color_exits(self, tmp_path, capsys) -> None:
        path = _write(tmp_path, "version: 1\nengine:\n  default_color: magenta\n")
        with pytest.raises(SystemExit):
            load_config(path)
        assert "default_color" in capsys.readouterr().err

    def test_excluded_schemes_must_be_list(self, tmp_path) -> None:
        path = _write(tmp_path, "version: 1\nengine:\n  excluded_schemes: chrome://\n")
        with pytest.raises(SystemExit):
            load_config(path)

    @pytest.mark.parametrize("value", ['"false"', "0", "yes please"])
    def test_regroup_on_change_must_be_bool(self, tmp_path, capsys, value) -> None:
        path = _write(tmp_path, f"version: 1\nengine:\n  regroup_on_change: {value}\n")
        with pytest.raises(SystemExit) as exc_info:
            load_config(path)
        assert exc_info.value.code == 1
        assert "regroup_on_change" in capsys.readouterr().err

    def test_wildcard_bind_still_loads(self, tmp_path) -> None:
        config = load_config(_write(tmp_path, "version: 1\nserver:\n  host: 0.0.0.0\n"))
        assert config.server.host == "0.0.0.0"


# ─── Environment overrides ────────────────────────────────────────────────────


class TestEnvOverrides:
    def test_config_env_var(self, tmp_path, monkeypatch) -> None:
        path = _write(tmp_path, "version: 1\nserver:\n  port: 6000\n")
        monkeypatch.setenv("TABGROUPER_CONFIG", path)
        assert load_config().server.port == 6000

    def test_explicit_path_beats_env_var(self, tmp_path, monkeypatch) -> None:
        env_dir = tmp_path / "env"
        env_dir.mkdir()
        monkeypatch.setenv("TABGROUPER_CONFIG", _write(env_dir, "version: 1\nserver:\n  port: 6000\n"))
        explicit = _write(tmp_path, "version: 1\nserver:\n  port: 7000\n")
        assert load_config(explicit).server.port == 7000

    def test_port_override(self, monkeypatch, tmp_path) -> None:
        monkeypatch.setenv("TABGROUPER_PORT", "9999")
        assert load_config(str(tmp_path / "nope.yaml")).server.port == 9999

    def test_invalid_port_exits(self, monkeypatch, tmp_path) -> None:
        monkeypatch.setenv("TABGROUPER_PORT", "not-a-port")
        with pytest.raises(SystemExit):
            load_config(str(tmp_path / "nope.yaml"))

    def test_settings_path_override(self, monkeypatch, tmp_path) -> None:
        target = str(tmp_path / "elsewhere.yaml")
        monkeypatch.setenv("TABGROUPER_SETTINGS", target)
        assert load_config(str(tmp_path / "nope.yaml")).settings.path == target

    def test_working_directory_config(self, tmp_path) -> None:
        (tmp_path / ".tabgrouper").mkdir()
        (tmp_path / ".tabgrouper" / "config.yaml").write_text("version: 1\nserver:\n  port: 4444\n")
        assert load_config().server.port == 4444
