"""Tests for settings parsing, serialisation and the YAML settings store."""

from __future__ import annotations

import os

import pytest
import yaml

from tabgrouper.engine.errors import SettingsError
from tabgrouper.models.patterns import GroupColor
from tabgrouper.settings.parser import parse_settings, serialize_settings
from tabgrouper.settings.store import MemorySettingsStore, YamlSettingsStore


# ─── parse_settings ───────────────────────────────────────────────────────────


class TestParseDefaults:
    def test_none_gives_defaults(self):
        s = parse_settings(None)
        assert s.auto_patterns_enabled is True
        assert s.manual_patterns == []
        assert [t.template for t in s.auto_patterns] == [":name.*"]

    def test_non_mapping_gives_defaults(self):
        s = parse_settings(["not", "a", "mapping"])
        assert [t.template for t in s.auto_patterns] == [":name.*"]

    def test_missing_keys_take_defaults(self):
        s = parse_settings({})
        assert s.auto_patterns_enabled is True
        assert [t.template for t in s.auto_patterns] == [":name.*"]

    def test_explicit_empty_template_list_kept(self):
        assert parse_settings({"auto_patterns": []}).auto_patterns == []

    def test_non_bool_enabled_flag_defaults_true(self):
        assert parse_settings({"auto_patterns_enabled": "no"}).auto_patterns_enabled is True

    def test_enabled_false(self):
        assert parse_settings({"auto_patterns_enabled": False}).auto_patterns_enabled is False


class TestParseAutoPatterns:
    def test_order_preserved(self):
        s = parse_settings(
            {"auto_patterns": [{"template": ":name.example.com"}, {"template": ":name.*"}]}
        )
        assert [t.template for t in s.auto_patterns] == [":name.example.com", ":name.*"]

    def test_bare_strings_accepted(self):
        s = parse_settings({"auto_patterns": [":name.example.com"]})
        assert [t.template for t in s.auto_patterns] == [":name.example.com"]

    def test_any_bad_template_falls_back_to_default(self):
        s = parse_settings(
            {"auto_patterns": [{"template": ":name.example.com"}, {"template": "no-name"}]}
        )
        assert [t.template for t in s.auto_patterns] == [":name.*"]

    def test_duplicates_dropped(self):
        s = parse_settings({"auto_patterns": [":name.*", ":name.*"]})
        assert [t.template for t in s.auto_patterns] == [":name.*"]


class TestParseManualPatterns:
    def test_valid_entries(self):
        s = parse_settings(
            {
                "manual_patterns": [
                    {"pattern": r"github\.com", "group_name": "GitHub", "color": "purple"},
                    {"pattern": "news", "group_name": "News"},
                ]
            }
        )
        assert [(p.pattern, p.group_name, p.color) for p in s.manual_patterns] == [
            (r"github\.com", "GitHub", GroupColor.PURPLE),
            ("news", "News", None),
        ]

    def test_invalid_entries_skipped(self):
        s = parse_settings(
            {
                "manual_patterns": [
                    "not a mapping",
                    {"pattern": "(broken", "group_name": "Broken"},
                    {"pattern": "ok", "group_name": ""},
                    {"pattern": "ok", "group_name": "Ok"},
                ]
            }
        )
        assert [p.group_name for p in s.manual_patterns] == ["Ok"]

    def test_unknown_colour_dropped_pattern_kept(self):
        s = parse_settings(
            {"manual_patterns": [{"pattern": "x", "group_name": "X", "color": "magenta"}]}
        )
        assert s.manual_patterns[0].color is None


class TestSerialize:
    def test_inverse_of_parse(self):
        raw = {
            "auto_patterns_enabled": False,
            "manual_patterns": [
                {"pattern": r"github\.com", "group_name": "GitHub", "color": "purple"},
                {"pattern": "news", "group_name": "News"},
            ],
            "auto_patterns": [{"template": ":name.*.example.com"}],
        }
        assert serialize_settings(parse_settings(raw)) == raw

    def test_output_is_yaml_safe(self):
        dumped = yaml.safe_dump(serialize_settings(parse_settings(None)))
        assert ":name.*" in dumped


# ─── Stores ───────────────────────────────────────────────────────────────────


class TestYamlSettingsStore:
    def test_missing_file_is_none(self, tmp_path):
        assert YamlSettingsStore(str(tmp_path / "nope.yaml")).load_raw() is None

    def test_empty_file_is_none(self, tmp_path):
        path = tmp_path / "settings.yaml"
        path.write_text("")
        assert YamlSettingsStore(str(path)).load_raw() is None

    def test_save_then_load(self, tmp_path):
        path = tmp_path / "nested" / "settings.yaml"
        store = YamlSettingsStore(str(path))
        raw = {"auto_patterns_enabled": True, "manual_patterns": [], "auto_patterns": [{"template": ":name.*"}]}
        store.save_raw(raw)
        assert path.exists()
        assert store.load_raw() == raw

    def test_save_leaves_no_temp_files(self, tmp_path):
        store = YamlSettingsStore(str(tmp_path / "settings.yaml"))
        store.save_raw({"auto_patterns_enabled": True})
        store.save_raw({"auto_patterns_enabled": False})
        assert os.listdir(tmp_path) == ["settings.yaml"]

    def test_malformed_yaml_raises(self, tmp_path):
        path = tmp_path / "settings.yaml"
        path.write_text("auto_patterns: [unclosed\n")
        with pytest.raises(SettingsError):
            YamlSettingsStore(str(path)).load_raw()

    def test_non_mapping_raises(self, tmp_path):
        path = tmp_path / "settings.yaml"
        path.write_text("- a\n- b\n")
        with pytest.raises(SettingsError):
            YamlSettingsStore(str(path)).load_raw()

    def test_tilde_expanded(self, monkeypatch, tmp_path):
        monkeypatch.setenv("HOME", str(tmp_path))
        store = YamlSettingsStore("~/settings.yaml")
        assert store.path == str(tmp_path / "settings.yaml")


class TestMemorySettingsStore:
    def test_copies_on_the_way_in_and_out(self):
        raw = {"manual_patterns": []}
        store = MemorySettingsStore(raw)
        raw["manual_patterns"].append({"pattern": "x", "group_name": "X"})
        assert store.load_raw() == {"manual_patterns": []}
        store.load_raw()["manual_patterns"].append("y")
        assert store.load_raw() == {"manual_patterns": []}

    def test_counts_saves(self):
        store = MemorySettingsStore()
        store.save_raw({})
        store.save_raw({})
        assert store.saves == 2
