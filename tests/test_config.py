"""Tests for config.py - user settings under $XDG_CONFIG_HOME."""

from __future__ import annotations

import json

import pytest

import config
from config import DragSettings


@pytest.fixture(autouse=True)
def config_home(tmp_path, monkeypatch):
    monkeypatch.setenv("XDG_CONFIG_HOME", str(tmp_path))
    return tmp_path


def _write(config_home, payload) -> None:
    path = config_home / "blockdnd" / "config.json"
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(payload if isinstance(payload, str) else json.dumps(payload))


class TestPaths:
    def test_config_path_under_xdg(self, config_home) -> None:
        assert config.get_config_path() == config_home / "blockdnd" / "config.json"


class TestLoadSettings:
    def test_defaults_without_file(self) -> None:
        assert config.load_settings() == DragSettings()

    def test_values_from_file(self, config_home) -> None:
        _write(
            config_home,
            {
                "show_handle_on_hover": False,
                "long_press_ms": 300,
                "touch_slop_px": 6,
                "render_debounce_ms": 50,
                "hover_hide_ms": 400,
            },
        )
        settings = config.load_settings()
        assert settings == DragSettings(
            show_handle_on_hover=False,
            long_press_ms=300,
            touch_slop_px=6.0,
            render_debounce_ms=50,
            hover_hide_ms=400,
        )

    @pytest.mark.parametrize("value", [0, -5, "200", True, 1.5, None])
    def test_invalid_durations_fall_back(self, config_home, value) -> None:
        _write(config_home, {"long_press_ms": value})
        assert config.load_settings().long_press_ms == 150

    def test_non_bool_hover_falls_back(self, config_home) -> None:
        _write(config_home, {"show_handle_on_hover": "no"})
        assert config.load_settings().show_handle_on_hover is True

    @pytest.mark.parametrize("payload", ["{not json", "[1, 2]", ""])
    def test_unreadable_file_is_ignored(self, config_home, payload) -> None:
        _write(config_home, payload)
        assert config.load_config() == {}
        assert config.load_settings() == DragSettings()


class TestSetters:
    def test_hover_round_trip(self) -> None:
        config.set_show_handle_on_hover(False)
        assert config.get_show_handle_on_hover() is False
        config.set_show_handle_on_hover(True)
        assert config.get_show_handle_on_hover() is True

    def test_toggle_hover(self) -> None:
        """Hover handles start enabled; each toggle flips and persists."""
        assert config.toggle_show_handle_on_hover() is False
        assert config.load_settings().show_handle_on_hover is False
        assert config.toggle_show_handle_on_hover() is True
        assert config.get_show_handle_on_hover() is True

    def test_ui_mode(self, config_home) -> None:
        assert config.get_ui_mode() is None
        _write(config_home, {"mode": " Light "})
        assert config.get_ui_mode() == "light"

    def test_setters_keep_other_keys(self, config_home) -> None:
        _write(config_home, {"long_press_ms": 250, "mode": "dark"})
        config.toggle_show_handle_on_hover()
        data = json.loads((config_home / "blockdnd" / "config.json").read_text())
        assert data == {"long_press_ms": 250, "mode": "dark", "show_handle_on_hover": False}
