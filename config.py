"""User configuration helpers."""

from __future__ import annotations

import json
import os
from dataclasses import dataclass
from pathlib import Path


DEFAULT_LONG_PRESS_MS = 150
DEFAULT_TOUCH_SLOP_PX = 10.0
DEFAULT_RENDER_DEBOUNCE_MS = 100
DEFAULT_HOVER_HIDE_MS = 200


@dataclass(frozen=True)
class DragSettings:
    show_handle_on_hover: bool = True
    long_press_ms: int = DEFAULT_LONG_PRESS_MS
    touch_slop_px: float = DEFAULT_TOUCH_SLOP_PX
    render_debounce_ms: int = DEFAULT_RENDER_DEBOUNCE_MS
    hover_hide_ms: int = DEFAULT_HOVER_HIDE_MS


def get_config_dir() -> Path:
    root = Path(os.environ.get("XDG_CONFIG_HOME", Path.home() / ".config"))
    return root / "blockdnd"


def get_config_path() -> Path:
    return get_config_dir() / "config.json"


def load_config() -> dict:
    path = get_config_path()
    if not path.exists():
        return {}
    try:
        data = json.loads(path.read_text(encoding="utf-8"))
    except (OSError, json.JSONDecodeError):
        return {}
    return data if isinstance(data, dict) else {}


def save_config(config: dict) -> None:
    path = get_config_path()
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(json.dumps(config, indent=2, sort_keys=True), encoding="utf-8")


def load_settings() -> DragSettings:
    config = load_config()
    return DragSettings(
        show_handle_on_hover=_bool(config.get("show_handle_on_hover"), True),
        long_press_ms=_positive_int(config.get("long_press_ms"), DEFAULT_LONG_PRESS_MS),
        touch_slop_px=_positive_float(config.get("touch_slop_px"), DEFAULT_TOUCH_SLOP_PX),
        render_debounce_ms=_positive_int(
            config.get("render_debounce_ms"), DEFAULT_RENDER_DEBOUNCE_MS
        ),
        hover_hide_ms=_positive_int(config.get("hover_hide_ms"), DEFAULT_HOVER_HIDE_MS),
    )


def get_show_handle_on_hover() -> bool:
    return _bool(load_config().get("show_handle_on_hover"), True)


def set_show_handle_on_hover(enabled: bool) -> None:
    config = load_config()
    config["show_handle_on_hover"] = bool(enabled)
    save_config(config)


def toggle_show_handle_on_hover() -> bool:
    enabled = not get_show_handle_on_hover()
    set_show_handle_on_hover(enabled)
    return enabled


def get_ui_mode() -> str | None:
    config = load_config()
    value = config.get("mode")
    if isinstance(value, str) and value.strip():
        return value.strip().lower()
    return None


def _bool(value: object, default: bool) -> bool:
    return value if isinstance(value, bool) else default


def _positive_int(value: object, default: int) -> int:
    if isinstance(value, bool) or not isinstance(value, int) or value <= 0:
        return default
    return value


def _positive_float(value: object, default: float) -> float:
    if isinstance(value, bool) or not isinstance(value, (int, float)) or value <= 0:
        return default
    return float(value)
