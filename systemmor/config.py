"""Configuration loading for systemmor.

Loads settings from a TOML config file with sensible defaults.
Search order: ~/.config/systemmor/config.toml → defaults only.
Keybindings and panel proportions are fixed and not read from here.
"""

from __future__ import annotations

import copy
import sys
import tomllib
from pathlib import Path
from typing import Any

DEFAULT_CONFIG: dict[str, Any] = {
    "tick_rate_ms": 250,
    "logging": {"level": "WARNING", "file": ""},
    "display": {"cpu_history": 120},
}

_DEFAULT_PATH = Path.home() / ".config" / "systemmor" / "config.toml"


def _deep_merge(base: dict[str, Any], overlay: dict[str, Any]) -> dict[str, Any]:
    """Merge overlay into base. Nested dicts are merged at the first level only."""
    merged = copy.deepcopy(base)
    for key, value in overlay.items():
        if key in merged and isinstance(merged[key], dict) and isinstance(value, dict):
            merged[key] = {**merged[key], **value}
        else:
            merged[key] = value
    return merged


def load_config(path: Path | None = None) -> dict[str, Any]:
    """Load configuration, merging user TOML over defaults.

    Args:
        path: Config file to read. If None, the default location
              ~/.config/systemmor/config.toml is used when it exists.

    Returns:
        Merged configuration dict. A file that cannot be parsed is
        reported on stderr and ignored.
    """
    path = path if path is not None else _DEFAULT_PATH
    if not path.is_file():
        return _deep_merge(DEFAULT_CONFIG, {})

    try:
        user_config = tomllib.loads(path.read_text(encoding="utf-8"))
    except tomllib.TOMLDecodeError as e:
        print(
            f"systemmor: warning: ignoring invalid TOML in {path}: {e}",
            file=sys.stderr,
        )
        return _deep_merge(DEFAULT_CONFIG, {})
    return _deep_merge(DEFAULT_CONFIG, user_config)


def tick_interval(config: dict[str, Any]) -> float:
    """Tick interval in seconds; non-positive values fall back to the default."""
    ms = config.get("tick_rate_ms", DEFAULT_CONFIG["tick_rate_ms"])
    if not isinstance(ms, (int, float)) or ms <= 0:
        ms = DEFAULT_CONFIG["tick_rate_ms"]
    return float(ms) / 1000.0
