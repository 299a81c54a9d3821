from __future__ import annotations

import json
import os
from pathlib import Path
from typing import Any

KEY_ACTIONS = frozenset({"left", "right", "up", "down", "undo", "reset", "quit"})

DEFAULT_CONFIG: dict[str, Any] = {
    "tile_size": 48,
    "label_grid": True,
    "keys": {
        "a": "left",
        "d": "right",
        "w": "up",
        "s": "down",
        "z": "undo",
        "r": "reset",
        "q": "quit",
    },
}


def load_config(path: str | Path) -> dict[str, Any]:
    data = json.loads(Path(path).read_text())
    if not isinstance(data, dict):
        raise ValueError(f"config {path} must be a JSON object")
    return _expand_env_vars(data)


def _expand_env_vars(value: Any) -> Any:
    if isinstance(value, str):
        return os.path.expandvars(value)
    if isinstance(value, list):
        return [_expand_env_vars(item) for item in value]
    if isinstance(value, dict):
        return {str(k): _expand_env_vars(v) for k, v in value.items()}
    return value


def merge_dicts(base: dict[str, Any], override: dict[str, Any]) -> dict[str, Any]:
    result: dict[str, Any] = {**base}
    for key, value in override.items():
        if key in result and isinstance(result[key], dict) and isinstance(value, dict):
            result[key] = merge_dicts(result[key], value)
        else:
            result[key] = value
    return result


def normalize_keys(keys: Any) -> dict[str, str]:
    """Validate a key map of single characters to terminal game actions."""
    if not isinstance(keys, dict):
        raise ValueError("keys must be an object mapping characters to actions")
    normalized: dict[str, str] = {}
    for key, action in keys.items():
        if not isinstance(key, str) or len(key) != 1:
            raise ValueError(f"key must be a single character, got {key!r}")
        if action is None:
            continue
        if action not in KEY_ACTIONS:
            raise ValueError(
                f"key {key!r} maps to unknown action {action!r}; "
                f"expected one of: {', '.join(sorted(KEY_ACTIONS))}"
            )
        normalized[key] = action
    return normalized


def resolve_config(path: str | Path | None = None) -> dict[str, Any]:
    config = merge_dicts(DEFAULT_CONFIG, load_config(path)) if path else dict(DEFAULT_CONFIG)
    tile_size = config.get("tile_size")
    if not isinstance(tile_size, int) or isinstance(tile_size, bool) or tile_size < 8:
        raise ValueError("tile_size must be an integer >= 8")
    if not isinstance(config.get("label_grid"), bool):
        raise ValueError("label_grid must be a boolean")
    config["keys"] = normalize_keys(config.get("keys"))
    return config
