"""Portal configuration loading."""

from __future__ import annotations

from pathlib import Path

import yaml

CONFIG_DIR = Path(__file__).resolve().parent
DEFAULT_CONFIG = CONFIG_DIR / "portal.yaml"


def _merge(base: dict, override: dict) -> dict:
    merged = dict(base)
    for key, value in override.items():
        if isinstance(value, dict) and isinstance(merged.get(key), dict):
            merged[key] = _merge(merged[key], value)
        else:
            merged[key] = value
    return merged


def load_config(path: Path | None = None) -> dict:
    """Load the default portal config, with ``path`` (if given) merged on top."""
    with open(DEFAULT_CONFIG, encoding="utf-8") as f:
        config = yaml.safe_load(f)

    if path is not None:
        with open(path, encoding="utf-8") as f:
            config = _merge(config, yaml.safe_load(f) or {})

    return config
