from __future__ import annotations

from pathlib import Path
from typing import Any

import yaml

from career_tools.core.config import settings

_FALLBACK_CONFIG_CACHE: dict[str, Any] | None = None
_DEFAULT_PATH = Path(__file__).resolve().parents[2] / "config" / "fallback.yaml"


def _config_path() -> Path:
    if settings.fallback_config_path:
        return Path(settings.fallback_config_path)
    return _DEFAULT_PATH


def get_fallback_config() -> dict[str, Any]:
    """Load fallback tables from config/fallback.yaml and cache them."""
    global _FALLBACK_CONFIG_CACHE

    if _FALLBACK_CONFIG_CACHE is not None:
        return _FALLBACK_CONFIG_CACHE

    path = _config_path()
    if not path.exists():
        raise RuntimeError(
            f"Fallback config not found at '{path}'. "
            "Expected file: config/fallback.yaml"
        )

    try:
        raw = path.read_text(encoding="utf-8")
    except OSError as exc:
        raise RuntimeError(f"Failed to read fallback config '{path}': {exc}") from exc

    try:
        parsed = yaml.safe_load(raw)
    except yaml.YAMLError as exc:
        raise RuntimeError(f"Invalid YAML in fallback config '{path}': {exc}") from exc

    if not isinstance(parsed, dict):
        raise RuntimeError(f"Invalid fallback config '{path}': expected a top-level mapping.")

    _FALLBACK_CONFIG_CACHE = parsed
    return _FALLBACK_CONFIG_CACHE


def get_fallback_value(path: str, default: Any = None) -> Any:
    """Get nested config value using dot path notation, e.g. 'salary.experience.per_year'."""
    if not path:
        return default

    current: Any = get_fallback_config()
    for key in path.split("."):
        if not isinstance(current, dict):
            return default
        if key not in current:
            return default
        current = current[key]
    return current
