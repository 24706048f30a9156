"""Configuration loading for tsarchitect (.tsarchitect.yml)."""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Optional, Sequence

import yaml

from .constants import DEFAULT_CONFIG_NAME, SETTINGS_FILENAME


class ConfigError(RuntimeError):
    """Raised when configuration cannot be loaded and the caller requires it."""


@dataclass
class ArchitectConfig:
    """Represents the project-level settings defined in .tsarchitect.yml."""

    root: Path
    tsconfig: str = DEFAULT_CONFIG_NAME
    strict: bool = False
    exclude_dirs: List[str] = field(default_factory=list)
    extensions: List[str] = field(default_factory=list)


def load_config(config_path: Path) -> ArchitectConfig:
    """Load settings from disk, returning defaults when the file is absent."""
    config_file = _resolve_config_path(config_path)
    root = config_file.parent.resolve()

    if not config_file.exists():
        return ArchitectConfig(root=root)

    data = _read_config(config_file)
    if not isinstance(data, dict):
        raise ConfigError(f"{SETTINGS_FILENAME} must contain a mapping at the root")

    tsconfig = _as_str(data.get("tsconfig")) or DEFAULT_CONFIG_NAME
    strict = _as_bool(data.get("strict")) or False
    exclude_dirs = [name.strip("/") for name in _as_str_list(data.get("exclude_dirs"))]
    extensions = [_normalise_extension(ext) for ext in _as_str_list(data.get("extensions"))]

    return ArchitectConfig(
        root=root,
        tsconfig=tsconfig,
        strict=strict,
        exclude_dirs=[name for name in exclude_dirs if name],
        extensions=[ext for ext in extensions if ext],
    )


def _resolve_config_path(config_path: Path) -> Path:
    config_path = config_path.expanduser()
    if config_path.is_dir():
        return (config_path / SETTINGS_FILENAME).resolve()
    if config_path.name != SETTINGS_FILENAME:
        return (config_path.parent / SETTINGS_FILENAME).resolve()
    return config_path.resolve()


def _read_config(path: Path) -> Dict[str, Any]:
    try:
        text = path.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as exc:
        raise ConfigError(f"Failed to read {path.name}: {exc}") from exc
    if not text.strip():
        return {}
    try:
        loaded = yaml.safe_load(text)
    except yaml.YAMLError as exc:
        raise ConfigError(f"Failed to parse {path.name}: {exc}") from exc
    return loaded or {}


def _normalise_extension(value: str) -> str:
    value = value.strip()
    if not value:
        return ""
    return value if value.startswith(".") else f".{value}"


def _as_str(value: Any) -> Optional[str]:
    return str(value) if isinstance(value, (str, int, float)) and not isinstance(value, bool) else None


def _as_bool(value: Any) -> Optional[bool]:
    if isinstance(value, bool):
        return value
    if isinstance(value, str):
        lowered = value.strip().lower()
        if lowered in {"true", "yes", "1"}:
            return True
        if lowered in {"false", "no", "0"}:
            return False
    return None


def _as_str_list(value: Any) -> List[str]:
    if value is None:
        return []
    if isinstance(value, str):
        return [value]
    if isinstance(value, Sequence):
        return [str(item) for item in value if isinstance(item, (str, int, float))]
    return []


__all__ = ["ArchitectConfig", "ConfigError", "load_config"]
