"""Loading of module-resolution configuration from tsconfig.json files.

tsconfig files are JSON with comments and trailing commas. ``extends`` chains
are followed; ``baseUrl`` and ``paths`` are anchored to the directory of the
file that declares them, and ``files``/``include``/``exclude`` entries are
stored as absolute POSIX patterns so inherited values keep their meaning.
"""

from __future__ import annotations

import json
import posixpath
from pathlib import Path
from typing import Any, Dict, List, Optional, Sequence, Set

from .config import ConfigError
from .constants import DEFAULT_CONFIG_NAME, DEFAULT_EXTENSIONS, JAVASCRIPT_EXTENSIONS, TYPESCRIPT_EXTENSIONS
from .logging import get_logger
from .models import ModuleConfig

_logger = get_logger("tsconfig")

_DEFAULT_EXCLUDES = ("node_modules", "bower_components", "jspm_packages")
_PATHS_BASE_KEY = "__pathsBase"


def find_config_file(root: Path, name: str = DEFAULT_CONFIG_NAME) -> Optional[Path]:
    candidate = root / name
    return candidate if candidate.is_file() else None


def default_module_config(
    root: Path, extensions: Sequence[str] | None = None
) -> ModuleConfig:
    """Permissive policy used when the project has no configuration file."""
    return ModuleConfig(
        root=root,
        allow_js=True,
        extensions=tuple(extensions) if extensions else DEFAULT_EXTENSIONS,
    )


def load_module_config(root: Path, name: str = DEFAULT_CONFIG_NAME) -> Optional[ModuleConfig]:
    """Return the project's module configuration, or None when no config exists.

    Raises ConfigError when a configuration file exists but cannot be parsed.
    """
    config_path = find_config_file(root, name)
    if config_path is None:
        return None

    data = _load_with_extends(config_path.resolve(), seen=set())
    options = _as_dict(data.get("compilerOptions"))
    config_dir = config_path.resolve().parent

    base_url = options.get("baseUrl")
    base_path = Path(base_url) if isinstance(base_url, str) else None

    raw_paths = _as_dict(options.get("paths"))
    paths: Dict[str, List[str]] = {}
    for pattern, targets in raw_paths.items():
        if isinstance(targets, list):
            paths[pattern] = [str(target) for target in targets if isinstance(target, str)]
    paths_base_raw = options.get(_PATHS_BASE_KEY)
    if base_path is not None:
        paths_base: Optional[Path] = base_path
    elif isinstance(paths_base_raw, str):
        paths_base = Path(paths_base_raw)
    else:
        paths_base = config_dir if paths else None

    allow_js = bool(options.get("allowJs", False))
    extensions = TYPESCRIPT_EXTENSIONS + (JAVASCRIPT_EXTENSIONS if allow_js else ())

    files = tuple(data.get("files") or ())
    include = tuple(data.get("include") or ())
    if not files and not include:
        include = (_anchor(config_dir, "**/*"),)

    exclude = tuple(data.get("exclude") or ())
    if "exclude" not in data:
        defaults = [_anchor(config_dir, name) for name in _DEFAULT_EXCLUDES]
        for key in ("outDir", "declarationDir"):
            value = options.get(key)
            if isinstance(value, str):
                defaults.append(_anchor(config_dir, value))
        exclude = tuple(defaults)

    module = options.get("module")
    module_resolution = options.get("moduleResolution")

    _logger.debug("Loaded %s (baseUrl=%s, %d path aliases)", config_path, base_path, len(paths))
    return ModuleConfig(
        root=root,
        config_path=config_path.resolve(),
        base_url=base_path,
        paths=paths,
        paths_base=paths_base,
        module=str(module).lower() if isinstance(module, str) else None,
        module_resolution=str(module_resolution).lower() if isinstance(module_resolution, str) else None,
        allow_js=allow_js,
        extensions=extensions,
        files=files,
        include=include,
        exclude=exclude,
    )


def _load_with_extends(path: Path, seen: Set[Path]) -> Dict[str, Any]:
    if path in seen:
        raise ConfigError(f"Circular 'extends' chain detected at {path}")
    seen.add(path)

    data = _read_jsonc(path)
    config_dir = path.parent
    own = _anchor_relative_values(data, config_dir)

    extends = data.get("extends")
    parents: List[str] = []
    if isinstance(extends, str):
        parents = [extends]
    elif isinstance(extends, list):
        parents = [item for item in extends if isinstance(item, str)]

    merged: Dict[str, Any] = {}
    for reference in parents:
        parent_path = _resolve_extends(reference, config_dir)
        if parent_path is None:
            _logger.warning("Cannot resolve extended config '%s' from %s", reference, path)
            continue
        parent = _load_with_extends(parent_path, seen)
        merged = _merge(merged, parent)

    seen.discard(path)
    return _merge(merged, own)


def _merge(base: Dict[str, Any], override: Dict[str, Any]) -> Dict[str, Any]:
    result = dict(base)
    for key, value in override.items():
        if key == "compilerOptions":
            options = dict(_as_dict(base.get("compilerOptions")))
            options.update(_as_dict(value))
            result[key] = options
        elif key != "extends":
            result[key] = value
    return result


def _anchor_relative_values(data: Dict[str, Any], config_dir: Path) -> Dict[str, Any]:
    own = dict(data)
    options = dict(_as_dict(data.get("compilerOptions")))
    base_url = options.get("baseUrl")
    if isinstance(base_url, str):
        options["baseUrl"] = str((config_dir / base_url).resolve())
    if "paths" in options:
        options[_PATHS_BASE_KEY] = str(config_dir)
    for key in ("outDir", "declarationDir"):
        value = options.get(key)
        if isinstance(value, str):
            options[key] = str((config_dir / value).resolve())
    own["compilerOptions"] = options

    for key in ("files", "include", "exclude"):
        values = data.get(key)
        if isinstance(values, list):
            own[key] = [_anchor(config_dir, item) for item in values if isinstance(item, str)]
    return own


def _anchor(base: Path, pattern: str) -> str:
    candidate = Path(pattern)
    if candidate.is_absolute():
        return candidate.as_posix()
    cleaned = pattern[2:] if pattern.startswith("./") else pattern
    return posixpath.normpath(f"{base.as_posix().rstrip('/')}/{cleaned}")


def _resolve_extends(reference: str, config_dir: Path) -> Optional[Path]:
    if reference.startswith(".") or Path(reference).is_absolute():
        candidates = [config_dir / reference]
        if not reference.endswith(".json"):
            candidates.append(config_dir / f"{reference}.json")
        for candidate in candidates:
            if candidate.is_file():
                return candidate.resolve()
        return None

    for directory in (config_dir, *config_dir.parents):
        package_root = directory / "node_modules"
        if not package_root.is_dir():
            continue
        candidates = [package_root / reference]
        if not reference.endswith(".json"):
            candidates.append(package_root / f"{reference}.json")
            candidates.append(package_root / reference / "tsconfig.json")
        for candidate in candidates:
            if candidate.is_file():
                return candidate.resolve()
    return None


def _read_jsonc(path: Path) -> Dict[str, Any]:
    try:
        text = path.read_text(encoding="utf-8-sig")
    except (OSError, UnicodeDecodeError) as exc:
        raise ConfigError(f"Failed to read {path}: {exc}") from exc
    if not text.strip():
        return {}
    try:
        data = json.loads(strip_jsonc(text))
    except json.JSONDecodeError as exc:
        raise ConfigError(f"Failed to parse {path.name}: {exc}") from exc
    if not isinstance(data, dict):
        raise ConfigError(f"{path.name} must contain an object at the root")
    return data


def strip_jsonc(text: str) -> str:
    """Remove comments and trailing commas so the text parses as strict JSON."""
    out: List[str] = []
    index = 0
    length = len(text)
    in_string = False
    while index < length:
        char = text[index]
        if in_string:
            out.append(char)
            if char == "\\" and index + 1 < length:
                out.append(text[index + 1])
                index += 2
                continue
            if char == '"':
                in_string = False
            index += 1
            continue

        if char == '"':
            in_string = True
            out.append(char)
            index += 1
        elif text.startswith("//", index):
            newline = text.find("\n", index)
            index = length if newline == -1 else newline
        elif text.startswith("/*", index):
            end = text.find("*/", index + 2)
            index = length if end == -1 else end + 2
        elif char == ",":
            lookahead = index + 1
            while lookahead < length and text[lookahead].isspace():
                lookahead += 1
            if lookahead < length and text[lookahead] in "]}":
                index += 1
                continue
            if text.startswith("//", lookahead) or text.startswith("/*", lookahead):
                # Defer the decision until the comment has been skipped.
                rest = strip_jsonc(text[lookahead:]).lstrip()
                if rest[:1] in ("]", "}"):
                    out.append(rest)
                    return "".join(out)
            out.append(char)
            index += 1
        else:
            out.append(char)
            index += 1
    return "".join(out)


def _as_dict(value: Any) -> Dict[str, Any]:
    return value if isinstance(value, dict) else {}


__all__ = [
    "default_module_config",
    "find_config_file",
    "load_module_config",
    "strip_jsonc",
]
