"""Module specifier resolution against a ProjectModel snapshot."""

from __future__ import annotations

import json
import os
from pathlib import Path
from typing import Iterable, Iterator, List, Optional, Tuple

from .constants import DEFAULT_EXCLUDED_DIRS
from .logging import get_logger
from .models import ProjectModel, ResolvedDependency
from .scanner import has_extension

_APPENDED_EXTENSIONS = (".ts", ".tsx", ".d.ts", ".js", ".jsx")

_SOURCE_FOR_OUTPUT = (
    (".js", (".ts", ".tsx", ".d.ts")),
    (".jsx", (".tsx", ".d.ts")),
    (".mjs", (".mts", ".d.mts")),
    (".cjs", (".cts", ".d.cts")),
)

_PACKAGE_ENTRY_FIELDS = ("types", "typings", "main")


def is_relative_specifier(specifier: str) -> bool:
    return (
        specifier in {".", ".."}
        or specifier.startswith(("./", "../", "/"))
    )


def match_alias(specifier: str, patterns: Iterable[str]) -> Optional[Tuple[str, str]]:
    """Return ``(pattern, captured)`` for the best alias pattern matching ``specifier``.

    Exact patterns win; among wildcard patterns the longest prefix wins.
    """
    best: Optional[Tuple[str, str]] = None
    best_prefix = -1
    for pattern in patterns:
        if "*" not in pattern:
            if pattern == specifier:
                return pattern, ""
            continue
        prefix, _, suffix = pattern.partition("*")
        if len(specifier) < len(prefix) + len(suffix):
            continue
        if specifier.startswith(prefix) and specifier.endswith(suffix):
            if len(prefix) > best_prefix:
                captured = specifier[len(prefix) : len(specifier) - len(suffix)]
                best = (pattern, captured)
                best_prefix = len(prefix)
    return best


class ModuleResolver:
    """Maps import specifiers to project-relative file paths.

    Anything that does not land on a file under the project root (bare
    package names, built-ins, dangling paths) resolves to ``None``, which
    callers render as the External/Built-in marker.
    """

    def __init__(
        self,
        model: ProjectModel,
        excluded_dirs: Iterable[str] | None = None,
    ) -> None:
        self.model = model
        self.config = model.config
        self.excluded_dirs = frozenset(excluded_dirs) if excluded_dirs is not None else DEFAULT_EXCLUDED_DIRS
        self.logger = get_logger("resolver")

    def resolve(self, specifier: str, importing_file: str) -> Optional[str]:
        if not specifier:
            return None

        relative = is_relative_specifier(specifier)
        if not relative:
            for candidate in self._alias_candidates(specifier):
                resolved = self._lookup(candidate)
                if resolved is not None:
                    return resolved

        if relative:
            importing_dir = Path(importing_file).parent
            base = Path(specifier) if specifier.startswith("/") else importing_dir / specifier
            return self._lookup(base)

        if self.config.base_url is not None:
            resolved = self._lookup(self.config.base_url / specifier)
            if resolved is not None:
                return resolved

        self.logger.debug("Classified '%s' from %s as external", specifier, importing_file)
        return None

    def resolve_dependency(self, specifier: str, importing_file: str) -> ResolvedDependency:
        return ResolvedDependency(
            raw_specifier=specifier,
            resolved_path=self.resolve(specifier, importing_file),
        )

    def _alias_candidates(self, specifier: str) -> Iterator[Path]:
        paths = self.config.paths
        if not paths or self.config.paths_base is None:
            return
        match = match_alias(specifier, paths.keys())
        if match is None:
            return
        pattern, captured = match
        for target in paths[pattern]:
            substituted = target.replace("*", captured, 1)
            yield self.config.paths_base / substituted

    def _lookup(self, base: Path) -> Optional[str]:
        base = Path(os.path.normpath(base))
        resolved = self._lookup_file(base)
        if resolved is not None:
            return resolved
        return self._lookup_directory(base)

    def _lookup_file(self, base: Path) -> Optional[str]:
        for candidate in self._file_candidates(base):
            relative = self._project_relative(candidate)
            if relative is not None:
                return relative
        return None

    def _lookup_directory(self, directory: Path) -> Optional[str]:
        if not directory.is_dir():
            return None
        for entry in self._package_entries(directory):
            resolved = self._lookup_file(Path(os.path.normpath(directory / entry)))
            if resolved is not None:
                return resolved
        return self._lookup_file(directory / "index")

    @staticmethod
    def _file_candidates(base: Path) -> List[Path]:
        name = base.name
        if not name:
            return [base]
        candidates: List[Path] = []
        # `./util.js` names the emitted file; its TypeScript source wins.
        for output_ext, source_exts in _SOURCE_FOR_OUTPUT:
            if name.endswith(output_ext):
                stem = name[: -len(output_ext)]
                candidates.extend(base.with_name(stem + ext) for ext in source_exts)
        candidates.append(base)
        candidates.extend(base.with_name(name + ext) for ext in _APPENDED_EXTENSIONS)
        return candidates

    def _package_entries(self, directory: Path) -> List[str]:
        manifest = directory / "package.json"
        if not manifest.is_file():
            return []
        try:
            data = json.loads(manifest.read_text(encoding="utf-8"))
        except (OSError, ValueError) as exc:
            self.logger.debug("Ignoring unreadable %s: %s", manifest, exc)
            return []
        if not isinstance(data, dict):
            return []
        return [data[key] for key in _PACKAGE_ENTRY_FIELDS if isinstance(data.get(key), str)]

    def _project_relative(self, candidate: Path) -> Optional[str]:
        if not has_extension(candidate.name, self.config.extensions):
            return None
        key = str(candidate)
        root = self.model.root
        if key not in self.model:
            if not candidate.is_file():
                return None
            try:
                parts = candidate.relative_to(root).parts
            except ValueError:
                return None
            if any(part in self.excluded_dirs for part in parts[:-1]):
                return None
        try:
            return candidate.relative_to(root).as_posix()
        except ValueError:
            return None


__all__ = ["ModuleResolver", "is_relative_specifier", "match_alias"]
