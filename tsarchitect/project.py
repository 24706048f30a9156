"""Builds immutable ProjectModel snapshots from a source tree."""

from __future__ import annotations

from pathlib import Path
from types import MappingProxyType
from typing import Dict, Iterable, List

from .analyzers.tree_sitter import SourceParser
from .constants import DEFAULT_EXCLUDED_DIRS, PACKAGE_DIRS, VCS_METADATA_DIRS
from .logging import get_logger
from .models import ModuleConfig, ParsedFile, ProjectModel
from .scanner import GlobPattern, SourceScanner, has_extension, read_source_bytes


class ProjectModelBuilder:
    """Discovers, reads and parses every source file belonging to a project.

    Without a tsconfig the usual build and dependency directories are pruned.
    With one, only VCS metadata, package folders and ``exclude_dirs`` are
    pruned up front and the tsconfig include/exclude patterns decide the rest.
    """

    def __init__(
        self,
        parser: SourceParser | None = None,
        *,
        exclude_dirs: Iterable[str] = (),
    ) -> None:
        extra = frozenset(exclude_dirs)
        self.default_scanner = SourceScanner(DEFAULT_EXCLUDED_DIRS | extra)
        self.config_scanner = SourceScanner(VCS_METADATA_DIRS | PACKAGE_DIRS | extra)
        self.parser = parser or SourceParser()
        self.logger = get_logger("project")

    def build(self, root: Path, config: ModuleConfig) -> ProjectModel:
        """Return a fresh snapshot; never mutates a previously built one."""
        root_path = Path(root).expanduser().resolve()
        files: Dict[str, ParsedFile] = {}
        for path in self._select_files(root_path, config):
            source = read_source_bytes(path)
            if source is None:
                continue
            relative = path.relative_to(root_path).as_posix()
            tree = self.parser.parse(source, relative)
            files[str(path)] = ParsedFile(
                path=str(path),
                relative_path=relative,
                source=source,
                tree=tree,
            )

        origin = config.config_path.name if config.config_path else "default policy"
        self.logger.info("Indexed %d source files under %s (%s)", len(files), root_path, origin)
        return ProjectModel(root=root_path, config=config, files=MappingProxyType(files))

    def _select_files(self, root: Path, config: ModuleConfig) -> List[Path]:
        if config.is_default:
            return self.default_scanner.scan(root, config.extensions)
        candidates = self.config_scanner.scan(root, config.extensions)

        explicit = {Path(entry).as_posix() for entry in config.files}
        includes = [GlobPattern.compile(pattern) for pattern in config.include]
        excludes = [GlobPattern.compile(pattern, match_descendants=True) for pattern in config.exclude]

        selected: Dict[str, Path] = {}
        for path in candidates:
            posix = path.as_posix()
            if posix in explicit:
                selected[posix] = path
                continue
            if not any(pattern.matches(posix) for pattern in includes):
                continue
            if any(pattern.matches(posix) for pattern in excludes):
                continue
            selected[posix] = path

        for entry in sorted(explicit):
            path = Path(entry)
            if entry in selected or not path.is_file():
                continue
            if not has_extension(path.name, config.extensions):
                continue
            try:
                path.relative_to(root)
            except ValueError:
                self.logger.warning("Ignoring %s: outside project root %s", entry, root)
                continue
            selected[entry] = path

        return sorted(selected.values(), key=lambda item: item.relative_to(root).as_posix())


__all__ = ["ProjectModelBuilder"]
