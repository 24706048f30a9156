"""Core data models shared across tsarchitect components."""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, Iterator, List, Mapping, Optional, Tuple

from .constants import DECLARATION_SUFFIXES, DEFAULT_EXTENSIONS, EXTERNAL_MARKER


@dataclass(frozen=True)
class ModuleConfig:
    """Module-resolution policy in effect for one project snapshot."""

    root: Path
    config_path: Optional[Path] = None
    base_url: Optional[Path] = None
    paths: Dict[str, List[str]] = field(default_factory=dict)
    paths_base: Optional[Path] = None
    module: Optional[str] = None
    module_resolution: Optional[str] = None
    allow_js: bool = True
    extensions: Tuple[str, ...] = DEFAULT_EXTENSIONS
    files: Tuple[str, ...] = ()
    include: Tuple[str, ...] = ()
    exclude: Tuple[str, ...] = ()

    @property
    def is_default(self) -> bool:
        """True when no configuration file was found for the project."""
        return self.config_path is None

    @property
    def config_dir(self) -> Path:
        if self.config_path is None:
            return self.root
        return self.config_path.parent


@dataclass(frozen=True)
class ParsedFile:
    """A parsed source file owned by exactly one ProjectModel."""

    path: str
    relative_path: str
    source: bytes
    tree: Any = field(repr=False, compare=False)

    @property
    def root_node(self) -> Any:
        return self.tree.root_node

    @property
    def is_declaration(self) -> bool:
        """True for `.d.ts`-style declaration-only files."""
        return self.relative_path.endswith(DECLARATION_SUFFIXES)


@dataclass(frozen=True)
class ProjectModel:
    """Immutable snapshot of the project: configuration plus parsed files."""

    root: Path
    config: ModuleConfig
    files: Mapping[str, ParsedFile]

    def get(self, path: str) -> Optional[ParsedFile]:
        return self.files.get(path)

    def __contains__(self, path: object) -> bool:
        return path in self.files

    def __len__(self) -> int:
        return len(self.files)

    def iter_files(self) -> Iterator[ParsedFile]:
        return iter(self.files.values())


@dataclass(frozen=True)
class ResolvedDependency:
    """One import/export-from edge of a file."""

    raw_specifier: str
    resolved_path: Optional[str]

    @property
    def is_external(self) -> bool:
        return self.resolved_path is None

    def render(self) -> str:
        target = self.resolved_path if self.resolved_path is not None else EXTERNAL_MARKER
        return f"- {self.raw_specifier} -> {target}"
