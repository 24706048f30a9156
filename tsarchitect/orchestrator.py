"""Analyzer facade: owns the live ProjectModel snapshot and answers queries."""

from __future__ import annotations

import os
from pathlib import Path
from typing import Optional

from .analyzers import (
    ExportOracle,
    locate_definition,
    render_dependencies,
    render_repo_map,
    render_skeleton,
)
from .config import ArchitectConfig, ConfigError, load_config
from .constants import DEFAULT_EXCLUDED_DIRS, FILE_NOT_FOUND, SETTINGS_FILENAME
from .logging import get_logger, log_duration
from .models import ModuleConfig, ParsedFile, ProjectModel
from .project import ProjectModelBuilder
from .resolver import ModuleResolver
from .scanner import read_source_text
from .tsconfig import default_module_config, load_module_config


class PathOutsideRootError(ValueError):
    """Raised when a requested path escapes the project root."""


class Orchestrator:
    """Coordinates snapshot rebuilds and the structural queries over them.

    Queries read the current snapshot once and never mutate it. ``refresh``
    builds a replacement off to the side and swaps it in with a single
    attribute assignment, so a concurrent query sees either the old or the
    new model in full.
    """

    def __init__(
        self,
        root: str | Path,
        *,
        builder: ProjectModelBuilder | None = None,
        settings: ArchitectConfig | None = None,
        strict: bool | None = None,
    ) -> None:
        self.root = Path(root).expanduser().resolve()
        self.logger = get_logger("orchestrator")
        self.settings = settings or self._load_settings(strict)
        self.strict = self.settings.strict if strict is None else strict
        self.excluded_dirs = DEFAULT_EXCLUDED_DIRS | frozenset(self.settings.exclude_dirs)
        self.builder = builder or ProjectModelBuilder(exclude_dirs=self.settings.exclude_dirs)
        self._model: Optional[ProjectModel] = None
        self.refresh()

    @property
    def snapshot(self) -> ProjectModel:
        model = self._model
        if model is None:
            raise RuntimeError("Project snapshot has not been built")
        return model

    def refresh(self) -> None:
        """Rebuild the project model and atomically replace the live snapshot."""
        with log_duration(self.logger, "Snapshot rebuild"):
            config = self._load_module_config()
            model = self.builder.build(self.root, config)
        self._model = model
        self.logger.debug("Snapshot replaced (%d files)", len(model))

    def get_repo_map(self) -> str:
        model = self.snapshot
        return render_repo_map(model, ExportOracle(model, self._resolver(model)))

    def get_deps(self, file_path: str) -> str:
        model = self.snapshot
        return render_dependencies(model, self._resolver(model), self._key(file_path))

    def get_skeleton(self, file_path: str) -> str:
        parsed_file = self._lookup(self.snapshot, file_path)
        if parsed_file is None:
            return FILE_NOT_FOUND
        return render_skeleton(parsed_file)

    def get_method_implementation(self, file_path: str, name: str) -> str:
        parsed_file = self._lookup(self.snapshot, file_path)
        if parsed_file is None:
            return FILE_NOT_FOUND
        return locate_definition(parsed_file, name)

    def read_full_file(self, file_path: str) -> str:
        """Return the raw text of a file under the root.

        Raises PathOutsideRootError for paths escaping the root and
        FileNotFoundError for missing files.
        """
        target = (self.root / file_path).resolve()
        if target != self.root and self.root not in target.parents:
            raise PathOutsideRootError(f"Path traversal detected; access denied for {file_path}")
        text = read_source_text(target)
        if text is None:
            raise FileNotFoundError(f"File not found: {file_path}")
        return text

    def _resolver(self, model: ProjectModel) -> ModuleResolver:
        return ModuleResolver(model, self.excluded_dirs)

    def _key(self, file_path: str) -> str:
        return os.path.normpath(self.root / file_path)

    def _lookup(self, model: ProjectModel, file_path: str) -> Optional[ParsedFile]:
        return model.get(self._key(file_path))

    def _load_settings(self, strict: bool | None) -> ArchitectConfig:
        try:
            return load_config(self.root / SETTINGS_FILENAME)
        except ConfigError as exc:
            if strict:
                raise
            self.logger.warning("Ignoring %s: %s", SETTINGS_FILENAME, exc)
            return ArchitectConfig(root=self.root)

    def _load_module_config(self) -> ModuleConfig:
        name = self.settings.tsconfig
        try:
            config = load_module_config(self.root, name)
        except ConfigError as exc:
            if self.strict:
                raise
            self.logger.warning("Ignoring unreadable %s: %s", name, exc)
            config = None

        if config is None:
            if self.strict:
                raise ConfigError(f"Missing {name} in {self.root}")
            self.logger.info("No %s in %s; using default module resolution", name, self.root)
            return default_module_config(self.root, self.settings.extensions or None)
        return config


__all__ = ["Orchestrator", "PathOutsideRootError"]
