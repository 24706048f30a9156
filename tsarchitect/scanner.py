"""Source file discovery and raw file reading."""

from __future__ import annotations

import os
import re
from dataclasses import dataclass
from pathlib import Path
from typing import Iterable, Iterator, List, Optional, Pattern, Sequence

from .constants import DEFAULT_EXCLUDED_DIRS
from .logging import get_logger

_logger = get_logger("scanner")

_WILDCARD_CHARS = ("*", "?")


@dataclass
class GlobPattern:
    """A tsconfig-style ``include``/``exclude`` pattern anchored to an absolute directory."""

    pattern: str
    regex: Pattern[str]

    @classmethod
    def compile(cls, pattern: str, *, match_descendants: bool = False) -> "GlobPattern":
        normalised = pattern.replace("\\", "/").rstrip("/")
        last = normalised.rsplit("/", 1)[-1]
        expression = _glob_to_regex(normalised)
        if not any(char in last for char in _WILDCARD_CHARS) and "." not in last:
            # A bare directory name covers everything beneath it.
            expression += "(?:/.*)?"
        elif match_descendants:
            expression += "(?:/.*)?"
        return cls(pattern=normalised, regex=re.compile(f"^{expression}$"))

    def matches(self, path: str) -> bool:
        return self.regex.match(path) is not None


def _glob_to_regex(pattern: str) -> str:
    parts: List[str] = []
    index = 0
    while index < len(pattern):
        if pattern.startswith("**/", index):
            parts.append("(?:[^/]+/)*")
            index += 3
        elif pattern.startswith("**", index):
            parts.append(".*")
            index += 2
        elif pattern[index] == "*":
            parts.append("[^/]*")
            index += 1
        elif pattern[index] == "?":
            parts.append("[^/]")
            index += 1
        else:
            parts.append(re.escape(pattern[index]))
            index += 1
    return "".join(parts)


def has_extension(name: str, extensions: Iterable[str]) -> bool:
    lower = name.lower()
    return any(lower.endswith(ext) for ext in extensions)


class SourceScanner:
    """Walks a project root and returns candidate source files.

    Excluded directory names are skipped at any depth. Unreadable
    subtrees are logged and omitted; a missing root yields no files.
    """

    def __init__(self, excluded_dirs: Iterable[str] | None = None) -> None:
        self.excluded_dirs = frozenset(excluded_dirs) if excluded_dirs is not None else DEFAULT_EXCLUDED_DIRS

    def scan(self, root: Path, extensions: Sequence[str]) -> List[Path]:
        root = root.expanduser()
        if not root.is_dir():
            _logger.warning("Project root %s does not exist; using an empty file set", root)
            return []
        files = [path for path in self._iter_files(root) if has_extension(path.name, extensions)]
        return sorted(files, key=lambda path: path.relative_to(root).as_posix())

    def is_excluded(self, root: Path, path: Path) -> bool:
        """Return True when any directory between root and path is excluded."""
        try:
            parts = path.relative_to(root).parts[:-1]
        except ValueError:
            return True
        return any(part in self.excluded_dirs for part in parts)

    def _iter_files(self, root: Path) -> Iterator[Path]:
        def _on_error(error: OSError) -> None:
            _logger.warning("Skipping unreadable path %s: %s", error.filename, error.strerror or error)

        for dirpath, dirnames, filenames in os.walk(root, onerror=_on_error):
            dirnames[:] = sorted(name for name in dirnames if name not in self.excluded_dirs)
            current_dir = Path(dirpath)
            for filename in sorted(filenames):
                yield current_dir / filename


def read_source_text(path: Path) -> Optional[str]:
    """Return the file's UTF-8 text, or None when it does not exist."""
    try:
        return path.read_text(encoding="utf-8", errors="replace")
    except FileNotFoundError:
        return None
    except IsADirectoryError:
        return None


def read_source_bytes(path: Path) -> Optional[bytes]:
    try:
        return path.read_bytes()
    except OSError as exc:
        _logger.warning("Cannot read %s: %s", path, exc)
        return None


__all__ = [
    "GlobPattern",
    "SourceScanner",
    "has_extension",
    "read_source_bytes",
    "read_source_text",
]
