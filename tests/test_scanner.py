"""Tests for source discovery and raw reads."""

from __future__ import annotations

import logging
import os
from pathlib import Path

from tsarchitect.constants import DEFAULT_EXTENSIONS
from tsarchitect.scanner import GlobPattern, SourceScanner, read_source_bytes, read_source_text


def test_scanner_discovers_sources_in_sorted_order(repo_builder) -> None:
    repo_builder.write(
        {
            "src/b.ts": "export const b = 1;\n",
            "src/a.tsx": "export const a = 1;\n",
            "index.js": "module.exports = {};\n",
            "README.md": "# readme\n",
        }
    )
    root = repo_builder.path()

    files = SourceScanner().scan(root, DEFAULT_EXTENSIONS)

    assert [path.relative_to(root).as_posix() for path in files] == [
        "index.js",
        "src/a.tsx",
        "src/b.ts",
    ]


def test_scanner_skips_excluded_directories(repo_builder) -> None:
    repo_builder.write(
        {
            "src/main.ts": "export {};\n",
            "node_modules/pkg/index.ts": "export {};\n",
            "dist/main.js": "",
            "packages/x/node_modules/y/index.ts": "export {};\n",
        }
    )
    root = repo_builder.path()

    files = SourceScanner().scan(root, DEFAULT_EXTENSIONS)

    assert [path.relative_to(root).as_posix() for path in files] == ["src/main.ts"]


def test_scanner_honours_custom_exclusions(repo_builder) -> None:
    repo_builder.write({"src/main.ts": "", "generated/api.ts": ""})
    root = repo_builder.path()

    files = SourceScanner({"generated"}).scan(root, DEFAULT_EXTENSIONS)

    assert [path.name for path in files] == ["main.ts"]


def test_scanner_missing_root_yields_empty_list(tmp_path: Path, caplog) -> None:
    with caplog.at_level(logging.WARNING, logger="tsarchitect"):
        files = SourceScanner().scan(tmp_path / "missing", DEFAULT_EXTENSIONS)

    assert files == []


def test_is_excluded_checks_intermediate_directories(tmp_path: Path) -> None:
    scanner = SourceScanner()

    assert scanner.is_excluded(tmp_path, tmp_path / "node_modules" / "x" / "index.ts")
    assert not scanner.is_excluded(tmp_path, tmp_path / "src" / "index.ts")
    assert scanner.is_excluded(tmp_path / "a", tmp_path / "b" / "index.ts")


def test_glob_pattern_matches_tsconfig_style_globs() -> None:
    include = GlobPattern.compile("/repo/src/**/*")
    exclude_dir = GlobPattern.compile("/repo/src/legacy")
    test_files = GlobPattern.compile("/repo/**/*.test.ts")

    assert include.matches("/repo/src/app.ts")
    assert include.matches("/repo/src/deep/nested/app.ts")
    assert not include.matches("/repo/test/app.ts")
    assert exclude_dir.matches("/repo/src/legacy/old.ts")
    assert not exclude_dir.matches("/repo/src/legacyish.ts")
    assert test_files.matches("/repo/src/app.test.ts")
    assert not test_files.matches("/repo/src/app.ts")


def test_read_source_text_returns_none_for_missing_file(tmp_path: Path) -> None:
    assert read_source_text(tmp_path / "nope.ts") is None
    assert read_source_text(tmp_path) is None


def test_read_source_text_and_bytes(tmp_path: Path) -> None:
    target = tmp_path / "a.ts"
    target.write_text("export const a = 'é';\n", encoding="utf-8")

    assert read_source_text(target) == "export const a = 'é';\n"
    assert read_source_bytes(target) == "export const a = 'é';\n".encode("utf-8")
    assert read_source_bytes(tmp_path / "missing.ts") is None


def test_scan_skips_unreadable_directory_and_keeps_siblings(
    tmp_path: Path, monkeypatch, caplog
) -> None:
    (tmp_path / "src").mkdir()
    (tmp_path / "src" / "a.ts").write_text("", encoding="utf-8")
    (tmp_path / "locked").mkdir()
    (tmp_path / "locked" / "secret.ts").write_text("", encoding="utf-8")
    real_walk = os.walk

    def walk_with_locked_dir(top, onerror=None, **kwargs):
        for dirpath, dirnames, filenames in real_walk(top, onerror=onerror, **kwargs):
            if "locked" in dirnames:
                dirnames.remove("locked")
                locked = os.path.join(dirpath, "locked")
                onerror(PermissionError(13, "Permission denied", locked))
            yield dirpath, dirnames, filenames

    monkeypatch.setattr(os, "walk", walk_with_locked_dir)

    with caplog.at_level(logging.WARNING, logger="tsarchitect.scanner"):
        files = SourceScanner().scan(tmp_path, DEFAULT_EXTENSIONS)

    assert [p.relative_to(tmp_path).as_posix() for p in files] == ["src/a.ts"]
    warnings = [r for r in caplog.records if r.levelno == logging.WARNING]
    assert any(str(tmp_path / "locked") in r.getMessage() for r in warnings)
