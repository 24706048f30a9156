"""End-to-end tests for the Orchestrator facade."""

from __future__ import annotations

import pytest

from tsarchitect.config import ArchitectConfig, ConfigError
from tsarchitect.orchestrator import Orchestrator, PathOutsideRootError


def test_end_to_end_math_and_app(math_project) -> None:
    orchestrator = math_project.orchestrator()

    repo_map = orchestrator.get_repo_map()
    skeleton = orchestrator.get_skeleton("math.ts")
    deps = orchestrator.get_deps("app.ts")

    assert repo_map.splitlines() == ["[app.ts]: run", "[math.ts]: Result, add"]
    assert "export interface Result { /* ... */ }" in skeleton
    assert "export function add(a: number, b: number): number; // implementation hidden" in skeleton
    assert "a + b" not in skeleton
    assert deps == "- ./math -> math.ts"


def test_alias_resolution_and_external_packages(repo_builder) -> None:
    repo_builder.write(
        {
            "tsconfig.json": '{"compilerOptions": {"baseUrl": ".", "paths": {"@/*": ["src/*"]}}}',
            "src/utils.ts": "export const util = 1;\n",
            "src/main.ts": "import { util } from '@/utils';\nimport _ from 'lodash';\n",
        }
    )

    deps = repo_builder.orchestrator().get_deps("src/main.ts")

    assert deps.splitlines() == [
        "- @/utils -> src/utils.ts",
        "- lodash -> External/Built-in",
    ]


def test_queries_on_unknown_files_return_sentinels(math_project) -> None:
    orchestrator = math_project.orchestrator()

    assert orchestrator.get_deps("missing.ts") == "File not found"
    assert orchestrator.get_skeleton("missing.ts") == "File not found"
    assert orchestrator.get_method_implementation("missing.ts", "add") == "File not found"
    assert orchestrator.get_method_implementation("math.ts", "subtract") == (
        "Definition 'subtract' not found in math.ts"
    )


def test_method_implementation_keeps_export(math_project) -> None:
    text = math_project.orchestrator().get_method_implementation("math.ts", "add")

    assert text.startswith("export function add(")
    assert "return a + b;" in text


def test_paths_are_normalised(math_project) -> None:
    orchestrator = math_project.orchestrator()

    assert orchestrator.get_deps("./app.ts") == "- ./math -> math.ts"
    assert orchestrator.get_skeleton("sub/../math.ts") == orchestrator.get_skeleton("math.ts")


def test_refresh_swaps_snapshot_and_is_idempotent(math_project) -> None:
    orchestrator = math_project.orchestrator()
    before = orchestrator.snapshot
    first_map = orchestrator.get_repo_map()

    orchestrator.refresh()

    assert orchestrator.snapshot is not before
    assert orchestrator.get_repo_map() == first_map
    assert len(before) == 2


def test_refresh_picks_up_new_files_without_touching_old_snapshot(math_project) -> None:
    orchestrator = math_project.orchestrator()
    before = orchestrator.snapshot

    math_project.write({"extra.ts": "export const extra = true;\n"})
    orchestrator.refresh()

    assert "[extra.ts]: extra" in orchestrator.get_repo_map()
    assert len(before) == 2
    assert len(orchestrator.snapshot) == 3


def test_missing_root_yields_empty_results(tmp_path) -> None:
    root = tmp_path / "does-not-exist"
    orchestrator = Orchestrator(root, settings=ArchitectConfig(root=root))

    assert orchestrator.get_repo_map() == ""
    assert orchestrator.get_deps("a.ts") == "File not found"


def test_strict_mode_requires_tsconfig(math_project) -> None:
    with pytest.raises(ConfigError):
        math_project.orchestrator(strict=True)


def test_strict_setting_from_settings_file(repo_builder) -> None:
    repo_builder.write({".tsarchitect.yml": "strict: true\n", "a.ts": ""})

    with pytest.raises(ConfigError):
        Orchestrator(repo_builder.path())


def test_malformed_tsconfig_falls_back_to_default_policy(repo_builder) -> None:
    repo_builder.write({"tsconfig.json": "{ not json", "a.js": "export const a = 1;\n"})

    orchestrator = repo_builder.orchestrator()

    assert orchestrator.snapshot.config.is_default
    assert orchestrator.get_repo_map() == "[a.js]: a"


def test_settings_file_adds_excluded_directories(repo_builder) -> None:
    repo_builder.write(
        {
            ".tsarchitect.yml": "exclude_dirs: [generated]\n",
            "src/a.ts": "export const a = 1;\n",
            "generated/api.ts": "export const api = 1;\n",
        }
    )

    orchestrator = Orchestrator(repo_builder.path())

    assert orchestrator.get_repo_map() == "[src/a.ts]: a"


def test_read_full_file_returns_text_and_guards_root(math_project) -> None:
    orchestrator = math_project.orchestrator()

    assert orchestrator.read_full_file("math.ts").startswith("export interface Result")
    with pytest.raises(FileNotFoundError):
        orchestrator.read_full_file("nope.ts")
    with pytest.raises(PathOutsideRootError):
        orchestrator.read_full_file("../outside.ts")


def test_snapshot_before_first_build_raises() -> None:
    orchestrator = object.__new__(Orchestrator)
    orchestrator._model = None

    with pytest.raises(RuntimeError, match="not been built"):
        orchestrator.snapshot
