"""Tests for module specifier resolution."""

from __future__ import annotations

from tsarchitect.resolver import ModuleResolver, is_relative_specifier, match_alias


def test_is_relative_specifier() -> None:
    assert is_relative_specifier("./a")
    assert is_relative_specifier("../a")
    assert is_relative_specifier(".")
    assert not is_relative_specifier("lodash")
    assert not is_relative_specifier("@/utils")


def test_match_alias_prefers_exact_then_longest_prefix() -> None:
    patterns = ["@/*", "@/components/*", "config"]

    assert match_alias("config", patterns) == ("config", "")
    assert match_alias("@/components/button", patterns) == ("@/components/*", "button")
    assert match_alias("@/utils", patterns) == ("@/*", "utils")
    assert match_alias("lodash", patterns) is None


def test_resolves_relative_import_by_appending_extensions(repo_builder) -> None:
    repo_builder.write(
        {
            "src/math.ts": "export const one = 1;\n",
            "src/app.ts": "import { one } from './math';\n",
        }
    )
    resolver = ModuleResolver(repo_builder.model())

    assert resolver.resolve("./math", repo_builder.key("src/app.ts")) == "src/math.ts"
    assert resolver.resolve("../src/math", repo_builder.key("src/app.ts")) == "src/math.ts"


def test_resolves_directory_index_and_js_extension(repo_builder) -> None:
    repo_builder.write(
        {
            "src/lib/index.ts": "export const lib = 1;\n",
            "src/util.ts": "export const util = 1;\n",
            "src/app.ts": "",
        }
    )
    resolver = ModuleResolver(repo_builder.model())
    importer = repo_builder.key("src/app.ts")

    assert resolver.resolve("./lib", importer) == "src/lib/index.ts"
    assert resolver.resolve("./util.js", importer) == "src/util.ts"


def test_resolves_package_json_types_entry(repo_builder) -> None:
    repo_builder.write(
        {
            "packages/core/package.json": '{"types": "./src/entry.ts"}',
            "packages/core/src/entry.ts": "export const core = 1;\n",
            "app.ts": "",
        }
    )
    resolver = ModuleResolver(repo_builder.model())

    assert resolver.resolve("./packages/core", repo_builder.key("app.ts")) == "packages/core/src/entry.ts"


def test_alias_and_base_url_resolution(repo_builder) -> None:
    repo_builder.write(
        {
            "tsconfig.json": """
            {
              "compilerOptions": {
                "baseUrl": ".",
                "paths": {"@/*": ["src/*"]}
              }
            }
            """,
            "src/utils.ts": "export const util = 1;\n",
            "shared/format.ts": "export const format = 1;\n",
            "src/app.ts": "",
        }
    )
    resolver = ModuleResolver(repo_builder.model())
    importer = repo_builder.key("src/app.ts")

    assert resolver.resolve("@/utils", importer) == "src/utils.ts"
    assert resolver.resolve("shared/format", importer) == "shared/format.ts"
    assert resolver.resolve("lodash", importer) is None


def test_unresolvable_and_excluded_targets_are_external(repo_builder) -> None:
    repo_builder.write(
        {
            "node_modules/left-pad/index.ts": "export {};\n",
            "app.ts": "",
        }
    )
    resolver = ModuleResolver(repo_builder.model())
    importer = repo_builder.key("app.ts")

    assert resolver.resolve("./missing", importer) is None
    assert resolver.resolve("./node_modules/left-pad", importer) is None
    assert resolver.resolve("fs", importer) is None
    assert resolver.resolve("", importer) is None


def test_resolve_dependency_renders_marker(repo_builder) -> None:
    repo_builder.write({"a.ts": "", "b.ts": ""})
    resolver = ModuleResolver(repo_builder.model())

    local = resolver.resolve_dependency("./b", repo_builder.key("a.ts"))
    external = resolver.resolve_dependency("react", repo_builder.key("a.ts"))

    assert local.render() == "- ./b -> b.ts"
    assert external.is_external
    assert external.render() == "- react -> External/Built-in"


def test_resolution_is_deterministic(repo_builder) -> None:
    repo_builder.write(
        {
            "src/widget.ts": "",
            "src/widget.tsx": "",
            "src/widget/index.ts": "",
            "src/app.ts": "",
        }
    )
    model = repo_builder.model()
    importer = repo_builder.key("src/app.ts")

    results = {ModuleResolver(model).resolve("./widget", importer) for _ in range(5)}

    assert results == {"src/widget.ts"}


def test_typescript_source_wins_and_only_recognised_extensions_resolve(repo_builder) -> None:
    repo_builder.write(
        {
            "src/util.ts": "export const util = 1;\n",
            "src/util.js": "exports.util = 1;\n",
            "src/util": "#!/bin/sh\n",
            "src/styles.css": "body {}\n",
            "src/app.ts": "",
        }
    )
    resolver = ModuleResolver(repo_builder.model())
    importer = repo_builder.key("src/app.ts")

    assert resolver.resolve("./util.js", importer) == "src/util.ts"
    assert resolver.resolve("./util", importer) == "src/util.ts"
    assert resolver.resolve("./styles.css", importer) is None
