"""Marker strings and defaults shared across tsarchitect components.

The marker strings are part of the output contract: downstream consumers
pattern-match on them, so they must not change casually.
"""

from __future__ import annotations

FILE_NOT_FOUND = "File not found"
NO_DEPENDENCIES = "No local dependencies found."
NO_STRUCTURAL_DEFINITIONS = "No structural definitions found."
DEFINITION_NOT_FOUND = "Definition '{name}' not found in {path}"
NO_EXPORTS = "none"
EXTERNAL_MARKER = "External/Built-in"

ELIDED_MARKER = "{ /* ... */ }"
IMPLEMENTATION_HIDDEN_MARKER = "// implementation hidden"
VARIABLE_EXPORT_MARKER = "// variable export"
RE_EXPORT_MARKER = "// re-export"
UNREADABLE_NODE_MARKER = "/* unreadable node */"

INDENT_UNIT = "  "

DEFAULT_CONFIG_NAME = "tsconfig.json"
SETTINGS_FILENAME = ".tsarchitect.yml"

VCS_METADATA_DIRS = frozenset({".git", ".hg", ".svn"})
# tsconfig wildcard includes never descend into these.
PACKAGE_DIRS = frozenset({"node_modules", "bower_components", "jspm_packages"})

# Used only when the project has no tsconfig; a tsconfig decides its own file set.
DEFAULT_EXCLUDED_DIRS = VCS_METADATA_DIRS | PACKAGE_DIRS | frozenset(
    {
        "dist",
        "build",
        "out",
        "coverage",
        ".next",
        ".nuxt",
        ".turbo",
        ".cache",
        ".yarn",
        ".pnpm-store",
    }
)

TYPESCRIPT_EXTENSIONS = (".ts", ".tsx", ".d.ts", ".mts", ".cts")
JAVASCRIPT_EXTENSIONS = (".js", ".jsx", ".mjs", ".cjs")
DEFAULT_EXTENSIONS = TYPESCRIPT_EXTENSIONS + JAVASCRIPT_EXTENSIONS

DECLARATION_SUFFIXES = (".d.ts", ".d.mts", ".d.cts")


__all__ = [
    "DECLARATION_SUFFIXES",
    "DEFAULT_CONFIG_NAME",
    "DEFAULT_EXCLUDED_DIRS",
    "DEFAULT_EXTENSIONS",
    "DEFINITION_NOT_FOUND",
    "ELIDED_MARKER",
    "EXTERNAL_MARKER",
    "FILE_NOT_FOUND",
    "IMPLEMENTATION_HIDDEN_MARKER",
    "INDENT_UNIT",
    "JAVASCRIPT_EXTENSIONS",
    "NO_DEPENDENCIES",
    "NO_EXPORTS",
    "NO_STRUCTURAL_DEFINITIONS",
    "PACKAGE_DIRS",
    "RE_EXPORT_MARKER",
    "SETTINGS_FILENAME",
    "TYPESCRIPT_EXTENSIONS",
    "UNREADABLE_NODE_MARKER",
    "VARIABLE_EXPORT_MARKER",
    "VCS_METADATA_DIRS",
]
