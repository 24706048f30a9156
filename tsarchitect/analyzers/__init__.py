"""Structural analyzers operating on parsed source files."""

from .dependencies import collect_dependencies, iter_module_specifiers, render_dependencies
from .exports import ExportOracle, render_repo_map
from .locator import locate_definition
from .skeleton import SkeletonKind, render_skeleton
from .tree_sitter import SliceError, SourceParser, safe_slice

__all__ = [
    "ExportOracle",
    "SkeletonKind",
    "SliceError",
    "SourceParser",
    "collect_dependencies",
    "iter_module_specifiers",
    "locate_definition",
    "render_dependencies",
    "render_repo_map",
    "render_skeleton",
    "safe_slice",
]
