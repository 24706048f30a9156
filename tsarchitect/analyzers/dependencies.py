"""Per-file dependency listing."""

from __future__ import annotations

from typing import Iterator, List, Optional

from tree_sitter import Node

from ..constants import FILE_NOT_FOUND, NO_DEPENDENCIES
from ..models import ParsedFile, ProjectModel, ResolvedDependency
from ..resolver import ModuleResolver
from .tree_sitter import string_literal_value


def _specifier_node(statement: Node) -> Optional[Node]:
    if statement.type == "import_statement":
        source = statement.child_by_field_name("source")
        if source is not None:
            return source
        for child in statement.named_children:
            if child.type == "import_require_clause":
                return child.child_by_field_name("source")
        return None
    if statement.type == "export_statement":
        return statement.child_by_field_name("source")
    return None


def iter_module_specifiers(parsed_file: ParsedFile) -> Iterator[str]:
    """Yield raw specifiers of top-level import and export-from statements."""
    for statement in parsed_file.root_node.named_children:
        specifier = string_literal_value(_specifier_node(statement), parsed_file.source)
        if specifier is not None:
            yield specifier


def collect_dependencies(parsed_file: ParsedFile, resolver: ModuleResolver) -> List[ResolvedDependency]:
    return [
        resolver.resolve_dependency(specifier, parsed_file.path)
        for specifier in iter_module_specifiers(parsed_file)
    ]


def render_dependencies(model: ProjectModel, resolver: ModuleResolver, file_path: str) -> str:
    parsed_file = model.get(file_path)
    if parsed_file is None:
        return FILE_NOT_FOUND
    dependencies = collect_dependencies(parsed_file, resolver)
    if not dependencies:
        return NO_DEPENDENCIES
    return "\n".join(dependency.render() for dependency in dependencies)


__all__ = ["collect_dependencies", "iter_module_specifiers", "render_dependencies"]
