"""Export oracle and repo-wide export map."""

from __future__ import annotations

from typing import Iterable, List, Optional, Set

from tree_sitter import Node

from ..constants import NO_EXPORTS
from ..models import ParsedFile, ProjectModel
from ..resolver import ModuleResolver
from .tree_sitter import bound_names, node_text, string_literal_value

_NAMED_DECLARATIONS = frozenset(
    {
        "function_declaration",
        "generator_function_declaration",
        "function_signature",
        "class_declaration",
        "abstract_class_declaration",
        "interface_declaration",
        "type_alias_declaration",
        "enum_declaration",
        "internal_module",
        "module",
    }
)


class ExportOracle:
    """Lists the names a file exposes through its module surface.

    Names come out in declaration order without duplicates. ``export *``
    statements expand to the target module's names (minus ``default``)
    when the target is a project file.
    """

    def __init__(self, model: ProjectModel, resolver: ModuleResolver) -> None:
        self.model = model
        self.resolver = resolver

    def exports_of(self, parsed_file: ParsedFile) -> List[str]:
        return self._collect(parsed_file, active=set())

    def _collect(self, parsed_file: ParsedFile, active: Set[str]) -> List[str]:
        active.add(parsed_file.path)
        names: List[str] = []
        source = parsed_file.source
        for statement in parsed_file.root_node.named_children:
            if statement.type != "export_statement":
                continue
            if _is_star_export(statement):
                names.extend(self._star_exports(statement, parsed_file, active))
            else:
                names.extend(_statement_exports(statement, source))
        active.discard(parsed_file.path)
        return _dedupe(names)

    def _star_exports(self, statement: Node, parsed_file: ParsedFile, active: Set[str]) -> List[str]:
        specifier = string_literal_value(statement.child_by_field_name("source"), parsed_file.source)
        if not specifier:
            return []
        relative = self.resolver.resolve(specifier, parsed_file.path)
        if relative is None:
            return []
        target = self.model.get(str(self.model.root / relative))
        if target is None or target.path in active:
            return []
        return [name for name in self._collect(target, active) if name != "default"]


def _is_star_export(statement: Node) -> bool:
    if statement.child_by_field_name("source") is None:
        return False
    has_star = any(child.type == "*" for child in statement.children)
    has_namespace = any(child.type == "namespace_export" for child in statement.children)
    return has_star and not has_namespace


def _statement_exports(statement: Node, source: bytes) -> List[str]:
    is_default = any(child.type == "default" for child in statement.children)
    declaration = statement.child_by_field_name("declaration")
    if declaration is not None:
        return ["default"] if is_default else _declaration_names(declaration, source)
    if is_default or statement.child_by_field_name("value") is not None:
        return ["default"]

    names: List[str] = []
    for child in statement.named_children:
        if child.type == "export_clause":
            for specifier in child.named_children:
                if specifier.type != "export_specifier":
                    continue
                exported = specifier.child_by_field_name("alias")
                if exported is None:
                    exported = specifier.child_by_field_name("name")
                if exported is not None:
                    names.append(_export_name(exported, source))
        elif child.type == "namespace_export":
            for part in child.named_children:
                names.append(_export_name(part, source))
    return names


def _declaration_names(declaration: Node, source: bytes) -> List[str]:
    kind = declaration.type
    if kind in _NAMED_DECLARATIONS:
        name = declaration.child_by_field_name("name")
        return [node_text(name, source)] if name is not None else []
    if kind in {"lexical_declaration", "variable_declaration"}:
        names: List[str] = []
        for declarator in declaration.named_children:
            if declarator.type == "variable_declarator":
                names.extend(bound_names(declarator.child_by_field_name("name"), source))
        return names
    if kind == "ambient_declaration":
        names = []
        for child in declaration.named_children:
            names.extend(_declaration_names(child, source))
        return names
    if kind == "import_alias":
        identifier = next((child for child in declaration.named_children if child.type == "identifier"), None)
        return [node_text(identifier, source)] if identifier is not None else []
    return []


def _export_name(node: Node, source: bytes) -> str:
    value = string_literal_value(node, source)
    return value if value is not None else node_text(node, source)


def _dedupe(names: Iterable[str]) -> List[str]:
    seen: Set[str] = set()
    ordered: List[str] = []
    for name in names:
        if name and name not in seen:
            seen.add(name)
            ordered.append(name)
    return ordered


def render_repo_map(model: ProjectModel, oracle: Optional[ExportOracle] = None) -> str:
    """One ``[path]: names`` line per non-declaration file, in model order."""
    oracle = oracle or ExportOracle(model, ModuleResolver(model))
    lines: List[str] = []
    for parsed_file in model.iter_files():
        if parsed_file.is_declaration or "node_modules" in parsed_file.relative_path.split("/"):
            continue
        names = oracle.exports_of(parsed_file)
        rendered = ", ".join(names) if names else NO_EXPORTS
        lines.append(f"[{parsed_file.relative_path}]: {rendered}")
    return "\n".join(lines)


__all__ = ["ExportOracle", "render_repo_map"]
