"""Exact-name lookup of a single declaration's full source text."""

from __future__ import annotations

from typing import List

from tree_sitter import Node

from ..constants import DEFINITION_NOT_FOUND, UNREADABLE_NODE_MARKER
from ..models import ParsedFile
from .tree_sitter import bound_names, iter_preorder, node_text, raw_node_text

_CALLABLE_DECLARATIONS = frozenset(
    {"function_declaration", "generator_function_declaration", "method_definition"}
)
_WRAPPERS = frozenset({"export_statement", "ambient_declaration"})


def _declared_names(node: Node, source: bytes) -> List[str]:
    if node.type == "variable_declarator":
        return bound_names(node.child_by_field_name("name"), source)
    name = node.child_by_field_name("name")
    return [node_text(name, source)] if name is not None else []


def _result_node(node: Node) -> Node:
    """Widen a match to the text a reader expects to see.

    Variables widen to their statement, and both variables and free
    functions keep an enclosing ``export``/``declare`` wrapper.
    """
    target = node
    if node.type == "variable_declarator" and node.parent is not None:
        target = node.parent
    elif node.type == "method_definition":
        return node
    while target.parent is not None and target.parent.type in _WRAPPERS:
        target = target.parent
    return target


def locate_definition(parsed_file: ParsedFile, name: str) -> str:
    """Return the first declaration named ``name`` in pre-order, verbatim."""
    source = parsed_file.source
    for node in iter_preorder(parsed_file.root_node):
        if node.type != "variable_declarator" and node.type not in _CALLABLE_DECLARATIONS:
            continue
        if name not in _declared_names(node, source):
            continue
        target = _result_node(node)
        text = node_text(target, source)
        if text == UNREADABLE_NODE_MARKER:
            text = raw_node_text(target)
        return text
    return DEFINITION_NOT_FOUND.format(name=name, path=parsed_file.relative_path)


__all__ = ["locate_definition"]
