"""Skeleton rendering: a body-elided structural view of one source file.

Every node is classified into exactly one :class:`SkeletonKind` by walking an
ordered rule table (first match wins). Each kind has one renderer that
returns the lines for its subtree; nothing is accumulated across calls, so
rendering a file is a pure function of its parsed tree.

Headers are exact slices of the file's source bytes, taken from the start of the
enclosing ``export`` statement (when there is one) up to the body node.
"""

from __future__ import annotations

from dataclasses import dataclass, replace
from enum import Enum
from typing import Callable, Dict, List, Optional, Tuple

from tree_sitter import Node

from ..constants import (
    ELIDED_MARKER,
    IMPLEMENTATION_HIDDEN_MARKER,
    INDENT_UNIT,
    NO_STRUCTURAL_DEFINITIONS,
    RE_EXPORT_MARKER,
    UNREADABLE_NODE_MARKER,
    VARIABLE_EXPORT_MARKER,
)
from ..models import ParsedFile
from .tree_sitter import bound_names, iter_preorder, node_text, safe_slice


class SkeletonKind(Enum):
    """Rendering decision attached to one syntax node."""

    TYPE_DECLARATION = "type_declaration"
    CLASS_CONTAINER = "class_container"
    CALLABLE_SIGNATURE = "callable_signature"
    EXPORTED_BINDING = "exported_binding"
    RE_EXPORT = "re_export"
    TRANSPARENT = "transparent"
    OPAQUE = "opaque"


TYPE_DECLARATION_TYPES = frozenset(
    {"interface_declaration", "type_alias_declaration", "enum_declaration"}
)
CLASS_TYPES = frozenset({"class_declaration", "abstract_class_declaration"})
CALLABLE_TYPES = frozenset(
    {
        "function_declaration",
        "generator_function_declaration",
        "function_signature",
        "method_definition",
        "method_signature",
        "abstract_method_signature",
    }
)
# Anonymous `export default class {}` / `export default function () {}` forms.
ANONYMOUS_CLASS_TYPES = frozenset({"class"})
ANONYMOUS_CALLABLE_TYPES = frozenset({"function_expression", "generator_function"})
BINDING_TYPES = frozenset({"lexical_declaration", "variable_declaration"})
OPAQUE_TYPES = frozenset({"comment", "hash_bang_line"})


@dataclass(frozen=True)
class RenderContext:
    depth: int = 0
    anchor: Optional[Node] = None
    in_class: bool = False

    @property
    def indent(self) -> str:
        return INDENT_UNIT * self.depth

    @property
    def exported(self) -> bool:
        return self.anchor is not None


_Predicate = Callable[[Node, RenderContext], bool]

_RULES: Tuple[Tuple[SkeletonKind, _Predicate], ...] = (
    (SkeletonKind.TYPE_DECLARATION, lambda node, ctx: node.type in TYPE_DECLARATION_TYPES),
    (
        SkeletonKind.CLASS_CONTAINER,
        lambda node, ctx: node.type in CLASS_TYPES
        or (node.type in ANONYMOUS_CLASS_TYPES and ctx.exported),
    ),
    (
        SkeletonKind.CALLABLE_SIGNATURE,
        lambda node, ctx: (node.type in CALLABLE_TYPES and (ctx.exported or ctx.in_class))
        or (node.type in ANONYMOUS_CALLABLE_TYPES and ctx.exported),
    ),
    (SkeletonKind.EXPORTED_BINDING, lambda node, ctx: node.type in BINDING_TYPES and ctx.exported),
    (
        SkeletonKind.RE_EXPORT,
        lambda node, ctx: node.type == "export_statement"
        and node.child_by_field_name("source") is not None,
    ),
    (
        SkeletonKind.OPAQUE,
        lambda node, ctx: not node.is_named or node.type in CALLABLE_TYPES or node.type in OPAQUE_TYPES,
    ),
)


def classify(node: Node, ctx: RenderContext) -> SkeletonKind:
    for kind, predicate in _RULES:
        if predicate(node, ctx):
            return kind
    return SkeletonKind.TRANSPARENT


def render_skeleton(parsed_file: ParsedFile) -> str:
    """Return the skeleton text for ``parsed_file``."""
    lines = render_node(parsed_file.root_node, parsed_file.source, RenderContext())
    if not lines:
        return NO_STRUCTURAL_DEFINITIONS
    return "\n".join(lines)


def render_node(node: Node, source: bytes, ctx: RenderContext) -> List[str]:
    kind = classify(node, ctx)
    return _RENDERERS[kind](node, source, ctx)


def _header_start(node: Node, ctx: RenderContext) -> int:
    anchor = ctx.anchor if ctx.anchor is not None else node
    return anchor.start_byte


def _strip_terminator(text: str) -> str:
    text = text.rstrip()
    if text.endswith(";"):
        text = text[:-1].rstrip()
    return text


def _first_object_type(value: Optional[Node]) -> Optional[Node]:
    """First `{ ... }` literal type inside an alias value, e.g. in a union."""
    if value is None:
        return None
    return next((child for child in iter_preorder(value) if child.type == "object_type"), None)


def _render_type_declaration(node: Node, source: bytes, ctx: RenderContext) -> List[str]:
    body = node.child_by_field_name("body")
    if node.type == "type_alias_declaration":
        body = _first_object_type(node.child_by_field_name("value"))

    start = _header_start(node, ctx)
    if body is None:
        # Nothing to elide: aliases such as `type Id = string` are kept whole.
        text = safe_slice(source, start, node.end_byte)
        if text == UNREADABLE_NODE_MARKER:
            return [ctx.indent + text]
        return [f"{ctx.indent}{_strip_terminator(text)};"]

    header = safe_slice(source, start, body.start_byte)
    if header == UNREADABLE_NODE_MARKER:
        return [ctx.indent + header]
    return [f"{ctx.indent}{header.rstrip()} {ELIDED_MARKER}"]


def _render_class(node: Node, source: bytes, ctx: RenderContext) -> List[str]:
    body = node.child_by_field_name("body")
    if body is None:
        return [ctx.indent + UNREADABLE_NODE_MARKER]

    header = safe_slice(source, _header_start(node, ctx), body.start_byte)
    if header == UNREADABLE_NODE_MARKER:
        lines = [ctx.indent + header]
    else:
        lines = [f"{ctx.indent}{header.rstrip()} {{"]

    member_ctx = RenderContext(depth=ctx.depth + 1, anchor=None, in_class=True)
    for member in body.named_children:
        lines.extend(render_node(member, source, member_ctx))
    lines.append(f"{ctx.indent}}}")
    return lines


def _render_callable(node: Node, source: bytes, ctx: RenderContext) -> List[str]:
    body = node.child_by_field_name("body")
    end = body.start_byte if body is not None else node.end_byte
    header = safe_slice(source, _header_start(node, ctx), end)
    if header == UNREADABLE_NODE_MARKER:
        return [ctx.indent + header]
    return [f"{ctx.indent}{_strip_terminator(header)}; {IMPLEMENTATION_HIDDEN_MARKER}"]


def _render_binding(node: Node, source: bytes, ctx: RenderContext) -> List[str]:
    declarators = [child for child in node.named_children if child.type == "variable_declarator"]
    if not declarators:
        return []

    prefix = safe_slice(source, _header_start(node, ctx), declarators[0].start_byte)
    if prefix == UNREADABLE_NODE_MARKER:
        return [ctx.indent + prefix]
    prefix = " ".join(prefix.split())

    lines: List[str] = []
    for declarator in declarators:
        name_node = declarator.child_by_field_name("name")
        if name_node is None:
            lines.append(ctx.indent + UNREADABLE_NODE_MARKER)
            continue
        annotation = ""
        type_node = declarator.child_by_field_name("type")
        if name_node.type == "identifier" and type_node is not None:
            annotation = node_text(type_node, source)
            if annotation == UNREADABLE_NODE_MARKER:
                annotation = ""
        for name in bound_names(name_node, source):
            lines.append(f"{ctx.indent}{prefix} {name}{annotation}; {VARIABLE_EXPORT_MARKER}")
    return lines


def _render_re_export(node: Node, source: bytes, ctx: RenderContext) -> List[str]:
    text = node_text(node, source)
    if text == UNREADABLE_NODE_MARKER:
        return [ctx.indent + text]
    return [f"{ctx.indent}{_strip_terminator(text)}; {RE_EXPORT_MARKER}"]


def _render_transparent(node: Node, source: bytes, ctx: RenderContext) -> List[str]:
    if node.type == "export_statement":
        child_ctx = replace(ctx, anchor=node, in_class=False)
    elif node.type == "ambient_declaration":
        child_ctx = replace(ctx, in_class=False)
    else:
        child_ctx = replace(ctx, anchor=None, in_class=False)

    lines: List[str] = []
    for child in node.named_children:
        lines.extend(render_node(child, source, child_ctx))
    return lines


def _render_opaque(node: Node, source: bytes, ctx: RenderContext) -> List[str]:
    return []


_RENDERERS: Dict[SkeletonKind, Callable[[Node, bytes, RenderContext], List[str]]] = {
    SkeletonKind.TYPE_DECLARATION: _render_type_declaration,
    SkeletonKind.CLASS_CONTAINER: _render_class,
    SkeletonKind.CALLABLE_SIGNATURE: _render_callable,
    SkeletonKind.EXPORTED_BINDING: _render_binding,
    SkeletonKind.RE_EXPORT: _render_re_export,
    SkeletonKind.TRANSPARENT: _render_transparent,
    SkeletonKind.OPAQUE: _render_opaque,
}


__all__ = [
    "RenderContext",
    "SkeletonKind",
    "classify",
    "render_node",
    "render_skeleton",
]
