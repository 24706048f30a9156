"""Tree-sitter parsing primitives shared by the structural analyzers."""

from __future__ import annotations

from typing import Any, Callable, Dict, Iterator, List, Optional

import tree_sitter_typescript
from tree_sitter import Language, Node, Parser, Tree

from ..constants import UNREADABLE_NODE_MARKER
from ..logging import get_logger

_logger = get_logger("analyzers.tree_sitter")

_GRAMMARS: Dict[str, Callable[[], Any]] = {
    "typescript": tree_sitter_typescript.language_typescript,
    "tsx": tree_sitter_typescript.language_tsx,
}

# Plain JavaScript may contain JSX; the tsx grammar accepts both.
_TSX_SUFFIXES = (".tsx", ".jsx", ".js", ".mjs", ".cjs")


class SliceError(ValueError):
    """Raised when a node's text cannot be recovered from the source bytes."""


def grammar_for_path(path: str) -> str:
    return "tsx" if path.lower().endswith(_TSX_SUFFIXES) else "typescript"


class SourceParser:
    """Parses TypeScript/JavaScript sources, caching one parser per grammar."""

    def __init__(self) -> None:
        self._parsers: Dict[str, Parser] = {}

    def parse(self, source: bytes, path: str) -> Tree:
        parser = self._get_parser(grammar_for_path(path))
        return parser.parse(source)

    def _get_parser(self, grammar: str) -> Parser:
        parser = self._parsers.get(grammar)
        if parser is not None:
            return parser
        language = Language(_GRAMMARS[grammar]())
        parser = Parser(language)
        self._parsers[grammar] = parser
        return parser


def slice_text(source: bytes, start: Optional[int], end: Optional[int]) -> str:
    """Return ``source[start:end]`` decoded as UTF-8, or raise SliceError."""
    if not isinstance(start, int) or not isinstance(end, int):
        raise SliceError("node has no byte range")
    if start < 0 or end > len(source) or start > end:
        raise SliceError(f"byte range {start}:{end} outside source of {len(source)} bytes")
    try:
        return source[start:end].decode("utf-8")
    except UnicodeDecodeError as exc:
        raise SliceError(str(exc)) from exc


def safe_slice(source: bytes, start: Optional[int], end: Optional[int]) -> str:
    """Like slice_text, but returns the unreadable-node marker on failure."""
    try:
        return slice_text(source, start, end)
    except SliceError as exc:
        _logger.debug("Unable to slice source text: %s", exc)
        return UNREADABLE_NODE_MARKER


def node_text(node: Optional[Node], source: bytes) -> str:
    if node is None:
        return safe_slice(source, None, None)
    return safe_slice(source, node.start_byte, node.end_byte)


def raw_node_text(node: Node) -> str:
    """Text tree-sitter kept for the node, independent of the caller's buffer."""
    text = node.text
    if text is None:
        return ""
    return text.decode("utf-8", errors="replace")


def string_literal_value(node: Optional[Node], source: bytes) -> Optional[str]:
    """Return the contents of a string literal node without its quotes."""
    if node is None or node.type != "string":
        return None
    text = node_text(node, source)
    if text == UNREADABLE_NODE_MARKER or len(text) < 2:
        return None
    return text[1:-1]


def bound_names(pattern: Optional[Node], source: bytes) -> List[str]:
    """Identifiers bound by a declarator name, including destructuring patterns."""
    if pattern is None:
        return []
    kind = pattern.type
    if kind in {"identifier", "shorthand_property_identifier_pattern"}:
        return [node_text(pattern, source)]
    if kind == "pair_pattern":
        return bound_names(pattern.child_by_field_name("value"), source)
    if kind in {"assignment_pattern", "object_assignment_pattern"}:
        return bound_names(pattern.child_by_field_name("left"), source)
    if kind in {"object_pattern", "array_pattern", "rest_pattern"}:
        names: List[str] = []
        for child in pattern.named_children:
            names.extend(bound_names(child, source))
        return names
    return []


def iter_preorder(node: Node) -> Iterator[Node]:
    """Yield ``node`` and all of its named descendants in pre-order."""
    stack = [node]
    while stack:
        current = stack.pop()
        yield current
        stack.extend(reversed(current.named_children))


__all__ = [
    "SliceError",
    "bound_names",
    "SourceParser",
    "grammar_for_path",
    "iter_preorder",
    "node_text",
    "raw_node_text",
    "safe_slice",
    "slice_text",
    "string_literal_value",
]
