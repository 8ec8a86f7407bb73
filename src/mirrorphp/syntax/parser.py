"""PHP grammar loading and source parsing via tree-sitter."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from functools import lru_cache
from typing import TYPE_CHECKING

from tree_sitter_language_pack import get_parser

if TYPE_CHECKING:
    from tree_sitter import Node, Parser, Tree

log = logging.getLogger(__name__)

GRAMMAR = "php"


@lru_cache(maxsize=None)
def get_php_parser() -> "Parser":
    """Create and cache the tree-sitter parser for the PHP grammar."""
    return get_parser(GRAMMAR)


@dataclass(frozen=True, eq=False)
class ParsedSource:
    """An immutable parse result: the raw bytes, where they came from, the tree."""

    source: bytes
    origin: str
    tree: "Tree" = field(repr=False)

    @property
    def root(self) -> "Node":
        return self.tree.root_node

    def text(self, node) -> str:
        if node is None:
            return ""
        return self.source[node.start_byte : node.end_byte].decode("utf-8", errors="replace")


def parse_source(text: str | bytes, origin: str = "<string>", parser=None) -> ParsedSource:
    """Parse PHP source text into a ParsedSource.

    *parser* defaults to the shared tree-sitter PHP parser; anything with a
    compatible ``parse(bytes)`` method can stand in for it.
    """
    source = text.encode("utf-8") if isinstance(text, str) else text
    tree = (parser or get_php_parser()).parse(source)
    log.debug("Parsed %s (%d bytes)", origin, len(source))
    if tree.root_node.has_error:
        errors = syntax_errors(tree)
        log.warning("%s: %d syntax error(s), first at line %d", origin, len(errors), errors[0][0] if errors else 0)
    return ParsedSource(source=source, origin=origin, tree=tree)


def syntax_errors(tree) -> list[tuple[int, int]]:
    """Collect (line, column) of ERROR / MISSING nodes, 1-indexed."""
    errors: list[tuple[int, int]] = []

    def _visit(node):
        if node.type == "ERROR" or node.is_missing:
            errors.append((node.start_point[0] + 1, node.start_point[1] + 1))
        for child in node.children:
            _visit(child)

    _visit(tree.root_node)
    return errors
