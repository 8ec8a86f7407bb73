"""Immutable member declarations extracted from class-like syntax nodes."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any

from mirrorphp.exit_codes import InvalidNodeError
from mirrorphp.reflection.modifiers import IS_PUBLIC, VISIBILITY_FLAGS
from mirrorphp.syntax.nodes import (
    PROPERTY_NODE_TYPES,
    find_child_type,
    has_modifier,
    node_text,
    preceding_doc_comment,
    visibility_flag,
)

if TYPE_CHECKING:
    from mirrorphp.syntax.parser import ParsedSource

log = logging.getLogger(__name__)


@dataclass(frozen=True)
class PropertyDeclaration:
    """One declared property.

    Declarations built from source carry the ParsedSource their nodes point
    into; synthetic ones (built by callers for members that only exist at
    run time) leave *source*, *node* and *default_node* unset and report
    -1 for positions.
    """

    name: str
    visibility: int = IS_PUBLIC
    is_static: bool = False
    is_readonly: bool = False
    is_promoted: bool = False
    type_hint: str | None = None
    default_node: Any = None
    doc_comment: str = ""
    start_line: int = -1
    end_line: int = -1
    start_column: int = -1
    end_column: int = -1
    source: "ParsedSource | None" = None
    node: Any = None

    def __post_init__(self):
        if not self.name:
            raise InvalidNodeError("A property declaration needs a name")
        if self.visibility not in VISIBILITY_FLAGS:
            raise InvalidNodeError(f"Invalid visibility flag {self.visibility} for property ${self.name}")

    @property
    def has_default_expression(self) -> bool:
        return self.default_node is not None


@dataclass(frozen=True)
class ConstantDeclaration:
    name: str
    value_node: Any
    visibility: int
    source: "ParsedSource"


def _span(node) -> dict:
    # tree-sitter points are 0-based; end column is exclusive, so it doubles as 1-based inclusive
    return {
        "start_line": node.start_point[0] + 1,
        "end_line": node.end_point[0] + 1,
        "start_column": node.start_point[1] + 1,
        "end_column": node.end_point[1],
    }


def property_declarations(node, parsed: "ParsedSource") -> list[PropertyDeclaration]:
    """Declarations for every property in a ``property_declaration`` node.

    ``public $a = 1, $b;`` yields two declarations sharing modifiers, doc
    comment and the span of the whole statement.
    """
    if node is None or getattr(node, "type", None) not in PROPERTY_NODE_TYPES:
        raise InvalidNodeError(
            f"Expected a property declaration node, got {getattr(node, 'type', type(node).__name__)}"
        )
    if node.type == "property_promotion_parameter":
        return [_promoted_declaration(node, parsed)]

    source = parsed.source
    type_node = node.child_by_field_name("type")
    common = dict(
        visibility=visibility_flag(node, source),
        is_static=has_modifier(node, source, "static"),
        is_readonly=has_modifier(node, source, "readonly"),
        type_hint=node_text(type_node, source) if type_node is not None else None,
        doc_comment=preceding_doc_comment(node, source),
        source=parsed,
        node=node,
        **_span(node),
    )

    declarations = []
    for child in node.children:
        if child.type == "property_element":
            var_node = child.child_by_field_name("name") or find_child_type(child, "variable_name")
            if var_node is None:
                continue
            default = child.child_by_field_name("default_value")
            if default is None:
                initializer = find_child_type(child, "property_initializer")
                if initializer is not None and initializer.named_children:
                    default = initializer.named_children[-1]
            declarations.append(
                PropertyDeclaration(name=node_text(var_node, source).lstrip("$"), default_node=default, **common)
            )
        elif child.type == "variable_name":
            declarations.append(PropertyDeclaration(name=node_text(child, source).lstrip("$"), **common))
    return declarations


def _promoted_declaration(node, parsed: "ParsedSource") -> PropertyDeclaration:
    """Constructor-promoted parameter (PHP 8.0+): ``__construct(private int $x)``.

    The parameter's default belongs to the parameter, so the property has none.
    """
    source = parsed.source
    var_node = node.child_by_field_name("name") or find_child_type(node, "variable_name")
    if var_node is None:
        raise InvalidNodeError("Promoted parameter without a variable name")
    type_node = node.child_by_field_name("type")
    return PropertyDeclaration(
        name=node_text(var_node, source).lstrip("$"),
        visibility=visibility_flag(node, source),
        is_readonly=has_modifier(node, source, "readonly"),
        is_promoted=True,
        type_hint=node_text(type_node, source) if type_node is not None else None,
        doc_comment=preceding_doc_comment(node, source),
        source=parsed,
        node=node,
        **_span(node),
    )


def promoted_parameter_nodes(body, source: bytes) -> list:
    """``property_promotion_parameter`` nodes of the constructor in a class body."""
    for child in body.children:
        if child.type != "method_declaration":
            continue
        name_node = child.child_by_field_name("name")
        if name_node is None or node_text(name_node, source).lower() != "__construct":
            continue
        params = child.child_by_field_name("parameters")
        if params is None:
            return []
        return [p for p in params.children if p.type == "property_promotion_parameter"]
    return []


def constant_declarations(body, parsed: "ParsedSource") -> list[ConstantDeclaration]:
    """Class constants declared in a class-like body, in source order."""
    source = parsed.source
    constants = []
    for child in body.children:
        if child.type != "const_declaration":
            continue
        visibility = visibility_flag(child, source)
        for element in child.children:
            if element.type != "const_element":
                continue
            named = element.named_children
            if len(named) < 2:
                continue
            constants.append(
                ConstantDeclaration(
                    name=node_text(named[0], source),
                    value_node=named[-1],
                    visibility=visibility,
                    source=parsed,
                )
            )
    return constants
