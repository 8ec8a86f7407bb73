"""Helpers over tree-sitter PHP nodes: text, modifiers, doc comments and
class-like discovery with namespace and ``use`` import tracking."""

from __future__ import annotations

import re
from dataclasses import dataclass, field

from mirrorphp.reflection.modifiers import IS_PRIVATE, IS_PROTECTED, IS_PUBLIC

CLASS_LIKE_KINDS = {
    "class_declaration": "class",
    "interface_declaration": "interface",
    "trait_declaration": "trait",
    "enum_declaration": "enum",
}

PROPERTY_NODE_TYPES = frozenset({"property_declaration", "property_promotion_parameter"})

_DOC_COMMENT_RE = re.compile(r"^/\*\*\s")

_VISIBILITY_FLAGS = {
    "public": IS_PUBLIC,
    "protected": IS_PROTECTED,
    "private": IS_PRIVATE,
}


def node_text(node, source: bytes) -> str:
    if node is None:
        return ""
    return source[node.start_byte : node.end_byte].decode("utf-8", errors="replace")


def find_child_type(node, type_name: str):
    """Find first child of a given type."""
    for child in node.children:
        if child.type == type_name:
            return child
    return None


def visibility_flag(node, source: bytes) -> int:
    """Visibility modifier of a declaration as an IS_* flag; ``var`` and no modifier mean public."""
    for child in node.children:
        if child.type == "visibility_modifier":
            # PHP 8.4 asymmetric visibility (``private(set)``) only narrows writes
            text = node_text(child, source).lower()
            if "(" in text:
                continue
            return _VISIBILITY_FLAGS.get(text, IS_PUBLIC)
    return IS_PUBLIC


def has_modifier(node, source: bytes, modifier: str) -> bool:
    for child in node.children:
        if child.type in (
            "static_modifier",
            "readonly_modifier",
            "abstract_modifier",
            "final_modifier",
        ):
            if node_text(child, source).lower() == modifier:
                return True
    return False


def is_doc_comment(text: str) -> bool:
    """``/** ... */`` is a doc comment; ``/**/`` and line comments are not."""
    return bool(_DOC_COMMENT_RE.match(text))


def preceding_doc_comment(node, source: bytes) -> str:
    """Nearest doc comment in the run of comments directly before *node*.

    Ordinary comments in that run are skipped; anything that is not a
    comment ends the search.
    """
    sibling = node.prev_sibling
    while sibling is not None and sibling.type == "comment":
        text = node_text(sibling, source)
        if is_doc_comment(text):
            return text
        sibling = sibling.prev_sibling
    return ""


# ---- Class-like discovery ----


@dataclass
class NameScope:
    """Namespace and class-name imports in effect at a point in a file."""

    namespace: str = ""
    imports: dict[str, str] = field(default_factory=dict)

    def resolve(self, name: str) -> str:
        """Fully qualify a class name as PHP would, without the leading ``\\``."""
        if name.startswith("\\"):
            return name[1:]
        if name.lower() in ("self", "static", "parent"):
            return name
        if name.lower().startswith("namespace\\"):
            relative = name[len("namespace\\") :]
            return f"{self.namespace}\\{relative}" if self.namespace else relative
        head, sep, rest = name.partition("\\")
        imported = self.imports.get(head.lower())
        if imported:
            return f"{imported}{sep}{rest}" if sep else imported
        return f"{self.namespace}\\{name}" if self.namespace else name


@dataclass
class ClassLikeNode:
    """A class-like declaration node together with its naming context."""

    node: object
    kind: str
    name: str
    scope: NameScope

    @property
    def qualified_name(self) -> str:
        if self.scope.namespace:
            return f"{self.scope.namespace}\\{self.name}"
        return self.name


def normalize_identifier(identifier: str) -> str:
    """Cache and comparison key for a class-like identifier."""
    return identifier.strip().lstrip("\\").lower()


def find_class_likes(root, source: bytes) -> list[ClassLikeNode]:
    """All class-like declarations in a file, in source order."""
    found: list[ClassLikeNode] = []
    _walk_class_likes(root, source, NameScope(), found)
    return found


def _walk_class_likes(node, source, scope, found):
    for child in node.children:
        ntype = child.type
        if ntype == "namespace_definition":
            name_node = child.child_by_field_name("name")
            new_scope = NameScope(namespace=node_text(name_node, source) if name_node else "")
            body = child.child_by_field_name("body")
            if body is not None:
                _walk_class_likes(body, source, new_scope, found)
            else:
                # Namespace without braces: the rest of the file belongs to it
                scope = new_scope
        elif ntype == "namespace_use_declaration":
            _collect_use_imports(child, source, scope)
        elif ntype in CLASS_LIKE_KINDS:
            name_node = child.child_by_field_name("name")
            if name_node is None:
                continue
            found.append(
                ClassLikeNode(
                    node=child,
                    kind=CLASS_LIKE_KINDS[ntype],
                    name=node_text(name_node, source),
                    scope=NameScope(scope.namespace, dict(scope.imports)),
                )
            )
        elif ntype == "compound_statement":
            _walk_class_likes(child, source, scope, found)


def _collect_use_imports(node, source, scope: NameScope) -> None:
    """Record class imports from ``use A\\B;``, ``use A\\B as C;`` and ``use A\\{B, C};``."""
    for child in node.children:
        # ``use function`` / ``use const`` import non-class symbols
        if child.type in ("function", "const"):
            return

    prefix = ""
    for child in node.children:
        if child.type in ("qualified_name", "namespace_name", "name"):
            prefix = node_text(child, source).lstrip("\\")
        elif child.type == "namespace_use_clause":
            _add_use_clause(child, source, scope, "")
        elif child.type == "namespace_use_group":
            for sub in child.children:
                if sub.type in ("namespace_use_clause", "namespace_use_group_clause"):
                    _add_use_clause(sub, source, scope, prefix)


def _add_use_clause(clause, source, scope: NameScope, prefix: str) -> None:
    name_node = (
        find_child_type(clause, "qualified_name")
        or find_child_type(clause, "namespace_name")
        or find_child_type(clause, "name")
    )
    if name_node is None:
        return
    path = node_text(name_node, source).lstrip("\\")
    if prefix:
        path = f"{prefix}\\{path}"
    alias = path.rsplit("\\", 1)[-1]
    alias_node = clause.child_by_field_name("alias")
    if alias_node is None:
        aliasing = find_child_type(clause, "namespace_aliasing_clause")
        if aliasing is not None:
            alias_node = find_child_type(aliasing, "name")
    if alias_node is not None:
        alias = node_text(alias_node, source)
    scope.imports[alias.lower()] = path
