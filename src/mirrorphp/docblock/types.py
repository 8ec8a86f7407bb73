"""Doc-block type tag resolution: ``int|string[]|\\Foo`` -> structured types."""

from __future__ import annotations

from dataclasses import dataclass

# Keywords that never name a class; aliases map to their canonical spelling.
SCALAR_KEYWORDS = frozenset({
    "int", "float", "bool", "string", "array", "object", "mixed", "null",
    "void", "callable", "iterable", "resource", "false", "true", "scalar",
    "numeric", "never", "self", "static", "parent", "$this",
})

_CANONICAL = {
    "integer": "int",
    "boolean": "bool",
    "double": "float",
}

_OPENERS = "<({"
_CLOSERS = ">)}"


@dataclass(frozen=True)
class DocBlockType:
    """Base of the three doc-block type variants."""


@dataclass(frozen=True)
class Scalar(DocBlockType):
    name: str

    def __str__(self) -> str:
        return self.name


@dataclass(frozen=True)
class ArrayOf(DocBlockType):
    element: DocBlockType

    @property
    def depth(self) -> int:
        """Number of ``[]`` markers this type was written with."""
        inner = self.element
        return inner.depth + 1 if isinstance(inner, ArrayOf) else 1

    def __str__(self) -> str:
        return f"{self.element}[]"


@dataclass(frozen=True)
class ClassReference(DocBlockType):
    name: str

    def __str__(self) -> str:
        return self.name


def _type_expression(value: str) -> str:
    """First whitespace-delimited token of a tag value.

    Spaces inside brackets and around ``|`` stay part of the token, so
    ``array<int, string> $x`` yields ``array<int, string>`` and
    ``int | null`` yields ``int|null``.
    """
    value = value.strip()
    chars: list[str] = []
    depth = 0
    i = 0
    while i < len(value):
        ch = value[i]
        if ch in _OPENERS:
            depth += 1
        elif ch in _CLOSERS:
            depth = max(0, depth - 1)
        elif ch.isspace() and depth == 0:
            j = i
            while j < len(value) and value[j].isspace():
                j += 1
            joined_by_pipe = (chars and chars[-1] == "|") or (j < len(value) and value[j] == "|")
            if not joined_by_pipe:
                break
            i = j
            continue
        chars.append(ch)
        i += 1
    return "".join(chars)


def _split_union(expression: str) -> list[str]:
    parts: list[str] = []
    current: list[str] = []
    depth = 0
    for ch in expression:
        if ch in _OPENERS:
            depth += 1
        elif ch in _CLOSERS:
            depth = max(0, depth - 1)
        elif ch == "|" and depth == 0:
            parts.append("".join(current))
            current = []
            continue
        current.append(ch)
    parts.append("".join(current))
    return [p.strip() for p in parts if p.strip()]


def split_type_strings(tag_value: str | None) -> list[str]:
    """Raw type tokens of a ``@var`` tag value, in declared order."""
    if not tag_value:
        return []
    return _split_union(_type_expression(tag_value))


def resolve_type(token: str) -> list[DocBlockType]:
    """Resolve one union member. ``?T`` yields two types: T then null."""
    token = token.strip()
    if token.startswith("?"):
        return resolve_type(token[1:]) + [Scalar("null")]

    depth = 0
    while token.endswith("[]"):
        depth += 1
        token = token[:-2].rstrip()

    resolved = _resolve_element(token)
    for _ in range(depth):
        resolved = ArrayOf(resolved)
    return [resolved]


def _resolve_element(token: str) -> DocBlockType:
    if not token:
        return Scalar("mixed")
    if token.startswith("(") and token.endswith(")"):
        inner = _split_union(token[1:-1])
        if len(inner) == 1:
            return _resolve_element(inner[0])
        return Scalar("mixed")
    base = token.split("<", 1)[0].split("{", 1)[0].strip()
    lowered = base.lower()
    lowered = _CANONICAL.get(lowered, lowered)
    if lowered in SCALAR_KEYWORDS:
        return Scalar(lowered)
    return ClassReference(base)


def resolve_types(tag_value: str | None) -> list[DocBlockType]:
    """Structured types of a ``@var`` tag value, in declared order."""
    types: list[DocBlockType] = []
    for token in split_type_strings(tag_value):
        types.extend(resolve_type(token))
    return types
