"""Modifier bit flags, bit-exact with PHP's native ``ReflectionProperty``."""

from __future__ import annotations

IS_PUBLIC: int = 1
IS_PROTECTED: int = 2
IS_PRIVATE: int = 4
IS_STATIC: int = 16
IS_READONLY: int = 128

VISIBILITY_FLAGS = (IS_PUBLIC, IS_PROTECTED, IS_PRIVATE)

VISIBILITY_NAMES: dict[int, str] = {
    IS_PUBLIC: "public",
    IS_PROTECTED: "protected",
    IS_PRIVATE: "private",
}

# Order matches PHP's Reflection::getModifierNames()
_NAME_ORDER = (
    (IS_PUBLIC, "public"),
    (IS_PROTECTED, "protected"),
    (IS_PRIVATE, "private"),
    (IS_STATIC, "static"),
    (IS_READONLY, "readonly"),
)


def get_modifier_names(modifiers: int) -> list[str]:
    """Render a modifier bit set as PHP keywords, e.g. ``17 -> ["public", "static"]``."""
    return [name for flag, name in _NAME_ORDER if modifiers & flag]
