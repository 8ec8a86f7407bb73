"""Static reflection of a single PHP property declaration."""

from __future__ import annotations

import logging
import weakref
from functools import cached_property
from typing import TYPE_CHECKING, Any

from mirrorphp.compiler.constant_folder import ConstantFolder
from mirrorphp.docblock.parser import DocBlock
from mirrorphp.docblock.types import DocBlockType, resolve_types, split_type_strings
from mirrorphp.exit_codes import (
    InvalidArgumentError,
    InvalidNodeError,
    UnsupportedOperationError,
)
from mirrorphp.reflection.base import NamedReflectable, ObjectDescriptor
from mirrorphp.reflection.declarations import PropertyDeclaration, property_declarations
from mirrorphp.reflection.modifiers import (
    IS_PRIVATE,
    IS_PROTECTED,
    IS_PUBLIC,
    IS_READONLY,
    IS_STATIC,
    VISIBILITY_FLAGS,
    VISIBILITY_NAMES,
)

if TYPE_CHECKING:
    from mirrorphp.reflection.reflection_class import ReflectionClass
    from mirrorphp.reflector import ClassReflector

log = logging.getLogger(__name__)


class ReflectionProperty(NamedReflectable):
    """Reflection handle for one property declaration.

    Everything is derived from the bound declaration and its declaring class.
    Visibility is the only mutable fact (see ``set_visibility``); the
    ``is_default`` flag is fixed at construction: True for properties found
    in parsed source, False for synthetic declarations supplied by a caller.
    """

    IS_PUBLIC = IS_PUBLIC
    IS_PROTECTED = IS_PROTECTED
    IS_PRIVATE = IS_PRIVATE
    IS_STATIC = IS_STATIC
    IS_READONLY = IS_READONLY

    def __init__(
        self,
        reflector: "ClassReflector",
        declaration: PropertyDeclaration,
        declaring_class: "ReflectionClass",
        is_default: bool,
    ):
        self._reflector = reflector
        self._declaration = declaration
        # Non-owning: the reflector's cache is the registry of classes
        self._declaring_class_ref = weakref.ref(declaring_class)
        self._declaring_class_name = declaring_class.get_name()
        self._visibility = declaration.visibility
        self._is_default = bool(is_default)

    # ---- Construction ----

    @classmethod
    def create_from_node(
        cls,
        reflector: "ClassReflector",
        node,
        declaring_class: "ReflectionClass",
        is_default: bool = True,
        position: int = 0,
    ) -> "ReflectionProperty":
        """Bind to a ``property_declaration`` node of the declaring class's source.

        *position* picks the property when one statement declares several.
        """
        declarations = property_declarations(node, declaring_class.parsed_source)
        try:
            declaration = declarations[position]
        except IndexError:
            raise InvalidNodeError(
                f"Property declaration has {len(declarations)} properties, no position {position}"
            ) from None
        return cls(reflector, declaration, declaring_class, is_default)

    @classmethod
    def from_declaration(
        cls,
        reflector: "ClassReflector",
        declaration: PropertyDeclaration,
        declaring_class: "ReflectionClass",
        is_default: bool = True,
    ) -> "ReflectionProperty":
        if not isinstance(declaration, PropertyDeclaration):
            raise InvalidNodeError(f"Expected a PropertyDeclaration, got {type(declaration).__name__}")
        return cls(reflector, declaration, declaring_class, is_default)

    @classmethod
    def create_from_name(
        cls, reflector: "ClassReflector", class_name: str, property_name: str
    ) -> "ReflectionProperty":
        return reflector.reflect(class_name).get_property(property_name)

    @classmethod
    def create_from_instance(
        cls, reflector: "ClassReflector", instance: ObjectDescriptor, property_name: str
    ) -> "ReflectionProperty":
        if not isinstance(instance, ObjectDescriptor):
            raise InvalidArgumentError("Instance must be an ObjectDescriptor naming the object's class")
        return cls.create_from_name(reflector, instance.class_name, property_name)

    @classmethod
    def export(cls, *args, **kwargs):
        raise UnsupportedOperationError("Unable to export statically")

    # ---- Queries ----

    @property
    def declaration(self) -> PropertyDeclaration:
        return self._declaration

    def get_name(self) -> str:
        return self._declaration.name

    def get_declaring_class(self) -> "ReflectionClass":
        declaring_class = self._declaring_class_ref()
        if declaring_class is None:
            declaring_class = self._reflector.reflect(self._declaring_class_name)
            self._declaring_class_ref = weakref.ref(declaring_class)
        return declaring_class

    def is_public(self) -> bool:
        return self._visibility == IS_PUBLIC

    def is_protected(self) -> bool:
        return self._visibility == IS_PROTECTED

    def is_private(self) -> bool:
        return self._visibility == IS_PRIVATE

    def is_static(self) -> bool:
        return self._declaration.is_static

    def is_readonly(self) -> bool:
        return self._declaration.is_readonly

    def is_promoted(self) -> bool:
        return self._declaration.is_promoted

    def is_default(self) -> bool:
        return self._is_default

    def get_modifiers(self) -> int:
        modifiers = self._visibility
        if self.is_static():
            modifiers |= IS_STATIC
        if self.is_readonly():
            modifiers |= IS_READONLY
        return modifiers

    def get_type(self) -> str | None:
        """Declared type as written (``?int``, ``Foo|Bar``), or None when untyped."""
        return self._declaration.type_hint

    def has_default_value(self) -> bool:
        return self._declaration.has_default_expression

    def get_default_value(self) -> Any:
        """Folded default value; None when there is no default expression.

        Raises UnfoldableExpressionError when the expression is not a
        constant expression.
        """
        return self._default_value

    @cached_property
    def _default_value(self) -> Any:
        node = self._declaration.default_node
        if node is None:
            return None
        source = self._declaration.source
        declaring_class = self.get_declaring_class()
        folder = ConstantFolder(
            source.text,
            class_constants=declaring_class.resolve_class_constant,
            magic={
                "__CLASS__": declaring_class.get_name(),
                "__NAMESPACE__": declaring_class.get_namespace_name(),
                "__FILE__": declaring_class.get_file_name() or "",
                "__DIR__": declaring_class.get_directory_name() or "",
                "__LINE__": node.start_point[0] + 1,
            },
        )
        value = folder.fold(node)
        log.debug("Folded default of %s::$%s", self._declaring_class_name, self.get_name())
        return value

    def get_doc_comment(self) -> str:
        return self._declaration.doc_comment

    @cached_property
    def _doc_block(self) -> DocBlock:
        return DocBlock.from_comment(self._declaration.doc_comment)

    @cached_property
    def _doc_block_type_strings(self) -> tuple[str, ...]:
        return tuple(split_type_strings(self._doc_block.var_tag_value))

    @cached_property
    def _doc_block_types(self) -> tuple[DocBlockType, ...]:
        return tuple(resolve_types(self._doc_block.var_tag_value))

    def get_doc_block_type_strings(self) -> list[str]:
        return list(self._doc_block_type_strings)

    def get_doc_block_types(self) -> list[DocBlockType]:
        return list(self._doc_block_types)

    def get_start_line(self) -> int:
        return self._declaration.start_line

    def get_end_line(self) -> int:
        return self._declaration.end_line

    def get_start_column(self) -> int:
        return self._declaration.start_column

    def get_end_column(self) -> int:
        return self._declaration.end_column

    # ---- Mutation ----

    def set_visibility(self, visibility: int) -> None:
        if type(visibility) is not int or visibility not in VISIBILITY_FLAGS:
            raise InvalidArgumentError(
                "Visibility should be \\ReflectionProperty::IS_PRIVATE, ::IS_PROTECTED or ::IS_PUBLIC constants"
            )
        self._visibility = visibility

    # ---- Display ----

    def __str__(self) -> str:
        # Like PHP, static properties never carry the <default> marker
        default_marker = "<default> " if self.is_default() and not self.is_static() else ""
        static_marker = "static " if self.is_static() else ""
        return f"Property [ {default_marker}{VISIBILITY_NAMES[self._visibility]} {static_marker}${self.get_name()} ]"

    def __repr__(self) -> str:
        return f"<ReflectionProperty {self._declaring_class_name}::${self.get_name()}>"
