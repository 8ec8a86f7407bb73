"""Static reflection of a class-like declaration (class, interface, trait, enum)."""

from __future__ import annotations

import logging
import posixpath
from functools import cached_property
from typing import TYPE_CHECKING, Any, Iterator

from mirrorphp.compiler.constant_folder import ConstantFolder
from mirrorphp.exit_codes import (
    CircularReferenceError,
    IdentifierNotFoundError,
    UnfoldableExpressionError,
)
from mirrorphp.reflection.base import NamedReflectable
from mirrorphp.reflection.declarations import (
    ConstantDeclaration,
    constant_declarations,
    promoted_parameter_nodes,
    property_declarations,
)
from mirrorphp.reflection.reflection_property import ReflectionProperty
from mirrorphp.syntax.nodes import (
    ClassLikeNode,
    find_child_type,
    has_modifier,
    node_text,
    normalize_identifier,
    preceding_doc_comment,
)

if TYPE_CHECKING:
    from mirrorphp.reflector import ClassReflector
    from mirrorphp.syntax.parser import ParsedSource

log = logging.getLogger(__name__)

_NAME_NODES = ("name", "qualified_name")


class ReflectionClass(NamedReflectable):
    """Reflection of one class-like declaration found in parsed source.

    Ancestors are referenced by name and reflected lazily through the same
    reflector, so their sources are only located when inherited members are
    asked for.
    """

    def __init__(self, reflector: "ClassReflector", class_like: ClassLikeNode, parsed: "ParsedSource"):
        self._reflector = reflector
        self._class_like = class_like
        self._node = class_like.node
        self.parsed_source = parsed
        self._folding: set[str] = set()

    # ---- Naming ----

    def get_name(self) -> str:
        return self._class_like.qualified_name

    def get_short_name(self) -> str:
        return self._class_like.name

    def get_namespace_name(self) -> str:
        return self._class_like.scope.namespace

    def in_namespace(self) -> bool:
        return bool(self._class_like.scope.namespace)

    def resolve_name(self, name: str) -> str:
        """Fully qualify *name* as written inside this class's file."""
        return self._class_like.scope.resolve(name)

    # ---- Kind and modifiers ----

    def get_kind(self) -> str:
        return self._class_like.kind

    def is_interface(self) -> bool:
        return self._class_like.kind == "interface"

    def is_trait(self) -> bool:
        return self._class_like.kind == "trait"

    def is_enum(self) -> bool:
        return self._class_like.kind == "enum"

    def is_abstract(self) -> bool:
        return has_modifier(self._node, self.parsed_source.source, "abstract")

    def is_final(self) -> bool:
        return has_modifier(self._node, self.parsed_source.source, "final")

    # ---- Source position ----

    def get_doc_comment(self) -> str:
        return preceding_doc_comment(self._node, self.parsed_source.source)

    def get_start_line(self) -> int:
        return self._node.start_point[0] + 1

    def get_end_line(self) -> int:
        return self._node.end_point[0] + 1

    def get_file_name(self) -> str | None:
        origin = self.parsed_source.origin
        return None if origin.startswith("<") else origin

    def get_directory_name(self) -> str | None:
        file_name = self.get_file_name()
        return posixpath.dirname(file_name.replace("\\", "/")) if file_name else None

    # ---- Hierarchy ----

    def _clause_names(self, clause_type: str) -> list[str]:
        clause = find_child_type(self._node, clause_type)
        if clause is None:
            return []
        source = self.parsed_source.source
        return [self.resolve_name(node_text(c, source)) for c in clause.children if c.type in _NAME_NODES]

    def get_parent_class_name(self) -> str | None:
        # Interfaces "extend" interfaces; that is not a parent class
        if self._class_like.kind != "class":
            return None
        parents = self._clause_names("base_clause")
        return parents[0] if parents else None

    def get_parent_class(self) -> "ReflectionClass | None":
        parent_name = self.get_parent_class_name()
        if parent_name is None:
            return None
        return self._reflector.reflect(parent_name)

    def get_parent_class_names(self) -> list[str]:
        return [cls.get_name() for cls in self._class_chain()][1:]

    def get_interface_names(self) -> list[str]:
        if self._class_like.kind == "interface":
            return self._clause_names("base_clause")
        return self._clause_names("class_interface_clause")

    def get_trait_names(self) -> list[str]:
        body = self._body
        if body is None:
            return []
        source = self.parsed_source.source
        names = []
        for child in body.children:
            if child.type == "use_declaration":
                names.extend(self.resolve_name(node_text(c, source)) for c in child.children if c.type in _NAME_NODES)
        return names

    def _class_chain(self) -> Iterator["ReflectionClass"]:
        """This class, then each ancestor; raises on inheritance cycles."""
        seen: set[str] = set()
        current: ReflectionClass | None = self
        while current is not None:
            key = normalize_identifier(current.get_name())
            if key in seen:
                raise CircularReferenceError(f"Circular inheritance detected for class {self.get_name()}")
            seen.add(key)
            yield current
            current = current.get_parent_class()

    # ---- Properties ----

    @property
    def _body(self):
        return self._node.child_by_field_name("body")

    @cached_property
    def _declared_properties(self) -> dict[str, ReflectionProperty]:
        """Properties declared in this body, promoted ones, then trait-imported ones."""
        properties: dict[str, ReflectionProperty] = {}
        body = self._body
        if body is None:
            return properties
        source = self.parsed_source.source

        nodes = [c for c in body.children if c.type == "property_declaration"]
        nodes.extend(promoted_parameter_nodes(body, source))
        for node in nodes:
            for declaration in property_declarations(node, self.parsed_source):
                if declaration.name in properties:
                    log.warning("%s declares $%s more than once; keeping the first", self.get_name(), declaration.name)
                    continue
                properties[declaration.name] = ReflectionProperty.from_declaration(
                    self._reflector, declaration, self, is_default=True
                )

        for trait_name in self.get_trait_names():
            trait = self._reflector.reflect(trait_name)
            for name, trait_property in trait._declared_properties.items():
                if name not in properties:
                    properties[name] = ReflectionProperty.from_declaration(
                        self._reflector, trait_property.declaration, self, is_default=True
                    )
        return properties

    def get_immediate_properties(self) -> dict[str, ReflectionProperty]:
        return dict(self._declared_properties)

    def get_properties(self) -> dict[str, ReflectionProperty]:
        """Declared and inherited properties; descendants shadow ancestors."""
        properties: dict[str, ReflectionProperty] = {}
        for cls in self._class_chain():
            for name, prop in cls._declared_properties.items():
                properties.setdefault(name, prop)
        return properties

    def get_property(self, name: str) -> ReflectionProperty:
        """Declared property first, then the nearest ancestor declaring it.

        Inherited handles keep the ancestor as their declaring class.
        """
        name = name.lstrip("$")
        for cls in self._class_chain():
            prop = cls._declared_properties.get(name)
            if prop is not None:
                return prop
        raise IdentifierNotFoundError.for_property(self.get_name(), name)

    def has_property(self, name: str) -> bool:
        try:
            self.get_property(name)
        except IdentifierNotFoundError:
            return False
        return True

    # ---- Constants ----

    @cached_property
    def _constants(self) -> dict[str, ConstantDeclaration]:
        body = self._body
        if body is None:
            return {}
        return {c.name: c for c in constant_declarations(body, self.parsed_source)}

    def get_constant_names(self) -> list[str]:
        return list(self._constants)

    def get_constant_value(self, name: str) -> Any:
        """Folded value of a class constant, searching ancestors and interfaces."""
        declaration = self._constants.get(name)
        if declaration is None:
            return self._inherited_constant_value(name)
        if name in self._folding:
            raise UnfoldableExpressionError(f"Constant {self.get_name()}::{name} refers to itself")
        self._folding.add(name)
        try:
            folder = ConstantFolder(
                declaration.source.text,
                class_constants=self.resolve_class_constant,
                magic={"__CLASS__": self.get_name(), "__NAMESPACE__": self.get_namespace_name()},
            )
            return folder.fold(declaration.value_node)
        finally:
            self._folding.discard(name)

    def _inherited_constant_value(self, name: str) -> Any:
        related = []
        if self.get_parent_class_name():
            related.append(self.get_parent_class_name())
        related.extend(self.get_interface_names())
        for class_name in related:
            try:
                return self._reflector.reflect(class_name).get_constant_value(name)
            except (IdentifierNotFoundError, UnfoldableExpressionError):
                continue
        raise UnfoldableExpressionError(f"Could not locate constant {self.get_name()}::{name}")

    def resolve_class_constant(self, scope: str, name: str) -> Any:
        """Value of ``scope::name`` as written inside this class's body."""
        lowered = scope.lower()
        if lowered in ("self", "static"):
            target: ReflectionClass | None = self
        elif lowered == "parent":
            target = self.get_parent_class()
            if target is None:
                raise UnfoldableExpressionError(f"{self.get_name()} has no parent for parent::{name}")
        else:
            class_name = self.resolve_name(scope)
            if name.lower() == "class":
                return class_name
            try:
                target = self._reflector.reflect(class_name)
            except IdentifierNotFoundError as exc:
                raise UnfoldableExpressionError(f"Could not locate class {class_name} for {scope}::{name}") from exc
        if name.lower() == "class":
            return target.get_name()
        return target.get_constant_value(name)

    def __repr__(self) -> str:
        return f"<ReflectionClass {self.get_name()}>"
