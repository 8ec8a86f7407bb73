"""Class reflector: identifier -> located source -> parse -> ReflectionClass."""

from __future__ import annotations

import logging

from mirrorphp.exit_codes import IdentifierNotFoundError
from mirrorphp.reflection.reflection_class import ReflectionClass
from mirrorphp.source_locator.base import LocatedSource, SourceLocator
from mirrorphp.syntax.nodes import find_class_likes, normalize_identifier
from mirrorphp.syntax.parser import ParsedSource, parse_source

log = logging.getLogger(__name__)


class ClassReflector:
    """Reflect class-likes from whatever source the locator supplies.

    Reflections are cached per normalized identifier for the lifetime of the
    reflector and parse trees per located source, so repeated lookups never
    re-parse.  Source is assumed not to change; build a new reflector to
    pick up edits.  Not thread-safe.
    """

    def __init__(self, source_locator: SourceLocator, parser=None):
        self.source_locator = source_locator
        self._parser = parser
        self._classes: dict[str, ReflectionClass] = {}
        self._parsed: dict[tuple[str, str], ParsedSource] = {}

    def _parse(self, located: LocatedSource) -> ParsedSource:
        key = (located.origin, located.text)
        parsed = self._parsed.get(key)
        if parsed is None:
            parsed = parse_source(located.text, located.origin, parser=self._parser)
            self._parsed[key] = parsed
        return parsed

    def _reflection_for(self, key: str, class_like, parsed: ParsedSource) -> ReflectionClass:
        cached = self._classes.get(key)
        if cached is None:
            cached = ReflectionClass(self, class_like, parsed)
            self._classes[key] = cached
        return cached

    def reflect(self, identifier: str) -> ReflectionClass:
        """Reflect a class-like by fully qualified name (case-insensitive).

        Raises IdentifierNotFoundError when no located source declares it.
        """
        key = normalize_identifier(identifier)
        if not key:
            raise IdentifierNotFoundError("Cannot reflect an empty identifier", identifier)

        cached = self._classes.get(key)
        if cached is not None:
            log.debug("Reflection cache hit for %s", identifier)
            return cached

        for located in self.source_locator.candidates(identifier.strip().lstrip("\\")):
            parsed = self._parse(located)
            for class_like in find_class_likes(parsed.root, parsed.source):
                if normalize_identifier(class_like.qualified_name) == key:
                    log.debug("Found %s in %s", class_like.qualified_name, located.origin)
                    return self._reflection_for(key, class_like, parsed)
        raise IdentifierNotFoundError.for_class(identifier)

    def has_class(self, identifier: str) -> bool:
        try:
            self.reflect(identifier)
        except IdentifierNotFoundError:
            return False
        return True

    def get_all_classes(self) -> list[ReflectionClass]:
        """Every class-like in the sources the locator can enumerate, in source order."""
        classes = []
        for located in self.source_locator.locate_all():
            parsed = self._parse(located)
            for class_like in find_class_likes(parsed.root, parsed.source):
                key = normalize_identifier(class_like.qualified_name)
                classes.append(self._reflection_for(key, class_like, parsed))
        return classes
