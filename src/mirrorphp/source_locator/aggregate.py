from __future__ import annotations

from typing import Iterable, Iterator

from mirrorphp.source_locator.base import LocatedSource, SourceLocator


class AggregateSourceLocator(SourceLocator):
    """Chain several locators, asking each in order."""

    def __init__(self, locators: Iterable[SourceLocator] = ()):
        self.locators = list(locators)

    def locate(self, identifier: str) -> LocatedSource | None:
        for locator in self.locators:
            located = locator.locate(identifier)
            if located is not None:
                return located
        return None

    def candidates(self, identifier: str) -> Iterator[LocatedSource]:
        for locator in self.locators:
            yield from locator.candidates(identifier)

    def locate_all(self) -> Iterator[LocatedSource]:
        for locator in self.locators:
            yield from locator.locate_all()
