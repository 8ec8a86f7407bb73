from __future__ import annotations

from typing import Iterator

from mirrorphp.exit_codes import InvalidArgumentError
from mirrorphp.source_locator.base import LocatedSource, SourceLocator


class StringSourceLocator(SourceLocator):
    """Serve PHP source held in memory."""

    def __init__(self, source: str, origin: str = "<string>"):
        if not source:
            raise InvalidArgumentError("Source code string was empty")
        self.source = source
        self.origin = origin

    def locate(self, identifier: str) -> LocatedSource | None:
        return LocatedSource(text=self.source, origin=self.origin, identifier=identifier)

    def locate_all(self) -> Iterator[LocatedSource]:
        yield LocatedSource(text=self.source, origin=self.origin)
