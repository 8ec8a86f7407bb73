from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass
from pathlib import Path
from typing import Iterator

from mirrorphp.exit_codes import SourceIOError


@dataclass(frozen=True)
class LocatedSource:
    """Raw PHP source plus a description of where it came from."""

    text: str
    origin: str
    identifier: str | None = None

    @property
    def file_name(self) -> str | None:
        """Origin as a path, or None for in-memory sources."""
        if self.origin.startswith("<"):
            return None
        return self.origin


class SourceLocator(ABC):
    """Strategy mapping a class-like identifier to raw source text.

    ``locate`` returns None when the identifier is unknown to the locator and
    raises SourceIOError only when source exists but cannot be read.
    """

    @abstractmethod
    def locate(self, identifier: str) -> LocatedSource | None: ...

    def candidates(self, identifier: str) -> Iterator[LocatedSource]:
        """Every source that may declare *identifier*, most preferred first."""
        located = self.locate(identifier)
        if located is not None:
            yield located

    def locate_all(self) -> Iterator[LocatedSource]:
        """Sources that can be enumerated without an identifier."""
        return iter(())


def read_source_file(path: str | Path, identifier: str | None = None) -> LocatedSource:
    """Read a PHP file as UTF-8, wrapping OS failures in SourceIOError."""
    path = Path(path)
    try:
        text = path.read_text(encoding="utf-8", errors="replace")
    except OSError as exc:
        raise SourceIOError(f"Could not read {path}: {exc.strerror or exc}") from exc
    return LocatedSource(text=text, origin=str(path), identifier=identifier)
