from __future__ import annotations

from pathlib import Path
from typing import Iterator

from mirrorphp.exit_codes import SourceIOError
from mirrorphp.source_locator.base import LocatedSource, SourceLocator, read_source_file


class SingleFileSourceLocator(SourceLocator):
    """Offer one PHP file for every identifier; the reflector decides whether it matches."""

    def __init__(self, path: str | Path):
        self.path = Path(path)
        if not self.path.is_file():
            raise SourceIOError(f'File "{self.path}" does not exist or is not a file')

    def locate(self, identifier: str) -> LocatedSource | None:
        return read_source_file(self.path, identifier)

    def locate_all(self) -> Iterator[LocatedSource]:
        yield read_source_file(self.path)

    def __repr__(self) -> str:
        return f"SingleFileSourceLocator({str(self.path)!r})"
