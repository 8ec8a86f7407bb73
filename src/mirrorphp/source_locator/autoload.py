"""Autoload-backed locating: an explicit context maps identifiers to files."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Callable, Iterator

from mirrorphp.config import get_autoload_mappings, load_composer_config
from mirrorphp.source_locator.base import LocatedSource, SourceLocator, read_source_file
from mirrorphp.syntax.nodes import find_class_likes, normalize_identifier
from mirrorphp.syntax.parser import parse_source

log = logging.getLogger(__name__)

FindFile = Callable[[str], "str | Path | None"]


class AutoloadContext:
    """Identifier -> file mapping supplied by the caller.

    Wraps any ``find_file(identifier)`` callable; how the mapping is computed
    is the callable's business.  *class_map* lists files that can be
    enumerated without an identifier.
    """

    def __init__(self, find_file: FindFile, class_map: dict[str, str | Path] | None = None):
        if not callable(find_file):
            raise TypeError("find_file must be callable")
        self._find_file = find_file
        self._class_map = dict(class_map or {})

    def find_file(self, identifier: str) -> Path | None:
        found = self._find_file(identifier.lstrip("\\"))
        return Path(found) if found else None

    @property
    def class_map(self) -> dict[str, Path]:
        return {name: Path(path) for name, path in self._class_map.items()}


class ComposerAutoloadContext(AutoloadContext):
    """PSR-4, PSR-0 and classmap lookups as configured in composer.json."""

    def __init__(
        self,
        root: str | Path,
        psr4: dict[str, list[str]] | None = None,
        psr0: dict[str, list[str]] | None = None,
        classmap_paths: list[str] | None = None,
    ):
        self.root = Path(root)
        self.psr4 = sorted((psr4 or {}).items(), key=lambda item: len(item[0]), reverse=True)
        self.psr0 = sorted((psr0 or {}).items(), key=lambda item: len(item[0]), reverse=True)
        self.classmap_paths = list(classmap_paths or [])
        self._scanned: dict[str, Path] | None = None
        super().__init__(self._lookup)

    @classmethod
    def from_project(cls, root: str | Path, include_dev: bool | None = None) -> "ComposerAutoloadContext":
        mappings = get_autoload_mappings(load_composer_config(root), include_dev)
        return cls(root, mappings["psr-4"], mappings["psr-0"], mappings["classmap"])

    @property
    def class_map(self) -> dict[str, Path]:
        if self._scanned is None:
            self._scanned = self._scan_classmap()
        return dict(self._scanned)

    def _lookup(self, identifier: str) -> Path | None:
        mapped = self.class_map.get(normalize_identifier(identifier))
        if mapped is not None:
            return mapped
        return self._lookup_psr4(identifier) or self._lookup_psr0(identifier)

    def _lookup_psr4(self, identifier: str) -> Path | None:
        for prefix, dirs in self.psr4:
            if not identifier.lower().startswith(prefix.lower()):
                continue
            relative = identifier[len(prefix) :].replace("\\", "/") + ".php"
            for directory in dirs:
                candidate = self.root / directory / relative
                if candidate.is_file():
                    log.debug("PSR-4 %s -> %s", identifier, candidate)
                    return candidate
        return None

    def _lookup_psr0(self, identifier: str) -> Path | None:
        namespace, _, class_name = identifier.rpartition("\\")
        relative_parts = [namespace.replace("\\", "/")] if namespace else []
        relative_parts.append(class_name.replace("_", "/") + ".php")
        relative = "/".join(relative_parts)
        for prefix, dirs in self.psr0:
            if not identifier.lower().startswith(prefix.lower()):
                continue
            for directory in dirs:
                candidate = self.root / directory / relative
                if candidate.is_file():
                    log.debug("PSR-0 %s -> %s", identifier, candidate)
                    return candidate
        return None

    def _scan_classmap(self) -> dict[str, Path]:
        """Parse every PHP file under the classmap paths and index its class-likes."""
        found: dict[str, Path] = {}
        for entry in self.classmap_paths:
            path = self.root / entry
            files = [path] if path.is_file() else sorted(path.rglob("*.php"))
            for php_file in files:
                located = read_source_file(php_file)
                parsed = parse_source(located.text, located.origin)
                for class_like in find_class_likes(parsed.root, parsed.source):
                    found.setdefault(normalize_identifier(class_like.qualified_name), php_file)
        log.debug("Classmap scan indexed %d class-likes", len(found))
        return found


class AutoloadSourceLocator(SourceLocator):
    """Locate source through an explicit AutoloadContext."""

    def __init__(self, context: AutoloadContext):
        self.context = context

    def locate(self, identifier: str) -> LocatedSource | None:
        path = self.context.find_file(identifier)
        if path is None:
            log.debug("Autoload context has no file for %s", identifier)
            return None
        return read_source_file(path, identifier)

    def locate_all(self) -> Iterator[LocatedSource]:
        seen: set[Path] = set()
        for path in self.context.class_map.values():
            if path in seen:
                continue
            seen.add(path)
            yield read_source_file(path)
