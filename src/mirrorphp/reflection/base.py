from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass

from mirrorphp.exit_codes import UncloneableError


class NamedReflectable(ABC):
    """Capability shared by every reflection entity kind.

    Entities are stable handles onto one declaration and refuse duplication.
    """

    @abstractmethod
    def get_name(self) -> str: ...

    @abstractmethod
    def get_doc_comment(self) -> str: ...

    @abstractmethod
    def get_start_line(self) -> int: ...

    @abstractmethod
    def get_end_line(self) -> int: ...

    def clone(self):
        raise UncloneableError.for_object(self)

    def __copy__(self):
        raise UncloneableError.for_object(self)

    def __deepcopy__(self, memo):
        raise UncloneableError.for_object(self)


@dataclass(frozen=True)
class ObjectDescriptor:
    """Stands in for a PHP object instance: all static reflection needs is its class."""

    class_name: str
