"""Exit codes and the reflection error taxonomy for mirrorphp.

Exit code scheme:

    0  SUCCESS        -- command completed
    1  GENERAL_ERROR  -- unexpected failure, I/O error, unhandled exception
    2  USAGE_ERROR    -- invalid arguments, bad flags, unknown command (Click default)
    3  NOT_FOUND      -- class, property or source could not be located
    4  INVALID_INPUT  -- unfoldable default value, invalid node or argument

Every reflection error is a ``click.ClickException`` so CLI commands can let
them propagate and still exit with the right code.  Each one also derives
from the closest builtin exception so library callers can catch them the
Python way (``LookupError``, ``ValueError``...).
"""

from __future__ import annotations

import click

# ---------------------------------------------------------------------------
# Exit code constants
# ---------------------------------------------------------------------------

EXIT_SUCCESS: int = 0
EXIT_ERROR: int = 1
EXIT_USAGE: int = 2
EXIT_NOT_FOUND: int = 3
EXIT_INVALID_INPUT: int = 4

DESCRIPTIONS: dict[int, str] = {
    EXIT_SUCCESS: "success",
    EXIT_ERROR: "unexpected error",
    EXIT_USAGE: "invalid usage (bad arguments or flags)",
    EXIT_NOT_FOUND: "class, property or source not found",
    EXIT_INVALID_INPUT: "invalid or unfoldable input",
}

# ---------------------------------------------------------------------------
# Error taxonomy
# ---------------------------------------------------------------------------


class ReflectionError(click.ClickException):
    """Base class for mirrorphp errors with exit codes."""

    exit_code = EXIT_ERROR

    def __init__(self, message: str, exit_code: int | None = None):
        super().__init__(message)
        if exit_code is not None:
            self.exit_code = exit_code

    def format_message(self) -> str:
        return self.message

    def __str__(self) -> str:
        return self.message


class IdentifierNotFoundError(ReflectionError, LookupError):
    """A class-like, property or source could not be found anywhere searched."""

    exit_code = EXIT_NOT_FOUND

    def __init__(self, message: str, identifier: str | None = None):
        super().__init__(message)
        self.identifier = identifier

    @classmethod
    def for_class(cls, identifier: str) -> "IdentifierNotFoundError":
        return cls(f'Class "{identifier}" could not be found in the located source', identifier)

    @classmethod
    def for_property(cls, class_name: str, property_name: str) -> "IdentifierNotFoundError":
        return cls(f"Property {class_name}::${property_name} does not exist", property_name)


class InvalidNodeError(ReflectionError, TypeError):
    """A supplied syntax node is not of the expected declaration kind."""

    exit_code = EXIT_INVALID_INPUT


class InvalidArgumentError(ReflectionError, ValueError):
    """A caller supplied an argument outside the accepted set."""

    exit_code = EXIT_INVALID_INPUT


class UnsupportedOperationError(ReflectionError, NotImplementedError):
    """Operation kept for API compatibility only; it never produces output."""


class UncloneableError(ReflectionError):
    """Reflection handles refuse duplication."""

    @classmethod
    def for_object(cls, obj: object) -> "UncloneableError":
        return cls(f"Trying to clone an uncloneable object of class {type(obj).__name__}")


class UnfoldableExpressionError(ReflectionError, ValueError):
    """A default-value expression is present but is not a foldable literal."""

    exit_code = EXIT_INVALID_INPUT

    def __init__(self, message: str, node_type: str | None = None):
        super().__init__(message)
        self.node_type = node_type


class CircularReferenceError(ReflectionError):
    """A class-like declares itself as its own ancestor."""


class SourceIOError(ReflectionError, OSError):
    """Source text exists but could not be read."""
