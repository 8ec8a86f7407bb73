"""Literal constant folding of PHP expression nodes.

Only side-effect free literal forms are folded: scalars, array literals,
operators applied to foldable operands, built-in constants and class
constants.  Anything else (variables, calls, ``new``, closures...) raises
UnfoldableExpressionError; nothing is ever executed.
"""

from __future__ import annotations

import logging
import math
import re
import sys
from typing import Any, Callable

from mirrorphp.exit_codes import UnfoldableExpressionError

log = logging.getLogger(__name__)

ClassConstantResolver = Callable[[str, str], Any]

PHP_INT_MAX = 2**63 - 1
PHP_INT_MIN = -(2**63)

BUILTIN_CONSTANTS: dict[str, Any] = {
    "PHP_EOL": "\n",
    "PHP_INT_MAX": PHP_INT_MAX,
    "PHP_INT_MIN": PHP_INT_MIN,
    "PHP_INT_SIZE": 8,
    "PHP_FLOAT_EPSILON": sys.float_info.epsilon,
    "PHP_FLOAT_MAX": sys.float_info.max,
    "PHP_FLOAT_MIN": sys.float_info.min,
    "PHP_FLOAT_DIG": 15,
    "DIRECTORY_SEPARATOR": "/",
    "PATH_SEPARATOR": ":",
    "M_PI": math.pi,
    "M_E": math.e,
    "M_SQRT2": math.sqrt(2),
    "NAN": math.nan,
    "INF": math.inf,
    "E_ERROR": 1,
    "E_WARNING": 2,
    "E_PARSE": 4,
    "E_NOTICE": 8,
    "E_USER_ERROR": 256,
    "E_USER_WARNING": 512,
    "E_USER_NOTICE": 1024,
    "E_STRICT": 2048,
    "E_DEPRECATED": 8192,
    "E_USER_DEPRECATED": 16384,
    "E_ALL": 32767,
    "SORT_REGULAR": 0,
    "SORT_NUMERIC": 1,
    "SORT_STRING": 2,
    "SORT_FLAG_CASE": 8,
    "COUNT_RECURSIVE": 1,
    "ENT_QUOTES": 3,
    "JSON_HEX_TAG": 1,
    "JSON_PRETTY_PRINT": 128,
    "JSON_UNESCAPED_SLASHES": 64,
    "JSON_UNESCAPED_UNICODE": 256,
    "JSON_THROW_ON_ERROR": 4194304,
}

_LITERAL_NAMES = {"true": True, "false": False, "null": None}

_DOUBLE_QUOTED_ESCAPE_RE = re.compile(
    r"\\(u\{[0-9A-Fa-f]+\}|x[0-9A-Fa-f]{1,2}|[0-7]{1,3}|[ntrvef\\$\"])"
)
_SIMPLE_ESCAPES = {
    "n": "\n",
    "t": "\t",
    "r": "\r",
    "v": "\v",
    "e": "\x1b",
    "f": "\f",
    "\\": "\\",
    "$": "$",
    '"': '"',
}

# Children of an interpolated string that are plain text
_STRING_PARTS = frozenset({"string_content", "string_value", "escape_sequence", "heredoc_start", "heredoc_end"})


def _decode_escape(match: re.Match) -> str:
    seq = match.group(1)
    if seq in _SIMPLE_ESCAPES:
        return _SIMPLE_ESCAPES[seq]
    if seq.startswith("u{"):
        return chr(int(seq[2:-1], 16))
    if seq.startswith("x"):
        return chr(int(seq[1:], 16))
    return chr(int(seq, 8) & 0xFF)


def php_to_string(value: Any) -> str:
    """String conversion as PHP's ``.`` operator performs it."""
    if value is True:
        return "1"
    if value is False or value is None:
        return ""
    if isinstance(value, float):
        if math.isnan(value):
            return "NAN"
        if math.isinf(value):
            return "INF" if value > 0 else "-INF"
        if value.is_integer() and abs(value) < 1e15:
            return str(int(value))
        return repr(value)
    if isinstance(value, (list, dict)):
        return "Array"
    return str(value)


def php_truthy(value: Any) -> bool:
    if isinstance(value, str):
        return value not in ("", "0")
    return bool(value)


def _array_key(key: Any) -> int | str:
    """Normalise an array key the way PHP does."""
    if isinstance(key, bool):
        return int(key)
    if isinstance(key, float):
        return int(key)
    if key is None:
        return ""
    if isinstance(key, str) and re.fullmatch(r"-?(0|[1-9][0-9]*)", key):
        as_int = int(key)
        if PHP_INT_MIN <= as_int <= PHP_INT_MAX:
            return as_int
    if isinstance(key, (int, str)):
        return key
    raise UnfoldableExpressionError(f"Illegal array key type {type(key).__name__}")


class _PhpArray:
    """Ordered key/value accumulator following PHP's auto-index rules."""

    def __init__(self):
        self.entries: dict[int | str, Any] = {}
        self.next_index = 0

    def append(self, value):
        self.entries[self.next_index] = value
        self.next_index += 1

    def set(self, key, value):
        key = _array_key(key)
        self.entries[key] = value
        if isinstance(key, int) and key >= self.next_index:
            self.next_index = key + 1

    def extend(self, value):
        if isinstance(value, list):
            for item in value:
                self.append(item)
        elif isinstance(value, dict):
            for key, item in value.items():
                if isinstance(key, int):
                    self.append(item)
                else:
                    self.set(key, item)
        else:
            raise UnfoldableExpressionError("Only arrays can be unpacked")

    def value(self) -> list | dict:
        if list(self.entries) == list(range(len(self.entries))):
            return list(self.entries.values())
        return dict(self.entries)


def _as_array_entries(value) -> dict:
    if isinstance(value, list):
        return dict(enumerate(value))
    return dict(value)


def _add(left, right):
    if isinstance(left, (list, dict)) and isinstance(right, (list, dict)):
        # Array union: keys already on the left win
        merged = _as_array_entries(left)
        for key, item in _as_array_entries(right).items():
            merged.setdefault(key, item)
        result = _PhpArray()
        for key, item in merged.items():
            result.set(key, item)
        return result.value()
    return _int_result(_number(left) + _number(right))


def _number(value):
    if isinstance(value, bool) or value is None:
        return int(bool(value))
    if isinstance(value, (int, float)):
        return value
    if isinstance(value, str):
        try:
            return int(value)
        except ValueError:
            try:
                return float(value)
            except ValueError:
                raise UnfoldableExpressionError(f"Non-numeric value {value!r} in arithmetic") from None
    raise UnfoldableExpressionError(f"Unsupported operand type {type(value).__name__}")


def _int(value) -> int:
    number = _number(value)
    if isinstance(number, float) and not (math.isfinite(number) and PHP_INT_MIN <= number < 2**63):
        raise UnfoldableExpressionError(f"Float {number!r} is not representable as int")
    return int(number)


def _int_result(value):
    # Integer overflow yields a float
    if isinstance(value, int) and not PHP_INT_MIN <= value <= PHP_INT_MAX:
        return float(value)
    return value


def _wrap64(value: int) -> int:
    value &= 0xFFFFFFFFFFFFFFFF
    return value - 2**64 if value > PHP_INT_MAX else value


def _shift_left(left, right):
    left, right = _int(left), _int(right)
    if right < 0:
        raise UnfoldableExpressionError("Bit shift by negative number")
    if right >= 64:
        return 0
    return _wrap64(left << right)


def _shift_right(left, right):
    left, right = _int(left), _int(right)
    if right < 0:
        raise UnfoldableExpressionError("Bit shift by negative number")
    return left >> min(right, 63)


def _divide(left, right):
    left, right = _number(left), _number(right)
    if right == 0:
        raise UnfoldableExpressionError("Division by zero")
    if isinstance(left, int) and isinstance(right, int) and left % right == 0:
        return left // right
    return left / right


def _modulo(left, right):
    left, right = _int(left), _int(right)
    if right == 0:
        raise UnfoldableExpressionError("Modulo by zero")
    # Result takes the sign of the dividend
    remainder = abs(left) % abs(right)
    return -remainder if left < 0 else remainder


def _power(left, right):
    left, right = _number(left), _number(right)
    if left == 0 and right < 0:
        return math.inf
    result = left**right
    if isinstance(result, complex):
        # Fractional power of a negative base
        return math.nan
    return _int_result(result)


def _spaceship(left, right):
    return (left > right) - (left < right)


_BINARY_OPERATORS: dict[str, Callable[[Any, Any], Any]] = {
    "+": _add,
    "-": lambda a, b: _int_result(_number(a) - _number(b)),
    "*": lambda a, b: _int_result(_number(a) * _number(b)),
    "/": _divide,
    "%": _modulo,
    "**": _power,
    ".": lambda a, b: php_to_string(a) + php_to_string(b),
    "|": lambda a, b: _int(a) | _int(b),
    "&": lambda a, b: _int(a) & _int(b),
    "^": lambda a, b: _int(a) ^ _int(b),
    "<<": _shift_left,
    ">>": _shift_right,
    "&&": lambda a, b: php_truthy(a) and php_truthy(b),
    "and": lambda a, b: php_truthy(a) and php_truthy(b),
    "||": lambda a, b: php_truthy(a) or php_truthy(b),
    "or": lambda a, b: php_truthy(a) or php_truthy(b),
    "xor": lambda a, b: php_truthy(a) != php_truthy(b),
    "==": lambda a, b: a == b,
    "!=": lambda a, b: a != b,
    "<>": lambda a, b: a != b,
    "===": lambda a, b: type(a) is type(b) and a == b,
    "!==": lambda a, b: not (type(a) is type(b) and a == b),
    "<": lambda a, b: a < b,
    ">": lambda a, b: a > b,
    "<=": lambda a, b: a <= b,
    ">=": lambda a, b: a >= b,
    "<=>": _spaceship,
}


class ConstantFolder:
    """Fold an expression node to a Python value.

    *text* returns the source text of a node.  *class_constants* resolves
    ``Scope::NAME`` references (``self``, ``static``, ``parent`` or a class
    name as written); without one every class constant is unfoldable.
    *magic* supplies values for ``__CLASS__``, ``__FILE__`` and friends.
    """

    def __init__(
        self,
        text: Callable[[Any], str],
        class_constants: ClassConstantResolver | None = None,
        magic: dict[str, Any] | None = None,
    ):
        self._text = text
        self._class_constants = class_constants
        self._magic = magic or {}

    def fold(self, node) -> Any:
        handler = getattr(self, f"_fold_{node.type}", None)
        if handler is None:
            raise UnfoldableExpressionError(
                f"Unable to compile expression: {node.type} ({self._text(node)!r}) is not a constant expression",
                node.type,
            )
        return handler(node)

    # ---- Scalars ----

    def _fold_integer(self, node):
        text = self._text(node).replace("_", "").lower()
        if text.startswith("0x"):
            value = int(text[2:], 16)
        elif text.startswith("0b"):
            value = int(text[2:], 2)
        elif text.startswith("0o"):
            value = int(text[2:], 8)
        elif len(text) > 1 and text.startswith("0"):
            value = int(text[1:], 8)
        else:
            value = int(text)
        # Integer literals beyond PHP_INT_MAX become floats
        if value > PHP_INT_MAX:
            return float(value)
        return value

    def _fold_float(self, node):
        return float(self._text(node).replace("_", ""))

    def _fold_boolean(self, node):
        return self._text(node).lower() == "true"

    def _fold_null(self, node):
        return None

    def _fold_string(self, node):
        text = self._text(node)
        if text[:1] in ("b", "B"):
            text = text[1:]
        if text.startswith('"'):
            return self._fold_encapsed_string(node)
        return re.sub(r"\\([\\'])", r"\1", text[1:-1])

    def _fold_encapsed_string(self, node):
        self._reject_interpolation(node)
        text = self._text(node)
        if text[:1] in ("b", "B"):
            text = text[1:]
        return _DOUBLE_QUOTED_ESCAPE_RE.sub(_decode_escape, text[1:-1])

    def _fold_heredoc(self, node):
        self._reject_interpolation(node)
        return _DOUBLE_QUOTED_ESCAPE_RE.sub(_decode_escape, self._heredoc_body(node))

    def _fold_nowdoc(self, node):
        return self._heredoc_body(node)

    def _heredoc_body(self, node) -> str:
        lines = self._text(node).split("\n")
        if len(lines) < 2:
            return ""
        closing = lines[-1]
        indent = len(closing) - len(closing.lstrip())
        body = [line[indent:] for line in lines[1:-1]]
        return "\n".join(body)

    def _reject_interpolation(self, node):
        stack = list(node.named_children)
        while stack:
            child = stack.pop()
            if child.type in _STRING_PARTS:
                continue
            if child.type in ("heredoc_body", "nowdoc_body"):
                stack.extend(child.named_children)
                continue
            raise UnfoldableExpressionError(
                f"Interpolated string ({self._text(child)!r}) is not a constant expression", child.type
            )

    # ---- Compound expressions ----

    def _fold_parenthesized_expression(self, node):
        return self.fold(node.named_children[0])

    def _fold_array_creation_expression(self, node):
        result = _PhpArray()
        for element in node.named_children:
            if element.type != "array_element_initializer":
                continue
            tokens = [c.type for c in element.children]
            named = element.named_children
            if "..." in tokens or (named and named[0].type == "variadic_unpacking"):
                target = named[-1]
                if target.type == "variadic_unpacking":
                    target = target.named_children[-1]
                result.extend(self.fold(target))
            elif "=>" in tokens:
                result.set(self.fold(named[0]), self.fold(named[-1]))
            elif "&" in tokens:
                raise UnfoldableExpressionError("By-reference array elements are not constant", element.type)
            else:
                result.append(self.fold(named[0]))
        return result.value()

    def _fold_unary_op_expression(self, node):
        operator = node.child_by_field_name("operator")
        op = self._text(operator) if operator is not None else self._text(node.children[0])
        operand = self.fold(node.named_children[-1])
        if op == "-":
            return _int_result(-_number(operand))
        if op == "+":
            return _number(operand)
        if op == "~":
            return ~_int(operand)
        if op == "!":
            return not php_truthy(operand)
        if op == "@":
            return operand
        raise UnfoldableExpressionError(f"Unsupported unary operator {op}", node.type)

    def _fold_binary_expression(self, node):
        left = node.child_by_field_name("left") or node.children[0]
        right = node.child_by_field_name("right") or node.children[-1]
        operator = node.child_by_field_name("operator") or node.children[1]
        op = self._text(operator).lower()
        if op == "??":
            value = self.fold(left)
            return self.fold(right) if value is None else value
        fn = _BINARY_OPERATORS.get(op)
        if fn is None:
            raise UnfoldableExpressionError(f"Unsupported binary operator {op}", node.type)
        left_value, right_value = self.fold(left), self.fold(right)
        try:
            return fn(left_value, right_value)
        except UnfoldableExpressionError:
            raise
        except (TypeError, ValueError, ZeroDivisionError, OverflowError) as exc:
            raise UnfoldableExpressionError(f"Cannot apply {op}: {exc}", node.type) from exc

    def _fold_conditional_expression(self, node):
        condition = node.child_by_field_name("condition") or node.named_children[0]
        body = node.child_by_field_name("body")
        alternative = node.child_by_field_name("alternative") or node.named_children[-1]
        value = self.fold(condition)
        if php_truthy(value):
            return value if body is None else self.fold(body)
        return self.fold(alternative)

    # ---- Constant references ----

    def _fold_name(self, node):
        return self._named_constant(self._text(node))

    def _fold_qualified_name(self, node):
        return self._named_constant(self._text(node))

    def _fold_magic_constant(self, node):
        return self._named_constant(self._text(node))

    def _named_constant(self, raw: str):
        name = raw.lstrip("\\")
        if "\\" in name:
            # Namespaced constants are never built in
            raise UnfoldableExpressionError(f'Could not locate constant "{name}"', "name")
        lowered = name.lower()
        if lowered in _LITERAL_NAMES:
            return _LITERAL_NAMES[lowered]
        if name.upper() in self._magic and name.startswith("__"):
            return self._magic[name.upper()]
        if name in BUILTIN_CONSTANTS:
            return BUILTIN_CONSTANTS[name]
        raise UnfoldableExpressionError(f'Could not locate constant "{name}"', "name")

    def _fold_class_constant_access_expression(self, node):
        named = node.named_children
        if len(named) < 2:
            raise UnfoldableExpressionError("Malformed class constant access", node.type)
        scope = self._text(named[0])
        constant = self._text(named[-1])
        if self._class_constants is None:
            raise UnfoldableExpressionError(f"Cannot resolve {scope}::{constant} without a class context", node.type)
        log.debug("Resolving class constant %s::%s", scope, constant)
        return self._class_constants(scope, constant)
