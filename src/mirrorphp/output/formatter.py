"""Plain-text and JSON rendering of reflection results."""

from __future__ import annotations

import json as _json
import math

from mirrorphp.reflection.modifiers import get_modifier_names

ENVELOPE_SCHEMA_VERSION = "1.0.0"
ENVELOPE_SCHEMA_NAME = "mirrorphp-envelope-v1"


def loc(path: str | None, line: int | None = None) -> str:
    path = path or "<string>"
    if line is not None and line >= 0:
        return f"{path}:{line}"
    return path


def section(title: str, lines: list[str], budget: int = 0) -> str:
    out = [title]
    if budget and len(lines) > budget:
        out.extend(lines[:budget])
        out.append(f"  (+{len(lines) - budget} more)")
    else:
        out.extend(lines)
    return "\n".join(out)


def format_table(headers: list[str], rows: list[list[str]], budget: int = 0) -> str:
    if not rows:
        return "(none)"
    widths = [len(h) for h in headers]
    num_cols = len(widths)
    for row in rows:
        for i, cell in enumerate(row):
            if i < num_cols:
                widths[i] = max(widths[i], len(str(cell)))
    lines = []
    lines.append("  ".join(h.ljust(widths[i]) for i, h in enumerate(headers)))
    lines.append("  ".join("-" * w for w in widths))
    display_rows = rows
    if budget and len(rows) > budget:
        display_rows = rows[:budget]
    for row in display_rows:
        lines.append("  ".join(str(cell).ljust(widths[i]) for i, cell in enumerate(row)).rstrip())
    if budget and len(rows) > budget:
        lines.append(f"(+{len(rows) - budget} more)")
    return "\n".join(lines)


def php_export(value) -> str:
    """Render a folded value in PHP literal notation."""
    if value is None:
        return "null"
    if value is True:
        return "true"
    if value is False:
        return "false"
    if isinstance(value, float):
        if math.isnan(value):
            return "NAN"
        if math.isinf(value):
            return "INF" if value > 0 else "-INF"
        return repr(value)
    if isinstance(value, str):
        return "'" + value.replace("\\", "\\\\").replace("'", "\\'") + "'"
    if isinstance(value, list):
        return "[" + ", ".join(php_export(v) for v in value) + "]"
    if isinstance(value, dict):
        return "[" + ", ".join(f"{php_export(k)} => {php_export(v)}" for k, v in value.items()) + "]"
    return str(value)


def to_json(data) -> str:
    """Serialize data to a JSON string with deterministic key ordering."""
    return _json.dumps(data, indent=2, default=str, sort_keys=True)


def json_envelope(command: str, summary: dict | None = None, **payload) -> dict:
    """Wrap command output in a self-describing envelope."""
    from mirrorphp import __version__

    out: dict = {
        "schema": ENVELOPE_SCHEMA_NAME,
        "schema_version": ENVELOPE_SCHEMA_VERSION,
        "command": command,
        "version": __version__,
        "summary": summary or {},
    }
    out.update(payload)
    return out


def property_facts(prop) -> dict:
    """Every queryable fact of a ReflectionProperty as a JSON-friendly dict.

    An unfoldable default is reported as an error string rather than raised.
    """
    from mirrorphp.exit_codes import UnfoldableExpressionError

    facts = {
        "name": prop.get_name(),
        "declaring_class": prop.get_declaring_class().get_name(),
        "modifiers": prop.get_modifiers(),
        "modifier_names": get_modifier_names(prop.get_modifiers()),
        "is_default": prop.is_default(),
        "is_promoted": prop.is_promoted(),
        "type": prop.get_type(),
        "has_default_value": prop.has_default_value(),
        "doc_comment": prop.get_doc_comment(),
        "doc_block_types": prop.get_doc_block_type_strings(),
        "start_line": prop.get_start_line(),
        "end_line": prop.get_end_line(),
        "display": str(prop),
    }
    try:
        facts["default_value"] = prop.get_default_value()
    except UnfoldableExpressionError as exc:
        facts["default_value"] = None
        facts["default_value_error"] = str(exc)
    return facts
