"""Minimal doc comment reader: summary text and ``@tag value`` pairs."""

from __future__ import annotations

import re
from dataclasses import dataclass, field

_TAG_RE = re.compile(r"^@([\w\-\\]+)\s*(.*)$")


@dataclass(frozen=True)
class DocBlockTag:
    name: str
    value: str


@dataclass(frozen=True)
class DocBlock:
    summary: str = ""
    tag_list: tuple[DocBlockTag, ...] = field(default_factory=tuple)

    @classmethod
    def from_comment(cls, text: str | None) -> "DocBlock":
        """Parse the raw text of a ``/** ... */`` comment."""
        if not text:
            return cls()
        body = text.strip()
        if body.startswith("/**"):
            body = body[3:]
        if body.endswith("*/"):
            body = body[:-2]

        lines = []
        for raw in body.splitlines():
            line = raw.strip()
            if line.startswith("*"):
                line = line[1:]
                if line.startswith(" "):
                    line = line[1:]
            lines.append(line.rstrip())

        summary_lines: list[str] = []
        tags: list[list[str]] = []
        for line in lines:
            m = _TAG_RE.match(line)
            if m:
                tags.append([m.group(1), m.group(2)])
            elif tags:
                # Continuation of the previous tag's description
                text = line.strip()
                if text:
                    tags[-1][1] = f"{tags[-1][1]}\n{text}" if tags[-1][1] else text
            elif line or summary_lines:
                summary_lines.append(line)

        return cls(
            summary="\n".join(summary_lines).strip(),
            tag_list=tuple(DocBlockTag(name, value.strip()) for name, value in tags),
        )

    def tags(self, name: str) -> list[DocBlockTag]:
        return [t for t in self.tag_list if t.name == name]

    @property
    def var_tag_value(self) -> str | None:
        var_tags = self.tags("var")
        return var_tags[0].value if var_tags else None
