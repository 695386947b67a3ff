"""Data models: Finding and the fixed tag vocabulary."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any

# Closed set, matched case-sensitively as written in source.
TAGS: tuple[str, ...] = ("TODO", "FIXME", "HACK", "XXX", "NOTE", "BUG")


@dataclass(frozen=True)
class Finding:
    file: str  # as supplied to the extractor, usually absolute
    line: int  # 1-based
    kind: str  # one of TAGS
    text: str

    def to_dict(self) -> dict[str, Any]:
        return {"file": self.file, "line": self.line, "type": self.kind, "text": self.text}
