"""Inline emphasis markers.

Renderers understand three string conventions: `*gold*`, `~red~` and `_blue_`. A marker pair
must enclose at least one character and cannot nest or span another marker of the same kind.
Unmatched marker characters are plain text.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Literal

Emphasis = Literal["gold", "red", "blue"]

_MARKER_RE = re.compile(r"\*(?P<gold>[^*]+)\*|~(?P<red>[^~]+)~|_(?P<blue>[^_]+)_")


@dataclass(frozen=True)
class Span:
    """A run of text with optional emphasis."""

    text: str
    emphasis: Emphasis | None = None


def parse_inline_markers(text: str) -> list[Span]:
    """Split text into plain and emphasised spans, in order."""

    if not text:
        return []

    spans: list[Span] = []
    cursor = 0
    for m in _MARKER_RE.finditer(text):
        if m.start() > cursor:
            spans.append(Span(text=text[cursor : m.start()]))
        emphasis: Emphasis = m.lastgroup  # type: ignore[assignment]
        spans.append(Span(text=m.group(emphasis), emphasis=emphasis))
        cursor = m.end()
    if cursor < len(text):
        spans.append(Span(text=text[cursor:]))
    return spans


def strip_inline_markers(text: str) -> str:
    """Remove marker characters, keeping the enclosed text."""

    return "".join(span.text for span in parse_inline_markers(text))
