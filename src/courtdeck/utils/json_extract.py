"""JSON extraction from LLM output.

Free-text providers wrap JSON in prose or markdown fences. Extraction is deliberately narrow:
it never rewrites the JSON itself, so malformed documents (trailing commas, bare keys) fail and
go through the engine's repair attempt instead of being guessed at.
"""

from __future__ import annotations

import json
import re
from typing import Any

from courtdeck.logging import get_logger

logger = get_logger(__name__)

_FENCE_RE = re.compile(r"```(?:json)?\s*\n?(?P<body>.*?)\n?```", re.DOTALL | re.IGNORECASE)


class JsonExtractionError(ValueError):
    """No JSON object could be decoded from the text."""


def parse_json_object(text: str) -> dict[str, Any]:
    """Decode the JSON object carried by an LLM response.

    Strategies, in order:
        1. The whole (stripped) text.
        2. The body of the first markdown code fence.
        3. The slice from the first `{` to the last `}`.

    Raises:
        JsonExtractionError: With the decoder diagnostic of the first strategy that applied.
    """

    cleaned = (text or "").strip()
    if not cleaned:
        raise JsonExtractionError("response is empty")

    candidates: list[str] = [cleaned]
    m = _FENCE_RE.search(cleaned)
    if m:
        candidates.append(m.group("body").strip())
    start = cleaned.find("{")
    end = cleaned.rfind("}")
    if start != -1 and end > start:
        candidates.append(cleaned[start : end + 1])

    first_error: str | None = None
    for candidate in candidates:
        try:
            value = json.loads(candidate)
        except json.JSONDecodeError as e:
            if first_error is None:
                first_error = f"invalid JSON: {e.msg} (line {e.lineno}, column {e.colno})"
            continue
        if isinstance(value, dict):
            return value
        if first_error is None:
            first_error = f"expected a JSON object, got {type(value).__name__}"

    logger.debug("parse_json_object failed: %s", first_error)
    raise JsonExtractionError(first_error or "no JSON object found")
