"""Validation path formatting.

Paths use the dotted/indexed notation callers see in errors, e.g.
`slides[2].blocks[0].data.events[1].date`.
"""

from __future__ import annotations

from typing import Iterable

from pydantic import ValidationError

from courtdeck.errors import SchemaIssue

_EXPECTED_BY_TYPE = {
    "missing": "required field",
    "extra_forbidden": "no additional properties",
    "string_type": "string",
    "int_type": "integer",
    "float_type": "number",
    "bool_type": "boolean",
    "list_type": "array",
    "dict_type": "object",
    "model_type": "object",
    "model_attributes_type": "object",
}


def join_path(prefix: str, loc: Iterable[str | int]) -> str:
    """Append a location tuple to a path prefix."""

    path = prefix
    for part in loc:
        if isinstance(part, int):
            path += f"[{part}]"
        else:
            path = f"{path}.{part}" if path else str(part)
    return path or "$"


def issues_from_validation_error(exc: ValidationError, prefix: str = "") -> list[SchemaIssue]:
    """Convert a pydantic ValidationError to schema issues, preserving pydantic's order."""

    issues: list[SchemaIssue] = []
    for err in exc.errors(include_url=False):
        ctx = err.get("ctx") or {}
        expected = ctx.get("expected") or _EXPECTED_BY_TYPE.get(err["type"])
        if expected is None:
            if "ge" in ctx or "le" in ctx:
                expected = f"number in [{ctx.get('ge', '-inf')}, {ctx.get('le', 'inf')}]"
            elif "min_length" in ctx:
                expected = f"length >= {ctx['min_length']}"
            elif "max_length" in ctx:
                expected = f"length <= {ctx['max_length']}"
        loc = [p for p in err["loc"] if isinstance(p, (str, int))]
        issues.append(
            SchemaIssue(
                path=join_path(prefix, loc),
                message=err["msg"],
                expected=str(expected) if expected is not None else None,
            )
        )
    return issues
