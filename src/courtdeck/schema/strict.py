"""Strict-mode JSON Schema derivation.

Providers that enforce a response schema natively accept only a restricted dialect: every
object lists all of its properties as required, forbids additional properties, and carries no
`$ref` indirection or string-length constraints. These helpers derive such documents from the
pydantic models so the in-memory types and the wire contract cannot drift apart.
"""

from __future__ import annotations

import copy
from typing import Any

from pydantic import BaseModel

_DROP_KEYS = frozenset({"title", "default", "examples"})

# Constraints strict mode rejects. Validators still enforce them on decoded responses.
_UNSUPPORTED_KEYS = frozenset(
    {
        "minLength",
        "maxLength",
        "minProperties",
        "maxProperties",
        "uniqueItems",
        "patternProperties",
        "propertyNames",
    }
)


def strict_json_schema(model: type[BaseModel]) -> dict[str, Any]:
    """Return a strict-mode JSON Schema for a pydantic model (aliases used as keys)."""

    raw = model.model_json_schema(by_alias=True)
    defs = raw.pop("$defs", {})
    return _strictify(raw, defs)


def strict_object(properties: dict[str, dict[str, Any]], *, description: str | None = None) -> dict[str, Any]:
    """Build a strict object schema from ready-made property fragments."""

    node: dict[str, Any] = {
        "type": "object",
        "properties": copy.deepcopy(properties),
        "required": list(properties),
        "additionalProperties": False,
    }
    if description:
        node["description"] = description
    return node


def _strictify(node: Any, defs: dict[str, Any]) -> Any:
    if isinstance(node, list):
        return [_strictify(n, defs) for n in node]
    if not isinstance(node, dict):
        return node

    ref = node.get("$ref")
    if ref is not None:
        name = ref.rsplit("/", 1)[-1]
        return _strictify(defs[name], defs)

    out: dict[str, Any] = {}
    for key, value in node.items():
        if key in _DROP_KEYS or key in _UNSUPPORTED_KEYS:
            continue
        if key == "properties":
            out[key] = {name: _strictify(sub, defs) for name, sub in value.items()}
        else:
            out[key] = _strictify(value, defs)

    if out.get("type") == "object" or "properties" in out:
        props = out.get("properties", {})
        out["type"] = "object"
        out["properties"] = props
        out["required"] = list(props)
        out["additionalProperties"] = False
    return out
