"""Block registry and schema composition."""

from __future__ import annotations

from courtdeck.schema.registry import (
    DEFAULT_REGISTRY,
    BlockKind,
    BlockRegistry,
    BlockSpec,
    Payload,
    UnknownBlockKind,
)
from courtdeck.schema.composer import CompiledSchema, DeckSchemaComposer

__all__ = [
    "DEFAULT_REGISTRY",
    "BlockKind",
    "BlockRegistry",
    "BlockSpec",
    "CompiledSchema",
    "DeckSchemaComposer",
    "Payload",
    "UnknownBlockKind",
]
