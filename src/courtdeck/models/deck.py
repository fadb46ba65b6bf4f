"""Slide deck models.

These are the typed values handed to callers. Their JSON form (`to_wire`) is exactly the
document shape the composer validates, with block ids included.
"""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, ConfigDict, Field, model_validator
from pydantic.alias_generators import to_camel

from courtdeck.schema.registry import DEFAULT_REGISTRY, BlockKind, BlockPayload


class Block(BaseModel):
    """A typed content unit on a slide."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, frozen=True)

    id: str
    kind: BlockKind = Field(alias="type")
    data: BlockPayload

    @model_validator(mode="before")
    @classmethod
    def _coerce_payload(cls, values: Any) -> Any:
        # Raw payload dicts are parsed with the model registered for the block's kind.
        if not isinstance(values, dict):
            return values
        kind = values.get("type", values.get("kind"))
        data = values.get("data")
        if kind is None or not isinstance(data, dict) or DEFAULT_REGISTRY.coerce_kind(kind) is None:
            return values
        return {**values, "data": DEFAULT_REGISTRY.parse_payload(kind, data)}

    @model_validator(mode="after")
    def _check_payload_kind(self) -> "Block":
        expected = DEFAULT_REGISTRY.payload_model(self.kind)
        if type(self.data) is not expected:
            raise ValueError(
                f"payload {type(self.data).__name__} does not match block kind {self.kind.value}"
            )
        return self


class Slide(BaseModel):
    """A slide: title, optional subtitle, and ordered blocks."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, frozen=True)

    title: str
    subtitle: str = ""
    blocks: list[Block] = Field(default_factory=list)
    suggested_images: list[str] = Field(default_factory=list)


class Deck(BaseModel):
    """An ordered sequence of slides."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, frozen=True)

    title: str
    total_slides: int = Field(ge=0)
    slides: list[Slide] = Field(default_factory=list)

    def to_wire(self) -> dict[str, Any]:
        """JSON-compatible dict with camelCase keys and `type` tags on blocks."""

        return self.model_dump(mode="json", by_alias=True)

    @classmethod
    def from_wire(cls, data: dict[str, Any]) -> "Deck":
        return cls.model_validate(data)
