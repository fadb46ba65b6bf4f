"""Deck schema composer.

Composes registry fragments into the top-level documents exchanged with the transport (the
Deck, CitationResult and citation-detail schemas) and the validators that check decoded
responses against them. Block payloads are polymorphic: the validator dispatches on
`blocks[].type` and delegates to the registry.
"""

from __future__ import annotations

import copy
from dataclasses import dataclass, field
from typing import Any, Callable

from pydantic import BaseModel, ConfigDict, Field, ValidationError
from pydantic.alias_generators import to_camel

from courtdeck.errors import SchemaIssue
from courtdeck.models.citation import CitationDetail, CitationResult
from courtdeck.schema.paths import issues_from_validation_error, join_path
from courtdeck.schema.registry import DEFAULT_REGISTRY, BlockRegistry
from courtdeck.schema.strict import strict_json_schema, strict_object

Validator = Callable[[Any], list[SchemaIssue]]


@dataclass(frozen=True)
class CompiledSchema:
    """A named schema document paired with its validator."""

    name: str
    document: dict[str, Any] = field(repr=False)
    validator: Validator = field(repr=False)

    def validate(self, value: Any) -> list[SchemaIssue]:
        return self.validator(value)


class _Envelope(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, extra="forbid", strict=True)


class _BlockEnvelope(_Envelope):
    type: str
    data: dict[str, Any]
    # Ids from the model are tolerated and discarded during post-processing.
    id: str | None = None


class _SlideEnvelope(_Envelope):
    # Non-empty titles are checked here only; the wire document cannot express it.
    title: str = Field(min_length=1)
    subtitle: str
    blocks: list[Any]
    suggested_images: list[str]


class _DeckEnvelope(_Envelope):
    title: str
    total_slides: int = Field(ge=0)
    slides: list[Any]


# Slide fields whose issues come before the per-block issues in document order.
_LEADING_SLIDE_FIELDS = frozenset({"title", "subtitle", "blocks"})


class DeckSchemaComposer:
    """Builds and validates the top-level documents. Immutable after construction."""

    def __init__(
        self,
        registry: BlockRegistry = DEFAULT_REGISTRY,
        *,
        min_slides: int | None = 3,
        max_slides: int | None = 8,
    ) -> None:
        self._registry = registry
        self._min_slides = min_slides
        self._max_slides = max_slides
        self._deck = CompiledSchema(
            name="slide_deck",
            document=self._compose_deck_document(),
            validator=self._validate_deck,
        )
        self._citations = CompiledSchema(
            name="citation_search",
            document=strict_json_schema(CitationResult),
            validator=_model_validator(CitationResult),
        )
        self._citation_detail = CompiledSchema(
            name="citation_details",
            document=strict_json_schema(CitationDetail),
            validator=_model_validator(CitationDetail),
        )

    @property
    def registry(self) -> BlockRegistry:
        return self._registry

    def deck_schema(self) -> CompiledSchema:
        return self._deck

    def unbounded_deck_schema(self) -> CompiledSchema:
        """Deck schema without slide-count bounds, for caller-supplied decks."""

        unbounded = DeckSchemaComposer(self._registry, min_slides=None, max_slides=None)
        return unbounded.deck_schema()

    def citation_result_schema(self) -> CompiledSchema:
        return self._citations

    def citation_detail_schema(self) -> CompiledSchema:
        return self._citation_detail

    @staticmethod
    def validate(value: Any, schema: CompiledSchema) -> list[SchemaIssue]:
        """Validate a decoded value; an empty list means it conforms."""

        return schema.validate(value)

    def _compose_deck_document(self) -> dict[str, Any]:
        variants = [
            strict_object(
                {
                    "type": {"type": "string", "enum": [kind.value]},
                    "data": self._registry.payload_schema(kind),
                },
                description=self._registry.describe(kind),
            )
            for kind in self._registry.kinds()
        ]
        slide = strict_object(
            {
                "title": {"type": "string"},
                "subtitle": {"type": "string"},
                "blocks": {"type": "array", "items": {"anyOf": variants}},
                "suggestedImages": {
                    "type": "array",
                    "items": {"type": "string"},
                    "description": "Image search keywords for this slide; empty when none.",
                },
            }
        )
        slides: dict[str, Any] = {"type": "array", "items": slide}
        if self._min_slides is not None:
            slides["minItems"] = self._min_slides
        if self._max_slides is not None:
            slides["maxItems"] = self._max_slides
        return strict_object(
            {
                "title": {"type": "string"},
                "totalSlides": {"type": "integer", "minimum": 0},
                "slides": slides,
            }
        )

    def _validate_deck(self, value: Any) -> list[SchemaIssue]:
        """Issues come back in document order, so the first one is the first offending path."""

        try:
            envelope = _DeckEnvelope.model_validate(value)
        except ValidationError as exc:
            return issues_from_validation_error(exc)

        issues: list[SchemaIssue] = []
        count = len(envelope.slides)
        too_few = self._min_slides is not None and count < self._min_slides
        too_many = self._max_slides is not None and count > self._max_slides
        if too_few or too_many:
            issues.append(
                SchemaIssue(
                    path="slides",
                    message=f"deck has {count} slides",
                    expected=f"between {self._min_slides} and {self._max_slides} slides",
                )
            )

        for si, slide in enumerate(envelope.slides):
            issues.extend(self._validate_slide(slide, f"slides[{si}]"))
        return issues

    def _validate_slide(self, slide: Any, base: str) -> list[SchemaIssue]:
        try:
            _SlideEnvelope.model_validate(slide)
            envelope_issues: list[SchemaIssue] = []
        except ValidationError as exc:
            envelope_issues = issues_from_validation_error(exc, prefix=base)

        leading: list[SchemaIssue] = []
        trailing: list[SchemaIssue] = []
        for issue in envelope_issues:
            if _slide_field(issue.path, base) in _LEADING_SLIDE_FIELDS:
                leading.append(issue)
            else:
                trailing.append(issue)

        block_issues: list[SchemaIssue] = []
        blocks = slide.get("blocks") if isinstance(slide, dict) else None
        if isinstance(blocks, list):
            for bi, block in enumerate(blocks):
                block_issues.extend(self._validate_block(block, f"{base}.blocks[{bi}]"))
        return leading + block_issues + trailing

    def _validate_block(self, block: Any, base: str) -> list[SchemaIssue]:
        try:
            envelope = _BlockEnvelope.model_validate(block)
        except ValidationError as exc:
            return issues_from_validation_error(exc, prefix=base)

        if self._registry.coerce_kind(envelope.type) is None:
            return [
                SchemaIssue(
                    path=join_path(base, ["type"]),
                    message=f"unknown block kind {envelope.type!r}",
                    expected="one of " + ", ".join(k.value for k in self._registry.kinds()),
                )
            ]
        return self._registry.validate_payload(envelope.type, envelope.data, path=join_path(base, ["data"]))

    def document_copy(self, schema: CompiledSchema) -> dict[str, Any]:
        """Deep copy of a schema document, safe to hand to a transport."""

        return copy.deepcopy(schema.document)


def _model_validator(model: type[BaseModel]) -> Validator:
    def _validate(value: Any) -> list[SchemaIssue]:
        try:
            model.model_validate(value, by_name=False)
        except ValidationError as exc:
            return issues_from_validation_error(exc)
        return []

    return _validate


def _slide_field(path: str, base: str) -> str:
    """Top-level slide field an issue path points into, e.g. `title` for `slides[2].title`."""

    rest = path[len(base) :].lstrip(".")
    return rest.split(".", 1)[0].split("[", 1)[0]
