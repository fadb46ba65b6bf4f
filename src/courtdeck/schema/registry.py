"""Block schema registry.

Single source of truth for every block variant. Each kind supplies a payload model, a short
description used in prompts, a default payload, and the fields whose emptiness decides whether
a block carries content. The strict-mode schema fragment is derived from the payload model.

Adding a kind means adding a payload model and a :class:`BlockSpec` entry in this module.
"""

from __future__ import annotations

import copy
from dataclasses import dataclass
from enum import Enum
from typing import Any, Callable, Iterable, Literal, Union

from pydantic import BaseModel, ConfigDict, Field, ValidationError
from pydantic.alias_generators import to_camel

from courtdeck.errors import SchemaIssue
from courtdeck.schema.paths import issues_from_validation_error, join_path
from courtdeck.schema.strict import strict_json_schema


class BlockKind(str, Enum):
    """Closed set of block variants."""

    TEXT = "text"
    PARAGRAPH = "paragraph"
    QUOTE = "quote"
    CALLOUT = "callout"
    TWO_COLUMN = "twoColumn"
    TIMELINE = "timeline"
    EVIDENCE = "evidence"
    DIVIDER = "divider"
    SECTION_HEADER = "sectionHeader"
    IMAGE = "image"


class Payload(BaseModel):
    """Base for block payloads: camelCase on the wire, no extra keys, no type coercion."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        extra="forbid",
        strict=True,
        frozen=True,
    )


class TextPayload(Payload):
    points: list[str] = Field(description="Bullet points, one idea each.")


class ParagraphPayload(Payload):
    text: str = Field(description="Prose; may use *gold*, ~red~ and _blue_ emphasis markers.")


class QuotePayload(Payload):
    quote: str
    citation: str


class CalloutPayload(Payload):
    title: str
    description: str
    variant: Literal["info", "warning", "critical"]


class TwoColumnPayload(Payload):
    left_title: str
    right_title: str
    left_points: list[str]
    right_points: list[str]


class TimelineEvent(Payload):
    date: str
    event: str


class TimelinePayload(Payload):
    events: list[TimelineEvent]


class EvidencePayload(Payload):
    evidence_name: str
    summary: str
    citation: str
    image: str = Field(description="Image URI, or empty string when there is none.")


class DividerPayload(Payload):
    style: Literal["solid", "dotted", "gradient"]


class SectionHeaderPayload(Payload):
    title: str


class ImagePayload(Payload):
    uri: str = Field(description="Resolved image URI, or empty string for a placeholder.")
    caption: str
    layout: Literal["center", "floatLeft", "floatRight"]
    size: Literal["small", "medium", "large"]
    placeholder: bool
    suggested_keywords: list[str]


BlockPayload = Union[
    TextPayload,
    ParagraphPayload,
    QuotePayload,
    CalloutPayload,
    TwoColumnPayload,
    TimelinePayload,
    EvidencePayload,
    DividerPayload,
    SectionHeaderPayload,
    ImagePayload,
]


@dataclass(frozen=True)
class BlockSpec:
    """Everything the core knows about one block kind."""

    kind: BlockKind
    model: type[Payload]
    description: str
    default: Callable[[], Payload]
    content_fields: tuple[str, ...]


DEFAULT_SPECS: tuple[BlockSpec, ...] = (
    BlockSpec(
        kind=BlockKind.TEXT,
        model=TextPayload,
        description="Simple bullet points",
        default=lambda: TextPayload(points=[""]),
        content_fields=("points",),
    ),
    BlockSpec(
        kind=BlockKind.PARAGRAPH,
        model=ParagraphPayload,
        description="A paragraph of prose with optional inline emphasis",
        default=lambda: ParagraphPayload(text=""),
        content_fields=("text",),
    ),
    BlockSpec(
        kind=BlockKind.QUOTE,
        model=QuotePayload,
        description="Legal quote with its citation",
        default=lambda: QuotePayload(quote="", citation=""),
        content_fields=("quote", "citation"),
    ),
    BlockSpec(
        kind=BlockKind.CALLOUT,
        model=CalloutPayload,
        description="Highlighted important point (variant info, warning or critical)",
        default=lambda: CalloutPayload(title="", description="", variant="info"),
        content_fields=("title", "description"),
    ),
    BlockSpec(
        kind=BlockKind.TWO_COLUMN,
        model=TwoColumnPayload,
        description="Arguments vs counter-arguments in two columns",
        default=lambda: TwoColumnPayload(
            left_title="Arguments",
            right_title="Counter Arguments",
            left_points=[""],
            right_points=[""],
        ),
        content_fields=("left_title", "right_title", "left_points", "right_points"),
    ),
    BlockSpec(
        kind=BlockKind.TIMELINE,
        model=TimelinePayload,
        description="Case progression as dated events",
        default=lambda: TimelinePayload(events=[TimelineEvent(date="", event="")]),
        content_fields=("events",),
    ),
    BlockSpec(
        kind=BlockKind.EVIDENCE,
        model=EvidencePayload,
        description="Structured evidence card with summary and citation",
        default=lambda: EvidencePayload(evidence_name="", summary="", citation="", image=""),
        content_fields=("evidence_name", "summary", "citation", "image"),
    ),
    BlockSpec(
        kind=BlockKind.DIVIDER,
        model=DividerPayload,
        description="Visual separator (style solid, dotted or gradient)",
        default=lambda: DividerPayload(style="solid"),
        content_fields=(),
    ),
    BlockSpec(
        kind=BlockKind.SECTION_HEADER,
        model=SectionHeaderPayload,
        description="Big section title marking a break",
        default=lambda: SectionHeaderPayload(title=""),
        content_fields=("title",),
    ),
    BlockSpec(
        kind=BlockKind.IMAGE,
        model=ImagePayload,
        description="Image with caption, layout and size",
        default=lambda: ImagePayload(
            uri="",
            caption="",
            layout="center",
            size="medium",
            placeholder=False,
            suggested_keywords=[],
        ),
        content_fields=("uri", "caption", "suggested_keywords"),
    ),
)


class UnknownBlockKind(KeyError):
    """Raised when a tag is not a registered block kind."""


class BlockRegistry:
    """Immutable lookup of block specs."""

    def __init__(self, specs: Iterable[BlockSpec] = DEFAULT_SPECS) -> None:
        self._specs: dict[BlockKind, BlockSpec] = {}
        for spec in specs:
            if spec.kind in self._specs:
                raise ValueError(f"duplicate block kind: {spec.kind.value}")
            self._specs[spec.kind] = spec
        self._schemas: dict[BlockKind, dict[str, Any]] = {
            kind: strict_json_schema(spec.model) for kind, spec in self._specs.items()
        }

    def kinds(self) -> tuple[BlockKind, ...]:
        """Registered kinds, in declaration order."""

        return tuple(self._specs)

    def coerce_kind(self, tag: str | BlockKind) -> BlockKind | None:
        """Map a wire tag to a registered kind, or None when unknown."""

        try:
            kind = BlockKind(tag)
        except ValueError:
            return None
        return kind if kind in self._specs else None

    def spec(self, kind: str | BlockKind) -> BlockSpec:
        resolved = self.coerce_kind(kind)
        if resolved is None:
            raise UnknownBlockKind(str(kind))
        return self._specs[resolved]

    def describe(self, kind: str | BlockKind) -> str:
        return self.spec(kind).description

    def default_payload(self, kind: str | BlockKind) -> Payload:
        return self.spec(kind).default()

    def payload_model(self, kind: str | BlockKind) -> type[Payload]:
        return self.spec(kind).model

    def payload_schema(self, kind: str | BlockKind) -> dict[str, Any]:
        """Strict-mode schema fragment for a kind's payload (a fresh copy)."""

        return copy.deepcopy(self._schemas[self.spec(kind).kind])

    def validate_payload(self, kind: str | BlockKind, value: Any, *, path: str = "") -> list[SchemaIssue]:
        """Validate a raw payload. An empty list means the payload is valid.

        Args:
            kind: Block kind tag.
            value: Raw payload (usually a dict decoded from JSON).
            path: Prefix for reported paths, e.g. `slides[0].blocks[1].data`.
        """

        resolved = self.coerce_kind(kind)
        if resolved is None:
            return [
                SchemaIssue(
                    path=join_path(path, ["type"]) if path else "type",
                    message=f"unknown block kind {kind!r}",
                    expected="one of " + ", ".join(k.value for k in self._specs),
                )
            ]
        try:
            self._specs[resolved].model.model_validate(value, by_name=False)
        except ValidationError as exc:
            return issues_from_validation_error(exc, prefix=path)
        return []

    def parse_payload(self, kind: str | BlockKind, value: Any) -> Payload:
        """Validate and return the typed payload; raises pydantic's ValidationError."""

        if isinstance(value, Payload):
            value = value.model_dump(by_alias=True)
        return self.spec(kind).model.model_validate(value, by_name=False)

    def is_empty(self, kind: str | BlockKind, payload: Payload) -> bool:
        """True when every content field of the payload is blank.

        Kinds without content fields (dividers) are never empty.
        """

        spec = self.spec(kind)
        if not spec.content_fields:
            return False
        return all(_is_blank(getattr(payload, name)) for name in spec.content_fields)


def _is_blank(value: Any) -> bool:
    if isinstance(value, str):
        return not value.strip()
    if isinstance(value, (list, tuple)):
        return all(_is_blank(v) for v in value)
    if isinstance(value, BaseModel):
        return all(_is_blank(getattr(value, name)) for name in type(value).model_fields)
    return value is None


DEFAULT_REGISTRY = BlockRegistry()
