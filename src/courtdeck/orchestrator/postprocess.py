"""Deck post-processing.

Turns a validated wire deck into a renderable :class:`Deck`: stamps block ids, adds image
placeholders for suggested images, trims empty trailing blocks and recomputes `totalSlides`.
Running it again on its own output changes ids only.
"""

from __future__ import annotations

from typing import Any

from courtdeck.logging import get_logger
from courtdeck.models.deck import Block, Deck, Slide
from courtdeck.schema.registry import DEFAULT_REGISTRY, BlockKind, BlockRegistry, ImagePayload, Payload
from courtdeck.utils.ids import format_block_id

logger = get_logger(__name__)


class DeckPostProcessor:
    def __init__(self, registry: BlockRegistry = DEFAULT_REGISTRY) -> None:
        self._registry = registry

    def process(self, deck: Deck | dict[str, Any]) -> Deck:
        """Post-process a validated deck (wire dict or typed value)."""

        wire = deck.to_wire() if isinstance(deck, Deck) else deck
        slides = [self._process_slide(index, raw) for index, raw in enumerate(wire.get("slides", []))]
        result = Deck(title=wire.get("title", ""), total_slides=len(slides), slides=slides)
        logger.debug(
            "Deck post-processed",
            extra={"slides": len(slides), "blocks": sum(len(s.blocks) for s in slides)},
        )
        return result

    def _process_slide(self, index: int, raw: dict[str, Any]) -> Slide:
        suggested = list(raw.get("suggestedImages", []))
        payloads: list[tuple[BlockKind, Payload]] = []
        for block in raw.get("blocks", []):
            kind = self._registry.spec(block["type"]).kind
            payloads.append((kind, self._registry.parse_payload(kind, block["data"])))

        if suggested and not _starts_with_placeholder(payloads, suggested):
            payloads.insert(0, (BlockKind.IMAGE, _placeholder(index, suggested)))

        while payloads and self._registry.is_empty(*payloads[-1]):
            payloads.pop()
        if not payloads:
            payloads.append((BlockKind.TEXT, self._registry.default_payload(BlockKind.TEXT)))

        blocks = [Block(id=format_block_id(kind.value), kind=kind, data=payload) for kind, payload in payloads]
        return Slide(
            title=raw.get("title", ""),
            subtitle=raw.get("subtitle", ""),
            blocks=blocks,
            suggested_images=suggested,
        )


def _placeholder(index: int, keywords: list[str]) -> ImagePayload:
    return ImagePayload(
        uri="",
        caption="",
        layout="floatRight" if index % 2 == 0 else "floatLeft",
        size="small",
        placeholder=True,
        suggested_keywords=list(keywords),
    )


def _starts_with_placeholder(payloads: list[tuple[BlockKind, Payload]], keywords: list[str]) -> bool:
    if not payloads:
        return False
    kind, payload = payloads[0]
    return (
        kind is BlockKind.IMAGE
        and isinstance(payload, ImagePayload)
        and payload.placeholder
        and list(payload.suggested_keywords) == keywords
    )
