"""Deck statistics."""

from __future__ import annotations

from collections import Counter

from pydantic import BaseModel, Field

from courtdeck.models.deck import Deck
from courtdeck.schema.registry import BlockKind, ImagePayload


class DeckStats(BaseModel):
    """Summary counts for a deck."""

    slide_count: int
    block_count: int
    blocks_by_kind: dict[str, int] = Field(default_factory=dict)
    placeholder_images: int = 0
    suggested_image_keywords: int = 0
    average_blocks_per_slide: float = 0.0


def deck_stats(deck: Deck) -> DeckStats:
    """Count slides, blocks per kind, and image placeholders."""

    by_kind: Counter[str] = Counter()
    placeholders = 0
    keywords = 0
    for slide in deck.slides:
        keywords += len(slide.suggested_images)
        for block in slide.blocks:
            by_kind[block.kind.value] += 1
            if block.kind is BlockKind.IMAGE and isinstance(block.data, ImagePayload) and block.data.placeholder:
                placeholders += 1

    block_count = sum(by_kind.values())
    slide_count = len(deck.slides)
    return DeckStats(
        slide_count=slide_count,
        block_count=block_count,
        blocks_by_kind=dict(by_kind),
        placeholder_images=placeholders,
        suggested_image_keywords=keywords,
        average_blocks_per_slide=round(block_count / slide_count, 2) if slide_count else 0.0,
    )
