"""Pydantic models used across the project."""

from __future__ import annotations

from courtdeck.models.citation import Citation, CitationDetail, CitationResult, CitationType
from courtdeck.models.deck import Block, Deck, Slide
from courtdeck.models.request import DeckHints, GenerationRequest, TaskKind

__all__ = [
    "Block",
    "Citation",
    "CitationDetail",
    "CitationResult",
    "CitationType",
    "Deck",
    "DeckHints",
    "GenerationRequest",
    "Slide",
    "TaskKind",
]
