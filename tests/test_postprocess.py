"""Tests for deck post-processing."""

from __future__ import annotations

from conftest import deck_wire, quote_block, slide_wire, text_block

from courtdeck.models.deck import Deck
from courtdeck.orchestrator.postprocess import DeckPostProcessor
from courtdeck.schema.composer import DeckSchemaComposer
from courtdeck.schema.registry import BlockKind, ImagePayload


def _structure(deck: Deck) -> dict:
    wire = deck.to_wire()
    for slide in wire["slides"]:
        for block in slide["blocks"]:
            block.pop("id")
    return wire


def test_ids_are_stamped_and_unique() -> None:
    deck_in = deck_wire(4)
    deck_in["slides"][1]["blocks"][0]["id"] = "llm-id"

    deck = DeckPostProcessor().process(deck_in)
    ids = [b.id for s in deck.slides for b in s.blocks]
    assert len(ids) == len(set(ids))
    assert "llm-id" not in ids
    first = deck.slides[0].blocks[1]
    assert first.id.startswith("text_")
    assert len(first.id.split("_")) == 3


def test_placeholder_layout_alternates() -> None:
    slides = [
        slide_wire(f"S{i}", [text_block("p")], suggested_images=[f"kw{i}", "court"])
        for i in range(4)
    ]
    deck = DeckPostProcessor().process({"title": "T", "totalSlides": 4, "slides": slides})

    layouts = []
    for i, slide in enumerate(deck.slides):
        head = slide.blocks[0]
        assert head.kind is BlockKind.IMAGE
        assert isinstance(head.data, ImagePayload)
        assert head.data.placeholder is True
        assert head.data.size == "small"
        assert head.data.uri == ""
        assert head.data.suggested_keywords == [f"kw{i}", "court"]
        layouts.append(head.data.layout)
    assert layouts == ["floatRight", "floatLeft", "floatRight", "floatLeft"]


def test_no_placeholder_without_suggestions() -> None:
    deck = DeckPostProcessor().process(deck_wire(3))
    assert [b.kind for b in deck.slides[1].blocks] == [BlockKind.TEXT, BlockKind.QUOTE]


def test_trailing_empty_blocks_are_trimmed() -> None:
    slide = slide_wire("S", [text_block("keep"), quote_block("", ""), text_block("", " ")])
    deck = DeckPostProcessor().process({"title": "T", "totalSlides": 1, "slides": [slide]})
    assert [b.kind for b in deck.slides[0].blocks] == [BlockKind.TEXT]


def test_inner_empty_blocks_are_kept() -> None:
    slide = slide_wire("S", [text_block(""), text_block("keep")])
    deck = DeckPostProcessor().process({"title": "T", "totalSlides": 1, "slides": [slide]})
    assert len(deck.slides[0].blocks) == 2


def test_emptied_slide_gets_default_text_block() -> None:
    slide = slide_wire("S", [text_block("")])
    empty = slide_wire("E", [])
    deck = DeckPostProcessor().process({"title": "T", "totalSlides": 9, "slides": [slide, empty]})

    for s in deck.slides:
        assert len(s.blocks) == 1
        assert s.blocks[0].kind is BlockKind.TEXT
        assert s.blocks[0].data.points == [""]
    assert deck.total_slides == 2


def test_divider_at_end_is_not_trimmed() -> None:
    slide = slide_wire("S", [text_block("a"), {"type": "divider", "data": {"style": "dotted"}}])
    deck = DeckPostProcessor().process({"title": "T", "totalSlides": 1, "slides": [slide]})
    assert deck.slides[0].blocks[-1].kind is BlockKind.DIVIDER


def test_total_slides_is_recomputed() -> None:
    wire = deck_wire(5)
    wire["totalSlides"] = 2
    assert DeckPostProcessor().process(wire).total_slides == 5


def test_idempotent_apart_from_ids() -> None:
    processor = DeckPostProcessor()
    once = processor.process(deck_wire(5))
    twice = processor.process(once)

    assert _structure(once) == _structure(twice)
    assert [b.id for b in once.slides[0].blocks] != [b.id for b in twice.slides[0].blocks]


def test_output_validates_against_deck_schema() -> None:
    composer = DeckSchemaComposer()
    deck = DeckPostProcessor().process(deck_wire(5))
    wire = deck.to_wire()
    assert composer.validate(wire, composer.deck_schema()) == []
    assert Deck.from_wire(wire) == deck
