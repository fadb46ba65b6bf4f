"""Tests for deck schema composition and validation."""

from __future__ import annotations

from typing import Any, Iterator

import pytest
from conftest import citation_wire, deck_wire, slide_wire, text_block

from courtdeck.schema.composer import DeckSchemaComposer


def test_deck_document_shape() -> None:
    """The deck document is strict and bounds the slide count."""

    composer = DeckSchemaComposer()
    doc = composer.deck_schema().document
    assert composer.deck_schema().name == "slide_deck"
    assert doc["additionalProperties"] is False
    assert doc["required"] == ["title", "totalSlides", "slides"]

    slides = doc["properties"]["slides"]
    assert slides["minItems"] == 3
    assert slides["maxItems"] == 8

    slide = slides["items"]
    assert slide["required"] == ["title", "subtitle", "blocks", "suggestedImages"]
    variants = slide["properties"]["blocks"]["items"]["anyOf"]
    tags = [v["properties"]["type"]["enum"][0] for v in variants]
    assert tags == [k.value for k in composer.registry.kinds()]
    for variant in variants:
        assert variant["additionalProperties"] is False
        assert variant["required"] == ["type", "data"]


def test_valid_deck_passes() -> None:
    composer = DeckSchemaComposer()
    assert composer.validate(deck_wire(5), composer.deck_schema()) == []


def test_unknown_block_type_is_reported_at_type_path() -> None:
    composer = DeckSchemaComposer()
    deck = deck_wire(3)
    deck["slides"][0]["blocks"][0] = {"type": "video", "data": {"url": "x"}}

    issues = composer.validate(deck, composer.deck_schema())
    assert issues[0].path == "slides[0].blocks[0].type"


def test_payload_issue_path_is_fully_qualified() -> None:
    composer = DeckSchemaComposer()
    deck = deck_wire(3)
    deck["slides"][1]["blocks"][0] = {
        "type": "callout",
        "data": {"title": "t", "description": "d", "variant": "purple"},
    }

    issues = composer.validate(deck, composer.deck_schema())
    assert issues[0].path == "slides[1].blocks[0].data.variant"


def test_missing_slide_field() -> None:
    composer = DeckSchemaComposer()
    deck = deck_wire(3)
    del deck["slides"][2]["suggestedImages"]

    issues = composer.validate(deck, composer.deck_schema())
    assert issues[0].path == "slides[2].suggestedImages"


def test_slide_count_bounds() -> None:
    composer = DeckSchemaComposer()
    deck = {"title": "Short", "totalSlides": 1, "slides": [slide_wire("Only", [text_block("x")])]}

    issues = composer.validate(deck, composer.deck_schema())
    assert [i.path for i in issues] == ["slides"]

    unbounded = composer.unbounded_deck_schema()
    assert composer.validate(deck, unbounded) == []
    assert "minItems" not in unbounded.document["properties"]["slides"]


def test_llm_block_ids_are_tolerated() -> None:
    composer = DeckSchemaComposer()
    deck = deck_wire(3)
    deck["slides"][0]["blocks"][0]["id"] = "from-the-model"
    assert composer.validate(deck, composer.deck_schema()) == []


def test_citation_result_schema() -> None:
    composer = DeckSchemaComposer()
    schema = composer.citation_result_schema()
    assert schema.name == "citation_search"

    item = schema.document["properties"]["citations"]["items"]
    assert item["properties"]["type"]["enum"] == ["article", "case", "act", "section"]
    assert item["required"] == ["type", "name", "year", "fullTitle", "summary", "relevance", "url"]

    good = {
        "query": "privacy",
        "citations": [citation_wire("Puttaswamy", 90)],
        "totalFound": 1,
        "searchTime": "0.4s",
    }
    assert composer.validate(good, schema) == []

    bad = dict(good, citations=[citation_wire("Puttaswamy", 140)])
    issues = composer.validate(bad, schema)
    assert issues[0].path == "citations[0].relevance"


def test_citation_detail_schema_extends_citation() -> None:
    composer = DeckSchemaComposer()
    doc = composer.citation_detail_schema().document
    assert doc["required"][-2:] == ["significance", "keyPrinciples"]


def test_document_copy_is_independent() -> None:
    composer = DeckSchemaComposer()
    copy = composer.document_copy(composer.deck_schema())
    copy["properties"].clear()
    assert composer.deck_schema().document["properties"]


# Keywords OpenAI strict structured outputs rejects with a 400.
STRICT_MODE_REJECTS = frozenset(
    {
        "minLength",
        "maxLength",
        "minProperties",
        "maxProperties",
        "uniqueItems",
        "patternProperties",
        "propertyNames",
        "unevaluatedProperties",
        "contains",
        "allOf",
        "oneOf",
        "not",
        "if",
        "then",
        "else",
        "$ref",
        "default",
    }
)


def _schema_nodes(node: dict[str, Any], path: str = "$") -> Iterator[tuple[str, dict[str, Any]]]:
    yield path, node
    for name, sub in node.get("properties", {}).items():
        yield from _schema_nodes(sub, f"{path}.properties.{name}")
    if isinstance(node.get("items"), dict):
        yield from _schema_nodes(node["items"], f"{path}.items")
    for i, sub in enumerate(node.get("anyOf", [])):
        yield from _schema_nodes(sub, f"{path}.anyOf[{i}]")


@pytest.mark.parametrize("schema_name", ["deck_schema", "citation_result_schema", "citation_detail_schema"])
def test_documents_use_only_strict_mode_keywords(schema_name: str) -> None:
    """Every node of a wire document is acceptable to a strict-mode provider."""

    document = getattr(DeckSchemaComposer(), schema_name)().document
    for path, node in _schema_nodes(document):
        rejected = STRICT_MODE_REJECTS.intersection(node)
        assert not rejected, f"{sorted(rejected)} at {path}"
        if node.get("type") == "object":
            assert node["additionalProperties"] is False, path
            assert node["required"] == list(node["properties"]), path


def test_empty_slide_title_is_still_rejected() -> None:
    composer = DeckSchemaComposer()
    deck = deck_wire(3)
    deck["slides"][1]["title"] = ""

    issues = composer.validate(deck, composer.deck_schema())
    assert [i.path for i in issues] == ["slides[1].title"]


def test_first_issue_follows_document_order() -> None:
    """A bad block on an early slide is reported before a bad title on a later one."""

    composer = DeckSchemaComposer()
    deck = deck_wire(3)
    deck["slides"][0]["blocks"][0] = {"type": "video", "data": {"url": "x"}}
    deck["slides"][2]["title"] = ""

    issues = composer.validate(deck, composer.deck_schema())
    assert [i.path for i in issues] == ["slides[0].blocks[0].type", "slides[2].title"]


def test_issues_within_a_slide_follow_field_order() -> None:
    composer = DeckSchemaComposer()
    deck = deck_wire(3)
    slide = deck["slides"][1]
    slide["suggestedImages"] = "courtroom"
    slide["blocks"].append({"type": "callout", "data": {"title": "t", "description": "d", "variant": "purple"}})
    slide["title"] = ""

    issues = composer.validate(deck, composer.deck_schema())
    assert [i.path for i in issues] == [
        "slides[1].title",
        "slides[1].blocks[2].data.variant",
        "slides[1].suggestedImages",
    ]
