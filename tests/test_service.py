"""Tests for the public service facade, configuration and logging context."""

from __future__ import annotations

import asyncio
import logging

import pytest
from conftest import ScriptedTransport, citation_wire, deck_wire
from rich.logging import RichHandler

from courtdeck.config import Settings, load_settings
from courtdeck.errors import ErrorKind, GenerationFailure
from courtdeck.events import Stage
from courtdeck.logging import LogContext, configure_logging, current_context, request_context
from courtdeck.models.request import DeckHints
from courtdeck.orchestrator.state import RequestState
from courtdeck.service import DeckService
from courtdeck.transport import OpenAITransport


def test_generate_deck_end_to_end(settings: Settings) -> None:
    transport = ScriptedTransport([deck_wire(5)])
    service = DeckService.create(transport, settings)

    result = asyncio.run(
        service.generate_deck(
            "Summarise Puttaswamy v. Union of India for a 5-slide deck.",
            hints=DeckHints(tone="neutral", jurisdiction="India", target_slide_count=5),
            deadline_ms=5_000,
        )
    )

    deck = result.unwrap()
    assert deck.total_slides == len(deck.slides) == 5
    assert "- Tone: neutral" in transport.requests[0].user_prompt


def test_search_and_detail(settings: Settings) -> None:
    detail = dict(citation_wire("Article 21", 88, type_="article", year=""), significance="s", keyPrinciples=[])
    transport = ScriptedTransport(
        [
            {
                "query": "privacy",
                "citations": [citation_wire("A", 10), citation_wire("B", 30)],
                "totalFound": 2,
                "searchTime": "1s",
            },
            detail,
        ]
    )
    service = DeckService.create(transport, settings)

    found = asyncio.run(service.search_citations("privacy", jurisdiction="Indian law")).unwrap()
    assert [c.name for c in found.citations] == ["B", "A"]

    info = asyncio.run(service.citation_detail("Article 21")).unwrap()
    assert info.name == "Article 21"
    assert info.significance == "s"


def test_unwrap_raises_generation_failure(settings: Settings) -> None:
    service = DeckService.create(ScriptedTransport([]), settings)
    result = asyncio.run(service.generate_deck(""))
    with pytest.raises(GenerationFailure) as exc:
        result.unwrap()
    assert exc.value.error.kind is ErrorKind.EMPTY


def test_expired_deadline_ms(settings: Settings) -> None:
    transport = ScriptedTransport([deck_wire(3)], delay_s=5.0)
    service = DeckService.create(transport, settings)
    result = asyncio.run(service.generate_deck("Kesavananda Bharati", deadline_ms=50))
    assert result.error is not None
    assert result.error.kind is ErrorKind.TIMEOUT


def test_from_settings_builds_configured_transport() -> None:
    settings = Settings(_env_file=None, openai_api_key="sk-test", min_slides=2, max_slides=4)
    service = DeckService.from_settings(settings, configure_logs=False)
    assert isinstance(service.transport, OpenAITransport)
    slides = service.composer.deck_schema().document["properties"]["slides"]
    assert (slides["minItems"], slides["maxItems"]) == (2, 4)


def test_settings_reject_inverted_slide_bounds() -> None:
    with pytest.raises(ValueError):
        Settings(_env_file=None, min_slides=9, max_slides=3)


def test_load_settings_from_env_file(tmp_path, monkeypatch) -> None:
    env_file = tmp_path / "courtdeck.env"
    env_file.write_text("COURTDECK_LLM_PROVIDER=gemini\nCOURTDECK_MAX_SLIDES=6\n", encoding="utf-8")
    monkeypatch.setenv("COURTDECK_ENV_FILE", str(env_file))

    loaded = load_settings()
    assert loaded.llm_provider == "gemini"
    assert loaded.max_slides == 6


def test_stage_context_is_written_by_request_state() -> None:
    with request_context("req_000042_abc123"):
        assert current_context() == LogContext("req_000042_abc123", "idle")
        state = RequestState(request_id="req_000042_abc123", kind="deck", deadline=0.0)
        state.advance(Stage.PROMPTING)
        state.advance(Stage.AWAITING)
        assert current_context().stage == "awaiting"
    assert current_context() == LogContext()


def test_records_carry_request_context() -> None:
    configure_logging("DEBUG")
    handler = next(h for h in logging.getLogger().handlers if isinstance(h, RichHandler))
    record = logging.LogRecord("courtdeck.tests", logging.INFO, __file__, 1, "hello", None, None)

    with request_context("req_000007_zz9xk1"):
        RequestState(request_id="req_000007_zz9xk1", kind="citations", deadline=0.0).advance(Stage.PROMPTING)
        assert handler.filter(record)

    assert (record.request_id, record.stage) == ("req_000007_zz9xk1", "prompting")
    assert "req=req_000007_zz9xk1 stage=prompting" in handler.format(record)
    assert logging.getLogger("httpx").level == logging.WARNING
