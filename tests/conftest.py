"""Shared fixtures: a scripted in-memory transport and wire-deck builders."""

from __future__ import annotations

import asyncio
import json
from typing import Any

import pytest

from courtdeck.config import Settings
from courtdeck.orchestrator.engine import ContentEngine
from courtdeck.transport.base import Conformance, LLMTransport, RawResponse, TransportRequest


class ScriptedTransport(LLMTransport):
    """Replays scripted responses in order; exceptions in the script are raised."""

    name = "scripted"

    def __init__(
        self,
        script: list[str | dict[str, Any] | Exception],
        *,
        conformance: Conformance = Conformance.STRICT,
        delay_s: float = 0.0,
    ) -> None:
        self._script = list(script)
        self.conformance = conformance
        self._delay_s = delay_s
        self.requests: list[TransportRequest] = []

    @property
    def calls(self) -> int:
        return len(self.requests)

    async def _send(self, req: TransportRequest) -> RawResponse:
        self.requests.append(req)
        if self._delay_s:
            await asyncio.sleep(self._delay_s)
        if not self._script:
            raise AssertionError("transport called more often than scripted")
        item = self._script.pop(0)
        if isinstance(item, Exception):
            raise item
        text = item if isinstance(item, str) else json.dumps(item)
        return RawResponse(text=text, provider=self.name)


def text_block(*points: str) -> dict[str, Any]:
    return {"type": "text", "data": {"points": list(points)}}


def quote_block(quote: str = "Privacy is a fundamental right.", citation: str = "Puttaswamy (2017)") -> dict[str, Any]:
    return {"type": "quote", "data": {"quote": quote, "citation": citation}}


def slide_wire(
    title: str,
    blocks: list[dict[str, Any]] | None = None,
    *,
    suggested_images: list[str] | None = None,
    subtitle: str = "",
) -> dict[str, Any]:
    return {
        "title": title,
        "subtitle": subtitle,
        "blocks": blocks if blocks is not None else [text_block("A point")],
        "suggestedImages": suggested_images or [],
    }


def deck_wire(slides: int = 5, *, title: str = "Puttaswamy v. Union of India") -> dict[str, Any]:
    """A valid deck document with `slides` slides; slide 0 suggests an image."""

    out = []
    for i in range(slides):
        out.append(
            slide_wire(
                f"Slide {i + 1}",
                [text_block(f"Point {i + 1}"), quote_block()],
                suggested_images=["supreme court"] if i == 0 else [],
            )
        )
    return {"title": title, "totalSlides": slides, "slides": out}


def citation_wire(name: str, relevance: float, *, type_: str = "case", year: str = "2017") -> dict[str, Any]:
    return {
        "type": type_,
        "name": name,
        "year": year,
        "fullTitle": f"{name} full title",
        "summary": f"Summary of {name}.",
        "relevance": relevance,
        "url": "",
    }


@pytest.fixture
def settings() -> Settings:
    return Settings(_env_file=None)


@pytest.fixture
def make_engine(settings: Settings):
    def _make(transport: LLMTransport) -> ContentEngine:
        return ContentEngine(transport, settings)

    return _make
