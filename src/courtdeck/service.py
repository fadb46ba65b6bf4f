"""Public entry points.

`DeckService` wires a transport, the block registry, the schema composer, the engine and the
citation resolver, and exposes the three public operations. Deadlines are given in milliseconds
relative to the call.
"""

from __future__ import annotations

import time
from dataclasses import dataclass

from courtdeck.citations.resolver import CitationResolver
from courtdeck.config import Settings, load_settings
from courtdeck.core.cancellation import CancelToken
from courtdeck.errors import Result
from courtdeck.events import StageListener
from courtdeck.logging import configure_logging, get_logger
from courtdeck.models.citation import CitationDetail, CitationResult
from courtdeck.models.deck import Deck
from courtdeck.models.request import DeckHints, GenerationRequest
from courtdeck.orchestrator.engine import ContentEngine
from courtdeck.schema.composer import DeckSchemaComposer
from courtdeck.schema.registry import DEFAULT_REGISTRY, BlockRegistry
from courtdeck.transport import LLMTransport, build_transport

logger = get_logger(__name__)


@dataclass(frozen=True)
class DeckService:
    """Deck generation and citation lookup."""

    settings: Settings
    transport: LLMTransport
    registry: BlockRegistry
    composer: DeckSchemaComposer
    engine: ContentEngine
    resolver: CitationResolver

    @classmethod
    def create(
        cls,
        transport: LLMTransport,
        settings: Settings | None = None,
        *,
        registry: BlockRegistry = DEFAULT_REGISTRY,
    ) -> "DeckService":
        settings = settings or Settings()
        composer = DeckSchemaComposer(registry, min_slides=settings.min_slides, max_slides=settings.max_slides)
        engine = ContentEngine(transport, settings, composer=composer)
        return cls(
            settings=settings,
            transport=transport,
            registry=registry,
            composer=composer,
            engine=engine,
            resolver=CitationResolver(engine),
        )

    @classmethod
    def from_settings(cls, settings: Settings | None = None, *, configure_logs: bool = True) -> "DeckService":
        """Build a service for the configured provider.

        Raises:
            ValueError: The selected provider has no API key.
        """

        settings = settings or load_settings()
        if configure_logs:
            configure_logging(settings.log_level)
        transport = build_transport(settings)
        logger.info(
            "DeckService ready",
            extra={"provider": transport.name, "conformance": transport.conformance.value},
        )
        return cls.create(transport, settings)

    async def generate_deck(
        self,
        input: str,  # noqa: A002
        *,
        hints: DeckHints | None = None,
        deadline_ms: int | None = None,
        cancel_token: CancelToken | None = None,
        listener: StageListener | None = None,
    ) -> Result[Deck]:
        request = GenerationRequest(kind="deck", input=input, hints=hints, deadline=_absolute(deadline_ms))
        return await self.engine.generate_deck(request, cancel_token=cancel_token, listener=listener)

    async def search_citations(
        self,
        query: str,
        *,
        jurisdiction: str | None = None,
        deadline_ms: int | None = None,
        cancel_token: CancelToken | None = None,
        listener: StageListener | None = None,
    ) -> Result[CitationResult]:
        return await self.resolver.search_citations(
            query,
            jurisdiction=jurisdiction,
            deadline=_absolute(deadline_ms),
            cancel_token=cancel_token,
            listener=listener,
        )

    async def citation_detail(
        self,
        name: str,
        *,
        jurisdiction: str | None = None,
        deadline_ms: int | None = None,
        cancel_token: CancelToken | None = None,
        listener: StageListener | None = None,
    ) -> Result[CitationDetail]:
        return await self.resolver.detail(
            name,
            jurisdiction=jurisdiction,
            deadline=_absolute(deadline_ms),
            cancel_token=cancel_token,
            listener=listener,
        )


def _absolute(deadline_ms: int | None) -> float | None:
    if deadline_ms is None:
        return None
    return time.monotonic() + deadline_ms / 1000.0
