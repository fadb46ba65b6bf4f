"""Citation search on top of the generation engine.

The resolver owns input normalization and the ranking guarantees of search results: relevance
is clamped into [0, 100] before validation, duplicates collapse to their most relevant
occurrence, and results come back sorted by relevance (ties keep model order).
"""

from __future__ import annotations

import copy
from typing import Any

from courtdeck.core.cancellation import CancelToken
from courtdeck.errors import GenerationError, Result
from courtdeck.events import StageListener
from courtdeck.logging import get_logger
from courtdeck.models.citation import Citation, CitationDetail, CitationResult
from courtdeck.models.deck import Block
from courtdeck.models.request import DeckHints, GenerationRequest
from courtdeck.orchestrator.engine import ContentEngine
from courtdeck.schema.registry import BlockKind, QuotePayload
from courtdeck.utils.ids import format_block_id

logger = get_logger(__name__)

RELEVANCE_MIN = 0.0
RELEVANCE_MAX = 100.0


class CitationResolver:
    """Thin facade over :class:`ContentEngine` for citation tasks."""

    def __init__(self, engine: ContentEngine) -> None:
        self._engine = engine

    async def search_citations(
        self,
        query: str,
        *,
        jurisdiction: str | None = None,
        deadline: float | None = None,
        cancel_token: CancelToken | None = None,
        listener: StageListener | None = None,
    ) -> Result[CitationResult]:
        normalized = query.strip()
        if not normalized:
            return Result.failure(GenerationError.empty("query is blank"))

        request = GenerationRequest(
            kind="citations",
            input=normalized,
            hints=DeckHints(jurisdiction=jurisdiction) if jurisdiction else None,
            deadline=deadline,
        )

        def _finish(payload: dict[str, Any]) -> CitationResult:
            return rank_citations(CitationResult.model_validate(payload), query=normalized)

        return await self._engine.generate_citations(
            request,
            normalize=clamp_relevance,
            finish=_finish,
            cancel_token=cancel_token,
            listener=listener,
        )

    async def detail(
        self,
        name: str,
        *,
        jurisdiction: str | None = None,
        deadline: float | None = None,
        cancel_token: CancelToken | None = None,
        listener: StageListener | None = None,
    ) -> Result[CitationDetail]:
        normalized = name.strip()
        if not normalized:
            return Result.failure(GenerationError.empty("citation name is blank"))

        request = GenerationRequest(
            kind="citationDetail",
            input=normalized,
            hints=DeckHints(jurisdiction=jurisdiction) if jurisdiction else None,
            deadline=deadline,
        )
        return await self._engine.generate_citation_detail(
            request,
            normalize=clamp_relevance,
            cancel_token=cancel_token,
            listener=listener,
        )

    @staticmethod
    def to_quote_block(citation: Citation) -> Block:
        """Build a quote block for inserting a citation into a slide."""

        source = f"{citation.name} ({citation.year})" if citation.year.strip() else citation.name
        return Block(
            id=format_block_id(BlockKind.QUOTE.value),
            kind=BlockKind.QUOTE,
            data=QuotePayload(quote=citation.summary, citation=source),
        )


def clamp_relevance(payload: dict[str, Any]) -> dict[str, Any]:
    """Clamp numeric `relevance` values into [0, 100].

    Works on a copy of either a search result (`citations` list) or a single citation.
    Non-numeric values are left for validation to reject.
    """

    out = copy.deepcopy(payload)
    targets = out.get("citations") if isinstance(out.get("citations"), list) else [out]
    clamped = 0
    for item in targets:
        if not isinstance(item, dict):
            continue
        value = item.get("relevance")
        if isinstance(value, bool) or not isinstance(value, (int, float)):
            continue
        bounded = min(max(float(value), RELEVANCE_MIN), RELEVANCE_MAX)
        if bounded != value:
            item["relevance"] = bounded
            clamped += 1
    if clamped:
        logger.info("Clamped out-of-range relevance", extra={"clamped": clamped})
    return out


def rank_citations(result: CitationResult, *, query: str | None = None) -> CitationResult:
    """Deduplicate by (type, name, year) and sort by relevance, highest first.

    The most relevant occurrence of a duplicate wins; ties keep their original order.
    """

    best: dict[tuple[str, str, str], tuple[int, Citation]] = {}
    for index, citation in enumerate(result.citations):
        key = citation.dedup_key()
        kept = best.get(key)
        if kept is None or citation.relevance > kept[1].relevance:
            best[key] = (index, citation)

    ordered = [c for _, c in sorted(best.values(), key=lambda pair: pair[0])]
    ordered.sort(key=lambda c: c.relevance, reverse=True)

    return result.model_copy(
        update={
            "query": query if query is not None else result.query,
            "citations": ordered,
            "total_found": max(result.total_found, len(ordered)),
        }
    )
