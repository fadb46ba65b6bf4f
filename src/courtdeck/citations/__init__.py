"""Legal citation search and formatting."""

from __future__ import annotations

from courtdeck.citations.formatting import CaseReference, CitationStyle, format_citation
from courtdeck.citations.resolver import CitationResolver, clamp_relevance, rank_citations

__all__ = [
    "CaseReference",
    "CitationResolver",
    "CitationStyle",
    "format_citation",
    "clamp_relevance",
    "rank_citations",
]
