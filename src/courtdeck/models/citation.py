"""Legal citation models."""

from __future__ import annotations

from typing import Literal

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

CitationType = Literal["article", "case", "act", "section"]


class _WireModel(BaseModel):
    # Strict like the block payloads: "90" or true is not a relevance score.
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, extra="forbid", strict=True)


class Citation(_WireModel):
    """A single legal authority.

    `year` is expected for cases and is often empty for articles and sections; neither is
    enforced. `url` is empty when the source is unknown.
    """

    type: CitationType
    name: str = Field(description="Short name, e.g. Article 21.")
    year: str = Field(description="Year, or empty string when not applicable.")
    full_title: str
    summary: str = Field(description="Two or three sentences on why it matters.")
    relevance: float = Field(ge=0, le=100)
    url: str = Field(description="Authoritative URL, or empty string when unknown.")

    def dedup_key(self) -> tuple[str, str, str]:
        return (self.type, self.name.strip().casefold(), self.year.strip())


class CitationDetail(Citation):
    """Expanded view of one citation."""

    significance: str
    key_principles: list[str]


class CitationResult(_WireModel):
    """Ranked search results for a citation query."""

    query: str
    citations: list[Citation]
    total_found: int = Field(ge=0)
    search_time: str
