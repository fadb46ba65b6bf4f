"""Generation request models."""

from __future__ import annotations

from typing import Literal

from pydantic import BaseModel, ConfigDict, Field

TaskKind = Literal["deck", "citations", "citationDetail"]


class DeckHints(BaseModel):
    """Optional style hints for deck generation."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    tone: str | None = None
    jurisdiction: str | None = None
    target_slide_count: int | None = Field(default=None, ge=1, le=50)


class GenerationRequest(BaseModel):
    """One request to the generation engine.

    `deadline` is an absolute `time.monotonic()` value in seconds; when omitted the engine
    applies its default timeout.
    """

    model_config = ConfigDict(frozen=True)

    kind: TaskKind
    input: str
    hints: DeckHints | None = None
    deadline: float | None = None
