"""Stage events emitted while a request moves through the pipeline.

Listeners receive events synchronously, in stage order. They are meant for progress display and
tests; they must not block.
"""

from __future__ import annotations

from datetime import datetime, timezone
from enum import Enum
from typing import Callable

from pydantic import BaseModel, Field


class Stage(str, Enum):
    """Per-request pipeline stages."""

    IDLE = "idle"
    PROMPTING = "prompting"
    AWAITING = "awaiting"
    PARSING = "parsing"
    REPAIRING = "repairing"
    VALIDATING = "validating"
    POST_PROCESSING = "post_processing"
    DONE = "done"
    FAILED = "failed"


class StageEvent(BaseModel):
    """A single stage transition."""

    request_id: str
    seq: int = Field(ge=1)
    ts: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))

    stage: Stage
    metadata: dict[str, str | int | float | bool | None] = Field(default_factory=dict)


StageListener = Callable[[StageEvent], None]
