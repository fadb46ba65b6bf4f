"""Request orchestration."""

from __future__ import annotations

from courtdeck.orchestrator.engine import ContentEngine
from courtdeck.orchestrator.postprocess import DeckPostProcessor
from courtdeck.orchestrator.state import MAX_REPAIRS, IllegalTransition, RequestState

__all__ = ["MAX_REPAIRS", "ContentEngine", "DeckPostProcessor", "IllegalTransition", "RequestState"]
