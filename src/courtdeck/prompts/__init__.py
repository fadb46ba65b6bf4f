from __future__ import annotations

from courtdeck.prompts.assembler import Prompt, PromptAssembler
from courtdeck.prompts.templates import CITATION_SYSTEM_PROMPT, DEFAULT_JURISDICTION, REPAIR_SUFFIX

__all__ = [
    "CITATION_SYSTEM_PROMPT",
    "DEFAULT_JURISDICTION",
    "REPAIR_SUFFIX",
    "Prompt",
    "PromptAssembler",
]
