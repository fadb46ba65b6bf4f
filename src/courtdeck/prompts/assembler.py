"""Prompt assembly.

Builds the system and user messages for each task kind. Assembly is a pure function of the
request and the registry: identical inputs give byte-identical prompts.
"""

from __future__ import annotations

from dataclasses import dataclass, replace
from typing import Any

from courtdeck.models.request import DeckHints, GenerationRequest
from courtdeck.prompts.templates import (
    CITATION_DETAIL_SYSTEM_PROMPT,
    CITATION_DETAIL_USER_TEMPLATE,
    CITATION_SYSTEM_PROMPT,
    CITATION_USER_TEMPLATE,
    DECK_OUTPUT_CONTRACT,
    DECK_SYSTEM_PREAMBLE,
    DEFAULT_JURISDICTION,
    INLINE_MARKER_GRAMMAR,
    REPAIR_SUFFIX,
)
from courtdeck.schema.registry import DEFAULT_REGISTRY, BlockRegistry

_DIAGNOSTIC_MAX_CHARS = 300


@dataclass(frozen=True)
class Prompt:
    """A system/user message pair."""

    system: str
    user: str


class PromptAssembler:
    """Deterministic prompt builder."""

    def __init__(self, registry: BlockRegistry = DEFAULT_REGISTRY, *, min_slides: int = 3, max_slides: int = 8) -> None:
        self._registry = registry
        self._min_slides = min_slides
        self._max_slides = max_slides
        self._deck_system = self._build_deck_system()

    def assemble(self, request: GenerationRequest) -> Prompt:
        if request.kind == "deck":
            return Prompt(system=self._deck_system, user=self._deck_user(request.input, request.hints))
        jurisdiction = (request.hints.jurisdiction if request.hints else None) or DEFAULT_JURISDICTION
        if request.kind == "citations":
            return Prompt(
                system=CITATION_SYSTEM_PROMPT.format(jurisdiction=jurisdiction),
                user=CITATION_USER_TEMPLATE.format(jurisdiction=jurisdiction, query=request.input),
            )
        if request.kind == "citationDetail":
            return Prompt(
                system=CITATION_DETAIL_SYSTEM_PROMPT.format(jurisdiction=jurisdiction),
                user=CITATION_DETAIL_USER_TEMPLATE.format(name=request.input),
            )
        raise ValueError(f"unsupported task kind: {request.kind!r}")

    @staticmethod
    def with_repair(prompt: Prompt, diagnostic: str | None = None) -> Prompt:
        """Append the repair instruction (and the previous failure, if known) to the system message."""

        suffix = REPAIR_SUFFIX
        if diagnostic:
            suffix += f"\nProblem with the previous response: {diagnostic[:_DIAGNOSTIC_MAX_CHARS]}"
        return replace(prompt, system=f"{prompt.system}\n\n{suffix}")

    def _build_deck_system(self) -> str:
        lines = [
            DECK_SYSTEM_PREAMBLE,
            "",
            DECK_OUTPUT_CONTRACT.format(min_slides=self._min_slides, max_slides=self._max_slides),
            "",
            "Allowed block kinds (type: description; data fields):",
        ]
        for kind in self._registry.kinds():
            fields = _describe_fields(self._registry.payload_schema(kind))
            lines.append(f"- {kind.value}: {self._registry.describe(kind)}; data fields: {fields}")
        lines.append("")
        lines.append(INLINE_MARKER_GRAMMAR)
        return "\n".join(lines)

    def _deck_user(self, material: str, hints: DeckHints | None) -> str:
        lines = [
            "Create a presentation from the following material.",
            "",
            "Material:",
            "<<<",
            material,
            ">>>",
        ]
        hint_lines = self._hint_lines(hints)
        if hint_lines:
            lines.append("")
            lines.append("Style hints:")
            lines.extend(hint_lines)
        return "\n".join(lines)

    def _hint_lines(self, hints: DeckHints | None) -> list[str]:
        if hints is None:
            return []
        out: list[str] = []
        if hints.tone:
            out.append(f"- Tone: {hints.tone}")
        if hints.jurisdiction:
            out.append(f"- Jurisdiction: {hints.jurisdiction}")
        if hints.target_slide_count is not None:
            target = min(max(hints.target_slide_count, self._min_slides), self._max_slides)
            out.append(f"- Target slide count: {target}")
        return out


def _describe_fields(schema: dict[str, Any]) -> str:
    parts: list[str] = []
    for name, prop in schema.get("properties", {}).items():
        parts.append(f"{name} {_describe_type(prop)}")
    return ", ".join(parts)


def _describe_type(prop: dict[str, Any]) -> str:
    if "enum" in prop:
        return "(" + "|".join(str(v) for v in prop["enum"]) + ")"
    kind = prop.get("type")
    if kind == "array":
        items = prop.get("items", {})
        if items.get("type") == "object":
            inner = ", ".join(items.get("properties", {}))
            return f"(list of {{{inner}}})"
        return f"(list of {items.get('type', 'any')})"
    return f"({kind})" if kind else ""
