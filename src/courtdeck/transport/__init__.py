"""LLM transports."""

from __future__ import annotations

from courtdeck.config import Settings
from courtdeck.transport.base import (
    Conformance,
    LLMTransport,
    PolicyRefusalError,
    ProviderSchemaError,
    RawResponse,
    TransportCancelled,
    TransportError,
    TransportFailure,
    TransportRequest,
    TransportTimeout,
)
from courtdeck.transport.gemini_transport import GeminiTransport
from courtdeck.transport.openai_transport import OpenAITransport


def build_transport(settings: Settings) -> LLMTransport:
    """Factory to create the configured transport."""

    if settings.llm_provider == "gemini":
        return GeminiTransport(settings, timeout_s=settings.default_timeout_s)
    return OpenAITransport(settings)


__all__ = [
    "Conformance",
    "GeminiTransport",
    "LLMTransport",
    "OpenAITransport",
    "PolicyRefusalError",
    "ProviderSchemaError",
    "RawResponse",
    "TransportCancelled",
    "TransportError",
    "TransportFailure",
    "TransportRequest",
    "TransportTimeout",
    "build_transport",
]
