"""OpenAI-compatible transport with native strict-schema support (L1)."""

from __future__ import annotations

import time
from typing import Any

import openai
from openai import AsyncOpenAI

from courtdeck.config import Settings
from courtdeck.logging import get_logger
from courtdeck.transport.base import (
    Conformance,
    LLMTransport,
    PolicyRefusalError,
    ProviderSchemaError,
    RawResponse,
    TransportError,
    TransportRequest,
)

logger = get_logger(__name__)

_SCHEMA_HINTS = ("response_format", "json_schema", "schema")


class OpenAITransport(LLMTransport):
    """Chat Completions transport using `response_format=json_schema` with `strict: true`."""

    name = "openai"
    conformance = Conformance.STRICT

    def __init__(
        self,
        settings: Settings | None = None,
        *,
        client: Any | None = None,
        model: str | None = None,
    ) -> None:
        if client is None:
            if settings is None or not settings.openai_api_key:
                raise ValueError(
                    "Missing COURTDECK_OPENAI_API_KEY. "
                    "Set it in environment variables or a .env file."
                )
            # Retries are an engine decision, never the SDK's.
            client = AsyncOpenAI(
                api_key=settings.openai_api_key,
                base_url=settings.openai_base_url,
                max_retries=0,
            )
        self._client = client
        self._model = model or (settings.openai_model if settings is not None else "gpt-4o-mini")

    async def _send(self, req: TransportRequest) -> RawResponse:
        payload: list[dict[str, str]] = [
            {"role": "system", "content": req.system_prompt},
            {"role": "user", "content": req.user_prompt},
        ]
        kwargs: dict[str, Any] = {
            "model": self._model,
            "messages": payload,
            "temperature": req.temperature,
            "max_tokens": req.max_tokens,
        }
        if req.response_schema is not None:
            kwargs["response_format"] = {
                "type": "json_schema",
                "json_schema": {"name": req.schema_name, "strict": True, "schema": req.response_schema},
            }
        remaining = req.remaining_s()
        if remaining is not None:
            kwargs["timeout"] = max(remaining, 0.001)

        started = time.monotonic()
        try:
            resp = await self._client.chat.completions.create(**kwargs)
        except openai.BadRequestError as e:
            if getattr(e, "code", None) == "content_policy_violation":
                raise PolicyRefusalError(e.message) from e
            if any(hint in str(e.message).lower() for hint in _SCHEMA_HINTS):
                raise ProviderSchemaError(e.message) from e
            raise TransportError(f"HTTP {e.status_code}: {e.message}", status_code=e.status_code) from e
        except openai.APIStatusError as e:
            raise TransportError(f"HTTP {e.status_code}: {e.message}", status_code=e.status_code) from e
        except openai.APIConnectionError as e:
            raise TransportError(f"connection failed: {e}") from e

        latency_ms = int((time.monotonic() - started) * 1000)
        if not resp.choices:
            raise TransportError("completion has no choices")
        choice = resp.choices[0]
        message = choice.message
        refusal = getattr(message, "refusal", None) if message is not None else None
        if refusal:
            raise PolicyRefusalError(str(refusal))
        if choice.finish_reason == "content_filter":
            raise PolicyRefusalError("completion stopped by content filter")
        if message is None or message.content is None:
            raise TransportError("completion has no content")

        logger.info(
            "OpenAI completion ok",
            extra={
                "provider": self.name,
                "model": getattr(resp, "model", self._model),
                "strict_schema": req.response_schema is not None,
                "finish_reason": choice.finish_reason,
                "latency_ms": latency_ms,
                "out_len": len(message.content),
            },
        )
        return RawResponse(
            text=message.content,
            provider=self.name,
            model=getattr(resp, "model", self._model),
            latency_ms=latency_ms,
        )
