"""Gemini `generateContent` transport over REST (L2).

Gemini's response-schema dialect does not accept the strict documents the composer emits
(`additionalProperties`, `anyOf` over block variants), so this transport asks only for a JSON
MIME type and leaves conformance to the engine's parse/repair loop.
"""

from __future__ import annotations

import time
from typing import Any

import httpx

from courtdeck.config import Settings
from courtdeck.logging import get_logger
from courtdeck.transport.base import (
    Conformance,
    LLMTransport,
    PolicyRefusalError,
    RawResponse,
    TransportError,
    TransportRequest,
)

logger = get_logger(__name__)

_BLOCKED_FINISH_REASONS = frozenset({"SAFETY", "PROHIBITED_CONTENT", "BLOCKLIST", "SPII", "RECITATION"})


class GeminiTransport(LLMTransport):
    """Google Generative Language API transport."""

    name = "gemini"
    conformance = Conformance.FREE_TEXT

    def __init__(
        self,
        settings: Settings | None = None,
        *,
        api_key: str | None = None,
        base_url: str | None = None,
        model: str | None = None,
        client: httpx.AsyncClient | None = None,
        timeout_s: float = 60.0,
    ) -> None:
        api_key = api_key or (settings.gemini_api_key if settings is not None else None)
        if not api_key:
            raise ValueError(
                "Missing COURTDECK_GEMINI_API_KEY while llm_provider=gemini. "
                "Set it in environment variables or .env."
            )
        self._api_key = api_key
        self._base_url = (
            base_url
            or (settings.gemini_base_url if settings is not None else None)
            or "https://generativelanguage.googleapis.com/v1beta"
        )
        self._model = model or (settings.gemini_model if settings is not None else "gemini-2.5-flash-lite")
        self._client = client
        self._timeout_s = timeout_s

    def _build_body(self, req: TransportRequest) -> dict[str, Any]:
        generation_config: dict[str, Any] = {
            "temperature": req.temperature,
            "maxOutputTokens": req.max_tokens,
        }
        if req.response_schema is not None:
            generation_config["responseMimeType"] = "application/json"
        return {
            "systemInstruction": {"parts": [{"text": req.system_prompt}]},
            "contents": [{"role": "user", "parts": [{"text": req.user_prompt}]}],
            "generationConfig": generation_config,
        }

    async def _send(self, req: TransportRequest) -> RawResponse:
        url = f"{self._base_url.rstrip('/')}/models/{self._model}:generateContent"
        body = self._build_body(req)
        headers = {"x-goog-api-key": self._api_key}
        remaining = req.remaining_s()
        timeout_s = min(self._timeout_s, max(remaining, 0.001)) if remaining is not None else self._timeout_s
        timeout = httpx.Timeout(timeout_s)

        started = time.monotonic()
        try:
            if self._client is not None:
                resp = await self._client.post(url, json=body, headers=headers, timeout=timeout)
            else:
                async with httpx.AsyncClient(timeout=timeout) as client:
                    resp = await client.post(url, json=body, headers=headers)
        except httpx.TimeoutException as e:
            raise TransportError(f"gemini request timed out: {e}") from e
        except httpx.RequestError as e:
            raise TransportError(f"gemini request failed: {e}") from e

        latency_ms = int((time.monotonic() - started) * 1000)
        if not resp.is_success:
            raise TransportError(
                f"HTTP {resp.status_code}: {resp.text[:300]}",
                status_code=resp.status_code,
            )

        try:
            data = resp.json()
        except ValueError as e:
            raise TransportError("gemini response body is not JSON") from e
        if not isinstance(data, dict):
            raise TransportError("gemini response body is not a JSON object")

        feedback = data.get("promptFeedback") or {}
        if isinstance(feedback, dict) and feedback.get("blockReason"):
            raise PolicyRefusalError(f"prompt blocked: {feedback['blockReason']}")

        candidates = data.get("candidates")
        if not isinstance(candidates, list) or not candidates:
            raise TransportError("gemini response has no candidates")
        candidate = candidates[0] if isinstance(candidates[0], dict) else {}
        finish_reason = candidate.get("finishReason")
        if finish_reason in _BLOCKED_FINISH_REASONS:
            raise PolicyRefusalError(f"candidate blocked: {finish_reason}")

        parts = (candidate.get("content") or {}).get("parts") or []
        text = "".join(p.get("text", "") for p in parts if isinstance(p, dict))
        if not text.strip():
            raise TransportError("gemini candidate has no text")

        logger.info(
            "Gemini completion ok",
            extra={
                "provider": self.name,
                "model": self._model,
                "status_code": resp.status_code,
                "finish_reason": finish_reason,
                "latency_ms": latency_ms,
                "out_len": len(text),
            },
        )
        return RawResponse(text=text, provider=self.name, model=self._model, latency_ms=latency_ms)
