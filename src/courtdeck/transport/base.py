"""LLM transport abstraction.

The transport is the only component that touches the network. A request suspends exactly once,
at the provider call, and that call is raced against the request's deadline and cancel token.
Transports never retry; retry policy belongs to the engine.
"""

from __future__ import annotations

import asyncio
import time
from abc import ABC, abstractmethod
from dataclasses import dataclass
from enum import Enum
from typing import Any

from courtdeck.core.cancellation import CancelToken
from courtdeck.logging import get_logger

logger = get_logger(__name__)


class Conformance(str, Enum):
    """How far a provider honours a response schema."""

    STRICT = "L1"  # provider enforces the schema natively
    FREE_TEXT = "L2"  # provider returns free text; the engine parses and repairs


@dataclass(frozen=True)
class TransportRequest:
    """Everything a provider needs for one call."""

    system_prompt: str
    user_prompt: str
    response_schema: dict[str, Any] | None = None
    schema_name: str = "response"
    temperature: float = 0.7
    max_tokens: int = 4096
    deadline: float | None = None
    cancel_token: CancelToken | None = None

    def remaining_s(self) -> float | None:
        if self.deadline is None:
            return None
        return self.deadline - time.monotonic()


@dataclass(frozen=True)
class RawResponse:
    """Unparsed provider output."""

    text: str
    provider: str
    model: str | None = None
    latency_ms: int = 0


class TransportFailure(RuntimeError):
    """Base class for failures raised by transports."""


class TransportError(TransportFailure):
    """Network, HTTP, or malformed-body failure."""

    def __init__(self, message: str, *, status_code: int | None = None) -> None:
        super().__init__(message)
        self.status_code = status_code


class PolicyRefusalError(TransportFailure):
    """The provider refused the content."""


class ProviderSchemaError(TransportFailure):
    """The provider reported that the response schema was violated or rejected."""


class TransportTimeout(TransportFailure):
    """The deadline passed before or during the call."""


class TransportCancelled(TransportFailure):
    """The cancel token fired before or during the call."""


class LLMTransport(ABC):
    """Abstract request/response channel to an LLM provider."""

    name: str = "transport"
    conformance: Conformance = Conformance.FREE_TEXT

    async def request(self, req: TransportRequest) -> RawResponse:
        """Run one provider call under the request's deadline and cancel token.

        Raises:
            TransportCancelled: The token was cancelled before or during the call.
            TransportTimeout: The deadline passed before or during the call.
            TransportError, PolicyRefusalError, ProviderSchemaError: Raised by the provider call.
        """

        token = req.cancel_token
        if token is not None and token.cancelled:
            raise TransportCancelled(token.reason or "cancelled")
        remaining = req.remaining_s()
        if remaining is not None and remaining <= 0:
            raise TransportTimeout("deadline passed before the call")

        call = asyncio.ensure_future(self._send(req))
        waiters: set[asyncio.Future[Any]] = {call}
        cancel_wait: asyncio.Future[Any] | None = None
        if token is not None:
            cancel_wait = asyncio.ensure_future(token.wait())
            waiters.add(cancel_wait)

        try:
            done, _pending = await asyncio.wait(waiters, timeout=remaining, return_when=asyncio.FIRST_COMPLETED)
        finally:
            if cancel_wait is not None:
                cancel_wait.cancel()
            if not call.done():
                call.cancel()
                call.add_done_callback(_log_abandoned)

        if call in done:
            return call.result()
        if token is not None and token.cancelled:
            logger.info("Provider call abandoned: cancelled", extra={"provider": self.name})
            raise TransportCancelled(token.reason or "cancelled")
        logger.info("Provider call abandoned: deadline", extra={"provider": self.name})
        raise TransportTimeout("deadline passed during the call")

    @abstractmethod
    async def _send(self, req: TransportRequest) -> RawResponse:
        """Perform the provider call."""


def _log_abandoned(task: asyncio.Future[Any]) -> None:
    if task.cancelled():
        return
    exc = task.exception()
    if exc is not None:
        logger.debug("Abandoned provider call finished with %s: %s", type(exc).__name__, exc)
