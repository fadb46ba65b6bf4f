"""Cooperative cancellation."""

from __future__ import annotations

import asyncio


class CancelToken:
    """A one-shot cancellation flag shared between a caller and a running request.

    The token is meant for a single event loop. `cancel()` is idempotent; once cancelled a token
    stays cancelled.
    """

    def __init__(self) -> None:
        self._event = asyncio.Event()
        self._reason: str | None = None

    def cancel(self, reason: str = "cancelled by caller") -> None:
        if self._event.is_set():
            return
        self._reason = reason
        self._event.set()

    @property
    def cancelled(self) -> bool:
        return self._event.is_set()

    @property
    def reason(self) -> str | None:
        return self._reason

    async def wait(self) -> None:
        """Block until the token is cancelled."""

        await self._event.wait()
