"""Core async primitives."""

from __future__ import annotations

from courtdeck.core.cancellation import CancelToken

__all__ = ["CancelToken"]
