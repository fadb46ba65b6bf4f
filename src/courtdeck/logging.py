"""Logging setup and per-request log context.

Every record emitted while a generation request runs carries the request id and the pipeline
stage it was in. The request id is bound once by the engine; the stage is written only by
:class:`~courtdeck.orchestrator.state.RequestState` as it moves through the pipeline, so the
two can never disagree.
"""

from __future__ import annotations

import contextlib
import contextvars
import logging
from dataclasses import dataclass, replace
from typing import Any, Iterator

from rich.logging import RichHandler


@dataclass(frozen=True)
class LogContext:
    request_id: str = "-"
    stage: str = "-"


_context: contextvars.ContextVar[LogContext] = contextvars.ContextVar("courtdeck_log_context", default=LogContext())

# Provider SDKs log every HTTP exchange at INFO.
_CHATTY_LOGGERS = ("httpx", "httpcore", "openai")


class _ContextFilter(logging.Filter):
    """Copy the bound request id and stage onto each record."""

    def filter(self, record: logging.LogRecord) -> bool:  # noqa: A003
        ctx = _context.get()
        record.request_id = ctx.request_id  # type: ignore[attr-defined]
        record.stage = ctx.stage  # type: ignore[attr-defined]
        return True


@contextlib.contextmanager
def request_context(request_id: str, *, initial_stage: str = "idle") -> Iterator[LogContext]:
    """Bind a request id for the duration of one request.

    Each asyncio task runs in its own context copy, so concurrent requests never see each
    other's bindings. Stage updates made inside the block are discarded on exit.
    """

    token = _context.set(LogContext(request_id=request_id, stage=initial_stage))
    try:
        yield _context.get()
    finally:
        _context.reset(token)


def bind_stage(stage: str) -> None:
    """Record the stage a request just entered. Called on every RequestState transition."""

    _context.set(replace(_context.get(), stage=stage))


def current_context() -> LogContext:
    return _context.get()


def configure_logging(level: str = "INFO", *, quiet_providers: bool = True) -> None:
    """Install a Rich handler on the root logger that prints the request context.

    Safe to call repeatedly; an existing Rich handler is reused.

    Args:
        level: Logging level name.
        quiet_providers: Raise HTTP and SDK loggers to WARNING unless `level` is stricter.
    """

    root = logging.getLogger()
    root.setLevel(level)

    handler = next((h for h in root.handlers if isinstance(h, RichHandler)), None)
    if handler is None:
        handler = RichHandler(rich_tracebacks=True, show_path=False)
        root.addHandler(handler)
    if not any(isinstance(f, _ContextFilter) for f in handler.filters):
        handler.addFilter(_ContextFilter())
    # Rich renders time and level itself.
    handler.setFormatter(logging.Formatter("req=%(request_id)s stage=%(stage)s %(name)s: %(message)s"))

    if quiet_providers:
        floor = max(logging.WARNING, root.level)
        for name in _CHATTY_LOGGERS:
            logging.getLogger(name).setLevel(floor)


def get_logger(name: str) -> logging.Logger:
    return logging.getLogger(name)


def log_exception(logger: logging.Logger, msg: str, **context: Any) -> None:
    """Log the active exception with `key=value` context appended."""

    if context:
        details = " ".join(f"{key}={value}" for key, value in context.items())
        logger.exception("%s | %s", msg, details)
    else:
        logger.exception("%s", msg)
