"""ID utilities."""

from __future__ import annotations

import itertools
import secrets
import string

_ALPHABET = string.ascii_lowercase + string.digits
_counter = itertools.count(1)


def next_sequence() -> int:
    """Process-wide monotonic counter. `itertools.count` is safe to share across tasks."""

    return next(_counter)


def random_suffix(length: int = 9) -> str:
    """Random base-36 suffix."""

    return "".join(secrets.choice(_ALPHABET) for _ in range(length))


def format_block_id(kind: str) -> str:
    """Format a block id as `{kind}_{monotonic}_{random}`, e.g. `quote_42_k3v9x0q1a`."""

    return f"{kind}_{next_sequence()}_{random_suffix()}"


def format_request_id() -> str:
    """Format a request id as `req_{monotonic:06d}_{random}`, e.g. `req_000042_k3v9x0`."""

    return f"req_{next_sequence():06d}_{random_suffix(6)}"
