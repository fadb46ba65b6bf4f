"""Error taxonomy and result container.

Public operations never raise for expected failures. They return a :class:`Result` carrying
either a value or a :class:`GenerationError`. Exceptions are only used internally (transport
layer) and are converted to errors at the engine boundary.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Generic, TypeVar

from pydantic import BaseModel, Field

T = TypeVar("T")


class ErrorKind(str, Enum):
    """Failure categories surfaced to callers."""

    EMPTY = "Empty"
    TIMEOUT = "Timeout"
    CANCELLED = "Cancelled"
    TRANSPORT = "Transport"
    POLICY_REFUSAL = "PolicyRefusal"
    SCHEMA_INVALID = "SchemaInvalid"
    INTERNAL = "Internal"


class SchemaIssue(BaseModel):
    """A single structural validation problem."""

    path: str
    message: str
    expected: str | None = None


class GenerationError(BaseModel):
    """A structured failure returned by the engine."""

    kind: ErrorKind
    message: str = ""
    path: str | None = None
    expected: str | None = None
    issues: list[SchemaIssue] = Field(default_factory=list)

    @classmethod
    def empty(cls, message: str = "input is blank") -> "GenerationError":
        return cls(kind=ErrorKind.EMPTY, message=message)

    @classmethod
    def timeout(cls, message: str = "deadline exceeded") -> "GenerationError":
        return cls(kind=ErrorKind.TIMEOUT, message=message)

    @classmethod
    def cancelled(cls, message: str = "request cancelled") -> "GenerationError":
        return cls(kind=ErrorKind.CANCELLED, message=message)

    @classmethod
    def transport(cls, message: str) -> "GenerationError":
        return cls(kind=ErrorKind.TRANSPORT, message=message)

    @classmethod
    def policy_refusal(cls, message: str = "provider refused the request") -> "GenerationError":
        return cls(kind=ErrorKind.POLICY_REFUSAL, message=message)

    @classmethod
    def schema_invalid(cls, issues: list[SchemaIssue]) -> "GenerationError":
        """Build a SchemaInvalid error reporting the first offending path."""

        if not issues:
            return cls(kind=ErrorKind.INTERNAL, message="schema_invalid raised without issues")
        first = issues[0]
        return cls(
            kind=ErrorKind.SCHEMA_INVALID,
            message=first.message,
            path=first.path,
            expected=first.expected,
            issues=list(issues),
        )

    @classmethod
    def internal(cls, message: str) -> "GenerationError":
        return cls(kind=ErrorKind.INTERNAL, message=message)

    def __str__(self) -> str:
        if self.path is not None:
            return f"{self.kind.value} at {self.path}: {self.message}"
        return f"{self.kind.value}: {self.message}"


class GenerationFailure(RuntimeError):
    """Raised by :meth:`Result.unwrap` when the result holds an error."""

    def __init__(self, error: GenerationError) -> None:
        super().__init__(str(error))
        self.error = error


@dataclass(frozen=True)
class Result(Generic[T]):
    """Either a value or a :class:`GenerationError`."""

    value: T | None = None
    error: GenerationError | None = None

    @classmethod
    def success(cls, value: T) -> "Result[T]":
        return cls(value=value)

    @classmethod
    def failure(cls, error: GenerationError) -> "Result[T]":
        return cls(error=error)

    @property
    def ok(self) -> bool:
        return self.error is None

    def unwrap(self) -> T:
        """Return the value or raise :class:`GenerationFailure`."""

        if self.error is not None:
            raise GenerationFailure(self.error)
        return self.value  # type: ignore[return-value]
