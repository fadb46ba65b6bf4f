"""Structured content generation engine.

One pipeline serves every task kind:

    prompt -> transport call -> parse -> (one repair) -> validate -> post-process

The engine suspends only at the transport call. Cancellation is checked before the call, right
after it, and before returning. Every failure leaves the pipeline as a :class:`GenerationError`
inside a :class:`Result`.
"""

from __future__ import annotations

import time
from dataclasses import dataclass
from typing import Any, Callable, Generic, TypeVar

from courtdeck.config import Settings
from courtdeck.core.cancellation import CancelToken
from courtdeck.errors import GenerationError, Result, SchemaIssue
from courtdeck.events import Stage, StageListener
from courtdeck.logging import get_logger, log_exception, request_context
from courtdeck.models.citation import CitationDetail, CitationResult
from courtdeck.models.deck import Deck
from courtdeck.models.request import GenerationRequest
from courtdeck.orchestrator.postprocess import DeckPostProcessor
from courtdeck.orchestrator.state import RequestState
from courtdeck.prompts.assembler import Prompt, PromptAssembler
from courtdeck.schema.composer import CompiledSchema, DeckSchemaComposer
from courtdeck.transport.base import (
    LLMTransport,
    PolicyRefusalError,
    ProviderSchemaError,
    TransportCancelled,
    TransportError,
    TransportRequest,
    TransportTimeout,
)
from courtdeck.utils.ids import format_request_id
from courtdeck.utils.json_extract import JsonExtractionError, parse_json_object

logger = get_logger(__name__)

T = TypeVar("T")

Normalizer = Callable[[dict[str, Any]], dict[str, Any]]


class _Abort(Exception):
    """Ends a request with a structured error."""

    def __init__(self, error: GenerationError) -> None:
        super().__init__(str(error))
        self.error = error


@dataclass(frozen=True)
class _Task(Generic[T]):
    schema: CompiledSchema
    temperature: float
    max_tokens: int
    finish: Callable[[dict[str, Any]], T]
    normalize: Normalizer | None = None


class ContentEngine:
    """Runs generation requests against a single transport.

    The engine holds no per-request state; concurrent requests on one engine are independent.
    """

    def __init__(
        self,
        transport: LLMTransport,
        settings: Settings,
        *,
        composer: DeckSchemaComposer | None = None,
        assembler: PromptAssembler | None = None,
        postprocessor: DeckPostProcessor | None = None,
    ) -> None:
        self._transport = transport
        self._settings = settings
        self._composer = composer or DeckSchemaComposer(
            min_slides=settings.min_slides, max_slides=settings.max_slides
        )
        self._assembler = assembler or PromptAssembler(
            self._composer.registry, min_slides=settings.min_slides, max_slides=settings.max_slides
        )
        self._postprocessor = postprocessor or DeckPostProcessor(self._composer.registry)

    @property
    def composer(self) -> DeckSchemaComposer:
        return self._composer

    async def generate_deck(
        self,
        request: GenerationRequest,
        *,
        cancel_token: CancelToken | None = None,
        listener: StageListener | None = None,
    ) -> Result[Deck]:
        """Generate, validate and post-process a slide deck."""

        task: _Task[Deck] = _Task(
            schema=self._composer.deck_schema(),
            temperature=self._settings.deck_temperature,
            max_tokens=self._settings.deck_max_tokens,
            finish=self._postprocessor.process,
        )
        return await self._run(request, task, cancel_token=cancel_token, listener=listener)

    async def generate_citations(
        self,
        request: GenerationRequest,
        *,
        normalize: Normalizer | None = None,
        finish: Callable[[dict[str, Any]], CitationResult] | None = None,
        cancel_token: CancelToken | None = None,
        listener: StageListener | None = None,
    ) -> Result[CitationResult]:
        """Search citations.

        Args:
            normalize: Applied to the parsed response before validation.
            finish: Builds the result from the validated response; defaults to plain parsing.
        """

        task: _Task[CitationResult] = _Task(
            schema=self._composer.citation_result_schema(),
            temperature=self._settings.citation_temperature,
            max_tokens=self._settings.citation_max_tokens,
            finish=finish or CitationResult.model_validate,
            normalize=normalize,
        )
        return await self._run(request, task, cancel_token=cancel_token, listener=listener)

    async def generate_citation_detail(
        self,
        request: GenerationRequest,
        *,
        normalize: Normalizer | None = None,
        cancel_token: CancelToken | None = None,
        listener: StageListener | None = None,
    ) -> Result[CitationDetail]:
        task: _Task[CitationDetail] = _Task(
            schema=self._composer.citation_detail_schema(),
            temperature=self._settings.citation_temperature,
            max_tokens=self._settings.citation_max_tokens,
            finish=CitationDetail.model_validate,
            normalize=normalize,
        )
        return await self._run(request, task, cancel_token=cancel_token, listener=listener)

    async def _run(
        self,
        request: GenerationRequest,
        task: _Task[T],
        *,
        cancel_token: CancelToken | None,
        listener: StageListener | None,
    ) -> Result[T]:
        request_id = format_request_id()
        deadline = request.deadline
        if deadline is None:
            deadline = time.monotonic() + self._settings.default_timeout_s
        state = RequestState(request_id=request_id, kind=request.kind, deadline=deadline, listener=listener)

        with request_context(request_id, initial_stage=state.stage.value):
            started = time.perf_counter()
            try:
                value = await self._pipeline(request, task, state, cancel_token)
            except _Abort as exc:
                return self._fail(state, exc.error)
            except Exception as exc:  # noqa: BLE001
                log_exception(logger, "Generation failed unexpectedly", **state.snapshot())
                return self._fail(state, GenerationError.internal(f"{type(exc).__name__}: {exc}"))

            logger.info(
                "Generation done",
                extra={
                    "kind": request.kind,
                    "transport_calls": state.transport_calls,
                    "repairs": state.repairs,
                    "elapsed_ms": int((time.perf_counter() - started) * 1000),
                },
            )
            return Result.success(value)

    async def _pipeline(
        self,
        request: GenerationRequest,
        task: _Task[T],
        state: RequestState,
        token: CancelToken | None,
    ) -> T:
        if not request.input.strip():
            raise _Abort(GenerationError.empty())

        state.advance(Stage.PROMPTING)
        prompt = self._assembler.assemble(request)
        _checkpoint(token, state.deadline)

        payload = await self._call_and_parse(prompt, task, state, token)

        if task.normalize is not None:
            payload = task.normalize(payload)
        state.advance(Stage.VALIDATING)
        issues = task.schema.validate(payload)
        if issues:
            raise _Abort(GenerationError.schema_invalid(issues))

        state.advance(Stage.POST_PROCESSING)
        value = task.finish(payload)
        _checkpoint(token, state.deadline)
        state.advance(Stage.DONE)
        return value

    async def _call_and_parse(
        self,
        prompt: Prompt,
        task: _Task[Any],
        state: RequestState,
        token: CancelToken | None,
    ) -> dict[str, Any]:
        while True:
            state.advance(Stage.AWAITING, attempt=state.transport_calls + 1)
            req = TransportRequest(
                system_prompt=prompt.system,
                user_prompt=prompt.user,
                response_schema=self._composer.document_copy(task.schema),
                schema_name=task.schema.name,
                temperature=task.temperature,
                max_tokens=task.max_tokens,
                deadline=state.deadline,
                cancel_token=token,
            )
            state.transport_calls += 1
            try:
                raw = await self._transport.request(req)
            except TransportCancelled as exc:
                raise _Abort(GenerationError.cancelled(str(exc))) from exc
            except TransportTimeout as exc:
                raise _Abort(GenerationError.timeout(str(exc))) from exc
            except PolicyRefusalError as exc:
                raise _Abort(GenerationError.policy_refusal(str(exc) or "provider refused the request")) from exc
            except ProviderSchemaError as exc:
                issue = SchemaIssue(path="$", message=str(exc), expected=f"response matching {task.schema.name}")
                raise _Abort(GenerationError.schema_invalid([issue])) from exc
            except TransportError as exc:
                if not state.can_repair:
                    raise _Abort(GenerationError.transport(str(exc))) from exc
                logger.warning("Transport failed, repairing once: %s", exc)
                state.advance(Stage.REPAIRING, reason="transport")
                prompt = self._assembler.with_repair(prompt, str(exc))
                continue

            _checkpoint(token, state.deadline)
            state.advance(Stage.PARSING, chars=len(raw.text))
            try:
                return parse_json_object(raw.text)
            except JsonExtractionError as exc:
                if not state.can_repair:
                    raise _Abort(GenerationError.transport(f"unparseable response: {exc}")) from exc
                logger.warning("Unparseable response, repairing once: %s", exc)
                state.advance(Stage.REPAIRING, reason="parse")
                prompt = self._assembler.with_repair(prompt, str(exc))

    def _fail(self, state: RequestState, error: GenerationError) -> Result[Any]:
        if not state.finished:
            state.advance(Stage.FAILED, error=error.kind.value)
        logger.warning(
            "Generation failed: %s",
            error,
            extra={"kind": state.kind, "transport_calls": state.transport_calls},
        )
        return Result.failure(error)


def _checkpoint(token: CancelToken | None, deadline: float) -> None:
    if token is not None and token.cancelled:
        raise _Abort(GenerationError.cancelled(token.reason or "request cancelled"))
    if time.monotonic() >= deadline:
        raise _Abort(GenerationError.timeout())
