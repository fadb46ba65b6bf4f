from __future__ import annotations

from dataclasses import dataclass, field

from courtdeck.events import Stage, StageEvent, StageListener
from courtdeck.logging import bind_stage, get_logger

logger = get_logger(__name__)

MAX_REPAIRS = 1

_TERMINAL = frozenset({Stage.DONE, Stage.FAILED})

_TRANSITIONS: dict[Stage, frozenset[Stage]] = {
    Stage.IDLE: frozenset({Stage.PROMPTING}),
    Stage.PROMPTING: frozenset({Stage.AWAITING}),
    Stage.AWAITING: frozenset({Stage.PARSING, Stage.REPAIRING}),
    Stage.PARSING: frozenset({Stage.REPAIRING, Stage.VALIDATING}),
    Stage.REPAIRING: frozenset({Stage.AWAITING}),
    Stage.VALIDATING: frozenset({Stage.POST_PROCESSING}),
    Stage.POST_PROCESSING: frozenset({Stage.DONE}),
    Stage.DONE: frozenset(),
    Stage.FAILED: frozenset(),
}


class IllegalTransition(RuntimeError):
    """A request tried to move between stages the pipeline does not allow."""


@dataclass
class RequestState:
    """Stage tracking for one request.

    Any non-terminal stage may move to FAILED. REPAIRING is entered at most once.
    """

    request_id: str
    kind: str
    deadline: float
    listener: StageListener | None = None
    stage: Stage = Stage.IDLE
    repairs: int = 0
    transport_calls: int = 0
    history: list[Stage] = field(default_factory=lambda: [Stage.IDLE])
    _seq: int = 0

    def advance(self, stage: Stage, **metadata: str | int | float | bool | None) -> None:
        allowed = _TRANSITIONS[self.stage]
        if stage is Stage.FAILED and self.stage not in _TERMINAL:
            pass
        elif stage not in allowed:
            raise IllegalTransition(f"{self.stage.value} -> {stage.value}")
        if stage is Stage.REPAIRING:
            if self.repairs >= MAX_REPAIRS:
                raise IllegalTransition("repair already attempted")
            self.repairs += 1

        self.stage = stage
        self.history.append(stage)
        bind_stage(stage.value)
        logger.debug("Stage -> %s", stage.value, extra=dict(metadata))

        if self.listener is not None:
            self._seq += 1
            self.listener(
                StageEvent(request_id=self.request_id, seq=self._seq, stage=stage, metadata=dict(metadata))
            )

    @property
    def can_repair(self) -> bool:
        return self.repairs < MAX_REPAIRS

    @property
    def finished(self) -> bool:
        return self.stage in _TERMINAL

    def snapshot(self) -> dict[str, str | int | float | None]:
        return {
            "request_id": self.request_id,
            "kind": self.kind,
            "stage": self.stage.value,
            "repairs": self.repairs,
            "transport_calls": self.transport_calls,
            "deadline": self.deadline,
        }
