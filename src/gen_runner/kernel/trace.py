from __future__ import annotations

from dataclasses import dataclass
from datetime import UTC, datetime
from typing import TYPE_CHECKING, Literal

if TYPE_CHECKING:
    from gen_runner.kernel.coroutine import Produced


@dataclass(frozen=True, slots=True)
class ValueSignature:
    # Type name always; a truncated repr only in "repr" mode.
    type_name: str
    preview: str | None = None


@dataclass(frozen=True, slots=True)
class ErrorInfo:
    type: str
    message: str
    where: str
    # "resume" when the coroutine raised, "match" when a rule predicate did.
    phase: Literal["resume", "match"] = "resume"


@dataclass(frozen=True, slots=True)
class TraceRecord:
    # One record per coroutine resumption.
    seq: int
    step_index: int
    step_name: str
    kind: Literal["step", "match"] | None
    rule: str | None
    fed: ValueSignature
    produced: ValueSignature | None
    done: bool
    t_enter: datetime
    t_exit: datetime
    duration_ms: float
    status: Literal["ok", "error"]
    error: ErrorInfo | None


@dataclass(frozen=True, slots=True)
class TraceSpan:
    # Internal handle carried between resume enter/exit.
    seq: int
    step_index: int
    step_name: str
    fed: ValueSignature
    t_enter: datetime


class TraceRecorder:
    def __init__(
        self,
        *,
        signature_mode: Literal["type_only", "repr"] = "type_only",
        max_value_len: int = 256,
    ) -> None:
        self._signature_mode = signature_mode
        self._max_value_len = max_value_len

    def begin(self, *, seq: int, step_index: int, step_name: str, fed: object) -> TraceSpan:
        return TraceSpan(
            seq=seq,
            step_index=step_index,
            step_name=step_name,
            fed=self.signature(fed),
            t_enter=datetime.now(tz=UTC),
        )

    def finish(
        self,
        *,
        span: TraceSpan,
        produced: Produced | None,
        kind: Literal["step", "match"] | None,
        rule: str | None = None,
        error: ErrorInfo | None = None,
    ) -> TraceRecord:
        t_exit = datetime.now(tz=UTC)
        return TraceRecord(
            seq=span.seq,
            step_index=span.step_index,
            step_name=span.step_name,
            kind=kind,
            rule=rule,
            fed=span.fed,
            produced=None if produced is None else self.signature(produced.value),
            done=produced is not None and produced.done,
            t_enter=span.t_enter,
            t_exit=t_exit,
            duration_ms=(t_exit - span.t_enter).total_seconds() * 1000.0,
            status="error" if error is not None else "ok",
            error=error,
        )

    def signature(self, value: object) -> ValueSignature:
        type_name = type(value).__name__
        if self._signature_mode != "repr":
            return ValueSignature(type_name=type_name)
        return ValueSignature(type_name=type_name, preview=_truncate(repr(value), self._max_value_len))


def _truncate(text: str, max_len: int) -> str:
    if len(text) > max_len:
        return text[:max_len] + "...(truncated)"
    return text
