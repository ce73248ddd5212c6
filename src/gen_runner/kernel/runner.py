from __future__ import annotations

from collections.abc import Mapping, Sequence
from dataclasses import dataclass, field
from typing import Any, Literal

from gen_runner.adapters.trace_sinks import TraceSink
from gen_runner.config.models import RunnerSettings
from gen_runner.kernel.coroutine import (
    CoroutineFactory,
    CoroutineHandle,
    Produced,
    as_handle,
    construction_args,
    feed_value,
)
from gen_runner.kernel.errors import AlreadyDoneError, ResumptionLimitError
from gen_runner.kernel.matching import MatchRule, first_match
from gen_runner.kernel.output import OutputEntry, RunOutput
from gen_runner.kernel.steps import Step
from gen_runner.kernel.trace import ErrorInfo, TraceRecord, TraceRecorder, TraceSpan
from gen_runner.observability.adapters.logging import LogSink
from gen_runner.observability.domain.logging import LogMessage


@dataclass(slots=True)
class RunState:
    # Created per run() call and discarded afterwards; only RunOutput survives.
    prev_value: Any = None
    done: bool = False
    resumptions: int = 0
    step_outputs: dict[str, Produced] = field(default_factory=dict)
    match_outputs: dict[str, list[Produced]] = field(default_factory=dict)
    history: list[OutputEntry] = field(default_factory=list)
    trace: list[TraceRecord] = field(default_factory=list)


@dataclass(frozen=True, slots=True)
class Runner:
    """Replays declared steps against a fresh coroutine.

    The first step constructs the coroutine. Every later step resumes it and
    records the produced output under the step name, unless a match rule claims
    the output first: then the output is stored under the rule name, the rule's
    value is fed next, and the same step is attempted again.
    """

    factory: CoroutineFactory
    steps: Sequence[Step]
    rules: Sequence[MatchRule] = ()
    settings: RunnerSettings = field(default_factory=RunnerSettings)
    trace_recorder: TraceRecorder | None = None
    trace_sink: TraceSink | None = None
    log_sink: LogSink | None = None

    def run(self, overrides: Mapping[str, Any] | None = None) -> RunOutput:
        state = RunState()
        self._log("info", "run started", steps=len(self.steps), rules=len(self.rules))
        try:
            self._replay({} if overrides is None else overrides, state)
        finally:
            if self.trace_sink is not None:
                # Flush only: the builder may run again with the same sink.
                self.trace_sink.flush()
        self._log(
            "info",
            "run finished",
            resumptions=state.resumptions,
            completed=state.done,
            recorded=len(state.history),
        )
        return RunOutput(
            steps=dict(state.step_outputs),
            matches={name: tuple(items) for name, items in state.match_outputs.items()},
            history=tuple(state.history),
            trace=tuple(state.trace),
            completed=state.done,
        )

    def _replay(self, overrides: Mapping[str, Any], state: RunState) -> None:
        handle: CoroutineHandle | None = None
        index = 0
        while index < len(self.steps):
            step = self.steps[index]
            if handle is None:
                # Construction consumes the first step without resuming.
                args = construction_args(overrides[step.name]) if step.name in overrides else step.args
                handle = as_handle(self.factory(*args))
                index += 1
                continue

            if state.done:
                if self.settings.strict_completion:
                    raise AlreadyDoneError(step.name)
                self._log(
                    "warning",
                    "remaining steps skipped",
                    step=step.name,
                    skipped=[s.name for s in self.steps[index:]],
                )
                break

            limit = self.settings.max_resumptions
            if limit is not None and state.resumptions >= limit:
                raise ResumptionLimitError(step.name, limit)

            produced, rule = self._resume(handle, step, index, state)
            if rule is not None:
                # A match consumes a resumption but not the declared step.
                state.match_outputs.setdefault(rule.name, []).append(produced)
                state.history.append(OutputEntry(kind="match", name=rule.name, step_index=index, produced=produced))
                state.prev_value = rule.value_producer()
                self._log("debug", "match intercepted", step=step.name, rule=rule.name, done=produced.done)
            else:
                state.step_outputs[step.name] = produced
                state.history.append(OutputEntry(kind="step", name=step.name, step_index=index, produced=produced))
                state.prev_value = overrides[step.name] if step.name in overrides else feed_value(step.args)
                self._log("debug", "step resumed", step=step.name, done=produced.done)
                index += 1

            if produced.done:
                state.done = True
                self._log("info", "completion reached", step=step.name)

    def _resume(
        self,
        handle: CoroutineHandle,
        step: Step,
        index: int,
        state: RunState,
    ) -> tuple[Produced, MatchRule | None]:
        state.resumptions += 1
        span = None
        if self.trace_recorder is not None:
            span = self.trace_recorder.begin(
                seq=state.resumptions,
                step_index=index,
                step_name=step.name,
                fed=state.prev_value,
            )
        try:
            produced = handle.resume(state.prev_value)
        except Exception as exc:  # noqa: BLE001 - trace + rethrow to the caller
            self._fail(state, span, step, exc, produced=None, phase="resume")
            self._log("error", "resumption failed", step=step.name, error=type(exc).__name__)
            raise
        try:
            rule = first_match(self.rules, produced)
        except Exception as exc:  # noqa: BLE001 - predicate errors keep the produced value in the trace
            self._fail(state, span, step, exc, produced=produced, phase="match")
            self._log("error", "match predicate failed", step=step.name, error=type(exc).__name__)
            raise
        if self.trace_recorder is not None and span is not None:
            self._record(
                state,
                self.trace_recorder.finish(
                    span=span,
                    produced=produced,
                    kind="step" if rule is None else "match",
                    rule=None if rule is None else rule.name,
                ),
            )
        return produced, rule

    def _fail(
        self,
        state: RunState,
        span: TraceSpan | None,
        step: Step,
        exc: Exception,
        *,
        produced: Produced | None,
        phase: Literal["resume", "match"],
    ) -> None:
        if self.trace_recorder is None or span is None:
            return
        self._record(
            state,
            self.trace_recorder.finish(
                span=span,
                produced=produced,
                kind=None,
                error=ErrorInfo(type=type(exc).__name__, message=str(exc), where=step.name, phase=phase),
            ),
        )

    def _record(self, state: RunState, record: TraceRecord) -> None:
        state.trace.append(record)
        if self.trace_sink is not None:
            self.trace_sink.emit(record)

    def _log(self, level: str, message: str, **fields: object) -> None:
        if self.log_sink is not None:
            self.log_sink.emit(LogMessage(level=level, message=message, fields=dict(fields)))
