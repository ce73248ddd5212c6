from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

from gen_runner.adapters.trace_sinks import TraceSink, build_trace_sink
from gen_runner.config.loader import load_script
from gen_runner.config.models import RunnerSettings, ScriptConfig
from gen_runner.kernel.coroutine import CoroutineFactory, Produced
from gen_runner.kernel.matching import MatchRegistry, MatchRule, Predicate, ValueProducer, feed, value_equals
from gen_runner.kernel.output import RunOutput
from gen_runner.kernel.runner import Runner
from gen_runner.kernel.steps import Step, StepQueue
from gen_runner.kernel.trace import TraceRecorder
from gen_runner.observability.adapters.logging import LogSink, build_log_sink


@dataclass
class GenRunner:
    """Fluent builder that declares steps and match rules, then replays them.

    Declarations persist across ``run`` calls, so a runner can be run, extended
    with more steps and run again; every run starts a fresh coroutine.
    Sinks built from ``settings`` by :func:`gen_runner` are owned by the runner
    and released by :meth:`close`; caller-supplied sinks are left open.
    """

    factory: CoroutineFactory
    settings: RunnerSettings = field(default_factory=RunnerSettings)
    log_sink: LogSink | None = None
    trace_sink: TraceSink | None = None
    _steps: StepQueue = field(default_factory=StepQueue)
    _matches: MatchRegistry = field(default_factory=MatchRegistry)
    _owned_sinks: list[Any] = field(default_factory=list)

    def declare(self, name: str, *args: Any) -> GenRunner:
        self._steps.append(name, args)
        return self

    def add_match(
        self,
        name: str,
        predicate: Predicate,
        value_producer: ValueProducer | None = None,
    ) -> GenRunner:
        if value_producer is None:
            rule = MatchRule(name=name, predicate=predicate)
        else:
            rule = MatchRule(name=name, predicate=predicate, value_producer=value_producer)
        self._matches.add(rule)
        return self

    # Generator-flavoured aliases: runner.next("init", args).next("a").match(...)
    next = declare
    match = add_match

    @property
    def steps(self) -> tuple[Step, ...]:
        return self._steps.snapshot()

    @property
    def matches(self) -> tuple[MatchRule, ...]:
        return self._matches.snapshot()

    def runner(self) -> Runner:
        # Binds the current declarations; later declare() calls do not affect it.
        recorder = None
        if self.settings.tracing.enabled:
            recorder = TraceRecorder(
                signature_mode=self.settings.tracing.signature_mode,
                max_value_len=self.settings.tracing.max_value_len,
            )
        return Runner(
            factory=self.factory,
            steps=self._steps.snapshot(),
            rules=self._matches.snapshot(),
            settings=self.settings,
            trace_recorder=recorder,
            trace_sink=self.trace_sink,
            log_sink=self.log_sink,
        )

    def run(self, overrides: Mapping[str, Any] | None = None) -> RunOutput:
        return self.runner().run(overrides)

    def snapshot(self, overrides: Mapping[str, Any] | None = None) -> dict[str, Produced | list[Produced]]:
        return self.run(overrides).output

    def close(self) -> None:
        while self._owned_sinks:
            self._owned_sinks.pop().close()

    def __enter__(self) -> GenRunner:
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()

    @classmethod
    def from_script(
        cls,
        factory: CoroutineFactory,
        script: ScriptConfig | Path,
        *,
        log_sink: LogSink | None = None,
        trace_sink: TraceSink | None = None,
    ) -> GenRunner:
        if isinstance(script, Path):
            script = load_script(script)
        runner = gen_runner(factory, settings=script.settings, log_sink=log_sink, trace_sink=trace_sink)
        for decl in script.steps:
            runner.declare(decl.name, *decl.args)
        for match in script.matches:
            runner.add_match(match.name, value_equals(match.value), feed(match.feed))
        return runner


def gen_runner(
    factory: CoroutineFactory,
    *,
    settings: RunnerSettings | None = None,
    log_sink: LogSink | None = None,
    trace_sink: TraceSink | None = None,
) -> GenRunner:
    """Create a :class:`GenRunner` for ``factory``.

    Sinks passed explicitly take precedence over the ones described by
    ``settings.logging`` and ``settings.tracing``.
    """
    settings = RunnerSettings() if settings is None else settings
    owned: list[Any] = []
    if log_sink is None:
        log_sink = build_log_sink(settings.logging)
        if log_sink is not None:
            owned.append(log_sink)
    if trace_sink is None:
        trace_sink = build_trace_sink(settings.tracing)
        if trace_sink is not None:
            owned.append(trace_sink)
    return GenRunner(
        factory=factory,
        settings=settings,
        log_sink=log_sink,
        trace_sink=trace_sink,
        _owned_sinks=owned,
    )
