from __future__ import annotations

import pytest

from gen_runner import gen_runner
from gen_runner.config.models import RunnerSettings
from gen_runner.kernel.coroutine import Produced
from gen_runner.kernel.errors import AlreadyDoneError, ResumptionLimitError
from gen_runner.kernel.matching import MatchRule, value_equals
from gen_runner.kernel.runner import Runner
from gen_runner.kernel.steps import Step
from gen_runner.observability.adapters.logging import MemoryLogSink


def simple_saga(args):
    a = yield {"args": args}
    yield a["other"]
    return args


def echo():
    received = yield "ready"
    yield received


class Countdown:
    # Hand-written handle: counts down and completes at zero.
    def __init__(self, start: int) -> None:
        self.n = start
        self.fed: list[object] = []

    def resume(self, value=None) -> Produced:
        self.fed.append(value)
        self.n -= 1
        return Produced(value=self.n, done=self.n == 0)


def test_runner_records_each_resumption_under_step_name() -> None:
    # Construction consumes the first step; every later step records one output.
    steps = [Step("init", ([1, 2, 3],)), Step("a", ({"other": "v"},)), Step("other"), Step("returnVal")]
    out = Runner(factory=simple_saga, steps=steps).run()
    assert list(out.steps) == ["a", "other", "returnVal"]
    assert out.steps["other"] == Produced(value="v", done=False)
    assert out.steps["returnVal"] == Produced(value=[1, 2, 3], done=True)
    assert out.completed is True


def test_runner_stops_without_error_when_steps_run_out_first() -> None:
    # Fewer steps than resumptions is a valid partial run.
    out = Runner(factory=simple_saga, steps=[Step("init", ([1],)), Step("a")]).run()
    assert list(out.steps) == ["a"]
    assert out.completed is False


def test_runner_with_only_construction_step_records_nothing() -> None:
    out = Runner(factory=simple_saga, steps=[Step("init", ([1],))]).run()
    assert out.steps == {}
    assert out.history == ()


def test_runner_accepts_resume_handles() -> None:
    # Factories may return any object with resume(); the first fed value is None.
    handles: list[Countdown] = []

    def factory(start):
        handles.append(Countdown(start))
        return handles[-1]

    out = Runner(factory=factory, steps=[Step("init", (2,)), Step("s1", ("x",)), Step("s2")]).run()
    assert out.steps["s1"].value == 1
    assert out.steps["s2"] == Produced(value=0, done=True)
    assert handles[0].fed == [None, "x"]


def test_runner_rejects_factory_without_resume_contract() -> None:
    with pytest.raises(TypeError):
        Runner(factory=lambda: 42, steps=[Step("init"), Step("a")]).run()


def test_runner_raises_already_done_for_extra_step() -> None:
    steps = [Step("init", ([1],)), Step("a", ({"other": "v"},)), Step("other"), Step("returnVal"), Step("ERROR")]
    with pytest.raises(AlreadyDoneError) as excinfo:
        Runner(factory=simple_saga, steps=steps).run()
    assert excinfo.value.step_name == "ERROR"
    assert str(excinfo.value) == "Attempting to call 'ERROR', generator runner is already done"


def test_runner_non_strict_completion_skips_remaining_steps() -> None:
    # With strict_completion off, leftovers are logged instead of raised.
    sink = MemoryLogSink()
    steps = [Step("init", ([1],)), Step("a", ({"other": "v"},)), Step("other"), Step("returnVal"), Step("x"), Step("y")]
    out = Runner(
        factory=simple_saga,
        steps=steps,
        settings=RunnerSettings(strict_completion=False),
        log_sink=sink,
    ).run()
    assert "x" not in out
    assert out.completed is True
    skipped = [m for m in sink.messages if m.message == "remaining steps skipped"]
    assert len(skipped) == 1
    assert skipped[0].level == "warning"
    assert skipped[0].fields["skipped"] == ["x", "y"]


def test_runner_feeds_override_verbatim_even_when_falsy() -> None:
    steps = [Step("init"), Step("first", ("declared",)), Step("second")]
    runner = Runner(factory=echo, steps=steps)
    assert runner.run().steps["second"].value == "declared"
    assert runner.run({"first": None}).steps["second"].value is None
    assert runner.run({"first": 0}).steps["second"].value == 0


def test_runner_collapses_multiple_step_args_into_tuple() -> None:
    out = Runner(factory=echo, steps=[Step("init"), Step("first", (1, 2)), Step("second")]).run()
    assert out.steps["second"].value == (1, 2)


def test_runner_construction_override_is_spread_into_factory() -> None:
    steps = [Step("init", ([1, 2, 3],)), Step("a")]
    runner = Runner(factory=simple_saga, steps=steps)
    assert runner.run({"init": [[3, 2, 1]]}).steps["a"].value == {"args": [3, 2, 1]}
    # A non-sequence override becomes the single construction argument.
    assert runner.run({"init": "solo"}).steps["a"].value == {"args": "solo"}


def test_runner_duplicate_step_names_keep_last_and_history_keeps_all() -> None:
    def counter():
        yield 1
        yield 2
        return 3

    out = Runner(factory=counter, steps=[Step("init"), Step("x"), Step("x"), Step("end")]).run()
    assert out.steps["x"].value == 2
    assert out.entries("x") == [Produced(1, False), Produced(2, False)]
    assert [entry.step_index for entry in out.history] == [1, 2, 3]


def test_runner_match_on_completion_then_pending_step_raises() -> None:
    # A match that observes done leaves the current step pending; it cannot resume again.
    def short():
        yield 1
        return 2

    steps = [Step("init"), Step("a"), Step("b")]
    rules = [MatchRule(name="finished", predicate=lambda produced: produced.done)]
    with pytest.raises(AlreadyDoneError) as excinfo:
        Runner(factory=short, steps=steps, rules=rules).run()
    assert excinfo.value.step_name == "b"


def test_runner_first_matching_rule_wins() -> None:
    steps = [Step("init"), Step("first", ("go",)), Step("second")]
    rules = [
        MatchRule(name="ready_a", predicate=value_equals("ready"), value_producer=lambda: "from a"),
        MatchRule(name="ready_b", predicate=value_equals("ready"), value_producer=lambda: "from b"),
    ]
    out = Runner(factory=echo, steps=steps, rules=rules).run()
    assert len(out.matches["ready_a"]) == 1
    assert "ready_b" not in out.matches
    # "first" stood behind the match and records the echoed injected value.
    assert out.steps["first"].value == "from a"
    assert out.steps["second"] == Produced(value=None, done=True)


def test_runner_resumption_limit_stops_runaway_matches() -> None:
    def forever():
        while True:
            yield "tick"

    runner = Runner(
        factory=forever,
        steps=[Step("init"), Step("never")],
        rules=[MatchRule(name="tick", predicate=value_equals("tick"))],
        settings=RunnerSettings(max_resumptions=5),
    )
    with pytest.raises(ResumptionLimitError) as excinfo:
        runner.run()
    assert excinfo.value.step_name == "never"
    assert excinfo.value.limit == 5


def test_runner_propagates_coroutine_errors() -> None:
    def broken():
        yield "ok"
        raise ValueError("boom")

    with pytest.raises(ValueError, match="boom"):
        Runner(factory=broken, steps=[Step("init"), Step("a"), Step("b")]).run()


def test_runner_logs_lifecycle_messages() -> None:
    sink = MemoryLogSink()
    runner = gen_runner(simple_saga, log_sink=sink)
    runner.next("init", [1]).next("a", {"other": "v"}).next("other").next("returnVal").run()
    assert sink.texts() == [
        "run started",
        "step resumed",
        "step resumed",
        "step resumed",
        "completion reached",
        "run finished",
    ]
    assert sink.messages[-1].fields == {"resumptions": 3, "completed": True, "recorded": 3}
