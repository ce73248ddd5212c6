from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import Literal

from gen_runner.kernel.coroutine import Produced
from gen_runner.kernel.errors import OutputNotFoundError
from gen_runner.kernel.trace import TraceRecord


@dataclass(frozen=True, slots=True)
class OutputEntry:
    # Ordered record of every resumption, including repeated names.
    kind: Literal["step", "match"]
    name: str
    step_index: int
    produced: Produced


@dataclass(frozen=True, slots=True)
class RunOutput:
    """Read-only view over one run.

    ``steps`` keeps the last output per step name, ``matches`` every output per
    rule name in order. ``get`` resolves step names before rule names.
    """

    steps: Mapping[str, Produced] = field(default_factory=dict)
    matches: Mapping[str, tuple[Produced, ...]] = field(default_factory=dict)
    history: tuple[OutputEntry, ...] = ()
    trace: tuple[TraceRecord, ...] = ()
    completed: bool = False

    def get(self, name: str) -> Produced | list[Produced]:
        if name in self.steps:
            return self.steps[name]
        if name in self.matches:
            return list(self.matches[name])
        raise OutputNotFoundError(name)

    def __getitem__(self, name: str) -> Produced | list[Produced]:
        return self.get(name)

    def __contains__(self, name: object) -> bool:
        return name in self.steps or name in self.matches

    @property
    def output(self) -> dict[str, Produced | list[Produced]]:
        # Step entries win on name collision with a rule.
        merged: dict[str, Produced | list[Produced]] = {name: list(items) for name, items in self.matches.items()}
        merged.update(self.steps)
        return merged

    def entries(self, name: str) -> list[Produced]:
        # Every occurrence under ``name``, whether it was recorded as a step or a match.
        return [entry.produced for entry in self.history if entry.name == name]
