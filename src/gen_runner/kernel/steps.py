from __future__ import annotations

from collections.abc import Iterator
from dataclasses import dataclass, field
from typing import Any


@dataclass(frozen=True, slots=True)
class Step:
    # The first step's args construct the coroutine; later args are fed on resumption.
    name: str
    args: tuple[Any, ...] = ()


@dataclass
class StepQueue:
    # Append-only ordered list of declared steps; names need not be unique.
    _steps: list[Step] = field(default_factory=list)

    def append(self, name: str, args: tuple[Any, ...] = ()) -> Step:
        step = Step(name=name, args=tuple(args))
        self._steps.append(step)
        return step

    def snapshot(self) -> tuple[Step, ...]:
        # Runs read a frozen copy so later declarations never leak into an active run.
        return tuple(self._steps)

    def __iter__(self) -> Iterator[Step]:
        return iter(self._steps)

    def __len__(self) -> int:
        return len(self._steps)
