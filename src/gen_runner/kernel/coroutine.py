from __future__ import annotations

from collections.abc import Callable, Generator, Sequence
from dataclasses import dataclass
from typing import Any, Protocol, runtime_checkable


@dataclass(frozen=True, slots=True)
class Produced:
    # One resumption report: the yielded or returned value plus the completion flag.
    value: Any
    done: bool


@runtime_checkable
class CoroutineHandle(Protocol):
    def resume(self, value: Any = None) -> Produced:
        """Resume the computation with ``value`` and report what it produced."""
        raise NotImplementedError("CoroutineHandle is a contract; use a concrete handle.")


# Factories receive the construction step arguments spread positionally.
CoroutineFactory = Callable[..., CoroutineHandle | Generator[Any, Any, Any]]


class GeneratorHandle:
    """Adapts a native generator to the ``resume`` contract.

    The first resumption primes the generator with ``next()`` and discards the
    fed value; a fresh generator cannot receive anything but ``None`` anyway.
    A ``StopIteration`` is reported as ``Produced(value=<return value>, done=True)``.
    """

    def __init__(self, generator: Generator[Any, Any, Any]) -> None:
        self._generator = generator
        self._started = False

    def resume(self, value: Any = None) -> Produced:
        try:
            if not self._started:
                self._started = True
                produced = next(self._generator)
            else:
                produced = self._generator.send(value)
        except StopIteration as stop:
            return Produced(value=stop.value, done=True)
        return Produced(value=produced, done=False)


def as_handle(obj: object) -> CoroutineHandle:
    # Factories may hand back either a ready handle or a plain generator.
    if isinstance(obj, CoroutineHandle):
        return obj
    if isinstance(obj, Generator):
        return GeneratorHandle(obj)
    raise TypeError(
        f"Coroutine factory must return a generator or an object with resume(), got {type(obj).__name__}"
    )


def feed_value(args: Sequence[Any]) -> Any:
    # send() takes one value: no args -> None, one arg -> itself, several -> the tuple.
    if not args:
        return None
    if len(args) == 1:
        return args[0]
    return tuple(args)


def construction_args(override: object) -> tuple[Any, ...]:
    if isinstance(override, (list, tuple)):
        return tuple(override)
    return (override,)
