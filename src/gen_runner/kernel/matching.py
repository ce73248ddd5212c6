from __future__ import annotations

from collections.abc import Callable, Iterable, Iterator
from dataclasses import dataclass, field
from typing import Any

from gen_runner.kernel.coroutine import Produced

Predicate = Callable[[Produced], bool]
ValueProducer = Callable[[], Any]


def _feed_none() -> None:
    return None


@dataclass(frozen=True, slots=True)
class MatchRule:
    # A matching rule intercepts one resumption and supplies the next fed value.
    name: str
    predicate: Predicate
    value_producer: ValueProducer = _feed_none

    def matches(self, produced: Produced) -> bool:
        return bool(self.predicate(produced))


@dataclass
class MatchRegistry:
    # Rules are evaluated in declaration order; the first match wins.
    _rules: list[MatchRule] = field(default_factory=list)

    def add(self, rule: MatchRule) -> MatchRule:
        self._rules.append(rule)
        return rule

    def first_match(self, produced: Produced) -> MatchRule | None:
        return first_match(self._rules, produced)

    def snapshot(self) -> tuple[MatchRule, ...]:
        return tuple(self._rules)

    def __iter__(self) -> Iterator[MatchRule]:
        return iter(self._rules)

    def __len__(self) -> int:
        return len(self._rules)


def first_match(rules: Iterable[MatchRule], produced: Produced) -> MatchRule | None:
    for rule in rules:
        if rule.matches(produced):
            return rule
    return None


def value_equals(expected: Any) -> Predicate:
    """Build a predicate that matches when the produced value equals ``expected``."""

    def _predicate(produced: Produced) -> bool:
        return produced.value == expected

    return _predicate


def feed(value: Any) -> ValueProducer:
    # Constant producer, used by script-declared matches.
    def _producer() -> Any:
        return value

    return _producer
