"""Lazily evaluated boolean conditions with lazily rendered descriptions."""

from dataclasses import dataclass
from typing import Callable


@dataclass(frozen=True)
class Condition:
    """A check paired with a human-readable description of what it requires.

    Neither callable runs before ``evaluate`` or ``description`` is called.
    Both must be free of side effects since they may be called repeatedly.
    """
    describe: Callable[[], str]
    check: Callable[[], bool]

    def evaluate(self) -> bool:
        return bool(self.check())

    def description(self) -> str:
        return self.describe()

    def __and__(self, other: "Condition") -> "Condition":
        return and_(self, other)

    def __or__(self, other: "Condition") -> "Condition":
        return or_(self, other)


def when(describe: Callable[[], str], evaluate: Callable[[], bool]) -> Condition:
    """Build a condition from a description and an evaluation callable."""
    return Condition(describe, evaluate)


def or_(*conds: Condition) -> Condition:
    """True as soon as one condition holds.

    The description always lists every sub-condition, joined with "or".
    """
    return Condition(
        describe=lambda: " or ".join(cond.description() for cond in conds),
        check=lambda: any(cond.evaluate() for cond in conds),
    )


def and_(*conds: Condition) -> Condition:
    """True when every condition holds, stopping at the first that does not.

    The description always lists every sub-condition, joined with "and".
    """
    return Condition(
        describe=lambda: " and ".join(cond.description() for cond in conds),
        check=lambda: all(cond.evaluate() for cond in conds),
    )
