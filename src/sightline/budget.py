from __future__ import annotations

from dataclasses import dataclass
from typing import Protocol

from sightline.invariants import never


class AnalysisClock(Protocol):
    def consume(self, ticks: int = 1) -> None:
        """Consume logical progress units."""

    def get_mark(self) -> int:
        """Return the number of units consumed so far."""


class BudgetExhausted(RuntimeError):
    """Raised when an analysis run uses up its tick budget."""


@dataclass
class UnboundedClock:
    """Default clock used when no budget is configured."""

    current: int = 0

    def consume(self, ticks: int = 1) -> None:
        self.current += int(ticks)

    def get_mark(self) -> int:
        return self.current


@dataclass
class GasMeter:
    """Deterministic logical clock driven by consumed ticks.

    The analyzer consumes one tick per visited node and one per path fork.
    """

    limit: int
    current: int = 0

    def __post_init__(self) -> None:
        if int(self.limit) <= 0:
            never("invalid gas meter limit", limit=self.limit)
        self.limit = int(self.limit)
        self.current = int(self.current)
        if self.current < 0:
            never("invalid gas meter current", current=self.current)

    def consume(self, ticks: int = 1) -> None:
        ticks_value = int(ticks)
        if ticks_value <= 0:
            never("invalid gas meter ticks", ticks=ticks)
        self.current += ticks_value
        if self.current > self.limit:
            raise BudgetExhausted(f"Gas exhausted: {self.current}/{self.limit}")

    def get_mark(self) -> int:
        return self.current


def clock_for_limit(limit: int | None) -> AnalysisClock:
    if limit is None:
        return UnboundedClock()
    return GasMeter(limit=limit)
