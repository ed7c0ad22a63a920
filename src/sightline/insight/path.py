"""Procedural paths: the concrete branch sequences through a function."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Iterator, Sequence

from sightline.artifact.model import (
    ArtifactElement,
    BlockArtifact,
    FunctionArtifact,
    IfArtifact,
    ReturnArtifact,
)
from sightline.budget import AnalysisClock, UnboundedClock
from sightline.insight.data import InsightData
from sightline.insight.evaluation import branch_is_possible
from sightline.insight.keys import InsightKey, InsightKeys, InsightValue
from sightline.invariants import never

logger = logging.getLogger(__name__)


@dataclass(eq=False)
class ProceduralPath:
    function: FunctionArtifact
    conditions: tuple[tuple[IfArtifact, bool], ...] = ()
    artifacts: tuple[ArtifactElement, ...] = ()
    data: InsightData = field(default_factory=InsightData)

    def __post_init__(self) -> None:
        taken_by_branch: dict[int, bool] = {}
        for branch, taken in self.conditions:
            if branch.enclosing_function() is not self.function:
                never(
                    "path condition outside owning function",
                    function=self.function.qualified_name,
                    condition=repr(branch),
                )
            prior = taken_by_branch.setdefault(id(branch), taken)
            if prior != taken:
                never(
                    "contradictory path condition",
                    function=self.function.qualified_name,
                    condition=repr(branch),
                )

    def get_insights(self) -> list[InsightValue[object]]:
        return self.data.insights()

    def duration(self) -> int | None:
        value = self.data.get(InsightKeys.PATH_DURATION)
        return None if value is None else value.value

    def evaluate_params(self, arguments: Sequence[ArtifactElement]) -> bool:
        """Whether this path is a candidate for the given call arguments."""
        return all(
            branch_is_possible(branch.condition, taken, arguments)
            for branch, taken in self.conditions
        )


@dataclass(eq=False)
class ProceduralMultiPath:
    function: FunctionArtifact
    paths: list[ProceduralPath] = field(default_factory=list)

    def __post_init__(self) -> None:
        for path in self.paths:
            self._check_member(path)

    def _check_member(self, path: ProceduralPath) -> None:
        if path.function is not self.function:
            never(
                "procedural path belongs to another function",
                function=self.function.qualified_name,
                path_function=path.function.qualified_name,
            )

    def add(self, path: ProceduralPath) -> None:
        self._check_member(path)
        self.paths.append(path)

    def all_have(self, key: InsightKey[object]) -> bool:
        return all(path.data.has(key) for path in self.paths)

    def candidates(self, arguments: Sequence[ArtifactElement]) -> ProceduralMultiPath:
        return ProceduralMultiPath(
            self.function,
            [path for path in self.paths if path.evaluate_params(arguments)],
        )

    def __iter__(self) -> Iterator[ProceduralPath]:
        return iter(self.paths)

    def __len__(self) -> int:
        return len(self.paths)


@dataclass
class _PartialPath:
    conditions: list[tuple[IfArtifact, bool]]
    artifacts: list[ArtifactElement]
    finished: bool = False

    def fork(self, branch: IfArtifact, taken: bool) -> _PartialPath:
        return _PartialPath(
            conditions=[*self.conditions, (branch, taken)],
            artifacts=list(self.artifacts),
        )


def _walk(
    statement: ArtifactElement | None,
    partial: _PartialPath,
    clock: AnalysisClock,
) -> list[_PartialPath]:
    if statement is None or partial.finished:
        return [partial]
    if isinstance(statement, BlockArtifact):
        live = [partial]
        for child in statement.statements:
            live = [out for current in live for out in _walk(child, current, clock)]
        return live
    if isinstance(statement, FunctionArtifact):
        # Nested definitions are separate functions with their own paths.
        return [partial]
    if isinstance(statement, IfArtifact):
        if statement.condition is not None:
            partial.artifacts.append(statement.condition)
        clock.consume(2)
        return _walk(statement.then_branch, partial.fork(statement, True), clock) + _walk(
            statement.else_branch, partial.fork(statement, False), clock
        )
    partial.artifacts.append(statement)
    if isinstance(statement, ReturnArtifact):
        partial.finished = True
    return [partial]


def build_multi_path(
    function: FunctionArtifact,
    clock: AnalysisClock | None = None,
) -> ProceduralMultiPath:
    """Enumerate every branch sequence through ``function``'s body."""
    clock = clock if clock is not None else UnboundedClock()
    live = _walk(function.body, _PartialPath([], []), clock)
    multi_path = ProceduralMultiPath(function)
    for partial in live:
        multi_path.add(
            ProceduralPath(
                function=function,
                conditions=tuple(partial.conditions),
                artifacts=tuple(partial.artifacts),
            )
        )
    logger.debug("built %d paths for %s", len(multi_path), function.qualified_name)
    return multi_path


def get_multi_path(
    function: FunctionArtifact,
    clock: AnalysisClock | None = None,
) -> ProceduralMultiPath:
    cached = function.get_data(InsightKeys.PROCEDURAL_MULTI_PATH)
    if cached is not None:
        return cached
    multi_path = build_multi_path(function, clock)
    function.set_data(InsightKeys.PROCEDURAL_MULTI_PATH, multi_path)
    return multi_path


def invalidate(function: FunctionArtifact) -> None:
    """Drop the cached multi-path so the next request rebuilds it."""
    function.data.remove(InsightKeys.PROCEDURAL_MULTI_PATH)
