"""The insight pass pipeline.

``InsightAnalyzer.analyze`` opens one analysis run over an artifact subtree.
The run's ``AnalysisContext`` is passed explicitly to every pass; it carries
the stack of functions under analysis, which is what keeps interprocedural
passes from re-entering a function higher up the same call chain.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Sequence

from sightline.artifact.model import ArtifactElement, FunctionArtifact
from sightline.budget import AnalysisClock, clock_for_limit
from sightline.config import PassConfig
from sightline.insight.durations import DurationStore, MappingDurationStore
from sightline.insight.keys import InsightKeys
from sightline.insight.passes.base import ArtifactPass, MultiPathPass
from sightline.insight.passes.call_duration import (
    CallDurationPass,
    argument_signature,
    effective_arguments,
)
from sightline.insight.passes.path_duration import PathDurationPass
from sightline.insight.passes.recursive_call import RecursiveCallPass
from sightline.insight.path import ProceduralMultiPath, get_multi_path
from sightline.insight.recursion import RecursionDetector, SelfCallDetector

logger = logging.getLogger(__name__)

InsightPass = ArtifactPass | MultiPathPass


def default_passes() -> list[InsightPass]:
    return [RecursiveCallPass(), CallDurationPass(), PathDurationPass()]


@dataclass
class AnalysisContext:
    analyzer: InsightAnalyzer
    clock: AnalysisClock
    stack: list[FunctionArtifact] = field(default_factory=list)

    @property
    def config(self) -> PassConfig:
        return self.analyzer.config

    @property
    def recursion_detector(self) -> RecursionDetector:
        return self.analyzer.recursion_detector

    @property
    def root(self) -> FunctionArtifact | None:
        return self.stack[-1] if self.stack else None

    def is_active(self, function: FunctionArtifact) -> bool:
        return any(active is function for active in self.stack)

    def measured_duration(self, function: FunctionArtifact) -> int | None:
        measured = self.analyzer.duration_store.measured_duration(function)
        if measured is not None:
            return int(measured)
        own = function.get_data(InsightKeys.FUNCTION_DURATION)
        if own is not None and not own.derived:
            return int(own.value)
        return None


class InsightAnalyzer:
    def __init__(
        self,
        passes: Sequence[InsightPass] | None = None,
        *,
        config: PassConfig | None = None,
        duration_store: DurationStore | None = None,
        recursion_detector: RecursionDetector | None = None,
    ) -> None:
        self.passes: list[InsightPass] = (
            list(passes) if passes is not None else default_passes()
        )
        self.config = config if config is not None else PassConfig()
        self.duration_store: DurationStore = (
            duration_store if duration_store is not None else MappingDurationStore()
        )
        self.recursion_detector: RecursionDetector = (
            recursion_detector if recursion_detector is not None else SelfCallDetector()
        )

    @property
    def artifact_passes(self) -> list[ArtifactPass]:
        return [p for p in self.passes if isinstance(p, ArtifactPass)]

    @property
    def multi_path_passes(self) -> list[MultiPathPass]:
        return [p for p in self.passes if isinstance(p, MultiPathPass)]

    def new_context(self) -> AnalysisContext:
        return AnalysisContext(analyzer=self, clock=clock_for_limit(self.config.max_ticks))

    def analyze(self, element: ArtifactElement) -> ProceduralMultiPath | None:
        """Run the pipeline over ``element`` and everything beneath it.

        Returns the multi-path when ``element`` is a function.
        """
        context = self.new_context()
        if isinstance(element, FunctionArtifact):
            return self.analyze_function(element, context)
        self._run_artifact_passes(element, context)
        return None

    def analyze_function(
        self,
        function: FunctionArtifact,
        context: AnalysisContext,
    ) -> ProceduralMultiPath:
        if context.is_active(function):
            return get_multi_path(function, context.clock)
        multi_path = get_multi_path(function, context.clock)
        logger.debug("analyzing %s", function.qualified_name)
        function.set_data(
            InsightKeys.ANALYZED_ARGS, argument_signature(effective_arguments(function))
        )
        context.stack.append(function)
        try:
            self._run_artifact_passes(function, context)
            for insight_pass in self.multi_path_passes:
                insight_pass.analyze(multi_path, context)
        finally:
            context.stack.pop()
        return multi_path

    def _run_artifact_passes(self, root: ArtifactElement, context: AnalysisContext) -> None:
        artifact_passes = self.artifact_passes
        pending: list[ArtifactElement] = [root]
        while pending:
            node = pending.pop()
            if node is not root and isinstance(node, FunctionArtifact):
                self.analyze_function(node, context)
                continue
            context.clock.consume()
            for insight_pass in artifact_passes:
                insight_pass.analyze(node, context)
            pending.extend(reversed(node.children()))
