from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Iterable, Sequence

from sightline.artifact.model import (
    ArtifactElement,
    CallArtifact,
    FunctionArtifact,
    ReferenceArtifact,
)
from sightline.insight.evaluation import UNKNOWN, argument_value
from sightline.insight.keys import InsightKeys, InsightType, InsightValue
from sightline.insight.passes.base import ArtifactPass
from sightline.insight.path import ProceduralMultiPath, ProceduralPath, get_multi_path

if TYPE_CHECKING:
    from sightline.insight.analyzer import AnalysisContext

logger = logging.getLogger(__name__)


def resolve_arguments(call: CallArtifact) -> list[ArtifactElement]:
    """Replace parameter references with the values the enclosing function got.

    An argument that refers to parameter ``i`` of the call's enclosing
    function becomes the ``i``-th argument propagated to that function from
    its own call site. Without a propagated value the reference is kept.
    """
    enclosing = call.enclosing_function()
    outer_args = enclosing.get_data(InsightKeys.CALL_ARGS) if enclosing is not None else None
    resolved: list[ArtifactElement] = []
    for argument in call.arguments:
        if (
            outer_args is not None
            and isinstance(argument, ReferenceArtifact)
            and argument.is_function_parameter()
            and argument.enclosing_function() is enclosing
            and argument.parameter_index < len(outer_args)
        ):
            resolved.append(outer_args[argument.parameter_index])
        else:
            resolved.append(argument)
    return resolved


def is_fully_resolved(arguments: Iterable[ArtifactElement]) -> bool:
    return not any(
        isinstance(argument, ReferenceArtifact) and argument.is_function_parameter()
        for argument in arguments
    )


def average_path_duration(paths: Iterable[ProceduralPath]) -> int | None:
    """Mean PATH_DURATION over the paths that carry one, truncated."""
    durations = [duration for duration in (path.duration() for path in paths) if duration is not None]
    if not durations:
        return None
    return int(sum(durations) / len(durations))


def effective_arguments(function: FunctionArtifact) -> list[ArtifactElement]:
    """Propagated CALL_ARGS, or the declared parameters when none were propagated."""
    call_args = function.get_data(InsightKeys.CALL_ARGS)
    return list(function.parameters) if call_args is None else list(call_args)


def argument_signature(arguments: Iterable[ArtifactElement]) -> tuple[object, ...]:
    """Comparable form of the argument values a function is analyzed with.

    Values are paired with their type so ``1`` and ``True`` stay distinct;
    unknown values all compare equal.
    """
    signature: list[object] = []
    for argument in arguments:
        value = argument_value(argument)
        signature.append(UNKNOWN if value is UNKNOWN else (type(value), value))
    return tuple(signature)


def _derived_duration(duration: int) -> InsightValue[int]:
    return InsightValue.of(InsightType.FUNCTION_DURATION, int(duration)).as_derived()


class CallDurationPass(ArtifactPass):
    """Sets FUNCTION_DURATION on calls that resolve to a function with a known
    or derivable duration.

    The callee's candidate paths, filtered by the call's argument values,
    contribute their average PATH_DURATION. A measured duration for the callee
    replaces that average. A derived value left by an earlier analysis is
    dropped when neither applies any more.
    """

    def visit_CallArtifact(self, call: CallArtifact, context: AnalysisContext) -> None:
        resolved = call.resolved_function()
        if resolved is None:
            logger.debug("no resolved function for call %s", call.name)
            return

        resolved.set_data(InsightKeys.CALL_ARGS, resolve_arguments(call))

        multi_path = resolved.get_data(InsightKeys.PROCEDURAL_MULTI_PATH)
        if self._should_analyze_resolved_function(multi_path, call, resolved, context):
            multi_path = context.analyzer.analyze_function(resolved, context)
        elif multi_path is None:
            multi_path = get_multi_path(resolved, context.clock)

        duration: int | None = None
        source = "paths"
        call_args = effective_arguments(resolved)
        if is_fully_resolved(call_args):
            duration = self._candidate_duration(call_args, multi_path)
        else:
            logger.debug("arguments of call %s are not fully resolved", call.name)

        measured = context.measured_duration(resolved)
        if measured is not None:
            duration, source = measured, "measured"

        if duration is None:
            self._drop_derived(call)
            return
        if call.set_data(InsightKeys.FUNCTION_DURATION, _derived_duration(duration)):
            call.set_data(InsightKeys.DURATION_SOURCE, source)

    def _should_analyze_resolved_function(
        self,
        multi_path: ProceduralMultiPath | None,
        call: CallArtifact,
        resolved: FunctionArtifact,
        context: AnalysisContext,
    ) -> bool:
        if not context.config.analyze_resolved_functions:
            return False
        if call.get_data(InsightKeys.RECURSIVE_CALL):
            return False
        if context.is_active(resolved):
            logger.debug("%s is already being analyzed", resolved.qualified_name)
            return False
        if multi_path is None or not multi_path.all_have(InsightKeys.PATH_DURATION):
            return True
        analyzed = resolved.get_data(InsightKeys.ANALYZED_ARGS)
        if analyzed != argument_signature(effective_arguments(resolved)):
            logger.debug("%s was analyzed for other arguments", resolved.qualified_name)
            return True
        return False

    def _candidate_duration(
        self,
        arguments: Sequence[ArtifactElement],
        multi_path: ProceduralMultiPath,
    ) -> int | None:
        return average_path_duration(multi_path.candidates(arguments))

    def _drop_derived(self, call: CallArtifact) -> None:
        current = call.get_data(InsightKeys.FUNCTION_DURATION)
        if current is not None and current.derived:
            call.data.remove(InsightKeys.FUNCTION_DURATION)
            call.data.remove(InsightKeys.DURATION_SOURCE)
