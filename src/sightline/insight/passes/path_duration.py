from __future__ import annotations

from typing import TYPE_CHECKING

from sightline.artifact.model import CallArtifact
from sightline.insight.keys import InsightKeys, InsightType, InsightValue
from sightline.insight.passes.base import MultiPathPass
from sightline.insight.path import ProceduralMultiPath, ProceduralPath

if TYPE_CHECKING:
    from sightline.insight.analyzer import AnalysisContext


def known_call_durations(path: ProceduralPath) -> list[int]:
    durations: list[int] = []
    for artifact in path.artifacts:
        for node in artifact.walk():
            if not isinstance(node, CallArtifact):
                continue
            duration = node.get_data(InsightKeys.FUNCTION_DURATION)
            if duration is not None:
                durations.append(int(duration.value))
    return durations


class PathDurationPass(MultiPathPass):
    """Sets PATH_DURATION to the summed duration of the calls along each path.

    Only applies when at least one path has a call with a known duration; a
    path whose calls are all unknown then counts as zero. Otherwise derived
    values from an earlier analysis are removed.
    """

    def analyze(self, multi_path: ProceduralMultiPath, context: AnalysisContext) -> None:
        per_path = [known_call_durations(path) for path in multi_path]
        if not any(per_path):
            for path in multi_path:
                current = path.data.get(InsightKeys.PATH_DURATION)
                if current is not None and current.derived:
                    path.data.remove(InsightKeys.PATH_DURATION)
            return
        for path, durations in zip(multi_path, per_path):
            path.data.set(
                InsightKeys.PATH_DURATION,
                InsightValue.of(InsightType.PATH_DURATION, sum(durations)).as_derived(),
            )
