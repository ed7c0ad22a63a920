from sightline.insight.passes.base import ArtifactPass, MultiPathPass
from sightline.insight.passes.call_duration import CallDurationPass
from sightline.insight.passes.path_duration import PathDurationPass
from sightline.insight.passes.recursive_call import RecursiveCallPass

__all__ = [
    "ArtifactPass",
    "CallDurationPass",
    "MultiPathPass",
    "PathDurationPass",
    "RecursiveCallPass",
]
