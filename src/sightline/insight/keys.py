"""Insight kinds, provenance-tagged values, and typed data keys."""

from __future__ import annotations

from dataclasses import dataclass, replace
from enum import Enum
from typing import TYPE_CHECKING, Generic, TypeVar

if TYPE_CHECKING:
    from sightline.artifact.model import ArtifactElement
    from sightline.insight.path import ProceduralMultiPath

T = TypeVar("T")


class InsightType(str, Enum):
    FUNCTION_DURATION = "function_duration"
    PATH_DURATION = "path_duration"


@dataclass(frozen=True)
class InsightValue(Generic[T]):
    """A value attached to an artifact or path.

    ``derived`` marks values computed by a pass. Values without the flag came
    from live telemetry and outrank any derivation of the same kind.
    """

    type: InsightType
    value: T
    derived: bool = False

    @classmethod
    def of(cls, insight_type: InsightType, value: T) -> InsightValue[T]:
        return cls(type=insight_type, value=value)

    def as_derived(self) -> InsightValue[T]:
        return replace(self, derived=True)


@dataclass(frozen=True)
class InsightKey(Generic[T]):
    """Typed key into an insight data store.

    The type parameter names the value type stored under the key. Keys with an
    ``insight_type`` hold ``InsightValue`` instances of that kind; the others
    are reserved for engine bookkeeping.
    """

    name: str
    insight_type: InsightType | None = None

    @property
    def reserved(self) -> bool:
        return self.insight_type is None


class InsightKeys:
    FUNCTION_DURATION: InsightKey[InsightValue[int]] = InsightKey(
        "function_duration", InsightType.FUNCTION_DURATION
    )
    PATH_DURATION: InsightKey[InsightValue[int]] = InsightKey(
        "path_duration", InsightType.PATH_DURATION
    )
    CALL_ARGS: InsightKey[list[ArtifactElement]] = InsightKey("call_args")
    PROCEDURAL_MULTI_PATH: InsightKey[ProceduralMultiPath] = InsightKey(
        "procedural_multi_path"
    )
    RECURSIVE_CALL: InsightKey[bool] = InsightKey("recursive_call")
    # Argument values the cached path durations were computed for.
    ANALYZED_ARGS: InsightKey[tuple[object, ...]] = InsightKey("analyzed_args")
    # Where a call's FUNCTION_DURATION came from: "paths" or "measured".
    DURATION_SOURCE: InsightKey[str] = InsightKey("duration_source")

