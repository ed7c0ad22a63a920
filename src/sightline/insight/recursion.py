from __future__ import annotations

from typing import Protocol, runtime_checkable

from sightline.artifact.model import CallArtifact


@runtime_checkable
class RecursionDetector(Protocol):
    def is_self_recursive(self, call: CallArtifact) -> bool: ...


class SelfCallDetector:
    """Flags calls whose resolved target is the function that contains them."""

    def is_self_recursive(self, call: CallArtifact) -> bool:
        target = call.resolved_function()
        return target is not None and target is call.enclosing_function()
