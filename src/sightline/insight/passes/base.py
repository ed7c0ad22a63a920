from __future__ import annotations

from typing import TYPE_CHECKING

from sightline.artifact.model import ArtifactElement
from sightline.artifact.visitors import ArtifactVisitor

if TYPE_CHECKING:
    from sightline.insight.analyzer import AnalysisContext
    from sightline.insight.path import ProceduralMultiPath


class ArtifactPass(ArtifactVisitor["AnalysisContext"]):
    """A pass applied to every node of an analyzed subtree.

    Subclasses implement ``visit_<Variant>`` handlers for the node kinds they
    care about; every other node falls through to the no-op ``generic_visit``.
    """

    def analyze(self, element: ArtifactElement, context: AnalysisContext) -> None:
        self.visit(element, context)


class MultiPathPass:
    """A pass applied once to a function's multi-path after its artifacts."""

    def analyze(self, multi_path: ProceduralMultiPath, context: AnalysisContext) -> None:
        raise NotImplementedError
