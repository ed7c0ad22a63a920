from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from sightline.artifact.model import CallArtifact
from sightline.insight.keys import InsightKeys
from sightline.insight.passes.base import ArtifactPass

if TYPE_CHECKING:
    from sightline.insight.analyzer import AnalysisContext

logger = logging.getLogger(__name__)


class RecursiveCallPass(ArtifactPass):
    """Marks calls the recursion detector reports as self-recursive."""

    def visit_CallArtifact(self, call: CallArtifact, context: AnalysisContext) -> None:
        if context.recursion_detector.is_self_recursive(call):
            logger.debug("marking recursive call %s", call.name)
            call.set_data(InsightKeys.RECURSIVE_CALL, True)
