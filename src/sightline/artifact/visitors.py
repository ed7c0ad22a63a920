from __future__ import annotations

from typing import Generic, TypeVar

from sightline.artifact.model import ArtifactElement

C = TypeVar("C")


class ArtifactVisitor(Generic[C]):
    """Dispatch on artifact variant, in the manner of ``ast.NodeVisitor``.

    ``visit`` calls ``visit_<ClassName>`` for the node's class or the nearest
    base class that has a handler, and falls back to ``generic_visit``. It
    does not recurse; tree walks belong to the analyzer.
    """

    def visit(self, node: ArtifactElement, context: C) -> None:
        for cls in type(node).__mro__:
            handler = getattr(self, f"visit_{cls.__name__}", None)
            if handler is not None:
                handler(node, context)
                return
        self.generic_visit(node, context)

    def generic_visit(self, node: ArtifactElement, context: C) -> None:
        return None
