from sightline.artifact.model import (
    ArtifactElement,
    ArtifactLiteralValue,
    BinaryExpressionArtifact,
    BlockArtifact,
    CallArtifact,
    CallResolver,
    FunctionArtifact,
    IfArtifact,
    ReferenceArtifact,
    ReturnArtifact,
)
from sightline.artifact.visitors import ArtifactVisitor

__all__ = [
    "ArtifactElement",
    "ArtifactLiteralValue",
    "ArtifactVisitor",
    "BinaryExpressionArtifact",
    "BlockArtifact",
    "CallArtifact",
    "CallResolver",
    "FunctionArtifact",
    "IfArtifact",
    "ReferenceArtifact",
    "ReturnArtifact",
]
