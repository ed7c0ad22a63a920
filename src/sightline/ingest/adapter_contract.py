from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Protocol, runtime_checkable

from sightline.artifact.model import BlockArtifact, FunctionArtifact


@dataclass(frozen=True)
class ParsedModule:
    language_id: str
    module_name: str
    path: Path | None
    root: BlockArtifact
    functions: tuple[FunctionArtifact, ...]

    def function(self, qualified_name: str) -> FunctionArtifact | None:
        for function in self.functions:
            if function.qualified_name == qualified_name:
                return function
        return None


@runtime_checkable
class LanguageAdapter(Protocol):
    language_id: str
    file_extensions: tuple[str, ...]

    def parse_source(
        self,
        source: str,
        *,
        module_name: str,
        path: Path | None = None,
    ) -> ParsedModule: ...

    def parse_file(self, path: Path) -> ParsedModule: ...
