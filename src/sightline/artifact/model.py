"""Language-neutral artifact model.

Per-language adapters translate their parse trees into these nodes. The
structure is fixed once built; passes only write to each node's insight data.
"""

from __future__ import annotations

from typing import Callable, Iterator, Sequence, TypeVar

from sightline.insight.data import InsightData
from sightline.insight.keys import InsightKey

T = TypeVar("T")

CallResolver = Callable[["CallArtifact"], "FunctionArtifact | None"]

_UNRESOLVED = object()


class ArtifactElement:
    def __init__(self, *, source: object = None) -> None:
        self.source = source
        self.parent: ArtifactElement | None = None
        self.data = InsightData()

    def _adopt(self, child: ArtifactElement | None) -> None:
        if child is not None:
            child.parent = self

    def children(self) -> tuple[ArtifactElement, ...]:
        return ()

    def walk(self) -> Iterator[ArtifactElement]:
        """Yield this node and its descendants in structural pre-order."""
        stack: list[ArtifactElement] = [self]
        while stack:
            node = stack.pop()
            yield node
            stack.extend(reversed(node.children()))

    def enclosing_function(self) -> FunctionArtifact | None:
        node = self.parent
        while node is not None:
            if isinstance(node, FunctionArtifact):
                return node
            node = node.parent
        return None

    def get_data(self, key: InsightKey[T]) -> T | None:
        return self.data.get(key)

    def set_data(self, key: InsightKey[T], value: T) -> bool:
        return self.data.set(key, value)

    def has_data(self, key: InsightKey[object]) -> bool:
        return self.data.has(key)

    def __repr__(self) -> str:
        return f"{type(self).__name__}()"


class BlockArtifact(ArtifactElement):
    def __init__(
        self,
        statements: Sequence[ArtifactElement] = (),
        *,
        source: object = None,
    ) -> None:
        super().__init__(source=source)
        self.statements: tuple[ArtifactElement, ...] = tuple(statements)
        for statement in self.statements:
            self._adopt(statement)

    def children(self) -> tuple[ArtifactElement, ...]:
        return self.statements

    def __repr__(self) -> str:
        return f"BlockArtifact({len(self.statements)} statements)"


class ReferenceArtifact(ArtifactElement):
    def __init__(
        self,
        name: str,
        *,
        parameter_index: int | None = None,
        source: object = None,
    ) -> None:
        super().__init__(source=source)
        self.name = name
        self.parameter_index = parameter_index

    def is_function_parameter(self) -> bool:
        return self.parameter_index is not None

    def __repr__(self) -> str:
        if self.parameter_index is None:
            return f"ReferenceArtifact({self.name!r})"
        return f"ReferenceArtifact({self.name!r}, parameter_index={self.parameter_index})"


class ArtifactLiteralValue(ArtifactElement):
    def __init__(self, value: object, *, source: object = None) -> None:
        super().__init__(source=source)
        self.value = value

    def __repr__(self) -> str:
        return f"ArtifactLiteralValue({self.value!r})"


class BinaryExpressionArtifact(ArtifactElement):
    def __init__(
        self,
        operator: str,
        left: ArtifactElement | None,
        right: ArtifactElement | None,
        *,
        source: object = None,
    ) -> None:
        super().__init__(source=source)
        self.operator = operator
        self.left = left
        self.right = right
        self._adopt(left)
        self._adopt(right)

    def children(self) -> tuple[ArtifactElement, ...]:
        return tuple(child for child in (self.left, self.right) if child is not None)

    def __repr__(self) -> str:
        return f"BinaryExpressionArtifact({self.left!r} {self.operator} {self.right!r})"


class ReturnArtifact(ArtifactElement):
    """Ends the procedural path it appears on."""

    def __init__(self, value: ArtifactElement | None = None, *, source: object = None) -> None:
        super().__init__(source=source)
        self.value = value
        self._adopt(value)

    def children(self) -> tuple[ArtifactElement, ...]:
        return (self.value,) if self.value is not None else ()

    def __repr__(self) -> str:
        return f"ReturnArtifact({self.value!r})"


class IfArtifact(ArtifactElement):
    def __init__(
        self,
        condition: ArtifactElement | None,
        then_branch: ArtifactElement | None,
        else_branch: ArtifactElement | None = None,
        *,
        source: object = None,
    ) -> None:
        super().__init__(source=source)
        self.condition = condition
        self.then_branch = then_branch
        self.else_branch = else_branch
        self._adopt(condition)
        self._adopt(then_branch)
        self._adopt(else_branch)

    def children(self) -> tuple[ArtifactElement, ...]:
        return tuple(
            child
            for child in (self.condition, self.then_branch, self.else_branch)
            if child is not None
        )

    def __repr__(self) -> str:
        return f"IfArtifact({self.condition!r})"


class CallArtifact(ArtifactElement):
    def __init__(
        self,
        name: str | None,
        arguments: Sequence[ArtifactElement] = (),
        *,
        resolver: CallResolver | None = None,
        source: object = None,
    ) -> None:
        super().__init__(source=source)
        self.name = name
        self.arguments: tuple[ArtifactElement, ...] = tuple(arguments)
        for argument in self.arguments:
            self._adopt(argument)
        self._resolver = resolver
        self._resolved: object = _UNRESOLVED

    def children(self) -> tuple[ArtifactElement, ...]:
        return self.arguments

    def resolved_function(self) -> FunctionArtifact | None:
        """Resolve the call target once; ``None`` when it cannot be found."""
        if self._resolved is _UNRESOLVED:
            resolved = self._resolver(self) if self._resolver is not None else None
            self._resolved = resolved if isinstance(resolved, FunctionArtifact) else None
        return self._resolved  # type: ignore[return-value]

    def __repr__(self) -> str:
        return f"CallArtifact({self.name!r}, {len(self.arguments)} args)"


class FunctionArtifact(ArtifactElement):
    def __init__(
        self,
        name: str,
        parameters: Sequence[str | ReferenceArtifact] = (),
        body: BlockArtifact | Sequence[ArtifactElement] = (),
        *,
        qualified_name: str | None = None,
        source: object = None,
    ) -> None:
        super().__init__(source=source)
        self.name = name
        self.qualified_name = qualified_name or name
        self.parameters: tuple[ReferenceArtifact, ...] = tuple(
            parameter
            if isinstance(parameter, ReferenceArtifact)
            else ReferenceArtifact(parameter, parameter_index=index)
            for index, parameter in enumerate(parameters)
        )
        for parameter in self.parameters:
            self._adopt(parameter)
        self.body = body if isinstance(body, BlockArtifact) else BlockArtifact(body)
        self._adopt(self.body)

    def parameter(self, name: str) -> ReferenceArtifact | None:
        for parameter in self.parameters:
            if parameter.name == name:
                return parameter
        return None

    def children(self) -> tuple[ArtifactElement, ...]:
        return (*self.parameters, self.body)

    def __repr__(self) -> str:
        return f"FunctionArtifact({self.qualified_name!r})"
