"""Three-valued evaluation of branch conditions against call arguments.

A condition evaluates to a concrete value only when every input it depends on
is a known constant. Anything else is ``UNKNOWN``, which path filtering treats
as satisfiable.
"""

from __future__ import annotations

import operator
from typing import Callable, Sequence

from sightline.artifact.model import (
    ArtifactElement,
    ArtifactLiteralValue,
    BinaryExpressionArtifact,
    ReferenceArtifact,
)


class _Unknown:
    _instance: _Unknown | None = None

    def __new__(cls) -> _Unknown:
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __repr__(self) -> str:
        return "UNKNOWN"


UNKNOWN = _Unknown()

_BINARY_OPERATORS: dict[str, Callable[[object, object], object]] = {
    "==": operator.eq,
    "!=": operator.ne,
    "<": operator.lt,
    "<=": operator.le,
    ">": operator.gt,
    ">=": operator.ge,
    "+": operator.add,
    "-": operator.sub,
    "*": operator.mul,
    "/": operator.truediv,
    "//": operator.floordiv,
    "%": operator.mod,
    "is": operator.is_,
    "is not": operator.is_not,
    "in": lambda left, right: operator.contains(right, left),
    "not in": lambda left, right: not operator.contains(right, left),
}


def argument_value(argument: ArtifactElement | None) -> object:
    """Value of a call argument evaluated without any parameter bindings."""
    return evaluate(argument, ())


def evaluate(
    expression: ArtifactElement | None,
    arguments: Sequence[ArtifactElement],
) -> object:
    if expression is None:
        return UNKNOWN
    if isinstance(expression, ArtifactLiteralValue):
        return expression.value
    if isinstance(expression, ReferenceArtifact):
        index = expression.parameter_index
        if index is None or index >= len(arguments):
            return UNKNOWN
        bound = arguments[index]
        if bound is expression:
            return UNKNOWN
        return argument_value(bound)
    if isinstance(expression, BinaryExpressionArtifact):
        return _evaluate_binary(expression, arguments)
    return UNKNOWN


def _evaluate_binary(
    expression: BinaryExpressionArtifact,
    arguments: Sequence[ArtifactElement],
) -> object:
    op = expression.operator
    left = evaluate(expression.left, arguments)
    if op in {"and", "or"}:
        return _evaluate_logical(op, left, expression.right, arguments)
    if op == "not":
        # Unary negation is stored with the operand on the left.
        if left is UNKNOWN:
            return UNKNOWN
        return not left
    right = evaluate(expression.right, arguments)
    if left is UNKNOWN or right is UNKNOWN:
        return UNKNOWN
    func = _BINARY_OPERATORS.get(op)
    if func is None:
        return UNKNOWN
    try:
        return func(left, right)
    except (TypeError, ValueError, ArithmeticError):
        return UNKNOWN


def _evaluate_logical(
    op: str,
    left: object,
    right_expression: ArtifactElement | None,
    arguments: Sequence[ArtifactElement],
) -> object:
    if left is not UNKNOWN:
        if op == "and" and not left:
            return left
        if op == "or" and left:
            return left
    right = evaluate(right_expression, arguments)
    if left is UNKNOWN:
        if right is UNKNOWN:
            return UNKNOWN
        if op == "and" and not right:
            return right
        if op == "or" and right:
            return right
        return UNKNOWN
    return right


def branch_is_possible(
    condition: ArtifactElement | None,
    taken: bool,
    arguments: Sequence[ArtifactElement],
) -> bool:
    """Whether ``taken`` is a possible outcome of ``condition``."""
    value = evaluate(condition, arguments)
    if value is UNKNOWN:
        return True
    try:
        return bool(value) == taken
    except (TypeError, ValueError):
        return True
