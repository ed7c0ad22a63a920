"""Invariant markers for sightline analysis."""

from __future__ import annotations

from typing import NoReturn, TypeVar

from sightline.exceptions import NeverThrown

T = TypeVar("T")


def never(reason: str = "", **env: object) -> NoReturn:
    """Mark a code path as unreachable.

    Reaching it means the artifact tree or a procedural path is corrupt, so
    the current analysis run is aborted. The env payload is diagnostic
    metadata only.
    """
    raise NeverThrown(reason or "never() marker reached", env=env)


def require_not_none(
    value: T | None,
    *,
    reason: str = "",
    strict: bool = False,
    **env: object,
) -> T | None:
    if value is None and strict:
        never(reason or "required value is None", **env)
    return value
