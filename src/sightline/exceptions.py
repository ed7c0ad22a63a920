"""Exception protocol for sightline analysis."""

from __future__ import annotations


class NeverRaise(RuntimeError):
    """Sentinel exception for states the engine treats as unreachable.

    Raising this exception signals that an internal invariant of the artifact
    or path model was violated. It is never used for routine "cannot determine
    a value" outcomes, which the passes absorb as absence.
    """

    def __init__(self, message: str, *, env: dict[str, object] | None = None):
        super().__init__(message)
        self.reason = message
        self.env = dict(env or {})

    @property
    def env_payload(self) -> dict[str, str]:
        return {str(key): str(value) for key, value in self.env.items()}


class NeverThrown(NeverRaise):
    """Alias for NeverRaise used by the explicit never() marker."""
