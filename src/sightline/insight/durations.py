"""Access to durations measured by live telemetry."""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Mapping, Protocol, runtime_checkable

from sightline.artifact.model import FunctionArtifact

logger = logging.getLogger(__name__)


@runtime_checkable
class DurationStore(Protocol):
    def measured_duration(self, function: FunctionArtifact) -> int | None: ...


class MappingDurationStore:
    """Measured durations keyed by qualified function name."""

    def __init__(self, durations: Mapping[str, int] | None = None) -> None:
        self._durations: dict[str, int] = dict(durations or {})

    def measured_duration(self, function: FunctionArtifact) -> int | None:
        return self._durations.get(function.qualified_name)

    def record(self, qualified_name: str, duration: int) -> None:
        self._durations[qualified_name] = int(duration)

    def __len__(self) -> int:
        return len(self._durations)


def _read_duration_payload(path: Path) -> Mapping[str, object]:
    try:
        payload = json.loads(path.read_text(encoding="utf-8"))
    except FileNotFoundError:
        logger.warning("durations file %s does not exist", path)
        return {}
    except (OSError, UnicodeError, json.JSONDecodeError) as exc:
        logger.warning("cannot read durations from %s: %s", path, exc)
        return {}
    if not isinstance(payload, Mapping):
        logger.warning("durations file %s is not a JSON object", path)
        return {}
    return payload


def load_duration_store(path: Path) -> MappingDurationStore:
    """Load ``{"qualified.name": millis}``; entries that are not numbers are skipped."""
    durations: dict[str, int] = {}
    for name, value in _read_duration_payload(path).items():
        if isinstance(value, bool) or not isinstance(value, (int, float)):
            logger.debug("ignoring non-numeric duration for %s: %r", name, value)
            continue
        durations[str(name)] = int(value)
    return MappingDurationStore(durations)
