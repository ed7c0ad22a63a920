from __future__ import annotations

import logging
from typing import TypeVar

from sightline.insight.keys import InsightKey, InsightValue

logger = logging.getLogger(__name__)

T = TypeVar("T")


class InsightData:
    """Per-node key to value store.

    Instances are shared by reference with the owning node; every holder of
    the node sees every write.
    """

    def __init__(self) -> None:
        self._values: dict[InsightKey[object], object] = {}

    def get(self, key: InsightKey[T]) -> T | None:
        return self._values.get(key)  # type: ignore[return-value]

    def has(self, key: InsightKey[object]) -> bool:
        return key in self._values

    def set(self, key: InsightKey[T], value: T) -> bool:
        """Store ``value`` under ``key``, replacing any prior value.

        A derived insight never replaces a measured one; such writes are
        refused and reported as ``False``.
        """
        current = self._values.get(key)
        if (
            isinstance(current, InsightValue)
            and not current.derived
            and isinstance(value, InsightValue)
            and value.derived
        ):
            logger.debug(
                "keeping measured %s=%r over derived %r",
                key.name,
                current.value,
                value.value,
            )
            return False
        self._values[key] = value
        return True

    def remove(self, key: InsightKey[object]) -> None:
        self._values.pop(key, None)

    def insights(self) -> list[InsightValue[object]]:
        return [
            value
            for key, value in self._values.items()
            if not key.reserved and isinstance(value, InsightValue)
        ]

    def __len__(self) -> int:
        return len(self._values)

    def __contains__(self, key: object) -> bool:
        return key in self._values
