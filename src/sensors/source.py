"""EnvironmentSource protocol and a fixed-value implementation."""

from __future__ import annotations

import logging
from datetime import UTC, datetime
from typing import Protocol, runtime_checkable

from src.sensors.models import EnvironmentSnapshot

logger = logging.getLogger(__name__)


class SensorUnavailable(Exception):
    """The environment source could not produce a snapshot."""


@runtime_checkable
class EnvironmentSource(Protocol):
    """Protocol for anything that can report the current environment."""

    async def get_current_snapshot(self) -> EnvironmentSnapshot:
        """Return the latest snapshot. Raises SensorUnavailable on failure."""
        ...

    async def start_monitoring(self) -> None: ...

    async def stop_monitoring(self) -> None: ...


class StaticEnvironmentSource:
    """Reports a fixed snapshot, re-stamped with the current time on each read.

    Stands in for real location/motion/health readers, which live outside
    this package.

    Args:
        snapshot: Readings to report. ``None`` reports an empty snapshot.
    """

    def __init__(self, snapshot: EnvironmentSnapshot | None = None) -> None:
        self._snapshot = snapshot or EnvironmentSnapshot()
        self._monitoring = False
        self._last: EnvironmentSnapshot | None = None

    @property
    def is_monitoring(self) -> bool:
        return self._monitoring

    @property
    def last_snapshot(self) -> EnvironmentSnapshot | None:
        return self._last

    async def get_current_snapshot(self) -> EnvironmentSnapshot:
        snapshot = self._snapshot.model_copy(update={"timestamp": datetime.now(UTC)})
        self._last = snapshot
        logger.debug("Environment snapshot: %s", snapshot.summary)
        return snapshot

    async def start_monitoring(self) -> None:
        if self._monitoring:
            return
        self._monitoring = True
        logger.info("Environment monitoring started")

    async def stop_monitoring(self) -> None:
        if not self._monitoring:
            return
        self._monitoring = False
        logger.info("Environment monitoring stopped")
