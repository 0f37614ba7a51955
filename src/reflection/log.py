"""ReflectionLog — append-only in-memory store of reflection records."""

from __future__ import annotations

import asyncio
import logging
from datetime import UTC, datetime, timedelta
from typing import TYPE_CHECKING

from src.reflection.models import as_utc

if TYPE_CHECKING:
    from src.reflection.models import ReflectionRecord

logger = logging.getLogger(__name__)


class ReflectionLog:
    """Holds reflection records in date order.

    Appends are serialized by a lock and publish a new list, so concurrent
    readers always see a complete snapshot.
    """

    def __init__(self) -> None:
        self._records: list[ReflectionRecord] = []
        self._write_lock = asyncio.Lock()

    async def append(self, record: ReflectionRecord) -> None:
        async with self._write_lock:
            self._records = sorted([*self._records, record], key=lambda r: r.date)
        logger.debug("Logged reflection %s (%s)", record.id, record.date.isoformat())

    async def all(self) -> list[ReflectionRecord]:
        return list(self._records)

    async def count(self) -> int:
        return len(self._records)

    async def recent(self, days: int, until: datetime | None = None) -> list[ReflectionRecord]:
        """Records dated within *days* before *until* (inclusive), oldest first."""
        until = as_utc(until) if until is not None else datetime.now(UTC)
        since = until - timedelta(days=days)
        return [r for r in self._records if since <= r.date <= until]
