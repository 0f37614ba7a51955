"""NightlyScheduler — APScheduler job that runs the reflection pipeline."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from apscheduler.schedulers.asyncio import AsyncIOScheduler
from apscheduler.triggers.cron import CronTrigger

from src.config import settings

if TYPE_CHECKING:
    from collections.abc import Awaitable, Callable

    from src.reflection.models import DigestRecord
    from src.reflection.runner import ReflectionRunner

logger = logging.getLogger(__name__)

JOB_ID = "nightly-reflection"


class NightlyScheduler:
    """Runs one reflection cycle and then a digest at a fixed hour each day.

    Args:
        runner: ReflectionRunner that does the work.
        thread_id: Conversation thread to reflect on.
        query: Seed text for semantic memory search.
        hour: Local hour (0-23) to run at (default from settings).
        timezone: IANA timezone string (default from settings).
        on_digest: Optional async callback receiving each new digest.
    """

    def __init__(
        self,
        runner: ReflectionRunner,
        thread_id: str,
        query: str = "What happened today?",
        hour: int | None = None,
        timezone: str | None = None,
        on_digest: Callable[[DigestRecord], Awaitable[None]] | None = None,
    ) -> None:
        self._runner = runner
        self._thread_id = thread_id
        self._query = query
        self._hour = settings.dreamflow_hour if hour is None else hour
        self._timezone = timezone or settings.scheduler_timezone
        self._on_digest = on_digest
        self._scheduler = AsyncIOScheduler(timezone=self._timezone)
        self._running = False

    @property
    def running(self) -> bool:
        return self._running

    # -- Lifecycle -------------------------------------------------------------

    async def start(self) -> None:
        """Register the nightly job and start the scheduler."""
        self._scheduler.add_job(
            self._run_job,
            trigger=CronTrigger(hour=self._hour, minute=0, timezone=self._timezone),
            id=JOB_ID,
            name="Nightly reflection",
            misfire_grace_time=None,
            coalesce=True,
            replace_existing=True,
        )
        self._scheduler.start()
        self._running = True
        logger.info("Nightly reflection scheduled at %02d:00 (tz=%s)", self._hour, self._timezone)

    async def stop(self) -> None:
        """Shut down the scheduler."""
        if self._running:
            self._scheduler.shutdown(wait=False)
            self._running = False
            logger.info("Scheduler stopped")

    # -- Execution -------------------------------------------------------------

    async def run_now(self) -> DigestRecord:
        """Run a cycle and produce a digest immediately. Errors propagate."""
        await self._runner.run_cycle(self._query, self._thread_id)
        digest = await self._runner.generate_digest()
        if self._on_digest is not None:
            await self._on_digest(digest)
        return digest

    async def _run_job(self) -> None:
        """Callback invoked by APScheduler. Failures are logged, not raised."""
        try:
            digest = await self.run_now()
        except Exception:
            logger.exception("Nightly reflection failed")
            return
        logger.info("Nightly reflection produced digest: %s", digest.as_short_summary())
