"""ReflectionRunner — one nightly cycle from context to logged record."""

from __future__ import annotations

import logging
import time
from datetime import UTC, datetime
from typing import TYPE_CHECKING

from src.context.assembler import ContextAssemblyError
from src.reflection.models import ContextStats, ReflectionRecord
from src.reflection.prompt import build_reflection_prompt, parse_reflection_response

if TYPE_CHECKING:
    from src.context.assembler import ContextAssembler
    from src.llm.router import RequestRouter
    from src.reflection.aggregator import ReflectionAggregator
    from src.reflection.log import ReflectionLog
    from src.reflection.models import DigestRecord

logger = logging.getLogger(__name__)


class ReflectionCycleError(Exception):
    """Context for a reflection cycle could not be assembled."""


class ReflectionRunner:
    """Runs reflection cycles and produces digests over the stored results.

    Args:
        assembler: Builds the context packet for each cycle.
        router: Text generation for the reflection itself.
        log: Where reflection records are appended.
        aggregator: Turns recent records into a digest.
        window_days: How many days of records a digest covers.
        model_name: Recorded on each ReflectionRecord.
    """

    def __init__(
        self,
        assembler: ContextAssembler,
        router: RequestRouter,
        log: ReflectionLog,
        aggregator: ReflectionAggregator,
        window_days: int = 7,
        model_name: str = "",
    ) -> None:
        self._assembler = assembler
        self._router = router
        self._log = log
        self._aggregator = aggregator
        self._window_days = window_days
        self._model_name = model_name

    async def run_cycle(
        self, query: str, thread_id: str, date: datetime | None = None
    ) -> ReflectionRecord:
        """Assemble context, generate a reflection and append it to the log.

        Raises:
            ReflectionCycleError: the context packet could not be built.
            ProviderError: text generation failed.
        """
        date = date or datetime.now(UTC)
        start = time.monotonic()

        try:
            packet = await self._assembler.build_context(query, thread_id)
        except ContextAssemblyError as exc:
            logger.error("Reflection cycle aborted: %s", exc)
            raise ReflectionCycleError(str(exc)) from exc

        prompt = build_reflection_prompt(packet, date)
        response = await self._router.route_request(prompt)
        content = parse_reflection_response(response)

        record = ReflectionRecord(
            date=date,
            summary=content.summary,
            mood_sketch=content.mood_sketch,
            foresight=content.foresight,
            anchors=content.anchors,
            raw_prompt=prompt,
            model_used=self._model_name,
            duration=time.monotonic() - start,
            context_stats=ContextStats(
                message_count=len(packet.thread_history),
                fragment_count=len(packet.semantic_memory),
                snapshot_count=1 if packet.environment.has_data else 0,
            ),
        )
        await self._log.append(record)
        logger.info(
            "Reflection cycle complete in %.2fs (%d anchor(s))",
            record.duration,
            len(record.anchors),
        )
        return record

    async def generate_digest(self, date: datetime | None = None) -> DigestRecord:
        """Aggregate the last ``window_days`` of records into a digest."""
        date = date or datetime.now(UTC)
        records = await self._log.recent(self._window_days, until=date)
        return await self._aggregator.aggregate(records, date)
