"""Tests for ReflectionRunner — one cycle from context to logged record."""

import json
from datetime import UTC, datetime, timedelta
from unittest.mock import AsyncMock

import pytest

from src.context.assembler import ContextAssembler, ThreadStorageUnavailable
from src.context.models import ConversationMessage, MessageRole
from src.context.packet import ContextPacket
from src.llm.router import ProviderError
from src.memory.thread_store import InMemoryThreadStore
from src.memory.vector_store import InMemoryVectorStore
from src.reflection.aggregator import FALLBACK_HEADLINE, ReflectionAggregator
from src.reflection.log import ReflectionLog
from src.reflection.runner import ReflectionCycleError, ReflectionRunner
from src.sensors.models import ActivityType, EnvironmentSnapshot
from src.sensors.source import StaticEnvironmentSource

DATE = datetime(2025, 3, 4, 3, 0, tzinfo=UTC)

REFLECTION = json.dumps(
    {
        "summary": "A productive day of coding.",
        "moodSketch": "Focused and calm.",
        "foresight": "Consider an early night",
        "anchors": ["coding"],
    }
)


@pytest.fixture
async def assembler() -> ContextAssembler:
    threads = InMemoryThreadStore()
    await threads.store_message(
        ConversationMessage(role=MessageRole.USER, content="Finished the parser"), "t1"
    )
    await threads.store_message(
        ConversationMessage(role=MessageRole.ASSISTANT, content="Nice work"), "t1"
    )
    return ContextAssembler(
        thread_store=threads,
        vector_store=InMemoryVectorStore(),
        environment=StaticEnvironmentSource(EnvironmentSnapshot(activity=ActivityType.WALKING)),
    )


@pytest.fixture
def router() -> AsyncMock:
    router = AsyncMock()
    router.route_request.return_value = REFLECTION
    return router


@pytest.fixture
def log() -> ReflectionLog:
    return ReflectionLog()


@pytest.fixture
def runner(assembler, router, log) -> ReflectionRunner:
    return ReflectionRunner(
        assembler=assembler,
        router=router,
        log=log,
        aggregator=ReflectionAggregator(use_llm=False),
        window_days=7,
        model_name="claude-test-model",
    )


# -- run_cycle -----------------------------------------------------------------


async def test_run_cycle_logs_record(runner, router, log) -> None:
    record = await runner.run_cycle("What happened today?", "t1", date=DATE)

    assert record.date == DATE
    assert record.summary == "A productive day of coding."
    assert record.mood_sketch == "Focused and calm."
    assert record.foresight == "Consider an early night"
    assert record.anchors == ["coding"]
    assert record.model_used == "claude-test-model"
    assert record.duration >= 0
    assert record.context_stats.model_dump() == {
        "message_count": 2,
        "fragment_count": 0,
        "snapshot_count": 1,
    }
    assert "user: Finished the parser" in record.raw_prompt

    router.route_request.assert_awaited_once_with(record.raw_prompt)
    assert await log.all() == [record]


async def test_run_cycle_context_failure(router, log) -> None:
    assembler = AsyncMock()
    assembler.build_context.side_effect = ThreadStorageUnavailable()
    runner = ReflectionRunner(assembler, router, log, ReflectionAggregator(use_llm=False))

    with pytest.raises(ReflectionCycleError, match="Thread storage"):
        await runner.run_cycle("q", "t1")

    router.route_request.assert_not_awaited()
    assert await log.count() == 0


async def test_run_cycle_provider_failure(runner, router, log) -> None:
    router.route_request.side_effect = ProviderError("All generators failed")

    with pytest.raises(ProviderError):
        await runner.run_cycle("q", "t1")

    assert await log.count() == 0


async def test_run_cycle_without_sensors(router, log) -> None:
    assembler = AsyncMock()
    assembler.build_context.return_value = ContextPacket()
    runner = ReflectionRunner(assembler, router, log, ReflectionAggregator(use_llm=False))

    record = await runner.run_cycle("q", "t1", date=DATE)
    assert record.context_stats.snapshot_count == 0


# -- generate_digest -----------------------------------------------------------


async def test_generate_digest_over_window(runner, router) -> None:
    for day in range(3):
        await runner.run_cycle("q", "t1", date=DATE + timedelta(days=day))

    digest = await runner.generate_digest(date=DATE + timedelta(days=2, hours=5))

    assert len(digest.source_ids) == 3
    assert digest.headline == "A 3 days of coding and reflection"
    assert digest.actionable_items == ["Consider an early night"] * 3


async def test_generate_digest_empty_log(runner) -> None:
    digest = await runner.generate_digest(date=DATE)
    assert digest.headline == FALLBACK_HEADLINE
    assert digest.source_ids == []


async def test_generate_digest_ignores_old_records(runner) -> None:
    await runner.run_cycle("q", "t1", date=DATE - timedelta(days=30))
    await runner.run_cycle("q", "t1", date=DATE)

    digest = await runner.generate_digest(date=DATE)
    assert len(digest.source_ids) == 1


async def test_naive_dates_do_not_break_digest(runner) -> None:
    naive = datetime(2025, 3, 3, 3, 0)
    record = await runner.run_cycle("q", "t1", date=naive)

    digest = await runner.generate_digest(date=naive + timedelta(hours=1))

    assert record.date.tzinfo is UTC
    assert digest.source_ids == [record.id]
