"""Dreamflow entry point."""

import asyncio
import logging

from src.config import settings
from src.context.assembler import AssemblerConfig, ContextAssembler
from src.llm.router import ModelRouter
from src.logs import configure_logging
from src.memory.thread_store import InMemoryThreadStore
from src.memory.vector_store import InMemoryVectorStore, VectorStore
from src.reflection.aggregator import ReflectionAggregator
from src.reflection.log import ReflectionLog
from src.reflection.models import DigestRecord
from src.reflection.runner import ReflectionRunner
from src.scheduler.engine import NightlyScheduler
from src.sensors.source import StaticEnvironmentSource

logger = logging.getLogger(__name__)


def _vector_store() -> VectorStore:
    if settings.mem0_api_key:
        from src.memory.mem0_store import Mem0VectorStore

        logger.info("Semantic memory: hosted mode (Mem0 cloud)")
        return Mem0VectorStore()
    logger.warning("Semantic memory: in-memory only — set MEM0_API_KEY to persist")
    return InMemoryVectorStore()


def build_runner() -> ReflectionRunner:
    """Wire the pipeline from settings."""
    router = ModelRouter.from_settings(settings)
    assembler = ContextAssembler(
        thread_store=InMemoryThreadStore(),
        vector_store=_vector_store(),
        environment=StaticEnvironmentSource(),
        config=AssemblerConfig.from_settings(settings),
    )
    return ReflectionRunner(
        assembler=assembler,
        router=router,
        log=ReflectionLog(),
        aggregator=ReflectionAggregator(router=router, use_llm=settings.digest_use_llm),
        window_days=settings.digest_window_days,
        model_name=settings.chat_model,
    )


async def _log_digest(digest: DigestRecord) -> None:
    logger.info("Morning digest:\n%s", digest.as_plain_text())


async def run() -> None:
    scheduler = NightlyScheduler(
        build_runner(),
        thread_id=settings.dreamflow_thread_id,
        query=settings.dreamflow_query,
        on_digest=_log_digest,
    )
    await scheduler.start()
    try:
        await asyncio.Event().wait()
    finally:
        await scheduler.stop()


def main() -> None:
    """Start the nightly reflection scheduler."""
    configure_logging()
    if not settings.dreamflow_enabled:
        logger.warning("DREAMFLOW_ENABLED is false — nothing to do")
        return
    if not settings.anthropic_api_key:
        logger.warning("ANTHROPIC_API_KEY is empty — reflection cycles will fail")

    logger.info("Starting Dreamflow with model %s...", settings.chat_model)
    asyncio.run(run())


if __name__ == "__main__":
    main()
