"""ContextAssembler — gathers history, memory and environment in parallel.

The three sources are fetched concurrently under one deadline. Conversation
history and semantic search are mandatory: if either fails the whole build
fails. The environment snapshot is best-effort and degrades to an empty
snapshot on error.
"""

from __future__ import annotations

import asyncio
import logging
import time
from typing import TYPE_CHECKING

from pydantic import BaseModel, ConfigDict, Field

from src.context.models import ConversationMessage, MemoryFragment, MessageRole
from src.context.packet import (
    DEFAULT_SALIENCE_WEIGHTS,
    ContextMetadata,
    ContextPacket,
    SalienceWeights,
)
from src.sensors.models import EnvironmentSnapshot

if TYPE_CHECKING:
    from src.config import Settings
    from src.memory.thread_store import ThreadStore
    from src.memory.vector_store import VectorStore
    from src.sensors.source import EnvironmentSource

logger = logging.getLogger(__name__)


# -- Errors ------------------------------------------------------------------


class ContextAssemblyError(Exception):
    """Base class for failures that prevent a packet from being built."""


class ThreadStorageUnavailable(ContextAssemblyError):
    def __init__(self) -> None:
        super().__init__("Thread storage is not available")


class VectorStoreUnavailable(ContextAssemblyError):
    def __init__(self) -> None:
        super().__init__("Vector store is not available")


class AssemblyTimeout(ContextAssemblyError):
    def __init__(self, timeout: float) -> None:
        super().__init__(f"Context building timed out after {timeout:.2f}s")
        self.timeout = timeout


# -- Configuration -----------------------------------------------------------


class AssemblerConfig(BaseModel):
    """Limits and switches for a ContextAssembler."""

    model_config = ConfigDict(frozen=True)

    max_recent_messages: int = Field(default=5, ge=0)
    max_semantic_memories: int = Field(default=5, ge=0)
    semantic_similarity_threshold: float = Field(default=0.5, ge=0.0, le=1.0)
    include_system_messages: bool = False
    include_sensor_data: bool = True
    timeout_seconds: float = Field(default=10.0, gt=0)

    @classmethod
    def from_settings(cls, s: Settings) -> AssemblerConfig:
        return cls(
            max_recent_messages=s.context_max_recent_messages,
            max_semantic_memories=s.context_max_semantic_memories,
            semantic_similarity_threshold=s.context_similarity_threshold,
            include_system_messages=s.context_include_system_messages,
            include_sensor_data=s.context_include_sensor_data,
            timeout_seconds=s.context_timeout_seconds,
        )


# -- Assembler ---------------------------------------------------------------


class ContextAssembler:
    """Builds ContextPackets from three independent collaborators.

    Collaborators are injected; each must tolerate concurrent calls.

    Args:
        thread_store: Conversation history source.
        vector_store: Semantic memory source.
        environment: Environment snapshot source.
        config: Limits and timeout (defaults apply when omitted).
    """

    def __init__(
        self,
        thread_store: ThreadStore,
        vector_store: VectorStore,
        environment: EnvironmentSource,
        config: AssemblerConfig | None = None,
    ) -> None:
        self._threads = thread_store
        self._vectors = vector_store
        self._environment = environment
        self._config = config or AssemblerConfig()

    @property
    def config(self) -> AssemblerConfig:
        return self._config

    async def build_context(
        self,
        query: str,
        thread_id: str,
        weights: SalienceWeights | None = None,
    ) -> ContextPacket:
        """Assemble a packet for *query* in *thread_id*.

        Raises:
            ThreadStorageUnavailable: history fetch failed.
            VectorStoreUnavailable: semantic search failed.
            AssemblyTimeout: the fetches did not finish within the timeout.
        """
        start = time.monotonic()
        timeout = self._config.timeout_seconds
        logger.info("Building context for thread %s: %r", thread_id, query[:80])

        try:
            async with asyncio.timeout(timeout):
                async with asyncio.TaskGroup() as tg:
                    history_task = tg.create_task(self._fetch_thread_history(thread_id))
                    memory_task = tg.create_task(self._fetch_semantic_memory(query))
                    env_task = tg.create_task(self._fetch_environment())
        except TimeoutError as exc:
            logger.warning("Context build for thread %s timed out after %.2fs", thread_id, timeout)
            raise AssemblyTimeout(timeout) from exc
        except ExceptionGroup as group:
            # A failed mandatory fetch cancels its siblings; surface the first failure.
            raise group.exceptions[0]  # noqa: B904

        history = history_task.result()
        memory = memory_task.result()
        environment = env_task.result()
        duration = time.monotonic() - start

        packet = ContextPacket(
            thread_history=history,
            semantic_memory=memory,
            environment=environment,
            metadata=ContextMetadata(
                build_duration=duration,
                salience_weights=weights or DEFAULT_SALIENCE_WEIGHTS,
            ),
        )
        logger.info(
            "Context built in %.2fs: %d message(s), %d fragment(s), sensors %s",
            duration,
            len(history),
            len(memory),
            "available" if environment.has_data else "unavailable",
        )
        return packet

    # -- Fetchers ------------------------------------------------------------

    async def _fetch_thread_history(self, thread_id: str) -> list[ConversationMessage]:
        try:
            messages = await self._threads.fetch_recent_messages(
                thread_id, limit=self._config.max_recent_messages
            )
        except Exception as exc:
            logger.warning("Failed to fetch thread history: %s", exc)
            raise ThreadStorageUnavailable from exc

        if not self._config.include_system_messages:
            messages = [m for m in messages if m.role != MessageRole.SYSTEM]
        return messages

    async def _fetch_semantic_memory(self, query: str) -> list[MemoryFragment]:
        try:
            return await self._vectors.search(
                query,
                limit=self._config.max_semantic_memories,
                threshold=self._config.semantic_similarity_threshold,
            )
        except Exception as exc:
            logger.warning("Failed to fetch semantic memory: %s", exc)
            raise VectorStoreUnavailable from exc

    async def _fetch_environment(self) -> EnvironmentSnapshot:
        if not self._config.include_sensor_data:
            return EnvironmentSnapshot()
        try:
            return await self._environment.get_current_snapshot()
        except Exception as exc:
            logger.warning("Environment snapshot unavailable, continuing without it: %s", exc)
            return EnvironmentSnapshot()
