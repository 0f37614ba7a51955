"""ThreadStore protocol and an in-memory implementation."""

from __future__ import annotations

import asyncio
import logging
from typing import Protocol, runtime_checkable

from src.context.models import ConversationMessage

logger = logging.getLogger(__name__)


class StorageUnavailable(Exception):
    """Conversation history could not be read or written."""


@runtime_checkable
class ThreadStore(Protocol):
    """Protocol for conversation history backends."""

    async def fetch_recent_messages(
        self, thread_id: str, limit: int = 5
    ) -> list[ConversationMessage]:
        """Return up to *limit* messages, oldest first, ending with the newest."""
        ...

    async def store_message(self, message: ConversationMessage, thread_id: str) -> None: ...


class InMemoryThreadStore:
    """Per-thread message lists held in memory.

    Appends are serialized by a lock and publish a fresh list, so readers
    never observe a half-written thread.
    """

    def __init__(self) -> None:
        self._threads: dict[str, list[ConversationMessage]] = {}
        self._write_lock = asyncio.Lock()

    async def fetch_recent_messages(
        self, thread_id: str, limit: int = 5
    ) -> list[ConversationMessage]:
        if limit <= 0:
            return []
        messages = self._threads.get(thread_id, [])
        recent = messages[-limit:]
        logger.debug("Fetched %d message(s) from thread %s", len(recent), thread_id)
        return list(recent)

    async def store_message(self, message: ConversationMessage, thread_id: str) -> None:
        async with self._write_lock:
            existing = self._threads.get(thread_id, [])
            self._threads[thread_id] = [*existing, message]
        logger.debug("Stored message %s in thread %s", message.id, thread_id)

    async def count(self, thread_id: str) -> int:
        return len(self._threads.get(thread_id, []))
