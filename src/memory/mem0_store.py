"""VectorStore backed by Mem0's hosted platform.

Mem0 does its own embedding and ranking; returned fragments carry the
relevance score in ``metadata.importance`` and an empty embedding.
Any client failure surfaces as ``StoreUnavailable`` so the context
assembler can report the outage.
"""

import logging
from datetime import UTC, datetime
from typing import Any

from src.config import settings
from src.context.models import MemoryFragment, MemoryMetadata, MemorySource
from src.memory.vector_store import StoreUnavailable

logger = logging.getLogger(__name__)


class Mem0VectorStore:
    """Semantic memory on Mem0 for a single user."""

    def __init__(self, client: Any = None, user_id: str = "owner") -> None:
        if client is None:
            from mem0 import AsyncMemoryClient

            client = AsyncMemoryClient(api_key=settings.mem0_api_key)
        self._client = client
        self._user_id = user_id

    # -- Read ----------------------------------------------------------------

    async def search(
        self, query: str, limit: int = 5, threshold: float = 0.5
    ) -> list[MemoryFragment]:
        if limit <= 0:
            return []
        try:
            raw = await self._client.search(query, user_id=self._user_id, limit=limit)
        except Exception as exc:
            logger.exception("Mem0 search failed")
            raise StoreUnavailable(str(exc)) from exc

        fragments = [
            fragment
            for fragment, score in self._normalize(raw)
            if score >= threshold
        ]
        return fragments[:limit]

    async def count(self) -> int:
        try:
            raw = await self._client.get_all(user_id=self._user_id)
        except Exception as exc:
            logger.exception("Failed to count Mem0 memories")
            raise StoreUnavailable(str(exc)) from exc
        return len(self._normalize(raw))

    # -- Write ---------------------------------------------------------------

    async def store(self, fragment: MemoryFragment) -> None:
        metadata = {
            "source": fragment.source.value,
            "fragment_id": fragment.id,
            "created_at": fragment.created_at.isoformat(),
        }
        if fragment.metadata and fragment.metadata.tags:
            metadata["tags"] = ",".join(fragment.metadata.tags)
        try:
            await self._client.add(fragment.content, user_id=self._user_id, metadata=metadata)
        except Exception as exc:
            logger.exception("Failed to store memory")
            raise StoreUnavailable(str(exc)) from exc
        logger.debug("Stored memory [%s]: %s", fragment.source, fragment.content[:80])

    async def delete(self, fragment_id: str) -> bool:
        try:
            await self._client.delete(fragment_id)
        except Exception:
            logger.exception("Failed to delete memory %s", fragment_id)
            return False
        logger.info("Deleted memory: %s", fragment_id)
        return True

    # -- Helpers -------------------------------------------------------------

    @staticmethod
    def _normalize(raw: Any) -> list[tuple[MemoryFragment, float]]:
        """Convert Mem0 results into (fragment, score) pairs, preserving order."""
        if isinstance(raw, dict):
            items = raw.get("results", [])
        elif isinstance(raw, list):
            items = raw
        else:
            items = []

        pairs = []
        for item in items:
            meta = item.get("metadata", {}) or {}
            score = float(item.get("score", 0.0) or 0.0)
            try:
                source = MemorySource(meta.get("source", MemorySource.CONVERSATION))
            except ValueError:
                source = MemorySource.CONVERSATION

            created = meta.get("created_at") or item.get("created_at")
            try:
                created_at = datetime.fromisoformat(created) if created else datetime.now(UTC)
            except ValueError:
                created_at = datetime.now(UTC)

            fragment = MemoryFragment(
                id=item.get("id", ""),
                content=item.get("memory", ""),
                embedding=[],
                source=source,
                created_at=created_at,
                metadata=MemoryMetadata(importance=min(max(score, 0.0), 1.0)),
            )
            pairs.append((fragment, score))
        return pairs
