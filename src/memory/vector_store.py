"""VectorStore protocol and an in-memory implementation."""

from __future__ import annotations

import asyncio
import logging
from typing import TYPE_CHECKING, Protocol, runtime_checkable

from src.context.models import MemoryFragment, MemoryMetadata, MemorySource
from src.memory.embeddings import Embedder, HashingEmbedder
from src.memory.similarity import cosine_similarity

if TYPE_CHECKING:
    from collections.abc import Iterable

logger = logging.getLogger(__name__)


class StoreUnavailable(Exception):
    """The vector store could not be reached or queried."""


@runtime_checkable
class VectorStore(Protocol):
    """Protocol for semantic memory backends."""

    async def search(
        self, query: str, limit: int = 5, threshold: float = 0.5
    ) -> list[MemoryFragment]:
        """Return fragments most-similar-first, filtered by *threshold*."""
        ...

    async def store(self, fragment: MemoryFragment) -> None: ...

    async def delete(self, fragment_id: str) -> bool: ...

    async def count(self) -> int: ...


class InMemoryVectorStore:
    """Append-only fragment list searched by brute-force cosine similarity.

    Writers are serialized by a lock and replace the list rather than
    mutating it, so a search always works over a consistent snapshot.

    Args:
        embedder: Used to embed queries and text added via ``add_text``.
        fragments: Optional initial contents.
    """

    def __init__(
        self,
        embedder: Embedder | None = None,
        fragments: Iterable[MemoryFragment] = (),
    ) -> None:
        self._embedder = embedder or HashingEmbedder()
        self._fragments: list[MemoryFragment] = list(fragments)
        self._write_lock = asyncio.Lock()

    @property
    def embedder(self) -> Embedder:
        return self._embedder

    # -- Read ----------------------------------------------------------------

    async def search(
        self, query: str, limit: int = 5, threshold: float = 0.5
    ) -> list[MemoryFragment]:
        if limit <= 0:
            return []

        snapshot = self._fragments
        query_vec = self._embedder.embed(query)

        scored = [
            (fragment, cosine_similarity(query_vec, fragment.embedding)) for fragment in snapshot
        ]
        scored = [pair for pair in scored if pair[1] >= threshold]
        scored.sort(key=lambda pair: pair[1], reverse=True)

        results = [fragment for fragment, _ in scored[:limit]]
        logger.debug(
            "Vector search %r: %d/%d above %.2f", query[:60], len(results), len(snapshot), threshold
        )
        return results

    async def count(self) -> int:
        return len(self._fragments)

    # -- Write ---------------------------------------------------------------

    async def store(self, fragment: MemoryFragment) -> None:
        async with self._write_lock:
            self._fragments = [*self._fragments, fragment]
        logger.debug("Stored fragment %s", fragment.id)

    async def add_text(
        self,
        content: str,
        source: MemorySource = MemorySource.USER_INPUT,
        metadata: MemoryMetadata | None = None,
    ) -> MemoryFragment:
        """Embed *content* and store it as a new fragment."""
        fragment = MemoryFragment(
            content=content,
            embedding=self._embedder.embed(content),
            source=source,
            metadata=metadata,
        )
        await self.store(fragment)
        return fragment

    async def delete(self, fragment_id: str) -> bool:
        async with self._write_lock:
            remaining = [f for f in self._fragments if f.id != fragment_id]
            removed = len(remaining) != len(self._fragments)
            self._fragments = remaining
        if removed:
            logger.info("Deleted fragment %s", fragment_id)
        return removed
