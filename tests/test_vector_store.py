"""Tests for InMemoryVectorStore and HashingEmbedder."""

import asyncio

import pytest

from src.context.models import MemoryFragment, MemoryMetadata, MemorySource
from src.memory.embeddings import Embedder, HashingEmbedder
from src.memory.vector_store import InMemoryVectorStore, VectorStore


class AxisEmbedder:
    """Maps known words onto fixed 2-D vectors."""

    VECTORS = {
        "east": [1.0, 0.0],
        "north": [0.0, 1.0],
        "northeast": [0.7071, 0.7071],
        "mostly east": [0.9, 0.1],
    }

    @property
    def dimension(self) -> int:
        return 2

    def embed(self, text: str) -> list[float]:
        return self.VECTORS.get(text, [0.0, 0.0])


def _fragment(content: str, embedding: list[float]) -> MemoryFragment:
    return MemoryFragment(content=content, embedding=embedding, source=MemorySource.DOCUMENT)


@pytest.fixture
def store() -> InMemoryVectorStore:
    embedder = AxisEmbedder()
    return InMemoryVectorStore(
        embedder=embedder,
        fragments=[
            _fragment("north", embedder.embed("north")),
            _fragment("northeast", embedder.embed("northeast")),
            _fragment("mostly east", embedder.embed("mostly east")),
        ],
    )


# -- search --------------------------------------------------------------------


async def test_search_orders_by_similarity(store: InMemoryVectorStore) -> None:
    results = await store.search("east", limit=5, threshold=0.0)
    assert [f.content for f in results] == ["mostly east", "northeast", "north"]


async def test_search_applies_threshold(store: InMemoryVectorStore) -> None:
    results = await store.search("east", limit=5, threshold=0.5)
    assert [f.content for f in results] == ["mostly east", "northeast"]


async def test_search_applies_limit(store: InMemoryVectorStore) -> None:
    results = await store.search("east", limit=1, threshold=0.0)
    assert [f.content for f in results] == ["mostly east"]


async def test_search_zero_limit(store: InMemoryVectorStore) -> None:
    assert await store.search("east", limit=0) == []


async def test_search_empty_store() -> None:
    assert await InMemoryVectorStore().search("anything") == []


async def test_search_skips_mismatched_dimensions() -> None:
    store = InMemoryVectorStore(
        embedder=AxisEmbedder(), fragments=[_fragment("odd", [1.0, 0.0, 0.0])]
    )
    assert await store.search("east", threshold=0.1) == []


# -- write ---------------------------------------------------------------------


async def test_store_and_count() -> None:
    store = InMemoryVectorStore(embedder=AxisEmbedder())
    assert await store.count() == 0
    await store.store(_fragment("east", [1.0, 0.0]))
    assert await store.count() == 1


async def test_add_text_embeds_content() -> None:
    store = InMemoryVectorStore()
    fragment = await store.add_text(
        "Walked to the lake",
        source=MemorySource.SENSOR,
        metadata=MemoryMetadata(tags=["outdoors"]),
    )

    assert fragment.source == MemorySource.SENSOR
    assert len(fragment.embedding) == store.embedder.dimension
    results = await store.search("walked to the lake", threshold=0.99)
    assert [r.id for r in results] == [fragment.id]


async def test_delete() -> None:
    store = InMemoryVectorStore()
    fragment = await store.add_text("forget me")
    assert await store.delete(fragment.id) is True
    assert await store.count() == 0
    assert await store.delete(fragment.id) is False


async def test_concurrent_writes_are_not_lost() -> None:
    store = InMemoryVectorStore()
    await asyncio.gather(*(store.add_text(f"note {i}") for i in range(50)))
    assert await store.count() == 50


def test_satisfies_protocol() -> None:
    assert isinstance(InMemoryVectorStore(), VectorStore)


# -- HashingEmbedder -----------------------------------------------------------


def test_hashing_embedder_deterministic() -> None:
    embedder = HashingEmbedder(dimension=16)
    assert embedder.embed("Hello") == embedder.embed("hello")
    assert embedder.embed("hello") != embedder.embed("goodbye")


def test_hashing_embedder_unit_length() -> None:
    vector = HashingEmbedder(dimension=32).embed("anything")
    assert len(vector) == 32
    assert sum(v * v for v in vector) == pytest.approx(1.0)


def test_hashing_embedder_rejects_bad_dimension() -> None:
    with pytest.raises(ValueError, match="dimension"):
        HashingEmbedder(dimension=0)


def test_hashing_embedder_satisfies_protocol() -> None:
    assert isinstance(HashingEmbedder(), Embedder)
