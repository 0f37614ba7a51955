"""Text embedders for the in-memory vector store."""

import hashlib
import math
import random
from typing import Protocol, runtime_checkable

DEFAULT_DIMENSION = 384


@runtime_checkable
class Embedder(Protocol):
    """Turns text into a fixed-length vector."""

    @property
    def dimension(self) -> int: ...

    def embed(self, text: str) -> list[float]: ...


class HashingEmbedder:
    """Deterministic pseudo-embedding seeded from a hash of the text.

    Identical text (case-insensitive) always maps to the same unit vector,
    but unrelated texts are not semantically close. Useful for wiring and
    tests; swap in a real model for meaningful recall.
    """

    def __init__(self, dimension: int = DEFAULT_DIMENSION) -> None:
        if dimension <= 0:
            msg = f"dimension must be positive, got {dimension}"
            raise ValueError(msg)
        self._dimension = dimension

    @property
    def dimension(self) -> int:
        return self._dimension

    def embed(self, text: str) -> list[float]:
        digest = hashlib.sha256(text.lower().encode("utf-8")).digest()
        rng = random.Random(int.from_bytes(digest[:8], "big"))
        vector = [rng.random() - 0.5 for _ in range(self._dimension)]
        magnitude = math.sqrt(sum(v * v for v in vector))
        if magnitude == 0:
            return vector
        return [v / magnitude for v in vector]
