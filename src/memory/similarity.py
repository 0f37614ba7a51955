"""Vector similarity."""

import math
from collections.abc import Sequence


def cosine_similarity(a: Sequence[float], b: Sequence[float]) -> float:
    """Cosine similarity of two equal-length vectors.

    Returns 0.0 when the lengths differ or either vector has zero magnitude.
    """
    if len(a) != len(b):
        return 0.0

    dot = 0.0
    mag_a = 0.0
    mag_b = 0.0
    for x, y in zip(a, b, strict=True):
        dot += x * y
        mag_a += x * x
        mag_b += y * y

    magnitude = math.sqrt(mag_a) * math.sqrt(mag_b)
    if magnitude == 0:
        return 0.0
    return dot / magnitude
