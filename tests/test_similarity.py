"""Tests for cosine similarity."""

import math

import pytest

from src.context.models import MemoryFragment, MemorySource
from src.memory.similarity import cosine_similarity


def test_identical_vectors_are_one() -> None:
    v = [0.3, -1.2, 4.0]
    assert cosine_similarity(v, v) == pytest.approx(1.0)


def test_symmetric() -> None:
    a = [1.0, 2.0, 3.0]
    b = [-2.0, 0.5, 1.0]
    assert cosine_similarity(a, b) == pytest.approx(cosine_similarity(b, a))


def test_orthogonal_vectors_are_zero() -> None:
    assert cosine_similarity([1.0, 0.0], [0.0, 1.0]) == pytest.approx(0.0)


def test_opposite_vectors_are_minus_one() -> None:
    assert cosine_similarity([1.0, 2.0], [-1.0, -2.0]) == pytest.approx(-1.0)


def test_mismatched_lengths_are_zero() -> None:
    assert cosine_similarity([1.0, 2.0], [1.0, 2.0, 3.0]) == 0.0


def test_zero_magnitude_is_zero() -> None:
    assert cosine_similarity([0.0, 0.0], [1.0, 1.0]) == 0.0


def test_empty_vectors_are_zero() -> None:
    assert cosine_similarity([], []) == 0.0


def test_scale_invariant() -> None:
    a = [1.0, 2.0, 2.0]
    b = [2.0, 4.0, 4.0]
    assert cosine_similarity(a, b) == pytest.approx(1.0)
    assert math.isclose(cosine_similarity(a, [3.0, 0.0, 0.0]), 1 / 3)


def test_fragment_similarity_uses_embeddings() -> None:
    a = MemoryFragment(content="a", embedding=[1.0, 0.0], source=MemorySource.DOCUMENT)
    b = MemoryFragment(content="b", embedding=[1.0, 0.0], source=MemorySource.WEB)
    c = MemoryFragment(content="c", embedding=[1.0, 0.0, 0.0], source=MemorySource.WEB)
    assert a.similarity(b) == pytest.approx(1.0)
    assert a.similarity(c) == 0.0
