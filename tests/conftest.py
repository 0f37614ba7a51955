"""Shared test fixtures."""

from datetime import UTC, datetime, timedelta

import pytest

from src.reflection.models import ReflectionRecord

BASE_DATE = datetime(2025, 3, 3, 3, 0, tzinfo=UTC)


@pytest.fixture
def make_record():
    """Factory for ReflectionRecords dated one day apart from BASE_DATE."""

    def _make(day: int = 0, summary: str = "A day.", **kwargs) -> ReflectionRecord:
        return ReflectionRecord(
            date=BASE_DATE + timedelta(days=day),
            summary=summary,
            model_used="test-model",
            **kwargs,
        )

    return _make
