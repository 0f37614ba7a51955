"""Reflection records, digest aggregation and the nightly cycle."""

from src.reflection.aggregator import AggregationResult, ReflectionAggregator
from src.reflection.log import ReflectionLog
from src.reflection.models import ContextStats, DigestRecord, ReflectionRecord
from src.reflection.parsing import ParseOutcome, ParseStage
from src.reflection.runner import ReflectionCycleError, ReflectionRunner

__all__ = [
    "AggregationResult",
    "ContextStats",
    "DigestRecord",
    "ParseOutcome",
    "ParseStage",
    "ReflectionAggregator",
    "ReflectionCycleError",
    "ReflectionLog",
    "ReflectionRecord",
    "ReflectionRunner",
]
