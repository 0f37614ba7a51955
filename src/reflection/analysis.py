"""Keyword and frequency heuristics over reflection records.

Nothing here is statistical: anchors are counted, mood sketches are
matched against fixed keyword lists by case-insensitive substring.
"""

from __future__ import annotations

from collections import Counter
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from collections.abc import Sequence

    from src.reflection.models import ReflectionRecord

POSITIVE_KEYWORDS = (
    "calm",
    "focused",
    "energized",
    "positive",
    "productive",
    "happy",
    "content",
    "balanced",
)
NEGATIVE_KEYWORDS = (
    "anxious",
    "stressed",
    "frustrated",
    "tired",
    "overwhelmed",
    "scattered",
    "low",
)

# Direction-of-change vocabulary used when comparing early vs late sketches.
IMPROVING_KEYWORDS = (
    "better",
    "improved",
    "positive",
    "energized",
    "calm",
    "focused",
    "productive",
)
DECLINING_KEYWORDS = ("worse", "declined", "negative", "tired", "stressed", "anxious", "scattered")

# One side must exceed the other by more than this factor to dominate.
MOOD_DOMINANCE_RATIO = 1.5

TREND_POSITIVE = "trending positive and stable"
TREND_STRESSED = "showing signs of stress or fatigue"
TREND_MIXED = "mixed but generally balanced"
TREND_NEUTRAL = "steady and neutral"


# -- Anchors -----------------------------------------------------------------


def anchor_frequencies(records: Sequence[ReflectionRecord]) -> Counter[str]:
    """Count anchors across records, keyed in first-seen order."""
    counts: Counter[str] = Counter()
    for record in records:
        counts.update(record.anchors)
    return counts


def top_anchors(records: Sequence[ReflectionRecord], n: int) -> list[tuple[str, int]]:
    """The *n* most frequent anchors. Ties go to the anchor seen first."""
    return anchor_frequencies(records).most_common(n)


def most_frequent_anchor(records: Sequence[ReflectionRecord]) -> str | None:
    top = top_anchors(records, 1)
    return top[0][0] if top else None


# -- Mood --------------------------------------------------------------------


def _keyword_hits(text: str, keywords: Sequence[str]) -> int:
    lowered = text.lower()
    return sum(1 for keyword in keywords if keyword in lowered)


def mood_keyword_counts(sketches: Sequence[str]) -> tuple[int, int]:
    """(positive, negative) keyword hits summed over every sketch.

    Each keyword counts at most once per sketch.
    """
    positive = sum(_keyword_hits(sketch, POSITIVE_KEYWORDS) for sketch in sketches)
    negative = sum(_keyword_hits(sketch, NEGATIVE_KEYWORDS) for sketch in sketches)
    return positive, negative


def classify_mood(sketches: Sequence[str]) -> str | None:
    """Map mood sketches to one of four trend labels, or None if there are none."""
    if not sketches:
        return None

    positive, negative = mood_keyword_counts(sketches)
    if positive > negative * MOOD_DOMINANCE_RATIO:
        return TREND_POSITIVE
    if negative > positive * MOOD_DOMINANCE_RATIO:
        return TREND_STRESSED
    if positive > 0 or negative > 0:
        return TREND_MIXED
    return TREND_NEUTRAL


def mood_sketches(records: Sequence[ReflectionRecord]) -> list[str]:
    return [r.mood_sketch for r in records if r.mood_sketch is not None]


def analyze_mood_trend(records: Sequence[ReflectionRecord]) -> str | None:
    return classify_mood(mood_sketches(records))


def _direction_score(text: str) -> int:
    return _keyword_hits(text, IMPROVING_KEYWORDS) - _keyword_hits(text, DECLINING_KEYWORDS)


def is_mood_trending_up(records: Sequence[ReflectionRecord]) -> bool:
    """Whether later mood sketches read better than earlier ones.

    Splits the date-ordered sketches in half and compares
    (improving - declining) keyword scores. Needs at least two sketches.
    """
    sketches = mood_sketches(records)
    if len(sketches) < 2:
        return False

    midpoint = len(sketches) // 2
    first = " ".join(sketches[:midpoint])
    second = " ".join(sketches[midpoint:])

    return _direction_score(second) > _direction_score(first)


# -- Summaries ---------------------------------------------------------------


def _plural(count: int, word: str) -> str:
    return f"{count} {word}" if count == 1 else f"{count} {word}s"


def summarize_patterns(records: Sequence[ReflectionRecord]) -> str:
    """One-paragraph description of anchors, mood and foresight coverage."""
    sentences: list[str] = []

    if len(records) == 1:
        sentences.append("Single day reflection.")
    else:
        sentences.append(f"Reflecting on {len(records)} days.")

    anchors = top_anchors(records, 3)
    if anchors:
        listed = ", ".join(f"{anchor} ({count}x)" for anchor, count in anchors)
        sentences.append(f"Key themes: {listed}.")

    if is_mood_trending_up(records):
        sentences.append("Mood trending upward.")
    else:
        trend = analyze_mood_trend(records)
        if trend:
            sentences.append(f"Mood: {trend}.")

    with_foresight = sum(1 for r in records if r.foresight is not None)
    if with_foresight:
        sentences.append(f"Generated foresight in {_plural(with_foresight, 'reflection')}.")

    return " ".join(sentences)
