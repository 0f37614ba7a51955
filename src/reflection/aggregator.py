"""ReflectionAggregator — turns a window of reflection records into a digest.

Two modes:

- Rule-based (always available): anchor frequency counts and mood keyword
  matching. Pure function of the records; cannot fail.
- LLM-delegated (when enabled and a router is wired): one prompt over all
  records, parsed through ``parse_digest_response``. Provider failures
  propagate; malformed responses degrade to scraped or placeholder content.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import UTC, datetime
from typing import TYPE_CHECKING

from src.reflection.analysis import (
    analyze_mood_trend,
    anchor_frequencies,
    most_frequent_anchor,
    top_anchors,
)
from src.reflection.models import DigestRecord
from src.reflection.parsing import (
    DigestContent,
    ParseOutcome,
    ParseStage,
    parse_digest_response,
)

if TYPE_CHECKING:
    from collections.abc import Sequence

    from src.llm.router import RequestRouter
    from src.reflection.models import ReflectionRecord

logger = logging.getLogger(__name__)

FALLBACK_HEADLINE = "Quiet day, light dreams"
FALLBACK_INSIGHTS = (
    "No tracked activity or reflections for this period",
    "Consider running a nightly reflection to capture today's insights",
)
FALLBACK_ACTIONS = (
    "Enable nightly reflections",
    "Review your day and note any interesting patterns",
)

ACTION_KEYWORDS = ("consider", "recommend", "suggest", "try")
MAX_ACTIONABLE_ITEMS = 3

MIN_RECORDS_FOR_PATTERNS = 3
MIN_ANCHOR_REPEATS = 3
DETAILED_SUMMARY_CHARS = 200


def _plural(count: int, word: str) -> str:
    return f"{count} {word}" if count == 1 else f"{count} {word}s"


@dataclass(frozen=True)
class AggregationResult:
    """A digest plus the LLM parse stage that produced it (None if rule-based)."""

    digest: DigestRecord
    stage: ParseStage | None = None


class ReflectionAggregator:
    """Builds DigestRecords from reflection records.

    Args:
        router: Text generation collaborator for LLM mode. Without one the
            aggregator is always rule-based.
        use_llm: Request LLM mode. Effective only when *router* is set.
    """

    def __init__(self, router: RequestRouter | None = None, use_llm: bool = True) -> None:
        self._router = router
        self._use_llm = use_llm and router is not None
        logger.info("Reflection aggregator ready (llm=%s)", self._use_llm)

    @property
    def uses_llm(self) -> bool:
        return self._use_llm

    async def aggregate(
        self,
        records: Sequence[ReflectionRecord],
        date: datetime | None = None,
    ) -> DigestRecord:
        """Produce one digest for *records* dated *date* (default: now).

        Records are sorted by date before use. An empty list yields the
        fixed fallback digest.

        Raises:
            ProviderError: only in LLM mode, when the router fails.
        """
        result = await self.aggregate_detailed(records, date)
        return result.digest

    async def aggregate_detailed(
        self,
        records: Sequence[ReflectionRecord],
        date: datetime | None = None,
    ) -> AggregationResult:
        """Like ``aggregate`` but also reports which LLM parse stage fired."""
        date = date or datetime.now(UTC)
        if not records:
            logger.info("No reflection records; returning fallback digest")
            return AggregationResult(self.fallback_digest(date))

        ordered = sorted(records, key=lambda r: r.date)
        logger.info("Aggregating %d reflection record(s)", len(ordered))

        stage: ParseStage | None = None
        if self._use_llm and self._router is not None:
            outcome = await self._generate_with_llm(ordered, self._router)
            content, stage = outcome.content, outcome.stage
        else:
            content = self.rule_based_content(ordered)

        digest = DigestRecord(
            date=date,
            headline=content.headline,
            key_insights=content.key_insights,
            mood_trend=content.mood_trend,
            actionable_items=content.actionable_items,
            weekly_patterns=content.weekly_patterns,
            source_ids=[r.id for r in ordered],
        )
        logger.info("Digest generated: %r", digest.headline)
        return AggregationResult(digest, stage)

    @staticmethod
    def fallback_digest(date: datetime) -> DigestRecord:
        return DigestRecord(
            date=date,
            headline=FALLBACK_HEADLINE,
            key_insights=list(FALLBACK_INSIGHTS),
            mood_trend=None,
            actionable_items=list(FALLBACK_ACTIONS),
            weekly_patterns=None,
            source_ids=[],
        )

    # -- Rule-based ------------------------------------------------------------

    def rule_based_content(self, records: Sequence[ReflectionRecord]) -> DigestContent:
        return DigestContent(
            headline=self.headline(records),
            key_insights=self.key_insights(records),
            mood_trend=analyze_mood_trend(records),
            actionable_items=self.actionable_items(records),
            weekly_patterns=self.weekly_patterns(records),
        )

    @staticmethod
    def headline(records: Sequence[ReflectionRecord]) -> str:
        anchor = most_frequent_anchor(records)
        days = len(records)
        if days == 1:
            if anchor:
                return f"A day focused on {anchor.lower()}"
            return "A day of reflection and growth"

        timeframe = "week" if days == 7 else f"{days} days"
        if anchor:
            return f"A {timeframe} of {anchor.lower()} and reflection"
        return f"Insights from the past {timeframe}"

    @staticmethod
    def key_insights(records: Sequence[ReflectionRecord]) -> list[str]:
        insights = [f"Reflected on {_plural(len(records), 'day')} of activity"]

        themes = top_anchors(records, 3)
        if themes:
            insights.append("Key themes: " + ", ".join(anchor for anchor, _ in themes))

        trend = analyze_mood_trend(records)
        if trend:
            insights.append(f"Mood: {trend}")

        foresight = sum(1 for r in records if r.foresight is not None)
        if foresight:
            insights.append(f"Generated {_plural(foresight, 'foresight insight')}")

        return insights

    @staticmethod
    def actionable_items(records: Sequence[ReflectionRecord]) -> list[str]:
        items: list[str] = []
        for record in records:
            if record.foresight is None:
                continue
            for line in record.foresight.splitlines():
                lowered = line.lower()
                if any(keyword in lowered for keyword in ACTION_KEYWORDS) and line.strip():
                    items.append(line.strip())

        if not items:
            anchor = most_frequent_anchor(records)
            if anchor:
                items.append(f"Continue exploring themes around {anchor.lower()}")
            items.append("Review yesterday's reflections for patterns")

        return items[:MAX_ACTIONABLE_ITEMS]

    @staticmethod
    def weekly_patterns(records: Sequence[ReflectionRecord]) -> list[str] | None:
        """Recurring observations, or None below the record threshold or if none hold."""
        if len(records) < MIN_RECORDS_FOR_PATTERNS:
            return None

        patterns: list[str] = []

        frequencies = anchor_frequencies(records).most_common(1)
        if frequencies and frequencies[0][1] >= MIN_ANCHOR_REPEATS:
            anchor, count = frequencies[0]
            patterns.append(f"{anchor} appeared in {count} reflections")

        with_mood = sum(1 for r in records if r.mood_sketch is not None)
        if with_mood * 2 >= len(records):
            patterns.append(f"Consistent mood tracking across {_plural(with_mood, 'day')}")

        avg_length = sum(len(r.summary) for r in records) // len(records)
        if avg_length > DETAILED_SUMMARY_CHARS:
            patterns.append(f"Detailed daily reflections (avg {avg_length} chars)")

        return patterns or None

    # -- LLM-delegated ---------------------------------------------------------

    @staticmethod
    def build_prompt(records: Sequence[ReflectionRecord]) -> str:
        blocks = []
        for record in records:
            lines = [f"Date: {record.date:%b %d, %Y}", f"Summary: {record.summary}"]
            if record.mood_sketch:
                lines.append(f"Mood: {record.mood_sketch}")
            if record.foresight:
                lines.append(f"Foresight: {record.foresight}")
            lines.append(f"Anchors: {', '.join(record.anchors)}")
            blocks.append("\n".join(lines))
        summaries = "\n\n---\n\n".join(blocks)

        return (
            f"Based on the following daily reflections from the past {len(records)} days, "
            "create a morning digest:\n\n"
            f"{summaries}\n\n"
            "Generate a structured response with:\n\n"
            "1. **Headline** (1 compelling sentence summarizing the period)\n"
            "2. **Key Insights** (3-5 bullet points of notable patterns or themes)\n"
            "3. **Mood Trend** (1 sentence describing emotional trajectory)\n"
            "4. **Actionable Items** (2-3 concrete suggestions for today)\n"
            "5. **Weekly Patterns** (optional: recurring themes across days)\n\n"
            "Format as JSON:\n"
            "{\n"
            '  "headline": "...",\n'
            '  "keyInsights": ["...", "..."],\n'
            '  "moodTrend": "...",\n'
            '  "actionableItems": ["...", "..."],\n'
            '  "weeklyPatterns": ["...", "..."]\n'
            "}\n\n"
            "Keep it concise, actionable, and encouraging."
        )

    async def _generate_with_llm(
        self, records: Sequence[ReflectionRecord], router: RequestRouter
    ) -> ParseOutcome:
        prompt = self.build_prompt(records)
        logger.debug("Requesting LLM digest (%d chars)", len(prompt))
        response = await router.route_request(prompt)

        outcome = parse_digest_response(response)
        logger.info("LLM digest parsed via %s stage", outcome.stage)
        return outcome
