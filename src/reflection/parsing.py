"""Parse an LLM digest response through a three-stage fallback chain.

1. ``PARSED`` — a JSON object with at least a ``headline``.
2. ``SCRAPED`` — no usable JSON, but a ``headline:`` line and bulleted
   sections could be read from the raw text.
3. ``PLACEHOLDER`` — neither worked; a generic digest body is returned.

Parsing never raises. Callers inspect ``ParseOutcome.stage`` to see which
stage produced the content.
"""

from __future__ import annotations

import json
import logging
import re
from dataclasses import dataclass, field
from enum import StrEnum
from typing import Any

logger = logging.getLogger(__name__)

PLACEHOLDER_HEADLINE = "Daily Reflection Summary"
PLACEHOLDER_INSIGHT = "Unable to parse insights"

SECTION_INSIGHTS = "Key Insights"
SECTION_MOOD = "Mood Trend"
SECTION_ACTIONS = "Actionable Items"
SECTION_PATTERNS = "Weekly Patterns"
_SECTIONS = ("headline", SECTION_INSIGHTS, SECTION_MOOD, SECTION_ACTIONS, SECTION_PATTERNS)

_BULLET_RE = re.compile(r"^(?:[-•]|\*(?=\s)|\d+[.)])\s*")
_EDGE_CHARS = "\"'*`, "


class ParseStage(StrEnum):
    PARSED = "parsed"
    SCRAPED = "scraped"
    PLACEHOLDER = "placeholder"


@dataclass(frozen=True)
class DigestContent:
    """The generated parts of a digest, before ids and dates are attached."""

    headline: str
    key_insights: list[str] = field(default_factory=list)
    mood_trend: str | None = None
    actionable_items: list[str] = field(default_factory=list)
    weekly_patterns: list[str] | None = None


@dataclass(frozen=True)
class ParseOutcome:
    stage: ParseStage
    content: DigestContent


def placeholder_content() -> DigestContent:
    return DigestContent(headline=PLACEHOLDER_HEADLINE, key_insights=[PLACEHOLDER_INSIGHT])


# -- Stage 1: JSON -----------------------------------------------------------


def extract_json(text: str) -> str | None:
    """Return the text between the first ``{`` and the last ``}``, if any."""
    start = text.find("{")
    end = text.rfind("}")
    if start < 0 or end <= start:
        return None
    return text[start : end + 1]


def _string_list(value: Any) -> list[str] | None:
    if not isinstance(value, list):
        return None
    return [str(item).strip() for item in value if str(item).strip()]


def _pick(data: dict[str, Any], *keys: str) -> Any:
    for key in keys:
        if key in data:
            return data[key]
    return None


def parse_json_content(text: str) -> DigestContent | None:
    """Read a digest from a JSON object embedded in *text*."""
    raw = extract_json(text)
    if raw is None:
        return None
    try:
        data = json.loads(raw)
    except json.JSONDecodeError:
        return None
    if not isinstance(data, dict):
        return None

    headline = data.get("headline")
    if not isinstance(headline, str) or not headline.strip():
        return None

    mood = _pick(data, "moodTrend", "mood_trend")
    return DigestContent(
        headline=headline.strip(),
        key_insights=_string_list(_pick(data, "keyInsights", "key_insights")) or [],
        mood_trend=mood.strip() if isinstance(mood, str) and mood.strip() else None,
        actionable_items=_string_list(_pick(data, "actionableItems", "actionable_items")) or [],
        weekly_patterns=_string_list(_pick(data, "weeklyPatterns", "weekly_patterns")),
    )


# -- Stage 2: scraping -------------------------------------------------------


def _clean(value: str) -> str:
    return value.strip().strip(_EDGE_CHARS).strip()


def extract_headline(text: str) -> str | None:
    """Text after the first colon on the first line mentioning "headline"."""
    for line in text.splitlines():
        if "headline" not in line.lower() or ":" not in line:
            continue
        value = _clean(line.split(":", 1)[1])
        if value:
            return value
    return None


def _is_other_header(line: str, section: str) -> bool:
    lowered = line.lower()
    return any(name.lower() in lowered for name in _SECTIONS if name != section)


def extract_bullets(text: str, section: str) -> list[str]:
    """Bullet or numbered lines following a *section* header, up to a blank line.

    A blank line closes the section but scanning continues, so a later
    header for the same section opens it again. Only non-bullet lines are
    treated as headers.
    """
    bullets: list[str] = []
    in_section = False
    for line in text.splitlines():
        stripped = line.strip()
        if not stripped:
            in_section = False
            continue

        if _BULLET_RE.match(stripped):
            if in_section:
                bullet = _clean(_BULLET_RE.sub("", stripped, count=1))
                if bullet:
                    bullets.append(bullet)
            continue

        if section.lower() in stripped.lower():
            in_section = True
        elif _is_other_header(stripped, section):
            in_section = False
    return bullets


def extract_section(text: str, section: str) -> str | None:
    """Single-line section value: after the header's colon, else the next line."""
    lines = text.splitlines()
    for i, line in enumerate(lines):
        if section.lower() not in line.lower() or _BULLET_RE.match(line.strip()):
            continue
        if ":" in line:
            value = _clean(line.split(":", 1)[1])
            if value:
                return value
        if i + 1 < len(lines):
            value = _clean(_BULLET_RE.sub("", lines[i + 1].strip(), count=1))
            if value:
                return value
    return None


def scrape_content(text: str) -> DigestContent | None:
    headline = extract_headline(text)
    if headline is None:
        return None
    return DigestContent(
        headline=headline,
        key_insights=extract_bullets(text, SECTION_INSIGHTS),
        mood_trend=extract_section(text, SECTION_MOOD),
        actionable_items=extract_bullets(text, SECTION_ACTIONS),
        weekly_patterns=extract_bullets(text, SECTION_PATTERNS) or None,
    )


# -- Chain -------------------------------------------------------------------


def parse_digest_response(text: str) -> ParseOutcome:
    """Run the JSON → scrape → placeholder chain over an LLM response."""
    content = parse_json_content(text)
    if content is not None:
        return ParseOutcome(ParseStage.PARSED, content)

    content = scrape_content(text)
    if content is not None:
        logger.warning("Digest response was not valid JSON; scraped text instead")
        return ParseOutcome(ParseStage.SCRAPED, content)

    logger.warning("Could not parse digest response (%d chars); using placeholder", len(text))
    return ParseOutcome(ParseStage.PLACEHOLDER, placeholder_content())
