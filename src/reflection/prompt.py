"""Nightly reflection prompt assembly and response parsing."""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass, field
from typing import TYPE_CHECKING

from src.reflection.parsing import extract_json

if TYPE_CHECKING:
    from datetime import datetime

    from src.context.packet import ContextPacket

logger = logging.getLogger(__name__)

MAX_ANCHORS = 5


@dataclass(frozen=True)
class ReflectionContent:
    summary: str
    mood_sketch: str | None = None
    foresight: str | None = None
    anchors: list[str] = field(default_factory=list)


def _activity_lines(packet: ContextPacket) -> list[str]:
    env = packet.environment
    lines = []
    if env.location is not None:
        lines.append(f"Location: {env.location.place_name or 'Unknown'}")
    if env.activity is not None:
        lines.append(f"Activity: {env.activity.value}")
    if env.health is not None:
        if env.health.steps is not None:
            lines.append(f"Steps: {env.health.steps}")
        if env.health.heart_rate is not None:
            lines.append(f"Heart rate: {int(env.health.heart_rate)} bpm")
    return lines


def build_reflection_prompt(packet: ContextPacket, date: datetime) -> str:
    """Combine the day's context into one reflection request.

    The model is asked for a summary, mood sketch, foresight and a few
    semantic anchors, returned as a single JSON object.
    """
    sections = [f"# Daily Reflection\n\nDate: {date:%b %d, %Y}"]

    context = packet.format_for_prompt().strip()
    if context:
        sections.append(f"## Context\n\n{context}")

    activity = _activity_lines(packet)
    if activity:
        sections.append("## Daily Activity\n\n" + "\n".join(activity))

    sections.append(
        "## Task\n\n"
        "Reflect on this day and return JSON only, with these keys:\n"
        '- "summary": 2-3 paragraphs in first person covering key themes, '
        "notable activities and overall well-being.\n"
        '- "moodSketch": 2-3 sentences sketching the likely mood '
        "(e.g. calm, focused, anxious, tired), grounded in the data.\n"
        '- "foresight": 2-3 gentle predictive observations, one per line. '
        "Phrase any recommended adjustments as suggestions "
        '(e.g. "Consider ...", "Try ...").\n'
        f'- "anchors": a list of up to {MAX_ANCHORS} short recurring themes.'
    )
    return "\n\n".join(sections)


def _optional_text(value: object) -> str | None:
    if isinstance(value, str) and value.strip():
        return value.strip()
    if isinstance(value, list):
        joined = "\n".join(str(v).strip() for v in value if str(v).strip())
        return joined or None
    return None


def parse_reflection_response(text: str) -> ReflectionContent:
    """Read the reflection JSON; fall back to the raw text as the summary."""
    raw = extract_json(text)
    data = None
    if raw is not None:
        try:
            data = json.loads(raw)
        except json.JSONDecodeError:
            data = None

    if not isinstance(data, dict) or not _optional_text(data.get("summary")):
        logger.warning("Reflection response was not valid JSON; storing raw text as summary")
        return ReflectionContent(summary=text.strip())

    anchors = data.get("anchors") or []
    if not isinstance(anchors, list):
        anchors = [anchors]

    return ReflectionContent(
        summary=_optional_text(data.get("summary")) or "",
        mood_sketch=_optional_text(data.get("moodSketch", data.get("mood_sketch"))),
        foresight=_optional_text(data.get("foresight")),
        anchors=[str(a).strip() for a in anchors if str(a).strip()][:MAX_ANCHORS],
    )
