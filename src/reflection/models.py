"""Reflection records and the digests aggregated from them."""

import uuid
from datetime import UTC, datetime

from pydantic import BaseModel, ConfigDict, Field, field_validator


def _new_id() -> str:
    return uuid.uuid4().hex


def as_utc(value: datetime) -> datetime:
    """Treat naive datetimes as UTC so records always compare cleanly."""
    if value.tzinfo is None:
        return value.replace(tzinfo=UTC)
    return value


class ContextStats(BaseModel):
    """How much context went into a reflection."""

    model_config = ConfigDict(frozen=True)

    message_count: int = 0
    fragment_count: int = 0
    snapshot_count: int = 0


class ReflectionRecord(BaseModel):
    """Output of one reflection cycle."""

    model_config = ConfigDict(frozen=True)

    date: datetime
    summary: str
    mood_sketch: str | None = None
    foresight: str | None = None
    anchors: list[str] = Field(default_factory=list)
    raw_prompt: str | None = None
    model_used: str = ""
    duration: float = 0.0
    context_stats: ContextStats | None = None
    id: str = Field(default_factory=_new_id)

    @field_validator("date")
    @classmethod
    def normalize_date(cls, value: datetime) -> datetime:
        return as_utc(value)


class DigestRecord(BaseModel):
    """Summary derived from a window of reflection records.

    Attributes:
        headline: One-line description of the period.
        key_insights: Ordered observations.
        mood_trend: Qualitative mood label, if any mood was recorded.
        actionable_items: Suggestions for today.
        weekly_patterns: Recurring observations; ``None`` when there were
            too few records to look for patterns.
        source_ids: IDs of the records this digest was built from.
    """

    model_config = ConfigDict(frozen=True)

    date: datetime = Field(default_factory=lambda: datetime.now(UTC))
    headline: str
    key_insights: list[str] = Field(default_factory=list)
    mood_trend: str | None = None
    actionable_items: list[str] = Field(default_factory=list)
    weekly_patterns: list[str] | None = None
    source_ids: list[str] = Field(default_factory=list)
    id: str = Field(default_factory=_new_id)

    @field_validator("date")
    @classmethod
    def normalize_date(cls, value: datetime) -> datetime:
        return as_utc(value)

    # -- Rendering -------------------------------------------------------------

    def as_plain_text(self) -> str:
        """Plain text suitable for a notification body."""
        parts = [f"{self.headline}\n"]

        if self.key_insights:
            lines = ["Key Insights:"] + [f"  • {insight}" for insight in self.key_insights]
            parts.append("\n".join(lines) + "\n")

        if self.mood_trend:
            parts.append(f"Mood: {self.mood_trend}\n")

        if self.actionable_items:
            lines = ["Action Items:"] + [f"  → {item}" for item in self.actionable_items]
            parts.append("\n".join(lines) + "\n")

        if self.weekly_patterns:
            lines = ["Patterns:"] + [f"  - {pattern}" for pattern in self.weekly_patterns]
            parts.append("\n".join(lines) + "\n")

        return "\n".join(parts)

    def as_markdown(self) -> str:
        parts = [f"# {self.headline}\n"]

        if self.key_insights:
            lines = ["## Key Insights", ""] + [f"- {insight}" for insight in self.key_insights]
            parts.append("\n".join(lines) + "\n")

        if self.mood_trend:
            parts.append(f"**Mood:** {self.mood_trend}\n")

        if self.actionable_items:
            lines = ["## Action Items", ""] + [f"- [ ] {item}" for item in self.actionable_items]
            parts.append("\n".join(lines) + "\n")

        if self.weekly_patterns:
            lines = ["## Patterns", ""] + [f"- {pattern}" for pattern in self.weekly_patterns]
            parts.append("\n".join(lines) + "\n")

        return "\n".join(parts)

    def as_short_summary(self) -> str:
        """Headline, mood and first insight joined on one line."""
        parts = [self.headline]
        if self.mood_trend:
            parts.append(self.mood_trend)
        if self.key_insights:
            parts.append(self.key_insights[0])
        return " • ".join(parts)
