"""ContextPacket — the composite context handed to a downstream prompt."""

from datetime import UTC, datetime

from pydantic import BaseModel, ConfigDict, Field

from src.context.models import ConversationMessage, MemoryFragment
from src.sensors.models import EnvironmentSnapshot


class SalienceWeights(BaseModel):
    """Relative importance of each context source."""

    model_config = ConfigDict(frozen=True)

    recent_messages: float = 1.0
    semantic_memory: float = 0.8
    sensor_data: float = 0.3


DEFAULT_SALIENCE_WEIGHTS = SalienceWeights()


class ContextMetadata(BaseModel):
    model_config = ConfigDict(frozen=True)

    build_duration: float | None = None
    salience_weights: SalienceWeights | None = None


class ContextPacket(BaseModel):
    """Recent history, related memories and the environment for one request.

    Attributes:
        thread_history: Recent messages, oldest first.
        semantic_memory: Related fragments, most similar first.
        environment: Snapshot at build time (possibly empty).
        created_at: When the packet was assembled.
        metadata: Build duration and salience weights.
    """

    model_config = ConfigDict(frozen=True)

    thread_history: list[ConversationMessage] = Field(default_factory=list)
    semantic_memory: list[MemoryFragment] = Field(default_factory=list)
    environment: EnvironmentSnapshot = Field(default_factory=EnvironmentSnapshot)
    created_at: datetime = Field(default_factory=lambda: datetime.now(UTC))
    metadata: ContextMetadata | None = None

    @property
    def total_elements(self) -> int:
        """Messages plus fragments plus the one environment snapshot."""
        return len(self.thread_history) + len(self.semantic_memory) + 1

    @property
    def is_empty(self) -> bool:
        return (
            not self.thread_history
            and not self.semantic_memory
            and self.environment.location is None
        )

    @property
    def has_data(self) -> bool:
        return not self.is_empty

    def format_for_prompt(self) -> str:
        """Render the packet as prompt text.

        Sections appear in a fixed order and only when non-empty:
        environment, relevant knowledge, recent conversation.
        """
        out: list[str] = []

        env_lines = []
        if self.environment.location is not None:
            env_lines.append(f"Location: {self.environment.location.place_name or 'Unknown'}")
        if self.environment.activity is not None:
            env_lines.append(f"Activity: {self.environment.activity.value}")
        if env_lines:
            out.append("\n".join(env_lines) + "\n")

        if self.semantic_memory:
            lines = ["Relevant Knowledge:"]
            for i, fragment in enumerate(self.semantic_memory, start=1):
                lines.append(f"{i}. {fragment.content}")
            out.append("\n".join(lines) + "\n")

        if self.thread_history:
            lines = ["Recent Conversation:"]
            for message in self.thread_history:
                lines.append(f"{message.role.value}: {message.content}")
            out.append("\n".join(lines) + "\n")

        return "\n".join(out)

    @property
    def summary(self) -> str:
        sensors = "Active" if self.environment.location is not None else "Inactive"
        return (
            "Context Summary:\n"
            f"- Messages: {len(self.thread_history)}\n"
            f"- Memories: {len(self.semantic_memory)}\n"
            f"- Sensors: {sensors}\n"
            f"- Built: {self.created_at.isoformat()}"
        )
