"""Data models for conversation history and semantic memory."""

import uuid
from datetime import UTC, datetime
from enum import StrEnum

from pydantic import BaseModel, ConfigDict, Field

from src.memory.similarity import cosine_similarity


def _new_id() -> str:
    return uuid.uuid4().hex


def _now() -> datetime:
    return datetime.now(UTC)


class MessageRole(StrEnum):
    USER = "user"
    ASSISTANT = "assistant"
    SYSTEM = "system"


class MessageMetadata(BaseModel):
    """Optional bookkeeping attached to a message."""

    model_config = ConfigDict(frozen=True)

    token_count: int | None = None
    model: str | None = None
    processing_time: float | None = None
    tags: list[str] | None = None


class ConversationMessage(BaseModel):
    """A single turn in a conversation thread."""

    model_config = ConfigDict(frozen=True)

    role: MessageRole
    content: str
    id: str = Field(default_factory=_new_id)
    created_at: datetime = Field(default_factory=_now)
    metadata: MessageMetadata | None = None


class MemorySource(StrEnum):
    CONVERSATION = "conversation"
    DOCUMENT = "document"
    WEB = "web"
    SENSOR = "sensor"
    USER_INPUT = "user-input"
    DERIVED = "derived"


class MemoryMetadata(BaseModel):
    """Optional metadata for a memory fragment."""

    model_config = ConfigDict(frozen=True)

    tags: list[str] | None = None
    location: str | None = None
    context: str | None = None
    importance: float | None = Field(default=None, ge=0.0, le=1.0)
    access_count: int | None = None
    last_accessed: datetime | None = None


class MemoryFragment(BaseModel):
    """A piece of text stored in the vector store alongside its embedding."""

    model_config = ConfigDict(frozen=True)

    content: str
    embedding: list[float]
    source: MemorySource
    id: str = Field(default_factory=_new_id)
    created_at: datetime = Field(default_factory=_now)
    metadata: MemoryMetadata | None = None

    def similarity(self, other: "MemoryFragment") -> float:
        """Cosine similarity between this fragment's embedding and another's."""
        return cosine_similarity(self.embedding, other.embedding)
