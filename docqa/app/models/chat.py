"""Chat session models."""

from datetime import datetime, timezone
from uuid import UUID

from pydantic import BaseModel, Field

from docqa.app.models.answer import Source


class ChatMessage(BaseModel):
    """One saved exchange of a conversation."""

    question: str
    answer: str
    sources: list[Source] = Field(default_factory=list)
    timestamp: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))


class ChatSessionRecord(BaseModel):
    """Persisted conversation with its full ordered message list."""

    session_id: UUID
    title: str
    messages: list[ChatMessage]
    created_at: datetime
    updated_at: datetime
