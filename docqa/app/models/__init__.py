"""Models package - re-exports for convenience."""

from docqa.app.models.answer import AnswerResult, ConversationTurn, Source
from docqa.app.models.chat import ChatMessage, ChatSessionRecord
from docqa.app.models.docs import DocumentSummary, IngestResult, RetrievedChunk

__all__ = [
    # Documents
    "DocumentSummary",
    "IngestResult",
    "RetrievedChunk",
    # Answers
    "AnswerResult",
    "ConversationTurn",
    "Source",
    # Chats
    "ChatMessage",
    "ChatSessionRecord",
]
