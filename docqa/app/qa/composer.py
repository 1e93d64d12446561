"""Answer composer - grounded prompt assembly and completion.

Builds the prompt from retrieved chunks and recent conversation turns, asks
the completion model, and returns the answer with its sources. The sources
list and the "Source i" labels in the prompt are index-aligned.
"""

import logging
import uuid
from collections.abc import Sequence

from sqlalchemy.ext.asyncio import AsyncSession

from docqa.app.config import Settings
from docqa.app.db.context import RequestContext
from docqa.app.docs.documents import count_documents
from docqa.app.docs.embedder import Embedder
from docqa.app.docs.retriever import retrieve
from docqa.app.errors import (
    NoDocumentsError,
    NoRelevantContentError,
    ProviderError,
    ValidationError,
)
from docqa.app.llm.client import NOT_FOUND_ANSWER, ModelProvider
from docqa.app.models.answer import AnswerResult, ConversationTurn, Source
from docqa.app.models.docs import RetrievedChunk
from docqa.app.utils.metrics import questions_total

logger = logging.getLogger(__name__)

SOURCE_SEPARATOR = "\n\n---\n\n"

SYSTEM_PROMPT = f"""You are a helpful assistant that answers questions based ONLY on the provided context from documents.

IMPORTANT RULES:
1. Answer ONLY using information from the provided context
2. If the answer is not found in the context, respond with "{NOT_FOUND_ANSWER}"
3. Cite which document(s) you used to answer the question
4. Be concise and accurate
5. Do not make up information or use external knowledge
6. Use the previous conversation, when present, only to resolve references such as "it" or "that" in the question"""


def build_context_block(chunks: Sequence[RetrievedChunk]) -> str:
    """Render chunks as labelled sections, in the given (nearest-first) order."""
    return SOURCE_SEPARATOR.join(
        f"[Source {i}: {chunk.document_name}]\n{chunk.content}"
        for i, chunk in enumerate(chunks, start=1)
    )


def build_history_block(history: Sequence[ConversationTurn], window: int) -> str:
    """Render the last `window` turns as numbered Q/A pairs; empty if none."""
    recent = list(history)[-window:] if window > 0 else []
    if not recent:
        return ""

    lines = ["Previous conversation:"]
    for i, turn in enumerate(recent, start=1):
        lines.append(f"Q{i}: {turn.question}")
        lines.append(f"A{i}: {turn.answer}")
        lines.append("")
    return "\n".join(lines).rstrip()


def build_user_prompt(question: str, context_block: str, history_block: str = "") -> str:
    """Assemble the user message: conversation, then context, then question."""
    parts = []
    if history_block:
        parts.append(history_block)
    parts.append(f"Context from documents:\n\n{context_block}")
    parts.append(
        f"Question: {question}\n\nPlease answer the question based on the context above."
    )
    return SOURCE_SEPARATOR.join(parts)


def to_sources(chunks: Sequence[RetrievedChunk]) -> list[Source]:
    """Sources in prompt order, with similarity rounded to two decimals."""
    return [
        Source(
            document_name=chunk.document_name,
            chunk_text=chunk.content,
            similarity=chunk.similarity,
        )
        for chunk in chunks
    ]


async def answer_question(
    ctx: RequestContext,
    question: str,
    history: Sequence[ConversationTurn] = (),
    document_id: uuid.UUID | None = None,
    *,
    session: AsyncSession,
    embedder: Embedder,
    provider: ModelProvider,
    settings: Settings,
) -> AnswerResult:
    """Answer a question from the caller's documents.

    Args:
        ctx: Request context (owner)
        question: Question text
        history: Prior exchanges, oldest first; only the last
            settings.history_window are used
        document_id: Optional single-document scope
        session: Async database session
        embedder: Embedder for the question
        provider: Completion capability
        settings: top-k, window and sampling parameters

    Returns:
        AnswerResult with the verbatim answer and its sources

    Raises:
        ValidationError: Blank question (before any I/O)
        NoDocumentsError: Caller owns no documents (before embedding)
        NotFoundOrUnauthorizedError: document_id missing or not owned
        NoRelevantContentError: No chunk passed the similarity threshold
        ProviderError: Embedding or completion failed
    """
    if not question or not question.strip():
        raise ValidationError("Question cannot be empty")

    if await count_documents(ctx, session=session) == 0:
        questions_total.labels(outcome="no_documents").inc()
        raise NoDocumentsError()

    try:
        chunks = await retrieve(
            ctx,
            question,
            document_id,
            k=settings.retrieval_top_k,
            session=session,
            embedder=embedder,
            settings=settings,
        )
    except ProviderError:
        questions_total.labels(outcome="provider_error").inc()
        raise
    if not chunks:
        questions_total.labels(outcome="no_relevant_content").inc()
        raise NoRelevantContentError()

    user_prompt = build_user_prompt(
        question,
        build_context_block(chunks),
        build_history_block(history, settings.history_window),
    )

    try:
        answer = await provider.complete(
            system_prompt=SYSTEM_PROMPT,
            user_prompt=user_prompt,
            temperature=settings.completion_temperature,
            max_tokens=settings.completion_max_tokens,
        )
    except ProviderError:
        questions_total.labels(outcome="provider_error").inc()
        raise

    questions_total.labels(outcome="answered").inc()
    logger.info(f"[answer] user_id={ctx.user_id} sources={len(chunks)}")

    return AnswerResult(answer=answer, sources=to_sources(chunks))
