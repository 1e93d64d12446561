"""Chat session store - ordered Q&A exchanges per conversation.

Every read and write is owner-scoped; a session owned by someone else is
reported exactly like a missing one.
"""

import logging
import uuid
from collections.abc import Sequence
from datetime import datetime, timezone

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from docqa.app.db.context import RequestContext
from docqa.app.db.models import ChatSession
from docqa.app.db.queries import select_chat_sessions
from docqa.app.errors import NotFoundOrUnauthorizedError, PersistenceError
from docqa.app.models.chat import ChatMessage, ChatSessionRecord
from docqa.app.utils.logging import operation_logger

logger = logging.getLogger(__name__)

SESSION_NOT_FOUND = "Chat session not found or unauthorized."
TITLE_MAX_CHARS = 50


def derive_title(messages: Sequence[ChatMessage]) -> str:
    """Title from the first question, cut to 50 characters with '...'."""
    if not messages:
        return "New chat"
    question = messages[0].question
    if len(question) > TITLE_MAX_CHARS:
        return question[:TITLE_MAX_CHARS] + "..."
    return question


async def save_session(
    ctx: RequestContext,
    title: str,
    messages: Sequence[ChatMessage],
    session_id: uuid.UUID | None = None,
    *,
    session: AsyncSession,
) -> uuid.UUID:
    """Create a session, or fully replace title and messages of an owned one.

    There is no merge: the stored message list becomes exactly `messages`.
    Concurrent saves of the same session are last-write-wins.

    Raises:
        NotFoundOrUnauthorizedError: session_id missing or not owned
        PersistenceError: The write failed and was rolled back
    """
    payload = [message.model_dump(mode="json") for message in messages]
    now = datetime.now(timezone.utc)

    if session_id is not None:
        row = await _owned_session(ctx, session_id, session=session)
        row.title = title
        row.messages = payload
        row.updated_at = now
    else:
        row = ChatSession(
            session_id=uuid.uuid4(),
            owner_id=ctx.user_id,
            title=title,
            messages=payload,
            created_at=now,
            updated_at=now,
        )
        session.add(row)

    try:
        await session.commit()
    except SQLAlchemyError as e:
        await session.rollback()
        operation_logger.log_failure(
            "save_session", e, user_id=ctx.user_id, session_id=str(session_id)
        )
        raise PersistenceError("Failed to save chat session") from e

    logger.info(
        f"[save_session] user_id={ctx.user_id} session_id={row.session_id} "
        f"messages={len(payload)} operation={'update' if session_id else 'create'}"
    )
    return row.session_id


async def list_sessions(ctx: RequestContext, *, session: AsyncSession) -> list[ChatSessionRecord]:
    """All of the caller's sessions, newest first."""
    result = await session.execute(
        select_chat_sessions(ctx).order_by(ChatSession.created_at.desc())
    )
    return [_to_record(row) for row in result.scalars().all()]


async def get_session(
    ctx: RequestContext, session_id: uuid.UUID, *, session: AsyncSession
) -> ChatSessionRecord:
    """One owned session with its full message list.

    Raises:
        NotFoundOrUnauthorizedError: Missing, or owned by someone else
    """
    return _to_record(await _owned_session(ctx, session_id, session=session))


async def delete_session(
    ctx: RequestContext, session_id: uuid.UUID, *, session: AsyncSession
) -> None:
    """Delete an owned session.

    Raises:
        NotFoundOrUnauthorizedError: Missing, or owned by someone else
        PersistenceError: The delete failed and was rolled back
    """
    row = await _owned_session(ctx, session_id, session=session)

    try:
        await session.delete(row)
        await session.commit()
    except SQLAlchemyError as e:
        await session.rollback()
        operation_logger.log_failure(
            "delete_session", e, user_id=ctx.user_id, session_id=str(session_id)
        )
        raise PersistenceError("Failed to delete chat session") from e


async def _owned_session(
    ctx: RequestContext, session_id: uuid.UUID, *, session: AsyncSession
) -> ChatSession:
    result = await session.execute(
        select_chat_sessions(ctx).where(ChatSession.session_id == session_id)
    )
    row = result.scalar_one_or_none()
    if row is None:
        raise NotFoundOrUnauthorizedError(SESSION_NOT_FOUND)
    return row


def _to_record(row: ChatSession) -> ChatSessionRecord:
    return ChatSessionRecord(
        session_id=row.session_id,
        title=row.title,
        messages=[ChatMessage.model_validate(message) for message in row.messages],
        created_at=row.created_at,
        updated_at=row.updated_at,
    )
