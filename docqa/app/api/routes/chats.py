"""Chat session endpoints - POST /chats, GET /chats, GET/DELETE /chats/{session_id}."""

import uuid
from datetime import datetime
from typing import Annotated

from fastapi import APIRouter, Depends
from pydantic import BaseModel, Field
from sqlalchemy.ext.asyncio import AsyncSession

from docqa.app.api.auth import get_current_context
from docqa.app.chats.store import (
    delete_session,
    derive_title,
    get_session as get_chat_session,
    list_sessions,
    save_session,
)
from docqa.app.db.context import RequestContext
from docqa.app.db.engine import get_session
from docqa.app.models.chat import ChatMessage, ChatSessionRecord

router = APIRouter(prefix="/chats", tags=["chats"])


class SaveChatRequest(BaseModel):
    """Request body for POST /chats.

    Without session_id a new session is created; with one, the owned
    session's title and messages are replaced.
    """

    title: str | None = Field(None, max_length=200)
    messages: list[ChatMessage]
    session_id: uuid.UUID | None = None


class SaveChatResponse(BaseModel):
    """Response for POST /chats."""

    success: bool = True
    session_id: str


class ChatSummary(BaseModel):
    """Single entry of GET /chats."""

    session_id: str
    title: str
    message_count: int
    created_at: datetime
    updated_at: datetime


class ChatListResponse(BaseModel):
    """Response for GET /chats."""

    success: bool = True
    sessions: list[ChatSummary]


class ChatDetailResponse(BaseModel):
    """Response for GET /chats/{session_id}."""

    success: bool = True
    session: ChatSessionRecord


class DeleteChatResponse(BaseModel):
    """Response for DELETE /chats/{session_id}."""

    success: bool = True


@router.post("", response_model=SaveChatResponse)
async def save_chat(
    request: SaveChatRequest,
    ctx: Annotated[RequestContext, Depends(get_current_context)],
    session: Annotated[AsyncSession, Depends(get_session)],
) -> SaveChatResponse:
    """Create or replace a chat session."""
    title = request.title or derive_title(request.messages)
    session_id = await save_session(
        ctx, title, request.messages, request.session_id, session=session
    )
    return SaveChatResponse(session_id=str(session_id))


@router.get("", response_model=ChatListResponse)
async def list_chats(
    ctx: Annotated[RequestContext, Depends(get_current_context)],
    session: Annotated[AsyncSession, Depends(get_session)],
) -> ChatListResponse:
    """List the caller's chat sessions, newest first."""
    records = await list_sessions(ctx, session=session)

    return ChatListResponse(
        sessions=[
            ChatSummary(
                session_id=str(record.session_id),
                title=record.title,
                message_count=len(record.messages),
                created_at=record.created_at,
                updated_at=record.updated_at,
            )
            for record in records
        ]
    )


@router.get("/{session_id}", response_model=ChatDetailResponse)
async def get_chat(
    session_id: uuid.UUID,
    ctx: Annotated[RequestContext, Depends(get_current_context)],
    session: Annotated[AsyncSession, Depends(get_session)],
) -> ChatDetailResponse:
    """Fetch one owned chat session with all messages."""
    record = await get_chat_session(ctx, session_id, session=session)
    return ChatDetailResponse(session=record)


@router.delete("/{session_id}", response_model=DeleteChatResponse)
async def delete_chat(
    session_id: uuid.UUID,
    ctx: Annotated[RequestContext, Depends(get_current_context)],
    session: Annotated[AsyncSession, Depends(get_session)],
) -> DeleteChatResponse:
    """Delete an owned chat session."""
    await delete_session(ctx, session_id, session=session)
    return DeleteChatResponse()
