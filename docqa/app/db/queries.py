"""Ownership-safe query helpers."""

from sqlalchemy import Select, select

from docqa.app.db.context import RequestContext
from docqa.app.db.models import ChatSession, Document


def select_documents(ctx: RequestContext) -> Select:
    """Select document rows with owner scoping enforced.

    Args:
        ctx: Request context with user_id

    Returns:
        Select filtered by owner_id
    """
    return select(Document).where(Document.owner_id == ctx.user_id)


def select_chat_sessions(ctx: RequestContext) -> Select:
    """Select chat_session rows with owner scoping enforced.

    Args:
        ctx: Request context with user_id

    Returns:
        Select filtered by owner_id
    """
    return select(ChatSession).where(ChatSession.owner_id == ctx.user_id)
