"""Owned document listing, counting and deletion."""

import logging
import uuid

from sqlalchemy import delete, func, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from docqa.app.db.context import RequestContext
from docqa.app.db.models import Chunk, Document
from docqa.app.db.queries import select_documents
from docqa.app.errors import NotFoundOrUnauthorizedError, PersistenceError
from docqa.app.models.docs import DocumentSummary
from docqa.app.utils.logging import operation_logger

logger = logging.getLogger(__name__)

DOCUMENT_NOT_FOUND = "Document not found or unauthorized."


async def count_documents(ctx: RequestContext, *, session: AsyncSession) -> int:
    """Number of documents owned by the caller."""
    result = await session.execute(
        select(func.count()).select_from(Document).where(Document.owner_id == ctx.user_id)
    )
    return int(result.scalar_one())


async def get_owned_document(
    ctx: RequestContext, document_id: uuid.UUID, *, session: AsyncSession
) -> Document:
    """Load a document the caller owns.

    Raises:
        NotFoundOrUnauthorizedError: Missing, or owned by someone else
    """
    result = await session.execute(
        select_documents(ctx).where(Document.document_id == document_id)
    )
    document = result.scalar_one_or_none()
    if document is None:
        raise NotFoundOrUnauthorizedError(DOCUMENT_NOT_FOUND)
    return document


async def list_documents(ctx: RequestContext, *, session: AsyncSession) -> list[DocumentSummary]:
    """List the caller's documents, newest first, with chunk counts."""
    chunk_counts = (
        select(Chunk.document_id, func.count(Chunk.chunk_id).label("chunk_count"))
        .group_by(Chunk.document_id)
        .subquery()
    )
    stmt = (
        select(
            Document.document_id,
            Document.name,
            Document.uploaded_at,
            func.coalesce(chunk_counts.c.chunk_count, 0),
        )
        .outerjoin(chunk_counts, chunk_counts.c.document_id == Document.document_id)
        .where(Document.owner_id == ctx.user_id)
        .order_by(Document.uploaded_at.desc())
    )

    result = await session.execute(stmt)
    return [
        DocumentSummary(
            document_id=document_id,
            name=name,
            uploaded_at=uploaded_at,
            chunk_count=chunk_count,
        )
        for document_id, name, uploaded_at, chunk_count in result.all()
    ]


async def delete_document(
    ctx: RequestContext, document_id: uuid.UUID, *, session: AsyncSession
) -> None:
    """Delete an owned document and all of its chunks in one transaction.

    Raises:
        NotFoundOrUnauthorizedError: Missing, or owned by someone else
        PersistenceError: The delete failed and was rolled back
    """
    await get_owned_document(ctx, document_id, session=session)

    try:
        await session.execute(delete(Chunk).where(Chunk.document_id == document_id))
        await session.execute(delete(Document).where(Document.document_id == document_id))
        await session.commit()
    except SQLAlchemyError as e:
        await session.rollback()
        operation_logger.log_failure(
            "delete_document", e, user_id=ctx.user_id, document_id=str(document_id)
        )
        raise PersistenceError("Failed to delete document") from e

    logger.info(f"[delete_document] user_id={ctx.user_id} document_id={document_id}")
