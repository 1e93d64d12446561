"""Document ingestion - validate, chunk, embed and persist docs and chunks."""

import logging
from datetime import datetime, timezone
from uuid import uuid4

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from docqa.app.config import Settings
from docqa.app.db.context import RequestContext
from docqa.app.db.models import Chunk, Document
from docqa.app.docs.chunker import chunk_text
from docqa.app.docs.embedder import Embedder
from docqa.app.docs.extract import extract_text, file_extension
from docqa.app.errors import PersistenceError, ValidationError
from docqa.app.models.docs import IngestResult
from docqa.app.utils.logging import operation_logger
from docqa.app.utils.metrics import chunks_ingested_total, documents_ingested_total

logger = logging.getLogger(__name__)


async def ingest_upload(
    ctx: RequestContext,
    filename: str,
    content: bytes,
    *,
    session: AsyncSession,
    embedder: Embedder,
    settings: Settings,
) -> IngestResult:
    """Validate an uploaded file, extract its text and ingest it.

    Checks run in order, each failing with its own ValidationError:
    extension allowed, size within limit, extracted text non-empty.
    Nothing is chunked or embedded before all of them pass.
    """
    ext = file_extension(filename)
    if ext not in settings.allowed_extensions:
        allowed = ", ".join(settings.allowed_extensions)
        raise ValidationError(f'Unsupported file type "{ext}". Allowed: {allowed}')

    if len(content) > settings.max_upload_bytes:
        limit_mb = settings.max_upload_bytes // (1024 * 1024)
        raise ValidationError(f"File size must be less than {limit_mb}MB")

    text = extract_text(filename, content)
    if not text.strip():
        raise ValidationError("File is empty")

    return await ingest_document(
        ctx,
        filename,
        text,
        session=session,
        embedder=embedder,
        settings=settings,
    )


async def ingest_document(
    ctx: RequestContext,
    name: str,
    text: str,
    *,
    session: AsyncSession,
    embedder: Embedder,
    settings: Settings,
) -> IngestResult:
    """Ingest a document: chunk it, embed every chunk and persist.

    Creates a Document row and its Chunk rows in a single transaction;
    on any database failure the transaction is rolled back so no document
    is ever visible without its full chunk set.

    Args:
        ctx: Request context (owner)
        name: Document display name (the uploaded file name)
        text: Extracted document text
        session: Async database session
        embedder: Embedder used for the single batch call
        settings: Chunking parameters

    Returns:
        IngestResult with document_id, name and chunk count

    Raises:
        ValidationError: Chunking produced nothing
        ProviderError: Batch embedding failed
        PersistenceError: The transaction failed and was rolled back
    """
    pieces = chunk_text(
        text,
        min_tokens=settings.chunk_min_tokens,
        max_tokens=settings.chunk_max_tokens,
        overlap_tokens=settings.chunk_overlap_tokens,
    )
    if not pieces:
        raise ValidationError("Failed to chunk document")

    embeddings = await embedder.embed_batch([piece.content for piece in pieces])

    document_id = uuid4()
    now = datetime.now(timezone.utc)

    try:
        session.add(
            Document(
                document_id=document_id,
                owner_id=ctx.user_id,
                name=name,
                raw_content=text,
                uploaded_at=now,
            )
        )
        await session.flush()

        for index, (piece, embedding) in enumerate(zip(pieces, embeddings, strict=True)):
            session.add(
                Chunk(
                    chunk_id=uuid4(),
                    document_id=document_id,
                    content=piece.content,
                    embedding=embedding,
                    token_count=piece.token_count,
                    chunk_index=index,
                    created_at=now,
                )
            )
            await session.flush()

        await session.commit()
    except SQLAlchemyError as e:
        await session.rollback()
        operation_logger.log_failure(
            "ingest_document", e, user_id=ctx.user_id, document_name=name, chunks=len(pieces)
        )
        raise PersistenceError("Failed to store document") from e

    documents_ingested_total.inc()
    chunks_ingested_total.inc(len(pieces))
    logger.info(f"[ingest] user_id={ctx.user_id} document_id={document_id} chunks={len(pieces)}")

    return IngestResult(document_id=document_id, document_name=name, chunk_count=len(pieces))
