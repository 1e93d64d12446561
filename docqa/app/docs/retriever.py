"""Document retriever - nearest chunks by cosine distance, with relevance filter."""

import logging
import math
import uuid
from collections.abc import Sequence
from dataclasses import dataclass

import numpy as np
from sqlalchemy import Select, select
from sqlalchemy.ext.asyncio import AsyncSession

from docqa.app.config import Settings
from docqa.app.db.context import RequestContext
from docqa.app.db.models import Chunk, Document
from docqa.app.docs.documents import get_owned_document
from docqa.app.docs.embedder import Embedder
from docqa.app.models.docs import RetrievedChunk

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ChunkCandidate:
    """Raw nearest-neighbour hit before filtering and name resolution."""

    chunk_id: uuid.UUID
    content: str
    document_id: uuid.UUID
    distance: float


async def retrieve(
    ctx: RequestContext,
    question: str,
    document_id: uuid.UUID | None = None,
    *,
    k: int = 10,
    session: AsyncSession,
    embedder: Embedder,
    settings: Settings,
) -> list[RetrievedChunk]:
    """Retrieve the chunks most similar to a question.

    Ranking strategy:
    - Scope to one owned document when document_id is given, otherwise to
      every chunk of every document the caller owns
    - Embed the question and fetch the k nearest chunks by cosine distance
    - Drop candidates with distance >= settings.max_cosine_distance (after
      the top-k fetch, not before)
    - Resolve document names in one batch lookup

    Args:
        ctx: Request context (owner)
        question: Natural-language question
        document_id: Optional single-document scope
        k: Number of nearest candidates to fetch
        session: Async database session
        embedder: Embedder for the question vector
        settings: Relevance threshold

    Returns:
        Relevant chunks ordered by ascending distance (possibly empty)

    Raises:
        NotFoundOrUnauthorizedError: document_id missing or not owned
    """
    if document_id is not None:
        await get_owned_document(ctx, document_id, session=session)

    query_vector = await embedder.embed(question)
    candidates = await nearest_chunks(
        ctx, query_vector, document_id, k=k, session=session
    )

    relevant = [c for c in candidates if c.distance < settings.max_cosine_distance]
    logger.info(
        f"[retrieve] user_id={ctx.user_id} candidates={len(candidates)} relevant={len(relevant)}"
    )
    if not relevant:
        return []

    names = await _document_names({c.document_id for c in relevant}, session=session)

    return [
        RetrievedChunk(
            chunk_id=c.chunk_id,
            document_id=c.document_id,
            document_name=names.get(c.document_id, "Unknown"),
            content=c.content,
            distance=c.distance,
        )
        for c in relevant
    ]


async def nearest_chunks(
    ctx: RequestContext,
    query_vector: Sequence[float],
    document_id: uuid.UUID | None = None,
    *,
    k: int,
    session: AsyncSession,
) -> list[ChunkCandidate]:
    """Exact k-nearest chunks by cosine distance, ascending.

    PostgreSQL ranks in SQL with pgvector's ``<=>`` operator. Other dialects
    (SQLite in tests) load the scoped embeddings and rank with numpy.
    """
    connection = await session.connection()

    if connection.dialect.name == "postgresql":
        distance = Chunk.embedding.cosine_distance(list(query_vector)).label("distance")
        stmt = _scoped(
            select(Chunk.chunk_id, Chunk.content, Chunk.document_id, distance),
            ctx,
            document_id,
        ).order_by(distance.asc()).limit(k)
        result = await session.execute(stmt)
        return [
            ChunkCandidate(chunk_id=cid, content=content, document_id=did, distance=float(dist))
            for cid, content, did, dist in result.all()
        ]

    stmt = _scoped(
        select(Chunk.chunk_id, Chunk.content, Chunk.document_id, Chunk.embedding),
        ctx,
        document_id,
    )
    result = await session.execute(stmt)
    candidates = [
        ChunkCandidate(
            chunk_id=cid,
            content=content,
            document_id=did,
            distance=cosine_distance(query_vector, embedding),
        )
        for cid, content, did, embedding in result.all()
    ]
    candidates.sort(key=lambda c: (math.isnan(c.distance), c.distance))
    return candidates[:k]


def cosine_distance(a: Sequence[float], b: Sequence[float]) -> float:
    """1 - cosine similarity; NaN when either vector has zero length."""
    va = np.asarray(a, dtype=float)
    vb = np.asarray(b, dtype=float)
    denominator = float(np.linalg.norm(va) * np.linalg.norm(vb))
    if denominator == 0:
        return math.nan
    return 1.0 - float(np.dot(va, vb)) / denominator


def _scoped(stmt: Select, ctx: RequestContext, document_id: uuid.UUID | None) -> Select:
    """Restrict a chunk query to one document, or to all documents the caller owns."""
    if document_id is not None:
        return stmt.where(Chunk.document_id == document_id)
    return stmt.join(Document, Chunk.document_id == Document.document_id).where(
        Document.owner_id == ctx.user_id
    )


async def _document_names(
    document_ids: set[uuid.UUID], *, session: AsyncSession
) -> dict[uuid.UUID, str]:
    result = await session.execute(
        select(Document.document_id, Document.name).where(
            Document.document_id.in_(document_ids)
        )
    )
    return {document_id: name for document_id, name in result.all()}
