"""Document endpoints - POST /docs, GET /docs, DELETE /docs/{document_id}."""

import uuid
from datetime import datetime
from typing import Annotated

from fastapi import APIRouter, Depends, File, UploadFile
from pydantic import BaseModel
from sqlalchemy.ext.asyncio import AsyncSession

from docqa.app.api.auth import get_current_context
from docqa.app.api.deps import get_app_settings, get_embedder
from docqa.app.config import Settings
from docqa.app.db.context import RequestContext
from docqa.app.db.engine import get_session
from docqa.app.docs.documents import delete_document, list_documents
from docqa.app.docs.embedder import Embedder
from docqa.app.docs.ingest import ingest_upload
from docqa.app.errors import ValidationError

router = APIRouter(prefix="/docs", tags=["docs"])


class UploadDocResponse(BaseModel):
    """Response for POST /docs."""

    success: bool = True
    document_id: str
    document_name: str
    chunk_count: int


class DocItem(BaseModel):
    """Single entry of GET /docs."""

    document_id: str
    name: str
    uploaded_at: datetime
    chunk_count: int


class DocListResponse(BaseModel):
    """Response for GET /docs."""

    success: bool = True
    documents: list[DocItem]


class DeleteDocResponse(BaseModel):
    """Response for DELETE /docs/{document_id}."""

    success: bool = True


@router.post("", response_model=UploadDocResponse)
async def upload_doc(
    file: Annotated[UploadFile, File()],
    ctx: Annotated[RequestContext, Depends(get_current_context)],
    session: Annotated[AsyncSession, Depends(get_session)],
    embedder: Annotated[Embedder, Depends(get_embedder)],
    settings: Annotated[Settings, Depends(get_app_settings)],
) -> UploadDocResponse:
    """Upload a file, then chunk, embed and store it.

    Args:
        file: Multipart file upload
        ctx: Request context (user_id)
        session: Database session
        embedder: Chunk embedder
        settings: Upload limits and chunking parameters

    Returns:
        New document id, name and chunk count
    """
    if not file.filename:
        raise ValidationError("No file provided")

    content = await file.read()
    result = await ingest_upload(
        ctx,
        file.filename,
        content,
        session=session,
        embedder=embedder,
        settings=settings,
    )

    return UploadDocResponse(
        document_id=str(result.document_id),
        document_name=result.document_name,
        chunk_count=result.chunk_count,
    )


@router.get("", response_model=DocListResponse)
async def list_docs(
    ctx: Annotated[RequestContext, Depends(get_current_context)],
    session: Annotated[AsyncSession, Depends(get_session)],
) -> DocListResponse:
    """List the caller's documents, newest first."""
    documents = await list_documents(ctx, session=session)

    return DocListResponse(
        documents=[
            DocItem(
                document_id=str(doc.document_id),
                name=doc.name,
                uploaded_at=doc.uploaded_at,
                chunk_count=doc.chunk_count,
            )
            for doc in documents
        ]
    )


@router.delete("/{document_id}", response_model=DeleteDocResponse)
async def delete_doc(
    document_id: uuid.UUID,
    ctx: Annotated[RequestContext, Depends(get_current_context)],
    session: Annotated[AsyncSession, Depends(get_session)],
) -> DeleteDocResponse:
    """Delete an owned document and its chunks."""
    await delete_document(ctx, document_id, session=session)
    return DeleteDocResponse()
