"""Question answering endpoint - POST /qa/ask."""

import logging
import uuid
from typing import Annotated

from fastapi import APIRouter, Depends
from pydantic import BaseModel, Field
from sqlalchemy.ext.asyncio import AsyncSession

from docqa.app.api.auth import get_current_context
from docqa.app.api.deps import get_app_settings, get_embedder, get_model_provider
from docqa.app.config import Settings
from docqa.app.db.context import RequestContext
from docqa.app.db.engine import get_session
from docqa.app.docs.embedder import Embedder
from docqa.app.llm.client import ModelProvider
from docqa.app.models.answer import ConversationTurn, Source
from docqa.app.qa.composer import answer_question

router = APIRouter(prefix="/qa", tags=["qa"])
logger = logging.getLogger(__name__)


class AskRequest(BaseModel):
    """Request body for POST /qa/ask."""

    question: str = Field(..., description="Natural-language question")
    history: list[ConversationTurn] = Field(
        default_factory=list, description="Prior exchanges, oldest first"
    )
    document_id: uuid.UUID | None = Field(None, description="Restrict to one document")


class AskResponse(BaseModel):
    """Response for POST /qa/ask."""

    success: bool = True
    answer: str
    sources: list[Source]


@router.post("/ask", response_model=AskResponse)
async def ask(
    request: AskRequest,
    ctx: Annotated[RequestContext, Depends(get_current_context)],
    session: Annotated[AsyncSession, Depends(get_session)],
    embedder: Annotated[Embedder, Depends(get_embedder)],
    provider: Annotated[ModelProvider, Depends(get_model_provider)],
    settings: Annotated[Settings, Depends(get_app_settings)],
) -> AskResponse:
    """Answer a question grounded in the caller's documents.

    Args:
        request: Question, recent history and optional document scope
        ctx: Request context (user_id)
        session: Database session
        embedder: Question embedder
        provider: Completion model
        settings: Retrieval and sampling parameters

    Returns:
        Answer text with the sources it was grounded on
    """
    logger.info(
        f"[POST /qa/ask] user_id={ctx.user_id} history={len(request.history)} "
        f"document_id={request.document_id}"
    )

    result = await answer_question(
        ctx,
        request.question,
        request.history,
        request.document_id,
        session=session,
        embedder=embedder,
        provider=provider,
        settings=settings,
    )

    return AskResponse(answer=result.answer, sources=result.sources)
