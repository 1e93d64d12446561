"""Health and status endpoints.

- /health is a liveness probe and always answers 200
- /status checks the database (and pgvector on PostgreSQL) and the model
  provider, reporting an honest overall verdict
"""

from datetime import datetime, timezone
from typing import Annotated, Any

from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse
from sqlalchemy import text
from sqlalchemy.ext.asyncio import AsyncSession

from docqa.app.api.deps import get_app_settings, get_embedder
from docqa.app.config import Settings
from docqa.app.db.engine import get_session
from docqa.app.docs.embedder import Embedder

router = APIRouter()

OVERALL_STATUS_CODES = {"healthy": 200, "degraded": 207, "unhealthy": 503}


async def check_db(session: AsyncSession) -> dict[str, Any]:
    """Check database connectivity and, on PostgreSQL, the vector extension.

    Returns:
        {"status": "ok" | "error", "message"?: str, "details"?: dict}
    """
    try:
        await session.execute(text("SELECT 1"))

        connection = await session.connection()
        if connection.dialect.name != "postgresql":
            return {"status": "ok", "details": {"connected": True}}

        result = await session.execute(
            text("SELECT EXISTS (SELECT 1 FROM pg_extension WHERE extname = 'vector')")
        )
        has_vector = bool(result.scalar())
    except Exception as e:
        return {"status": "error", "message": f"error: {type(e).__name__}"}

    check: dict[str, Any] = {
        "status": "ok",
        "details": {"connected": True, "pgvector_enabled": has_vector},
    }
    if not has_vector:
        check["message"] = "Warning: pgvector extension not enabled"
    return check


async def check_llm(embedder: Embedder, settings: Settings) -> dict[str, Any]:
    """Check the model provider with a one-word embedding call.

    Returns:
        {"status": "ok" | "error", "message"?: str, "details"?: dict}
    """
    try:
        await embedder.embed("test")
    except Exception as e:
        return {"status": "error", "message": f"error: {type(e).__name__}"}

    return {
        "status": "ok",
        "details": {"model": settings.embedding_model, "connected": True},
    }


def overall_status(database: dict[str, Any], llm: dict[str, Any]) -> str:
    """healthy when both checks pass, degraded when one does, else unhealthy."""
    passed = [database["status"] == "ok", llm["status"] == "ok"]
    if all(passed):
        return "healthy"
    if any(passed):
        return "degraded"
    return "unhealthy"


@router.get("/health")
async def health() -> dict[str, str]:
    """Simple health check for Docker/k8s.

    Returns:
        200 OK always (application is running)
    """
    return {"status": "ok"}


@router.get("/status")
async def status(
    session: Annotated[AsyncSession, Depends(get_session)],
    embedder: Annotated[Embedder, Depends(get_embedder)],
    settings: Annotated[Settings, Depends(get_app_settings)],
) -> JSONResponse:
    """Component status report.

    Returns:
        200 when healthy, 207 when degraded, 503 when unhealthy
    """
    database = await check_db(session)
    llm = await check_llm(embedder, settings)
    overall = overall_status(database, llm)

    body = {
        "database": database,
        "llm": llm,
        "timestamp": datetime.now(timezone.utc).isoformat(),
        "overall": overall,
    }
    return JSONResponse(content=body, status_code=OVERALL_STATUS_CODES[overall])
