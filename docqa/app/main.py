"""FastAPI application - document Q&A over uploaded files."""

import logging

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from sqlalchemy.exc import SQLAlchemyError

from docqa.app.api.routes.chats import router as chats_router
from docqa.app.api.routes.docs import router as docs_router
from docqa.app.api.routes.health import router as health_router
from docqa.app.api.routes.metrics import router as metrics_router
from docqa.app.api.routes.qa import router as qa_router
from docqa.app.config import get_settings
from docqa.app.errors import DocQAError, PersistenceError
from docqa.app.utils.logging import configure_logging

configure_logging(get_settings().log_level)
logger = logging.getLogger(__name__)

# Swagger UI moves off /docs, which is the document listing route
app = FastAPI(
    title="Document Q&A API",
    version="0.1.0",
    docs_url="/api-docs",
    swagger_ui_oauth2_redirect_url="/api-docs/oauth2-redirect",
)

# Register routes
app.include_router(health_router, tags=["health"])
app.include_router(metrics_router, tags=["metrics"])
app.include_router(docs_router, tags=["docs"])
app.include_router(qa_router, tags=["qa"])
app.include_router(chats_router, tags=["chats"])


@app.exception_handler(DocQAError)
async def docqa_error_handler(request: Request, exc: DocQAError) -> JSONResponse:
    """Render a reportable failure as {success: false, error}."""
    logger.info(
        f"[{request.method} {request.url.path}] {type(exc).__name__}: {exc.message}"
    )
    return JSONResponse(
        status_code=exc.status_code,
        content={"success": False, "error": exc.message},
    )


@app.exception_handler(RequestValidationError)
async def request_validation_handler(
    request: Request, exc: RequestValidationError
) -> JSONResponse:
    """Malformed request bodies answer 422 in the same envelope as other errors."""
    errors = exc.errors()
    first = errors[0] if errors else {}
    location = ".".join(str(part) for part in first.get("loc", ()))
    message = "Invalid request"
    if location:
        message = f"{location}: {first.get('msg', 'invalid request')}"
    return JSONResponse(status_code=422, content={"success": False, "error": message})


@app.exception_handler(SQLAlchemyError)
async def sqlalchemy_error_handler(request: Request, exc: SQLAlchemyError) -> JSONResponse:
    """Unexpected store failures surface as PersistenceError."""
    logger.error(f"[{request.method} {request.url.path}] database error: {exc}", exc_info=exc)
    error = PersistenceError()
    return JSONResponse(
        status_code=error.status_code,
        content={"success": False, "error": error.message},
    )


@app.exception_handler(Exception)
async def unhandled_error_handler(request: Request, exc: Exception) -> JSONResponse:
    """Anything unclassified still answers in the standard envelope."""
    logger.error(f"[{request.method} {request.url.path}] unhandled error: {exc}", exc_info=exc)
    return JSONResponse(
        status_code=500,
        content={"success": False, "error": "An unexpected error occurred."},
    )


@app.get("/")
async def root() -> dict[str, str]:
    """Root endpoint."""
    return {"message": "Document Q&A API", "version": "0.1.0"}
