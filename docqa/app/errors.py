"""Error taxonomy for the document Q&A core.

Every failure the core can report is a ``DocQAError`` subclass carrying a
user-safe message and the HTTP status the API layer answers with. The API
converts them into ``{"success": false, "error": <message>}`` bodies.
"""


class DocQAError(Exception):
    """Base class for all reportable failures."""

    status_code: int = 500
    default_message: str = "Request failed"

    def __init__(self, message: str | None = None) -> None:
        self.message = message or self.default_message
        super().__init__(self.message)


class UnauthorizedError(DocQAError):
    """No valid caller identity."""

    status_code = 401
    default_message = "Unauthorized. Please sign in."


class ValidationError(DocQAError):
    """Empty question, disallowed file type, oversize or empty file."""

    status_code = 422
    default_message = "Invalid request"


class NotFoundOrUnauthorizedError(DocQAError):
    """Target does not exist or belongs to someone else (deliberately merged)."""

    status_code = 404
    default_message = "Not found or unauthorized."


class NoDocumentsError(DocQAError):
    """Caller owns zero documents."""

    status_code = 200
    default_message = "No documents uploaded yet. Please upload documents first."


class NoRelevantContentError(DocQAError):
    """Documents exist but no chunk passed the similarity threshold."""

    status_code = 200
    default_message = (
        "No sufficiently relevant content found in your documents for this question."
    )


class ProviderError(DocQAError):
    """Embedding or completion call failed or returned empty data."""

    status_code = 502
    default_message = "The model provider request failed"


class PersistenceError(DocQAError):
    """Transaction or query against the store failed."""

    status_code = 503
    default_message = "Database operation failed"
