"""Auth dependency - resolves the caller's identity from the bearer header.

Identity is provided by an upstream identity service; this layer only reads
the opaque user id it forwards as "Bearer <user_id>". Every data-touching
endpoint depends on it, so an unauthenticated request never reaches storage.
"""

from typing import Annotated

from fastapi import Header

from docqa.app.db.context import RequestContext
from docqa.app.errors import UnauthorizedError


async def get_current_context(
    authorization: Annotated[str | None, Header()] = None,
) -> RequestContext:
    """Extract request context from the Authorization header.

    Args:
        authorization: Authorization header (e.g., "Bearer <user_id>")

    Returns:
        RequestContext carrying the caller's user_id

    Raises:
        UnauthorizedError: Header missing, not a bearer token, or empty id
    """
    if not authorization:
        raise UnauthorizedError()

    scheme, _, token = authorization.partition(" ")
    if scheme != "Bearer" or not token.strip():
        raise UnauthorizedError()

    return RequestContext(user_id=token.strip())
