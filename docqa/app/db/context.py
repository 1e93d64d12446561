"""Request context for ownership enforcement."""

from dataclasses import dataclass


@dataclass(frozen=True)
class RequestContext:
    """Request context carrying the caller identity.

    The user id is an opaque string issued by the auth provider. Every
    document and chat-session query is scoped by it.
    """

    user_id: str
