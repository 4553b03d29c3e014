from .authentication import (
    add_session_authentication,
    add_token_authentication,
    resolve_session,
    resolve_token,
)

__all__ = [
    "add_session_authentication",
    "add_token_authentication",
    "resolve_session",
    "resolve_token",
]
