"""Core middleware for Storefront WebSocket connections."""

from urllib.parse import parse_qs

from channels.auth import AuthMiddlewareStack
from channels.db import database_sync_to_async
from channels.middleware import BaseMiddleware

from .authentication import get_token_user


class TokenAuthMiddleware(BaseMiddleware):
    """Authenticate WebSocket connections with a `?token=<key>` query string.

    Runs inside the session auth stack, so a valid token replaces the
    session user and an absent or unknown token leaves it untouched.
    """

    async def __call__(self, scope, receive, send):
        query = parse_qs(scope.get("query_string", b"").decode())
        keys = query.get("token")
        if keys:
            user = await database_sync_to_async(get_token_user)(keys[0])
            if user is not None:
                scope = dict(scope, user=user)
        return await super().__call__(scope, receive, send)


def TokenAuthMiddlewareStack(inner):
    """Session authentication with API token override."""
    return AuthMiddlewareStack(TokenAuthMiddleware(inner))
