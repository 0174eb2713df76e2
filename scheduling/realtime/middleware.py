"""
Token authentication for WebSocket connections.

Dashboards log in through ``/api/auth/login`` and never hold a session,
so the socket accepts the same credentials as the HTTP API: an
``Authorization: Token <key>`` or ``Bearer <jwt>`` header, or a
``?token=`` query parameter for browsers that cannot set headers.
"""
from urllib.parse import parse_qs

from channels.auth import AuthMiddlewareStack
from channels.db import database_sync_to_async
from channels.middleware import BaseMiddleware
from django.contrib.auth.models import AnonymousUser
from rest_framework.authtoken.models import Token
from rest_framework.exceptions import AuthenticationFailed
from rest_framework_simplejwt.authentication import JWTAuthentication


def credentials_from_scope(scope):
    """Return ``(keyword, key)`` from the headers or query string, or ``(None, None)``."""
    for name, value in scope.get("headers", []):
        if name.lower() == b"authorization":
            parts = value.decode("latin1").split()
            if len(parts) == 2 and parts[0] in ("Token", "Bearer"):
                return parts[0], parts[1]
    query = parse_qs(scope.get("query_string", b"").decode())
    token = (query.get("token") or [None])[0]
    if token:
        return None, token
    return None, None


def user_for_token(keyword, key):
    """Resolve a DRF token or a JWT access token; a query token may be either."""
    if keyword in (None, "Token"):
        token = Token.objects.select_related("user").filter(key=key).first()
        if token and token.user.is_active:
            return token.user
        if keyword == "Token":
            return AnonymousUser()
    auth = JWTAuthentication()
    try:
        return auth.get_user(auth.get_validated_token(key))
    except AuthenticationFailed:
        return AnonymousUser()


class TokenAuthMiddleware(BaseMiddleware):
    """Replaces ``scope["user"]`` when the connection carries an API token."""

    async def __call__(self, scope, receive, send):
        keyword, key = credentials_from_scope(scope)
        if key:
            scope = dict(scope, user=await database_sync_to_async(user_for_token)(keyword, key))
        return await super().__call__(scope, receive, send)


def TokenAuthMiddlewareStack(inner):
    return AuthMiddlewareStack(TokenAuthMiddleware(inner))
