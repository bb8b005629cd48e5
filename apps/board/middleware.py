# apps/board/middleware.py

import logging
from urllib.parse import parse_qs

from channels.db import database_sync_to_async
from channels.middleware import BaseMiddleware
from django.contrib.auth.models import AnonymousUser

from apps.core.auth_service import auth_service
from apps.core.exceptions import Unauthorized

logger = logging.getLogger(__name__)


@database_sync_to_async
def get_user_for_token(token):
    try:
        return auth_service.user_from_token(token)
    except Unauthorized:
        logger.warning("WebSocket token rejected")
        return AnonymousUser()


class JWTAuthMiddleware(BaseMiddleware):
    """
    Authenticates WebSocket connections with a `?token=<jwt>` query string
    Browsers cannot set headers on WebSocket handshakes.
    """

    async def __call__(self, scope, receive, send):
        query = parse_qs(scope.get('query_string', b'').decode())
        token = (query.get('token') or [None])[0]

        scope = dict(scope)
        if token:
            scope['user'] = await get_user_for_token(token)
        else:
            scope['user'] = AnonymousUser()

        return await super().__call__(scope, receive, send)
