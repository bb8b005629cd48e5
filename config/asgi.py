# config/asgi.py

import os

from channels.routing import ProtocolTypeRouter, URLRouter
from django.core.asgi import get_asgi_application

os.environ.setdefault('DJANGO_SETTINGS_MODULE', 'config.settings.development')

# Django must be set up before importing consumers
django_asgi_app = get_asgi_application()

from apps.board.middleware import JWTAuthMiddleware  # noqa: E402
from apps.board.routing import websocket_urlpatterns  # noqa: E402

application = ProtocolTypeRouter({
    "http": django_asgi_app,

    # WebSocket authenticated with ?token=<jwt>
    "websocket": JWTAuthMiddleware(
        URLRouter(websocket_urlpatterns)
    ),
})
