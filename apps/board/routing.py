# apps/board/routing.py

from django.urls import re_path
from . import consumers

websocket_urlpatterns = [
    # Project board - realtime task and sprint events
    re_path(r'ws/projects/(?P<project_id>\d+)/$', consumers.ProjectBoardConsumer.as_asgi()),
]
