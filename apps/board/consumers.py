# apps/board/consumers.py

import json
import logging

from channels.db import database_sync_to_async
from channels.generic.websocket import AsyncWebsocketConsumer
from django.utils import timezone

from apps.core.models import Project
from apps.core.permissions import SprintboardPermissions

from .notifications import project_group_name

logger = logging.getLogger(__name__)


class ProjectBoardConsumer(AsyncWebsocketConsumer):
    """
    Realtime updates for a project board

    Views publish task, comment and sprint events to the project group;
    this consumer relays them to every connected team member.
    """

    async def connect(self):
        """Joins the project group after checking team membership"""
        self.project_id = self.scope['url_route']['kwargs']['project_id']
        self.user = self.scope['user']

        if not self.user.is_authenticated:
            logger.warning("WebSocket rejected - unauthenticated")
            await self.close()
            return

        has_access = await self.check_project_access()
        if not has_access:
            logger.warning(f"WebSocket rejected - {self.user.email} has no access to project {self.project_id}")
            await self.close()
            return

        self.group_name = project_group_name(self.project_id)
        await self.channel_layer.group_add(self.group_name, self.channel_name)
        await self.accept()

        logger.info(f"WebSocket connected - {self.user.email} on project {self.project_id}")

    async def disconnect(self, close_code):
        if hasattr(self, 'group_name'):
            await self.channel_layer.group_discard(self.group_name, self.channel_name)

    async def receive(self, text_data=None, bytes_data=None):
        try:
            data = json.loads(text_data or '{}')
        except json.JSONDecodeError:
            logger.warning(f"Invalid JSON received on project {self.project_id} socket")
            return

        if data.get('type') == 'ping':
            await self.send(text_data=json.dumps({
                'type': 'pong',
                'timestamp': timezone.now().isoformat(),
            }))

    # === Project events ===

    async def _relay(self, event):
        await self.send(text_data=json.dumps({
            'type': event['type'],
            'message': event['message'],
        }))

    async def task_created(self, event):
        await self._relay(event)

    async def task_moved(self, event):
        await self._relay(event)

    async def task_updated(self, event):
        await self._relay(event)

    async def task_deleted(self, event):
        await self._relay(event)

    async def comment_added(self, event):
        await self._relay(event)

    async def sprint_started(self, event):
        await self._relay(event)

    async def sprint_completed(self, event):
        await self._relay(event)

    @database_sync_to_async
    def check_project_access(self):
        project = Project.objects.select_related('team').filter(pk=self.project_id).first()
        if project is None:
            return False
        return SprintboardPermissions.has_project_access(self.user, project)
