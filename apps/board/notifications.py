# apps/board/notifications.py

import logging

from asgiref.sync import async_to_sync
from channels.layers import get_channel_layer
from django.utils import timezone

logger = logging.getLogger(__name__)


def project_group_name(project_id):
    return f'project_{project_id}'


def broadcast_project_event(project_id, event_type, payload, user=None):
    """
    Sends an event to every socket watching the project

    `event_type` doubles as the consumer handler name.
    """
    channel_layer = get_channel_layer()
    if channel_layer is None:
        return

    message = {
        'project_id': project_id,
        'data': payload,
        'user_id': user.pk if user is not None else None,
        'timestamp': timezone.now().isoformat(),
    }
    async_to_sync(channel_layer.group_send)(
        project_group_name(project_id),
        {
            'type': event_type,
            'message': message,
        }
    )
    logger.debug(f"Broadcast {event_type} to project {project_id}")
