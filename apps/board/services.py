# apps/board/services.py

"""
Task and sprint operations shared by the board views

Writes go through these functions so the activity log and the
realtime broadcasts stay consistent whichever endpoint made the change.
"""

import json
import logging
from typing import Dict, Optional, Tuple

from django.conf import settings
from django.db import transaction

from apps.core.exceptions import BadRequest
from apps.core.models import ActivityLog, Comment, Sprint, Task, TeamMember, User
from apps.core.serializers import serialize_comment, serialize_task, serialize_user

from .kanban import UNCHANGED, MoveIntent
from .notifications import broadcast_project_event

logger = logging.getLogger(__name__)

# Fields a task update may touch, in logging order
UPDATABLE_FIELDS = (
    'title', 'description', 'type', 'status', 'priority',
    'story_points', 'labels', 'position', 'sprint_id', 'assignee_id',
)


def _as_log_value(value) -> str:
    if value is None or value == '':
        return ''
    if isinstance(value, (list, dict)):
        return json.dumps(value)
    return str(value)


def resolve_sprint(project, sprint_id) -> Optional[Sprint]:
    """Sprint of the project, None for the backlog"""
    if sprint_id is None:
        return None
    sprint = Sprint.objects.filter(pk=sprint_id, project=project).first()
    if sprint is None:
        raise BadRequest('Sprint does not belong to this project')
    return sprint


def resolve_assignee(project, assignee_id) -> Optional[User]:
    """Team member of the project, None to unassign"""
    if assignee_id is None:
        return None
    member = (
        TeamMember.objects
        .select_related('user')
        .filter(team_id=project.team_id, user_id=assignee_id)
        .first()
    )
    if member is None:
        raise BadRequest('Assignee must be a member of the team')
    return member.user


def assignment_candidates(project):
    return [serialize_user(user) for user in project.team.member_users()]


# =================== TASKS ===================

def create_task(project, user, data: Dict) -> Task:
    """Creates a task with the next sequential number of the project"""
    sprint = resolve_sprint(project, data.get('sprint_id'))
    assignee = resolve_assignee(project, data.get('assignee_id'))

    with transaction.atomic():
        task = Task.objects.create(
            project=project,
            sprint=sprint,
            task_number=project.next_task_number(),
            title=data['title'],
            description=data.get('description') or '',
            type=data['type'],
            status=data['status'],
            priority=data['priority'],
            story_points=data.get('story_points'),
            labels=data.get('labels') or [],
            position=data.get('position') or 0,
            creator=user,
            assignee=assignee,
        )
        ActivityLog.record(task, user, 'created', new_value='Task created')

    logger.info(f"Task created: {task.key} by {user.email}")
    broadcast_project_event(project.pk, 'task_created', serialize_task(task), user=user)
    return task


def update_task(task, user, changes: Dict) -> Task:
    """
    Applies the given fields and logs one entry per changed field

    `changes` holds cleaned values for the keys the client sent.
    """
    entries = []

    with transaction.atomic():
        for field in UPDATABLE_FIELDS:
            if field not in changes:
                continue
            value = changes[field]
            old_value = getattr(task, field)

            if field == 'sprint_id':
                task.sprint = resolve_sprint(task.project, value)
            elif field == 'assignee_id':
                task.assignee = resolve_assignee(task.project, value)
            elif field == 'labels':
                value = value or []
                task.labels = value
            elif field == 'description':
                value = value or ''
                task.description = value
            else:
                setattr(task, field, value)

            if old_value != value:
                entries.append((f'updated {field}', _as_log_value(old_value), _as_log_value(value)))

        task.save()
        for action, old_value, new_value in entries:
            ActivityLog.record(task, user, action, old_value, new_value)

    logger.info(f"Task updated: {task.key} ({len(entries)} changes)")
    broadcast_project_event(task.project_id, 'task_updated', serialize_task(task), user=user)
    return task


def move_task(task, user, status, position=0, sprint_id=UNCHANGED,
              assignee_id=UNCHANGED) -> Tuple[Task, Optional[Dict]]:
    """
    Moves a task on the board

    Returns the task and, when it lands in progress without an owner and
    the client did not pick one, an assignment prompt listing the team.
    An explicit assignee_id of None leaves the task unassigned.
    """
    if task.is_done and task.sprint_id is not None and task.sprint.is_completed and status != Task.STATUS_DONE:
        raise BadRequest('Cannot move completed tasks from a finished sprint')

    previous_status = task.status
    previous_assignee_id = task.assignee_id

    with transaction.atomic():
        task.status = status
        task.position = position if position is not None else 0
        if sprint_id is not UNCHANGED:
            task.sprint = resolve_sprint(task.project, sprint_id)
        if assignee_id is not UNCHANGED:
            task.assignee = resolve_assignee(task.project, assignee_id)
        task.save()

        if previous_status != status:
            ActivityLog.record(task, user, 'status changed', previous_status, status)

        if assignee_id is not UNCHANGED and previous_assignee_id != assignee_id:
            ActivityLog.record(
                task, user, 'assignee changed',
                str(previous_assignee_id) if previous_assignee_id else 'unassigned',
                str(assignee_id) if assignee_id else 'unassigned',
            )

    assignment_prompt = None
    if task.status == Task.STATUS_IN_PROGRESS and task.assignee_id is None and assignee_id is UNCHANGED:
        assignment_prompt = {
            'required': True,
            'candidates': assignment_candidates(task.project),
        }

    logger.info(f"Task moved: {task.key} {previous_status} -> {task.status} by {user.email}")
    broadcast_project_event(task.project_id, 'task_moved', {
        'task': serialize_task(task),
        'previous_status': previous_status,
    }, user=user)
    return task, assignment_prompt


def apply_drop(task, user, intent: Optional[MoveIntent]):
    """Applies a resolved drop; returns (task, moved, assignment_prompt)"""
    if intent is None:
        return task, False, None

    moved_task, prompt = move_task(task, user, intent.status, position=0, sprint_id=intent.sprint_id)
    return moved_task, True, prompt


def delete_task(task, user):
    project_id = task.project_id
    task_id = task.pk
    key = task.key
    task.delete()
    logger.info(f"Task deleted: {key} by {user.email}")
    broadcast_project_event(project_id, 'task_deleted', {'id': task_id}, user=user)


def add_comment(task, user, content) -> Comment:
    preview_chars = settings.SPRINTBOARD_COMMENT_PREVIEW_CHARS
    with transaction.atomic():
        comment = Comment.objects.create(task=task, user=user, content=content)
        ActivityLog.record(task, user, 'commented', new_value=content[:preview_chars])

    broadcast_project_event(task.project_id, 'comment_added', serialize_comment(comment), user=user)
    return comment


# =================== SPRINTS ===================

def start_sprint(sprint, user) -> Sprint:
    if sprint.is_completed:
        raise BadRequest('Cannot start a completed sprint')

    other_active = (
        Sprint.objects
        .filter(project_id=sprint.project_id, status=Sprint.STATUS_ACTIVE)
        .exclude(pk=sprint.pk)
        .exists()
    )
    if other_active:
        raise BadRequest('Another sprint is already active')

    sprint.status = Sprint.STATUS_ACTIVE
    sprint.save()
    logger.info(f"Sprint started: {sprint} by {user.email}")
    broadcast_project_event(sprint.project_id, 'sprint_started', {'id': sprint.pk, 'status': sprint.status}, user=user)
    return sprint


def complete_sprint(sprint, user) -> Sprint:
    if not sprint.is_active:
        raise BadRequest('Only active sprints can be completed')

    sprint.status = Sprint.STATUS_COMPLETED
    sprint.save()
    logger.info(f"Sprint completed: {sprint} by {user.email}")
    broadcast_project_event(sprint.project_id, 'sprint_completed', {'id': sprint.pk, 'status': sprint.status}, user=user)
    return sprint


def change_sprint_status(sprint, user, status) -> Sprint:
    """
    Status change requested through a sprint update

    Sprints only move forward, PLANNED -> ACTIVE -> COMPLETED, through the
    same rules as the start and complete actions.
    """
    if status == sprint.status:
        return sprint
    if sprint.is_completed:
        raise BadRequest('Cannot change the status of a completed sprint')
    if status == Sprint.STATUS_ACTIVE:
        return start_sprint(sprint, user)
    if status == Sprint.STATUS_COMPLETED:
        return complete_sprint(sprint, user)
    raise BadRequest(f'Cannot move a sprint from {sprint.status} to {status}')
