# apps/core/serializers.py

"""
Dict builders for API payloads

Plain functions turning model instances into JSON-ready dicts. Counts
such as task_count are read from annotations when the queryset has
them, and computed otherwise.
"""

from .utils import isoformat


def serialize_user(user):
    if user is None:
        return None
    return {
        'id': user.pk,
        'email': user.email,
        'name': user.name,
        'login': user.login,
        'avatar_url': user.avatar_url or None,
        'created_at': isoformat(getattr(user, 'created_at', None)),
    }


def serialize_member(member):
    return {
        'id': member.pk,
        'role': member.role,
        'joined_at': isoformat(member.joined_at),
        'user': serialize_user(member.user),
    }


def serialize_team(team, members=True):
    data = {
        'id': team.pk,
        'name': team.name,
        'slug': team.slug,
        'description': team.description,
        'created_at': isoformat(team.created_at),
        'updated_at': isoformat(team.updated_at),
    }
    if members:
        data['members'] = [
            serialize_member(member)
            for member in team.members.select_related('user')
        ]
    return data


def _count(instance, attribute, fallback):
    value = getattr(instance, attribute, None)
    return value if value is not None else fallback()


def serialize_project(project, counts=False):
    data = {
        'id': project.pk,
        'team_id': project.team_id,
        'name': project.name,
        'key': project.key,
        'description': project.description,
        'is_archived': project.is_archived,
        'created_at': isoformat(project.created_at),
        'updated_at': isoformat(project.updated_at),
    }
    if counts:
        data['task_count'] = _count(project, 'task_count', project.tasks.count)
        data['sprint_count'] = _count(project, 'sprint_count', project.sprints.count)
    return data


def serialize_sprint(sprint, counts=True):
    data = {
        'id': sprint.pk,
        'project_id': sprint.project_id,
        'name': sprint.name,
        'goal': sprint.goal,
        'start_date': isoformat(sprint.start_date),
        'end_date': isoformat(sprint.end_date),
        'status': sprint.status,
        'created_at': isoformat(sprint.created_at),
        'updated_at': isoformat(sprint.updated_at),
    }
    if counts:
        data['task_count'] = _count(sprint, 'task_count', sprint.tasks.count)
    return data


def serialize_task(task, comment_count=False):
    data = {
        'id': task.pk,
        'project_id': task.project_id,
        'sprint_id': task.sprint_id,
        'task_number': task.task_number,
        'key': task.key,
        'title': task.title,
        'description': task.description,
        'type': task.type,
        'status': task.status,
        'priority': task.priority,
        'story_points': task.story_points,
        'labels': task.labels or [],
        'position': task.position,
        'creator': serialize_user(task.creator),
        'assignee': serialize_user(task.assignee),
        'completed_at': isoformat(task.completed_at),
        'created_at': isoformat(task.created_at),
        'updated_at': isoformat(task.updated_at),
    }
    if comment_count:
        data['comment_count'] = _count(task, 'comment_count', task.comments.count)
    return data


def serialize_comment(comment):
    return {
        'id': comment.pk,
        'task_id': comment.task_id,
        'content': comment.content,
        'user': serialize_user(comment.user),
        'created_at': isoformat(comment.created_at),
    }


def serialize_activity(entry):
    return {
        'id': entry.pk,
        'task_id': entry.task_id,
        'action': entry.action,
        'old_value': entry.old_value,
        'new_value': entry.new_value,
        'user': serialize_user(entry.user),
        'created_at': isoformat(entry.created_at),
    }
