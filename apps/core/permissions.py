# apps/core/permissions.py

from functools import wraps

from .auth_service import auth_service
from .exceptions import Forbidden, NotFound
from .models import Project, Sprint, Task, Team


class SprintboardPermissions:
    """
    Team based permission rules

    Every resource belongs to a team through its project. Members can
    read and work on everything of the team; admins also manage the
    team and its projects.
    """

    @staticmethod
    def get_membership(user, team):
        if not user or not user.is_authenticated:
            return None
        return user.membership_for(team)

    @staticmethod
    def is_team_member(user, team):
        """Checks whether the user belongs to the team"""
        return SprintboardPermissions.get_membership(user, team) is not None

    @staticmethod
    def is_team_admin(user, team):
        """Checks whether the user is an admin of the team"""
        membership = SprintboardPermissions.get_membership(user, team)
        return membership is not None and membership.is_admin

    @staticmethod
    def has_project_access(user, project):
        return SprintboardPermissions.is_team_member(user, project.team)


# Lookups used by views, raising API errors

def get_team_for_member(user, team_id):
    """Team visible to the user; non members get a 404"""
    team = Team.objects.filter(pk=team_id, members__user=user).first()
    if team is None:
        raise NotFound('Team not found')
    return team


def require_team_admin(user, team, message='Only team admins can perform this action'):
    if not SprintboardPermissions.is_team_admin(user, team):
        raise Forbidden(message)


def verify_project_access(user, project_id):
    """Project by id: 404 when missing, 403 when the user is not a team member"""
    project = Project.objects.select_related('team').filter(pk=project_id).first()
    if project is None:
        raise NotFound('Project not found')
    if not SprintboardPermissions.has_project_access(user, project):
        raise Forbidden('Access denied')
    return project


def get_sprint_for_user(user, sprint_id):
    sprint = Sprint.objects.select_related('project__team').filter(pk=sprint_id).first()
    if sprint is None:
        raise NotFound('Sprint not found')
    if not SprintboardPermissions.has_project_access(user, sprint.project):
        raise Forbidden('Access denied')
    return sprint


def get_task_for_user(user, task_id):
    task = (
        Task.objects
        .select_related('project__team', 'sprint', 'assignee', 'creator')
        .filter(pk=task_id)
        .first()
    )
    if task is None:
        raise NotFound('Task not found')
    if not SprintboardPermissions.has_project_access(user, task.project):
        raise Forbidden('Access denied')
    return task


# View decorators

def requires_auth(view_func):
    """Authenticates the bearer token and sets request.user"""

    @wraps(view_func)
    def wrapped_view(request, *args, **kwargs):
        request.user = auth_service.authenticate_request(request)
        return view_func(request, *args, **kwargs)

    return wrapped_view


def requires_project_access(view_func):
    """
    Verifies access to the project
    Expects the view to receive project_id; sets request.project
    """

    @wraps(view_func)
    def wrapped_view(request, project_id, *args, **kwargs):
        request.project = verify_project_access(request.user, project_id)
        return view_func(request, project_id, *args, **kwargs)

    return wrapped_view


def requires_sprint_access(view_func):
    """Expects sprint_id; sets request.sprint"""

    @wraps(view_func)
    def wrapped_view(request, sprint_id, *args, **kwargs):
        request.sprint = get_sprint_for_user(request.user, sprint_id)
        return view_func(request, sprint_id, *args, **kwargs)

    return wrapped_view


def requires_task_access(view_func):
    """Expects task_id; sets request.task"""

    @wraps(view_func)
    def wrapped_view(request, task_id, *args, **kwargs):
        request.task = get_task_for_user(request.user, task_id)
        return view_func(request, task_id, *args, **kwargs)

    return wrapped_view
