# apps/core/views.py

import logging

from django.core.cache import cache
from django.db import IntegrityError, connection, transaction
from django.db.models import Count
from django.utils import timezone
from django.views.decorators.csrf import csrf_exempt
from django.views.decorators.http import require_GET, require_http_methods, require_POST

import apps
from .auth_service import auth_service
from .exceptions import BadRequest, Conflict, Forbidden, NotFound, Unauthorized
from .forms import (
    AddMemberForm,
    LoginForm,
    ProjectForm,
    ProjectUpdateForm,
    RegisterForm,
    TeamForm,
    TeamUpdateForm,
)
from .models import Project, Team, TeamMember, User
from .permissions import (
    SprintboardPermissions,
    get_team_for_member,
    require_team_admin,
    requires_auth,
    requires_project_access,
)
from .serializers import serialize_member, serialize_project, serialize_team, serialize_user
from .utils import created, json_response, no_content, parse_json_body, provided_fields, validate_form

logger = logging.getLogger(__name__)


# =================== AUTH ===================

@csrf_exempt
@require_POST
def register_view(request):
    """Creates an account and signs it in"""
    form = validate_form(RegisterForm, parse_json_body(request))
    user, token = auth_service.register(form.cleaned_data)
    return created({'user': serialize_user(user), 'token': token})


@csrf_exempt
@require_POST
def login_view(request):
    form = validate_form(LoginForm, parse_json_body(request))
    user, token = auth_service.login(form.cleaned_data['email'], form.cleaned_data['password'])
    logger.info(f"User logged in: {user.email}")
    return json_response({'user': serialize_user(user), 'token': token})


@require_GET
def me_view(request):
    """
    Profile of the token owner

    Decodes the token directly so a deleted account yields 404 rather
    than 401.
    """
    token = auth_service.extract_bearer_token(request.META.get('HTTP_AUTHORIZATION', ''))
    if not token:
        raise Unauthorized('Authentication required')
    claims = auth_service.decode_token(token)
    user = auth_service.get_profile(claims['user_id'])
    return json_response({'user': serialize_user(user)})


# =================== TEAMS ===================

@csrf_exempt
@require_http_methods(["GET", "POST"])
@requires_auth
def teams_view(request):
    """Lists the caller's teams or creates a new one"""
    if request.method == 'GET':
        teams = (
            request.user.get_teams()
            .annotate(project_count=Count('projects', distinct=True))
            .order_by('name')
        )
        payload = []
        for team in teams:
            data = serialize_team(team)
            data['project_count'] = team.project_count
            payload.append(data)
        return json_response(payload)

    form = validate_form(TeamForm, parse_json_body(request))
    data = form.cleaned_data

    if Team.objects.filter(slug=data['slug']).exists():
        raise Conflict('Team slug already taken')

    try:
        with transaction.atomic():
            team = Team.objects.create(
                name=data['name'],
                slug=data['slug'],
                description=data['description'],
            )
            TeamMember.objects.create(team=team, user=request.user, role=TeamMember.ROLE_ADMIN)
    except IntegrityError:
        raise Conflict('Team slug already taken')

    logger.info(f"Team created: {team.slug} by {request.user.email}")
    return created(serialize_team(team))


@csrf_exempt
@require_http_methods(["GET", "PATCH", "DELETE"])
@requires_auth
def team_detail_view(request, team_id):
    team = get_team_for_member(request.user, team_id)

    if request.method == 'GET':
        data = serialize_team(team)
        projects = team.projects.annotate(
            task_count=Count('tasks', distinct=True),
            sprint_count=Count('sprints', distinct=True),
        ).order_by('-created_at')
        data['projects'] = [serialize_project(project, counts=True) for project in projects]
        return json_response(data)

    if request.method == 'PATCH':
        require_team_admin(request.user, team, 'Only team admins can update team details')
        payload = parse_json_body(request)
        form = validate_form(TeamUpdateForm, payload)
        for field, value in provided_fields(form, payload).items():
            setattr(team, field, value)
        team.save()
        logger.info(f"Team updated: {team.slug}")
        return json_response(serialize_team(team))

    require_team_admin(request.user, team, 'Only team admins can delete the team')
    logger.info(f"Team deleted: {team.slug} by {request.user.email}")
    team.delete()
    return no_content()


@csrf_exempt
@require_POST
@requires_auth
def team_members_view(request, team_id):
    """Adds a registered user to the team by email"""
    team = get_team_for_member(request.user, team_id)
    require_team_admin(request.user, team, 'Only team admins can add members')

    form = validate_form(AddMemberForm, parse_json_body(request))
    user = User.objects.filter(email__iexact=form.cleaned_data['email']).first()
    if user is None:
        raise NotFound('User not found')

    if SprintboardPermissions.is_team_member(user, team):
        raise Conflict('User is already a member of this team')

    member = TeamMember.objects.create(team=team, user=user, role=form.cleaned_data['role'])
    logger.info(f"{user.email} joined team {team.slug} as {member.role}")
    return created(serialize_member(member))


@csrf_exempt
@require_http_methods(["DELETE"])
@requires_auth
def team_member_detail_view(request, team_id, user_id):
    team = get_team_for_member(request.user, team_id)
    require_team_admin(request.user, team, 'Only team admins can remove members')

    member = TeamMember.objects.filter(team=team, user_id=user_id).first()
    if member is None:
        raise NotFound('Member not found')

    # A team always keeps at least one admin
    if member.is_admin and team.admins().count() == 1:
        raise BadRequest('Cannot remove the last admin of the team')

    member.delete()
    logger.info(f"User {user_id} removed from team {team.slug}")
    return no_content()


# =================== PROJECTS ===================

@csrf_exempt
@require_POST
@requires_auth
def projects_view(request):
    """Creates a project inside one of the caller's teams"""
    form = validate_form(ProjectForm, parse_json_body(request))
    data = form.cleaned_data

    team = Team.objects.filter(pk=data['team_id']).first()
    if team is None or not SprintboardPermissions.is_team_member(request.user, team):
        raise Forbidden('You are not a member of this team')

    if Project.objects.filter(team=team, key=data['key']).exists():
        raise Conflict('Project key already exists in this team')

    try:
        with transaction.atomic():
            project = Project.objects.create(
                team=team,
                name=data['name'],
                key=data['key'],
                description=data['description'],
            )
    except IntegrityError:
        raise Conflict('Project key already exists in this team')

    logger.info(f"Project created: {project.key} in {team.slug}")
    return created(serialize_project(project, counts=True))


@require_GET
@requires_auth
def team_projects_view(request, team_id):
    team = Team.objects.filter(pk=team_id).first()
    if team is None or not SprintboardPermissions.is_team_member(request.user, team):
        raise Forbidden('You are not a member of this team')

    projects = team.projects.annotate(
        task_count=Count('tasks', distinct=True),
        sprint_count=Count('sprints', distinct=True),
    ).order_by('-created_at')
    return json_response([serialize_project(project, counts=True) for project in projects])


@csrf_exempt
@require_http_methods(["GET", "PATCH", "DELETE"])
@requires_auth
@requires_project_access
def project_detail_view(request, project_id):
    project = request.project

    if request.method == 'GET':
        data = serialize_project(project, counts=True)
        data['team'] = serialize_team(project.team, members=False)
        active_sprint = project.get_active_sprint()
        data['active_sprint_id'] = active_sprint.pk if active_sprint else None
        return json_response(data)

    if request.method == 'PATCH':
        require_team_admin(request.user, project.team, 'Only team admins can update projects')
        payload = parse_json_body(request)
        form = validate_form(ProjectUpdateForm, payload)
        for field, value in provided_fields(form, payload).items():
            setattr(project, field, value)
        project.save()
        logger.info(f"Project updated: {project.key}")
        return json_response(serialize_project(project, counts=True))

    require_team_admin(request.user, project.team, 'Only team admins can delete projects')
    logger.info(f"Project deleted: {project.key} by {request.user.email}")
    project.delete()
    return no_content()


# =================== HEALTH ===================

@require_GET
def health_view(request):
    """Liveness probe checking the database and the cache"""
    try:
        with connection.cursor() as cursor:
            cursor.execute('SELECT 1')
        cache.set('health_check', 'ok', 10)
        if cache.get('health_check') != 'ok':
            raise RuntimeError('cache unavailable')
    except Exception as e:
        logger.error(f"Health check failed: {e}")
        return json_response({'status': 'unhealthy', 'error': str(e)}, status=500)

    return json_response({
        'status': 'ok',
        'timestamp': timezone.now().isoformat(),
        'version': apps.__version__,
    })
