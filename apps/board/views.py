# apps/board/views.py

import logging

from django.conf import settings
from django.db.models import Count
from django.views.decorators.csrf import csrf_exempt
from django.views.decorators.http import require_GET, require_http_methods, require_POST

from apps.core.exceptions import BadRequest
from apps.core.models import Sprint, Task
from apps.core.permissions import (
    requires_auth,
    requires_project_access,
    requires_sprint_access,
    requires_task_access,
)
from apps.core.serializers import (
    serialize_activity,
    serialize_comment,
    serialize_project,
    serialize_sprint,
    serialize_task,
)
from apps.core.utils import created, json_response, no_content, parse_json_body, provided_fields, validate_form

from . import services
from .forms import CommentForm, DropForm, MoveForm, SprintForm, SprintUpdateForm, TaskForm, TaskUpdateForm
from .kanban import UNCHANGED, VIEWS, VIEW_SPRINT, build_board, resolve_drop

logger = logging.getLogger(__name__)


def _task_queryset():
    return Task.objects.select_related('project', 'creator', 'assignee', 'sprint')


# =================== BOARD ===================

@require_GET
@requires_auth
@requires_project_access
def board_view(request, project_id):
    """
    Kanban board of a project
    ?view=sprint|backlog|all and an optional ?sprint_id=
    """
    project = request.project
    view = request.GET.get('view') or VIEW_SPRINT
    if view not in VIEWS:
        raise BadRequest(f'Unknown board view: {view}')

    board = build_board(
        _task_queryset().filter(project=project).order_by('position', '-created_at'),
        project.sprints.all(),
        view=view,
        sprint_id=request.GET.get('sprint_id') or None,
    )

    return json_response({
        'project': serialize_project(project),
        'view': board.view,
        'sprint': serialize_sprint(board.sprint) if board.sprint else None,
        'active_sprint_id': board.active_sprint_id,
        'viewing_active_sprint': board.viewing_active_sprint,
        'columns': [
            {
                'id': column['id'],
                'title': column['title'],
                'tasks': [serialize_task(task) for task in column['tasks']],
            }
            for column in board.columns()
        ],
    })


# =================== SPRINTS ===================

@csrf_exempt
@require_http_methods(["GET", "POST"])
@requires_auth
@requires_project_access
def project_sprints_view(request, project_id):
    project = request.project

    if request.method == 'GET':
        sprints = project.sprints.annotate(task_count=Count('tasks')).order_by('-start_date')
        return json_response([serialize_sprint(sprint) for sprint in sprints])

    form = validate_form(SprintForm, parse_json_body(request))
    data = form.cleaned_data
    sprint = Sprint.objects.create(
        project=project,
        name=data['name'],
        goal=data['goal'],
        start_date=data['start_date'],
        end_date=data['end_date'],
    )
    logger.info(f"Sprint created: {sprint} by {request.user.email}")
    return created(serialize_sprint(sprint))


@csrf_exempt
@require_http_methods(["GET", "PATCH", "DELETE"])
@requires_auth
@requires_sprint_access
def sprint_detail_view(request, sprint_id):
    sprint = request.sprint

    if request.method == 'GET':
        data = serialize_sprint(sprint)
        data['project'] = serialize_project(sprint.project)
        return json_response(data)

    if request.method == 'PATCH':
        payload = parse_json_body(request)
        form = validate_form(SprintUpdateForm, payload, sprint=sprint)
        changes = provided_fields(form, payload)

        new_status = changes.pop('status', None)
        if new_status:
            services.change_sprint_status(sprint, request.user, new_status)

        for field, value in changes.items():
            setattr(sprint, field, value)
        sprint.save()
        logger.info(f"Sprint updated: {sprint}")
        return json_response(serialize_sprint(sprint))

    logger.info(f"Sprint deleted: {sprint} by {request.user.email}, tasks returned to backlog")
    sprint.delete()
    return no_content()


@csrf_exempt
@require_POST
@requires_auth
@requires_sprint_access
def sprint_start_view(request, sprint_id):
    sprint = services.start_sprint(request.sprint, request.user)
    return json_response(serialize_sprint(sprint))


@csrf_exempt
@require_POST
@requires_auth
@requires_sprint_access
def sprint_complete_view(request, sprint_id):
    sprint = services.complete_sprint(request.sprint, request.user)
    return json_response(serialize_sprint(sprint))


# =================== TASKS ===================

@csrf_exempt
@require_http_methods(["GET", "POST"])
@requires_auth
@requires_project_access
def project_tasks_view(request, project_id):
    """Lists tasks of a project, filtered by status, sprint or assignee"""
    project = request.project

    if request.method == 'GET':
        tasks = (
            _task_queryset()
            .filter(project=project)
            .annotate(comment_count=Count('comments'))
            .order_by('position', '-created_at')
        )

        status = request.GET.get('status')
        if status:
            tasks = tasks.filter(status=status)

        sprint_id = request.GET.get('sprint_id')
        if sprint_id in ('null', 'none', 'backlog'):
            tasks = tasks.filter(sprint__isnull=True)
        elif sprint_id:
            tasks = tasks.filter(sprint_id=_int_param('sprint_id', sprint_id))

        assignee_id = request.GET.get('assignee_id')
        if assignee_id:
            tasks = tasks.filter(assignee_id=_int_param('assignee_id', assignee_id))

        return json_response([serialize_task(task, comment_count=True) for task in tasks])

    form = validate_form(TaskForm, parse_json_body(request))
    task = services.create_task(project, request.user, form.cleaned_data)
    return created(serialize_task(task))


def _int_param(name, value):
    try:
        return int(value)
    except (TypeError, ValueError):
        raise BadRequest(f'Invalid {name}')


@require_GET
@requires_auth
@requires_sprint_access
def sprint_tasks_view(request, sprint_id):
    tasks = (
        _task_queryset()
        .filter(sprint=request.sprint)
        .annotate(comment_count=Count('comments'))
        .order_by('status', 'position')
    )
    return json_response([serialize_task(task, comment_count=True) for task in tasks])


@csrf_exempt
@require_http_methods(["GET", "PATCH", "DELETE"])
@requires_auth
@requires_task_access
def task_detail_view(request, task_id):
    task = request.task

    if request.method == 'GET':
        data = serialize_task(task)
        data['comments'] = [
            serialize_comment(comment)
            for comment in task.comments.select_related('user').order_by('-created_at', '-id')
        ]
        data['activity'] = [
            serialize_activity(entry)
            for entry in task.activity.select_related('user')[:settings.SPRINTBOARD_ACTIVITY_LIMIT]
        ]
        return json_response(data)

    if request.method == 'PATCH':
        payload = parse_json_body(request)
        form = validate_form(TaskUpdateForm, payload)
        task = services.update_task(task, request.user, provided_fields(form, payload))
        return json_response(serialize_task(task))

    services.delete_task(task, request.user)
    return no_content()


@csrf_exempt
@require_http_methods(["PATCH"])
@requires_auth
@requires_task_access
def task_move_view(request, task_id):
    """
    Moves a task to a status column

    Omitted sprint_id/assignee_id keep their values; null clears them.
    """
    payload = parse_json_body(request)
    form = validate_form(MoveForm, payload)
    data = form.cleaned_data

    task, assignment_prompt = services.move_task(
        request.task,
        request.user,
        data['status'],
        position=data.get('position') or 0,
        sprint_id=data['sprint_id'] if 'sprint_id' in payload else UNCHANGED,
        assignee_id=data['assignee_id'] if 'assignee_id' in payload else UNCHANGED,
    )

    response = serialize_task(task)
    response['assignment_prompt'] = assignment_prompt
    return json_response(response)


@csrf_exempt
@require_POST
@requires_auth
@requires_task_access
def task_drop_view(request, task_id):
    """Resolves a drag-and-drop target and applies the move"""
    form = validate_form(DropForm, parse_json_body(request))
    data = form.cleaned_data
    task = request.task
    project = task.project

    board = build_board(
        _task_queryset().filter(project=project),
        project.sprints.all(),
        view=data['view'],
        sprint_id=data.get('sprint_id'),
    )
    intent = resolve_drop(task, data.get('over_id') or None, board)
    task, moved, assignment_prompt = services.apply_drop(task, request.user, intent)

    return json_response({
        'task': serialize_task(task),
        'moved': moved,
        'assignment_prompt': assignment_prompt,
    })


@csrf_exempt
@require_http_methods(["GET", "POST"])
@requires_auth
@requires_task_access
def task_comments_view(request, task_id):
    task = request.task

    if request.method == 'GET':
        comments = task.comments.select_related('user').order_by('-created_at', '-id')
        return json_response([serialize_comment(comment) for comment in comments])

    form = validate_form(CommentForm, parse_json_body(request))
    comment = services.add_comment(task, request.user, form.cleaned_data['content'])
    return created(serialize_comment(comment))
