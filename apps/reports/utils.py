# apps/reports/utils.py

from typing import Dict, List

from django.utils import timezone

from apps.core.models import Sprint, Task

from .burndown import compute_burndown


def sprint_burndown(sprint: Sprint, now=None, include_summary=True) -> Dict:
    """Burndown of a sprint from its current tasks"""
    tasks = sprint.tasks.only('story_points', 'status', 'completed_at', 'updated_at')
    return compute_burndown(
        sprint.start_date,
        sprint.end_date,
        tasks,
        now=now or timezone.now(),
        include_summary=include_summary,
    )


def calculate_velocity(project) -> Dict:
    """
    Completed versus committed story points per finished sprint

    Sprints are listed oldest first; the average covers completed points.
    """
    sprints = project.sprints.filter(status=Sprint.STATUS_COMPLETED).order_by('start_date')

    rows: List[Dict] = []
    for sprint in sprints:
        tasks = list(sprint.tasks.only('story_points', 'status'))
        committed = sum(task.story_points or 0 for task in tasks)
        completed = sum(task.story_points or 0 for task in tasks if task.status == Task.STATUS_DONE)
        rows.append({
            'sprint_id': sprint.pk,
            'name': sprint.name,
            'start_date': sprint.start_date.isoformat(),
            'end_date': sprint.end_date.isoformat(),
            'committed_points': committed,
            'completed_points': completed,
        })

    average = sum(row['completed_points'] for row in rows) / len(rows) if rows else 0
    return {
        'project_id': project.pk,
        'sprints': rows,
        'average_velocity': round(average, 2),
    }


def sprint_task_rows(sprint: Sprint) -> List[List]:
    """Task table shared by every export format"""
    rows = []
    tasks = sprint.tasks.select_related('project', 'assignee').order_by('status', 'position')
    for task in tasks:
        rows.append([
            task.key,
            task.title,
            task.get_type_display(),
            task.get_status_display(),
            task.get_priority_display(),
            task.story_points if task.story_points is not None else '',
            task.assignee.name if task.assignee else 'Unassigned',
            task.completed_at.strftime('%Y-%m-%d %H:%M') if task.completed_at else '',
        ])
    return rows


TASK_COLUMNS = ['Key', 'Title', 'Type', 'Status', 'Priority', 'Points', 'Assignee', 'Completed']


def sprint_summary_rows(sprint: Sprint, burndown: Dict) -> List[List]:
    return [
        ['Project', f"{sprint.project.key} - {sprint.project.name}"],
        ['Sprint', sprint.name],
        ['Goal', sprint.goal or '-'],
        ['Status', sprint.get_status_display()],
        ['Start', sprint.start_date.strftime('%Y-%m-%d')],
        ['End', sprint.end_date.strftime('%Y-%m-%d')],
        ['Total points', burndown['total_points']],
        ['Completed points', burndown['completed_points']],
        ['Remaining points', burndown['remaining_points']],
    ]


def format_ideal(value) -> str:
    return f"{value:.1f}"
