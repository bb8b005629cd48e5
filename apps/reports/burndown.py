# apps/reports/burndown.py

"""
Sprint burndown

compute_burndown() is pure: it takes the sprint window, the tasks and
the current time, and never touches the database.
"""

import math
from datetime import timedelta
from typing import Dict, Iterable, List

from django.utils import timezone

DONE = 'DONE'
ONE_DAY = timedelta(days=1)


def _points(task) -> int:
    return task.story_points or 0


def _completion_timestamp(task):
    """completed_at, or the last update for tasks closed before it existed"""
    return getattr(task, 'completed_at', None) or task.updated_at


def _ceil_days(delta: timedelta) -> int:
    return math.ceil(delta / ONE_DAY)


def _local(value):
    if timezone.is_aware(value):
        return timezone.localtime(value)
    return value


def compute_burndown(start, end, tasks: Iterable, now=None, include_summary=False) -> Dict:
    """
    Remaining and ideal story points for each day of the sprint

    Args:
        start, end: sprint window
        tasks: objects with story_points, status, completed_at and updated_at
        now: current time, defaults to timezone.now()
        include_summary: also return days_in_sprint and ideal_burn_rate

    Days are walked from `start` up to min(now, end). Each entry counts
    tasks completed up to the end of that day; a sprint that has not
    started yet has no entries.
    """
    now = now or timezone.now()
    tasks = list(tasks)

    total_points = sum(_points(task) for task in tasks)
    done_tasks = [task for task in tasks if task.status == DONE]
    completed_points = sum(_points(task) for task in done_tasks)

    days_in_sprint = max(1, _ceil_days(end - start))
    ideal_burn_rate = total_points / days_in_sprint

    start = _local(start)
    current = _local(min(now, end))
    completions = [(_completion_timestamp(task), _points(task)) for task in done_tasks]

    daily_progress: List[Dict] = []
    day = start
    while day <= current:
        day_end = day.replace(hour=23, minute=59, second=59, microsecond=999999)
        completed_by_day = sum(
            points for completed_at, points in completions
            if completed_at is not None and completed_at <= day_end
        )
        days_elapsed = _ceil_days(day - start)
        ideal = max(0, total_points - ideal_burn_rate * days_elapsed)

        daily_progress.append({
            'date': day.date().isoformat(),
            'remaining': total_points - completed_by_day,
            'ideal': ideal,
        })
        day = day + ONE_DAY

    result = {
        'total_points': total_points,
        'completed_points': completed_points,
        'remaining_points': total_points - completed_points,
        'daily_progress': daily_progress,
    }
    if include_summary:
        result['days_in_sprint'] = days_in_sprint
        result['ideal_burn_rate'] = ideal_burn_rate
    return result
