# tests/test_burndown.py

from datetime import datetime, timedelta, timezone as dt_timezone
from types import SimpleNamespace

from apps.reports.burndown import compute_burndown

UTC = dt_timezone.utc
START = datetime(2024, 3, 4, 9, 0, tzinfo=UTC)
END = START + timedelta(days=4)


def task(points, status='TODO', completed_at=None):
    return SimpleNamespace(
        story_points=points,
        status=status,
        completed_at=completed_at,
        updated_at=START,
    )


def test_totals_and_daily_series():
    tasks = [
        task(5, 'DONE', START + timedelta(hours=3)),
        task(3, 'DONE', START + timedelta(days=2, hours=1)),
        task(2),
        task(None),
    ]

    result = compute_burndown(START, END, tasks, now=START + timedelta(days=2, hours=5))

    assert result['total_points'] == 10
    assert result['completed_points'] == 8
    assert result['remaining_points'] == 2
    assert [day['date'] for day in result['daily_progress']] == ['2024-03-04', '2024-03-05', '2024-03-06']
    assert [day['remaining'] for day in result['daily_progress']] == [5, 5, 2]
    assert [day['ideal'] for day in result['daily_progress']] == [10, 7.5, 5]


def test_series_stops_at_sprint_end():
    result = compute_burndown(START, END, [task(4)], now=END + timedelta(days=10))

    assert len(result['daily_progress']) == 5
    assert result['daily_progress'][-1]['ideal'] == 0


def test_sprint_not_started_has_no_days():
    result = compute_burndown(START, END, [task(4)], now=START - timedelta(days=1))

    assert result['daily_progress'] == []
    assert result['remaining_points'] == 4


def test_done_task_without_completed_at_uses_updated_at():
    done = task(3, 'DONE')
    result = compute_burndown(START, END, [done, task(1)], now=START + timedelta(hours=1))

    assert result['daily_progress'][0]['remaining'] == 1


def test_summary_is_optional():
    plain = compute_burndown(START, END, [task(8)], now=START)
    assert 'days_in_sprint' not in plain

    summary = compute_burndown(START, END, [task(8)], now=START, include_summary=True)
    assert summary['days_in_sprint'] == 4
    assert summary['ideal_burn_rate'] == 2


def test_empty_sprint():
    result = compute_burndown(START, START, [], now=START, include_summary=True)

    assert result['total_points'] == 0
    assert result['days_in_sprint'] == 1
    assert result['daily_progress'] == [{'date': '2024-03-04', 'remaining': 0, 'ideal': 0}]
