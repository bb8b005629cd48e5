# tests/test_reports.py

from datetime import timedelta

import pytest
from django.utils import timezone

from apps.core.models import Sprint, Task
from apps.reports.utils import calculate_velocity

from .conftest import make_task

pytestmark = pytest.mark.django_db


def finished_sprint(project, creator, name, committed, completed, weeks_ago):
    start = timezone.now() - timedelta(weeks=weeks_ago)
    sprint = Sprint.objects.create(
        project=project,
        name=name,
        start_date=start,
        end_date=start + timedelta(days=14),
        status=Sprint.STATUS_COMPLETED,
    )
    make_task(project, creator, f'{name} done', sprint=sprint, status=Task.STATUS_DONE, points=completed)
    make_task(project, creator, f'{name} left', sprint=sprint, points=committed - completed)
    return sprint


def test_burndown_endpoint(member_api, sprint, tasks):
    response = member_api.get(f'/api/sprints/{sprint.pk}/burndown')

    assert response.status_code == 200
    body = response.json()
    assert body['total_points'] == 8
    assert body['remaining_points'] == 8
    assert body['days_in_sprint'] == 14
    assert body['sprint']['id'] == sprint.pk
    assert len(body['daily_progress']) == 3


def test_burndown_forbidden_for_outsider(outsider_api, sprint):
    assert outsider_api.get(f'/api/sprints/{sprint.pk}/burndown').status_code == 403


def test_velocity(project, user):
    finished_sprint(project, user, 'Old', committed=10, completed=6, weeks_ago=6)
    finished_sprint(project, user, 'Recent', committed=8, completed=8, weeks_ago=3)

    result = calculate_velocity(project)

    assert [row['name'] for row in result['sprints']] == ['Old', 'Recent']
    assert result['sprints'][0]['committed_points'] == 10
    assert result['sprints'][0]['completed_points'] == 6
    assert result['average_velocity'] == 7


def test_velocity_without_finished_sprints(member_api, project, sprint):
    response = member_api.get(f'/api/projects/{project.pk}/velocity')

    assert response.status_code == 200
    assert response.json() == {'project_id': project.pk, 'sprints': [], 'average_velocity': 0}


class TestExports:

    def test_csv(self, member_api, sprint, tasks):
        response = member_api.get(f'/api/sprints/{sprint.pk}/report.csv')

        assert response.status_code == 200
        assert response['Content-Type'].startswith('text/csv')
        assert 'attachment' in response['Content-Disposition']
        content = response.content.decode('utf-8')
        assert content.startswith('\ufeff')
        assert 'WEB-1' in content
        assert 'Unassigned' in content

    def test_pdf(self, member_api, sprint, tasks):
        response = member_api.get(f'/api/sprints/{sprint.pk}/report.pdf')

        assert response.status_code == 200
        assert response['Content-Type'] == 'application/pdf'
        assert response.content.startswith(b'%PDF')

    def test_xlsx(self, member_api, sprint, tasks):
        response = member_api.get(f'/api/sprints/{sprint.pk}/report.xlsx')

        assert response.status_code == 200
        assert response.content.startswith(b'PK')

    def test_exports_require_auth(self, api, sprint):
        assert api.get(f'/api/sprints/{sprint.pk}/report.csv').status_code == 401
