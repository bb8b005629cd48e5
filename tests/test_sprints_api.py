# tests/test_sprints_api.py

from datetime import timedelta

import pytest
from django.utils import timezone

from apps.core.models import Sprint, Task

pytestmark = pytest.mark.django_db


def planned_sprint(project, name='Sprint 2'):
    start = timezone.now() + timedelta(days=14)
    return Sprint.objects.create(
        project=project,
        name=name,
        start_date=start,
        end_date=start + timedelta(days=14),
    )


def test_create_sprint_defaults_end_date(member_api, project):
    response = member_api.post(f'/api/sprints/project/{project.pk}', {
        'name': 'Sprint 9',
        'start_date': '2024-05-01T09:00:00Z',
    })

    assert response.status_code == 201
    body = response.json()
    assert body['status'] == 'PLANNED'
    assert body['end_date'].startswith('2024-05-15T09:00:00')
    assert body['task_count'] == 0


def test_end_before_start_is_rejected(member_api, project):
    response = member_api.post(f'/api/sprints/project/{project.pk}', {
        'name': 'Backwards',
        'start_date': '2024-05-10T00:00:00Z',
        'end_date': '2024-05-01T00:00:00Z',
    })

    assert response.status_code == 400
    assert response.json()['errors'][0]['field'] == 'end_date'


def test_list_sprints_with_task_counts(member_api, project, sprint, tasks):
    planned_sprint(project)

    response = member_api.get(f'/api/sprints/project/{project.pk}')

    assert response.status_code == 200
    body = response.json()
    assert [s['name'] for s in body] == ['Sprint 2', 'Sprint 1']
    assert body[1]['task_count'] == 2


def test_outsider_cannot_see_sprints(outsider_api, project, sprint):
    assert outsider_api.get(f'/api/sprints/project/{project.pk}').status_code == 403
    assert outsider_api.get(f'/api/sprints/{sprint.pk}').status_code == 403


def test_sprint_detail(member_api, sprint):
    response = member_api.get(f'/api/sprints/{sprint.pk}')

    assert response.status_code == 200
    assert response.json()['project']['key'] == 'WEB'


def test_update_sprint(member_api, sprint):
    response = member_api.patch(f'/api/sprints/{sprint.pk}', {'goal': 'Ship the board'})

    assert response.status_code == 200
    assert response.json()['goal'] == 'Ship the board'
    assert response.json()['name'] == 'Sprint 1'


def test_update_rejects_end_before_existing_start(member_api, sprint):
    response = member_api.patch(f'/api/sprints/{sprint.pk}', {
        'end_date': (sprint.start_date - timedelta(days=1)).isoformat(),
    })
    assert response.status_code == 400


def test_delete_sprint_returns_tasks_to_backlog(member_api, sprint, tasks):
    response = member_api.delete(f'/api/sprints/{sprint.pk}')

    assert response.status_code == 204
    tasks['todo'].refresh_from_db()
    assert tasks['todo'].sprint_id is None


class TestLifecycle:

    def test_only_one_active_sprint(self, member_api, project, sprint):
        other = planned_sprint(project)

        response = member_api.post(f'/api/sprints/{other.pk}/start')

        assert response.status_code == 400
        assert response.json()['error'] == 'Another sprint is already active'

    def test_patch_to_active_follows_start_rules(self, member_api, project, sprint):
        other = planned_sprint(project)

        response = member_api.patch(f'/api/sprints/{other.pk}', {'status': 'ACTIVE'})
        assert response.status_code == 400

    def test_start_then_complete(self, member_api, project):
        other = planned_sprint(project)

        response = member_api.post(f'/api/sprints/{other.pk}/start')
        assert response.status_code == 200
        assert response.json()['status'] == 'ACTIVE'

        response = member_api.post(f'/api/sprints/{other.pk}/complete')
        assert response.status_code == 200
        assert response.json()['status'] == 'COMPLETED'

    def test_completed_sprint_cannot_restart(self, member_api, sprint):
        member_api.post(f'/api/sprints/{sprint.pk}/complete')

        response = member_api.post(f'/api/sprints/{sprint.pk}/start')

        assert response.status_code == 400
        assert response.json()['error'] == 'Cannot start a completed sprint'

    def test_complete_requires_active(self, member_api, project):
        other = planned_sprint(project)

        response = member_api.post(f'/api/sprints/{other.pk}/complete')

        assert response.status_code == 400
        assert response.json()['error'] == 'Only active sprints can be completed'

    def test_completed_sprint_tasks_stay_done(self, member_api, project, sprint, user):
        done = Task.objects.create(
            project=project, sprint=sprint, task_number=project.next_task_number(),
            title='Shipped', status=Task.STATUS_DONE, creator=user,
        )
        member_api.post(f'/api/sprints/{sprint.pk}/complete')

        response = member_api.patch(f'/api/tasks/{done.pk}/move', {'status': 'TODO'})

        assert response.status_code == 400
        assert response.json()['error'] == 'Cannot move completed tasks from a finished sprint'

    def test_patch_cannot_complete_planned_sprint(self, member_api, project):
        other = planned_sprint(project)

        response = member_api.patch(f'/api/sprints/{other.pk}', {'status': 'COMPLETED'})

        assert response.status_code == 400
        other.refresh_from_db()
        assert other.status == Sprint.STATUS_PLANNED

    def test_patch_completes_active_sprint(self, member_api, sprint):
        response = member_api.patch(f'/api/sprints/{sprint.pk}', {'status': 'COMPLETED', 'goal': 'Done'})

        assert response.status_code == 200
        assert response.json()['status'] == 'COMPLETED'
        assert response.json()['goal'] == 'Done'

    def test_patch_cannot_reopen_completed_sprint(self, member_api, project, sprint, user):
        done = Task.objects.create(
            project=project, sprint=sprint, task_number=project.next_task_number(),
            title='Shipped', status=Task.STATUS_DONE, creator=user,
        )
        member_api.post(f'/api/sprints/{sprint.pk}/complete')

        response = member_api.patch(f'/api/sprints/{sprint.pk}', {'status': 'PLANNED'})

        assert response.status_code == 400
        assert response.json()['error'] == 'Cannot change the status of a completed sprint'
        assert member_api.patch(f'/api/tasks/{done.pk}/move', {'status': 'TODO'}).status_code == 400

    def test_patch_cannot_move_active_sprint_back(self, member_api, sprint):
        response = member_api.patch(f'/api/sprints/{sprint.pk}', {'status': 'PLANNED'})
        assert response.status_code == 400
