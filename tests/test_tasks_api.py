# tests/test_tasks_api.py

import pytest

from apps.core.models import ActivityLog, Project, Task

pytestmark = pytest.mark.django_db


def actions(task):
    return list(ActivityLog.objects.filter(task=task).order_by('id').values_list('action', flat=True))


class TestCreate:

    def test_create_numbers_tasks_per_project(self, member_api, project, tasks):
        response = member_api.post(f'/api/tasks/project/{project.pk}', {'title': 'New thing'})

        assert response.status_code == 201
        body = response.json()
        assert body['task_number'] == 4
        assert body['key'] == 'WEB-4'
        assert body['status'] == 'TODO'
        assert body['priority'] == 'MEDIUM'
        assert body['type'] == 'TASK'
        assert body['labels'] == []
        assert actions(Task.objects.get(pk=body['id'])) == ['created']

    def test_create_in_sprint_with_assignee(self, admin_api, project, sprint, member):
        response = admin_api.post(f'/api/tasks/project/{project.pk}', {
            'title': 'Fix login',
            'type': 'BUG',
            'priority': 'URGENT',
            'story_points': 3,
            'labels': ['auth', 'frontend'],
            'sprint_id': sprint.pk,
            'assignee_id': member.pk,
        })

        assert response.status_code == 201
        body = response.json()
        assert body['sprint_id'] == sprint.pk
        assert body['assignee']['id'] == member.pk
        assert body['labels'] == ['auth', 'frontend']

    def test_assignee_must_be_team_member(self, admin_api, project, outsider):
        response = admin_api.post(f'/api/tasks/project/{project.pk}', {
            'title': 'Outsourced',
            'assignee_id': outsider.pk,
        })

        assert response.status_code == 400
        assert response.json()['error'] == 'Assignee must be a member of the team'

    def test_sprint_of_other_project_rejected(self, admin_api, project, team):
        other = Project.objects.create(team=team, name='Other', key='OTH')
        response = admin_api.post(f'/api/tasks/project/{other.pk}', {'title': 'X', 'sprint_id': 9999})
        assert response.status_code == 400

    def test_labels_must_be_strings(self, admin_api, project):
        response = admin_api.post(f'/api/tasks/project/{project.pk}', {'title': 'X', 'labels': [1, 2]})

        assert response.status_code == 400
        assert response.json()['errors'][0]['field'] == 'labels'


class TestList:

    def test_filters(self, member_api, project, tasks):
        url = f'/api/tasks/project/{project.pk}'

        assert len(member_api.get(url).json()) == 3
        assert [t['title'] for t in member_api.get(url, {'status': 'IN_PROGRESS'}).json()] == ['Build board']
        assert [t['title'] for t in member_api.get(url, {'sprint_id': 'backlog'}).json()] == ['Dark mode']
        assert len(member_api.get(url, {'sprint_id': tasks['todo'].sprint_id}).json()) == 2
        assert member_api.get(url, {'assignee_id': 'abc'}).status_code == 400

    def test_sprint_tasks(self, member_api, sprint, tasks):
        response = member_api.get(f'/api/tasks/sprint/{sprint.pk}')

        assert response.status_code == 200
        assert {t['title'] for t in response.json()} == {'Write docs', 'Build board'}
        assert response.json()[0]['comment_count'] == 0


class TestDetail:

    def test_detail_includes_comments_and_activity(self, member_api, tasks):
        task = tasks['todo']
        member_api.post(f'/api/tasks/{task.pk}/comments', {'content': 'On it'})

        response = member_api.get(f'/api/tasks/{task.pk}')

        assert response.status_code == 200
        body = response.json()
        assert [c['content'] for c in body['comments']] == ['On it']
        assert body['activity'][0]['action'] == 'commented'

    def test_outsider_forbidden(self, outsider_api, tasks):
        assert outsider_api.get(f"/api/tasks/{tasks['todo'].pk}").status_code == 403

    def test_missing_task(self, member_api, project):
        response = member_api.get('/api/tasks/9999')

        assert response.status_code == 404
        assert response.json()['error'] == 'Task not found'

    def test_update_logs_each_changed_field(self, member_api, tasks):
        task = tasks['todo']

        response = member_api.patch(f'/api/tasks/{task.pk}', {
            'title': 'Write better docs',
            'story_points': 3,
            'priority': 'HIGH',
        })

        assert response.status_code == 200
        assert response.json()['title'] == 'Write better docs'
        entries = ActivityLog.objects.filter(task=task).order_by('id')
        assert [e.action for e in entries] == ['updated title', 'updated priority']
        assert entries[0].old_value == 'Write docs'

    def test_update_rejects_blank_title(self, member_api, tasks):
        response = member_api.patch(f"/api/tasks/{tasks['todo'].pk}", {'title': ''})
        assert response.status_code == 400

    def test_update_position_zero(self, member_api, tasks):
        task = tasks['todo']
        task.position = 5
        task.save()

        response = member_api.patch(f'/api/tasks/{task.pk}', {'position': 0})

        assert response.status_code == 200
        assert response.json()['position'] == 0

    def test_update_to_backlog(self, member_api, tasks):
        response = member_api.patch(f"/api/tasks/{tasks['todo'].pk}", {'sprint_id': None})

        assert response.status_code == 200
        assert response.json()['sprint_id'] is None

    def test_delete(self, member_api, tasks):
        task = tasks['todo']
        assert member_api.delete(f'/api/tasks/{task.pk}').status_code == 204
        assert not Task.objects.filter(pk=task.pk).exists()


class TestMove:

    def test_move_to_done_stamps_completion(self, member_api, tasks):
        task = tasks['doing']

        response = member_api.patch(f'/api/tasks/{task.pk}/move', {'status': 'DONE'})

        assert response.status_code == 200
        body = response.json()
        assert body['status'] == 'DONE'
        assert body['completed_at'] is not None
        assert body['assignment_prompt'] is None
        entry = ActivityLog.objects.get(task=task, action='status changed')
        assert (entry.old_value, entry.new_value) == ('IN_PROGRESS', 'DONE')

    def test_leaving_done_clears_completion(self, member_api, tasks):
        task = tasks['doing']
        member_api.patch(f'/api/tasks/{task.pk}/move', {'status': 'DONE'})

        response = member_api.patch(f'/api/tasks/{task.pk}/move', {'status': 'IN_REVIEW'})

        assert response.json()['completed_at'] is None

    def test_unassigned_in_progress_prompts_for_assignee(self, member_api, tasks, user, member):
        response = member_api.patch(f"/api/tasks/{tasks['todo'].pk}/move", {'status': 'IN_PROGRESS'})

        prompt = response.json()['assignment_prompt']
        assert prompt['required'] is True
        assert {c['id'] for c in prompt['candidates']} == {user.pk, member.pk}

    def test_move_with_assignee(self, member_api, tasks, member):
        task = tasks['todo']

        response = member_api.patch(f'/api/tasks/{task.pk}/move', {
            'status': 'IN_PROGRESS',
            'assignee_id': member.pk,
        })

        body = response.json()
        assert body['assignee']['id'] == member.pk
        assert body['assignment_prompt'] is None
        entry = ActivityLog.objects.get(task=task, action='assignee changed')
        assert (entry.old_value, entry.new_value) == ('unassigned', str(member.pk))

    def test_explicit_null_assignee_skips_prompt(self, member_api, tasks):
        response = member_api.patch(f"/api/tasks/{tasks['todo'].pk}/move", {
            'status': 'IN_PROGRESS',
            'assignee_id': None,
        })

        assert response.json()['assignment_prompt'] is None
        assert response.json()['assignee'] is None

    def test_move_keeps_sprint_unless_given(self, member_api, tasks):
        task = tasks['todo']

        response = member_api.patch(f'/api/tasks/{task.pk}/move', {'status': 'IN_REVIEW'})
        assert response.json()['sprint_id'] == task.sprint_id

        response = member_api.patch(f'/api/tasks/{task.pk}/move', {'status': 'IN_REVIEW', 'sprint_id': None})
        assert response.json()['sprint_id'] is None

    def test_invalid_status(self, member_api, tasks):
        response = member_api.patch(f"/api/tasks/{tasks['todo'].pk}/move", {'status': 'LIMBO'})
        assert response.status_code == 400


class TestDrop:

    def test_drop_on_column(self, member_api, tasks):
        response = member_api.post(f"/api/tasks/{tasks['todo'].pk}/drop", {'over_id': 'IN_REVIEW'})

        assert response.status_code == 200
        body = response.json()
        assert body['moved'] is True
        assert body['task']['status'] == 'IN_REVIEW'

    def test_drop_on_card_takes_its_status(self, member_api, tasks):
        response = member_api.post(f"/api/tasks/{tasks['todo'].pk}/drop", {'over_id': str(tasks['doing'].pk)})

        body = response.json()
        assert body['task']['status'] == 'IN_PROGRESS'
        assert body['assignment_prompt']['required'] is True

    def test_drop_on_backlog_zone(self, member_api, tasks):
        response = member_api.post(f"/api/tasks/{tasks['doing'].pk}/drop", {'over_id': 'BACKLOG'})

        body = response.json()
        assert body['moved'] is True
        assert body['task']['sprint_id'] is None
        assert body['task']['status'] == 'IN_PROGRESS'

    def test_drop_on_sprint_zone(self, member_api, tasks, sprint):
        response = member_api.post(f"/api/tasks/{tasks['backlog'].pk}/drop", {'over_id': 'SPRINT'})

        assert response.json()['task']['sprint_id'] == sprint.pk

    def test_drop_nowhere_is_noop(self, member_api, tasks):
        response = member_api.post(f"/api/tasks/{tasks['todo'].pk}/drop", {'over_id': 'nowhere'})

        body = response.json()
        assert body['moved'] is False
        assert body['task']['status'] == 'TODO'
        assert actions(tasks['todo']) == []


class TestComments:

    def test_add_and_list_comments(self, member_api, tasks):
        task = tasks['todo']

        response = member_api.post(f'/api/tasks/{task.pk}/comments', {'content': 'First'})
        assert response.status_code == 201
        member_api.post(f'/api/tasks/{task.pk}/comments', {'content': 'Second'})

        response = member_api.get(f'/api/tasks/{task.pk}/comments')
        assert [c['content'] for c in response.json()] == ['Second', 'First']

    def test_long_comment_is_truncated_in_activity(self, member_api, tasks, settings):
        task = tasks['todo']
        member_api.post(f'/api/tasks/{task.pk}/comments', {'content': 'x' * 250})

        entry = ActivityLog.objects.get(task=task, action='commented')
        assert entry.new_value == 'x' * settings.SPRINTBOARD_COMMENT_PREVIEW_CHARS

    def test_empty_comment_rejected(self, member_api, tasks):
        response = member_api.post(f"/api/tasks/{tasks['todo'].pk}/comments", {'content': ''})
        assert response.status_code == 400
