# tests/conftest.py
"""
Shared fixtures for the Sprint Board test suite.

Provides:
- users with signed tokens and an authenticated JSON client
- a team (admin + member), a project, an active sprint and a few tasks

Tests run against the in-memory SQLite database and channel layer
configured in config.settings.test.
"""

from datetime import timedelta

import pytest
from django.test import Client
from django.utils import timezone

from apps.core.auth_service import auth_service
from apps.core.models import Project, Sprint, Task, Team, TeamMember, User


class ApiClient:
    """Thin wrapper sending JSON with a bearer token"""

    def __init__(self, token=None):
        self.client = Client()
        self.token = token

    def _headers(self):
        if not self.token:
            return {}
        return {'HTTP_AUTHORIZATION': f'Bearer {self.token}'}

    def get(self, path, params=None):
        return self.client.get(path, params or {}, **self._headers())

    def post(self, path, data=None):
        return self.client.post(path, data or {}, content_type='application/json', **self._headers())

    def patch(self, path, data=None):
        return self.client.patch(path, data or {}, content_type='application/json', **self._headers())

    def delete(self, path):
        return self.client.delete(path, **self._headers())


def make_user(email, name='Test User', password='secret123'):
    return User.objects.create_user(
        username=email.split('@')[0],
        email=email,
        password=password,
        name=name,
    )


def make_task(project, creator, title='Task', sprint=None, status=Task.STATUS_TODO, points=None, **extra):
    return Task.objects.create(
        project=project,
        sprint=sprint,
        task_number=project.next_task_number(),
        title=title,
        status=status,
        story_points=points,
        creator=creator,
        **extra,
    )


# ============== Users ==============

@pytest.fixture
def user(db):
    return make_user('ana@example.com', name='Ana Admin')


@pytest.fixture
def member(db):
    return make_user('bruno@example.com', name='Bruno Member')


@pytest.fixture
def outsider(db):
    return make_user('carla@example.com', name='Carla Outsider')


@pytest.fixture
def token(user):
    return auth_service.issue_token(user)


@pytest.fixture
def api():
    """Anonymous client"""
    return ApiClient()


@pytest.fixture
def admin_api(token):
    return ApiClient(token)


@pytest.fixture
def member_api(member):
    return ApiClient(auth_service.issue_token(member))


@pytest.fixture
def outsider_api(outsider):
    return ApiClient(auth_service.issue_token(outsider))


# ============== Team data ==============

@pytest.fixture
def team(user, member):
    team = Team.objects.create(name='Web Team', slug='web-team')
    TeamMember.objects.create(team=team, user=user, role=TeamMember.ROLE_ADMIN)
    TeamMember.objects.create(team=team, user=member, role=TeamMember.ROLE_MEMBER)
    return team


@pytest.fixture
def project(team):
    return Project.objects.create(team=team, name='Website', key='web')


@pytest.fixture
def sprint(project):
    start = timezone.now() - timedelta(days=2)
    return Sprint.objects.create(
        project=project,
        name='Sprint 1',
        start_date=start,
        end_date=start + timedelta(days=14),
        status=Sprint.STATUS_ACTIVE,
    )


@pytest.fixture
def tasks(project, sprint, user):
    """Two sprint tasks and one backlog task"""
    return {
        'todo': make_task(project, user, 'Write docs', sprint=sprint, points=3),
        'doing': make_task(project, user, 'Build board', sprint=sprint,
                           status=Task.STATUS_IN_PROGRESS, points=5),
        'backlog': make_task(project, user, 'Dark mode', points=2),
    }
