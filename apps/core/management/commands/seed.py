# apps/core/management/commands/seed.py

from datetime import timedelta

from django.conf import settings
from django.core.management.base import BaseCommand
from django.db import transaction
from django.utils import timezone

from apps.core.models import ActivityLog, Project, Sprint, Task, Team, TeamMember, User

DEMO_PASSWORD = 'demo1234'

DEMO_TASKS = [
    # title, type, status, priority, points
    ('Set up CI pipeline', 'TASK', 'DONE', 'HIGH', 3),
    ('Login page', 'STORY', 'DONE', 'HIGH', 5),
    ('Kanban drag and drop', 'STORY', 'IN_PROGRESS', 'URGENT', 8),
    ('Burndown chart', 'STORY', 'IN_REVIEW', 'MEDIUM', 5),
    ('Fix token expiry check', 'BUG', 'TODO', 'HIGH', 2),
    ('Sprint report export', 'STORY', 'TODO', 'LOW', 3),
]


class Command(BaseCommand):
    help = 'Creates a demo team, project and active sprint (idempotent)'

    def add_arguments(self, parser):
        parser.add_argument('--email', default='demo@sprintboard.dev', help='Demo account email')

    @transaction.atomic
    def handle(self, *args, **options):
        self.stdout.write('Seeding demo data...')

        owner = self._get_or_create_user(options['email'], 'Demo Owner')
        member = self._get_or_create_user('teammate@sprintboard.dev', 'Demo Teammate')

        team, _ = Team.objects.get_or_create(
            slug='demo-team',
            defaults={'name': 'Demo Team', 'description': 'Sample team created by the seed command'},
        )
        TeamMember.objects.get_or_create(team=team, user=owner, defaults={'role': TeamMember.ROLE_ADMIN})
        TeamMember.objects.get_or_create(team=team, user=member, defaults={'role': TeamMember.ROLE_MEMBER})

        project, created = Project.objects.get_or_create(
            team=team,
            key='DEMO',
            defaults={'name': 'Demo Project', 'description': 'Sample project'},
        )

        if created:
            self._create_sprint_with_tasks(project, owner, member)
            self.stdout.write(self.style.SUCCESS(
                f'Demo data ready. Sign in as {owner.email} / {DEMO_PASSWORD}'
            ))
        else:
            self.stdout.write(self.style.WARNING('Demo project already exists, nothing to do'))

    def _get_or_create_user(self, email, name):
        user = User.objects.filter(email=email).first()
        if user is None:
            user = User.objects.create_user(
                username=email.split('@')[0],
                email=email,
                password=DEMO_PASSWORD,
                name=name,
            )
            self.stdout.write(f'  created user {email}')
        return user

    def _create_sprint_with_tasks(self, project, owner, member):
        start = timezone.now() - timedelta(days=3)
        sprint = Sprint.objects.create(
            project=project,
            name='Sprint 1',
            goal='Ship the first usable board',
            start_date=start,
            end_date=start + timedelta(days=settings.SPRINTBOARD_DEFAULT_SPRINT_DAYS),
            status=Sprint.STATUS_ACTIVE,
        )

        for position, (title, task_type, status, priority, points) in enumerate(DEMO_TASKS):
            task = Task.objects.create(
                project=project,
                sprint=sprint,
                task_number=project.next_task_number(),
                title=title,
                type=task_type,
                status=status,
                priority=priority,
                story_points=points,
                position=position,
                creator=owner,
                assignee=member if status != 'TODO' else None,
            )
            ActivityLog.record(task, owner, 'created', new_value='Task created')

        Task.objects.create(
            project=project,
            task_number=project.next_task_number(),
            title='Dark mode',
            type='STORY',
            status=Task.STATUS_BACKLOG,
            story_points=3,
            creator=owner,
        )
        self.stdout.write(f'  created {sprint} with {len(DEMO_TASKS)} tasks')
