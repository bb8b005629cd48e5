# apps/core/models.py

from django.contrib.auth.models import AbstractUser
from django.core.validators import MinValueValidator
from django.db import models
from django.utils import timezone


class User(AbstractUser):
    """
    Custom user model

    Users sign in with their email; `username` is kept as the public login
    handle and is generated at registration time.
    """

    email = models.EmailField(unique=True)
    name = models.CharField(max_length=200)
    avatar_url = models.URLField(max_length=500, blank=True)

    # === METADATA ===
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        db_table = 'users'
        indexes = [
            models.Index(fields=['email'], name='user_email_idx'),
        ]

    @property
    def login(self):
        return self.username

    def get_teams(self):
        """Teams where the user holds any membership"""
        return Team.objects.filter(members__user=self).distinct()

    def membership_for(self, team):
        """Returns the TeamMember row for `team`, or None"""
        return TeamMember.objects.filter(team=team, user=self).first()

    def __str__(self):
        return f"{self.name or self.username} <{self.email}>"


class Team(models.Model):
    """Group of users that owns projects"""

    name = models.CharField(max_length=200)
    slug = models.SlugField(max_length=100, unique=True)
    description = models.TextField(blank=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        db_table = 'team'
        ordering = ['name']

    def admins(self):
        return self.members.filter(role=TeamMember.ROLE_ADMIN)

    def member_users(self):
        """Users of the team, ordered for assignment pickers"""
        return User.objects.filter(team_memberships__team=self).order_by('name', 'email')

    def __str__(self):
        return f"{self.name} ({self.slug})"


class TeamMember(models.Model):
    """Membership of a user in a team"""

    ROLE_ADMIN = 'ADMIN'
    ROLE_MEMBER = 'MEMBER'
    ROLE_CHOICES = [
        (ROLE_ADMIN, 'Admin'),
        (ROLE_MEMBER, 'Member'),
    ]

    team = models.ForeignKey(
        Team,
        on_delete=models.CASCADE,
        related_name='members'
    )
    user = models.ForeignKey(
        User,
        on_delete=models.CASCADE,
        related_name='team_memberships'
    )
    role = models.CharField(max_length=10, choices=ROLE_CHOICES, default=ROLE_MEMBER)
    joined_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        db_table = 'team_member'
        ordering = ['joined_at']
        constraints = [
            models.UniqueConstraint(fields=['team', 'user'], name='unique_team_member'),
        ]

    @property
    def is_admin(self):
        return self.role == self.ROLE_ADMIN

    def __str__(self):
        return f"{self.user.email} in {self.team.slug} ({self.role})"


class Project(models.Model):
    """Project owned by a team - aggregates sprints and tasks"""

    team = models.ForeignKey(
        Team,
        on_delete=models.CASCADE,
        related_name='projects'
    )
    name = models.CharField(max_length=200)
    key = models.CharField(max_length=20)
    description = models.TextField(blank=True)
    is_archived = models.BooleanField(default=False)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        db_table = 'project'
        ordering = ['-created_at']
        constraints = [
            models.UniqueConstraint(fields=['team', 'key'], name='unique_project_key_per_team'),
        ]

    def save(self, *args, **kwargs):
        """Keys are always stored upper-case"""
        if self.key:
            self.key = self.key.strip().upper()
        super().save(*args, **kwargs)

    def get_active_sprint(self):
        return self.sprints.filter(status=Sprint.STATUS_ACTIVE).first()

    def next_task_number(self):
        """Next sequential number for a task of this project"""
        last = self.tasks.aggregate(last=models.Max('task_number'))['last']
        return (last or 0) + 1

    def __str__(self):
        return f"{self.key} - {self.name}"


class Sprint(models.Model):
    """Time-boxed iteration of a project"""

    STATUS_PLANNED = 'PLANNED'
    STATUS_ACTIVE = 'ACTIVE'
    STATUS_COMPLETED = 'COMPLETED'
    STATUS_CHOICES = [
        (STATUS_PLANNED, 'Planned'),
        (STATUS_ACTIVE, 'Active'),
        (STATUS_COMPLETED, 'Completed'),
    ]

    project = models.ForeignKey(
        Project,
        on_delete=models.CASCADE,
        related_name='sprints'
    )
    name = models.CharField(max_length=200)
    goal = models.TextField(blank=True)
    start_date = models.DateTimeField()
    end_date = models.DateTimeField()
    status = models.CharField(max_length=10, choices=STATUS_CHOICES, default=STATUS_PLANNED)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        db_table = 'sprint'
        ordering = ['-start_date']
        indexes = [
            models.Index(fields=['project', 'status'], name='sprint_project_status_idx'),
        ]

    @property
    def is_active(self):
        return self.status == self.STATUS_ACTIVE

    @property
    def is_completed(self):
        return self.status == self.STATUS_COMPLETED

    def __str__(self):
        return f"{self.project.key} - {self.name}"


class Task(models.Model):
    """
    Work item of a project

    A task without sprint lives in the project backlog.
    """

    TYPE_CHOICES = [
        ('EPIC', 'Epic'),
        ('STORY', 'Story'),
        ('TASK', 'Task'),
        ('BUG', 'Bug'),
    ]

    STATUS_BACKLOG = 'BACKLOG'
    STATUS_TODO = 'TODO'
    STATUS_IN_PROGRESS = 'IN_PROGRESS'
    STATUS_IN_REVIEW = 'IN_REVIEW'
    STATUS_DONE = 'DONE'
    STATUS_CHOICES = [
        (STATUS_BACKLOG, 'Backlog'),
        (STATUS_TODO, 'To Do'),
        (STATUS_IN_PROGRESS, 'In Progress'),
        (STATUS_IN_REVIEW, 'In Review'),
        (STATUS_DONE, 'Done'),
    ]

    PRIORITY_CHOICES = [
        ('LOW', 'Low'),
        ('MEDIUM', 'Medium'),
        ('HIGH', 'High'),
        ('URGENT', 'Urgent'),
    ]

    project = models.ForeignKey(
        Project,
        on_delete=models.CASCADE,
        related_name='tasks'
    )
    sprint = models.ForeignKey(
        Sprint,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name='tasks'
    )
    task_number = models.PositiveIntegerField()
    title = models.CharField(max_length=300)
    description = models.TextField(blank=True)
    type = models.CharField(max_length=10, choices=TYPE_CHOICES, default='TASK')
    status = models.CharField(max_length=12, choices=STATUS_CHOICES, default=STATUS_TODO)
    priority = models.CharField(max_length=10, choices=PRIORITY_CHOICES, default='MEDIUM')
    story_points = models.PositiveIntegerField(
        null=True,
        blank=True,
        validators=[MinValueValidator(0)]
    )
    labels = models.JSONField(default=list, blank=True)
    position = models.IntegerField(default=0)
    creator = models.ForeignKey(
        User,
        on_delete=models.CASCADE,
        related_name='tasks_created'
    )
    assignee = models.ForeignKey(
        User,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name='tasks_assigned'
    )
    completed_at = models.DateTimeField(null=True, blank=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        db_table = 'task'
        ordering = ['position', '-created_at']
        constraints = [
            models.UniqueConstraint(fields=['project', 'task_number'], name='unique_task_number_per_project'),
        ]
        indexes = [
            models.Index(fields=['project', 'status'], name='task_project_status_idx'),
            models.Index(fields=['sprint', 'status'], name='task_sprint_status_idx'),
        ]

    @property
    def key(self):
        """Human readable identifier, e.g. WEB-12"""
        return f"{self.project.key}-{self.task_number}"

    @property
    def is_done(self):
        return self.status == self.STATUS_DONE

    def sync_completion(self, previous_status=None):
        """Stamps or clears completed_at according to the status transition"""
        if self.status == self.STATUS_DONE and (previous_status != self.STATUS_DONE or not self.completed_at):
            self.completed_at = timezone.now()
        elif self.status != self.STATUS_DONE:
            self.completed_at = None

    def __str__(self):
        return f"{self.key} {self.title}"


class Comment(models.Model):
    """Comment left by a user on a task"""

    task = models.ForeignKey(
        Task,
        on_delete=models.CASCADE,
        related_name='comments'
    )
    user = models.ForeignKey(
        User,
        on_delete=models.CASCADE,
        related_name='comments'
    )
    content = models.TextField()
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        db_table = 'comment'
        ordering = ['-created_at', '-id']

    def __str__(self):
        return f"Comment by {self.user.email} on {self.task_id} at {self.created_at:%Y-%m-%d}"


class ActivityLog(models.Model):
    """Audit trail of changes made to a task"""

    task = models.ForeignKey(
        Task,
        on_delete=models.CASCADE,
        related_name='activity'
    )
    user = models.ForeignKey(
        User,
        on_delete=models.CASCADE,
        related_name='activity'
    )
    action = models.CharField(max_length=100)
    old_value = models.TextField(null=True, blank=True)
    new_value = models.TextField(null=True, blank=True)
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        db_table = 'activity_log'
        ordering = ['-created_at', '-id']

    @classmethod
    def record(cls, task, user, action, old_value=None, new_value=None):
        """Creates an entry for `task`"""
        return cls.objects.create(
            task=task,
            user=user,
            action=action,
            old_value=old_value,
            new_value=new_value,
        )

    def __str__(self):
        return f"{self.task_id}: {self.action}"
