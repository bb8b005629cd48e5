# apps/core/admin.py

from django.contrib import admin
from django.contrib.auth.admin import UserAdmin as BaseUserAdmin
from django.db.models import Count
from django.utils.html import format_html

from .models import ActivityLog, Comment, Project, Sprint, Task, Team, TeamMember, User


@admin.register(User)
class UserAdmin(BaseUserAdmin):
    """Admin for accounts, searchable by email"""

    list_display = ['email', 'name', 'username', 'is_active', 'date_joined']
    list_filter = ['is_staff', 'is_active', 'date_joined']
    search_fields = ['email', 'name', 'username']
    ordering = ['-date_joined']

    fieldsets = BaseUserAdmin.fieldsets + (
        ('Profile', {
            'fields': ('name', 'avatar_url')
        }),
    )

    add_fieldsets = BaseUserAdmin.add_fieldsets + (
        ('Profile', {
            'fields': ('email', 'name')
        }),
    )


class TeamMemberInline(admin.TabularInline):
    model = TeamMember
    extra = 0
    autocomplete_fields = ['user']


@admin.register(Team)
class TeamAdmin(admin.ModelAdmin):
    list_display = ['name', 'slug', 'member_count', 'created_at']
    search_fields = ['name', 'slug']
    prepopulated_fields = {'slug': ('name',)}
    inlines = [TeamMemberInline]

    def get_queryset(self, request):
        return super().get_queryset(request).annotate(_member_count=Count('members'))

    def member_count(self, obj):
        return obj._member_count

    member_count.short_description = 'Members'


@admin.register(Project)
class ProjectAdmin(admin.ModelAdmin):
    list_display = ['key', 'name', 'team', 'is_archived', 'created_at']
    list_filter = ['is_archived', 'team']
    search_fields = ['key', 'name']


@admin.register(Sprint)
class SprintAdmin(admin.ModelAdmin):
    list_display = ['name', 'project', 'status_badge', 'start_date', 'end_date']
    list_filter = ['status', 'project']
    search_fields = ['name', 'goal']

    def status_badge(self, obj):
        """Sprint status with a colored badge"""
        colors = {
            Sprint.STATUS_PLANNED: '#6B7280',
            Sprint.STATUS_ACTIVE: '#3B82F6',
            Sprint.STATUS_COMPLETED: '#10B981',
        }
        return format_html(
            '<span style="background-color: {}; color: white; '
            'padding: 3px 8px; border-radius: 4px; font-size: 11px;">{}</span>',
            colors.get(obj.status, '#6B7280'), obj.get_status_display()
        )

    status_badge.short_description = 'Status'


class CommentInline(admin.TabularInline):
    model = Comment
    extra = 0
    readonly_fields = ['user', 'created_at']


@admin.register(Task)
class TaskAdmin(admin.ModelAdmin):
    list_display = ['__str__', 'status', 'priority', 'type', 'story_points', 'assignee', 'sprint']
    list_filter = ['status', 'priority', 'type', 'project']
    search_fields = ['title', 'description']
    raw_id_fields = ['sprint', 'creator', 'assignee']
    inlines = [CommentInline]


@admin.register(ActivityLog)
class ActivityLogAdmin(admin.ModelAdmin):
    list_display = ['task', 'user', 'action', 'old_value', 'new_value', 'created_at']
    list_filter = ['action']
    readonly_fields = ['task', 'user', 'action', 'old_value', 'new_value', 'created_at']
