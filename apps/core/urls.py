# apps/core/urls.py

from django.urls import path
from . import views

app_name = 'core'

urlpatterns = [
    # === AUTH ===
    path('auth/register', views.register_view, name='register'),
    path('auth/login', views.login_view, name='login'),
    path('auth/me', views.me_view, name='me'),

    # === TEAMS ===
    path('teams', views.teams_view, name='teams'),
    path('teams/<int:team_id>', views.team_detail_view, name='team_detail'),
    path('teams/<int:team_id>/members', views.team_members_view, name='team_members'),
    path('teams/<int:team_id>/members/<int:user_id>', views.team_member_detail_view, name='team_member_detail'),

    # === PROJECTS ===
    path('projects', views.projects_view, name='projects'),
    path('projects/team/<int:team_id>', views.team_projects_view, name='team_projects'),
    path('projects/<int:project_id>', views.project_detail_view, name='project_detail'),
]
