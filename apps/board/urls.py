# apps/board/urls.py

from django.urls import path
from . import views

app_name = 'board'

urlpatterns = [
    # Kanban
    path('projects/<int:project_id>/board', views.board_view, name='board'),

    # Sprints
    path('sprints/project/<int:project_id>', views.project_sprints_view, name='project_sprints'),
    path('sprints/<int:sprint_id>', views.sprint_detail_view, name='sprint_detail'),
    path('sprints/<int:sprint_id>/start', views.sprint_start_view, name='sprint_start'),
    path('sprints/<int:sprint_id>/complete', views.sprint_complete_view, name='sprint_complete'),

    # Tasks
    path('tasks/project/<int:project_id>', views.project_tasks_view, name='project_tasks'),
    path('tasks/sprint/<int:sprint_id>', views.sprint_tasks_view, name='sprint_tasks'),
    path('tasks/<int:task_id>', views.task_detail_view, name='task_detail'),
    path('tasks/<int:task_id>/move', views.task_move_view, name='task_move'),
    path('tasks/<int:task_id>/drop', views.task_drop_view, name='task_drop'),
    path('tasks/<int:task_id>/comments', views.task_comments_view, name='task_comments'),
]
