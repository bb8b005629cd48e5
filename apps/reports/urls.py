# apps/reports/urls.py

from django.urls import path
from . import views

app_name = 'reports'

urlpatterns = [
    path('sprints/<int:sprint_id>/burndown', views.burndown_view, name='burndown'),
    path('projects/<int:project_id>/velocity', views.velocity_view, name='velocity'),

    # Exports
    path('sprints/<int:sprint_id>/report.csv', views.sprint_report_csv, name='sprint_report_csv'),
    path('sprints/<int:sprint_id>/report.pdf', views.sprint_report_pdf, name='sprint_report_pdf'),
    path('sprints/<int:sprint_id>/report.xlsx', views.sprint_report_excel, name='sprint_report_excel'),
]
