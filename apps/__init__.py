# apps/__init__.py

"""
Sprint Board - Django applications

- core: accounts, teams, projects, authentication and permissions
- board: sprints, tasks, kanban rules and WebSockets
- reports: burndown, velocity and sprint exports
"""

__version__ = '1.0.0'
