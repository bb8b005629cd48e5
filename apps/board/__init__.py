# apps/board/__init__.py

"""
Board - sprints, tasks and the kanban board

- Sprint lifecycle
- Task CRUD, moves, comments and activity log
- Drag-and-drop resolution rules
- Realtime project events over WebSockets
"""
