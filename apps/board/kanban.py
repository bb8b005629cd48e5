# apps/board/kanban.py

"""
Kanban board rules

Pure functions over already loaded tasks and sprints: which tasks a
board view shows, and what dropping a card on a target means. The
move itself is applied by apps.board.services.
"""

from typing import List, NamedTuple, Optional

# Board columns, in display order
COLUMNS = [
    ('TODO', 'To Do'),
    ('IN_PROGRESS', 'In Progress'),
    ('IN_REVIEW', 'In Review'),
    ('DONE', 'Done'),
]
COLUMN_STATUSES = [status for status, _ in COLUMNS]

# Special drop zones
BACKLOG_ZONE = 'BACKLOG'
SPRINT_ZONE = 'SPRINT'

VIEW_SPRINT = 'sprint'
VIEW_BACKLOG = 'backlog'
VIEW_ALL = 'all'
VIEWS = (VIEW_SPRINT, VIEW_BACKLOG, VIEW_ALL)


class _Unchanged:
    def __repr__(self):
        return 'UNCHANGED'

    def __bool__(self):
        return False


UNCHANGED = _Unchanged()


class MoveIntent(NamedTuple):
    """Target of a resolved drop"""

    status: str
    sprint_id: object = UNCHANGED

    @property
    def changes_sprint(self):
        return self.sprint_id is not UNCHANGED


class Board(NamedTuple):
    """
    A board view of a project

    `tasks` are the visible tasks, `all_tasks` every task of the project.
    """

    view: str
    sprint: object
    tasks: List
    all_tasks: List
    active_sprint_id: Optional[int]
    viewing_active_sprint: bool

    def backlog_tasks(self):
        """Unsprinted tasks, shown as an extra column on the active sprint"""
        if not self.viewing_active_sprint:
            return []
        return [task for task in self.all_tasks if task.sprint_id is None]

    def columns(self):
        columns = []
        if self.viewing_active_sprint:
            columns.append({
                'id': BACKLOG_ZONE,
                'title': 'Backlog',
                'tasks': self.backlog_tasks(),
            })
        for status, title in COLUMNS:
            columns.append({
                'id': status,
                'title': title,
                'tasks': [task for task in self.tasks if task.status == status],
            })
        return columns


def build_board(all_tasks, sprints, view=VIEW_SPRINT, sprint_id=None) -> Board:
    """
    Selects the visible tasks for a view

    - backlog: unsprinted tasks not yet done
    - all: every task
    - sprint: the selected sprint, the active one by default, and every
      task when the project has no sprint to show
    """
    all_tasks = list(all_tasks)
    sprints = list(sprints)
    active = next((sprint for sprint in sprints if sprint.status == 'ACTIVE'), None)
    active_sprint_id = active.pk if active else None

    if view == VIEW_BACKLOG:
        visible = [task for task in all_tasks if task.sprint_id is None and task.status != 'DONE']
        return Board(view, None, visible, all_tasks, active_sprint_id, False)

    if view == VIEW_ALL:
        return Board(view, None, all_tasks, all_tasks, active_sprint_id, False)

    selected = None
    if sprint_id is not None:
        selected = next((sprint for sprint in sprints if str(sprint.pk) == str(sprint_id)), None)
    if selected is None:
        selected = active

    if selected is None:
        return Board(VIEW_SPRINT, None, all_tasks, all_tasks, active_sprint_id, False)

    visible = [task for task in all_tasks if task.sprint_id == selected.pk]
    viewing_active = active is not None and selected.pk == active.pk
    return Board(VIEW_SPRINT, selected, visible, all_tasks, active_sprint_id, viewing_active)


def _find_task(tasks, task_id):
    return next((task for task in tasks if str(task.pk) == str(task_id)), None)


def resolve_drop(task, over_id, board: Board) -> Optional[MoveIntent]:
    """
    Translates a drop of `task` on `over_id` into a move, or None

    Drop zones are checked against every task of the project when the
    active sprint is shown, since the backlog column is visible then.
    Columns and cards only accept cards of the visible set.
    """
    if over_id is None or over_id == '':
        return None

    over_id = str(over_id)
    zone_tasks = board.all_tasks if board.viewing_active_sprint else board.tasks

    if over_id == BACKLOG_ZONE:
        dragged = _find_task(zone_tasks, task.pk)
        if dragged is None:
            return None
        return MoveIntent(dragged.status, None)

    if over_id == SPRINT_ZONE and board.active_sprint_id is not None:
        dragged = _find_task(zone_tasks, task.pk)
        if dragged is None:
            return None
        return MoveIntent(dragged.status, board.active_sprint_id)

    target = _find_task(board.tasks, over_id)
    if target is not None:
        new_status = target.status
    elif over_id in COLUMN_STATUSES:
        new_status = over_id
    else:
        return None

    dragged = _find_task(board.tasks, task.pk)
    if dragged is None or dragged.status == new_status:
        return None
    return MoveIntent(new_status)
