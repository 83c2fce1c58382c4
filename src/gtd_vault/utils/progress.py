"""Project progress derivation.

A project never lists its tasks. Its children are whatever tasks carry a
``project`` link pointing at it (by title or by id), so progress is always a
function of the task collection and must be recomputed after any task change
that could alter membership or completion.
"""

from __future__ import annotations

from collections.abc import Iterable

from gtd_vault.models import Project, ProjectStatistics, Task
from gtd_vault.models.core import round_half_up

IN_PROGRESS_STATUSES = frozenset({"today", "next-action"})
NOT_STARTED_STATUSES = frozenset({"inbox", "someday"})


def references_project(task: Task, project: Project) -> bool:
    if not task.project:
        return False
    return task.project.strip() in project.link_tokens


def child_tasks(project: Project, all_tasks: Iterable[Task]) -> list[Task]:
    """Return the tasks whose project link points at *project*."""
    return [task for task in all_tasks if not task.damaged and references_project(task, project)]


def calculate_progress(project: Project, all_tasks: Iterable[Task]) -> int:
    """Percentage of the project's tasks that are completed, 0 when it has none."""
    children = child_tasks(project, all_tasks)
    if not children:
        return 0
    done = sum(1 for task in children if task.completed)
    return round_half_up(100 * done / len(children))


def statistics(project: Project, all_tasks: Iterable[Task]) -> ProjectStatistics:
    """Break the project's tasks down for reporting.

    Waiting and trashed tasks count toward ``total`` but land in neither
    the in-progress nor the not-started bucket.
    """
    children = child_tasks(project, all_tasks)
    completed = sum(1 for t in children if t.completed)
    in_progress = sum(1 for t in children if not t.completed and t.status in IN_PROGRESS_STATUSES)
    not_started = sum(1 for t in children if not t.completed and t.status in NOT_STARTED_STATUSES)
    return ProjectStatistics(
        total=len(children),
        completed=completed,
        in_progress=in_progress,
        not_started=not_started,
        progress=round_half_up(100 * completed / len(children)) if children else 0,
    )


def recompute_all(projects: Iterable[Project], all_tasks: Iterable[Task]) -> dict[str, int]:
    """Map every project id to its derived progress."""
    tasks = list(all_tasks)
    return {project.id: calculate_progress(project, tasks) for project in projects}
