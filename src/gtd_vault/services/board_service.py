"""Optimistic task board.

Holds an in-memory snapshot of tasks and projects for the presentation layer.
Every mutation is applied to the snapshot synchronously and its storage write
is dispatched as an ``asyncio.Task``. The caller never waits for I/O.

When a write fails, the snapshot can no longer be trusted. The failure is
summarized into ``failures`` and a single full reload from storage replaces
the snapshot; there is no partial rollback.
"""

from __future__ import annotations

import asyncio
from collections.abc import Awaitable, Callable
from datetime import date

from gtd_vault.models import EntityValidationError, Project, Task, make_link, strip_link
from gtd_vault.services.project_service import ProjectService
from gtd_vault.services.task_service import EDITABLE_FIELDS, TaskService
from gtd_vault.utils import progress as calculator
from gtd_vault.utils.errors import summarize_error
from gtd_vault.utils.logger import get_logger
from gtd_vault.utils.uuid_utils import generate_id

BoardListener = Callable[["TaskBoard"], None]


class TaskBoard:
    """In-memory view over the vault with fire-and-forget persistence."""

    def __init__(self, task_service: TaskService, project_service: ProjectService):
        """Initialize the board.

        Args:
            task_service: Service the writes are dispatched to
            project_service: Source of the project snapshot
        """
        self.task_service = task_service
        self.project_service = project_service
        self.tasks: dict[str, Task] = {}
        self.projects: dict[str, Project] = {}
        self.failures: list[str] = []
        self.logger = get_logger(__name__)
        self._pending: set[asyncio.Task] = set()
        self._reload: asyncio.Task | None = None
        self._listeners: list[BoardListener] = []

    # ------------------------------------------------------------------
    # Snapshot
    # ------------------------------------------------------------------

    async def load(self) -> None:
        """Replace the snapshot with what is in storage."""
        tasks = await self.task_service.list_tasks(include_trash=True)
        projects = await self.project_service.list_projects()
        self.tasks = {task.id: task for task in tasks}
        self.projects = {project.id: project for project in projects}
        self._notify()

    def visible_tasks(self, status: str | None = None) -> list[Task]:
        """Snapshot tasks in display order, trash only when asked for."""
        tasks = [
            t
            for t in self.tasks.values()
            if (t.status == status if status else t.status != "trash")
        ]
        return self.task_service.sort(tasks)

    def subscribe(self, listener: BoardListener) -> Callable[[], None]:
        """Call *listener* after every snapshot change.

        Returns:
            Callable that removes the listener again
        """
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def _notify(self) -> None:
        for listener in list(self._listeners):
            listener(self)

    def _require(self, task_id: str) -> Task:
        try:
            return self.tasks[task_id]
        except KeyError:
            raise KeyError(f"Task not on board: {task_id}") from None

    def _today(self) -> date:
        return self.task_service.clock()

    def _recompute_local_progress(self) -> None:
        derived = calculator.recompute_all(self.projects.values(), self.tasks.values())
        for project_id, value in derived.items():
            self.projects[project_id].update_progress(value)

    def _changed(self) -> None:
        self._recompute_local_progress()
        self._notify()

    # ------------------------------------------------------------------
    # Write dispatch and reconciliation
    # ------------------------------------------------------------------

    @property
    def pending(self) -> int:
        """Number of writes still in flight."""
        return len(self._pending)

    def _dispatch(self, label: str, write: Awaitable) -> asyncio.Task:
        task = asyncio.create_task(write, name=f"gtd-board: {label}")
        self._pending.add(task)
        task.add_done_callback(lambda t: self._on_write_done(label, t))
        return task

    def _on_write_done(self, label: str, task: asyncio.Task) -> None:
        self._pending.discard(task)
        if task.cancelled():
            return
        error = task.exception()
        if error is not None:
            self.logger.warning("%s failed, reloading board: %s", label, error)
            self.failures.append(summarize_error(error, label))
            self._schedule_reload()
            return
        result = task.result()
        saved = result if isinstance(result, list) else [result]
        for entity in saved:
            # The write may have moved the document; keep the snapshot's path current.
            if isinstance(entity, Task) and entity.id in self.tasks:
                self.tasks[entity.id].location = entity.location

    def _schedule_reload(self) -> None:
        if self._reload is not None and not self._reload.done():
            return
        self._reload = asyncio.create_task(self.load(), name="gtd-board: reload")
        self._reload.add_done_callback(self._on_reload_done)

    def _on_reload_done(self, task: asyncio.Task) -> None:
        if task.cancelled():
            return
        error = task.exception()
        if error is not None:
            self.logger.error("Board reload failed: %s", error)
            self.failures.append(summarize_error(error, "Reload"))

    async def drain(self) -> None:
        """Wait until every in-flight write and reload has finished."""
        while self._pending or (self._reload is not None and not self._reload.done()):
            if self._pending:
                await asyncio.gather(*list(self._pending), return_exceptions=True)
            if self._reload is not None and not self._reload.done():
                await asyncio.gather(self._reload, return_exceptions=True)

    # ------------------------------------------------------------------
    # Optimistic mutations
    # ------------------------------------------------------------------

    def create(self, title: str, **fields) -> asyncio.Task:
        """Add a task to the board and write its document.

        Args:
            title: Task title
            **fields: Any keyword ``TaskService.create_task`` accepts
        """
        task_id = generate_id()
        task = Task(id=task_id, title=(title or "").strip())
        status = fields.get("status", "inbox")
        task.change_status(status, today=self._today())
        task.priority = self.task_service.config.default_priority
        if fields.get("date") is not None:
            task.date = fields["date"]
        if fields.get("project"):
            task.assign_to_project(fields["project"])
        for name in ("priority", "tags", "notes", "body", "order"):
            if name in fields:
                setattr(task, name, fields[name])
        errors = task.validation_errors()
        if errors:
            raise EntityValidationError(f"Invalid task: {', '.join(errors)}", errors)
        self.tasks[task_id] = task
        self._changed()
        return self._dispatch(
            "Create task", self.task_service.create_task(title, task_id=task_id, **fields)
        )

    def toggle_complete(self, task_id: str) -> asyncio.Task:
        task = self._require(task_id)
        task.toggle_complete()
        self._changed()
        if task.completed:
            return self._dispatch("Complete task", self.task_service.complete_task(task_id))
        return self._dispatch("Reopen task", self.task_service.reopen_task(task_id))

    def change_status(self, task_id: str, status: str) -> asyncio.Task:
        task = self._require(task_id)
        task.change_status(status, today=self._today())
        self._changed()
        return self._dispatch(
            "Change status", self.task_service.change_status(task_id, status)
        )

    def edit(self, task_id: str, **changes) -> asyncio.Task:
        """Apply field edits; ``project`` relinks the task."""
        unknown = set(changes) - EDITABLE_FIELDS - {"project"}
        if unknown:
            raise ValueError(f"Cannot edit fields: {', '.join(sorted(unknown))}")
        task = self._require(task_id)
        for field, value in changes.items():
            if field == "project":
                if value:
                    task.assign_to_project(value)
                else:
                    task.unassign()
            else:
                setattr(task, field, value)
        self._changed()
        return self._dispatch("Edit task", self.task_service.edit_task(task_id, **changes))

    def assign(self, task_id: str, project: str | None) -> asyncio.Task:
        """Link a task to *project* (name or link), or unlink it."""
        if project:
            project = make_link(strip_link(project) or project)
        return self.edit(task_id, project=project)

    def move_to_today(self, task_id: str) -> asyncio.Task:
        task = self._require(task_id)
        day = self._today()
        task.change_status("today", today=day)
        task.set_date(day)
        self._changed()
        return self._dispatch("Move to today", self.task_service.move_to_today(task_id))

    def reorder(self, task_ids: list[str]) -> asyncio.Task:
        """Apply a new manual order locally, then write every member."""
        for position, task_id in enumerate(task_ids):
            self._require(task_id).order = position
        self._notify()
        return self._dispatch("Reorder tasks", self.task_service.reorder_tasks(list(task_ids)))

    def trash(self, task_id: str) -> asyncio.Task:
        task = self._require(task_id)
        task.change_status("trash")
        self._changed()
        return self._dispatch("Trash task", self.task_service.trash_task(task_id))

    def restore(self, task_id: str) -> asyncio.Task:
        task = self._require(task_id)
        task.change_status("inbox")
        self._changed()
        return self._dispatch("Restore task", self.task_service.restore_task(task_id))

    def delete(self, task_id: str) -> asyncio.Task:
        self._require(task_id)
        del self.tasks[task_id]
        self._changed()
        return self._dispatch("Delete task", self.task_service.delete_task(task_id))

    async def on_new_day(self, day: date | None = None) -> list[Task]:
        """Carry stale ``today`` tasks over to *day*, then reload.

        Runs alongside user actions; only incomplete tasks with a past date
        are touched.
        """
        carried = await self.task_service.carry_over_stale_today_tasks(day)
        await self.load()
        return carried
