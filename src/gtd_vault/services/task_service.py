"""Task service - Business logic for task operations.

This service layer sits between the presentation layer and the repositories.
Every mutation re-derives project progress and keeps the ``## Tasks``
references in project bodies in step with ``Task.project``.
"""

from __future__ import annotations

import asyncio
from collections.abc import Callable, Iterable
from datetime import date, timedelta

from gtd_vault.models import AppConfig, EntityValidationError, GTDError, Task, make_link, strip_link
from gtd_vault.repositories import TaskRepository
from gtd_vault.services.daily_note_service import DailyNoteService
from gtd_vault.services.project_service import ProjectService
from gtd_vault.services.template_service import TemplateService
from gtd_vault.utils import dates
from gtd_vault.utils.locks import EntityLocks
from gtd_vault.utils.logger import get_logger
from gtd_vault.utils.uuid_utils import generate_id

PRIORITY_RANK = {"high": 0, "medium": 1, "low": 2}

# Fields edit_task accepts; everything else goes through a dedicated transition.
EDITABLE_FIELDS = frozenset({"title", "priority", "tags", "notes", "body", "date", "order"})


def sort_tasks(tasks: Iterable[Task], mode: str = "manual") -> list[Task]:
    """Order tasks for display.

    Args:
        tasks: Tasks to sort
        mode: ``manual`` orders by ``order``; ``auto`` by priority (high
            first), then date (undated last), then title

    Returns:
        New sorted list
    """
    if mode == "auto":
        return sorted(
            tasks,
            key=lambda t: (
                PRIORITY_RANK.get(t.priority, 1),
                t.date is None,
                t.date or date.max,
                t.title.lower(),
            ),
        )
    return sorted(tasks, key=lambda t: (t.order, t.title.lower()))


class TaskService:
    """Service for task business logic.

    This service encapsulates business rules and orchestrates task operations
    using the task repository. Operations on the same task id are serialized.
    """

    def __init__(
        self,
        task_repository: TaskRepository,
        project_service: ProjectService,
        config: AppConfig,
        *,
        locks: EntityLocks | None = None,
        clock: Callable[[], date] = dates.today,
        daily_notes: DailyNoteService | None = None,
        templates: TemplateService | None = None,
    ):
        """Initialize the task service.

        Args:
            task_repository: TaskRepository implementation for data access
            project_service: Keeps project references and progress in step
            config: Application configuration
            locks: Shared per-entity lock registry
            clock: Returns the current day
            daily_notes: Logs newly completed tasks when auto-write is on
            templates: Seeds the body of new tasks
        """
        self.repository = task_repository
        self.project_service = project_service
        self.config = config
        self.locks = locks if locks is not None else project_service.locks
        self.clock = clock
        self.daily_notes = daily_notes
        self.templates = templates
        self.logger = get_logger(__name__)

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    def sort(self, tasks: Iterable[Task]) -> list[Task]:
        return sort_tasks(tasks, self.config.ui.task_sort_mode)

    async def list_tasks(
        self,
        *,
        status: str | None = None,
        project: str | None = None,
        include_completed: bool = True,
        include_trash: bool = False,
    ) -> list[Task]:
        """List tasks with filtering, sorted per the configured sort mode.

        Args:
            status: Filter by workflow status
            project: Filter by project name or ``[[link]]``
            include_completed: Whether completed tasks are returned
            include_trash: Whether trashed tasks are returned; implied by
                ``status="trash"``

        Returns:
            List of Task objects matching the criteria
        """
        tasks = await self.repository.list_all()
        if status is not None:
            tasks = [t for t in tasks if t.status == status]
        elif not include_trash:
            tasks = [t for t in tasks if t.status != "trash"]
        if project is not None:
            link = make_link(strip_link(project) or project)
            tasks = [t for t in tasks if t.project == link]
        if not include_completed:
            tasks = [t for t in tasks if not t.completed]
        return self.sort(tasks)

    async def get_task(self, task_id: str) -> Task:
        """Get a specific task by ID.

        Raises:
            NotFoundError: If no task has that id
        """
        return await self.repository.get(task_id)

    async def tasks_by_status(self, status: str) -> list[Task]:
        return await self.list_tasks(status=status)

    async def tasks_by_project(self, project: str) -> list[Task]:
        return await self.list_tasks(project=project)

    async def today_tasks(self, day: date | None = None) -> list[Task]:
        """Active tasks scheduled for *day* (default: today)."""
        day = day or self.clock()
        return [t for t in await self.list_tasks() if t.is_today(day)]

    async def tomorrow_tasks(self, day: date | None = None) -> list[Task]:
        day = day or self.clock()
        return [t for t in await self.list_tasks() if t.is_tomorrow(day)]

    async def overdue_tasks(self, day: date | None = None) -> list[Task]:
        day = day or self.clock()
        return [t for t in await self.list_tasks() if t.is_overdue(day)]

    # ------------------------------------------------------------------
    # Creation and saving
    # ------------------------------------------------------------------

    @staticmethod
    def _validate(task: Task) -> None:
        errors = task.validation_errors()
        if task.damaged:
            errors.append("Cannot save a placeholder for an unreadable document")
        if errors:
            raise EntityValidationError(f"Invalid task: {', '.join(errors)}", errors)

    async def create_task(
        self,
        title: str,
        *,
        status: str = "inbox",
        priority: str | None = None,
        project: str | None = None,
        date: date | None = None,
        tags: list[str] | None = None,
        notes: str = "",
        body: str = "",
        order: int = 0,
        task_id: str | None = None,
    ) -> Task:
        """Create a new task.

        Args:
            title: Task title (required)
            status: Initial workflow status
            priority: low, medium or high; defaults to the configured priority
            project: Project name or ``[[link]]``
            date: Scheduled day; ``today`` status without a date gets today
            tags: Tag list
            notes: Short notes
            body: Markdown body; the task template is used when empty
            order: Manual sort position
            task_id: Pre-generated id, used by optimistic callers

        Returns:
            Created Task object with its location set

        Raises:
            EntityValidationError: If the task is invalid; nothing is written
        """
        if not body and self.templates is not None:
            body = await self.templates.read_template("task")
        task = Task(
            id=task_id or generate_id(),
            title=(title or "").strip(),
            date=date,
            tags=list(tags or []),
            notes=notes,
            body=body,
            order=order,
        )
        task.status = status  # type: ignore[assignment]
        task.priority = priority or self.config.default_priority  # type: ignore[assignment]
        if status == "today" and task.date is None:
            task.date = self.clock()
        if project:
            task.assign_to_project(project)
        self._validate(task)

        async with self.locks.hold(task.id):
            await self.repository.add(task)
        self.logger.info("Created task %s at %s", task.title, task.location)

        if task.project:
            await self.project_service.add_task_reference(task.project, task.link)
        await self.project_service.recompute_progress()
        return task

    async def update_task(self, task: Task) -> Task:
        """Persist an edited task, moving its project reference if needed.

        Raises:
            EntityValidationError: If the task is invalid; nothing is written
            NotFoundError: If the task no longer exists
        """
        self._validate(task)
        async with self.locks.hold(task.id):
            previous = await self.repository.get(task.id)
            return await self._save(task, previous)

    async def _save(self, task: Task, previous: Task, *, recompute: bool = True) -> Task:
        await self.repository.update(task)
        if task.status == "trash":
            # The gateway never relocates trash on its own.
            await self.repository.move(task, self.trash_folder)
        await self._sync_references(previous, task)
        if task.completed and not previous.completed:
            await self._log_completion(task)
        if recompute:
            await self.project_service.recompute_progress()
        return task

    async def _log_completion(self, task: Task) -> None:
        if self.daily_notes is None:
            return
        # The daily note is a side record; the completion itself is saved.
        try:
            await self.daily_notes.write_completed_task(task)
        except GTDError as e:
            self.logger.warning("Could not log %s in the daily note: %s", task.title, e)

    async def _sync_references(self, previous: Task, task: Task) -> None:
        if previous.project == task.project and previous.link == task.link:
            return
        if previous.project:
            await self.project_service.remove_task_reference(previous.project, previous.link)
        if task.project:
            await self.project_service.add_task_reference(task.project, task.link)

    async def _mutate(
        self,
        task_id: str,
        mutator: Callable[[Task], None],
        *,
        recompute: bool = True,
    ) -> Task:
        async with self.locks.hold(task_id):
            previous = await self.repository.get(task_id)
            task = previous.model_copy(deep=True)
            mutator(task)
            self._validate(task)
            return await self._save(task, previous, recompute=recompute)

    # ------------------------------------------------------------------
    # Transitions
    # ------------------------------------------------------------------

    async def toggle_complete(self, task_id: str) -> Task:
        """Flip completion; the document moves in or out of the dated archive."""
        return await self._mutate(task_id, lambda t: t.toggle_complete())

    async def complete_task(self, task_id: str) -> Task:
        return await self._mutate(task_id, lambda t: t.complete())

    async def reopen_task(self, task_id: str) -> Task:
        return await self._mutate(task_id, lambda t: t.uncomplete())

    async def change_status(self, task_id: str, status: str) -> Task:
        """Move a task to another workflow bucket.

        Use ``trash_task`` for trash; it also relocates the document.
        """
        if status == "trash":
            return await self.trash_task(task_id)
        return await self._mutate(
            task_id, lambda t: t.change_status(status, today=self.clock())
        )

    async def move_to_today(self, task_id: str) -> Task:
        """Set status ``today`` and schedule for the current day."""
        day = self.clock()

        def apply(task: Task) -> None:
            task.change_status("today", today=day)
            task.set_date(day)

        return await self._mutate(task_id, apply)

    async def move_to_tomorrow(self, task_id: str) -> Task:
        """Schedule for tomorrow; the status is left alone."""
        day = self.clock() + timedelta(days=1)
        return await self._mutate(task_id, lambda t: t.set_date(day), recompute=False)

    async def schedule(self, task_id: str, day: date | None) -> Task:
        return await self._mutate(task_id, lambda t: t.set_date(day), recompute=False)

    async def assign_to_project(self, task_id: str, project: str | None) -> Task:
        """Link a task to a project, or unlink it when *project* is None."""

        def apply(task: Task) -> None:
            if project:
                task.assign_to_project(project)
            else:
                task.unassign()

        return await self._mutate(task_id, apply)

    async def edit_task(self, task_id: str, **changes) -> Task:
        """Apply field edits to the stored task.

        Args:
            task_id: Task to edit
            **changes: Any of title, priority, tags, notes, body, date, order;
                ``project`` is routed through ``assign_to_project`` rules

        Raises:
            ValueError: If an unsupported field is given
        """
        project_given = "project" in changes
        project = changes.pop("project", None)
        unknown = set(changes) - EDITABLE_FIELDS
        if unknown:
            raise ValueError(f"Cannot edit fields: {', '.join(sorted(unknown))}")

        def apply(task: Task) -> None:
            for field, value in changes.items():
                setattr(task, field, value)
            if project_given:
                if project:
                    task.assign_to_project(project)
                else:
                    task.unassign()

        return await self._mutate(task_id, apply)

    async def trash_task(self, task_id: str) -> Task:
        """Move a task to trash: status first, then the explicit relocation."""
        return await self._mutate(task_id, lambda t: t.change_status("trash"))

    @property
    def trash_folder(self) -> str:
        folders = self.config.folders
        return f"{folders.task_folder}/{folders.trash_folder_name}"

    async def restore_task(self, task_id: str) -> Task:
        """Bring a trashed task back to the inbox in the active root."""
        return await self._mutate(
            task_id, lambda t: t.change_status("inbox", today=self.clock())
        )

    async def delete_task(self, task_id: str) -> Task:
        """Delete a task document and drop its project reference.

        Returns:
            The deleted task
        """
        async with self.locks.hold(task_id):
            task = await self.repository.delete(task_id)
        if task.project:
            await self.project_service.remove_task_reference(task.project, task.link)
        self.project_service.invalidate_statistics()
        self.logger.info("Deleted task %s", task.title)
        return task

    # ------------------------------------------------------------------
    # Batch operations
    # ------------------------------------------------------------------

    async def reorder_tasks(self, task_ids: list[str]) -> list[Task]:
        """Write ``order`` = position for every id; the writes run concurrently.

        Order changes never affect progress, so no recompute follows.
        """

        def setter(position: int) -> Callable[[Task], None]:
            def apply(task: Task) -> None:
                task.order = position

            return apply

        return list(
            await asyncio.gather(
                *(
                    self._mutate(task_id, setter(position), recompute=False)
                    for position, task_id in enumerate(task_ids)
                )
            )
        )

    async def carry_over_stale_today_tasks(self, day: date | None = None) -> list[Task]:
        """Re-date incomplete ``today`` tasks left behind on an earlier day.

        Args:
            day: The new current day

        Returns:
            Tasks that were re-dated
        """
        day = day or self.clock()
        stale = [
            t
            for t in await self.repository.list_all()
            if not t.damaged
            and t.status == "today"
            and not t.completed
            and t.date is not None
            and t.date < day
        ]
        carried = []
        for task in stale:
            carried.append(
                await self._mutate(task.id, lambda t: t.set_date(day), recompute=False)
            )
        if carried:
            self.logger.info("Carried %d stale today task(s) over to %s", len(carried), day)
        return carried
