"""Project service - Business logic for project operations."""

from __future__ import annotations

from collections.abc import Callable
from datetime import date

from gtd_vault.models import (
    AppConfig,
    EntityValidationError,
    GTDError,
    Project,
    ProjectStatistics,
    Task,
)
from gtd_vault.repositories import ProjectRepository, TaskRepository
from gtd_vault.services.template_service import TemplateService
from gtd_vault.utils import backlinks, dates
from gtd_vault.utils import progress as calculator
from gtd_vault.utils.locks import EntityLocks
from gtd_vault.utils.logger import get_logger
from gtd_vault.utils.uuid_utils import generate_id


class ProjectService:
    """Service for project business logic.

    Owns progress derivation and the task references kept in project bodies.
    """

    def __init__(
        self,
        project_repository: ProjectRepository,
        task_repository: TaskRepository,
        config: AppConfig,
        *,
        locks: EntityLocks | None = None,
        clock: Callable[[], date] = dates.today,
        templates: TemplateService | None = None,
    ):
        """Initialize the project service.

        Args:
            project_repository: ProjectRepository implementation for data access
            task_repository: TaskRepository used to derive progress
            config: Application configuration
            locks: Shared per-entity lock registry
            clock: Returns the current day
            templates: Seeds the body of new projects
        """
        self.repository = project_repository
        self.task_repository = task_repository
        self.config = config
        self.locks = locks if locks is not None else EntityLocks()
        self.clock = clock
        self.templates = templates
        self.logger = get_logger(__name__)
        self._statistics_cache: dict[str, ProjectStatistics] | None = None

    async def list_projects(
        self,
        *,
        status: str | None = None,
        include_completed: bool = True,
    ) -> list[Project]:
        """List projects, most important first.

        Args:
            status: Only return projects with this status
            include_completed: Whether completed projects are returned
        """
        projects = await self.repository.list_all()
        if status is not None:
            projects = [p for p in projects if p.status == status]
        if not include_completed:
            projects = [p for p in projects if not p.is_completed()]
        return sorted(
            projects,
            key=lambda p: (-p.importance, p.deadline or date.max, p.title.lower()),
        )

    async def get_project(self, project_id: str) -> Project:
        return await self.repository.get(project_id)

    async def find_by_link(self, link: str) -> Project | None:
        """Return the project a ``[[...]]`` token points at, if any."""
        token = link.strip()
        for project in await self.repository.list_all():
            if token in project.link_tokens:
                return project
        return None

    async def create_project(
        self,
        title: str,
        *,
        importance: int = 3,
        deadline: date | None = None,
        action_plan: str = "",
        color: str | None = None,
        body: str = "",
    ) -> Project:
        """Create a new project.

        Args:
            title: Project title (required)
            importance: 1 (low) to 5 (high)
            deadline: Optional deadline
            action_plan: Free-form plan text
            color: Optional display color
            body: Initial markdown body; the project template is used when empty

        Returns:
            Created Project object

        Raises:
            EntityValidationError: If the title is empty or importance is out of range
        """
        title = (title or "").strip()
        errors = []
        if not title:
            errors.append("Project title is empty")
        if not 1 <= importance <= 5:
            errors.append(f"Importance must be between 1 and 5: {importance}")
        if errors:
            raise EntityValidationError(f"Invalid project: {', '.join(errors)}", errors)

        if not body and self.templates is not None:
            body = await self.templates.read_template("project")
        project = Project(
            id=generate_id(),
            title=title,
            importance=importance,
            deadline=deadline,
            action_plan=action_plan,
            body=body,
        )
        if color:
            project.color = color
        await self.repository.create(project)
        self.invalidate_statistics()
        self.logger.info("Created project %s at %s", project.title, project.location)
        return project

    async def update_project(self, project: Project) -> Project:
        """Persist an edited project.

        ``progress`` is re-derived from the linked tasks; a value set by the
        caller is discarded. A completed project is archived afterwards; see
        ``_archive``.

        Raises:
            EntityValidationError: If the project is invalid
        """
        errors = project.validation_errors()
        if project.damaged:
            errors.append("Cannot save a placeholder for an unreadable document")
        if errors:
            raise EntityValidationError(f"Invalid project: {', '.join(errors)}", errors)

        tasks = await self.task_repository.list_all()
        async with self.locks.hold(project.id):
            project.update_progress(calculator.calculate_progress(project, tasks))
            await self.repository.update(project)
        if project.is_completed():
            await self._archive(project)
        self.invalidate_statistics()
        return project

    async def _mutate(self, project_id: str, mutator: Callable[[Project], None]) -> Project:
        async with self.locks.hold(project_id):
            project = await self.repository.get(project_id)
            mutator(project)
            await self.repository.update(project)
        if project.is_completed():
            await self._archive(project)
        self.invalidate_statistics()
        return project

    async def start_project(self, project_id: str) -> Project:
        """Move a not-started project to in-progress."""
        return await self._mutate(project_id, lambda p: p.start(today=self.clock()))

    async def complete_project(self, project_id: str) -> Project:
        """Mark a project completed and move it to the dated archive."""
        return await self._mutate(project_id, lambda p: p.complete(today=self.clock()))

    async def change_status(self, project_id: str, status: str) -> Project:
        """Set a project's status.

        Reopening a completed project leaves its document in the archive.
        """
        return await self._mutate(
            project_id, lambda p: p.change_status(status, today=self.clock())
        )

    async def _archive(self, project: Project) -> None:
        # Archiving is cosmetic; status and progress are already saved.
        try:
            await self.repository.archive(project)
        except GTDError as e:
            self.logger.warning("Could not archive project %s: %s", project.title, e)

    async def delete_project(self, project_id: str) -> Project:
        """Delete a project document. Tasks linking to it keep their link."""
        async with self.locks.hold(project_id):
            project = await self.repository.delete(project_id)
        self.invalidate_statistics()
        return project

    # ------------------------------------------------------------------
    # Progress
    # ------------------------------------------------------------------

    async def recompute_progress(self, tasks: list[Task] | None = None) -> dict[str, int]:
        """Re-derive every project's progress and save the ones that changed.

        Must run after any task change that can alter project membership or
        completion.

        Args:
            tasks: Full task collection; loaded from storage when omitted

        Returns:
            Mapping of project id to progress
        """
        if tasks is None:
            tasks = await self.task_repository.list_all()
        projects = await self.repository.list_all()
        derived = calculator.recompute_all(projects, tasks)
        for project in projects:
            value = derived[project.id]
            if project.progress == value:
                continue
            async with self.locks.hold(project.id):
                project = await self.repository.get(project.id)
                project.update_progress(value)
                await self.repository.update(project)
            self.logger.debug("Progress of %s is now %d%%", project.title, value)
        self.invalidate_statistics()
        return derived

    async def statistics(self, project_id: str) -> ProjectStatistics:
        """Task-count breakdown for one project."""
        stats = await self.all_statistics()
        if project_id not in stats:
            project = await self.repository.get(project_id)
            return calculator.statistics(project, await self.task_repository.list_all())
        return stats[project_id]

    async def all_statistics(self) -> dict[str, ProjectStatistics]:
        """Statistics for every project, cached until the next invalidation."""
        if self._statistics_cache is None:
            tasks = await self.task_repository.list_all()
            projects = await self.repository.list_all()
            self._statistics_cache = {
                project.id: calculator.statistics(project, tasks) for project in projects
            }
        return self._statistics_cache

    def invalidate_statistics(self) -> None:
        self._statistics_cache = None

    # ------------------------------------------------------------------
    # Task references in project bodies
    # ------------------------------------------------------------------

    async def add_task_reference(self, project_link: str, task_link: str) -> Project | None:
        """Add ``- [[task]]`` to the linked project's body, once.

        Returns:
            The project, or None when the link points at no project
        """
        return await self._edit_body(
            project_link,
            lambda body: backlinks.add_reference(body, task_link, self.config.project_tasks_heading),
        )

    async def remove_task_reference(self, project_link: str, task_link: str) -> Project | None:
        """Remove ``- [[task]]`` from the linked project's body."""
        return await self._edit_body(
            project_link, lambda body: backlinks.remove_reference(body, task_link)
        )

    async def _edit_body(
        self, project_link: str, edit: Callable[[str], str]
    ) -> Project | None:
        project = await self.find_by_link(project_link)
        if project is None:
            self.logger.debug("No project for link %s", project_link)
            return None
        async with self.locks.hold(project.id):
            project = await self.repository.get(project.id)
            new_body = edit(project.body)
            if new_body != project.body:
                project.body = new_body
                await self.repository.update(project)
        return project
