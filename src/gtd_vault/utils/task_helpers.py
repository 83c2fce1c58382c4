"""Helpers that turn what the user typed into entity ids."""

from gtd_vault.services.project_service import ProjectService
from gtd_vault.services.task_service import TaskService
from gtd_vault.utils.uuid_utils import resolve_entity_id


async def resolve_task_id(task_service: TaskService, task_id_or_prefix: str) -> str:
    """Resolve a full id, a unique id prefix or an exact title to a task id.

    Trashed tasks are searched too so they can be restored or deleted.

    Raises:
        NotFoundError: If no task matches
        ValueError: If more than one task matches
    """
    tasks = await task_service.list_tasks(include_trash=True)
    return resolve_entity_id(task_id_or_prefix, tasks, kind="Task")


async def resolve_project_id(project_service: ProjectService, project_id_or_prefix: str) -> str:
    """Resolve a full id, a unique id prefix or an exact title to a project id."""
    projects = await project_service.list_projects()
    return resolve_entity_id(project_id_or_prefix, projects, kind="Project")
