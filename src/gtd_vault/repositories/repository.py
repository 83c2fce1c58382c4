"""Repository abstraction layer for GTD Vault.

This module defines the abstract base classes (interfaces) for task and
project persistence, following the hexagonal architecture (Ports & Adapters)
pattern. Services depend on these ports only; the vault adapters in
``gtd_vault.adapters.vault`` implement them on top of the document gateway.
"""

from __future__ import annotations

from abc import ABC, abstractmethod

from gtd_vault.models import Project, Task


class TaskRepository(ABC):
    """Abstract base class for task persistence operations."""

    @abstractmethod
    async def list_all(self) -> list[Task]:
        """List every task, including completed and trashed ones.

        Returns:
            List of Task objects; unreadable documents appear as damaged
            placeholders
        """
        raise NotImplementedError("TaskRepository.list_all() must be implemented by adapter")

    @abstractmethod
    async def get(self, task_id: str) -> Task:
        """Get a specific task by ID.

        Raises:
            NotFoundError: If task does not exist
        """
        raise NotImplementedError("TaskRepository.get() must be implemented by adapter")

    @abstractmethod
    async def add(self, task: Task) -> Task:
        """Persist a new task.

        Returns:
            The task with its location set
        """
        raise NotImplementedError("TaskRepository.add() must be implemented by adapter")

    @abstractmethod
    async def update(self, task: Task) -> Task:
        """Persist changes to an existing task and realign its location.

        Raises:
            NotFoundError: If the task's document does not exist
        """
        raise NotImplementedError("TaskRepository.update() must be implemented by adapter")

    @abstractmethod
    async def move(self, task: Task, folder: str) -> Task:
        """Relocate a task document into *folder*."""
        raise NotImplementedError("TaskRepository.move() must be implemented by adapter")

    @abstractmethod
    async def delete(self, task_id: str) -> Task:
        """Delete a task document.

        Returns:
            The task that was deleted

        Raises:
            NotFoundError: If task does not exist
        """
        raise NotImplementedError("TaskRepository.delete() must be implemented by adapter")


class ProjectRepository(ABC):
    """Abstract base class for project persistence operations."""

    @abstractmethod
    async def list_all(self) -> list[Project]:
        """List every project, including archived ones."""
        raise NotImplementedError("ProjectRepository.list_all() must be implemented by adapter")

    @abstractmethod
    async def get(self, project_id: str) -> Project:
        """Get a specific project by ID.

        Raises:
            NotFoundError: If project does not exist
        """
        raise NotImplementedError("ProjectRepository.get() must be implemented by adapter")

    @abstractmethod
    async def create(self, project: Project) -> Project:
        """Persist a new project."""
        raise NotImplementedError("ProjectRepository.create() must be implemented by adapter")

    @abstractmethod
    async def update(self, project: Project) -> Project:
        """Persist changes to an existing project."""
        raise NotImplementedError("ProjectRepository.update() must be implemented by adapter")

    @abstractmethod
    async def archive(self, project: Project) -> Project:
        """Move a completed project into its dated archive folder."""
        raise NotImplementedError("ProjectRepository.archive() must be implemented by adapter")

    @abstractmethod
    async def delete(self, project_id: str) -> Project:
        """Delete a project document."""
        raise NotImplementedError("ProjectRepository.delete() must be implemented by adapter")
