"""Vault implementation of ProjectRepository."""

from __future__ import annotations

from gtd_vault.adapters.vault.gateway import DocumentGateway, project_archive_folder
from gtd_vault.models import NotFoundError, Project
from gtd_vault.repositories import ProjectRepository


class VaultProjectRepository(ProjectRepository):
    """Project repository storing one markdown document per project."""

    def __init__(self, gateway: DocumentGateway):
        self.gateway = gateway

    async def list_all(self) -> list[Project]:
        return await self.gateway.read_projects()

    async def get(self, project_id: str) -> Project:
        project = await self.gateway.find_project(project_id)
        if project is None:
            raise NotFoundError(f"Project not found: {project_id}")
        return project

    async def create(self, project: Project) -> Project:
        await self.gateway.create_document(project)
        return project

    async def update(self, project: Project) -> Project:
        await self.gateway.update_document(project)
        return project

    async def archive(self, project: Project) -> Project:
        """Move the project under ``completed/<YYYY-MM>`` unless already archived."""
        if project.location.startswith(self.gateway.project_archive_root + "/"):
            return project
        day = project.completed_date or self.gateway.clock()
        await self.gateway.move_document(project, project_archive_folder(self.gateway.folders, day))
        return project

    async def delete(self, project_id: str) -> Project:
        return await self.gateway.delete_document(project_id, kind="project")  # type: ignore[return-value]
