"""Vault implementation of TaskRepository."""

from __future__ import annotations

from gtd_vault.adapters.vault.gateway import DocumentGateway
from gtd_vault.models import NotFoundError, Task
from gtd_vault.repositories import TaskRepository


class VaultTaskRepository(TaskRepository):
    """Task repository storing one markdown document per task."""

    def __init__(self, gateway: DocumentGateway):
        self.gateway = gateway

    async def list_all(self) -> list[Task]:
        return await self.gateway.read_tasks()

    async def get(self, task_id: str) -> Task:
        task = await self.gateway.find_task(task_id)
        if task is None:
            raise NotFoundError(f"Task not found: {task_id}")
        return task

    async def add(self, task: Task) -> Task:
        await self.gateway.create_document(task)
        return task

    async def update(self, task: Task) -> Task:
        await self.gateway.update_document(task)
        return task

    async def move(self, task: Task, folder: str) -> Task:
        await self.gateway.move_document(task, folder)
        return task

    async def delete(self, task_id: str) -> Task:
        return await self.gateway.delete_document(task_id, kind="task")  # type: ignore[return-value]
