"""Markdown-document storage adapter."""

from .filesystem import LocalVaultFileSystem, VaultEntry, VaultFileSystem
from .gateway import DocumentGateway, task_folder_for
from .project_repository import VaultProjectRepository
from .task_repository import VaultTaskRepository

__all__ = [
    "VaultFileSystem",
    "LocalVaultFileSystem",
    "VaultEntry",
    "DocumentGateway",
    "task_folder_for",
    "VaultTaskRepository",
    "VaultProjectRepository",
]
