"""Repository interfaces for GTD Vault.

This package contains abstract base classes (ABCs) that define the contracts
for data persistence operations. These are the "Ports" in the Hexagonal Architecture.

Implementations (Adapters) are in:
- gtd_vault.adapters.vault (markdown documents in a folder tree)
"""

from .repository import ProjectRepository, TaskRepository

__all__ = [
    "TaskRepository",
    "ProjectRepository",
]
