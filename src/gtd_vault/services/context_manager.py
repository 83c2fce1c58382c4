"""Service wiring for GTD Vault.

Builds the object graph once per process::

    LocalVaultFileSystem -> DocumentGateway -> Vault*Repository -> *Service

Usage Pattern:
    from gtd_vault.services.context_manager import get_vault_context

    ctx = get_vault_context()
    tasks = await ctx.task_service.list_tasks()
"""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass
from datetime import date
from functools import lru_cache
from pathlib import Path

from gtd_vault.adapters.vault import (
    DocumentGateway,
    LocalVaultFileSystem,
    VaultFileSystem,
    VaultProjectRepository,
    VaultTaskRepository,
)
from gtd_vault.models import AppConfig
from gtd_vault.services.board_service import TaskBoard
from gtd_vault.services.config_service import get_config_service
from gtd_vault.services.daily_note_service import DailyNoteService
from gtd_vault.services.project_service import ProjectService
from gtd_vault.services.review_service import ReviewService
from gtd_vault.services.task_service import TaskService
from gtd_vault.services.template_service import TemplateService
from gtd_vault.utils import dates
from gtd_vault.utils.locks import EntityLocks


@dataclass
class VaultContext:
    """Everything a command needs, wired against one vault."""

    config: AppConfig
    fs: VaultFileSystem
    gateway: DocumentGateway
    task_repository: VaultTaskRepository
    project_repository: VaultProjectRepository
    project_service: ProjectService
    task_service: TaskService
    review_service: ReviewService
    template_service: TemplateService
    daily_note_service: DailyNoteService

    def board(self) -> TaskBoard:
        """A fresh, empty board over this context's services."""
        return TaskBoard(self.task_service, self.project_service)


def build_context(
    config: AppConfig,
    fs: VaultFileSystem | None = None,
    *,
    clock: Callable[[], date] = dates.today,
) -> VaultContext:
    """Wire the services for *config*.

    Args:
        config: Application configuration
        fs: File-system capability; defaults to the local vault directory
        clock: Returns the current day

    Returns:
        VaultContext with shared locks across both services
    """
    if fs is None:
        fs = LocalVaultFileSystem(Path(config.vault_path))
    gateway = DocumentGateway(fs, config, clock=clock)
    task_repository = VaultTaskRepository(gateway)
    project_repository = VaultProjectRepository(gateway)
    locks = EntityLocks()
    templates = TemplateService(fs, config)
    daily_notes = DailyNoteService(fs, task_repository, config, clock=clock)
    project_service = ProjectService(
        project_repository, task_repository, config, locks=locks, clock=clock, templates=templates
    )
    task_service = TaskService(
        task_repository,
        project_service,
        config,
        locks=locks,
        clock=clock,
        daily_notes=daily_notes,
        templates=templates,
    )
    review_service = ReviewService(
        fs, task_repository, project_repository, config, clock=clock, templates=templates
    )
    return VaultContext(
        config=config,
        fs=fs,
        gateway=gateway,
        task_repository=task_repository,
        project_repository=project_repository,
        project_service=project_service,
        task_service=task_service,
        review_service=review_service,
        template_service=templates,
        daily_note_service=daily_notes,
    )


_vault_override: str | None = None


def set_vault_override(vault_path: str | None) -> None:
    """Point subsequent contexts at *vault_path* instead of the configured vault."""
    global _vault_override
    _vault_override = vault_path
    get_vault_context.cache_clear()


@lru_cache(maxsize=1)
def get_vault_context() -> VaultContext:
    """Get a cached VaultContext for the configured vault.

    This is the recommended way for commands to reach the services.
    """
    config = get_config_service().config
    if _vault_override:
        config = config.model_copy(update={"vault_path": _vault_override})
    return build_context(config)
