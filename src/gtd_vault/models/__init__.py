"""GTD Vault domain models.

This package contains the Pydantic models that represent tasks, projects and
the application configuration, plus the exception taxonomy.
"""

from .config_models import AppConfig, DailyNoteConfig, FolderConfig, UIConfig
from .core import (
    PRE_EXECUTION_STATUSES,
    PROJECT_STATUSES,
    TASK_PRIORITIES,
    TASK_STATUSES,
    Project,
    ProjectStatistics,
    ProjectStatus,
    Task,
    TaskPriority,
    TaskStatus,
    WeeklyReview,
    make_link,
    strip_link,
)
from .exceptions import (
    EntityValidationError,
    GTDError,
    MalformedDocumentError,
    NameCollisionError,
    NotFoundError,
    StorageIOError,
)

__all__ = [
    # Entities
    "Task",
    "TaskStatus",
    "TaskPriority",
    "Project",
    "ProjectStatus",
    "ProjectStatistics",
    "WeeklyReview",
    "TASK_STATUSES",
    "TASK_PRIORITIES",
    "PROJECT_STATUSES",
    "PRE_EXECUTION_STATUSES",
    "make_link",
    "strip_link",
    # Config
    "AppConfig",
    "DailyNoteConfig",
    "FolderConfig",
    "UIConfig",
    # Errors
    "GTDError",
    "NotFoundError",
    "MalformedDocumentError",
    "EntityValidationError",
    "NameCollisionError",
    "StorageIOError",
]
