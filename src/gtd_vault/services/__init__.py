"""Services module for GTD Vault - Business logic layer."""

from .board_service import TaskBoard
from .daily_note_service import DailyNoteService
from .project_service import ProjectService
from .review_service import ReviewService
from .task_service import TaskService, sort_tasks
from .template_service import TemplateService

__all__ = [
    "TaskService",
    "ProjectService",
    "ReviewService",
    "TaskBoard",
    "TemplateService",
    "DailyNoteService",
    "sort_tasks",
]
