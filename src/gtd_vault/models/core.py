"""Task and project domain models.

Both entities carry their own state-transition rules so that services never
poke raw fields ad hoc. A project never stores its tasks; membership lives
only in ``Task.project``.
"""

from __future__ import annotations

import datetime as dt
import math
from typing import Any, Literal

from pydantic import BaseModel, Field, field_validator

from gtd_vault.utils.dates import week_bounds

TaskStatus = Literal["inbox", "next-action", "today", "waiting", "someday", "trash"]
TaskPriority = Literal["low", "medium", "high"]
ProjectStatus = Literal["not-started", "in-progress", "completed"]

TASK_STATUSES: tuple[str, ...] = (
    "inbox",
    "next-action",
    "today",
    "waiting",
    "someday",
    "trash",
)
TASK_PRIORITIES: tuple[str, ...] = ("low", "medium", "high")
PROJECT_STATUSES: tuple[str, ...] = ("not-started", "in-progress", "completed")

# Buckets for work that has not started yet; a completed task cannot sit here.
PRE_EXECUTION_STATUSES: frozenset[str] = frozenset(
    {"inbox", "next-action", "waiting", "someday"}
)

DEFAULT_TASK_TITLE = "Untitled task"
DEFAULT_PROJECT_TITLE = "Untitled project"
DEFAULT_PROJECT_COLOR = "#3b82f6"


def round_half_up(value: float) -> int:
    """Round to the nearest integer with halves going up (12.5 -> 13)."""
    return math.floor(value + 0.5)


def make_link(name: str) -> str:
    """Wrap a document name in a ``[[name]]`` link token."""
    return f"[[{name}]]"


def strip_link(token: str | None) -> str | None:
    """Return the name inside a ``[[name]]`` token, or the token unchanged."""
    if token is None:
        return None
    token = token.strip()
    if token.startswith("[[") and token.endswith("]]"):
        return token[2:-2]
    return token


def _stem(location: str) -> str:
    name = location.replace("\\", "/").rsplit("/", 1)[-1]
    return name[:-3] if name.endswith(".md") else name


class Task(BaseModel):
    """Task model representing one task document.

    Attributes:
        id: Stable unique identifier, independent of the file name
        title: Display title
        status: GTD workflow bucket
        completed: Completion flag, independent of status
        project: ``[[Project]]`` link token or None
        date: Scheduled day
        priority: low, medium or high
        tags: Ordered tag list
        notes: Short free-form notes kept in the front matter
        body: Markdown body after the front matter
        order: Position used in manual sort mode
        location: Vault-relative path of the document, maintained by the gateway
        extra: Front matter keys this model does not know about
        damaged: True for placeholders standing in for unreadable documents
    """

    id: str = ""
    title: str = DEFAULT_TASK_TITLE
    status: TaskStatus = "inbox"
    completed: bool = False
    project: str | None = None
    date: dt.date | None = None
    priority: TaskPriority = "medium"
    tags: list[str] = Field(default_factory=list)
    notes: str = ""
    body: str = ""
    order: int = 0
    location: str = ""
    extra: dict[str, Any] = Field(default_factory=dict)
    damaged: bool = False

    @property
    def project_name(self) -> str | None:
        return strip_link(self.project)

    @property
    def link(self) -> str:
        """Link token other documents use to reference this task."""
        return make_link(_stem(self.location) if self.location else self.title)

    def complete(self) -> None:
        """Mark the task completed. Calling it twice changes nothing."""
        self.completed = True

    def uncomplete(self) -> None:
        self.completed = False

    def toggle_complete(self) -> None:
        if self.completed:
            self.uncomplete()
        else:
            self.complete()

    def change_status(self, new_status: str, *, today: dt.date | None = None) -> None:
        """Move the task to another workflow bucket, applying its side effects.

        Pre-execution buckets and trash clear the scheduled date and the
        completion flag. ``today`` schedules the task for the current day when
        it has no date yet.

        Args:
            new_status: Target status
            today: Current day, defaults to the system date
        """
        if new_status not in TASK_STATUSES:
            raise ValueError(f"Invalid task status: {new_status}")
        if new_status in PRE_EXECUTION_STATUSES or new_status == "trash":
            self.date = None
            self.completed = False
        elif new_status == "today" and self.date is None:
            self.date = today or dt.date.today()
        self.status = new_status  # type: ignore[assignment]

    def set_date(self, day: dt.date | None) -> None:
        self.date = day

    def assign_to_project(self, project_name: str) -> None:
        self.project = make_link(strip_link(project_name) or project_name)

    def unassign(self) -> None:
        self.project = None

    def is_today(self, today: dt.date | None = None) -> bool:
        return self.date is not None and self.date == (today or dt.date.today())

    def is_tomorrow(self, today: dt.date | None = None) -> bool:
        base = today or dt.date.today()
        return self.date is not None and self.date == base + dt.timedelta(days=1)

    def is_overdue(self, today: dt.date | None = None) -> bool:
        if self.date is None or self.completed:
            return False
        return self.date < (today or dt.date.today())

    def validation_errors(self) -> list[str]:
        """Return human-readable problems that must block a write."""
        errors = []
        if not self.title or not self.title.strip():
            errors.append("Task title is empty")
        if self.status not in TASK_STATUSES:
            errors.append(f"Invalid status: {self.status}")
        if self.priority not in TASK_PRIORITIES:
            errors.append(f"Invalid priority: {self.priority}")
        return errors


class Project(BaseModel):
    """Project model representing one project document.

    ``progress`` is always derived from the tasks that link to the project;
    see ``gtd_vault.utils.progress``.
    """

    id: str = ""
    title: str = DEFAULT_PROJECT_TITLE
    importance: int = Field(default=3, ge=1, le=5)
    deadline: dt.date | None = None
    status: ProjectStatus = "not-started"
    action_plan: str = ""
    color: str = DEFAULT_PROJECT_COLOR
    started_date: dt.date | None = None
    completed_date: dt.date | None = None
    progress: int = Field(default=0, ge=0, le=100)
    body: str = ""
    location: str = ""
    extra: dict[str, Any] = Field(default_factory=dict)
    damaged: bool = False

    @field_validator("color", mode="before")
    @classmethod
    def default_blank_color(cls, v: Any) -> Any:
        if v is None or (isinstance(v, str) and not v.strip()):
            return DEFAULT_PROJECT_COLOR
        return v

    @property
    def link_tokens(self) -> tuple[str, str]:
        """Tokens a task may use in its ``project`` field to point here."""
        return make_link(self.title), make_link(self.id)

    def start(self, *, today: dt.date | None = None) -> None:
        """Move a not-started project to in-progress."""
        if self.status != "not-started":
            return
        self.status = "in-progress"
        if self.started_date is None:
            self.started_date = today or dt.date.today()

    def complete(self, *, today: dt.date | None = None) -> None:
        """Complete the project; the completion day is only recorded once."""
        self.status = "completed"
        self.progress = 100
        if self.completed_date is None:
            self.completed_date = today or dt.date.today()

    def change_status(self, new_status: str, *, today: dt.date | None = None) -> None:
        if new_status not in PROJECT_STATUSES:
            raise ValueError(f"Invalid project status: {new_status}")
        if new_status == "completed":
            self.complete(today=today)
        elif new_status == "in-progress":
            self.status = "in-progress"
            if self.started_date is None:
                self.started_date = today or dt.date.today()
        else:
            self.status = "not-started"

    def update_progress(self, progress: int | float) -> None:
        self.progress = max(0, min(100, round_half_up(progress)))

    def is_completed(self) -> bool:
        return self.status == "completed"

    def is_overdue(self, today: dt.date | None = None) -> bool:
        if self.deadline is None or self.is_completed():
            return False
        return self.deadline < (today or dt.date.today())

    def validation_errors(self) -> list[str]:
        errors = []
        if not self.title or not self.title.strip():
            errors.append("Project title is empty")
        if not 1 <= self.importance <= 5:
            errors.append(f"Importance must be between 1 and 5: {self.importance}")
        if self.status not in PROJECT_STATUSES:
            errors.append(f"Invalid status: {self.status}")
        if not self.color or not self.color.strip():
            errors.append("Project color is empty")
        return errors


class ProjectStatistics(BaseModel):
    """Task-count breakdown for one project."""

    total: int = 0
    completed: int = 0
    in_progress: int = 0
    not_started: int = 0
    progress: int = 0


class WeeklyReview(BaseModel):
    """A weekly review note.

    The counts are a snapshot taken when the review was written.
    """

    date: dt.date
    location: str = ""
    completed_tasks_count: int = 0
    active_projects_count: int = 0
    reflections: str = ""
    learnings: str = ""
    next_week_goals: str = ""
    notes: str = ""

    def week_range(self, week_start_day: str = "monday") -> tuple[dt.date, dt.date]:
        return week_bounds(self.date, week_start_day)

    def title(self, week_start_day: str = "monday") -> str:
        start, end = self.week_range(week_start_day)
        return f"Weekly Review {start.isoformat()} - {end.isoformat()}"
