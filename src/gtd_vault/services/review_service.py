"""Review service - weekly review notes.

Reviews are plain notes in the review folder named
``<YYYY-MM-DD>-weekly-review.md``. They are not tasks or projects, so they go
straight to the file-system capability rather than through the gateway.
"""

from __future__ import annotations

import re
from collections.abc import Callable
from datetime import date

from gtd_vault.adapters.vault.codec import join_front_matter, split_front_matter
from gtd_vault.adapters.vault.filesystem import VaultFileSystem, join_path, parent_folder
from gtd_vault.models import (
    AppConfig,
    GTDError,
    NameCollisionError,
    ProjectStatus,
    Task,
    WeeklyReview,
)
from gtd_vault.repositories import ProjectRepository, TaskRepository
from gtd_vault.services.template_service import TemplateService
from gtd_vault.utils import dates
from gtd_vault.utils.logger import get_logger

REVIEW_TYPE = "weekly-review"
REVIEW_SUFFIX = "-weekly-review.md"

SECTIONS = {
    "reflections": ("## Reflections", "_What went well, what did not?_"),
    "learnings": ("## Learnings", "_What did you learn this week?_"),
    "next_week_goals": ("## Next Week Goals", "_What will you focus on next week?_"),
    "notes": ("## Notes", "_Anything else worth keeping._"),
}

_COMPLETED_RE = re.compile(r"Completed tasks\*\*:\s*(\d+)")
_ACTIVE_RE = re.compile(r"Active projects\*\*:\s*(\d+)")
_ACTIVE_PROJECT_STATUSES: frozenset[ProjectStatus] = frozenset({"in-progress"})


def completion_day(task: Task) -> date | None:
    """Day a completed task was archived, read from its dated folder name."""
    if not task.completed or not task.location:
        return None
    folder = parent_folder(task.location).rsplit("/", 1)[-1]
    try:
        return date.fromisoformat(folder)
    except ValueError:
        return None


def _section(body: str, heading: str) -> str:
    start = body.find(heading)
    if start == -1:
        return ""
    rest = body[start + len(heading):]
    end = rest.find("\n## ")
    text = (rest if end == -1 else rest[:end]).strip()
    placeholders = {placeholder for _, placeholder in SECTIONS.values()}
    return "" if text in placeholders else text


class ReviewService:
    """Service for weekly review notes."""

    def __init__(
        self,
        fs: VaultFileSystem,
        task_repository: TaskRepository,
        project_repository: ProjectRepository,
        config: AppConfig,
        *,
        clock: Callable[[], date] = dates.today,
        templates: TemplateService | None = None,
    ):
        self.fs = fs
        self.task_repository = task_repository
        self.project_repository = project_repository
        self.config = config
        self.clock = clock
        self.templates = templates
        self.logger = get_logger(__name__)

    @property
    def review_folder(self) -> str:
        return self.config.folders.review_folder

    def review_path(self, day: date) -> str:
        return join_path(self.review_folder, f"{dates.format_date(day)}{REVIEW_SUFFIX}")

    async def week_summary(self, day: date) -> tuple[int, int]:
        """Count tasks completed in *day*'s week and projects in progress.

        Returns:
            Tuple of (completed_tasks_count, active_projects_count)
        """
        start, end = dates.week_bounds(day, self.config.ui.week_start_day)
        completed = 0
        for task in await self.task_repository.list_all():
            done_on = completion_day(task)
            if done_on is not None and start <= done_on <= end:
                completed += 1
        projects = await self.project_repository.list_all()
        active = sum(1 for p in projects if p.status in _ACTIVE_PROJECT_STATUSES)
        return completed, active

    def render(self, review: WeeklyReview, template: str = "") -> str:
        """Review note text; *template* replaces the sections when none are filled in."""
        week_start_day = self.config.ui.week_start_day
        start, end = review.week_range(week_start_day)
        lines = [
            f"# {review.title(week_start_day)}",
            "",
            f"**Period**: {start.isoformat()} - {end.isoformat()}",
            "",
            "## Summary",
            "",
            f"- **Completed tasks**: {review.completed_tasks_count}",
            f"- **Active projects**: {review.active_projects_count}",
        ]
        if template and not any(getattr(review, field) for field in SECTIONS):
            lines += ["", template.strip("\n")]
        else:
            for field, (heading, placeholder) in SECTIONS.items():
                lines += ["", heading, "", getattr(review, field) or placeholder]
        fields = {
            "type": REVIEW_TYPE,
            "date": dates.format_date(review.date),
            "review-type": "weekly",
        }
        return join_front_matter(fields, "\n".join(lines) + "\n")

    async def create_weekly_review(
        self,
        day: date | None = None,
        *,
        reflections: str = "",
        learnings: str = "",
        next_week_goals: str = "",
        notes: str = "",
    ) -> WeeklyReview:
        """Write the weekly review note for *day*.

        Args:
            day: Review date, defaults to today
            reflections: Reflections section text
            learnings: Learnings section text
            next_week_goals: Goals for the coming week
            notes: Free-form notes

        Returns:
            The created WeeklyReview

        Raises:
            NameCollisionError: If a review for that date already exists
        """
        day = day or self.clock()
        path = self.review_path(day)
        if self.fs.exists(path):
            raise NameCollisionError(f"Review already exists: {path}")

        completed, active = await self.week_summary(day)
        review = WeeklyReview(
            date=day,
            location=path,
            completed_tasks_count=completed,
            active_projects_count=active,
            reflections=reflections,
            learnings=learnings,
            next_week_goals=next_week_goals,
            notes=notes,
        )
        if not self.fs.is_folder(self.review_folder):
            self.fs.create_folder(self.review_folder)
        template = await self.templates.read_template("review") if self.templates else ""
        self.fs.create(path, self.render(review, template))
        self.logger.info("Created weekly review %s", path)
        return review

    def parse_review(self, raw: str, path: str) -> WeeklyReview | None:
        """Decode a review note; returns None for other documents."""
        fields, body = split_front_matter(raw, path)
        if fields.get("type") != REVIEW_TYPE:
            return None
        completed = _COMPLETED_RE.search(body)
        active = _ACTIVE_RE.search(body)
        return WeeklyReview(
            date=dates.parse_date_soft(fields.get("date")),
            location=path,
            completed_tasks_count=int(completed.group(1)) if completed else 0,
            active_projects_count=int(active.group(1)) if active else 0,
            **{field: _section(body, heading) for field, (heading, _) in SECTIONS.items()},
        )

    async def list_reviews(self) -> list[WeeklyReview]:
        """All reviews, newest first. Unreadable notes are skipped."""
        reviews = []
        for entry in self.fs.list(self.review_folder):
            if entry.is_folder or not entry.name.endswith(".md"):
                continue
            if entry.name in self.config.folders.template_names:
                continue
            try:
                review = self.parse_review(self.fs.read(entry.path), entry.path)
            except GTDError as e:
                self.logger.warning("Skipping unreadable review %s: %s", entry.path, e)
                continue
            if review is not None:
                reviews.append(review)
        return sorted(reviews, key=lambda r: r.date, reverse=True)

    async def get_review(self, day: date) -> WeeklyReview | None:
        path = self.review_path(day)
        if not self.fs.exists(path):
            return None
        return self.parse_review(self.fs.read(path), path)

    async def has_review_for_week(self, day: date | None = None) -> bool:
        """Whether any review dated inside *day*'s week exists."""
        day = day or self.clock()
        start, end = dates.week_bounds(day, self.config.ui.week_start_day)
        return any(start <= r.date <= end for r in await self.list_reviews())
