"""Daily note service - logs completed tasks into ``<folder>/<date>.md`` notes."""

from __future__ import annotations

from collections.abc import Callable
from datetime import date

from gtd_vault.adapters.vault.filesystem import VaultFileSystem, join_path
from gtd_vault.models import AppConfig, Task
from gtd_vault.repositories import TaskRepository
from gtd_vault.services.review_service import completion_day
from gtd_vault.utils import dates
from gtd_vault.utils.logger import get_logger

# Section appended to one task at a time in auto-write mode
COMPLETED_HEADINGS = {
    "en": "## 📋 Completed Tasks",
    "ja": "## 📋 完了したタスク",
}

# Section rewritten as a whole by insert_completed_tasks
TODAY_HEADINGS = {
    "en": "## 📋 Today's Completed Tasks",
    "ja": "## 📋 今日完了したタスク",
}

PRIORITY_LABELS = {
    "en": {"high": "priority: high", "low": "priority: low"},
    "ja": {"high": "優先度: 高", "low": "優先度: 低"},
}


def _section_end(content: str, heading: str) -> int:
    """Index where the section under *heading* ends (next ``##`` or EOF)."""
    start = content.index(heading) + len(heading)
    end = content.find("\n##", start)
    return len(content) if end == -1 else end


class DailyNoteService:
    """Writes completed tasks into the day's note."""

    def __init__(
        self,
        fs: VaultFileSystem,
        task_repository: TaskRepository,
        config: AppConfig,
        *,
        clock: Callable[[], date] = dates.today,
    ):
        self.fs = fs
        self.task_repository = task_repository
        self.config = config
        self.clock = clock
        self.logger = get_logger(__name__)

    @property
    def auto_write(self) -> bool:
        return self.config.daily_notes.mode == "auto-write"

    def _localized(self, table: dict):
        return table.get(self.config.ui.language, table["en"])

    def note_path(self, day: date) -> str:
        settings = self.config.daily_notes
        return join_path(settings.folder, f"{day.strftime(settings.date_format)}.md")

    def task_line(self, task: Task) -> str:
        """``- [x] title - [[project]] (priority: high)``; medium priority is not shown."""
        line = f"- [x] {task.title}"
        if task.project:
            line += f" - {task.project}"
        label = self._localized(PRIORITY_LABELS).get(task.priority)
        if label:
            line += f" ({label})"
        return line

    def ensure_note(self, day: date) -> str:
        """Return the path of *day*'s note, creating the note if needed."""
        path = self.note_path(day)
        if self.fs.exists(path):
            return path
        folder = self.config.daily_notes.folder
        if folder and not self.fs.is_folder(folder):
            self.fs.create_folder(folder)
        self.fs.create(path, f"# {day.strftime(self.config.daily_notes.date_format)}\n\n")
        self.logger.info("Created daily note %s", path)
        return path

    async def write_completed_task(self, task: Task, day: date | None = None) -> str | None:
        """Append *task* to the completed section of the day's note.

        Only active in ``auto-write`` mode.

        Returns:
            The note's path, or None when auto-write is off
        """
        if not self.auto_write:
            return None
        path = self.ensure_note(day or self.clock())
        content = self.fs.read(path)
        heading = self._localized(COMPLETED_HEADINGS)
        if heading not in content:
            content = content.rstrip("\n") + f"\n\n{heading}\n"
        end = _section_end(content, heading)
        section = content[:end].rstrip("\n")
        content = f"{section}\n{self.task_line(task)}\n{content[end:]}"
        self.fs.write(path, content)
        self.logger.info("Logged %s in %s", task.title, path)
        return path

    async def completed_on(self, day: date) -> list[Task]:
        """Tasks archived as completed on *day*."""
        return [
            task
            for task in await self.task_repository.list_all()
            if not task.damaged and completion_day(task) == day
        ]

    async def insert_completed_tasks(self, day: date | None = None) -> list[Task]:
        """Replace the day's "completed today" section with the current list.

        Nothing is written when no task was completed that day.

        Returns:
            The tasks listed in the note
        """
        day = day or self.clock()
        tasks = sorted(await self.completed_on(day), key=lambda t: t.title.lower())
        if not tasks:
            return []
        path = self.ensure_note(day)
        content = self.fs.read(path)
        heading = self._localized(TODAY_HEADINGS)
        if heading not in content:
            content = content.rstrip("\n") + f"\n\n{heading}\n"
        start = content.index(heading) + len(heading)
        end = _section_end(content, heading)
        lines = "\n".join(self.task_line(task) for task in tasks)
        content = f"{content[:start]}\n\n{lines}\n{content[end:]}"
        self.fs.write(path, content)
        self.logger.info("Inserted %d completed task(s) into %s", len(tasks), path)
        return tasks
