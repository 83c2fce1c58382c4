"""Template service - starter bodies for new task, project and review documents.

Each kind has one template file inside its own folder (``temp_task.md`` in the
task folder and so on). Template files are never listed as tasks, projects or
reviews.
"""

from __future__ import annotations

from gtd_vault.adapters.vault.filesystem import VaultFileSystem, join_path, parent_folder
from gtd_vault.models import AppConfig, GTDError, NameCollisionError
from gtd_vault.models.config_models import DEFAULT_TEMPLATE_NAMES
from gtd_vault.utils.logger import get_logger

TEMPLATE_KINDS = ("task", "project", "review")

DEFAULT_TEMPLATES = {
    "en": {
        "task": "## 📋 Task Details\n\n### Purpose\n\n\n### Next Action\n\n\n### Notes\n\n",
        "project": "## 🎯 Overview\n\n\n## 📝 Action Plan\n\n\n## 📊 Progress Notes\n\n",
        "review": (
            "## 📊 Weekly Reflection\n\n### Achievements\n\n\n### Learnings\n\n\n"
            "### Next Week Goals\n\n\n### Notes\n\n"
        ),
    },
    "ja": {
        "task": "## 📋 タスク詳細\n\n### 目的\n\n\n### 次のアクション\n\n\n### メモ\n\n",
        "project": "## 🎯 プロジェクト概要\n\n\n## 📝 アクションプラン\n\n\n## 📊 進捗メモ\n\n",
        "review": "## 📊 今週の振り返り\n\n### 成果\n\n\n### 学び\n\n\n### 来週の目標\n\n\n### メモ\n\n",
    },
}


class TemplateService:
    """Reads, creates and resets the per-kind template files."""

    def __init__(self, fs: VaultFileSystem, config: AppConfig):
        self.fs = fs
        self.config = config
        self.logger = get_logger(__name__)

    @staticmethod
    def _check_kind(kind: str) -> None:
        if kind not in TEMPLATE_KINDS:
            raise ValueError(f"Unknown template kind: {kind} (use {', '.join(TEMPLATE_KINDS)})")

    def template_path(self, kind: str) -> str:
        """Vault-relative path of the template file for *kind*."""
        self._check_kind(kind)
        folders = self.config.folders
        folder = {
            "task": folders.task_folder,
            "project": folders.project_folder,
            "review": folders.review_folder,
        }[kind]
        index = TEMPLATE_KINDS.index(kind)
        names = folders.template_names
        name = names[index] if index < len(names) else DEFAULT_TEMPLATE_NAMES[index]
        return join_path(folder, name)

    def default_template(self, kind: str) -> str:
        self._check_kind(kind)
        return DEFAULT_TEMPLATES.get(self.config.ui.language, DEFAULT_TEMPLATES["en"])[kind]

    async def read_template(self, kind: str) -> str:
        """Text of the template file, or "" when there is none yet.

        New documents are seeded with this; it never creates the file.
        """
        path = self.template_path(kind)
        if not self.fs.exists(path):
            return ""
        try:
            return self.fs.read(path)
        except GTDError as e:
            self.logger.warning("Could not read template %s: %s", path, e)
            return ""

    async def get_template(self, kind: str) -> str:
        """Text of the template for *kind*, writing the default file if missing."""
        path = self.template_path(kind)
        if self.fs.exists(path):
            return self.fs.read(path)
        content = self.default_template(kind)
        self._create(path, content)
        return content

    async def initialize_templates(self) -> list[str]:
        """Create every missing template file; existing ones are left alone.

        Returns:
            Paths of the files that were created
        """
        created = []
        for kind in TEMPLATE_KINDS:
            path = self.template_path(kind)
            if not self.fs.exists(path):
                await self.get_template(kind)
                created.append(path)
        return created

    async def reset_template(self, kind: str) -> str:
        """Overwrite the template for *kind* with the default text.

        Returns:
            Path of the template file
        """
        path = self.template_path(kind)
        content = self.default_template(kind)
        if self.fs.exists(path):
            self.fs.write(path, content)
        else:
            self._create(path, content)
        self.logger.info("Reset template %s", path)
        return path

    def _create(self, path: str, content: str) -> None:
        folder = parent_folder(path)
        if folder and not self.fs.is_folder(folder):
            self.fs.create_folder(folder)
        try:
            self.fs.create(path, content)
        except NameCollisionError:
            # Created concurrently; keep the other writer's file.
            return
        self.logger.info("Created template %s", path)
