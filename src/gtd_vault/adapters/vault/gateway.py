"""Storage gateway: every physical file operation on task and project documents.

Workflow state is stored twice: in the front matter and in the folder a
document lives in. ``task_folder_for`` is the single mapping from
``(status, completed)`` to a folder; the gateway re-applies it after each
metadata write so the two never drift apart::

    <task root>/                         active tasks
    <task root>/completed/<YYYY-MM-DD>/  tasks completed on that day
    <task root>/trash/                   trashed tasks
    <project root>/                      active projects
    <project root>/completed/<YYYY-MM>/  completed projects
"""

from __future__ import annotations

import re
from collections.abc import Callable, Iterable
from datetime import date

from gtd_vault.adapters.vault.codec import (
    decode_project,
    decode_task,
    encode_project,
    encode_task,
    is_project_document,
    split_front_matter,
)
from gtd_vault.adapters.vault.filesystem import (
    VaultFileSystem,
    join_path,
    normalize_path,
    parent_folder,
)
from gtd_vault.models import (
    AppConfig,
    EntityValidationError,
    GTDError,
    NameCollisionError,
    NotFoundError,
    Project,
    Task,
)
from gtd_vault.models.config_models import FolderConfig
from gtd_vault.utils import dates
from gtd_vault.utils.logger import get_logger
from gtd_vault.utils.uuid_utils import generate_id

MAX_NAME_ATTEMPTS = 10_000
DOCUMENT_SUFFIX = ".md"
_UNSAFE_NAME_CHARS = re.compile(r'[/\\:*?"<>|]')

Entity = Task | Project


def sanitize_name(title: str) -> str:
    """Turn a title into a file-system safe document stem."""
    cleaned = _UNSAFE_NAME_CHARS.sub("_", title).strip().strip(".")
    return cleaned or "Untitled"


def task_folder_for(folders: FolderConfig, status: str, completed: bool, day: date) -> str:
    """Return the folder a task document must live in.

    Args:
        folders: Folder layout
        status: Task workflow status
        completed: Task completion flag
        day: Day used to date the completed archive folder

    Returns:
        Vault-relative folder path
    """
    root = folders.task_folder
    if status == "trash":
        return f"{root}/{folders.trash_folder_name}"
    if completed:
        return f"{root}/{folders.completed_folder_name}/{dates.format_date(day)}"
    return root


def project_archive_folder(folders: FolderConfig, day: date) -> str:
    """Return the dated archive folder for a project completed on *day*."""
    return f"{folders.project_folder}/{folders.completed_folder_name}/{dates.month_folder(day)}"


def _stem(path: str) -> str:
    name = normalize_path(path).rsplit("/", 1)[-1]
    return name[: -len(DOCUMENT_SUFFIX)] if name.endswith(DOCUMENT_SUFFIX) else name


class DocumentGateway:
    """Owns document creation, rewriting, relocation, deletion and listing."""

    def __init__(
        self,
        fs: VaultFileSystem,
        config: AppConfig,
        *,
        clock: Callable[[], date] = dates.today,
    ):
        """Initialize the gateway.

        Args:
            fs: Host file-system capability
            config: Application configuration (folder layout)
            clock: Returns the current day; used to date archive folders
        """
        self.fs = fs
        self.config = config
        self.clock = clock
        self.logger = get_logger(__name__)

    @property
    def folders(self) -> FolderConfig:
        return self.config.folders

    @property
    def task_root(self) -> str:
        return self.folders.task_folder

    @property
    def task_archive_root(self) -> str:
        return f"{self.task_root}/{self.folders.completed_folder_name}"

    @property
    def task_trash_root(self) -> str:
        return f"{self.task_root}/{self.folders.trash_folder_name}"

    @property
    def project_root(self) -> str:
        return self.folders.project_folder

    @property
    def project_archive_root(self) -> str:
        return f"{self.project_root}/{self.folders.completed_folder_name}"

    # ------------------------------------------------------------------
    # Location mapping
    # ------------------------------------------------------------------

    def expected_task_folder(self, task: Task) -> str:
        return task_folder_for(self.folders, task.status, task.completed, self.clock())

    def is_task_aligned(self, task: Task) -> bool:
        """Check the task's location against its (status, completed) pair.

        A completed task may stay in whichever dated folder it was archived
        to; only the archive root matters.
        """
        folder = parent_folder(task.location)
        if task.status == "trash":
            return folder == self.task_trash_root
        if task.completed:
            return parent_folder(folder) == self.task_archive_root
        return folder == self.task_root

    # ------------------------------------------------------------------
    # Folder and name helpers
    # ------------------------------------------------------------------

    async def ensure_folder(self, folder: str) -> None:
        """Create *folder* if it does not exist yet."""
        if not self.fs.is_folder(folder):
            self.fs.create_folder(folder)

    def free_path(self, folder: str, stem: str, *, current: str | None = None) -> str:
        """Return the first unused ``folder/stem[_N].md`` path.

        Args:
            folder: Destination folder
            stem: Preferred document stem
            current: The document's own path, which never counts as taken

        Raises:
            NameCollisionError: If no free name is found
        """
        candidate = join_path(folder, f"{stem}{DOCUMENT_SUFFIX}")
        counter = 1
        while self.fs.exists(candidate) and candidate != current:
            if counter > MAX_NAME_ATTEMPTS:
                raise NameCollisionError(f"No free document name for {stem!r} in {folder}")
            candidate = join_path(folder, f"{stem}_{counter}{DOCUMENT_SUFFIX}")
            counter += 1
        return candidate

    @staticmethod
    def _encode(entity: Entity) -> str:
        if isinstance(entity, Task):
            return encode_task(entity)
        return encode_project(entity)

    # ------------------------------------------------------------------
    # Mutations
    # ------------------------------------------------------------------

    async def create_document(self, entity: Entity, folder: str | None = None) -> str:
        """Write a new document for *entity* without overwriting anything.

        Args:
            entity: Task or project to persist; its location is updated
            folder: Optional destination; defaults to the folder the entity
                maps to

        Returns:
            Final vault-relative path of the new document
        """
        if entity.damaged:
            raise EntityValidationError("Cannot persist a placeholder for an unreadable document")
        if folder is None:
            if isinstance(entity, Task):
                folder = self.expected_task_folder(entity)
            else:
                folder = self.project_root
        await self.ensure_folder(folder)

        stem = sanitize_name(entity.title)
        content = self._encode(entity)
        for _ in range(MAX_NAME_ATTEMPTS):
            path = self.free_path(folder, stem)
            try:
                self.fs.create(path, content)
            except NameCollisionError:
                # Someone took the name between the check and the create.
                continue
            entity.location = path
            self.logger.debug("Created %s", path)
            return path
        raise NameCollisionError(f"No free document name for {stem!r} in {folder}")

    async def update_document(self, entity: Entity) -> str:
        """Rewrite *entity* in place, then realign a task with its folder.

        Trashed tasks are never relocated here; trashing moves the document
        explicitly through ``move_document``.

        Returns:
            The entity's (possibly new) location
        """
        if entity.damaged:
            raise EntityValidationError("Cannot persist a placeholder for an unreadable document")
        if not entity.location or not self.fs.exists(entity.location):
            raise NotFoundError(f"Document not found: {entity.location or entity.id}")

        self.fs.write(entity.location, self._encode(entity))

        if isinstance(entity, Task) and entity.status != "trash":
            if not self.is_task_aligned(entity):
                await self.move_document(entity, self.expected_task_folder(entity))
        return entity.location

    async def move_document(self, entity: Entity, target_folder: str) -> str:
        """Relocate *entity*'s document into *target_folder*.

        No-op when the document already sits in that folder.

        Returns:
            The entity's location after the move
        """
        target = normalize_path(target_folder)
        current = normalize_path(entity.location)
        if parent_folder(current) == target:
            self.logger.debug("%s already in %s, skipping move", current, target)
            return entity.location
        if not current or not self.fs.exists(current):
            raise NotFoundError(f"Document not found: {entity.location or entity.id}")

        await self.ensure_folder(target)
        new_path = self.free_path(target, _stem(current), current=current)
        if new_path == current:
            return entity.location

        self.fs.rename(current, new_path)
        entity.location = new_path
        self.logger.debug("Moved %s -> %s", current, new_path)
        return new_path

    async def delete_document(self, entity_id: str, *, kind: str | None = None) -> Entity:
        """Remove the document of the task or project with *entity_id*.

        Args:
            entity_id: Id to resolve
            kind: "task" or "project" to restrict the lookup

        Returns:
            The entity that was removed

        Raises:
            NotFoundError: If no matching entity has that id
        """
        entity: Entity | None = None
        if kind in (None, "task"):
            entity = await self.find_task(entity_id)
        if entity is None and kind in (None, "project"):
            entity = await self.find_project(entity_id)
        if entity is None:
            raise NotFoundError(f"No {kind or 'task or project'} with id {entity_id}")
        self.fs.delete(entity.location)
        self.logger.info("Deleted %s", entity.location)
        return entity

    # ------------------------------------------------------------------
    # Listing
    # ------------------------------------------------------------------

    def list_all(self, root: str, exclude_subfolders: Iterable[str] = ()) -> list[str]:
        """Recursively collect document paths under *root*.

        Args:
            root: Folder to walk; a missing folder yields an empty list
            exclude_subfolders: Folders to skip, relative to *root*

        Returns:
            Sorted list of vault-relative document paths
        """
        root = normalize_path(root)
        excluded = {join_path(root, normalize_path(sub)) for sub in exclude_subfolders}
        templates = set(self.folders.template_names)
        found: list[str] = []

        def walk(folder: str) -> None:
            for entry in self.fs.list(folder):
                if entry.name.startswith("."):
                    continue
                if entry.is_folder:
                    if entry.path not in excluded:
                        walk(entry.path)
                elif entry.name.endswith(DOCUMENT_SUFFIX) and entry.name not in templates:
                    found.append(entry.path)

        if self.fs.is_folder(root):
            walk(root)
        return sorted(found)

    def _task_paths(self) -> list[str]:
        active = self.list_all(
            self.task_root,
            exclude_subfolders=[
                self.folders.completed_folder_name,
                self.folders.trash_folder_name,
            ],
        )
        return active + self.list_all(self.task_archive_root) + self.list_all(self.task_trash_root)

    def _project_paths(self) -> list[str]:
        active = self.list_all(
            self.project_root, exclude_subfolders=[self.folders.completed_folder_name]
        )
        return active + self.list_all(self.project_archive_root)

    def _backfill_id(self, entity: Entity) -> None:
        entity.id = generate_id()
        self.logger.info("Adding id to %s", entity.location)
        try:
            self.fs.write(entity.location, self._encode(entity))
        except GTDError as e:
            self.logger.warning("Failed to save id for %s: %s", entity.location, e)

    def load_task(self, path: str) -> Task:
        """Read and decode one task document, backfilling a missing id."""
        task = decode_task(self.fs.read(path), path)
        if not task.id:
            self._backfill_id(task)
        return task

    def load_project(self, path: str) -> Project | None:
        """Read one project document; returns None for non-project documents."""
        raw = self.fs.read(path)
        fields, _ = split_front_matter(raw, path)
        if not is_project_document(fields):
            self.logger.debug("Skipping non-project document %s", path)
            return None
        project = decode_project(raw, path)
        if not project.id:
            self._backfill_id(project)
        return project

    async def read_tasks(self) -> list[Task]:
        """Load every task document: active, completed archive and trash.

        An unreadable document never hides the others; it is logged and
        replaced by a damaged placeholder so it stays visible and fixable.
        """
        tasks: list[Task] = []
        for path in self._task_paths():
            try:
                tasks.append(self.load_task(path))
            except GTDError as e:
                self.logger.warning("Skipping unreadable task %s: %s", path, e)
                tasks.append(
                    Task(id=f"damaged:{path}", title=_stem(path), location=path, damaged=True)
                )
        return tasks

    async def read_projects(self) -> list[Project]:
        """Load every project document, including the completed archive."""
        projects: list[Project] = []
        for path in self._project_paths():
            try:
                project = self.load_project(path)
            except GTDError as e:
                self.logger.warning("Skipping unreadable project %s: %s", path, e)
                continue
            if project is not None:
                projects.append(project)
        return projects

    async def find_task(self, task_id: str) -> Task | None:
        for task in await self.read_tasks():
            if task.id == task_id:
                return task
        return None

    async def find_project(self, project_id: str) -> Project | None:
        for project in await self.read_projects():
            if project.id == project_id:
                return project
        return None
