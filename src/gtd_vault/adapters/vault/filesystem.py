"""File-system capability consumed by the storage gateway.

The host application owns the real file primitives. The gateway only sees
this small surface, with vault-relative POSIX paths (``GTD/Tasks/a.md``).
"""

from __future__ import annotations

import shutil
from abc import ABC, abstractmethod
from collections.abc import Callable
from dataclasses import dataclass
from pathlib import Path, PurePosixPath

from gtd_vault.models import NameCollisionError, NotFoundError, StorageIOError

RECOVERY_FOLDER = ".trash"


@dataclass(frozen=True)
class VaultEntry:
    """One child of a listed folder."""

    name: str
    path: str
    is_folder: bool


@dataclass(frozen=True)
class VaultChange:
    """Change notification emitted after a successful mutation."""

    kind: str  # create, modify, rename, delete, folder
    path: str
    new_path: str | None = None


ChangeListener = Callable[[VaultChange], None]


def normalize_path(path: str) -> str:
    """Normalise a vault path to forward slashes without surrounding slashes."""
    cleaned = path.replace("\\", "/").strip().strip("/")
    if not cleaned:
        return ""
    return str(PurePosixPath(cleaned))


def parent_folder(path: str) -> str:
    normalized = normalize_path(path)
    if "/" not in normalized:
        return ""
    return normalized.rsplit("/", 1)[0]


def join_path(folder: str, name: str) -> str:
    folder = normalize_path(folder)
    return f"{folder}/{name}" if folder else name


class VaultFileSystem(ABC):
    """Abstract host file-system capability."""

    def __init__(self) -> None:
        self._listeners: list[ChangeListener] = []

    @abstractmethod
    def read(self, path: str) -> str:
        """Return the text of a document."""

    @abstractmethod
    def write(self, path: str, text: str) -> None:
        """Overwrite an existing document."""

    @abstractmethod
    def create(self, path: str, text: str) -> None:
        """Create a new document; raises NameCollisionError if it exists."""

    @abstractmethod
    def rename(self, path: str, new_path: str) -> None:
        """Move or rename a document."""

    @abstractmethod
    def delete(self, path: str) -> None:
        """Remove a document in a recoverable way."""

    @abstractmethod
    def list(self, folder: str) -> list[VaultEntry]:
        """List the direct children of a folder."""

    @abstractmethod
    def create_folder(self, path: str) -> None:
        """Create a folder and its parents; no-op if it already exists."""

    @abstractmethod
    def exists(self, path: str) -> bool:
        """Return True if a document or folder exists at *path*."""

    @abstractmethod
    def is_folder(self, path: str) -> bool:
        """Return True if *path* is an existing folder."""

    def subscribe(self, listener: ChangeListener) -> Callable[[], None]:
        """Register a change listener.

        Returns:
            Callable that removes the listener again
        """
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def _emit(self, kind: str, path: str, new_path: str | None = None) -> None:
        change = VaultChange(kind=kind, path=path, new_path=new_path)
        for listener in list(self._listeners):
            listener(change)


class LocalVaultFileSystem(VaultFileSystem):
    """VaultFileSystem backed by a directory on the local disk."""

    def __init__(self, root: str | Path):
        super().__init__()
        self.root = Path(root).expanduser()

    def _abs(self, path: str) -> Path:
        normalized = normalize_path(path)
        if ".." in PurePosixPath(normalized).parts:
            raise StorageIOError(f"Path escapes the vault: {path}")
        return self.root / normalized if normalized else self.root

    def read(self, path: str) -> str:
        target = self._abs(path)
        try:
            return target.read_text(encoding="utf-8")
        except FileNotFoundError as e:
            raise NotFoundError(f"Document not found: {path}") from e
        except OSError as e:
            raise StorageIOError(f"Failed to read {path}: {e}") from e

    def write(self, path: str, text: str) -> None:
        target = self._abs(path)
        if not target.is_file():
            raise NotFoundError(f"Document not found: {path}")
        try:
            target.write_text(text, encoding="utf-8")
        except OSError as e:
            raise StorageIOError(f"Failed to write {path}: {e}") from e
        self._emit("modify", normalize_path(path))

    def create(self, path: str, text: str) -> None:
        target = self._abs(path)
        try:
            target.parent.mkdir(parents=True, exist_ok=True)
            with open(target, "x", encoding="utf-8") as f:
                f.write(text)
        except FileExistsError as e:
            raise NameCollisionError(f"Document already exists: {path}") from e
        except OSError as e:
            raise StorageIOError(f"Failed to create {path}: {e}") from e
        self._emit("create", normalize_path(path))

    def rename(self, path: str, new_path: str) -> None:
        source = self._abs(path)
        target = self._abs(new_path)
        if not source.exists():
            raise NotFoundError(f"Document not found: {path}")
        if target.exists():
            raise NameCollisionError(f"Document already exists: {new_path}")
        try:
            target.parent.mkdir(parents=True, exist_ok=True)
            source.rename(target)
        except OSError as e:
            raise StorageIOError(f"Failed to move {path} to {new_path}: {e}") from e
        self._emit("rename", normalize_path(path), normalize_path(new_path))

    def delete(self, path: str) -> None:
        source = self._abs(path)
        if not source.exists():
            raise NotFoundError(f"Document not found: {path}")
        recovery = self.root / RECOVERY_FOLDER
        target = recovery / source.name
        counter = 1
        while target.exists():
            target = recovery / f"{source.stem}_{counter}{source.suffix}"
            counter += 1
        try:
            recovery.mkdir(parents=True, exist_ok=True)
            shutil.move(str(source), str(target))
        except OSError as e:
            raise StorageIOError(f"Failed to delete {path}: {e}") from e
        self._emit("delete", normalize_path(path))

    def list(self, folder: str) -> list[VaultEntry]:
        target = self._abs(folder)
        if not target.is_dir():
            return []
        try:
            children = sorted(target.iterdir(), key=lambda p: p.name)
        except OSError as e:
            raise StorageIOError(f"Failed to list {folder}: {e}") from e
        base = normalize_path(folder)
        return [
            VaultEntry(name=child.name, path=join_path(base, child.name), is_folder=child.is_dir())
            for child in children
        ]

    def create_folder(self, path: str) -> None:
        target = self._abs(path)
        if target.is_dir():
            return
        try:
            target.mkdir(parents=True, exist_ok=True)
        except OSError as e:
            raise StorageIOError(f"Failed to create folder {path}: {e}") from e
        self._emit("folder", normalize_path(path))

    def exists(self, path: str) -> bool:
        return self._abs(path).exists()

    def is_folder(self, path: str) -> bool:
        return self._abs(path).is_dir()
