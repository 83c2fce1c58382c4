"""Custom exceptions for GTD Vault."""


class GTDError(Exception):
    """Base exception for all GTD Vault errors."""


class NotFoundError(GTDError):
    """Raised when a referenced task, project or document does not exist."""


class MalformedDocumentError(GTDError):
    """Raised when a document's front matter block cannot be parsed."""

    def __init__(self, message: str, path: str | None = None):
        super().__init__(message)
        self.path = path


class EntityValidationError(GTDError):
    """Raised when an entity fails validation before any write is attempted."""

    def __init__(self, message: str, errors: list[str] | None = None):
        super().__init__(message)
        self.errors = errors or [message]


class NameCollisionError(GTDError):
    """Raised when a document name is already taken and no free name was found."""


class StorageIOError(GTDError):
    """Raised when the underlying file-system capability fails."""
