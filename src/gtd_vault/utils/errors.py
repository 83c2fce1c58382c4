"""User-facing error summaries.

Failures shown to the user say what failed, never a stack trace.
"""

from __future__ import annotations

from gtd_vault.models import (
    EntityValidationError,
    MalformedDocumentError,
    NameCollisionError,
    NotFoundError,
    StorageIOError,
)

_PREFIXES: list[tuple[type[Exception], str]] = [
    (NotFoundError, "Not found"),
    (MalformedDocumentError, "Could not parse the document's front matter"),
    (EntityValidationError, "Invalid input"),
    (NameCollisionError, "Name already taken"),
    (StorageIOError, "File operation failed"),
]


def summarize_error(error: BaseException, context: str | None = None) -> str:
    """Build a one-line message for *error*.

    Args:
        error: The exception to describe
        context: Optional description of the action that failed

    Returns:
        Message like ``"Complete task: Not found. Task not found: 42"``
    """
    if isinstance(error, KeyError) and error.args:
        # str(KeyError) adds quotes around the message.
        detail = str(error.args[0])
    else:
        detail = str(error) or error.__class__.__name__
    for error_type, prefix in _PREFIXES:
        if isinstance(error, error_type):
            message = f"{prefix}. {detail}"
            break
    else:
        message = detail
    return f"{context}: {message}" if context else message
