"""
Exit codes for the GTD Vault CLI.

Semantic exit codes so scripts wrapping the CLI can tell failures apart.
"""

from gtd_vault.models import (
    EntityValidationError,
    MalformedDocumentError,
    NameCollisionError,
    NotFoundError,
    StorageIOError,
)

# Success
SUCCESS = 0

# General error (unspecified)
ERROR_GENERAL = 1

# Invalid arguments or validation error
ERROR_INVALID_ARGS = 2

# Document exists but cannot be parsed
ERROR_MALFORMED = 3

# Name collision that suffixing could not resolve
ERROR_CONFLICT = 4

# Resource not found
ERROR_NOT_FOUND = 5

# Underlying file-system failure
ERROR_STORAGE = 6


def get_exit_code_name(code: int) -> str:
    """Get the name of an exit code for display purposes."""
    code_names = {
        SUCCESS: "SUCCESS",
        ERROR_GENERAL: "ERROR_GENERAL",
        ERROR_INVALID_ARGS: "ERROR_INVALID_ARGS",
        ERROR_MALFORMED: "ERROR_MALFORMED",
        ERROR_CONFLICT: "ERROR_CONFLICT",
        ERROR_NOT_FOUND: "ERROR_NOT_FOUND",
        ERROR_STORAGE: "ERROR_STORAGE",
    }
    return code_names.get(code, f"UNKNOWN({code})")


def exit_code_for(error: BaseException) -> int:
    """Map an exception to the exit code the CLI should use."""
    if isinstance(error, NotFoundError):
        return ERROR_NOT_FOUND
    if isinstance(error, (EntityValidationError, ValueError, KeyError)):
        return ERROR_INVALID_ARGS
    if isinstance(error, MalformedDocumentError):
        return ERROR_MALFORMED
    if isinstance(error, NameCollisionError):
        return ERROR_CONFLICT
    if isinstance(error, StorageIOError):
        return ERROR_STORAGE
    return ERROR_GENERAL
