"""UUID utility functions for GTD Vault.

Provides id generation, short id display and prefix resolution.
"""

from __future__ import annotations

import re
import uuid
from collections.abc import Iterable
from typing import Protocol

from gtd_vault.models import NotFoundError

# Relaxed UUID pattern (any version)
UUID_RELAXED_PATTERN = re.compile(
    r"^[0-9a-f]{8}-[0-9a-f]{4}-[0-9a-f]{4}-[0-9a-f]{4}-[0-9a-f]{12}$", re.IGNORECASE
)


class _HasIdAndTitle(Protocol):
    id: str
    title: str


def generate_id() -> str:
    """Generate a new random entity id.

    Returns:
        UUID4 string (e.g., "123e4567-e89b-42d3-a456-426614174000")
    """
    return str(uuid.uuid4())


def is_valid_uuid(value: str) -> bool:
    if not isinstance(value, str):
        return False
    return UUID_RELAXED_PATTERN.match(value) is not None


def shorten_uuid(value: str, length: int = 8) -> str:
    """Get the first *length* characters of an id for display."""
    return value[:length]


def resolve_entity_id(
    short_or_full_id: str,
    entities: Iterable[_HasIdAndTitle],
    *,
    kind: str = "Task",
    min_length: int = 4,
) -> str:
    """Resolve a full id, an id prefix, or an exact title to a full id.

    Tries in order: exact id → id prefix → case-insensitive title match.

    Args:
        short_or_full_id: What the user typed
        entities: Candidates to search
        kind: Entity name used in error messages
        min_length: Minimum length for prefix matching

    Returns:
        Full id string

    Raises:
        NotFoundError: If nothing matches
        ValueError: If the input is ambiguous
    """
    wanted = short_or_full_id.strip().lstrip("#")
    normalized = wanted.lower()
    candidates = list(entities)

    for entity in candidates:
        if entity.id.lower() == normalized:
            return entity.id

    if len(normalized) >= min_length:
        prefixed = [e for e in candidates if e.id.lower().startswith(normalized)]
        if len(prefixed) == 1:
            return prefixed[0].id
        if len(prefixed) > 1:
            matches = ", ".join(shorten_uuid(e.id) for e in prefixed[:5])
            if len(prefixed) > 5:
                matches += f", ... ({len(prefixed)} total)"
            raise ValueError(
                f"Ambiguous ID '{wanted}' matches {len(prefixed)} {kind.lower()}s: {matches}"
            )

    titled = [e for e in candidates if e.title.lower() == normalized]
    if len(titled) == 1:
        return titled[0].id
    if len(titled) > 1:
        raise ValueError(f"Ambiguous title '{wanted}' matches {len(titled)} {kind.lower()}s")

    raise NotFoundError(f"{kind} not found: '{wanted}'")
