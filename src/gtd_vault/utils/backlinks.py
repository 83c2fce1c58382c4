"""Task references kept in a project's body under a conventional heading.

These lines are a convenience for people browsing the vault; membership is
still decided by the task's own ``project`` field.
"""

from __future__ import annotations

DEFAULT_HEADING = "## Tasks"


def _reference_line(link: str) -> str:
    return f"- {link}"


def has_reference(body: str, link: str) -> bool:
    line = _reference_line(link)
    return any(existing.strip() == line for existing in body.splitlines())


def add_reference(body: str, link: str, heading: str = DEFAULT_HEADING) -> str:
    """Add ``- [[task]]`` under *heading*, creating the heading if needed.

    Returns the body unchanged when the reference is already there.
    """
    if has_reference(body, link):
        return body
    line = _reference_line(link)
    lines = body.split("\n") if body else []
    for index, existing in enumerate(lines):
        if existing.strip() == heading:
            insert_at = index + 1
            while insert_at < len(lines) and lines[insert_at].strip().startswith("- "):
                insert_at += 1
            lines.insert(insert_at, line)
            return "\n".join(lines)

    prefix = body.rstrip("\n")
    if prefix:
        return f"{prefix}\n\n{heading}\n{line}\n"
    return f"{heading}\n{line}\n"


def remove_reference(body: str, link: str) -> str:
    """Drop every ``- [[task]]`` line for *link*; the heading stays."""
    line = _reference_line(link)
    kept = [existing for existing in body.split("\n") if existing.strip() != line]
    return "\n".join(kept)
