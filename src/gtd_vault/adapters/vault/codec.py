"""Front matter codec for task and project documents.

A document is an optional YAML block fenced by ``---`` lines followed by a
free-form markdown body::

    ---
    id: 3f0c...
    title: Draft report
    status: today
    date: 2025-03-01
    ---
    Body text

Fields holding their default value are left out on encode. Keys the typed
models do not know are kept in ``extra`` and written back untouched.
"""

from __future__ import annotations

from datetime import date
from typing import Any

import yaml

from gtd_vault.models import (
    PROJECT_STATUSES,
    TASK_PRIORITIES,
    TASK_STATUSES,
    MalformedDocumentError,
    Project,
    Task,
)
from gtd_vault.models.core import (
    DEFAULT_PROJECT_COLOR,
    DEFAULT_PROJECT_TITLE,
    DEFAULT_TASK_TITLE,
)
from gtd_vault.utils.dates import format_date, parse_date_soft

FENCE = "---"
PROJECT_TYPE = "project"

TASK_KEYS = (
    "id",
    "title",
    "status",
    "project",
    "date",
    "completed",
    "priority",
    "tags",
    "notes",
    "order",
)
PROJECT_KEYS = (
    "id",
    "type",
    "title",
    "importance",
    "deadline",
    "status",
    "action-plan",
    "progress",
    "started-date",
    "completed-date",
    "color",
)


def split_front_matter(raw: str, path: str | None = None) -> tuple[dict[str, Any], str]:
    """Split a document into its front matter fields and body.

    Args:
        raw: Full document text
        path: Optional path, only used in error messages

    Returns:
        Tuple of (fields, body). A document without a header yields ``{}``.

    Raises:
        MalformedDocumentError: If a header is present but is not a YAML mapping
    """
    text = raw.replace("\r\n", "\n")
    if not text.startswith(FENCE + "\n") and text.rstrip("\n") != FENCE:
        return {}, text

    lines = text.split("\n")
    closing = None
    for index in range(1, len(lines)):
        if lines[index].rstrip() == FENCE:
            closing = index
            break
    if closing is None:
        raise MalformedDocumentError(f"Unterminated front matter in {path or 'document'}", path)

    header = "\n".join(lines[1:closing])
    body = "\n".join(lines[closing + 1 :])
    try:
        data = yaml.safe_load(header) if header.strip() else {}
    except yaml.YAMLError as e:
        raise MalformedDocumentError(f"Invalid front matter in {path or 'document'}: {e}", path) from e
    if data is None:
        data = {}
    if not isinstance(data, dict):
        raise MalformedDocumentError(
            f"Front matter in {path or 'document'} is not a key-value block", path
        )
    return {str(k): v for k, v in data.items()}, body


def join_front_matter(fields: dict[str, Any], body: str) -> str:
    """Build document text from front matter fields and a body.

    An empty field set still gets a fence when the body itself starts with
    one, so that decoding the result gives back the same body.
    """
    if not fields:
        if body.startswith(FENCE):
            return f"{FENCE}\n{FENCE}\n{body}"
        return body
    header = yaml.safe_dump(
        fields,
        sort_keys=False,
        allow_unicode=True,
        default_flow_style=False,
        width=10_000,
    )
    return f"{FENCE}\n{header}{FENCE}\n{body}"


def _as_str(value: Any, default: str = "") -> str:
    if value is None:
        return default
    return str(value)


def _as_int(value: Any, default: int) -> int:
    if isinstance(value, bool):
        return default
    try:
        return int(value)
    except (TypeError, ValueError):
        return default


def _as_date(value: Any) -> date | None:
    if value is None or value == "":
        return None
    return parse_date_soft(value)


def _as_tags(value: Any) -> list[str]:
    if value is None:
        return []
    if isinstance(value, str):
        return [value]
    if isinstance(value, list):
        return [str(tag) for tag in value if tag is not None]
    return [str(value)]


def decode_task(raw: str, location: str = "") -> Task:
    """Decode a task document.

    Raises:
        MalformedDocumentError: If the front matter cannot be parsed
    """
    fields, body = split_front_matter(raw, location or None)
    status = fields.get("status") or "inbox"
    priority = fields.get("priority") or "medium"
    project = fields.get("project")
    return Task(
        id=_as_str(fields.get("id")),
        title=_as_str(fields.get("title")) or DEFAULT_TASK_TITLE,
        status=status if status in TASK_STATUSES else "inbox",
        completed=fields.get("completed") is True,
        project=_as_str(project) or None,
        date=_as_date(fields.get("date")),
        priority=priority if priority in TASK_PRIORITIES else "medium",
        tags=_as_tags(fields.get("tags")),
        notes=_as_str(fields.get("notes")),
        body=body,
        order=_as_int(fields.get("order"), 0),
        location=location,
        extra={k: v for k, v in fields.items() if k not in TASK_KEYS},
    )


def encode_task(task: Task) -> str:
    """Encode a task as document text, leaving out default-valued fields."""
    fields: dict[str, Any] = {}
    if task.id:
        fields["id"] = task.id
    fields["title"] = task.title
    if task.status != "inbox":
        fields["status"] = task.status
    if task.project:
        fields["project"] = task.project
    if task.date is not None:
        fields["date"] = format_date(task.date)
    if task.completed:
        fields["completed"] = True
    if task.priority != "medium":
        fields["priority"] = task.priority
    if task.tags:
        fields["tags"] = list(task.tags)
    if task.notes:
        fields["notes"] = task.notes
    if task.order:
        fields["order"] = task.order
    for key, value in task.extra.items():
        fields.setdefault(key, value)
    return join_front_matter(fields, task.body)


def is_project_document(fields: dict[str, Any]) -> bool:
    return fields.get("type") == PROJECT_TYPE


def decode_project(raw: str, location: str = "") -> Project:
    """Decode a project document.

    Raises:
        MalformedDocumentError: If the front matter cannot be parsed
    """
    fields, body = split_front_matter(raw, location or None)
    status = fields.get("status") or "not-started"
    importance = max(1, min(5, _as_int(fields.get("importance"), 3)))
    progress = max(0, min(100, _as_int(fields.get("progress"), 0)))
    return Project(
        id=_as_str(fields.get("id")),
        title=_as_str(fields.get("title")) or DEFAULT_PROJECT_TITLE,
        importance=importance,
        deadline=_as_date(fields.get("deadline")),
        status=status if status in PROJECT_STATUSES else "not-started",
        action_plan=_as_str(fields.get("action-plan")),
        color=_as_str(fields.get("color")) or DEFAULT_PROJECT_COLOR,
        started_date=_as_date(fields.get("started-date")),
        completed_date=_as_date(fields.get("completed-date")),
        progress=progress,
        body=body,
        location=location,
        extra={k: v for k, v in fields.items() if k not in PROJECT_KEYS},
    )


def encode_project(project: Project) -> str:
    """Encode a project as document text, leaving out default-valued fields."""
    fields: dict[str, Any] = {}
    if project.id:
        fields["id"] = project.id
    fields["type"] = PROJECT_TYPE
    fields["title"] = project.title
    if project.importance != 3:
        fields["importance"] = project.importance
    if project.deadline is not None:
        fields["deadline"] = format_date(project.deadline)
    if project.status != "not-started":
        fields["status"] = project.status
    if project.action_plan:
        fields["action-plan"] = project.action_plan
    if project.progress:
        fields["progress"] = project.progress
    if project.started_date is not None:
        fields["started-date"] = format_date(project.started_date)
    if project.completed_date is not None:
        fields["completed-date"] = format_date(project.completed_date)
    if project.color != DEFAULT_PROJECT_COLOR:
        fields["color"] = project.color
    for key, value in project.extra.items():
        fields.setdefault(key, value)
    return join_front_matter(fields, project.body)
