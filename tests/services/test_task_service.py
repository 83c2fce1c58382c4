"""Unit tests for TaskService against a temporary vault."""

from __future__ import annotations

import asyncio
from datetime import date, timedelta

import pytest

from gtd_vault.models import EntityValidationError, NotFoundError, Task
from gtd_vault.services.task_service import sort_tasks

# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def _reference_count(body: str, link: str) -> int:
    return sum(1 for line in body.splitlines() if line.strip() == f"- {link}")


# ---------------------------------------------------------------------------
# sort_tasks
# ---------------------------------------------------------------------------


def test_sort_manual_uses_order_then_title():
    tasks = [
        Task(id="1", title="b", order=1),
        Task(id="2", title="a", order=1),
        Task(id="3", title="z", order=0),
    ]
    assert [t.id for t in sort_tasks(tasks, "manual")] == ["3", "2", "1"]


def test_sort_auto_uses_priority_then_date():
    tasks = [
        Task(id="low", title="x", priority="low", date=date(2024, 1, 1)),
        Task(id="high-undated", title="x", priority="high"),
        Task(id="high-late", title="x", priority="high", date=date(2024, 5, 1)),
        Task(id="high-early", title="x", priority="high", date=date(2024, 2, 1)),
        Task(id="medium", title="x", order=-5),
    ]
    result = [t.id for t in sort_tasks(tasks, "auto")]
    assert result == ["high-early", "high-late", "high-undated", "medium", "low"]


# ---------------------------------------------------------------------------
# Create
# ---------------------------------------------------------------------------


@pytest.mark.asyncio
async def test_create_task_writes_document(task_service, fs):
    task = await task_service.create_task("Draft report", tags=["work"])
    assert task.id
    assert task.location == "GTD/Tasks/Draft report.md"
    assert task.priority == "medium"
    assert "tags:\n- work" in fs.read(task.location)


@pytest.mark.asyncio
async def test_create_uses_configured_priority(ctx):
    ctx.config.default_priority = "high"
    task = await ctx.task_service.create_task("Urgent thing")
    assert task.priority == "high"


@pytest.mark.asyncio
async def test_create_today_task_is_dated(task_service, today):
    task = await task_service.create_task("Now", status="today")
    assert task.date == today


@pytest.mark.asyncio
@pytest.mark.parametrize(
    "kwargs",
    [
        {"title": "   "},
        {"title": "x", "status": "doing"},
        {"title": "x", "priority": "urgent"},
    ],
    ids=["empty-title", "bad-status", "bad-priority"],
)
async def test_create_validation_happens_before_write(task_service, gateway, kwargs):
    with pytest.raises(EntityValidationError):
        await task_service.create_task(**kwargs)
    assert gateway.list_all("GTD/Tasks") == []


@pytest.mark.asyncio
async def test_duplicate_titles_get_distinct_documents(task_service, fs):
    first = await task_service.create_task("Same", notes="first")
    second = await task_service.create_task("Same", notes="second")
    assert first.location != second.location
    assert "first" in fs.read(first.location)
    assert "second" in fs.read(second.location)


# ---------------------------------------------------------------------------
# Create & complete scenario
# ---------------------------------------------------------------------------


@pytest.mark.asyncio
async def test_create_and_complete_scenario(task_service, fs, today):
    task = await task_service.create_task("Draft report", status="next-action")
    assert task.date is None
    assert task.location == "GTD/Tasks/Draft report.md"

    task = await task_service.move_to_today(task.id)
    assert task.status == "today"
    assert task.date == today

    task = await task_service.toggle_complete(task.id)
    assert task.completed is True
    assert task.location == "GTD/Tasks/completed/2024-03-15/Draft report.md"
    assert not fs.exists("GTD/Tasks/Draft report.md")

    task = await task_service.toggle_complete(task.id)
    assert task.completed is False
    assert task.location == "GTD/Tasks/Draft report.md"
    assert not fs.exists("GTD/Tasks/completed/2024-03-15/Draft report.md")


@pytest.mark.asyncio
async def test_complete_and_reopen_are_idempotent(task_service):
    task = await task_service.create_task("Once")
    await task_service.complete_task(task.id)
    done = await task_service.complete_task(task.id)
    assert done.completed is True
    assert done.location == "GTD/Tasks/completed/2024-03-15/Once.md"

    await task_service.reopen_task(task.id)
    reopened = await task_service.reopen_task(task.id)
    assert reopened.location == "GTD/Tasks/Once.md"


# ---------------------------------------------------------------------------
# Status changes
# ---------------------------------------------------------------------------


@pytest.mark.asyncio
@pytest.mark.parametrize("status", ["inbox", "next-action", "waiting", "someday"])
async def test_pre_execution_status_resets_completed_task(task_service, status):
    task = await task_service.create_task("Work", status="today")
    await task_service.complete_task(task.id)

    task = await task_service.change_status(task.id, status)
    assert task.status == status
    assert task.date is None
    assert task.completed is False
    assert task.location == "GTD/Tasks/Work.md"


@pytest.mark.asyncio
async def test_move_to_tomorrow_keeps_status(task_service, today):
    task = await task_service.create_task("Later", status="next-action")
    task = await task_service.move_to_tomorrow(task.id)
    assert task.status == "next-action"
    assert task.date == today + timedelta(days=1)


@pytest.mark.asyncio
async def test_schedule_sets_and_clears_date(task_service):
    task = await task_service.create_task("Dentist")
    task = await task_service.schedule(task.id, date(2024, 4, 2))
    assert task.date == date(2024, 4, 2)
    task = await task_service.schedule(task.id, None)
    assert task.date is None


@pytest.mark.asyncio
async def test_unknown_task_raises_not_found(task_service):
    with pytest.raises(NotFoundError):
        await task_service.complete_task("missing")


# ---------------------------------------------------------------------------
# Trash, restore, delete
# ---------------------------------------------------------------------------


@pytest.mark.asyncio
async def test_trash_relocates_and_restore_brings_back(task_service, fs):
    task = await task_service.create_task("Junk", status="today")
    await task_service.complete_task(task.id)

    trashed = await task_service.change_status(task.id, "trash")
    assert trashed.status == "trash"
    assert trashed.completed is False
    assert trashed.date is None
    assert trashed.location == "GTD/Tasks/trash/Junk.md"
    assert "status: trash" in fs.read(trashed.location)

    assert [t.id for t in await task_service.list_tasks()] == []
    assert [t.id for t in await task_service.list_tasks(status="trash")] == [task.id]

    restored = await task_service.restore_task(task.id)
    assert restored.status == "inbox"
    assert restored.location == "GTD/Tasks/Junk.md"


@pytest.mark.asyncio
async def test_update_task_to_trash_moves_document(task_service, gateway, fs):
    task = await task_service.create_task("Draft report")
    task.change_status("trash")

    saved = await task_service.update_task(task)
    assert saved.location == "GTD/Tasks/trash/Draft report.md"
    assert gateway.is_task_aligned(saved)
    assert not fs.exists("GTD/Tasks/Draft report.md")
    assert "status: trash" in fs.read(saved.location)
    assert [t.id for t in await task_service.list_tasks()] == []


@pytest.mark.asyncio
async def test_delete_task_removes_document_and_reference(task_service, project_service, fs):
    project = await project_service.create_project("Launch")
    task = await task_service.create_task("Draft", project="Launch")

    deleted = await task_service.delete_task(task.id)
    assert deleted.id == task.id
    assert not fs.exists(task.location)
    body = (await project_service.get_project(project.id)).body
    assert _reference_count(body, "[[Draft]]") == 0

    with pytest.raises(NotFoundError):
        await task_service.get_task(task.id)


# ---------------------------------------------------------------------------
# Project links
# ---------------------------------------------------------------------------


@pytest.mark.asyncio
async def test_create_with_project_adds_reference(task_service, project_service):
    project = await project_service.create_project("Launch")
    task = await task_service.create_task("Draft", project="Launch")
    assert task.project == "[[Launch]]"

    body = (await project_service.get_project(project.id)).body
    assert body == "## Tasks\n- [[Draft]]\n"


@pytest.mark.asyncio
async def test_reassign_moves_reference_exactly_once(task_service, project_service):
    alpha = await project_service.create_project("Alpha")
    beta = await project_service.create_project("Beta")
    task = await task_service.create_task("Draft", project="Alpha")

    await task_service.assign_to_project(task.id, "Beta")
    await task_service.assign_to_project(task.id, "[[Beta]]")

    alpha_body = (await project_service.get_project(alpha.id)).body
    beta_body = (await project_service.get_project(beta.id)).body
    assert _reference_count(alpha_body, "[[Draft]]") == 0
    assert _reference_count(beta_body, "[[Draft]]") == 1


@pytest.mark.asyncio
async def test_unassign_removes_reference(task_service, project_service):
    project = await project_service.create_project("Alpha")
    task = await task_service.create_task("Draft", project="Alpha")

    task = await task_service.assign_to_project(task.id, None)
    assert task.project is None
    assert _reference_count((await project_service.get_project(project.id)).body, "[[Draft]]") == 0


@pytest.mark.asyncio
async def test_link_to_missing_project_is_kept(task_service):
    task = await task_service.create_task("Orphan", project="Nowhere")
    assert task.project == "[[Nowhere]]"
    assert (await task_service.get_task(task.id)).project == "[[Nowhere]]"


@pytest.mark.asyncio
async def test_trashed_task_keeps_its_reference(task_service, project_service):
    project = await project_service.create_project("Alpha")
    task = await task_service.create_task("Draft", project="Alpha")
    await task_service.trash_task(task.id)
    body = (await project_service.get_project(project.id)).body
    assert _reference_count(body, "[[Draft]]") == 1


# ---------------------------------------------------------------------------
# Editing
# ---------------------------------------------------------------------------


@pytest.mark.asyncio
async def test_edit_task_fields(task_service, fs):
    task = await task_service.create_task("Draft")
    task = await task_service.edit_task(
        task.id, title="Final draft", priority="high", tags=["a", "b"], notes="n"
    )
    assert task.title == "Final draft"
    # The document keeps its name; only the header changes.
    assert task.location == "GTD/Tasks/Draft.md"
    assert "priority: high" in fs.read(task.location)


@pytest.mark.asyncio
async def test_edit_task_rejects_unknown_fields(task_service):
    task = await task_service.create_task("Draft")
    with pytest.raises(ValueError, match="Cannot edit fields: completed, status"):
        await task_service.edit_task(task.id, status="today", completed=True)


@pytest.mark.asyncio
async def test_edit_task_validates_before_write(task_service, fs):
    task = await task_service.create_task("Draft")
    with pytest.raises(EntityValidationError):
        await task_service.edit_task(task.id, title="")
    assert "title: Draft" in fs.read(task.location)


@pytest.mark.asyncio
async def test_edit_task_routes_project(task_service, project_service):
    project = await project_service.create_project("Alpha")
    task = await task_service.create_task("Draft")
    task = await task_service.edit_task(task.id, project="Alpha")
    assert task.project == "[[Alpha]]"
    assert "- [[Draft]]" in (await project_service.get_project(project.id)).body


@pytest.mark.asyncio
async def test_update_task_rejects_placeholder(task_service, write_doc):
    write_doc("GTD/Tasks/bad.md", "---\ntitle: [broken\n---\n")
    [placeholder] = await task_service.list_tasks()
    assert placeholder.damaged
    with pytest.raises(EntityValidationError):
        await task_service.update_task(placeholder)


# ---------------------------------------------------------------------------
# Queries
# ---------------------------------------------------------------------------


@pytest.mark.asyncio
async def test_list_filters(task_service):
    a = await task_service.create_task("A", status="today")
    b = await task_service.create_task("B", status="waiting", project="Alpha")
    c = await task_service.create_task("C")
    await task_service.complete_task(c.id)

    assert {t.id for t in await task_service.list_tasks()} == {a.id, b.id, c.id}
    assert {t.id for t in await task_service.list_tasks(include_completed=False)} == {a.id, b.id}
    assert [t.id for t in await task_service.tasks_by_status("waiting")] == [b.id]
    assert [t.id for t in await task_service.tasks_by_project("Alpha")] == [b.id]
    assert [t.id for t in await task_service.tasks_by_project("[[Alpha]]")] == [b.id]


@pytest.mark.asyncio
async def test_day_queries(task_service, today):
    now = await task_service.create_task("Now", status="today")
    later = await task_service.create_task("Later", date=today + timedelta(days=1))
    late = await task_service.create_task("Late", date=today - timedelta(days=2))

    assert [t.id for t in await task_service.today_tasks()] == [now.id]
    assert [t.id for t in await task_service.tomorrow_tasks()] == [later.id]
    assert [t.id for t in await task_service.overdue_tasks()] == [late.id]


# ---------------------------------------------------------------------------
# Reorder and concurrency
# ---------------------------------------------------------------------------


@pytest.mark.asyncio
async def test_reorder_writes_positions(task_service):
    a = await task_service.create_task("A")
    b = await task_service.create_task("B")
    c = await task_service.create_task("C")

    await task_service.reorder_tasks([c.id, a.id, b.id])

    listed = await task_service.list_tasks()
    assert [t.id for t in listed] == [c.id, a.id, b.id]
    assert [t.order for t in listed] == [0, 1, 2]


@pytest.mark.asyncio
async def test_same_task_operations_are_serialized(task_service):
    task = await task_service.create_task("Racy")
    await asyncio.gather(
        task_service.toggle_complete(task.id),
        task_service.toggle_complete(task.id),
        task_service.edit_task(task.id, notes="edited"),
    )
    final = await task_service.get_task(task.id)
    assert final.completed is False
    assert final.notes == "edited"
    assert final.location == "GTD/Tasks/Racy.md"


# ---------------------------------------------------------------------------
# Day rollover
# ---------------------------------------------------------------------------


@pytest.mark.asyncio
async def test_carry_over_stale_today_tasks(task_service, write_doc, today):
    write_doc("GTD/Tasks/stale.md", "---\nid: stale\ntitle: Stale\nstatus: today\ndate: 2024-03-10\n---\n")
    write_doc("GTD/Tasks/fresh.md", f"---\nid: fresh\ntitle: Fresh\nstatus: today\ndate: {today}\n---\n")
    write_doc(
        "GTD/Tasks/completed/2024-03-10/done.md",
        "---\nid: done\ntitle: Done\nstatus: today\ndate: 2024-03-10\ncompleted: true\n---\n",
    )
    write_doc(
        "GTD/Tasks/next.md",
        "---\nid: next\ntitle: Next\nstatus: next-action\ndate: 2024-03-10\n---\n",
    )
    write_doc("GTD/Tasks/bad.md", "---\ntitle: [broken\n---\n")

    carried = await task_service.carry_over_stale_today_tasks()
    assert [t.id for t in carried] == ["stale"]
    assert (await task_service.get_task("stale")).date == today
    assert (await task_service.get_task("done")).date == date(2024, 3, 10)
    assert (await task_service.get_task("next")).date == date(2024, 3, 10)
