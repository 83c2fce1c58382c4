"""Tests for logging completed tasks into daily notes."""

from __future__ import annotations

from datetime import date
from unittest.mock import AsyncMock, patch

import pytest

from gtd_vault.models import StorageIOError, Task

NOTE = "2024-03-15.md"


@pytest.fixture()
def daily_notes(ctx):
    return ctx.daily_note_service


@pytest.fixture()
def auto_write(ctx):
    ctx.config.daily_notes.mode = "auto-write"
    return ctx


def test_task_line_shows_project_and_priority(daily_notes):
    task = Task(title="Draft report", project="[[Launch]]", priority="high")
    assert daily_notes.task_line(task) == "- [x] Draft report - [[Launch]] (priority: high)"
    assert daily_notes.task_line(Task(title="Tidy desk", priority="low")) == (
        "- [x] Tidy desk (priority: low)"
    )
    assert daily_notes.task_line(Task(title="Call Bob")) == "- [x] Call Bob"


def test_note_path_follows_settings(ctx, daily_notes):
    assert daily_notes.note_path(date(2024, 3, 15)) == NOTE
    ctx.config.daily_notes.folder = "Journal/Daily"
    ctx.config.daily_notes.date_format = "%Y%m%d"
    assert daily_notes.note_path(date(2024, 3, 15)) == "Journal/Daily/20240315.md"


# ---------------------------------------------------------------------------
# Auto-write on completion
# ---------------------------------------------------------------------------


@pytest.mark.asyncio
async def test_completion_is_logged_in_auto_write_mode(auto_write, fs):
    await auto_write.project_service.create_project("Launch")
    task = await auto_write.task_service.create_task(
        "Draft report", project="Launch", priority="high"
    )
    await auto_write.task_service.complete_task(task.id)

    assert fs.read(NOTE) == (
        "# 2024-03-15\n\n## 📋 Completed Tasks\n- [x] Draft report - [[Launch]] (priority: high)\n"
    )


@pytest.mark.asyncio
async def test_completions_append_inside_their_section(auto_write, fs, write_doc):
    write_doc(NOTE, "# 2024-03-15\n\n## 📋 Completed Tasks\n- [x] Early\n\n## Journal\nRainy\n")
    task = await auto_write.task_service.create_task("Late")
    await auto_write.task_service.complete_task(task.id)

    assert fs.read(NOTE) == (
        "# 2024-03-15\n\n## 📋 Completed Tasks\n- [x] Early\n- [x] Late\n\n## Journal\nRainy\n"
    )


@pytest.mark.asyncio
async def test_only_new_completions_are_logged(auto_write, fs):
    task = await auto_write.task_service.create_task("Once")
    await auto_write.task_service.complete_task(task.id)
    await auto_write.task_service.complete_task(task.id)
    await auto_write.task_service.edit_task(task.id, notes="done early")

    assert fs.read(NOTE).count("- [x] Once") == 1


@pytest.mark.asyncio
async def test_command_mode_writes_nothing_on_completion(ctx, fs):
    task = await ctx.task_service.create_task("Draft report")
    await ctx.task_service.complete_task(task.id)
    assert not fs.exists(NOTE)


@pytest.mark.asyncio
async def test_note_failure_does_not_fail_completion(auto_write, daily_notes, fs):
    task = await auto_write.task_service.create_task("Draft report")
    failing = AsyncMock(side_effect=StorageIOError("disk full"))
    with patch.object(daily_notes, "write_completed_task", failing):
        done = await auto_write.task_service.complete_task(task.id)

    failing.assert_awaited_once()
    assert done.completed is True
    assert fs.exists(done.location)


@pytest.mark.asyncio
async def test_localized_note_in_custom_folder(auto_write, fs):
    auto_write.config.daily_notes.folder = "Daily"
    auto_write.config.ui.language = "ja"
    task = await auto_write.task_service.create_task("Draft report", priority="high")
    await auto_write.task_service.complete_task(task.id)

    assert fs.read(f"Daily/{NOTE}") == (
        "# 2024-03-15\n\n## 📋 完了したタスク\n- [x] Draft report (優先度: 高)\n"
    )


# ---------------------------------------------------------------------------
# Insert command
# ---------------------------------------------------------------------------


@pytest.mark.asyncio
async def test_insert_lists_tasks_completed_that_day(ctx, daily_notes, fs):
    for title in ("B task", "A task"):
        task = await ctx.task_service.create_task(title)
        await ctx.task_service.complete_task(task.id)
    await ctx.task_service.create_task("Still open")

    tasks = await daily_notes.insert_completed_tasks()
    assert [t.title for t in tasks] == ["A task", "B task"]
    assert fs.read(NOTE) == (
        "# 2024-03-15\n\n## 📋 Today's Completed Tasks\n\n- [x] A task\n- [x] B task\n"
    )


@pytest.mark.asyncio
async def test_insert_replaces_existing_section(ctx, daily_notes, fs, write_doc):
    write_doc(
        NOTE,
        "# 2024-03-15\n\n## 📋 Today's Completed Tasks\n\n- [x] Stale\n\n## Journal\nRainy\n",
    )
    task = await ctx.task_service.create_task("Draft report")
    await ctx.task_service.complete_task(task.id)

    await daily_notes.insert_completed_tasks()
    await daily_notes.insert_completed_tasks()
    assert fs.read(NOTE) == (
        "# 2024-03-15\n\n## 📋 Today's Completed Tasks\n\n- [x] Draft report\n\n## Journal\nRainy\n"
    )


@pytest.mark.asyncio
async def test_insert_for_a_quiet_day_writes_nothing(ctx, daily_notes, fs):
    task = await ctx.task_service.create_task("Draft report")
    await ctx.task_service.complete_task(task.id)

    assert await daily_notes.insert_completed_tasks(date(2024, 3, 14)) == []
    assert not fs.exists("2024-03-14.md")
