"""Tests for project progress derivation."""

from __future__ import annotations

from gtd_vault.models import Project, Task
from gtd_vault.utils.progress import (
    calculate_progress,
    child_tasks,
    recompute_all,
    references_project,
    statistics,
)

LAUNCH = Project(id="p1", title="Launch")


def _task(task_id, *, project="[[Launch]]", status="inbox", completed=False, damaged=False):
    return Task(
        id=task_id,
        title=task_id,
        project=project,
        status=status,
        completed=completed,
        damaged=damaged,
    )


def test_references_by_title_or_id():
    assert references_project(_task("a"), LAUNCH)
    assert references_project(_task("b", project="[[p1]]"), LAUNCH)
    assert references_project(_task("c", project=" [[Launch]] "), LAUNCH)
    assert not references_project(_task("d", project="Launch"), LAUNCH)
    assert not references_project(_task("e", project=None), LAUNCH)
    assert not references_project(_task("f", project="[[Other]]"), LAUNCH)


def test_child_tasks_skip_damaged():
    tasks = [_task("a"), _task("b", damaged=True), _task("c", project="[[Other]]")]
    assert [t.id for t in child_tasks(LAUNCH, tasks)] == ["a"]


def test_progress_without_tasks_is_zero():
    assert calculate_progress(LAUNCH, []) == 0
    assert calculate_progress(LAUNCH, [_task("x", project="[[Other]]")]) == 0


def test_progress_rounds_to_nearest_percent():
    tasks = [_task("a", completed=True), _task("b"), _task("c")]
    assert calculate_progress(LAUNCH, tasks) == 33

    tasks.append(_task("d", completed=True))
    assert calculate_progress(LAUNCH, tasks) == 50


def test_progress_rounds_halves_up():
    tasks = [_task("a", completed=True)] + [_task(f"open-{i}") for i in range(7)]
    assert calculate_progress(LAUNCH, tasks) == 13
    assert statistics(LAUNCH, tasks).progress == 13

    for task in tasks[1:5]:
        task.completed = True
    assert calculate_progress(LAUNCH, tasks) == 63


def test_progress_counts_id_links():
    tasks = [_task("a", project="[[p1]]", completed=True), _task("b")]
    assert calculate_progress(LAUNCH, tasks) == 50


def test_statistics_buckets():
    tasks = [
        _task("done", status="today", completed=True),
        _task("today", status="today"),
        _task("next", status="next-action"),
        _task("inbox", status="inbox"),
        _task("someday", status="someday"),
        _task("waiting", status="waiting"),
        _task("trash", status="trash"),
    ]
    stats = statistics(LAUNCH, tasks)
    assert stats.total == 7
    assert stats.completed == 1
    assert stats.in_progress == 2
    assert stats.not_started == 2
    assert stats.progress == 14


def test_statistics_for_empty_project():
    stats = statistics(LAUNCH, [])
    assert stats.total == 0
    assert stats.progress == 0


def test_recompute_all_maps_every_project():
    other = Project(id="p2", title="Other")
    tasks = [_task("a", completed=True), _task("b", project="[[Other]]")]
    assert recompute_all([LAUNCH, other], tasks) == {"p1": 100, "p2": 0}
