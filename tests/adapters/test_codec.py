"""Tests for the front matter codec."""

from __future__ import annotations

from datetime import date

import pytest

from gtd_vault.adapters.vault.codec import (
    decode_project,
    decode_task,
    encode_project,
    encode_task,
    join_front_matter,
    split_front_matter,
)
from gtd_vault.models import MalformedDocumentError, Project, Task

# ---------------------------------------------------------------------------
# split_front_matter / join_front_matter
# ---------------------------------------------------------------------------


def test_split_without_header_returns_empty_fields():
    fields, body = split_front_matter("Just a note\nwith two lines")
    assert fields == {}
    assert body == "Just a note\nwith two lines"


def test_split_parses_header_and_body():
    fields, body = split_front_matter("---\ntitle: Draft report\nstatus: today\n---\nBody text\n")
    assert fields == {"title": "Draft report", "status": "today"}
    assert body == "Body text\n"


def test_split_normalizes_crlf():
    fields, body = split_front_matter("---\r\ntitle: A\r\n---\r\nline\r\n")
    assert fields == {"title": "A"}
    assert body == "line\n"


def test_split_empty_header():
    fields, body = split_front_matter("---\n---\nBody")
    assert fields == {}
    assert body == "Body"


@pytest.mark.parametrize(
    "raw",
    [
        "---\ntitle: A\n",
        "---\ntitle: [unclosed\n---\nBody",
        "---\n- just\n- a list\n---\n",
    ],
    ids=["unterminated", "bad-yaml", "not-a-mapping"],
)
def test_split_rejects_broken_header(raw):
    with pytest.raises(MalformedDocumentError):
        split_front_matter(raw, "GTD/Tasks/broken.md")


def test_malformed_error_carries_path():
    with pytest.raises(MalformedDocumentError) as exc_info:
        split_front_matter("---\ntitle: A\n", "GTD/Tasks/broken.md")
    assert exc_info.value.path == "GTD/Tasks/broken.md"
    assert "broken.md" in str(exc_info.value)


def test_join_keeps_key_order():
    text = join_front_matter({"id": "1", "title": "T", "status": "today"}, "Body")
    assert text == "---\nid: '1'\ntitle: T\nstatus: today\n---\nBody"


def test_join_without_fields_returns_body():
    assert join_front_matter({}, "plain") == "plain"


def test_join_without_fields_protects_fence_like_body():
    text = join_front_matter({}, "---\nnot a header")
    fields, body = split_front_matter(text)
    assert fields == {}
    assert body == "---\nnot a header"


# ---------------------------------------------------------------------------
# Tasks
# ---------------------------------------------------------------------------


def test_encode_task_omits_defaults():
    text = encode_task(Task(id="t1", title="Draft report"))
    assert text == "---\nid: t1\ntitle: Draft report\n---\n"


def test_encode_task_writes_non_defaults():
    task = Task(
        id="t1",
        title="Draft report",
        status="today",
        completed=True,
        project="[[Launch]]",
        date=date(2024, 3, 15),
        priority="high",
        tags=["work", "writing"],
        order=2,
    )
    fields, _ = split_front_matter(encode_task(task))
    assert fields == {
        "id": "t1",
        "title": "Draft report",
        "status": "today",
        "project": "[[Launch]]",
        "date": "2024-03-15",
        "completed": True,
        "priority": "high",
        "tags": ["work", "writing"],
        "order": 2,
    }


def test_task_round_trip_keeps_everything():
    task = Task(
        id="t1",
        title="Draft report",
        status="waiting",
        project="[[Launch]]",
        date=date(2024, 3, 20),
        priority="low",
        tags=["a"],
        notes="call Bob first",
        body="\n# Draft report\n\nSome details.\n",
        order=4,
        location="GTD/Tasks/Draft report.md",
        extra={"energy": "low", "estimate": 30},
    )
    assert decode_task(encode_task(task), task.location) == task


def test_decode_task_without_header():
    task = decode_task("Loose note", "GTD/Tasks/Loose note.md")
    assert task.id == ""
    assert task.title == "Untitled task"
    assert task.status == "inbox"
    assert task.body == "Loose note"
    assert task.location == "GTD/Tasks/Loose note.md"


def test_decode_task_falls_back_on_unknown_values():
    task = decode_task("---\ntitle: X\nstatus: doing\npriority: urgent\norder: soon\n---\n")
    assert task.status == "inbox"
    assert task.priority == "medium"
    assert task.order == 0


def test_decode_task_tolerates_odd_shapes():
    raw = "---\ntitle: X\ntags: solo\ndate: 2024-03-15\ncompleted: 'yes'\n---\n"
    task = decode_task(raw)
    assert task.tags == ["solo"]
    assert task.date == date(2024, 3, 15)
    # Only a real boolean marks a task completed.
    assert task.completed is False


def test_decode_task_unparseable_date_becomes_today():
    task = decode_task("---\ntitle: X\ndate: next week\n---\n")
    assert task.date == date.today()


# ---------------------------------------------------------------------------
# Projects
# ---------------------------------------------------------------------------


def test_encode_project_marks_type():
    fields, _ = split_front_matter(encode_project(Project(id="p1", title="Launch")))
    assert fields == {"id": "p1", "type": "project", "title": "Launch"}


def test_project_round_trip_keeps_everything():
    project = Project(
        id="p1",
        title="Launch",
        importance=5,
        deadline=date(2024, 4, 1),
        status="in-progress",
        action_plan="Ship it",
        color="#ff0000",
        started_date=date(2024, 3, 1),
        progress=40,
        body="## Tasks\n- [[Draft report]]\n",
        location="GTD/Projects/Launch.md",
        extra={"area": "work"},
    )
    assert decode_project(encode_project(project), project.location) == project


def test_decode_project_uses_hyphenated_keys():
    raw = (
        "---\ntype: project\ntitle: Launch\naction-plan: Plan\n"
        "started-date: 2024-03-01\ncompleted-date: 2024-03-10\n---\n"
    )
    project = decode_project(raw)
    assert project.action_plan == "Plan"
    assert project.started_date == date(2024, 3, 1)
    assert project.completed_date == date(2024, 3, 10)
    assert project.extra == {}


def test_decode_project_clamps_out_of_range_numbers():
    project = decode_project("---\ntype: project\ntitle: P\nimportance: 9\nprogress: 150\n---\n")
    assert project.importance == 5
    assert project.progress == 100


def test_decode_project_defaults():
    project = decode_project("---\ntype: project\n---\n")
    assert project.title == "Untitled project"
    assert project.status == "not-started"
    assert project.color == "#3b82f6"
    assert project.importance == 3


def test_project_with_empty_color_round_trips():
    project = Project(
        id="p1", title="Launch", color="", body="## Tasks\n", location="GTD/Projects/Launch.md"
    )
    assert project.color == "#3b82f6"
    assert decode_project(encode_project(project), project.location) == project
