"""Tests for document templates."""

from __future__ import annotations

import pytest

from gtd_vault.services.template_service import DEFAULT_TEMPLATES


@pytest.fixture()
def templates(ctx):
    return ctx.template_service


def test_template_paths(ctx, templates):
    assert templates.template_path("task") == "GTD/Tasks/temp_task.md"
    assert templates.template_path("project") == "GTD/Projects/temp_project.md"
    assert templates.template_path("review") == "GTD/Reviews/temp_review.md"

    ctx.config.folders.template_names = ["task-template.md"]
    assert templates.template_path("task") == "GTD/Tasks/task-template.md"
    assert templates.template_path("review") == "GTD/Reviews/temp_review.md"


def test_unknown_kind_is_rejected(templates):
    with pytest.raises(ValueError, match="Unknown template kind"):
        templates.template_path("note")


def test_default_follows_language(ctx, templates):
    assert templates.default_template("task").startswith("## 📋 Task Details")
    ctx.config.ui.language = "ja"
    assert templates.default_template("task").startswith("## 📋 タスク詳細")


@pytest.mark.asyncio
async def test_read_missing_template_creates_nothing(templates, fs):
    assert await templates.read_template("task") == ""
    assert not fs.exists("GTD/Tasks/temp_task.md")


@pytest.mark.asyncio
async def test_initialize_creates_only_missing_files(templates, fs, write_doc):
    write_doc("GTD/Tasks/temp_task.md", "## Mine\n")

    created = await templates.initialize_templates()
    assert created == ["GTD/Projects/temp_project.md", "GTD/Reviews/temp_review.md"]
    assert fs.read("GTD/Tasks/temp_task.md") == "## Mine\n"
    assert fs.read("GTD/Reviews/temp_review.md") == DEFAULT_TEMPLATES["en"]["review"]

    assert await templates.initialize_templates() == []


@pytest.mark.asyncio
async def test_reset_overwrites_or_creates(templates, fs, write_doc):
    write_doc("GTD/Tasks/temp_task.md", "## Mine\n")

    assert await templates.reset_template("task") == "GTD/Tasks/temp_task.md"
    assert fs.read("GTD/Tasks/temp_task.md") == DEFAULT_TEMPLATES["en"]["task"]

    await templates.reset_template("project")
    assert fs.read("GTD/Projects/temp_project.md") == DEFAULT_TEMPLATES["en"]["project"]


@pytest.mark.asyncio
async def test_get_template_writes_default(templates, fs):
    text = await templates.get_template("project")
    assert text == DEFAULT_TEMPLATES["en"]["project"]
    assert fs.read("GTD/Projects/temp_project.md") == text


# ---------------------------------------------------------------------------
# Seeding new documents
# ---------------------------------------------------------------------------


@pytest.mark.asyncio
async def test_new_task_gets_template_body(ctx, write_doc):
    write_doc("GTD/Tasks/temp_task.md", "### Next Action\n")

    seeded = await ctx.task_service.create_task("Draft report")
    assert seeded.body == "### Next Action\n"
    given = await ctx.task_service.create_task("Call Bob", body="Ask about Friday")
    assert given.body == "Ask about Friday"

    titles = [t.title for t in await ctx.task_service.list_tasks()]
    assert titles == ["Call Bob", "Draft report"]


@pytest.mark.asyncio
async def test_new_project_gets_template_body(ctx, write_doc):
    write_doc("GTD/Projects/temp_project.md", "## Overview\n")

    project = await ctx.project_service.create_project("Launch")
    assert (await ctx.project_service.get_project(project.id)).body.startswith("## Overview\n")
    assert [p.title for p in await ctx.project_service.list_projects()] == ["Launch"]


@pytest.mark.asyncio
async def test_review_uses_template_when_sections_are_empty(ctx, fs, write_doc):
    write_doc("GTD/Reviews/temp_review.md", "## Wins\n\n")

    review = await ctx.review_service.create_weekly_review()
    text = fs.read(review.location)
    assert text.endswith("- **Active projects**: 0\n\n## Wins\n")
    assert "## Reflections" not in text


@pytest.mark.asyncio
async def test_review_sections_win_over_template(ctx, fs, write_doc):
    write_doc("GTD/Reviews/temp_review.md", "## Wins\n\n")

    review = await ctx.review_service.create_weekly_review(reflections="Shipped the draft")
    text = fs.read(review.location)
    assert "## Reflections\n\nShipped the draft" in text
    assert "## Wins" not in text
