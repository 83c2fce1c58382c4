"""Task commands.

These are registered directly on the top-level ``gtd`` app.
"""

from typing import Annotated

import typer

from gtd_vault.services.context_manager import get_vault_context
from gtd_vault.utils import dates
from gtd_vault.utils.task_helpers import resolve_task_id
from gtd_vault.utils.ui.console import get_console
from gtd_vault.utils.ui.formatters import (
    format_info,
    format_output,
    format_success,
    format_warning,
)

from .decorators import command_wrapper

app = typer.Typer()
console = get_console()

OutputOption = Annotated[
    str, typer.Option("--output", "-o", help="Output format (pretty/table/json/yaml/quiet)")
]


def _show_task(task, output: str) -> None:
    if output not in ("pretty", "table"):
        format_output(task.model_dump(mode="json"), output)


@app.command("add")
@command_wrapper
async def add_task(
    title: Annotated[str, typer.Argument(help="Task title")],
    status: Annotated[
        str, typer.Option("--status", "-s", help="inbox, next-action, today, waiting or someday")
    ] = "inbox",
    priority: Annotated[
        str | None, typer.Option("--priority", "-p", help="low, medium or high")
    ] = None,
    project: Annotated[
        str | None, typer.Option("--project", "-P", help="Project title or id")
    ] = None,
    date: Annotated[
        str | None, typer.Option("--date", "-d", help="today, tomorrow or YYYY-MM-DD")
    ] = None,
    tags: Annotated[
        list[str] | None, typer.Option("--tag", "-t", help="Tag (repeatable)")
    ] = None,
    notes: Annotated[str, typer.Option("--notes", help="Short notes")] = "",
    output: OutputOption = "pretty",
) -> None:
    """Create a task."""
    ctx = get_vault_context()
    day = dates.parse_day(date) if date else None
    task = await ctx.task_service.create_task(
        title,
        status=status,
        priority=priority,
        project=project,
        date=day,
        tags=tags,
        notes=notes,
    )
    format_success(f"Created: {task.title}")
    console.print(f"[dim]{task.location}[/dim]")
    _show_task(task, output)


@app.command("list")
@command_wrapper
async def list_tasks(
    status: Annotated[str | None, typer.Option("--status", "-s", help="Filter by status")] = None,
    project: Annotated[
        str | None, typer.Option("--project", "-P", help="Filter by project title")
    ] = None,
    today: Annotated[bool, typer.Option("--today", help="Only tasks scheduled today")] = False,
    tomorrow: Annotated[
        bool, typer.Option("--tomorrow", help="Only tasks scheduled tomorrow")
    ] = False,
    overdue: Annotated[bool, typer.Option("--overdue", help="Only overdue tasks")] = False,
    show_all: Annotated[
        bool, typer.Option("--all", "-a", help="Include completed tasks")
    ] = False,
    output: OutputOption = "pretty",
    compact: Annotated[bool, typer.Option("--compact", help="Compact output")] = False,
) -> None:
    """List tasks."""
    service = get_vault_context().task_service
    if today:
        tasks = await service.today_tasks()
    elif tomorrow:
        tasks = await service.tomorrow_tasks()
    elif overdue:
        tasks = await service.overdue_tasks()
    else:
        tasks = await service.list_tasks(
            status=status, project=project, include_completed=show_all or status is not None
        )
    format_output({"tasks": [t.model_dump(mode="json") for t in tasks]}, output, compact=compact)


@app.command("done")
@command_wrapper
async def complete_tasks(
    task_ids: Annotated[list[str], typer.Argument(help="Task id(s), prefix or title")],
) -> None:
    """Mark one or more tasks as completed."""
    service = get_vault_context().task_service
    for task_id in task_ids:
        task = await service.complete_task(await resolve_task_id(service, task_id))
        format_success(f"✓ Completed: {task.title}")
        console.print(f"[dim]To undo: gtd undo {task_id}[/dim]")


@app.command("undo")
@command_wrapper
async def reopen_tasks(
    task_ids: Annotated[list[str], typer.Argument(help="Task id(s), prefix or title")],
) -> None:
    """Mark completed tasks as not completed."""
    service = get_vault_context().task_service
    for task_id in task_ids:
        task = await service.reopen_task(await resolve_task_id(service, task_id))
        format_success(f"Reopened: {task.title}")


@app.command("move")
@command_wrapper
async def move_task(
    task_id: Annotated[str, typer.Argument(help="Task id, prefix or title")],
    status: Annotated[
        str, typer.Argument(help="inbox, next-action, today, waiting, someday or trash")
    ],
) -> None:
    """Move a task to another workflow status."""
    service = get_vault_context().task_service
    task = await service.change_status(await resolve_task_id(service, task_id), status)
    format_success(f"{task.title} → {task.status}")


@app.command("today")
@command_wrapper
async def move_to_today(
    task_id: Annotated[str, typer.Argument(help="Task id, prefix or title")],
) -> None:
    """Schedule a task for today."""
    service = get_vault_context().task_service
    task = await service.move_to_today(await resolve_task_id(service, task_id))
    format_success(f"{task.title} is scheduled for today")


@app.command("tomorrow")
@command_wrapper
async def move_to_tomorrow(
    task_id: Annotated[str, typer.Argument(help="Task id, prefix or title")],
) -> None:
    """Schedule a task for tomorrow."""
    service = get_vault_context().task_service
    task = await service.move_to_tomorrow(await resolve_task_id(service, task_id))
    format_success(f"{task.title} is scheduled for {dates.format_date(task.date)}")


@app.command("assign")
@command_wrapper
async def assign_task(
    task_id: Annotated[str, typer.Argument(help="Task id, prefix or title")],
    project: Annotated[
        str | None, typer.Argument(help="Project title; omit to unlink")
    ] = None,
) -> None:
    """Link a task to a project, or unlink it."""
    service = get_vault_context().task_service
    task = await service.assign_to_project(await resolve_task_id(service, task_id), project)
    if task.project:
        format_success(f"{task.title} → {task.project}")
    else:
        format_success(f"{task.title} is no longer linked to a project")


@app.command("trash")
@command_wrapper
async def trash_task(
    task_id: Annotated[str, typer.Argument(help="Task id, prefix or title")],
) -> None:
    """Move a task to the trash folder."""
    service = get_vault_context().task_service
    task = await service.trash_task(await resolve_task_id(service, task_id))
    format_success(f"Trashed: {task.title}")
    console.print(f"[dim]To restore: gtd restore {task_id}[/dim]")


@app.command("restore")
@command_wrapper
async def restore_task(
    task_id: Annotated[str, typer.Argument(help="Task id, prefix or title")],
) -> None:
    """Bring a trashed task back to the inbox."""
    service = get_vault_context().task_service
    task = await service.restore_task(await resolve_task_id(service, task_id))
    format_success(f"Restored to inbox: {task.title}")


@app.command("delete")
@command_wrapper
async def delete_task(
    task_id: Annotated[str, typer.Argument(help="Task id, prefix or title")],
    yes: Annotated[bool, typer.Option("--yes", "-y", help="Skip confirmation")] = False,
) -> None:
    """Delete a task document."""
    service = get_vault_context().task_service
    resolved = await resolve_task_id(service, task_id)
    task = await service.get_task(resolved)
    if not yes and not typer.confirm(f"Delete '{task.title}'?"):
        format_info("Cancelled")
        raise typer.Exit(0)
    await service.delete_task(resolved)
    format_success(f"Deleted: {task.title}")


@app.command("reorder")
@command_wrapper
async def reorder_tasks(
    task_ids: Annotated[list[str], typer.Argument(help="Task ids in the new order")],
) -> None:
    """Set the manual order of tasks."""
    service = get_vault_context().task_service
    resolved = [await resolve_task_id(service, task_id) for task_id in task_ids]
    await service.reorder_tasks(resolved)
    format_success(f"Reordered {len(resolved)} task(s)")
    if service.config.ui.task_sort_mode != "manual":
        format_warning("Sort mode is 'auto'; manual order is ignored when listing")


@app.command("rollover")
@command_wrapper
async def rollover(
    date: Annotated[
        str | None, typer.Option("--date", "-d", help="New current day (default: today)")
    ] = None,
) -> None:
    """Carry unfinished 'today' tasks from past days over to today."""
    service = get_vault_context().task_service
    day = dates.parse_day(date) if date else None
    carried = await service.carry_over_stale_today_tasks(day)
    if not carried:
        format_info("Nothing to carry over")
        return
    for task in carried:
        console.print(f"  ↪ {task.title}")
    format_success(f"Carried over {len(carried)} task(s)")
