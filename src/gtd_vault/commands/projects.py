"""Project management commands."""

from typing import Annotated

import typer

from gtd_vault.services.context_manager import get_vault_context
from gtd_vault.utils import dates
from gtd_vault.utils.task_helpers import resolve_project_id
from gtd_vault.utils.typer_helpers import SuggestingGroup
from gtd_vault.utils.ui.console import get_console
from gtd_vault.utils.ui.formatters import (
    format_info,
    format_output,
    format_project_item,
    format_success,
    format_tasks_pretty,
)

from .decorators import command_wrapper

app = typer.Typer(cls=SuggestingGroup, help="Project management commands")
console = get_console()


@app.command("add")
@command_wrapper
async def create_project(
    title: Annotated[str, typer.Argument(help="Project title")],
    importance: Annotated[
        int, typer.Option("--importance", "-i", min=1, max=5, help="1 (low) to 5 (high)")
    ] = 3,
    deadline: Annotated[
        str | None, typer.Option("--deadline", "-d", help="today, tomorrow or YYYY-MM-DD")
    ] = None,
    action_plan: Annotated[str, typer.Option("--plan", help="Action plan")] = "",
    color: Annotated[str | None, typer.Option("--color", help="Display color")] = None,
    output: Annotated[str, typer.Option("--output", "-o", help="Output format")] = "pretty",
) -> None:
    """Create a new project."""
    service = get_vault_context().project_service
    project = await service.create_project(
        title,
        importance=importance,
        deadline=dates.parse_day(deadline) if deadline else None,
        action_plan=action_plan,
        color=color,
    )
    format_success(f"Created project: {project.title}")
    console.print(f"[dim]{project.location}[/dim]")
    if output not in ("pretty", "table"):
        format_output(project.model_dump(mode="json"), output)


@app.command("list")
@command_wrapper
async def list_projects(
    status: Annotated[
        str | None,
        typer.Option("--status", "-s", help="not-started, in-progress or completed"),
    ] = None,
    active: Annotated[
        bool, typer.Option("--active", help="Hide completed projects")
    ] = False,
    output: Annotated[str, typer.Option("--output", "-o", help="Output format")] = "pretty",
    compact: Annotated[bool, typer.Option("--compact", help="Compact output")] = False,
) -> None:
    """List projects."""
    service = get_vault_context().project_service
    projects = await service.list_projects(status=status, include_completed=not active)
    result = {"projects": [p.model_dump(mode="json") for p in projects]}
    format_output(result, output, compact=compact)


@app.command("show")
@command_wrapper
async def show_project(
    project_id: Annotated[str, typer.Argument(help="Project id, prefix or title")],
    output: Annotated[str, typer.Option("--output", "-o", help="Output format")] = "pretty",
) -> None:
    """Show a project with its statistics and tasks."""
    ctx = get_vault_context()
    service = ctx.project_service
    project = await service.get_project(await resolve_project_id(service, project_id))
    stats = await service.statistics(project.id)
    tasks = await ctx.task_service.list_tasks(project=project.title, include_completed=True)

    if output not in ("pretty", "table"):
        data = project.model_dump(mode="json")
        data["statistics"] = stats.model_dump()
        data["tasks"] = [t.model_dump(mode="json") for t in tasks]
        format_output(data, output)
        return

    format_project_item(project.model_dump(mode="json"))
    console.print(
        f"   [dim]{stats.total} tasks: {stats.completed} done, "
        f"{stats.in_progress} in progress, {stats.not_started} not started[/dim]"
    )
    if project.action_plan:
        console.print(f"\n[bold]Action plan[/bold]\n{project.action_plan}")
    console.print()
    format_tasks_pretty([t.model_dump(mode="json") for t in tasks], compact=True)


@app.command("status")
@command_wrapper
async def set_status(
    project_id: Annotated[str, typer.Argument(help="Project id, prefix or title")],
    status: Annotated[
        str, typer.Argument(help="not-started, in-progress or completed")
    ],
) -> None:
    """Change a project's status. Completed projects move to the archive."""
    service = get_vault_context().project_service
    project = await service.change_status(await resolve_project_id(service, project_id), status)
    format_success(f"{project.title} → {project.status}")
    if project.is_completed():
        console.print(f"[dim]{project.location}[/dim]")


@app.command("start")
@command_wrapper
async def start_project(
    project_id: Annotated[str, typer.Argument(help="Project id, prefix or title")],
) -> None:
    """Start a not-started project."""
    service = get_vault_context().project_service
    project = await service.start_project(await resolve_project_id(service, project_id))
    format_success(f"{project.title} → {project.status}")


@app.command("complete")
@command_wrapper
async def complete_project(
    project_id: Annotated[str, typer.Argument(help="Project id, prefix or title")],
) -> None:
    """Complete a project and archive its document."""
    service = get_vault_context().project_service
    project = await service.complete_project(await resolve_project_id(service, project_id))
    format_success(f"Completed project: {project.title}")
    console.print(f"[dim]{project.location}[/dim]")


@app.command("delete")
@command_wrapper
async def delete_project(
    project_id: Annotated[str, typer.Argument(help="Project id, prefix or title")],
    yes: Annotated[bool, typer.Option("--yes", "-y", help="Skip confirmation")] = False,
) -> None:
    """Delete a project document. Linked tasks keep their link."""
    service = get_vault_context().project_service
    resolved = await resolve_project_id(service, project_id)
    project = await service.get_project(resolved)
    if not yes and not typer.confirm(f"Delete project '{project.title}'?"):
        format_info("Cancelled")
        raise typer.Exit(0)
    await service.delete_project(resolved)
    format_success(f"Deleted project: {project.title}")
