"""Output formatters for different formats."""

import json
from datetime import date
from typing import Any

import yaml
from rich.table import Table
from rich.text import Text

from gtd_vault.utils.ui.console import get_console
from gtd_vault.utils.uuid_utils import shorten_uuid

console = get_console()

OUTPUT_FORMATS = ("pretty", "table", "json", "yaml", "quiet")

PRIORITY_ICONS = {
    "high": "🔴",
    "medium": "🟡",
    "low": "🟢",
}

PRIORITY_COLORS = {
    "high": "bold red",
    "medium": "yellow",
    "low": "green",
}

STATUS_ICONS = {
    "inbox": "📥",
    "next-action": "▶️",
    "today": "📅",
    "waiting": "⏳",
    "someday": "💭",
    "trash": "🗑️",
}

PROJECT_STATUS_ICONS = {
    "not-started": "⬜",
    "in-progress": "🚧",
    "completed": "✅",
}


def format_output(data: Any, output_format: str = "pretty", compact: bool = False) -> None:
    """Format and display output based on format."""
    if output_format == "json":
        print(json.dumps(data, indent=2, default=str, ensure_ascii=False))
    elif output_format == "yaml":
        print(yaml.safe_dump(_plain(data), default_flow_style=False, sort_keys=False, allow_unicode=True))
    elif output_format == "table":
        format_table(data)
    elif output_format == "quiet":
        format_quiet(data)
    else:
        format_pretty(data, compact=compact)


def _plain(data: Any) -> Any:
    """Make *data* safe for yaml.safe_dump."""
    return json.loads(json.dumps(data, default=str))


def _collection(data: dict) -> list | None:
    for key in ("tasks", "projects", "items"):
        if key in data:
            return data[key]
    return None


def format_table(data: Any) -> None:
    """Format data as a table."""
    if isinstance(data, dict):
        items = _collection(data)
        if items is None:
            format_single_item(data)
            return
        data = items
    if not data:
        console.print("[yellow]No items found[/yellow]")
        return
    format_dict_table(data)


def format_dict_table(items: list[dict]) -> None:
    """Format a list of dictionaries as a table."""
    columns = [
        c for c in items[0].keys() if c not in ("body", "extra", "location", "damaged", "notes")
    ]
    table = Table(show_header=True, header_style="bold magenta")
    for column in columns:
        table.add_column(column.replace("_", " ").title())
    for item in items:
        row = []
        for column in columns:
            value = item.get(column)
            if column == "id" and isinstance(value, str):
                value = shorten_uuid(value)
            row.append(_cell(value))
        table.add_row(*row)
    console.print(table)


def _cell(value: Any) -> str:
    if isinstance(value, bool):
        return "✓" if value else "✗"
    if isinstance(value, list):
        return ", ".join(str(v) for v in value)
    if value is None:
        return "-"
    return str(value)


def format_single_item(item: dict) -> None:
    """Format a single item as key-value pairs."""
    table = Table(show_header=False, box=None)
    table.add_column("Key", style="cyan")
    table.add_column("Value", style="white")
    for key, value in item.items():
        if key in ("extra", "damaged"):
            continue
        table.add_row(key.replace("_", " ").title(), _cell(value))
    console.print(table)


def format_error(message: str) -> None:
    """Format and display an error message."""
    console.print(f"[bold red]Error:[/bold red] {message}")


def format_success(message: str) -> None:
    """Format and display a success message."""
    console.print(f"[bold green]Success:[/bold green] {message}")


def format_warning(message: str) -> None:
    """Format and display a warning message."""
    console.print(f"[bold yellow]Warning:[/bold yellow] {message}")


def format_info(message: str) -> None:
    """Format and display an info message."""
    console.print(f"[bold blue]Info:[/bold blue] {message}")


# ============================================================================
# Pretty Format Implementation
# ============================================================================


def format_pretty(data: Any, compact: bool = False) -> None:
    """Format data in pretty format with colors and icons."""
    if isinstance(data, dict) and "tasks" in data:
        format_tasks_pretty(data["tasks"], compact)
    elif isinstance(data, dict) and "projects" in data:
        format_projects_pretty(data["projects"], compact)
    elif isinstance(data, dict):
        format_single_item(data)
    elif isinstance(data, list) and data and isinstance(data[0], dict):
        format_dict_table(data)
    elif not data:
        console.print("[yellow]No items found[/yellow]")
    else:
        console.print(data)


def format_tasks_pretty(tasks: list[dict], compact: bool = False) -> None:
    """Format tasks grouped by status."""
    if not tasks:
        console.print("[yellow]No tasks found[/yellow]")
        return

    active = [t for t in tasks if not t.get("completed")]
    header = Text()
    header.append("📋 Tasks ", style="bold cyan")
    header.append(f"({len(active)} active, {len(tasks) - len(active)} done)", style="dim")
    console.print(header)
    console.print()

    for status, icon in STATUS_ICONS.items():
        group = [t for t in tasks if t.get("status") == status]
        if not group:
            continue
        console.print(f"{icon} {status.upper()} ({len(group)})", style="bold blue")
        for task in group:
            format_task_item(task, compact, indent="  ")
        console.print()


def format_task_item(task: dict, compact: bool = False, indent: str = "") -> None:
    """Format a single task line, with metadata unless *compact*."""
    line = Text(indent)
    line.append("☑ " if task.get("completed") else "☐ ")
    title_style = "dim strike" if task.get("completed") else "bold"
    if task.get("damaged"):
        title_style = "red"
    line.append(task.get("title", "Untitled"), style=title_style)
    line.append(f"  #{shorten_uuid(task.get('id', ''))}", style="dim")
    console.print(line)
    if compact:
        return

    meta = []
    priority = task.get("priority")
    if priority:
        meta.append((f"{PRIORITY_ICONS.get(priority, '')} {priority}", PRIORITY_COLORS.get(priority, "")))
    if task.get("date"):
        meta.append((f"📅 {format_day(task['date'])}", "red" if is_overdue(task) else "cyan"))
    if task.get("project"):
        meta.append((f"📁 {task['project']}", "magenta"))
    if task.get("tags"):
        meta.append(("🏷️ " + ", ".join(task["tags"]), "blue"))
    if task.get("damaged"):
        meta.append(("⚠ unreadable document, fix or delete it", "bold red"))
    if meta:
        meta_line = Text(f"{indent}   └─ ", style="dim")
        for i, (text, style) in enumerate(meta):
            if i:
                meta_line.append("  ")
            meta_line.append(text, style=style)
        console.print(meta_line)


def format_projects_pretty(projects: list[dict], compact: bool = False) -> None:
    """Format projects with a progress bar each."""
    if not projects:
        console.print("[yellow]No projects found[/yellow]")
        return

    header = Text()
    header.append("📁 Projects ", style="bold cyan")
    header.append(f"({len(projects)})", style="dim")
    console.print(header)
    console.print()
    for project in projects:
        format_project_item(project, compact, indent="  ")


def format_project_item(project: dict, compact: bool = False, indent: str = "") -> None:
    """Format a single project item."""
    icon = PROJECT_STATUS_ICONS.get(project.get("status", ""), "📁")
    line = Text()
    line.append(f"{indent}{icon} ")
    line.append(project.get("title", "Untitled"), style="bold")
    line.append(f"  #{shorten_uuid(project.get('id', ''))}", style="dim")
    console.print(line)
    if compact:
        return

    pct = project.get("progress", 0)
    meta = [
        (f"{get_progress_bar(pct)} {pct}% complete", get_completion_color(pct)),
        ("★" * project.get("importance", 3), "yellow"),
    ]
    if project.get("deadline"):
        meta.append((f"Due: {format_day(project['deadline'])}", "cyan"))
    for text, style in meta:
        meta_line = Text(f"{indent}   └─ ", style="dim")
        meta_line.append(text, style=style)
        console.print(meta_line)


def format_quiet(data: Any) -> None:
    """Format output in quiet mode (IDs only)."""
    if isinstance(data, dict):
        items = _collection(data)
        if items is None:
            if "id" in data:
                print(data["id"])
            return
        data = items
    for item in data or []:
        if isinstance(item, dict) and "id" in item:
            print(item["id"])


# ============================================================================
# Helper Functions
# ============================================================================


def format_day(value: Any) -> str:
    """Format a day as ``YYYY-MM-DD Mon``."""
    if isinstance(value, str):
        try:
            value = date.fromisoformat(value)
        except ValueError:
            return value
    if isinstance(value, date):
        return value.strftime("%Y-%m-%d %a")
    return str(value)


def is_overdue(task: dict) -> bool:
    day = task.get("date")
    if isinstance(day, str):
        try:
            day = date.fromisoformat(day)
        except ValueError:
            return False
    return isinstance(day, date) and not task.get("completed") and day < date.today()


def get_progress_bar(percentage: float) -> str:
    """Get a progress bar representation."""
    filled = int(percentage / 10)
    empty = 10 - filled
    return "▓" * filled + "░" * empty


def get_completion_color(percentage: float) -> str:
    """Get color based on completion percentage."""
    if percentage >= 80:
        return "green"
    if percentage >= 40:
        return "yellow"
    return "red"
