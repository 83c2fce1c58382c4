"""Daily note commands."""

from typing import Annotated

import typer

from gtd_vault.services.context_manager import get_vault_context
from gtd_vault.utils import dates
from gtd_vault.utils.typer_helpers import SuggestingGroup
from gtd_vault.utils.ui.formatters import format_info, format_success

from .decorators import command_wrapper

app = typer.Typer(cls=SuggestingGroup, help="Daily note commands")


@app.command("insert")
@command_wrapper
async def insert_completed(
    date: Annotated[
        str | None, typer.Option("--date", "-d", help="Day of the note (default: today)")
    ] = None,
) -> None:
    """List the day's completed tasks in its daily note."""
    ctx = get_vault_context()
    today = ctx.daily_note_service.clock()
    day = dates.parse_day(date, today) if date else today
    tasks = await ctx.daily_note_service.insert_completed_tasks(day)
    if not tasks:
        format_info(f"No tasks completed on {dates.format_date(day)}")
        return
    format_success(
        f"Added {len(tasks)} completed task(s) to {ctx.daily_note_service.note_path(day)}"
    )
