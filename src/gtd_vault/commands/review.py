"""Weekly review commands."""

from typing import Annotated

import typer

from gtd_vault.services.context_manager import get_vault_context
from gtd_vault.utils import dates
from gtd_vault.utils.typer_helpers import SuggestingGroup
from gtd_vault.utils.ui.console import get_console
from gtd_vault.utils.ui.formatters import format_info, format_output, format_success

from .decorators import command_wrapper

app = typer.Typer(cls=SuggestingGroup, help="Weekly review commands")
console = get_console()


@app.command("create")
@command_wrapper
async def create_review(
    date: Annotated[
        str | None, typer.Option("--date", "-d", help="Review date (default: today)")
    ] = None,
    reflections: Annotated[str, typer.Option("--reflections", help="Reflections")] = "",
    learnings: Annotated[str, typer.Option("--learnings", help="Learnings")] = "",
    goals: Annotated[str, typer.Option("--goals", help="Next week goals")] = "",
    notes: Annotated[str, typer.Option("--notes", help="Other notes")] = "",
) -> None:
    """Write this week's review note."""
    service = get_vault_context().review_service
    review = await service.create_weekly_review(
        dates.parse_day(date) if date else None,
        reflections=reflections,
        learnings=learnings,
        next_week_goals=goals,
        notes=notes,
    )
    format_success(f"Created {review.location}")
    console.print(
        f"  {review.completed_tasks_count} task(s) completed, "
        f"{review.active_projects_count} project(s) in progress"
    )


@app.command("list")
@command_wrapper
async def list_reviews(
    output: Annotated[str, typer.Option("--output", "-o", help="Output format")] = "table",
) -> None:
    """List weekly reviews, newest first."""
    reviews = await get_vault_context().review_service.list_reviews()
    if not reviews:
        format_info("No reviews yet")
        return
    format_output(
        [
            r.model_dump(
                mode="json", include={"date", "completed_tasks_count", "active_projects_count"}
            )
            for r in reviews
        ],
        output,
    )
