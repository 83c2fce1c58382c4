"""Template commands."""

from typing import Annotated

import typer

from gtd_vault.services.context_manager import get_vault_context
from gtd_vault.utils.typer_helpers import SuggestingGroup
from gtd_vault.utils.ui.console import get_console
from gtd_vault.utils.ui.formatters import format_info, format_success

from .decorators import command_wrapper

app = typer.Typer(cls=SuggestingGroup, help="Template commands")
console = get_console()

KIND_HELP = "task, project or review"


@app.command("init")
@command_wrapper
async def init_templates() -> None:
    """Create the missing template files."""
    created = await get_vault_context().template_service.initialize_templates()
    if not created:
        format_info("All templates already exist")
        return
    for path in created:
        format_success(f"Created {path}")


@app.command("reset")
@command_wrapper
async def reset_template(
    kind: Annotated[str, typer.Argument(help=KIND_HELP)],
    yes: Annotated[bool, typer.Option("--yes", "-y", help="Skip confirmation")] = False,
) -> None:
    """Overwrite a template with the default text."""
    service = get_vault_context().template_service
    path = service.template_path(kind)
    if not yes and not typer.confirm(f"Reset {path} to the default template?"):
        format_info("Cancelled")
        raise typer.Exit(0)
    await service.reset_template(kind)
    format_success(f"Reset {path}")


@app.command("show")
@command_wrapper
async def show_template(
    kind: Annotated[str, typer.Argument(help=KIND_HELP)],
) -> None:
    """Print a template, creating the default one if missing."""
    console.print(await get_vault_context().template_service.get_template(kind), markup=False)
