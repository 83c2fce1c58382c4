"""Main entry point for GTD Vault."""

from typing import Annotated

import typer

from gtd_vault import __version__
from gtd_vault.commands import config, daily, projects, review, tasks, templates
from gtd_vault.services.context_manager import set_vault_override
from gtd_vault.utils.typer_helpers import SuggestingGroup
from gtd_vault.utils.ui.console import get_console

# Create main app with custom group class
app = typer.Typer(
    name="gtd",
    cls=SuggestingGroup,
    help="Getting Things Done with plain markdown files",
    no_args_is_help=True,
)

console = get_console()

# Task commands live at the top level: gtd add, gtd list, gtd done ...
app.registered_commands.extend(tasks.app.registered_commands)

# Add subcommands
app.add_typer(projects.app, name="project", help="Project management commands")
app.add_typer(review.app, name="review", help="Weekly review commands")
app.add_typer(daily.app, name="daily", help="Daily note commands")
app.add_typer(templates.app, name="template", help="Template commands")
app.add_typer(config.app, name="config", help="Configuration management")


@app.callback()
def main_callback(
    vault: Annotated[
        str | None,
        typer.Option(
            "--vault",
            envvar="GTD_VAULT",
            help="Vault folder to use instead of the configured one",
        ),
    ] = None,
) -> None:
    """Getting Things Done with plain markdown files."""
    set_vault_override(vault)


@app.command()
def version() -> None:
    """Show version information."""
    console.print(f"[bold]GTD Vault[/bold] version [cyan]{__version__}[/cyan]")


# Main entry point
def main():
    """Main entry point."""
    app()


if __name__ == "__main__":
    main()
