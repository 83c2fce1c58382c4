"""Configuration management commands."""

from typing import Annotated

import typer

from gtd_vault.services.config_service import get_config_service
from gtd_vault.utils.typer_helpers import SuggestingGroup
from gtd_vault.utils.ui.console import get_console
from gtd_vault.utils.ui.formatters import format_info, format_output, format_success

from .decorators import command_wrapper

app = typer.Typer(cls=SuggestingGroup, help="Configuration management commands")
console = get_console()


@app.command("view")
@command_wrapper
def view_config(
    output: Annotated[str, typer.Option("--output", "-o", help="Output format")] = "table",
) -> None:
    """View current configuration."""
    config_service = get_config_service()
    format_output(config_service.config.model_dump(), output)
    console.print(f"[dim]{config_service.config_path}[/dim]")


@app.command("get")
@command_wrapper
def get_config(
    key: Annotated[str, typer.Argument(help="Configuration key (e.g., ui.task_sort_mode)")],
) -> None:
    """Get a configuration value."""
    console.print(get_config_service().get(key))


@app.command("set")
@command_wrapper
def set_config(
    key: Annotated[str, typer.Argument(help="Configuration key (e.g., ui.task_sort_mode)")],
    value: Annotated[str, typer.Argument(help="Configuration value")],
) -> None:
    """Set a configuration value."""
    parsed_value: str | int | bool = value
    if value.lower() in ("true", "false"):
        parsed_value = value.lower() == "true"
    elif value.isdigit():
        parsed_value = int(value)

    get_config_service().set(key, parsed_value)
    format_success(f"Configuration '{key}' set to '{parsed_value}'")


@app.command("reset")
@command_wrapper
def reset_config(
    yes: Annotated[bool, typer.Option("--yes", "-y", help="Skip confirmation")] = False,
) -> None:
    """Reset configuration to defaults."""
    if not yes and not typer.confirm("Reset all settings to defaults?"):
        format_info("Cancelled")
        raise typer.Exit(0)
    config = get_config_service().reset_config()
    format_success(f"Configuration reset; vault is {config.vault_path}")
