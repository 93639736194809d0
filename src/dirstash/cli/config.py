"""Config commands for dirstash CLI."""

from typing import Annotated

import typer
from pydantic import ValidationError
from rich.console import Console

from dirstash.core.config import Config, get_config_path, init_config
from dirstash.core.exceptions import ConfigError

app = typer.Typer(help="Manage configuration.")
console = Console()


def _load() -> Config:
    try:
        return Config.load()
    except ConfigError as e:
        console.print(f"[red]{e}[/red]")
        raise typer.Exit(1) from None


@app.command("show")
def show_config() -> None:
    """Show current configuration."""
    config_path = get_config_path()

    if not config_path.exists():
        console.print(f"[dim]No config file at {config_path}, using defaults.[/dim]")
        console.print("[dim]Run 'dirstash config init' to create one.[/dim]")
    else:
        console.print(f"[bold]Config file:[/bold] {config_path}")

    config = _load()
    console.print()

    for section, values in config.model_dump().items():
        console.print(f"[bold]\\[{section}][/bold]")
        for key, value in values.items():
            console.print(f"  {key} = {value}", markup=False)
        console.print()

    if not config.content_root.is_dir():
        console.print(f"[yellow]Content root does not exist: {config.content_root}[/yellow]")


@app.command("init")
def init_config_cmd(
    force: Annotated[bool, typer.Option("--force", "-f", help="Overwrite existing config")] = False,
) -> None:
    """Initialize configuration file with defaults."""
    config_path = get_config_path()

    if config_path.exists() and not force:
        console.print(f"[yellow]Config already exists at {config_path}[/yellow]")
        console.print("[dim]Use --force to overwrite.[/dim]")
        raise typer.Exit(1)

    init_config()
    console.print(f"[green]Created config at {config_path}[/green]")


@app.command("set")
def set_config(
    key: Annotated[str, typer.Argument(help="Config key (e.g., general.content_path)")],
    value: Annotated[str, typer.Argument(help="Value to set")],
) -> None:
    """Set a configuration value."""
    config = _load()

    parts = key.split(".")
    if len(parts) != 2:
        console.print("[red]Key must be in format 'section.key'[/red]")
        raise typer.Exit(1)

    section, setting = parts
    data = config.model_dump()

    if section not in data or setting not in data[section]:
        console.print(f"[red]Unknown config key: {key}[/red]")
        raise typer.Exit(1)

    data[section][setting] = value

    try:
        updated_config = Config(**data)
    except ValidationError as e:
        console.print(f"[red]Invalid value for {key}: {e.errors()[0]['msg']}[/red]")
        raise typer.Exit(1) from None

    updated_config.save()
    console.print(f"[green]Set {key} = {value}[/green]")
