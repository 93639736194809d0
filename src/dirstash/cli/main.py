"""Main CLI for dirstash."""

import typer

from dirstash import __version__
from dirstash.cli import collections, config, items
from dirstash.core.exceptions import ConfigError
from dirstash.core.logging import get_console, setup_logging

app = typer.Typer(
    name="dirstash",
    help="dirstash - browse a directory of listing items.",
    no_args_is_help=True,
)
console = get_console()

app.add_typer(items.app, name="items")
app.add_typer(collections.app, name="collections")
app.add_typer(config.app, name="config")


@app.callback(invoke_without_command=True)
def main(
    ctx: typer.Context,
    version: bool = typer.Option(False, "--version", "-v", help="Show version and exit."),
) -> None:
    """dirstash - browse a directory of listing items."""
    if version:
        console.print(f"dirstash {__version__}")
        raise typer.Exit()

    try:
        setup_logging()
    except ConfigError as e:
        # config commands must still run so a broken file can be replaced
        if ctx.invoked_subcommand != "config":
            console.print(f"[red]{e}[/red]")
            console.print("[dim]Fix it or run 'dirstash config init --force'.[/dim]")
            raise typer.Exit(1) from None

    if ctx.invoked_subcommand is None:
        console.print(ctx.get_help(), markup=False)
        raise typer.Exit()


if __name__ == "__main__":
    app()
