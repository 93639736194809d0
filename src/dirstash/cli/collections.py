"""Category and tag commands for dirstash CLI."""

from enum import Enum
from typing import Annotated

import typer
from rich.console import Console
from rich.table import Table

from dirstash.cli.items import ContentOption, LangOption, get_service
from dirstash.core.exceptions import InvalidInputError, InvalidPathError, ParseError
from dirstash.models.item import FetchOptions

app = typer.Typer(help="Inspect categories and tags.")
console = Console()


class CollectionName(str, Enum):
    CATEGORIES = "categories"
    TAGS = "tags"


@app.command("list")
def list_collection(
    kind: Annotated[
        CollectionName, typer.Argument(help="Which collection to list")
    ],
    lang: LangOption = None,
    content: ContentOption = None,
) -> None:
    """List categories or tags with their item counts."""
    service = get_service(content)

    try:
        listing = service.fetch_items(FetchOptions(lang=lang, sort_tags=True))
    except (InvalidInputError, InvalidPathError, ParseError) as e:
        console.print(f"[red]{e}[/red]")
        raise typer.Exit(1) from None

    entries = listing.categories if kind is CollectionName.CATEGORIES else listing.tags
    if not entries:
        console.print(f"[dim]No {kind.value} found.[/dim]")
        return

    table = Table(show_header=True, header_style="bold")
    table.add_column("ID", style="dim")
    table.add_column("Name")
    table.add_column("Items", justify="right")

    for entry in entries:
        table.add_row(entry.id, entry.name, str(entry.count))

    console.print(table)
