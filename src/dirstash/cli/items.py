"""Item commands for dirstash CLI."""

import json
from typing import Annotated

import typer
from rich.console import Console
from rich.table import Table

from dirstash.content.service import ContentService
from dirstash.core.config import Config
from dirstash.core.exceptions import ConfigError, InvalidInputError, InvalidPathError, ParseError
from dirstash.core.logging import get_logger
from dirstash.models.item import FetchOptions, Item, ItemListing

logger = get_logger("cli.items")

app = typer.Typer(help="Browse items in the content directory.")
console = Console()

ContentOption = Annotated[
    str | None, typer.Option("--content", "-c", help="Content root (overrides config)")
]
LangOption = Annotated[str | None, typer.Option("--lang", "-l", help="Locale code")]


def get_service(content: str | None = None) -> ContentService:
    """Build a service from the saved config, optionally on another root."""
    try:
        config = Config.load()
    except ConfigError as e:
        raise _fail(str(e)) from None
    return ContentService(config, content_path=content)


def _fail(message: str) -> typer.Exit:
    console.print(f"[red]{message}[/red]")
    return typer.Exit(1)


def _labels(item: Item, field: str) -> str:
    refs = getattr(item, field)
    return ", ".join(ref.label for ref in refs) or "-"


def _render_listing(listing: ItemListing) -> None:
    table = Table(show_header=True, header_style="bold")
    table.add_column("Slug", style="dim")
    table.add_column("Name")
    table.add_column("Category")
    table.add_column("Tags")
    table.add_column("Updated")

    for item in listing.items:
        name = f"★ {item.name}" if item.featured else item.name
        table.add_row(
            item.slug,
            name,
            _labels(item, "category"),
            _labels(item, "tags"),
            item.updated.strftime("%Y-%m-%d %H:%M"),
        )

    console.print(table)
    console.print(f"[dim]{len(listing.items)} items[/dim]")


@app.command("list")
def list_items(
    category: Annotated[
        str | None, typer.Option("--category", help="Filter by category id")
    ] = None,
    tag: Annotated[str | None, typer.Option("--tag", "-t", help="Filter by tag id")] = None,
    lang: LangOption = None,
    sort_tags: Annotated[bool, typer.Option("--sort-tags", help="Sort tags by name")] = False,
    content: ContentOption = None,
) -> None:
    """List items, featured first then most recently updated."""
    service = get_service(content)
    options = FetchOptions(lang=lang, sort_tags=sort_tags)

    try:
        if category and tag:
            listing = service.fetch_by_category_and_tag(category, tag, options)
        elif category:
            listing = service.fetch_by_category(category, options)
        elif tag:
            listing = service.fetch_by_tag(tag, options)
        else:
            listing = service.fetch_items(options)
    except (InvalidInputError, InvalidPathError, ParseError) as e:
        raise _fail(str(e)) from None

    if not listing.items:
        console.print("[dim]No items found.[/dim]")
        return

    _render_listing(listing)


@app.command("show")
def show_item(
    slug: Annotated[str, typer.Argument(help="Item slug")],
    lang: LangOption = None,
    content: ContentOption = None,
) -> None:
    """Show details of a specific item."""
    service = get_service(content)

    try:
        result = service.fetch_item(slug, FetchOptions(lang=lang))
    except (InvalidInputError, InvalidPathError, ParseError) as e:
        raise _fail(str(e)) from None

    if result is None:
        raise _fail(f"Item {slug} not found.")

    item = result.meta
    console.print(f"[bold]Slug:[/bold] {item.slug}")
    console.print(f"[bold]Name:[/bold] {item.name}")
    if item.description:
        console.print(f"[bold]Description:[/bold] {item.description}")
    console.print(f"[bold]URL:[/bold] {item.source_url}")
    console.print(f"[bold]Category:[/bold] {_labels(item, 'category')}")
    console.print(f"[bold]Tags:[/bold] {_labels(item, 'tags')}")
    console.print(f"[bold]Updated:[/bold] {item.updated_at}")
    if item.featured:
        console.print("[bold]Featured:[/bold] yes")
    if item.promo_code:
        console.print(f"[bold]Promo code:[/bold] {item.promo_code.code}")

    if result.content:
        console.print()
        console.print("[bold]Content:[/bold]")
        console.print(result.content, markup=False)


@app.command("similar")
def similar_items(
    slug: Annotated[str, typer.Argument(help="Item slug")],
    limit: Annotated[int, typer.Option("--limit", "-n", help="Maximum results")] = 6,
    lang: LangOption = None,
    content: ContentOption = None,
) -> None:
    """Show items related to an item by shared tags and categories."""
    service = get_service(content)
    options = FetchOptions(lang=lang)

    try:
        result = service.fetch_item(slug, options)
        if result is None:
            raise _fail(f"Item {slug} not found.")
        similar = service.fetch_similar_items(result.meta, limit, options)
    except (InvalidInputError, InvalidPathError, ParseError) as e:
        raise _fail(str(e)) from None

    if not similar:
        console.print(f"[dim]No items similar to '{slug}'.[/dim]")
        return

    table = Table(show_header=True, header_style="bold")
    table.add_column("Slug", style="dim")
    table.add_column("Name")
    table.add_column("Score", justify="right")
    table.add_column("Common tags", justify="right")
    table.add_column("Common categories", justify="right")

    for entry in similar:
        table.add_row(
            entry.item.slug,
            entry.item.name,
            f"{entry.similarity_percentage}%",
            str(entry.common_tags),
            str(entry.common_categories),
        )

    console.print(table)


@app.command("export")
def export_items(
    output: Annotated[
        str, typer.Option("--output", "-o", help="Output file path")
    ] = "dirstash-export.json",
    lang: LangOption = None,
    content: ContentOption = None,
) -> None:
    """Export the item listing to JSON."""
    service = get_service(content)

    try:
        listing = service.fetch_items(FetchOptions(lang=lang))
    except (InvalidInputError, InvalidPathError, ParseError) as e:
        raise _fail(str(e)) from None

    with open(output, "w") as f:
        json.dump(listing.model_dump(mode="json"), f, indent=2, default=str)

    logger.info(f"Exported {listing.total} items to {output}")
    console.print(f"[green]Exported {listing.total} items to {output}[/green]")
