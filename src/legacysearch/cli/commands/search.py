"""CLI commands for searching persons and inspecting the search index."""

import json
from typing import Annotated

import typer
from rich.console import Console

from legacysearch.cli.context import CLIContext
from legacysearch.cli.output import PERSON_COLUMNS, OutputFormatter, person_row

# Index subcommand group
index_app = typer.Typer(help="Search index inspection")

console = Console()

FromOption = Annotated[int, typer.Option("--from", help="Offset of the first hit")]
SizeOption = Annotated[int, typer.Option("--size", "-n", help="Page size")]


def _print_envelope(formatter: OutputFormatter, payload: str | None, title: str) -> None:
    if payload is None:
        formatter.print_error(RuntimeError("Search response could not be serialized"))
        raise typer.Exit(1)
    formatter.print_search_response(payload, title)


# Registered as standalone commands in main.py
def search_command(
    ctx: typer.Context,
    query: Annotated[str | None, typer.Argument(help="Free-text query")] = None,
    country: Annotated[
        str | None, typer.Option("--country", "-c", help="Exact country filter")
    ] = None,
    date_filter: Annotated[
        str | None, typer.Option("--date", help="Year of birth filter (YYYY)")
    ] = None,
    from_: FromOption = 0,
    size: SizeOption = 10,
) -> None:
    """Free-text search over names and addresses.

    Every word of the query must match. Without a query, all persons match.

    Examples:
        legacysearch search "joe paris"
        legacysearch search smith --country France --date 1970
        legacysearch --json search --from 20 --size 10
    """
    cli_ctx: CLIContext = ctx.obj
    formatter = OutputFormatter(cli_ctx.json_output)

    try:
        payload = cli_ctx.get_app().service.search(query, country, date_filter, from_, size)
    except Exception as e:
        formatter.print_error(e)
        raise typer.Exit(1)

    _print_envelope(formatter, payload, f"Search: {query or '*'}")


def advanced_search_command(
    ctx: typer.Context,
    name: Annotated[str | None, typer.Option("--name", help="Name contains")] = None,
    country: Annotated[str | None, typer.Option("--country", help="Country contains")] = None,
    city: Annotated[str | None, typer.Option("--city", help="City contains")] = None,
    from_: FromOption = 0,
    size: SizeOption = 10,
) -> None:
    """Structured search with case-insensitive substring filters.

    Examples:
        legacysearch advanced-search --name smith
        legacysearch advanced-search --country fra --city par --size 50
    """
    cli_ctx: CLIContext = ctx.obj
    formatter = OutputFormatter(cli_ctx.json_output)

    try:
        payload = cli_ctx.get_app().service.advanced_search(name, country, city, from_, size)
    except Exception as e:
        formatter.print_error(e)
        raise typer.Exit(1)

    filters = {k: v for k, v in {"name": name, "country": country, "city": city}.items() if v}
    _print_envelope(formatter, payload, f"Advanced search: {filters or 'all'}")


@index_app.command("status")
def index_status(
    ctx: typer.Context,
) -> None:
    """Show how many persons the search index holds.

    Examples:
        legacysearch index status
        legacysearch --json index status
    """
    cli_ctx: CLIContext = ctx.obj
    formatter = OutputFormatter(cli_ctx.json_output)

    try:
        app = cli_ctx.get_app()
        status = app.index_status()
        stored = app.count()
    except Exception as e:
        formatter.print_error(e)
        raise typer.Exit(1)

    if status is None:
        formatter.print_data({"enabled": False})
        return

    output = {
        "enabled": True,
        "doc_type": status.doc_type,
        "indexed": status.indexed,
        "stored": stored,
        "last_updated": status.last_updated,
    }
    if cli_ctx.json_output:
        print(json.dumps(output, default=str, indent=2))
    else:
        console.print(f"[green]✓[/green] Index: {status.doc_type}")
        console.print(f"  Indexed: {status.indexed}")
        console.print(f"  Stored: {stored}")
        console.print(f"  Last updated: {status.last_updated or 'never'}")
        if status.indexed != stored:
            console.print("[yellow]Index and record store are out of sync[/yellow]")


@index_app.command("search")
def index_search(
    ctx: typer.Context,
    query: Annotated[str, typer.Argument(help="Full-text query")],
    limit: Annotated[int, typer.Option("--limit", "-n", help="Maximum results")] = 10,
) -> None:
    """Ranked full-text search answered by the search index.

    Examples:
        legacysearch index search "smith lyon"
    """
    cli_ctx: CLIContext = ctx.obj
    formatter = OutputFormatter(cli_ctx.json_output)

    try:
        index = cli_ctx.get_app().index
        if index is None:
            raise RuntimeError("Search index is disabled")
        documents = index.search(query, limit=limit)
    except Exception as e:
        formatter.print_error(e)
        raise typer.Exit(1)

    if cli_ctx.json_output:
        print(json.dumps(documents, indent=2))
    else:
        formatter.print_table(
            f"Index search: {query}", [person_row(d) for d in documents], PERSON_COLUMNS
        )


__all__ = ["search_command", "advanced_search_command", "index_app"]
