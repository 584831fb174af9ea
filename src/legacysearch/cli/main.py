"""LegacySearch CLI - Main entry point."""

from typing import Annotated

import typer

import legacysearch
from legacysearch.cli.context import (
    CLIContext,
    configure_logging,
    get_database_url,
    get_index_url,
)

# Create main Typer app
app = typer.Typer(
    name="legacysearch",
    help="LegacySearch CLI - a record store and a search index kept in sync",
    no_args_is_help=True,
)


@app.callback()
def main_callback(
    ctx: typer.Context,
    database: Annotated[
        str | None,
        typer.Option(
            "--database",
            "-d",
            envvar="LEGACYSEARCH_URL",
            help="Record store URL (PostgreSQL or SQLite)",
        ),
    ] = None,
    index_database: Annotated[
        str | None,
        typer.Option(
            "--index-database",
            "-i",
            envvar="LEGACYSEARCH_INDEX_URL",
            help="Search index URL (defaults to the record store URL)",
        ),
    ] = None,
    echo: Annotated[
        bool,
        typer.Option(
            "--echo",
            "-e",
            help="Echo SQL statements to console",
        ),
    ] = False,
    json_output: Annotated[
        bool,
        typer.Option(
            "--json",
            "-j",
            help="Output as JSON (machine-readable)",
        ),
    ] = False,
    verbose: Annotated[
        bool,
        typer.Option(
            "--verbose",
            "-v",
            help="Log debug messages to stderr",
        ),
    ] = False,
) -> None:
    """Initialize CLI context with global options."""
    configure_logging(verbose)

    database_url = get_database_url(database)
    cli_ctx = CLIContext(
        database_url=database_url,
        index_url=get_index_url(index_database, database_url),
        echo=echo,
        json_output=json_output,
    )

    # Store in Typer context for command access
    ctx.obj = cli_ctx
    ctx.call_on_close(cli_ctx.close)


@app.command()
def version() -> None:
    """Show version information."""
    typer.echo(f"LegacySearch v{legacysearch.__version__}")


# Register commands
from legacysearch.cli.commands import persons, search

app.command(name="init")(persons.init_command)
app.command(name="get")(persons.get_command)
app.command(name="upsert")(persons.upsert_command)
app.command(name="delete")(persons.delete_command)
app.command(name="search")(search.search_command)
app.command(name="advanced-search")(search.advanced_search_command)
app.add_typer(search.index_app, name="index")


def main() -> None:
    """Main entry point for the CLI."""
    app()


if __name__ == "__main__":
    main()
