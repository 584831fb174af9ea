"""Person CRUD and bootstrap commands."""

from typing import Annotated

import typer

from legacysearch.cli.context import CLIContext
from legacysearch.cli.output import OutputFormatter
from legacysearch.cli.parsing import parse_json_object, read_json_file, read_jsonl_file
from legacysearch.core.types import PersonDocument


def init_command(
    ctx: typer.Context,
    count: Annotated[int, typer.Argument(help="Number of persons to generate")] = 1000,
) -> None:
    """Fill the record store and the index with synthetic persons.

    The first person always has reference "0" and is named Joe Smith.

    Examples:

        legacysearch init 1000
        legacysearch --database postgresql://localhost/people init 10000
    """
    cli_ctx: CLIContext = ctx.obj
    formatter = OutputFormatter(cli_ctx.json_output)

    try:
        app = cli_ctx.get_app()
        app.init(count)
        formatter.print_success(
            f"Initialized {count} persons",
            {"requested": count, "stored": app.count()},
        )
    except Exception as e:
        formatter.print_error(e)
        raise typer.Exit(1)


def get_command(
    ctx: typer.Context,
    reference: Annotated[str, typer.Argument(help="Person reference")],
) -> None:
    """Get a person by reference.

    Examples:

        legacysearch get 0
        legacysearch --json get 42
    """
    cli_ctx: CLIContext = ctx.obj
    formatter = OutputFormatter(cli_ctx.json_output)

    try:
        person = cli_ctx.get_app().get(reference)
    except Exception as e:
        formatter.print_error(e)
        raise typer.Exit(1)

    if person is None:
        formatter.print_error(LookupError(f"Person '{reference}' not found"))
        raise typer.Exit(1)
    formatter.print_person(person)


def upsert_command(
    ctx: typer.Context,
    reference: Annotated[
        str | None,
        typer.Argument(help="Person reference (omit with --batch)"),
    ] = None,
    data_json: Annotated[
        str | None,
        typer.Argument(help="Person data as JSON string"),
    ] = None,
    from_file: Annotated[
        str | None,
        typer.Option("--from-file", "-f", help="Load data from JSON/JSONL file"),
    ] = None,
    batch: Annotated[
        bool,
        typer.Option("--batch", help="Upsert every line of a JSONL file, keyed by its reference"),
    ] = False,
) -> None:
    """Create a person or merge fields into an existing one.

    Fields missing from the payload keep their stored value.

    Examples:

        # Inline JSON
        legacysearch upsert 42 '{"name": "Ada Martin", "address": {"city": "Lyon"}}'

        # From JSON file
        legacysearch upsert 42 --from-file person.json

        # Batch from JSONL, each line carrying its own "reference"
        legacysearch upsert --from-file persons.jsonl --batch
    """
    cli_ctx: CLIContext = ctx.obj
    formatter = OutputFormatter(cli_ctx.json_output)

    try:
        app = cli_ctx.get_app()

        if batch:
            if not from_file:
                raise ValueError("--batch requires --from-file")
            references = []
            for line_num, payload in enumerate(read_jsonl_file(from_file), 1):
                document = PersonDocument.from_payload(payload)
                if not document.reference:
                    raise ValueError(f"Line {line_num}: missing 'reference'")
                app.upsert(document.reference, document.to_person())
                references.append(document.reference)
            formatter.print_success(
                f"Upserted {len(references)} persons",
                {"count": len(references), "references": references[:5]},
            )
            return

        if reference is None:
            raise ValueError("Provide a reference, or use --from-file with --batch")
        if from_file:
            payload = read_json_file(from_file)
        elif data_json:
            payload = parse_json_object(data_json)
        else:
            raise ValueError("Provide person data as JSON or with --from-file")

        person = app.upsert(reference, PersonDocument.from_payload(payload).to_person())
        formatter.print_person(person)
    except Exception as e:
        formatter.print_error(e)
        raise typer.Exit(1)


def delete_command(
    ctx: typer.Context,
    reference: Annotated[str, typer.Argument(help="Person reference")],
) -> None:
    """Delete a person from the record store and the index.

    Examples:

        legacysearch delete 42
    """
    cli_ctx: CLIContext = ctx.obj
    formatter = OutputFormatter(cli_ctx.json_output)

    try:
        deleted = cli_ctx.get_app().delete(reference)
    except Exception as e:
        formatter.print_error(e)
        raise typer.Exit(1)

    if not deleted:
        formatter.print_error(LookupError(f"Person '{reference}' not found"))
        raise typer.Exit(1)
    formatter.print_success(f"Deleted person '{reference}'", {"reference": reference})


__all__ = ["init_command", "get_command", "upsert_command", "delete_command"]
