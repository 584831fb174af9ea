"""Output formatting for CLI commands."""

import json
from typing import Any

from rich.console import Console
from rich.panel import Panel
from rich.table import Table

from legacysearch.exceptions import LegacySearchError

console = Console()

PERSON_COLUMNS = ["reference", "name", "gender", "date_of_birth", "city", "country"]


def person_row(person: dict[str, Any]) -> dict[str, Any]:
    address = person.get("address") or {}
    return {
        "reference": person.get("reference"),
        "name": person.get("name"),
        "gender": person.get("gender"),
        "date_of_birth": person.get("date_of_birth"),
        "city": address.get("city"),
        "country": address.get("country"),
    }


class OutputFormatter:
    """Formats output for terminal or JSON mode."""

    def __init__(self, json_mode: bool = False) -> None:
        """Initialize formatter.

        Args:
            json_mode: If True, output JSON instead of Rich formatting
        """
        self.json_mode = json_mode

    def print_table(
        self,
        title: str,
        data: list[dict[str, Any]],
        columns: list[str],
    ) -> None:
        """Print data as Rich table or JSON array.

        Args:
            title: Table title
            data: List of row dictionaries
            columns: Column names to display
        """
        if self.json_mode:
            print(json.dumps(data, default=str, indent=2))
        else:
            table = Table(title=title, show_header=True, header_style="bold magenta")
            for col in columns:
                table.add_column(col)
            for row in data:
                table.add_row(*[str(row.get(col) or "") for col in columns])
            console.print(table)

    def print_person(self, person: dict[str, Any]) -> None:
        """Print one person.

        Args:
            person: Person dict in its wire shape (``PersonDocument``)
        """
        if self.json_mode:
            print(json.dumps(person, default=str, indent=2))
            return

        console.print(f"\n[bold]Person:[/bold] {person.get('name')}")
        console.print(f"Reference: {person.get('reference')}")
        console.print(f"Id: {person.get('id')}")
        if person.get("date_of_birth"):
            console.print(f"Born: {person['date_of_birth']}")
        if person.get("gender"):
            console.print(f"Gender: {person['gender']}")
        if person.get("children") is not None:
            console.print(f"Children: {person['children']}")
        address = person.get("address")
        if address:
            parts = [address.get("zipcode"), address.get("city"), address.get("country")]
            console.print(f"Address: {' '.join(p for p in parts if p)}")

    def print_search_response(self, payload: str, title: str) -> None:
        """Print a serialized search envelope.

        Args:
            payload: JSON envelope returned by a search
            title: Table title
        """
        if self.json_mode:
            print(payload)
            return

        response = json.loads(payload)
        hits = response["hits"]["hits"]
        rows = [person_row(hit["_source"]) for hit in hits]
        self.print_table(title, rows, PERSON_COLUMNS)
        console.print(
            f"[dim]{len(hits)} of {response['hits']['total']} matches "
            f"in {response['took']} ms[/dim]"
        )

    def print_success(self, message: str, details: dict[str, Any] | None = None) -> None:
        """Print success message.

        Args:
            message: Success message
            details: Optional details to display
        """
        if self.json_mode:
            output = {"success": True, "message": message}
            if details:
                output.update(details)
            print(json.dumps(output, default=str, indent=2))
        else:
            console.print(f"✓ {message}", style="green")
            if details:
                for key, value in details.items():
                    console.print(f"  {key}: {value}", style="dim")

    def print_error(self, error: Exception) -> None:
        """Print error message.

        Args:
            error: Exception to display
        """
        if self.json_mode:
            if isinstance(error, LegacySearchError):
                print(json.dumps(error.to_dict(), indent=2))
            else:
                print(json.dumps({"error": str(error)}, indent=2))
        else:
            error_text = str(error)
            if isinstance(error, LegacySearchError) and error.context:
                context_str = "\n".join(f"{k}: {v}" for k, v in error.context.items())
                error_text = f"{error_text}\n\n{context_str}"

            panel = Panel(
                error_text,
                title="[red]Error[/red]",
                border_style="red",
            )
            console.print(panel)

    def print_data(self, data: Any) -> None:
        """Print generic data (dict, list, etc.).

        Args:
            data: Data to print
        """
        if self.json_mode:
            print(json.dumps(data, default=str, indent=2))
        else:
            console.print_json(json.dumps(data, default=str))
