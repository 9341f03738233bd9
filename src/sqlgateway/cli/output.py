"""Output formatting for CLI commands."""

import json
from typing import Any

from rich.console import Console
from rich.panel import Panel
from rich.syntax import Syntax
from rich.table import Table

from sqlgateway.core.types import QueryResult, TableSchema
from sqlgateway.exceptions import SQLGatewayError

console = Console()


def _cell(value: Any) -> str:
    return "NULL" if value is None else str(value)


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
                table.add_row(*[_cell(row.get(col)) for col in columns])
            console.print(table)

    def print_table_schema(self, schema: TableSchema) -> None:
        """Print the columns of one table.

        Args:
            schema: Live table schema
        """
        if self.json_mode:
            print(json.dumps(schema.model_dump(), default=str, indent=2))
            return

        console.print(f"\n[bold]Table:[/bold] {schema.name}")
        columns_table = Table(show_header=True, header_style="bold cyan")
        columns_table.add_column("Column")
        columns_table.add_column("Type")
        columns_table.add_column("Length")
        columns_table.add_column("Nullable")
        columns_table.add_column("Default")

        for name, meta in schema.columns.items():
            columns_table.add_row(
                name,
                meta.data_type,
                str(meta.max_length) if meta.max_length is not None else "",
                "✓" if meta.nullable else "",
                meta.default or "",
            )
        console.print(columns_table)

    def print_result(self, result: QueryResult) -> None:
        """Print a gateway result: rows, generated SQL, statements, warnings.

        Args:
            result: Result of a gateway operation
        """
        if self.json_mode:
            print(result.model_dump_json(indent=2))
            return

        if not result.ok:
            panel = Panel(
                result.message,
                title=f"[red]{result.status.value} ({result.code})[/red]",
                border_style="red",
            )
            console.print(panel)
            if result.sql:
                console.print(Syntax(result.sql, "sql", word_wrap=True))
            return

        if result.generated_sql and result.rows is None and result.rows_affected is None:
            console.print(Syntax(result.generated_sql, "sql", word_wrap=True))
        elif result.rows:
            self.print_table(
                f"{len(result.rows)} row(s)",
                result.rows,  # type: ignore[arg-type]
                result.columns or [],
            )

        console.print(f"✓ {result.message}", style="green")

        if result.statements:
            console.print("\nStatements:", style="bold")
            for statement in result.statements:
                console.print(f"  {statement}", style="dim")

        if result.sql and result.query_type is not None and not result.statements:
            console.print(f"⏱️  {result.execution_time_ms:.2f}ms", style="dim")

        if result.warnings:
            console.print("\n⚠️  Warnings:")
            for warning in result.warnings:
                console.print(f"  • {warning}")

    def print_success(self, message: str, details: dict[str, Any] | None = None) -> None:
        """Print a one-line confirmation with optional key/value details."""
        details = details or {}
        if self.json_mode:
            output = {"success": True, "message": message, **details}
            print(json.dumps(output, default=str, indent=2))
            return

        console.print(f"✓ {message}", style="green")
        for key, value in details.items():
            console.print(f"  {key}: {value}", style="dim")

    def print_error(self, error: Exception) -> None:
        """Print an exception raised outside the result pipeline.

        Gateway errors show their class name and context; anything else
        (bad arguments, unreadable files) shows its message only.
        """
        if self.json_mode:
            if isinstance(error, SQLGatewayError):
                payload = error.to_dict()
            else:
                payload = {"error": str(error)}
            print(json.dumps(payload, default=str, indent=2))
            return

        body = str(error)
        title = "Error"
        if isinstance(error, SQLGatewayError):
            title = type(error).__name__
            if error.context:
                body += "\n\n" + "\n".join(f"{k}: {v}" for k, v in error.context.items())
        console.print(Panel(body, title=f"[red]{title}[/red]", border_style="red"))

    def print_data(self, data: Any) -> None:
        """Print a plain dict or list as JSON (highlighted in rich mode)."""
        if self.json_mode:
            print(json.dumps(data, default=str, indent=2))
        else:
            console.print_json(json.dumps(data, default=str))
