"""Data commands."""

import json
from typing import Annotated

import typer

from sqlgateway.cli.context import CLIContext
from sqlgateway.cli.output import OutputFormatter
from sqlgateway.cli.parsing import read_records

# Create data subcommand group
app = typer.Typer(help="Insert rows into tables")


@app.command("insert")
def data_insert(
    ctx: typer.Context,
    table_name: Annotated[str, typer.Argument(help="Table name")],
    data_json: Annotated[
        str | None,
        typer.Argument(help="Row as a JSON object, or rows as a JSON array"),
    ] = None,
    from_file: Annotated[
        str | None,
        typer.Option("--from-file", "-f", help="Load rows from a JSON or JSONL file"),
    ] = None,
) -> None:
    """Insert rows in one transaction.

    Every row must list the same columns in the same order.

    Examples:

        # Inline JSON (single row)
        sqlgateway data insert users '{"id": 1, "name": "Alice"}'

        # Inline JSON (several rows)
        sqlgateway data insert users '[{"id": 1, "name": "Alice"}, {"id": 2, "name": "Bob"}]'

        # From JSONL file (one row per line)
        sqlgateway data insert users --from-file users.jsonl
    """
    cli_ctx: CLIContext = ctx.obj
    formatter = OutputFormatter(cli_ctx.json_output)

    try:
        if from_file:
            records = read_records(from_file)
        elif data_json:
            parsed = json.loads(data_json)
            records = [parsed] if isinstance(parsed, dict) else parsed
        else:
            raise typer.BadParameter("Either provide JSON data or use --from-file")

        result = cli_ctx.get_gateway().insert_rows(table_name, records)
    except typer.BadParameter:
        raise
    except Exception as e:
        formatter.print_error(e)
        raise typer.Exit(code=1)
    finally:
        cli_ctx.close()

    formatter.print_result(result)
    if not result.ok:
        raise typer.Exit(code=1)
