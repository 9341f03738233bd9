"""Schema management commands."""

from typing import Annotated, Any

import typer

from sqlgateway.cli.context import CLIContext
from sqlgateway.cli.output import OutputFormatter
from sqlgateway.cli.parsing import parse_column_spec, read_json_file
from sqlgateway.core.types import QueryResult

# Create schema subcommand group
app = typer.Typer(help="Inspect and change tables")

ColumnsOption = Annotated[
    list[str] | None,
    typer.Option(
        "--column",
        "-c",
        help="Column spec: name:type[:length][:pk][:notnull]. Can be repeated.",
    ),
]
FromFileOption = Annotated[
    str | None,
    typer.Option("--from-file", help="Load the table definition from a JSON file"),
]


def _definition(name: str, columns: list[str] | None, from_file: str | None) -> dict[str, Any]:
    if from_file:
        data = read_json_file(from_file)
        return {"table_name": data.get("table_name", name), "columns": data.get("columns", [])}
    return {"table_name": name, "columns": [parse_column_spec(spec) for spec in columns or []]}


def _finish(formatter: OutputFormatter, result: QueryResult) -> None:
    formatter.print_result(result)
    if not result.ok:
        raise typer.Exit(code=1)


@app.command("list")
def schema_list(ctx: typer.Context) -> None:
    """List all tables in the database."""
    cli_ctx: CLIContext = ctx.obj
    formatter = OutputFormatter(cli_ctx.json_output)

    try:
        gateway = cli_ctx.get_gateway()
        tables = gateway.list_tables()

        if cli_ctx.json_output:
            formatter.print_data(tables)
        else:
            schemas = gateway.describe(tables)
            table_data = [
                {"Name": name, "Columns": len(schema["columns"])}
                for name, schema in schemas.items()
            ]
            formatter.print_table(
                f"Tables ({len(tables)} total)",
                table_data,
                ["Name", "Columns"],
            )
    except Exception as e:
        formatter.print_error(e)
        raise typer.Exit(code=1)
    finally:
        cli_ctx.close()


@app.command("describe")
def schema_describe(
    ctx: typer.Context,
    table_name: Annotated[str, typer.Argument(help="Table name")],
) -> None:
    """Show the live columns of a table."""
    cli_ctx: CLIContext = ctx.obj
    formatter = OutputFormatter(cli_ctx.json_output)

    try:
        schema = cli_ctx.get_gateway().describe_table(table_name)
        formatter.print_table_schema(schema)
    except Exception as e:
        formatter.print_error(e)
        raise typer.Exit(code=1)
    finally:
        cli_ctx.close()


@app.command("create")
def schema_create(
    ctx: typer.Context,
    name: Annotated[str, typer.Argument(help="Table name")],
    columns: ColumnsOption = None,
    from_file: FromFileOption = None,
) -> None:
    """Create a table.

    Examples:

        # Inline columns
        sqlgateway schema create users -c "id:integer:pk:notnull" -c "name:varchar:100"

        # From JSON file ({"table_name": ..., "columns": [...]})
        sqlgateway schema create users --from-file users.json
    """
    cli_ctx: CLIContext = ctx.obj
    formatter = OutputFormatter(cli_ctx.json_output)

    try:
        result = cli_ctx.get_gateway().create_table(_definition(name, columns, from_file))
    except Exception as e:
        formatter.print_error(e)
        raise typer.Exit(code=1)
    finally:
        cli_ctx.close()

    _finish(formatter, result)


@app.command("update")
def schema_update(
    ctx: typer.Context,
    name: Annotated[str, typer.Argument(help="Table name")],
    columns: ColumnsOption = None,
    from_file: FromFileOption = None,
) -> None:
    """Make a table's columns match the given set.

    Columns not listed are dropped, new ones are added and changed types are
    altered. Statements run one at a time; if one fails, earlier ones stay applied.

    Examples:

        sqlgateway schema update users -c "id:integer:pk:notnull" -c "name:varchar:100" \\
            -c "email:varchar:255"
    """
    cli_ctx: CLIContext = ctx.obj
    formatter = OutputFormatter(cli_ctx.json_output)

    try:
        result = cli_ctx.get_gateway().update_table(_definition(name, columns, from_file))
    except Exception as e:
        formatter.print_error(e)
        raise typer.Exit(code=1)
    finally:
        cli_ctx.close()

    _finish(formatter, result)


@app.command("drop")
def schema_drop(
    ctx: typer.Context,
    name: Annotated[str, typer.Argument(help="Table name")],
    force: Annotated[
        bool,
        typer.Option("--force", help="Skip confirmation prompt"),
    ] = False,
) -> None:
    """Drop a table if it exists.

    Examples:

        sqlgateway schema drop users --force
    """
    cli_ctx: CLIContext = ctx.obj
    formatter = OutputFormatter(cli_ctx.json_output)

    if not force and not cli_ctx.json_output:
        typer.confirm(f"Drop table '{name}' and all its rows?", abort=True)

    try:
        result = cli_ctx.get_gateway().drop_table(name)
    except Exception as e:
        formatter.print_error(e)
        raise typer.Exit(code=1)
    finally:
        cli_ctx.close()

    _finish(formatter, result)
