"""Query execution commands."""

from typing import Annotated

import typer

from sqlgateway.cli.context import CLIContext
from sqlgateway.cli.output import OutputFormatter
from sqlgateway.cli.parsing import read_text
from sqlgateway.core.types import QueryResult

# Create query subcommand group
app = typer.Typer(help="Execute SQL or natural-language queries")


def _sql_argument(sql: str | None, from_file: str | None) -> str:
    if from_file:
        return read_text(from_file)
    if sql:
        return sql
    raise typer.BadParameter("Either provide SQL or use --file")


def _finish(formatter: OutputFormatter, result: QueryResult) -> None:
    formatter.print_result(result)
    if not result.ok:
        raise typer.Exit(code=1)


@app.command("run")
def query_run(
    ctx: typer.Context,
    sql: Annotated[
        str | None,
        typer.Argument(help="SQL query to execute"),
    ] = None,
    from_file: Annotated[
        str | None,
        typer.Option("--file", "-f", help="Load SQL from file"),
    ] = None,
) -> None:
    """Execute SQL after the safety gate.

    Examples:

        sqlgateway query run "SELECT name FROM users"
        sqlgateway query run --file report.sql
    """
    cli_ctx: CLIContext = ctx.obj
    formatter = OutputFormatter(cli_ctx.json_output)

    try:
        sql_content = _sql_argument(sql, from_file)
        result = cli_ctx.get_gateway().execute_sql(sql_content)
    except typer.BadParameter:
        raise
    except Exception as e:
        formatter.print_error(e)
        raise typer.Exit(code=1)
    finally:
        cli_ctx.close()

    _finish(formatter, result)


@app.command("generate")
def query_generate(
    ctx: typer.Context,
    request: Annotated[str, typer.Argument(help="What you want, in plain language")],
    tables: Annotated[
        list[str] | None,
        typer.Option("--table", "-t", help="Table to describe to the model. Can be repeated."),
    ] = None,
) -> None:
    """Generate SQL from plain language without running it.

    Examples:

        sqlgateway query generate "total revenue per customer"
        sqlgateway query generate "list overdue orders" --table orders
    """
    cli_ctx: CLIContext = ctx.obj
    formatter = OutputFormatter(cli_ctx.json_output)

    try:
        result = cli_ctx.get_gateway().generate_sql(request, tables or None)
    except Exception as e:
        formatter.print_error(e)
        raise typer.Exit(code=1)
    finally:
        cli_ctx.close()

    _finish(formatter, result)


@app.command("ai")
def query_ai(
    ctx: typer.Context,
    request: Annotated[str, typer.Argument(help="What you want, in plain language")],
    tables: Annotated[
        list[str] | None,
        typer.Option("--table", "-t", help="Table to describe to the model. Can be repeated."),
    ] = None,
) -> None:
    """Generate SQL from plain language and run it.

    Examples:

        sqlgateway query ai "count users"
    """
    cli_ctx: CLIContext = ctx.obj
    formatter = OutputFormatter(cli_ctx.json_output)

    try:
        result = cli_ctx.get_gateway().execute_natural_language(request, tables or None)
    except Exception as e:
        formatter.print_error(e)
        raise typer.Exit(code=1)
    finally:
        cli_ctx.close()

    _finish(formatter, result)


@app.command("exec-generated")
def query_exec_generated(
    ctx: typer.Context,
    sql: Annotated[
        str | None,
        typer.Argument(help="Reviewed SQL produced by 'query generate'"),
    ] = None,
    from_file: Annotated[
        str | None,
        typer.Option("--file", "-f", help="Load SQL from file"),
    ] = None,
) -> None:
    """Run SQL previously produced by 'query generate', after review.

    Examples:

        sqlgateway query exec-generated "SELECT customer_id, SUM(total) FROM orders GROUP BY 1"
    """
    cli_ctx: CLIContext = ctx.obj
    formatter = OutputFormatter(cli_ctx.json_output)

    try:
        sql_content = _sql_argument(sql, from_file)
        result = cli_ctx.get_gateway().execute_generated_sql(sql_content)
    except typer.BadParameter:
        raise
    except Exception as e:
        formatter.print_error(e)
        raise typer.Exit(code=1)
    finally:
        cli_ctx.close()

    _finish(formatter, result)
