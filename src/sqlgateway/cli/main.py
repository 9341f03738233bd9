"""SQLGateway CLI - Main entry point."""

from typing import Annotated

import typer

import sqlgateway
from sqlgateway.cli.context import CLIContext
from sqlgateway.cli.output import OutputFormatter

# Create main Typer app
app = typer.Typer(
    name="sqlgateway",
    help="SQLGateway CLI - run SQL or plain-language requests against your database",
    no_args_is_help=True,
)

# Store CLI context globally (will be set in callback)
state: dict[str, CLIContext] = {}


@app.callback()
def main_callback(
    ctx: typer.Context,
    database: Annotated[
        str | None,
        typer.Option(
            "--database",
            "-d",
            envvar="SQLGATEWAY_URL",
            help="Database URL (PostgreSQL or SQLite)",
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
    provider: Annotated[
        str | None,
        typer.Option(
            "--provider",
            "-p",
            envvar="SQLGATEWAY_PROVIDER",
            help="Generative provider for AI commands (gemini, openai)",
        ),
    ] = None,
) -> None:
    """Initialize CLI context with global options."""
    cli_ctx = CLIContext(
        database_url=database,
        echo=echo,
        json_output=json_output,
        provider=provider,
    )

    # Store in Typer context for command access
    ctx.obj = cli_ctx
    state["cli_ctx"] = cli_ctx


@app.command()
def version() -> None:
    """Show version information."""
    typer.echo(f"SQLGateway v{sqlgateway.__version__}")


@app.command()
def health(ctx: typer.Context) -> None:
    """Check database connectivity."""
    cli_ctx: CLIContext = ctx.obj
    formatter = OutputFormatter(cli_ctx.json_output)

    try:
        status = cli_ctx.get_gateway().health()
    except Exception as e:
        formatter.print_error(e)
        raise typer.Exit(code=1)
    finally:
        cli_ctx.close()

    if status["status"] != "ok":
        formatter.print_error(Exception(status["message"]))
        raise typer.Exit(code=1)
    formatter.print_success(
        status["message"],
        {"dialect": status["dialect"], "provider": status["provider"]},
    )


# Register command groups
from sqlgateway.cli.commands import data, query, schema

app.add_typer(query.app, name="query")
app.add_typer(schema.app, name="schema")
app.add_typer(data.app, name="data")


def main() -> None:
    """Main entry point for the CLI."""
    app()


if __name__ == "__main__":
    main()
